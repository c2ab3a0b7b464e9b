"""
Ingestion: external collaborators that feed the analysis.

Balance source (Alchemy JSON-RPC), lending source, price source (CoinGecko)
and the deterministic fallback generator used whenever a live source is
unavailable.
"""

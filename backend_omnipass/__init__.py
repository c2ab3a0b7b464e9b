"""
Backend OmniPass: cross-chain wallet reputation service.

Fetches native and token balances across supported EVM networks, values them
in USD, computes risk / activity / diversification scores, assigns an access
tier and attaches AI (or templated) commentary. Modular layout: ingestion,
analytics, ai_engine, api_server.
"""

__version__ = "0.1.0"

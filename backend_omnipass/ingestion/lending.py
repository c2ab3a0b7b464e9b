"""
Lending source: lending-market positions per chain.

Aave contract reads are not wired; positions are synthesized from the address
so demo analyses exercise the health-factor paths of the scorers.
"""

from __future__ import annotations

from backend_omnipass.analytics.models import ProtocolPosition
from backend_omnipass.ingestion.chains import get_chain
from backend_omnipass.ingestion.mock_data import mock_lending_position


class SyntheticLendingSource:
    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    async def get_positions(self, address: str, chain_id: int) -> list[ProtocolPosition]:
        if not self.enabled:
            return []
        return [mock_lending_position(address, get_chain(chain_id))]

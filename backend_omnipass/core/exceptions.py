"""
Application-level exceptions.

InvalidAddressError is the only one that reaches API callers (HTTP 400).
CollaboratorError is raised by the HTTP clients and always converted into a
fallback value by the owning service.
"""

from __future__ import annotations


class OmniPassError(Exception):
    """Base class for OmniPass errors."""


class InvalidAddressError(OmniPassError, ValueError):
    """Address is not 0x followed by 40 hex digits."""

    def __init__(self, address: object) -> None:
        self.address = address
        super().__init__("Invalid Ethereum address format")


class UnsupportedChainError(OmniPassError, ValueError):
    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        super().__init__(f"Unsupported chain id: {chain_id}")


class CollaboratorError(OmniPassError):
    """External collaborator (node provider, price API, generative API) failed or returned garbage."""

    def __init__(self, collaborator: str, message: str) -> None:
        self.collaborator = collaborator
        super().__init__(f"{collaborator}: {message}")


class MissingQuestionError(OmniPassError, ValueError):
    def __init__(self) -> None:
        super().__init__("Either questionId or customQuestion is required")

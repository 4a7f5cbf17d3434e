"""Token balance ledger, registry and factory."""
from __future__ import annotations

from .factory import Ledger, TokenFactory
from .token import FungibleToken

__all__ = ["FungibleToken", "Ledger", "TokenFactory"]

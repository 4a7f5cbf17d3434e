"""Giveaway state machine: offerings, deposits, finalize and Merkle claims."""
from __future__ import annotations

from .events import Event, EventLog
from .guard import ReentrancyGuard
from .service import BatchResult, GiveawayService, TokenInfo, claims_from_arrays

__all__ = [
    "Event",
    "EventLog",
    "ReentrancyGuard",
    "BatchResult",
    "GiveawayService",
    "TokenInfo",
    "claims_from_arrays",
]

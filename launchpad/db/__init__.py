"""Offering persistence: store protocol plus in-memory and SQLite backends."""
from __future__ import annotations

from .base import WORD_BITS, OfferingStore, bit_position
from .memory import MemoryOfferingStore
from .sqlite import SQLiteOfferingStore

__all__ = ["WORD_BITS", "OfferingStore", "bit_position", "MemoryOfferingStore", "SQLiteOfferingStore"]

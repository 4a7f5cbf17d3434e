"""Allocation math: the fair-allocation engine and basis-point breakdowns."""
from __future__ import annotations

from .breakdown import (Settlement, TokenBreakdown, platform_fee, settle, token_breakdown,
                        tokens_for_participants, validate_allocation)
from .engine import (REGIME_EMPTY, REGIME_OVER, REGIME_UNDER, Allocation, AllocationResult,
                     GlobalValues, allocate, allocate_one, compute_global_values)

__all__ = [
    "Settlement",
    "TokenBreakdown",
    "platform_fee",
    "settle",
    "token_breakdown",
    "tokens_for_participants",
    "validate_allocation",
    "REGIME_EMPTY",
    "REGIME_OVER",
    "REGIME_UNDER",
    "Allocation",
    "AllocationResult",
    "GlobalValues",
    "allocate",
    "allocate_one",
    "compute_global_values",
]

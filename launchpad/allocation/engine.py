"""
launchpad.allocation.engine — fair allocation of a capped offering
==================================================================

Pure, deterministic functions that turn a finalized snapshot of deposits into
per-participant `(tokens, refund)` pairs. Nothing here touches storage or the
ledger; the same code runs in the distribution generator and in any third
party's audit of a published distribution.

Regimes
-------
Under-subscribed (total_deposited <= max_allocation)
    tokens(p) = deposit(p) * T // total_deposited
    refund(p) = 0

Over-subscribed (total_deposited > max_allocation)
    avg = max_allocation // N                     (remainder is never credited)
    deposit(p) <  avg:
        tokens(p) = deposit(p) * T // max_allocation
        refund(p) = 0
        leftover += avg - deposit(p)
    deposit(p) >= avg:
        excess(p) = deposit(p) - avg
        tokens(p) = avg * T // max_allocation
                    + excess(p) * leftover * T // (total_excess * max_allocation)
        refund(p) = deposit(p) - tokens(p) * max_allocation // T

where T is the participant share of the sale (`tokens_for_participants`).

The aggregates (avg, leftover, excess, total) come from a single streaming
pass, `compute_global_values`, and are cached in the result so they can be
published next to the Merkle root.

Truncation order matters: multiplications happen before the single floor
division in each term, and the additional allocation is floored on its own.
Python ints are unbounded, so intermediate products never wrap.

A larger deposit never earns fewer tokens within one regime. A deposit that
tips the offering into over-subscription can: `avg` then caps the base share,
so e.g. 61 against cap 100 (others 20, 20) earns less than 60 did.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from launchpad.errors import AllocationError

REGIME_EMPTY = "empty"
REGIME_UNDER = "under_subscribed"
REGIME_OVER = "over_subscribed"


@dataclass(frozen=True)
class GlobalValues:
    participant_count: int
    total_deposited: int
    max_allocation: int
    avg_allocation: int
    total_leftover: int
    total_excess: int

    @property
    def oversubscribed(self) -> bool:
        return self.total_deposited > self.max_allocation

    @property
    def regime(self) -> str:
        if self.participant_count == 0:
            return REGIME_EMPTY
        return REGIME_OVER if self.oversubscribed else REGIME_UNDER

    @property
    def avg_remainder(self) -> int:
        """Units of the cap lost to `max_allocation // N`."""
        if self.participant_count == 0:
            return 0
        return self.max_allocation - self.avg_allocation * self.participant_count


@dataclass(frozen=True)
class Allocation:
    address: str
    deposit: int
    token_amount: int
    refund_amount: int

    def cost(self, max_allocation: int, tokens_for_participants: int) -> int:
        """Quote-token value of the allocated tokens at the nominal cap price."""
        return self.token_amount * max_allocation // tokens_for_participants


@dataclass(frozen=True)
class AllocationResult:
    aggregates: GlobalValues
    tokens_for_participants: int
    allocations: Tuple[Allocation, ...] = field(default_factory=tuple)

    @property
    def regime(self) -> str:
        return self.aggregates.regime

    @property
    def total_tokens(self) -> int:
        return sum(a.token_amount for a in self.allocations)

    @property
    def total_refunds(self) -> int:
        return sum(a.refund_amount for a in self.allocations)

    def summary(self) -> Dict[str, Any]:
        g = self.aggregates
        return {
            "regime": g.regime,
            "participantCount": g.participant_count,
            "totalDeposited": g.total_deposited,
            "maxAllocation": g.max_allocation,
            "avgAllocation": g.avg_allocation,
            "totalLeftover": g.total_leftover,
            "totalExcess": g.total_excess,
            "tokensForParticipants": self.tokens_for_participants,
            "totalTokens": self.total_tokens,
            "totalRefunds": self.total_refunds,
        }


def _check_inputs(max_allocation: int, tokens_for_participants: int) -> None:
    if max_allocation <= 0:
        raise AllocationError("max_allocation must be positive", details={"max_allocation": max_allocation})
    if tokens_for_participants <= 0:
        raise AllocationError(
            "tokens_for_participants must be positive",
            details={"tokens_for_participants": tokens_for_participants},
        )


def compute_global_values(deposits: Sequence[int], max_allocation: int) -> GlobalValues:
    """
    One pass over the deposit amounts. `avg` depends only on the cap and the
    participant count, so leftover and excess accumulate in the same loop.
    """
    if max_allocation <= 0:
        raise AllocationError("max_allocation must be positive", details={"max_allocation": max_allocation})
    n = len(deposits)
    avg = max_allocation // n if n else 0
    total = leftover = excess = 0
    for d in deposits:
        if d < 0:
            raise AllocationError("negative deposit", details={"deposit": d})
        total += d
        if d < avg:
            leftover += avg - d
        else:
            excess += d - avg
    return GlobalValues(
        participant_count=n,
        total_deposited=total,
        max_allocation=max_allocation,
        avg_allocation=avg,
        total_leftover=leftover,
        total_excess=excess,
    )


def allocate_one(deposit: int, gv: GlobalValues, tokens_for_participants: int) -> Tuple[int, int]:
    """Return `(tokens, refund)` for one deposit given the cached aggregates."""
    T = tokens_for_participants
    cap = gv.max_allocation

    if not gv.oversubscribed:
        if gv.total_deposited == 0:
            return 0, 0
        return deposit * T // gv.total_deposited, 0

    avg = gv.avg_allocation
    if deposit < avg:
        return deposit * T // cap, 0

    tokens = avg * T // cap
    # total_excess is positive whenever gv came from this deposit set.
    if gv.total_excess > 0:
        tokens += (deposit - avg) * gv.total_leftover * T // (gv.total_excess * cap)
    refund = deposit - tokens * cap // T
    if refund < 0:
        raise AllocationError(
            "negative refund",
            details={"deposit": deposit, "tokens": tokens, "max_allocation": cap},
        )
    return tokens, refund


def allocate(
    deposits: Iterable[Tuple[str, int]],
    max_allocation: int,
    tokens_for_participants: int,
) -> AllocationResult:
    """
    Allocate every `(address, deposit)` pair, preserving input order.

    An empty deposit set yields an empty result; the state machine never
    feeds one in, but off-chain callers may.
    """
    _check_inputs(max_allocation, tokens_for_participants)
    pairs: List[Tuple[str, int]] = [(a, int(d)) for a, d in deposits]
    gv = compute_global_values([d for _, d in pairs], max_allocation)
    out: List[Allocation] = []
    for addr, d in pairs:
        tokens, refund = allocate_one(d, gv, tokens_for_participants)
        out.append(Allocation(address=addr, deposit=d, token_amount=tokens, refund_amount=refund))
    return AllocationResult(aggregates=gv, tokens_for_participants=tokens_for_participants, allocations=tuple(out))


__all__ = [
    "REGIME_EMPTY",
    "REGIME_UNDER",
    "REGIME_OVER",
    "GlobalValues",
    "Allocation",
    "AllocationResult",
    "compute_global_values",
    "allocate_one",
    "allocate",
]

"""
launchpad.allocation.breakdown — split validation and finalize-time amounts

Deterministic basis-point arithmetic shared by the giveaway state machine,
the orchestrator and the off-chain tooling:

- validate_allocation(dev_bps, liq_bps)   policy floors/ceilings at creation
- token_breakdown(total, dev_bps, liq_bps) dev / liquidity / participant tokens
- platform_fee(amount, fee_bps)           fee skimmed from the final allocation
- settle(...)                             quote-token routing at finalize

All values are integer base units; every division truncates toward zero and
remainders are never redistributed.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from launchpad.config import BPS_DENOMINATOR, AllocationPolicy
from launchpad.errors import (CombinedAllocationTooHigh, LiquidityBelowMinimum,
                              NoParticipantShare, PercentageOutOfRange)


def _bps_of(amount: int, bps: int) -> int:
    return amount * bps // BPS_DENOMINATOR


def validate_allocation(dev_bps: int, liq_bps: int, policy: Optional[AllocationPolicy] = None) -> None:
    """Raise a distinct PolicyError for each violated rule."""
    pol = policy or AllocationPolicy()
    for name, v in (("dev_percentage", dev_bps), ("liquidity_percentage", liq_bps)):
        if not isinstance(v, int) or not (0 <= v <= BPS_DENOMINATOR):
            raise PercentageOutOfRange(
                f"{name} must be within [0, 10000] bps",
                details={"field": name, "value": v},
            )
    if liq_bps < pol.min_liquidity_bps:
        raise LiquidityBelowMinimum(
            "liquidity percentage below minimum",
            details={"liquidity_percentage": liq_bps, "minimum": pol.min_liquidity_bps},
        )
    if dev_bps + liq_bps > pol.max_combined_bps:
        raise CombinedAllocationTooHigh(
            "dev + liquidity percentage above maximum",
            details={"combined": dev_bps + liq_bps, "maximum": pol.max_combined_bps},
        )


def participant_percentage(dev_bps: int, liq_bps: int) -> int:
    return BPS_DENOMINATOR - dev_bps - liq_bps


@dataclass(frozen=True)
class TokenBreakdown:
    total: int
    dev: int
    liquidity: int
    participants: int
    dev_percentage: int
    liquidity_percentage: int

    @property
    def participant_percentage(self) -> int:
        return participant_percentage(self.dev_percentage, self.liquidity_percentage)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["participant_percentage"] = self.participant_percentage
        return d


def token_breakdown(total: int, dev_bps: int, liq_bps: int) -> TokenBreakdown:
    return TokenBreakdown(
        total=total,
        dev=_bps_of(total, dev_bps),
        liquidity=_bps_of(total, liq_bps),
        participants=_bps_of(total, participant_percentage(dev_bps, liq_bps)),
        dev_percentage=dev_bps,
        liquidity_percentage=liq_bps,
    )


def tokens_for_participants(total: int, dev_bps: int, liq_bps: int, *, require_positive: bool = False) -> int:
    tfp = _bps_of(total, participant_percentage(dev_bps, liq_bps))
    if require_positive and tfp <= 0:
        raise NoParticipantShare(
            "participant share rounds to zero tokens",
            details={"total": total, "dev_percentage": dev_bps, "liquidity_percentage": liq_bps},
        )
    return tfp


def platform_fee(amount: int, fee_bps: int) -> int:
    return _bps_of(amount, fee_bps)


@dataclass(frozen=True)
class Settlement:
    """
    Quote-token routing computed once at finalize.

      total_deposited = platform_fee + liquidity_quote + refund_pool

    In the over-subscribed regime `reserve` units of the final allocation are
    held back in the refund pool. Truncation in the token allocation can make
    each above-average refund exceed its exact value by up to 2*ceil(cap/T)+1
    units and the avg remainder adds fewer than N more; the reserve covers both.
    """
    total_deposited: int
    final_allocation: int
    platform_fee: int
    liquidity_quote: int
    refund_pool: int
    reserve: int
    oversubscribed: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def rounding_reserve(participant_count: int, max_allocation: int, tfp: int) -> int:
    if participant_count <= 0 or tfp <= 0:
        return 0
    ceil_unit = -(-max_allocation // tfp)
    return participant_count * (2 * ceil_unit + 2)


def settle(
    *,
    total_deposited: int,
    max_allocation: int,
    participant_count: int,
    tokens_for_participants: int,
    fee_bps: int,
) -> Settlement:
    final_allocation = min(total_deposited, max_allocation)
    fee = platform_fee(final_allocation, fee_bps)
    oversubscribed = total_deposited > max_allocation
    if oversubscribed:
        reserve = min(final_allocation - fee, rounding_reserve(participant_count, max_allocation, tokens_for_participants))
    else:
        reserve = 0
    liquidity_quote = final_allocation - fee - reserve
    refund_pool = total_deposited - fee - liquidity_quote
    return Settlement(
        total_deposited=total_deposited,
        final_allocation=final_allocation,
        platform_fee=fee,
        liquidity_quote=liquidity_quote,
        refund_pool=refund_pool,
        reserve=reserve,
        oversubscribed=oversubscribed,
    )


__all__ = [
    "validate_allocation",
    "participant_percentage",
    "TokenBreakdown",
    "token_breakdown",
    "tokens_for_participants",
    "platform_fee",
    "Settlement",
    "rounding_reserve",
    "settle",
]

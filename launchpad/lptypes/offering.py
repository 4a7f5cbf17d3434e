"""
Offering & participant records.

An Offering is one capped public distribution of a project token against
quote-token (USDC) deposits. It is created with the sale parameters, mutated
by deposits during the window, sealed by finalize and then only touched by
the claim path. Participant records are written once, on deposit.

All amounts are integer base units. Basis points use 10_000 = 100%.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .address import Address, normalize_address

BPS = 10_000


class OfferingStatus(str, Enum):
    CREATED = "created"              # before the deposit window
    ACTIVE = "active"                # within [start_time, end_time)
    ENDED = "ended"                  # window closed, awaiting finalize
    FINALIZED = "finalized"          # sealed; root not yet published
    CLAIMING_OPEN = "claiming_open"  # merkle root set; claims accepted
    CANCELLED = "cancelled"          # terminal


@dataclass
class Offering:
    offering_id: int
    owner: Address
    token: Address
    quote_token: Address
    start_time: int
    end_time: int
    max_allocation: int
    total_tokens_for_sale: int
    dev_percentage: int
    liquidity_percentage: int

    total_deposited: int = 0
    participant_count: int = 0

    finalized: bool = False
    cancelled: bool = False
    merkle_enabled: bool = False
    dev_tokens_allocated: bool = False
    liquidity_tokens_allocated: bool = False
    liquidity_deployed: bool = False

    dev_tokens_claimed: int = 0
    liquidity_tokens_claimed: int = 0

    # Set at finalize
    final_allocation: int = 0
    platform_fee: int = 0
    liquidity_quote: int = 0      # quote units routed to liquidity
    refund_pool: int = 0          # quote units held back for participant refunds
    finalized_at: Optional[int] = None
    position_ref: Optional[str] = None

    # Claim phase
    merkle_root: Optional[bytes] = None
    commitment: Optional[Dict[str, Any]] = None
    tokens_paid: int = 0
    refunds_paid: int = 0
    claims_count: int = 0

    created_at: int = 0

    # --- derived amounts ---

    @property
    def participant_percentage(self) -> int:
        return BPS - self.dev_percentage - self.liquidity_percentage

    @property
    def dev_tokens(self) -> int:
        return self.total_tokens_for_sale * self.dev_percentage // BPS

    @property
    def liquidity_tokens(self) -> int:
        return self.total_tokens_for_sale * self.liquidity_percentage // BPS

    @property
    def participant_tokens(self) -> int:
        return self.total_tokens_for_sale * self.participant_percentage // BPS

    def status_at(self, now: int) -> OfferingStatus:
        if self.cancelled:
            return OfferingStatus.CANCELLED
        if self.merkle_enabled:
            return OfferingStatus.CLAIMING_OPEN
        if self.finalized:
            return OfferingStatus.FINALIZED
        if now < self.start_time:
            return OfferingStatus.CREATED
        if now < self.end_time:
            return OfferingStatus.ACTIVE
        return OfferingStatus.ENDED

    # --- serialization ---

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["merkle_root"] = "0x" + self.merkle_root.hex() if self.merkle_root is not None else None
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Offering":
        data = dict(d)
        root = data.get("merkle_root")
        if isinstance(root, str):
            data["merkle_root"] = bytes.fromhex(root[2:] if root.startswith("0x") else root)
        return Offering(**data)


@dataclass
class Participant:
    address: Address
    deposit_amount: int
    identity_tag: str = ""
    verified: bool = True
    deposited_at: int = 0
    seq: int = 0   # position in the offering's participant list

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Participant":
        return Participant(
            address=d["address"],
            deposit_amount=int(d["deposit_amount"]),
            identity_tag=d.get("identity_tag", ""),
            verified=bool(d.get("verified", True)),
            deposited_at=int(d.get("deposited_at", 0)),
            seq=int(d.get("seq", 0)),
        )


@dataclass(frozen=True)
class Snapshot:
    """
    Finalized input to the allocation engine. Participants are listed in
    deposit order; that order also assigns claim indices.
    """
    offering_id: int
    max_allocation: int
    tokens_for_participants: int
    deposits: tuple = field(default_factory=tuple)   # ((address, amount), ...)

    @property
    def total_deposited(self) -> int:
        return sum(a for _, a in self.deposits)

    @property
    def participant_count(self) -> int:
        return len(self.deposits)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "offeringId": self.offering_id,
            "maxAllocation": str(self.max_allocation),
            "tokensForParticipants": str(self.tokens_for_participants),
            "deposits": [{"address": a, "amount": str(v)} for a, v in self.deposits],
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Snapshot":
        return Snapshot(
            offering_id=int(d["offeringId"]),
            max_allocation=int(d["maxAllocation"]),
            tokens_for_participants=int(d["tokensForParticipants"]),
            deposits=tuple((normalize_address(x["address"]), int(x["amount"])) for x in d.get("deposits", [])),
        )


__all__ = ["BPS", "OfferingStatus", "Offering", "Participant", "Snapshot"]

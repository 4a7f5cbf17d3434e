"""
Claim leaves, proofs and eligibility reason codes.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Sequence, Tuple

from .address import Address, normalize_address


class ClaimReason(IntEnum):
    CAN_CLAIM = 0
    NOT_FINALIZED = 1
    ALREADY_CLAIMED = 2
    NO_ALLOCATION = 3

    @property
    def message(self) -> str:
        return _REASON_TEXT[self]


_REASON_TEXT = {
    ClaimReason.CAN_CLAIM: "Can claim",
    ClaimReason.NOT_FINALIZED: "Giveaway not finalized",
    ClaimReason.ALREADY_CLAIMED: "Already claimed",
    ClaimReason.NO_ALLOCATION: "No allocation",
}


@dataclass(frozen=True)
class ClaimLeaf:
    """One committed `(index, participant, tokenAmount, refundAmount)` tuple."""
    index: int
    address: Address
    token_amount: int
    refund_amount: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address))
        for name in ("index", "token_amount", "refund_amount"):
            v = getattr(self, name)
            if not isinstance(v, int) or v < 0 or v >= 1 << 256:
                raise ValueError(f"{name} must be a uint256 (got {v!r})")

    @property
    def is_empty(self) -> bool:
        return self.token_amount == 0 and self.refund_amount == 0


def _hex32(b: bytes) -> str:
    return "0x" + bytes(b).hex()


def _unhex32(s: str) -> bytes:
    raw = bytes.fromhex(s[2:] if s.startswith(("0x", "0X")) else s)
    if len(raw) != 32:
        raise ValueError("proof nodes must be 32 bytes")
    return raw


@dataclass(frozen=True)
class Claim:
    """A leaf plus its sibling path, as submitted to merkle_claim."""
    leaf: ClaimLeaf
    proof: Tuple[bytes, ...] = ()

    @staticmethod
    def of(index: int, address: Address, token_amount: int, refund_amount: int,
           proof: Sequence[bytes] = ()) -> "Claim":
        return Claim(ClaimLeaf(index, address, token_amount, refund_amount), tuple(bytes(p) for p in proof))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.leaf.index,
            "address": self.leaf.address,
            "tokenAmount": str(self.leaf.token_amount),
            "refundAmount": str(self.leaf.refund_amount),
            "proof": [_hex32(p) for p in self.proof],
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Claim":
        proof: List[bytes] = [_unhex32(p) for p in d.get("proof", [])]
        return Claim.of(int(d["index"]), d["address"], int(d["tokenAmount"]), int(d["refundAmount"]), proof)


__all__ = ["ClaimReason", "ClaimLeaf", "Claim"]

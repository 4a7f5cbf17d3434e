"""
Signed distribution commitments.

A distribution authority publishes the Merkle root together with the audit
totals and signs them with an Ed25519 key. The giveaway service can be
configured with the authority's public key; it then only accepts a root that
arrives with a valid commitment, and it never recomputes allocations itself.

Signed message:

    keccak256( b"launchpad/commitment/v1" | uint256 offering_id | root (32)
               | uint256 total_tokens | uint256 total_refunds
               | uint256 participant_count | uint256 total_leftover
               | uint256 total_excess )
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (Ed25519PrivateKey,
                                                               Ed25519PublicKey)
from cryptography.hazmat.primitives.serialization import (Encoding, NoEncryption,
                                                          PrivateFormat, PublicFormat)

from .distribution import Distribution
from .hash import keccak256, uint256

DOMAIN = b"launchpad/commitment/v1"


def _hex(b: bytes) -> str:
    return "0x" + b.hex()


def _unhex(s: str) -> bytes:
    return bytes.fromhex(s[2:] if s.startswith(("0x", "0X")) else s)


@dataclass(frozen=True)
class Commitment:
    offering_id: int
    merkle_root: bytes
    total_tokens: int
    total_refunds: int
    participant_count: int
    total_leftover: int
    total_excess: int
    signature: bytes = b""

    def message(self) -> bytes:
        if len(self.merkle_root) != 32:
            raise ValueError("merkle_root must be 32 bytes")
        return keccak256(
            DOMAIN
            + uint256(self.offering_id)
            + self.merkle_root
            + uint256(self.total_tokens)
            + uint256(self.total_refunds)
            + uint256(self.participant_count)
            + uint256(self.total_leftover)
            + uint256(self.total_excess)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "offeringId": self.offering_id,
            "merkleRoot": _hex(self.merkle_root),
            "totalTokens": str(self.total_tokens),
            "totalRefunds": str(self.total_refunds),
            "participantCount": self.participant_count,
            "totalLeftover": str(self.total_leftover),
            "totalExcess": str(self.total_excess),
            "signature": _hex(self.signature),
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Commitment":
        return Commitment(
            offering_id=int(d["offeringId"]),
            merkle_root=_unhex(d["merkleRoot"]),
            total_tokens=int(d["totalTokens"]),
            total_refunds=int(d["totalRefunds"]),
            participant_count=int(d["participantCount"]),
            total_leftover=int(d.get("totalLeftover", 0)),
            total_excess=int(d.get("totalExcess", 0)),
            signature=_unhex(d.get("signature", "0x")),
        )


def commitment_for(distribution: Distribution) -> Commitment:
    """Unsigned commitment carrying the distribution's root and cached aggregates."""
    return Commitment(
        offering_id=distribution.offering_id,
        merkle_root=distribution.merkle_root,
        total_tokens=distribution.total_tokens,
        total_refunds=distribution.total_refunds,
        participant_count=len(distribution.entries),
        total_leftover=distribution.total_leftover,
        total_excess=distribution.total_excess,
    )


def generate_keypair() -> Tuple[bytes, bytes]:
    """Return `(private_raw, public_raw)`, 32 bytes each."""
    sk = Ed25519PrivateKey.generate()
    priv = sk.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
    pub = sk.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return priv, pub


def public_key_of(private_raw: bytes) -> bytes:
    sk = Ed25519PrivateKey.from_private_bytes(private_raw)
    return sk.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)


def sign_commitment(commitment: Commitment, private_raw: bytes) -> Commitment:
    sk = Ed25519PrivateKey.from_private_bytes(private_raw)
    sig = sk.sign(commitment.message())
    return Commitment(
        offering_id=commitment.offering_id,
        merkle_root=commitment.merkle_root,
        total_tokens=commitment.total_tokens,
        total_refunds=commitment.total_refunds,
        participant_count=commitment.participant_count,
        total_leftover=commitment.total_leftover,
        total_excess=commitment.total_excess,
        signature=sig,
    )


def verify_commitment(commitment: Commitment, public_raw: bytes) -> bool:
    if len(public_raw) != 32:
        raise ValueError(f"Ed25519 public key must be 32 bytes, got {len(public_raw)}")
    if len(commitment.signature) != 64:
        return False
    try:
        Ed25519PublicKey.from_public_bytes(public_raw).verify(commitment.signature, commitment.message())
    except InvalidSignature:
        return False
    return True


__all__ = [
    "DOMAIN",
    "Commitment",
    "commitment_for",
    "generate_keypair",
    "public_key_of",
    "sign_commitment",
    "verify_commitment",
]

"""
Off-chain distribution generator and audit helpers
==================================================

Runs once over a finalized snapshot:

  1) allocate every participant with `allocation.engine.allocate`
  2) assign dense claim indices 0..N-1 in deposit order
  3) hash each `(index, address, tokenAmount, refundAmount)` leaf
  4) build the sorted-pair Merkle tree and every sibling path

The resulting document is what claim UIs consume:

    {
      "offeringId": 7,
      "merkleRoot": "0x…",
      "method": "capped-average-v1",
      "participants": [
        {"index": 0, "address": "0x…", "depositAmount": "…",
         "tokenAmount": "…", "refundAmount": "…", "proof": ["0x…", …]},
        …
      ],
      "summary": {"totalParticipants": …, "totalTokens": "…", "totalRefunds": "…",
                  "regime": …, "avgAllocation": "…", "totalLeftover": "…",
                  "totalExcess": "…", "tokensForParticipants": "…", …}
    }

Amounts are decimal strings so 256-bit values survive JSON consumers.

Each address appears at exactly one index by construction: the snapshot holds
one record per address because deposits are once-only.

Anyone holding the public deposit data can rerun `verify_participant_allocation`
or `check_conservation` to audit a published document.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from launchpad.allocation.engine import REGIME_OVER, REGIME_UNDER, AllocationResult, allocate
from launchpad.errors import AllocationError
from launchpad.lptypes.address import normalize_address
from launchpad.lptypes.claim import Claim, ClaimLeaf
from launchpad.lptypes.offering import Snapshot
from launchpad.metrics import DISTRIBUTION_SECONDS, DISTRIBUTIONS_GENERATED

from .hash import leaf_hash
from .merkle import build_all_proofs, merkle_root, verify_proof

log = logging.getLogger(__name__)

METHOD = "capped-average-v1"


def _hex(b: bytes) -> str:
    return "0x" + b.hex()


def _unhex(s: str) -> bytes:
    return bytes.fromhex(s[2:] if s.startswith(("0x", "0X")) else s)


@dataclass
class DistributionEntry:
    index: int
    address: str
    deposit_amount: int
    token_amount: int
    refund_amount: int
    proof: List[bytes] = field(default_factory=list)

    @property
    def leaf(self) -> ClaimLeaf:
        return ClaimLeaf(self.index, self.address, self.token_amount, self.refund_amount)

    def claim(self) -> Claim:
        return Claim(self.leaf, tuple(self.proof))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "address": self.address,
            "depositAmount": str(self.deposit_amount),
            "tokenAmount": str(self.token_amount),
            "refundAmount": str(self.refund_amount),
            "proof": [_hex(p) for p in self.proof],
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "DistributionEntry":
        return DistributionEntry(
            index=int(d["index"]),
            address=normalize_address(d["address"]),
            deposit_amount=int(d.get("depositAmount", 0)),
            token_amount=int(d["tokenAmount"]),
            refund_amount=int(d["refundAmount"]),
            proof=[_unhex(p) for p in d.get("proof", [])],
        )


@dataclass
class Distribution:
    offering_id: int
    merkle_root: bytes
    entries: List[DistributionEntry]
    summary: Dict[str, Any]
    method: str = METHOD

    @property
    def total_tokens(self) -> int:
        return sum(e.token_amount for e in self.entries)

    @property
    def total_refunds(self) -> int:
        return sum(e.refund_amount for e in self.entries)

    @property
    def total_leftover(self) -> int:
        return int(self.summary.get("totalLeftover", 0))

    @property
    def total_excess(self) -> int:
        return int(self.summary.get("totalExcess", 0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "offeringId": self.offering_id,
            "merkleRoot": _hex(self.merkle_root),
            "method": self.method,
            "participants": [e.to_dict() for e in self.entries],
            "summary": dict(self.summary),
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=False)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Distribution":
        return Distribution(
            offering_id=int(d.get("offeringId", 0)),
            merkle_root=_unhex(d["merkleRoot"]),
            entries=[DistributionEntry.from_dict(x) for x in d.get("participants", [])],
            summary=dict(d.get("summary", {})),
            method=d.get("method", METHOD),
        )

    @staticmethod
    def from_json(text: str) -> "Distribution":
        return Distribution.from_dict(json.loads(text))


def _summary(result: AllocationResult) -> Dict[str, Any]:
    s = result.summary()
    return {
        "totalParticipants": s["participantCount"],
        "totalTokens": str(s["totalTokens"]),
        "totalRefunds": str(s["totalRefunds"]),
        "regime": s["regime"],
        "totalDeposited": str(s["totalDeposited"]),
        "maxAllocation": str(s["maxAllocation"]),
        "avgAllocation": str(s["avgAllocation"]),
        "totalLeftover": str(s["totalLeftover"]),
        "totalExcess": str(s["totalExcess"]),
        "tokensForParticipants": str(s["tokensForParticipants"]),
    }


def generate_distribution(snapshot: Snapshot) -> Distribution:
    """Allocate, index, hash and prove every participant of `snapshot`."""
    if snapshot.participant_count == 0:
        raise AllocationError("cannot generate a distribution without participants",
                              details={"offering_id": snapshot.offering_id})
    t0 = time.perf_counter()
    result = allocate(snapshot.deposits, snapshot.max_allocation, snapshot.tokens_for_participants)

    entries = [
        DistributionEntry(
            index=i,
            address=normalize_address(a.address),
            deposit_amount=a.deposit,
            token_amount=a.token_amount,
            refund_amount=a.refund_amount,
        )
        for i, a in enumerate(result.allocations)
    ]
    leaves = [leaf_hash(e.leaf) for e in entries]
    root = merkle_root(leaves)
    for e, proof in zip(entries, build_all_proofs(leaves)):
        e.proof = proof

    dist = Distribution(offering_id=snapshot.offering_id, merkle_root=root, entries=entries, summary=_summary(result))
    elapsed = time.perf_counter() - t0
    DISTRIBUTION_SECONDS.observe(elapsed)
    DISTRIBUTIONS_GENERATED.labels(regime=result.regime).inc()
    log.info(
        "distribution: generated offering=%s participants=%d regime=%s root=%s in %.3fs",
        snapshot.offering_id, len(entries), result.regime, _hex(root), elapsed,
    )
    return dist


def get_claim_data(distribution: Distribution, address: str) -> Optional[Claim]:
    """Look up the claim for `address` (case-insensitive). None when absent."""
    want = normalize_address(address)
    for e in distribution.entries:
        if e.address == want:
            return e.claim()
    return None


def verify_claim(distribution: Distribution, claim: Claim) -> bool:
    return verify_proof(leaf_hash(claim.leaf), claim.proof, distribution.merkle_root)


def verify_participant_allocation(snapshot: Snapshot, distribution: Distribution, address: str) -> Dict[str, Any]:
    """
    Independently recompute one participant's allocation from the snapshot and
    compare it with what the distribution claims.
    """
    want = normalize_address(address)
    result = allocate(snapshot.deposits, snapshot.max_allocation, snapshot.tokens_for_participants)
    calc = next((a for a in result.allocations if normalize_address(a.address) == want), None)
    claim = get_claim_data(distribution, want)

    calc_tokens = calc.token_amount if calc else 0
    calc_refund = calc.refund_amount if calc else 0
    claimed_tokens = claim.leaf.token_amount if claim else 0
    claimed_refund = claim.leaf.refund_amount if claim else 0
    proof_valid = verify_claim(distribution, claim) if claim else False

    tokens_match = calc is not None and claim is not None and calc_tokens == claimed_tokens
    refund_match = calc is not None and claim is not None and calc_refund == claimed_refund
    return {
        "address": want,
        "verified": bool(tokens_match and refund_match and proof_valid),
        "calculatedTokens": str(calc_tokens),
        "claimedTokens": str(claimed_tokens),
        "tokensMatch": tokens_match,
        "calculatedRefund": str(calc_refund),
        "claimedRefund": str(claimed_refund),
        "refundMatch": refund_match,
        "proofValid": proof_valid,
        "depositAmount": str(calc.deposit if calc else 0),
    }


@dataclass
class ConservationReport:
    ok: bool
    regime: str
    total_tokens: int
    total_refunds: int
    tokens_for_participants: int
    violations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "regime": self.regime,
            "totalTokens": str(self.total_tokens),
            "totalRefunds": str(self.total_refunds),
            "tokensForParticipants": str(self.tokens_for_participants),
            "violations": list(self.violations),
        }


def check_conservation(snapshot: Snapshot, distribution: Distribution) -> ConservationReport:
    """
    Audit a distribution against the snapshot:
      - indices are dense and follow deposit order
      - the root commits to exactly these leaves
      - aggregate and per-participant conservation within truncation tolerance
    """
    T = snapshot.tokens_for_participants
    cap = snapshot.max_allocation
    n = snapshot.participant_count
    violations: List[str] = []

    entries = sorted(distribution.entries, key=lambda e: e.index)
    if [e.index for e in entries] != list(range(n)):
        violations.append("indices are not dense 0..N-1")
    deposits = {normalize_address(a): d for a, d in snapshot.deposits}
    for e in entries:
        if e.address not in deposits:
            violations.append(f"index {e.index}: address not in snapshot")

    if entries:
        leaves = [leaf_hash(e.leaf) for e in entries]
        if merkle_root(leaves) != distribution.merkle_root:
            violations.append("merkle root does not commit to the listed leaves")

    total_tokens = sum(e.token_amount for e in entries)
    total_refunds = sum(e.refund_amount for e in entries)
    oversubscribed = snapshot.total_deposited > cap

    if total_tokens > T:
        violations.append(f"total tokens {total_tokens} exceed participant share {T}")
    if oversubscribed:
        tol = cap // T + 2
        for e in entries:
            d = deposits.get(e.address, 0)
            paid = e.token_amount * cap // T + e.refund_amount
            if abs(d - paid) > tol:
                violations.append(f"index {e.index}: deposit {d} != cost+refund {paid}")
    else:
        if total_refunds != 0:
            violations.append("refunds must be zero when under-subscribed")
        if n and snapshot.total_deposited > 0 and total_tokens <= T - n:
            violations.append(f"total tokens {total_tokens} lost more than N units of {T}")

    return ConservationReport(
        ok=not violations,
        regime=REGIME_OVER if oversubscribed else REGIME_UNDER,
        total_tokens=total_tokens,
        total_refunds=total_refunds,
        tokens_for_participants=T,
        violations=violations,
    )


__all__ = [
    "METHOD",
    "DistributionEntry",
    "Distribution",
    "generate_distribution",
    "get_claim_data",
    "verify_claim",
    "verify_participant_allocation",
    "ConservationReport",
    "check_conservation",
]

"""
Giveaway state machine
======================

One service instance manages many offerings of project tokens against a
single quote token (USDC). Lifecycle per offering:

    Created ──cancel──▶ Cancelled
       │
       ▼ (start_time)
    Active ──(end_time)──▶ Ended ──finalize──▶ Finalized ──set_merkle_root──▶ ClaimingOpen

Entry points
------------
create, cancel, deposit, finalize, claim_dev_tokens, claim_liquidity_tokens,
set_merkle_root, merkle_claim, batch_merkle_claim, plus read-only views
(get_offering, get_participant, get_participants, status, allocation_breakdown,
can_claim, can_claim_dev_tokens, can_claim_liquidity_tokens, dev_token_info,
liquidity_token_info, is_claimed, snapshot).

Execution model
---------------
Every mutating entry point runs under

    guard.enter() → store.tx() → ledger.tx() → events.tx()

so a call either applies all of its effects (records, transfers, events) or
none of them, and collaborator callbacks cannot re-enter the service while it
is mid-call. The only intentional partial success is the per-item skip inside
batch_merkle_claim.

Funds
-----
The service's own ledger account (`address`) holds every offering's escrowed
project tokens and deposited quote tokens. Per-offering accounting
(`tokens_paid` against the participant share, `refunds_paid` against
`refund_pool`) keeps one offering's claims from touching another's funds.

The claim path performs no allocation arithmetic: it trusts the committed
leaf values and only checks inclusion, replay and escrow bounds.
"""
from __future__ import annotations

import contextlib
import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from launchpad import metrics
from launchpad.adapters.dex import LiquidityDeployer
from launchpad.adapters.identity import IdentityGate
from launchpad.allocation.breakdown import (settle, token_breakdown, tokens_for_participants,
                                            validate_allocation)
from launchpad.config import LaunchpadConfig
from launchpad.db.base import OfferingStore
from launchpad.errors import (AlreadyClaimed, AlreadyFinalized, AlreadyStarted, BatchTooLarge,
                              CommitmentExceedsEscrow, DepositWindowClosed, DepositWindowNotOpen,
                              DevTokensAlreadyClaimed, EscrowExhausted, InvalidCommitment,
                              InvalidProof, InvalidWindow, LengthMismatch,
                              LiquidityDeploymentFailed, LiquidityTokensAlreadyClaimed,
                              MerkleRootAlreadySet, MerkleRootNotSet, NotEnded, NotFinalized,
                              NothingToClaim, NotOwner, NotVerified, OfferingCancelled,
                              PolicyError, StartInPast, ZeroAmount)
from launchpad.ledger.factory import Ledger
from launchpad.lptypes.address import Address, normalize_address
from launchpad.lptypes.claim import Claim, ClaimLeaf, ClaimReason
from launchpad.lptypes.offering import Offering, OfferingStatus, Participant, Snapshot
from launchpad.proofs.commitment import Commitment, verify_commitment
from launchpad.proofs.hash import leaf_hash
from launchpad.proofs.merkle import verify_proof

from . import events as ev
from .events import EventLog
from .guard import ReentrancyGuard

log = logging.getLogger(__name__)

Clock = Callable[[], int]

# Per-item failures that batch_merkle_claim skips instead of aborting.
SKIPPABLE = (InvalidProof, AlreadyClaimed, NothingToClaim)


def _wall_clock() -> int:
    return int(time.time())


@dataclass(frozen=True)
class TokenInfo:
    allocated: int
    claimed: int
    percentage: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class BatchResult:
    claimed: List[int] = field(default_factory=list)
    skipped: List[Tuple[int, str]] = field(default_factory=list)   # (index, error code)
    tokens_paid: int = 0
    refunds_paid: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claimed": list(self.claimed),
            "skipped": [{"index": i, "code": c} for i, c in self.skipped],
            "tokensPaid": str(self.tokens_paid),
            "refundsPaid": str(self.refunds_paid),
        }


def claims_from_arrays(
    indices: Sequence[int],
    addresses: Sequence[Address],
    token_amounts: Sequence[int],
    refund_amounts: Sequence[int],
    proofs: Sequence[Sequence[bytes]],
) -> List[Claim]:
    """Zip parallel arrays into claims; every array must have the same length."""
    n = len(indices)
    lengths = [len(addresses), len(token_amounts), len(refund_amounts), len(proofs)]
    if any(x != n for x in lengths):
        raise LengthMismatch("batch arrays differ in length", details={"lengths": [n, *lengths]})
    return [Claim.of(i, a, t, r, p) for i, a, t, r, p in zip(indices, addresses, token_amounts, refund_amounts, proofs)]


class GiveawayService:
    def __init__(
        self,
        *,
        address: Address,
        store: OfferingStore,
        ledger: Ledger,
        identity: IdentityGate,
        quote_token: Address,
        liquidity: Optional[LiquidityDeployer] = None,
        config: Optional[LaunchpadConfig] = None,
        clock: Optional[Clock] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        self.address = normalize_address(address)
        self.store = store
        self.ledger = ledger
        self.identity = identity
        self.quote_token = normalize_address(quote_token)
        self.liquidity = liquidity
        self.config = config or LaunchpadConfig()
        self.config.validate()
        self.clock: Clock = clock or _wall_clock
        self.events = events or EventLog()
        self._guard = ReentrancyGuard()

    # ------------------------------------------------------------------ helpers

    @contextlib.contextmanager
    def _atomic(self, name: str) -> Iterator[None]:
        with self._guard.enter(name), self.store.tx(), self.ledger.tx(), self.events.tx():
            yield

    def _only_owner(self, o: Offering, caller: Address) -> None:
        if normalize_address(caller) != o.owner:
            raise NotOwner(caller=normalize_address(caller), owner=o.owner, details={"offering_id": o.offering_id})

    @staticmethod
    def _not_cancelled(o: Offering) -> None:
        if o.cancelled:
            raise OfferingCancelled("offering was cancelled", offering_id=o.offering_id)

    @staticmethod
    def _require_finalized(o: Offering) -> None:
        if not o.finalized:
            raise NotFinalized("offering not finalized", offering_id=o.offering_id)

    # ------------------------------------------------------------------ create

    def create(
        self,
        caller: Address,
        *,
        token: Address,
        start_time: int,
        end_time: int,
        max_allocation: int,
        total_tokens_for_sale: int,
        dev_percentage: int,
        liquidity_percentage: int,
        owner: Optional[Address] = None,
    ) -> int:
        """
        Open a new offering and escrow `total_tokens_for_sale` from `caller`.

        `caller` must have approved the service for that amount. `owner`
        defaults to `caller`; the orchestrator funds offerings on behalf of
        the project owner this way.
        """
        funder = normalize_address(caller)
        own = normalize_address(owner) if owner is not None else funder
        tok = normalize_address(token)
        now = self.clock()

        if start_time >= end_time:
            raise InvalidWindow("start_time must be before end_time",
                                details={"start_time": start_time, "end_time": end_time})
        if start_time < now:
            raise StartInPast("start_time is in the past", details={"start_time": start_time, "now": now})
        if max_allocation <= 0:
            raise ZeroAmount("max_allocation must be positive", details={"field": "max_allocation"})
        if total_tokens_for_sale <= 0:
            raise ZeroAmount("total_tokens_for_sale must be positive", details={"field": "total_tokens_for_sale"})
        validate_allocation(dev_percentage, liquidity_percentage, self.config.policy)
        tokens_for_participants(total_tokens_for_sale, dev_percentage, liquidity_percentage, require_positive=True)
        self.ledger.token(tok)

        with self._atomic("create"):
            oid = self.store.next_offering_id()
            self.ledger.escrow(tok, funder, self.address, total_tokens_for_sale)
            o = Offering(
                offering_id=oid,
                owner=own,
                token=tok,
                quote_token=self.quote_token,
                start_time=start_time,
                end_time=end_time,
                max_allocation=max_allocation,
                total_tokens_for_sale=total_tokens_for_sale,
                dev_percentage=dev_percentage,
                liquidity_percentage=liquidity_percentage,
                created_at=now,
            )
            self.store.put_offering(o)
            self.events.emit(ev.OFFERING_CREATED, oid, owner=own, token=tok,
                             total_tokens_for_sale=total_tokens_for_sale, max_allocation=max_allocation)

        metrics.OFFERING_EVENTS.labels(event="created").inc()
        metrics.OFFERINGS_OPEN.inc()
        log.info("giveaway: created id=%s owner=%s token=%s tokens=%d cap=%d window=[%d,%d)",
                 oid, own, tok, total_tokens_for_sale, max_allocation, start_time, end_time)
        return oid

    # ------------------------------------------------------------------ cancel

    def cancel(self, caller: Address, offering_id: int) -> None:
        with self._atomic("cancel"):
            o = self.store.get_offering(offering_id)
            self._only_owner(o, caller)
            self._not_cancelled(o)
            if o.finalized:
                raise AlreadyFinalized("offering already finalized", offering_id=offering_id)
            if self.clock() >= o.start_time:
                raise AlreadyStarted("deposit window already started", offering_id=offering_id)
            o.cancelled = True
            self.ledger.payout(o.token, self.address, o.owner, o.total_tokens_for_sale)
            self.store.put_offering(o)
            self.events.emit(ev.OFFERING_CANCELLED, offering_id, returned=o.total_tokens_for_sale)

        metrics.OFFERING_EVENTS.labels(event="cancelled").inc()
        metrics.OFFERINGS_OPEN.dec()
        log.info("giveaway: cancelled id=%s", offering_id)

    # ------------------------------------------------------------------ deposit

    def deposit(self, caller: Address, offering_id: int, amount: int) -> Participant:
        addr = normalize_address(caller)
        with self._atomic("deposit"):
            o = self.store.get_offering(offering_id)
            self._not_cancelled(o)
            now = self.clock()
            if now < o.start_time:
                raise DepositWindowNotOpen("deposit window not open yet", offering_id=offering_id)
            if now >= o.end_time or o.finalized:
                raise DepositWindowClosed("deposit window closed", offering_id=offering_id)
            if amount <= 0:
                raise ZeroAmount("deposit must be positive", details={"offering_id": offering_id})
            if not self.identity.is_verified(addr):
                raise NotVerified("address has not passed identity verification", details={"address": addr})
            p = Participant(
                address=addr,
                deposit_amount=amount,
                identity_tag=self.identity.identity_tag(addr),
                verified=True,
                deposited_at=now,
                seq=o.participant_count,
            )
            self.store.add_participant(offering_id, p)
            self.ledger.escrow(o.quote_token, addr, self.address, amount)
            o.total_deposited += amount
            o.participant_count += 1
            self.store.put_offering(o)
            self.events.emit(ev.DEPOSITED, offering_id, participant=addr, amount=amount)

        metrics.DEPOSITS.inc()
        metrics.DEPOSIT_AMOUNT.observe(amount)
        log.info("giveaway: deposit id=%s from=%s amount=%d total=%d", offering_id, addr, amount, o.total_deposited)
        return p

    # ------------------------------------------------------------------ finalize

    def finalize(self, caller: Address, offering_id: int) -> Offering:
        """
        Seal the offering: skim the platform fee, reserve dev and liquidity
        tokens, and deploy liquidity when a deployer is configured. A failed
        deployment aborts the whole finalize.
        """
        with self._atomic("finalize"):
            o = self.store.get_offering(offering_id)
            self._only_owner(o, caller)
            self._not_cancelled(o)
            if o.finalized:
                raise AlreadyFinalized("offering already finalized", offering_id=offering_id)
            now = self.clock()
            if now < o.end_time:
                raise NotEnded("deposit window has not ended", offering_id=offering_id)

            s = settle(
                total_deposited=o.total_deposited,
                max_allocation=o.max_allocation,
                participant_count=o.participant_count,
                tokens_for_participants=o.participant_tokens,
                fee_bps=self.config.fees.platform_fee_bps,
            )
            o.finalized = True
            o.finalized_at = now
            o.final_allocation = s.final_allocation
            o.platform_fee = s.platform_fee
            o.liquidity_quote = s.liquidity_quote
            o.refund_pool = s.refund_pool
            o.dev_tokens_allocated = True
            o.liquidity_tokens_allocated = True

            self.ledger.payout(o.quote_token, self.address, self.config.fees.fee_recipient, s.platform_fee)

            if o.participant_count == 0:
                # No one to claim the participant share; it goes back to the owner.
                self.ledger.payout(o.token, self.address, o.owner, o.participant_tokens)
            elif self.liquidity is not None and o.liquidity_tokens > 0 and o.liquidity_quote > 0:
                self._deploy_liquidity(o)

            self.store.put_offering(o)
            self.events.emit(ev.FINALIZED, offering_id, **s.to_dict())

        metrics.OFFERING_EVENTS.labels(event="finalized").inc()
        metrics.OFFERINGS_OPEN.dec()
        log.info("giveaway: finalized id=%s final_allocation=%d fee=%d liquidity_quote=%d refund_pool=%d",
                 offering_id, o.final_allocation, o.platform_fee, o.liquidity_quote, o.refund_pool)
        return o

    def _deploy_liquidity(self, o: Offering) -> None:
        assert self.liquidity is not None
        dex = self.liquidity
        self.ledger.payout(o.token, self.address, dex.address, o.liquidity_tokens)
        self.ledger.payout(o.quote_token, self.address, dex.address, o.liquidity_quote)
        try:
            ref = dex.deploy_liquidity(o.token, o.quote_token, o.liquidity_tokens, o.liquidity_quote)
        except Exception as e:
            raise LiquidityDeploymentFailed(
                "liquidity deployment failed",
                details={"offering_id": o.offering_id, "error": str(e)},
            ) from e
        o.liquidity_deployed = True
        o.liquidity_tokens_claimed = o.liquidity_tokens
        o.position_ref = str(ref)
        self.events.emit(ev.LIQUIDITY_DEPLOYED, o.offering_id, position=o.position_ref,
                         token_amount=o.liquidity_tokens, quote_amount=o.liquidity_quote)

    # ------------------------------------------------------------------ owner claims

    def claim_dev_tokens(self, caller: Address, offering_id: int) -> int:
        with self._atomic("claim_dev_tokens"):
            o = self.store.get_offering(offering_id)
            self._only_owner(o, caller)
            self._require_finalized(o)
            if not o.dev_tokens_allocated or o.dev_tokens_claimed > 0:
                raise DevTokensAlreadyClaimed("dev tokens already claimed", offering_id=offering_id)
            amount = o.dev_tokens
            if amount == 0:
                raise NothingToClaim("no dev allocation", offering_id=offering_id)
            o.dev_tokens_claimed = amount
            self.ledger.payout(o.token, self.address, o.owner, amount)
            self.store.put_offering(o)
            self.events.emit(ev.DEV_TOKENS_CLAIMED, offering_id, amount=amount)

        metrics.OWNER_CLAIMS.labels(kind="dev").inc()
        log.info("giveaway: dev tokens claimed id=%s amount=%d", offering_id, amount)
        return amount

    def claim_liquidity_tokens(self, caller: Address, offering_id: int) -> Tuple[int, int]:
        """
        Pay the liquidity reservation to the owner when no deployer took it at
        finalize. Returns `(tokens, quote)`.
        """
        with self._atomic("claim_liquidity_tokens"):
            o = self.store.get_offering(offering_id)
            self._only_owner(o, caller)
            self._require_finalized(o)
            if not o.liquidity_tokens_allocated or o.liquidity_deployed or o.liquidity_tokens_claimed > 0:
                raise LiquidityTokensAlreadyClaimed("liquidity tokens already claimed", offering_id=offering_id)
            amount = o.liquidity_tokens
            if amount == 0:
                raise NothingToClaim("no liquidity allocation", offering_id=offering_id)
            quote = o.liquidity_quote
            o.liquidity_tokens_claimed = amount
            self.ledger.payout(o.token, self.address, o.owner, amount)
            self.ledger.payout(o.quote_token, self.address, o.owner, quote)
            self.store.put_offering(o)
            self.events.emit(ev.LIQUIDITY_TOKENS_CLAIMED, offering_id, amount=amount, quote=quote)

        metrics.OWNER_CLAIMS.labels(kind="liquidity").inc()
        log.info("giveaway: liquidity tokens claimed id=%s amount=%d quote=%d", offering_id, amount, quote)
        return amount, quote

    # ------------------------------------------------------------------ merkle root

    def set_merkle_root(
        self,
        caller: Address,
        offering_id: int,
        root: bytes,
        commitment: Optional[Commitment] = None,
    ) -> None:
        """
        Bind the offering to its distribution root (once). When an authority
        key is configured the root must arrive with a matching signed
        commitment; any supplied commitment must fit the offering's escrow.
        """
        root = bytes(root)
        with self._atomic("set_merkle_root"):
            o = self.store.get_offering(offering_id)
            self._only_owner(o, caller)
            self._require_finalized(o)
            if o.merkle_enabled:
                raise MerkleRootAlreadySet("merkle root already set", offering_id=offering_id)
            if len(root) != 32:
                raise PolicyError("merkle root must be 32 bytes", details={"length": len(root)})
            self._check_commitment(o, root, commitment)
            o.merkle_root = root
            o.merkle_enabled = True
            if commitment is not None:
                o.commitment = commitment.to_dict()
            self.store.put_offering(o)
            self.events.emit(ev.MERKLE_ROOT_SET, offering_id, root="0x" + root.hex())

        metrics.OFFERING_EVENTS.labels(event="root_set").inc()
        log.info("giveaway: merkle root set id=%s root=0x%s", offering_id, root.hex())

    def _check_commitment(self, o: Offering, root: bytes, c: Optional[Commitment]) -> None:
        pub_hex = self.config.authority.public_key
        if pub_hex is not None:
            if c is None:
                raise InvalidCommitment("a signed commitment is required", details={"offering_id": o.offering_id})
            pub = bytes.fromhex(pub_hex[2:] if pub_hex.startswith("0x") else pub_hex)
            if not verify_commitment(c, pub):
                raise InvalidCommitment("bad commitment signature", details={"offering_id": o.offering_id})
        if c is None:
            return
        if c.offering_id != o.offering_id or c.merkle_root != root:
            raise InvalidCommitment("commitment does not match offering/root", details={"offering_id": o.offering_id})
        if c.participant_count != o.participant_count:
            raise InvalidCommitment(
                "commitment participant count mismatch",
                details={"committed": c.participant_count, "actual": o.participant_count},
            )
        if c.total_tokens > o.participant_tokens or c.total_refunds > o.refund_pool:
            raise CommitmentExceedsEscrow(
                "committed totals exceed escrow",
                offering_id=o.offering_id,
                details={
                    "total_tokens": c.total_tokens,
                    "participant_tokens": o.participant_tokens,
                    "total_refunds": c.total_refunds,
                    "refund_pool": o.refund_pool,
                },
            )

    # ------------------------------------------------------------------ claims

    def _require_claiming(self, o: Offering) -> None:
        self._not_cancelled(o)
        self._require_finalized(o)
        if not o.merkle_enabled or o.merkle_root is None:
            raise MerkleRootNotSet("merkle root not set", offering_id=o.offering_id)

    def _claim_one(self, o: Offering, claim: Claim) -> Tuple[int, int]:
        leaf = claim.leaf
        assert o.merkle_root is not None
        if not verify_proof(leaf_hash(leaf), claim.proof, o.merkle_root):
            raise InvalidProof("merkle proof does not match root", offering_id=o.offering_id, index=leaf.index)
        if self.store.is_claimed(o.offering_id, leaf.index):
            raise AlreadyClaimed("index already claimed", offering_id=o.offering_id, index=leaf.index)
        if leaf.is_empty:
            raise NothingToClaim("leaf carries no tokens and no refund", offering_id=o.offering_id, index=leaf.index)
        if (o.tokens_paid + leaf.token_amount > o.participant_tokens
                or o.refunds_paid + leaf.refund_amount > o.refund_pool):
            raise EscrowExhausted(
                "claim exceeds the offering's escrow",
                offering_id=o.offering_id,
                index=leaf.index,
                details={"tokens_paid": o.tokens_paid, "refunds_paid": o.refunds_paid},
            )

        self.store.set_claimed(o.offering_id, leaf.index)
        o.tokens_paid += leaf.token_amount
        o.refunds_paid += leaf.refund_amount
        o.claims_count += 1
        self.ledger.payout(o.token, self.address, leaf.address, leaf.token_amount)
        self.ledger.payout(o.quote_token, self.address, leaf.address, leaf.refund_amount)
        self.events.emit(ev.CLAIMED, o.offering_id, index=leaf.index, participant=leaf.address,
                         token_amount=leaf.token_amount, refund_amount=leaf.refund_amount)
        return leaf.token_amount, leaf.refund_amount

    def merkle_claim(self, caller: Address, offering_id: int, claim: Claim) -> Tuple[int, int]:
        """
        Pay one committed leaf. Permissionless: `caller` only triggers the
        payment, funds always go to the leaf's address.
        """
        try:
            with self._atomic("merkle_claim"):
                o = self.store.get_offering(offering_id)
                self._require_claiming(o)
                paid = self._claim_one(o, claim)
                self.store.put_offering(o)
        except SKIPPABLE as e:
            metrics.CLAIMS.labels(result=_result_label(e)).inc()
            raise
        metrics.CLAIMS.labels(result="paid").inc()
        log.info("giveaway: claim id=%s index=%d by=%s to=%s tokens=%d refund=%d",
                 offering_id, claim.leaf.index, normalize_address(caller), claim.leaf.address, *paid)
        return paid

    def batch_merkle_claim(self, caller: Address, offering_id: int, claims: Sequence[Claim]) -> BatchResult:
        """
        Pay many leaves in one call. Invalid proofs, already-claimed indices
        and empty leaves are skipped; any other failure aborts the batch.
        """
        if len(claims) > self.config.claims.max_batch_size:
            raise BatchTooLarge("batch too large",
                                details={"size": len(claims), "max": self.config.claims.max_batch_size})
        result = BatchResult()
        with self._atomic("batch_merkle_claim"):
            o = self.store.get_offering(offering_id)
            self._require_claiming(o)
            for claim in claims:
                try:
                    tokens, refund = self._claim_one(o, claim)
                except SKIPPABLE as e:
                    result.skipped.append((claim.leaf.index, e.code))
                    self.events.emit(ev.CLAIM_SKIPPED, offering_id, index=claim.leaf.index, code=e.code)
                    continue
                result.claimed.append(claim.leaf.index)
                result.tokens_paid += tokens
                result.refunds_paid += refund
            self.store.put_offering(o)

        metrics.BATCH_SIZE.observe(len(claims))
        if result.claimed:
            metrics.CLAIMS.labels(result="paid").inc(len(result.claimed))
        for _, code in result.skipped:
            metrics.CLAIMS.labels(result=_CODE_LABELS.get(code, "invalid_proof")).inc()
        log.info("giveaway: batch claim id=%s by=%s claimed=%d skipped=%d",
                 offering_id, normalize_address(caller), len(result.claimed), len(result.skipped))
        return result

    # ------------------------------------------------------------------ views

    def get_offering(self, offering_id: int) -> Offering:
        return self.store.get_offering(offering_id)

    def get_participant(self, offering_id: int, address: Address) -> Optional[Participant]:
        self.store.get_offering(offering_id)
        return self.store.get_participant(offering_id, address)

    def get_participants(self, offering_id: int) -> List[Address]:
        self.store.get_offering(offering_id)
        return [p.address for p in self.store.participants(offering_id)]

    def status(self, offering_id: int) -> OfferingStatus:
        return self.store.get_offering(offering_id).status_at(self.clock())

    def is_claimed(self, offering_id: int, index: int) -> bool:
        return self.store.is_claimed(offering_id, index)

    def allocation_breakdown(self, offering_id: int) -> Dict[str, Any]:
        o = self.store.get_offering(offering_id)
        out = token_breakdown(o.total_tokens_for_sale, o.dev_percentage, o.liquidity_percentage).to_dict()
        out.update(
            total_deposited=o.total_deposited,
            max_allocation=o.max_allocation,
            participant_count=o.participant_count,
            final_allocation=o.final_allocation,
            platform_fee=o.platform_fee,
            liquidity_quote=o.liquidity_quote,
            refund_pool=o.refund_pool,
        )
        return out

    def can_claim(self, offering_id: int, leaf: ClaimLeaf) -> ClaimReason:
        o = self.store.get_offering(offering_id)
        if o.cancelled or not o.finalized or not o.merkle_enabled:
            return ClaimReason.NOT_FINALIZED
        if self.store.is_claimed(offering_id, leaf.index):
            return ClaimReason.ALREADY_CLAIMED
        if leaf.is_empty:
            return ClaimReason.NO_ALLOCATION
        return ClaimReason.CAN_CLAIM

    def can_claim_dev_tokens(self, offering_id: int) -> Tuple[bool, ClaimReason]:
        o = self.store.get_offering(offering_id)
        if not o.finalized:
            reason = ClaimReason.NOT_FINALIZED
        elif o.dev_tokens_claimed > 0:
            reason = ClaimReason.ALREADY_CLAIMED
        elif o.dev_tokens == 0:
            reason = ClaimReason.NO_ALLOCATION
        else:
            reason = ClaimReason.CAN_CLAIM
        return reason == ClaimReason.CAN_CLAIM, reason

    def can_claim_liquidity_tokens(self, offering_id: int) -> Tuple[bool, ClaimReason]:
        o = self.store.get_offering(offering_id)
        if not o.finalized:
            reason = ClaimReason.NOT_FINALIZED
        elif o.liquidity_deployed or o.liquidity_tokens_claimed > 0:
            reason = ClaimReason.ALREADY_CLAIMED
        elif o.liquidity_tokens == 0:
            reason = ClaimReason.NO_ALLOCATION
        else:
            reason = ClaimReason.CAN_CLAIM
        return reason == ClaimReason.CAN_CLAIM, reason

    def dev_token_info(self, offering_id: int) -> TokenInfo:
        o = self.store.get_offering(offering_id)
        return TokenInfo(
            allocated=o.dev_tokens if o.dev_tokens_allocated else 0,
            claimed=o.dev_tokens_claimed,
            percentage=o.dev_percentage,
        )

    def liquidity_token_info(self, offering_id: int) -> TokenInfo:
        o = self.store.get_offering(offering_id)
        return TokenInfo(
            allocated=o.liquidity_tokens if o.liquidity_tokens_allocated else 0,
            claimed=o.liquidity_tokens_claimed,
            percentage=o.liquidity_percentage,
        )

    def snapshot(self, offering_id: int) -> Snapshot:
        """The engine input for a finalized offering, participants in deposit order."""
        o = self.store.get_offering(offering_id)
        self._require_finalized(o)
        return Snapshot(
            offering_id=offering_id,
            max_allocation=o.max_allocation,
            tokens_for_participants=o.participant_tokens,
            deposits=tuple((p.address, p.deposit_amount) for p in self.store.participants(offering_id)),
        )


_CODE_LABELS = {
    InvalidProof.code: "invalid_proof",
    AlreadyClaimed.code: "already_claimed",
    NothingToClaim.code: "nothing_to_claim",
}


def _result_label(e: Exception) -> str:
    return _CODE_LABELS.get(getattr(e, "code", ""), "invalid_proof")


__all__ = ["GiveawayService", "TokenInfo", "BatchResult", "claims_from_arrays", "SKIPPABLE"]

from __future__ import annotations

import pytest

from launchpad import errors as E
from launchpad.adapters.dex import PoolRegistry
from launchpad.giveaway import events as ev
from launchpad.lptypes.claim import ClaimReason
from launchpad.lptypes.offering import OfferingStatus

from .conftest import (ALICE, BOB, CAROL, CAP, DAVE, DEX, END, LIQ_BPS, NOW, OWNER, SERVICE, START,
                       TOTAL_FOR_SALE)

# ---------------------------------------------------------------- create


def test_create_escrows_tokens_and_emits(service, create_offering, project):
    before = project.balance_of(OWNER)
    oid = create_offering()
    assert oid == 1
    assert project.balance_of(SERVICE) == TOTAL_FOR_SALE
    assert project.balance_of(OWNER) == before - TOTAL_FOR_SALE
    o = service.get_offering(oid)
    assert o.owner == OWNER
    assert o.participant_tokens == 6_000
    assert service.status(oid) == OfferingStatus.CREATED
    assert [e.name for e in service.events.events(offering_id=oid)] == [ev.OFFERING_CREATED]


@pytest.mark.parametrize(
    "overrides,exc",
    [
        (dict(start_time=END, end_time=START), E.InvalidWindow),
        (dict(start_time=START, end_time=START), E.InvalidWindow),
        (dict(start_time=NOW - 1), E.StartInPast),
        (dict(max_allocation=0), E.ZeroAmount),
        (dict(total_tokens_for_sale=0), E.ZeroAmount),
        (dict(liquidity_percentage=1_999), E.LiquidityBelowMinimum),
        (dict(dev_percentage=5_001, liquidity_percentage=2_000), E.CombinedAllocationTooHigh),
        (dict(dev_percentage=-1), E.PercentageOutOfRange),
        (dict(total_tokens_for_sale=1), E.NoParticipantShare),
    ],
)
def test_create_rejects_bad_parameters(service, create_offering, project, overrides, exc):
    with pytest.raises(exc):
        create_offering(**overrides)
    assert project.balance_of(SERVICE) == 0
    assert service.store.offering_ids() == []


def test_create_boundaries_are_inclusive(create_offering):
    create_offering(start_time=NOW)                                  # start == now
    create_offering(dev_percentage=5_000, liquidity_percentage=2_000)  # exactly 7000 / 2000


def test_create_unknown_token(service):
    with pytest.raises(E.TokenNotFound):
        service.create(OWNER, token="0x" + "ee" * 20, start_time=START, end_time=END, max_allocation=CAP,
                       total_tokens_for_sale=TOTAL_FOR_SALE, dev_percentage=1_000, liquidity_percentage=3_000)


def test_create_without_allowance_rolls_back(service, project):
    with pytest.raises(E.InsufficientAllowance):
        service.create(OWNER, token=project.address, start_time=START, end_time=END, max_allocation=CAP,
                       total_tokens_for_sale=TOTAL_FOR_SALE, dev_percentage=1_000, liquidity_percentage=3_000)
    assert service.store.offering_ids() == []
    assert len(service.events) == 0


# ---------------------------------------------------------------- cancel


def test_cancel_before_start_returns_escrow(service, create_offering, project):
    before = project.balance_of(OWNER)
    oid = create_offering()
    service.cancel(OWNER, oid)
    assert project.balance_of(OWNER) == before
    assert service.status(oid) == OfferingStatus.CANCELLED
    with pytest.raises(E.OfferingCancelled):
        service.cancel(OWNER, oid)


def test_cancel_rules(service, create_offering, clock):
    oid = create_offering()
    with pytest.raises(E.NotOwner):
        service.cancel(ALICE, oid)
    clock.set(START)
    with pytest.raises(E.AlreadyStarted):
        service.cancel(OWNER, oid)


def test_cancelled_offering_rejects_everything(service, create_offering, clock):
    oid = create_offering()
    service.cancel(OWNER, oid)
    clock.set(START)
    with pytest.raises(E.OfferingCancelled):
        service.deposit(ALICE, oid, 100)
    clock.set(END)
    with pytest.raises(E.OfferingCancelled):
        service.finalize(OWNER, oid)


# ---------------------------------------------------------------- deposit


def test_deposit_window_is_half_open(service, create_offering, clock, usdc):
    oid = create_offering()
    clock.set(START - 1)
    with pytest.raises(E.DepositWindowNotOpen):
        service.deposit(ALICE, oid, 100)
    clock.set(START)
    service.deposit(ALICE, oid, 100)
    clock.set(END - 1)
    service.deposit(BOB, oid, 50)
    clock.set(END)
    with pytest.raises(E.DepositWindowClosed):
        service.deposit(CAROL, oid, 10)
    o = service.get_offering(oid)
    assert (o.total_deposited, o.participant_count) == (150, 2)
    assert usdc.balance_of(SERVICE) == 150
    assert service.get_participants(oid) == [ALICE, BOB]


def test_deposit_is_once_per_address(service, create_offering, clock):
    oid = create_offering()
    clock.set(START)
    service.deposit(ALICE, oid, 100)
    with pytest.raises(E.AlreadyDeposited):
        service.deposit(ALICE, oid, 100)
    assert service.get_offering(oid).total_deposited == 100


def test_deposit_requires_identity_and_amount(service, create_offering, clock, usdc):
    oid = create_offering()
    clock.set(START)
    with pytest.raises(E.NotVerified):
        service.deposit(DAVE, oid, 100)
    with pytest.raises(E.ZeroAmount):
        service.deposit(ALICE, oid, 0)
    assert usdc.balance_of(SERVICE) == 0


def test_deposit_records_identity_tag(service, create_offering, clock, identity):
    oid = create_offering()
    clock.set(START)
    service.deposit(BOB, oid, 10)
    p = service.get_participant(oid, BOB)
    assert p is not None and p.deposit_amount == 10
    assert p.identity_tag == identity.identity_tag(BOB)
    assert service.get_participant(oid, CAROL) is None


def test_deposits_are_accepted_above_the_cap(service, create_offering, clock):
    oid = create_offering()
    clock.set(START)
    service.deposit(ALICE, oid, 5 * CAP)
    assert service.get_offering(oid).total_deposited == 5 * CAP


def test_unknown_offering(service):
    with pytest.raises(E.OfferingNotFound):
        service.deposit(ALICE, 99, 1)


# ---------------------------------------------------------------- finalize


def test_finalize_rules(service, create_offering, clock):
    oid = create_offering()
    clock.set(START)
    service.deposit(ALICE, oid, 100)
    with pytest.raises(E.NotEnded):
        service.finalize(OWNER, oid)
    clock.set(END)
    with pytest.raises(E.NotOwner):
        service.finalize(ALICE, oid)
    service.finalize(OWNER, oid)
    with pytest.raises(E.AlreadyFinalized):
        service.finalize(OWNER, oid)
    assert service.status(oid) == OfferingStatus.FINALIZED


def test_finalize_oversubscribed_routes_quote(service, finalized, usdc):
    oid = finalized([(ALICE, 500), (BOB, 400), (CAROL, 300)])
    o = service.get_offering(oid)
    assert o.final_allocation == 1_000
    assert o.platform_fee == 25
    assert o.liquidity_quote == 1_000 - 25 - 12
    assert o.refund_pool == 1_200 - 25 - o.liquidity_quote
    assert o.dev_tokens_allocated and o.liquidity_tokens_allocated
    assert usdc.balance_of(service.config.fees.fee_recipient) == 25
    assert usdc.balance_of(SERVICE) == 1_175


def test_finalize_undersubscribed_has_no_refund_pool(service, finalized):
    oid = finalized([(ALICE, 300), (BOB, 200)])
    o = service.get_offering(oid)
    assert o.final_allocation == 500
    assert o.platform_fee == 12
    assert o.liquidity_quote == 488
    assert o.refund_pool == 0


def test_finalize_without_participants_returns_participant_share(service, finalized, project):
    before = project.balance_of(OWNER)
    oid = finalized([])
    assert project.balance_of(OWNER) == before - TOTAL_FOR_SALE + 6_000
    o = service.get_offering(oid)
    assert o.participant_count == 0 and o.platform_fee == 0
    assert service.claim_dev_tokens(OWNER, oid) == 1_000


def test_finalize_deploys_liquidity(store, ledger, usdc, project, identity, clock):
    from launchpad.giveaway.service import GiveawayService

    dex = PoolRegistry(ledger, DEX)
    svc = GiveawayService(address=SERVICE, store=store, ledger=ledger, identity=identity,
                          quote_token=usdc.address, liquidity=dex, clock=clock)
    project.approve(OWNER, SERVICE, TOTAL_FOR_SALE)
    oid = svc.create(OWNER, token=project.address, start_time=START, end_time=END, max_allocation=CAP,
                     total_tokens_for_sale=TOTAL_FOR_SALE, dev_percentage=1_000, liquidity_percentage=LIQ_BPS)
    clock.set(START)
    usdc.approve(ALICE, SERVICE, 300)
    svc.deposit(ALICE, oid, 300)
    clock.set(END)
    o = svc.finalize(OWNER, oid)

    assert o.liquidity_deployed
    pos = dex.position(o.position_ref)
    assert (pos.token_amount, pos.quote_amount) == (3_000, o.liquidity_quote)
    assert project.balance_of(DEX) == 3_000
    assert usdc.balance_of(DEX) == o.liquidity_quote
    assert svc.can_claim_liquidity_tokens(oid) == (False, ClaimReason.ALREADY_CLAIMED)
    with pytest.raises(E.LiquidityTokensAlreadyClaimed):
        svc.claim_liquidity_tokens(OWNER, oid)
    assert [e.name for e in svc.events.events(offering_id=oid)][-2:] == [ev.LIQUIDITY_DEPLOYED, ev.FINALIZED]


class _BrokenDeployer:
    address = DEX

    def deploy_liquidity(self, token, quote_token, token_amount, quote_amount):
        raise RuntimeError("pool paused")


class _ReentrantDeployer:
    address = DEX

    def __init__(self):
        self.service = None
        self.offering_id = None

    def deploy_liquidity(self, token, quote_token, token_amount, quote_amount):
        self.service.finalize(OWNER, self.offering_id)
        return "never"


@pytest.mark.parametrize("deployer_cls,cause", [(_BrokenDeployer, RuntimeError), (_ReentrantDeployer, E.ReentrancyError)])
def test_failed_deployment_aborts_finalize(store, ledger, usdc, project, identity, clock, deployer_cls, cause):
    from launchpad.giveaway.service import GiveawayService

    deployer = deployer_cls()
    svc = GiveawayService(address=SERVICE, store=store, ledger=ledger, identity=identity,
                          quote_token=usdc.address, liquidity=deployer, clock=clock)
    project.approve(OWNER, SERVICE, TOTAL_FOR_SALE)
    oid = svc.create(OWNER, token=project.address, start_time=START, end_time=END, max_allocation=CAP,
                     total_tokens_for_sale=TOTAL_FOR_SALE, dev_percentage=1_000, liquidity_percentage=LIQ_BPS)
    if isinstance(deployer, _ReentrantDeployer):
        deployer.service, deployer.offering_id = svc, oid
    clock.set(START)
    usdc.approve(ALICE, SERVICE, 300)
    svc.deposit(ALICE, oid, 300)
    clock.set(END)
    n_events = len(svc.events)

    with pytest.raises(E.LiquidityDeploymentFailed) as info:
        svc.finalize(OWNER, oid)
    assert isinstance(info.value.__cause__, cause)

    o = svc.get_offering(oid)
    assert not o.finalized
    assert usdc.balance_of(SERVICE) == 300
    assert project.balance_of(SERVICE) == TOTAL_FOR_SALE
    assert project.balance_of(DEX) == 0
    assert len(svc.events) == n_events


# ---------------------------------------------------------------- owner claims


def test_dev_and_liquidity_claims(service, finalized, project, usdc):
    oid = finalized([(ALICE, 300)])
    assert service.can_claim_dev_tokens(oid) == (True, ClaimReason.CAN_CLAIM)
    before = project.balance_of(OWNER)
    assert service.claim_dev_tokens(OWNER, oid) == 1_000
    assert service.claim_liquidity_tokens(OWNER, oid) == (3_000, service.get_offering(oid).liquidity_quote)
    assert project.balance_of(OWNER) == before + 4_000
    assert usdc.balance_of(OWNER) == service.get_offering(oid).liquidity_quote
    with pytest.raises(E.DevTokensAlreadyClaimed):
        service.claim_dev_tokens(OWNER, oid)
    with pytest.raises(E.LiquidityTokensAlreadyClaimed):
        service.claim_liquidity_tokens(OWNER, oid)
    assert service.dev_token_info(oid).to_dict() == {"allocated": 1_000, "claimed": 1_000, "percentage": 1_000}
    assert service.liquidity_token_info(oid).claimed == 3_000


def test_owner_claims_need_finalize_and_owner(service, create_offering):
    oid = create_offering()
    assert service.can_claim_dev_tokens(oid) == (False, ClaimReason.NOT_FINALIZED)
    assert service.dev_token_info(oid).allocated == 0
    with pytest.raises(E.NotFinalized):
        service.claim_dev_tokens(OWNER, oid)
    with pytest.raises(E.NotOwner):
        service.claim_liquidity_tokens(BOB, oid)


def test_zero_dev_percentage_has_nothing_to_claim(service, create_offering, clock):
    oid = create_offering(dev_percentage=0)
    clock.set(END)
    service.finalize(OWNER, oid)
    assert service.can_claim_dev_tokens(oid) == (False, ClaimReason.NO_ALLOCATION)
    with pytest.raises(E.NothingToClaim):
        service.claim_dev_tokens(OWNER, oid)


def test_allocation_breakdown_view(service, finalized):
    oid = finalized([(ALICE, 500), (BOB, 400), (CAROL, 300)])
    b = service.allocation_breakdown(oid)
    assert (b["dev"], b["liquidity"], b["participants"]) == (1_000, 3_000, 6_000)
    assert b["participant_percentage"] == 6_000
    assert b["total_deposited"] == 1_200
    assert b["platform_fee"] == 25


def test_snapshot_requires_finalize(service, create_offering, finalized):
    oid = create_offering()
    with pytest.raises(E.NotFinalized):
        service.snapshot(oid)
    done = finalized([(BOB, 400), (ALICE, 500)])
    snap = service.snapshot(done)
    assert snap.deposits == ((BOB, 400), (ALICE, 500))
    assert snap.tokens_for_participants == 6_000

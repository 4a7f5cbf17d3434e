"""
Shared fixtures for the launchpad tests.

Amounts in the lifecycle tests are deliberately small (quote cap 1_000,
10_000 tokens for sale) so expected allocations can be written out by hand.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterator, List

import pytest

from launchpad.adapters.identity import NullifierRegistry
from launchpad.config import LaunchpadConfig
from launchpad.db.memory import MemoryOfferingStore
from launchpad.db.sqlite import SQLiteOfferingStore
from launchpad.giveaway.service import GiveawayService
from launchpad.ledger.factory import Ledger
from launchpad.ledger.token import FungibleToken


def addr(n: int) -> str:
    return "0x" + format(n, "040x")


OWNER = addr(0x0A)
ALICE = addr(0xA1)
BOB = addr(0xB0)
CAROL = addr(0xC0)
DAVE = addr(0xD0)       # never verified
SERVICE = addr(0x5E)
DEX = addr(0xDE)
ISSUER = addr(0x15)
PLATFORM = addr(0x91)
FACTORY = addr(0xFA)

NOW = 1_700_000_000
START = NOW + 100
END = NOW + 1_000

TOTAL_FOR_SALE = 10_000
DEV_BPS = 1_000
LIQ_BPS = 3_000
CAP = 1_000


class FakeClock:
    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def set(self, now: int) -> None:
        self.now = now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ledger() -> Ledger:
    return Ledger()


@pytest.fixture
def usdc(ledger: Ledger) -> FungibleToken:
    t = ledger.register(FungibleToken(addr(0x05DC), name="USD Coin", symbol="USDC", owner=ISSUER, decimals=6))
    for who in (ALICE, BOB, CAROL, DAVE):
        t.mint(ISSUER, who, 1_000_000)
    return t


@pytest.fixture
def project(ledger: Ledger) -> FungibleToken:
    t = ledger.register(FungibleToken(addr(0x70C), name="Project", symbol="PRJ", owner=OWNER))
    t.mint(OWNER, OWNER, 1_000_000)
    return t


@pytest.fixture
def identity() -> NullifierRegistry:
    reg = NullifierRegistry()
    for i, who in enumerate((ALICE, BOB, CAROL), start=1):
        reg.register_verification(who, nullifier=1000 + i, user_identifier=i)
    return reg


@pytest.fixture(params=["memory", "sqlite"])
def store(request: pytest.FixtureRequest, tmp_path) -> Iterator[object]:
    if request.param == "memory":
        yield MemoryOfferingStore()
        return
    db = SQLiteOfferingStore(str(tmp_path / "launchpad.db"))
    yield db
    db.close()


@pytest.fixture
def service(store, ledger: Ledger, usdc: FungibleToken, project: FungibleToken,
            identity: NullifierRegistry, clock: FakeClock) -> GiveawayService:
    svc = GiveawayService(
        address=SERVICE,
        store=store,
        ledger=ledger,
        identity=identity,
        quote_token=usdc.address,
        config=LaunchpadConfig(),
        clock=clock,
    )
    for who in (ALICE, BOB, CAROL, DAVE):
        usdc.approve(who, SERVICE, 1_000_000)
    return svc


@pytest.fixture
def create_offering(service: GiveawayService, project: FungibleToken) -> Callable[..., int]:
    def _create(**overrides: int) -> int:
        params: Dict[str, int] = dict(
            token=project.address,
            start_time=START,
            end_time=END,
            max_allocation=CAP,
            total_tokens_for_sale=TOTAL_FOR_SALE,
            dev_percentage=DEV_BPS,
            liquidity_percentage=LIQ_BPS,
        )
        params.update(overrides)
        project.approve(OWNER, SERVICE, params["total_tokens_for_sale"])
        return service.create(OWNER, **params)

    return _create


@pytest.fixture
def finalized(service: GiveawayService, create_offering, clock: FakeClock) -> Callable[[List[tuple]], int]:
    """Run an offering through deposits and finalize; returns its id."""
    def _run(deposits: List[tuple]) -> int:
        oid = create_offering()
        clock.set(START)
        for who, amount in deposits:
            service.deposit(who, oid, amount)
        clock.set(END)
        service.finalize(OWNER, oid)
        return oid

    return _run

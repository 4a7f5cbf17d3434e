from __future__ import annotations

import pytest

from launchpad import errors as E
from launchpad.ledger.factory import Ledger, TokenFactory
from launchpad.ledger.token import UINT256_MAX, FungibleToken

from .conftest import ALICE, BOB, FACTORY, OWNER, addr


@pytest.fixture
def tok() -> FungibleToken:
    t = FungibleToken(addr(0x70C), name="Project", symbol="PRJ", owner=OWNER, max_supply=1_000)
    t.mint(OWNER, OWNER, 600)
    return t


def test_transfer_and_balances(tok):
    tok.transfer(OWNER, ALICE, 100)
    assert tok.balance_of(ALICE) == 100
    assert tok.balance_of(OWNER) == 500
    with pytest.raises(E.InsufficientBalance):
        tok.transfer(ALICE, BOB, 101)


def test_allowance_is_spent(tok):
    tok.approve(OWNER, ALICE, 50)
    tok.transfer_from(ALICE, OWNER, BOB, 20)
    assert tok.allowance(OWNER, ALICE) == 30
    with pytest.raises(E.InsufficientAllowance):
        tok.transfer_from(ALICE, OWNER, BOB, 31)


def test_infinite_allowance(tok):
    tok.approve(OWNER, ALICE, UINT256_MAX)
    tok.transfer_from(ALICE, OWNER, BOB, 20)
    assert tok.allowance(OWNER, ALICE) == UINT256_MAX


def test_supply_cap_and_owner_only_mint(tok):
    with pytest.raises(E.SupplyCapExceeded):
        tok.mint(OWNER, ALICE, 401)
    with pytest.raises(E.NotOwner):
        tok.mint(ALICE, ALICE, 1)
    tok.mint(OWNER, ALICE, 400)
    assert tok.total_supply == 1_000
    tok.burn(ALICE, 100)
    assert tok.total_supply == 900


def test_trading_gate(tok):
    tok.set_trading_enabled(OWNER, False)
    tok.transfer(OWNER, ALICE, 10)            # owner is exempt
    with pytest.raises(E.TradingDisabled):
        tok.transfer(ALICE, BOB, 1)
    tok.set_exempt(OWNER, BOB)
    tok.transfer(ALICE, BOB, 1)               # exempt recipient
    tok.set_trading_enabled(OWNER, True)
    tok.transfer(ALICE, addr(0x99), 1)


def test_ownership(tok):
    tok.transfer_ownership(OWNER, ALICE)
    with pytest.raises(E.NotOwner):
        tok.set_trading_enabled(OWNER, False)
    tok.renounce_ownership(ALICE)
    assert tok.owner == "0x" + "00" * 20


def test_negative_amount_rejected(tok):
    with pytest.raises(E.TokenError):
        tok.transfer(OWNER, ALICE, -1)


def test_ledger_tx_restores_balances_and_drops_new_tokens(tok):
    ledger = Ledger()
    ledger.register(tok)
    factory = TokenFactory(ledger, FACTORY)
    with pytest.raises(RuntimeError):
        with ledger.tx():
            tok.transfer(OWNER, ALICE, 100)
            factory.create_token(OWNER, name="X", symbol="X", initial_supply=5)
            raise RuntimeError("abort")
    assert tok.balance_of(ALICE) == 0
    assert ledger.tokens() == [tok]


def test_factory_addresses_are_distinct():
    ledger = Ledger()
    factory = TokenFactory(ledger, FACTORY)
    a = factory.create_token(OWNER, name="A", symbol="A", initial_supply=10)
    b = factory.create_token(OWNER, name="B", symbol="B", initial_supply=10, owner=ALICE)
    assert a.address != b.address
    assert b.balance_of(ALICE) == 10 and b.owner == ALICE
    assert ledger.token(a.address) is a
    with pytest.raises(E.TokenNotFound):
        ledger.token(addr(0xDEAD))

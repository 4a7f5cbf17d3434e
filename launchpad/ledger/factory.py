"""
Ledger registry and token factory.

`Ledger` maps token addresses to `FungibleToken` instances and offers the two
collaborator calls the giveaway needs:

    escrow(token, frm, to, amount)   pull `amount` from `frm` (allowance-based)
    payout(token, frm, to, amount)   push `amount` from a contract account

`Ledger.tx()` snapshots every registered token and restores them all if the
block raises, which makes a multi-token call all-or-nothing. Nested `tx()`
blocks join the outer one.

`TokenFactory.create_token` deploys a new token at a deterministic address
derived from the creator and a running nonce.
"""
from __future__ import annotations

import contextlib
import logging
from threading import RLock
from typing import Dict, Iterator, List, Optional

from launchpad.errors import TokenNotFound
from launchpad.lptypes.address import Address, address_bytes, normalize_address
from launchpad.proofs.hash import keccak256, uint256

from .token import FungibleToken

log = logging.getLogger(__name__)


class Ledger:
    def __init__(self) -> None:
        self._tokens: Dict[Address, FungibleToken] = {}
        self._lock = RLock()
        self._depth = 0

    def register(self, token: FungibleToken) -> FungibleToken:
        with self._lock:
            self._tokens[token.address] = token
        return token

    def token(self, address: Address) -> FungibleToken:
        a = normalize_address(address)
        try:
            return self._tokens[a]
        except KeyError:
            raise TokenNotFound("unknown token", details={"token": a}) from None

    def tokens(self) -> List[FungibleToken]:
        return list(self._tokens.values())

    def balance_of(self, token: Address, account: Address) -> int:
        return self.token(token).balance_of(account)

    # --- collaborator surface used by the giveaway ---

    def escrow(self, token: Address, frm: Address, to: Address, amount: int) -> None:
        """Pull `amount` of `token` from `frm` into contract account `to`."""
        if amount:
            self.token(token).transfer_from(to, frm, to, amount)

    def payout(self, token: Address, frm: Address, to: Address, amount: int) -> None:
        if amount:
            self.token(token).transfer(frm, to, amount)

    @contextlib.contextmanager
    def tx(self) -> Iterator[None]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return
            saved = {addr: t.dump() for addr, t in self._tokens.items()}
            known = set(self._tokens)
            self._depth = 1
            try:
                yield
            except BaseException:
                for addr in list(self._tokens):
                    if addr not in known:
                        del self._tokens[addr]
                for addr, state in saved.items():
                    self._tokens[addr].load(state)
                raise
            finally:
                self._depth = 0


class TokenFactory:
    def __init__(self, ledger: Ledger, address: Address) -> None:
        self.ledger = ledger
        self.address = normalize_address(address)
        self._nonce = 0

    def _next_address(self, creator: Address) -> Address:
        digest = keccak256(b"launchpad/token" + address_bytes(self.address) + address_bytes(creator) + uint256(self._nonce))
        self._nonce += 1
        return "0x" + digest[-20:].hex()

    def create_token(
        self,
        creator: Address,
        *,
        name: str,
        symbol: str,
        initial_supply: int,
        max_supply: Optional[int] = None,
        decimals: int = 18,
        description: str = "",
        trading_enabled: bool = True,
        owner: Optional[Address] = None,
    ) -> FungibleToken:
        """
        Deploy a token owned by `owner` (default: creator) and mint the initial
        supply to it.
        """
        own = normalize_address(owner or creator)
        token = FungibleToken(
            self._next_address(normalize_address(creator)),
            name=name,
            symbol=symbol,
            owner=own,
            decimals=decimals,
            max_supply=max_supply,
            trading_enabled=trading_enabled,
            description=description,
        )
        token.mint(own, own, initial_supply)
        self.ledger.register(token)
        log.info("factory: created token %s (%s) supply=%d owner=%s", token.symbol, token.address, initial_supply, own)
        return token


__all__ = ["Ledger", "TokenFactory"]

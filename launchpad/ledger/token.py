"""
Fungible balance store (ERC-20-like)
====================================

An in-process token ledger with an explicit-caller API surface: every mutating
call names its `caller`; there is no ambient sender.

Highlights
----------
- Hard supply cap (`max_supply`); mint beyond it fails.
- Trading gate: while `trading_enabled` is False, transfers only succeed if the
  sender or recipient is exempt (the owner is always exempt). Launch contracts
  are marked exempt so escrow, claims and liquidity moves keep working.
- Owner-gated mint, trading toggle, exemptions and ownership transfer.
- Integer base units only; balances never go negative.
- `dump()` / `load()` give a plain-dict snapshot used by `Ledger.tx()` to roll
  back a failed call.

Public interface
----------------
name / symbol / decimals / total_supply / balance_of(addr) / allowance(owner, spender)
transfer(caller, to, amount)
approve(caller, spender, amount)
transfer_from(caller, owner, to, amount)
mint(caller, to, amount)
burn(caller, amount)
set_trading_enabled(caller, enabled)
set_exempt(caller, addr, exempt)
transfer_ownership(caller, new_owner)
"""
from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Dict, Optional, Set, Tuple

from launchpad.errors import (InsufficientAllowance, InsufficientBalance, NotOwner,
                              SupplyCapExceeded, TokenError, TradingDisabled)
from launchpad.lptypes.address import ZERO_ADDRESS, Address, normalize_address

log = logging.getLogger(__name__)

UINT256_MAX = (1 << 256) - 1


def _require_amount(amount: int) -> int:
    if not isinstance(amount, int) or amount < 0 or amount > UINT256_MAX:
        raise TokenError("amount must be a uint256", details={"amount": amount})
    return amount


class FungibleToken:
    def __init__(
        self,
        address: Address,
        *,
        name: str,
        symbol: str,
        owner: Address,
        decimals: int = 18,
        max_supply: Optional[int] = None,
        trading_enabled: bool = True,
        description: str = "",
    ) -> None:
        self.address = normalize_address(address)
        self.name = name
        self.symbol = symbol
        self.decimals = int(decimals)
        self.description = description
        self.max_supply = max_supply
        self.owner = normalize_address(owner)
        self.trading_enabled = bool(trading_enabled)
        self.total_supply = 0
        self._balances: Dict[Address, int] = {}
        self._allowances: Dict[Tuple[Address, Address], int] = {}
        self._exempt: Set[Address] = set()
        self._lock = RLock()

    # --- views ---

    def balance_of(self, addr: Address) -> int:
        return self._balances.get(normalize_address(addr), 0)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def is_exempt(self, addr: Address) -> bool:
        a = normalize_address(addr)
        return a == self.owner or a in self._exempt

    # --- internals ---

    def _only_owner(self, caller: Address) -> None:
        if normalize_address(caller) != self.owner:
            raise NotOwner(caller=normalize_address(caller), owner=self.owner, details={"token": self.address})

    def _move(self, frm: Address, to: Address, amount: int) -> None:
        if not self.trading_enabled and not (self.is_exempt(frm) or self.is_exempt(to)):
            raise TradingDisabled("token trading is not enabled yet", details={"token": self.address, "from": frm, "to": to})
        have = self._balances.get(frm, 0)
        if have < amount:
            raise InsufficientBalance(token=self.address, account=frm, have=have, need=amount)
        self._balances[frm] = have - amount
        self._balances[to] = self._balances.get(to, 0) + amount

    # --- mutations ---

    def transfer(self, caller: Address, to: Address, amount: int) -> bool:
        amount = _require_amount(amount)
        frm, dst = normalize_address(caller), normalize_address(to)
        with self._lock:
            self._move(frm, dst, amount)
        return True

    def approve(self, caller: Address, spender: Address, amount: int) -> bool:
        amount = _require_amount(amount)
        with self._lock:
            self._allowances[(normalize_address(caller), normalize_address(spender))] = amount
        return True

    def transfer_from(self, caller: Address, owner: Address, to: Address, amount: int) -> bool:
        amount = _require_amount(amount)
        spender, frm, dst = normalize_address(caller), normalize_address(owner), normalize_address(to)
        with self._lock:
            key = (frm, spender)
            allowed = self._allowances.get(key, 0)
            if allowed < amount:
                raise InsufficientAllowance(
                    "allowance too low",
                    details={"token": self.address, "owner": frm, "spender": spender, "have": allowed, "need": amount},
                )
            self._move(frm, dst, amount)
            if allowed != UINT256_MAX:
                self._allowances[key] = allowed - amount
        return True

    def mint(self, caller: Address, to: Address, amount: int) -> bool:
        amount = _require_amount(amount)
        with self._lock:
            self._only_owner(caller)
            new_supply = self.total_supply + amount
            if self.max_supply is not None and new_supply > self.max_supply:
                raise SupplyCapExceeded(
                    "mint would exceed max supply",
                    details={"token": self.address, "max_supply": self.max_supply, "requested": new_supply},
                )
            dst = normalize_address(to)
            self._balances[dst] = self._balances.get(dst, 0) + amount
            self.total_supply = new_supply
        return True

    def burn(self, caller: Address, amount: int) -> bool:
        amount = _require_amount(amount)
        frm = normalize_address(caller)
        with self._lock:
            have = self._balances.get(frm, 0)
            if have < amount:
                raise InsufficientBalance(token=self.address, account=frm, have=have, need=amount)
            self._balances[frm] = have - amount
            self.total_supply -= amount
        return True

    def set_trading_enabled(self, caller: Address, enabled: bool) -> None:
        with self._lock:
            self._only_owner(caller)
            self.trading_enabled = bool(enabled)
        log.info("token: %s trading_enabled=%s", self.symbol, self.trading_enabled)

    def set_exempt(self, caller: Address, addr: Address, exempt: bool = True) -> None:
        with self._lock:
            self._only_owner(caller)
            a = normalize_address(addr)
            if exempt:
                self._exempt.add(a)
            else:
                self._exempt.discard(a)

    def transfer_ownership(self, caller: Address, new_owner: Address) -> None:
        with self._lock:
            self._only_owner(caller)
            self.owner = normalize_address(new_owner)

    def renounce_ownership(self, caller: Address) -> None:
        self.transfer_ownership(caller, ZERO_ADDRESS)

    # --- snapshots ---

    def dump(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "owner": self.owner,
                "trading_enabled": self.trading_enabled,
                "total_supply": self.total_supply,
                "balances": dict(self._balances),
                "allowances": dict(self._allowances),
                "exempt": set(self._exempt),
            }

    def load(self, state: Dict[str, Any]) -> None:
        with self._lock:
            self.owner = state["owner"]
            self.trading_enabled = state["trading_enabled"]
            self.total_supply = state["total_supply"]
            self._balances = dict(state["balances"])
            self._allowances = dict(state["allowances"])
            self._exempt = set(state["exempt"])

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"FungibleToken({self.symbol}@{self.address}, supply={self.total_supply})"


__all__ = ["FungibleToken", "UINT256_MAX"]

"""
Liquidity deployment collaborator.

`LiquidityDeployer.deploy_liquidity(token, quote_token, token_amount,
quote_amount) -> position_ref` is called by finalize after the giveaway has
moved both amounts to `deployer.address`. Any exception aborts finalize.

`PoolRegistry` is a minimal in-process deployer that records one position per
call at the initial price `quote_amount / token_amount`.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from fractions import Fraction
from typing import Any, Dict, List, Protocol, runtime_checkable

from launchpad.ledger.factory import Ledger
from launchpad.lptypes.address import Address, normalize_address

log = logging.getLogger(__name__)


@runtime_checkable
class LiquidityDeployer(Protocol):
    address: Address

    def deploy_liquidity(self, token: Address, quote_token: Address, token_amount: int, quote_amount: int) -> str:
        ...


@dataclass(frozen=True)
class LiquidityPosition:
    ref: str
    token: Address
    quote_token: Address
    token_amount: int
    quote_amount: int

    @property
    def initial_price(self) -> Fraction:
        """Quote units per token unit."""
        if self.token_amount == 0:
            return Fraction(0)
        return Fraction(self.quote_amount, self.token_amount)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        p = self.initial_price
        d["initial_price"] = f"{p.numerator}/{p.denominator}"
        return d


class PoolRegistry:
    def __init__(self, ledger: Ledger, address: Address) -> None:
        self.ledger = ledger
        self.address = normalize_address(address)
        self.positions: List[LiquidityPosition] = []

    def deploy_liquidity(self, token: Address, quote_token: Address, token_amount: int, quote_amount: int) -> str:
        tok, quote = normalize_address(token), normalize_address(quote_token)
        if token_amount <= 0 or quote_amount <= 0:
            raise ValueError("both sides of the pool must be funded")
        if self.ledger.balance_of(tok, self.address) < token_amount:
            raise ValueError("token side not received")
        if self.ledger.balance_of(quote, self.address) < quote_amount:
            raise ValueError("quote side not received")
        ref = f"pool:{tok}:{quote}:{len(self.positions)}"
        pos = LiquidityPosition(ref=ref, token=tok, quote_token=quote, token_amount=token_amount, quote_amount=quote_amount)
        self.positions.append(pos)
        log.info("dex: position %s price=%s", ref, pos.initial_price)
        return ref

    def position(self, ref: str) -> LiquidityPosition:
        for p in self.positions:
            if p.ref == ref:
                return p
        raise KeyError(ref)


__all__ = ["LiquidityDeployer", "LiquidityPosition", "PoolRegistry"]

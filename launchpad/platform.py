"""
Launch platform
===============

One call creates a project token and opens its giveaway:

    launch_project(caller, token_params, giveaway_params, value)

1. charge the fixed creation fee (`value` of the native asset, paid to the
   platform fee recipient; at least `fees.token_creation_fee`)
2. deploy the token with the platform as interim owner, trading paused unless
   `enable_trading_immediately`
3. exempt the giveaway from the trading gate and escrow
   `tokens_for_giveaway` into a new offering owned by the caller
4. hand the remaining supply and token ownership to the caller

The whole sequence runs inside one ledger/store transaction: if any step
fails nothing is left behind (no token, no offering, no fee).
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from launchpad.config import LaunchpadConfig
from launchpad.errors import InsufficientFee, PolicyError, ZeroAmount
from launchpad.giveaway.service import GiveawayService
from launchpad.ledger.factory import Ledger, TokenFactory
from launchpad.lptypes.address import Address, normalize_address

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenParams:
    name: str
    symbol: str
    initial_supply: int
    max_supply: Optional[int] = None
    description: str = ""

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "TokenParams":
        ms = d.get("max_supply")
        return TokenParams(
            name=str(d["name"]),
            symbol=str(d["symbol"]),
            initial_supply=int(d["initial_supply"]),
            max_supply=int(ms) if ms is not None else None,
            description=str(d.get("description", "")),
        )


@dataclass(frozen=True)
class GiveawayParams:
    start_time: int
    end_time: int
    max_allocation: int
    tokens_for_giveaway: int
    dev_percentage: int
    liquidity_percentage: int
    enable_trading_immediately: bool = False

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "GiveawayParams":
        return GiveawayParams(
            start_time=int(d["start_time"]),
            end_time=int(d["end_time"]),
            max_allocation=int(d["max_allocation"]),
            tokens_for_giveaway=int(d["tokens_for_giveaway"]),
            dev_percentage=int(d["dev_percentage"]),
            liquidity_percentage=int(d["liquidity_percentage"]),
            enable_trading_immediately=bool(d.get("enable_trading_immediately", False)),
        )


@dataclass(frozen=True)
class LaunchResult:
    token: Address
    offering_id: int
    owner: Address
    fee_paid: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class LaunchPlatform:
    def __init__(
        self,
        *,
        address: Address,
        ledger: Ledger,
        factory: TokenFactory,
        giveaway: GiveawayService,
        native_token: Address,
        config: Optional[LaunchpadConfig] = None,
    ) -> None:
        self.address = normalize_address(address)
        self.ledger = ledger
        self.factory = factory
        self.giveaway = giveaway
        self.native_token = normalize_address(native_token)
        self.config = config or giveaway.config
        self._launches: List[LaunchResult] = []

    @property
    def creation_fee(self) -> int:
        return self.config.fees.token_creation_fee

    def launch_project(
        self,
        caller: Address,
        token_params: Union[TokenParams, Mapping[str, Any]],
        giveaway_params: Union[GiveawayParams, Mapping[str, Any]],
        value: int,
    ) -> LaunchResult:
        owner = normalize_address(caller)
        tp = token_params if isinstance(token_params, TokenParams) else TokenParams.from_dict(token_params)
        gp = giveaway_params if isinstance(giveaway_params, GiveawayParams) else GiveawayParams.from_dict(giveaway_params)

        if value < self.creation_fee:
            raise InsufficientFee("creation fee not covered", details={"value": value, "required": self.creation_fee})
        if tp.initial_supply <= 0:
            raise ZeroAmount("initial_supply must be positive", details={"field": "initial_supply"})
        if gp.tokens_for_giveaway > tp.initial_supply:
            raise PolicyError(
                "tokens_for_giveaway exceeds initial supply",
                details={"tokens_for_giveaway": gp.tokens_for_giveaway, "initial_supply": tp.initial_supply},
            )

        svc = self.giveaway
        with self.ledger.tx(), svc.store.tx(), svc.events.tx():
            self.ledger.payout(self.native_token, owner, self.config.fees.fee_recipient, value)
            token = self.factory.create_token(
                self.address,
                name=tp.name,
                symbol=tp.symbol,
                initial_supply=tp.initial_supply,
                max_supply=tp.max_supply,
                description=tp.description,
                trading_enabled=gp.enable_trading_immediately,
                owner=self.address,
            )
            token.set_exempt(self.address, svc.address, True)
            token.approve(self.address, svc.address, gp.tokens_for_giveaway)
            oid = svc.create(
                self.address,
                token=token.address,
                start_time=gp.start_time,
                end_time=gp.end_time,
                max_allocation=gp.max_allocation,
                total_tokens_for_sale=gp.tokens_for_giveaway,
                dev_percentage=gp.dev_percentage,
                liquidity_percentage=gp.liquidity_percentage,
                owner=owner,
            )
            token.transfer(self.address, owner, token.balance_of(self.address))
            token.transfer_ownership(self.address, owner)
            result = LaunchResult(token=token.address, offering_id=oid, owner=owner, fee_paid=value)

        self._launches.append(result)
        log.info("platform: launched %s (%s) offering=%s owner=%s fee=%d",
                 tp.symbol, result.token, oid, owner, value)
        return result

    def launches(self) -> List[LaunchResult]:
        return list(self._launches)

    def launches_of(self, owner: Address) -> List[LaunchResult]:
        a = normalize_address(owner)
        return [r for r in self._launches if r.owner == a]


__all__ = ["TokenParams", "GiveawayParams", "LaunchResult", "LaunchPlatform"]

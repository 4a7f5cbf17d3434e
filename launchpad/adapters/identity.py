"""
Identity gate.

The giveaway only ever asks one question: `is_verified(address) -> bool`.
How an address becomes verified (passport proof, nullifier derivation) is
owned by an external verifier. `NullifierRegistry` is the in-process record
it writes into: one nullifier binds exactly one address, so a single human
cannot register a second wallet.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Dict, Optional, Protocol, runtime_checkable

from launchpad.errors import NullifierAlreadyUsed
from launchpad.lptypes.address import Address, normalize_address

log = logging.getLogger(__name__)


@runtime_checkable
class IdentityGate(Protocol):
    def is_verified(self, address: Address) -> bool:
        ...

    def identity_tag(self, address: Address) -> str:
        ...


@dataclass(frozen=True)
class Verification:
    address: Address
    nullifier: int
    user_identifier: int
    verified: bool = True


class NullifierRegistry:
    def __init__(self) -> None:
        self._by_address: Dict[Address, Verification] = {}
        self._by_nullifier: Dict[int, Address] = {}
        self._lock = RLock()

    def register_verification(self, address: Address, nullifier: int, user_identifier: int) -> Verification:
        addr = normalize_address(address)
        with self._lock:
            bound = self._by_nullifier.get(nullifier)
            if bound is not None and bound != addr:
                raise NullifierAlreadyUsed(
                    "nullifier already bound to another address",
                    details={"nullifier": hex(nullifier), "bound_to": bound},
                )
            v = Verification(address=addr, nullifier=nullifier, user_identifier=user_identifier)
            prev = self._by_address.get(addr)
            if prev is not None and prev.nullifier != nullifier:
                self._by_nullifier.pop(prev.nullifier, None)
            self._by_address[addr] = v
            self._by_nullifier[nullifier] = addr
        log.info("identity: verified %s", addr)
        return v

    def revoke(self, address: Address) -> None:
        addr = normalize_address(address)
        with self._lock:
            v = self._by_address.pop(addr, None)
            if v is not None:
                self._by_nullifier.pop(v.nullifier, None)

    def get_verification(self, address: Address) -> Optional[Verification]:
        return self._by_address.get(normalize_address(address))

    def is_verified(self, address: Address) -> bool:
        v = self.get_verification(address)
        return bool(v and v.verified)

    def identity_tag(self, address: Address) -> str:
        v = self.get_verification(address)
        return hex(v.user_identifier) if v else ""


__all__ = ["IdentityGate", "Verification", "NullifierRegistry"]

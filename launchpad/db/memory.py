"""In-memory OfferingStore with snapshot/rollback transactions."""
from __future__ import annotations

import contextlib
import copy
from threading import RLock
from typing import Any, Dict, Iterator, List, Optional

from launchpad.errors import AlreadyDeposited, OfferingNotFound
from launchpad.lptypes.address import Address, normalize_address
from launchpad.lptypes.offering import Offering, Participant

from .base import bit_position


class MemoryOfferingStore:
    """
    Records are copied on the way in and out, so callers must `put_offering`
    after mutating an Offering, exactly as with a persistent backend.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._depth = 0
        self._state: Dict[str, Any] = {
            "next_id": 1,
            "offerings": {},        # id -> Offering
            "participants": {},     # id -> {address: Participant}
            "order": {},            # id -> [address, ...]
            "claimed": {},          # id -> {word: int}
        }

    # --- offerings ---

    def next_offering_id(self) -> int:
        with self._lock:
            oid = self._state["next_id"]
            self._state["next_id"] = oid + 1
            return oid

    def put_offering(self, offering: Offering) -> None:
        with self._lock:
            self._state["offerings"][offering.offering_id] = copy.deepcopy(offering)

    def get_offering(self, offering_id: int) -> Offering:
        with self._lock:
            try:
                return copy.deepcopy(self._state["offerings"][offering_id])
            except KeyError:
                raise OfferingNotFound(offering_id) from None

    def offering_ids(self) -> List[int]:
        with self._lock:
            return sorted(self._state["offerings"])

    # --- participants ---

    def add_participant(self, offering_id: int, participant: Participant) -> None:
        addr = normalize_address(participant.address)
        with self._lock:
            by_addr = self._state["participants"].setdefault(offering_id, {})
            if addr in by_addr:
                raise AlreadyDeposited("address already deposited", details={"offering_id": offering_id, "address": addr})
            by_addr[addr] = copy.deepcopy(participant)
            self._state["order"].setdefault(offering_id, []).append(addr)

    def get_participant(self, offering_id: int, address: Address) -> Optional[Participant]:
        with self._lock:
            p = self._state["participants"].get(offering_id, {}).get(normalize_address(address))
            return copy.deepcopy(p) if p is not None else None

    def participants(self, offering_id: int) -> List[Participant]:
        with self._lock:
            by_addr = self._state["participants"].get(offering_id, {})
            return [copy.deepcopy(by_addr[a]) for a in self._state["order"].get(offering_id, [])]

    # --- claimed bitmap ---

    def is_claimed(self, offering_id: int, index: int) -> bool:
        word, bit = bit_position(index)
        with self._lock:
            w = self._state["claimed"].get(offering_id, {}).get(word, 0)
            return bool((w >> bit) & 1)

    def set_claimed(self, offering_id: int, index: int) -> None:
        word, bit = bit_position(index)
        with self._lock:
            words = self._state["claimed"].setdefault(offering_id, {})
            words[word] = words.get(word, 0) | (1 << bit)

    # --- transactions ---

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
            saved = copy.deepcopy(self._state)
            self._depth = 1
            try:
                yield
            except BaseException:
                self._state = saved
                raise
            finally:
                self._depth = 0


__all__ = ["MemoryOfferingStore"]

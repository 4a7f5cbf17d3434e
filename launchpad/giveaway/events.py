"""
Event log for the giveaway service.

Events are appended during a call and dropped again if the call aborts, so
the log only ever shows effects that actually happened.
"""
from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Dict, Iterator, List, Optional

OFFERING_CREATED = "OfferingCreated"
OFFERING_CANCELLED = "OfferingCancelled"
DEPOSITED = "Deposited"
FINALIZED = "Finalized"
LIQUIDITY_DEPLOYED = "LiquidityDeployed"
DEV_TOKENS_CLAIMED = "DevTokensClaimed"
LIQUIDITY_TOKENS_CLAIMED = "LiquidityTokensClaimed"
MERKLE_ROOT_SET = "MerkleRootSet"
CLAIMED = "Claimed"
CLAIM_SKIPPED = "ClaimSkipped"


@dataclass(frozen=True)
class Event:
    seq: int
    name: str
    offering_id: int
    args: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"seq": self.seq, "name": self.name, "offering_id": self.offering_id, "args": dict(self.args)}


class EventLog:
    def __init__(self) -> None:
        self._events: List[Event] = []
        self._lock = RLock()

    def emit(self, name: str, offering_id: int, **args: Any) -> Event:
        with self._lock:
            ev = Event(seq=len(self._events), name=name, offering_id=offering_id, args=args)
            self._events.append(ev)
            return ev

    def events(self, name: Optional[str] = None, offering_id: Optional[int] = None) -> List[Event]:
        with self._lock:
            return [
                e for e in self._events
                if (name is None or e.name == name) and (offering_id is None or e.offering_id == offering_id)
            ]

    def __len__(self) -> int:
        return len(self._events)

    @contextlib.contextmanager
    def tx(self) -> Iterator[None]:
        with self._lock:
            mark = len(self._events)
            try:
                yield
            except BaseException:
                del self._events[mark:]
                raise


__all__ = [
    "Event",
    "EventLog",
    "OFFERING_CREATED",
    "OFFERING_CANCELLED",
    "DEPOSITED",
    "FINALIZED",
    "LIQUIDITY_DEPLOYED",
    "DEV_TOKENS_CLAIMED",
    "LIQUIDITY_TOKENS_CLAIMED",
    "MERKLE_ROOT_SET",
    "CLAIMED",
    "CLAIM_SKIPPED",
]

"""
Offering store interface.

The giveaway service keeps no ambient state: every offering, participant
record and claimed bit lives behind an `OfferingStore` injected at
construction. Implementations must make `tx()` all-or-nothing and allow
nested `tx()` blocks (inner blocks join or savepoint the outer one).

Claimed indices are kept as a bitmap of 256-bit words keyed by
`index // 256`, bit `index % 256`. Bits are only ever set.
"""
from __future__ import annotations

from typing import ContextManager, List, Optional, Protocol, Tuple

from launchpad.lptypes.address import Address
from launchpad.lptypes.offering import Offering, Participant

WORD_BITS = 256


def bit_position(index: int) -> Tuple[int, int]:
    if index < 0:
        raise ValueError("claim index must be non-negative")
    return index // WORD_BITS, index % WORD_BITS


class OfferingStore(Protocol):
    def next_offering_id(self) -> int: ...

    def put_offering(self, offering: Offering) -> None: ...

    def get_offering(self, offering_id: int) -> Offering: ...

    def offering_ids(self) -> List[int]: ...

    def add_participant(self, offering_id: int, participant: Participant) -> None: ...

    def get_participant(self, offering_id: int, address: Address) -> Optional[Participant]: ...

    def participants(self, offering_id: int) -> List[Participant]: ...

    def is_claimed(self, offering_id: int, index: int) -> bool: ...

    def set_claimed(self, offering_id: int, index: int) -> None: ...

    def tx(self) -> ContextManager[None]: ...


__all__ = ["WORD_BITS", "bit_position", "OfferingStore"]

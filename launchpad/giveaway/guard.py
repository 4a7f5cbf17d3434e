"""
Call-depth guard for state-mutating entry points.

Other threads block on the underlying lock until the current call returns;
a nested entry from the same thread (a collaborator calling back into the
service mid-call) raises ReentrancyError instead of observing intermediate
state.
"""
from __future__ import annotations

import contextlib
import threading
from typing import Iterator

from launchpad.errors import ReentrancyError


class ReentrancyGuard:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entered = False
        self._entry = ""

    @property
    def entered(self) -> bool:
        return self._entered

    @contextlib.contextmanager
    def enter(self, name: str = "") -> Iterator[None]:
        with self._lock:
            if self._entered:
                raise ReentrancyError(
                    "reentrant call",
                    details={"entry": name, "active": self._entry},
                )
            self._entered = True
            self._entry = name
            try:
                yield
            finally:
                self._entered = False
                self._entry = ""


__all__ = ["ReentrancyGuard"]

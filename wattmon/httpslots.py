"""Bounded pool of concurrent HTTP request reservations."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_LIMIT_MS = 900_000


@dataclass
class _Slot:
    start: int
    request_id: int


class RequestSlots:
    """Reserves request slots, each identified by the time it was taken."""

    def __init__(self, capacity: int, clock: Optional[Callable[[], int]] = None):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.clock = clock or (lambda: int(time.monotonic() * 1000))
        self._slots: list[Optional[_Slot]] = [None] * capacity
        self.lock: int = 0

    @property
    def free(self) -> int:
        """Number of unreserved slots."""
        return sum(1 for slot in self._slots if slot is None)

    def reserve(self, request_id: int, lock: bool = False) -> Optional[int]:
        """Take a slot and return its token, or None if none can be given."""
        if self.lock:
            return None
        for index, slot in enumerate(self._slots):
            if slot is None:
                token = self.clock()
                self._slots[index] = _Slot(token, request_id)
                if lock:
                    self.lock = token
                return token
        return None

    def release(self, token: int) -> None:
        """Free every slot held under ``token`` and clear a matching lock."""
        for index, slot in enumerate(self._slots):
            if slot is not None and slot.start == token:
                self._slots[index] = None
                if token == self.lock:
                    self.lock = 0

    def expired(self, limit_ms: int = DEFAULT_LIMIT_MS) -> list[int]:
        """Return the ids of requests held longer than ``limit_ms``."""
        now = self.clock()
        return [
            slot.request_id
            for slot in self._slots
            if slot is not None and now - slot.start > limit_ms
        ]
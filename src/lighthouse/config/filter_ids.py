"""Process-wide unique filter identifier allocation.

Brief:
  FilterIdAllocator hands out strictly increasing integer identifiers for
  filter entries. The counter starts at the current Unix time so freshly
  assigned ids stay clear of ranges persisted by earlier installs, and is
  then pushed past every id observed in the loaded configuration.

Notes:
  - Identifier 0 belongs to the synthesized user-rules filter and is never
    returned.
  - next() is guarded by a private lock so concurrent "add filter" calls
    never share an id, independently of the configuration lock.
"""

from __future__ import annotations

import threading
import time
from typing import Iterable, Optional

from .models import FilterEntry


class FilterIdAllocator:
    """Brief: Atomic monotonically increasing id counter.

    Inputs:
      - start: Optional first value; defaults to int(time.time()). Must be >= 1.

    Example:
      >>> ids = FilterIdAllocator(start=10)
      >>> ids.seed([FilterEntry(id=42)])
      >>> ids.next()
      43
    """

    def __init__(self, start: Optional[int] = None) -> None:
        if start is None:
            start = int(time.time())
        start = int(start)
        if start < 1:
            raise ValueError("filter id counter must start at 1 or above")
        self._next = start
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        """Brief: Value the next call to next() would return."""

        with self._lock:
            return self._next

    def seed(self, entries: Iterable[FilterEntry]) -> None:
        """Brief: Advance the counter past every id present in entries.

        Inputs:
          - entries: Filter entries whose ids must never be handed out again.

        Outputs:
          - None; the counter never decreases.
        """

        with self._lock:
            for entry in entries:
                if entry.id >= self._next:
                    self._next = entry.id + 1

    def next(self) -> int:
        """Brief: Return a fresh identifier and advance the counter."""

        with self._lock:
            value = self._next
            self._next += 1
            return value

"""Reader/writer lock guarding the shared Configuration.

Brief:
  Many readers may hold the lock at once; a writer holds it alone. Waiting
  writers block new readers so a stream of reads cannot starve a save or a
  filter add. The lock is not reentrant in either mode.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """Brief: Condition-variable based shared/exclusive lock.

    Example:
      >>> lock = ReadWriteLock()
      >>> with lock.read_locked():
      ...     pass
      >>> with lock.write_locked():
      ...     pass
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() called without a read lock held")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without the write lock held")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Brief: Hold the lock in shared mode for the duration of the block."""

        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Brief: Hold the lock in exclusive mode for the duration of the block."""

        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

"""Mutual exclusion shared by configuration loads and writes."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class MutationLock:
    """Single lock with a blocking and a non-blocking entry point.

    Loads wait for the lock with ``hold()``; writes use ``try_acquire()``
    and give up immediately when a load or another write holds it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @contextmanager
    def hold(self) -> Iterator[None]:
        self._lock.acquire()
        try:
            yield
        finally:
            self._lock.release()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()

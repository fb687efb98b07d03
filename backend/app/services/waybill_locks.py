"""
Per-waybill mutual exclusion for entry processing inside one worker process.
"""
from __future__ import annotations

from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator


class WaybillLocks:
    """Hands out one lock per waybill; idle locks are dropped on release."""

    def __init__(self):
        self._guard = Lock()
        self._locks: Dict[str, Lock] = {}
        self._holders: Dict[str, int] = {}

    @contextmanager
    def hold(self, waybill_no: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(waybill_no, Lock())
            self._holders[waybill_no] = self._holders.get(waybill_no, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._holders[waybill_no] -= 1
                if self._holders[waybill_no] == 0:
                    del self._holders[waybill_no]
                    del self._locks[waybill_no]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

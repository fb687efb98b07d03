"""
Tests for the per-waybill lock registry.
"""
import threading
import time

from app.services.waybill_locks import WaybillLocks


def test_locks_released_after_use():
    locks = WaybillLocks()
    with locks.hold("W1"):
        with locks.hold("W2"):
            assert len(locks) == 2
    assert len(locks) == 0


def test_same_waybill_is_serialized():
    locks = WaybillLocks()
    active = []
    overlaps = []

    def worker():
        with locks.hold("W1"):
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []
    assert len(locks) == 0

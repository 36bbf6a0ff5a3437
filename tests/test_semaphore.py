import threading
import time

import pytest

from qpdlkit.semaphore import CountingSemaphore


def test_default_counter_is_one():
    assert CountingSemaphore().counter == 1


def test_acquire_and_release_change_counter():
    sem = CountingSemaphore(3)
    assert sem.acquire() is sem
    assert sem.counter == 2
    sem.release().release()
    assert sem.counter == 4


def test_negative_counter_rejected():
    with pytest.raises(ValueError):
        CountingSemaphore(-1)


def test_acquire_blocks_until_release():
    sem = CountingSemaphore(0)
    done = threading.Event()

    def worker():
        sem.acquire()
        done.set()

    t = threading.Thread(target=worker)
    t.start()
    time.sleep(0.05)
    assert not done.is_set()
    sem.release()
    t.join(timeout=2)
    assert done.is_set()
    assert sem.counter == 0


def test_lock_excludes_other_threads():
    sem = CountingSemaphore()
    sem.lock()
    assert sem._lock.locked()
    got_it = threading.Event()

    def worker():
        sem.lock()
        got_it.set()
        sem.unlock()

    t = threading.Thread(target=worker)
    t.start()
    time.sleep(0.05)
    assert not got_it.is_set()
    sem.unlock()
    t.join(timeout=2)
    assert got_it.is_set()
    assert not sem._lock.locked()
    assert sem.counter == 1


def test_context_manager_locks_and_unlocks():
    sem = CountingSemaphore()
    with sem as inner:
        assert inner is sem
        assert sem._lock.locked()
    assert not sem._lock.locked()


def test_counter_consistent_under_concurrency():
    sem = CountingSemaphore(0)
    threads = [threading.Thread(target=sem.release) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=2)
    assert sem.counter == 20
    for _ in range(20):
        sem.acquire()
    assert sem.counter == 0
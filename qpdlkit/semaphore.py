"""A counting semaphore that can also be used as a plain mutex."""

from __future__ import annotations

import threading


class CountingSemaphore:
    """Counting semaphore sharing its internal mutex with lock/unlock."""

    def __init__(self, counter: int = 1) -> None:
        if counter < 0:
            raise ValueError("semaphore counter cannot be negative")
        self._counter = counter
        self._lock = threading.Lock()
        self._cond = threading.Condition(self._lock)

    @property
    def counter(self) -> int:
        """Current value of the internal counter."""
        return self._counter

    def lock(self) -> None:
        """Use the semaphore as a mutex and lock it."""
        self._lock.acquire()

    def unlock(self) -> None:
        """Unlock the mutex taken with :meth:`lock`."""
        self._lock.release()

    def __enter__(self) -> "CountingSemaphore":
        self.lock()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unlock()

    def acquire(self) -> "CountingSemaphore":
        """Decrement the counter, waiting while it is zero."""
        with self._cond:
            self._cond.wait_for(lambda: self._counter > 0)
            self._counter -= 1
        return self

    def release(self) -> "CountingSemaphore":
        """Increment the counter and wake a waiter."""
        with self._cond:
            self._counter += 1
            self._cond.notify()
        return self
"""
Single-batch admission control.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ReadWriteLock:
    """
    Many readers or one writer. Waiting writers block new readers.

    Not bound to a thread: a writer acquired on the request thread may be
    released by the batch thread.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._condition:
            while self._writer or self._writers_waiting:
                self._condition.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._condition:
            if self._readers <= 0:
                raise RuntimeError("release_read() called without a matching acquire_read()")
            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        with self._condition:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._condition:
            if not self._writer:
                raise RuntimeError("release_write() called without a matching acquire_write()")
            self._writer = False
            self._condition.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()


class JobAdmissionGate:
    """
    Idle -> Running -> Idle.

    `try_admit()` never blocks on a running batch: it flips a flag under a
    short lock and reports whether the caller won. The winner then holds the
    read/write lock exclusively until `release()`, so `wait_until_idle()`
    blocks for the remainder of the run.
    """

    def __init__(self) -> None:
        self._flag_lock = threading.Lock()
        self._running = False
        self._run_lock = ReadWriteLock()

    @property
    def running(self) -> bool:
        with self._flag_lock:
            return self._running

    def try_admit(self) -> bool:
        with self._flag_lock:
            if self._running:
                return False
            self._running = True
        self._run_lock.acquire_write()
        return True

    def release(self) -> None:
        with self._flag_lock:
            if not self._running:
                raise RuntimeError("release() called on an idle admission gate")
            self._running = False
        self._run_lock.release_write()

    def wait_until_idle(self) -> None:
        with self._run_lock.read_locked():
            return

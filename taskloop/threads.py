"""Thread primitives: scoped lock holder, reader/writer lock, workers and groups."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol


class _Lockable(Protocol):
    def acquire(self, *args: Any, **kwargs: Any) -> bool: ...

    def release(self) -> None: ...


class ScopedLockHolder:
    """Holds at most one lock and releases it when the scope ends."""

    def __init__(self) -> None:
        self._lock: _Lockable | None = None

    def set_and_lock(self, lock: _Lockable | None) -> None:
        """Release any held lock, then acquire and hold ``lock``."""
        if lock is None:
            return
        if self._lock is not None:
            self._lock.release()
        self._lock = lock
        self._lock.acquire()

    def reset_and_unlock(self) -> None:
        """Release the held lock, if any."""
        if self._lock is None:
            return
        self._lock.release()
        self._lock = None

    def is_locked(self) -> bool:
        return self._lock is not None

    def __enter__(self) -> ScopedLockHolder:
        return self

    def __exit__(self, *args: object) -> None:
        self.reset_and_unlock()


class RWLock:
    """A reader/writer lock: many readers or one writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._readers = 0
        self._writing = False

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock."""
        return self._readers

    @property
    def writing(self) -> bool:
        """Whether a writer currently holds the lock."""
        return self._writing

    def rdlock(self) -> None:
        with self._cond:
            self._cond.wait_for(lambda: not self._writing)
            self._readers += 1

    def wrlock(self) -> None:
        with self._cond:
            self._cond.wait_for(lambda: not self._writing and self._readers == 0)
            self._writing = True

    def unlock(self) -> None:
        with self._cond:
            if self._writing:
                self._writing = False
            elif self._readers > 0:
                self._readers -= 1
            else:
                raise RuntimeError("unlock of an RWLock that is not held")
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[RWLock]:
        self.rdlock()
        try:
            yield self
        finally:
            self.unlock()

    @contextmanager
    def write_locked(self) -> Iterator[RWLock]:
        self.wrlock()
        try:
            yield self
        finally:
            self.unlock()


class Worker:
    """A named thread that runs one callable and supports wait/signal."""

    def __init__(self, name: str = "worker", joinable: bool = True) -> None:
        self.name = name
        self.joinable = joinable
        self._cond = threading.Condition()
        self._thread: threading.Thread | None = None
        self._alive = False
        self._complete = False

    def start(self, target: Callable[[], Any]) -> None:
        """Run ``target`` on a new thread; does nothing if already running."""
        with self._cond:
            if self._alive:
                return
        self._thread = threading.Thread(
            target=self._run,
            args=(target,),
            name=self.name,
            daemon=not self.joinable,
        )
        self._thread.start()

    def _run(self, target: Callable[[], Any]) -> None:
        with self._cond:
            self._alive = True
            self._cond.notify_all()
        try:
            target()
        finally:
            with self._cond:
                self._alive = False
                self._cond.notify_all()

    def join(self) -> None:
        """Wait for a joinable worker to finish."""
        if self._thread is None or not self.joinable:
            return
        self._thread.join()
        self._thread = None
        with self._cond:
            self._cond.wait_for(lambda: not self._alive)

    def cond_wait(self, timeout: float | None = None) -> bool:
        """Wait for a signal while alive; return whether one arrived in time."""
        with self._cond:
            if not self._alive:
                return False
            return self._cond.wait(timeout)

    def cond_signal(self) -> None:
        with self._cond:
            if self._alive:
                self._cond.notify()

    def finalize(self) -> None:
        """Mark the worker as about to finish."""
        self._complete = True

    def is_alive(self) -> bool:
        return self._alive

    def is_final(self) -> bool:
        return self._complete

    def ident(self) -> int | None:
        """Identifier of the running thread, or None when not started or joined."""
        return self._thread.ident if self._thread is not None else None


class ThreadGroup:
    """An ordered set of workers that can be driven and joined together."""

    def __init__(self) -> None:
        self._workers: list[Worker] = []

    def add(self, worker: Worker) -> None:
        if worker not in self._workers:
            self._workers.append(worker)

    def __getitem__(self, index: int) -> Worker:
        return self._workers[index]

    def __len__(self) -> int:
        return len(self._workers)

    def __iter__(self) -> Iterator[Worker]:
        return iter(list(self._workers))

    def join_all(self) -> None:
        """Finalize and join every worker, newest first, emptying the group."""
        while self._workers:
            worker = self._workers.pop()
            worker.finalize()
            worker.join()

    def exec_all(self, callback: Callable[[Worker], Any]) -> None:
        for worker in list(self._workers):
            callback(worker)

    def contains_thread(self, ident: int | None) -> bool:
        return any(worker.ident() == ident for worker in self._workers)
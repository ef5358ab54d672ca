"""Timer events, a time-ordered container of them, and a manager that runs them."""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from typing import Any

from taskloop.task_queue import CondChecker, FetchFailure

logger = logging.getLogger(__name__)

_FETCH_ALL = 0xFFFFFFFF


@dataclass(eq=False)
class TimeEvent:
    """A callback due at ``timestamp``; persistent events repeat every ``interval``."""

    callback: Callable[[], Any]
    interval: float
    start_time: float
    timestamp: float
    persist: bool = False
    last_exec_time: float = 0

    def fire(self) -> Any:
        return self.callback()


def _guard(locked: bool) -> AbstractContextManager[Any]:
    return threading.RLock() if locked else nullcontext()


class TimerContainer:
    """A min-heap of time events ordered by timestamp, ties in insertion order."""

    def __init__(self, locked: bool = False) -> None:
        self.locked = locked
        self._lock = _guard(locked)
        self._heap: list[tuple[float, int, TimeEvent]] = []
        self._seq = itertools.count()

    def push(self, event: TimeEvent) -> None:
        with self._lock:
            heapq.heappush(self._heap, (event.timestamp, next(self._seq), event))

    def fetch(
        self, count: int, checker: CondChecker[TimeEvent]
    ) -> tuple[list[TimeEvent], int]:
        """Remove up to ``count`` earliest events that pass ``checker``.

        Returns the fetched events and the number held before the fetch.
        Events skipped under FetchFailure.CONTINUE stay in the container.
        """
        if checker is None:
            raise ValueError("a condition checker is required")
        with self._lock:
            if not self._heap or count == 0:
                return [], 0
            total = len(self._heap)
            fetched: list[TimeEvent] = []
            skipped: list[tuple[float, int, TimeEvent]] = []
            while self._heap:
                entry = self._heap[0]
                if not checker.accepts(entry[2]):
                    if checker.failed_op is FetchFailure.CONTINUE:
                        skipped.append(heapq.heappop(self._heap))
                        continue
                    break
                heapq.heappop(self._heap)
                fetched.append(entry[2])
                if len(fetched) >= count:
                    break
            for entry in skipped:
                heapq.heappush(self._heap, entry)
            return fetched, total

    def empty(self) -> bool:
        with self._lock:
            return not self._heap

    def size(self) -> int:
        with self._lock:
            return len(self._heap)

    def clear(self) -> None:
        with self._lock:
            self._heap.clear()


class TimerManager:
    """Schedules callbacks against a cached clock and runs those that are due."""

    def __init__(
        self, locked: bool = False, clock: Callable[[], float] = time.time
    ) -> None:
        self.locked = locked
        self._lock = _guard(locked)
        self._clock = clock
        self._heap = TimerContainer(locked=False)
        self._cached: float | None = None

    def register_timer(
        self,
        interval: float,
        callback: Callable[[], Any],
        persist: bool = False,
        start_time: float | None = None,
    ) -> TimeEvent:
        """Schedule ``callback`` at ``start_time + interval`` (start defaults to now)."""
        with self._lock:
            start = start_time if start_time else self._now()
            event = TimeEvent(
                callback=callback,
                interval=interval,
                start_time=start,
                timestamp=start + interval,
                persist=persist,
            )
            self._heap.push(event)
            return event

    def run_due(self) -> int:
        """Fire every event due at the cached time; return how many fired."""
        with self._lock:
            now = self._now()
            checker = CondChecker(lambda event: now >= event.timestamp, FetchFailure.BREAK)
            events, _ = self._heap.fetch(_FETCH_ALL, checker)
            for event in events:
                try:
                    event.fire()
                except Exception:
                    logger.exception("timer callback failed")
                if event.persist:
                    event.last_exec_time = now
                    event.timestamp = now + event.interval
                    self._heap.push(event)
            return len(events)

    def clear(self) -> None:
        with self._lock:
            self._heap.clear()

    def cached_time(self) -> float:
        """The cached clock reading, taken now if none is cached yet."""
        with self._lock:
            return self._cached_time()

    def flush_time(self) -> None:
        """Refresh the cached clock reading."""
        with self._lock:
            self._cached = self._clock()

    def size(self) -> int:
        with self._lock:
            return self._heap.size()

    def _cached_time(self) -> float:
        if not self._cached:
            self._cached = self._clock()
        return self._cached

    def _now(self) -> int:
        return int(self._cached_time())
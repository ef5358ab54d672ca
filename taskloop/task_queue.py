"""Priority task queues and the fetch-condition types shared by task containers."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")

Task = Callable[[], Any]


class TaskPriority(IntEnum):
    """Priority level of a queued task."""

    LOW = 0
    NORMAL = 1
    HIGH = 2


class FetchFailure(Enum):
    """What a fetch does when an element fails its condition."""

    BREAK = "break"
    RETURN = "return"
    CONTINUE = "continue"


@dataclass(frozen=True)
class CondChecker(Generic[T]):
    """A condition that elements must meet to be fetched, and the action on failure."""

    condition: Callable[[T], bool] | None = None
    failed_op: FetchFailure = FetchFailure.BREAK

    def accepts(self, element: T) -> bool:
        """Whether ``element`` passes the condition; no condition accepts everything."""
        return self.condition is None or bool(self.condition(element))


def _guard(locked: bool) -> AbstractContextManager[Any]:
    return threading.RLock() if locked else nullcontext()


class TaskQueue:
    """FIFO queues of callables, one per priority, optionally guarded by a lock."""

    def __init__(self, locked: bool = False) -> None:
        self.locked = locked
        self._lock = _guard(locked)
        self._queues: dict[TaskPriority, deque[Task]] = {
            priority: deque() for priority in TaskPriority
        }

    def push(self, task: Task, priority: TaskPriority = TaskPriority.NORMAL) -> None:
        """Append ``task`` to the queue of ``priority``."""
        with self._lock:
            self._queues[TaskPriority(priority)].append(task)

    def fetch(
        self,
        count: int | None = None,
        priority: TaskPriority = TaskPriority.NORMAL,
    ) -> tuple[list[Task], int]:
        """Remove up to ``count`` oldest tasks (all when None).

        Returns the fetched tasks and the number queued before the fetch.
        """
        if count is not None and count < 0:
            raise ValueError("count must not be negative")
        with self._lock:
            queue = self._queues[TaskPriority(priority)]
            total = len(queue)
            if count is None or count > total:
                tasks = list(queue)
                queue.clear()
            else:
                tasks = [queue.popleft() for _ in range(count)]
            return tasks, total

    def empty(self, priority: TaskPriority = TaskPriority.NORMAL) -> bool:
        with self._lock:
            return not self._queues[TaskPriority(priority)]

    def clear(self, priority: TaskPriority = TaskPriority.NORMAL) -> None:
        with self._lock:
            self._queues[TaskPriority(priority)].clear()

    def clear_all(self) -> None:
        with self._lock:
            for queue in self._queues.values():
                queue.clear()

    def size(self, priority: TaskPriority = TaskPriority.NORMAL) -> int:
        with self._lock:
            return len(self._queues[TaskPriority(priority)])
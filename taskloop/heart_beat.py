"""Heart-beat tracking: elements that expire when not refreshed in time."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from taskloop.heart_beat_list import HeartBeatList, HeartBeatNode

logger = logging.getLogger(__name__)

DEFAULT_TICKS = 8

E = TypeVar("E", bound=Hashable)


@dataclass
class ElementData(Generic[E]):
    """An element and the time it was last seen."""

    element: E
    time: float


class HeartBeatElementManager(Generic[E]):
    """Keeps elements ordered by last activity and expires or evicts the oldest.

    The expiry callback is handed each element that times out or is evicted
    because the size limit was reached. The element is already removed when
    the callback runs.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._nodes: dict[E, HeartBeatNode[ElementData[E]]] = {}
        self._busy: HeartBeatList[ElementData[E]] = HeartBeatList()
        self._callback: Callable[[E], Any] | None = None
        self._timeout_enabled = False
        self._timeout: float = 0
        self._max_limit_enabled = False
        self._max_limit = 0

    def set_callback(self, callback: Callable[[E], Any] | None) -> None:
        self._callback = callback

    def set_timeout(self, enabled: bool, timeout: float) -> None:
        """Expire elements idle for at least ``timeout`` seconds when enabled."""
        self._timeout_enabled = enabled
        self._timeout = timeout

    def set_max_limit(self, enabled: bool, max_limit: int) -> None:
        """Evict the oldest element when an add would exceed ``max_limit``."""
        self._max_limit_enabled = enabled
        self._max_limit = max_limit

    def handle_timeout(self) -> int:
        """Expire idle elements, oldest first; return how many expired."""
        if not self._timeout_enabled:
            return 0
        now = self._clock()
        expired = 0
        while (node := self._busy.back()) is not None:
            if now < node.data.time + self._timeout:
                break
            self._busy.pop_back()
            del self._nodes[node.data.element]
            expired += 1
            self._notify(node.data.element)
        return expired

    def add(self, element: E) -> None:
        """Start tracking ``element``; raises ValueError if it is already tracked."""
        if element in self._nodes:
            raise ValueError(f"element already tracked: {element!r}")
        if self._max_limit_enabled and len(self._nodes) + 1 > self._max_limit:
            oldest = self._busy.pop_back()
            if oldest is not None:
                del self._nodes[oldest.data.element]
                self._notify(oldest.data.element)
        node = HeartBeatNode(ElementData(element, self._clock()))
        self._nodes[element] = node
        self._busy.push_front(node)

    def update(self, element: E) -> None:
        """Mark ``element`` as active now; raises KeyError if it is not tracked."""
        node = self._nodes[element]
        self._busy.erase(node)
        node.data.time = self._clock()
        self._busy.push_front(node)

    def remove(self, element: E) -> None:
        """Stop tracking ``element``; raises KeyError if it is not tracked."""
        node = self._nodes[element]
        self._busy.erase(node)
        del self._nodes[element]

    def clear(self) -> None:
        """Forget every element without calling the callback."""
        while self._busy.pop_front() is not None:
            pass
        self._nodes.clear()

    def drain(self) -> list[E]:
        """Remove every element and return them, most recently active first."""
        elements: list[E] = []
        while (node := self._busy.pop_front()) is not None:
            elements.append(node.data.element)
        self._nodes.clear()
        return elements

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, element: object) -> bool:
        return element in self._nodes

    def _notify(self, element: E) -> None:
        if self._callback is None:
            logger.warning("no heart-beat callback set; dropping %r", element)
        else:
            self._callback(element)


class HeartBeatService(Generic[E]):
    """Runs a heart-beat element manager on a task service.

    Element operations are posted to the service, and expiry is checked every
    ``ticks`` seconds by a timer on it. Configuration must happen before start.
    """

    def __init__(self, ticks: float = DEFAULT_TICKS) -> None:
        self.ticks = ticks
        self._started = False
        self._service: Any = None
        self._manager: HeartBeatElementManager[E] = HeartBeatElementManager()

    @property
    def started(self) -> bool:
        return self._started

    @property
    def manager(self) -> HeartBeatElementManager[E]:
        return self._manager

    def initialize(self, service: Any) -> None:
        """Attach the task service that runs this heart-beat service."""
        self._require_stopped("initialize")
        self._service = service

    def set_callback(self, callback: Callable[[E], Any] | None) -> None:
        self._require_stopped("set the callback")
        self._manager.set_callback(callback)

    def set_timeout(self, enabled: bool, timeout: float) -> None:
        self._require_stopped("set the timeout")
        self._manager.set_timeout(enabled, timeout)

    def set_max_limit(self, enabled: bool, max_limit: int) -> None:
        self._require_stopped("set the max limit")
        self._manager.set_max_limit(enabled, max_limit)

    def start(self) -> None:
        """Begin periodic expiry checks; does nothing without a service."""
        if self._started:
            logger.warning("heart-beat service has already started")
            return
        if self._service is None:
            logger.warning("heart-beat service has no task service")
            return
        self._service.register_timer(self.ticks, self._handle_timeout)
        self._started = True

    def stop(self) -> None:
        """Post a task that clears every element and marks the service stopped."""
        if not self._started:
            logger.warning("heart-beat service has already stopped")
            return
        self._service.post(self._stop_service)

    def async_add(self, element: E) -> None:
        if self._service is not None:
            self._service.post(lambda: self._apply(self._manager.add, element))

    def async_update(self, element: E) -> None:
        if self._service is not None:
            self._service.post(lambda: self._apply(self._manager.update, element))

    def async_remove(self, element: E) -> None:
        if self._service is not None:
            self._service.post(lambda: self._apply(self._manager.remove, element))

    def _require_stopped(self, action: str) -> None:
        if self._started:
            raise RuntimeError(f"cannot {action} while the heart-beat service runs")

    def _stop_service(self) -> None:
        self._manager.clear()
        self._started = False

    def _handle_timeout(self) -> None:
        if self._started:
            self._service.register_timer(self.ticks, self._handle_timeout)
        self._manager.handle_timeout()

    @staticmethod
    def _apply(operation: Callable[[E], None], element: E) -> None:
        try:
            operation(element)
        except (KeyError, ValueError) as exc:
            logger.warning("heart-beat operation on %r failed: %s", element, exc)
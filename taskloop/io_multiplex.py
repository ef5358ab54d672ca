"""Readiness multiplexing of file descriptors with per-event callbacks."""

from __future__ import annotations

import logging
import math
import select
import threading
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Any, Protocol, Union

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 0.1

_ERROR_MASK = select.POLLERR | select.POLLHUP | select.POLLNVAL


class EventFlag(IntFlag):
    """Which events a registration covers."""

    READ = 0x01
    WRITE = 0x02
    ERROR = 0x04
    ALL = 0x07


class EventType(IntEnum):
    """The kind of event passed to a callback."""

    READ = 0xC8
    WRITE = 0xC9
    ERROR = 0xCA


EventCallback = Callable[[int, EventType, Any], Any]


class _HasFileno(Protocol):
    def fileno(self) -> int: ...


FileLike = Union[int, _HasFileno]


def _fileno(fd: FileLike) -> int:
    number = fd if isinstance(fd, int) else fd.fileno()
    if number < 0:
        raise ValueError(f"invalid file descriptor: {number}")
    return number


def _guard(locked: bool) -> AbstractContextManager[Any]:
    return threading.RLock() if locked else nullcontext()


@dataclass
class IoEvent:
    """Callbacks registered for one file descriptor."""

    fd: int | None = None
    read_cb: EventCallback | None = None
    read_arg: Any = None
    read_persist: bool = False
    write_cb: EventCallback | None = None
    write_arg: Any = None
    write_persist: bool = False
    error_cb: EventCallback | None = None
    error_arg: Any = None

    def clear(self) -> None:
        """Forget the descriptor and every callback."""
        self.fd = None
        self.read_cb = None
        self.read_arg = None
        self.read_persist = False
        self.write_cb = None
        self.write_arg = None
        self.write_persist = False
        self.error_cb = None
        self.error_arg = None


class IoMultiplexHandler:
    """Waits for readiness on registered descriptors and dispatches callbacks.

    Read and write registrations fire once unless registered as persistent;
    a descriptor with no remaining read or write interest is dropped.
    """

    def __init__(self, locked: bool = False) -> None:
        self.locked = locked
        self._lock = _guard(locked)
        self._poller = select.poll()
        self._events: dict[int, IoEvent] = {}
        self._masks: dict[int, int] = {}
        self._fds: set[int] = set()

    def wait(self, timeout: float | None = DEFAULT_TIMEOUT) -> int:
        """Wait up to ``timeout`` seconds, dispatch callbacks, return the event count."""
        with self._lock:
            if not self._fds:
                return 0
            millis = None if timeout is None else max(0, math.ceil(timeout * 1000))
            try:
                ready = self._poller.poll(millis)
            except OSError as exc:
                logger.warning("poll failed: %s", exc)
                return 0
            for fd, what in ready:
                event = self._events.get(fd)
                if event is None:
                    logger.warning("event for unknown file descriptor %d", fd)
                    continue
                if what & _ERROR_MASK:
                    self._dispatch_error(fd, what, event)
                else:
                    self._dispatch_ready(fd, what, event)
            return len(ready)

    def register(
        self,
        fd: FileLike,
        flags: EventFlag,
        callback: EventCallback | None,
        arg: Any = None,
        persist: bool = False,
    ) -> None:
        """Register ``callback`` for the events named in ``flags`` on ``fd``."""
        number = _fileno(fd)
        flags = EventFlag(flags)
        with self._lock:
            if callback is None:
                logger.warning("registering file descriptor %d with no callback", number)
            event = self._events.setdefault(number, IoEvent())
            event.fd = number
            mask = 0
            if flags & EventFlag.READ:
                mask |= select.POLLIN
                if event.write_cb is not None:
                    mask |= select.POLLOUT
            if flags & EventFlag.WRITE:
                mask |= select.POLLOUT
                if event.read_cb is not None:
                    mask |= select.POLLIN
            if flags & (EventFlag.READ | EventFlag.WRITE):
                self._poller.register(number, mask)
                self._masks[number] = mask
            if flags & EventFlag.READ:
                event.read_cb = callback
                event.read_arg = arg
                event.read_persist = persist
            if flags & EventFlag.WRITE:
                event.write_cb = callback
                event.write_arg = arg
                event.write_persist = persist
            if flags & EventFlag.ERROR:
                event.error_cb = callback
                event.error_arg = arg
            self._fds.add(number)

    def unregister(self, fd: FileLike) -> None:
        """Stop watching ``fd``; raises KeyError if it is not being polled."""
        number = _fileno(fd)
        with self._lock:
            self._unregister(number)

    def fd_count(self) -> int:
        """Number of descriptors with a registration."""
        with self._lock:
            return len(self._fds)

    def close(self) -> None:
        """Drop every registration."""
        with self._lock:
            for number in list(self._masks):
                self._poller.unregister(number)
            self._masks.clear()
            for event in self._events.values():
                event.clear()
            self._events.clear()
            self._fds.clear()

    def __enter__(self) -> IoMultiplexHandler:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _unregister(self, number: int) -> None:
        if number not in self._masks:
            raise KeyError(number)
        self._poller.unregister(number)
        del self._masks[number]
        event = self._events.pop(number, None)
        if event is not None:
            event.clear()
        self._fds.discard(number)

    def _modify(self, number: int, mask: int) -> None:
        try:
            self._poller.modify(number, mask)
        except (OSError, KeyError) as exc:
            logger.warning("cannot modify file descriptor %d: %s", number, exc)
            return
        self._masks[number] = mask

    def _drop(self, number: int) -> None:
        try:
            self._unregister(number)
        except (OSError, KeyError) as exc:
            logger.warning("cannot remove file descriptor %d: %s", number, exc)

    def _dispatch_error(self, fd: int, what: int, event: IoEvent) -> None:
        logger.warning("error or hang-up on file descriptor %d (events %#x)", fd, what)
        if event.error_cb is not None:
            event.error_cb(fd, EventType.ERROR, event.error_arg)

    def _dispatch_ready(self, fd: int, what: int, event: IoEvent) -> None:
        if what & select.POLLIN:
            callback, arg = event.read_cb, event.read_arg
            if event.fd is not None and not event.read_persist:
                if event.write_cb is not None:
                    self._modify(fd, select.POLLOUT)
                else:
                    self._drop(fd)
                event.read_cb = None
                event.read_arg = None
                event.read_persist = False
            if callback is not None:
                callback(fd, EventType.READ, arg)
        if what & select.POLLOUT:
            callback, arg = event.write_cb, event.write_arg
            if event.fd is not None and not event.write_persist:
                if event.read_cb is not None:
                    self._modify(fd, select.POLLIN)
                else:
                    self._drop(fd)
                event.write_cb = None
                event.write_arg = None
                event.write_persist = False
            if callback is not None:
                callback(fd, EventType.WRITE, arg)
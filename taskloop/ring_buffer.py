"""A fixed-capacity ring buffer and a queue built on it."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

T = TypeVar("T")

DEFAULT_CAPACITY = 1000 * 100


class RingBufferFull(Exception):
    """Raised when putting into a full ring buffer."""


class RingBufferEmpty(Exception):
    """Raised when getting from an empty ring buffer."""


class RingBuffer(Generic[T]):
    """A fixed-capacity FIFO ring of elements."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._buffer: list[Any] = [None] * capacity
        self._write = 0
        self._read = 0
        self._same_round = True

    def put(self, element: T) -> None:
        if not self.writable():
            raise RingBufferFull("ring buffer is full")
        self._buffer[self._write] = element
        if self._write + 1 == self.capacity:
            self._write = 0
            self._same_round = False
        else:
            self._write += 1

    def get(self) -> T:
        if not self.readable():
            raise RingBufferEmpty("ring buffer is empty")
        element = self._buffer[self._read]
        self._buffer[self._read] = None
        if self._read + 1 == self.capacity:
            self._read = 0
            self._same_round = True
        else:
            self._read += 1
        return element

    def writable(self) -> bool:
        if self._same_round:
            return self._write >= self._read
        return self._write < self._read

    def readable(self) -> bool:
        return not self._same_round or self._read < self._write

    def __len__(self) -> int:
        if self._same_round:
            return self._write - self._read
        return self.capacity - self._read + self._write

    def reset(self) -> None:
        self._buffer = [None] * self.capacity
        self._write = 0
        self._read = 0
        self._same_round = True


class FastMsgQueue(Generic[T]):
    """A FIFO message queue backed by a ring buffer."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._ring: RingBuffer[T] = RingBuffer(capacity)

    def push(self, element: T) -> None:
        """Append ``element``; raises RingBufferFull when there is no room."""
        self._ring.put(element)

    def pop(self) -> T | None:
        """Remove and return the oldest element, or None when empty."""
        if self.empty():
            return None
        return self._ring.get()

    def empty(self) -> bool:
        return not self._ring.readable()

    def __len__(self) -> int:
        return len(self._ring)

    def clear(self) -> None:
        self._ring.reset()
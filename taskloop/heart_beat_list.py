"""An intrusive doubly linked list used to order heart-beat entries by age."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(eq=False)
class HeartBeatNode(Generic[T]):
    """A list node carrying ``data`` and links to its neighbours."""

    data: T
    prev: Optional[HeartBeatNode[T]] = field(default=None, repr=False)
    next: Optional[HeartBeatNode[T]] = field(default=None, repr=False)


class HeartBeatList(Generic[T]):
    """A doubly linked list of caller-owned nodes with O(1) unlinking."""

    def __init__(self) -> None:
        self._head: HeartBeatNode[T] | None = None
        self._tail: HeartBeatNode[T] | None = None

    def push_front(self, node: HeartBeatNode[T]) -> None:
        """Link ``node`` in as the new head."""
        if node is None:
            raise ValueError("cannot push a missing node")
        node.prev = None
        node.next = None
        if self._head is None:
            self._head = self._tail = node
        else:
            node.next = self._head
            self._head.prev = node
            self._head = node

    def push_back(self, node: HeartBeatNode[T]) -> None:
        """Link ``node`` in as the new tail."""
        if node is None:
            raise ValueError("cannot push a missing node")
        node.prev = None
        node.next = None
        if self._tail is None:
            self._head = self._tail = node
        else:
            self._tail.next = node
            node.prev = self._tail
            self._tail = node

    def pop_front(self) -> HeartBeatNode[T] | None:
        """Unlink and return the head, or None when the list is empty."""
        node = self._head
        if node is None:
            return None
        if node is self._tail:
            self._head = self._tail = None
        else:
            self._head = node.next
            assert self._head is not None
            self._head.prev = None
            node.next = None
        return node

    def pop_back(self) -> HeartBeatNode[T] | None:
        """Unlink and return the tail, or None when the list is empty."""
        node = self._tail
        if node is None:
            return None
        if node is self._head:
            self._head = self._tail = None
        else:
            self._tail = node.prev
            assert self._tail is not None
            self._tail.next = None
            node.prev = None
        return node

    def front(self) -> HeartBeatNode[T] | None:
        return self._head

    def back(self) -> HeartBeatNode[T] | None:
        return self._tail

    def erase(self, node: HeartBeatNode[T]) -> None:
        """Unlink ``node``; raises ValueError if it is not linked into this list."""
        if node is None or self._head is None:
            raise ValueError("node is not in the list")
        prev, nxt = node.prev, node.next
        if prev is None and nxt is None:
            if not (self._head is node and self._tail is node):
                raise ValueError("node is not in the list")
            self._head = self._tail = None
        elif prev is None:
            if self._head is not node:
                raise ValueError("node is not in the list")
            assert nxt is not None
            self._head = nxt
            nxt.prev = None
            node.next = None
        elif nxt is None:
            if self._tail is not node:
                raise ValueError("node is not in the list")
            self._tail = prev
            prev.next = None
            node.prev = None
        else:
            prev.next = nxt
            nxt.prev = prev
            node.prev = None
            node.next = None

    def empty(self) -> bool:
        return self._head is None

    def __iter__(self) -> Iterator[Any]:
        """Yield the data of each node from front to back."""
        node = self._head
        while node is not None:
            yield node.data
            node = node.next
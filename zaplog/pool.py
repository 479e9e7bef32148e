"""A thread-safe pool of reusable objects."""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

__all__ = ["Pool"]

T = TypeVar("T")


class Pool(Generic[T]):
    """Hands out pooled objects, building new ones when the pool is empty."""

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._items: list[T] = []
        self._lock = threading.Lock()

    def get(self) -> T:
        """Take the most recently returned object, or build a new one."""
        with self._lock:
            if self._items:
                return self._items.pop()
        return self._factory()

    def put(self, x: T) -> None:
        """Return ``x`` to the pool for later reuse."""
        with self._lock:
            self._items.append(x)
"""Once-initialized, thread-safe lazy cell.

Holds a value computed on first access and reused for the life of the
process. Uses a Lock + double-check so that concurrent first callers,
whether asyncio tasks dispatched to worker threads or free-threaded
ASGI workers, run the factory exactly once.

A factory that raises leaves the cell empty; the next caller retries.
"""

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class OnceCell(Generic[T]):
    """A single slot filled at most once.

    Usage::

        cell: OnceCell[Callable[..., object]] = OnceCell()
        render = cell.get_or_init(lambda: import_render(path))
    """

    __slots__ = ("_lock", "_set", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._set = False
        self._value: T | None = None

    @property
    def is_set(self) -> bool:
        return self._set

    def get_or_init(self, factory: Callable[[], T]) -> T:
        """Return the stored value, computing it with *factory* if empty."""
        if self._set:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._set:
                self._value = factory()
                self._set = True
        return self._value  # type: ignore[return-value]

"""
fieldlog Scratch Pool

Thread-safe free list of reusable Fields instances for the stateless
logging functions.
"""

import threading
from typing import Callable, Generic, List, Optional, TypeVar

from .fields import Fields

T = TypeVar("T")


class ScratchPool(Generic[T]):
    """
    Pool of reusable scratch objects.

    ``get()`` hands out a previously returned instance when one is
    available and a fresh one otherwise. Returned instances are not
    guaranteed to be clean: callers must clear an instance before calling
    ``put()``, or stale keys leak into unrelated records.

    Attributes:
        max_size: Upper bound on retained instances (None for unbounded)
    """

    def __init__(self, factory: Callable[[], T], max_size: Optional[int] = None):
        """
        Initialize an empty pool.

        Args:
            factory: Callable creating a new instance when the pool is empty
            max_size: Maximum number of idle instances kept
        """
        self._factory = factory
        self._items: List[T] = []
        self._lock = threading.Lock()
        self.max_size = max_size

    def get(self) -> T:
        """Take an instance from the pool, creating one if it is empty."""
        with self._lock:
            if self._items:
                return self._items.pop()
        return self._factory()

    def put(self, item: T) -> None:
        """Return an instance to the pool; extra instances beyond max_size are dropped."""
        with self._lock:
            if self.max_size is None or len(self._items) < self.max_size:
                self._items.append(item)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


# Shared pool used by the stateless logging functions
fields_pool: ScratchPool[Fields] = ScratchPool(Fields, max_size=1024)

"""Process-local record store.

Notes
-----
- Values are deep-copied on the way in and out, so a caller holding a record
  cannot change stored state without going through ``insert``.
- For durable or replicated tiers use :class:`FileSystemRecordStore` or a
  host-provided implementation of :class:`RecordStore`.
"""

from __future__ import annotations

import copy
from threading import Lock
from typing import Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

V = TypeVar("V")


class InMemoryRecordStore(Generic[V]):
    def __init__(self, name: str = "records"):
        self.name = name
        self._lock = Lock()
        self._items: Dict[str, V] = {}

    def insert(self, key: str, value: V) -> None:
        with self._lock:
            self._items[key] = copy.deepcopy(value)

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            item = self._items.get(key)
            return None if item is None else copy.deepcopy(item)

    def entries(self) -> Iterable[Tuple[str, V]]:
        with self._lock:
            snapshot: List[Tuple[str, V]] = [(k, copy.deepcopy(v)) for k, v in self._items.items()]
        return snapshot

    def remove(self, key: str) -> bool:
        with self._lock:
            return self._items.pop(key, None) is not None

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __repr__(self) -> str:  # pragma: no cover
        return f"InMemoryRecordStore(name={self.name!r}, size={len(self)})"

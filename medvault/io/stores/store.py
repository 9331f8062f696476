from __future__ import annotations

from typing import Iterable, Optional, Protocol, Tuple, TypeVar

V = TypeVar("V")


class RecordStore(Protocol[V]):
    """RecordStore abstracts where keyed records live.

    A store maps string keys to record values and guarantees key uniqueness.
    It offers no transactions across instances: keeping two stores consistent
    (an artifact and its metadata entry) is the caller's job.

    Implementations must make every write visible to the next call before
    returning.
    """

    def insert(self, key: str, value: V) -> None:
        """Insert or replace the value stored under ``key``."""

    def get(self, key: str) -> Optional[V]:
        """Return the stored value, or None if absent."""

    def entries(self) -> Iterable[Tuple[str, V]]:
        """Enumerate all (key, value) pairs. Order is unspecified."""

    def remove(self, key: str) -> bool:
        """Remove ``key``. Returns False (not an error) when it was absent."""

    def contains(self, key: str) -> bool:
        """Return True if ``key`` is present."""

    def __len__(self) -> int:
        ...

"""Access bookkeeping for stored artifacts.

The tracker owns ``access_count``, ``last_accessed`` and ``tags`` of every
:class:`~medvault.contracts.records.FileMetadata` entry. No other component
writes those fields.

A counted access on an id without a metadata entry is governed by an explicit
policy instead of failing the surrounding download:

- ``"skip"``: log a warning and leave the metadata tier untouched.
- ``"recreate"``: create the missing entry lazily, already counting this access.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..contracts.choices import FileTypeName
from ..contracts.records import FileMetadata
from ..core.errors import RecordNotFoundError
from ..io.stores.store import RecordStore

logger = logging.getLogger(__name__)

METADATA_MISS_POLICIES = ("skip", "recreate")


class MetadataTracker:
    def __init__(self, store: RecordStore[FileMetadata], *, miss_policy: str = "skip"):
        if miss_policy not in METADATA_MISS_POLICIES:
            raise ValueError(f"Unknown metadata miss policy: {miss_policy!r}")
        self._store = store
        self.miss_policy = miss_policy

    @property
    def store(self) -> RecordStore[FileMetadata]:
        return self._store

    def create_entry(self, file_id: str, file_type: FileTypeName, *, now: int) -> FileMetadata:
        entry = FileMetadata(file_id=file_id, file_type=file_type, access_count=0, last_accessed=now, tags=[])
        self._store.insert(file_id, entry)
        return entry

    def record_access(self, file_id: str, file_type: FileTypeName, *, now: int) -> Optional[FileMetadata]:
        """Count one access: ``access_count += 1`` and ``last_accessed = now``.

        Returns the updated entry, or None when the entry was missing and the
        policy is ``"skip"``.
        """
        entry = self._store.get(file_id)
        if entry is None:
            if self.miss_policy == "recreate":
                logger.warning("Metadata for %s was missing; recreating it", file_id)
                entry = FileMetadata(file_id=file_id, file_type=file_type, access_count=1, last_accessed=now)
                self._store.insert(file_id, entry)
                return entry
            logger.warning("Metadata for %s is missing; access not counted", file_id)
            return None

        updated = entry.model_copy(update={"access_count": entry.access_count + 1, "last_accessed": now})
        self._store.insert(file_id, updated)
        return updated

    def get(self, file_id: str) -> Optional[FileMetadata]:
        return self._store.get(file_id)

    def all(self) -> List[FileMetadata]:
        return [entry for _, entry in self._store.entries()]

    def remove(self, file_id: str) -> bool:
        return self._store.remove(file_id)

    def add_tag(self, file_id: str, tag: str) -> FileMetadata:
        """Append ``tag`` unless already present (tags keep insertion order)."""
        clean = _clean_tag(tag)
        entry = self._require(file_id)
        if clean in entry.tags:
            return entry
        updated = entry.model_copy(update={"tags": [*entry.tags, clean]})
        self._store.insert(file_id, updated)
        return updated

    def remove_tag(self, file_id: str, tag: str) -> FileMetadata:
        """Drop ``tag`` if present. Removing an absent tag is a no-op."""
        clean = _clean_tag(tag)
        entry = self._require(file_id)
        if clean not in entry.tags:
            return entry
        updated = entry.model_copy(update={"tags": [t for t in entry.tags if t != clean]})
        self._store.insert(file_id, updated)
        return updated

    def _require(self, file_id: str) -> FileMetadata:
        entry = self._store.get(file_id)
        if entry is None:
            raise RecordNotFoundError(file_id)
        return entry


def _clean_tag(tag: str) -> str:
    clean = (tag or "").strip()
    if not clean:
        raise ValueError("Tag must be a non-empty string")
    return clean

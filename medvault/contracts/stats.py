from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class StoreStats:
    """Record counts per tier. ``str()`` gives the human-readable summary."""

    models: int
    scans: int

    @property
    def total(self) -> int:
        return self.models + self.scans

    def summary(self) -> str:
        return f"Total files: {self.total}, Models: {self.models}, Scans: {self.scans}"

    def __str__(self) -> str:
        return self.summary()


@dataclass
class ReconcileReport:
    """Outcome of a metadata/record convergence pass."""

    removed_orphan_metadata: List[str] = field(default_factory=list)
    recreated_metadata: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.removed_orphan_metadata or self.recreated_metadata)

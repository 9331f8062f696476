from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Generic, Iterable, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

R = TypeVar("R", bound=BaseModel)

_SUFFIX = ".record.json"
_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.\-]+$")


def _is_safe_key(key: str) -> bool:
    return bool(key) and not key.startswith(".") and _SAFE_KEY.match(key) is not None


class FileSystemRecordStore(Generic[R]):
    """Filesystem-based RecordStore for pydantic records.

    Layout:
      <base_dir>/
        <key>.record.json        # one JSON document per record

    Notes
    -----
    - Writes go to a temp file and are moved into place with ``os.replace``,
      so a reader sees either the old or the new document.
    - Keys must be filename-safe (letters, digits, ``_``, ``.``, ``-``; no
      leading dot). Lookups of other keys find nothing; inserting one raises.
    - Safe for a single writer process. Replication of the shared tier is the
      host's concern.
    """

    def __init__(self, base_dir: Path, record_type: Type[R]):
        self.base_dir = Path(base_dir).expanduser()
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.record_type = record_type

    def _path(self, key: str) -> Path:
        if not _is_safe_key(key):
            raise ValueError(f"Unsafe record key: {key!r}")
        return self.base_dir / f"{key}{_SUFFIX}"

    def insert(self, key: str, value: R) -> None:
        path = self._path(key)
        tmp_path = path.with_name(f".{path.name}.tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            f.write(value.model_dump_json())
        os.replace(tmp_path, path)

    def get(self, key: str) -> Optional[R]:
        # A key that cannot name a file cannot have been inserted.
        if not _is_safe_key(key):
            return None
        path = self._path(key)
        if not path.exists():
            return None
        return self._read(path)

    def _read(self, path: Path) -> R:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        try:
            return self.record_type.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Corrupt record file: {path}") from e

    def _keys(self) -> List[str]:
        return [p.name[: -len(_SUFFIX)] for p in self.base_dir.glob(f"*{_SUFFIX}") if not p.name.startswith(".")]

    def entries(self) -> Iterable[Tuple[str, R]]:
        out: List[Tuple[str, R]] = []
        for key in self._keys():
            path = self.base_dir / f"{key}{_SUFFIX}"
            # Removed between listing and reading.
            if not path.exists():
                continue
            out.append((key, self._read(path)))
        return out

    def remove(self, key: str) -> bool:
        if not _is_safe_key(key):
            return False
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def contains(self, key: str) -> bool:
        return _is_safe_key(key) and self._path(key).exists()

    def __len__(self) -> int:
        return len(self._keys())

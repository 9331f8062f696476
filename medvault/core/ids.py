from __future__ import annotations

import uuid
from typing import Callable, Optional


def make_id(prefix: str, timestamp: int, *, token: Optional[str] = None) -> str:
    """``<prefix>_<timestamp>_<token>``; token defaults to 8 random hex chars."""
    return f"{prefix}_{int(timestamp)}_{token or uuid.uuid4().hex[:8]}"


def new_id(
    prefix: str,
    timestamp: int,
    taken: Optional[Callable[[str], bool]] = None,
    *,
    max_attempts: int = 16,
) -> str:
    """Allocate a prefixed id that does not collide within one clock tick.

    ``taken`` lets the caller reject a candidate that already names a record;
    a fresh random token is drawn until a free id is found.
    """
    for _ in range(max_attempts):
        candidate = make_id(prefix, timestamp)
        if taken is None or not taken(candidate):
            return candidate
    raise RuntimeError(f"Could not allocate a unique '{prefix}' id after {max_attempts} attempts")


def id_prefix(record_id: str) -> str:
    """Return the type prefix of an id (``"model_17..._ab12cd34"`` -> ``"model"``)."""
    return record_id.split("_", 1)[0]

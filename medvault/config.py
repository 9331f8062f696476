"""Runtime settings read from the environment.

Defaults are script-friendly (in-memory tiers, 10 MiB / 50 MiB ceilings); the
backend and containers override them through ``MEDVAULT_*`` variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

MIB = 1024 * 1024
DEFAULT_MAX_MODEL_BYTES = 10 * MIB
DEFAULT_MAX_SCAN_BYTES = 50 * MIB

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _get_choice(env: Mapping[str, str], name: str, default: str, choices: tuple) -> str:
    raw = (env.get(name) or default).strip().lower()
    if raw not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}; got {raw!r}")
    return raw


@dataclass(frozen=True)
class Settings:
    storage: str = "memory"                      # "memory" | "filesystem"
    data_dir: Path = Path(".medvault/data")
    max_model_bytes: int = DEFAULT_MAX_MODEL_BYTES
    max_scan_bytes: int = DEFAULT_MAX_SCAN_BYTES
    metadata_miss_policy: str = "skip"           # "skip" | "recreate"
    enforce_private_models: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        level = (env.get("MEDVAULT_LOG_LEVEL") or "INFO").strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"MEDVAULT_LOG_LEVEL is not a logging level: {level!r}")

        return cls(
            storage=_get_choice(env, "MEDVAULT_STORAGE", "memory", ("memory", "filesystem")),
            data_dir=Path(env.get("MEDVAULT_DATA_DIR") or ".medvault/data").expanduser(),
            max_model_bytes=_get_int(env, "MEDVAULT_MAX_MODEL_BYTES", DEFAULT_MAX_MODEL_BYTES),
            max_scan_bytes=_get_int(env, "MEDVAULT_MAX_SCAN_BYTES", DEFAULT_MAX_SCAN_BYTES),
            metadata_miss_policy=_get_choice(env, "MEDVAULT_METADATA_MISS", "skip", ("skip", "recreate")),
            enforce_private_models=_get_bool(env, "MEDVAULT_ENFORCE_PRIVATE_MODELS", False),
            log_level=level,
        )

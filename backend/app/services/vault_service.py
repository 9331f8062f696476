"""Process-wide MedVault service for the HTTP layer.

Routers receive the service and the event log through FastAPI dependencies
(:func:`get_service`, :func:`get_event_log`) so tests can override both.

Notes
-----
- One service per process. With several workers, each holds its own
  in-memory tiers; use ``MEDVAULT_STORAGE=filesystem`` to share state on disk.
"""

from __future__ import annotations

from threading import Lock
from typing import Optional

from medvault.api import (
    FanOutEventSink,
    InMemoryEventSink,
    LoggingEventSink,
    MedicalFileService,
    Settings,
    build_service,
)

_lock = Lock()
_service: Optional[MedicalFileService] = None
_event_log = InMemoryEventSink(max_history=1000)


def get_settings() -> Settings:
    return Settings.from_env()


def get_event_log() -> InMemoryEventSink:
    return _event_log


def get_service() -> MedicalFileService:
    global _service
    with _lock:
        if _service is None:
            _service = build_service(
                get_settings(),
                events=FanOutEventSink([LoggingEventSink(), _event_log]),
            )
        return _service


def reset_service() -> None:
    """Drop the cached service (next call rebuilds it from the environment)."""
    global _service
    with _lock:
        _service = None
        _event_log.clear()

"""Public MedVault API.

This module is the **stable public surface** of the Business Layer.

Prefer importing from here instead of reaching into internal subpackages:

    from medvault.api import build_service, RecordNotFoundError

The backend and scripts may depend on this module (and on
:mod:`medvault.contracts`).
"""

from __future__ import annotations

from medvault.config import Settings
from medvault.core.clock import Clock, ManualClock, SystemClock
from medvault.core.errors import (
    FileTooLargeError,
    InvalidAnnotationError,
    InvalidFileTypeError,
    MedVaultError,
    RecordNotFoundError,
    UnauthorizedError,
)
from medvault.core.events import (
    EventEnvelope,
    EventSink,
    FanOutEventSink,
    InMemoryEventSink,
    LoggingEventSink,
    NullEventSink,
)
from medvault.io.serialization import decode_payload, encode_payload
from medvault.io.stores import FileSystemRecordStore, InMemoryRecordStore, RecordStore
from medvault.use_cases import AccessPolicy, MedicalFileService, MetadataTracker, SizeLimits, build_service

__all__ = [
    "Settings",
    "Clock",
    "ManualClock",
    "SystemClock",
    "FileTooLargeError",
    "InvalidAnnotationError",
    "InvalidFileTypeError",
    "MedVaultError",
    "RecordNotFoundError",
    "UnauthorizedError",
    "EventEnvelope",
    "EventSink",
    "FanOutEventSink",
    "InMemoryEventSink",
    "LoggingEventSink",
    "NullEventSink",
    "decode_payload",
    "encode_payload",
    "FileSystemRecordStore",
    "InMemoryRecordStore",
    "RecordStore",
    "AccessPolicy",
    "MedicalFileService",
    "MetadataTracker",
    "SizeLimits",
    "build_service",
]

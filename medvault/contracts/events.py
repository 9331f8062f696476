"""Typed change notifications.

Events are immutable and describe a state change that has already been
written to the record stores. Sinks decide delivery and fan-out.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Union


@dataclass(frozen=True)
class ModelUploaded:
    model_id: str
    name: str


@dataclass(frozen=True)
class ScanUploaded:
    scan_id: str
    patient_id: str


@dataclass(frozen=True)
class ModelDownloaded:
    model_id: str
    downloader: str


@dataclass(frozen=True)
class ScanDownloaded:
    scan_id: str
    downloader: str


@dataclass(frozen=True)
class AnnotationAdded:
    scan_id: str
    annotation_id: str


@dataclass(frozen=True)
class FileDeleted:
    file_id: str
    file_type: str


Event = Union[
    ModelUploaded,
    ScanUploaded,
    ModelDownloaded,
    ScanDownloaded,
    AnnotationAdded,
    FileDeleted,
]


def event_kind(event: Event) -> str:
    return type(event).__name__


def event_to_dict(event: Event) -> Dict[str, Any]:
    """``{"kind": "ModelUploaded", "data": {...}}`` (JSON friendly)."""
    return {"kind": event_kind(event), "data": asdict(event)}

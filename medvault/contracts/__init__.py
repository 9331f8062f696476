"""Shared contracts.

This package contains the Pydantic record models, event types, result types and
Literal-based choice types used across MedVault.

Export policy:
- Keep module imports explicit in most of the codebase:
    from medvault.contracts.records import ModelRecord
- The names re-exported here are a small set of convenience imports.
"""

from .choices import (
    BodyPartName,
    FILE_TYPES,
    FileTypeName,
    MetadataMissPolicyName,
    ModelTypeName,
    ScanTypeName,
    StorageBackendName,
)
from .events import (
    AnnotationAdded,
    Event,
    FileDeleted,
    ModelDownloaded,
    ModelUploaded,
    ScanDownloaded,
    ScanUploaded,
    event_kind,
    event_to_dict,
)
from .records import FileMetadata, ModelRecord, ScanRecord
from .stats import ReconcileReport, StoreStats

__all__ = [
    "BodyPartName",
    "FILE_TYPES",
    "FileTypeName",
    "MetadataMissPolicyName",
    "ModelTypeName",
    "ScanTypeName",
    "StorageBackendName",
    "AnnotationAdded",
    "Event",
    "FileDeleted",
    "ModelDownloaded",
    "ModelUploaded",
    "ScanDownloaded",
    "ScanUploaded",
    "event_kind",
    "event_to_dict",
    "FileMetadata",
    "ModelRecord",
    "ScanRecord",
    "ReconcileReport",
    "StoreStats",
]

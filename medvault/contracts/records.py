"""Persistent record types.

Models live on the shared tier, scans on the local tier, and every stored
artifact has exactly one :class:`FileMetadata` entry keyed by its id.
"""

import hashlib
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .choices import FileTypeName
from ..io.serialization import decode_payload


class _ArtifactRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", protected_namespaces=())

    id: str
    file_size: int = Field(ge=0)                 # decoded payload length in bytes
    payload: str                                 # base64 text, see medvault.io.serialization
    uploader: str
    created_at: int

    def payload_bytes(self) -> bytes:
        return decode_payload(self.payload)

    def sha256(self) -> str:
        return hashlib.sha256(self.payload_bytes()).hexdigest()


class ModelRecord(_ArtifactRecord):
    """A machine-learning model file on the shared tier."""

    name: str
    description: str
    model_type: str                              # e.g. "tumor_classifier", "segmentation"
    version: str
    is_public: bool = True


class ScanRecord(_ArtifactRecord):
    """An imaging scan on the local tier."""

    patient_id: str
    scan_type: str                               # e.g. "MRI", "CT", "PET"
    body_part: str                               # e.g. "brain", "chest"
    annotation_count: int = Field(default=0, ge=0)


class FileMetadata(BaseModel):
    """Access bookkeeping paired one-to-one with a model or scan record."""

    model_config = ConfigDict(extra="forbid")

    file_id: str
    file_type: FileTypeName
    access_count: int = Field(default=0, ge=0)
    last_accessed: int
    tags: List[str] = Field(default_factory=list)

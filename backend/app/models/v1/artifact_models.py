"""API models for model and scan artifacts.

Upload bodies carry the payload as base64 text in ``file_data`` (the form the
web client already produces). Field limits mirror the upload forms; the engine
itself keeps these fields free-form.

Summaries never include the payload. Use the ``/download`` endpoints for bytes.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from medvault.api import decode_payload
from medvault.contracts.choices import BodyPartName, ModelTypeName, ScanTypeName
from medvault.contracts.records import ModelRecord, ScanRecord

_NAME_PATTERN = r"^[A-Za-z0-9 _\-]+$"
_VERSION_PATTERN = r"^[A-Za-z0-9._\-]+$"


class _PayloadBody(BaseModel):
    file_data: str = Field(..., description="Payload bytes, base64 encoded")

    @field_validator("file_data")
    @classmethod
    def _check_base64(cls, v: str) -> str:
        decode_payload(v)  # ValueError -> 422
        return v

    def payload(self) -> bytes:
        return decode_payload(self.file_data)


class ModelUploadRequest(_PayloadBody):
    model_config = ConfigDict(protected_namespaces=())

    name: str = Field(..., min_length=3, max_length=100, pattern=_NAME_PATTERN)
    description: str = Field(..., min_length=10, max_length=500)
    model_type: ModelTypeName
    version: str = Field(..., min_length=1, max_length=20, pattern=_VERSION_PATTERN)
    uploader: str = Field(..., min_length=2, max_length=50, pattern=_NAME_PATTERN)
    is_public: bool = True


class ScanUploadRequest(_PayloadBody):
    patient_id: str = Field(..., min_length=1, max_length=100)
    scan_type: ScanTypeName
    body_part: BodyPartName
    uploader: str = Field(..., min_length=2, max_length=50, pattern=_NAME_PATTERN)


class UploadResponse(BaseModel):
    id: str


class ModelSummary(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    id: str
    name: str
    description: str
    model_type: str
    version: str
    file_size: int
    uploader: str
    created_at: int
    is_public: bool

    @classmethod
    def from_record(cls, record: ModelRecord) -> "ModelSummary":
        return cls(**record.model_dump(exclude={"payload"}))


class ScanSummary(BaseModel):
    id: str
    patient_id: str
    scan_type: str
    body_part: str
    file_size: int
    uploader: str
    created_at: int
    annotation_count: int

    @classmethod
    def from_record(cls, record: ScanRecord) -> "ScanSummary":
        return cls(**record.model_dump(exclude={"payload"}))


class AnnotationRequest(BaseModel):
    label: str = Field(default="", max_length=200)


class AnnotationResponse(BaseModel):
    annotation_id: str
    scan: ScanSummary


class ModelList(BaseModel):
    models: List[ModelSummary]


class ScanList(BaseModel):
    scans: List[ScanSummary]

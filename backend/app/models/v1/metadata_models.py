from typing import Any, Dict, List

from pydantic import BaseModel, Field

from medvault.contracts.records import FileMetadata


class TagRequest(BaseModel):
    tag: str = Field(..., min_length=1, max_length=64)


class MetadataList(BaseModel):
    metadata: List[FileMetadata]


class DeleteResponse(BaseModel):
    file_id: str
    file_type: str
    deleted: bool = True


class StatsResponse(BaseModel):
    total: int
    models: int
    scans: int
    summary: str


class EventsResponse(BaseModel):
    last_seq: int
    events: List[Dict[str, Any]]

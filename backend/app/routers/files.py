from fastapi import APIRouter, Depends, HTTPException

from medvault.api import MedicalFileService, RecordNotFoundError
from medvault.contracts.records import FileMetadata

from ..models.v1.metadata_models import DeleteResponse, MetadataList, StatsResponse, TagRequest
from ..services.vault_service import get_service

router = APIRouter()


@router.get("/metadata", response_model=MetadataList)
def all_metadata(service: MedicalFileService = Depends(get_service)):
    return MetadataList(metadata=service.get_all_metadata())


@router.get("/metadata/{file_id}", response_model=FileMetadata)
def file_metadata(file_id: str, service: MedicalFileService = Depends(get_service)):
    entry = service.get_file_metadata(file_id)
    if entry is None:
        raise RecordNotFoundError(file_id)
    return entry


@router.post("/metadata/{file_id}/tags", response_model=FileMetadata)
def add_tag(file_id: str, req: TagRequest, service: MedicalFileService = Depends(get_service)):
    try:
        return service.add_tag(file_id, req.tag)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/metadata/{file_id}/tags/{tag}", response_model=FileMetadata)
def remove_tag(file_id: str, tag: str, service: MedicalFileService = Depends(get_service)):
    try:
        return service.remove_tag(file_id, tag)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/files/{file_type}/{file_id}", response_model=DeleteResponse)
def delete_file(file_type: str, file_id: str, service: MedicalFileService = Depends(get_service)):
    service.delete_file(file_id, file_type)
    return DeleteResponse(file_id=file_id, file_type=file_type)


@router.get("/stats", response_model=StatsResponse)
def stats(service: MedicalFileService = Depends(get_service)):
    s = service.get_stats()
    return StatsResponse(total=s.total, models=s.models, scans=s.scans, summary=s.summary())

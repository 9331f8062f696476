from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from medvault.api import MedicalFileService, RecordNotFoundError

from ..models.v1.artifact_models import ModelList, ModelSummary, ModelUploadRequest, UploadResponse
from ..services.vault_service import get_service
from .downloads import payload_response

router = APIRouter()


@router.post("/models", response_model=UploadResponse, status_code=201, summary="Upload a model file")
def upload_model(req: ModelUploadRequest, service: MedicalFileService = Depends(get_service)):
    model_id = service.upload_model(
        name=req.name,
        description=req.description,
        model_type=req.model_type,
        version=req.version,
        payload=req.payload(),
        uploader=req.uploader,
        is_public=req.is_public,
    )
    return UploadResponse(id=model_id)


@router.get("/models", response_model=ModelList, summary="List all models, newest first")
def list_models(service: MedicalFileService = Depends(get_service)):
    return ModelList(models=[ModelSummary.from_record(m) for m in service.list_models()])


@router.get("/models/public", response_model=ModelList, summary="List public models")
def list_public_models(service: MedicalFileService = Depends(get_service)):
    return ModelList(models=[ModelSummary.from_record(m) for m in service.get_public_models()])


@router.get("/models/{model_id}", response_model=ModelSummary)
def get_model(model_id: str, service: MedicalFileService = Depends(get_service)):
    model = service.get_model(model_id)
    if model is None:
        raise RecordNotFoundError(model_id)
    return ModelSummary.from_record(model)


@router.get("/models/{model_id}/download", response_class=StreamingResponse, summary="Download model bytes")
def download_model(
    model_id: str,
    downloader: str = Query(..., min_length=1),
    service: MedicalFileService = Depends(get_service),
):
    """
    Returns the raw payload (Content-Disposition: attachment) and counts one
    access in the model's metadata.
    """
    model = service.download_model(model_id, downloader)
    return payload_response(model.payload_bytes(), filename=f"{model.name}-{model.version}.bin")

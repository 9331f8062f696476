from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from medvault.api import MedicalFileService, RecordNotFoundError

from ..models.v1.artifact_models import (
    AnnotationRequest,
    AnnotationResponse,
    ScanList,
    ScanSummary,
    ScanUploadRequest,
    UploadResponse,
)
from ..services.vault_service import get_service
from .downloads import payload_response

router = APIRouter()


@router.post("/scans", response_model=UploadResponse, status_code=201, summary="Upload a scan")
def upload_scan(req: ScanUploadRequest, service: MedicalFileService = Depends(get_service)):
    scan_id = service.upload_scan(
        patient_id=req.patient_id,
        scan_type=req.scan_type,
        body_part=req.body_part,
        payload=req.payload(),
        uploader=req.uploader,
    )
    return UploadResponse(id=scan_id)


@router.get("/scans", response_model=ScanList, summary="List scans, newest first")
def list_scans(service: MedicalFileService = Depends(get_service)):
    return ScanList(scans=[ScanSummary.from_record(s) for s in service.list_scans()])


@router.get("/patients/{patient_id}/scans", response_model=ScanList)
def scans_by_patient(patient_id: str, service: MedicalFileService = Depends(get_service)):
    return ScanList(scans=[ScanSummary.from_record(s) for s in service.get_scans_by_patient(patient_id)])


@router.get("/scans/{scan_id}", response_model=ScanSummary)
def get_scan(scan_id: str, service: MedicalFileService = Depends(get_service)):
    scan = service.get_scan(scan_id)
    if scan is None:
        raise RecordNotFoundError(scan_id)
    return ScanSummary.from_record(scan)


@router.get("/scans/{scan_id}/download", response_class=StreamingResponse, summary="Download scan bytes")
def download_scan(
    scan_id: str,
    downloader: str = Query(..., min_length=1),
    service: MedicalFileService = Depends(get_service),
):
    scan = service.download_scan(scan_id, downloader)
    return payload_response(scan.payload_bytes(), filename=f"{scan.id}.{scan.scan_type.lower()}")


@router.post("/scans/{scan_id}/annotations", response_model=AnnotationResponse, status_code=201)
def add_annotation(scan_id: str, req: AnnotationRequest, service: MedicalFileService = Depends(get_service)):
    annotation_id = service.add_annotation(scan_id, req.label)
    scan = service.get_scan(scan_id)
    # Deleted by a concurrent request after the annotation was counted.
    if scan is None:
        raise RecordNotFoundError(scan_id)
    return AnnotationResponse(annotation_id=annotation_id, scan=ScanSummary.from_record(scan))

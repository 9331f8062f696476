import pytest

from medvault.api import (
    InMemoryEventSink,
    InMemoryRecordStore,
    ManualClock,
    MedicalFileService,
)

START = 1_700_000_000_000_000_000


@pytest.fixture
def clock():
    return ManualClock(start=START)


@pytest.fixture
def events():
    return InMemoryEventSink()


@pytest.fixture
def stores():
    return {
        "models": InMemoryRecordStore("models"),
        "scans": InMemoryRecordStore("scans"),
        "metadata": InMemoryRecordStore("metadata"),
    }


@pytest.fixture
def service(stores, clock, events):
    return MedicalFileService(
        stores["models"],
        stores["scans"],
        stores["metadata"],
        clock=clock,
        events=events,
    )


@pytest.fixture
def upload_model(service):
    def _upload(payload=b"weights", *, name="Tumor net", is_public=True, uploader="alice"):
        return service.upload_model(
            name=name,
            description="A tumour classifier",
            model_type="tumor_classifier",
            version="1.0",
            payload=payload,
            uploader=uploader,
            is_public=is_public,
        )

    return _upload


@pytest.fixture
def upload_scan(service):
    def _upload(payload=b"dicom-bytes", *, patient_id="p-001"):
        return service.upload_scan(
            patient_id=patient_id,
            scan_type="MRI",
            body_part="brain",
            payload=payload,
            uploader="radiology",
        )

    return _upload

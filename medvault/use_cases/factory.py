from __future__ import annotations

from typing import Optional

from ..config import Settings
from ..contracts.records import FileMetadata, ModelRecord, ScanRecord
from ..core.clock import Clock, SystemClock
from ..core.events import EventSink, LoggingEventSink
from ..io.stores.filesystem_store import FileSystemRecordStore
from ..io.stores.memory_store import InMemoryRecordStore
from .file_service import MedicalFileService
from .policies import AccessPolicy, SizeLimits


def build_service(
    settings: Optional[Settings] = None,
    *,
    clock: Optional[Clock] = None,
    events: Optional[EventSink] = None,
) -> MedicalFileService:
    """Wire a :class:`MedicalFileService` from settings.

    Filesystem layout under ``settings.data_dir``:
      shared/models/    replicated tier
      local/scans/      instance-private tier
      local/metadata/   access metadata
    """
    settings = settings or Settings.from_env()

    if settings.storage == "filesystem":
        root = settings.data_dir
        models = FileSystemRecordStore(root / "shared" / "models", ModelRecord)
        scans = FileSystemRecordStore(root / "local" / "scans", ScanRecord)
        metadata = FileSystemRecordStore(root / "local" / "metadata", FileMetadata)
    else:
        models = InMemoryRecordStore[ModelRecord]("models")
        scans = InMemoryRecordStore[ScanRecord]("scans")
        metadata = InMemoryRecordStore[FileMetadata]("metadata")

    return MedicalFileService(
        models,
        scans,
        metadata,
        clock=clock or SystemClock(),
        events=events or LoggingEventSink(),
        limits=SizeLimits(settings.max_model_bytes, settings.max_scan_bytes),
        access_policy=AccessPolicy(enforce_private_models=settings.enforce_private_models),
        metadata_miss_policy=settings.metadata_miss_policy,
    )

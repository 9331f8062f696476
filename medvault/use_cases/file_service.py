"""Use-cases for model and scan artifacts.

:class:`MedicalFileService` orchestrates the three record stores:

- ``models``   shared tier (replicated by the host)
- ``scans``    local tier (instance-private)
- ``metadata`` one access-tracking entry per model or scan

Every operation validates first and mutates second, so a failed call leaves
all stores untouched. A record and its metadata entry are created and removed
as one unit: every operation, reads included, holds the service lock for its
whole duration, and a failure on the second write rolls back the first.

The service depends only on the :class:`~medvault.io.stores.store.RecordStore`,
:class:`~medvault.core.clock.Clock` and
:class:`~medvault.core.events.EventSink` protocols.
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional, TypeVar, Union

from ..contracts.choices import ANNOTATION_ID_PREFIX, FILE_TYPES, MODEL_ID_PREFIX, SCAN_ID_PREFIX, FileTypeName
from ..contracts.events import (
    AnnotationAdded,
    Event,
    FileDeleted,
    ModelDownloaded,
    ModelUploaded,
    ScanDownloaded,
    ScanUploaded,
)
from ..contracts.records import FileMetadata, ModelRecord, ScanRecord
from ..contracts.stats import ReconcileReport, StoreStats
from ..core.clock import Clock, SystemClock
from ..core.errors import FileTooLargeError, InvalidFileTypeError, RecordNotFoundError, UnauthorizedError
from ..core.events import EventSink, NullEventSink
from ..core.ids import new_id
from ..io.serialization import encode_payload
from ..io.stores.store import RecordStore
from .metadata_tracker import MetadataTracker
from .policies import AccessPolicy, SizeLimits

logger = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, memoryview]
ArtifactRecord = Union[ModelRecord, ScanRecord]
_R = TypeVar("_R", ModelRecord, ScanRecord)


def _payload_size(payload: Payload) -> int:
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise TypeError(f"payload must be bytes-like, got {type(payload).__name__}")
    return memoryview(payload).nbytes


class MedicalFileService:
    def __init__(
        self,
        models: RecordStore[ModelRecord],
        scans: RecordStore[ScanRecord],
        metadata: RecordStore[FileMetadata],
        *,
        clock: Optional[Clock] = None,
        events: Optional[EventSink] = None,
        limits: Optional[SizeLimits] = None,
        access_policy: Optional[AccessPolicy] = None,
        metadata_miss_policy: str = "skip",
    ):
        self._models = models
        self._scans = scans
        self.tracker = MetadataTracker(metadata, miss_policy=metadata_miss_policy)
        self._clock = clock or SystemClock()
        self._events = events or NullEventSink()
        self.limits = limits or SizeLimits()
        self.access_policy = access_policy or AccessPolicy()
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Models (shared tier)
    # ------------------------------------------------------------------

    def upload_model(
        self,
        name: str,
        description: str,
        model_type: str,
        version: str,
        payload: Payload,
        uploader: str,
        is_public: bool,
    ) -> str:
        size = _payload_size(payload)
        if size > self.limits.max_model_bytes:
            raise FileTooLargeError(size, self.limits.max_model_bytes)
        encoded = encode_payload(payload)

        with self._lock:
            now = self._clock.now()
            model_id = new_id(MODEL_ID_PREFIX, now, taken=self._id_taken(self._models))
            record = ModelRecord(
                id=model_id,
                name=name,
                description=description,
                model_type=model_type,
                version=version,
                file_size=encoded.size,
                payload=encoded.text,
                uploader=uploader,
                created_at=now,
                is_public=bool(is_public),
            )
            self._insert_paired(self._models, record, "model", now)
            logger.info("Uploaded model %s (%s, %d bytes) by %s", model_id, name, size, uploader)
            self._emit(ModelUploaded(model_id=model_id, name=name))
        return model_id

    def get_model(self, model_id: str) -> Optional[ModelRecord]:
        with self._lock:
            return self._models.get(model_id)

    def get_public_models(self) -> List[ModelRecord]:
        with self._lock:
            return [m for _, m in self._models.entries() if m.is_public]

    def list_models(self) -> List[ModelRecord]:
        """All models, newest first."""
        with self._lock:
            return _newest_first(m for _, m in self._models.entries())

    def download_model(self, model_id: str, downloader: str) -> ModelRecord:
        with self._lock:
            model = self._models.get(model_id)
            if model is None:
                raise RecordNotFoundError(model_id)
            if not self.access_policy.may_download_model(model, downloader):
                raise UnauthorizedError(model_id)

            self.tracker.record_access(model_id, "model", now=self._clock.now())
            self._emit(ModelDownloaded(model_id=model_id, downloader=downloader))
        return model

    # ------------------------------------------------------------------
    # Scans (local tier)
    # ------------------------------------------------------------------

    def upload_scan(
        self,
        patient_id: str,
        scan_type: str,
        body_part: str,
        payload: Payload,
        uploader: str,
    ) -> str:
        size = _payload_size(payload)
        if size > self.limits.max_scan_bytes:
            raise FileTooLargeError(size, self.limits.max_scan_bytes)
        encoded = encode_payload(payload)

        with self._lock:
            now = self._clock.now()
            scan_id = new_id(SCAN_ID_PREFIX, now, taken=self._id_taken(self._scans))
            record = ScanRecord(
                id=scan_id,
                patient_id=patient_id,
                scan_type=scan_type,
                body_part=body_part,
                file_size=encoded.size,
                payload=encoded.text,
                uploader=uploader,
                created_at=now,
                annotation_count=0,
            )
            self._insert_paired(self._scans, record, "scan", now)
            logger.info("Uploaded scan %s for patient %s (%d bytes)", scan_id, patient_id, size)
            self._emit(ScanUploaded(scan_id=scan_id, patient_id=patient_id))
        return scan_id

    def get_scan(self, scan_id: str) -> Optional[ScanRecord]:
        with self._lock:
            return self._scans.get(scan_id)

    def get_scans_by_patient(self, patient_id: str) -> List[ScanRecord]:
        with self._lock:
            return [s for _, s in self._scans.entries() if s.patient_id == patient_id]

    def list_scans(self) -> List[ScanRecord]:
        """All scans, newest first."""
        with self._lock:
            return _newest_first(s for _, s in self._scans.entries())

    def download_scan(self, scan_id: str, downloader: str) -> ScanRecord:
        with self._lock:
            scan = self._scans.get(scan_id)
            if scan is None:
                raise RecordNotFoundError(scan_id)

            self.tracker.record_access(scan_id, "scan", now=self._clock.now())
            self._emit(ScanDownloaded(scan_id=scan_id, downloader=downloader))
        return scan

    def add_annotation(self, scan_id: str, label: str) -> str:
        """Count an annotation on a scan.

        Only ``annotation_count`` is stored; the label itself is not persisted.
        """
        with self._lock:
            scan = self._scans.get(scan_id)
            if scan is None:
                raise RecordNotFoundError(scan_id)

            annotation_id = new_id(ANNOTATION_ID_PREFIX, self._clock.now())
            self._scans.insert(scan_id, scan.model_copy(update={"annotation_count": scan.annotation_count + 1}))
            logger.debug("Annotation %s (%r) added to %s", annotation_id, label, scan_id)
            self._emit(AnnotationAdded(scan_id=scan_id, annotation_id=annotation_id))
        return annotation_id

    # ------------------------------------------------------------------
    # Metadata, deletion, stats
    # ------------------------------------------------------------------

    def get_file_metadata(self, file_id: str) -> Optional[FileMetadata]:
        with self._lock:
            return self.tracker.get(file_id)

    def get_all_metadata(self) -> List[FileMetadata]:
        with self._lock:
            return self.tracker.all()

    def add_tag(self, file_id: str, tag: str) -> FileMetadata:
        with self._lock:
            return self.tracker.add_tag(file_id, tag)

    def remove_tag(self, file_id: str, tag: str) -> FileMetadata:
        with self._lock:
            return self.tracker.remove_tag(file_id, tag)

    def delete_file(self, file_id: str, file_type: str) -> None:
        """Remove a record and its metadata entry together.

        A missing record is tolerated. The metadata entry is removed only when
        it describes a record of ``file_type``, so deleting with the wrong type
        can never strip the metadata of a record in the other tier.
        """
        if file_type not in FILE_TYPES:
            raise InvalidFileTypeError(file_type)

        with self._lock:
            tier = self._tier(file_type)
            record = tier.get(file_id)
            entry = self.tracker.get(file_id)

            if record is not None:
                tier.remove(file_id)

            if entry is not None and entry.file_type == file_type:
                try:
                    self.tracker.remove(file_id)
                except Exception:
                    if record is not None:
                        tier.insert(file_id, record)
                    raise
            elif entry is not None:
                logger.warning(
                    "Kept metadata for %s: it describes a %s, not a %s",
                    file_id,
                    entry.file_type,
                    file_type,
                )

            logger.info("Deleted %s %s (record present: %s)", file_type, file_id, record is not None)
            self._emit(FileDeleted(file_id=file_id, file_type=file_type))

    def get_stats(self) -> StoreStats:
        with self._lock:
            return StoreStats(models=len(self._models), scans=len(self._scans))

    def reconcile(self) -> ReconcileReport:
        """Bring the metadata tier back in line with the two record tiers.

        Drops metadata entries with no matching record and recreates missing
        ones (``access_count = 0``). Needed only for durable tiers that were
        written by a process which died between the two writes.
        """
        report = ReconcileReport()
        with self._lock:
            owners: Dict[str, FileTypeName] = {k: "model" for k, _ in self._models.entries()}
            owners.update({k: "scan" for k, _ in self._scans.entries()})

            for entry in self.tracker.all():
                if owners.get(entry.file_id) != entry.file_type:
                    self.tracker.remove(entry.file_id)
                    report.removed_orphan_metadata.append(entry.file_id)

            now = self._clock.now()
            for file_id, file_type in owners.items():
                if self.tracker.get(file_id) is None:
                    self.tracker.create_entry(file_id, file_type, now=now)
                    report.recreated_metadata.append(file_id)

        if report.changed:
            logger.warning(
                "Reconciled metadata: removed %d orphan(s), recreated %d",
                len(report.removed_orphan_metadata),
                len(report.recreated_metadata),
            )
        return report

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _tier(self, file_type: str) -> RecordStore:
        return self._models if file_type == "model" else self._scans

    def _id_taken(self, tier: RecordStore) -> Callable[[str], bool]:
        def taken(candidate: str) -> bool:
            return tier.contains(candidate) or self.tracker.store.contains(candidate)

        return taken

    def _insert_paired(self, tier: RecordStore, record: ArtifactRecord, file_type: FileTypeName, now: int) -> None:
        tier.insert(record.id, record)
        try:
            self.tracker.create_entry(record.id, file_type, now=now)
        except Exception:
            tier.remove(record.id)
            raise

    def _emit(self, event: Event) -> None:
        self._events.emit(event)


def _newest_first(records: Iterable[_R]) -> List[_R]:
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)

import threading

import pytest

from medvault.api import (
    AccessPolicy,
    FileTooLargeError,
    InMemoryRecordStore,
    InvalidFileTypeError,
    MedicalFileService,
    RecordNotFoundError,
    Settings,
    SizeLimits,
    UnauthorizedError,
    build_service,
)
from medvault.contracts.events import (
    AnnotationAdded,
    FileDeleted,
    ModelDownloaded,
    ModelUploaded,
    ScanDownloaded,
    ScanUploaded,
)

MIB = 1024 * 1024


def _snapshot(service, ids):
    return {
        i: (service.get_model(i), service.get_scan(i), service.get_file_metadata(i))
        for i in ids
    }


# ---------------------------------------------------------------------------
# uploads
# ---------------------------------------------------------------------------


def test_upload_model_round_trip(service, upload_model, clock):
    payload = b"\x00\x01binary\xffmodel"
    model_id = upload_model(payload)

    assert model_id.startswith("model_")
    model = service.get_model(model_id)
    assert model is not None
    assert model.file_size == len(payload)
    assert model.payload_bytes() == payload
    assert model.created_at == clock.now()
    assert model.name == "Tumor net"


def test_upload_creates_paired_metadata(service, upload_model, upload_scan, clock):
    model_id = upload_model()
    scan_id = upload_scan()

    m = service.get_file_metadata(model_id)
    s = service.get_file_metadata(scan_id)
    assert (m.file_type, m.access_count, m.tags) == ("model", 0, [])
    assert (s.file_type, s.access_count) == ("scan", 0)
    assert m.last_accessed == clock.now()


def test_upload_scan_round_trip(service, upload_scan):
    payload = bytes(range(256))
    scan_id = upload_scan(payload)

    assert scan_id.startswith("scan_")
    scan = service.get_scan(scan_id)
    assert scan.file_size == 256
    assert scan.annotation_count == 0
    assert scan.payload_bytes() == payload


def test_ids_do_not_collide_within_one_tick(service, upload_model, upload_scan):
    # The manual clock does not move between these calls.
    ids = {upload_model() for _ in range(20)} | {upload_scan() for _ in range(20)}
    assert len(ids) == 40
    assert service.get_stats().total == 40


def test_model_over_limit_is_rejected_without_side_effects(service, upload_model, events):
    existing = upload_model()
    before = _snapshot(service, [existing])

    with pytest.raises(FileTooLargeError) as exc:
        upload_model(bytes(10 * MIB + 1))

    assert exc.value.size == 10 * MIB + 1
    assert exc.value.to_dict() == {"kind": "FileTooLarge", "data": 10 * MIB + 1}
    assert _snapshot(service, [existing]) == before
    assert service.get_stats().models == 1
    assert len(service.get_all_metadata()) == 1
    assert len(events.events) == 1


def test_model_exactly_at_limit_is_accepted(service, upload_model):
    model_id = upload_model(bytes(10 * MIB))
    assert service.get_model(model_id).file_size == 10 * MIB


def test_scan_limit_is_inclusive(service, upload_scan):
    scan_id = upload_scan(bytes(50 * MIB))
    assert service.get_scan(scan_id).file_size == 50 * MIB

    with pytest.raises(FileTooLargeError):
        upload_scan(bytes(50 * MIB + 1))
    assert service.get_stats().scans == 1


def test_custom_limits(stores, clock):
    svc = MedicalFileService(
        stores["models"], stores["scans"], stores["metadata"],
        clock=clock, limits=SizeLimits(max_model_bytes=4, max_scan_bytes=8),
    )
    with pytest.raises(FileTooLargeError):
        svc.upload_model("n", "d", "t", "1", b"12345", "u", True)
    svc.upload_scan("p", "CT", "chest", b"12345678", "u")


def test_payload_must_be_bytes(service):
    with pytest.raises(TypeError):
        service.upload_model("n", "d", "t", "1", "not bytes", "u", True)


# ---------------------------------------------------------------------------
# reads and downloads
# ---------------------------------------------------------------------------


def test_get_missing_returns_none(service):
    assert service.get_model("model_0_deadbeef") is None
    assert service.get_scan("scan_0_deadbeef") is None
    assert service.get_file_metadata("model_0_deadbeef") is None


def test_get_does_not_count_access(service, upload_model, events):
    model_id = upload_model()
    service.get_model(model_id)
    service.get_public_models()
    assert service.get_file_metadata(model_id).access_count == 0
    assert len(events.events) == 1


def test_public_models_filter(service, upload_model):
    private_1 = upload_model(is_public=False)
    public_1 = upload_model(is_public=True)
    private_2 = upload_model(is_public=False)
    public_2 = upload_model(is_public=True)

    public_ids = {m.id for m in service.get_public_models()}
    assert public_ids == {public_1, public_2}
    assert not public_ids & {private_1, private_2}


def test_list_models_and_scans_newest_first(service, upload_model, upload_scan, clock):
    first = upload_model()
    clock.advance(10)
    second = upload_model(is_public=False)
    assert [m.id for m in service.list_models()] == [second, first]

    s1 = upload_scan()
    clock.advance(10)
    s2 = upload_scan()
    assert [s.id for s in service.list_scans()] == [s2, s1]


def test_download_counts_every_access(service, upload_model, clock):
    model_id = upload_model()
    for _ in range(5):
        clock.advance(7)
        service.download_model(model_id, "bob")

    entry = service.get_file_metadata(model_id)
    assert entry.access_count == 5
    assert entry.last_accessed == clock.now()


def test_download_returns_full_record(service, upload_model):
    model_id = upload_model(b"abc")
    record = service.download_model(model_id, "bob")
    assert record == service.get_model(model_id)
    assert record.payload_bytes() == b"abc"


def test_download_missing_model(service, events):
    with pytest.raises(RecordNotFoundError) as exc:
        service.download_model("model_1_missing", "bob")
    assert exc.value.to_dict() == {"kind": "FileNotFound", "data": "model_1_missing"}
    assert events.events == []


def test_download_scan(service, upload_scan, clock):
    scan_id = upload_scan()
    clock.advance(3)
    service.download_scan(scan_id, "dr-who")
    entry = service.get_file_metadata(scan_id)
    assert (entry.access_count, entry.last_accessed) == (1, clock.now())

    with pytest.raises(RecordNotFoundError):
        service.download_scan("scan_missing", "dr-who")


def test_download_without_metadata_is_skipped_by_default(service, upload_model, stores):
    model_id = upload_model()
    stores["metadata"].remove(model_id)

    record = service.download_model(model_id, "bob")

    assert record.id == model_id
    assert service.get_file_metadata(model_id) is None


def test_download_without_metadata_recreates_when_configured(stores, clock, upload_model):
    svc = MedicalFileService(
        stores["models"], stores["scans"], stores["metadata"],
        clock=clock, metadata_miss_policy="recreate",
    )
    model_id = upload_model()
    stores["metadata"].remove(model_id)

    svc.download_model(model_id, "bob")

    entry = svc.get_file_metadata(model_id)
    assert (entry.file_type, entry.access_count) == ("model", 1)


def test_scans_by_patient(service, upload_scan):
    a1 = upload_scan(patient_id="A")
    upload_scan(patient_id="B")
    a2 = upload_scan(patient_id="A")

    assert {s.id for s in service.get_scans_by_patient("A")} == {a1, a2}
    assert service.get_scans_by_patient("a") == []


# ---------------------------------------------------------------------------
# access policy
# ---------------------------------------------------------------------------


def test_private_model_download_unrestricted_by_default(service, upload_model):
    model_id = upload_model(is_public=False, uploader="alice")
    assert service.download_model(model_id, "mallory").id == model_id


def test_private_model_download_enforced(stores, clock, events):
    svc = MedicalFileService(
        stores["models"], stores["scans"], stores["metadata"],
        clock=clock, events=events, access_policy=AccessPolicy(enforce_private_models=True),
    )
    private_id = svc.upload_model("n", "d", "t", "1", b"x", "alice", False)
    public_id = svc.upload_model("n", "d", "t", "1", b"x", "alice", True)

    with pytest.raises(UnauthorizedError):
        svc.download_model(private_id, "mallory")
    assert svc.get_file_metadata(private_id).access_count == 0

    svc.download_model(private_id, "alice")
    svc.download_model(public_id, "mallory")
    assert svc.get_file_metadata(private_id).access_count == 1
    assert [type(e) for e in events.events] == [ModelUploaded, ModelUploaded, ModelDownloaded, ModelDownloaded]


# ---------------------------------------------------------------------------
# annotations
# ---------------------------------------------------------------------------


def test_add_annotation_increments_count(service, upload_scan, upload_model):
    scan_id = upload_scan()
    other = upload_scan(patient_id="other")

    ids = []
    for n in range(1, 4):
        ids.append(service.add_annotation(scan_id, f"lesion {n}"))
        upload_model()  # unrelated activity
        assert service.get_scan(scan_id).annotation_count == n

    assert all(i.startswith("annotation_") for i in ids)
    assert len(set(ids)) == 3
    assert service.get_scan(other).annotation_count == 0
    # Annotations do not count as accesses.
    assert service.get_file_metadata(scan_id).access_count == 0


def test_add_annotation_on_missing_scan(service, events):
    with pytest.raises(RecordNotFoundError):
        service.add_annotation("scan_nope", "label")
    assert events.events == []


# ---------------------------------------------------------------------------
# deletion
# ---------------------------------------------------------------------------


def test_delete_model_removes_record_and_metadata(service, upload_model):
    model_id = upload_model()
    service.delete_file(model_id, "model")
    assert service.get_model(model_id) is None
    assert service.get_file_metadata(model_id) is None


def test_delete_scan_removes_record_and_metadata(service, upload_scan):
    scan_id = upload_scan()
    service.delete_file(scan_id, "scan")
    assert service.get_scan(scan_id) is None
    assert service.get_file_metadata(scan_id) is None


def test_delete_with_invalid_type_changes_nothing(service, upload_model, upload_scan, events):
    ids = [upload_model(), upload_scan()]
    before = _snapshot(service, ids)
    n_events = len(events.events)

    with pytest.raises(InvalidFileTypeError) as exc:
        service.delete_file(ids[0], "bogus")

    assert exc.value.to_dict() == {"kind": "InvalidFileType", "data": "bogus"}
    assert _snapshot(service, ids) == before
    assert len(events.events) == n_events


def test_delete_missing_record_is_tolerated(service, events):
    service.delete_file("model_404", "model")
    assert events.events == [FileDeleted(file_id="model_404", file_type="model")]


def test_delete_with_wrong_tier_keeps_pair_intact(service, upload_model):
    model_id = upload_model()
    service.delete_file(model_id, "scan")
    assert service.get_model(model_id) is not None
    assert service.get_file_metadata(model_id) is not None


class _FailingRemoveStore(InMemoryRecordStore):
    def remove(self, key):
        raise OSError("disk unavailable")


def test_delete_restores_record_when_metadata_removal_fails(stores, clock):
    metadata = _FailingRemoveStore("metadata")
    svc = MedicalFileService(stores["models"], stores["scans"], metadata, clock=clock)
    model_id = svc.upload_model("n", "d", "t", "1", b"x", "u", True)

    with pytest.raises(OSError):
        svc.delete_file(model_id, "model")

    assert svc.get_model(model_id) is not None
    assert svc.get_file_metadata(model_id) is not None


class _FailingInsertStore(InMemoryRecordStore):
    def insert(self, key, value):
        raise OSError("disk full")


def test_upload_rolls_back_record_when_metadata_write_fails(stores, clock, events):
    svc = MedicalFileService(
        stores["models"], stores["scans"], _FailingInsertStore("metadata"), clock=clock, events=events
    )
    with pytest.raises(OSError):
        svc.upload_model("n", "d", "t", "1", b"x", "u", True)
    assert len(stores["models"]) == 0
    assert events.events == []


# ---------------------------------------------------------------------------
# stats, events, reconcile
# ---------------------------------------------------------------------------


def test_stats_track_uploads_and_deletes(service, upload_model, upload_scan):
    m1, m2 = upload_model(), upload_model()
    s1 = upload_scan()
    service.delete_file(m1, "model")
    upload_scan()
    service.delete_file(s1, "scan")

    stats = service.get_stats()
    assert (stats.models, stats.scans) == (1, 1)
    assert stats.total == stats.models + stats.scans == 2
    assert str(stats) == "Total files: 2, Models: 1, Scans: 1"
    assert service.get_model(m2) is not None


def test_events_follow_call_order(service, events, upload_model, upload_scan):
    model_id = upload_model()
    scan_id = upload_scan(patient_id="p-9")
    service.download_model(model_id, "bob")
    service.download_scan(scan_id, "carol")
    annotation_id = service.add_annotation(scan_id, "x")
    service.delete_file(model_id, "model")

    assert events.events == [
        ModelUploaded(model_id=model_id, name="Tumor net"),
        ScanUploaded(scan_id=scan_id, patient_id="p-9"),
        ModelDownloaded(model_id=model_id, downloader="bob"),
        ScanDownloaded(scan_id=scan_id, downloader="carol"),
        AnnotationAdded(scan_id=scan_id, annotation_id=annotation_id),
        FileDeleted(file_id=model_id, file_type="model"),
    ]


def test_tags_through_service(service, upload_model):
    model_id = upload_model()
    service.add_tag(model_id, "brain")
    service.add_tag(model_id, "validated")
    entry = service.remove_tag(model_id, "brain")
    assert entry.tags == ["validated"]

    with pytest.raises(RecordNotFoundError):
        service.add_tag("model_missing", "x")


def test_reconcile_repairs_both_directions(service, upload_model, upload_scan, stores):
    model_id = upload_model()
    scan_id = upload_scan()
    stores["metadata"].remove(scan_id)
    stores["models"].remove(model_id)

    report = service.reconcile()

    assert report.removed_orphan_metadata == [model_id]
    assert report.recreated_metadata == [scan_id]
    assert service.get_file_metadata(model_id) is None
    assert service.get_file_metadata(scan_id).access_count == 0
    assert not service.reconcile().changed


# ---------------------------------------------------------------------------
# filesystem tiers
# ---------------------------------------------------------------------------


@pytest.fixture
def fs_service(tmp_path, clock):
    return build_service(Settings(storage="filesystem", data_dir=tmp_path), clock=clock)


@pytest.mark.parametrize("file_id", ["a b", "../model_1", "model/1"])
def test_filesystem_service_treats_odd_ids_as_missing(fs_service, file_id):
    model_id = fs_service.upload_model("n", "d", "t", "1", b"x", "u", True)

    assert fs_service.get_model(file_id) is None
    assert fs_service.get_scan(file_id) is None
    assert fs_service.get_file_metadata(file_id) is None
    with pytest.raises(RecordNotFoundError):
        fs_service.download_model(file_id, "bob")
    with pytest.raises(RecordNotFoundError):
        fs_service.add_annotation(file_id, "x")

    fs_service.delete_file(file_id, "model")
    assert fs_service.get_stats().total == 1
    assert fs_service.get_file_metadata(model_id) is not None


# ---------------------------------------------------------------------------
# concurrency
# ---------------------------------------------------------------------------


class _GatedStore(InMemoryRecordStore):
    """Metadata store whose next write (or removal) waits for ``release``."""

    def __init__(self, gate_on):
        super().__init__("metadata")
        self.gate_on = gate_on
        self.entered = threading.Event()
        self.release = threading.Event()

    def _gate(self, op):
        if op == self.gate_on and not self.entered.is_set():
            self.entered.set()
            assert self.release.wait(5)

    def insert(self, key, value):
        self._gate("insert")
        super().insert(key, value)

    def remove(self, key):
        self._gate("remove")
        return super().remove(key)


def _read_pair(service, file_id, out):
    out.append((service.get_model(file_id), service.get_file_metadata(file_id)))


def test_reader_never_sees_record_before_its_metadata(stores, clock):
    metadata = _GatedStore("insert")
    svc = MedicalFileService(stores["models"], stores["scans"], metadata, clock=clock)

    writer = threading.Thread(target=svc.upload_model, args=("n", "d", "t", "1", b"x", "u", True))
    writer.start()
    assert metadata.entered.wait(5)
    (model_id,) = [k for k, _ in stores["models"].entries()]

    seen = []
    reader = threading.Thread(target=_read_pair, args=(svc, model_id, seen))
    reader.start()
    reader.join(0.2)
    assert reader.is_alive()  # waiting for the upload to finish

    metadata.release.set()
    writer.join(5)
    reader.join(5)

    ((record, entry),) = seen
    assert record is not None and entry is not None
    assert entry.file_id == record.id


def test_reader_never_sees_metadata_after_its_record_is_deleted(stores, clock):
    metadata = _GatedStore("remove")
    svc = MedicalFileService(stores["models"], stores["scans"], metadata, clock=clock)
    model_id = svc.upload_model("n", "d", "t", "1", b"x", "u", True)

    writer = threading.Thread(target=svc.delete_file, args=(model_id, "model"))
    writer.start()
    assert metadata.entered.wait(5)

    seen = []
    reader = threading.Thread(target=_read_pair, args=(svc, model_id, seen))
    reader.start()
    reader.join(0.2)
    assert reader.is_alive()

    metadata.release.set()
    writer.join(5)
    reader.join(5)

    assert seen == [(None, None)]


def test_concurrent_annotations_are_all_counted(service, upload_scan, upload_model):
    scan_id = upload_scan()
    other = upload_scan(patient_id="other")
    annotation_ids = []
    errors = []

    def annotate():
        try:
            for _ in range(25):
                annotation_ids.append(service.add_annotation(scan_id, "lesion"))
        except Exception as e:
            errors.append(e)

    def churn():
        try:
            for _ in range(25):
                service.delete_file(upload_model(), "model")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=annotate) for _ in range(8)]
    threads += [threading.Thread(target=churn) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(30)

    assert errors == []
    assert service.get_scan(scan_id).annotation_count == 200
    assert len(set(annotation_ids)) == 200
    assert service.get_scan(other).annotation_count == 0
    assert service.get_stats().models == 0
    assert {m.file_id for m in service.get_all_metadata()} == {scan_id, other}

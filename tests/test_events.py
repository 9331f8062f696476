import logging

from medvault.api import FanOutEventSink, InMemoryEventSink, LoggingEventSink
from medvault.contracts import FileDeleted, ModelUploaded, ScanDownloaded, event_kind, event_to_dict


def test_event_serialization():
    event = ScanDownloaded(scan_id="scan_1", downloader="bob")
    assert event_kind(event) == "ScanDownloaded"
    assert event_to_dict(event) == {
        "kind": "ScanDownloaded",
        "data": {"scan_id": "scan_1", "downloader": "bob"},
    }


def test_in_memory_sink_sequences():
    sink = InMemoryEventSink()
    assert sink.last_seq == 0
    sink.emit(ModelUploaded(model_id="m1", name="a"))
    sink.emit(FileDeleted(file_id="m1", file_type="model"))

    assert sink.last_seq == 2
    assert [env.seq for env in sink.since(0)] == [1, 2]
    assert [env.event for env in sink.since(1)] == [FileDeleted(file_id="m1", file_type="model")]
    assert sink.since(1)[0].to_dict() == {
        "kind": "FileDeleted",
        "data": {"file_id": "m1", "file_type": "model"},
        "seq": 2,
    }


def test_history_is_bounded_but_seq_keeps_counting():
    sink = InMemoryEventSink(max_history=2)
    for i in range(5):
        sink.emit(ModelUploaded(model_id=f"m{i}", name="x"))

    assert [env.seq for env in sink.since()] == [4, 5]
    assert sink.last_seq == 5


def test_subscribers_and_unsubscribe():
    sink = InMemoryEventSink()
    seen = []
    unsubscribe = sink.subscribe(seen.append)

    sink.emit(ModelUploaded(model_id="m1", name="a"))
    unsubscribe()
    sink.emit(ModelUploaded(model_id="m2", name="b"))

    assert seen == [ModelUploaded(model_id="m1", name="a")]


def test_failing_subscriber_is_logged_and_others_still_run(caplog):
    sink = InMemoryEventSink()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    sink.subscribe(broken)
    sink.subscribe(seen.append)

    with caplog.at_level(logging.ERROR):
        sink.emit(ModelUploaded(model_id="m1", name="a"))

    assert len(seen) == 1
    assert sink.last_seq == 1
    assert "ModelUploaded" in caplog.text


def test_fan_out_and_logging_sink(caplog):
    a, b = InMemoryEventSink(), InMemoryEventSink()
    fan = FanOutEventSink([a, LoggingEventSink(), b])

    with caplog.at_level(logging.INFO, logger="medvault.events"):
        fan.emit(ModelUploaded(model_id="m1", name="a"))

    assert a.events == b.events == [ModelUploaded(model_id="m1", name="a")]
    assert "ModelUploaded" in caplog.text

from .clock import Clock, ManualClock, SystemClock
from .errors import (
    FileTooLargeError,
    InvalidAnnotationError,
    InvalidFileTypeError,
    MedVaultError,
    RecordNotFoundError,
    UnauthorizedError,
)
from .events import (
    EventEnvelope,
    EventSink,
    FanOutEventSink,
    InMemoryEventSink,
    LoggingEventSink,
    NullEventSink,
)
from .ids import id_prefix, make_id, new_id

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "FileTooLargeError",
    "InvalidAnnotationError",
    "InvalidFileTypeError",
    "MedVaultError",
    "RecordNotFoundError",
    "UnauthorizedError",
    "EventEnvelope",
    "EventSink",
    "FanOutEventSink",
    "InMemoryEventSink",
    "LoggingEventSink",
    "NullEventSink",
    "id_prefix",
    "make_id",
    "new_id",
]

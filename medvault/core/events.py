"""Event sinks for engine notifications.

The engine must remain runnable without any specific backend/UI. Use-cases
emit typed events (see :mod:`medvault.contracts.events`) into an
:class:`EventSink`; hosts adapt their own delivery to this protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, List, Optional, Protocol, Sequence

from ..contracts.events import Event, event_kind, event_to_dict

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Ordered delivery of typed notifications."""

    def emit(self, event: Event) -> None:  # pragma: no cover
        ...


class NullEventSink:
    def emit(self, event: Event) -> None:
        return None


class LoggingEventSink:
    """Write each event to the ``medvault.events`` logger."""

    def __init__(self, logger_name: str = "medvault.events", level: int = logging.INFO):
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def emit(self, event: Event) -> None:
        self._logger.log(self._level, "%s %s", event_kind(event), event_to_dict(event)["data"])


@dataclass(frozen=True)
class EventEnvelope:
    """An emitted event with its position in the sink's history."""

    seq: int
    event: Event

    def to_dict(self) -> dict:
        out = event_to_dict(self.event)
        out["seq"] = self.seq
        return out


Subscriber = Callable[[Event], None]


class InMemoryEventSink:
    """Keeps emitted events in order and forwards them to subscribers.

    Sequence numbers start at 1 and increase by one per event, so observers
    can poll with ``since(last_seen_seq)``.
    """

    def __init__(self, max_history: Optional[int] = None):
        self._lock = Lock()
        self._history: List[EventEnvelope] = []
        self._subscribers: List[Subscriber] = []
        self._next_seq = 1
        self._max_history = max_history

    def emit(self, event: Event) -> None:
        with self._lock:
            env = EventEnvelope(seq=self._next_seq, event=event)
            self._next_seq += 1
            self._history.append(env)
            if self._max_history is not None and len(self._history) > self._max_history:
                del self._history[: len(self._history) - self._max_history]
            subscribers = list(self._subscribers)
        # The state change is already committed; subscriber failures are logged.
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("Event subscriber failed for %s", event_kind(event))

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    @property
    def events(self) -> List[Event]:
        with self._lock:
            return [env.event for env in self._history]

    def since(self, seq: int = 0) -> List[EventEnvelope]:
        with self._lock:
            return [env for env in self._history if env.seq > seq]

    @property
    def last_seq(self) -> int:
        with self._lock:
            return self._next_seq - 1

    def clear(self) -> None:
        with self._lock:
            self._history.clear()


class FanOutEventSink:
    """Forward each event to several sinks, in the order given."""

    def __init__(self, sinks: Sequence[EventSink]):
        self._sinks = list(sinks)

    def emit(self, event: Event) -> None:
        for sink in self._sinks:
            sink.emit(event)

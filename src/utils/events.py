"""Structured events emitted by the gateway, poller and manager.

Components receive an `EventSink` instead of printing. The CLI wires a
`LoggingEventSink`; tests use `RecordingEventSink` to assert on traffic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

LOGGER_NAME = "gcp_tag_bindings"

REQUEST_SENT = "request_sent"
RESPONSE_RECEIVED = "response_received"
OPERATION_POLLING = "operation_polling"
OPERATION_COMPLETED = "operation_completed"

_LEVELS = {
    REQUEST_SENT: logging.DEBUG,
    RESPONSE_RECEIVED: logging.DEBUG,
    OPERATION_POLLING: logging.INFO,
    OPERATION_COMPLETED: logging.INFO,
}


class EventSink(Protocol):
    def emit(self, kind: str, **fields: Any) -> None: ...


class NullEventSink:
    """Discards every event."""

    def emit(self, kind: str, **fields: Any) -> None:
        return None


class LoggingEventSink:
    """Forward events to a stdlib logger, one line per event."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(LOGGER_NAME)

    def emit(self, kind: str, **fields: Any) -> None:
        level = _LEVELS.get(kind, logging.INFO)
        if not self._logger.isEnabledFor(level):
            return
        details = " ".join(f"{k}={v!r}" for k, v in sorted(fields.items()))
        self._logger.log(level, "%s %s", kind, details)


@dataclass
class Event:
    kind: str
    fields: dict[str, Any] = field(default_factory=dict)


class RecordingEventSink:
    """Keep events in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def emit(self, kind: str, **fields: Any) -> None:
        self.events.append(Event(kind=kind, fields=dict(fields)))

    def kinds(self) -> list[str]:
        return [e.kind for e in self.events]

    def of_kind(self, kind: str) -> list[Event]:
        return [e for e in self.events if e.kind == kind]

"""
Event sink adapters.

Implements EventSinkPort for development and testing. Delivery to a real
telemetry collector is provided by the host.

Key behaviors:
- LoggingSink: writes each event to the logging module
- InMemorySink: records events for inspection
- FanOutSink: forwards to several sinks; one failing sink does not stop the rest
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from sitepulse.components.instrumentation import (
    Attributes,
    Event,
    EventSinkPort,
    safe_emit,
)

logger = logging.getLogger(__name__)


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...


class LoggingSink:
    """Sink that logs events instead of sending them anywhere."""

    def __init__(self, log_level: int = logging.INFO) -> None:
        self.log_level = log_level

    def emit(self, name: str, attributes: Attributes) -> None:
        details = ", ".join(f"{key}={value}" for key, value in attributes.items())
        logger.log(self.log_level, "event %s: %s", name, details)


class InMemorySink:
    """In-memory sink for testing/dev."""

    def __init__(self, time_port: TimePort | None = None) -> None:
        self._time_port = time_port
        self._events: list[Event] = []

    def emit(self, name: str, attributes: Attributes) -> None:
        if self._time_port is not None:
            event = Event(name=name, attributes=dict(attributes), timestamp=self._time_port.now_utc())
        else:
            event = Event(name=name, attributes=dict(attributes))
        self._events.append(event)

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    def named(self, name: str) -> list[Event]:
        return [e for e in self._events if e.name == name]

    def clear(self) -> None:
        self._events.clear()


class FanOutSink:
    """Forwards every event to each wrapped sink."""

    def __init__(self, sinks: Sequence[EventSinkPort]) -> None:
        self._sinks = tuple(sinks)

    def emit(self, name: str, attributes: Attributes) -> None:
        for sink in self._sinks:
            safe_emit(sink, name, dict(attributes))

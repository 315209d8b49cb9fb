from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from authcore.application.ports.event_sink_port import EventSinkPort


logger = logging.getLogger(__name__)

_REDACTED_KEYS = frozenset({"token"})


class LoggingEventSink(EventSinkPort):
    """Writes domain events to the log; delivery to a broker is someone else's job."""

    def emit(self, event_name: str, payload: Mapping[str, Any]) -> None:
        safe_payload = {
            key: ("***" if key in _REDACTED_KEYS else value) for key, value in payload.items()
        }
        logger.info(
            "event_sink: event=%s payload=%s",
            event_name,
            json.dumps(safe_payload, sort_keys=True, default=str),
        )


class InMemoryEventSink(EventSinkPort):
    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((event_name, dict(payload)))

    def named(self, event_name: str) -> list[dict[str, Any]]:
        return [payload for name, payload in self.events if name == event_name]

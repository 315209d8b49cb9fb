from __future__ import annotations

from typing import Any, Mapping, Protocol


class EventSinkPort(Protocol):
    def emit(self, event_name: str, payload: Mapping[str, Any]) -> None:
        ...

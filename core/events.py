"""UI and alert events passed over the :class:`core.event_bus.EventBus`.

The monitoring engine never talks to a display surface directly. It publishes
these transport-neutral structures and the presentation layer subscribes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from core.records import HistoryEntry


class EventType(str, Enum):
    """Top level event categories."""

    RENDER = "render"
    HISTORY = "history"
    TOAST = "toast"
    ERROR = "error"
    HIGHLIGHT = "highlight"
    LOADING = "loading"


class Severity(str, Enum):
    """Toast severity tags."""

    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(slots=True)
class EventBase:
    event_type: EventType


@dataclass(slots=True)
class RenderEvent(EventBase):
    """Display strings for every metric of one processed cycle."""

    fields: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class HistoryEvent(EventBase):
    entries: List[HistoryEntry] = field(default_factory=list)


@dataclass(slots=True)
class ToastEvent(EventBase):
    """Transient message; errors use ``EventType.ERROR`` and a longer delay."""

    message: str = ""
    severity: Severity = Severity.INFO
    duration: float = 3.0


@dataclass(slots=True)
class HighlightEvent(EventBase):
    field_name: str = ""
    duration: float = 3.0


@dataclass(slots=True)
class LoadingEvent(EventBase):
    active: bool = False


@dataclass(slots=True)
class EventEnvelope:
    """Event wrapper carrying the publish timestamp."""

    event: EventBase
    ts: float
    id: Optional[str] = None


__all__ = [
    "EventType",
    "Severity",
    "EventBase",
    "RenderEvent",
    "HistoryEvent",
    "ToastEvent",
    "HighlightEvent",
    "LoadingEvent",
    "EventEnvelope",
]

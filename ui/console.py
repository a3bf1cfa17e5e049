"""Terminal presentation layer subscribed to the tracker's event bus."""

from __future__ import annotations

import asyncio
import sys
import time
from typing import Dict, List, Optional, TextIO

from core.event_bus import EventBus
from core.events import (
    EventEnvelope,
    EventType,
    HighlightEvent,
    HistoryEvent,
    LoadingEvent,
    RenderEvent,
    ToastEvent,
)
from core.records import HistoryEntry


FIELD_LABELS: Dict[str, str] = {
    "address": "Address",
    "workers": "Workers",
    "shares": "Shares",
    "last_block": "Last block",
    "hashrate_1hr": "Hashrate (1h)",
    "hashrate_5m": "Hashrate (5m)",
    "chance_per_block": "Chance / block",
    "chance_per_day": "Chance / day",
    "time_estimate": "Time estimate",
    "best_share": "Best share",
    "difficulty": "Difficulty",
}

_TOAST_PREFIX = {"success": "[OK]", "error": "[ERROR]", "info": "[INFO]"}


class ConsolePresenter:
    """Print stats blocks, history and toasts; keep highlight state with expiry."""

    def __init__(self, event_bus: EventBus, stream: Optional[TextIO] = None) -> None:
        self._stream = stream or sys.stdout
        self._highlight_until: Dict[str, float] = {}
        self.fields: Dict[str, str] = {}
        self.history: List[HistoryEntry] = []
        self.loading = False
        event_bus.subscribe(EventType.RENDER.value, self._on_render)
        event_bus.subscribe(EventType.HISTORY.value, self._on_history)
        event_bus.subscribe(EventType.TOAST.value, self._on_toast)
        event_bus.subscribe(EventType.ERROR.value, self._on_toast)
        event_bus.subscribe(EventType.HIGHLIGHT.value, self._on_highlight)
        event_bus.subscribe(EventType.LOADING.value, self._on_loading)

    def is_highlighted(self, field_name: str) -> bool:
        return self._highlight_until.get(field_name, 0.0) > time.monotonic()

    def _write(self, text: str) -> None:
        print(text, file=self._stream, flush=True)

    def _line(self, key: str) -> str:
        marker = " *" if self.is_highlighted(key) else ""
        return f"  {FIELD_LABELS[key]:<16}{self.fields.get(key, '')}{marker}"

    def _on_render(self, envelope: EventEnvelope) -> None:
        event = envelope.event
        if not isinstance(event, RenderEvent):
            return
        self.fields = dict(event.fields)
        lines = [self._line(key) for key in FIELD_LABELS]
        lines.append(f"  {self.fields.get('last_updated', '')}")
        self._write("\n".join(lines))

    def _on_history(self, envelope: EventEnvelope) -> None:
        event = envelope.event
        if not isinstance(event, HistoryEvent):
            return
        self.history = list(event.entries)
        if not self.history:
            self._write("  No share history yet")
            return
        self._write("  Best share history:")
        for index, entry in enumerate(self.history):
            latest = "  (latest)" if index == 0 else ""
            self._write(f"    {entry.display_value:<12}{entry.timestamp}{latest}")

    def _on_toast(self, envelope: EventEnvelope) -> None:
        event = envelope.event
        if not isinstance(event, ToastEvent):
            return
        self._write(f"{_TOAST_PREFIX.get(event.severity.value, '')} {event.message}")

    def _on_highlight(self, envelope: EventEnvelope) -> None:
        event = envelope.event
        if not isinstance(event, HighlightEvent):
            return
        deadline = time.monotonic() + event.duration
        self._highlight_until[event.field_name] = deadline
        # highlights arrive after the render of the same cycle
        if event.field_name in FIELD_LABELS and event.field_name in self.fields:
            self._write(self._line(event.field_name))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        loop.call_later(event.duration, self._clear_highlight, event.field_name, deadline)

    def _clear_highlight(self, field_name: str, deadline: float) -> None:
        # a newer highlight of the same field owns its own expiry
        if self._highlight_until.get(field_name) == deadline:
            del self._highlight_until[field_name]

    def _on_loading(self, envelope: EventEnvelope) -> None:
        event = envelope.event
        if isinstance(event, LoadingEvent):
            self.loading = event.active


__all__ = ["ConsolePresenter", "FIELD_LABELS"]

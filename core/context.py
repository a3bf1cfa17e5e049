"""Explicitly owned application state shared by the engine components."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from core.event_bus import EventBus
from core.events import EventType, HistoryEvent
from core.snapshot import SnapshotStore
from rules.config_loader import AppConfig
from storage.history import HistoryRing
from storage.kv_store import LAST_ADDRESS_KEY, KeyValueStore
from storage.migrate import initialize_database

LOGGER = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything one tracker process owns; no module-level singletons."""

    config: AppConfig
    store: KeyValueStore
    event_bus: EventBus
    history: HistoryRing
    snapshot: SnapshotStore = field(default_factory=SnapshotStore)
    address: str = ""

    @classmethod
    def build(
        cls,
        config: AppConfig,
        store: Optional[KeyValueStore] = None,
        event_bus: Optional[EventBus] = None,
    ) -> "AppContext":
        if store is None:
            initialize_database()
            store = KeyValueStore()
        event_bus = event_bus or EventBus()

        def _publish_history(entries) -> None:
            event_bus.emit(HistoryEvent(event_type=EventType.HISTORY, entries=entries))

        history = HistoryRing(store, max_items=config.max_history_items, on_change=_publish_history)
        return cls(config=config, store=store, event_bus=event_bus, history=history)


def resolve_address(
    cli_address: Optional[str], store: KeyValueStore, default_address: str
) -> str:
    """Pick the subject: explicit argument, then last used, then the default."""

    for candidate, origin in (
        (cli_address, "command line"),
        (store.get(LAST_ADDRESS_KEY), "storage"),
        (default_address, "default"),
    ):
        if isinstance(candidate, str) and candidate.strip():
            LOGGER.info("Using address from %s", origin)
            return candidate.strip()
    return ""


__all__ = ["AppContext", "resolve_address"]

"""Bounded newest-first log of best-share milestones."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from core.records import HistoryEntry
from core.units import scale_with_suffix
from storage.kv_store import SHARE_HISTORY_KEY, KeyValueStore

LOGGER = logging.getLogger(__name__)

HistoryListener = Callable[[List[HistoryEntry]], None]


class HistoryRing:
    """Fixed-capacity history persisted under ``shareHistory``.

    Index 0 is always the latest milestone; once the ring is over capacity the
    oldest entries are dropped. Every append persists the full list and
    notifies ``on_change`` so the UI can re-render.
    """

    def __init__(
        self,
        store: KeyValueStore,
        max_items: int = 10,
        on_change: Optional[HistoryListener] = None,
    ) -> None:
        if max_items <= 0:
            raise ValueError("max_items must be positive")
        self._store = store
        self._max_items = max_items
        self._entries: List[HistoryEntry] = []
        self._on_change = on_change

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    @property
    def max_items(self) -> int:
        return self._max_items

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> List[HistoryEntry]:
        raw = self._store.get(SHARE_HISTORY_KEY, [])
        try:
            entries = [HistoryEntry.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as exc:
            LOGGER.warning("Discarding unreadable share history: %s", exc)
            entries = []
        self._entries = entries[: self._max_items]
        LOGGER.info("Loaded %d share history entries", len(self._entries))
        self._notify()
        return self.entries

    def append(self, raw_value: float, timestamp: str) -> HistoryEntry:
        entry = HistoryEntry(
            raw_value=raw_value,
            display_value=scale_with_suffix(raw_value),
            timestamp=timestamp,
        )
        self._entries.insert(0, entry)
        if len(self._entries) > self._max_items:
            del self._entries[self._max_items :]
        self._store.set(SHARE_HISTORY_KEY, [item.to_dict() for item in self._entries])
        self._notify()
        return entry

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.entries)


__all__ = ["HistoryRing"]

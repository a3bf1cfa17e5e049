"""Snapshot store holding the comparison baselines and the latest record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from core.records import MetricRecord, WatchedState


@dataclass(slots=True)
class SnapshotStore:
    """Most recent watched values plus the full last-fetched record.

    ``apply`` is called once per processed record, after the detector has
    compared against the prior state.
    """

    watched: WatchedState = field(default_factory=WatchedState)
    current: Optional[MetricRecord] = None

    def apply(self, state: WatchedState, record: MetricRecord) -> None:
        self.watched = state
        self.current = record

    @property
    def has_data(self) -> bool:
        return self.current is not None and bool(self.current.raw)


__all__ = ["SnapshotStore"]

"""Data model shared by the fetch client, detector, history ring and UI."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from core.units import parse_number


@dataclass(frozen=True, slots=True)
class MetricRecord:
    """One pool statistics snapshot for a single address."""

    address: Optional[str] = None
    workers: Any = None
    shares: Any = None
    last_block: Any = None
    hashrate_1hr: Optional[str] = None
    hashrate_5m: Optional[str] = None
    chance_per_block: Optional[str] = None
    chance_per_day: Optional[str] = None
    time_estimate: Optional[str] = None
    best_share: Optional[float] = None
    difficulty: Optional[float] = None
    raw: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "MetricRecord":
        return cls(
            address=payload.get("address"),
            workers=payload.get("workers"),
            shares=payload.get("shares"),
            last_block=payload.get("lastBlock"),
            hashrate_1hr=payload.get("hashrate1hr"),
            hashrate_5m=payload.get("hashrate5m"),
            chance_per_block=payload.get("chancePerBlock"),
            chance_per_day=payload.get("chancePerDay"),
            time_estimate=payload.get("timeEstimate"),
            best_share=parse_number(payload.get("bestshare")),
            difficulty=parse_number(payload.get("difficulty")),
            raw=MappingProxyType(dict(payload)),
        )


@dataclass(frozen=True, slots=True)
class WatchedState:
    """Comparison baselines; ``0`` means the metric has not been seeded."""

    previous_best_share: float = 0.0
    previous_difficulty: float = 0.0


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """A best-share milestone as stored in the history ring."""

    raw_value: float
    display_value: str
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raw_value": self.raw_value,
            "display_value": self.display_value,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryEntry":
        return cls(
            raw_value=float(data["raw_value"]),
            display_value=str(data["display_value"]),
            timestamp=str(data["timestamp"]),
        )


__all__ = ["MetricRecord", "WatchedState", "HistoryEntry"]

"""Change detection between successive pool snapshots.

``detect_changes`` is pure: it takes the prior baselines and a new record and
returns the next baselines plus the alert effects to run. Executing the
effects is the job of :class:`alerts.dispatcher.AlertDispatcher`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from core.records import MetricRecord, WatchedState


class AlertKind(str, Enum):
    NEW_BEST_SHARE = "new_best_share"
    DIFFICULTY_CHANGED = "difficulty_changed"


@dataclass(frozen=True, slots=True)
class AlertEffect:
    kind: AlertKind
    value: float
    previous: float


def _best_share(baseline: float, value: Optional[float]) -> Tuple[float, Optional[AlertEffect]]:
    if value is None:
        return baseline, None
    effect = None
    # a zero baseline is the seeding observation
    if baseline > 0 and value > baseline:
        effect = AlertEffect(kind=AlertKind.NEW_BEST_SHARE, value=value, previous=baseline)
    return value, effect


def _difficulty(baseline: float, value: Optional[float]) -> Tuple[float, Optional[AlertEffect]]:
    if value is None:
        return baseline, None
    effect = None
    if baseline > 0 and value != baseline:
        effect = AlertEffect(kind=AlertKind.DIFFICULTY_CHANGED, value=value, previous=baseline)
    return value, effect


def detect_changes(
    prior: WatchedState, record: MetricRecord
) -> Tuple[WatchedState, List[AlertEffect]]:
    """Compare ``record`` against ``prior`` and return ``(next_state, effects)``.

    Best share alerts on an increase only, but the baseline follows every
    valid observation, so a drop silently lowers the comparison point.
    Difficulty alerts on any change. Unparseable values leave their baseline
    untouched and never alert.
    """

    best_share, share_effect = _best_share(prior.previous_best_share, record.best_share)
    difficulty, difficulty_effect = _difficulty(prior.previous_difficulty, record.difficulty)
    effects = [effect for effect in (share_effect, difficulty_effect) if effect is not None]
    return WatchedState(previous_best_share=best_share, previous_difficulty=difficulty), effects


__all__ = ["AlertKind", "AlertEffect", "detect_changes"]

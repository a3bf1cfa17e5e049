"""Unit normalisation helpers turning raw pool metrics into display strings.

Every function here is total: bad input degrades to ``"Unavailable"`` or is
passed through unchanged, never raised.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Dict, Optional

UNAVAILABLE = "Unavailable"

_SUFFIXES: tuple[tuple[float, str], ...] = (
    (1e12, "T"),
    (1e9, "G"),
    (1e6, "M"),
    (1e3, "K"),
)

# Factors relative to TH/s.
_HASHRATE_TO_TH: Dict[str, float] = {
    "H/S": 1e-12,
    "KH/S": 1e-9,
    "MH/S": 1e-6,
    "GH/S": 1e-3,
    "TH/S": 1.0,
    "PH/S": 1e3,
}

_HASHRATE_RE = re.compile(r"([\d,.]+)\s*([a-z]+/s)", re.IGNORECASE)
_DAYS_RE = re.compile(r"([\d,.]+)\s*days?", re.IGNORECASE)
_LEADING_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(value: Any) -> Optional[float]:
    """Parse ``value`` the way a lenient ``parseFloat`` does.

    Numbers pass through, strings contribute their longest leading decimal
    literal. Anything without a finite leading number yields ``None``.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER_RE.match(value.strip())
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _locale_number(value: float) -> str:
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text or "0"


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(number) or math.isinf(number) else number
    return parse_number(value)


def scale_with_suffix(value: Any) -> str:
    number = _as_number(value)
    if number is None or number <= 0:
        return UNAVAILABLE
    for threshold, suffix in _SUFFIXES:
        if number >= threshold:
            return f"{number / threshold:.2f} {suffix}"
    return _locale_number(number)


def format_grouped(value: Any) -> str:
    """Grouped integer rendering used for network difficulty."""

    number = _as_number(value)
    if number is None:
        return UNAVAILABLE
    return f"{number:,.0f}"


def _is_missing(text: Optional[str]) -> bool:
    return not text or text == UNAVAILABLE


def normalize_hashrate(text: Optional[str]) -> str:
    """Convert ``"1,234.5 GH/s"``-style strings to TH/s with two decimals."""

    if _is_missing(text):
        return UNAVAILABLE
    if not isinstance(text, str):
        return str(text)
    match = _HASHRATE_RE.search(text)
    if not match:
        return text
    try:
        value = float(match.group(1).replace(",", ""))
    except ValueError:
        return text
    factor = _HASHRATE_TO_TH.get(match.group(2).upper())
    if factor is None:
        return text
    return f"{value * factor:.2f} TH/s"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def normalize_time_estimate(text: Optional[str]) -> str:
    """Render a day count as whole years and remaining days (365-day years)."""

    if _is_missing(text):
        return UNAVAILABLE
    if not isinstance(text, str):
        return str(text)
    match = _DAYS_RE.search(text)
    if not match:
        return text
    try:
        total_days = float(match.group(1).replace(",", ""))
    except ValueError:
        return text
    if math.isnan(total_days) or math.isinf(total_days):
        return text

    years = int(total_days // 365)
    days = int(total_days % 365)
    if years == 0:
        return _plural(days, "day")
    if days == 0:
        return _plural(years, "year")
    return f"{_plural(years, 'year')}, {_plural(days, 'day')}"


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Short local timestamp such as ``"Oct 16, 03:04:05 PM"``."""

    moment = moment or datetime.now()
    return f"{moment:%b} {moment.day}, {moment:%I:%M:%S %p}"


def _text_or_unavailable(value: Any) -> str:
    if value is None or value == "":
        return UNAVAILABLE
    return str(value)


def render_fields(record: Any, updated_at: Optional[datetime] = None) -> Dict[str, str]:
    """Build every display string for one processed :class:`MetricRecord`."""

    return {
        "address": _text_or_unavailable(record.address),
        "workers": scale_with_suffix(record.workers),
        "shares": _text_or_unavailable(record.shares),
        "last_block": _text_or_unavailable(record.last_block),
        "hashrate_1hr": normalize_hashrate(record.hashrate_1hr),
        "hashrate_5m": normalize_hashrate(record.hashrate_5m),
        "chance_per_block": _text_or_unavailable(record.chance_per_block),
        "chance_per_day": _text_or_unavailable(record.chance_per_day),
        "time_estimate": normalize_time_estimate(record.time_estimate),
        "best_share": scale_with_suffix(record.best_share),
        "difficulty": format_grouped(record.difficulty),
        "last_updated": f"Last updated: {format_timestamp(updated_at)}",
    }


__all__ = [
    "UNAVAILABLE",
    "parse_number",
    "scale_with_suffix",
    "format_grouped",
    "normalize_hashrate",
    "normalize_time_estimate",
    "format_timestamp",
    "render_fields",
]

import sys
from datetime import datetime
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.records import MetricRecord
from core.units import (
    format_grouped,
    format_timestamp,
    normalize_hashrate,
    normalize_time_estimate,
    parse_number,
    render_fields,
    scale_with_suffix,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "Unavailable"),
        (None, "Unavailable"),
        (float("nan"), "Unavailable"),
        (-5, "Unavailable"),
        (1500, "1.50 K"),
        (2_500_000_000, "2.50 G"),
        (3_210_000, "3.21 M"),
        (4.2e12, "4.20 T"),
        (999, "999"),
        (12.5, "12.5"),
        ("1500", "1.50 K"),
        ("abc", "Unavailable"),
    ],
)
def test_scale_with_suffix(value, expected):
    assert scale_with_suffix(value) == expected


def test_hashrate_is_normalised_to_terahash():
    assert normalize_hashrate("123.45 TH/s") == "123.45 TH/s"
    assert normalize_hashrate("500,000 GH/s") == "500.00 TH/s"
    assert normalize_hashrate("1.5 PH/s") == "1500.00 TH/s"
    assert normalize_hashrate("2,000,000 MH/s") == "2.00 TH/s"
    assert normalize_hashrate("750 kh/s") == "0.00 TH/s"


def test_hashrate_falls_back_to_raw_text():
    assert normalize_hashrate("garbage") == "garbage"
    assert normalize_hashrate("12 EH/s") == "12 EH/s"
    assert normalize_hashrate("1.2.3 TH/s") == "1.2.3 TH/s"


def test_hashrate_missing_values_are_unavailable():
    assert normalize_hashrate(None) == "Unavailable"
    assert normalize_hashrate("") == "Unavailable"
    assert normalize_hashrate("Unavailable") == "Unavailable"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("400 days", "1 year, 35 days"),
        ("365 days", "1 year"),
        ("1 day", "1 day"),
        ("0.5 days", "0 days"),
        ("730.9 days", "2 years"),
        ("1,096 days", "3 years, 1 day"),
        ("366 Days", "1 year, 1 day"),
    ],
)
def test_time_estimate(text, expected):
    assert normalize_time_estimate(text) == expected


def test_time_estimate_fallbacks():
    assert normalize_time_estimate("soon") == "soon"
    assert normalize_time_estimate(None) == "Unavailable"
    assert normalize_time_estimate("Unavailable") == "Unavailable"


def test_parse_number_mimics_leading_number_parsing():
    assert parse_number("123.5abc") == 123.5
    assert parse_number("  42") == 42.0
    assert parse_number(7) == 7.0
    assert parse_number("1e3") == 1000.0
    assert parse_number("abc") is None
    assert parse_number("NaN") is None
    assert parse_number(None) is None
    assert parse_number(True) is None


def test_format_grouped_and_timestamp():
    assert format_grouped(109_780_000_000_000.4) == "109,780,000,000,000"
    assert format_grouped(None) == "Unavailable"
    assert format_timestamp(datetime(2024, 3, 5, 15, 4, 9)) == "Mar 5, 03:04:09 PM"


def test_render_fields_covers_every_metric():
    record = MetricRecord.from_payload(
        {
            "address": "bc1qexample",
            "workers": 2,
            "shares": "1,234",
            "lastBlock": "840000",
            "hashrate1hr": "1,200 GH/s",
            "hashrate5m": "bogus",
            "chancePerBlock": "0.0001%",
            "timeEstimate": "800 days",
            "bestshare": "1500000",
            "difficulty": "83148355189239.77",
        }
    )
    fields = render_fields(record, datetime(2024, 1, 2, 9, 30, 0))

    assert fields["address"] == "bc1qexample"
    assert fields["workers"] == "2"
    assert fields["hashrate_1hr"] == "1.20 TH/s"
    assert fields["hashrate_5m"] == "bogus"
    assert fields["chance_per_day"] == "Unavailable"
    assert fields["time_estimate"] == "2 years, 70 days"
    assert fields["best_share"] == "1.50 M"
    assert fields["difficulty"] == "83,148,355,189,240"
    assert fields["last_updated"] == "Last updated: Jan 2, 09:30:00 AM"

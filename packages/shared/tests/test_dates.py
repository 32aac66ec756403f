"""Date normalizer and period key helpers."""
from datetime import date, datetime

import pandas as pd
import pytest

from packages.shared.src.dates import (
    is_iso_date,
    normalize_date,
    parse_period_key,
    period_of,
    sort_period_keys,
)


def test_slashed_date_with_time():
    assert normalize_date("15/08/2025 12:11:44") == "2025-08-15"


def test_slashed_date_is_zero_padded():
    assert normalize_date("5/8/2025") == "2025-08-05"


def test_iso_date_unchanged():
    assert normalize_date("2025-08-15") == "2025-08-15"


def test_iso_datetime_drops_time():
    assert normalize_date("2025-08-15 09:30") == "2025-08-15"


@pytest.mark.parametrize("serial,expected", [(45520, "2024-08-16"), (45658, "2025-01-01"), ("45520", "2024-08-16")])
def test_excel_serial(serial, expected):
    assert normalize_date(serial) == expected


def test_excel_serial_float_cell():
    assert normalize_date(45658.0) == "2025-01-01"
    assert normalize_date("45658.0") == "2025-01-01"


def test_native_dates():
    assert normalize_date(datetime(2025, 3, 4, 10, 0)) == "2025-03-04"
    assert normalize_date(pd.Timestamp("2025-03-04 23:59")) == "2025-03-04"
    assert normalize_date(date(2025, 3, 4)) == "2025-03-04"


def test_generic_format():
    assert normalize_date("2025.03.04") == "2025-03-04"


def test_garbage_returned_trimmed():
    assert normalize_date("  not a date  ") == "not a date"


def test_zero_is_not_a_serial():
    assert not is_iso_date(normalize_date("0"))


def test_oversized_serial_is_left_unchanged():
    huge = "1" * 400
    assert normalize_date(huge) == huge
    assert normalize_date(huge + ".5") == huge + ".5"
    assert not is_iso_date(normalize_date(huge))


@pytest.mark.parametrize("raw", ["08/15/2025", "31/02/2025", "2025-13-01", "2025-02-30"])
def test_impossible_days_are_left_unchanged(raw):
    assert normalize_date(raw) == raw
    assert not is_iso_date(normalize_date(raw))


def test_is_iso_date():
    assert is_iso_date("2025-01-31")
    assert not is_iso_date("2025-1-31")
    assert not is_iso_date(None)
    assert not is_iso_date("2025-15-08")
    assert not is_iso_date("2025-02-29")
    assert is_iso_date("2024-02-29")


def test_period_helpers():
    assert period_of("2025-02-10") == ("2025", "02")
    assert parse_period_key("2025-02") == ("2025", "02")
    with pytest.raises(ValueError):
        parse_period_key("2025-13")
    with pytest.raises(ValueError):
        period_of("10/02/2025")
    assert sort_period_keys(["2025-02", "2024-12", "2025-01", "2025-02"]) == ["2024-12", "2025-01", "2025-02"]
    assert sort_period_keys(["2024-12", "2025-01"], newest_first=True) == ["2025-01", "2024-12"]

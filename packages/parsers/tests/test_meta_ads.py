"""Meta Ads parser: header row candidates, fast and full-scan column resolution, row filtering."""
import re

import pytest

from conftest import csv_bytes, meta_ads_rows, xlsx_bytes
from packages.parsers.src.errors import HeaderNotFoundError, SpreadsheetReadError
from packages.parsers.src.meta_ads import parse_meta_ads, parse_meta_ads_rows, resolve_columns
from packages.shared.src.rows import AdSpendRow


def test_default_export_layout():
    data = xlsx_bytes(meta_ads_rows([("01/01/2025", "100,50"), ("02/01/2025", "1.234,56")]))
    rows = parse_meta_ads(data)
    assert rows == [
        AdSpendRow(date="2025-01-01", investment=100.5),
        AdSpendRow(date="2025-01-02", investment=1234.56),
    ]


def test_fast_path_resolves_known_columns():
    header = meta_ads_rows([], header_row=2)[2]
    assert resolve_columns(2, header) == (19, 11)


def test_full_scan_finds_shifted_columns():
    header = ["Campaign", "Reporting starts", "Reporting ends", "Amount spent (USD)"]
    assert resolve_columns(0, header) == (1, 3)


def test_short_data_header_is_a_date_column():
    assert resolve_columns(0, ["Data", "Investimento"]) == (0, 1)


def test_header_on_first_row():
    rows = [["Dia", "Data", "Valor gasto"], ["x", "2025-03-01", 50], ["x", "2025-03-02", 70]]
    parsed = parse_meta_ads_rows(rows)
    assert [r.date for r in parsed] == ["2025-03-01", "2025-03-02"]
    assert [r.investment for r in parsed] == [50.0, 70.0]


def test_header_further_down():
    data = csv_bytes(meta_ads_rows([("10/02/2025", "20")], header_row=5))
    assert parse_meta_ads(data) == [AdSpendRow(date="2025-02-10", investment=20.0)]


def test_explicit_header_row_is_the_only_candidate():
    rows = meta_ads_rows([("01/01/2025", 10)], header_row=2)
    assert len(parse_meta_ads_rows(rows, header_row=2)) == 1
    with pytest.raises(HeaderNotFoundError):
        parse_meta_ads_rows(rows, header_row=0)


def test_rows_skipped_silently():
    days = [
        ("01/01/2025", 10),
        ("", 20),  # no date
        ("03/01/2025", None),  # no amount
        ("04/01/2025", 0),  # zero spend
        ("05/01/2025", "-5"),  # negative
        ("06/01/2025", "abc"),  # unparsable
        ("garbage", 30),  # not a date
        ("07/01/2025", 40),
    ]
    rows = parse_meta_ads_rows(meta_ads_rows(days))
    assert [r.date for r in rows] == ["2025-01-01", "2025-01-07"]


def test_same_date_rows_are_not_merged():
    rows = parse_meta_ads_rows(meta_ads_rows([("01/01/2025", 10), ("01/01/2025", 15)]))
    assert len(rows) == 2


def test_every_date_is_iso():
    rows = parse_meta_ads_rows(meta_ads_rows([("01/01/2025 10:00", 10), (45658, 15), ("2025-01-03", 5)]))
    assert all(re.match(r"^\d{4}-\d{2}-\d{2}$", r.date) for r in rows)
    assert [r.date for r in rows] == ["2025-01-01", "2025-01-01", "2025-01-03"]


def test_header_not_found_names_expected_columns():
    rows = [["foo", "bar"], ["1", "2"]]
    with pytest.raises(HeaderNotFoundError) as err:
        parse_meta_ads_rows(rows)
    assert "Início dos relatórios" in str(err.value)
    assert "Valor usado (BRL)" in str(err.value)
    assert "reporting starts" in err.value.expected_columns


def test_header_without_data_rows_is_not_enough():
    with pytest.raises(HeaderNotFoundError):
        parse_meta_ads_rows(meta_ads_rows([]))


def test_unreadable_bytes():
    with pytest.raises(SpreadsheetReadError):
        parse_meta_ads(b"")
    with pytest.raises(SpreadsheetReadError):
        parse_meta_ads(b"PK\x03\x04not really a zip")


def test_impossible_and_oversized_dates_are_skipped():
    days = [("08/15/2025", 10), ("2025-13-01", 15), ("1" * 400, 20), ("16/08/2025", 30)]
    rows = parse_meta_ads_rows(meta_ads_rows(days))
    assert rows == [AdSpendRow(date="2025-08-16", investment=30.0)]


def test_only_month_first_dates_finds_nothing():
    with pytest.raises(HeaderNotFoundError):
        parse_meta_ads_rows(meta_ads_rows([("08/15/2025", 10)]))

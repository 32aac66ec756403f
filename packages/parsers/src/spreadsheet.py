"""Spreadsheet reading (xlsx or csv bytes -> physical rows) and cell helpers shared by the parsers."""
import csv
import io
import math
import re
from typing import Any, List, Optional, Sequence

import pandas as pd

from packages.parsers.src.errors import (
    MalformedDateError,
    SpreadsheetReadError,
    UnparsableAmountError,
)
from packages.shared.src.dates import is_iso_date, normalize_date

_XLSX_MAGIC = b"PK\x03\x04"
_XLS_MAGIC = b"\xd0\xcf\x11\xe0"
_AMOUNT_STRIP_RE = re.compile(r"[^\d.,\-]")

Row = List[Any]


def is_blank(value: Any) -> bool:
    """None, NaN/NaT, or whitespace-only text."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def cell_text(value: Any) -> str:
    """Cell as text; blanks become '' and integral floats lose their '.0'."""
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin1")


def _read_csv_frame(data: bytes) -> pd.DataFrame:
    text = _decode(data)
    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=",;\t")
    except csv.Error:
        dialect = csv.excel
    rows = list(csv.reader(io.StringIO(text), dialect))
    # ragged rows (export preambles) are padded with None
    return pd.DataFrame(rows, dtype=object)


def _read_xlsx_frame(data: bytes) -> pd.DataFrame:
    try:
        return pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=object, engine="openpyxl")
    except Exception as exc:
        raise SpreadsheetReadError("Could not open the spreadsheet", details=str(exc)) from exc


def read_rows(data: bytes) -> List[Row]:
    """
    Read the first sheet of an xlsx workbook (or a csv file) into physical rows.

    Row indices match the sheet's physical rows (blank rows are kept as all-None rows)
    so header-row positions can be addressed directly. Blank cells are None.
    """
    if not data:
        raise SpreadsheetReadError("The uploaded file is empty")
    if data.startswith(_XLS_MAGIC):
        raise SpreadsheetReadError(
            "Legacy .xls workbooks are not supported",
            details="re-save the export as .xlsx or .csv",
        )
    if data.startswith(_XLSX_MAGIC):
        frame = _read_xlsx_frame(data)
    else:
        frame = _read_csv_frame(data)
    return [
        [None if is_blank(value) else value for value in row]
        for row in frame.itertuples(index=False, name=None)
    ]


def row_value(row: Sequence[Any], index: Optional[int]) -> Any:
    """Cell at index, or None when the index is unresolved or past the row's end."""
    if index is None or index < 0 or index >= len(row):
        return None
    return row[index]


def find_exact_column(headers: Sequence[Any], names: Sequence[str]) -> Optional[int]:
    """Index of the first name (in priority order) matching a header exactly, case-insensitive."""
    normalized = [cell_text(h).strip().lower() for h in headers]
    for name in names:
        wanted = name.strip().lower()
        if wanted in normalized:
            return normalized.index(wanted)
    return None


def parse_amount(value: Any) -> float:
    """
    Read a money cell as float, tolerating currency symbols and locale separators.

    With both ',' and '.' present the right-most one is the decimal separator; a lone
    comma is a decimal comma (pt-BR exports); repeated separators are thousands marks.
    """
    if isinstance(value, bool) or is_blank(value):
        raise UnparsableAmountError("Empty or non-numeric amount", details=repr(value))
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        text = _AMOUNT_STRIP_RE.sub("", str(value))
        if "," in text and "." in text:
            if text.rfind(",") > text.rfind("."):
                text = text.replace(".", "").replace(",", ".")
            else:
                text = text.replace(",", "")
        elif "," in text:
            text = text.replace(",", ".") if text.count(",") == 1 else text.replace(",", "")
        elif text.count(".") > 1:
            text = text.replace(".", "")
        try:
            amount = float(text)
        except ValueError as exc:
            raise UnparsableAmountError("Unparsable amount", details=repr(value)) from exc
    if not math.isfinite(amount):
        raise UnparsableAmountError("Unparsable amount", details=repr(value))
    return amount


def parse_row_date(value: Any) -> str:
    """Normalize a date cell; MalformedDateError unless it ends up as YYYY-MM-DD."""
    if is_blank(value):
        raise MalformedDateError("Empty date cell")
    normalized = normalize_date(value)
    if not is_iso_date(normalized):
        raise MalformedDateError("Unrecognized date", details=repr(value))
    return normalized


def amount_or_zero(value: Any) -> float:
    """parse_amount, with blank or unparsable cells counting as 0."""
    try:
        return parse_amount(value)
    except UnparsableAmountError:
        return 0.0

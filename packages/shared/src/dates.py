"""Date helpers: normalize heterogeneous spreadsheet dates to YYYY-MM-DD, period keys."""
import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

# Excel's 1900 date system (including its phantom 1900-02-29) lines up with this epoch
EXCEL_EPOCH = date(1899, 12, 30)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SERIAL_RE = re.compile(r"^\d+(\.\d+)?$")
_PERIOD_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


def is_iso_date(value: Any) -> bool:
    """True when value is a YYYY-MM-DD string naming a real calendar day."""
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _from_slashed(date_only: str) -> Optional[str]:
    """DD/MM/YYYY (Brazilian locale) -> YYYY-MM-DD; None unless that is a real day (e.g. month-first input)."""
    parts = [p.strip() for p in date_only.split("/")]
    if len(parts) != 3 or not all(parts):
        return None
    day, month, year = parts
    converted = f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return converted if is_iso_date(converted) else None


def _from_excel_serial(date_only: str) -> Optional[str]:
    try:
        serial = int(float(date_only))
        if serial <= 0:
            return None
        return (EXCEL_EPOCH + timedelta(days=serial)).isoformat()
    except (OverflowError, ValueError):
        return None


def _from_generic(date_only: str) -> Optional[str]:
    try:
        parsed = pd.to_datetime(date_only, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date().isoformat()


def normalize_date(raw: Any) -> str:
    """
    Convert a spreadsheet date cell to YYYY-MM-DD. Never raises.

    Tried in order: native date objects, DD/MM/YYYY, ISO pass-through, Excel serial
    number, generic parsing. Slashed dates are handled before generic parsing so they
    are never read month-first. When nothing matches the trimmed input is returned
    unchanged; callers reject it with is_iso_date().
    """
    if isinstance(raw, (datetime, pd.Timestamp)):
        if pd.isna(raw):
            return ""
        return raw.date().isoformat()
    if isinstance(raw, date):
        return raw.isoformat()
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)

    text = str(raw).strip()
    date_only = text.split(" ")[0]

    if "/" in date_only:
        slashed = _from_slashed(date_only)
        if slashed is not None:
            return slashed
    elif _ISO_DATE_RE.match(date_only):
        # ISO-shaped but impossible days (2025-13-01) are not re-guessed
        if is_iso_date(date_only):
            return date_only
    else:
        # bare numbers are Excel serials or nothing; dateutil would guess a year from them
        convert = _from_excel_serial if _SERIAL_RE.match(date_only) else _from_generic
        converted = convert(date_only)
        if converted is not None:
            return converted

    logger.warning("Could not normalize date %r", text)
    return text


def period_of(iso_date: str) -> Tuple[str, str]:
    """('YYYY', 'MM') of a canonical YYYY-MM-DD date."""
    if not is_iso_date(iso_date):
        raise ValueError(f"Not a YYYY-MM-DD date: {iso_date!r}")
    return iso_date[:4], iso_date[5:7]


def parse_period_key(period_key: str) -> Tuple[str, str]:
    """Split 'YYYY-MM' into ('YYYY', 'MM'); ValueError when malformed."""
    match = _PERIOD_KEY_RE.match(period_key or "")
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise ValueError(f"Period must be YYYY-MM, got {period_key!r}")
    return match.group(1), match.group(2)


def sort_period_keys(keys: List[str], newest_first: bool = False) -> List[str]:
    """Period keys sorted chronologically (lexicographic order is chronological)."""
    return sorted(set(keys), reverse=newest_first)

"""Meta Ads spend export parser: locate the header row and the date / amount-spent columns heuristically."""
import logging
from typing import List, Optional, Sequence, Tuple

from packages.parsers.src.errors import (
    HeaderNotFoundError,
    MalformedDateError,
    UnparsableAmountError,
)
from packages.parsers.src.spreadsheet import (
    Row,
    cell_text,
    is_blank,
    parse_amount,
    parse_row_date,
    read_rows,
    row_value,
)
from packages.shared.src.rows import AdSpendRow

logger = logging.getLogger(__name__)

# Default exports put the header on physical row 2; other export configurations shift it.
DEFAULT_HEADER_ROWS = [2, 1, 0, 3, 4, 5, 6, 7, 8, 9]

# Column positions in the default export (header on row 2)
KNOWN_HEADER_ROW = 2
KNOWN_DATE_COLUMN = 19
KNOWN_AMOUNT_COLUMN = 11

DATE_LABELS = ["início dos relatórios", "inicio dos relatorios", "reporting starts"]
AMOUNT_LABELS = ["valor usado", "amount spent", "valor gasto", "investimento"]

_FAST_DATE_HINTS = ["início", "reporting"]
_FAST_AMOUNT_HINTS = ["valor usado", "amount spent"]


def _is_date_header(header: str) -> bool:
    if any(label in header for label in DATE_LABELS):
        return True
    # short generic headers such as "Data" / "Data (dia)"
    return "data" in header and len(header) < 10


def _is_amount_header(header: str) -> bool:
    return any(label in header for label in AMOUNT_LABELS)


def resolve_columns(header_row_index: int, header: Sequence) -> Tuple[Optional[int], Optional[int]]:
    """
    (date column, amount column) for one candidate header row; None where unresolved.

    Checks the default export's fixed positions first, then scans every column.
    """
    date_col: Optional[int] = None
    amount_col: Optional[int] = None
    if header_row_index == KNOWN_HEADER_ROW:
        known_date = cell_text(row_value(header, KNOWN_DATE_COLUMN)).lower()
        known_amount = cell_text(row_value(header, KNOWN_AMOUNT_COLUMN)).lower()
        if any(hint in known_date for hint in _FAST_DATE_HINTS):
            date_col = KNOWN_DATE_COLUMN
        if any(hint in known_amount for hint in _FAST_AMOUNT_HINTS):
            amount_col = KNOWN_AMOUNT_COLUMN

    if date_col is None or amount_col is None:
        headers = [cell_text(h).lower() for h in header]
        if date_col is None:
            date_col = next((i for i, h in enumerate(headers) if _is_date_header(h)), None)
        if amount_col is None:
            amount_col = next((i for i, h in enumerate(headers) if _is_amount_header(h)), None)
    return date_col, amount_col


def _rows_below(rows: List[Row], header_row_index: int, date_col: int, amount_col: int) -> List[AdSpendRow]:
    parsed: List[AdSpendRow] = []
    for row in rows[header_row_index + 1:]:
        if not row or all(is_blank(v) for v in row):
            continue
        date_value = row_value(row, date_col)
        amount_value = row_value(row, amount_col)
        if is_blank(date_value) or amount_value is None:
            continue
        try:
            investment = parse_amount(amount_value)
            if investment <= 0:
                continue
            day = parse_row_date(date_value)
        except (UnparsableAmountError, MalformedDateError) as exc:
            logger.debug("Skipping ad spend row: %s", exc)
            continue
        parsed.append(AdSpendRow(date=day, investment=investment))
    return parsed


def parse_meta_ads_rows(rows: List[Row], header_row: Optional[int] = None) -> List[AdSpendRow]:
    """Parse already-read sheet rows; see parse_meta_ads."""
    candidates = [header_row] if header_row is not None else DEFAULT_HEADER_ROWS
    for candidate in candidates:
        if candidate < 0 or candidate >= len(rows):
            continue
        date_col, amount_col = resolve_columns(candidate, rows[candidate])
        if date_col is None or amount_col is None:
            continue
        parsed = _rows_below(rows, candidate, date_col, amount_col)
        if parsed:
            logger.info(
                "Meta Ads parser: %d rows using header row %d (date col %d, amount col %d)",
                len(parsed), candidate, date_col, amount_col,
            )
            return parsed

    raise HeaderNotFoundError(
        'Required columns not found: "Início dos relatórios" (Reporting starts) and '
        '"Valor usado (BRL)" (Amount spent). Check that the file is a Meta Ads export, '
        "or pick the header row explicitly (usually row 2)",
        expected_columns=DATE_LABELS + AMOUNT_LABELS,
        details=f"header rows tried: {candidates}",
    )


def parse_meta_ads(file_bytes: bytes, header_row: Optional[int] = None) -> List[AdSpendRow]:
    """
    Parse a Meta Ads export into AdSpendRow list.

    Header rows are tried in DEFAULT_HEADER_ROWS order (or only header_row when given);
    the first candidate that yields at least one valid row wins. Rows sharing a date are
    kept separate. Raises HeaderNotFoundError when no candidate works.
    """
    return parse_meta_ads_rows(read_rows(file_bytes), header_row=header_row)

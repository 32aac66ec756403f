"""Sales export parsers (Hotmart, Kiwify): keep completed transactions and resolve net / gross revenue."""
import logging
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from packages.parsers.src.errors import (
    HeaderNotFoundError,
    MalformedDateError,
    NoValidTransactionsError,
    UnparsableAmountError,
)
from packages.parsers.src.spreadsheet import (
    Row,
    amount_or_zero,
    cell_text,
    find_exact_column,
    is_blank,
    parse_amount,
    parse_row_date,
    read_rows,
    row_value,
)
from packages.shared.src.enums import SaleSource
from packages.shared.src.rows import SaleRow

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown product"

# Accepted header spellings per logical field, in priority order (preferred first).
HOTMART_COLUMNS: Dict[str, List[str]] = {
    "date": ["DATA CORRIGIDA", "Data da transação"],
    "status": ["STATUS DA TRANSAÇÃO"],
    "producer_revenue": ["FATURAMENTO LÍQUIDO DO(A) PRODUTOR(A)"],
    "coproducer_revenue": ["FATURAMENTO DO(A) COPRODUTOR(A)"],
    "product": ["PRODUTO"],
}
HOTMART_REQUIRED = ["date", "status", "producer_revenue"]
HOTMART_STATUSES: Set[str] = {"aprovado", "completo", "approved", "complete"}

KIWIFY_COLUMNS: Dict[str, List[str]] = {
    "date": ["Data de Criação", "Created At", "Data"],
    "status": ["Status"],
    "base_price": ["Preço base do produto"],
    "fees": ["Taxas"],
    "product": ["Produto"],
}
KIWIFY_REQUIRED = ["date", "status", "base_price"]
KIWIFY_STATUSES: Set[str] = {"paid"}

Columns = Dict[str, Optional[int]]
RevenueFn = Callable[[Row, Columns], Tuple[float, float]]


def resolve_columns(headers: Sequence, layout: Dict[str, List[str]]) -> Columns:
    """Map each logical field to a column index (None when no spelling matches)."""
    return {field: find_exact_column(headers, names) for field, names in layout.items()}


def _require_columns(platform: str, columns: Columns, layout: Dict[str, List[str]], required: List[str]) -> None:
    missing = [field for field in required if columns.get(field) is None]
    if not missing:
        return
    expected = [name for field in missing for name in layout[field]]
    raise HeaderNotFoundError(
        f"Required {platform} columns not found. Check that the file is a {platform} sales export",
        expected_columns=expected,
        details="expected one of: " + ", ".join(f'"{name}"' for name in expected),
    )


def _hotmart_revenue(row: Row, columns: Columns) -> Tuple[float, float]:
    # producer + co-producer share; no separate gross figure in the export
    net = amount_or_zero(row_value(row, columns["producer_revenue"]))
    net += amount_or_zero(row_value(row, columns["coproducer_revenue"]))
    return net, net


def _kiwify_revenue(row: Row, columns: Columns) -> Tuple[float, float]:
    price = parse_amount(row_value(row, columns["base_price"]))
    fees_cell = row_value(row, columns["fees"])
    fees = 0.0 if is_blank(fees_cell) else parse_amount(fees_cell)
    return price - fees, price


def _parse_sales(
    rows: List[Row],
    platform: str,
    source: SaleSource,
    layout: Dict[str, List[str]],
    required: List[str],
    statuses: Set[str],
    revenue: RevenueFn,
) -> List[SaleRow]:
    if not rows:
        raise HeaderNotFoundError(
            f"The {platform} file has no header row",
            expected_columns=[name for field in required for name in layout[field]],
        )
    columns = resolve_columns(rows[0], layout)
    _require_columns(platform, columns, layout, required)

    parsed: List[SaleRow] = []
    skipped = {"status": 0, "date": 0, "value": 0}
    data_rows = [row for row in rows[1:] if row and not all(is_blank(v) for v in row)]
    for row in data_rows:
        status = cell_text(row_value(row, columns["status"])).strip().lower()
        if status not in statuses:
            skipped["status"] += 1
            continue
        try:
            day = parse_row_date(row_value(row, columns["date"]))
        except MalformedDateError:
            skipped["date"] += 1
            continue
        try:
            net, gross = revenue(row, columns)
        except UnparsableAmountError:
            skipped["value"] += 1
            continue
        if net <= 0:
            skipped["value"] += 1
            continue
        product = cell_text(row_value(row, columns.get("product"))).strip() or UNKNOWN_PRODUCT
        parsed.append(SaleRow(date=day, product=product, net=net, gross=gross, source=source))

    periods = sorted({row.date[:7] for row in parsed})
    logger.info(
        "%s parser: %d rows read, %d parsed, skipped status=%d date=%d value=%d, periods=%s",
        platform, len(data_rows), len(parsed), skipped["status"], skipped["date"], skipped["value"],
        ", ".join(periods) or "-",
    )

    if not parsed:
        accepted = sorted(statuses)
        raise NoValidTransactionsError(
            f"No valid {platform} transactions found. Expected rows with status "
            + " or ".join(f'"{s}"' for s in accepted)
            + " and net revenue > 0",
            accepted_statuses=accepted,
            details="skipped by status={status}, date={date}, value={value}".format(**skipped),
            skipped=skipped,
        )
    return parsed


def parse_hotmart_rows(rows: List[Row]) -> List[SaleRow]:
    """Parse already-read Hotmart sheet rows; see parse_hotmart."""
    return _parse_sales(
        rows, "Hotmart", SaleSource.HOTMART, HOTMART_COLUMNS, HOTMART_REQUIRED, HOTMART_STATUSES, _hotmart_revenue
    )


def parse_kiwify_rows(rows: List[Row]) -> List[SaleRow]:
    """Parse already-read Kiwify sheet rows; see parse_kiwify."""
    return _parse_sales(
        rows, "Kiwify", SaleSource.KIWIFY, KIWIFY_COLUMNS, KIWIFY_REQUIRED, KIWIFY_STATUSES, _kiwify_revenue
    )


def parse_hotmart(file_bytes: bytes) -> List[SaleRow]:
    """
    Hotmart sales export -> SaleRow list.

    Keeps approved / complete transactions; net = producer + co-producer revenue,
    gross = net. Raises HeaderNotFoundError or NoValidTransactionsError.
    """
    return parse_hotmart_rows(read_rows(file_bytes))


def parse_kiwify(file_bytes: bytes) -> List[SaleRow]:
    """
    Kiwify sales export -> SaleRow list.

    Keeps "paid" transactions; net = base price - fees, gross = base price.
    """
    return parse_kiwify_rows(read_rows(file_bytes))

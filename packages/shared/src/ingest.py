"""Ingestion boundary: parse uploaded spreadsheets into period buckets; query and manual entry on top."""
import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from packages.metrics.src.aggregator import KPIReport, aggregate
from packages.metrics.src.trends import TrendReport, compute_trends, previous_period
from packages.parsers.src.meta_ads import parse_meta_ads
from packages.parsers.src.sales import UNKNOWN_PRODUCT, parse_hotmart, parse_kiwify
from packages.periods.src.merge import (
    append_sale,
    derive_period,
    empty_bucket,
    merge_ad_spend,
    merge_sales,
    period_key,
    remove_sale,
)
from packages.periods.src.store import PeriodRepository
from packages.shared.src.dates import is_iso_date, normalize_date, parse_period_key, period_of
from packages.shared.src.enums import SaleSource, UploadType
from packages.shared.src.rows import AdSpendRow, SaleRow

logger = logging.getLogger(__name__)

Rows = Union[List[AdSpendRow], List[SaleRow]]

_SALES_PARSERS: Dict[UploadType, Callable[[bytes], List[SaleRow]]] = {
    UploadType.HOTMART: parse_hotmart,
    UploadType.KIWIFY: parse_kiwify,
}


@dataclass(frozen=True)
class UploadResult:
    records: int
    period: str  # YYYY-MM


def parse_upload(file_bytes: bytes, upload_type: UploadType, header_row: Optional[int] = None) -> Rows:
    """Dispatch to the parser of the upload type. header_row only applies to Meta Ads exports."""
    upload_type = UploadType(upload_type)
    if upload_type is UploadType.META_ADS:
        return parse_meta_ads(file_bytes, header_row=header_row)
    return _SALES_PARSERS[upload_type](file_bytes)


def upload_file(
    repo: PeriodRepository,
    project_id: int,
    file_bytes: bytes,
    upload_type: UploadType,
    header_row: Optional[int] = None,
) -> UploadResult:
    """
    Parse file_bytes and merge the rows into the period of the first parsed row.

    Ad spend replaces the period's ad spend; sales replace the period's rows of the same
    source and keep the other sources. Raises ParseError subclasses when the file is unusable.
    """
    upload_type = UploadType(upload_type)
    rows = parse_upload(file_bytes, upload_type, header_row=header_row)
    year, month = derive_period(rows)
    bucket = repo.get_period(project_id, year, month) or empty_bucket(year, month)
    if upload_type is UploadType.META_ADS:
        bucket = merge_ad_spend(bucket, rows)
    else:
        bucket = merge_sales(bucket, rows, upload_type.sale_source)
    repo.put_period(project_id, bucket)
    logger.info(
        "Merged %d %s rows into project %s period %s",
        len(rows),
        upload_type.value,
        project_id,
        bucket.key,
    )
    return UploadResult(records=len(rows), period=bucket.key)


def get_kpis_for_period(repo: PeriodRepository, project_id: int, period: str) -> KPIReport:
    """KPIs of one YYYY-MM period; an all-zero report when the period has no data."""
    year, month = parse_period_key(period)
    bucket = repo.get_period(project_id, year, month)
    if bucket is None:
        return KPIReport()
    return aggregate(bucket.ad_spend, bucket.sales)


def get_trends_for_period(repo: PeriodRepository, project_id: int, period: str) -> TrendReport:
    """Headline KPIs of period compared with the project's closest earlier period."""
    current = get_kpis_for_period(repo, project_id, period)
    prev_key = previous_period(repo.list_periods(project_id), period)
    if prev_key is None:
        return compute_trends(current.totals, None)
    previous = get_kpis_for_period(repo, project_id, prev_key)
    return compute_trends(current.totals, previous.totals, previous_key=prev_key)


def build_manual_sale(date: str, product: str, net: float, gross: Optional[float] = None) -> SaleRow:
    """Validate manual input into a SaleRow; ValueError on a bad date, a non-positive net or a negative gross."""
    normalized = normalize_date(date)
    if not is_iso_date(normalized):
        raise ValueError(f"Unrecognized sale date: {date!r}")
    net = float(net)
    if not math.isfinite(net) or net <= 0:
        raise ValueError("Net value must be a number greater than zero")
    gross = net if gross is None else float(gross)
    if not math.isfinite(gross) or gross < 0:
        raise ValueError("Gross value must be a number of zero or more")
    return SaleRow(
        date=normalized,
        product=(product or "").strip() or UNKNOWN_PRODUCT,
        net=net,
        gross=gross,
        source=SaleSource.MANUAL,
    )


def add_manual_sale(
    repo: PeriodRepository,
    project_id: int,
    date: str,
    product: str,
    net: float,
    gross: Optional[float] = None,
) -> SaleRow:
    """Append one manual sale to the period of its date (never replaces other sales)."""
    row = build_manual_sale(date, product, net, gross)
    year, month = period_of(row.date)
    bucket = repo.get_period(project_id, year, month) or empty_bucket(year, month)
    repo.put_period(project_id, append_sale(bucket, row))
    logger.info("Added manual sale of %.2f to project %s period %s", row.net, project_id, period_key(year, month))
    return row


def remove_manual_sale(repo: PeriodRepository, project_id: int, row: SaleRow) -> bool:
    """Remove one previously added manual sale from its period; False when it is no longer there."""
    year, month = period_of(row.date)
    bucket = repo.get_period(project_id, year, month)
    if bucket is None:
        return False
    updated = remove_sale(bucket, row)
    if updated is None:
        return False
    repo.put_period(project_id, updated)
    return True


def clear_period(repo: PeriodRepository, project_id: int, period: str) -> bool:
    year, month = parse_period_key(period)
    removed = repo.delete_period(project_id, year, month)
    if removed:
        logger.info("Cleared period %s of project %s", period, project_id)
    return removed


def list_periods(repo: PeriodRepository, project_id: int, newest_first: bool = True) -> List[str]:
    periods = repo.list_periods(project_id)
    return list(reversed(periods)) if newest_first else periods

"""
Merge semantics of a period bucket.

- Ad spend: every upload replaces the bucket's ad spend wholesale.
- Sales: an upload from source X drops the bucket's X rows and appends the new ones;
  rows of other sources are kept.
- Manual sales: appended one at a time.
All functions return a new bucket; the input is not modified.
"""
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from packages.shared.src.dates import period_of
from packages.shared.src.enums import SaleSource
from packages.shared.src.rows import AdSpendRow, PeriodBucket, SaleRow


def period_key(year: str, month: str) -> str:
    return f"{year}-{month}"


def derive_period(rows: Sequence) -> Tuple[str, str]:
    """(year, month) of an upload, taken from its first row's date."""
    if not rows:
        raise ValueError("Cannot derive a period from an empty upload")
    return period_of(rows[0].date)


def empty_bucket(year: str, month: str) -> PeriodBucket:
    return PeriodBucket(year=year, month=month)


def merge_ad_spend(bucket: PeriodBucket, rows: Sequence[AdSpendRow]) -> PeriodBucket:
    return replace(bucket, ad_spend=list(rows))


def merge_sales(bucket: PeriodBucket, rows: Sequence[SaleRow], source: SaleSource) -> PeriodBucket:
    kept = [row for row in bucket.sales if row.source != source]
    return replace(bucket, sales=kept + list(rows))


def append_sale(bucket: PeriodBucket, row: SaleRow) -> PeriodBucket:
    return replace(bucket, sales=list(bucket.sales) + [row])


def remove_sale(bucket: PeriodBucket, row: SaleRow) -> Optional[PeriodBucket]:
    """Drop the first sale equal to row; None when the bucket holds no such sale."""
    sales = list(bucket.sales)
    try:
        sales.remove(row)
    except ValueError:
        return None
    return replace(bucket, sales=sales)

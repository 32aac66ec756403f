"""Period merge semantics and both repository implementations."""
import pytest

from packages.periods.src.merge import (
    append_sale,
    derive_period,
    empty_bucket,
    merge_ad_spend,
    merge_sales,
    remove_sale,
)
from packages.periods.src.store import InMemoryPeriodRepository, SQLPeriodRepository
from packages.shared.src.enums import SaleSource
from packages.shared.src.rows import AdSpendRow, PeriodBucket, SaleRow


def _sale(source, product, net=10.0, day="2025-01-05"):
    return SaleRow(date=day, product=product, net=net, gross=net, source=source)


@pytest.fixture(params=["memory", "sql"])
def repo(request, mem_session):
    if request.param == "memory":
        return InMemoryPeriodRepository()
    return SQLPeriodRepository(mem_session)


def test_ad_spend_replaced_wholesale():
    bucket = merge_ad_spend(empty_bucket("2025", "01"), [AdSpendRow("2025-01-01", 10)])
    bucket = merge_ad_spend(bucket, [AdSpendRow("2025-01-02", 20), AdSpendRow("2025-01-03", 30)])
    assert bucket.ad_spend == [AdSpendRow("2025-01-02", 20), AdSpendRow("2025-01-03", 30)]


def test_sales_merged_by_source():
    bucket = empty_bucket("2025", "01")
    bucket = merge_sales(bucket, [_sale(SaleSource.HOTMART, "h1")], SaleSource.HOTMART)
    bucket = merge_sales(bucket, [_sale(SaleSource.KIWIFY, "k1")], SaleSource.KIWIFY)
    bucket = append_sale(bucket, _sale(SaleSource.MANUAL, "m1"))
    bucket = merge_sales(bucket, [_sale(SaleSource.HOTMART, "h2"), _sale(SaleSource.HOTMART, "h3")], SaleSource.HOTMART)
    assert [s.product for s in bucket.sales] == ["k1", "m1", "h2", "h3"]


def test_merge_does_not_modify_input():
    original = empty_bucket("2025", "01")
    merge_sales(original, [_sale(SaleSource.HOTMART, "h1")], SaleSource.HOTMART)
    assert original.is_empty


def test_remove_sale_first_match_only():
    row = _sale(SaleSource.MANUAL, "m")
    bucket = append_sale(append_sale(empty_bucket("2025", "01"), row), row)
    bucket = remove_sale(bucket, row)
    assert bucket.sales == [row]
    assert remove_sale(empty_bucket("2025", "01"), row) is None


def test_derive_period_from_first_row():
    rows = [AdSpendRow("2025-01-31", 1), AdSpendRow("2025-02-01", 1)]
    assert derive_period(rows) == ("2025", "01")
    with pytest.raises(ValueError):
        derive_period([])


def test_repository_round_trip(repo):
    bucket = PeriodBucket(
        year="2025",
        month="01",
        ad_spend=[AdSpendRow("2025-01-02", 20.5), AdSpendRow("2025-01-01", 10.0)],
        sales=[_sale(SaleSource.KIWIFY, "k"), _sale(SaleSource.MANUAL, "m", 3.3)],
    )
    repo.put_period(7, bucket)
    assert repo.get_period(7, "2025", "01") == bucket
    assert repo.get_period(7, "2025", "02") is None
    assert repo.get_period(8, "2025", "01") is None


def test_repository_one_bucket_per_period(repo):
    repo.put_period(1, PeriodBucket("2025", "01", ad_spend=[AdSpendRow("2025-01-01", 1)]))
    repo.put_period(1, PeriodBucket("2025", "01", ad_spend=[AdSpendRow("2025-01-09", 9)]))
    assert repo.list_periods(1) == ["2025-01"]
    assert repo.get_period(1, "2025", "01").ad_spend == [AdSpendRow("2025-01-09", 9)]


def test_upload_sequence_keeps_other_sources(repo):
    """Hotmart, then Kiwify, then Hotmart again: latest Hotmart rows plus all Kiwify rows."""

    def upload(rows, source):
        bucket = repo.get_period(1, "2025", "01") or empty_bucket("2025", "01")
        repo.put_period(1, merge_sales(bucket, rows, source))

    upload([_sale(SaleSource.HOTMART, "h-old-1"), _sale(SaleSource.HOTMART, "h-old-2")], SaleSource.HOTMART)
    upload([_sale(SaleSource.KIWIFY, "k1"), _sale(SaleSource.KIWIFY, "k2")], SaleSource.KIWIFY)
    upload([_sale(SaleSource.HOTMART, "h-new")], SaleSource.HOTMART)

    sales = repo.get_period(1, "2025", "01").sales
    assert sorted(s.product for s in sales) == ["h-new", "k1", "k2"]


def test_delete_period_and_project(repo):
    repo.put_period(1, PeriodBucket("2025", "02", sales=[_sale(SaleSource.MANUAL, "m", day="2025-02-01")]))
    repo.put_period(1, PeriodBucket("2024", "12", ad_spend=[AdSpendRow("2024-12-01", 1)]))
    repo.put_period(2, PeriodBucket("2025", "02", ad_spend=[AdSpendRow("2025-02-01", 1)]))
    assert repo.list_periods(1) == ["2024-12", "2025-02"]

    assert repo.delete_period(1, "2025", "02") is True
    assert repo.delete_period(1, "2025", "02") is False
    assert repo.list_periods(1) == ["2024-12"]

    assert repo.delete_project(1) == 1
    assert repo.list_periods(1) == []
    assert repo.list_periods(2) == ["2025-02"]

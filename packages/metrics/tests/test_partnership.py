"""Partnership payout."""
import pytest

from packages.metrics.src.aggregator import KPISummary
from packages.metrics.src.partnership import PayoutTerms, build_partnership_report, partnership_payout


def test_default_terms():
    summary = KPISummary(total_revenue_net=10000, total_investment=4000, profit=6000)
    payout = partnership_payout(1, "Launch", summary, PayoutTerms())
    assert payout.platform_fee == pytest.approx(600)
    assert payout.tax == 0
    assert payout.payout == pytest.approx(5400)


def test_tax_and_participation():
    summary = KPISummary(total_revenue_net=10000, total_investment=4000, profit=6000)
    payout = partnership_payout(1, "Launch", summary, PayoutTerms(platform_tax=5, tax=10, participation=50))
    # (6000 - 500 - 600) * 50%
    assert payout.payout == pytest.approx(2450)
    assert payout.participation == 50


def test_report_total():
    a = KPISummary(total_revenue_net=1000, profit=500)
    b = KPISummary(total_revenue_net=2000, profit=-100)
    report = build_partnership_report("2025-01", [(1, "A", a, PayoutTerms()), (2, "B", b, PayoutTerms(platform_tax=0))])
    assert report.period == "2025-01"
    assert [p.project_name for p in report.projects] == ["A", "B"]
    assert report.total_payout == pytest.approx(440 - 100)


def test_empty_report():
    report = build_partnership_report("2025-01", [])
    assert report.projects == []
    assert report.total_payout == 0

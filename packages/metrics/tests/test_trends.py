"""Month-over-month trends."""
import pytest

from packages.metrics.src.aggregator import KPISummary
from packages.metrics.src.trends import Trend, compute_trends, previous_period, trend
from packages.shared.src.enums import TrendDirection


def test_trend_up_down_neutral():
    assert trend(150, 100) == Trend(change_pct=50.0, direction=TrendDirection.UP)
    assert trend(50, 100) == Trend(change_pct=-50.0, direction=TrendDirection.DOWN)
    assert trend(100, 100) == Trend(change_pct=0.0, direction=TrendDirection.NEUTRAL)


def test_trend_from_negative_baseline():
    assert trend(-50, -100) == Trend(change_pct=50.0, direction=TrendDirection.UP)
    assert trend(-150, -100) == Trend(change_pct=-50.0, direction=TrendDirection.DOWN)
    assert trend(100, -100) == Trend(change_pct=200.0, direction=TrendDirection.UP)


def test_trend_without_baseline():
    assert trend(100, 0) == Trend(change_pct=None, direction=TrendDirection.NEUTRAL)


def test_previous_period():
    periods = ["2025-03", "2024-12", "2025-01"]
    assert previous_period(periods, "2025-03") == "2025-01"
    assert previous_period(periods, "2025-02") == "2025-01"
    assert previous_period(periods, "2024-12") is None


def test_compute_trends():
    current = KPISummary(total_revenue_net=1200, total_investment=400, roas=3.0, profit=800)
    previous = KPISummary(total_revenue_net=1000, total_investment=500, roas=2.0, profit=500)
    report = compute_trends(current, previous, previous_key="2025-01")
    assert report.previous_period == "2025-01"
    assert report.revenue.change_pct == pytest.approx(20.0)
    assert report.roas.direction == TrendDirection.UP
    assert report.investment.direction == TrendDirection.DOWN
    assert report.profit.change_pct == pytest.approx(60.0)


def test_compute_trends_first_period():
    report = compute_trends(KPISummary(total_revenue_net=10), None)
    assert report.previous_period is None
    assert report.revenue.change_pct is None
    assert report.revenue.direction == TrendDirection.NEUTRAL

"""Cross-project period comparison."""
import pytest

from packages.metrics.src.aggregator import KPISummary
from packages.metrics.src.comparison import combine_summaries, compare_periods


def test_combined_totals_recompute_ratios():
    a = KPISummary(
        total_days=20, total_investment=100, total_sales=2, total_revenue_net=300, total_revenue_gross=320,
        average_ticket=150, roas=3.0, profit=200, effective_sales=2,
    )
    b = KPISummary(
        total_days=31, total_investment=300, total_sales=8, total_revenue_net=500, total_revenue_gross=500,
        average_ticket=62.5, roas=500 / 300, profit=200, effective_sales=8, refunds=1,
    )
    combined = combine_summaries([a, b])
    assert combined.total_days == 31
    assert combined.total_investment == 400
    assert combined.total_sales == 10
    assert combined.total_revenue_net == 800
    assert combined.total_revenue_gross == 820
    assert combined.profit == 400
    assert combined.refunds == 1
    # ratios of the sums, not sums of the ratios
    assert combined.average_ticket == pytest.approx(80)
    assert combined.roas == pytest.approx(2.0)


def test_combined_without_spend_or_sales():
    combined = combine_summaries([KPISummary(), KPISummary(total_revenue_net=0)])
    assert combined.roas == 0
    assert combined.average_ticket == 0
    assert combine_summaries([]) == KPISummary()


def test_compare_groups_by_period_newest_first():
    jan_a = KPISummary(total_sales=1, total_revenue_net=100)
    feb_a = KPISummary(total_sales=2, total_revenue_net=150)
    feb_b = KPISummary(total_sales=1, total_revenue_net=50, total_investment=100)
    result = compare_periods([
        (1, "A", "2025-01", jan_a),
        (1, "A", "2025-02", feb_a),
        (2, "B", "2025-02", feb_b),
    ])
    assert [c.period for c in result] == ["2025-02", "2025-01"]
    feb = result[0]
    assert [(p.project_id, p.project_name) for p in feb.projects] == [(1, "A"), (2, "B")]
    assert feb.totals.total_revenue_net == 200
    assert feb.totals.total_sales == 3
    assert feb.totals.roas == pytest.approx(2.0)
    assert result[1].projects[0].totals == jan_a


def test_compare_nothing():
    assert compare_periods([]) == []

"""Cross-project comparison: KPI totals of several projects side by side, summed per period."""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from packages.metrics.src.aggregator import KPISummary, safe_div
from packages.shared.src.dates import sort_period_keys


@dataclass(frozen=True)
class ProjectPeriodKPIs:
    project_id: int
    project_name: str
    totals: KPISummary


@dataclass(frozen=True)
class PeriodComparison:
    """One period: each selected project's totals and their combined totals."""

    period: str
    totals: KPISummary = field(default_factory=KPISummary)
    projects: List[ProjectPeriodKPIs] = field(default_factory=list)


def combine_summaries(summaries: Iterable[KPISummary]) -> KPISummary:
    """
    Sum the additive KPIs of several summaries; ticket and ROAS are recomputed from the sums.

    total_days is the largest day count among the summaries (the projects share the calendar).
    """
    summaries = list(summaries)
    investment = sum((s.total_investment for s in summaries), 0.0)
    sales = sum(s.total_sales for s in summaries)
    revenue_net = sum((s.total_revenue_net for s in summaries), 0.0)
    return KPISummary(
        total_days=max((s.total_days for s in summaries), default=0),
        total_investment=investment,
        total_sales=sales,
        total_revenue_net=revenue_net,
        total_revenue_gross=sum((s.total_revenue_gross for s in summaries), 0.0),
        average_ticket=safe_div(revenue_net, sales),
        roas=safe_div(revenue_net, investment),
        profit=sum((s.profit for s in summaries), 0.0),
        effective_sales=sum(s.effective_sales for s in summaries),
        refunds=sum(s.refunds for s in summaries),
    )


def compare_periods(entries: Iterable[Tuple[int, str, str, KPISummary]]) -> List[PeriodComparison]:
    """
    Group (project_id, project_name, period, summary) entries by period, newest period first.

    Projects keep their entry order within a period.
    """
    grouped: Dict[str, List[ProjectPeriodKPIs]] = {}
    for project_id, project_name, period, summary in entries:
        grouped.setdefault(period, []).append(ProjectPeriodKPIs(project_id, project_name, summary))
    return [
        PeriodComparison(
            period=period,
            totals=combine_summaries(p.totals for p in grouped[period]),
            projects=grouped[period],
        )
        for period in sort_period_keys(list(grouped), newest_first=True)
    ]

"""Month-over-month trend of headline KPIs (revenue, ROAS, profit, investment)."""
from dataclasses import dataclass, field
from typing import Iterable, Optional

from packages.metrics.src.aggregator import KPISummary
from packages.shared.src.dates import sort_period_keys
from packages.shared.src.enums import TrendDirection


@dataclass(frozen=True)
class Trend:
    """Percent change vs the previous period; change is None when there is nothing to compare."""

    change_pct: Optional[float] = None
    direction: TrendDirection = TrendDirection.NEUTRAL


@dataclass(frozen=True)
class TrendReport:
    previous_period: Optional[str] = None
    revenue: Trend = field(default_factory=Trend)
    roas: Trend = field(default_factory=Trend)
    profit: Trend = field(default_factory=Trend)
    investment: Trend = field(default_factory=Trend)


def previous_period(periods: Iterable[str], current: str) -> Optional[str]:
    """Closest period key before current among periods (YYYY-MM keys), or None."""
    earlier = [p for p in sort_period_keys(list(periods)) if p < current]
    return earlier[-1] if earlier else None


def trend(current: float, previous: float) -> Trend:
    """
    (current - previous) / |previous| as a percentage; neutral and None when previous is 0.

    Dividing by the magnitude keeps the sign of the change equal to the direction of the
    move, so a loss shrinking from -100 to -50 is +50% and UP.
    """
    if not previous:
        return Trend()
    change = (current - previous) / abs(previous) * 100
    if change > 0:
        direction = TrendDirection.UP
    elif change < 0:
        direction = TrendDirection.DOWN
    else:
        direction = TrendDirection.NEUTRAL
    return Trend(change_pct=change, direction=direction)


def compute_trends(
    current: KPISummary,
    previous: Optional[KPISummary],
    previous_key: Optional[str] = None,
) -> TrendReport:
    """Compare two period summaries; all trends are neutral when there is no previous period."""
    if previous is None:
        return TrendReport()
    return TrendReport(
        previous_period=previous_key,
        revenue=trend(current.total_revenue_net, previous.total_revenue_net),
        roas=trend(current.roas, previous.roas),
        profit=trend(current.profit, previous.profit),
        investment=trend(current.total_investment, previous.total_investment),
    )

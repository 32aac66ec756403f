"""Period KPIs: totals, per-product and per-day breakdowns of spend and sales (ROAS, CAC, ticket, profit)."""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from packages.shared.src.enums import ProductClassification
from packages.shared.src.rows import AdSpendRow, SaleRow

UPSELL_KEYWORDS = ["upsell", "bump", "complementar", "adicional", "additional", "extra", "plus"]


@dataclass(frozen=True)
class KPISummary:
    """Period totals."""

    total_days: int = 0
    total_investment: float = 0.0
    total_sales: int = 0
    total_revenue_net: float = 0.0
    total_revenue_gross: float = 0.0
    average_ticket: float = 0.0
    roas: float = 0.0
    profit: float = 0.0
    effective_sales: int = 0
    refunds: int = 0


@dataclass(frozen=True)
class ProductKPI:
    product: str
    sales: int
    revenue_net: float
    average_ticket: float
    classification: ProductClassification


@dataclass(frozen=True)
class DailyKPI:
    date: str
    investment: float
    sales: int
    revenue: float
    average_ticket: float
    roas: float
    cac: float


@dataclass(frozen=True)
class KPIReport:
    """Everything the dashboard shows for one period."""

    totals: KPISummary = field(default_factory=KPISummary)
    by_product: List[ProductKPI] = field(default_factory=list)
    by_day: List[DailyKPI] = field(default_factory=list)


@dataclass
class _DayTotals:
    investment: float = 0.0
    sales: int = 0
    revenue: float = 0.0
    gross_revenue: float = 0.0


def safe_div(numerator: float, denominator: float) -> float:
    """numerator / denominator, 0.0 when the denominator is 0 (never NaN or inf)."""
    if not denominator:
        return 0.0
    return numerator / denominator


def classify_product(product: str) -> ProductClassification:
    """Upsell when the name contains an upsell keyword (case-insensitive), else Principal."""
    name = product.lower()
    if any(keyword in name for keyword in UPSELL_KEYWORDS):
        return ProductClassification.UPSELL
    return ProductClassification.PRINCIPAL


def _daily_totals(ad_spend: Iterable[AdSpendRow], sales: Iterable[SaleRow]) -> Dict[str, _DayTotals]:
    days: Dict[str, _DayTotals] = {}
    for row in ad_spend:
        days.setdefault(row.date, _DayTotals()).investment += row.investment
    for row in sales:
        day = days.setdefault(row.date, _DayTotals())
        day.sales += 1
        day.revenue += row.net
        day.gross_revenue += row.gross
    return days


def _summary(days: Dict[str, _DayTotals]) -> KPISummary:
    total_investment = sum((d.investment for d in days.values()), 0.0)
    total_sales = sum(d.sales for d in days.values())
    total_net = sum((d.revenue for d in days.values()), 0.0)
    total_gross = sum((d.gross_revenue for d in days.values()), 0.0)
    return KPISummary(
        total_days=len(days),
        total_investment=total_investment,
        total_sales=total_sales,
        total_revenue_net=total_net,
        total_revenue_gross=total_gross,
        average_ticket=safe_div(total_net, total_sales),
        roas=safe_div(total_net, total_investment),
        profit=total_net - total_investment,
        # refunds are not in the exports yet: every kept sale counts as effective
        effective_sales=total_sales,
        refunds=0,
    )


def _by_product(sales: Iterable[SaleRow]) -> List[ProductKPI]:
    grouped: Dict[str, List[float]] = {}
    for row in sales:
        grouped.setdefault(row.product, []).append(row.net)
    return [
        ProductKPI(
            product=product,
            sales=len(nets),
            revenue_net=sum(nets),
            average_ticket=safe_div(sum(nets), len(nets)),
            classification=classify_product(product),
        )
        for product, nets in grouped.items()
    ]


def _by_day(days: Dict[str, _DayTotals]) -> List[DailyKPI]:
    return [
        DailyKPI(
            date=day,
            investment=d.investment,
            sales=d.sales,
            revenue=d.revenue,
            average_ticket=safe_div(d.revenue, d.sales),
            roas=safe_div(d.revenue, d.investment),
            cac=safe_div(d.investment, d.sales),
        )
        # canonical YYYY-MM-DD strings sort chronologically
        for day, d in sorted(days.items())
    ]


def aggregate(ad_spend: Iterable[AdSpendRow], sales: Iterable[SaleRow]) -> KPIReport:
    """
    Aggregate one period's ad spend and sales into totals, per-product and per-day KPIs.

    Pure and deterministic; empty input gives an all-zero report. A day present only in
    ad spend (or only in sales) counts with zero for the missing side.
    """
    ad_spend = list(ad_spend)
    sales = list(sales)
    days = _daily_totals(ad_spend, sales)
    return KPIReport(
        totals=_summary(days),
        by_product=_by_product(sales),
        by_day=_by_day(days),
    )

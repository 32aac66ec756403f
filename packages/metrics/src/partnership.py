"""
Partnership payout ("repasse"): what is owed to the partner for a period after fees and tax.

    platform_fee = revenue_net * platform_tax%
    tax          = profit * tax%
    payout       = (profit - platform_fee - tax) * participation%
"""
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from packages.metrics.src.aggregator import KPISummary


@dataclass(frozen=True)
class PayoutTerms:
    """Percentages (0-100) agreed per project."""

    platform_tax: float = 6.0
    tax: float = 0.0
    participation: float = 100.0


@dataclass(frozen=True)
class PartnershipPayout:
    project_id: int
    project_name: str
    revenue_net: float
    investment: float
    profit: float
    platform_fee: float
    tax: float
    participation: float
    payout: float


@dataclass(frozen=True)
class PartnershipReport:
    period: str
    projects: List[PartnershipPayout]
    total_payout: float


def partnership_payout(
    project_id: int,
    project_name: str,
    summary: KPISummary,
    terms: PayoutTerms,
) -> PartnershipPayout:
    """Payout for one project's period summary under the given terms."""
    platform_fee = summary.total_revenue_net * terms.platform_tax / 100
    tax = summary.profit * terms.tax / 100
    payout = (summary.profit - platform_fee - tax) * terms.participation / 100
    return PartnershipPayout(
        project_id=project_id,
        project_name=project_name,
        revenue_net=summary.total_revenue_net,
        investment=summary.total_investment,
        profit=summary.profit,
        platform_fee=platform_fee,
        tax=tax,
        participation=terms.participation,
        payout=payout,
    )


def build_partnership_report(
    period: str,
    entries: Iterable[Tuple[int, str, KPISummary, PayoutTerms]],
) -> PartnershipReport:
    """Payouts for every (project_id, name, summary, terms) entry and their total."""
    payouts = [partnership_payout(pid, name, summary, terms) for pid, name, summary, terms in entries]
    return PartnershipReport(
        period=period,
        projects=payouts,
        total_payout=sum((p.payout for p in payouts), 0.0),
    )

"""Normalized row types shared by parsers, the period store and the KPI engine."""
from dataclasses import dataclass, field
from typing import List

from packages.shared.src.enums import SaleSource


@dataclass(frozen=True)
class AdSpendRow:
    """One reporting day's ad spend (rows sharing a date are summed downstream)."""

    date: str  # YYYY-MM-DD
    investment: float


@dataclass(frozen=True)
class SaleRow:
    """One completed sale; net and gross are tracked separately per platform."""

    date: str  # YYYY-MM-DD
    product: str
    net: float
    gross: float
    source: SaleSource


@dataclass(frozen=True)
class PeriodBucket:
    """All rows of one project for one calendar month."""

    year: str  # 4 digits
    month: str  # 2 digits, zero-padded
    ad_spend: List[AdSpendRow] = field(default_factory=list)
    sales: List[SaleRow] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.year}-{self.month}"

    @property
    def is_empty(self) -> bool:
        return not self.ad_spend and not self.sales

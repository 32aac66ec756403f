"""Pydantic/schema DTOs for the API."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ----- API: projects -----


class ProjectCreateRequest(BaseModel):
    """Body for POST /projects."""

    name: str = Field(min_length=1, max_length=200)
    slug: Optional[str] = Field(default=None, max_length=200)


class ProjectRow(BaseModel):
    id: int
    name: str
    slug: str
    created_at: datetime


class ProjectsResponse(BaseModel):
    """Response for GET /projects."""

    projects: List[ProjectRow]
    total: int


class ProjectSettingsBody(BaseModel):
    """Body for PUT /projects/{id}/settings. Percentages in 0-100."""

    platform_tax: float = Field(ge=0, le=100)
    tax: float = Field(ge=0, le=100)
    participation: float = Field(ge=0, le=100)


class ProjectSettingsResponse(ProjectSettingsBody):
    project_id: int


# ----- API: uploads -----


class UploadResponse(BaseModel):
    """Response for POST /projects/{id}/uploads."""

    upload_type: str
    filename: str
    period: str
    records_processed: int


class UploadHistoryRow(BaseModel):
    id: int
    filename: str
    upload_type: str
    period: Optional[str] = None
    file_size: int
    records_processed: int
    status: str
    error_message: Optional[str] = None
    uploaded_at: datetime


class UploadHistoryResponse(BaseModel):
    """Response for GET /projects/{id}/uploads."""

    uploads: List[UploadHistoryRow]
    total: int


# ----- API: manual sales -----


class ManualSaleRequest(BaseModel):
    """Body for POST /projects/{id}/manual-sales. gross defaults to net."""

    date: str = Field(min_length=1)
    product: str = ""
    net: float = Field(gt=0)
    gross: Optional[float] = Field(default=None, ge=0)


class ManualSaleRow(BaseModel):
    id: int
    date: str
    product: str
    net: float
    gross: float
    created_at: datetime


class ManualSalesResponse(BaseModel):
    """Response for GET /projects/{id}/manual-sales."""

    sales: List[ManualSaleRow]
    total: int


# ----- API: KPIs -----


class KPISummaryOut(BaseModel):
    total_days: int
    total_investment: float
    total_sales: int
    total_revenue_net: float
    total_revenue_gross: float
    average_ticket: float
    roas: float
    profit: float
    effective_sales: int
    refunds: int


class ProductKPIOut(BaseModel):
    product: str
    sales: int
    revenue_net: float
    average_ticket: float
    classification: str


class DailyKPIOut(BaseModel):
    date: str
    investment: float
    sales: int
    revenue: float
    average_ticket: float
    roas: float
    cac: float


class DashboardResponse(BaseModel):
    """Response for GET /projects/{id}/periods/{period}/kpis."""

    project_id: int
    period: str
    totals: KPISummaryOut
    by_product: List[ProductKPIOut]
    by_day: List[DailyKPIOut]


class PeriodsResponse(BaseModel):
    """Response for GET /projects/{id}/periods (newest first)."""

    periods: List[str]


class TrendItem(BaseModel):
    change_pct: Optional[float] = None
    direction: str


class TrendsResponse(BaseModel):
    """Response for GET /projects/{id}/periods/{period}/trends."""

    period: str
    previous_period: Optional[str] = None
    revenue: TrendItem
    roas: TrendItem
    profit: TrendItem
    investment: TrendItem


# ----- API: partnership -----


class PartnershipRow(BaseModel):
    project_id: int
    project_name: str
    revenue_net: float
    investment: float
    profit: float
    platform_fee: float
    tax: float
    participation: float
    payout: float


class PartnershipResponse(BaseModel):
    """Response for GET /partnership/{period}."""

    period: str
    projects: List[PartnershipRow]
    total_payout: float


# ----- API: cross-project comparison -----


class ComparisonProjectRow(BaseModel):
    project_id: int
    project_name: str
    totals: KPISummaryOut


class PeriodComparisonRow(BaseModel):
    period: str
    totals: KPISummaryOut
    projects: List[ComparisonProjectRow]


class ComparisonResponse(BaseModel):
    """Response for GET /comparison."""

    project_ids: List[int]
    periods: List[PeriodComparisonRow]

"""SQLModel definitions for projects, period buckets and their rows, settings and history."""
from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


# ----- Projects -----


class Project(SQLModel, table=True):
    """One seller / launch whose spend and sales are tracked."""

    __tablename__ = "projects"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    slug: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ProjectSettingsRecord(SQLModel, table=True):
    """Partnership payout terms per project (percentages)."""

    __tablename__ = "project_settings"
    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True, unique=True)
    platform_tax: float = 6.0
    tax: float = 0.0
    participation: float = 100.0
    updated_at: Optional[datetime] = Field(default_factory=datetime.utcnow)


# ----- Period buckets -----


class PeriodBucketRecord(SQLModel, table=True):
    """One calendar month of a project; at most one per (project, year, month)."""

    __tablename__ = "period_buckets"
    __table_args__ = (UniqueConstraint("project_id", "year", "month", name="uq_period_bucket"),)
    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(index=True)
    year: str  # YYYY
    month: str  # MM
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = Field(default_factory=datetime.utcnow)


class AdSpendEntry(SQLModel, table=True):
    """Ad spend row of a bucket; position keeps upload order."""

    __tablename__ = "ad_spend_rows"
    id: Optional[int] = Field(default=None, primary_key=True)
    bucket_id: int = Field(foreign_key="period_buckets.id", index=True)
    position: int = 0
    date: str  # YYYY-MM-DD
    investment: float = 0.0


class SaleEntry(SQLModel, table=True):
    """Sale row of a bucket; source drives the merge-by-source semantics."""

    __tablename__ = "sale_rows"
    id: Optional[int] = Field(default=None, primary_key=True)
    bucket_id: int = Field(foreign_key="period_buckets.id", index=True)
    position: int = 0
    date: str  # YYYY-MM-DD
    product: str
    net: float = 0.0
    gross: float = 0.0
    source: str  # hotmart, kiwify, manual


# ----- History -----


class UploadRecord(SQLModel, table=True):
    """One file upload attempt (success or error) for the upload history view."""

    __tablename__ = "upload_history"
    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(index=True)
    filename: str = ""
    upload_type: str  # meta_ads, hotmart, kiwify
    period: Optional[str] = None  # YYYY-MM
    file_size: int = 0
    records_processed: int = 0
    status: str = "success"
    error_message: Optional[str] = None
    uploaded_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class ManualSaleRecord(SQLModel, table=True):
    """Manually entered sale, kept so it can be listed and removed later."""

    __tablename__ = "manual_sales"
    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(index=True)
    date: str  # YYYY-MM-DD
    product: str
    net: float
    gross: float
    created_at: datetime = Field(default_factory=datetime.utcnow)

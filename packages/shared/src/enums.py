"""Canonical enums for sale sources, upload types, and product classification."""
from enum import Enum
from typing import Optional


class SaleSource(str, Enum):
    """Where a sale row came from."""

    HOTMART = "hotmart"
    KIWIFY = "kiwify"
    MANUAL = "manual"


class UploadType(str, Enum):
    """Kind of spreadsheet handed to the ingestion boundary."""

    META_ADS = "meta_ads"
    HOTMART = "hotmart"
    KIWIFY = "kiwify"

    @property
    def sale_source(self) -> Optional["SaleSource"]:
        """Sale source replaced by an upload of this type (None for ad spend)."""
        if self is UploadType.HOTMART:
            return SaleSource.HOTMART
        if self is UploadType.KIWIFY:
            return SaleSource.KIWIFY
        return None


class ProductClassification(str, Enum):
    """Role of a product in the sales funnel."""

    PRINCIPAL = "Principal"
    UPSELL = "Upsell"


class UploadStatus(str, Enum):
    """Outcome of an upload, kept in upload history."""

    SUCCESS = "success"
    ERROR = "error"


class TrendDirection(str, Enum):
    """Direction of a KPI versus the previous period."""

    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"

"""
Period store: where period buckets live.

PeriodRepository is the storage contract used by the ingestion boundary. SQLPeriodRepository
persists buckets in period_buckets / ad_spend_rows / sale_rows; InMemoryPeriodRepository
keeps them in a dict (scripts and tests).
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlmodel import Session, delete, select

from packages.shared.src.dates import sort_period_keys
from packages.shared.src.enums import SaleSource
from packages.shared.src.models import AdSpendEntry, PeriodBucketRecord, SaleEntry
from packages.shared.src.rows import AdSpendRow, PeriodBucket, SaleRow

logger = logging.getLogger(__name__)


class PeriodRepository(ABC):
    """At most one bucket per (project, year, month)."""

    @abstractmethod
    def get_period(self, project_id: int, year: str, month: str) -> Optional[PeriodBucket]:
        ...

    @abstractmethod
    def put_period(self, project_id: int, bucket: PeriodBucket) -> None:
        """Store bucket, replacing any existing bucket for the same period."""

    @abstractmethod
    def delete_period(self, project_id: int, year: str, month: str) -> bool:
        """Remove the bucket; False when there was none."""

    @abstractmethod
    def list_periods(self, project_id: int) -> List[str]:
        """YYYY-MM keys of the project's buckets, oldest first."""

    @abstractmethod
    def delete_project(self, project_id: int) -> int:
        """Remove every bucket of the project; returns how many were removed."""


class InMemoryPeriodRepository(PeriodRepository):
    def __init__(self) -> None:
        self._buckets: Dict[Tuple[int, str, str], PeriodBucket] = {}

    def get_period(self, project_id: int, year: str, month: str) -> Optional[PeriodBucket]:
        return self._buckets.get((project_id, year, month))

    def put_period(self, project_id: int, bucket: PeriodBucket) -> None:
        self._buckets[(project_id, bucket.year, bucket.month)] = bucket

    def delete_period(self, project_id: int, year: str, month: str) -> bool:
        return self._buckets.pop((project_id, year, month), None) is not None

    def list_periods(self, project_id: int) -> List[str]:
        return sort_period_keys([b.key for (pid, _, _), b in self._buckets.items() if pid == project_id])

    def delete_project(self, project_id: int) -> int:
        keys = [k for k in self._buckets if k[0] == project_id]
        for k in keys:
            del self._buckets[k]
        return len(keys)


class SQLPeriodRepository(PeriodRepository):
    """Buckets persisted through SQLModel. Each write commits."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _record(self, project_id: int, year: str, month: str) -> Optional[PeriodBucketRecord]:
        stmt = select(PeriodBucketRecord).where(
            PeriodBucketRecord.project_id == project_id,
            PeriodBucketRecord.year == year,
            PeriodBucketRecord.month == month,
        )
        return self.session.exec(stmt).first()

    def _delete_rows(self, bucket_id: int) -> None:
        self.session.exec(delete(AdSpendEntry).where(AdSpendEntry.bucket_id == bucket_id))
        self.session.exec(delete(SaleEntry).where(SaleEntry.bucket_id == bucket_id))

    def get_period(self, project_id: int, year: str, month: str) -> Optional[PeriodBucket]:
        rec = self._record(project_id, year, month)
        if rec is None:
            return None
        ad_spend = self.session.exec(
            select(AdSpendEntry).where(AdSpendEntry.bucket_id == rec.id).order_by(AdSpendEntry.position)
        ).all()
        sales = self.session.exec(
            select(SaleEntry).where(SaleEntry.bucket_id == rec.id).order_by(SaleEntry.position)
        ).all()
        return PeriodBucket(
            year=rec.year,
            month=rec.month,
            ad_spend=[AdSpendRow(date=r.date, investment=r.investment) for r in ad_spend],
            sales=[
                SaleRow(date=r.date, product=r.product, net=r.net, gross=r.gross, source=SaleSource(r.source))
                for r in sales
            ],
        )

    def put_period(self, project_id: int, bucket: PeriodBucket) -> None:
        rec = self._record(project_id, bucket.year, bucket.month)
        if rec is None:
            rec = PeriodBucketRecord(project_id=project_id, year=bucket.year, month=bucket.month)
            self.session.add(rec)
            self.session.flush()
        else:
            self._delete_rows(rec.id)
            rec.updated_at = datetime.utcnow()
            self.session.add(rec)
        for i, row in enumerate(bucket.ad_spend):
            self.session.add(AdSpendEntry(bucket_id=rec.id, position=i, date=row.date, investment=row.investment))
        for i, row in enumerate(bucket.sales):
            self.session.add(
                SaleEntry(
                    bucket_id=rec.id,
                    position=i,
                    date=row.date,
                    product=row.product,
                    net=row.net,
                    gross=row.gross,
                    source=SaleSource(row.source).value,
                )
            )
        self.session.commit()
        logger.debug(
            "Stored period %s for project %s (%d ad spend rows, %d sales)",
            bucket.key,
            project_id,
            len(bucket.ad_spend),
            len(bucket.sales),
        )

    def delete_period(self, project_id: int, year: str, month: str) -> bool:
        rec = self._record(project_id, year, month)
        if rec is None:
            return False
        self._delete_rows(rec.id)
        self.session.delete(rec)
        self.session.commit()
        return True

    def list_periods(self, project_id: int) -> List[str]:
        recs = self.session.exec(select(PeriodBucketRecord).where(PeriodBucketRecord.project_id == project_id)).all()
        return sort_period_keys([f"{r.year}-{r.month}" for r in recs])

    def delete_project(self, project_id: int) -> int:
        recs = self.session.exec(select(PeriodBucketRecord).where(PeriodBucketRecord.project_id == project_id)).all()
        for rec in recs:
            self._delete_rows(rec.id)
            self.session.delete(rec)
        self.session.commit()
        return len(recs)

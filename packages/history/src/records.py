"""
Upload history and manual sale records. Persisted in DB (upload_history, manual_sales tables).
Returns plain dataclasses so the API layer does not depend on table models.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from packages.shared.src.enums import UploadStatus
from packages.shared.src.models import ManualSaleRecord, UploadRecord

_MAX_RECENT_UPLOADS = 100


@dataclass
class UploadEntry:
    """One upload attempt (returned by get_recent_uploads)."""

    id: int
    filename: str
    upload_type: str
    period: Optional[str]
    file_size: int
    records_processed: int
    status: str
    error_message: Optional[str]
    uploaded_at: datetime


@dataclass
class ManualSaleEntry:
    id: int
    date: str
    product: str
    net: float
    gross: float
    created_at: datetime


def _record_to_upload(r: UploadRecord) -> UploadEntry:
    return UploadEntry(
        id=r.id,
        filename=r.filename or "",
        upload_type=r.upload_type,
        period=r.period,
        file_size=r.file_size or 0,
        records_processed=r.records_processed or 0,
        status=r.status,
        error_message=r.error_message,
        uploaded_at=r.uploaded_at,
    )


def _record_to_manual(r: ManualSaleRecord) -> ManualSaleEntry:
    return ManualSaleEntry(
        id=r.id,
        date=r.date,
        product=r.product,
        net=r.net,
        gross=r.gross,
        created_at=r.created_at,
    )


def record_upload(
    session: Session,
    project_id: int,
    upload_type: str,
    filename: str = "",
    file_size: int = 0,
    period: Optional[str] = None,
    records_processed: int = 0,
    error_message: Optional[str] = None,
) -> UploadEntry:
    """
    Record an upload attempt. Status is error when error_message is given, else success.
    """
    rec = UploadRecord(
        project_id=project_id,
        filename=filename,
        upload_type=upload_type,
        period=period,
        file_size=file_size,
        records_processed=records_processed,
        status=(UploadStatus.ERROR if error_message else UploadStatus.SUCCESS).value,
        error_message=error_message,
        uploaded_at=datetime.utcnow(),
    )
    session.add(rec)
    session.commit()
    session.refresh(rec)
    return _record_to_upload(rec)


def get_recent_uploads(session: Session, project_id: int, limit: int = _MAX_RECENT_UPLOADS) -> List[UploadEntry]:
    """Return the project's most recent uploads, newest first (up to 100)."""
    stmt = (
        select(UploadRecord)
        .where(UploadRecord.project_id == project_id)
        .order_by(UploadRecord.uploaded_at.desc(), UploadRecord.id.desc())
        .limit(min(limit, _MAX_RECENT_UPLOADS))
    )
    return [_record_to_upload(r) for r in session.exec(stmt).all()]


def add_manual_sale_record(
    session: Session,
    project_id: int,
    date: str,
    product: str,
    net: float,
    gross: float,
) -> ManualSaleEntry:
    rec = ManualSaleRecord(project_id=project_id, date=date, product=product, net=net, gross=gross)
    session.add(rec)
    session.commit()
    session.refresh(rec)
    return _record_to_manual(rec)


def list_manual_sales(session: Session, project_id: int) -> List[ManualSaleEntry]:
    """Manual sales of the project, most recent sale date first."""
    stmt = (
        select(ManualSaleRecord)
        .where(ManualSaleRecord.project_id == project_id)
        .order_by(ManualSaleRecord.date.desc(), ManualSaleRecord.id.desc())
    )
    return [_record_to_manual(r) for r in session.exec(stmt).all()]


def get_manual_sale(session: Session, project_id: int, sale_id: int) -> Optional[ManualSaleEntry]:
    rec = session.get(ManualSaleRecord, sale_id)
    if rec is None or rec.project_id != project_id:
        return None
    return _record_to_manual(rec)


def delete_manual_sale_record(session: Session, project_id: int, sale_id: int) -> bool:
    rec = session.get(ManualSaleRecord, sale_id)
    if rec is None or rec.project_id != project_id:
        return False
    session.delete(rec)
    session.commit()
    return True


def delete_project_history(session: Session, project_id: int) -> None:
    """Drop upload and manual sale records of a deleted project."""
    for model in (UploadRecord, ManualSaleRecord):
        for rec in session.exec(select(model).where(model.project_id == project_id)).all():
            session.delete(rec)
    session.commit()


def delete_manual_sales_in_period(session: Session, project_id: int, period: str) -> int:
    """Drop manual sale records dated in a YYYY-MM period (after the period was cleared)."""
    stmt = select(ManualSaleRecord).where(
        ManualSaleRecord.project_id == project_id,
        ManualSaleRecord.date.startswith(f"{period}-"),
    )
    recs = session.exec(stmt).all()
    for rec in recs:
        session.delete(rec)
    session.commit()
    return len(recs)

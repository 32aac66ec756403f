"""FastAPI app: health, projects, spreadsheet uploads, period KPIs and trends, manual sales, partnership, comparison."""
import logging
import os
import re
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

# Load .env so DATABASE_URL and LOG_LEVEL are set (try repo root, then cwd)
from dotenv import load_dotenv
_app_dir = Path(__file__).resolve().parent
for _env_dir in [_app_dir.parent.parent.parent, Path.cwd()]:
    _env_file = _env_dir / ".env"
    if _env_file.exists():
        load_dotenv(_env_file)
        break

# Apply validated config to env so db and other consumers see it
from .config import get_settings
_settings = get_settings()
os.environ.setdefault("DATABASE_URL", _settings.database_url)

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlmodel import Session, select

from packages.history.src.records import (
    add_manual_sale_record,
    delete_manual_sale_record,
    delete_manual_sales_in_period,
    delete_project_history,
    get_manual_sale,
    get_recent_uploads,
    list_manual_sales,
    record_upload,
)
from packages.metrics.src.aggregator import KPIReport, KPISummary
from packages.metrics.src.comparison import compare_periods
from packages.metrics.src.partnership import PayoutTerms, build_partnership_report
from packages.parsers.src.errors import ParseError
from packages.periods.src.store import SQLPeriodRepository
from packages.shared.src.dates import parse_period_key
from packages.shared.src.db import get_engine, get_session_fastapi, init_db
from packages.shared.src.enums import SaleSource, UploadType
from packages.shared.src.ingest import (
    add_manual_sale,
    clear_period,
    get_kpis_for_period,
    get_trends_for_period,
    list_periods,
    remove_manual_sale,
    upload_file,
)
from packages.shared.src.models import Project, ProjectSettingsRecord
from packages.shared.src.rows import SaleRow
from packages.shared.src.schemas import (
    ComparisonProjectRow,
    ComparisonResponse,
    DailyKPIOut,
    DashboardResponse,
    KPISummaryOut,
    ManualSaleRequest,
    ManualSaleRow,
    ManualSalesResponse,
    PartnershipResponse,
    PartnershipRow,
    PeriodComparisonRow,
    PeriodsResponse,
    ProductKPIOut,
    ProjectCreateRequest,
    ProjectRow,
    ProjectSettingsBody,
    ProjectSettingsResponse,
    ProjectsResponse,
    TrendItem,
    TrendsResponse,
    UploadHistoryResponse,
    UploadHistoryRow,
    UploadResponse,
)
from .middleware import CorrelationIdMiddleware, LoggingMiddleware, get_correlation_id

logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("roasboard.api")

app = FastAPI(title="Roasboard API", version="1.0.0")


@app.on_event("startup")
def ensure_tables():
    """Create missing tables (migrations in infra/migrations describe the same schema)."""
    init_db()


app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ParseError)
def parse_error_handler(request: Request, exc: ParseError):
    """Unusable spreadsheet: 422 with the message the user has to act on."""
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "type": type(exc).__name__},
    )


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    """Return 500 with error detail so frontend and logs show the real cause."""
    logger.exception("Unhandled error correlation_id=%s", get_correlation_id(request)[:8])
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "type": type(exc).__name__},
    )


def _health_db_ok() -> bool:
    """Lightweight DB readiness check (SELECT 1)."""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database health check failed")
        return False


@app.get("/health")
def health():
    """Liveness and readiness: includes DB check."""
    if not _health_db_ok():
        return JSONResponse(content={"status": "degraded", "database": "unavailable"}, status_code=503)
    return {"status": "ok"}


# ----- helpers -----


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower()).strip("-")
    return slug or "project"


def _get_project(session: Session, project_id: int) -> Project:
    project = session.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return project


def _check_period(period: str) -> str:
    try:
        parse_period_key(period)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return period


def _payout_terms(session: Session, project_id: int) -> PayoutTerms:
    rec = session.exec(select(ProjectSettingsRecord).where(ProjectSettingsRecord.project_id == project_id)).first()
    if rec is None:
        return PayoutTerms(
            platform_tax=_settings.default_platform_tax,
            tax=_settings.default_tax,
            participation=_settings.default_participation,
        )
    return PayoutTerms(platform_tax=rec.platform_tax, tax=rec.tax, participation=rec.participation)


def _project_row(p: Project) -> ProjectRow:
    return ProjectRow(id=p.id, name=p.name, slug=p.slug, created_at=p.created_at)


def _summary_out(t: KPISummary) -> KPISummaryOut:
    return KPISummaryOut(**asdict(t))


def _dashboard(project_id: int, period: str, report: KPIReport) -> DashboardResponse:
    return DashboardResponse(
        project_id=project_id,
        period=period,
        totals=_summary_out(report.totals),
        by_product=[
            ProductKPIOut(
                product=p.product,
                sales=p.sales,
                revenue_net=p.revenue_net,
                average_ticket=p.average_ticket,
                classification=p.classification.value,
            )
            for p in report.by_product
        ],
        by_day=[
            DailyKPIOut(
                date=d.date,
                investment=d.investment,
                sales=d.sales,
                revenue=d.revenue,
                average_ticket=d.average_ticket,
                roas=d.roas,
                cac=d.cac,
            )
            for d in report.by_day
        ],
    )


# ----- projects -----


@app.get("/projects", response_model=ProjectsResponse)
def list_projects(session: Session = Depends(get_session_fastapi)):
    rows = list(session.exec(select(Project).order_by(Project.name)).all())
    return ProjectsResponse(projects=[_project_row(p) for p in rows], total=len(rows))


@app.post("/projects", response_model=ProjectRow, status_code=201)
def create_project(body: ProjectCreateRequest, session: Session = Depends(get_session_fastapi)):
    """Create a project with the default partnership terms."""
    slug = _slugify(body.slug or body.name)
    if session.exec(select(Project).where(Project.slug == slug)).first() is not None:
        raise HTTPException(status_code=409, detail=f"Project slug {slug!r} already exists")
    project = Project(name=body.name.strip(), slug=slug)
    session.add(project)
    session.flush()
    session.add(
        ProjectSettingsRecord(
            project_id=project.id,
            platform_tax=_settings.default_platform_tax,
            tax=_settings.default_tax,
            participation=_settings.default_participation,
        )
    )
    session.commit()
    session.refresh(project)
    logger.info("Created project %s (%s)", project.id, project.slug)
    return _project_row(project)


@app.delete("/projects/{project_id}")
def delete_project(project_id: int, session: Session = Depends(get_session_fastapi)):
    """Delete a project together with its periods, settings and history."""
    project = _get_project(session, project_id)
    removed = SQLPeriodRepository(session).delete_project(project_id)
    delete_project_history(session, project_id)
    for rec in session.exec(select(ProjectSettingsRecord).where(ProjectSettingsRecord.project_id == project_id)).all():
        session.delete(rec)
    session.delete(project)
    session.commit()
    logger.info("Deleted project %s and %d periods", project_id, removed)
    return {"deleted": project_id, "periods_removed": removed}


@app.get("/projects/{project_id}/settings", response_model=ProjectSettingsResponse)
def get_project_settings(project_id: int, session: Session = Depends(get_session_fastapi)):
    _get_project(session, project_id)
    terms = _payout_terms(session, project_id)
    return ProjectSettingsResponse(
        project_id=project_id,
        platform_tax=terms.platform_tax,
        tax=terms.tax,
        participation=terms.participation,
    )


@app.put("/projects/{project_id}/settings", response_model=ProjectSettingsResponse)
def update_project_settings(
    project_id: int,
    body: ProjectSettingsBody,
    session: Session = Depends(get_session_fastapi),
):
    _get_project(session, project_id)
    rec = session.exec(select(ProjectSettingsRecord).where(ProjectSettingsRecord.project_id == project_id)).first()
    if rec is None:
        rec = ProjectSettingsRecord(project_id=project_id)
    rec.platform_tax = body.platform_tax
    rec.tax = body.tax
    rec.participation = body.participation
    session.add(rec)
    session.commit()
    return ProjectSettingsResponse(project_id=project_id, **body.model_dump())


# ----- uploads -----


@app.post("/projects/{project_id}/uploads", response_model=UploadResponse)
def upload_spreadsheet(
    project_id: int,
    file: UploadFile = File(...),
    upload_type: UploadType = Form(...),
    header_row: Optional[int] = Form(None, ge=0),
    session: Session = Depends(get_session_fastapi),
):
    """
    Upload a Meta Ads, Hotmart or Kiwify export (xlsx or csv).

    Every attempt is recorded in the upload history; parse failures return 422 with the
    columns or statuses that were expected.
    """
    _get_project(session, project_id)
    data = file.file.read()
    filename = file.filename or ""
    if len(data) > _settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail=f"File exceeds {_settings.max_upload_mb} MB")
    try:
        result = upload_file(
            SQLPeriodRepository(session),
            project_id,
            data,
            upload_type,
            header_row=header_row,
        )
    except ParseError as exc:
        session.rollback()
        logger.warning("Upload %r (%s) rejected: %s", filename, upload_type.value, exc)
        record_upload(
            session,
            project_id,
            upload_type.value,
            filename=filename,
            file_size=len(data),
            error_message=str(exc),
        )
        raise
    record_upload(
        session,
        project_id,
        upload_type.value,
        filename=filename,
        file_size=len(data),
        period=result.period,
        records_processed=result.records,
    )
    return UploadResponse(
        upload_type=upload_type.value,
        filename=filename,
        period=result.period,
        records_processed=result.records,
    )


@app.get("/projects/{project_id}/uploads", response_model=UploadHistoryResponse)
def upload_history(
    project_id: int,
    limit: int = Query(50, ge=1, le=100),
    session: Session = Depends(get_session_fastapi),
):
    _get_project(session, project_id)
    entries = get_recent_uploads(session, project_id, limit=limit)
    return UploadHistoryResponse(
        uploads=[UploadHistoryRow(**vars(e)) for e in entries],
        total=len(entries),
    )


# ----- periods -----


@app.get("/projects/{project_id}/periods", response_model=PeriodsResponse)
def get_periods(project_id: int, session: Session = Depends(get_session_fastapi)):
    """Periods with data, newest first."""
    _get_project(session, project_id)
    return PeriodsResponse(periods=list_periods(SQLPeriodRepository(session), project_id))


@app.get("/projects/{project_id}/periods/{period}/kpis", response_model=DashboardResponse)
def get_period_kpis(project_id: int, period: str, session: Session = Depends(get_session_fastapi)):
    """Totals, per-product and per-day KPIs of a YYYY-MM period (zeroed when empty)."""
    _get_project(session, project_id)
    _check_period(period)
    report = get_kpis_for_period(SQLPeriodRepository(session), project_id, period)
    return _dashboard(project_id, period, report)


@app.get("/projects/{project_id}/periods/{period}/trends", response_model=TrendsResponse)
def get_period_trends(project_id: int, period: str, session: Session = Depends(get_session_fastapi)):
    """Revenue, ROAS, profit and investment versus the previous period with data."""
    _get_project(session, project_id)
    _check_period(period)
    report = get_trends_for_period(SQLPeriodRepository(session), project_id, period)

    def item(t) -> TrendItem:
        return TrendItem(change_pct=t.change_pct, direction=t.direction.value)

    return TrendsResponse(
        period=period,
        previous_period=report.previous_period,
        revenue=item(report.revenue),
        roas=item(report.roas),
        profit=item(report.profit),
        investment=item(report.investment),
    )


@app.delete("/projects/{project_id}/periods/{period}")
def delete_period(project_id: int, period: str, session: Session = Depends(get_session_fastapi)):
    """Clear all ad spend and sales of a period (manual sale records included)."""
    _get_project(session, project_id)
    _check_period(period)
    if not clear_period(SQLPeriodRepository(session), project_id, period):
        raise HTTPException(status_code=404, detail=f"No data for period {period}")
    delete_manual_sales_in_period(session, project_id, period)
    return {"deleted": period}


# ----- manual sales -----


@app.get("/projects/{project_id}/manual-sales", response_model=ManualSalesResponse)
def get_manual_sales(project_id: int, session: Session = Depends(get_session_fastapi)):
    _get_project(session, project_id)
    entries = list_manual_sales(session, project_id)
    return ManualSalesResponse(sales=[ManualSaleRow(**vars(e)) for e in entries], total=len(entries))


@app.post("/projects/{project_id}/manual-sales", response_model=ManualSaleRow, status_code=201)
def create_manual_sale(
    project_id: int,
    body: ManualSaleRequest,
    session: Session = Depends(get_session_fastapi),
):
    """Add one sale by hand; it is appended to the period of its date."""
    _get_project(session, project_id)
    try:
        row = add_manual_sale(
            SQLPeriodRepository(session),
            project_id,
            body.date,
            body.product,
            body.net,
            body.gross,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    entry = add_manual_sale_record(session, project_id, row.date, row.product, row.net, row.gross)
    return ManualSaleRow(**vars(entry))


@app.delete("/projects/{project_id}/manual-sales/{sale_id}")
def delete_manual_sale(project_id: int, sale_id: int, session: Session = Depends(get_session_fastapi)):
    _get_project(session, project_id)
    entry = get_manual_sale(session, project_id, sale_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Manual sale {sale_id} not found")
    row = SaleRow(
        date=entry.date,
        product=entry.product,
        net=entry.net,
        gross=entry.gross,
        source=SaleSource.MANUAL,
    )
    removed = remove_manual_sale(SQLPeriodRepository(session), project_id, row)
    delete_manual_sale_record(session, project_id, sale_id)
    return {"deleted": sale_id, "removed_from_period": removed}


# ----- partnership -----


@app.get("/partnership/{period}", response_model=PartnershipResponse)
def get_partnership(period: str, session: Session = Depends(get_session_fastapi)):
    """Partner payout per project with data in the period, and the total."""
    _check_period(period)
    repo = SQLPeriodRepository(session)
    entries = []
    for project in session.exec(select(Project).order_by(Project.name)).all():
        if period not in repo.list_periods(project.id):
            continue
        summary = get_kpis_for_period(repo, project.id, period).totals
        entries.append((project.id, project.name, summary, _payout_terms(session, project.id)))
    report = build_partnership_report(period, entries)
    return PartnershipResponse(
        period=report.period,
        projects=[PartnershipRow(**vars(p)) for p in report.projects],
        total_payout=report.total_payout,
    )


# ----- cross-project comparison -----


def _csv_param(value: Optional[str]) -> List[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


@app.get("/comparison", response_model=ComparisonResponse)
def get_comparison(
    projects: Optional[str] = Query(None, description="Comma-separated project ids; all projects when omitted"),
    periods: Optional[str] = Query(None, description="Comma-separated YYYY-MM keys; all periods when omitted"),
    session: Session = Depends(get_session_fastapi),
):
    """KPI totals of the selected projects side by side, summed per period (newest first)."""
    try:
        project_ids = [int(p) for p in _csv_param(projects)]
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Project ids must be integers, got {projects!r}")
    wanted_periods = [_check_period(p) for p in _csv_param(periods)]

    if project_ids:
        selected = [_get_project(session, pid) for pid in dict.fromkeys(project_ids)]
    else:
        selected = list(session.exec(select(Project).order_by(Project.name)).all())

    repo = SQLPeriodRepository(session)
    entries = []
    for project in selected:
        available = repo.list_periods(project.id)
        for period in available:
            if wanted_periods and period not in wanted_periods:
                continue
            summary = get_kpis_for_period(repo, project.id, period).totals
            entries.append((project.id, project.name, period, summary))
    comparison = compare_periods(entries)
    logger.info("Comparison of %d projects over %d periods", len(selected), len(comparison))
    return ComparisonResponse(
        project_ids=[p.id for p in selected],
        periods=[
            PeriodComparisonRow(
                period=c.period,
                totals=_summary_out(c.totals),
                projects=[
                    ComparisonProjectRow(
                        project_id=p.project_id,
                        project_name=p.project_name,
                        totals=_summary_out(p.totals),
                    )
                    for p in c.projects
                ],
            )
            for c in comparison
        ],
    )

"""
Back-office API: financial reports, exports, unpaid rents, dashboard,
payment entry and document downloads.
"""
from __future__ import annotations

import logging
import re
import unicodedata
from datetime import date
from typing import Annotated, Any, Callable, List, Optional, TypeVar
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from brands import current_brand
from db.session import get_db
from engine.aggregation import (
    agency_statement,
    aggregate_annual_series,
    aggregate_by_building,
    aggregate_by_landlord,
    aggregate_monthly,
    annual_totals,
    portfolio_snapshot,
    summarize_commissions,
)
from engine.periods import add_months, month_start, month_window, parse_month, trailing_months
from engine.contract_search import search_contracts
from engine.receivables import DEFAULT_LOOKBACK_MONTHS, filter_unpaid_rents, find_unpaid_rents
from models import (
    AgencyStatement,
    BuildingReport,
    CommissionSummary,
    ContractFilters,
    ContractMatch,
    DashboardStats,
    LandlordStatement,
    MonthlyAggregate,
    PaymentCreate,
    PaymentRecord,
    UnpaidRent,
)
from reporting.document_renderer import RenderedDocument
from reporting.documents import build_contract_document, build_mandate_document, build_receipt_document
from reporting.report_builder import build_report_html, build_report_pdf
from reporting.report_data import (
    accounting_report_data,
    agency_report_data,
    buildings_report_data,
    commissions_report_data,
    landlord_report_data,
)
from reporting.templating import TemplateNotFoundError
from services import portfolio_loader as loader
from services.payment_entry import UnknownContractError, record_payment

router = APIRouter(prefix="/api/v1", tags=["api"])

_LOG = logging.getLogger("uvicorn.error")

LOAD_ERROR_DETAIL = "Could not load data"

REPORT_KINDS = ("agency", "landlord", "buildings", "accounting", "commissions")

T = TypeVar("T")


def _month_or_400(month: Optional[str]) -> date:
    if not month:
        return month_start(date.today())
    try:
        return parse_month(month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _year_or_current(year: Optional[int]) -> int:
    return year if year is not None else date.today().year


def _load(fn: Callable[..., T], *args: Any) -> T:
    """Run a backend read; a failed read becomes a generic 503."""
    try:
        return fn(*args)
    except loader.BackendReadError as e:
        raise HTTPException(status_code=503, detail=LOAD_ERROR_DETAIL) from e


_UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


def content_disposition(filename: str) -> str:
    """
    Attachment header safe for any name: an ASCII `filename` fallback
    (accents stripped, other characters replaced by "_") plus the exact
    name as RFC 5987 `filename*`.
    """
    ascii_name = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    ascii_name = _UNSAFE_FILENAME_CHARS.sub("_", ascii_name).strip("_") or "document.pdf"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(filename)},
    )


# --- Aggregates ---

@router.get("/reports/monthly", response_model=MonthlyAggregate)
def monthly_report(month: Optional[str] = None, db: Session = Depends(get_db)):
    m = _month_or_400(month)
    start, end = month_window(m)
    payments = _load(loader.load_payments, db, start, end)
    expenses = _load(loader.load_expenses, db, start, end)
    return aggregate_monthly(payments, expenses, m)


@router.get("/reports/annual")
def annual_report(year: Optional[int] = Query(None, ge=1900, le=9999), db: Session = Depends(get_db)):
    y = _year_or_current(year)
    start = date(y, 1, 1)
    end = add_months(start, 12)
    payments = _load(loader.load_payments, db, start, end)
    expenses = _load(loader.load_expenses, db, start, end)
    series = aggregate_annual_series(payments, expenses, y)
    return {"year": y, "months": series, "totals": annual_totals(series)}


@router.get("/reports/agency", response_model=AgencyStatement)
def agency_report(month: Optional[str] = None, db: Session = Depends(get_db)):
    m = _month_or_400(month)
    start, end = month_window(m)
    payments = _load(loader.load_payments, db, start, end)
    expenses = _load(loader.load_expenses, db, start, end)
    revenues = _load(loader.load_revenues, db, start, end)
    return agency_statement(payments, expenses, revenues, m)


@router.get("/reports/buildings", response_model=List[BuildingReport])
def buildings_report(
    month: Optional[str] = None,
    landlord_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    m = _month_or_400(month)
    start, end = month_window(m)
    buildings = _load(loader.load_buildings, db)
    units = _load(loader.load_units, db)
    landlords = _load(loader.load_landlords, db)
    payments = _load(loader.load_payments, db, start, end)
    # "all" is the UI's no-filter value
    lid = None if landlord_id in (None, "", "all") else landlord_id
    return aggregate_by_building(payments, buildings, units, m, landlords=landlords, landlord_id=lid)


@router.get("/reports/landlords", response_model=List[LandlordStatement])
def landlords_report(month: Optional[str] = None, db: Session = Depends(get_db)):
    m = _month_or_400(month)
    start, end = month_window(m)
    buildings = _load(loader.load_buildings, db)
    landlords = _load(loader.load_landlords, db)
    payments = _load(loader.load_payments, db, start, end)
    return aggregate_by_landlord(payments, buildings, landlords, m)


@router.get("/reports/commissions", response_model=CommissionSummary)
def commissions_report(month: Optional[str] = None, db: Session = Depends(get_db)):
    m = _month_or_400(month)
    start, end = month_window(m)
    lineage = _load(loader.load_lineage, db)
    payments = _load(loader.load_payments, db, start, end)
    return summarize_commissions(payments, list(lineage.buildings.values()), m, lineage=lineage)


@router.get("/unpaid-rents", response_model=List[UnpaidRent])
def unpaid_rents(
    as_of: Optional[date] = None,
    months: int = Query(DEFAULT_LOOKBACK_MONTHS, ge=1, le=36),
    landlord_id: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=200),
    db: Session = Depends(get_db),
):
    ref = as_of or date.today()
    periods = trailing_months(ref, months)
    lineage = _load(loader.load_lineage, db)
    payments = _load(loader.load_payments, db, periods[-1], add_months(periods[0], 1))
    rows = find_unpaid_rents(list(lineage.contracts.values()), payments, ref, months, lineage=lineage)
    lid = None if landlord_id in (None, "", "all") else landlord_id
    return filter_unpaid_rents(rows, landlord_id=lid, search=search)


@router.get("/contracts/search", response_model=List[ContractMatch])
def contract_search(filters: Annotated[ContractFilters, Query()], db: Session = Depends(get_db)):
    lineage = _load(loader.load_lineage, db)
    payments = _load(loader.load_payments, db)
    return search_contracts(list(lineage.contracts.values()), lineage, payments, filters)


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(as_of: Optional[date] = None, db: Session = Depends(get_db)):
    ref = as_of or date.today()
    start, end = month_window(ref)
    p = _load(loader.load_portfolio, db, start, end)
    return portfolio_snapshot(p.landlords, p.buildings, p.units, p.tenants, p.contracts, p.payments, ref)


# --- Report exports ---

def _report_data(
    kind: str,
    db: Session,
    month: Optional[str],
    year: Optional[int],
    landlord_id: Optional[str],
) -> dict[str, Any]:
    if kind == "accounting":
        data = annual_report(year, db)
        return accounting_report_data(data["months"], data["totals"])
    m = _month_or_400(month)
    if kind == "agency":
        return agency_report_data(agency_report(month, db))
    if kind == "buildings":
        return buildings_report_data(buildings_report(month, landlord_id, db), m)
    if kind == "commissions":
        return commissions_report_data(commissions_report(month, db))
    if kind == "landlord":
        if not landlord_id:
            raise HTTPException(status_code=400, detail="landlord_id is required for a landlord statement")
        for statement in landlords_report(month, db):
            if statement.landlord_id == landlord_id:
                return landlord_report_data(statement, m)
        raise HTTPException(status_code=404, detail="Landlord not found")
    raise HTTPException(status_code=404, detail=f"Unknown report: {kind}. Expected one of {', '.join(REPORT_KINDS)}")


@router.get("/reports/{kind}/preview", response_class=HTMLResponse)
def report_preview(
    kind: str,
    month: Optional[str] = None,
    year: Optional[int] = Query(None, ge=1900, le=9999),
    landlord_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    data = _report_data(kind, db, month, year, landlord_id)
    try:
        return HTMLResponse(build_report_html(data, current_brand()))
    except TemplateNotFoundError as e:
        _LOG.error("report template unavailable: %s", e)
        raise HTTPException(status_code=503, detail="Report template unavailable") from e


@router.get("/reports/{kind}/pdf")
def report_pdf(
    kind: str,
    month: Optional[str] = None,
    year: Optional[int] = Query(None, ge=1900, le=9999),
    landlord_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    data = _report_data(kind, db, month, year, landlord_id)
    try:
        pdf_bytes = build_report_pdf(data, current_brand())
    except TemplateNotFoundError as e:
        _LOG.error("report template unavailable: %s", e)
        raise HTTPException(status_code=503, detail="Report template unavailable") from e
    except ImportError as e:
        raise HTTPException(status_code=503, detail="Playwright is not installed.") from e
    return _pdf_response(pdf_bytes, data["filename"])


# --- Payment entry ---

@router.post("/payments", response_model=PaymentRecord, status_code=201)
def create_payment(body: PaymentCreate, db: Session = Depends(get_db)):
    try:
        return record_payment(db, body)
    except UnknownContractError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


# --- Documents ---

def _document_response(doc: RenderedDocument) -> Response:
    return _pdf_response(doc.to_pdf(), doc.filename)


def _template_503(e: TemplateNotFoundError) -> HTTPException:
    _LOG.error("document template unavailable: %s", e)
    return HTTPException(status_code=503, detail="Document template unavailable")


@router.get("/documents/contracts/{contract_id}")
def contract_document(contract_id: str, db: Session = Depends(get_db)):
    bundle = _load(loader.get_contract_bundle, db, contract_id)
    if bundle is None:
        raise HTTPException(status_code=404, detail="Contract not found")
    contract, tenant, unit, building, landlord = bundle
    try:
        doc = build_contract_document(contract, tenant, unit, building, landlord)
    except TemplateNotFoundError as e:
        raise _template_503(e) from e
    return _document_response(doc)


@router.get("/documents/mandates/{landlord_id}")
def mandate_document(landlord_id: str, db: Session = Depends(get_db)):
    landlord = _load(loader.get_landlord, db, landlord_id)
    if landlord is None:
        raise HTTPException(status_code=404, detail="Landlord not found")
    return _document_response(build_mandate_document(landlord))


@router.get("/documents/receipts/{payment_id}")
def receipt_document(payment_id: str, db: Session = Depends(get_db)):
    bundle = _load(loader.get_payment_bundle, db, payment_id)
    if bundle is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    payment, contract, tenant, building = bundle
    try:
        doc = build_receipt_document(payment, contract, tenant, building)
    except TemplateNotFoundError as e:
        raise _template_503(e) from e
    return _document_response(doc)

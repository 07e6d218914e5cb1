from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load .env from backend directory so DATABASE_URL etc. are available
load_dotenv(Path(__file__).resolve().parent / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from engine.aggregation import aggregate_annual_series, aggregate_by_building, aggregate_by_landlord, aggregate_monthly, annual_totals
from engine.periods import parse_month
from models import (
    AnnualComputeRequest,
    BuildingComputeRequest,
    BuildingReport,
    LandlordComputeRequest,
    LandlordStatement,
    MonthlyAggregate,
    MonthlyComputeRequest,
)
from brands import current_brand
from routes.api import router as api_router

_LOG = logging.getLogger("uvicorn.error")

VERSION = (os.environ.get("GIT_COMMIT") or "").strip() or "unknown"

app = FastAPI(title="Gestion Locative Backend", version="0.1.0")

# CORS: use ALLOWED_ORIGINS env (comma-separated) if set, else default
_origins_env = os.environ.get("ALLOWED_ORIGINS", "").strip()
if _origins_env:
    ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()]
else:
    ALLOWED_ORIGINS = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        _LOG.info(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.0f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestLogMiddleware)
app.include_router(api_router)


@app.on_event("startup")
def startup_log() -> None:
    port = os.environ.get("PORT", "8010")
    host = os.environ.get("HOST", "127.0.0.1")
    database_configured = bool((os.environ.get("DATABASE_URL") or "").strip())
    _LOG.info(
        "Backend starting on http://%s:%s (DATABASE_URL configured: %s, agency=%s) version=%s",
        host, port, database_configured, current_brand().brand_id, VERSION,
    )
    if not database_configured:
        _LOG.warning("DATABASE_URL is not set. Falling back to the local development database.")


@app.get("/health")
def health():
    return {"status": "ok", "version": VERSION}


@app.get("/health/pdf")
def health_pdf():
    """
    Runtime check for Playwright PDF dependencies.
    Returns 200 only when Chromium can launch successfully.
    """
    try:
        from playwright.sync_api import sync_playwright
    except ImportError as e:
        raise HTTPException(status_code=503, detail="Playwright is not installed.") from e

    try:
        with sync_playwright() as p:
            browser = p.chromium.launch(args=["--no-sandbox"])
            page = browser.new_page()
            page.set_content("<html><body>ok</body></html>")
            browser.close()
    except Exception as e:
        msg = str(e)
        if len(msg) > 500:
            msg = msg[:500]
        raise HTTPException(
            status_code=503,
            detail=f"Playwright runtime unavailable: {msg}",
        ) from e

    return {"status": "ok", "pdf_runtime": "ready"}


def _month_or_400(value: str):
    try:
        return parse_month(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@app.post("/compute/monthly", response_model=MonthlyAggregate)
def compute_monthly(req: MonthlyComputeRequest) -> MonthlyAggregate:
    """
    Monthly rollup over caller-supplied records. Nothing is read from the backend.
    """
    return aggregate_monthly(req.payments, req.expenses, _month_or_400(req.month))


@app.post("/compute/annual")
def compute_annual(req: AnnualComputeRequest):
    series = aggregate_annual_series(req.payments, req.expenses, req.year)
    return {"year": req.year, "months": series, "totals": annual_totals(series)}


@app.post("/compute/buildings", response_model=List[BuildingReport])
def compute_buildings(req: BuildingComputeRequest) -> List[BuildingReport]:
    lid = None if req.landlord_id in (None, "", "all") else req.landlord_id
    return aggregate_by_building(
        req.payments, req.buildings, req.units, _month_or_400(req.month),
        landlords=req.landlords, landlord_id=lid,
    )


@app.post("/compute/landlords", response_model=List[LandlordStatement])
def compute_landlords(req: LandlordComputeRequest) -> List[LandlordStatement]:
    return aggregate_by_landlord(req.payments, req.buildings, req.landlords, _month_or_400(req.month))

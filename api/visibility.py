"""
AI Visibility Scan API

Premium endpoint that checks whether ChatGPT, Gemini and Perplexity mention
a site when asked industry questions.

Endpoints:
- POST /api/ai-visibility-scan: run (or reuse a <72h old) scan
- GET  /api/ai-visibility-scan/history: trend only
- GET  /api/ai-visibility-prompts: preview prompt set for an industry (public)

Cache: a scan for the same normalized URL within 72 hours is returned as-is.
Cost:  ~$0.04 per fresh scan (15 queries across 3 models).

Two simultaneous requests for the same uncached URL both run a fresh scan;
there is no request deduplication.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy.orm import Session

from llmcheck.auth import CurrentUser, get_current_user_optional, is_premium_user
from llmcheck.database import VisibilityStore, get_db
from llmcheck.integrations import ModelClients
from llmcheck.utils.config import Settings, get_settings
from llmcheck.utils.domain import normalize_url
from llmcheck.visibility import (
    INDUSTRY_PROMPTS,
    InvalidScanRequest,
    ScanOutput,
    VisibilityScanner,
    build_trend,
    format_results,
    get_prompts_for_industry,
    list_industries,
)


logger = logging.getLogger(__name__)
router = APIRouter(tags=["AI Visibility"])

PREMIUM_REQUIRED = "Premium subscription required"
SCAN_FAILED = "Scan failed. Please try again."


# =============================================================================
# DEPENDENCIES
# =============================================================================

_clients: Optional[ModelClients] = None


def get_model_clients() -> ModelClients:
    """Process-wide model clients (adapters keep pooled HTTP connections)."""
    global _clients
    if _clients is None:
        _clients = ModelClients(get_settings())
        _clients.log_status()
    return _clients


async def close_model_clients():
    global _clients
    if _clients is not None:
        await _clients.close()
        _clients = None


def get_scanner() -> VisibilityScanner:
    return get_model_clients().create_scanner()


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class VisibilityScanRequest(BaseModel):
    """Request to run an AI visibility scan."""
    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = None
    industry: Optional[str] = Field(
        default=None,
        description="Industry key (ecommerce, saas, media, education, healthcare, other)",
    )
    visibility_queries: Optional[List[str]] = Field(
        default=None,
        alias="visibilityQueries",
        description="Exactly 5 custom prompts (replaces the industry prompts)",
    )


class ScanCell(BaseModel):
    """One model's answer for one prompt."""
    found: bool
    snippet: Optional[str] = None
    error: bool
    prominence: Optional[str] = None
    sentiment: Optional[float] = None
    cited: bool = False
    score: int = 0


class PromptRow(BaseModel):
    prompt: str
    chatgpt: ScanCell
    gemini: ScanCell
    perplexity: ScanCell


class TrendPointResponse(BaseModel):
    score: int
    total: int
    date: datetime


class VisibilityScanResponse(BaseModel):
    """Scan results grouped per prompt, plus the visibility trend."""
    cached: bool
    scannedAt: datetime
    totalFound: int
    totalQueries: int
    results: List[PromptRow]
    trend: List[TrendPointResponse]


class VisibilityHistoryResponse(BaseModel):
    url: str
    trend: List[TrendPointResponse]


class PromptPreviewResponse(BaseModel):
    industry: str
    prompts: List[str]
    industries: List[str]


# =============================================================================
# HELPERS
# =============================================================================

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(error: ValidationError) -> str:
    """First pydantic error as "field: message"."""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"Invalid request: {field}: {first.get('msg', 'invalid value')}"


def _trend(history: List[ScanOutput]) -> List[TrendPointResponse]:
    return [
        TrendPointResponse(score=p.score, total=p.total, date=p.date)
        for p in build_trend(history)
    ]


def _build_response(scan: ScanOutput, history: List[ScanOutput], cached: bool) -> VisibilityScanResponse:
    return VisibilityScanResponse(
        cached=cached,
        scannedAt=scan.scanned_at,
        totalFound=scan.total_found,
        totalQueries=scan.total_queries,
        results=[PromptRow(**row) for row in format_results(scan.results, scan.prompts)],
        trend=_trend(history),
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/api/ai-visibility-scan", response_model=VisibilityScanResponse)
async def ai_visibility_scan(
    payload: Any = Body(None),
    current_user: Optional[CurrentUser] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
    scanner: VisibilityScanner = Depends(get_scanner),
    settings: Settings = Depends(get_settings),
):
    """
    Run an AI visibility scan across ChatGPT, Gemini and Perplexity.

    Premium users only. Returns cached results when a scan for the same URL
    exists within the cache window; otherwise scans, stores the non-error
    results and returns them with the updated trend.

    The body is validated after the premium check, so callers without
    access always get 403 regardless of what they send.
    """
    if not is_premium_user(current_user):
        return _error(403, PREMIUM_REQUIRED)

    try:
        request = VisibilityScanRequest.model_validate(payload if payload is not None else {})
    except ValidationError as e:
        return _error(400, _validation_message(e))

    url = (request.url or "").strip()
    if not url:
        return _error(400, "url is required")

    try:
        # Reject bad custom prompts before touching the cache or any provider
        scanner.resolve_prompts(request.industry, request.visibility_queries)
    except InvalidScanRequest as e:
        return _error(400, str(e))

    try:
        store = VisibilityStore(db)

        cached = store.get_latest_scan(url, settings.VISIBILITY_CACHE_MAX_AGE_HOURS)
        if cached:
            history = store.get_scan_history(url)
            return _build_response(cached, history, cached=True)

        scan = await scanner.run_visibility_scan(url, request.industry, request.visibility_queries)

        # Save to DB (only non-error results to keep data clean)
        answered = [r for r in scan.results if not r.error]
        if answered:
            store.save_scan(
                url,
                request.industry,
                scan.total_found,
                scan.total_queries,
                answered,
                scanned_at=scan.scanned_at,
                prompts=scan.prompts,
            )
        else:
            logger.warning(f"[ai-visibility-scan] every query failed for {url}, scan not stored")

        history = store.get_scan_history(url)
        return _build_response(scan, history, cached=False)

    except InvalidScanRequest as e:
        return _error(400, str(e))
    except Exception as e:
        logger.error(f"[ai-visibility-scan] error for {url}: {e}", exc_info=True)
        return _error(500, SCAN_FAILED)


@router.get("/api/ai-visibility-scan/history", response_model=VisibilityHistoryResponse)
def ai_visibility_history(
    url: str = Query(..., description="Site URL in any form"),
    limit: Optional[int] = Query(None, ge=1, le=365),
    current_user: Optional[CurrentUser] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    """Visibility trend (oldest scan first) for a URL. Premium users only."""
    if not is_premium_user(current_user):
        return _error(403, PREMIUM_REQUIRED)

    if not url.strip():
        return _error(400, "url is required")

    history = VisibilityStore(db).get_scan_history(url, limit=limit)
    return VisibilityHistoryResponse(url=normalize_url(url), trend=_trend(history))


@router.get("/api/ai-visibility-prompts", response_model=PromptPreviewResponse)
def ai_visibility_prompts(industry: Optional[str] = Query(None)):
    """Prompts a scan would use for an industry (shown before purchase)."""
    key = (industry or "").strip().lower()
    resolved = key if key in INDUSTRY_PROMPTS else "other"

    return PromptPreviewResponse(
        industry=resolved,
        prompts=get_prompts_for_industry(resolved),
        industries=list_industries(),
    )

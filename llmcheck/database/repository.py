"""
Repository Layer - Visibility Scan Storage

Provides the cache/history contract used by the scan endpoint:
- get_latest_scan: most recent scan within a TTL (the 72h scan cache)
- save_scan: persist one scan and its non-error cells
- get_scan_history: every scan for a URL, oldest first (trend series)

All lookups are keyed by the normalized URL, so "http://Example.com/" and
"https://example.com" share one history. Storage errors roll back and
propagate to the caller.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from sqlalchemy import asc, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from llmcheck.utils.domain import normalize_url
from llmcheck.visibility.models import ModelId, Prominence, ScanOutput, VisibilityResult
from .models import VisibilityScan, VisibilityResultRow, utcnow

logger = logging.getLogger(__name__)

# Visibility scans are expensive (15 model calls); reuse them for 3 days
VISIBILITY_CACHE_MAX_AGE_HOURS = 72


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (SQLite drops tzinfo) and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class VisibilityStore:
    """
    Visibility scan persistence on top of a SQLAlchemy session.

    Usage:
        with get_db_context() as db:
            store = VisibilityStore(db)
            cached = store.get_latest_scan("https://acme.io", max_age_hours=72)
    """

    def __init__(self, db: Session):
        self.db = db

    def get_latest_scan(
        self,
        url: str,
        max_age_hours: float = VISIBILITY_CACHE_MAX_AGE_HOURS,
        now: Optional[datetime] = None,
    ) -> Optional[ScanOutput]:
        """
        Get the most recent scan for a URL if it is younger than max_age_hours.

        Args:
            url: URL in any form (normalized internally)
            max_age_hours: TTL in hours
            now: Reference time (defaults to current UTC time)

        Returns:
            ScanOutput with persisted (non-error) results, or None
        """
        reference = as_utc(now) if now else utcnow()
        cutoff = reference - timedelta(hours=max_age_hours)

        scan = (
            self.db.query(VisibilityScan)
            .options(selectinload(VisibilityScan.results))
            .filter(
                VisibilityScan.normalized_url == normalize_url(url),
                VisibilityScan.scanned_at >= cutoff,
            )
            .order_by(desc(VisibilityScan.scanned_at), desc(VisibilityScan.id))
            .first()
        )

        if scan is None:
            logger.debug(f"Visibility cache miss for {url}")
            return None

        logger.info(f"Visibility cache hit for {url} (scan {scan.id})")
        return _to_scan_output(scan)

    def save_scan(
        self,
        url: str,
        industry: Optional[str],
        total_found: int,
        total_queries: int,
        results: Sequence[VisibilityResult],
        scanned_at: Optional[datetime] = None,
        prompts: Optional[Sequence[str]] = None,
    ) -> VisibilityScan:
        """
        Persist one scan row plus one row per non-error result.

        Errored cells are transient provider failures and are never written,
        so outages do not pollute the trend history. The prompt list is kept
        on the scan row so a cached scan still renders every prompt.

        Raises:
            SQLAlchemyError: On any storage failure (after rollback)
        """
        scan = VisibilityScan(
            url=url,
            normalized_url=normalize_url(url),
            industry=industry,
            total_found=total_found,
            total_queries=total_queries,
            prompts=list(prompts) if prompts else None,
            scanned_at=as_utc(scanned_at) if scanned_at else utcnow(),
        )

        for result in results:
            if result.error:
                continue
            scan.results.append(
                VisibilityResultRow(
                    model=ModelId(result.model).value,
                    prompt=result.prompt,
                    found=result.found,
                    snippet=result.snippet,
                    prominence=result.prominence.value if result.prominence else None,
                    sentiment=result.sentiment,
                    cited=result.cited,
                    score=result.score,
                )
            )

        try:
            self.db.add(scan)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save visibility scan for {url}: {e}")
            self.db.rollback()
            raise

        logger.info(
            f"Saved visibility scan {scan.id} for {scan.normalized_url}: "
            f"{total_found}/{total_queries} found, {len(scan.results)} result rows"
        )
        return scan

    def get_scan_history(self, url: str, limit: Optional[int] = None) -> List[ScanOutput]:
        """
        Get every stored scan for a URL, ordered oldest -> newest.

        Args:
            url: URL in any form
            limit: Keep only the most recent N scans (still oldest first)
        """
        query = (
            self.db.query(VisibilityScan)
            .options(selectinload(VisibilityScan.results))
            .filter(VisibilityScan.normalized_url == normalize_url(url))
        )

        if limit:
            scans = (
                query.order_by(desc(VisibilityScan.scanned_at), desc(VisibilityScan.id))
                .limit(limit)
                .all()
            )
            scans.reverse()
        else:
            scans = query.order_by(asc(VisibilityScan.scanned_at), asc(VisibilityScan.id)).all()

        return [_to_scan_output(scan) for scan in scans]


def _to_scan_output(scan: VisibilityScan) -> ScanOutput:
    return ScanOutput(
        normalized_url=scan.normalized_url,
        industry=scan.industry,
        total_found=scan.total_found,
        total_queries=scan.total_queries,
        results=[_to_result(row) for row in scan.results],
        scanned_at=as_utc(scan.scanned_at),
        prompts=list(scan.prompts or []),
    )


def _to_result(row: VisibilityResultRow) -> VisibilityResult:
    return VisibilityResult(
        model=ModelId(row.model),
        prompt=row.prompt,
        found=bool(row.found),
        snippet=row.snippet,
        error=False,
        prominence=Prominence(row.prominence) if row.prominence else None,
        sentiment=row.sentiment,
        cited=bool(row.cited),
        score=row.score or 0,
    )

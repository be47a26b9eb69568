"""
SQLAlchemy Models for AI Visibility Scans

Design Principles:
1. One immutable scan row per fresh (non-cached) scan
2. One child row per non-error (prompt, model) cell
3. Index on (normalized_url, scanned_at) for TTL lookups and trend queries

Rows are append-only: nothing in the scan path updates or deletes them.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, DateTime, Text, JSON,
    ForeignKey, Index, CheckConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# SCAN TABLES
# =============================================================================

class VisibilityScan(Base):
    """Scan-level metadata for one visibility scan"""
    __tablename__ = "ai_visibility_scans"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # URL as submitted and the normalized cache/history key
    url = Column(String(2000), nullable=False)
    normalized_url = Column(String(2000), nullable=False)

    industry = Column(String(50))

    # Prompt texts in scan order, including prompts with no stored cells
    prompts = Column(JSON)

    # Tally (total_queries counts errored cells too)
    total_found = Column(Integer, nullable=False, default=0)
    total_queries = Column(Integer, nullable=False, default=0)

    scanned_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    results = relationship(
        "VisibilityResultRow",
        back_populates="scan",
        cascade="all, delete-orphan",
        order_by="VisibilityResultRow.id",
    )

    __table_args__ = (
        Index("idx_visibility_scan_url_time", "normalized_url", "scanned_at"),
        CheckConstraint("total_found >= 0", name="check_total_found_positive"),
        CheckConstraint("total_found <= total_queries", name="check_found_within_queries"),
    )


class VisibilityResultRow(Base):
    """One (prompt, model) cell of a scan"""
    __tablename__ = "ai_visibility_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scan_id = Column(Integer, ForeignKey("ai_visibility_scans.id", ondelete="CASCADE"), nullable=False)

    model = Column(String(20), nullable=False)  # chatgpt, gemini, perplexity
    prompt = Column(Text, nullable=False)

    found = Column(Boolean, nullable=False, default=False)
    snippet = Column(Text)

    # Rubric
    prominence = Column(String(10))  # high, medium, low
    sentiment = Column(Float)        # -1 to 1
    cited = Column(Boolean, default=False)
    score = Column(Integer)          # 0-100

    # Relationships
    scan = relationship("VisibilityScan", back_populates="results")

    __table_args__ = (
        Index("idx_visibility_result_scan", "scan_id"),
    )

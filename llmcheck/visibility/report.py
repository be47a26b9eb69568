"""
Scan Result Shaping

Turns flat scan results into the API's per-prompt rows and builds the
visibility trend from scan history.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .models import ALL_MODELS, ModelId, ScanOutput, VisibilityResult

# Cell shown for a model with no stored result (errored cells are never persisted)
MISSING_CELL = {
    "found": False,
    "snippet": None,
    "error": True,
    "prominence": None,
    "sentiment": None,
    "cited": False,
    "score": 0,
}


@dataclass
class TrendPoint:
    """Found/total tally of one historical scan."""

    score: int
    total: int
    date: datetime


def format_results(
    results: Sequence[VisibilityResult],
    prompts: Optional[Sequence[str]] = None,
) -> List[Dict]:
    """
    Group flat results into prompt-keyed rows:
    [{prompt, chatgpt: cell, gemini: cell, perplexity: cell}, ...]

    Rows follow ``prompts`` when given (a prompt with no results still gets a
    row), then any other prompts in first-seen order. A model without a
    result for a prompt renders as an error cell.
    """
    rows: Dict[str, Dict[ModelId, Optional[VisibilityResult]]] = {}

    for prompt in prompts or []:
        rows.setdefault(prompt, {model: None for model in ALL_MODELS})

    for result in results:
        entry = rows.setdefault(result.prompt, {model: None for model in ALL_MODELS})
        entry[ModelId(result.model)] = result

    formatted = []
    for prompt, cells in rows.items():
        row = {"prompt": prompt}
        for model in ALL_MODELS:
            result = cells[model]
            row[model.value] = result.to_cell() if result else dict(MISSING_CELL)
        formatted.append(row)

    return formatted


def build_trend(history: Sequence[ScanOutput]) -> List[TrendPoint]:
    """One point per scan, in history order (oldest -> newest)."""
    return [
        TrendPoint(score=scan.total_found, total=scan.total_queries, date=scan.scanned_at)
        for scan in history
    ]

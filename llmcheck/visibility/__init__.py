"""
AI Visibility Scan

Prompt fan-out across hosted chat models, brand mention detection and
result aggregation.
"""

from .models import (
    ALL_MODELS,
    ModelId,
    Prominence,
    ScanOutput,
    VisibilityResult,
)
from .mentions import (
    MentionAnalysis,
    analyze_response,
    assess_prominence,
    compute_score,
    detect_citation,
    extract_mention,
    find_mention,
)
from .prompts import (
    INDUSTRY_PROMPTS,
    PROMPTS_PER_SCAN,
    get_prompts_for_industry,
    list_industries,
)
from .gather import Outcome, TaskTimeoutError, gather_outcomes
from .sentiment import SentimentJudge, parse_sentiment
from .report import MISSING_CELL, TrendPoint, build_trend, format_results
from .scanner import (
    InvalidScanRequest,
    ScanConfig,
    ScanTask,
    VisibilityScanner,
)

__all__ = [
    # Models
    "ALL_MODELS",
    "ModelId",
    "Prominence",
    "ScanOutput",
    "VisibilityResult",
    # Mention detection
    "MentionAnalysis",
    "analyze_response",
    "assess_prominence",
    "compute_score",
    "detect_citation",
    "extract_mention",
    "find_mention",
    # Prompts
    "INDUSTRY_PROMPTS",
    "PROMPTS_PER_SCAN",
    "get_prompts_for_industry",
    "list_industries",
    # Scatter-gather
    "Outcome",
    "TaskTimeoutError",
    "gather_outcomes",
    # Sentiment
    "SentimentJudge",
    "parse_sentiment",
    # Shaping
    "MISSING_CELL",
    "TrendPoint",
    "build_trend",
    "format_results",
    # Scanner
    "InvalidScanRequest",
    "ScanConfig",
    "ScanTask",
    "VisibilityScanner",
]

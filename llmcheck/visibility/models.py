"""
Visibility Scan Data Models

Plain dataclasses shared by the scanner, the store and the API layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class ModelId(str, Enum):
    """AI assistants queried by a visibility scan. Closed set."""

    CHATGPT = "chatgpt"
    GEMINI = "gemini"
    PERPLEXITY = "perplexity"


ALL_MODELS = (ModelId.CHATGPT, ModelId.GEMINI, ModelId.PERPLEXITY)


class Prominence(str, Enum):
    """Where in an answer the brand shows up."""

    HIGH = "high"      # Lead paragraph (first 150 words)
    MEDIUM = "medium"  # Body text or a short list
    LOW = "low"        # Footer section or a long list


@dataclass
class VisibilityResult:
    """
    One cell of the scan matrix: a single (prompt, model) answer.

    found=True always carries a snippet and error=False.
    error=True always has found=False and snippet=None.
    """

    model: ModelId
    prompt: str
    found: bool = False
    snippet: Optional[str] = None
    error: bool = False
    prominence: Optional[Prominence] = None
    sentiment: Optional[float] = None  # -1 (avoid) .. 1 (top pick)
    cited: bool = False
    score: int = 0  # 0-100 weighted composite

    @classmethod
    def failed(cls, model: ModelId, prompt: str) -> "VisibilityResult":
        """Cell for a provider call that errored or timed out."""
        return cls(model=model, prompt=prompt, error=True)

    def to_cell(self) -> dict:
        return {
            "found": self.found,
            "snippet": self.snippet,
            "error": self.error,
            "prominence": self.prominence.value if self.prominence else None,
            "sentiment": self.sentiment,
            "cited": self.cited,
            "score": self.score,
        }


@dataclass
class ScanOutput:
    """Aggregate of one scan execution."""

    normalized_url: str
    industry: Optional[str]
    total_found: int
    total_queries: int
    results: List[VisibilityResult] = field(default_factory=list)
    scanned_at: Optional[datetime] = None
    prompts: List[str] = field(default_factory=list)

    @property
    def visibility_rate(self) -> float:
        """Share of queries that mentioned the site (0-1)."""
        if not self.total_queries:
            return 0.0
        return self.total_found / self.total_queries

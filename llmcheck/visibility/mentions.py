"""
Mention Detection

Finds a target site inside free-form model output and grades the mention:
- Entity match: root domain first, then the bare brand token (word boundary)
- Snippet: up to 80 characters of context on each side
- Prominence: lead paragraph vs body vs footer / long list
- Citation: a direct URL to the root domain
- Score: weighted 0-100 composite

Everything here is pure: no I/O, deterministic for a given input.
"""

import math
import re
from dataclasses import dataclass
from typing import Optional

from llmcheck.utils.domain import DomainTokens
from .models import Prominence


SNIPPET_CONTEXT_CHARS = 80
ELLIPSIS = "…"

# Brand tokens shorter than this produce too many false positives ("hp", "io")
MIN_BRAND_LENGTH = 3

LEAD_WORD_LIMIT = 150
LIST_WINDOW_CHARS = 400
LONG_LIST_ITEMS = 10

BOTTOM_MARKERS = (
    "see also",
    "further reading",
    "others to consider",
    "related resources",
    "alternatives include",
    "honorable mention",
)

LIST_ITEM_RE = re.compile(r"^[ \t]*(?:[-*•]|\d+\.)[ \t]", re.MULTILINE)

WEIGHTS = {
    "mention": 20,
    "prominence": 30,
    "sentiment": 30,
    "citation": 20,
}

PROMINENCE_FACTORS = {
    Prominence.HIGH: 1.0,
    Prominence.MEDIUM: 0.5,
    Prominence.LOW: 0.1,
}


@dataclass
class MentionAnalysis:
    """Rubric output for one model response (sentiment is judged separately)."""

    found: bool
    snippet: Optional[str] = None
    prominence: Optional[Prominence] = None
    cited: bool = False


def find_mention(text: str, root_domain: str, brand_name: str) -> Optional[re.Match]:
    """
    Return the first mention of the site in text, or None.

    The root domain pattern is tried first; the brand word-boundary pattern
    only when the brand token has at least MIN_BRAND_LENGTH characters.
    """
    if not text or not root_domain:
        return None

    patterns = [re.compile(re.escape(root_domain), re.IGNORECASE)]
    if len(brand_name) >= MIN_BRAND_LENGTH:
        patterns.append(re.compile(rf"\b{re.escape(brand_name)}\b", re.IGNORECASE))

    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def build_snippet(text: str, start: int, end: int) -> str:
    """Cut SNIPPET_CONTEXT_CHARS of context around text[start:end]."""
    snippet_start = max(0, start - SNIPPET_CONTEXT_CHARS)
    snippet_end = min(len(text), end + SNIPPET_CONTEXT_CHARS)
    raw = text[snippet_start:snippet_end].strip()

    prefix = ELLIPSIS if snippet_start > 0 else ""
    suffix = ELLIPSIS if snippet_end < len(text) else ""
    return f"{prefix}{raw}{suffix}"


def extract_mention(text: str, root_domain: str, brand_name: str) -> Optional[str]:
    """
    Find the site in text and return a context snippet, or None.

    >>> extract_mention("Acme is great", "acme.io", "acme")
    'Acme is great'
    """
    match = find_mention(text, root_domain, brand_name)
    if match is None:
        return None
    return build_snippet(text, match.start(), match.end())


def assess_prominence(text: str, index: int) -> Prominence:
    """
    High   - mention within the first 150 words
    Low    - mention after a "see also" style footer, or inside a 10+ item list
    Medium - everything else (body text, short lists)
    """
    words_before = len(text[:index].split())
    if words_before <= LEAD_WORD_LIMIT:
        return Prominence.HIGH

    lower = text.lower()
    for marker in BOTTOM_MARKERS:
        marker_index = lower.find(marker)
        if marker_index != -1 and index > marker_index:
            return Prominence.LOW

    window = text[max(0, index - LIST_WINDOW_CHARS): index + LIST_WINDOW_CHARS]
    if len(LIST_ITEM_RE.findall(window)) >= LONG_LIST_ITEMS:
        return Prominence.LOW

    return Prominence.MEDIUM


def detect_citation(text: str, root_domain: str) -> bool:
    """True if the response links directly to the root domain."""
    if not text or not root_domain:
        return False
    pattern = re.compile(rf"https?://[^\s)\]\"'>]*{re.escape(root_domain)}", re.IGNORECASE)
    return pattern.search(text) is not None


def compute_score(prominence: Prominence, sentiment: Optional[float], cited: bool) -> int:
    """
    Weighted composite for a found mention.

    mention 20 + prominence 30 (full/half/10%) + sentiment 30 (-1..1 scaled)
    + citation 20, capped at 100. Missing sentiment counts as neutral.
    """
    score = float(WEIGHTS["mention"])
    score += WEIGHTS["prominence"] * PROMINENCE_FACTORS[prominence]

    neutral = 0.0 if sentiment is None else max(-1.0, min(1.0, sentiment))
    score += WEIGHTS["sentiment"] * ((neutral + 1) / 2)

    if cited:
        score += WEIGHTS["citation"]

    return int(min(math.floor(score + 0.5), 100))


def analyze_response(text: str, tokens: DomainTokens) -> MentionAnalysis:
    """Run entity match, prominence and citation checks on one response."""
    match = find_mention(text, tokens.root_domain, tokens.brand_name)
    if match is None:
        return MentionAnalysis(found=False)

    return MentionAnalysis(
        found=True,
        snippet=build_snippet(text, match.start(), match.end()),
        prominence=assess_prominence(text, match.start()),
        cited=detect_citation(text, tokens.root_domain),
    )

"""
AI Visibility Scan Engine

Asks ChatGPT, Gemini and Perplexity the same industry-specific questions and
records whether the target site shows up in each answer.

Flow:
1. Resolve the 5 prompts (industry table or caller-supplied)
2. Fan out prompts x models concurrently, each call under its own timeout
3. Run mention detection / rubric on every successful answer
4. Optionally judge sentiment for found mentions (second concurrent phase)
5. Aggregate into a ScanOutput

A failing (prompt, model) cell never aborts the scan: it is reported as an
error cell and still counts toward total_queries.

Cost: ~$0.04 per scan (15 queries + up to 15 judge calls)
Latency: roughly one query timeout in the worst case (everything runs in parallel)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from llmcheck.utils.domain import DomainTokens, extract_domain_tokens, normalize_url
from .gather import Outcome, gather_outcomes
from .mentions import analyze_response, compute_score
from .models import ALL_MODELS, ModelId, ScanOutput, VisibilityResult
from .prompts import PROMPTS_PER_SCAN, get_prompts_for_industry
from .sentiment import SentimentJudge

logger = logging.getLogger(__name__)


class InvalidScanRequest(ValueError):
    """Scan input rejected before any provider call is made."""
    pass


@dataclass
class ScanConfig:
    """
    Scan tuning, passed explicitly to the scanner.

    Provider credentials live on the adapters; this only holds the knobs the
    orchestration itself needs.
    """

    models: Tuple[ModelId, ...] = ALL_MODELS
    query_timeout: float = 20.0  # Per (prompt, model) call, seconds
    max_tokens: int = 500
    prompts_per_scan: int = PROMPTS_PER_SCAN

    @classmethod
    def from_settings(cls, settings) -> "ScanConfig":
        return cls(
            query_timeout=settings.VISIBILITY_QUERY_TIMEOUT,
            max_tokens=settings.VISIBILITY_MAX_TOKENS,
        )


@dataclass(frozen=True)
class ScanTask:
    """One cell of the scan matrix, before it runs."""

    prompt: str
    model: ModelId


class VisibilityScanner:
    """
    Orchestrates one visibility scan.

    Usage:
        scanner = VisibilityScanner(
            adapters={ModelId.CHATGPT: chatgpt, ModelId.GEMINI: gemini, ModelId.PERPLEXITY: pplx},
            config=ScanConfig(query_timeout=20.0),
        )
        output = await scanner.run_visibility_scan("https://acme.io", "saas")
        print(f"{output.total_found}/{output.total_queries}")

    Adapters only need an async ``query(prompt)`` returning an object with
    ``ok``/``text``/``error`` (see ProviderResult); raising also works and is
    reported the same way.
    """

    def __init__(
        self,
        adapters: Mapping[ModelId, Any],
        config: Optional[ScanConfig] = None,
        judge: Optional[SentimentJudge] = None,
    ):
        self.config = config or ScanConfig()
        self.judge = judge

        missing = [m.value for m in self.config.models if m not in adapters]
        if missing:
            raise ValueError(f"No adapter configured for: {', '.join(missing)}")
        self.adapters = dict(adapters)

    def resolve_prompts(
        self,
        industry: Optional[str],
        custom_prompts: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """
        Pick the prompt set for a scan.

        Raises:
            InvalidScanRequest: custom prompts given but not exactly 5 non-blank strings
        """
        if custom_prompts is None:
            return get_prompts_for_industry(industry)

        expected = self.config.prompts_per_scan
        prompts = list(custom_prompts)
        if len(prompts) != expected:
            raise InvalidScanRequest(
                f"Exactly {expected} custom prompts are required, got {len(prompts)}"
            )
        if any(not isinstance(p, str) or not p.strip() for p in prompts):
            raise InvalidScanRequest("Custom prompts must be non-empty strings")

        return [p.strip() for p in prompts]

    def build_tasks(self, prompts: Sequence[str]) -> List[ScanTask]:
        """Cross product in deterministic order: prompts outer, models inner."""
        return [ScanTask(prompt=prompt, model=model) for prompt in prompts for model in self.config.models]

    async def run_visibility_scan(
        self,
        url: str,
        industry: Optional[str] = None,
        custom_prompts: Optional[Sequence[str]] = None,
    ) -> ScanOutput:
        """
        Run a full scan for a URL.

        Args:
            url: Site to look for (any form, scheme optional)
            industry: Industry key used to pick default prompts
            custom_prompts: Exactly 5 caller-supplied prompts (optional)

        Returns:
            ScanOutput with one result per (prompt, model), in task order

        Raises:
            InvalidScanRequest: Blank URL or bad custom prompts
        """
        if not url or not url.strip():
            raise InvalidScanRequest("url is required")

        prompts = self.resolve_prompts(industry, custom_prompts)
        tokens = extract_domain_tokens(url)
        tasks = self.build_tasks(prompts)

        logger.info(
            f"Starting visibility scan for {tokens.root_domain}: "
            f"{len(prompts)} prompts x {len(self.config.models)} models"
        )

        outcomes = await gather_outcomes(
            [self._query_factory(task) for task in tasks],
            timeout=self.config.query_timeout,
        )

        results = [
            self._to_result(task, outcome, tokens)
            for task, outcome in zip(tasks, outcomes)
        ]

        if self.judge is not None:
            await self._judge_sentiment(results, outcomes, tokens)

        total_found = sum(1 for r in results if r.found)
        errors = sum(1 for r in results if r.error)

        logger.info(
            f"Visibility scan for {tokens.root_domain} complete: "
            f"{total_found}/{len(results)} found, {errors} errors"
        )

        return ScanOutput(
            normalized_url=normalize_url(url),
            industry=industry,
            total_found=total_found,
            total_queries=len(results),
            results=results,
            scanned_at=datetime.now(timezone.utc),
            prompts=list(prompts),
        )

    def _query_factory(self, task: ScanTask):
        adapter = self.adapters[task.model]
        return lambda: adapter.query(task.prompt)

    def _to_result(self, task: ScanTask, outcome: Outcome, tokens: DomainTokens) -> VisibilityResult:
        failed = not outcome.ok or getattr(outcome.value, "ok", True) is False
        if failed:
            error = outcome.error if not outcome.ok else outcome.value.error
            logger.warning(f"[ai-visibility] {task.model.value} failed for \"{task.prompt}\": {error}")
            return VisibilityResult.failed(task.model, task.prompt)

        text = _response_text(outcome.value)
        analysis = analyze_response(text, tokens)
        if not analysis.found:
            return VisibilityResult(model=task.model, prompt=task.prompt)

        return VisibilityResult(
            model=task.model,
            prompt=task.prompt,
            found=True,
            snippet=analysis.snippet,
            prominence=analysis.prominence,
            cited=analysis.cited,
            score=compute_score(analysis.prominence, None, analysis.cited),
        )

    async def _judge_sentiment(
        self,
        results: List[VisibilityResult],
        outcomes: List[Outcome],
        tokens: DomainTokens,
    ) -> None:
        found = [(r, _response_text(o.value)) for r, o in zip(results, outcomes) if r.found]
        if not found:
            return

        judged = await gather_outcomes(
            [self._judge_factory(text, tokens.brand_name) for _, text in found],
            timeout=self.config.query_timeout,
        )

        for (result, _), outcome in zip(found, judged):
            result.sentiment = outcome.value if outcome.ok else 0.0
            result.score = compute_score(result.prominence, result.sentiment, result.cited)

    def _judge_factory(self, text: str, brand_name: str):
        return lambda: self.judge.judge(text, brand_name)


def _response_text(value: Any) -> str:
    """Answer text from a ProviderResult or a bare string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return getattr(value, "text", "") or ""

"""
Visibility Scanner Tests

Tests for prompt resolution, fan-out ordering, failure isolation and the
sentiment phase.
"""

import asyncio

import pytest

from llmcheck.visibility import (
    ALL_MODELS,
    INDUSTRY_PROMPTS,
    InvalidScanRequest,
    ModelId,
    Prominence,
    ScanConfig,
    VisibilityScanner,
)
from conftest import FakeAdapter, FakeJudge


CRM_PROMPT = "Top CRM software for startups"
ACME_ANSWER = "For startups, Acme (https://acme.io) is a great CRM. HubSpot is another option."
CUSTOM_PROMPTS = ["Q1", "Q2", "Q3", "Q4", "Q5"]


# =============================================================================
# CONSTRUCTION / PROMPTS
# =============================================================================

class TestScannerSetup:
    """Configuration and prompt resolution."""

    def test_missing_adapter_is_rejected(self):
        adapters = {ModelId.CHATGPT: FakeAdapter(ModelId.CHATGPT)}
        with pytest.raises(ValueError, match="gemini"):
            VisibilityScanner(adapters)

    def test_default_config(self, fake_adapters):
        scanner = VisibilityScanner(fake_adapters)

        assert scanner.config.models == ALL_MODELS
        assert scanner.config.query_timeout == 20.0

    def test_industry_prompts(self, fake_adapters, make_scanner):
        scanner = make_scanner(fake_adapters)
        assert scanner.resolve_prompts("saas") == INDUSTRY_PROMPTS["saas"]

    def test_custom_prompts_override_industry(self, fake_adapters, make_scanner):
        scanner = make_scanner(fake_adapters)
        assert scanner.resolve_prompts("saas", CUSTOM_PROMPTS) == CUSTOM_PROMPTS

    def test_custom_prompts_are_trimmed(self, fake_adapters, make_scanner):
        scanner = make_scanner(fake_adapters)
        prompts = scanner.resolve_prompts(None, [" a ", "b", "c", "d", "e "])
        assert prompts == ["a", "b", "c", "d", "e"]

    @pytest.mark.parametrize("prompts", [
        [],
        ["only", "four", "custom", "prompts"],
        ["1", "2", "3", "4", "5", "6"],
        ["1", "2", "   ", "4", "5"],
        ["1", "2", None, "4", "5"],
    ])
    def test_bad_custom_prompts(self, fake_adapters, make_scanner, prompts):
        scanner = make_scanner(fake_adapters)
        with pytest.raises(InvalidScanRequest):
            scanner.resolve_prompts("saas", prompts)

    def test_task_order_is_prompt_major(self, fake_adapters, make_scanner):
        scanner = make_scanner(fake_adapters)
        tasks = scanner.build_tasks(["A", "B"])

        assert [(t.prompt, t.model) for t in tasks] == [
            ("A", ModelId.CHATGPT), ("A", ModelId.GEMINI), ("A", ModelId.PERPLEXITY),
            ("B", ModelId.CHATGPT), ("B", ModelId.GEMINI), ("B", ModelId.PERPLEXITY),
        ]


# =============================================================================
# SCAN EXECUTION
# =============================================================================

class TestRunVisibilityScan:
    """End-to-end scan over fake providers."""

    @pytest.mark.asyncio
    async def test_blank_url_is_rejected_before_any_call(self, fake_adapters, make_scanner):
        scanner = make_scanner(fake_adapters)

        with pytest.raises(InvalidScanRequest):
            await scanner.run_visibility_scan("   ", "saas")

        assert all(not a.calls for a in fake_adapters.values())

    @pytest.mark.asyncio
    async def test_bad_prompts_are_rejected_before_any_call(self, fake_adapters, make_scanner):
        scanner = make_scanner(fake_adapters)

        with pytest.raises(InvalidScanRequest):
            await scanner.run_visibility_scan("acme.io", "saas", ["one"])

        assert all(not a.calls for a in fake_adapters.values())

    @pytest.mark.asyncio
    async def test_nothing_found(self, fake_adapters, make_scanner):
        output = await make_scanner(fake_adapters).run_visibility_scan("https://acme.io", "saas")

        assert output.total_queries == 15
        assert output.total_found == 0
        assert len(output.results) == 15
        assert all(not r.found and not r.error for r in output.results)
        assert output.normalized_url == "https://acme.io/"
        assert output.scanned_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_one_prompt_mentions_site(self, make_scanner):
        adapters = {m: FakeAdapter(m, answers={CRM_PROMPT: ACME_ANSWER}) for m in ALL_MODELS}
        output = await make_scanner(adapters).run_visibility_scan("https://acme.io", "saas")

        assert output.total_found == 3
        assert output.total_queries == 15

        found = [r for r in output.results if r.found]
        assert {r.prompt for r in found} == {CRM_PROMPT}
        assert {r.model for r in found} == set(ALL_MODELS)
        for r in found:
            assert "Acme" in r.snippet
            assert r.prominence == Prominence.HIGH
            assert r.cited is True
            assert r.score == 85  # 20 + 30 + 15 (neutral) + 20

    @pytest.mark.asyncio
    async def test_results_follow_task_order(self, make_scanner):
        """Slow answers do not reorder the result list."""
        adapters = {
            ModelId.CHATGPT: FakeAdapter(ModelId.CHATGPT, delay=0.05),
            ModelId.GEMINI: FakeAdapter(ModelId.GEMINI),
            ModelId.PERPLEXITY: FakeAdapter(ModelId.PERPLEXITY, delay=0.02),
        }
        output = await make_scanner(adapters).run_visibility_scan("acme.io", None, CUSTOM_PROMPTS)

        assert [(r.prompt, r.model) for r in output.results] == [
            (p, m) for p in CUSTOM_PROMPTS for m in ALL_MODELS
        ]

    @pytest.mark.asyncio
    async def test_failing_model_yields_error_cells(self, make_scanner):
        adapters = {
            ModelId.CHATGPT: FakeAdapter(ModelId.CHATGPT, fail_on=CUSTOM_PROMPTS),
            ModelId.GEMINI: FakeAdapter(ModelId.GEMINI, raise_on=["Q2"]),
            ModelId.PERPLEXITY: FakeAdapter(ModelId.PERPLEXITY, default="Acme is the answer."),
        }
        output = await make_scanner(adapters).run_visibility_scan("acme.io", None, CUSTOM_PROMPTS)

        assert output.total_queries == 15
        assert output.total_found == 5

        errors = [r for r in output.results if r.error]
        assert len(errors) == 6
        for r in errors:
            assert r.found is False
            assert r.snippet is None
            assert r.score == 0

    @pytest.mark.asyncio
    async def test_every_model_failing_still_returns(self, make_scanner):
        adapters = {m: FakeAdapter(m, raise_on=CUSTOM_PROMPTS) for m in ALL_MODELS}
        output = await make_scanner(adapters).run_visibility_scan("acme.io", None, CUSTOM_PROMPTS)

        assert output.total_found == 0
        assert output.total_queries == 15
        assert all(r.error for r in output.results)

    @pytest.mark.asyncio
    async def test_slow_provider_times_out(self, make_scanner):
        adapters = {
            ModelId.CHATGPT: FakeAdapter(ModelId.CHATGPT, delay=2.0, default="Acme"),
            ModelId.GEMINI: FakeAdapter(ModelId.GEMINI, default="Acme"),
            ModelId.PERPLEXITY: FakeAdapter(ModelId.PERPLEXITY, default="Acme"),
        }
        scanner = make_scanner(adapters, query_timeout=0.05)
        output = await scanner.run_visibility_scan("acme.io", None, CUSTOM_PROMPTS)

        chatgpt = [r for r in output.results if r.model == ModelId.CHATGPT]
        assert all(r.error for r in chatgpt)
        assert output.total_found == 10

    @pytest.mark.asyncio
    async def test_queries_run_concurrently(self, make_scanner):
        adapters = {m: FakeAdapter(m, delay=0.1) for m in ALL_MODELS}
        loop = asyncio.get_running_loop()

        start = loop.time()
        await make_scanner(adapters).run_visibility_scan("acme.io", "saas")

        assert loop.time() - start < 1.0

    @pytest.mark.asyncio
    async def test_found_implies_snippet(self, make_scanner):
        adapters = {m: FakeAdapter(m, default="acme.io and others") for m in ALL_MODELS}
        output = await make_scanner(adapters).run_visibility_scan("acme.io", "other")

        for r in output.results:
            assert r.found and r.snippet and not r.error


# =============================================================================
# SENTIMENT PHASE
# =============================================================================

class TestSentimentPhase:
    """Second-phase judging of found mentions."""

    @pytest.mark.asyncio
    async def test_judge_scores_found_mentions_only(self, make_scanner):
        adapters = {m: FakeAdapter(m, answers={CRM_PROMPT: ACME_ANSWER}) for m in ALL_MODELS}
        judge = FakeJudge(value=1.0)

        output = await make_scanner(adapters, judge=judge).run_visibility_scan("acme.io", "saas")

        assert len(judge.calls) == 3
        assert all(brand == "acme" for _, brand in judge.calls)
        for r in output.results:
            if r.found:
                assert r.sentiment == 1.0
                assert r.score == 100
            else:
                assert r.sentiment is None

    @pytest.mark.asyncio
    async def test_failing_judge_falls_back_to_neutral(self, make_scanner):
        adapters = {m: FakeAdapter(m, answers={CRM_PROMPT: ACME_ANSWER}) for m in ALL_MODELS}
        judge = FakeJudge(fail=True)

        output = await make_scanner(adapters, judge=judge).run_visibility_scan("acme.io", "saas")

        found = [r for r in output.results if r.found]
        assert len(found) == 3
        assert all(r.sentiment == 0.0 and r.score == 85 and not r.error for r in found)

    @pytest.mark.asyncio
    async def test_judge_not_called_without_mentions(self, fake_adapters, make_scanner):
        judge = FakeJudge(value=1.0)
        await make_scanner(fake_adapters, judge=judge).run_visibility_scan("acme.io", "saas")

        assert judge.calls == []


class TestScanConfig:
    """Config derived from settings."""

    def test_from_settings(self):
        class _Settings:
            VISIBILITY_QUERY_TIMEOUT = 7.5
            VISIBILITY_MAX_TOKENS = 300

        config = ScanConfig.from_settings(_Settings())

        assert config.query_timeout == 7.5
        assert config.max_tokens == 300
        assert config.prompts_per_scan == 5

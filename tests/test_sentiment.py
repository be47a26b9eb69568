"""
Sentiment Judge Tests
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from llmcheck.visibility.sentiment import SentimentJudge, parse_sentiment


def _mock_client(reply: str = None, error: Exception = None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.messages.create = AsyncMock(side_effect=error)
    else:
        client.messages.create = AsyncMock(
            return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text=reply)])
        )
    client.close = AsyncMock()
    return client


class TestParseSentiment:
    """Judge reply parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("0.8", 0.8),
        ("-0.5", -0.5),
        ("Score: 0.3", 0.3),
        ("1", 1.0),
        ("2.5", 1.0),
        ("-7", -1.0),
        ("neutral", 0.0),
        ("", 0.0),
        (None, 0.0),
    ])
    def test_parse(self, raw, expected):
        assert parse_sentiment(raw) == expected


class TestSentimentJudge:
    """Claude-backed judge."""

    def test_requires_key_or_client(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValueError):
            SentimentJudge()

    @pytest.mark.asyncio
    async def test_judge_returns_clamped_score(self):
        client = _mock_client("0.9")
        judge = SentimentJudge(client=client)

        assert await judge.judge("Acme is the best CRM.", "acme") == 0.9
        assert judge.call_count == 1

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == SentimentJudge.DEFAULT_MODEL
        assert kwargs["temperature"] == 0
        assert '"acme"' in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_long_text_is_truncated(self):
        client = _mock_client("0")
        judge = SentimentJudge(client=client)

        await judge.judge("x" * 5000, "acme")

        content = client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert "x" * SentimentJudge.TEXT_LIMIT in content
        assert "x" * (SentimentJudge.TEXT_LIMIT + 1) not in content

    @pytest.mark.asyncio
    async def test_api_error_is_neutral(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client = _mock_client(error=anthropic.APIConnectionError(request=request))
        judge = SentimentJudge(client=client)

        assert await judge.judge("Acme is fine.", "acme") == 0.0
        assert judge.call_count == 0

    @pytest.mark.asyncio
    async def test_close(self):
        client = _mock_client("0")
        await SentimentJudge(client=client).close()

        client.close.assert_awaited_once()

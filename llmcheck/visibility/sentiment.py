"""
Sentiment Judge

LLM-as-judge scoring of how strongly an answer recommends a brand.
Returns a value in [-1, 1]: -1 = avoid, 0 = neutral, 1 = highly recommended.

Judging is best-effort: any API failure yields a neutral 0.0 so a flaky
judge never turns a found mention into an error cell.
"""

import logging
import os
import re
from typing import Optional

import anthropic

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def parse_sentiment(raw: str) -> float:
    """Pull the first number out of the judge's reply and clamp it to [-1, 1]."""
    match = _NUMBER_RE.search(raw or "")
    if not match:
        return 0.0
    value = float(match.group(0))
    return max(-1.0, min(1.0, value))


class SentimentJudge:
    """
    Scores recommendation strength with a small Claude model.

    Usage:
        judge = SentimentJudge(api_key="sk-ant-...")
        sentiment = await judge.judge(answer_text, "acme")
    """

    DEFAULT_MODEL = "claude-3-5-haiku-latest"
    MAX_TOKENS = 10
    TEXT_LIMIT = 1200

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        """
        Initialize judge.

        Args:
            api_key: Anthropic API key (defaults to env var)
            model: Model to use
            client: Pre-built async client (tests)
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if client is None and not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY not provided")

        self.model = model or self.DEFAULT_MODEL
        self.async_client = client or anthropic.AsyncAnthropic(api_key=self.api_key)
        self.call_count = 0

    def _build_prompt(self, text: str, brand_name: str) -> str:
        return (
            f'Rate how strongly the following text recommends "{brand_name}" on a scale from -1 to 1.\n'
            f"-1 = explicitly warns against it or recommends avoiding it\n"
            f" 0 = neutral or purely factual mention (e.g. \"Brand X is a tool for Y\")\n"
            f" 1 = explicitly recommends it as a top choice (e.g. \"Best choice for startups\")\n\n"
            f"Respond with only a decimal number between -1 and 1. No explanation.\n\n"
            f"Text:\n{text[:self.TEXT_LIMIT]}"
        )

    async def judge(self, text: str, brand_name: str) -> float:
        """Score one answer. Falls back to 0.0 (neutral) on API errors."""
        try:
            response = await self.async_client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                temperature=0,
                messages=[{"role": "user", "content": self._build_prompt(text, brand_name)}],
            )
        except anthropic.APIError as e:
            logger.warning(f"Sentiment judge failed for '{brand_name}': {e}")
            return 0.0

        self.call_count += 1

        content = ""
        for block in response.content:
            if hasattr(block, "text"):
                content += block.text

        return parse_sentiment(content.strip())

    async def close(self):
        await self.async_client.close()

"""
Model Adapter Configuration

Factory and manager for the three chat model adapters plus the optional
sentiment judge. Credentials come from Settings (environment / .env).

Required environment variables (a missing key turns that model's cells
into error cells instead of failing the whole scan):
- OPENAI_API_KEY: ChatGPT
- GOOGLE_GEMINI_API_KEY: Gemini
- PERPLEXITY_API_KEY: Perplexity

Optional:
- ANTHROPIC_API_KEY: Sentiment judge (SENTIMENT_ENABLED=false to skip)
"""

import logging
from typing import Dict, Optional

import httpx

from llmcheck.utils.config import Settings, get_settings
from llmcheck.visibility import ModelId, ScanConfig, SentimentJudge, VisibilityScanner
from .base import ChatAdapter
from .chatgpt import ChatGPTAdapter
from .gemini import GeminiAdapter
from .perplexity import PerplexityAdapter

logger = logging.getLogger(__name__)


class ModelClients:
    """
    Factory and manager for model adapters.

    Usage:
        clients = ModelClients(get_settings())
        scanner = clients.create_scanner()

        output = await scanner.run_visibility_scan("acme.io", "saas")

        # Cleanup
        await clients.close()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        config: Optional[ScanConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize model clients.

        Args:
            settings: Application settings (defaults to env-based settings)
            config: Scan configuration (defaults to one derived from settings)
            transport: Optional httpx transport shared by all adapters (tests)
        """
        self.settings = settings or get_settings()
        self.config = config or ScanConfig.from_settings(self.settings)
        self.transport = transport
        self._adapters: Dict[ModelId, ChatAdapter] = {}
        self._judge: Optional[SentimentJudge] = None

    def _build(self, model_id: ModelId) -> ChatAdapter:
        s = self.settings
        common = {"max_tokens": self.config.max_tokens, "transport": self.transport}

        if model_id == ModelId.CHATGPT:
            return ChatGPTAdapter(s.OPENAI_API_KEY, model=s.OPENAI_MODEL, **common)
        if model_id == ModelId.GEMINI:
            return GeminiAdapter(s.GOOGLE_GEMINI_API_KEY, model=s.GEMINI_MODEL, **common)
        if model_id == ModelId.PERPLEXITY:
            return PerplexityAdapter(s.PERPLEXITY_API_KEY, model=s.PERPLEXITY_MODEL, **common)
        raise ValueError(f"Unknown model: {model_id}")

    def adapter(self, model_id: ModelId) -> ChatAdapter:
        """Get or create the adapter for a model."""
        if model_id not in self._adapters:
            self._adapters[model_id] = self._build(model_id)
            logger.info(f"Initialized {model_id.value} adapter")
        return self._adapters[model_id]

    @property
    def adapters(self) -> Dict[ModelId, ChatAdapter]:
        return {model_id: self.adapter(model_id) for model_id in self.config.models}

    @property
    def judge(self) -> Optional[SentimentJudge]:
        """Get or create the sentiment judge (None when disabled)."""
        if not self.settings.has_sentiment_judge:
            return None

        if self._judge is None:
            self._judge = SentimentJudge(
                api_key=self.settings.ANTHROPIC_API_KEY,
                model=self.settings.SENTIMENT_MODEL,
            )
            logger.info("Initialized sentiment judge")

        return self._judge

    def create_scanner(self) -> VisibilityScanner:
        return VisibilityScanner(self.adapters, config=self.config, judge=self.judge)

    def log_status(self):
        """Log configuration status."""
        status = ", ".join(
            f"{m.value}={'enabled' if a.is_configured else 'missing key'}"
            for m, a in self.adapters.items()
        )
        logger.info(
            f"Model adapter status: {status}, "
            f"sentiment={'enabled' if self.settings.has_sentiment_judge else 'disabled'}"
        )

    async def close(self):
        """Close all clients."""
        for adapter in self._adapters.values():
            await adapter.close()
        self._adapters = {}

        if self._judge:
            await self._judge.close()
            self._judge = None

        logger.info("Closed model clients")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

"""
Perplexity Adapter

AI-powered search with real-time web results.

Perplexity answers are grounded in live search, so they are the most likely
of the three models to cite a site directly.

API: https://docs.perplexity.ai/
Pricing: ~$5/1000 queries (sonar model)
"""

from typing import Any, Dict

from .base import ChatCompletionsAdapter
from llmcheck.visibility.models import ModelId


class PerplexityAdapter(ChatCompletionsAdapter):
    """
    Async adapter for the Perplexity chat completions API.

    Usage:
        adapter = PerplexityAdapter(api_key="your_api_key")

        result = await adapter.query("Top CRM software for startups")
        # result.text = "Popular CRM tools for startups include..."

        await adapter.close()
    """

    model_id = ModelId.PERPLEXITY
    BASE_URL = "https://api.perplexity.ai"
    DEFAULT_MODEL = "sonar"
    DEFAULT_TEMPERATURE = 0.2

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        payload = super()._build_payload(prompt)
        payload["return_images"] = False
        return payload

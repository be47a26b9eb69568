"""
Model Integrations

Adapters for the hosted chat models queried by a visibility scan:
- ChatGPT: OpenAI chat completions
- Gemini: Google Generative Language generateContent
- Perplexity: search-grounded chat completions
- Config: Unified configuration and client management
"""

from .base import (
    PROMPT_SUFFIX,
    ChatAdapter,
    ChatCompletionsAdapter,
    ProviderError,
    ProviderResult,
)
from .chatgpt import ChatGPTAdapter
from .gemini import GeminiAdapter
from .perplexity import PerplexityAdapter
from .config import ModelClients

__all__ = [
    # Base
    "PROMPT_SUFFIX",
    "ChatAdapter",
    "ChatCompletionsAdapter",
    "ProviderError",
    "ProviderResult",
    # Providers
    "ChatGPTAdapter",
    "GeminiAdapter",
    "PerplexityAdapter",
    # Config
    "ModelClients",
]

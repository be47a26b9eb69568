"""
ChatGPT Adapter

OpenAI chat completions API.

API: https://platform.openai.com/docs/api-reference/chat
"""

from .base import ChatCompletionsAdapter
from llmcheck.visibility.models import ModelId


class ChatGPTAdapter(ChatCompletionsAdapter):
    """ChatGPT (gpt-4o by default) via the OpenAI REST API."""

    model_id = ModelId.CHATGPT
    BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "gpt-4o"
    DEFAULT_TEMPERATURE = 0.3

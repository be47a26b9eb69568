"""
Gemini Adapter

Google Generative Language API (generateContent).

API: https://ai.google.dev/api/generate-content
"""

from typing import Any, Dict

from .base import ChatAdapter
from llmcheck.visibility.models import ModelId


class GeminiAdapter(ChatAdapter):
    """
    Gemini (gemini-1.5-flash by default).

    Authenticates with the x-goog-api-key header rather than a bearer token,
    and nests the answer under candidates -> content -> parts.
    """

    model_id = ModelId.GEMINI
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_MODEL = "gemini-1.5-flash"
    DEFAULT_TEMPERATURE = 0.3

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }

    def _request_path(self) -> str:
        return f"/models/{self.model}:generateContent"

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": self.max_tokens,
                "temperature": self.temperature,
            },
        }

    def _extract_text(self, data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

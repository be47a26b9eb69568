"""
Chat Model Adapter Base

Shared plumbing for the hosted chat-completion APIs queried by a visibility
scan. Each provider subclass only describes its request shape and how to
pull the answer text out of the response.

Adapters deliberately do NOT retry or enforce a per-call deadline: the scanner
owns timeouts, and a failed cell is reported rather than retried.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from llmcheck.visibility.models import ModelId

logger = logging.getLogger(__name__)

# Nudges every model to name concrete sites, which makes mentions detectable
PROMPT_SUFFIX = " Please list specific websites, tools, or companies by name in your answer."


class ProviderError(Exception):
    """Error raised by a model provider call."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: int = None,
        response: dict = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response = response


@dataclass
class ProviderResult:
    """Tagged outcome of one adapter call: answer text or a ProviderError."""

    ok: bool
    text: str = ""
    error: Optional[ProviderError] = None

    @classmethod
    def success(cls, text: str) -> "ProviderResult":
        return cls(ok=True, text=text or "")

    @classmethod
    def failure(cls, error: ProviderError) -> "ProviderResult":
        return cls(ok=False, error=error)


class ChatAdapter:
    """
    Async adapter for one hosted chat model.

    Usage:
        adapter = ChatGPTAdapter(api_key="sk-...")

        result = await adapter.query("Top CRM software for startups")
        if result.ok:
            print(result.text)

        await adapter.close()
    """

    model_id: ModelId
    BASE_URL: str = ""
    DEFAULT_MODEL: str = ""
    DEFAULT_TEMPERATURE: float = 0.3

    def __init__(
        self,
        api_key: Optional[str],
        model: Optional[str] = None,
        max_tokens: int = 500,
        temperature: Optional[float] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize adapter.

        Args:
            api_key: Provider API key (calls fail per-cell when missing)
            model: Provider model name (overrides default)
            max_tokens: Response length budget
            temperature: Sampling temperature (overrides default)
            timeout: Transport timeout in seconds (the scanner applies its own, shorter one)
            transport: Optional httpx transport (tests)
        """
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.max_tokens = max_tokens
        self.temperature = self.DEFAULT_TEMPERATURE if temperature is None else temperature

        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers=self._headers(api_key or ""),
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    @property
    def name(self) -> str:
        return self.model_id.value

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    # -- provider specifics -------------------------------------------------

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _request_path(self) -> str:
        raise NotImplementedError

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        raise NotImplementedError

    def _extract_text(self, data: Dict[str, Any]) -> str:
        raise NotImplementedError

    # -- calls ----------------------------------------------------------------

    async def complete(self, prompt: str) -> str:
        """
        Ask the model a question and return the raw answer text.

        Raises:
            ProviderError: Missing key, transport failure or a 4xx/5xx response
        """
        if self._closed:
            raise ProviderError("Client has been closed", provider=self.name)
        if not self.is_configured:
            raise ProviderError(f"{self.name} API key not configured", provider=self.name)

        payload = self._build_payload(prompt + PROMPT_SUFFIX)

        try:
            response = await self._client.post(self._request_path(), json=payload)
        except httpx.TimeoutException as e:
            raise ProviderError(f"Request timed out: {e}", provider=self.name)
        except httpx.RequestError as e:
            raise ProviderError(f"Request failed: {e}", provider=self.name)

        if response.status_code >= 400:
            error_data = _safe_json(response) or {}
            raise ProviderError(
                f"API error: {_error_message(error_data, response.status_code)}",
                provider=self.name,
                status_code=response.status_code,
                response=error_data,
            )

        data = _safe_json(response)
        if not isinstance(data, dict):
            logger.warning(f"{self.name} returned a non-JSON body, treating as empty answer")
            return ""

        try:
            return self._extract_text(data) or ""
        except (AttributeError, IndexError, KeyError, TypeError):
            logger.warning(f"{self.name} response had an unexpected shape, treating as empty answer")
            return ""

    async def query(self, prompt: str) -> ProviderResult:
        """Like complete(), but returns a ProviderResult instead of raising."""
        try:
            text = await self.complete(prompt)
        except ProviderError as e:
            return ProviderResult.failure(e)
        return ProviderResult.success(text)

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class ChatCompletionsAdapter(ChatAdapter):
    """Adapter for OpenAI-compatible /chat/completions endpoints."""

    def _request_path(self) -> str:
        return "/chat/completions"

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def _extract_text(self, data: Dict[str, Any]) -> str:
        choices = data.get("choices") or []
        if not choices:
            return ""
        return choices[0].get("message", {}).get("content") or ""


def _safe_json(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _error_message(error_data: Dict[str, Any], status_code: int) -> Any:
    error = error_data.get("error") if isinstance(error_data, dict) else None
    if isinstance(error, dict):
        return error.get("message", status_code)
    return error or status_code

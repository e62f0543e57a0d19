"""
Generative-AI clients used for comparison summaries and process synthesis.

The service never depends on the provider being available: every caller
catches AIProviderError and falls back to hand-written text.

Endpoint: POST {base_url}/v1beta/models/{model}:generateContent
Request:  {"contents": [{"parts": [{"text": prompt}]}]}
Response: {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from ..core.exceptions import AIProviderError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-2.5-flash-lite"
DEFAULT_TIMEOUT = 30.0
API_KEY_HEADER = "x-goog-api-key"

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


@runtime_checkable
class GenerativeAIClient(Protocol):
    """Protocol for text-generation providers.

    Enables dependency injection and test doubles.
    """

    enabled: bool

    async def generate(self, prompt: str) -> str:
        """Return the provider's free-text answer to a prompt.

        Raises:
            AIProviderError: When the provider cannot answer
        """
        ...

    async def aclose(self) -> None:
        ...


class GeminiClient:
    """Gemini REST client over an injected httpx.AsyncClient.

    Usage:
        client = GeminiClient(api_key="...")
        text = await client.generate("Summarise ...")
        await client.aclose()
    """

    enabled = True

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize GeminiClient.

        Args:
            api_key: Provider API key
            model: Model name
            base_url: Provider base URL
            timeout: Request timeout in seconds
            http_client: Shared client; one is created (and owned) when omitted
        """
        if not api_key:
            raise AIProviderError("Gemini API key is required")
        self._api_key = api_key
        self.model = model
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/v1beta/models/{self.model}:generateContent"

    async def generate(self, prompt: str) -> str:
        """Send a prompt and return the concatenated text of the first candidate.

        Raises:
            AIProviderError: On timeout, connection error, bad status or empty answer
        """
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        try:
            response = await self._http.post(
                self.endpoint, json=payload, headers={API_KEY_HEADER: self._api_key}
            )
        except httpx.TimeoutException as e:
            raise AIProviderError(f"Timeout calling Gemini: {e}") from e
        except httpx.HTTPError as e:
            raise AIProviderError(f"HTTP error calling Gemini: {e}") from e

        if response.status_code != 200:
            raise AIProviderError(f"Gemini returned status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise AIProviderError("Gemini returned a non-JSON body") from e

        text = self._extract_text(data)
        if not text.strip():
            raise AIProviderError("Gemini returned no text")
        return text

    @staticmethod
    def _extract_text(data: Any) -> str:
        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()


class DisabledAIClient:
    """Stand-in used when no API key is configured; always fails over."""

    enabled = False

    async def generate(self, prompt: str) -> str:
        raise AIProviderError("Generative AI is not configured")

    async def aclose(self) -> None:
        return None


def extract_json_block(text: Optional[str]) -> Optional[dict]:
    """Parse the first {...} block of a model answer, or return None."""
    if not text:
        return None
    match = _JSON_BLOCK.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.debug("Model answer contained an unparseable JSON block")
        return None
    return parsed if isinstance(parsed, dict) else None

"""
Generative-language collaborator: one prompt in, free text out.
"""

from __future__ import annotations

from typing import Any

import httpx

from backend_omnipass.core.exceptions import CollaboratorError
from backend_omnipass.omnipass_logging import get_logger

logger = get_logger(__name__)

GEMINI_URL_TEMPLATE = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_TIMEOUT = 15.0


class GeminiClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_output_tokens: int = 1000,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not api_key:
            raise ValueError("GeminiClient requires an API key")
        self._client = http_client
        self._api_key = api_key
        self._url = GEMINI_URL_TEMPLATE.format(model=model)
        self._max_output_tokens = max_output_tokens
        self._timeout = timeout

    async def complete(self, prompt: str) -> str:
        """Send one prompt; raise CollaboratorError on any non-success or malformed response."""
        body: dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": self._max_output_tokens,
                "temperature": 0.7,
                "topP": 0.8,
                "topK": 40,
            },
        }
        try:
            r = await self._client.post(
                self._url,
                params={"key": self._api_key},
                json=body,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            logger.error("gemini_timeout", timeout_sec=self._timeout)
            raise CollaboratorError("gemini", "request timed out") from e
        if r.status_code != 200:
            if r.status_code == 401:
                logger.error("gemini_invalid_api_key")
            elif r.status_code == 429:
                logger.error("gemini_rate_limited")
            else:
                logger.error("gemini_http_error", status_code=r.status_code)
            raise CollaboratorError("gemini", f"HTTP {r.status_code}")
        try:
            text = r.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise CollaboratorError("gemini", "invalid response structure") from e
        if not isinstance(text, str):
            raise CollaboratorError("gemini", "invalid response structure")
        return text

"""GenericOpenAIProvider: OpenAI-compatible endpoint via httpx.

Works with Ollama, vLLM, LM Studio, or any server exposing /v1/chat/completions.
"""

from __future__ import annotations

import logging

import httpx

from .base import BaseProvider

logger = logging.getLogger(__name__)


class GenericOpenAIProvider(BaseProvider):
    """LLM provider using any OpenAI-compatible chat completions API."""

    _timeout = 120.0

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:11434/v1",
        model: str = "qwen3:4b-instruct-2507-fp16",
        temperature: float = 0.3,
        api_key: str = "not-needed",
        max_retries: int = 1,
    ) -> None:
        super().__init__(max_retries=max_retries)
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.api_key = api_key

    def _provider_name(self) -> str:
        return "generic_openai"

    def _get_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _get_headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def _build_payload(self, system: str, user: str, max_tokens: int) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "max_tokens": max_tokens,
            "temperature": self.temperature,
        }

    def _extract_text(self, data: dict) -> str:
        choices = data.get("choices", [])
        if choices:
            # content may be null, e.g. on refusals or tool-only replies
            return (choices[0].get("message") or {}).get("content") or ""
        return ""

    def is_available(self) -> bool:
        """True when the server answers ``GET /models``."""
        try:
            resp = httpx.get(
                f"{self.base_url}/models",
                headers=self._get_headers(),
                timeout=5.0,
            )
        except httpx.HTTPError as e:
            logger.debug("Model server at %s unreachable: %s", self.base_url, e)
            return False
        return resp.status_code == 200

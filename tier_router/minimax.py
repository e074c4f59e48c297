"""Cheap backend adapter (MiniMax, OpenAI-compatible chat completions)."""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
from loguru import logger

from tier_router.models import (
    BackendProvider,
    GenerateResult,
    GenerationError,
    GenerationTimeoutError,
    Tier,
)

DEFAULT_MINIMAX_URL = "https://api.minimax.io/v1"
DEFAULT_MINIMAX_MODEL = "minimax-m2"
DEFAULT_TIMEOUT_S = 60.0

MIN_TEMPERATURE = 0.01
MAX_TEMPERATURE = 1.0


def clamp_temperature(temperature: float | None) -> float:
    """MiniMax rejects 0; keep values in [0.01, 1.0]. Unset means 1.0."""
    if temperature is None:
        return MAX_TEMPERATURE
    return min(max(temperature, MIN_TEMPERATURE), MAX_TEMPERATURE)


class MinimaxProvider(BackendProvider):
    """Low-cost cloud tier. Request shape: chat messages array."""

    tier = Tier.CHEAP

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str = DEFAULT_MINIMAX_URL,
        model: str = DEFAULT_MINIMAX_MODEL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        probe_timeout_s: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(api_base, model, timeout_s, probe_timeout_s)
        self.api_key = api_key
        self._transport = transport

    @property
    def name(self) -> str:
        return "MiniMax"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    async def is_available(self) -> bool:
        if not self.api_key:
            return False
        try:
            async with self._client() as client:
                response = await client.get(f"{self.api_base}/models", timeout=self.probe_timeout_s)
            return response.is_success
        except Exception as e:
            logger.debug(f"MiniMax probe failed: {e}")
            return False

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        async with self._client() as client:
            return await client.post(f"{self.api_base}/chat/completions", json=body, timeout=None)

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerateResult:
        if not self.api_key:
            raise GenerationError("MiniMax API key not configured (set MINIMAX_API_KEY)", provider=self.name)

        use_model = model or self.model
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        body: dict[str, Any] = {
            "model": use_model,
            "messages": messages,
            "temperature": clamp_temperature(temperature),
        }
        if max_tokens is not None:
            body["max_tokens"] = max_tokens

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(self._post(body), timeout=self.timeout_s)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise GenerationTimeoutError(self.name, self.timeout_s) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"MiniMax request failed: {e}", provider=self.name) from e

        if not response.is_success:
            raise GenerationError(
                f"MiniMax API error ({response.status_code}): {response.text}",
                provider=self.name, status=response.status_code, body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError("MiniMax returned a non-JSON body", provider=self.name, body=response.text) from e
        if not isinstance(data, dict):
            raise GenerationError("MiniMax response is not an object", provider=self.name, body=response.text)

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise GenerationError("MiniMax response has no choices", provider=self.name, body=response.text)
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise GenerationError("MiniMax response has no message content", provider=self.name, body=response.text)
        usage = data.get("usage") or {}

        return GenerateResult(
            response=content,
            duration_ms=int((time.monotonic() - start) * 1000),
            model=data.get("model") or use_model,
            prompt_tokens=usage.get("prompt_tokens", 0) or 0,
            completion_tokens=usage.get("completion_tokens", 0) or 0,
        )

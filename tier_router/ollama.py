"""Local backend adapter (Ollama HTTP API)."""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Callable

import httpx
from loguru import logger

from tier_router.models import (
    BackendProvider,
    GenerateResult,
    GenerationError,
    GenerationTimeoutError,
    Tier,
)

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "qwen2.5:3b"
DEFAULT_NUM_CTX = 4096
DEFAULT_TIMEOUT_S = 30.0


class OllamaProvider(BackendProvider):
    """Free local tier. Request shape: prompt + options."""

    tier = Tier.LOCAL

    def __init__(
        self,
        api_base: str = DEFAULT_OLLAMA_URL,
        model: str = DEFAULT_OLLAMA_MODEL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        probe_timeout_s: float = 5.0,
        num_ctx: int = DEFAULT_NUM_CTX,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(api_base, model, timeout_s, probe_timeout_s)
        self.num_ctx = num_ctx
        self._transport = transport

    @property
    def name(self) -> str:
        return "Ollama"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport)

    async def _get_tags(self) -> httpx.Response:
        async with self._client() as client:
            return await client.get(f"{self.api_base}/api/tags", timeout=self.probe_timeout_s)

    async def is_available(self) -> bool:
        try:
            response = await self._get_tags()
            return response.is_success
        except Exception as e:
            logger.debug(f"Ollama probe failed: {e}")
            return False

    async def is_model_available(self, model: str | None = None) -> bool:
        """Check that ``model`` (or the default) has been pulled."""
        wanted = model or self.model
        try:
            response = await self._get_tags()
            data = response.json() if response.is_success else None
        except Exception as e:
            logger.debug(f"Ollama model probe failed: {e}")
            return False
        if not isinstance(data, dict):
            return False
        names = [m.get("name", "") for m in data.get("models") or []]
        return any(n == wanted or n.startswith(f"{wanted}:") for n in names)

    def _build_body(
        self,
        prompt: str,
        system: str | None,
        model: str,
        temperature: float | None,
        max_tokens: int | None,
        stream: bool,
    ) -> dict[str, Any]:
        options: dict[str, Any] = {"num_ctx": self.num_ctx}
        if temperature is not None:
            options["temperature"] = temperature
        if max_tokens is not None:
            options["num_predict"] = max_tokens
        body: dict[str, Any] = {"model": model, "prompt": prompt, "stream": stream}
        if system:
            body["system"] = system
        body["options"] = options
        return body

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        async with self._client() as client:
            return await client.post(f"{self.api_base}/api/generate", json=body, timeout=None)

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerateResult:
        use_model = model or self.model
        body = self._build_body(prompt, system, use_model, temperature, max_tokens, stream=False)

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(self._post(body), timeout=self.timeout_s)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise GenerationTimeoutError(self.name, self.timeout_s) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"Ollama request failed: {e}", provider=self.name) from e

        if not response.is_success:
            raise GenerationError(
                f"Ollama API error ({response.status_code}): {response.text}",
                provider=self.name, status=response.status_code, body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError("Ollama returned a non-JSON body", provider=self.name, body=response.text) from e
        if not isinstance(data, dict) or not isinstance(data.get("response"), str):
            raise GenerationError("Ollama response has no 'response' field", provider=self.name, body=response.text)

        return GenerateResult(
            response=data["response"],
            duration_ms=int((time.monotonic() - start) * 1000),
            model=data.get("model") or use_model,
            prompt_tokens=data.get("prompt_eval_count", 0) or 0,
            completion_tokens=data.get("eval_count", 0) or 0,
        )

    async def generate_stream(
        self,
        prompt: str,
        on_chunk: Callable[[dict[str, Any]], None],
        system: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
    ) -> GenerateResult:
        """Stream a generation, calling ``on_chunk`` for every decoded chunk.

        Lines that are not valid JSON are skipped. The whole stream shares the
        same deadline as a non-streaming call.
        """
        use_model = model or self.model
        body = self._build_body(prompt, system, use_model, temperature, None, stream=True)
        start = time.monotonic()

        async def _consume() -> tuple[str, str, int, int]:
            parts: list[str] = []
            final_model = use_model
            prompt_tokens = completion_tokens = 0
            async with self._client() as client:
                async with client.stream(
                    "POST", f"{self.api_base}/api/generate", json=body, timeout=None,
                ) as response:
                    if not response.is_success:
                        text = (await response.aread()).decode(errors="replace")
                        raise GenerationError(
                            f"Ollama API error ({response.status_code}): {text}",
                            provider=self.name, status=response.status_code, body=text,
                        )
                    async for line in response.aiter_lines():
                        if not line.strip():
                            continue
                        try:
                            chunk = json.loads(line)
                        except ValueError:
                            continue
                        parts.append(chunk.get("response", ""))
                        on_chunk(chunk)
                        if chunk.get("done"):
                            final_model = chunk.get("model") or final_model
                            prompt_tokens = chunk.get("prompt_eval_count", 0) or 0
                            completion_tokens = chunk.get("eval_count", 0) or 0
            return "".join(parts), final_model, prompt_tokens, completion_tokens

        try:
            text, final_model, prompt_tokens, completion_tokens = await asyncio.wait_for(
                _consume(), timeout=self.timeout_s,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise GenerationTimeoutError(self.name, self.timeout_s) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"Ollama request failed: {e}", provider=self.name) from e

        return GenerateResult(
            response=text,
            duration_ms=int((time.monotonic() - start) * 1000),
            model=final_model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )

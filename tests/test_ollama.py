"""Tests for the local (Ollama) adapter."""

import asyncio
import json

import httpx
import pytest

from tier_router.models import GenerationError, GenerationTimeoutError
from tier_router.ollama import DEFAULT_NUM_CTX, OllamaProvider


def _provider(handler, **kwargs) -> OllamaProvider:
    return OllamaProvider(api_base="http://ollama.test:11434", transport=httpx.MockTransport(handler), **kwargs)


class TestAvailability:
    @pytest.mark.asyncio
    async def test_available_on_2xx(self):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            return httpx.Response(200, json={"models": []})

        assert await _provider(handler).is_available()
        assert seen == [("GET", "/api/tags")]

    @pytest.mark.asyncio
    async def test_unavailable_on_error_status(self):
        assert not await _provider(lambda r: httpx.Response(503)).is_available()

    @pytest.mark.asyncio
    async def test_unavailable_on_network_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        assert not await _provider(handler).is_available()

    @pytest.mark.asyncio
    async def test_model_available_by_exact_name_or_tag_prefix(self):
        def handler(request):
            return httpx.Response(200, json={"models": [{"name": "qwen2.5:3b"}, {"name": "llama3:latest"}]})

        provider = _provider(handler)
        assert await provider.is_model_available()
        assert await provider.is_model_available("llama3")
        assert not await provider.is_model_available("mistral")

    @pytest.mark.asyncio
    async def test_model_unavailable_when_server_down(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        assert not await _provider(handler).is_model_available()

    @pytest.mark.asyncio
    async def test_probe_and_model_check_share_the_tags_request(self):
        seen = []

        def handler(request):
            seen.append((request.method, str(request.url)))
            return httpx.Response(200, json={"models": [{"name": "qwen2.5:3b"}]})

        provider = _provider(handler, probe_timeout_s=2.0)
        assert await provider.is_available()
        assert await provider.is_model_available()
        assert seen == [("GET", "http://ollama.test:11434/api/tags")] * 2

    @pytest.mark.asyncio
    async def test_model_unavailable_on_error_status(self):
        assert not await _provider(lambda r: httpx.Response(500, text="boom")).is_model_available()


class TestGenerate:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        bodies = []

        def handler(request):
            assert request.url.path == "/api/generate"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"response": "hola", "model": "qwen2.5:3b"})

        await _provider(handler).generate("Translate: hello")
        assert bodies == [{
            "model": "qwen2.5:3b",
            "prompt": "Translate: hello",
            "stream": False,
            "options": {"num_ctx": DEFAULT_NUM_CTX},
        }]

    @pytest.mark.asyncio
    async def test_optional_fields(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"response": "ok", "model": "llama3"})

        await _provider(handler).generate("hi", system="You are Clawd.", model="llama3", temperature=0.0)
        body = bodies[0]
        assert body["system"] == "You are Clawd."
        assert body["model"] == "llama3"
        assert body["options"]["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_response_normalized(self):
        def handler(request):
            return httpx.Response(200, json={
                "response": "hola", "model": "qwen2.5:3b", "prompt_eval_count": 12, "eval_count": 3,
            })

        result = await _provider(handler).generate("hello")
        assert result.response == "hola"
        assert result.model == "qwen2.5:3b"
        assert result.prompt_tokens == 12
        assert result.completion_tokens == 3
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_usage_defaults_to_zero(self):
        result = await _provider(lambda r: httpx.Response(200, json={"response": "x"})).generate("hello")
        assert (result.prompt_tokens, result.completion_tokens) == (0, 0)
        assert result.model == "qwen2.5:3b"

    @pytest.mark.asyncio
    async def test_error_status_carries_status_and_body(self):
        provider = _provider(lambda r: httpx.Response(500, text="model not loaded"))
        with pytest.raises(GenerationError) as exc:
            await provider.generate("hello")
        assert exc.value.status == 500
        assert exc.value.body == "model not loaded"
        assert "Ollama API error (500)" in str(exc.value)
        assert not isinstance(exc.value, GenerationTimeoutError)

    @pytest.mark.asyncio
    async def test_deadline_aborts_request(self):
        async def handler(request):
            await asyncio.sleep(1)
            return httpx.Response(200, json={"response": "late"})

        with pytest.raises(GenerationTimeoutError) as exc:
            await _provider(handler, timeout_s=0.05).generate("hello")
        assert "timed out after 50ms" in str(exc.value)

    @pytest.mark.asyncio
    async def test_transport_timeout_is_timeout_error(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(GenerationTimeoutError):
            await _provider(handler).generate("hello")

    @pytest.mark.asyncio
    async def test_network_error_is_generation_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(GenerationError):
            await _provider(handler).generate("hello")

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        with pytest.raises(GenerationError):
            await _provider(lambda r: httpx.Response(200, text="not json")).generate("hello")
        with pytest.raises(GenerationError):
            await _provider(lambda r: httpx.Response(200, json={"model": "x"})).generate("hello")


class TestStream:
    @pytest.mark.asyncio
    async def test_chunks_are_aggregated(self):
        lines = [
            {"response": "Hel", "done": False},
            "garbage line",
            {"response": "lo", "done": True, "model": "qwen2.5:3b", "prompt_eval_count": 4, "eval_count": 2},
        ]
        payload = "\n".join(l if isinstance(l, str) else json.dumps(l) for l in lines) + "\n"
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, content=payload.encode())

        chunks = []
        result = await _provider(handler).generate_stream("hello", chunks.append)
        assert bodies[0]["stream"] is True
        assert [c["response"] for c in chunks] == ["Hel", "lo"]
        assert result.response == "Hello"
        assert result.model == "qwen2.5:3b"
        assert result.completion_tokens == 2

    @pytest.mark.asyncio
    async def test_stream_error_status(self):
        provider = _provider(lambda r: httpx.Response(404, text="model not found"))
        with pytest.raises(GenerationError) as exc:
            await provider.generate_stream("hello", lambda c: None)
        assert exc.value.status == 404

"""Tests for the top-level entry points."""

import httpx
import pytest

from tier_router.config import RouterConfig
from tier_router.local_routing import try_local_routing, try_tiered_routing
from tier_router.minimax import MinimaxProvider
from tier_router.models import GenerationError, Tier

TRANSLATE = "Translate this to Spanish: Hello, how are you today? I hope you're having a great day!"


class TestTryLocalRouting:
    @pytest.mark.asyncio
    async def test_simple_prompt_handled_locally(self, local):
        result = await try_local_routing("Summarize this text: Hello world", local_provider=local)
        assert result.handled
        assert result.response == "local answer"
        assert "summarize" in result.reason
        assert result.actual_tier is Tier.LOCAL

    @pytest.mark.asyncio
    async def test_unavailable(self, local):
        local.available = False
        result = await try_local_routing("Summarize this text", local_provider=local)
        assert not result.handled
        assert "unavailable" in result.reason
        assert local.generate_calls == []

    @pytest.mark.asyncio
    async def test_probe_raising_is_contained(self, local):
        local.probe_error = RuntimeError("Connection refused")
        result = await try_local_routing("Summarize this text", local_provider=local)
        assert not result.handled
        assert result.reason == "Local routing error: Connection refused"

    @pytest.mark.asyncio
    async def test_complex_prompt_not_probed(self, local):
        result = await try_local_routing("Explain this step by step", local_provider=local)
        assert not result.handled
        assert "step by step" in result.reason
        assert local.probe_calls == 0

    @pytest.mark.asyncio
    async def test_generation_failure(self, local):
        local.error = GenerationError("Generation error")
        result = await try_local_routing("Summarize this text", local_provider=local)
        assert not result.handled
        assert "failed" in result.reason

    @pytest.mark.asyncio
    async def test_empty_response_not_handled(self, local):
        local.response = ""
        result = await try_local_routing("Summarize this text", local_provider=local)
        assert not result.handled
        assert result.reason is not None

    @pytest.mark.asyncio
    async def test_disabled(self, local):
        result = await try_local_routing(
            "Summarize this text", RouterConfig(enabled=False), local_provider=local,
        )
        assert not result.handled
        assert result.reason == "Local routing disabled"
        assert local.probe_calls == 0

    @pytest.mark.asyncio
    async def test_debug_override(self, local, log_messages):
        local.available = False
        await try_local_routing("Summarize this", debug=True, local_provider=local)
        assert any("[TaskRouter]" in m for m in log_messages)


class TestTryTieredRouting:
    @pytest.mark.asyncio
    async def test_cheap_fallback(self, local, cheap):
        local.available = False
        result = await try_tiered_routing(TRANSLATE, local_provider=local, cheap_provider=cheap)
        assert result.handled
        assert result.response == "cheap answer"
        assert result.actual_tier is Tier.CHEAP

    @pytest.mark.asyncio
    async def test_all_down(self, local, cheap):
        local.available = False
        cheap.available = False
        result = await try_tiered_routing(TRANSLATE, local_provider=local, cheap_provider=cheap)
        assert not result.handled
        assert result.response is None
        assert result.actual_tier is Tier.QUALITY

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self, local, cheap):
        local.probe_error = ValueError("mock misuse")
        result = await try_tiered_routing(TRANSLATE, local_provider=local, cheap_provider=cheap)
        assert not result.handled
        assert result.reason == "Local routing error: mock misuse"
        assert result.actual_tier is Tier.QUALITY

    @pytest.mark.asyncio
    async def test_quality_prompt(self, local, cheap):
        result = await try_tiered_routing("What are my cron jobs?", local_provider=local, cheap_provider=cheap)
        assert not result.handled
        assert result.actual_tier is Tier.QUALITY
        assert "Tool signal" in result.reason

    @pytest.mark.asyncio
    async def test_cheap_answer_without_content_is_not_handled(self):
        def handler(request):
            if request.url.path == "/v1/models":
                return httpx.Response(200, json={"data": []})
            return httpx.Response(200, json={"model": "minimax-m2", "base_resp": {"status_code": 0}})

        compare = (
            "Compare these two: Option A is faster but uses more memory. "
            "Option B is slower but memory efficient."
        )
        cheap = MinimaxProvider(api_key="sk-test", transport=httpx.MockTransport(handler))
        result = await try_tiered_routing(compare, cheap_provider=cheap)
        assert not result.handled
        assert result.response is None
        assert result.actual_tier is Tier.QUALITY
        assert result.reason == "Medium transform with inline content: compare"

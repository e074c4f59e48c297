"""Shared fixtures for tier_router tests."""

import pytest
from loguru import logger

from tier_router.models import BackendProvider, GenerateResult, Tier


class FakeProvider(BackendProvider):
    """In-memory backend recording every probe and generate call."""

    def __init__(
        self,
        tier: Tier,
        available: bool = True,
        response: str = "ok",
        error: Exception | None = None,
        model: str = "fake-model",
        prompt_tokens: int = 0,
        completion_tokens: int = 0,
        probe_error: Exception | None = None,
    ):
        super().__init__("http://fake", model, timeout_s=1.0)
        self.tier = tier
        self.available = available
        self.response = response
        self.error = error
        self.probe_error = probe_error
        self.prompt_tokens = prompt_tokens
        self.completion_tokens = completion_tokens
        self.probe_calls = 0
        self.generate_calls: list[dict] = []

    @property
    def name(self) -> str:
        return f"fake-{self.tier.value}"

    async def is_available(self) -> bool:
        self.probe_calls += 1
        if self.probe_error is not None:
            raise self.probe_error
        return self.available

    async def generate(self, prompt, system=None, model=None, temperature=None, max_tokens=None):
        self.generate_calls.append({"prompt": prompt, "system": system, "model": model})
        if self.error is not None:
            raise self.error
        return GenerateResult(
            response=self.response,
            duration_ms=5,
            model=model or self.model,
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
        )


@pytest.fixture
def local():
    return FakeProvider(Tier.LOCAL, response="local answer", model="qwen2.5:3b")


@pytest.fixture
def cheap():
    return FakeProvider(
        Tier.CHEAP, response="cheap answer", model="minimax-m2",
        prompt_tokens=1000, completion_tokens=500,
    )


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)

"""Forward-only fallback across execution tiers."""

import time
from dataclasses import dataclass, field

from loguru import logger

from tier_router.models import BackendProvider, GenerateResult, Tier


@dataclass
class TierAttempt:
    """A single step in the fallback chain."""

    tier: Tier
    provider: BackendProvider
    model: str | None = None  # None means the provider's default


@dataclass
class FallbackOutcome:
    """What the chain produced. ``result`` is None when every tier failed."""

    result: GenerateResult | None = None
    attempt: TierAttempt | None = None
    failures: list[tuple[Tier, str]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result is not None


class FallbackChain:
    """Probe then generate on each tier in order until one succeeds.

    Tiers only ever move up in capability and none is tried twice.
    Exhausting the chain is not an error: the caller defers to quality.
    """

    def __init__(self, debug: bool = False) -> None:
        self._debug = debug

    @staticmethod
    def _check_order(chain: list[TierAttempt]) -> None:
        ranks = [a.tier.rank for a in chain]
        if any(b <= a for a, b in zip(ranks, ranks[1:])):
            raise ValueError(f"Fallback chain must be strictly ascending: {[a.tier.value for a in chain]}")

    async def try_tiers(
        self,
        chain: list[TierAttempt],
        prompt: str,
        system: str | None = None,
    ) -> FallbackOutcome:
        self._check_order(chain)
        outcome = FallbackOutcome()

        for attempt in chain:
            provider = attempt.provider
            model = attempt.model or provider.model

            if not await provider.is_available():
                outcome.failures.append((attempt.tier, f"{provider.name} unavailable"))
                if self._debug:
                    logger.debug(f"[TaskRouter] {provider.name} unavailable, skipping {attempt.tier.value} tier")
                continue

            start = time.monotonic()
            try:
                result = await provider.generate(prompt, system=system, model=model)
            except Exception as e:
                latency_ms = int((time.monotonic() - start) * 1000)
                outcome.failures.append((attempt.tier, str(e)))
                logger.warning(
                    f"Provider {provider.name} ({model}) failed in {latency_ms}ms: {e}"
                )
                continue

            if self._debug:
                logger.debug(
                    f"[TaskRouter] {attempt.tier.value} generation succeeded in {result.duration_ms}ms"
                )
            outcome.result = result
            outcome.attempt = attempt
            return outcome

        return outcome

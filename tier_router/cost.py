"""Per-request cost accounting across tiers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping

from loguru import logger

from tier_router.models import TIER_ORDER, Tier


@dataclass(frozen=True)
class TierRate:
    """USD per million tokens."""

    input_per_million: float
    output_per_million: float


# local: free; cheap: MiniMax M2; quality: Claude (approximate).
COST_PER_MILLION: Mapping[Tier, TierRate] = MappingProxyType({
    Tier.LOCAL: TierRate(0.0, 0.0),
    Tier.CHEAP: TierRate(0.255, 1.0),
    Tier.QUALITY: TierRate(3.0, 15.0),
})


def calculate_cost(
    tier: Tier | str,
    prompt_tokens: int,
    completion_tokens: int,
    rates: Mapping[Tier, TierRate] = COST_PER_MILLION,
) -> float:
    """Cost in USD. Not rounded."""
    tier = Tier(tier)
    if tier is Tier.LOCAL:
        return 0.0
    rate = rates[tier]
    return (prompt_tokens / 1_000_000) * rate.input_per_million + (
        completion_tokens / 1_000_000
    ) * rate.output_per_million


@dataclass(frozen=True)
class CostEntry:
    timestamp: datetime
    tier: Tier
    model: str
    prompt_tokens: int
    completion_tokens: int
    cost_usd: float
    duration_ms: int


class CostLedger:
    """In-memory, append-only record of completed requests.

    Safe to share between threads; entries are immutable once tracked.
    """

    def __init__(self, rates: Mapping[Tier, TierRate] = COST_PER_MILLION, debug: bool = False):
        self._rates = rates
        self._debug = debug
        self._entries: list[CostEntry] = []
        self._lock = threading.Lock()

    def track(
        self,
        tier: Tier | str,
        model: str,
        prompt_tokens: int,
        completion_tokens: int,
        duration_ms: int,
    ) -> CostEntry:
        """Record a completed request and return its entry."""
        tier = Tier(tier)
        entry = CostEntry(
            timestamp=datetime.now(timezone.utc),
            tier=tier,
            model=model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost_usd=calculate_cost(tier, prompt_tokens, completion_tokens, self._rates),
            duration_ms=duration_ms,
        )
        with self._lock:
            self._entries.append(entry)

        if self._debug:
            logger.debug(
                f"[CostTracker] {tier.value}: ${entry.cost_usd:.6f} "
                f"({prompt_tokens}/{completion_tokens} tokens)"
            )
        return entry

    def entries(self) -> list[CostEntry]:
        with self._lock:
            return list(self._entries)

    def total_cost(self) -> float:
        with self._lock:
            return sum(e.cost_usd for e in self._entries)

    def cost_by_tier(self) -> dict[Tier, float]:
        totals = {tier: 0.0 for tier in TIER_ORDER}
        with self._lock:
            for e in self._entries:
                totals[e.tier] += e.cost_usd
        return totals

    def request_count_by_tier(self) -> dict[Tier, int]:
        counts = {tier: 0 for tier in TIER_ORDER}
        with self._lock:
            for e in self._entries:
                counts[e.tier] += 1
        return counts

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

"""tier-router: route prompts to the cheapest capable tier with upward fallback."""

from tier_router.config import RouterConfig, RouterSettings
from tier_router.cost import COST_PER_MILLION, CostEntry, CostLedger, TierRate, calculate_cost
from tier_router.failover import FallbackChain, FallbackOutcome, TierAttempt
from tier_router.heuristics import classify, classify_task, classify_task_three_tier, has_inline_content
from tier_router.local_routing import LocalRoutingResult, try_local_routing, try_tiered_routing
from tier_router.minimax import MinimaxProvider
from tier_router.models import (
    BackendProvider,
    Confidence,
    Decision,
    Destination,
    GenerateResult,
    GenerationError,
    GenerationTimeoutError,
    RouteResult,
    RoutingDecision,
    ThreeTierRouteResult,
    Tier,
)
from tier_router.ollama import OllamaProvider
from tier_router.router import TaskRouter

__all__ = [
    "BackendProvider",
    "COST_PER_MILLION",
    "Confidence",
    "CostEntry",
    "CostLedger",
    "Decision",
    "Destination",
    "FallbackChain",
    "FallbackOutcome",
    "GenerateResult",
    "GenerationError",
    "GenerationTimeoutError",
    "LocalRoutingResult",
    "MinimaxProvider",
    "OllamaProvider",
    "RouteResult",
    "RouterConfig",
    "RouterSettings",
    "RoutingDecision",
    "TaskRouter",
    "ThreeTierRouteResult",
    "Tier",
    "TierAttempt",
    "TierRate",
    "calculate_cost",
    "classify",
    "classify_task",
    "classify_task_three_tier",
    "has_inline_content",
    "try_local_routing",
    "try_tiered_routing",
]

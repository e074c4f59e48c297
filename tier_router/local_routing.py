"""Top-level entry points for the agent pipeline.

Both functions always return a ``LocalRoutingResult``; they never raise.
``handled=False`` means the caller must send the prompt to the
full-capability backend itself.
"""

from dataclasses import dataclass

from loguru import logger

from tier_router.config import RouterConfig
from tier_router.cost import CostLedger
from tier_router.models import BackendProvider, Destination, Tier
from tier_router.router import TaskRouter


@dataclass(frozen=True)
class LocalRoutingResult:
    handled: bool
    response: str | None = None
    reason: str | None = None
    actual_tier: Tier | None = None


async def try_local_routing(
    prompt: str,
    config: RouterConfig | None = None,
    *,
    debug: bool | None = None,
    local_provider: BackendProvider | None = None,
    ledger: CostLedger | None = None,
) -> LocalRoutingResult:
    """Two-tier: serve the prompt locally if it is simple and Ollama works."""
    config = config or RouterConfig()
    if debug is not None:
        config = config.with_overrides(debug=debug)
    if not config.enabled:
        return LocalRoutingResult(handled=False, reason="Local routing disabled")

    try:
        router = TaskRouter(config, local_provider=local_provider, ledger=ledger)
        result = await router.route(prompt)
        if result.decision.destination is Destination.LOCAL and result.response:
            return LocalRoutingResult(
                handled=True, response=result.response,
                reason=result.decision.reason, actual_tier=Tier.LOCAL,
            )
        return LocalRoutingResult(handled=False, reason=result.decision.reason)
    except Exception as e:
        logger.warning(f"Local routing error: {e}")
        return LocalRoutingResult(handled=False, reason=f"Local routing error: {e}")


async def try_tiered_routing(
    prompt: str,
    config: RouterConfig | None = None,
    *,
    debug: bool | None = None,
    local_provider: BackendProvider | None = None,
    cheap_provider: BackendProvider | None = None,
    ledger: CostLedger | None = None,
) -> LocalRoutingResult:
    """Three-tier: serve the prompt on local or cheap, else defer to quality."""
    config = config or RouterConfig()
    if debug is not None:
        config = config.with_overrides(debug=debug)
    if not config.enabled:
        return LocalRoutingResult(handled=False, reason="Local routing disabled")

    try:
        router = TaskRouter(
            config, local_provider=local_provider, cheap_provider=cheap_provider, ledger=ledger,
        )
        result = await router.route_three_tier(prompt)
        return LocalRoutingResult(
            handled=result.handled,
            response=result.response,
            reason=result.decision.reason,
            actual_tier=result.resolved_tier,
        )
    except Exception as e:
        logger.warning(f"Local routing error: {e}")
        return LocalRoutingResult(handled=False, reason=f"Local routing error: {e}", actual_tier=Tier.QUALITY)

"""TaskRouter: classify a prompt, then try the cheapest capable tier."""

from dataclasses import replace

from loguru import logger

from tier_router.config import RouterConfig
from tier_router.cost import CostLedger
from tier_router.failover import FallbackChain, TierAttempt
from tier_router.heuristics import (
    DEFAULT_MAX_LOCAL_PROMPT_LENGTH,
    DEFAULT_THREE_TIER_MAX_LOCAL_PROMPT_LENGTH,
    classify,
    classify_task,
)
from tier_router.minimax import MinimaxProvider
from tier_router.models import (
    BackendProvider,
    Decision,
    Destination,
    GenerateResult,
    RouteResult,
    RoutingDecision,
    ThreeTierRouteResult,
    Tier,
)
from tier_router.ollama import OllamaProvider


class TaskRouter:
    """Routes prompts to the local, cheap or quality tier.

    The quality backend is never called here: a result whose
    ``actual_tier`` is quality (or whose decision is quality) tells the
    caller to invoke it. Successful local and cheap generations are
    recorded in the ledger when one is given.
    """

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        local_provider: BackendProvider | None = None,
        cheap_provider: BackendProvider | None = None,
        ledger: CostLedger | None = None,
    ):
        self._config = config or RouterConfig()
        cfg = self._config
        self._local = local_provider or OllamaProvider(
            api_base=cfg.ollama_url,
            model=cfg.ollama_model,
            timeout_s=cfg.local_timeout_s,
            probe_timeout_s=cfg.probe_timeout_s,
        )
        self._cheap = cheap_provider or MinimaxProvider(
            api_key=cfg.minimax_api_key,
            api_base=cfg.minimax_url,
            model=cfg.minimax_model,
            timeout_s=cfg.cheap_timeout_s,
            probe_timeout_s=cfg.probe_timeout_s,
        )
        self._ledger = ledger
        self._fallback = FallbackChain(debug=cfg.debug)

    @property
    def config(self) -> RouterConfig:
        return self._config

    @property
    def ledger(self) -> CostLedger | None:
        return self._ledger

    def _max_local(self, default: int) -> int:
        configured = self._config.max_local_prompt_length
        return default if configured is None else configured

    def _trace(self, message: str) -> None:
        if self._config.debug:
            logger.debug(f"[TaskRouter] {message}")

    # --- Classification (no I/O) ---

    def classify(self, prompt: str) -> RoutingDecision:
        """Two-tier classification without generating."""
        return classify_task(prompt, self._max_local(DEFAULT_MAX_LOCAL_PROMPT_LENGTH))

    def classify_three_tier(self, prompt: str) -> Decision:
        return classify(prompt, self._max_local(DEFAULT_THREE_TIER_MAX_LOCAL_PROMPT_LENGTH))

    # --- Probes ---

    async def is_local_available(self) -> bool:
        return await self._local.is_available()

    async def is_cheap_available(self) -> bool:
        return await self._cheap.is_available()

    # --- Two-tier routing ---

    async def route(self, prompt: str) -> RouteResult:
        """Generate locally when the prompt is simple and the backend is up.

        Cloud decisions are returned untouched. A local decision that cannot
        be served is rewritten to cloud with the cause appended to its reason.
        """
        decision = self.classify(prompt)
        self._trace(f"Prompt length: {decision.prompt_length}")
        self._trace(f"Decision: {decision.destination.value}")
        self._trace(f"Reason: {decision.reason}")
        self._trace(f"Confidence: {decision.confidence.value}")

        if decision.destination is Destination.CLOUD:
            return RouteResult(decision=decision)

        if not await self._local.is_available():
            self._trace("Ollama unavailable, falling back to cloud")
            return RouteResult(decision=replace(
                decision,
                destination=Destination.CLOUD,
                reason=f"{decision.reason} (Ollama unavailable, falling back to cloud)",
            ))

        try:
            result = await self._local.generate(prompt, system=self._config.system_prompt)
        except Exception as e:
            logger.warning(f"Local generation failed: {e}")
            self._trace("Falling back to cloud")
            return RouteResult(decision=replace(
                decision,
                destination=Destination.CLOUD,
                reason=f"{decision.reason} (local generation failed, falling back to cloud)",
            ))

        self._trace(f"Local generation succeeded in {result.duration_ms}ms")
        self._record(Tier.LOCAL, result)
        return RouteResult(decision=decision, response=result.response, duration_ms=result.duration_ms)

    # --- Three-tier routing ---

    def _build_chain(self, decision: Decision) -> list[TierAttempt]:
        """Ordered attempts for a decision: local -> cheap, never downward."""
        chain: list[TierAttempt] = []
        if decision.tier is Tier.LOCAL:
            chain.append(TierAttempt(Tier.LOCAL, self._local))
        if decision.tier in (Tier.LOCAL, Tier.CHEAP):
            chain.append(TierAttempt(Tier.CHEAP, self._cheap))
        return chain

    async def route_three_tier(self, prompt: str) -> ThreeTierRouteResult:
        decision = self.classify_three_tier(prompt)
        self._trace(f"Three-tier decision: {decision.tier.value}")
        self._trace(f"Reason: {decision.reason}")

        chain = self._build_chain(decision)
        if not chain:
            logger.info(f"Route: quality ({decision.reason})")
            return ThreeTierRouteResult(decision=decision)

        outcome = await self._fallback.try_tiers(chain, prompt, system=self._config.system_prompt)

        if outcome.succeeded:
            tier = outcome.attempt.tier
            result = outcome.result
            if tier is not decision.tier:
                logger.info(f"Route: {decision.tier.value} -> {tier.value} (fallback)")
            self._record(tier, result)
            return ThreeTierRouteResult(
                decision=decision,
                response=result.response,
                duration_ms=result.duration_ms,
                actual_tier=tier,
                model=result.model,
                failures=outcome.failures,
            )

        logger.warning(
            f"Route: {decision.tier.value} -> quality (all cheaper tiers failed: "
            + "; ".join(f"{t.value}: {msg}" for t, msg in outcome.failures)
            + ")"
        )
        return ThreeTierRouteResult(decision=decision, actual_tier=Tier.QUALITY, failures=outcome.failures)

    def _record(self, tier: Tier, result: GenerateResult) -> None:
        if self._ledger is None:
            return
        self._ledger.track(
            tier=tier,
            model=result.model,
            prompt_tokens=result.prompt_tokens,
            completion_tokens=result.completion_tokens,
            duration_ms=result.duration_ms,
        )

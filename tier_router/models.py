"""Core data models for tier-router."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class Tier(str, Enum):
    """Execution tier, cheapest first."""

    LOCAL = "local"
    CHEAP = "cheap"
    QUALITY = "quality"

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)


TIER_ORDER: tuple[Tier, ...] = (Tier.LOCAL, Tier.CHEAP, Tier.QUALITY)


class Destination(str, Enum):
    """Two-tier routing target."""

    LOCAL = "local"
    CLOUD = "cloud"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Decision:
    """Result of three-tier classification."""

    tier: Tier
    reason: str          # Which pattern or rule matched
    prompt_length: int   # Characters, not tokens
    confidence: Confidence


@dataclass(frozen=True)
class RoutingDecision:
    """Result of legacy two-tier classification."""

    destination: Destination
    reason: str
    prompt_length: int
    confidence: Confidence


@dataclass(frozen=True)
class GenerateResult:
    """Backend response normalized to a common shape."""

    response: str
    duration_ms: int
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0


@dataclass
class RouteResult:
    """Outcome of a two-tier route call."""

    decision: RoutingDecision
    response: str | None = None
    duration_ms: int | None = None

    @property
    def handled(self) -> bool:
        return self.decision.destination is Destination.LOCAL and self.response is not None


@dataclass
class ThreeTierRouteResult:
    """Outcome of a three-tier route call.

    ``actual_tier`` differs from ``decision.tier`` exactly when a fallback
    happened, and is ``None`` when the decision went straight to quality.
    """

    decision: Decision
    response: str | None = None
    duration_ms: int | None = None
    actual_tier: Tier | None = None
    model: str | None = None
    failures: list[tuple[Tier, str]] = field(default_factory=list)

    @property
    def handled(self) -> bool:
        return self.response is not None

    @property
    def resolved_tier(self) -> Tier:
        return self.actual_tier or self.decision.tier


class GenerationError(RuntimeError):
    """A backend failed to produce a response."""

    def __init__(self, message: str, provider: str = "", status: int | None = None, body: str = ""):
        super().__init__(message)
        self.provider = provider
        self.status = status
        self.body = body


class GenerationTimeoutError(GenerationError):
    """The request deadline elapsed and the in-flight call was cancelled."""

    def __init__(self, provider: str, timeout_s: float):
        super().__init__(
            f"{provider} generation timed out after {int(timeout_s * 1000)}ms",
            provider=provider,
        )
        self.timeout_s = timeout_s


class BackendProvider(ABC):
    """Abstract base class for the local and cheap backends."""

    tier: Tier

    def __init__(self, api_base: str, model: str, timeout_s: float, probe_timeout_s: float = 5.0):
        self.api_base = api_base.rstrip("/")
        self.model = model
        self.timeout_s = timeout_s
        self.probe_timeout_s = probe_timeout_s

    @abstractmethod
    async def is_available(self) -> bool:
        """Lightweight health check. Never raises."""
        ...

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerateResult:
        """Send a single generation request."""
        ...

    @property
    def name(self) -> str:
        return self.__class__.__name__

"""Router configuration.

``RouterConfig`` is the immutable value the router reads. ``RouterSettings``
is the environment layer that ``RouterConfig.from_env`` builds it from.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tier_router.minimax import DEFAULT_MINIMAX_MODEL, DEFAULT_MINIMAX_URL
from tier_router.ollama import DEFAULT_OLLAMA_MODEL, DEFAULT_OLLAMA_URL


class RouterSettings(BaseSettings):
    """Settings read from ``TIER_ROUTER_*`` variables.

    Backend locations and the API key use the backends' own variable names
    (``OLLAMA_URL``, ``MINIMAX_API_KEY``, ...). Empty variables count as unset.
    """

    model_config = SettingsConfigDict(
        env_prefix="TIER_ROUTER_",
        env_ignore_empty=True,
        extra="ignore",
    )

    enabled: bool = True
    debug: bool = False
    system_prompt: str | None = None
    max_local_prompt_length: int | None = Field(default=None, gt=0)

    ollama_url: str = Field(default=DEFAULT_OLLAMA_URL, validation_alias="OLLAMA_URL")
    ollama_model: str = Field(default=DEFAULT_OLLAMA_MODEL, validation_alias="OLLAMA_MODEL")
    minimax_url: str = Field(default=DEFAULT_MINIMAX_URL, validation_alias="MINIMAX_BASE_URL")
    minimax_model: str = Field(default=DEFAULT_MINIMAX_MODEL, validation_alias="MINIMAX_MODEL")
    minimax_api_key: str | None = Field(default=None, validation_alias="MINIMAX_API_KEY")

    local_timeout_s: float = Field(default=30.0, gt=0)
    cheap_timeout_s: float = Field(default=60.0, gt=0)
    probe_timeout_s: float = Field(default=5.0, gt=0)


@dataclass(frozen=True)
class RouterConfig:
    """Immutable settings injected into ``TaskRouter``.

    ``max_local_prompt_length`` of None means the classifier default
    (500 for two-tier routing, 2000 for three-tier routing).
    """

    enabled: bool = True
    debug: bool = False
    system_prompt: str | None = None
    max_local_prompt_length: int | None = None

    ollama_url: str = DEFAULT_OLLAMA_URL
    ollama_model: str = DEFAULT_OLLAMA_MODEL
    minimax_url: str = DEFAULT_MINIMAX_URL
    minimax_model: str = DEFAULT_MINIMAX_MODEL
    minimax_api_key: str | None = None

    local_timeout_s: float = 30.0
    cheap_timeout_s: float = 60.0
    probe_timeout_s: float = 5.0

    def with_overrides(self, **changes: Any) -> "RouterConfig":
        return replace(self, **changes)

    @classmethod
    def from_env(cls, **overrides: Any) -> "RouterConfig":
        """Build a config from environment variables, then apply overrides.

        Raises ``pydantic.ValidationError`` naming the offending variable
        when a value cannot be parsed.
        """
        values = RouterSettings().model_dump()
        values.update(overrides)
        return cls(**values)

"""Configuration models for the quote selector."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .options import OptionSet
from .random_source import make_random_source
from .types import RandomSource


class TelemetryConfig(BaseModel):
    """Controls publication of selection events."""

    enabled: bool = False
    sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Fraction of events forwarded to sinks.",
    )


class RouterConfig(BaseModel):
    """Which backend sources exist and how often each one is queried."""

    sources: list[str] = Field(
        default_factory=list,
        description="Registered source names; split uniformly when no weights are given.",
    )
    weights: dict[str, float] = Field(
        default_factory=dict,
        description="Probability of querying each source per request.",
    )
    fallback: Optional[str] = Field(
        default=None,
        description="Source used when the draw lands in the unassigned remainder.",
    )

    @field_validator("sources")
    @classmethod
    def _validate_sources(cls, value: list[str]) -> list[str]:
        cleaned = [name.strip() for name in value]
        if any(not name for name in cleaned):
            raise ValueError("source names must be non-empty")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("source names must be unique")
        return cleaned

    @field_validator("weights")
    @classmethod
    def _validate_weights(cls, value: dict[str, float]) -> dict[str, float]:
        for name, weight in value.items():
            if not name.strip():
                raise ValueError("weighted source names must be non-empty")
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"weight of '{name}' must be within [0, 1]")
        return value

    @model_validator(mode="after")
    def _validate_references(self) -> "RouterConfig":
        known = set(self.sources)
        if known:
            unknown = sorted(name for name in self.weights if name not in known)
            if unknown:
                raise ValueError(f"weights reference unknown sources: {', '.join(unknown)}")
            if self.fallback is not None and self.fallback not in known:
                raise ValueError(f"fallback '{self.fallback}' is not a registered source")
        return self

    def option_set(self, random_source: Optional[RandomSource] = None) -> OptionSet:
        """Build the option set described by this configuration."""

        if self.weights:
            return OptionSet(self.weights, random_source=random_source)
        return OptionSet.uniform(self.sources, random_source=random_source)


class CacheConfig(BaseModel):
    """Cache-versus-live retrieval behavior."""

    live_probability: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Chance that a request skips a non-empty cache and goes live.",
    )
    clear_on_block: bool = Field(
        default=True,
        description="Drop cached items when the cache gets blocked.",
    )
    raise_if_blocked: bool = Field(
        default=False,
        description="Raise instead of ignoring modifications to a blocked cache.",
    )


class SelectorConfig(BaseModel):
    """Top-level configuration object for the package."""

    seed: Optional[int] = Field(
        default=None,
        ge=0,
        description="Seed for reproducible selection; None uses per-thread entropy.",
    )
    router: RouterConfig = Field(default_factory=RouterConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    def random_source(self) -> RandomSource:
        """Return a seeded source when ``seed`` is set, else the thread-local one."""

        return make_random_source(self.seed)


__all__ = [
    "CacheConfig",
    "RouterConfig",
    "SelectorConfig",
    "TelemetryConfig",
]

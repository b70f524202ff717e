"""Common data types used across the quote selector package."""

from __future__ import annotations

import time
from enum import Enum
from typing import Iterable, Optional, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

OptionName = str
OptionWeight = float
OptionPairs = Iterable[tuple[OptionName, OptionWeight]]


class QuoteInclude(str, Enum):
    """Where a cached quote source may take its result from."""

    ALL = "all"
    CACHED = "cached"
    LIVE = "live"


class NamedOption(BaseModel):
    """A single weighted outcome owned by an option set."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(
        default=None,
        description="Identifier of the outcome; None only for the leftover option.",
    )
    weight: float = Field(..., ge=0.0, le=1.0)
    is_default: bool = Field(
        default=False,
        description="True for the synthetic option absorbing unassigned probability.",
    )

    @model_validator(mode="after")
    def _check_name(self) -> "NamedOption":
        if self.is_default:
            if self.name is not None:
                raise ValueError("the default option cannot be named")
            return self
        if self.name is None or not self.name.strip():
            raise ValueError("name must be non-empty")
        return self

    @property
    def sort_key(self) -> tuple[float, str]:
        """Key used to order explicit options: weight first, then name."""

        return (self.weight, self.name or "")

    def __str__(self) -> str:
        label = "<default>" if self.is_default else self.name
        return f"{label}({self.weight:g})"


class TelemetryEvent(BaseModel):
    """Structured event describing a selection decision."""

    event: str
    option: Optional[str] = None
    is_default: bool = False
    payload: dict[str, object] = Field(default_factory=dict)
    timestamp: float = Field(default_factory=time.time)


class RandomSource(Protocol):
    """Anything producing uniform floats in [0, 1), e.g. ``random.Random``."""

    def random(self) -> float:  # pragma: no cover - protocol definition
        ...


class QuoteFetcher(Protocol[T_co]):
    """Callable retrieving one quote from a live backend, optionally by tag."""

    def __call__(self, tag: Optional[str] = None) -> Optional[T_co]:  # pragma: no cover - protocol definition
        ...


__all__ = [
    "NamedOption",
    "OptionName",
    "OptionPairs",
    "OptionWeight",
    "QuoteFetcher",
    "QuoteInclude",
    "RandomSource",
    "TelemetryEvent",
]

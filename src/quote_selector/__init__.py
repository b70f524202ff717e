"""Public package interface for quote_selector."""

from .cache import CachedQuoteSource, QuoteCache
from .config import CacheConfig, RouterConfig, SelectorConfig, TelemetryConfig
from .config_loader import load_config
from .exceptions import (
    CacheBlockedError,
    InvalidArgumentError,
    OptionNotFoundError,
    SelectorError,
    SourceUnavailableError,
)
from .options import DEFAULT_INDEX, WEIGHT_TOLERANCE, OptionSet
from .possibility import ConditionalPossibility, Possibility
from .random_source import SeededRandom, ThreadRandom
from .router import WeightedRouter
from .telemetry import InMemoryTelemetrySink, LoggingTelemetrySink, TelemetryPublisher
from .types import NamedOption, QuoteInclude, TelemetryEvent

__all__ = [
    "CacheBlockedError",
    "CacheConfig",
    "CachedQuoteSource",
    "ConditionalPossibility",
    "DEFAULT_INDEX",
    "InMemoryTelemetrySink",
    "InvalidArgumentError",
    "LoggingTelemetrySink",
    "NamedOption",
    "OptionNotFoundError",
    "OptionSet",
    "Possibility",
    "QuoteCache",
    "QuoteInclude",
    "RouterConfig",
    "SeededRandom",
    "SelectorConfig",
    "SelectorError",
    "SourceUnavailableError",
    "TelemetryConfig",
    "TelemetryEvent",
    "TelemetryPublisher",
    "ThreadRandom",
    "WEIGHT_TOLERANCE",
    "WeightedRouter",
    "load_config",
]

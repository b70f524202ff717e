"""Weighted routing of requests across named backend quote sources."""

from __future__ import annotations

import logging
from typing import Dict, Generic, Mapping, Optional, Union

from .config import RouterConfig
from .exceptions import InvalidArgumentError, OptionNotFoundError, SourceUnavailableError
from .options import OptionSet
from .telemetry import TelemetryPublisher
from .types import NamedOption, RandomSource, T
from .utils import validate_name

LOGGER = logging.getLogger(__name__)

WeightsInput = Union[OptionSet, Mapping[str, float], None]


class WeightedRouter(Generic[T]):
    """Pick one registered target per request according to an :class:`OptionSet`.

    Targets are arbitrary caller objects (quote generators, clients, callables)
    keyed by the option names. A draw that lands on the leftover bucket resolves
    to ``fallback``. A prebuilt :class:`OptionSet` keeps drawing from its own
    random source.
    """

    def __init__(
        self,
        targets: Mapping[str, T],
        weights: WeightsInput = None,
        *,
        fallback: Optional[T] = None,
        random_source: Optional[RandomSource] = None,
        telemetry: Optional[TelemetryPublisher] = None,
    ) -> None:
        self._targets: Dict[str, T] = {}
        for name, target in targets.items():
            self._targets[validate_name(name, "target name")] = target
        self._enabled: Dict[str, bool] = {name: True for name in self._targets}

        if isinstance(weights, OptionSet):
            if random_source is not None:
                raise InvalidArgumentError(
                    "random_source cannot be combined with a prebuilt OptionSet; the set draws from its own source"
                )
            self.options = weights
        elif weights is None:
            self.options = OptionSet.uniform(self._targets, random_source=random_source)
        else:
            self.options = OptionSet(weights, random_source=random_source)

        unknown = sorted(name for name in self.options.names() if name not in self._targets)
        if unknown:
            raise InvalidArgumentError(f"weights reference unknown targets: {', '.join(unknown)}")
        if self.options.has_default and fallback is None:
            raise InvalidArgumentError(
                f"weights leave {self.options.remainder:g} unassigned but no fallback target was given"
            )
        self.fallback = fallback
        self._telemetry = telemetry

    @classmethod
    def from_config(
        cls,
        targets: Mapping[str, T],
        config: RouterConfig,
        *,
        random_source: Optional[RandomSource] = None,
        telemetry: Optional[TelemetryPublisher] = None,
    ) -> "WeightedRouter[T]":
        """Build a router whose weights and fallback come from ``config``."""

        missing = sorted(name for name in config.sources if name not in targets)
        if missing:
            raise InvalidArgumentError(f"no targets supplied for sources: {', '.join(missing)}")
        registered = {name: targets[name] for name in config.sources} if config.sources else dict(targets)
        fallback = None
        if config.fallback is not None:
            if config.fallback not in targets:
                raise OptionNotFoundError(config.fallback, "target")
            fallback = targets[config.fallback]
        if config.weights or config.sources:
            weights: WeightsInput = config.option_set(random_source)
            random_source = None
        else:
            weights = None
        return cls(
            registered,
            weights,
            fallback=fallback,
            random_source=random_source,
            telemetry=telemetry,
        )

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def choose(self) -> NamedOption:
        """Draw the next option without resolving it to a target."""

        option = self.options.determine()
        LOGGER.debug("Selected option %s", option)
        if self._telemetry is not None:
            self._telemetry.emit_selection("option.selected", option)
        return option

    def select(self) -> T:
        """Return the target for the next weighted draw."""

        option = self.choose()
        if option.is_default:
            return self.fallback  # type: ignore[return-value]
        if not self._enabled[option.name]:
            LOGGER.warning("Option %s selected but its target is disabled", option.name)
            raise SourceUnavailableError(option.name)
        return self._targets[option.name]

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    def get(self, name: str) -> T:
        return self._targets[self._require(name)]

    def names(self) -> list[str]:
        return list(self._targets)

    def is_registered(self, name: str) -> bool:
        validate_name(name)
        return name in self._targets

    def is_enabled(self, name: str) -> bool:
        return self._enabled[self._require(name)]

    def enable(self, name: str) -> None:
        self._enabled[self._require(name)] = True

    def disable(self, name: str) -> None:
        self._enabled[self._require(name)] = False

    def enable_all(self) -> None:
        for name in self._enabled:
            self._enabled[name] = True

    def disable_all(self) -> None:
        for name in self._enabled:
            self._enabled[name] = False

    def switch_to(self, name: str) -> None:
        """Disable every target except ``name``."""

        self._require(name)
        self.disable_all()
        self._enabled[name] = True

    def enabled(self) -> list[str]:
        return [name for name, state in self._enabled.items() if state]

    def disabled(self) -> list[str]:
        return [name for name, state in self._enabled.items() if not state]

    def _require(self, name: str) -> str:
        validate_name(name)
        if name not in self._targets:
            raise OptionNotFoundError(name, "target")
        return name

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, name: object) -> bool:
        return name in self._targets


__all__ = ["WeightedRouter"]

"""Telemetry publishing utilities."""

from __future__ import annotations

import logging
from collections import Counter
from contextlib import contextmanager
from typing import Iterable, List, Optional, Protocol

from .config import TelemetryConfig
from .possibility import Possibility
from .types import NamedOption, RandomSource, TelemetryEvent

LOGGER = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    """Sink that handles telemetry events."""

    def handle(self, event: TelemetryEvent) -> None:  # pragma: no cover - protocol
        ...


class TelemetryPublisher:
    """Publish telemetry events to registered sinks respecting config sample rate."""

    def __init__(
        self,
        config: TelemetryConfig,
        *,
        random_source: Optional[RandomSource] = None,
    ) -> None:
        self.config = config
        self._sampler = Possibility(config.sample_rate, random_source=random_source)
        self._sinks: List[TelemetrySink] = []

    def subscribe(self, sink: TelemetrySink) -> None:
        if sink in self._sinks:
            LOGGER.debug("Telemetry sink %s already subscribed", sink)
            return
        self._sinks.append(sink)

    def unsubscribe(self, sink: TelemetrySink) -> None:
        try:
            self._sinks.remove(sink)
        except ValueError:
            LOGGER.debug("Telemetry sink %s was not subscribed", sink)

    @contextmanager
    def subscribed(self, sink: TelemetrySink):
        self.subscribe(sink)
        try:
            yield sink
        finally:
            self.unsubscribe(sink)

    def emit(self, event: TelemetryEvent) -> None:
        if not self.config.enabled:
            return
        if not self._sampler.determine():
            return
        for sink in list(self._sinks):
            try:
                sink.handle(event)
            except Exception:  # pragma: no cover - sink failures are only logged
                LOGGER.exception("Telemetry sink %s failed", sink)

    def emit_selection(
        self,
        event: str,
        option: Optional[NamedOption] = None,
        **payload: object,
    ) -> None:
        """Convenience wrapper building a :class:`TelemetryEvent` for ``option``."""

        self.emit(
            TelemetryEvent(
                event=event,
                option=option.name if option is not None else None,
                is_default=option.is_default if option is not None else False,
                payload=dict(payload),
            )
        )


def _matches(event: str, patterns: Optional[Iterable[str]]) -> bool:
    """``patterns`` entries match exactly, or by prefix when they end with a dot."""

    if patterns is None:
        return True
    return any(event == pattern or (pattern.endswith(".") and event.startswith(pattern)) for pattern in patterns)


class LoggingTelemetrySink:
    """Log selection events, optionally only those named in ``events``.

    Default-bucket selections are logged one level higher than ``level`` so that
    leftover-mass draws stand out in the log.
    """

    def __init__(self, level: int = logging.INFO, *, events: Optional[Iterable[str]] = None) -> None:
        self.level = level
        self.events = tuple(events) if events is not None else None

    def handle(self, event: TelemetryEvent) -> None:
        if not _matches(event.event, self.events):
            return
        level = self.level + 10 if event.is_default else self.level
        label = "<default>" if event.is_default else event.option
        LOGGER.log(level, "%s option=%s payload=%s", event.event, label, event.payload)


class InMemoryTelemetrySink:
    """Keep events in memory and count selections per option name."""

    def __init__(self, *, events: Optional[Iterable[str]] = None) -> None:
        self.events: list[TelemetryEvent] = []
        self.filter = tuple(events) if events is not None else None
        self.counts: Counter = Counter()

    def handle(self, event: TelemetryEvent) -> None:
        if not _matches(event.event, self.filter):
            return
        self.events.append(event)
        self.counts[event.option] += 1

    def named(self, event: str) -> list[TelemetryEvent]:
        return [item for item in self.events if item.event == event]


__all__ = [
    "InMemoryTelemetrySink",
    "LoggingTelemetrySink",
    "TelemetryPublisher",
    "TelemetrySink",
]

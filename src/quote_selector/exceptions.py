"""Exception types raised by the quote selector package."""

from __future__ import annotations


class SelectorError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgumentError(SelectorError, ValueError):
    """Malformed construction input or lookup argument."""


class OptionNotFoundError(SelectorError, LookupError):
    """Lookup for a name that was never registered."""

    def __init__(self, name: str, kind: str = "option") -> None:
        super().__init__(f"{kind.capitalize()} with name '{name}' does not exist")
        self.name = name


class SourceUnavailableError(SelectorError, RuntimeError):
    """A weighted draw landed on a target that is currently disabled."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Source '{name}' was selected but is disabled")
        self.name = name


class CacheBlockedError(SelectorError, RuntimeError):
    """Attempt to modify a blocked cache."""


__all__ = [
    "CacheBlockedError",
    "InvalidArgumentError",
    "OptionNotFoundError",
    "SelectorError",
    "SourceUnavailableError",
]

"""Argument validation helpers shared by options, routers and caches."""

from __future__ import annotations

import numbers

from .exceptions import InvalidArgumentError


def validate_name(name: object, argument: str = "name") -> str:
    """Return ``name`` if it is a non-blank string."""

    if not isinstance(name, str) or not name.strip():
        raise InvalidArgumentError(f"{argument} must be a non-empty string")
    return name


def validate_weight(name: str, weight: object) -> float:
    """Return ``weight`` as a float within [0, 1]; rejects bools and NaN."""

    if isinstance(weight, bool) or not isinstance(weight, numbers.Real):
        raise InvalidArgumentError(f"weight of option '{name}' must be a real number")
    value = float(weight)
    if not 0.0 <= value <= 1.0:
        raise InvalidArgumentError(f"weight of option '{name}' must be within [0, 1], got {value!r}")
    return value


def validate_positive_int(value: object, argument: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgumentError(f"{argument} must be a positive integer")
    return value


__all__ = ["validate_name", "validate_positive_int", "validate_weight"]

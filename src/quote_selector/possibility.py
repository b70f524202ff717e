"""Boolean weighted coins built on top of :class:`OptionSet`."""

from __future__ import annotations

from typing import Callable, Optional

from .exceptions import InvalidArgumentError
from .options import OptionSet
from .types import RandomSource
from .utils import validate_positive_int

POSITIVE_OUTCOME = "true"
DEFAULT_WEIGHT = 0.5


class Possibility:
    """Yields ``True`` with a fixed probability on every :meth:`determine` call."""

    def __init__(
        self,
        weight: float = DEFAULT_WEIGHT,
        *,
        random_source: Optional[RandomSource] = None,
    ) -> None:
        self._options = OptionSet({POSITIVE_OUTCOME: weight}, random_source=random_source)
        self._weight = self._options.get_option(POSITIVE_OUTCOME).weight

    @classmethod
    def from_ratio(
        cls,
        numerator: int,
        denominator: int,
        *,
        random_source: Optional[RandomSource] = None,
    ) -> "Possibility":
        """Build from integer odds, e.g. ``from_ratio(1, 4)`` for a 25% chance."""

        validate_positive_int(denominator, "denominator")
        if isinstance(numerator, bool) or not isinstance(numerator, int) or not 0 <= numerator <= denominator:
            raise InvalidArgumentError("numerator must be an integer within [0, denominator]")
        return cls(numerator / denominator, random_source=random_source)

    def weight(self) -> float:
        return self._weight

    def determine(self) -> bool:
        return not self._options.determine().is_default

    @property
    def random_source(self) -> RandomSource:
        return self._options.random_source

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._weight:g})"


class ConditionalPossibility(Possibility):
    """Returns ``outcome`` outright while ``predicate`` holds, else draws."""

    def __init__(
        self,
        predicate: Callable[[], bool],
        weight: float = DEFAULT_WEIGHT,
        *,
        outcome: bool = True,
        random_source: Optional[RandomSource] = None,
    ) -> None:
        if not callable(predicate):
            raise InvalidArgumentError("predicate must be callable")
        super().__init__(weight, random_source=random_source)
        self.predicate = predicate
        self.outcome = outcome

    def determine(self) -> bool:
        if self.predicate():
            return self.outcome
        return super().determine()


__all__ = ["ConditionalPossibility", "Possibility"]

"""Weighted option sets with a synthetic leftover outcome."""

from __future__ import annotations

import bisect
import itertools
import logging
import math
import numbers
from typing import Iterable, Iterator, Mapping, Optional, Sequence, Union

from .exceptions import InvalidArgumentError, OptionNotFoundError
from .random_source import default_random_source
from .types import NamedOption, OptionPairs, RandomSource
from .utils import validate_name, validate_positive_int, validate_weight

LOGGER = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 1e-9

OptionInput = Union[Mapping[str, float], OptionPairs, None]

DEFAULT_INDEX = -1


def _fill_mass(pairs: list[tuple[str, float]]) -> list[tuple[str, float]]:
    """Nudge the last-sorting weight up until ``pairs`` cover the whole mass.

    Used by factories whose weights are meant to sum to exactly one, so that
    float rounding in ``1 / n`` or ``count / total`` does not leave a sliver of
    default mass behind.
    """

    if not pairs:
        return pairs
    last = max(range(len(pairs)), key=lambda i: (pairs[i][1], pairs[i][0]))
    name, weight = pairs[last]
    while math.fsum(value for _, value in pairs) < 1.0:
        weight = math.nextafter(weight, 2.0)
        pairs[last] = (name, weight)
    return pairs


class OptionSet:
    """Immutable set of mutually exclusive weighted outcomes.

    Explicit options are kept sorted ascending by ``(weight, name)``. When their
    weights sum to less than one, a default option holding the remainder is
    appended as the last bucket of the partition used by :meth:`determine`.
    """

    def __init__(
        self,
        options: OptionInput = None,
        *,
        random_source: Optional[RandomSource] = None,
    ) -> None:
        explicit = self._build_options(options)
        explicit.sort(key=lambda option: option.sort_key)

        self._options: tuple[NamedOption, ...] = tuple(explicit)
        self._index = {option.name: option for option in explicit}
        self._edges = tuple(itertools.accumulate(option.weight for option in explicit))
        self._total = math.fsum(option.weight for option in explicit)
        remainder = 1.0 - self._total
        self._default: Optional[NamedOption] = None
        if remainder > 0.0:
            self._default = NamedOption(weight=remainder, is_default=True)
        self._random = random_source or default_random_source()
        LOGGER.debug("Built option set %r (default=%s)", self, self._default)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def uniform(
        cls,
        names: Iterable[str],
        *,
        random_source: Optional[RandomSource] = None,
    ) -> "OptionSet":
        """Split the whole probability mass equally across ``names``."""

        names = list(names)
        if not names:
            return cls(random_source=random_source)
        weight = 1.0 / len(names)
        pairs = _fill_mass([(name, weight) for name in names])
        return cls(pairs, random_source=random_source)

    @classmethod
    def from_counts(
        cls,
        counts: Mapping[str, int],
        total: int = 100,
        *,
        random_source: Optional[RandomSource] = None,
    ) -> "OptionSet":
        """Build from integer odds out of ``total``, e.g. ``{"a": 30}`` of 100."""

        validate_positive_int(total, "total")
        for name, count in counts.items():
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise InvalidArgumentError(f"count of option '{name}' must be a non-negative integer")
        assigned = sum(counts.values())
        if assigned > total:
            raise InvalidArgumentError(f"counts sum to more than {total}")
        pairs = [(name, count / total) for name, count in counts.items()]
        if assigned == total:
            pairs = _fill_mass(pairs)
        return cls(pairs, random_source=random_source)

    def with_option(self, name: str, weight: float) -> "OptionSet":
        """Return a new set containing the current options plus ``name``."""

        pairs = [(option.name, option.weight) for option in self._options]
        pairs.append((name, weight))
        return OptionSet(pairs, random_source=self._random)

    def without_option(self, name: str) -> "OptionSet":
        """Return a new set with ``name`` removed; its mass joins the default."""

        removed = self.get_option(name)
        pairs = [(option.name, option.weight) for option in self._options if option is not removed]
        return OptionSet(pairs, random_source=self._random)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def total(self) -> float:
        """Sum of explicit weights."""

        return self._total

    @property
    def remainder(self) -> float:
        """Mass held by the default option, 0.0 when there is none."""

        return self._default.weight if self._default is not None else 0.0

    @property
    def default_option(self) -> Optional[NamedOption]:
        return self._default

    @property
    def has_default(self) -> bool:
        return self._default is not None

    @property
    def random_source(self) -> RandomSource:
        return self._random

    def get_options(self) -> list[NamedOption]:
        """Explicit options ascending by weight, ties broken by name."""

        return list(self._options)

    def get_option(self, name: str) -> NamedOption:
        validate_name(name)
        try:
            return self._index[name]
        except KeyError:
            raise OptionNotFoundError(name) from None

    def option_at(self, index: int) -> NamedOption:
        """Positional lookup in :meth:`get_options` order; ``-1`` is the default."""

        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidArgumentError(f"index must be an integer, got {index!r}")
        if index == DEFAULT_INDEX:
            if self._default is None:
                raise OptionNotFoundError("<default>")
            return self._default
        if not 0 <= index < len(self._options):
            raise OptionNotFoundError(str(index), "index")
        return self._options[index]

    def names(self) -> list[str]:
        return [option.name for option in self._options]

    def iterate(self) -> Iterator[NamedOption]:
        """Lazily yield explicit options in :meth:`get_options` order."""

        for option in self._options:
            yield option

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------
    def determine(self) -> NamedOption:
        """Draw one outcome according to the configured weights."""

        return self._locate(self._random.random())

    def determine_index(self) -> int:
        """Draw like :meth:`determine` but return the bucket position.

        The value addresses :meth:`option_at`; ``-1`` means the default option.
        """

        position = self._position(self._random.random())
        return DEFAULT_INDEX if position == len(self._options) else position

    def resolve(self, draw: float) -> NamedOption:
        """Return the option whose bucket contains ``draw`` in ``[0, 1)``."""

        if isinstance(draw, bool) or not isinstance(draw, numbers.Real) or not 0.0 <= draw < 1.0:
            raise InvalidArgumentError(f"draw must be within [0, 1), got {draw!r}")
        return self._locate(float(draw))

    def _position(self, draw: float) -> int:
        position = bisect.bisect_right(self._edges, draw)
        if position < len(self._options) or self._default is not None:
            return position
        # no default: float residue past the last edge belongs to the last option
        return len(self._options) - 1

    def _locate(self, draw: float) -> NamedOption:
        position = self._position(draw)
        if position < len(self._options):
            return self._options[position]
        return self._default

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[NamedOption]:
        return self.iterate()

    def __len__(self) -> int:
        return len(self._options)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __getitem__(self, name: str) -> NamedOption:
        return self.get_option(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OptionSet):
            return NotImplemented
        return self._options == other._options

    def __hash__(self) -> int:
        return hash(self._options)

    def __repr__(self) -> str:
        body = ", ".join(f"{option.name!r}: {option.weight:g}" for option in self._options)
        return f"OptionSet({{{body}}})"

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _build_options(options: OptionInput) -> list[NamedOption]:
        if options is None:
            return []
        pairs: Sequence[tuple[object, object]]
        if isinstance(options, Mapping):
            pairs = list(options.items())
        else:
            pairs = list(options)

        seen: set[str] = set()
        result: list[NamedOption] = []
        for pair in pairs:
            try:
                name, weight = pair
            except (TypeError, ValueError):
                raise InvalidArgumentError(f"expected a (name, weight) pair, got {pair!r}") from None
            name = validate_name(name)
            if name in seen:
                raise InvalidArgumentError(f"Option with name '{name}' already exists")
            seen.add(name)
            result.append(NamedOption(name=name, weight=validate_weight(name, weight)))

        total = math.fsum(option.weight for option in result)
        if total > 1.0 + WEIGHT_TOLERANCE:
            raise InvalidArgumentError(f"option weights sum to {total!r}, which exceeds 1")
        return result


__all__ = ["DEFAULT_INDEX", "OptionSet", "WEIGHT_TOLERANCE"]

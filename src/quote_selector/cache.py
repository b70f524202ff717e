"""In-memory quote cache and the cache-versus-live retrieval policy."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Generic, Iterable, List, Optional

from .config import CacheConfig
from .exceptions import CacheBlockedError, InvalidArgumentError
from .possibility import Possibility
from .random_source import default_random_source
from .telemetry import TelemetryPublisher
from .types import QuoteFetcher, QuoteInclude, RandomSource, T

LOGGER = logging.getLogger(__name__)


def _item_tags(item: object) -> tuple[str, ...]:
    tags = getattr(item, "tags", None) or ()
    if isinstance(tags, str):
        return (tags,)
    return tuple(tags)


def _validate_tag(tag: Optional[str]) -> Optional[str]:
    if tag is not None and (not isinstance(tag, str) or not tag.strip()):
        raise InvalidArgumentError("tag must be a non-empty string")
    return tag


class QuoteCache(Generic[T]):
    """Tag-indexed cache that can be blocked against modification.

    Items are indexed under the tags passed to :meth:`add`, or under the item's
    own ``tags`` attribute when none are passed.
    """

    def __init__(
        self,
        *,
        clear_on_block: bool = True,
        raise_if_blocked: bool = False,
        random_source: Optional[RandomSource] = None,
    ) -> None:
        self.clear_on_block = clear_on_block
        self.raise_if_blocked = raise_if_blocked
        self._random = random_source or default_random_source()
        self._items: List[T] = []
        self._tags: Dict[str, List[T]] = {}
        self._blocked = False
        self._lock = threading.RLock()

    @classmethod
    def from_config(
        cls,
        config: CacheConfig,
        *,
        random_source: Optional[RandomSource] = None,
    ) -> "QuoteCache[T]":
        return cls(
            clear_on_block=config.clear_on_block,
            raise_if_blocked=config.raise_if_blocked,
            random_source=random_source,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def is_blocked(self) -> bool:
        return self._blocked

    @property
    def is_empty(self) -> bool:
        return not self._items

    def block(self) -> None:
        """Reject further modifications; drops contents when ``clear_on_block``."""

        with self._lock:
            self._blocked = True
            if self.clear_on_block:
                self.force_clear()

    def unblock(self) -> None:
        with self._lock:
            self._blocked = False

    # ------------------------------------------------------------------
    # Modification
    # ------------------------------------------------------------------
    def add(self, item: T, tags: Optional[Iterable[str]] = None) -> bool:
        """Cache ``item``. Returns False when it was already cached or the cache is blocked."""

        item_tags = tuple(tags) if tags is not None else _item_tags(item)
        with self._lock:
            if not self._can_modify() or item in self._items:
                return False
            self._items.append(item)
            for tag in item_tags:
                bucket = self._tags.setdefault(tag, [])
                if item not in bucket:
                    bucket.append(item)
        return True

    def remove(self, item: T) -> bool:
        with self._lock:
            if not self._can_modify() or item not in self._items:
                return False
            self._items.remove(item)
            for tag in list(self._tags):
                bucket = self._tags[tag]
                if item in bucket:
                    bucket.remove(item)
                if not bucket:
                    del self._tags[tag]
        return True

    def remove_tag(self, tag: str) -> bool:
        """Drop every item cached under ``tag``."""

        _validate_tag(tag)
        with self._lock:
            if not self._can_modify():
                return False
            bucket = self._tags.pop(tag, None)
            if not bucket:
                return False
            for item in bucket:
                if item in self._items:
                    self._items.remove(item)
                for other in self._tags.values():
                    if item in other:
                        other.remove(item)
            self._tags = {name: items for name, items in self._tags.items() if items}
        return True

    def clear(self) -> None:
        with self._lock:
            if self._can_modify():
                self.force_clear()

    def force_clear(self) -> None:
        """Clear contents regardless of the blocked state."""

        with self._lock:
            self._items.clear()
            self._tags.clear()

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------
    def items(self, tag: Optional[str] = None) -> list[T]:
        _validate_tag(tag)
        with self._lock:
            if tag is None:
                return list(self._items)
            return list(self._tags.get(tag, ()))

    def random(self, tag: Optional[str] = None) -> Optional[T]:
        """Return a uniformly chosen cached item, or None when nothing matches."""

        candidates = self.items(tag)
        if not candidates:
            return None
        index = min(int(self._random.random() * len(candidates)), len(candidates) - 1)
        return candidates[index]

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self):
        return iter(self.items())

    def _can_modify(self) -> bool:
        if not self._blocked:
            return True
        if self.raise_if_blocked:
            raise CacheBlockedError("Blocked cache cannot be modified")
        return False


class CachedQuoteSource(Generic[T]):
    """Serve quotes either from a live fetcher or from a local cache.

    With :attr:`QuoteInclude.ALL` the request goes live when the cache is empty
    or when ``possibility`` comes up true; otherwise a cached quote is returned,
    going live after all if nothing cached matches the tag.
    """

    def __init__(
        self,
        fetch: QuoteFetcher[T],
        *,
        cache: Optional[QuoteCache[T]] = None,
        possibility: Optional[Possibility] = None,
        telemetry: Optional[TelemetryPublisher] = None,
    ) -> None:
        if not callable(fetch):
            raise InvalidArgumentError("fetch must be callable")
        self._fetch = fetch
        self.cache: QuoteCache[T] = cache if cache is not None else QuoteCache()
        self.possibility = possibility or Possibility()
        self._telemetry = telemetry

    @classmethod
    def from_config(
        cls,
        fetch: QuoteFetcher[T],
        config: CacheConfig,
        *,
        random_source: Optional[RandomSource] = None,
        telemetry: Optional[TelemetryPublisher] = None,
    ) -> "CachedQuoteSource[T]":
        return cls(
            fetch,
            cache=QuoteCache.from_config(config, random_source=random_source),
            possibility=Possibility(config.live_probability, random_source=random_source),
            telemetry=telemetry,
        )

    def get(self, which: QuoteInclude = QuoteInclude.ALL, tag: Optional[str] = None) -> Optional[T]:
        _validate_tag(tag)
        which = QuoteInclude(which)
        if which is QuoteInclude.CACHED:
            return self._from_cache(tag)
        if which is QuoteInclude.LIVE:
            return self._from_live(tag)

        if self.cache.is_empty or self.possibility.determine():
            return self._from_live(tag)
        quote = self._from_cache(tag)
        if quote is None:
            return self._from_live(tag)
        return quote

    def _from_cache(self, tag: Optional[str]) -> Optional[T]:
        quote = self.cache.random(tag)
        self._emit("cache.hit" if quote is not None else "cache.miss", tag)
        return quote

    def _from_live(self, tag: Optional[str]) -> Optional[T]:
        quote = self._fetch(tag)
        self._emit("source.live", tag)
        if quote is not None and not self.cache.is_blocked:
            tags = _item_tags(quote) or ((tag,) if tag is not None else ())
            self.cache.add(quote, tags)
        return quote

    def _emit(self, event: str, tag: Optional[str]) -> None:
        LOGGER.debug("Quote retrieval %s (tag=%s)", event, tag)
        if self._telemetry is None:
            return
        self._telemetry.emit_selection(event, tag=tag)


__all__ = ["CachedQuoteSource", "QuoteCache"]

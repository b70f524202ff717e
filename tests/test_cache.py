import threading
from dataclasses import dataclass, field

import pytest

from quote_selector.cache import CachedQuoteSource, QuoteCache
from quote_selector.config import CacheConfig, TelemetryConfig
from quote_selector.exceptions import CacheBlockedError, InvalidArgumentError
from quote_selector.possibility import Possibility
from quote_selector.telemetry import InMemoryTelemetrySink, TelemetryPublisher
from quote_selector.types import QuoteInclude


@dataclass(frozen=True)
class Quote:
    value: str
    author: str = "Unknown"
    tags: tuple = field(default_factory=tuple)


class Fetcher:
    def __init__(self, *quotes: Quote) -> None:
        self._quotes = list(quotes)
        self.calls = []

    def __call__(self, tag=None):
        self.calls.append(tag)
        return self._quotes.pop(0) if self._quotes else None


def test_cache_indexes_items_by_tag():
    cache = QuoteCache()
    wisdom = Quote("Know thyself", tags=("wisdom",))
    humor = Quote("I am a genius", tags=("humor", "ego"))

    assert cache.add(wisdom)
    assert cache.add(humor)
    assert not cache.add(wisdom)

    assert len(cache) == 2
    assert cache.items("ego") == [humor]
    assert cache.items("missing") == []
    assert wisdom in cache


def test_cache_random_uses_random_source(scripted):
    first, second, third = Quote("one"), Quote("two"), Quote("three")
    cache = QuoteCache(random_source=scripted(0.0, 0.5, 0.99))
    for quote in (first, second, third):
        cache.add(quote, tags=["all"])

    assert cache.random() is first
    assert cache.random("all") is second
    assert cache.random() is third
    assert QuoteCache().random() is None


def test_remove_and_remove_tag():
    cache = QuoteCache()
    shared = Quote("shared", tags=("a", "b"))
    only_a = Quote("only a", tags=("a",))
    cache.add(shared)
    cache.add(only_a)

    assert cache.remove_tag("a")
    assert cache.is_empty
    assert cache.items("b") == []
    assert not cache.remove_tag("a")

    cache.add(shared)
    assert cache.remove(shared)
    assert not cache.remove(shared)

    with pytest.raises(InvalidArgumentError):
        cache.remove_tag(" ")


def test_block_clears_and_ignores_modifications():
    cache = QuoteCache()
    cache.add(Quote("kept?"))

    cache.block()

    assert cache.is_blocked
    assert cache.is_empty
    assert not cache.add(Quote("ignored"))
    assert cache.is_empty

    cache.unblock()
    assert cache.add(Quote("accepted"))


def test_block_without_clear_keeps_contents():
    cache = QuoteCache(clear_on_block=False)
    quote = Quote("kept")
    cache.add(quote)

    cache.block()
    cache.clear()

    assert cache.items() == [quote]
    cache.force_clear()
    assert cache.is_empty


def test_blocked_cache_can_raise():
    cache = QuoteCache(raise_if_blocked=True)
    cache.block()

    with pytest.raises(CacheBlockedError):
        cache.add(Quote("nope"))


@pytest.mark.parametrize("operation", ["add", "remove", "remove_tag"])
def test_block_racing_a_modification_leaves_cache_cleared(monkeypatch, operation):
    cache = QuoteCache()
    seed = Quote("seed", tags=("news",))
    cache.add(seed)
    check = cache._can_modify
    blocked = threading.Event()
    blockers = []

    def block_mid_modification():
        allowed = check()
        blocker = threading.Thread(target=lambda: (cache.block(), blocked.set()))
        blocker.start()
        blockers.append(blocker)
        # the blocker cannot finish while the cache lock is held
        blocked.wait(timeout=0.2)
        return allowed

    monkeypatch.setattr(cache, "_can_modify", block_mid_modification)
    if operation == "add":
        cache.add(Quote("late", tags=("news",)))
    elif operation == "remove":
        cache.remove(seed)
    else:
        cache.remove_tag("news")
    for blocker in blockers:
        blocker.join()

    assert cache.is_blocked
    assert cache.is_empty
    assert cache.items("news") == []


def test_unblock_reenables_modification():
    cache = QuoteCache()
    cache.block()
    cache.unblock()

    assert cache.add(Quote("again"))
    assert len(cache) == 1


def test_cache_from_config():
    cache = QuoteCache.from_config(CacheConfig(clear_on_block=False, raise_if_blocked=True))

    assert not cache.clear_on_block
    assert cache.raise_if_blocked


def test_empty_cache_always_goes_live():
    fetcher = Fetcher(Quote("fresh", tags=("news",)))
    source = CachedQuoteSource(fetcher, possibility=Possibility(0.0))

    quote = source.get()

    assert quote.value == "fresh"
    assert fetcher.calls == [None]
    assert source.cache.items("news") == [quote]


def test_possibility_decides_between_cache_and_live(scripted):
    cached = Quote("cached")
    live = Quote("live")
    fetcher = Fetcher(live)
    cache = QuoteCache(random_source=scripted(0.0))
    cache.add(cached)
    source = CachedQuoteSource(
        fetcher,
        cache=cache,
        possibility=Possibility(0.5, random_source=scripted(0.9, 0.1)),
    )

    assert source.get() is cached
    assert source.get() is live
    assert fetcher.calls == [None]
    assert live in cache


def test_tag_missing_from_cache_goes_live_and_caches_under_tag():
    cache = QuoteCache()
    cache.add(Quote("other", tags=("misc",)))
    fetcher = Fetcher(Quote("tagged"))
    source = CachedQuoteSource(fetcher, cache=cache, possibility=Possibility(0.0))

    quote = source.get(tag="love")

    assert quote.value == "tagged"
    assert fetcher.calls == ["love"]
    assert cache.items("love") == [quote]


def test_explicit_include_modes():
    cache = QuoteCache()
    fetcher = Fetcher(Quote("live"))
    source = CachedQuoteSource(fetcher, cache=cache, possibility=Possibility(0.0))

    assert source.get(QuoteInclude.CACHED) is None
    live = source.get(QuoteInclude.LIVE)
    assert live.value == "live"
    assert source.get("cached") is live
    assert source.get(QuoteInclude.LIVE) is None


def test_blocked_cache_is_not_filled_by_live_results():
    cache = QuoteCache(raise_if_blocked=True)
    cache.block()
    source = CachedQuoteSource(Fetcher(Quote("live")), cache=cache)

    assert source.get(QuoteInclude.LIVE).value == "live"
    assert cache.is_empty


def test_blank_tag_rejected():
    source = CachedQuoteSource(Fetcher())

    with pytest.raises(InvalidArgumentError):
        source.get(tag="")


def test_cached_source_from_config_and_telemetry():
    telemetry_cfg = TelemetryConfig(enabled=True, sample_rate=1.0)
    publisher = TelemetryPublisher(telemetry_cfg)
    sink = InMemoryTelemetrySink()
    publisher.subscribe(sink)
    source = CachedQuoteSource.from_config(
        Fetcher(Quote("live")),
        CacheConfig(live_probability=0.0),
        telemetry=publisher,
    )

    source.get()
    source.get()

    assert source.possibility.weight() == 0.0
    assert [event.event for event in sink.events] == ["source.live", "cache.hit"]
    assert sink.events[0].payload == {"tag": None}

"""Uniform random sources shared by possibilities and option sets.

``ThreadRandom`` keeps one ``random.Random`` per thread so concurrent callers
never share generator state. Each per-thread generator is seeded from a single
process-wide seed generator, which is the only piece guarded by a lock.

``SeededRandom`` is the reproducible variant: one generator built from a fixed
seed, with draws serialized by a lock so sequences stay stable when several
threads share it.
"""

from __future__ import annotations

import random
import threading
from typing import Optional

_SEED_BITS = 64


class ThreadRandom:
    """Thread-confined uniform random source."""

    _seed_generator = random.Random()
    _seed_lock = threading.Lock()
    _local = threading.local()

    @classmethod
    def generator(cls) -> random.Random:
        """Return the calling thread's generator, creating it on first use."""

        rng: Optional[random.Random] = getattr(cls._local, "rng", None)
        if rng is None:
            with cls._seed_lock:
                seed = cls._seed_generator.getrandbits(_SEED_BITS)
            rng = random.Random(seed)
            cls._local.rng = rng
        return rng

    @classmethod
    def initialize(cls, seed: int) -> None:
        """Reseed the calling thread's generator. Other threads are unaffected."""

        cls._local.rng = random.Random(seed)

    def random(self) -> float:
        return self.generator().random()

    def __repr__(self) -> str:
        return "ThreadRandom()"


class SeededRandom:
    """Deterministic random source shared across threads under a lock."""

    def __init__(self, seed: int) -> None:
        if seed < 0:
            raise ValueError("seed must be >= 0")
        self.seed = seed
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def random(self) -> float:
        with self._lock:
            return self._rng.random()

    def reset(self) -> None:
        """Restart the sequence from the original seed."""

        with self._lock:
            self._rng.seed(self.seed)

    def __repr__(self) -> str:
        return f"SeededRandom(seed={self.seed})"


_DEFAULT_SOURCE = ThreadRandom()


def default_random_source() -> ThreadRandom:
    """Return the process-wide thread-confined source."""

    return _DEFAULT_SOURCE


def make_random_source(seed: Optional[int] = None):
    """Build a seeded source when ``seed`` is given, else the shared default."""

    if seed is None:
        return default_random_source()
    return SeededRandom(int(seed))


__all__ = ["SeededRandom", "ThreadRandom", "default_random_source", "make_random_source"]

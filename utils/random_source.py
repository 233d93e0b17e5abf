"""
Injectable random source for the bot processors.

Processors never call the ``random`` module directly; they draw from a
``RandomSource`` so tests can script every draw.
"""

import random
from typing import Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Source of uniform draws used for skip, rejection and outcome decisions."""

    def random(self) -> float:
        """Return a float uniformly drawn from [0, 1)."""
        ...

    def choice(self, seq: Sequence[T]) -> T:
        """Return one element of a non-empty sequence, uniformly."""
        ...


class SystemRandomSource:
    """RandomSource backed by a private ``random.Random`` instance."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

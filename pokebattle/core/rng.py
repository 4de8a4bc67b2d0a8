"""Injectable random source.

Every dice roll in the simulator (crits, damage variance, accuracy, AI move
choice, speed ties, catch shakes, loot) goes through a ``RandomSource`` so
that a fixed seed replays a battle exactly.
"""

import random
from collections.abc import MutableSequence, Sequence
from typing import TypeVar

T = TypeVar("T")


class RandomSource:
    """Seedable random stream backed by :class:`random.Random`."""

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        """Uniform float in ``[0.0, 1.0)``."""
        return self._random.random()

    def uniform(self, a: float, b: float) -> float:
        return self._random.uniform(a, b)

    def randint(self, a: int, b: int) -> int:
        """Uniform integer in ``[a, b]`` (inclusive)."""
        return self._random.randint(a, b)

    def chance(self, probability: float) -> bool:
        """Bernoulli trial: True with the given probability."""
        return self._random.random() < probability

    def choice(self, seq: Sequence[T]) -> T:
        return self._random.choice(seq)

    def choices(self, population: Sequence[T], weights: Sequence[float]) -> T:
        """Pick one element of ``population`` using relative ``weights``."""
        return self._random.choices(population, weights=weights, k=1)[0]

    def shuffle(self, seq: MutableSequence) -> None:
        self._random.shuffle(seq)

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed!r})"

"""Weighted random selection."""

from __future__ import annotations

from random import Random, SystemRandom
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")


class WeightedSelector:
    """Pick one item with probability proportional to its weight.

    Negative weights count as zero. The random source can be swapped for a
    seeded :class:`random.Random` in tests without changing the selection
    rules.
    """

    def __init__(self, rng: Random | None = None) -> None:
        self._rng = rng or SystemRandom()

    def pick(self, items: Sequence[T], weight_of: Callable[[T], float]) -> T | None:
        if not items:
            return None
        weights = [max(0.0, float(weight_of(item))) for item in items]
        total = sum(weights)
        if total <= 0:
            return None

        threshold = self._rng.random() * total
        cumulative = 0.0
        last_eligible = None
        for item, weight in zip(items, weights):
            if weight <= 0:
                # A zero weight must never win, even when the draw is exactly 0.0.
                continue
            cumulative += weight
            last_eligible = item
            if cumulative >= threshold:
                return item
        # Float accumulation can fall short of the threshold by a rounding error.
        return last_eligible

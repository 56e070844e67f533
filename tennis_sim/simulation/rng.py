"""
RNG wrapper shared by the point simulator and match runner.
Unseeded by default; a seed only makes a single batch repeatable.
"""
from __future__ import annotations

import random


class SeededRNG:
    """Wrapper around random.Random; one instance per batch, never shared across threads."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def seed(self) -> int | None:
        return self._seed

    def random(self) -> float:
        return self._rng.random()

    def coin_flip(self) -> bool:
        return self._rng.random() < 0.5

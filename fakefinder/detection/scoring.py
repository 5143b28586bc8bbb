"""
Score providers: the only source of randomness in the detection engine.

Every random draw made by the runner, the text feature scorer and the model
training simulation goes through a `ScoreProvider`. Production uses
`RandomScoreProvider`; tests inject scripted providers.
"""

import random
from typing import Optional, Protocol


class ScoreProvider(Protocol):
    def uniform(self, low: float, high: float) -> float:
        """Float in [low, high]."""
        ...

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high], both ends inclusive."""
        ...

    def chance(self, probability: float) -> bool:
        """True with the given probability."""
        ...


class RandomScoreProvider:
    """`random.Random`-backed provider. Pass a seed for reproducible runs."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def randint(self, low: int, high: int) -> int:
        return self._rng.randint(low, high)

    def chance(self, probability: float) -> bool:
        return self._rng.random() < probability

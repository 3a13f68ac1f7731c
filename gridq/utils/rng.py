"""Random number generation utilities for the Q-learning agent."""

import random
from typing import Optional


class SeededRNG:
    """Instance-owned random number generator for reproducible runs.

    Each agent owns one, so two agents never share random state.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        """Generate random float in [0, 1)."""
        return self._random.random()

    def randrange(self, n: int) -> int:
        """Generate random integer in [0, n)."""
        return self._random.randrange(n)

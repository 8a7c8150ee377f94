"""Seedable RNG wrapper for deterministic gameplay."""

import random


class GameRNG:
    """Wrapper around Python's random.Random for deterministic game behavior.

    All randomness in the game (map terrain, starting regions) goes through
    this class so a seed reproduces the same game.
    """

    def __init__(self, seed: int):
        """Initialize RNG with given seed.

        Args:
            seed: Integer seed for deterministic randomness
        """
        self.seed = seed
        self.rng = random.Random(seed)

    def choice(self, seq):
        """Choose random element from non-empty sequence.

        Args:
            seq: Sequence to choose from

        Returns:
            Random element from sequence
        """
        return self.rng.choice(seq)

    def uniform(self, a: float, b: float) -> float:
        """Return random float in [a, b]."""
        return self.rng.uniform(a, b)

"""Seeded randomness for reproducible matches.

Every random decision in a match (deck shuffles, ability draws, the
opponent's character, Mind Control discards) comes from a stream derived
from one match seed.  Streams are keyed by sub-system name, round and
action token, so replaying the same intents from the same seed replays
the same match, and drawing from one stream never shifts another.
"""

from __future__ import annotations

import hashlib
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class GameRNG:
    """A seeded random source that derives keyed child streams.

    Parameters
    ----------
    seed:
        Integer seed of the match (or of a derived stream).
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    # -- draws ---------------------------------------------------------------

    def random_float(self) -> float:
        """Return a random float in ``[0.0, 1.0)``."""
        return self._rng.random()

    def random_index(self, length: int) -> int:
        """Return a uniformly chosen index into a sequence of *length* items."""
        if length <= 0:
            raise ValueError(f"random_index length must be > 0, got {length}")
        return self._rng.randrange(length)

    def random_choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def shuffle(self, lst: list[T]) -> None:
        self._rng.shuffle(lst)

    # -- derived streams -----------------------------------------------------

    def fork(self, name: str) -> GameRNG:
        """Child RNG whose seed depends only on this seed and *name*."""
        digest = hashlib.sha256(f"{self._seed}:{name}".encode()).digest()
        return GameRNG(int.from_bytes(digest[:8], "big"))

    def stream(self, name: str, round_number: int, action_token: int) -> GameRNG:
        """Stream for sub-system *name* at one point of the match.

        The same ``(name, round_number, action_token)`` always yields the
        same stream, so a transition re-applied to the same state draws the
        same values.
        """
        return self.fork(f"{name}:{round_number}:{action_token}")

    def __repr__(self) -> str:
        return f"GameRNG(seed={self._seed})"

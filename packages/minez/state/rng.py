"""
Mulberry32 RNG - Deterministic random streams for Minez.

Every random decision in the engine comes from a stream seeded by the run
seed plus a contextual salt. Streams never share state, so adding a roll to
one effect does not shift the rolls of any other effect.

RNG Streams (salt added to the run seed):
- level:        seed + level                      (board generation)
- tile:         seed + level * 10000 + tile_index (on-reveal rolls for a tile)
- effect:       seed + level * 1000 + |hash(effect_id)| + offset
- mathematician: seed + level + 1000              (tie-break for highest number)
- shop:         seed + level + 50000              (shop offers)
- challenge:    seed + level + 75000              (challenge draft offers)
- teammate:     seed + 100000                     (starting collectible pick)

The algorithm is frozen: changing it changes every board of every seed.
"""

import random as _system_random
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence


MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply."""
    return (a * b) & MASK32


class Random:
    """
    Seeded Mulberry32 stream producing floats in [0, 1).

    Tracks how many values have been drawn so a stream can be reproduced
    or fast-forwarded.
    """

    def __init__(self, seed: int, counter: int = 0):
        self.seed = seed
        self.counter = 0
        self._state = seed & MASK32
        for _ in range(counter):
            self.random()

    def random(self) -> float:
        """Next float in [0, 1)."""
        self.counter += 1
        self._state = (self._state + _INCREMENT) & MASK32
        t = self._state
        r = _imul(t ^ (t >> 15), 1 | t)
        r ^= (r + _imul(r ^ (r >> 7), 61 | r)) & MASK32
        return ((r ^ (r >> 14)) & MASK32) / _TWO_32

    def __call__(self) -> float:
        return self.random()

    def random_int(self, low: int, high: int) -> int:
        """Uniform integer in [low, high] inclusive."""
        if high < low:
            raise ValueError(f"Empty range: [{low}, {high}]")
        return int(self.random() * (high - low + 1)) + low

    def random_index(self, length: int) -> int:
        """Uniform index in [0, length)."""
        if length <= 0:
            raise ValueError("length must be positive")
        return int(self.random() * length)

    def random_boolean(self, chance: float) -> bool:
        """True with probability `chance`."""
        return self.random() < chance

    def choice(self, values: Sequence[Any]) -> Any:
        """Uniform pick from a non-empty sequence."""
        if not values:
            raise ValueError("Cannot choose from empty list")
        return values[self.random_index(len(values))]

    def weighted_choice(self, values: Sequence[Any], weights: Sequence[float]) -> Any:
        """
        Pick one value with probability proportional to its weight.

        Args:
            values: Candidates
            weights: Non-negative weight per candidate (same length)

        Returns:
            The chosen candidate
        """
        if not values or len(values) != len(weights):
            raise ValueError("values and weights must be non-empty and equal length")
        total = float(sum(weights))
        if total <= 0:
            raise ValueError("total weight must be positive")
        roll = self.random() * total
        cumulative = 0.0
        for value, weight in zip(values, weights):
            cumulative += weight
            if roll < cumulative:
                return value
        return values[-1]

    def shuffle(self, values: List[Any]) -> None:
        """Fisher-Yates shuffle in place, walking from the back."""
        for i in range(len(values) - 1, 0, -1):
            j = int(self.random() * (i + 1))
            values[i], values[j] = values[j], values[i]

    def copy(self) -> "Random":
        return Random(self.seed, self.counter)

    def __repr__(self) -> str:
        return f"Random(seed={self.seed}, counter={self.counter})"


def create_stream(seed: int) -> Callable[[], float]:
    """Plain callable form: `create_stream(seed)()` yields the next float."""
    return Random(seed).random


def string_hash(value: str) -> int:
    """31-multiplier string hash wrapped to a signed 32-bit integer."""
    h = 0
    for ch in value:
        h = ((h << 5) - h + ord(ch)) & MASK32
    if h >= 0x80000000:
        h -= 0x100000000
    return h


# =============================================================================
# Stream Seeds
# =============================================================================

class RNGStream(Enum):
    """All derived streams in a run."""
    LEVEL = "level"
    TILE = "tile"
    EFFECT = "effect"
    MATHEMATICIAN = "mathematician"
    SHOP = "shop"
    CHALLENGE = "challenge"
    TEAMMATE = "teammate"


TILE_LEVEL_MULTIPLIER = 10000
EFFECT_LEVEL_MULTIPLIER = 1000
MATHEMATICIAN_OFFSET = 1000
SHOP_OFFSET = 50000
CHALLENGE_OFFSET = 75000
TEAMMATE_OFFSET = 100000


def level_seed(seed: int, level: int) -> int:
    return seed + level


def tile_seed(seed: int, level: int, tile_index: int) -> int:
    return seed + level * TILE_LEVEL_MULTIPLIER + tile_index


def effect_seed(seed: int, level: int, effect_id: str, offset: int = 0) -> int:
    return seed + level * EFFECT_LEVEL_MULTIPLIER + abs(string_hash(effect_id)) + offset


def stream_seed(stream: RNGStream, seed: int, level: int = 0,
                tile_index: int = 0, effect_id: str = "", offset: int = 0) -> int:
    """Seed for any named stream."""
    if stream == RNGStream.LEVEL:
        return level_seed(seed, level)
    if stream == RNGStream.TILE:
        return tile_seed(seed, level, tile_index)
    if stream == RNGStream.EFFECT:
        return effect_seed(seed, level, effect_id, offset)
    if stream == RNGStream.MATHEMATICIAN:
        return seed + level + MATHEMATICIAN_OFFSET
    if stream == RNGStream.SHOP:
        return seed + level + SHOP_OFFSET
    if stream == RNGStream.CHALLENGE:
        return seed + level + CHALLENGE_OFFSET
    if stream == RNGStream.TEAMMATE:
        return seed + TEAMMATE_OFFSET
    raise ValueError(f"Unknown stream: {stream}")


def get_stream(stream: RNGStream, seed: int, level: int = 0,
               tile_index: int = 0, effect_id: str = "", offset: int = 0) -> Random:
    """Fresh Random for a named stream."""
    return Random(stream_seed(stream, seed, level, tile_index, effect_id, offset))


def level_rng(seed: int, level: int) -> Random:
    return Random(level_seed(seed, level))


def tile_rng(seed: int, level: int, tile_index: int) -> Random:
    return Random(tile_seed(seed, level, tile_index))


def effect_rng(seed: int, level: int, effect_id: str, offset: int = 0) -> Random:
    return Random(effect_seed(seed, level, effect_id, offset))


def new_run_seed(entropy: Optional[Random] = None) -> int:
    """Fresh 31-bit run seed (OS entropy unless a stream is supplied)."""
    if entropy is not None:
        return int(entropy.random() * 2 ** 31)
    return _system_random.SystemRandom().randrange(2 ** 31)

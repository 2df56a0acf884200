"""
Per-level tuning and economy constants.

Board side length grows with the level: n = min(MAX_GRID_SIZE, 4 + level),
so the final level is the first 20x20 board.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .challenges import ChallengeId


ECONOMY: Dict[str, int] = {
    "end_of_level_gold": 5,
    "relic_price": 15,
    "buy_life_price": 3,
    "shop_price_common": 5,
    "shop_price_uncommon": 7,
    "shop_price_rare": 10,
}

FINAL_LEVEL = 16
MAX_GRID_SIZE = 20
BASE_GRID_SIZE = 4

STARTING_LIVES = 3
STARTING_GOLD = 0


@dataclass(frozen=True)
class LevelSpec:
    """Fixed per-level base counts (used when GenerationConfig.use_level_specs is set)."""
    level: int
    mines: int
    ore: int
    exits: int = 1
    challenges: Optional[Dict[ChallengeId, int]] = None

    # Fixed-tuning mode shaves a quarter off the table mine count
    MINE_SCALE = 0.75

    @property
    def scaled_mines(self) -> int:
        return int(self.mines * self.MINE_SCALE)


LEVEL_SPECS: List[LevelSpec] = [
    LevelSpec(1, mines=37, ore=3, challenges={ChallengeId.AUTO_GRAT: 3, ChallengeId.COAL: 1}),
    LevelSpec(2, mines=37, ore=3, challenges={ChallengeId.AUTO_GRAT: 3, ChallengeId.MATH_TEST: 1,
                                              ChallengeId.COAL: 1}),
    LevelSpec(3, mines=45, ore=3, challenges={ChallengeId.AUTO_GRAT: 3, ChallengeId.MATH_TEST: 2,
                                              ChallengeId.BAD_DEAL: 1}),
    LevelSpec(4, mines=45, ore=3, challenges={ChallengeId.BAD_DEAL: 2, ChallengeId.MATH_TEST: 2,
                                              ChallengeId.CLOVER2: 1}),
    LevelSpec(5, mines=45, ore=3, challenges={ChallengeId.CLOVER2: 3, ChallengeId.ATM_FEE: 1,
                                              ChallengeId.FINDERS_FEE: 1}),
    LevelSpec(6, mines=40, ore=3),
    LevelSpec(7, mines=50, ore=4),
    LevelSpec(8, mines=50, ore=4),
    LevelSpec(9, mines=50, ore=4),
    LevelSpec(10, mines=40, ore=4),
]


def get_level_spec(level: int) -> LevelSpec:
    """Base counts for a level; levels past the table reuse the last row."""
    if level < 1:
        raise ValueError(f"Invalid level: {level}")
    for spec in LEVEL_SPECS:
        if spec.level == level:
            return spec
    return LEVEL_SPECS[-1]


def board_size_for_level(level: int) -> int:
    """Side length of the square board for a level."""
    return min(MAX_GRID_SIZE, BASE_GRID_SIZE + level)


def is_final_level(level: int) -> bool:
    return level >= FINAL_LEVEL


def is_free_collectible_level(level: int) -> bool:
    """Level 1, every third level after it, and the final level grant a free collectible."""
    if level <= 0:
        return False
    return level == 1 or (level - 1) % 3 == 0 or level == FINAL_LEVEL

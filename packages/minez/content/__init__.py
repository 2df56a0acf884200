"""
Static catalogs: shop tiles, collectibles, challenges and per-level tuning.
"""

from .shop_tiles import (
    Rarity,
    ShopTileId,
    ShopTile,
    ALL_SHOP_TILES,
    MAX_COPIES_PER_BOARD,
    GUARANTEED_SHOP_TILE,
    price_for_rarity,
    get_shop_tile,
    get_shop_tiles_by_rarity,
)
from .relics import RelicId, Relic, ALL_RELICS, get_relic, get_relics_by_rarity
from .challenges import (
    ChallengeId,
    Challenge,
    SpawnBand,
    SPAWN_TARGET,
    CHALLENGE_SPAWN_BAND,
    MINE_EQUIVALENT,
    EXCLUDED,
    DRAFTABLE_CHALLENGES,
    ALL_CHALLENGES,
    get_challenge,
    spawn_weight,
)
from .levels import (
    ECONOMY,
    FINAL_LEVEL,
    MAX_GRID_SIZE,
    STARTING_LIVES,
    STARTING_GOLD,
    LevelSpec,
    LEVEL_SPECS,
    get_level_spec,
    board_size_for_level,
    is_final_level,
    is_free_collectible_level,
)

__all__ = [
    "Rarity", "ShopTileId", "ShopTile", "ALL_SHOP_TILES", "MAX_COPIES_PER_BOARD",
    "GUARANTEED_SHOP_TILE", "price_for_rarity", "get_shop_tile", "get_shop_tiles_by_rarity",
    "RelicId", "Relic", "ALL_RELICS", "get_relic", "get_relics_by_rarity",
    "ChallengeId", "Challenge", "SpawnBand", "SPAWN_TARGET", "CHALLENGE_SPAWN_BAND",
    "MINE_EQUIVALENT", "EXCLUDED", "DRAFTABLE_CHALLENGES", "ALL_CHALLENGES",
    "get_challenge", "spawn_weight",
    "ECONOMY", "FINAL_LEVEL", "MAX_GRID_SIZE", "STARTING_LIVES", "STARTING_GOLD",
    "LevelSpec", "LEVEL_SPECS", "get_level_spec", "board_size_for_level",
    "is_final_level", "is_free_collectible_level",
]

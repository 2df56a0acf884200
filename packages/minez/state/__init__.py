"""
State module - RNG streams, board model and run state.
"""

# RNG System
from .rng import (
    Random,
    RNGStream,
    create_stream,
    string_hash,
    get_stream,
    level_rng,
    tile_rng,
    effect_rng,
    new_run_seed,
)

# Board
from .board import (
    Board,
    Tile,
    TileKind,
    FlagColor,
    Direction,
    TransformKind,
    count_adjacent_mines,
    assign_numbers,
    board_from_rows,
    board_to_string,
)

# Run State Tracking
from .run import RunState, LevelEffects, LevelStats, create_run

__all__ = [
    "Random", "RNGStream", "create_stream", "string_hash", "get_stream",
    "level_rng", "tile_rng", "effect_rng", "new_run_seed",
    "Board", "Tile", "TileKind", "FlagColor", "Direction", "TransformKind",
    "count_adjacent_mines", "assign_numbers", "board_from_rows", "board_to_string",
    "RunState", "LevelEffects", "LevelStats", "create_run",
]

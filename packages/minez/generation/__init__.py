"""
Generation module - level boards and challenge drafts.
"""

from .level import (
    GenerationConfig,
    LevelGenerator,
    compass_direction,
    generate_level,
    write_level_stats,
)
from .draft import offer_challenges

__all__ = [
    "GenerationConfig",
    "LevelGenerator",
    "compass_direction",
    "generate_level",
    "write_level_stats",
    "offer_challenges",
]

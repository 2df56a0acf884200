"""
Start-of-level activation.

Runs once per level, after generation and before the player's first click:
the levelStart collectible checklist in priority order, then the ambient
Thief steal (one per Thief tile on the board, even though those tiles stay
hidden).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..content.challenges import ChallengeId
from ..registry import TriggerHook, execute_relic_triggers
from ..state.board import TileKind

if TYPE_CHECKING:
    from .reveal import RevealEngine, RevealResult

logger = logging.getLogger(__name__)


def activate_level_start(engine: RevealEngine, result: RevealResult) -> None:
    execute_relic_triggers(TriggerHook.LEVEL_START.value, engine, result)

    thieves = engine.board.tiles_of_kind(TileKind.CHALLENGE, ChallengeId.THIEF)
    for i, _ in enumerate(thieves):
        stolen = engine.steal_relic(engine.rng_for_effect("Thief", i))
        if stolen is None:
            break
        logger.info("Thief stole %s at level start", stolen.value)

    logger.debug("Level %d start activation: %d lives, %d gold",
                 engine.run.level, engine.run.lives, engine.run.gold)

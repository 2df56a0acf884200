"""
Level-end resolution.

Called exactly once per level, either when the exit is used (survived) or
when lives reach 0 (lost). Bonuses apply to survived levels only:
end-of-level collectibles in priority order, then the base payout unless
Finder's Fee is armed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..content.levels import ECONOMY
from ..events import GameEvent, LevelEndResolved
from ..registry import TriggerHook, execute_relic_triggers

if TYPE_CHECKING:
    from .reveal import RevealEngine, RevealResult


def resolve_level(engine: RevealEngine, result: RevealResult, survived: bool) -> int:
    """Apply end-of-level rewards. Returns the gold awarded."""
    run = engine.run
    # Gold gained from here on must not queue Donation Box reveals
    engine.level_over = True
    gold_before = run.gold

    if survived:
        execute_relic_triggers(TriggerHook.LEVEL_END.value, engine, result)
        if not run.effects.no_end_gold:
            engine.gain_gold(ECONOMY["end_of_level_gold"], "LevelEnd", result)
        result.run_won = run.is_final_level

    awarded = run.gold - gold_before
    result.survived = survived
    engine.survived = survived
    engine.bus.emit(GameEvent.LEVEL_END_RESOLVED, LevelEndResolved(survived, awarded))
    return awarded

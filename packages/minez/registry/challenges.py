"""
Challenge Tile Effect Implementations.

Handlers run when a challenge tile is revealed. The Auditor bonus is applied
by the engine after every handler, whichever challenge fired.
"""

from __future__ import annotations

import logging

from ..content.challenges import ChallengeId
from . import EffectContext, challenge_effect

logger = logging.getLogger(__name__)


# =============================================================================
# Immediate gold / life
# =============================================================================

@challenge_effect(ChallengeId.AUTO_GRAT)
def auto_grat(ctx: EffectContext) -> None:
    """Auto Grat: lose 1 gold (may go negative)."""
    ctx.lose_gold(1, "AutoGrat")


@challenge_effect(ChallengeId.BAD_DEAL)
def bad_deal(ctx: EffectContext) -> None:
    ctx.gain_gold(1, "BadDeal")
    ctx.lose_life("BadDeal")


@challenge_effect(ChallengeId.BLOOD_PACT)
def blood_pact(ctx: EffectContext) -> None:
    if ctx.run.lives >= 3:
        ctx.lose_life("BloodPact")


@challenge_effect(ChallengeId.MEGA_MINE)
def mega_mine(ctx: EffectContext) -> None:
    """Mega Mine: 2 lives when above 2, otherwise 1."""
    hits = 2 if ctx.run.lives > 2 else 1
    for _ in range(hits):
        ctx.lose_life("MegaMine")


@challenge_effect(ChallengeId.BOXING_DAY)
def boxing_day(ctx: EffectContext) -> None:
    """Halve positive gold (rounding down). Debt is left alone."""
    before = ctx.run.gold
    if before <= 0:
        return
    loss = before - before // 2
    if loss > 0:
        ctx.lose_gold(loss, "BoxingDay")


@challenge_effect(ChallengeId.THIEF)
def thief(ctx: EffectContext) -> None:
    stolen = ctx.steal_relic(ctx.stats.revealed_count)
    if stolen is not None:
        logger.info("Thief stole %s", stolen.value)


# =============================================================================
# Level-long toggles
# =============================================================================

@challenge_effect(ChallengeId.MATH_TEST)
def math_test(ctx: EffectContext) -> None:
    ctx.effects.math_test = True


@challenge_effect(ChallengeId.SNAKE_OIL)
def snake_oil(ctx: EffectContext) -> None:
    ctx.effects.snake_oil = True


@challenge_effect(ChallengeId.SNAKE_VENOM)
def snake_venom(ctx: EffectContext) -> None:
    ctx.effects.snake_venom = True


@challenge_effect(ChallengeId.BLOOD_DIAMOND)
def blood_diamond(ctx: EffectContext) -> None:
    ctx.effects.blood_diamond = True


@challenge_effect(ChallengeId.FINDERS_FEE)
def finders_fee(ctx: EffectContext) -> None:
    ctx.effects.no_end_gold = True


@challenge_effect(ChallengeId.ATM_FEE)
def atm_fee(ctx: EffectContext) -> None:
    ctx.effects.atm_fee = True


@challenge_effect(ChallengeId.CAR_LOAN)
def car_loan(ctx: EffectContext) -> None:
    ctx.effects.car_loan = True


@challenge_effect(ChallengeId.APPRAISAL)
def appraisal(ctx: EffectContext) -> None:
    ctx.effects.appraisal = True


@challenge_effect(ChallengeId.DONATION_BOX)
def donation_box(ctx: EffectContext) -> None:
    ctx.effects.donation_box_stacks += 1


# =============================================================================
# Board effects
# =============================================================================

@challenge_effect(ChallengeId.JACKHAMMER)
def jackhammer(ctx: EffectContext) -> None:
    """
    Reveal every surrounding tile, mines included.

    A Jackhammer uncovered by another Jackhammer is marked and does not
    cascade again, so two neighboring Jackhammers cannot ping-pong.
    """
    tile = ctx.tile
    if tile.cascade_suppressed:
        tile.cascade_suppressed = False
        return
    for target in ctx.neighbors():
        if target.revealed or target.flagged:
            continue
        if target.is_challenge(ChallengeId.JACKHAMMER):
            target.cascade_suppressed = True
        ctx.reveal(target)


# =============================================================================
# No immediate effect
# =============================================================================

@challenge_effect(ChallengeId.CLOVER2)
def clover(ctx: EffectContext) -> None:
    # Harmless; only counts as a mine for adjacency
    pass


@challenge_effect(ChallengeId.COAL)
def coal(ctx: EffectContext) -> None:
    pass


@challenge_effect(ChallengeId.STOPWATCH)
def stopwatch(ctx: EffectContext) -> None:
    pass


@challenge_effect(ChallengeId.KEY)
def key(ctx: EffectContext) -> None:
    # The exit checks for unrevealed keys
    pass

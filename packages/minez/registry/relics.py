"""
Collectible Trigger Implementations.

This module contains all hook-driven collectible handlers using the registry
pattern. Handlers for one hook run in priority order (lower first); the
start-of-level and end-of-level checklists depend on that order.

Organized by trigger hook for easier maintenance. Collectibles that alter a
reveal mid-flight (Optimist, Gambler, Billionaire, Investor) are read inline
by the reveal engine; generation-time ones (Diffuser, Entrepreneur,
Accountant) by the level generator.
"""

from __future__ import annotations

import logging

from ..content.challenges import ChallengeId
from ..content.relics import RelicId
from ..state.board import FlagColor, TileKind
from ..state.rng import RNGStream, get_stream
from . import EffectContext, relic_trigger

logger = logging.getLogger(__name__)


# =============================================================================
# LEVEL_START Triggers
# =============================================================================

@relic_trigger("levelStart", relic=RelicId.PIONEER, priority=10)
def pioneer_start(ctx: EffectContext) -> None:
    """Pioneer: flag a random hidden mine, else a Clover2 tile."""
    candidates = ctx.board.filter(
        lambda t: t.kind == TileKind.MINE and not t.flagged and not t.revealed
    )
    if not candidates:
        candidates = ctx.board.filter(
            lambda t: t.is_challenge(ChallengeId.CLOVER2)
            and not t.flagged and not t.revealed
        )
    if candidates:
        target = ctx.random_choice(candidates)
        ctx.flag(target, ctx.run.flag_color)
        logger.debug("Pioneer flagged (%d, %d)", target.x, target.y)


@relic_trigger("levelStart", relic=RelicId.CHEAPSKATE, priority=20)
def cheapskate_start(ctx: EffectContext) -> None:
    """Cheapskate: +1 life per stack when entering with 10+ gold."""
    if ctx.run.gold >= 10:
        ctx.gain_lives(ctx.stacks, "Cheapskate")


@relic_trigger("levelStart", relic=RelicId.DEBT_COLLECTOR, priority=30)
def debt_collector_start(ctx: EffectContext) -> None:
    """Debt Collector: +1 life per stack when entering in debt."""
    if ctx.run.gold < 0:
        ctx.gain_lives(ctx.stacks, "DebtCollector")


@relic_trigger("levelStart", relic=RelicId.FORTUNE_TELLER, priority=40)
def fortune_teller_start(ctx: EffectContext) -> None:
    """Fortune Teller: reveal the first hidden ore."""
    target = ctx.board.find(lambda t: t.kind == TileKind.ORE and not t.revealed and not t.flagged)
    if target is not None:
        ctx.reveal(target)


@relic_trigger("levelStart", relic=RelicId.MATHEMATICIAN, priority=50)
def mathematician_start(ctx: EffectContext) -> None:
    """Mathematician: reveal the highest hidden number, random among ties."""
    hidden = ctx.board.filter(
        lambda t: t.kind == TileKind.NUMBER and not t.revealed and not t.flagged
    )
    if not hidden:
        return
    best = max(t.number for t in hidden)
    ties = [t for t in hidden if t.number == best]
    rng = get_stream(RNGStream.MATHEMATICIAN, ctx.run.seed, ctx.run.level)
    ctx.reveal(rng.choice(ties))


@relic_trigger("levelStart", relic=RelicId.RESEARCHER, priority=60)
def researcher_start(ctx: EffectContext) -> None:
    """Researcher: yellow-flag a random hidden challenge tile."""
    candidates = ctx.board.filter(
        lambda t: t.kind == TileKind.CHALLENGE and not t.flagged and not t.revealed
    )
    if candidates:
        ctx.flag(ctx.random_choice(candidates), FlagColor.YELLOW)


# =============================================================================
# LEVEL_END Triggers (survived levels only)
# =============================================================================

@relic_trigger("levelEnd", relic=RelicId.RESURRECTOR, priority=10)
def resurrector_end(ctx: EffectContext) -> None:
    if ctx.run.lives == 1:
        ctx.gain_lives(ctx.stacks, "Resurrector")


@relic_trigger("levelEnd", relic=RelicId.MINIMALIST, priority=20)
def minimalist_end(ctx: EffectContext) -> None:
    if ctx.stats.special_revealed == 0:
        ctx.gain_gold(6 * ctx.stacks, "Minimalist")


@relic_trigger("levelEnd", relic=RelicId.VEXILLOLOGIST, priority=30)
def vexillologist_end(ctx: EffectContext) -> None:
    """Vexillologist: every real mine flagged and no flag on anything else."""
    all_flagged = all(t.flagged for t in ctx.board if t.kind == TileKind.MINE)
    wrong_flags = any(t.flagged and t.kind != TileKind.MINE for t in ctx.board)
    if all_flagged and not wrong_flags:
        ctx.gain_gold(5 * ctx.stacks, "Vexillologist")


def _award_cartographer(ctx: EffectContext) -> None:
    if ctx.effects.cartographer_awarded:
        return
    if all(t.revealed for t in ctx.board.corners()):
        ctx.effects.cartographer_awarded = True
        ctx.gain_gold(5 * ctx.stacks, "Cartographer")


@relic_trigger("levelEnd", relic=RelicId.CARTOGRAPHER, priority=40)
def cartographer_end(ctx: EffectContext) -> None:
    _award_cartographer(ctx)


# =============================================================================
# ON_TILE_REVEALED Triggers
# =============================================================================

@relic_trigger("onTileRevealed", relic=RelicId.CARTOGRAPHER)
def cartographer_live(ctx: EffectContext) -> None:
    """Cartographer pays out the moment the fourth corner opens."""
    _award_cartographer(ctx)


@relic_trigger("onMineRevealed", relic=RelicId.LAPIDARIST)
def lapidarist_mine(ctx: EffectContext) -> None:
    ctx.gain_gold(3 * ctx.stacks, "Lapidarist")


@relic_trigger("onNumberRevealed", relic=RelicId.NUMBER_CRUNCHER)
def number_cruncher_number(ctx: EffectContext) -> None:
    """Number Cruncher: an N has an N% chance to pay 1 gold per stack."""
    number = ctx.tile.number if ctx.tile is not None else 0
    if number > 0 and ctx.roll(min(1.0, number / 100)):
        ctx.gain_gold(ctx.stacks, "NumberCruncher")


@relic_trigger("onChallengeRevealed", relic=RelicId.AUDITOR)
def auditor_challenge(ctx: EffectContext) -> None:
    ctx.gain_gold(ctx.stacks, "Auditor")


# =============================================================================
# Gold Triggers
# =============================================================================

@relic_trigger("onGoldGained", relic=RelicId.TAX_COLLECTOR)
def tax_collector_gain(ctx: EffectContext) -> None:
    """Tax Collector: +1 gold per stack on every gain (does not re-trigger)."""
    ctx.credit_gold(ctx.stacks, "TaxCollector")


@relic_trigger("onGoldLost", relic=RelicId.PHILANTHROPIST)
def philanthropist_loss(ctx: EffectContext) -> None:
    """Philanthropist: 25% per stack to gain a life when gold is lost (not spent)."""
    if ctx.trigger_data.get("spending"):
        return
    for _ in range(ctx.stacks):
        if ctx.roll(0.25):
            ctx.gain_lives(1, "Philanthropist")

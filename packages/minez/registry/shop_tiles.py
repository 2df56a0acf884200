"""
Shop Tile Effect Implementations.

Each handler runs once, when its tile is revealed. The engine has already
applied the special-tile surcharge (Car Loan), the stats bookkeeping and the
Scratchcard bonus before dispatching here.
"""

from __future__ import annotations

from ..content.challenges import ChallengeId
from ..content.shop_tiles import ShopTileId
from ..state.board import FlagColor, TileKind, TransformKind
from . import EffectContext, shop_tile_effect


# =============================================================================
# Resources
# =============================================================================

@shop_tile_effect(ShopTileId.DIAMOND)
def diamond(ctx: EffectContext) -> None:
    """Diamond: 7-10 gold."""
    ctx.collect_resource(TransformKind.DIAMOND, "Diamond", upgradable=False)


@shop_tile_effect(ShopTileId.QUARTZ)
def quartz(ctx: EffectContext) -> None:
    """Quartz: 1 gold, or 7-10 if Investor upgrades it. Costs a life under Appraisal."""
    ctx.collect_resource(TransformKind.QUARTZ, "Quartz")


@shop_tile_effect(ShopTileId.LUCKY_CAT)
def lucky_cat(ctx: EffectContext) -> None:
    if ctx.run.lives > 0:
        ctx.gain_gold(ctx.run.lives, "LuckyCat")


@shop_tile_effect(ShopTileId.LAUNDRY_MONEY)
def laundry_money(ctx: EffectContext) -> None:
    """Round gold up to the next multiple of 5."""
    before = ctx.run.gold
    after = -(-before // 5) * 5
    if after > before:
        ctx.gain_gold(after - before, "LaundryMoney")


# =============================================================================
# Lives
# =============================================================================

@shop_tile_effect(ShopTileId.ONE_UP)
def one_up(ctx: EffectContext) -> None:
    ctx.gain_lives(1, "1Up")


@shop_tile_effect(ShopTileId.TWO_UP)
def two_up(ctx: EffectContext) -> None:
    ctx.gain_lives(2, "2Up")


@shop_tile_effect(ShopTileId.GOOD_DEAL)
def good_deal(ctx: EffectContext) -> None:
    """Spend 1 gold for 1 life; nothing happens without positive gold."""
    if ctx.run.gold > 0:
        ctx.lose_gold(1, "GoodDeal", spending=True)
        ctx.gain_lives(1, "GoodDeal")


# =============================================================================
# Auto-reveal
# =============================================================================

@shop_tile_effect(ShopTileId.PICKAXE)
def pickaxe(ctx: EffectContext) -> None:
    """Reveal up to 2 random adjacent non-mine tiles."""
    candidates = [t for t in ctx.neighbors() if not t.revealed and t.kind != TileKind.MINE]
    ctx.shuffle_in_place(candidates)
    for target in candidates[:2]:
        ctx.reveal(target)


@shop_tile_effect(ShopTileId.ADVANCE_PAYMENT)
def advance_payment(ctx: EffectContext) -> None:
    target = ctx.board.find(lambda t: t.kind == TileKind.ORE and not t.revealed)
    if target is not None:
        ctx.reveal(target)


@shop_tile_effect(ShopTileId.MAGNET)
def magnet(ctx: EffectContext) -> None:
    for target in ctx.neighbors():
        if target.kind == TileKind.ORE and not target.revealed:
            ctx.reveal(target)


# =============================================================================
# Flagging
# =============================================================================

@shop_tile_effect(ShopTileId.REMOTE_CONTROL)
def remote_control(ctx: EffectContext) -> None:
    """Flag the first hidden mine, falling back to a Clover."""
    target = ctx.board.find(lambda t: t.kind == TileKind.MINE and not t.flagged and not t.revealed)
    if target is None:
        target = ctx.board.find(
            lambda t: t.is_challenge(ChallengeId.CLOVER2) and not t.flagged and not t.revealed
        )
    if target is not None:
        ctx.flag(target, FlagColor.BLUE)
    ctx.board_changed("RemoteControl")


@shop_tile_effect(ShopTileId.METAL_DETECTOR)
def metal_detector(ctx: EffectContext) -> None:
    """Flag every adjacent mine or Clover."""
    for target in ctx.neighbors():
        if target.flagged or target.revealed:
            continue
        if target.kind == TileKind.MINE or target.is_challenge(ChallengeId.CLOVER2):
            ctx.flag(target, FlagColor.BLUE)
    ctx.board_changed("MetalDetector")


@shop_tile_effect(ShopTileId.POKER_CHIP)
def poker_chip(ctx: EffectContext) -> None:
    """
    Once per board: blue-flag the exit and one random mine.

    Both flags look the same, so the player learns that one of two tiles
    is the exit without knowing which.
    """
    if ctx.effects.poker_chip_used:
        return
    ctx.effects.poker_chip_used = True
    exit_tile = ctx.board.find(lambda t: t.kind == TileKind.EXIT and not t.revealed and not t.flagged)
    mines = ctx.board.filter(lambda t: t.kind == TileKind.MINE and not t.revealed and not t.flagged)
    if exit_tile is None or not mines:
        return
    mine = ctx.random_choice(mines)
    ctx.flag(exit_tile, FlagColor.BLUE)
    ctx.flag(mine, FlagColor.BLUE)
    ctx.board_changed("PokerChip")


# =============================================================================
# Level-long modifiers
# =============================================================================

@shop_tile_effect(ShopTileId.SCRATCHCARD)
def scratchcard(ctx: EffectContext) -> None:
    ctx.effects.scratchcard_stacks += 1


@shop_tile_effect(ShopTileId.LUCKY_PENNY)
def lucky_penny(ctx: EffectContext) -> None:
    ctx.effects.lucky_penny_stacks += 1


@shop_tile_effect(ShopTileId.NINE_TO_FIVE)
def nine_to_five(ctx: EffectContext) -> None:
    ctx.effects.nine_to_five_stacks += 1


@shop_tile_effect(ShopTileId.CHEAT_SHEET)
def cheat_sheet(ctx: EffectContext) -> None:
    ctx.effects.cheat_sheet_stacks += 1


@shop_tile_effect(ShopTileId.TAROT_CARD)
def tarot_card(ctx: EffectContext) -> None:
    ctx.effects.tarot_card = True


@shop_tile_effect(ShopTileId.RECEIPT)
def receipt(ctx: EffectContext) -> None:
    ctx.run.shop_free_purchases += 1


@shop_tile_effect(ShopTileId.COMPASS)
def compass(ctx: EffectContext) -> None:
    # Direction was frozen at generation
    pass

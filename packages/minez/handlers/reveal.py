"""
Reveal Engine - the per-level state machine.

Tile states: hidden, hidden+flagged, revealed. Hidden -> revealed is one
way. Flags toggle freely and only touch the mines-remaining counter.

Every gold and life change during one call (including cascades, nested
auto-reveals and Donation Box reveals) is accumulated in a single
RevealResult, so summing gold_delta over a level always equals the change
in RunState.gold.

Per-kind order inside one reveal:
1. Car Loan surcharge (shop/challenge tiles only)
2. Kind handler (mine, ore, exit, shop, challenge, number, safe flood fill)
3. TILE_REVEALED event and onTileRevealed triggers
After the top-level call: queued Donation Box reveals, 9-5 payout, loss
check, LIFE_CHANGED event, then pending display transforms are committed.

All on-reveal rolls for a tile draw sequentially from that tile's stream.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..content.challenges import ChallengeId
from ..content.relics import RelicId
from ..events import (
    BoardChanged,
    EventBus,
    GameEvent,
    GoldGained,
    LevelEndTriggered,
    LevelStarted,
    LifeChanged,
    TileRevealed,
)
from ..registry import (
    TriggerHook,
    execute_challenge_effect,
    execute_relic_triggers,
    execute_shop_tile_effect,
)
from ..state.board import Board, FlagColor, Tile, TileKind, TransformKind
from ..state.rng import Random, effect_rng, tile_rng
from ..state.run import RunState
from .level_end import resolve_level
from .level_start import activate_level_start

logger = logging.getLogger(__name__)


# Roll chances
GAMBLER_CHANCE = 0.25
INVESTOR_CHANCE = 0.25
SNAKE_VENOM_CHANCE = 0.25
SNAKE_VENOM_MIN_NUMBER = 3
RANDOM_MASK_CHANCE = 0.20
CHEAT_SHEET_REDUCTION = 0.05
LUCKY_PENNY_CHANCE = 0.05
TAROT_CHANCE = 0.05

BILLIONAIRE_COST = 5
NINE_TO_FIVE_GOLD = 2

RESOURCE_GOLD = {
    TransformKind.QUARTZ: (1, 1),
    TransformKind.ORE: (2, 5),
    TransformKind.DIAMOND: (7, 10),
}
TAROT_PICKS = [TransformKind.QUARTZ, TransformKind.ORE, TransformKind.DIAMOND]


@dataclass
class RevealResult:
    """Net outcome of one engine call."""
    life_delta: int = 0
    gold_delta: int = 0
    ended_level: bool = False
    survived: Optional[bool] = None
    run_won: bool = False
    exit_locked: bool = False
    revealed: List[Tile] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return (self.life_delta == 0 and self.gold_delta == 0 and not self.ended_level
                and not self.revealed and not self.exit_locked)


class RevealEngine:
    """
    Owns the board for one level and applies reveals and flags to it.

    Usage:
        engine = RevealEngine(run, board, bus)
        engine.start_level()
        result = engine.reveal(3, 4, by_player=True)
    """

    def __init__(self, run: RunState, board: Board, bus: Optional[EventBus] = None,
                 auto_commit: bool = True):
        self.run = run
        self.board = board
        self.bus = bus if bus is not None else EventBus()
        self.auto_commit = auto_commit
        self.level_over = False
        self.survived: Optional[bool] = None
        self._started = False
        self._donation_queue = 0
        self._kind_handlers: Dict[TileKind, Callable[[Tile, bool, RevealResult, Random], None]] = {
            TileKind.MINE: self._reveal_mine,
            TileKind.ORE: self._reveal_ore,
            TileKind.EXIT: self._reveal_exit,
            TileKind.SHOP: self._reveal_special,
            TileKind.CHALLENGE: self._reveal_special,
            TileKind.NUMBER: self._reveal_number,
            TileKind.SAFE: self._reveal_safe,
        }

    # =========================================================================
    # RNG
    # =========================================================================

    def rng_for_tile(self, tile: Tile) -> Random:
        """Stream for every on-reveal roll of one tile."""
        return tile_rng(self.run.seed, self.run.level, self.board.index_of(tile))

    def rng_for_effect(self, effect_id: str, offset: int = 0) -> Random:
        return effect_rng(self.run.seed, self.run.level, effect_id, offset)

    # =========================================================================
    # Entry points
    # =========================================================================

    def start_level(self) -> RevealResult:
        """Run start-of-level collectible activation once, then announce the level."""
        result = RevealResult()
        if self._started:
            return result
        self._started = True
        activate_level_start(self, result)
        self._finish(result)
        self.bus.emit(GameEvent.LEVEL_STARTED,
                      LevelStarted(self.run.level, self.board.width, self.board.height))
        return result

    def reveal(self, x: int, y: int, by_player: bool = False) -> RevealResult:
        """
        Reveal the tile at (x, y).

        Revealed or flagged tiles are a silent no-op, with two exit rules:
        a player click on a flagged exit removes the flag, and a player
        click on an already-revealed exit uses it to finish the level.

        Raises:
            ValueError: coordinates outside the board
        """
        tile = self.board.tile_at(x, y)
        result = RevealResult()
        if self.level_over:
            return result
        if tile.flagged:
            if by_player and tile.kind == TileKind.EXIT and not tile.revealed:
                self._unflag(tile)
            return result
        if tile.revealed:
            if by_player and tile.kind == TileKind.EXIT:
                self._use_exit(result)
                self._finish(result)
            return result
        self._reveal_tile(tile, by_player, result)
        self._finish(result)
        return result

    def toggle_flag(self, x: int, y: int, color: Optional[FlagColor] = None) -> bool:
        """
        Flag or unflag a hidden tile. Returns the new flagged state.

        Raises:
            ValueError: coordinates outside the board
        """
        tile = self.board.tile_at(x, y)
        if tile.revealed or self.level_over:
            return tile.flagged
        if tile.flagged:
            self._unflag(tile)
            return False
        return self.flag_tile(tile, color or self.run.flag_color)

    def chord(self, x: int, y: int) -> RevealResult:
        """
        Reveal every hidden, unflagged neighbor of a satisfied number.

        A number is satisfied when flagged neighbors plus revealed
        mine-like neighbors equal its value.
        """
        tile = self.board.tile_at(x, y)
        result = RevealResult()
        if self.level_over or not tile.revealed or tile.kind != TileKind.NUMBER:
            return result
        neighbors = self.board.neighbors(tile)
        marked = sum(1 for n in neighbors if n.flagged or (n.revealed and n.is_mine_like))
        if marked != tile.number:
            return result
        for n in neighbors:
            if self.level_over:
                break
            self._reveal_tile(n, True, result)
        self._finish(result)
        return result

    def commit_transform(self, tile: Tile) -> bool:
        """Apply a pending display transform. Returns False if none was pending."""
        if tile.pending_transform is None:
            return False
        tile.display = tile.pending_transform
        tile.pending_transform = None
        tile.math_masked = False
        tile.random_masked = False
        return True

    def commit_pending_transforms(self) -> int:
        return sum(1 for t in self.board.tiles if self.commit_transform(t))

    # =========================================================================
    # Resources (called by effect handlers through EffectContext)
    # =========================================================================

    def credit_gold(self, amount: int, source: str, result: RevealResult) -> None:
        """Add gold without firing gold-gain triggers."""
        if amount <= 0:
            return
        self.run.gold += amount
        result.gold_delta += amount
        self.bus.emit(GameEvent.GOLD_GAINED, GoldGained(amount, source))

    def gain_gold(self, amount: int, source: str, result: RevealResult) -> None:
        if amount <= 0:
            return
        self.credit_gold(amount, source, result)
        execute_relic_triggers(TriggerHook.ON_GOLD_GAINED.value, self, result,
                               trigger_data={"amount": amount, "source": source})
        stacks = self.run.effects.donation_box_stacks
        if stacks > 0 and not self.level_over:
            self._donation_queue += stacks

    def lose_gold(self, amount: int, source: str, result: RevealResult,
                  spending: bool = False) -> None:
        """Deduct gold (may go negative). ATM Fee adds 1 to every loss."""
        if amount <= 0:
            return
        total = amount + (1 if self.run.effects.atm_fee else 0)
        self.run.gold -= total
        result.gold_delta -= total
        self.bus.emit(GameEvent.GOLD_GAINED, GoldGained(-total, source))
        execute_relic_triggers(TriggerHook.ON_GOLD_LOST.value, self, result,
                               trigger_data={"amount": total, "source": source,
                                             "spending": spending})

    def lose_life(self, source: str, result: RevealResult) -> None:
        """
        Take one hit.

        Billionaire pays 5 gold instead when it is affordable and the hit
        would not take the last life; the payment is a gold loss, so ATM Fee
        still applies on top.
        """
        run = self.run
        if (run.has_relic(RelicId.BILLIONAIRE) and run.lives > 1
                and run.gold >= BILLIONAIRE_COST):
            self.lose_gold(BILLIONAIRE_COST, "Billionaire", result, spending=True)
            return
        before = run.lives
        run.lives = max(0, run.lives - 1)
        result.life_delta += run.lives - before
        logger.debug("Life lost to %s (%d -> %d)", source, before, run.lives)

    def gain_lives(self, count: int, source: str, result: RevealResult) -> None:
        if count <= 0:
            return
        self.run.lives += count
        result.life_delta += count
        logger.debug("Gained %d lives from %s", count, source)

    def collect_resource(self, resource: TransformKind, source: str, result: RevealResult,
                         rng: Random, tile: Optional[Tile] = None,
                         upgradable: bool = True) -> TransformKind:
        """
        Grant gold for a resource in fixed order:
        upgrade roll, gold (unless Snake Oil), Blood Diamond life cost,
        Appraisal life cost (quartz only).
        """
        effects = self.run.effects
        original = resource
        if upgradable and resource in (TransformKind.ORE, TransformKind.QUARTZ):
            for _ in range(self.run.relic_stacks(RelicId.INVESTOR)):
                if rng.random() < INVESTOR_CHANCE:
                    resource = TransformKind.DIAMOND
                    break
            if resource != original and tile is not None:
                tile.pending_transform = resource
        low, high = RESOURCE_GOLD[resource]
        amount = rng.random_int(low, high)
        if not effects.snake_oil:
            self.gain_gold(amount, source if resource == original else "InvestorDiamond", result)
        if effects.blood_diamond:
            self.lose_life("BloodDiamond", result)
        if effects.appraisal and original == TransformKind.QUARTZ:
            self.lose_life("Appraisal", result)
        return resource

    # =========================================================================
    # Board helpers (called by effect handlers)
    # =========================================================================

    def reveal_nested(self, tile: Tile, result: RevealResult) -> None:
        """Reveal as part of a running cascade (not player initiated)."""
        if self.level_over:
            return
        self._reveal_tile(tile, False, result)

    def flag_tile(self, tile: Tile, color: FlagColor) -> bool:
        """Place a flag. Returns False if the tile was already flagged or revealed."""
        if tile.flagged or tile.revealed:
            return False
        tile.flagged = True
        tile.flag_color = color
        if tile.kind == TileKind.MINE:
            stats = self.run.stats
            stats.mines_remaining = max(0, stats.mines_remaining - 1)
        return True

    def _unflag(self, tile: Tile) -> None:
        tile.flagged = False
        tile.flag_color = None
        if tile.kind == TileKind.MINE:
            stats = self.run.stats
            stats.mines_remaining = min(stats.mines_total, stats.mines_remaining + 1)

    def steal_relic(self, rng: Random) -> Optional[RelicId]:
        """Remove one stack of a random owned collectible."""
        owned = [rid for rid in RelicId if self.run.relic_stacks(rid) > 0]
        if not owned:
            return None
        stolen = rng.choice(owned)
        self.run.remove_relic(stolen)
        return stolen

    def emit_board_changed(self, reason: str) -> None:
        self.bus.emit(GameEvent.BOARD_CHANGED, BoardChanged(reason))

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _reveal_tile(self, tile: Tile, by_player: bool, result: RevealResult) -> None:
        if tile.revealed or tile.flagged:
            return
        rng = self.rng_for_tile(tile)
        if tile.is_special and self.run.effects.car_loan:
            self.lose_gold(1, "CarLoan", result)
        self._kind_handlers[tile.kind](tile, by_player, result, rng)

    def _open(self, tile: Tile, result: RevealResult) -> None:
        tile.revealed = True
        self.run.stats.revealed_count += 1
        result.revealed.append(tile)

    def _announce(self, tile: Tile, result: RevealResult, rng: Optional[Random]) -> None:
        self.bus.emit(GameEvent.TILE_REVEALED, TileRevealed(tile))
        execute_relic_triggers(TriggerHook.ON_TILE_REVEALED.value, self, result,
                               tile=tile, rng=rng)

    # =========================================================================
    # Per-kind handlers
    # =========================================================================

    def _reveal_mine(self, tile: Tile, by_player: bool, result: RevealResult, rng: Random) -> None:
        run = self.run
        self._open(tile, result)
        run.stats.mines_remaining = max(0, run.stats.mines_remaining - 1)

        # Optimist is consumed before any Gambler roll
        if run.has_relic(RelicId.OPTIMIST) and not run.effects.optimist_used:
            run.effects.optimist_used = True
            tile.pending_transform = TransformKind.QUARTZ
            execute_relic_triggers(TriggerHook.ON_MINE_REVEALED.value, self, result,
                                   tile=tile, rng=rng)
            self.gain_gold(1, "OptimistQuartz", result)
            self._announce(tile, result, rng)
            return

        prevented = False
        for _ in range(run.relic_stacks(RelicId.GAMBLER)):
            if rng.random() < GAMBLER_CHANCE:
                prevented = True
                break
        execute_relic_triggers(TriggerHook.ON_MINE_REVEALED.value, self, result,
                               tile=tile, rng=rng)
        if not prevented:
            self.lose_life("Mine", result)
        self._announce(tile, result, rng)

    def _reveal_ore(self, tile: Tile, by_player: bool, result: RevealResult, rng: Random) -> None:
        self._open(tile, result)
        stats = self.run.stats
        stats.ore_remaining = max(0, stats.ore_remaining - 1)
        self.collect_resource(TransformKind.ORE, "Ore", result, rng, tile=tile)
        self._announce(tile, result, rng)

    def _reveal_exit(self, tile: Tile, by_player: bool, result: RevealResult, rng: Random) -> None:
        # First reveal only uncovers the exit; using it takes a second click
        self._open(tile, result)
        stats = self.run.stats
        stats.exits_remaining = max(0, stats.exits_remaining - 1)
        self._announce(tile, result, rng)

    def _reveal_special(self, tile: Tile, by_player: bool, result: RevealResult, rng: Random) -> None:
        self._open(tile, result)
        stats = self.run.stats
        effects = self.run.effects
        if tile.kind == TileKind.SHOP:
            stats.shop_remaining = max(0, stats.shop_remaining - 1)
            stats.shop_counts[tile.sub_id] = max(0, stats.shop_counts.get(tile.sub_id, 0) - 1)
        else:
            stats.challenge_remaining = max(0, stats.challenge_remaining - 1)
            stats.challenge_counts[tile.sub_id] = max(0, stats.challenge_counts.get(tile.sub_id, 0) - 1)
        stats.special_revealed += 1

        if effects.scratchcard_stacks > 0:
            self.gain_gold(effects.scratchcard_stacks, "Scratchcard", result)

        if tile.kind == TileKind.SHOP:
            execute_shop_tile_effect(self, tile, result, rng)
        else:
            execute_challenge_effect(self, tile, result, rng)
            execute_relic_triggers(TriggerHook.ON_CHALLENGE_REVEALED.value, self, result,
                                   tile=tile, rng=rng)
        self._announce(tile, result, rng)

    def _reveal_number(self, tile: Tile, by_player: bool, result: RevealResult, rng: Random) -> None:
        effects = self.run.effects
        self._open(tile, result)
        execute_relic_triggers(TriggerHook.ON_NUMBER_REVEALED.value, self, result,
                               tile=tile, rng=rng)

        if effects.snake_venom and tile.number >= SNAKE_VENOM_MIN_NUMBER:
            if rng.random() < SNAKE_VENOM_CHANCE:
                self.lose_life("SnakeVenom", result)

        # Math Test only masks numbers revealed after it fired
        if effects.math_test and tile.number > 1:
            tile.math_masked = True
        mask_chance = max(0.0, RANDOM_MASK_CHANCE - CHEAT_SHEET_REDUCTION * effects.cheat_sheet_stacks)
        if rng.random() < mask_chance:
            tile.random_masked = True

        if tile.is_masked:
            self._upgrade_masked_number(tile, result, rng)
        self._announce(tile, result, rng)

    def _upgrade_masked_number(self, tile: Tile, result: RevealResult, rng: Random) -> None:
        """Lucky Penny, then Tarot Card, may turn a '?' into a resource."""
        effects = self.run.effects
        for _ in range(effects.lucky_penny_stacks):
            if rng.random() < LUCKY_PENNY_CHANCE:
                tile.pending_transform = TransformKind.QUARTZ
                self.collect_resource(TransformKind.QUARTZ, "LuckyPennyQuartz", result, rng,
                                      upgradable=False)
                break
        if tile.pending_transform is None and effects.tarot_card:
            if rng.random() < TAROT_CHANCE:
                pick = TAROT_PICKS[rng.random_index(len(TAROT_PICKS))]
                tile.pending_transform = pick
                self.collect_resource(pick, f"Tarot{pick.value}", result, rng, upgradable=False)

    def _reveal_safe(self, tile: Tile, by_player: bool, result: RevealResult, rng: Random) -> None:
        """Flood fill the connected empty region and its number border."""
        visited = {self.board.index_of(tile)}
        stack = [tile]
        while stack:
            current = stack.pop()
            if current.revealed or current.flagged:
                continue
            self._open(current, result)
            self._announce(current, result, None)
            for n in self.board.neighbors(current):
                idx = self.board.index_of(n)
                if idx in visited or n.revealed or n.flagged:
                    continue
                if n.kind == TileKind.SAFE:
                    visited.add(idx)
                    stack.append(n)
                elif n.kind == TileKind.NUMBER:
                    visited.add(idx)
                    self._reveal_tile(n, False, result)

    # =========================================================================
    # Level end
    # =========================================================================

    def _use_exit(self, result: RevealResult) -> None:
        locked = self.board.find(lambda t: t.is_challenge(ChallengeId.KEY) and not t.revealed)
        if locked is not None:
            result.exit_locked = True
            logger.debug("Exit locked by key at (%d, %d)", locked.x, locked.y)
            return
        self.bus.emit(GameEvent.LEVEL_END_TRIGGERED, LevelEndTriggered("exit"))
        result.ended_level = True
        resolve_level(self, result, survived=True)

    def _end_level_lost(self, result: RevealResult) -> None:
        self.bus.emit(GameEvent.LEVEL_END_TRIGGERED, LevelEndTriggered("lives"))
        result.ended_level = True
        resolve_level(self, result, survived=False)

    def _drain_donations(self, result: RevealResult) -> None:
        """Reveal one random hidden tile per queued Donation Box trigger."""
        while self._donation_queue > 0:
            if self.level_over or self.run.lives <= 0:
                self._donation_queue = 0
                break
            self._donation_queue -= 1
            candidates = self.board.filter(lambda t: not t.revealed and not t.flagged)
            if not candidates:
                self._donation_queue = 0
                break
            rng = self.rng_for_effect("DonationBox", self.run.stats.revealed_count)
            self._reveal_tile(rng.choice(candidates), False, result)

    def _finish(self, result: RevealResult) -> None:
        """Post-reveal bookkeeping shared by every entry point."""
        nine_to_five_paid = 0
        while True:
            self._drain_donations(result)
            lost = max(0, -result.life_delta)
            stacks = self.run.effects.nine_to_five_stacks
            if stacks > 0 and lost > nine_to_five_paid:
                self.gain_gold(NINE_TO_FIVE_GOLD * stacks * (lost - nine_to_five_paid),
                               "NineToFive", result)
                nine_to_five_paid = lost
                continue
            break

        if not self.level_over and self.run.lives <= 0:
            self._end_level_lost(result)

        if result.life_delta != 0:
            self.bus.emit(GameEvent.LIFE_CHANGED, LifeChanged(result.life_delta))

        if self.auto_commit:
            for tile in result.revealed:
                self.commit_transform(tile)

"""
Minez - Level Generation

Builds a fully-populated Board for the current level of a run. Every draw
comes from the level stream (seed + level), in a fixed order:

1. Empty grid, all cells HIDDEN
2. Counts: one exit, mines from a seeded density band (minus Diffuser),
   ore from a baseline (plus Entrepreneur)
3. Exit, mines, ore by sampling without replacement from a shared pool
4. Drafted challenges: each owned id at least once (up to the level cap),
   then weighted extra copies
5. Owned shop tiles: guarantee roll, per-stack rolls, forced 1 Up
6. Remaining cells become SAFE / NUMBER
7. Compass arrows frozen toward the nearest exit
8. Level stats written back, per-level effects reset

Special tiles prefer cells that already touch 2+ mines, so their location
is not given away by an isolated number.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..content.challenges import EXCLUDED, ChallengeId, spawn_weight
from ..content.levels import get_level_spec
from ..content.relics import RelicId
from ..content.shop_tiles import GUARANTEED_SHOP_TILE, MAX_COPIES_PER_BOARD, ShopTileId
from ..state.board import Board, Direction, SubId, Tile, TileKind, assign_numbers
from ..state.rng import Random, level_rng
from ..state.run import RunState

logger = logging.getLogger(__name__)


@dataclass
class GenerationConfig:
    """Configuration for level generation."""
    # Mine density band (fraction of non-exit cells)
    mine_density_min: float = 0.16
    mine_density_max: float = 0.20
    mines_removed_per_diffuser: int = 5

    ore_baseline: int = 3

    # Fixed per-level table instead of the density band
    use_level_specs: bool = False

    # Challenges: cap = base + level // levels_per_step
    challenge_cap_base: int = 4
    challenge_cap_levels_per_step: int = 2
    challenge_extra_spawn_chance: float = 0.5

    # Shop tiles
    shop_guarantee_chance: float = 0.8
    shop_base_spawn_chance: float = 0.505
    accountant_bonus_per_stack: float = 0.01
    accountant_bonus_cap: float = 0.4
    shop_spawn_chance_cap: float = 0.95

    # Special-tile placement bias
    placement_bias_min_mines: int = 2

    def challenge_cap(self, level: int) -> int:
        return self.challenge_cap_base + level // self.challenge_cap_levels_per_step

    def shop_spawn_chance(self, accountant_stacks: int) -> float:
        bonus = min(self.accountant_bonus_cap, self.accountant_bonus_per_stack * accountant_stacks)
        return min(self.shop_spawn_chance_cap, self.shop_base_spawn_chance + bonus)


class LevelGenerator:
    """
    Generates one level's board from the run state.

    Usage:
        generator = LevelGenerator(run, config)
        board = generator.generate(width, height)
    """

    def __init__(self, run: RunState, config: Optional[GenerationConfig] = None):
        self.run = run
        self.config = config or GenerationConfig()
        self.rng: Random = level_rng(run.seed, run.level)

    def generate(self, width: int, height: int) -> Board:
        """
        Generate a board. Also resets the run's per-level effects and stats.

        Raises:
            ValueError: non-positive width or height
        """
        board = Board.empty(width, height)
        pool = list(range(board.size))

        mines, ore = self._compute_counts(board.size)

        self._place(board, pool, TileKind.EXIT, 1)
        mines = self._place(board, pool, TileKind.MINE, mines)
        ore = self._place(board, pool, TileKind.ORE, ore)

        challenge_counts = self._place_challenges(board, pool)
        shop_counts = self._place_shop_tiles(board, pool)

        assign_numbers(board)
        self._assign_compass(board)

        self._write_stats(board)
        logger.debug(
            "Level %d (%dx%d): %d mines, %d ore, %d challenges, %d shop tiles",
            self.run.level, width, height, mines, ore,
            sum(challenge_counts.values()), sum(shop_counts.values()),
        )
        return board

    # =========================================================================
    # Counts
    # =========================================================================

    def _compute_counts(self, cells: int) -> Tuple[int, int]:
        """Mine and ore targets before capacity clamps."""
        config = self.config
        run = self.run
        if config.use_level_specs:
            spec = get_level_spec(run.level)
            mines = spec.scaled_mines
            ore = spec.ore
        else:
            density = config.mine_density_min + self.rng.random() * (
                config.mine_density_max - config.mine_density_min)
            mines = int((cells - 1) * density)
            ore = config.ore_baseline

        mines -= config.mines_removed_per_diffuser * run.relic_stacks(RelicId.DIFFUSER)
        clamped = max(1, min(mines, cells - 1))
        if clamped != mines:
            logger.debug("Mine count clamped from %d to %d", mines, clamped)
        ore += run.relic_stacks(RelicId.ENTREPRENEUR)
        return clamped, ore

    # =========================================================================
    # Placement primitives
    # =========================================================================

    def _take(self, pool: List[int]) -> int:
        return pool.pop(self.rng.random_index(len(pool)))

    def _take_biased(self, board: Board, pool: List[int]) -> int:
        """Prefer a cell touching enough real mines, else uniform."""
        threshold = self.config.placement_bias_min_mines
        biased = [
            idx for idx in pool
            if sum(1 for n in board.neighbor_indices(idx)
                   if board.tiles[n].kind == TileKind.MINE) >= threshold
        ]
        if not biased:
            return self._take(pool)
        idx = self.rng.choice(biased)
        pool.remove(idx)
        return idx

    def _place(self, board: Board, pool: List[int], kind: TileKind, count: int) -> int:
        """Place up to `count` tiles of a kind. Returns how many fit."""
        placed = 0
        for _ in range(count):
            if not pool:
                logger.debug("Out of capacity placing %s (%d/%d)", kind.value, placed, count)
                break
            board.tiles[self._take(pool)].kind = kind
            placed += 1
        return placed

    def _place_special(self, board: Board, pool: List[int], kind: TileKind,
                       sub_id: SubId, counts: Dict) -> None:
        tile = board.tiles[self._take_biased(board, pool)]
        tile.kind = kind
        tile.sub_id = sub_id
        counts[sub_id] = counts.get(sub_id, 0) + 1

    # =========================================================================
    # Challenges
    # =========================================================================

    def _place_challenges(self, board: Board, pool: List[int]) -> Dict[ChallengeId, int]:
        """
        Place challenge tiles, never more than the level's cap.

        Drafted ids come first. In fixed-tuning mode the level table's
        challenges (Coal included, since it is never drafted) fill whatever
        capacity the drafted ones leave.
        """
        run = self.run
        counts: Dict[ChallengeId, int] = {}
        cap = self.config.challenge_cap(run.level)

        owned = [cid for cid in ChallengeId
                 if run.challenge_stacks(cid) > 0 and cid not in EXCLUDED]

        # Guarantee: every drafted id at least once
        placed = 0
        for cid in owned:
            if placed >= cap or not pool:
                break
            self._place_special(board, pool, TileKind.CHALLENGE, cid, counts)
            placed += 1

        # Extra copies weighted by band target x stacks
        if owned:
            weights = [spawn_weight(cid, run.challenge_stacks(cid)) for cid in owned]
            for _ in range(cap - placed):
                if not pool:
                    break
                if self.rng.random() < self.config.challenge_extra_spawn_chance:
                    cid = self.rng.weighted_choice(owned, weights)
                    self._place_special(board, pool, TileKind.CHALLENGE, cid, counts)

        if self.config.use_level_specs:
            spec = get_level_spec(run.level)
            for cid, n in (spec.challenges or {}).items():
                for _ in range(n):
                    if not pool or sum(counts.values()) >= cap:
                        break
                    self._place_special(board, pool, TileKind.CHALLENGE, cid, counts)
        return counts

    # =========================================================================
    # Shop tiles
    # =========================================================================

    def _place_shop_tiles(self, board: Board, pool: List[int]) -> Dict[ShopTileId, int]:
        run = self.run
        config = self.config
        counts: Dict[ShopTileId, int] = {}
        chance = config.shop_spawn_chance(run.relic_stacks(RelicId.ACCOUNTANT))

        for tid in ShopTileId:
            stacks = run.shop_tile_stacks(tid)
            if stacks <= 0:
                continue
            limit = min(stacks, MAX_COPIES_PER_BOARD.get(tid, stacks))
            placed = 0
            if pool and self.rng.random() < config.shop_guarantee_chance:
                self._place_special(board, pool, TileKind.SHOP, tid, counts)
                placed += 1
            for _ in range(limit - placed):
                if not pool:
                    break
                if self.rng.random() < chance:
                    self._place_special(board, pool, TileKind.SHOP, tid, counts)

        if counts.get(GUARANTEED_SHOP_TILE, 0) == 0:
            if pool:
                self._place_special(board, pool, TileKind.SHOP, GUARANTEED_SHOP_TILE, counts)
            else:
                logger.debug("No room to force-place %s", GUARANTEED_SHOP_TILE.value)
        return counts

    # =========================================================================
    # Decorations and stats
    # =========================================================================

    def _assign_compass(self, board: Board) -> None:
        exits = board.tiles_of_kind(TileKind.EXIT)
        if not exits:
            return
        for tile in board.tiles_of_kind(TileKind.SHOP, ShopTileId.COMPASS):
            tile.compass_dir = compass_direction(tile, exits)

    def _write_stats(self, board: Board) -> None:
        write_level_stats(self.run, board)


def compass_direction(tile: Tile, exits: List[Tile]) -> Direction:
    """Arrow toward the Manhattan-nearest exit; vertical wins when |dx| == |dy|."""
    target = min(exits, key=lambda e: abs(e.x - tile.x) + abs(e.y - tile.y))
    dx = target.x - tile.x
    dy = target.y - tile.y
    if abs(dx) > abs(dy):
        return Direction.RIGHT if dx > 0 else Direction.LEFT
    return Direction.DOWN if dy > 0 else Direction.UP


def generate_level(run: RunState, width: int, height: int,
                   config: Optional[GenerationConfig] = None) -> Board:
    """Generate the board for run.level."""
    return LevelGenerator(run, config).generate(width, height)


def write_level_stats(run: RunState, board: Board) -> None:
    """Reset per-level effects and stats, then count what the board holds."""
    run.reset_level_state()
    stats = run.stats
    stats.mines_total = stats.mines_remaining = board.count(TileKind.MINE)
    stats.ore_total = stats.ore_remaining = board.count(TileKind.ORE)
    stats.exits_remaining = board.count(TileKind.EXIT)
    for tile in board.tiles:
        if tile.kind == TileKind.SHOP:
            stats.shop_counts[tile.sub_id] = stats.shop_counts.get(tile.sub_id, 0) + 1
        elif tile.kind == TileKind.CHALLENGE:
            stats.challenge_counts[tile.sub_id] = stats.challenge_counts.get(tile.sub_id, 0) + 1
    stats.shop_remaining = sum(stats.shop_counts.values())
    stats.challenge_remaining = sum(stats.challenge_counts.values())

"""
Tests for level generation.

Covers determinism, count clamps, challenge and shop-tile placement rules,
adjacency numbers, compass arrows and the per-level reset.
"""

import pytest

from packages.minez.content.challenges import ChallengeId
from packages.minez.content.relics import RelicId
from packages.minez.content.shop_tiles import ShopTileId
from packages.minez.generation.level import (
    GenerationConfig,
    compass_direction,
    generate_level,
)
from packages.minez.state.board import (
    Board,
    Direction,
    Tile,
    TileKind,
    count_adjacent_mines,
)
from packages.minez.state.run import create_run


def _layout(board: Board):
    return [(t.kind, t.sub_id, t.number) for t in board.tiles]


# =============================================================================
# Determinism
# =============================================================================


class TestDeterminism:
    """Same seed, level and owned items give the same board."""

    def test_same_seed_same_board(self):
        a = generate_level(create_run(seed=777), 8, 8)
        b = generate_level(create_run(seed=777), 8, 8)
        assert _layout(a) == _layout(b)

    def test_owned_items_included(self):
        def build():
            run = create_run(seed=31337)
            run.add_challenge(ChallengeId.MATH_TEST)
            run.add_shop_tile(ShopTileId.PICKAXE, 3)
            run.add_relic(RelicId.ACCOUNTANT)
            return generate_level(run, 9, 9)
        assert _layout(build()) == _layout(build())

    def test_different_levels_differ(self):
        run = create_run(seed=5)
        a = generate_level(run, 10, 10)
        run.level = 2
        b = generate_level(run, 10, 10)
        assert _layout(a) != _layout(b)


# =============================================================================
# Counts and clamps
# =============================================================================


class TestCounts:
    """Exit, mine and ore counts."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 42, 1000, 99999])
    def test_exactly_one_exit(self, seed):
        board = generate_level(create_run(seed=seed), 7, 7)
        assert board.count(TileKind.EXIT) == 1

    @pytest.mark.parametrize("seed", [1, 2, 3, 42, 1000, 99999])
    def test_mine_density_band(self, seed):
        board = generate_level(create_run(seed=seed), 10, 10)
        # floor(99 * 0.16) .. floor(99 * 0.20)
        assert 15 <= board.count(TileKind.MINE) <= 19

    def test_diffuser_reduces_mines(self):
        plain = generate_level(create_run(seed=8), 10, 10).count(TileKind.MINE)
        run = create_run(seed=8)
        run.add_relic(RelicId.DIFFUSER)
        reduced = generate_level(run, 10, 10).count(TileKind.MINE)
        assert reduced == plain - 5

    def test_diffuser_never_below_one_mine(self):
        run = create_run(seed=8)
        run.add_relic(RelicId.DIFFUSER, 20)
        board = generate_level(run, 5, 5)
        assert board.count(TileKind.MINE) == 1

    def test_ore_baseline_plus_entrepreneur(self):
        run = create_run(seed=8)
        assert generate_level(run, 10, 10).count(TileKind.ORE) == 3
        run.add_relic(RelicId.ENTREPRENEUR, 2)
        assert generate_level(run, 10, 10).count(TileKind.ORE) == 5

    def test_tiny_board_respects_capacity(self):
        run = create_run(seed=3)
        run.add_shop_tile(ShopTileId.PICKAXE, 5)
        board = generate_level(run, 2, 1)
        assert board.count(TileKind.EXIT) == 1
        assert board.count(TileKind.MINE) == 1
        assert board.count(TileKind.SHOP) == 0

    def test_single_cell_board(self):
        board = generate_level(create_run(seed=3), 1, 1)
        assert board.tiles[0].kind == TileKind.EXIT

    def test_no_hidden_tiles_remain(self):
        board = generate_level(create_run(seed=12), 9, 9)
        assert not board.tiles_of_kind(TileKind.HIDDEN)

    def test_numbers_match_adjacency(self):
        run = create_run(seed=4242)
        run.add_challenge(ChallengeId.CLOVER2, 3)
        board = generate_level(run, 10, 10)
        for tile in board:
            if tile.kind in (TileKind.NUMBER, TileKind.SAFE):
                assert tile.number == count_adjacent_mines(board, tile)
                assert (tile.kind == TileKind.SAFE) == (tile.number == 0)

    def test_invalid_size_raises(self):
        with pytest.raises(ValueError):
            generate_level(create_run(seed=1), 0, 4)

    def test_level_spec_mode(self):
        run = create_run(seed=1)
        board = generate_level(run, 12, 12, GenerationConfig(use_level_specs=True))
        assert board.count(TileKind.MINE) == 27  # floor(37 * 0.75)
        assert board.count(TileKind.CHALLENGE, ChallengeId.AUTO_GRAT) == 3
        assert board.count(TileKind.CHALLENGE, ChallengeId.COAL) == 1

    def test_level_spec_challenges_share_cap(self):
        run = create_run(seed=1)
        run.add_challenge(ChallengeId.MATH_TEST)
        run.add_challenge(ChallengeId.KEY)
        board = generate_level(run, 12, 12, GenerationConfig(use_level_specs=True))
        assert board.count(TileKind.CHALLENGE) == GenerationConfig().challenge_cap(1)
        assert board.count(TileKind.CHALLENGE, ChallengeId.MATH_TEST) >= 1
        assert board.count(TileKind.CHALLENGE, ChallengeId.KEY) >= 1


# =============================================================================
# Challenges
# =============================================================================


class TestChallengePlacement:
    """Drafted challenges: guarantee, cap, exclusion."""

    @pytest.mark.parametrize("seed", [10, 20, 30, 40])
    def test_every_owned_challenge_appears(self, seed):
        run = create_run(seed=seed)
        owned = [ChallengeId.MATH_TEST, ChallengeId.AUTO_GRAT, ChallengeId.KEY]
        for cid in owned:
            run.add_challenge(cid)
        board = generate_level(run, 10, 10)
        for cid in owned:
            assert board.count(TileKind.CHALLENGE, cid) >= 1

    @pytest.mark.parametrize("level", [1, 2, 5, 10, 16])
    def test_total_respects_cap(self, level):
        run = create_run(seed=level * 17)
        run.level = level
        for cid in (ChallengeId.AUTO_GRAT, ChallengeId.BAD_DEAL, ChallengeId.JACKHAMMER):
            run.add_challenge(cid, 4)
        board = generate_level(run, 14, 14)
        cap = GenerationConfig().challenge_cap(level)
        assert 3 <= board.count(TileKind.CHALLENGE) <= cap

    def test_guarantee_bounded_by_cap(self):
        run = create_run(seed=2)
        drafted = [ChallengeId.AUTO_GRAT, ChallengeId.BAD_DEAL, ChallengeId.MATH_TEST,
                   ChallengeId.SNAKE_OIL, ChallengeId.KEY, ChallengeId.THIEF]
        for cid in drafted:
            run.add_challenge(cid)
        board = generate_level(run, 12, 12)
        assert board.count(TileKind.CHALLENGE) == GenerationConfig().challenge_cap(1)

    def test_coal_never_placed_from_draft(self):
        run = create_run(seed=6)
        run.add_challenge(ChallengeId.COAL, 5)
        board = generate_level(run, 10, 10)
        assert board.count(TileKind.CHALLENGE, ChallengeId.COAL) == 0

    def test_no_challenges_without_draft(self):
        board = generate_level(create_run(seed=6), 10, 10)
        assert board.count(TileKind.CHALLENGE) == 0


# =============================================================================
# Shop tiles
# =============================================================================


class TestShopPlacement:
    """Owned shop tiles, copy limits and the forced 1 Up."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_one_up_always_present(self, seed):
        board = generate_level(create_run(seed=seed), 6, 6)
        assert board.count(TileKind.SHOP, ShopTileId.ONE_UP) >= 1

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5, 6, 7, 8])
    def test_poker_chip_max_one(self, seed):
        run = create_run(seed=seed)
        run.add_shop_tile(ShopTileId.POKER_CHIP, 6)
        board = generate_level(run, 12, 12)
        assert board.count(TileKind.SHOP, ShopTileId.POKER_CHIP) <= 1

    def test_copies_never_exceed_stacks(self):
        run = create_run(seed=77)
        run.add_shop_tile(ShopTileId.PICKAXE, 2)
        board = generate_level(run, 12, 12)
        assert board.count(TileKind.SHOP, ShopTileId.PICKAXE) <= 2

    def test_certain_spawns(self):
        run = create_run(seed=77)
        run.add_shop_tile(ShopTileId.QUARTZ, 4)
        config = GenerationConfig(shop_guarantee_chance=1.0, shop_base_spawn_chance=1.0,
                                  shop_spawn_chance_cap=1.0)
        board = generate_level(run, 12, 12, config)
        assert board.count(TileKind.SHOP, ShopTileId.QUARTZ) == 4

    def test_accountant_raises_chance_with_cap(self):
        config = GenerationConfig()
        assert config.shop_spawn_chance(0) == pytest.approx(0.505)
        assert config.shop_spawn_chance(10) == pytest.approx(0.605)
        assert config.shop_spawn_chance(100) == pytest.approx(0.905)
        tight = GenerationConfig(shop_spawn_chance_cap=0.6)
        assert tight.shop_spawn_chance(50) == pytest.approx(0.6)

    def test_compass_frozen_toward_exit(self):
        found = False
        for seed in range(1, 30):
            run = create_run(seed=seed)
            run.add_shop_tile(ShopTileId.COMPASS, 3)
            board = generate_level(run, 10, 10)
            exits = board.tiles_of_kind(TileKind.EXIT)
            for tile in board.tiles_of_kind(TileKind.SHOP, ShopTileId.COMPASS):
                found = True
                assert tile.compass_dir == compass_direction(tile, exits)
        assert found


class TestCompassDirection:
    """Manhattan-nearest exit, vertical wins ties."""

    def test_horizontal(self):
        assert compass_direction(Tile(0, 0), [Tile(5, 1)]) == Direction.RIGHT
        assert compass_direction(Tile(5, 1), [Tile(0, 0)]) == Direction.LEFT

    def test_vertical(self):
        assert compass_direction(Tile(2, 0), [Tile(3, 6)]) == Direction.DOWN
        assert compass_direction(Tile(3, 6), [Tile(2, 0)]) == Direction.UP

    def test_diagonal_tie_goes_vertical(self):
        assert compass_direction(Tile(0, 0), [Tile(3, 3)]) == Direction.DOWN

    def test_nearest_exit_wins(self):
        exits = [Tile(9, 0), Tile(0, 2)]
        assert compass_direction(Tile(0, 0), exits) == Direction.DOWN


# =============================================================================
# Per-level reset
# =============================================================================


class TestLevelReset:
    """Generation installs fresh effects and writes stats."""

    def test_effects_reset(self, run):
        run.effects.snake_oil = True
        run.effects.car_loan = True
        run.effects.scratchcard_stacks = 4
        run.effects.optimist_used = True
        generate_level(run, 6, 6)
        assert not run.effects.snake_oil
        assert not run.effects.car_loan
        assert run.effects.scratchcard_stacks == 0
        assert not run.effects.optimist_used

    def test_stats_written(self, run):
        run.add_challenge(ChallengeId.AUTO_GRAT)
        board = generate_level(run, 8, 8)
        stats = run.stats
        assert stats.mines_total == stats.mines_remaining == board.count(TileKind.MINE)
        assert stats.ore_total == stats.ore_remaining == board.count(TileKind.ORE)
        assert stats.exits_remaining == 1
        assert stats.challenge_counts[ChallengeId.AUTO_GRAT] == board.count(
            TileKind.CHALLENGE, ChallengeId.AUTO_GRAT)
        assert stats.shop_remaining == board.count(TileKind.SHOP)
        assert stats.revealed_count == 0

    def test_owned_items_survive(self, run):
        run.add_relic(RelicId.GAMBLER, 2)
        run.add_shop_tile(ShopTileId.PICKAXE)
        generate_level(run, 6, 6)
        assert run.relic_stacks(RelicId.GAMBLER) == 2
        assert run.shop_tile_stacks(ShopTileId.PICKAXE) == 1

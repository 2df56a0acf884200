"""
Collectible trigger tests.

Organized by hook:
1. levelStart checklist (order and each entry)
2. levelEnd checklist (survived levels only)
3. Reveal hooks
4. Gold hooks
"""

import pytest

from conftest import make_engine
from packages.minez.content.challenges import ChallengeId
from packages.minez.content.relics import RelicId
from packages.minez.content.shop_tiles import ShopTileId
from packages.minez.registry import RELIC_REGISTRY, TriggerHook
from packages.minez.state.board import FlagColor, TileKind


OPEN_BOARD = [
    "X..",
    "...",
    "..*",
]


def finish_level(engine):
    engine.reveal(*_exit_pos(engine), by_player=True)
    return engine.reveal(*_exit_pos(engine), by_player=True)


def _exit_pos(engine):
    tile = engine.board.find(lambda t: t.kind == TileKind.EXIT)
    return tile.x, tile.y


# =============================================================================
# 1. levelStart
# =============================================================================


class TestLevelStartOrder:

    def test_checklist_order(self):
        order = [rid for rid, _ in RELIC_REGISTRY.get_handlers(TriggerHook.LEVEL_START.value)]
        assert order == [
            RelicId.PIONEER,
            RelicId.CHEAPSKATE,
            RelicId.DEBT_COLLECTOR,
            RelicId.FORTUNE_TELLER,
            RelicId.MATHEMATICIAN,
            RelicId.RESEARCHER,
        ]

    def test_only_owned_fire(self):
        handlers = RELIC_REGISTRY.get_handlers(TriggerHook.LEVEL_START.value, {RelicId.PIONEER})
        assert [rid for rid, _ in handlers] == [RelicId.PIONEER]

    def test_start_level_runs_once(self):
        engine = make_engine(OPEN_BOARD, gold=10)
        engine.run.add_relic(RelicId.CHEAPSKATE)
        engine.start_level()
        engine.start_level()
        assert engine.run.lives == 4


class TestLevelStartRelics:

    def test_pioneer_flags_a_mine(self):
        engine = make_engine(OPEN_BOARD)
        engine.run.add_relic(RelicId.PIONEER)
        engine.start_level()
        mine = engine.board.tile_at(2, 2)
        assert mine.flagged
        assert mine.flag_color == FlagColor.WHITE
        assert engine.run.stats.mines_remaining == 0

    def test_pioneer_falls_back_to_clover2(self):
        engine = make_engine(["!..", "...", "..X"], {(0, 0): ChallengeId.CLOVER2})
        engine.run.add_relic(RelicId.PIONEER)
        engine.start_level()
        assert engine.board.tile_at(0, 0).flagged

    def test_pioneer_skips_mega_mine(self):
        engine = make_engine(["!..", "...", "..X"], {(0, 0): ChallengeId.MEGA_MINE})
        engine.run.add_relic(RelicId.PIONEER)
        engine.start_level()
        assert not engine.board.tile_at(0, 0).flagged

    def test_pioneer_ignores_harmless_challenges(self):
        engine = make_engine(["!..", "...", "..X"], {(0, 0): ChallengeId.COAL})
        engine.run.add_relic(RelicId.PIONEER)
        engine.start_level()
        assert not engine.board.tile_at(0, 0).flagged

    @pytest.mark.parametrize("gold,stacks,lives", [(10, 1, 4), (10, 2, 5), (9, 1, 3)])
    def test_cheapskate(self, gold, stacks, lives):
        engine = make_engine(OPEN_BOARD, gold=gold)
        engine.run.add_relic(RelicId.CHEAPSKATE, stacks)
        result = engine.start_level()
        assert engine.run.lives == lives
        assert result.life_delta == lives - 3

    @pytest.mark.parametrize("gold,lives", [(-1, 4), (0, 3)])
    def test_debt_collector(self, gold, lives):
        engine = make_engine(OPEN_BOARD, gold=gold)
        engine.run.add_relic(RelicId.DEBT_COLLECTOR)
        engine.start_level()
        assert engine.run.lives == lives

    def test_fortune_teller_reveals_first_ore(self):
        engine = make_engine(["o.", "..", "oX"])
        engine.run.add_relic(RelicId.FORTUNE_TELLER)
        result = engine.start_level()
        assert engine.board.tile_at(0, 0).revealed
        assert not engine.board.tile_at(0, 2).revealed
        assert result.gold_delta == 5

    def test_mathematician_reveals_highest_number(self):
        engine = make_engine(["***", "...", "..X"])
        engine.run.add_relic(RelicId.MATHEMATICIAN)
        engine.start_level()
        revealed = [t for t in engine.board if t.revealed]
        assert [t.pos for t in revealed] == [(1, 1)]

    def test_mathematician_breaks_ties_on_its_stream(self):
        engine = make_engine(["*.*", "...", "..X"])
        engine.run.add_relic(RelicId.MATHEMATICIAN)
        engine.start_level()
        candidates = [engine.board.tile_at(1, 0), engine.board.tile_at(1, 1)]
        assert sum(1 for t in candidates if t.revealed) == 1
        # Tie-break does not consume the shared reveal stream
        assert engine.test_rng.counter == 1

    def test_researcher_yellow_flags_challenge(self):
        engine = make_engine(["!..", "...", "..X"], {(0, 0): ChallengeId.AUTO_GRAT})
        engine.run.add_relic(RelicId.RESEARCHER)
        engine.start_level()
        tile = engine.board.tile_at(0, 0)
        assert tile.flagged
        assert tile.flag_color == FlagColor.YELLOW

    def test_pioneer_runs_before_mathematician(self):
        engine = make_engine(["*..", "...", "..X"])
        engine.run.add_relic(RelicId.MATHEMATICIAN)
        engine.run.add_relic(RelicId.PIONEER)
        engine.start_level()
        assert engine.board.tile_at(0, 0).flagged
        assert engine.run.lives == 3


# =============================================================================
# 2. levelEnd
# =============================================================================


class TestLevelEndRelics:

    def test_checklist_order(self):
        order = [rid for rid, _ in RELIC_REGISTRY.get_handlers(TriggerHook.LEVEL_END.value)]
        assert order == [
            RelicId.RESURRECTOR,
            RelicId.MINIMALIST,
            RelicId.VEXILLOLOGIST,
            RelicId.CARTOGRAPHER,
        ]

    def test_resurrector_at_one_life(self):
        engine = make_engine(OPEN_BOARD, lives=1)
        engine.run.add_relic(RelicId.RESURRECTOR, 2)
        result = finish_level(engine)
        assert result.life_delta == 2
        assert engine.run.lives == 3

    def test_resurrector_needs_exactly_one(self):
        engine = make_engine(OPEN_BOARD, lives=2)
        engine.run.add_relic(RelicId.RESURRECTOR)
        assert finish_level(engine).life_delta == 0

    def test_minimalist(self):
        engine = make_engine(OPEN_BOARD)
        engine.run.add_relic(RelicId.MINIMALIST)
        assert finish_level(engine).gold_delta == 11

    def test_minimalist_blocked_by_special(self):
        engine = make_engine(["X!", ".."], {(1, 0): ChallengeId.COAL})
        engine.run.add_relic(RelicId.MINIMALIST)
        engine.reveal(1, 0)
        assert finish_level(engine).gold_delta == 5

    def test_vexillologist_perfect_flags(self):
        engine = make_engine(OPEN_BOARD)
        engine.run.add_relic(RelicId.VEXILLOLOGIST)
        engine.toggle_flag(2, 2)
        assert finish_level(engine).gold_delta == 10

    def test_vexillologist_wrong_flag(self):
        engine = make_engine(OPEN_BOARD)
        engine.run.add_relic(RelicId.VEXILLOLOGIST)
        engine.toggle_flag(2, 2)
        engine.toggle_flag(1, 0)
        assert finish_level(engine).gold_delta == 5

    def test_no_end_bonuses_on_loss(self):
        engine = make_engine(OPEN_BOARD, lives=1)
        engine.run.add_relic(RelicId.MINIMALIST)
        result = engine.reveal(2, 2)
        assert result.ended_level
        assert result.gold_delta == 0

    def test_finders_fee_keeps_collectible_bonuses(self):
        engine = make_engine(OPEN_BOARD)
        engine.run.add_relic(RelicId.MINIMALIST)
        engine.run.effects.no_end_gold = True
        assert finish_level(engine).gold_delta == 6


class TestCartographer:

    def test_pays_when_fourth_corner_opens(self):
        engine = make_engine(["...", "...", "..X"])
        engine.run.add_relic(RelicId.CARTOGRAPHER)
        engine.reveal(0, 0)
        assert not engine.run.effects.cartographer_awarded
        result = engine.reveal(2, 2, by_player=True)
        assert result.gold_delta == 5
        assert engine.run.effects.cartographer_awarded

    def test_pays_once_per_level(self):
        engine = make_engine(["...", "...", "..X"])
        engine.run.add_relic(RelicId.CARTOGRAPHER)
        engine.reveal(0, 0)
        engine.reveal(2, 2, by_player=True)
        result = engine.reveal(2, 2, by_player=True)
        assert result.ended_level
        assert result.gold_delta == 5
        assert engine.run.gold == 10

    def test_no_payout_with_hidden_corner(self):
        engine = make_engine(["*..", "...", "..X"])
        engine.run.add_relic(RelicId.CARTOGRAPHER)
        engine.reveal(2, 0)
        result = finish_level(engine)
        assert result.gold_delta == 5


# =============================================================================
# 3. Reveal hooks
# =============================================================================


class TestRevealHooks:

    def test_lapidarist(self):
        engine = make_engine(OPEN_BOARD)
        engine.run.add_relic(RelicId.LAPIDARIST)
        result = engine.reveal(2, 2)
        assert result.gold_delta == 3
        assert result.life_delta == -1

    def test_number_cruncher_roll_scales_with_number(self):
        engine = make_engine(["***", "...", "..X"], rng_values=[0.04])
        engine.run.add_relic(RelicId.NUMBER_CRUNCHER)
        assert engine.reveal(1, 1).gold_delta == 0

    def test_auditor(self):
        engine = make_engine(["!X"], {(0, 0): ChallengeId.STOPWATCH})
        engine.run.add_relic(RelicId.AUDITOR)
        assert engine.reveal(0, 0).gold_delta == 1


# =============================================================================
# 4. Gold hooks
# =============================================================================


class TestGoldHooks:

    def test_tax_collector_does_not_retrigger(self):
        engine = make_engine(["o.", "X."])
        engine.run.add_relic(RelicId.TAX_COLLECTOR)
        assert engine.reveal(0, 0).gold_delta == 6

    def test_tax_collector_on_end_gold(self):
        engine = make_engine(OPEN_BOARD)
        engine.run.add_relic(RelicId.TAX_COLLECTOR)
        assert finish_level(engine).gold_delta == 6

    def test_philanthropist_on_loss(self):
        engine = make_engine(["!X"], {(0, 0): ChallengeId.AUTO_GRAT}, rng_values=[0.1])
        engine.run.add_relic(RelicId.PHILANTHROPIST)
        result = engine.reveal(0, 0)
        assert result.gold_delta == -1
        assert result.life_delta == 1

    def test_philanthropist_failed_roll(self):
        engine = make_engine(["!X"], {(0, 0): ChallengeId.AUTO_GRAT})
        engine.run.add_relic(RelicId.PHILANTHROPIST, 2)
        assert engine.reveal(0, 0).life_delta == 0
        assert engine.test_rng.counter == 2

    def test_philanthropist_ignores_spending(self):
        engine = make_engine(["$X"], {(0, 0): ShopTileId.GOOD_DEAL}, gold=3, rng_values=[0.0])
        engine.run.add_relic(RelicId.PHILANTHROPIST)
        result = engine.reveal(0, 0)
        assert result.life_delta == 1
        assert engine.test_rng.counter == 0

    def test_philanthropist_on_billionaire_payment(self):
        engine = make_engine(OPEN_BOARD, gold=10, rng_values=[0.0])
        engine.run.add_relic(RelicId.BILLIONAIRE)
        engine.run.add_relic(RelicId.PHILANTHROPIST)
        result = engine.reveal(2, 2)
        assert result.life_delta == 0
        assert engine.test_rng.counter == 0

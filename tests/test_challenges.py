"""
Challenge tile effect tests.

Covers immediate gold/life challenges, the level-long toggles they arm,
and the board effects (Jackhammer cascades, Thief, Donation Box).
"""

import pytest

from conftest import make_engine
from packages.minez.content.challenges import ChallengeId
from packages.minez.content.relics import RelicId
from packages.minez.state.board import TileKind


def challenge_engine(challenge_id, rows=("!X",), pos=(0, 0), **kwargs):
    return make_engine(list(rows), {pos: challenge_id}, **kwargs)


# =============================================================================
# Immediate gold / life
# =============================================================================


class TestImmediateChallenges:

    def test_auto_grat_can_go_negative(self):
        engine = challenge_engine(ChallengeId.AUTO_GRAT)
        result = engine.reveal(0, 0)
        assert result.gold_delta == -1
        assert engine.run.gold == -1

    def test_auto_grat_with_atm_fee(self):
        engine = challenge_engine(ChallengeId.AUTO_GRAT)
        engine.run.effects.atm_fee = True
        assert engine.reveal(0, 0).gold_delta == -2

    def test_bad_deal(self):
        engine = challenge_engine(ChallengeId.BAD_DEAL)
        result = engine.reveal(0, 0)
        assert result.gold_delta == 1
        assert result.life_delta == -1

    @pytest.mark.parametrize("lives,expected", [(3, -1), (5, -1), (2, 0)])
    def test_blood_pact(self, lives, expected):
        engine = challenge_engine(ChallengeId.BLOOD_PACT, lives=lives)
        assert engine.reveal(0, 0).life_delta == expected

    @pytest.mark.parametrize("lives,expected", [(3, -2), (2, -1), (1, -1)])
    def test_mega_mine(self, lives, expected):
        engine = challenge_engine(ChallengeId.MEGA_MINE, lives=lives)
        assert engine.reveal(0, 0).life_delta == expected

    def test_mega_mine_counts_as_mine(self):
        engine = challenge_engine(ChallengeId.MEGA_MINE, rows=["!.", "..", "X."])
        assert engine.board.tile_at(1, 0).number == 1

    @pytest.mark.parametrize("gold,expected", [(9, 4), (10, 5), (1, 0), (0, 0), (-3, -3)])
    def test_boxing_day(self, gold, expected):
        engine = challenge_engine(ChallengeId.BOXING_DAY, gold=gold)
        engine.reveal(0, 0)
        assert engine.run.gold == expected

    def test_boxing_day_with_atm_fee(self):
        engine = challenge_engine(ChallengeId.BOXING_DAY, gold=9)
        engine.run.effects.atm_fee = True
        engine.reveal(0, 0)
        assert engine.run.gold == 3

    def test_auditor_pays_per_challenge(self):
        engine = challenge_engine(ChallengeId.COAL)
        engine.run.add_relic(RelicId.AUDITOR, 2)
        assert engine.reveal(0, 0).gold_delta == 2


# =============================================================================
# Level-long toggles
# =============================================================================


class TestToggleChallenges:

    @pytest.mark.parametrize("challenge_id,attr", [
        (ChallengeId.MATH_TEST, "math_test"),
        (ChallengeId.SNAKE_OIL, "snake_oil"),
        (ChallengeId.SNAKE_VENOM, "snake_venom"),
        (ChallengeId.BLOOD_DIAMOND, "blood_diamond"),
        (ChallengeId.FINDERS_FEE, "no_end_gold"),
        (ChallengeId.ATM_FEE, "atm_fee"),
        (ChallengeId.CAR_LOAN, "car_loan"),
        (ChallengeId.APPRAISAL, "appraisal"),
    ])
    def test_toggle_armed(self, challenge_id, attr):
        engine = challenge_engine(challenge_id)
        assert not getattr(engine.run.effects, attr)
        engine.reveal(0, 0)
        assert getattr(engine.run.effects, attr)

    def test_car_loan_does_not_charge_itself(self):
        engine = challenge_engine(ChallengeId.CAR_LOAN)
        assert engine.reveal(0, 0).gold_delta == 0

    def test_donation_box_stacks(self):
        engine = make_engine(["!!X"], {(0, 0): ChallengeId.DONATION_BOX,
                                       (1, 0): ChallengeId.DONATION_BOX})
        engine.reveal(0, 0)
        engine.reveal(1, 0)
        assert engine.run.effects.donation_box_stacks == 2

    @pytest.mark.parametrize("challenge_id", [
        ChallengeId.COAL, ChallengeId.STOPWATCH, ChallengeId.KEY, ChallengeId.CLOVER2,
    ])
    def test_no_immediate_effect(self, challenge_id):
        engine = challenge_engine(challenge_id)
        result = engine.reveal(0, 0)
        assert result.gold_delta == 0
        assert result.life_delta == 0
        assert not result.ended_level


# =============================================================================
# Board effects
# =============================================================================


class TestJackhammer:

    def test_reveals_neighbors_including_mines(self):
        engine = challenge_engine(ChallengeId.JACKHAMMER, rows=["!*.", "...", "..X"])
        result = engine.reveal(0, 0)
        board = engine.board
        assert board.tile_at(1, 0).revealed
        assert board.tile_at(0, 1).revealed
        assert board.tile_at(1, 1).revealed
        assert result.life_delta == -1

    def test_chained_jackhammer_does_not_cascade(self):
        engine = make_engine(["*!!*", "....", "...X"],
                             {(1, 0): ChallengeId.JACKHAMMER, (2, 0): ChallengeId.JACKHAMMER})
        result = engine.reveal(1, 0)
        board = engine.board
        second = board.tile_at(2, 0)
        assert second.revealed
        assert not second.cascade_suppressed
        assert board.tile_at(0, 0).revealed
        assert not board.tile_at(3, 0).revealed
        assert result.life_delta == -1

    def test_jackhammer_skips_flagged(self):
        engine = challenge_engine(ChallengeId.JACKHAMMER, rows=["!*.", "...", "..X"])
        engine.toggle_flag(1, 0)
        result = engine.reveal(0, 0)
        assert not engine.board.tile_at(1, 0).revealed
        assert result.life_delta == 0


class TestThief:

    def test_thief_steals_one_stack(self):
        engine = challenge_engine(ChallengeId.THIEF)
        engine.run.add_relic(RelicId.PIONEER, 2)
        engine.reveal(0, 0)
        assert engine.run.relic_stacks(RelicId.PIONEER) == 1

    def test_thief_with_nothing_owned(self):
        engine = challenge_engine(ChallengeId.THIEF)
        result = engine.reveal(0, 0)
        assert engine.board.tile_at(0, 0).revealed
        assert result.gold_delta == 0
        assert engine.run.owned_relics == {}

    def test_hidden_thief_steals_at_level_start(self):
        engine = challenge_engine(ChallengeId.THIEF, rows=["!.", "..", ".X"])
        engine.run.add_relic(RelicId.CARTOGRAPHER)
        engine.start_level()
        assert not engine.run.has_relic(RelicId.CARTOGRAPHER)
        assert not engine.board.tile_at(0, 0).revealed


class TestDonationBox:

    def test_each_gain_reveals_a_tile(self):
        engine = make_engine(["o.*", "*..", "..*"])
        engine.run.effects.donation_box_stacks = 1
        result = engine.reveal(0, 0)
        assert engine.run.stats.revealed_count >= 2
        assert len(result.revealed) == engine.run.stats.revealed_count

    def test_stacks_queue_multiple_reveals(self):
        engine = make_engine(["o.*", "*..", "..*"])
        engine.run.effects.donation_box_stacks = 2
        engine.reveal(0, 0)
        assert engine.run.stats.revealed_count >= 3

    def test_donations_stop_when_lives_run_out(self):
        engine = make_engine(["o*", "**"], lives=1)
        engine.run.effects.donation_box_stacks = 3
        result = engine.reveal(0, 0)
        assert engine.run.lives == 0
        assert result.ended_level
        assert engine.run.stats.revealed_count == 2

    def test_no_donations_after_level_end(self):
        engine = make_engine(["X.", ".."])
        engine.run.effects.donation_box_stacks = 1
        engine.reveal(0, 0, by_player=True)
        before = engine.run.stats.revealed_count
        engine.reveal(0, 0, by_player=True)
        assert engine.level_over
        assert engine.run.stats.revealed_count == before

    def test_flagged_tiles_are_not_targets(self):
        engine = make_engine(["o*"])
        engine.toggle_flag(1, 0)
        engine.run.effects.donation_box_stacks = 1
        result = engine.reveal(0, 0)
        assert result.life_delta == 0
        assert not engine.board.tile_at(1, 0).revealed
        assert engine.board.tile_at(1, 0).kind == TileKind.MINE

"""
Tests for the live probability estimates.
"""
from __future__ import annotations

import pytest

from tennis_sim.simulation.schemas import Player
from tennis_sim.simulation.state_tracker import MatchState
from tennis_sim.simulation.probability_engine import ProbabilityEngine, clamp

ALICE = Player("alice", serve_win_prob=0.65, ace_prob=0.1, double_fault_prob=0.05)
BOB = Player("bob", serve_win_prob=0.62, ace_prob=0.08, double_fault_prob=0.04)


@pytest.fixture
def engine():
    return ProbabilityEngine()


@pytest.fixture
def state():
    return MatchState(player1=ALICE, player2=BOB, server=ALICE)


class TestClamp:
    def test_clamp(self):
        assert clamp(1.4) == 1.0
        assert clamp(-0.2) == 0.0
        assert clamp(0.4) == 0.4
        assert clamp(0.5, 0.0, 0.3) == 0.3


class TestWinProbabilities:
    def test_match_win(self, engine, state):
        state.sets = [2, 0]
        state.games = [3, 1]
        assert engine.match_win_probability(state, ALICE) == pytest.approx(0.72)
        assert engine.match_win_probability(state, BOB) == pytest.approx(0.28)

    def test_set_win(self, engine, state):
        state.games = [5, 1]
        assert engine.set_win_probability(state, ALICE) == pytest.approx(0.7)
        assert engine.set_win_probability(state, BOB) == pytest.approx(0.3)

    def test_game_win_depends_on_serve(self, engine, state):
        state.points = [2, 0]
        assert engine.game_win_probability(state, ALICE) == pytest.approx(0.75)
        assert engine.game_win_probability(state, BOB) == pytest.approx(0.25)
        state.switch_server()
        # Bob serving at 0-30 from his side.
        assert engine.game_win_probability(state, BOB) == pytest.approx(0.52)
        assert engine.game_win_probability(state, ALICE) == pytest.approx(0.48)

    def test_next_point_neutral(self, engine, state):
        assert engine.next_point_win_probability(state, ALICE) == pytest.approx(0.65)
        assert engine.next_point_win_probability(state, BOB) == pytest.approx(0.35)

    def test_next_point_with_momentum_and_ace(self, engine, state):
        state.points = [1, 0]
        state.record_streak(ALICE)
        state.record_streak(ALICE)
        state.record_streak(ALICE)
        state.record_ace(ALICE)
        # 0.65 + 0.02 (score) + 0.03 (momentum) + 0.03 (ace this game)
        assert engine.next_point_win_probability(state, ALICE) == pytest.approx(0.73)
        # 0.35 - 0.02 - 0.03
        assert engine.next_point_win_probability(state, BOB) == pytest.approx(0.30)

    def test_next_point_momentum_capped(self, engine, state):
        for _ in range(20):
            state.record_streak(BOB)
        assert engine.next_point_win_probability(state, BOB) == pytest.approx(0.40)
        assert engine.next_point_win_probability(state, ALICE) == pytest.approx(0.60)

    def test_next_point_double_fault_penalty(self, engine, state):
        state.record_double_fault(ALICE)
        assert engine.next_point_win_probability(state, ALICE) == pytest.approx(0.62)


class TestAceProbability:
    def test_base(self, engine, state):
        assert engine.ace_probability(state) == pytest.approx(0.1)

    def test_adjustments(self, engine, state):
        state.points = [2, 0]
        for _ in range(5):
            state.record_streak(ALICE)
        state.last_point_was_ace = True
        # 0.1 + 0.02 (score) + 0.02 (momentum cap) + 0.02 (last ace)
        assert engine.ace_probability(state) == pytest.approx(0.16)

    def test_momentum_only_when_server_won_last(self, engine, state):
        state.record_streak(BOB)
        state.record_streak(BOB)
        assert engine.ace_probability(state) == pytest.approx(0.1)

    def test_upper_bound(self, engine):
        big = Player("big", serve_win_prob=0.8, ace_prob=0.29, double_fault_prob=0.0)
        s = MatchState(player1=big, player2=BOB, server=big)
        s.points = [3, 0]
        s.last_point_was_ace = True
        assert engine.ace_probability(s) == pytest.approx(0.3)

    def test_lower_bound(self, engine):
        weak = Player("weak", serve_win_prob=0.5, ace_prob=0.0, double_fault_prob=0.0)
        s = MatchState(player1=weak, player2=BOB, server=weak)
        s.points = [0, 3]
        assert engine.ace_probability(s) == 0.0


class TestTiebreakProbability:
    @pytest.mark.parametrize(
        "games, expected",
        [([0, 0], 0.1), ([5, 4], 0.1), ([5, 5], 0.2), ([6, 5], 0.5), ([6, 6], 1.0), ([7, 6], 1.0)],
    )
    def test_step_function(self, engine, state, games, expected):
        state.games = games
        assert engine.tiebreak_probability(state) == expected


class TestBounds:
    def test_adversarial_scores_stay_in_range(self, engine, state):
        state.sets = [0, 4]
        state.games = [0, 6]
        state.points = [0, 40]
        for _ in range(10):
            state.record_streak(BOB)
        state.record_double_fault(ALICE)
        for p in (ALICE, BOB):
            for fn in (
                engine.match_win_probability,
                engine.set_win_probability,
                engine.game_win_probability,
                engine.next_point_win_probability,
            ):
                assert 0.0 <= fn(state, p) <= 1.0
        assert 0.0 <= engine.ace_probability(state) <= 0.3
        assert engine.tiebreak_probability(state) in (0.1, 0.2, 0.5, 1.0)

    def test_adversarial_lead_stays_in_range(self, engine, state):
        state.sets = [4, 0]
        state.games = [6, 0]
        state.points = [40, 0]
        for _ in range(10):
            state.record_streak(ALICE)
        state.record_ace(ALICE)
        state.last_point_was_ace = True
        assert engine.match_win_probability(state, ALICE) == pytest.approx(0.96)
        assert engine.set_win_probability(state, ALICE) == pytest.approx(0.8)
        assert engine.game_win_probability(state, ALICE) == 1.0
        assert engine.next_point_win_probability(state, ALICE) == 1.0
        assert engine.next_point_win_probability(state, BOB) == 0.0
        assert engine.ace_probability(state) == pytest.approx(0.3)


class TestSnapshot:
    def test_snapshot_record(self, engine, state):
        state.games = [2, 1]
        state.points = [1, 1]
        rec = engine.snapshot(state, "15-15")
        assert rec.server == "alice"
        assert rec.receiver == "bob"
        assert rec.point_score == "15-15"
        assert rec.game_score == "2-1"
        assert rec.set_score == "0-0"
        assert rec.p1_set_win_prob == pytest.approx(0.55)
        assert rec.p2_set_win_prob == pytest.approx(0.45)
        assert rec.tiebreak_prob == 0.1
        assert len(rec.as_row()) == 15

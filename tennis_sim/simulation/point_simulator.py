"""
Point Simulator: draws one point from the server's skill profile and the live
ace probability, then updates the match state's point, streak and stat counters.
"""
from __future__ import annotations

from .schemas import PointKind, PointOutcome
from .probability_engine import ProbabilityEngine
from .state_tracker import MatchState
from .rng import SeededRNG


class PointSimulator:
    """
    Ordered cascade of independent draws: ace, then double fault, then
    serve won, else return won. Each step uses a fresh uniform draw; the
    three probabilities are not a partition of one draw.
    """

    def __init__(self, prob_engine: ProbabilityEngine, rng: SeededRNG) -> None:
        self.prob_engine = prob_engine
        self.rng = rng

    def sample_kind(self, state: MatchState) -> PointKind:
        server = state.server
        if self.rng.random() < self.prob_engine.ace_probability(state):
            return PointKind.ACE
        if self.rng.random() < server.double_fault_prob:
            return PointKind.DOUBLE_FAULT
        if self.rng.random() < server.serve_win_prob:
            return PointKind.SERVE_WON
        return PointKind.RETURN_WON

    def play_point(self, state: MatchState) -> PointOutcome:
        """Sample and apply one point. Returns who won and how."""
        state.total_shots += 1
        server, receiver = state.server, state.receiver
        kind = self.sample_kind(state)

        if kind is PointKind.ACE:
            state.record_ace(server)
        elif kind is PointKind.DOUBLE_FAULT:
            state.record_double_fault(server)

        if kind in (PointKind.ACE, PointKind.SERVE_WON):
            outcome = PointOutcome(winner=server, kind=kind)
        else:
            outcome = PointOutcome(winner=receiver, kind=kind)

        state.award_point(outcome.winner)
        state.last_point_was_ace = kind is PointKind.ACE
        state.record_streak(outcome.winner)

        if state.is_tiebreak:
            state.tiebreak_points_played += 1
            if state.tiebreak_points_played % 2 == 1:
                state.switch_server()
        return outcome

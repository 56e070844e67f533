"""
Match Runner: drives the scoring state machine and point simulator through a
full match (games, sets, tiebreaks) and logs a PointRecord after every point.
"""
from __future__ import annotations

from typing import Callable

from .schemas import MatchConfig, MatchResult, Player, PointRecord
from .point_simulator import PointSimulator
from .probability_engine import ProbabilityEngine
from .state_tracker import MatchState
from .rng import SeededRNG


class MatchRunner:
    """
    Plays one match point by point. The MatchState is created in play_match and
    left on the runner so callers can harvest total_shots, point_log and
    set_history afterwards.
    """

    def __init__(
        self,
        config: MatchConfig,
        prob_engine: ProbabilityEngine | None = None,
        rng: SeededRNG | None = None,
    ) -> None:
        self.config = config
        self.prob_engine = prob_engine or ProbabilityEngine()
        self.rng = rng or SeededRNG(config.seed)
        self.point_sim = PointSimulator(self.prob_engine, self.rng)
        self.state: MatchState | None = None

    def new_state(self, server: Player) -> MatchState:
        return MatchState(
            player1=self.config.player1,
            player2=self.config.player2,
            server=server,
            best_of=self.config.best_of,
            grand_slam=self.config.grand_slam,
        )

    def play_game(
        self,
        state: MatchState,
        on_point: Callable[[PointRecord], None] | None = None,
    ) -> tuple[Player, bool]:
        """Play one game (or a whole tiebreak). Returns (last point winner, set_over)."""
        state.begin_game()
        while True:
            outcome = self.point_sim.play_point(state)
            point_score, game_over, set_over = state.resolve_point()
            record = self.prob_engine.snapshot(state, point_score)
            state.point_log.append(record)
            if on_point:
                on_point(record)
            if game_over or set_over:
                # No swap when the set closes (close_set swaps) or a tiebreak just opened.
                if not set_over and not state.is_tiebreak:
                    state.switch_server()
                return outcome.winner, set_over

    def play_set(
        self,
        state: MatchState,
        on_point: Callable[[PointRecord], None] | None = None,
    ) -> Player:
        """Play games until the set closes; snapshot its stats and rotate serve."""
        while True:
            winner, set_over = self.play_game(state, on_point)
            if set_over:
                state.close_set()
                return winner

    def play_match(
        self,
        on_point: Callable[[PointRecord], None] | None = None,
        first_server: Player | None = None,
    ) -> Player:
        """
        Run the match to completion. The first server is drawn uniformly at
        random unless given. Returns the winning Player.
        """
        if first_server is None:
            first_server = self.config.player1 if self.rng.coin_flip() else self.config.player2
        state = self.new_state(first_server)
        self.state = state
        while not state.is_match_over():
            self.play_set(state, on_point)
        return state.match_winner()

    def result(self, winner: Player) -> MatchResult:
        """Copy the summary values out of the finished match state."""
        state = self.state
        if state is None:
            raise RuntimeError("play_match() has not been run")
        names = (self.config.player1.name, self.config.player2.name)
        return MatchResult(
            winner=winner,
            sets=(state.sets[0], state.sets[1]),
            total_shots=state.total_shots,
            aces={n: sum(s.aces(n) for s in state.set_history) for n in names},
            double_faults={n: sum(s.double_faults(n) for s in state.set_history) for n in names},
            point_log=tuple(state.point_log),
            set_history=tuple(state.set_history),
        )


def simulate_single_match(
    config: MatchConfig,
    rng: SeededRNG | None = None,
    prob_engine: ProbabilityEngine | None = None,
) -> MatchResult:
    """Play one fresh match and return its summary."""
    runner = MatchRunner(config, prob_engine=prob_engine, rng=rng)
    winner = runner.play_match()
    return runner.result(winner)

"""
Probability Engine: live win-probability estimates from the current match state.
Heuristic odds for the point log; only ace_probability feeds back into the
point simulator.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from .schemas import PointRecord

if TYPE_CHECKING:
    from .schemas import Player
    from .state_tracker import MatchState

MAX_ACE_PROB = 0.3


def clamp(x: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, x))


class ProbabilityEngine:
    """
    Stateless: every method reads the MatchState and returns a bounded value.
    Player-relative counters are looked up by position in the match.
    """

    def __init__(
        self,
        set_weight: float = 0.1,
        match_game_weight: float = 0.01,
        set_game_weight: float = 0.05,
        game_point_weight: float = 0.05,
        next_point_weight: float = 0.02,
        momentum_step: float = 0.01,
        momentum_cap: float = 0.05,
        recent_event_adjustment: float = 0.03,
    ) -> None:
        self.set_weight = set_weight
        self.match_game_weight = match_game_weight
        self.set_game_weight = set_game_weight
        self.game_point_weight = game_point_weight
        self.next_point_weight = next_point_weight
        self.momentum_step = momentum_step
        self.momentum_cap = momentum_cap
        self.recent_event_adjustment = recent_event_adjustment

    @staticmethod
    def _diff(state: MatchState, counts: list[int], player: Player) -> int:
        i = state.index(player)
        return counts[i] - counts[1 - i]

    @staticmethod
    def _serve_base(state: MatchState, player: Player) -> float:
        if state.server == player:
            return state.server.serve_win_prob
        return 1.0 - state.server.serve_win_prob

    def match_win_probability(self, state: MatchState, player: Player) -> float:
        p = 0.5 + self.set_weight * self._diff(state, state.sets, player)
        p += self.match_game_weight * self._diff(state, state.games, player)
        return clamp(p)

    def set_win_probability(self, state: MatchState, player: Player) -> float:
        return clamp(0.5 + self.set_game_weight * self._diff(state, state.games, player))

    def game_win_probability(self, state: MatchState, player: Player) -> float:
        base = self._serve_base(state, player)
        return clamp(base + self.game_point_weight * self._diff(state, state.points, player))

    def next_point_win_probability(self, state: MatchState, player: Player) -> float:
        base = self._serve_base(state, player)
        # Positional difference, signed toward the server.
        score_diff = state.points[0] - state.points[1]
        sign = 1.0 if state.server == player else -1.0
        p = base + sign * self.next_point_weight * score_diff

        momentum = min(self.momentum_step * state.consecutive_points, self.momentum_cap)
        if state.last_point_winner == player:
            p += momentum
        elif state.last_point_winner is not None:
            p -= momentum

        stats = state.stats_for(player)
        if stats.aces > 0:
            p += self.recent_event_adjustment
        if stats.double_faults > 0:
            p -= self.recent_event_adjustment
        return clamp(p)

    def ace_probability(self, state: MatchState) -> float:
        """Live chance the next serve is an ace, bounded to [0, 0.3]."""
        p = state.server.ace_prob + 0.01 * (state.points[0] - state.points[1])
        if state.last_point_winner == state.server:
            p += min(0.005 * state.consecutive_points, 0.02)
        if state.last_point_was_ace:
            p += 0.02
        return clamp(p, 0.0, MAX_ACE_PROB)

    @staticmethod
    def tiebreak_probability(state: MatchState) -> float:
        games_sum = state.games[0] + state.games[1]
        if games_sum <= 9:
            return 0.1
        if games_sum == 10:
            return 0.2
        if games_sum == 11:
            return 0.5
        return 1.0

    def snapshot(self, state: MatchState, point_score: str) -> PointRecord:
        """All ten estimates plus the formatted score, as one immutable record."""
        p1, p2 = state.player1, state.player2
        return PointRecord(
            server=state.server.name,
            receiver=state.receiver.name,
            point_score=point_score,
            game_score=state.format_game_score(),
            set_score=state.format_set_score(),
            p1_match_win_prob=self.match_win_probability(state, p1),
            p2_match_win_prob=self.match_win_probability(state, p2),
            p1_set_win_prob=self.set_win_probability(state, p1),
            p2_set_win_prob=self.set_win_probability(state, p2),
            p1_game_win_prob=self.game_win_probability(state, p1),
            p2_game_win_prob=self.game_win_probability(state, p2),
            p1_next_point_win_prob=self.next_point_win_probability(state, p1),
            p2_next_point_win_prob=self.next_point_win_probability(state, p2),
            next_serve_ace_prob=self.ace_probability(state),
            tiebreak_prob=self.tiebreak_probability(state),
        )

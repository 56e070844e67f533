"""
Scoring state machine: point -> game -> set -> match.
MatchState owns one match's mutable score, serve order, streak and stat counters,
applies point outcomes, and formats the score strings written to the point log.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from .schemas import Player, PointRecord, SetStats, StatLine, UnknownPlayerError

POINT_NAMES = ("0", "15", "30", "40")
DEUCE = "Deuce"
AD_IN = "Ad-In"
AD_OUT = "Ad-Out"
GAME = "GAME"

GAMES_TO_WIN_SET = 6
TIEBREAK_POINTS = 7
FINAL_SET_TIEBREAK_POINTS = 10
WIN_BY = 2


def sets_to_win_match(best_of: int) -> int:
    return (best_of // 2) + 1


def game_won(points_a: int, points_b: int) -> bool:
    """Regular game: leader has at least 4 points and a 2-point margin."""
    return max(points_a, points_b) >= 4 and abs(points_a - points_b) >= WIN_BY


def set_won(games_a: int, games_b: int, to_win: int = GAMES_TO_WIN_SET, win_by: int = WIN_BY) -> str | None:
    """Returns 'a' or 'b' if someone won the set outright, else None."""
    if games_a >= to_win and games_a - games_b >= win_by:
        return "a"
    if games_b >= to_win and games_b - games_a >= win_by:
        return "b"
    return None


def tiebreak_won(points_a: int, points_b: int, target: int = TIEBREAK_POINTS) -> bool:
    return max(points_a, points_b) >= target and abs(points_a - points_b) >= WIN_BY


def is_final_set(sets: list[int], best_of: int) -> bool:
    """True while the last possible set of the match is in progress."""
    return sum(sets) == best_of - 1


def format_point_score(server_points: int, receiver_points: int, tiebreak: bool = False) -> str:
    """
    Server-first point score: "15-30", "Deuce", "Ad-In", "Ad-Out", "GAME";
    tiebreaks use raw counts ("5-3").
    """
    if tiebreak:
        return f"{server_points}-{receiver_points}"
    if server_points == receiver_points and server_points >= 3:
        return DEUCE
    if max(server_points, receiver_points) >= 4:
        diff = server_points - receiver_points
        if abs(diff) == 1:
            return AD_IN if diff > 0 else AD_OUT
        if abs(diff) >= WIN_BY:
            return GAME
    return f"{_point_name(server_points)}-{_point_name(receiver_points)}"


def _point_name(points: int) -> str:
    return POINT_NAMES[points] if points < len(POINT_NAMES) else str(points)


@dataclass
class MatchState:
    """
    Score and serve state for one match. Counters are indexed by player
    position (player1 -> 0, player2 -> 1), never by server/receiver.
    """
    player1: Player
    player2: Player
    server: Player
    best_of: int = 5
    grand_slam: bool = False
    receiver: Player = field(init=False)
    sets: list[int] = field(default_factory=lambda: [0, 0])
    games: list[int] = field(default_factory=lambda: [0, 0])
    points: list[int] = field(default_factory=lambda: [0, 0])
    is_tiebreak: bool = False
    tiebreak_points_played: int = 0
    tiebreak_server: Player | None = None
    last_point_winner: Player | None = None
    consecutive_points: int = 0
    last_point_was_ace: bool = False
    total_shots: int = 0
    game_stats: dict[str, StatLine] = field(default_factory=dict)
    set_stats: dict[str, StatLine] = field(default_factory=dict)
    set_history: list[SetStats] = field(default_factory=list)
    point_log: list[PointRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.player1.name == self.player2.name:
            raise ValueError(f"Players must have distinct names (got {self.player1.name!r} twice)")
        self.receiver = self.opponent(self.server)
        self.game_stats = {p.name: StatLine() for p in (self.player1, self.player2)}
        self.set_stats = {p.name: StatLine() for p in (self.player1, self.player2)}

    # ---- Lookups ----
    def index(self, player: Player) -> int:
        if player == self.player1:
            return 0
        if player == self.player2:
            return 1
        raise UnknownPlayerError(f"{player.name!r} is not playing this match")

    def opponent(self, player: Player) -> Player:
        return self.player2 if self.index(player) == 0 else self.player1

    def stats_for(self, player: Player) -> StatLine:
        """Running counters for the current game."""
        self.index(player)
        return self.game_stats[player.name]

    # ---- Point application ----
    def award_point(self, winner: Player) -> None:
        self.points[self.index(winner)] += 1

    def record_ace(self, player: Player) -> None:
        self.stats_for(player).aces += 1
        self.set_stats[player.name].aces += 1

    def record_double_fault(self, player: Player) -> None:
        self.stats_for(player).double_faults += 1
        self.set_stats[player.name].double_faults += 1

    def record_streak(self, winner: Player) -> None:
        if self.last_point_winner == winner:
            self.consecutive_points += 1
        else:
            self.consecutive_points = 1
        self.last_point_winner = winner

    def switch_server(self) -> None:
        self.server, self.receiver = self.receiver, self.server

    # ---- Queries ----
    def is_final_set(self) -> bool:
        return is_final_set(self.sets, self.best_of)

    def tiebreak_target(self) -> int:
        if self.grand_slam and self.is_final_set():
            return FINAL_SET_TIEBREAK_POINTS
        return TIEBREAK_POINTS

    def is_game_over(self) -> bool:
        if self.is_tiebreak:
            return self.is_set_over()
        return game_won(self.points[0], self.points[1])

    def is_set_over(self) -> bool:
        if self.is_tiebreak:
            return tiebreak_won(self.points[0], self.points[1], self.tiebreak_target())
        return set_won(self.games[0], self.games[1]) is not None

    def is_match_over(self) -> bool:
        return max(self.sets) >= sets_to_win_match(self.best_of)

    def match_winner(self) -> Player | None:
        if not self.is_match_over():
            return None
        return self.player1 if self.sets[0] > self.sets[1] else self.player2

    # ---- Formatting (server first) ----
    def _server_first(self, counts: list[int]) -> tuple[int, int]:
        si = self.index(self.server)
        return counts[si], counts[1 - si]

    def format_point_score(self) -> str:
        s, r = self._server_first(self.points)
        return format_point_score(s, r, self.is_tiebreak)

    def format_game_score(self) -> str:
        s, r = self._server_first(self.games)
        return f"{s}-{r}"

    def format_set_score(self) -> str:
        s, r = self._server_first(self.sets)
        return f"{s}-{r}"

    # ---- Transitions ----
    def resolve_point(self) -> tuple[str, bool, bool]:
        """
        Apply game/set/tiebreak transitions after a point has been awarded.
        Returns (point_score, game_over, set_over); point_score is formatted
        before any counters move.
        """
        point_score = self.format_point_score()
        game_over = False
        set_over = False

        if self.is_tiebreak:
            if self.is_set_over():
                game_over = set_over = True
                w = 0 if self.points[0] > self.points[1] else 1
                self.games[w] += 1
                self.sets[w] += 1
                self.is_tiebreak = False
            return point_score, game_over, set_over

        if point_score == GAME:
            game_over = True
            w = 0 if self.points[0] > self.points[1] else 1
            self.games[w] += 1

        if self.is_set_over():
            set_over = True
            w = 0 if self.games[0] > self.games[1] else 1
            self.sets[w] += 1
        elif self.games[0] == GAMES_TO_WIN_SET and self.games[1] == GAMES_TO_WIN_SET:
            self.start_tiebreak()
        return point_score, game_over, set_over

    def start_tiebreak(self) -> None:
        self.is_tiebreak = True
        self.points = [0, 0]
        self.tiebreak_server = self.server
        self.tiebreak_points_played = 0

    def begin_game(self) -> None:
        """Reset points (outside a tiebreak), streak, ace flag and per-game counters."""
        if not self.is_tiebreak:
            self.points = [0, 0]
        self.last_point_winner = None
        self.consecutive_points = 0
        self.last_point_was_ace = False
        self.game_stats = {p.name: StatLine() for p in (self.player1, self.player2)}

    def close_set(self) -> SetStats:
        """Snapshot the set's stats, reset games and points, swap the server."""
        snapshot = SetStats(by_player={name: line.copy() for name, line in self.set_stats.items()})
        self.set_history.append(snapshot)
        self.set_stats = {p.name: StatLine() for p in (self.player1, self.player2)}
        self.games = [0, 0]
        self.points = [0, 0]
        self.is_tiebreak = False
        self.tiebreak_points_played = 0
        self.switch_server()
        return snapshot

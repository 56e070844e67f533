"""
Shared types for the tennis match simulator.
Player skill profiles, point outcomes, point-log records and the immutable
per-set, per-match and per-batch summaries handed between layers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class InvalidPlayerError(ValueError):
    """A player profile carries a probability outside [0, 1] or no name."""


class UnknownPlayerError(LookupError):
    """A lookup was made for a player who is not part of the match."""


@dataclass(frozen=True)
class Player:
    """
    Immutable per-point skill profile.
    Two players are equal iff every field matches; name is the stable identifier.
    """
    name: str
    serve_win_prob: float
    ace_prob: float
    double_fault_prob: float

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidPlayerError("Player name must not be empty")
        for attr in ("serve_win_prob", "ace_prob", "double_fault_prob"):
            value = getattr(self, attr)
            if not 0.0 <= value <= 1.0:
                raise InvalidPlayerError(f"{self.name}: {attr}={value} is outside [0, 1]")


class PointKind(str, Enum):
    """How the point was decided."""
    ACE = "ace"
    DOUBLE_FAULT = "double_fault"
    SERVE_WON = "serve_won"
    RETURN_WON = "return_won"


@dataclass(frozen=True)
class PointOutcome:
    """Who won the point and how."""
    winner: Player
    kind: PointKind

    @property
    def server_won(self) -> bool:
        return self.kind in (PointKind.ACE, PointKind.SERVE_WON)


@dataclass
class StatLine:
    """Running ace / double-fault counters for one player."""
    aces: int = 0
    double_faults: int = 0

    def copy(self) -> StatLine:
        return StatLine(self.aces, self.double_faults)


@dataclass(frozen=True)
class SetStats:
    """Aces and double faults per player name, frozen when a set closes."""
    by_player: dict[str, StatLine]

    def aces(self, name: str) -> int:
        line = self.by_player.get(name)
        return line.aces if line else 0

    def double_faults(self, name: str) -> int:
        line = self.by_player.get(name)
        return line.double_faults if line else 0


@dataclass(frozen=True)
class PointRecord:
    """
    Snapshot taken after every point: who served, the formatted score (server
    first) and the live probability estimates at that instant.
    """
    server: str
    receiver: str
    point_score: str
    game_score: str
    set_score: str
    p1_match_win_prob: float
    p2_match_win_prob: float
    p1_set_win_prob: float
    p2_set_win_prob: float
    p1_game_win_prob: float
    p2_game_win_prob: float
    p1_next_point_win_prob: float
    p2_next_point_win_prob: float
    next_serve_ace_prob: float
    tiebreak_prob: float

    def as_row(self) -> list[Any]:
        """Values in log-sink column order."""
        return [
            self.server,
            self.receiver,
            self.point_score,
            self.game_score,
            self.set_score,
            self.p1_match_win_prob,
            self.p2_match_win_prob,
            self.p1_set_win_prob,
            self.p2_set_win_prob,
            self.p1_game_win_prob,
            self.p2_game_win_prob,
            self.p1_next_point_win_prob,
            self.p2_next_point_win_prob,
            self.next_serve_ace_prob,
            self.tiebreak_prob,
        ]


@dataclass
class MatchConfig:
    """Configuration for a single match simulation."""
    player1: Player
    player2: Player
    best_of: int = 5  # 3 or 5 sets
    grand_slam: bool = False  # 10-point tiebreak in the deciding set
    seed: int | None = None


@dataclass(frozen=True)
class MatchResult:
    """Summary values copied out of a finished match."""
    winner: Player
    sets: tuple[int, int]  # (player1, player2)
    total_shots: int
    aces: dict[str, int]
    double_faults: dict[str, int]
    point_log: tuple[PointRecord, ...] = ()
    set_history: tuple[SetStats, ...] = ()


@dataclass(frozen=True)
class BatchResult:
    """Partial totals of one batch. Immutable; combine with merge()."""
    matches_played: int
    match_wins: dict[str, int]
    total_shots: int
    total_aces: dict[str, int]
    total_double_faults: dict[str, int]
    points_logged: int = 0

    @classmethod
    def empty(cls, *names: str) -> BatchResult:
        return cls(
            matches_played=0,
            match_wins={n: 0 for n in names},
            total_shots=0,
            total_aces={n: 0 for n in names},
            total_double_faults={n: 0 for n in names},
        )

    def merge(self, other: BatchResult) -> BatchResult:
        return BatchResult(
            matches_played=self.matches_played + other.matches_played,
            match_wins=_sum_counts(self.match_wins, other.match_wins),
            total_shots=self.total_shots + other.total_shots,
            total_aces=_sum_counts(self.total_aces, other.total_aces),
            total_double_faults=_sum_counts(self.total_double_faults, other.total_double_faults),
            points_logged=self.points_logged + other.points_logged,
        )


def _sum_counts(a: dict[str, int], b: dict[str, int]) -> dict[str, int]:
    out = dict(a)
    for k, v in b.items():
        out[k] = out.get(k, 0) + v
    return out


@dataclass(frozen=True)
class RunSummary:
    """Totals for a whole run plus wall-clock duration."""
    num_simulations: int
    totals: BatchResult
    elapsed_ms: float
    player_names: tuple[str, str] = field(default=("", ""))

    def win_percentage(self, name: str) -> float:
        if self.num_simulations == 0:
            return 0.0
        return self.totals.match_wins.get(name, 0) / self.num_simulations * 100.0

    def avg_aces(self, name: str) -> float:
        if self.num_simulations == 0:
            return 0.0
        return self.totals.total_aces.get(name, 0) / self.num_simulations

    def avg_double_faults(self, name: str) -> float:
        if self.num_simulations == 0:
            return 0.0
        return self.totals.total_double_faults.get(name, 0) / self.num_simulations

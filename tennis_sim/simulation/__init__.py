"""
Tennis Match Simulation Engine: stochastic point-by-point matches with live
win-probability logging, batched and run in parallel to estimate win rates.
"""
from .schemas import (
    Player,
    PointKind,
    PointOutcome,
    PointRecord,
    StatLine,
    SetStats,
    MatchConfig,
    MatchResult,
    BatchResult,
    RunSummary,
    InvalidPlayerError,
    UnknownPlayerError,
)
from .rng import SeededRNG
from .state_tracker import (
    MatchState,
    format_point_score,
    game_won,
    set_won,
    tiebreak_won,
    is_final_set,
    sets_to_win_match,
)
from .probability_engine import ProbabilityEngine
from .point_simulator import PointSimulator
from .orchestrator import MatchRunner, simulate_single_match
from .persistence import CsvLogSink, LogSinkError, log_header, save_summary, summary_to_dict
from .batch import BatchAggregator, run_batch_worker, simulate_batch
from .parallel import ParallelDriver, plan_batches, simulate_match_parallel

__all__ = [
    "Player",
    "PointKind",
    "PointOutcome",
    "PointRecord",
    "StatLine",
    "SetStats",
    "MatchConfig",
    "MatchResult",
    "BatchResult",
    "RunSummary",
    "InvalidPlayerError",
    "UnknownPlayerError",
    "SeededRNG",
    "MatchState",
    "format_point_score",
    "game_won",
    "set_won",
    "tiebreak_won",
    "is_final_set",
    "sets_to_win_match",
    "ProbabilityEngine",
    "PointSimulator",
    "MatchRunner",
    "simulate_single_match",
    "CsvLogSink",
    "LogSinkError",
    "log_header",
    "save_summary",
    "summary_to_dict",
    "BatchAggregator",
    "simulate_batch",
    "run_batch_worker",
    "ParallelDriver",
    "plan_batches",
    "simulate_match_parallel",
]

"""
Batch Aggregator: runs a fixed number of independent matches sequentially and
reduces them into one immutable BatchResult, optionally flushing the batch's
point log to a sink.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from .schemas import BatchResult, MatchConfig, MatchResult, PointRecord
from .orchestrator import simulate_single_match
from .persistence import CsvLogSink
from .rng import SeededRNG

logger = logging.getLogger(__name__)

MatchFn = Callable[[MatchConfig, SeededRNG], MatchResult]


def _play(config: MatchConfig, rng: SeededRNG) -> MatchResult:
    return simulate_single_match(config, rng=rng)


class BatchAggregator:
    """
    One fresh match per iteration; the match function is injectable so a stub
    outcome generator can stand in for the simulator.
    """

    def __init__(self, config: MatchConfig, match_fn: MatchFn | None = None) -> None:
        self.config = config
        self.match_fn = match_fn or _play

    def run(
        self,
        batch_size: int,
        sink: CsvLogSink | None = None,
        save_logs: bool = False,
        seed: int | None = None,
    ) -> BatchResult:
        """Play batch_size matches; flush their concatenated point log iff save_logs."""
        result, point_log = self.play(batch_size, keep_log=save_logs, seed=seed)
        if save_logs and sink is not None:
            result = replace(result, points_logged=sink.extend(point_log))
        return result

    def play(
        self,
        batch_size: int,
        keep_log: bool = False,
        seed: int | None = None,
    ) -> tuple[BatchResult, list[PointRecord]]:
        """
        Play batch_size matches without touching any sink. Returns the batch
        totals and, if keep_log, the batch's point log in match order.
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive (got {batch_size})")
        names = (self.config.player1.name, self.config.player2.name)
        rng = SeededRNG(seed)
        match_wins = {n: 0 for n in names}
        total_aces = {n: 0 for n in names}
        total_double_faults = {n: 0 for n in names}
        total_shots = 0
        point_log: list[PointRecord] = []

        for _ in range(batch_size):
            result = self.match_fn(self.config, rng)
            match_wins[result.winner.name] += 1
            total_shots += result.total_shots
            for n in names:
                total_aces[n] += result.aces.get(n, 0)
                total_double_faults[n] += result.double_faults.get(n, 0)
            if keep_log:
                point_log.extend(result.point_log)

        logger.debug(
            "Batch of %d done: wins=%s shots=%d points=%d",
            batch_size, match_wins, total_shots, len(point_log),
        )
        totals = BatchResult(
            matches_played=batch_size,
            match_wins=match_wins,
            total_shots=total_shots,
            total_aces=total_aces,
            total_double_faults=total_double_faults,
        )
        return totals, point_log


def simulate_batch(
    config: MatchConfig,
    batch_size: int,
    sink: CsvLogSink | None = None,
    save_logs: bool = False,
    seed: int | None = None,
    match_fn: MatchFn | None = None,
) -> BatchResult:
    return BatchAggregator(config, match_fn).run(batch_size, sink=sink, save_logs=save_logs, seed=seed)


def run_batch_worker(
    config: MatchConfig,
    match_fn: MatchFn | None,
    batch_size: int,
    keep_log: bool,
    seed: int | None,
) -> tuple[BatchResult, list[PointRecord]]:
    """Module-level entry point so a batch can run in a worker process."""
    return BatchAggregator(config, match_fn).play(batch_size, keep_log=keep_log, seed=seed)

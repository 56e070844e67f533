"""
Parallel Driver: fans batches of matches out over a worker pool and folds the
finished BatchResults into run totals.
Batches share nothing while running; only the driver thread touches the totals
and the point-log sink, consuming results as they complete.
"""
from __future__ import annotations

import concurrent.futures
import logging
import time
from dataclasses import replace

from .schemas import BatchResult, MatchConfig, RunSummary
from .batch import MatchFn, run_batch_worker
from .persistence import CsvLogSink

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 10


def plan_batches(num_simulations: int, batch_size: int, log_interval: int) -> list[bool]:
    """
    One entry per batch: whether that batch flushes its point log. Batch i
    flushes when the cumulative match count (i + 1) * batch_size is a multiple
    of log_interval.
    """
    if num_simulations <= 0:
        raise ValueError(f"num_simulations must be positive (got {num_simulations})")
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive (got {batch_size})")
    if num_simulations % batch_size != 0:
        raise ValueError(f"batch_size {batch_size} does not divide num_simulations {num_simulations}")
    if log_interval <= 0:
        raise ValueError(f"log_interval must be positive (got {log_interval})")
    return [((i + 1) * batch_size) % log_interval == 0 for i in range(num_simulations // batch_size)]


class ParallelDriver:
    """
    Runs num_simulations matches as num_simulations // batch_size batches on a
    worker pool: processes by default, threads when use_processes is False.
    Workers only simulate; the driver thread merges each BatchResult and writes
    its point log to the sink as results complete, so the sink has a single
    writer. No cancellation: the whole workload always runs, and the first
    failure (e.g. a sink error) propagates out of run().
    """

    def __init__(
        self,
        config: MatchConfig,
        num_simulations: int,
        batch_size: int,
        log_interval: int,
        sink: CsvLogSink | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        match_fn: MatchFn | None = None,
        use_processes: bool = True,
    ) -> None:
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive (got {max_workers})")
        self.plan = plan_batches(num_simulations, batch_size, log_interval)
        self.config = config
        self.num_simulations = num_simulations
        self.batch_size = batch_size
        self.log_interval = log_interval
        self.sink = sink
        self.max_workers = max_workers
        self.match_fn = match_fn
        self.use_processes = use_processes

    def _batch_seed(self, index: int) -> int | None:
        if self.config.seed is None:
            return None
        return self.config.seed + index

    def _executor(self) -> concurrent.futures.Executor:
        if self.use_processes:
            return concurrent.futures.ProcessPoolExecutor(max_workers=self.max_workers)
        return concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers)

    def run(self) -> RunSummary:
        names = (self.config.player1.name, self.config.player2.name)
        totals = BatchResult.empty(*names)
        logger.info(
            "Simulating %d matches (%d batches of %d, %d %s workers)",
            self.num_simulations, len(self.plan), self.batch_size, self.max_workers,
            "process" if self.use_processes else "thread",
        )
        start = time.perf_counter()
        with self._executor() as ex:
            futures = [
                ex.submit(
                    run_batch_worker,
                    self.config,
                    self.match_fn,
                    self.batch_size,
                    save_logs and self.sink is not None,
                    self._batch_seed(i),
                )
                for i, save_logs in enumerate(self.plan)
            ]
            for fut in concurrent.futures.as_completed(futures):
                result, point_log = fut.result()
                if point_log:
                    result = replace(result, points_logged=self.sink.extend(point_log))
                totals = totals.merge(result)
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.info("Finished %d matches in %.2f ms", totals.matches_played, elapsed_ms)
        return RunSummary(
            num_simulations=self.num_simulations,
            totals=totals,
            elapsed_ms=elapsed_ms,
            player_names=names,
        )


def simulate_match_parallel(
    config: MatchConfig,
    num_simulations: int,
    batch_size: int,
    log_interval: int,
    sink: CsvLogSink | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    use_processes: bool = True,
) -> RunSummary:
    return ParallelDriver(
        config,
        num_simulations=num_simulations,
        batch_size=batch_size,
        log_interval=log_interval,
        sink=sink,
        max_workers=max_workers,
        use_processes=use_processes,
    ).run()

"""
Run a full parallel simulation from a validated RunConfig.
Wires the log sink to the parallel driver; no printing here.
"""
from __future__ import annotations

import logging

from tennis_sim.config import RunConfig
from tennis_sim.simulation.parallel import ParallelDriver
from tennis_sim.simulation.persistence import CsvLogSink
from tennis_sim.simulation.schemas import RunSummary

logger = logging.getLogger(__name__)


def build_sink(config: RunConfig) -> CsvLogSink | None:
    if not config.save_logs:
        return None
    return CsvLogSink(config.log_path, config.player1.name, config.player2.name)


def run_simulation(config: RunConfig) -> RunSummary:
    """
    Simulate config.num_simulations matches. Raises LogSinkError if logging
    was requested and the log cannot be written.
    """
    match_config = config.match_config()
    sink = build_sink(config)
    driver = ParallelDriver(
        match_config,
        num_simulations=config.num_simulations,
        batch_size=config.batch_size,
        log_interval=config.log_interval,
        sink=sink,
        max_workers=config.max_workers,
        use_processes=config.use_processes,
    )
    summary = driver.run()
    if sink is not None:
        logger.info("Point log: %d rows in %s", sink.rows_written, sink.path)
    return summary

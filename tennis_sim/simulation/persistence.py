"""
Persistence: the CSV point-log sink shared by concurrently finishing batches,
and JSON export of a run summary.
"""
from __future__ import annotations

import csv
import json
import logging
import threading
from pathlib import Path
from typing import Any, Iterable

from .schemas import PointRecord, RunSummary

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = "match_log_parallel.csv"


class LogSinkError(OSError):
    """The point log could not be opened or appended to."""


def log_header(player1_name: str, player2_name: str) -> list[str]:
    """Column names; per-player probability columns are prefixed with the player name."""
    p1, p2 = player1_name, player2_name
    return [
        "server",
        "receiver",
        "point_score",
        "game_score",
        "set_score",
        f"{p1}_match_win_prob",
        f"{p2}_match_win_prob",
        f"{p1}_set_win_prob",
        f"{p2}_set_win_prob",
        f"{p1}_game_win_prob",
        f"{p2}_game_win_prob",
        f"{p1}_next_point_win_prob",
        f"{p2}_next_point_win_prob",
        "next_serve_ace_prob",
        "tiebreak_prob",
    ]


class CsvLogSink:
    """
    Append-only CSV point log. The header is written only when the target is
    empty. A lock spans each whole flush so rows from concurrent batches never
    interleave.
    """

    def __init__(self, path: str | Path, player1_name: str, player2_name: str) -> None:
        self.path = Path(path)
        self.header = log_header(player1_name, player2_name)
        self._lock = threading.Lock()
        self.rows_written = 0

    def append(self, record: PointRecord) -> None:
        self.extend([record])

    def extend(self, records: Iterable[PointRecord]) -> int:
        """Write records in order; returns the number of rows written."""
        rows = [r.as_row() for r in records]
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                needs_header = not self.path.exists() or self.path.stat().st_size == 0
                with self.path.open("a", newline="", encoding="utf-8") as f:
                    writer = csv.writer(f)
                    if needs_header:
                        writer.writerow(self.header)
                    writer.writerows(rows)
            except OSError as exc:
                raise LogSinkError(f"Cannot append point log to {self.path}: {exc}") from exc
            self.rows_written += len(rows)
        logger.debug("Wrote %d point rows to %s", len(rows), self.path)
        return len(rows)


def summary_to_dict(summary: RunSummary) -> dict[str, Any]:
    """RunSummary to JSON-serializable dict."""
    totals = summary.totals
    return {
        "num_simulations": summary.num_simulations,
        "elapsed_ms": summary.elapsed_ms,
        "total_shots": totals.total_shots,
        "points_logged": totals.points_logged,
        "players": {
            name: {
                "match_wins": totals.match_wins.get(name, 0),
                "win_pct": summary.win_percentage(name),
                "total_aces": totals.total_aces.get(name, 0),
                "total_double_faults": totals.total_double_faults.get(name, 0),
                "avg_aces_per_match": summary.avg_aces(name),
                "avg_double_faults_per_match": summary.avg_double_faults(name),
            }
            for name in summary.player_names
        },
    }


def save_summary(summary: RunSummary, path: str | Path) -> Path:
    """Write the run summary as JSON."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(summary_to_dict(summary), indent=2))
    return out

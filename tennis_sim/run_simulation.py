"""
Simulate many tennis matches between two players in parallel and print win
percentages, shot count, timing and per-match ace / double-fault averages.
The point-by-point log is appended to a CSV file.
"""
from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from tennis_sim.config import DEFAULT_PLAYER1, DEFAULT_PLAYER2, PlayerConfig, RunConfig
from tennis_sim.services.simulation_service import run_simulation
from tennis_sim.simulation.persistence import LogSinkError, save_summary
from tennis_sim.simulation.schemas import RunSummary


def _player_arg(value: str) -> PlayerConfig:
    """NAME:SERVE_WIN[:ACE[:DOUBLE_FAULT]], e.g. Federer:0.65:0.10:0.05"""
    parts = value.split(":")
    if not 2 <= len(parts) <= 4:
        raise argparse.ArgumentTypeError(f"expected NAME:SERVE_WIN[:ACE[:DF]], got {value!r}")
    try:
        probs = [float(p) for p in parts[1:]]
        fields = dict(zip(("serve_win_prob", "ace_prob", "double_fault_prob"), probs))
        return PlayerConfig(name=parts[0], **fields)
    except (ValueError, ValidationError) as exc:
        raise argparse.ArgumentTypeError(f"invalid player {value!r}: {exc}") from exc


def print_summary(summary: RunSummary, log_path: str | None = None) -> None:
    print(f"Percentage of Match wins after {summary.num_simulations} matches:")
    for name in summary.player_names:
        print(f"{name}: {summary.win_percentage(name):.2f}%")
    print()
    print(f"Total shots played: {summary.totals.total_shots}")
    print(f"Execution time: {summary.elapsed_ms:.2f} milliseconds")
    print()
    print("Match statistics:")
    for name in summary.player_names:
        print(f"{name}:")
        print(f" Avg. Aces per match: {summary.avg_aces(name):.2f}")
        print(f" Avg. Double faults per match: {summary.avg_double_faults(name):.2f}")
    if log_path:
        print()
        print(f"Point-by-point log exported to '{log_path}'")


def _default(field: str):
    return RunConfig.model_fields[field].default


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Simulate tennis matches in parallel and estimate win percentages.")
    parser.add_argument("--simulations", type=int, default=_default("num_simulations"), help="Total number of matches")
    parser.add_argument("--best-of", type=int, default=_default("best_of"), help="Sets per match (odd)")
    parser.add_argument("--no-grand-slam", action="store_true", help="Use a 7-point tiebreak in the final set too")
    parser.add_argument("--batch-size", type=int, default=_default("batch_size"), help="Matches per batch; must divide --simulations")
    parser.add_argument("--log-interval", type=int, default=_default("log_interval"), help="Flush the point log every N cumulative matches")
    parser.add_argument("--workers", type=int, default=_default("max_workers"), help="Worker count")
    parser.add_argument("--threads", action="store_true", help="Run batches on threads instead of processes")
    parser.add_argument("--log-path", default=_default("log_path"), help="CSV point log")
    parser.add_argument("--no-log", action="store_true", help="Do not write the point log")
    parser.add_argument("--seed", type=int, default=_default("seed"), help="Optional RNG seed")
    parser.add_argument("--player1", type=_player_arg, default=None, help="NAME:SERVE_WIN[:ACE[:DF]]")
    parser.add_argument("--player2", type=_player_arg, default=None, help="NAME:SERVE_WIN[:ACE[:DF]]")
    parser.add_argument("--summary-json", default=None, help="Also write the summary as JSON here")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        num_simulations=args.simulations,
        best_of=args.best_of,
        grand_slam=not args.no_grand_slam,
        batch_size=args.batch_size,
        log_interval=args.log_interval,
        max_workers=args.workers,
        use_processes=not args.threads,
        save_logs=not args.no_log,
        log_path=args.log_path,
        seed=args.seed,
        player1=args.player1 or DEFAULT_PLAYER1.model_copy(),
        player2=args.player2 or DEFAULT_PLAYER2.model_copy(),
    )


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = config_from_args(args)
    except ValidationError as exc:
        raise SystemExit(f"Invalid configuration:\n{exc}") from exc
    try:
        summary = run_simulation(config)
    except LogSinkError as exc:
        raise SystemExit(f"Aborted: {exc}") from exc
    print_summary(summary, config.log_path if config.save_logs else None)
    if args.summary_json:
        path = save_summary(summary, args.summary_json)
        print(f"Summary written to '{path}'", file=sys.stderr)


if __name__ == "__main__":
    main()

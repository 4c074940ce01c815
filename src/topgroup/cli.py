"""Command-line entry point for top-group."""

import argparse
import functools
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from topgroup.app import TopGroupApp
from topgroup.log_config import setup_logger
from topgroup.models import SnapshotIntegrityError
from topgroup.monitor import take_snapshot
from topgroup.report import render_debug, render_report


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="top-group",
        description="Show memory usage of running processes grouped by executable.",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=None,
        help="Only show the N groups using the most memory.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a process reports more shared than resident memory "
        "instead of skipping it.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print every group with its per-PID usage before the summary.",
    )
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Browse the snapshot in a terminal UI.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log skipped processes and other details.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Append DEBUG logs to this file.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the top-group command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.limit is not None and args.limit < 0:
        parser.error("--limit must not be negative")
    if args.interactive and args.debug:
        parser.error("--debug cannot be combined with --interactive")

    logger = setup_logger(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        log_file=args.log_file,
    )

    if args.interactive:
        app = TopGroupApp(
            functools.partial(take_snapshot, strict=args.strict),
            limit=args.limit,
        )
        app.run()
        return 0

    try:
        snapshot = take_snapshot(strict=args.strict)
    except SnapshotIntegrityError as exc:
        logger.error("Inconsistent process table: %s", exc)
        return 1

    lines = render_report(snapshot, limit=args.limit)
    if args.debug:
        lines = render_debug(snapshot) + [""] + lines
    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""CLI entry point and main processing flow."""

import argparse
import logging
import sys
import time
from pathlib import Path

from headtohead.h2h import H2H_FUNS, h2h_long, h2h_mat
from headtohead.io_csv import read_results_csv, write_matrix_csv, write_table_csv
from headtohead.matchups import get_matchups
from headtohead.pairgames import to_pairgames
from headtohead.util import HeadToHeadError

logger = logging.getLogger("headtohead")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="headtohead",
        description="Compute head-to-head tables from competition results CSVs.",
    )
    parser.add_argument(
        "--log-level", choices=["INFO", "DEBUG"], default="INFO",
        help="Logging level (default: INFO)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    h2h = commands.add_parser("h2h", help="Head-to-head statistics")
    h2h.add_argument(
        "--stat", action="append", required=True, choices=sorted(H2H_FUNS),
        help="Statistic to compute; repeat for several (long format only)",
    )
    h2h.add_argument(
        "--format", choices=["long", "mat"], default="long",
        help="Output format (default: long)",
    )
    h2h.add_argument(
        "--fill", type=float, default=None,
        help="Value for pairs without matchups (default: empty)",
    )

    commands.add_parser("matchups", help="All matchups of every game")
    commands.add_parser("pairgames", help="Split games into two-player games")

    for sub in commands.choices.values():
        sub.add_argument(
            "--input", required=True, type=Path,
            help="Competition results CSV (long or wide format)",
        )
        sub.add_argument(
            "--output", required=True, type=Path,
            help="Output CSV path",
        )
    return parser


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )


def _run_h2h(args: argparse.Namespace) -> None:
    cr = read_results_csv(args.input)
    funs = {name: H2H_FUNS[name] for name in args.stat}

    if args.format == "mat":
        mat = h2h_mat(cr, funs, fill=args.fill)
        write_matrix_csv(mat, args.output)
        return

    fill = {} if args.fill is None else {name: args.fill for name in funs}
    res = h2h_long(cr, funs, fill=fill)
    write_table_csv(res, args.output)


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.log_level)
    logger.info("Starting headtohead %s input=%s", args.command, args.input)

    start_time = time.time()

    try:
        if args.command == "h2h":
            _run_h2h(args)
        elif args.command == "matchups":
            write_table_csv(get_matchups(read_results_csv(args.input)), args.output)
        elif args.command == "pairgames":
            write_table_csv(to_pairgames(read_results_csv(args.input)), args.output)

        elapsed = time.time() - start_time
        logger.info("Done in %.1fs -> %s", elapsed, args.output)

    except HeadToHeadError as e:
        logger.error("Fatal error: %s", e)
        sys.exit(1)
    except Exception as e:
        logger.error("Unexpected error: %s", e, exc_info=True)
        sys.exit(1)

from __future__ import annotations

import argparse
from typing import Optional, Sequence

STAGE_ALL = "all"
STAGE_PRECHECK = "precheck"
STAGE_AGGREGATE = "aggregate"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spo-precheck",
        description="Run SharePoint migration pre-checks for a list of sites and consolidate the reports.",
    )
    parser.add_argument(
        "--config",
        metavar="INI",
        help="INI file to load (default: $PRECHECK_INI, then SPOPreCheck.ini at the project root)",
    )
    parser.add_argument(
        "--stage",
        choices=(STAGE_ALL, STAGE_PRECHECK, STAGE_AGGREGATE),
        default=STAGE_ALL,
        help="run both stages (default), only the pre-checks, or only the consolidation",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)

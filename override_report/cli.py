"""
Snapshot override report.

For one proposal using the erc20-votes-with-override strategy, list the voters
whose vote was overridden by their on-chain delegate and the net voting power
shifted between choices.

Outputs
-------
- text report (default) or JSON (--json) on stdout
- optional JSON file (--out-json)
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import Settings
from .errors import OverrideReportError
from .report import format_report_text, get_override_report, report_to_json
from .sources import DataSources
from .utils import write_json_atomic

logger = logging.getLogger("override_report")


def configure_logging(debug: bool) -> None:
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s - [%(levelname)s] - %(name)s - %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("proposal_id", nargs="?", default="", help="Snapshot proposal ID.")
    parser.add_argument("--proposal", default="", help="Snapshot proposal ID (alternative to the positional).")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON.")
    parser.add_argument("--skip-primary-names", action="store_true", help="Do not resolve ENS primary names.")
    parser.add_argument("--debug", action="store_true", help="Log intermediate results to stderr.")
    parser.add_argument("--out-json", default="", help="Also write the JSON report to this path.")
    return parser


def main(argv: Optional[List[str]] = None, *, sources: Optional[DataSources] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)

    proposal_id = args.proposal or args.proposal_id
    if not proposal_id:
        proposal_id = input("Enter the Snapshot proposal ID: ")

    sources = sources or DataSources(Settings.from_env())
    try:
        report = get_override_report(proposal_id, sources, primary_names=not args.skip_primary_names)
    except OverrideReportError as e:
        raise SystemExit(f"error: {e}") from e

    if args.out_json:
        write_json_atomic(Path(args.out_json), report.to_dict())

    if args.json:
        print(report_to_json(report))
    else:
        print(format_report_text(report), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Command-line interface for comparing contract versions."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from api_contract_framework.core.contracts.comparer import compare_contracts
from api_contract_framework.runner.loader import ContractLoadError, load_contract


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acf-compare",
        description="Compare two contract versions and report compatibility changes.",
    )
    parser.add_argument("old", help="Baseline contract as 'module:attribute'.")
    parser.add_argument("new", help="Candidate contract as 'module:attribute'.")
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the diff as JSON instead of a text summary.",
    )
    parser.add_argument(
        "--fail-on-warning",
        action="store_true",
        default=False,
        help="Exit with status 2 when the diff contains warnings.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set the logging level (default: WARNING).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for contract comparison.

    Args:
        argv: Command-line arguments. Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: 0 when compatible, 1 for breaking changes or load
        failures, 2 for warnings with ``--fail-on-warning``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        old = load_contract(args.old)
        new = load_contract(args.new)
    except ContractLoadError as exc:
        logging.getLogger(__name__).error("%s", exc)
        return 1

    diff = compare_contracts(old, new)
    if args.json:
        print(json.dumps(diff.to_dict(), indent=2))
    else:
        print(diff.summary())

    if diff.has_breaking_changes:
        return 1
    if args.fail_on_warning and diff.warnings:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())

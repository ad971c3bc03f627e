"""Command-line argument parsing for prstat."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .config import DEFAULT_WINDOW_DELAY_SECONDS


def _non_negative_float(value: str) -> float:
    """Parse and validate a non-negative number CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated number.

    Raises:
        argparse.ArgumentTypeError: If value is not a non-negative number.
    """
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a number") from exc

    if parsed < 0:
        raise argparse.ArgumentTypeError("must be greater than or equal to 0")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for report generation.

    Returns:
        Parsed CLI arguments containing the record source (query or input
        log), the start and end dates, the inter-window delay and verbosity.
    """
    parser = argparse.ArgumentParser(
        prog="prstat",
        description=(
            "Print monthly pull-request statistics (counts, sizes, lead time "
            "and time to merge) as CSV."
        ),
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--query",
        help="GitHub search query selecting pull requests, e.g. 'repo:owner/name'.",
    )
    source.add_argument(
        "--input",
        help="Path to a JSON log of pull requests to use instead of GitHub.",
    )
    parser.add_argument(
        "--start",
        help="ISO8601 date the first monthly window starts at.",
    )
    parser.add_argument(
        "--end",
        help="ISO8601 end date (windows currently run until now).",
    )
    parser.add_argument(
        "--delay",
        type=_non_negative_float,
        default=DEFAULT_WINDOW_DELAY_SECONDS,
        help="Seconds to wait between windows (default: 5).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)

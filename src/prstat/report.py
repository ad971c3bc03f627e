"""Monthly report generation.

Drives the monthly windows, reduces each window's pull requests with
:func:`create_stat` and streams the rows as comma-separated lines.
"""

from __future__ import annotations

import logging
import time
from dataclasses import astuple, fields
from datetime import datetime
from typing import Callable, List, Sequence, TextIO

from .models import PullRequest, StatRow
from .stats import create_stat
from .windows import format_timestamp, iter_monthly_windows

logger = logging.getLogger(__name__)

FetchPullRequests = Callable[[datetime, datetime], Sequence[PullRequest]]


def format_value(value: object) -> str:
    """Format one report cell, printing whole-valued floats as integers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_header() -> str:
    """Return the header line listing ``StatRow`` fields in declaration order."""
    return ",".join(field.name for field in fields(StatRow))


def format_row(row: StatRow) -> str:
    """Return ``row`` as one comma-separated line in header order."""
    return ",".join(format_value(value) for value in astuple(row))


def generate_report(
    fetch: FetchPullRequests,
    start: datetime,
    now: datetime,
    out: TextIO,
    sleep: Callable[[float], None] = time.sleep,
    delay_seconds: float = 5.0,
) -> List[StatRow]:
    """Write one statistics row per monthly window from ``start`` until ``now``.

    The header precedes the first row, and every line is flushed as soon as
    it is written. ``sleep(delay_seconds)`` runs between windows. Errors from
    ``fetch`` abort the report.

    Args:
        fetch: Returns the pull requests merged within a window.
        start: First window start.
        now: Fixed upper bound; windows start strictly before it.
        out: Text stream receiving the report.
        sleep: Pause function, replaceable in tests.
        delay_seconds: Pause between windows.

    Returns:
        The rows written, in window order.
    """
    rows: List[StatRow] = []

    for window_start, window_end in iter_monthly_windows(start, now):
        if rows:
            sleep(delay_seconds)

        pull_requests = fetch(window_start, window_end)
        row = create_stat(pull_requests, format_timestamp(window_start), format_timestamp(window_end))

        if not rows:
            out.write(format_header() + "\n")
        out.write(format_row(row) + "\n")
        out.flush()

        logger.info(
            "Wrote window statistics",
            extra={"window_start": row.start, "window_end": row.end, "pull_requests": row.count},
        )
        rows.append(row)

    return rows

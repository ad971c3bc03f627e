"""Calendar-month windowing for the report."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterator, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .errors import InvalidInputError

logger = logging.getLogger(__name__)

Window = Tuple[datetime, datetime]


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO8601 date or datetime into a timezone-aware datetime.

    A trailing ``Z`` is accepted and naive values are treated as UTC.
    Returns ``None`` for empty input.

    Raises:
        ValueError: If ``value`` is not ISO8601.
    """
    if not value:
        return None

    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format a datetime as UTC ISO8601 with a ``Z`` suffix."""
    utc_value = value.astimezone(timezone.utc)
    return utc_value.isoformat().replace("+00:00", "Z")


def parse_start(value: Optional[str]) -> datetime:
    """Parse the report start date.

    Raises:
        InvalidInputError: If ``value`` is empty or not ISO8601.
    """
    try:
        parsed = parse_timestamp(value)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid start date {value!r}: expected an ISO8601 date.") from exc

    if parsed is None:
        raise InvalidInputError("Missing start date: expected an ISO8601 date.")
    return parsed


def iter_monthly_windows(start: datetime, now: datetime) -> Iterator[Window]:
    """Yield consecutive one-month ``[window_start, window_end)`` pairs.

    Iteration continues while ``window_start < now``. ``now`` is a fixed
    bound chosen by the caller. Each window starts where the previous one
    ended; month arithmetic clamps the day to the month length.
    """
    window_start = start
    while window_start < now:
        window_end = window_start + relativedelta(months=1)
        logger.debug(
            "Yielding monthly window",
            extra={"window_start": format_timestamp(window_start), "window_end": format_timestamp(window_end)},
        )
        yield window_start, window_end
        window_start = window_end

"""Statistics helpers and the per-window aggregation.

This module provides utilities for:
- Sum, average and median over numeric samples, degenerating to ``0`` on
  empty input.
- Linear-interpolation percentiles, of which the median is the 50th.
- Reducing a window's pull requests to a single :class:`StatRow`.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from .models import PullRequest, StatRow


def calculate_percentile(sorted_values: Sequence[float], p: float) -> Optional[float]:
    """Calculate a percentile using linear interpolation.

    The input sequence is expected to already be sorted in ascending order.
    - Empty input returns ``None``.
    - ``p <= 0`` returns the first value.
    - ``p >= 100`` returns the last value.
    - Otherwise, percentile is linearly interpolated between adjacent ranks.

    Args:
        sorted_values: Sorted numeric samples.
        p: Percentile in the inclusive range ``[0, 100]``.

    Returns:
        Percentile value or ``None`` when input is empty.

    Raises:
        ValueError: If ``p`` is outside ``[0, 100]``.
    """
    if not 0 <= p <= 100:
        raise ValueError("Percentile 'p' must be in the range [0, 100].")

    if not sorted_values:
        return None

    if p <= 0:
        return sorted_values[0]

    if p >= 100:
        return sorted_values[-1]

    position = (len(sorted_values) - 1) * (p / 100.0)
    lower_index = math.floor(position)
    upper_index = math.ceil(position)

    if lower_index == upper_index:
        return sorted_values[int(position)]

    lower_value = sorted_values[lower_index]
    upper_value = sorted_values[upper_index]
    return lower_value + (upper_value - lower_value) * (position - lower_index)


def calculate_sum(values: Sequence[float]) -> float:
    """Return the sum of ``values`` (``0`` when empty)."""
    return sum(values, 0)


def calculate_average(values: Sequence[float]) -> float:
    """Return the arithmetic mean of ``values``, or ``0`` when empty."""
    if not values:
        return 0
    return calculate_sum(values) / len(values)


def calculate_median(values: Sequence[float]) -> float:
    """Return the median of ``values``, or ``0`` when empty.

    Odd-length samples yield the middle element; even-length samples yield
    the mean of the two middle elements.
    """
    median = calculate_percentile(sorted(values), 50)
    if median is None:
        return 0
    return median


def create_stat(records: Sequence[PullRequest], start: Optional[str], end: Optional[str]) -> StatRow:
    """Reduce one window's pull requests to a :class:`StatRow`.

    Records are trusted to belong to ``[start, end)``; nothing is re-filtered.
    Duration averages and medians are floored toward negative infinity.
    First-review statistics only consider records that had a review, while
    lead time and time to merge cover every record.

    Raises:
        InvalidInputError: If a record lacks the timestamps needed for lead
            time or time to merge.
    """
    additions: List[int] = [record.additions for record in records]
    deletions: List[int] = [record.deletions for record in records]
    lead_times: List[float] = [record.leadTimeSeconds for record in records]
    times_to_merge: List[float] = [record.timeToMergeSeconds for record in records]
    times_from_first_review: List[float] = [
        duration
        for duration in (record.timeToMergeFromFirstReviewSeconds for record in records)
        if duration is not None
    ]

    return StatRow(
        start=start or "",
        end=end or "",
        count=len(records),
        authorCount=len({record.author for record in records}),
        additions=calculate_sum(additions),
        additionsAverage=calculate_average(additions),
        additionsMedian=calculate_median(additions),
        deletions=calculate_sum(deletions),
        deletionsAverage=calculate_average(deletions),
        deletionsMedian=calculate_median(deletions),
        leadTimeSecondsAverage=math.floor(calculate_average(lead_times)),
        leadTimeSecondsMedian=math.floor(calculate_median(lead_times)),
        timeToMergeSecondsAverage=math.floor(calculate_average(times_to_merge)),
        timeToMergeSecondsMedian=math.floor(calculate_median(times_to_merge)),
        timeToMergeFromFirstReviewSecondsAverage=math.floor(calculate_average(times_from_first_review)),
        timeToMergeFromFirstReviewSecondsMedian=math.floor(calculate_median(times_from_first_review)),
    )

"""Domain models for pull-request statistics.

Field names follow the GitHub GraphQL payload (and the local log format) so
that ``StatRow`` field names double as CSV column names.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .errors import InvalidInputError


def _seconds_between(later: Optional[datetime], earlier: Optional[datetime], label: str, url: str) -> float:
    if later is None or earlier is None:
        raise InvalidInputError(f"Cannot compute {label} for pull request {url!r}: missing timestamp.")
    return (later - earlier).total_seconds()


@dataclass(frozen=True, slots=True)
class PullRequest:
    """Represents one merged pull request."""

    title: str
    author: str
    url: str
    createdAt: datetime
    mergedAt: datetime
    additions: int
    deletions: int
    authoredDate: datetime
    firstReviewedAt: Optional[datetime] = None

    @property
    def leadTimeSeconds(self) -> float:
        """Seconds from the authored date to the merge."""
        return _seconds_between(self.mergedAt, self.authoredDate, "lead time", self.url)

    @property
    def timeToMergeSeconds(self) -> float:
        """Seconds from pull request creation to the merge."""
        return _seconds_between(self.mergedAt, self.createdAt, "time to merge", self.url)

    @property
    def timeToMergeFromFirstReviewSeconds(self) -> Optional[float]:
        """Seconds from the first review to the merge, ``None`` without a review."""
        if self.firstReviewedAt is None:
            return None
        return _seconds_between(self.mergedAt, self.firstReviewedAt, "time to merge from first review", self.url)


@dataclass(frozen=True, slots=True)
class StatRow:
    """Aggregated statistics for one monthly window.

    Declaration order is the report column order.
    """

    start: str
    end: str
    count: int
    authorCount: int
    additions: int
    additionsAverage: float
    additionsMedian: float
    deletions: int
    deletionsAverage: float
    deletionsMedian: float
    leadTimeSecondsAverage: int
    leadTimeSecondsMedian: int
    timeToMergeSecondsAverage: int
    timeToMergeSecondsMedian: int
    timeToMergeFromFirstReviewSecondsAverage: int
    timeToMergeFromFirstReviewSecondsMedian: int

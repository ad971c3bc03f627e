"""Local pull-request log loading.

The log is a JSON array of objects shaped like the GitHub records this tool
fetches::

    [{"title": "...", "author": "octocat", "url": "...",
      "createdAt": "2024-01-02T10:00:00Z", "mergedAt": "...",
      "additions": 10, "deletions": 2, "authoredDate": "...",
      "firstReviewedAt": null}]
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .errors import ParseError
from .models import PullRequest
from .windows import parse_timestamp

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("title", "author", "url")
_TIMESTAMP_FIELDS = ("createdAt", "mergedAt", "authoredDate")
_COUNT_FIELDS = ("additions", "deletions")


def _require_text(item: Dict[str, Any], field: str, index: int) -> str:
    value = item.get(field)
    if not isinstance(value, str):
        raise ParseError(f"Log entry {index}: field '{field}' must be a string, got {value!r}.")
    return value


def _require_count(item: Dict[str, Any], field: str, index: int) -> int:
    value = item.get(field)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ParseError(f"Log entry {index}: field '{field}' must be a non-negative integer, got {value!r}.")
    return value


def _parse_entry_timestamp(item: Dict[str, Any], field: str, index: int, required: bool) -> Optional[datetime]:
    value = item.get(field)
    if value is None and not required:
        return None
    if not isinstance(value, str):
        raise ParseError(f"Log entry {index}: field '{field}' must be an ISO8601 string, got {value!r}.")

    try:
        parsed = parse_timestamp(value)
    except ValueError as exc:
        raise ParseError(f"Log entry {index}: field '{field}' is not ISO8601: {value!r}.") from exc

    if parsed is None and required:
        raise ParseError(f"Log entry {index}: field '{field}' must not be empty.")
    return parsed


def parse_pull_request(item: Any, index: int) -> PullRequest:
    """Validate one decoded log entry into a :class:`PullRequest`.

    Raises:
        ParseError: If the entry is not an object or has missing or mistyped fields.
    """
    if not isinstance(item, dict):
        raise ParseError(f"Log entry {index}: expected an object, got {type(item).__name__}.")

    text = {field: _require_text(item, field, index) for field in _TEXT_FIELDS}
    counts = {field: _require_count(item, field, index) for field in _COUNT_FIELDS}
    timestamps = {field: _parse_entry_timestamp(item, field, index, required=True) for field in _TIMESTAMP_FIELDS}

    return PullRequest(
        firstReviewedAt=_parse_entry_timestamp(item, "firstReviewedAt", index, required=False),
        **text,
        **counts,
        **timestamps,
    )


def load_pull_requests_from_log(path: Union[str, Path]) -> List[PullRequest]:
    """Load and validate every pull request in a JSON log file.

    Raises:
        ParseError: If the file cannot be read, is not valid JSON, is not an
            array, or contains an invalid entry.
    """
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except OSError as exc:
        raise ParseError(f"Unable to read pull-request log '{path}': {exc}") from exc
    except ValueError as exc:
        raise ParseError(f"Pull-request log '{path}' is not valid JSON: {exc}") from exc

    if not isinstance(payload, list):
        raise ParseError(f"Pull-request log '{path}' must contain a JSON array.")

    pull_requests = [parse_pull_request(item, index) for index, item in enumerate(payload)]
    logger.info("Loaded pull-request log", extra={"path": str(path), "pull_requests": len(pull_requests)})
    return pull_requests


def filter_merged_between(
    pull_requests: Sequence[PullRequest],
    start: datetime,
    end: datetime,
) -> List[PullRequest]:
    """Return the pull requests merged within ``[start, end)``."""
    return [pr for pr in pull_requests if start <= pr.mergedAt < end]

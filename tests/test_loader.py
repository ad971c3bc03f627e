"""Tests for local pull-request log loading."""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prstat.errors import ParseError
from prstat.loader import filter_merged_between, load_pull_requests_from_log


def _entry(**overrides) -> dict:
    entry = {
        "title": "Add feature",
        "author": "alice",
        "url": "https://github.com/org/repo/pull/1",
        "createdAt": "2024-01-02T10:00:00Z",
        "mergedAt": "2024-01-03T10:00:00Z",
        "additions": 10,
        "deletions": 2,
        "authoredDate": "2024-01-01T10:00:00Z",
        "firstReviewedAt": "2024-01-02T12:00:00Z",
    }
    entry.update(overrides)
    return entry


def _write_log(tmp_path: Path, payload) -> Path:
    path = tmp_path / "prs.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_pull_requests_from_log_parses_all_fields(tmp_path):
    """Verify a well-formed log entry becomes a fully populated PullRequest."""
    path = _write_log(tmp_path, [_entry()])

    prs = load_pull_requests_from_log(path)

    assert len(prs) == 1
    pr = prs[0]
    assert pr.author == "alice"
    assert pr.additions == 10
    assert pr.mergedAt == datetime(2024, 1, 3, 10, 0, 0, tzinfo=timezone.utc)
    assert pr.leadTimeSeconds == 2 * 24 * 3600
    assert pr.timeToMergeSeconds == 24 * 3600
    assert pr.timeToMergeFromFirstReviewSeconds == 22 * 3600


def test_load_pull_requests_from_log_first_review_may_be_null_or_absent(tmp_path):
    """Verify firstReviewedAt is optional and maps to an undefined first-review duration."""
    without_key = _entry()
    del without_key["firstReviewedAt"]
    path = _write_log(tmp_path, [_entry(firstReviewedAt=None), without_key])

    prs = load_pull_requests_from_log(path)

    assert [pr.timeToMergeFromFirstReviewSeconds for pr in prs] == [None, None]


@pytest.mark.parametrize(
    "entry",
    [
        _entry(additions="10"),
        _entry(deletions=-1),
        _entry(additions=True),
        _entry(author=None),
        _entry(mergedAt="yesterday"),
        _entry(createdAt=""),
        _entry(firstReviewedAt=12345),
        {"title": "only a title"},
        "not an object",
    ],
)
def test_load_pull_requests_from_log_invalid_entry_raises_parse_error(tmp_path, entry):
    """Verify missing or mistyped fields fail with ParseError instead of producing partial records."""
    path = _write_log(tmp_path, [_entry(), entry])

    with pytest.raises(ParseError, match="Log entry 1"):
        load_pull_requests_from_log(path)


def test_load_pull_requests_from_log_non_array_raises_parse_error(tmp_path):
    """Verify a top-level object is rejected."""
    path = _write_log(tmp_path, {"pullRequests": []})

    with pytest.raises(ParseError):
        load_pull_requests_from_log(path)


def test_load_pull_requests_from_log_invalid_json_raises_parse_error(tmp_path):
    """Verify malformed JSON is reported as ParseError."""
    path = tmp_path / "prs.json"
    path.write_text("[{", encoding="utf-8")

    with pytest.raises(ParseError):
        load_pull_requests_from_log(path)


def test_load_pull_requests_from_log_missing_file_raises_parse_error(tmp_path):
    """Verify an unreadable path is reported as ParseError."""
    with pytest.raises(ParseError):
        load_pull_requests_from_log(tmp_path / "missing.json")


def test_filter_merged_between_uses_half_open_window(tmp_path):
    """Verify records merged exactly at the window end belong to the next window."""
    path = _write_log(
        tmp_path,
        [
            _entry(url="u1", mergedAt="2024-01-01T00:00:00Z"),
            _entry(url="u2", mergedAt="2024-01-31T23:59:59Z"),
            _entry(url="u3", mergedAt="2024-02-01T00:00:00Z"),
        ],
    )
    prs = load_pull_requests_from_log(path)

    selected = filter_merged_between(
        prs,
        datetime(2024, 1, 1, tzinfo=timezone.utc),
        datetime(2024, 2, 1, tzinfo=timezone.utc),
    )

    assert [pr.url for pr in selected] == ["u1", "u2"]

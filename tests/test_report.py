"""Tests for report formatting and the monthly orchestration loop."""

import io
import sys
from dataclasses import fields
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prstat.errors import ApiError
from prstat.models import PullRequest, StatRow
from prstat.report import format_header, format_row, format_value, generate_report
from prstat.stats import create_stat


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def _make_pr(author: str, additions: int, merged: datetime) -> PullRequest:
    return PullRequest(
        title="Change",
        author=author,
        url=f"https://github.com/org/repo/pull/{additions}",
        createdAt=merged - timedelta(hours=1),
        mergedAt=merged,
        additions=additions,
        deletions=1,
        authoredDate=merged - timedelta(hours=2),
    )


def test_format_header_matches_stat_row_declaration_order():
    """Verify header columns follow StatRow field declaration order exactly."""
    header = format_header()

    assert header.split(",") == [field.name for field in fields(StatRow)]
    assert header.startswith("start,end,count,authorCount,additions,")


def test_format_row_has_one_value_per_header_column():
    """Verify every data row has as many values as the header."""
    row = create_stat([_make_pr("a", 10, _utc(2024, 1, 5))], "s", "e")

    assert len(format_row(row).split(",")) == len(format_header().split(","))


def test_format_value_prints_whole_floats_as_integers():
    """Verify 15.0 renders as 15 while fractional values keep their decimals."""
    assert format_value(15.0) == "15"
    assert format_value(2.5) == "2.5"
    assert format_value(7) == "7"
    assert format_value("2024-01-01T00:00:00Z") == "2024-01-01T00:00:00Z"


def test_generate_report_writes_header_once_and_one_row_per_window():
    """Verify each window is fetched, aggregated and streamed in order."""
    fetch = Mock(
        side_effect=[
            [_make_pr("a", 10, _utc(2024, 1, 20)), _make_pr("b", 20, _utc(2024, 2, 1))],
            [],
        ]
    )
    out = io.StringIO()
    sleep = Mock()

    rows = generate_report(
        fetch=fetch,
        start=_utc(2024, 1, 15),
        now=_utc(2024, 3, 1),
        out=out,
        sleep=sleep,
        delay_seconds=5.0,
    )

    lines = out.getvalue().splitlines()
    assert lines[0] == format_header()
    assert len(lines) == 3
    assert lines[1].startswith("2024-01-15T00:00:00Z,2024-02-15T00:00:00Z,2,2,30,15,15,")
    assert lines[2].startswith("2024-02-15T00:00:00Z,2024-03-15T00:00:00Z,0,0,0,0,0,")
    assert [row.count for row in rows] == [2, 0]
    fetch.assert_any_call(_utc(2024, 1, 15), _utc(2024, 2, 15))
    fetch.assert_any_call(_utc(2024, 2, 15), _utc(2024, 3, 15))


def test_generate_report_sleeps_only_between_windows():
    """Verify the rate-limit delay runs between windows, not before the first or after the last."""
    sleep = Mock()

    generate_report(
        fetch=Mock(return_value=[]),
        start=_utc(2024, 1, 1),
        now=_utc(2024, 3, 15),
        out=io.StringIO(),
        sleep=sleep,
        delay_seconds=5.0,
    )

    assert sleep.call_count == 2
    sleep.assert_called_with(5.0)


def test_generate_report_flushes_each_row():
    """Verify rows are flushed as soon as they are written."""
    out = Mock()

    generate_report(
        fetch=Mock(return_value=[]),
        start=_utc(2024, 1, 1),
        now=_utc(2024, 2, 15),
        out=out,
        sleep=Mock(),
    )

    assert out.flush.call_count == 2


def test_generate_report_start_after_now_writes_nothing():
    """Verify no header is printed when there are no windows."""
    out = io.StringIO()
    fetch = Mock()

    rows = generate_report(fetch=fetch, start=_utc(2024, 5, 1), now=_utc(2024, 3, 1), out=out, sleep=Mock())

    assert rows == []
    assert out.getvalue() == ""
    fetch.assert_not_called()


def test_generate_report_propagates_fetch_errors_after_streaming_earlier_rows():
    """Verify a failing window aborts the run while earlier rows stay written."""
    fetch = Mock(side_effect=[[], ApiError("rate limited")])
    out = io.StringIO()

    with pytest.raises(ApiError):
        generate_report(fetch=fetch, start=_utc(2024, 1, 1), now=_utc(2024, 3, 1), out=out, sleep=Mock())

    assert len(out.getvalue().splitlines()) == 2

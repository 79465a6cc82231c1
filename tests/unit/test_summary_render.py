from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

import pytest

from sheetdiff.models.diff_result import DiffSummary
from sheetdiff.models.processing_result import ComparisonStat, ComparisonStatus, RunResult
from sheetdiff.services.summary import format_seconds, render_comparison_line, render_summary_line

SUMMARY_RE = re.compile(
    r"^SUMMARY comparisons=(\d+)/(\d+) success=(\d+) failed=(\d+) unchanged=(\d+) "
    r"added=(\d+) changed=(\d+) removed=(\d+) elapsed_sec=([0-9]+(?:\.[0-9]+)?)$"
)


def _run_result(stats: list[ComparisonStat], elapsed: float = 1.25) -> RunResult:
    start = datetime.now(UTC)
    success = sum(1 for s in stats if s.status is ComparisonStatus.SUCCESS)
    return RunResult(
        success_count=success,
        failed_count=len(stats) - success,
        start_time=start,
        end_time=start + timedelta(seconds=elapsed),
        elapsed_seconds=elapsed,
        comparison_stats=stats,
    )


def test_render_summary_line_basic():
    stats = [
        ComparisonStat(
            "srs",
            ComparisonStatus.SUCCESS,
            0.5,
            summary=DiffSummary(unchanged_count=10, added_count=2, changed_count=1, removed_count=3),
        ),
        ComparisonStat(
            "sds",
            ComparisonStatus.SUCCESS,
            0.5,
            summary=DiffSummary(unchanged_count=5, changed_count=4),
        ),
        ComparisonStat("broken", ComparisonStatus.FAILED, 0.1, error="headers differ"),
    ]
    line = render_summary_line(_run_result(stats))
    assert line == (
        "SUMMARY comparisons=3/3 success=2 failed=1 unchanged=15 added=2 changed=5 "
        "removed=3 elapsed_sec=1.25"
    )
    m = SUMMARY_RE.match(line)
    assert m is not None
    assert m.group(1) == m.group(2)


def test_render_summary_line_no_comparisons():
    line = render_summary_line(_run_result([], elapsed=0))
    assert line == (
        "SUMMARY comparisons=0/0 success=0 failed=0 unchanged=0 added=0 changed=0 "
        "removed=0 elapsed_sec=0"
    )


def test_render_summary_line_without_stats():
    start = datetime.now(UTC)
    result = RunResult(1, 0, start, start, 0.2)
    assert SUMMARY_RE.match(render_summary_line(result))


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "0"),
        (2.0, "2"),
        (1.5, "1.5"),
        (1.23456, "1.235"),
        (0.005, "0.005"),
        (0.0000123, "0.000012"),
    ],
)
def test_format_seconds(seconds: float, expected: str):
    assert format_seconds(seconds) == expected


def test_render_comparison_line_plain():
    summary = DiffSummary(unchanged_count=3, added_count=1, changed_count=2, removed_count=4)
    assert render_comparison_line("srs", summary) == (
        "comparison=srs unchanged=3 added=1 changed=2 removed=4"
    )


def test_render_comparison_line_with_warnings():
    summary = DiffSummary(
        unchanged_count=1,
        duplicate_keys_a=frozenset({"K1", "K2"}),
        empty_keys_b=3,
    )
    assert render_comparison_line("srs", summary) == (
        "comparison=srs unchanged=1 added=0 changed=0 removed=0 duplicate_keys=2/0 empty_keys=0/3"
    )

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from .diff_result import DiffSummary

"""Run result models for the comparison runner.

ComparisonStat is the per-comparison outcome; RunResult aggregates them for
the SUMMARY line and the exit code.
"""

__all__ = [
    "ComparisonStatus",
    "ComparisonStat",
    "RunResult",
]


class ComparisonStatus(Enum):
    """Outcome of one configured comparison.

    - SUCCESS: reconciled and report written
    - FAILED: aborted (read error, schema mismatch, bad selection, ...)
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ComparisonStat:
    name: str
    status: ComparisonStatus
    elapsed_seconds: float
    summary: DiffSummary | None = None  # None when failed
    report_path: Path | None = None
    error: str | None = None  # failure reason


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one CLI run."""
    success_count: int
    failed_count: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    comparison_stats: list[ComparisonStat] | None = None
    error_log_path: Path | None = None

    @property
    def total(self) -> int:
        return self.success_count + self.failed_count

    def _sum(self, attr: str) -> int:
        return sum(
            getattr(s.summary, attr)
            for s in (self.comparison_stats or [])
            if s.summary is not None
        )

    @property
    def unchanged(self) -> int:
        return self._sum("unchanged_count")

    @property
    def added(self) -> int:
        return self._sum("added_count")

    @property
    def changed(self) -> int:
        return self._sum("changed_count")

    @property
    def removed(self) -> int:
        return self._sum("removed_count")

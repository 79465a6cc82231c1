from __future__ import annotations

from ..models.diff_result import DiffSummary
from ..models.processing_result import RunResult

"""Summary line rendering.

Format:
SUMMARY comparisons={total}/{total} success={n} failed={n} unchanged={n}
added={n} changed={n} removed={n} elapsed_sec={elapsed}
"""

__all__ = [
    "format_seconds",
    "render_comparison_line",
    "render_summary_line",
]


def format_seconds(seconds: float) -> str:
    """Render seconds without trailing zeros or scientific notation."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_comparison_line(name: str, summary: DiffSummary) -> str:
    """One-line result of a single comparison (without level label).

    >>> render_comparison_line("req", DiffSummary(unchanged_count=3, added_count=1))
    'comparison=req unchanged=3 added=1 changed=0 removed=0'
    """
    line = (
        f"comparison={name} "
        f"unchanged={summary.unchanged_count} "
        f"added={summary.added_count} "
        f"changed={summary.changed_count} "
        f"removed={summary.removed_count}"
    )
    if summary.duplicate_keys_a or summary.duplicate_keys_b:
        line += (
            f" duplicate_keys={len(summary.duplicate_keys_a)}/{len(summary.duplicate_keys_b)}"
        )
    if summary.empty_keys_a or summary.empty_keys_b:
        line += f" empty_keys={summary.empty_keys_a}/{summary.empty_keys_b}"
    return line


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a whole run.

    >>> from datetime import datetime, timezone
    >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
    >>> render_summary_line(RunResult(1, 0, t, t, 2.0, []))
    'SUMMARY comparisons=1/1 success=1 failed=0 unchanged=0 added=0 changed=0 removed=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY comparisons={result.total}/{result.total} "
        f"success={result.success_count} "
        f"failed={result.failed_count} "
        f"unchanged={result.unchanged} "
        f"added={result.added} "
        f"changed={result.changed} "
        f"removed={result.removed} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from ..models.dataset import Dataset
from ..models.diff_result import ComparisonResult, DiffStatus

"""Report writer: ComparisonResult -> workbook.

Sheets:
- Result  : key | <compare> [Old]... | <compare> [New]... | Status
- Removed : key | <compare> [Old]...
- Legend  : Status | Meaning

Plain values only; cell styling is left to whoever opens the workbook.
Control characters openpyxl refuses to store (\\x00-\\x08 etc.) are dropped.
"""

__all__ = [
    "RESULT_SHEET",
    "REMOVED_SHEET",
    "LEGEND_SHEET",
    "REMOVED_STATUS",
    "LEGEND_ITEMS",
    "column_labels",
    "build_report_frames",
    "write_report",
]

RESULT_SHEET = "Result"
REMOVED_SHEET = "Removed"
LEGEND_SHEET = "Legend"
REMOVED_STATUS = "Removed"

LEGEND_ITEMS: list[tuple[str, str]] = [
    (DiffStatus.UNCHANGED.value, "No change"),
    (DiffStatus.ADDED.value, "New in the revision"),
    (DiffStatus.CHANGED.value, "Value changed compared to the baseline"),
    (REMOVED_STATUS, "Only in the baseline"),
]

_FALLBACK_KEY_LABEL = "Key"
_FALLBACK_VALUE_LABEL = "Value"


def _clean(value: str) -> str:
    # openpyxl は制御文字を含むセルで IllegalCharacterError を投げる
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def column_labels(dataset: Dataset, compare_cols: Sequence[int], suffix: str) -> list[str]:
    """Labels such as 'Text [Old]' for the selected compare columns."""
    labels = []
    for idx in compare_cols:
        header = dataset.headers[idx].strip() if idx < len(dataset.headers) else ""
        labels.append(f"{_clean(header) or _FALLBACK_VALUE_LABEL} [{suffix}]")
    return labels


def build_report_frames(
    result: ComparisonResult,
    dataset_a: Dataset,
    dataset_b: Dataset,
    key_col_b: int,
    compare_cols_a: Sequence[int],
    compare_cols_b: Sequence[int],
) -> dict[str, pd.DataFrame]:
    """Build one DataFrame per report sheet (sheet name -> frame)."""
    key_label = _clean(dataset_b.headers[key_col_b].strip()) or _FALLBACK_KEY_LABEL
    old_labels = column_labels(dataset_a, compare_cols_a, "Old")
    new_labels = column_labels(dataset_b, compare_cols_b, "New")

    # DataFrame の列名重複を避けるため、列名ではなく位置でデータを組み立てる
    result_rows = [
        [
            _clean(row.key),
            *(_clean(v) for v in row.old_values),
            *(_clean(v) for v in row.new_values),
            row.status.value,
        ]
        for row in result.rows
    ]
    result_df = pd.DataFrame(result_rows, columns=range(2 + len(old_labels) + len(new_labels)))
    result_df.columns = [key_label, *old_labels, *new_labels, "Status"]

    removed_rows = [
        [_clean(row.key), *(_clean(v) for v in row.old_values)] for row in result.removed
    ]
    removed_df = pd.DataFrame(removed_rows, columns=range(1 + len(old_labels)))
    removed_df.columns = [key_label, *old_labels]

    legend_df = pd.DataFrame(LEGEND_ITEMS, columns=["Status", "Meaning"])
    return {
        RESULT_SHEET: result_df,
        REMOVED_SHEET: removed_df,
        LEGEND_SHEET: legend_df,
    }


def write_report(
    path: Path,
    result: ComparisonResult,
    dataset_a: Dataset,
    dataset_b: Dataset,
    key_col_b: int,
    compare_cols_a: Sequence[int],
    compare_cols_b: Sequence[int],
) -> Path:
    """Write the three-sheet report workbook and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frames = build_report_frames(
        result, dataset_a, dataset_b, key_col_b, compare_cols_a, compare_cols_b
    )
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, df in frames.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    return path

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""Config dataclasses for the comparison runner.

These are filled by sheetdiff.config.loader after schema validation.
"""

__all__ = [
    "ColumnRef",
    "ComparisonConfig",
    "RunConfig",
]

# 列参照: ヘッダ名 (str) または 0 始まりの列番号 (int)
ColumnRef = int | str


@dataclass(frozen=True)
class ComparisonConfig:
    """One baseline/revision pair to reconcile."""
    name: str  # unique comparison name (used in logs / error records)
    baseline: Path  # dataset A
    revision: Path  # dataset B
    key_column: ColumnRef
    compare_columns: tuple[ColumnRef, ...]
    sheet: str | None = None  # None -> first worksheet
    output: str | None = None  # report file name; None -> "<name>.xlsx"

    @property
    def output_name(self) -> str:
        return self.output or f"{self.name}.xlsx"


@dataclass(frozen=True)
class RunConfig:
    """Root configuration object."""
    output_directory: Path
    comparisons: tuple[ComparisonConfig, ...]

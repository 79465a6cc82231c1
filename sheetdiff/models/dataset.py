from __future__ import annotations

from dataclasses import dataclass, field

"""Dataset and KeyIndex domain models.

A Dataset is the tabular snapshot produced by the sheet reader: one header row
plus text rows. A KeyIndex groups a dataset's rows by normalized key and is
built once per comparison run.
"""

__all__ = [
    "Dataset",
    "KeyedEntry",
    "KeyIndex",
]


@dataclass(frozen=True)
class Dataset:
    """Parsed sheet: headers and text rows (blank rows already dropped).

    Rows may be shorter than the header; missing cells read as "".
    """
    headers: list[str]
    rows: list[list[str]]
    source: str | None = None  # file name (diagnostics only)
    sheet_name: str | None = None

    def cell(self, row_index: int, column_index: int) -> str:
        row = self.rows[row_index]
        if column_index < len(row):
            return row[column_index]
        return ""

    @property
    def label(self) -> str:
        if self.source and self.sheet_name:
            return f"{self.source}:{self.sheet_name}"
        return self.source or self.sheet_name or "<dataset>"


@dataclass(frozen=True)
class KeyedEntry:
    """One dataset row as seen by the matcher.

    source_row_index is the 1-based sheet row number (header = row 1).
    """
    raw_key: str
    raw_values: tuple[str, ...]
    norm_values: tuple[str, ...]
    source_row_index: int

    @property
    def composite_key(self) -> tuple[str, ...]:
        # 列順を保持したタプル比較 (順序が違えば別値)
        return self.norm_values


@dataclass(frozen=True)
class KeyIndex:
    """Rows of one dataset grouped by normalized key, in first-seen order."""
    entries_by_key: dict[str, list[KeyedEntry]]
    key_order: list[str]
    duplicate_keys: frozenset[str] = field(default_factory=frozenset)
    empty_key_count: int = 0

    def __contains__(self, key: object) -> bool:
        return key in self.entries_by_key

    def entries(self, key: str) -> list[KeyedEntry]:
        return self.entries_by_key.get(key, [])

    @property
    def entry_count(self) -> int:
        return sum(len(v) for v in self.entries_by_key.values())

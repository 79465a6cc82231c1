from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .dataset import KeyedEntry

"""Reconciliation result models.

DiffRow / RemovedRow are what the report writer consumes; DiffSummary carries
the counts and the non-fatal warnings (duplicate keys, empty keys) for one run.
"""

__all__ = [
    "DiffStatus",
    "DiffRow",
    "RemovedRow",
    "DiffSummary",
    "HeaderCheck",
    "MatchResult",
    "ComparisonResult",
]


class DiffStatus(Enum):
    """Classification of a row present in the revision (or paired with it).

    Removed rows are not a status: they are collected separately as RemovedRow.
    """
    UNCHANGED = "Unchanged"
    ADDED = "Added"
    CHANGED = "Changed"


@dataclass(frozen=True)
class DiffRow:
    status: DiffStatus
    key: str
    old_values: tuple[str, ...]
    new_values: tuple[str, ...]


@dataclass(frozen=True)
class RemovedRow:
    key: str
    old_values: tuple[str, ...]


@dataclass(frozen=True)
class DiffSummary:
    """Counts plus caller-visible warnings for one reconcile() call."""
    unchanged_count: int = 0
    added_count: int = 0
    changed_count: int = 0
    removed_count: int = 0
    duplicate_keys_a: frozenset[str] = field(default_factory=frozenset)
    duplicate_keys_b: frozenset[str] = field(default_factory=frozenset)
    empty_keys_a: int = 0
    empty_keys_b: int = 0

    @property
    def has_warnings(self) -> bool:
        return bool(
            self.duplicate_keys_a
            or self.duplicate_keys_b
            or self.empty_keys_a
            or self.empty_keys_b
        )


@dataclass(frozen=True)
class HeaderCheck:
    ok: bool
    missing_in_a: list[str]
    missing_in_b: list[str]


@dataclass(frozen=True)
class MatchResult:
    """Outcome of value matching for the entries sharing one key."""
    matched: list[tuple[KeyedEntry, KeyedEntry]]
    remaining_a: list[KeyedEntry]
    remaining_b: list[KeyedEntry]


@dataclass(frozen=True)
class ComparisonResult:
    """Full engine output. Unpacks as (rows, removed, summary)."""
    rows: list[DiffRow]
    removed: list[RemovedRow]
    summary: DiffSummary

    def __iter__(self) -> Iterator[object]:
        return iter((self.rows, self.removed, self.summary))

    def rows_with_status(self, status: DiffStatus) -> list[DiffRow]:
        return [r for r in self.rows if r.status is status]

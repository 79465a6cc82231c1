from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models.dataset import Dataset, KeyedEntry, KeyIndex
from ..models.diff_result import ComparisonResult, DiffRow, DiffStatus, DiffSummary, RemovedRow
from .headers import compare_headers
from .key_index import build_index
from .matcher import match_by_value
from .normalize import normalize

"""Reconciliation engine: baseline (A) vs revision (B) keyed comparison.

Flow:
1. Validate headers (multiset equality) and column selections
2. Build a KeyIndex per dataset
3. Walk keys in B order, then A-only keys in A order
4. Per key: exact value matches -> Unchanged, positional leftovers -> Changed,
   surplus B -> Added, surplus A -> Removed

All structural problems are raised before any row is classified, so a call
either returns a complete result or raises.
"""

__all__ = [
    "ReconcileError",
    "SchemaMismatchError",
    "InvalidColumnSelectionError",
    "resolve_column",
    "reconcile",
]

logger = logging.getLogger(__name__)

ColumnRef = int | str


class ReconcileError(Exception):
    """Base exception for comparisons that cannot be run."""
    pass


class SchemaMismatchError(ReconcileError):
    """Raised when the header multisets of the two datasets differ."""

    def __init__(self, missing_in_a: list[str], missing_in_b: list[str]) -> None:
        self.missing_in_a = list(missing_in_a)
        self.missing_in_b = list(missing_in_b)
        parts = []
        if self.missing_in_a:
            parts.append(f"missing in baseline: {self.missing_in_a}")
        if self.missing_in_b:
            parts.append(f"missing in revision: {self.missing_in_b}")
        super().__init__("headers differ (" + "; ".join(parts) + ")")


class InvalidColumnSelectionError(ReconcileError):
    """Raised for non-numeric, out-of-range or mismatched column selections."""
    pass


def _parse_index_text(value: str) -> int | None:
    text = value.strip()
    if not text.isdecimal():
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _coerce_index(value: object, headers: Sequence[str], *, what: str) -> int:
    # bool は int のサブクラスなので明示的に弾く
    if isinstance(value, bool):
        raise InvalidColumnSelectionError(f"{what}: column index must be numeric, got {value!r}")
    idx = value if isinstance(value, int) else None
    if isinstance(value, str):
        idx = _parse_index_text(value)
    if idx is None:
        raise InvalidColumnSelectionError(f"{what}: column index must be numeric, got {value!r}")
    if not 0 <= idx < len(headers):
        raise InvalidColumnSelectionError(
            f"{what}: column index {idx} out of range (dataset has {len(headers)} columns)"
        )
    return idx


def resolve_column(headers: Sequence[str], ref: ColumnRef, *, what: str) -> int:
    """Resolve a column reference (0-based index or header name) to an index.

    An int is always an index. A string is matched against the normalized
    headers first (first match wins); only when no header matches is a
    decimal string such as "2" read as an index.

    Raises:
        InvalidColumnSelectionError: If the reference matches no column.
    """
    if isinstance(ref, int) and not isinstance(ref, bool):
        return _coerce_index(ref, headers, what=what)
    if isinstance(ref, str):
        name = normalize(ref)
        for idx, header in enumerate(headers):
            if name and normalize(header) == name:
                return idx
        if _parse_index_text(ref) is not None:
            return _coerce_index(ref, headers, what=what)
        raise InvalidColumnSelectionError(
            f"{what}: column {ref!r} not found in header {list(headers)}"
        )
    raise InvalidColumnSelectionError(f"{what}: unsupported column reference {ref!r}")


def _validate_selection(
    dataset_a: Dataset,
    dataset_b: Dataset,
    key_col_a: object,
    key_col_b: object,
    compare_cols_a: Sequence[object],
    compare_cols_b: Sequence[object],
) -> tuple[int, int, list[int], list[int]]:
    key_a = _coerce_index(key_col_a, dataset_a.headers, what="baseline key column")
    key_b = _coerce_index(key_col_b, dataset_b.headers, what="revision key column")
    if not compare_cols_a or not compare_cols_b:
        raise InvalidColumnSelectionError("select at least one compare column in both datasets")
    if len(compare_cols_a) != len(compare_cols_b):
        raise InvalidColumnSelectionError(
            f"select the same number of compare columns in both datasets "
            f"(baseline={len(compare_cols_a)}, revision={len(compare_cols_b)})"
        )
    cols_a = [_coerce_index(c, dataset_a.headers, what="baseline compare column") for c in compare_cols_a]
    cols_b = [_coerce_index(c, dataset_b.headers, what="revision compare column") for c in compare_cols_b]
    for ca, cb in zip(cols_a, cols_b, strict=True):
        name_a = normalize(dataset_a.headers[ca])
        name_b = normalize(dataset_b.headers[cb])
        if name_a != name_b:
            raise InvalidColumnSelectionError(
                f"select the same compare columns in both datasets "
                f"(baseline {name_a!r} vs revision {name_b!r})"
            )
    return key_a, key_b, cols_a, cols_b


def _pair_key(a: KeyedEntry, b: KeyedEntry) -> str:
    return b.raw_key or a.raw_key


def _iteration_order(index_a: KeyIndex, index_b: KeyIndex) -> list[str]:
    keys_only_in_a = [k for k in index_a.key_order if k not in index_b]
    return [*index_b.key_order, *keys_only_in_a]


def reconcile(
    dataset_a: Dataset,
    dataset_b: Dataset,
    key_col_a: int | str,
    key_col_b: int | str,
    compare_cols_a: Sequence[int | str],
    compare_cols_b: Sequence[int | str],
) -> ComparisonResult:
    """Classify every keyed record of baseline A and revision B.

    Args:
        dataset_a: Baseline dataset.
        dataset_b: Revision dataset.
        key_col_a / key_col_b: 0-based key column index per dataset.
        compare_cols_a / compare_cols_b: 0-based compare column indexes; same
            length and same logical (header) columns on both sides.

    Returns:
        ComparisonResult (rows, removed, summary). Rows follow B's key order
        with A-only keys appended; removed rows are kept separately.

    Raises:
        SchemaMismatchError: Header multisets differ.
        InvalidColumnSelectionError: Bad index, empty or mismatched selection.
    """
    header_check = compare_headers(dataset_a.headers, dataset_b.headers)
    if not header_check.ok:
        raise SchemaMismatchError(header_check.missing_in_a, header_check.missing_in_b)
    key_a, key_b, cols_a, cols_b = _validate_selection(
        dataset_a, dataset_b, key_col_a, key_col_b, compare_cols_a, compare_cols_b
    )

    index_a = build_index(dataset_a.rows, key_a, cols_a)
    index_b = build_index(dataset_b.rows, key_b, cols_b)
    blank_old = tuple("" for _ in cols_a)

    rows: list[DiffRow] = []
    removed: list[RemovedRow] = []
    unchanged = added = changed = 0

    keys = _iteration_order(index_a, index_b)
    for key in keys:
        list_a = index_a.entries(key)
        list_b = index_b.entries(key)

        if not list_a:
            for b in list_b:
                rows.append(DiffRow(DiffStatus.ADDED, b.raw_key, blank_old, b.raw_values))
            added += len(list_b)
            continue
        if not list_b:
            removed.extend(RemovedRow(a.raw_key, a.raw_values) for a in list_a)
            continue

        result = match_by_value(list_a, list_b)
        for a, b in result.matched:
            rows.append(DiffRow(DiffStatus.UNCHANGED, _pair_key(a, b), a.raw_values, b.raw_values))
        unchanged += len(result.matched)

        # 残りは位置順 (FIFO) でペアリング -> Changed
        paired = min(len(result.remaining_a), len(result.remaining_b))
        for a, b in zip(result.remaining_a[:paired], result.remaining_b[:paired], strict=True):
            rows.append(DiffRow(DiffStatus.CHANGED, _pair_key(a, b), a.raw_values, b.raw_values))
        changed += paired

        for b in result.remaining_b[paired:]:
            rows.append(DiffRow(DiffStatus.ADDED, b.raw_key, blank_old, b.raw_values))
        added += len(result.remaining_b) - paired
        removed.extend(RemovedRow(a.raw_key, a.raw_values) for a in result.remaining_a[paired:])

    summary = DiffSummary(
        unchanged_count=unchanged,
        added_count=added,
        changed_count=changed,
        removed_count=len(removed),
        duplicate_keys_a=index_a.duplicate_keys,
        duplicate_keys_b=index_b.duplicate_keys,
        empty_keys_a=index_a.empty_key_count,
        empty_keys_b=index_b.empty_key_count,
    )
    logger.debug(
        "reconcile a=%s b=%s keys=%d unchanged=%d added=%d changed=%d removed=%d",
        dataset_a.label,
        dataset_b.label,
        len(keys),
        unchanged,
        added,
        changed,
        len(removed),
    )
    for side, dataset, index in (("baseline", dataset_a, index_a), ("revision", dataset_b, index_b)):
        if index.duplicate_keys:
            logger.warning(
                "%s %s has duplicate keys (paired in row order): %s",
                side,
                dataset.label,
                sorted(index.duplicate_keys),
            )
        if index.empty_key_count:
            logger.warning(
                "%s %s: %d row(s) without key skipped",
                side,
                dataset.label,
                index.empty_key_count,
            )
    return ComparisonResult(rows=rows, removed=removed, summary=summary)

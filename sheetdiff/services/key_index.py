from __future__ import annotations

from collections.abc import Sequence

from ..models.dataset import KeyedEntry, KeyIndex
from .normalize import normalize

"""Per-key grouping of dataset rows.

Rows whose key normalizes to "" are counted and left out of the index; they
take no part in matching and are never reported as added or removed.
"""

__all__ = [
    "HEADER_ROW_OFFSET",
    "build_index",
]

# data row 0 is sheet row 2 (row 1 = header)
HEADER_ROW_OFFSET = 2


def _cell(row: Sequence[object], index: int) -> str:
    if index < len(row) and row[index] is not None:
        return str(row[index])
    return ""


def build_index(
    rows: Sequence[Sequence[object]],
    key_column: int,
    compare_columns: Sequence[int],
) -> KeyIndex:
    """Group rows by normalized key preserving source order.

    Args:
        rows: Data rows (text cells). Short rows read missing cells as "".
        key_column: 0-based index of the key column.
        compare_columns: 0-based indexes of the compared value columns.

    Returns:
        KeyIndex with entries per key in source order (FIFO for the matcher),
        keys in first-seen order, the set of keys seen more than once and the
        number of rows skipped for an empty key.
    """
    entries_by_key: dict[str, list[KeyedEntry]] = {}
    key_order: list[str] = []
    duplicates: set[str] = set()
    empty_keys = 0

    for idx, row in enumerate(rows):
        raw_key = _cell(row, key_column)
        norm_key = normalize(raw_key)
        if not norm_key:
            empty_keys += 1
            continue
        entries = entries_by_key.get(norm_key)
        if entries is None:
            entries = entries_by_key[norm_key] = []
            key_order.append(norm_key)
        elif entries:
            duplicates.add(norm_key)
        raw_values = tuple(_cell(row, c) for c in compare_columns)
        entries.append(
            KeyedEntry(
                raw_key=raw_key,
                raw_values=raw_values,
                norm_values=tuple(normalize(v) for v in raw_values),
                source_row_index=idx + HEADER_ROW_OFFSET,
            )
        )

    return KeyIndex(
        entries_by_key=entries_by_key,
        key_order=key_order,
        duplicate_keys=frozenset(duplicates),
        empty_key_count=empty_keys,
    )

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from ..models.diff_result import HeaderCheck
from .normalize import normalize

"""Header compatibility check between baseline and revision.

Headers are compared as multisets of normalized names, so a column that is
duplicated on one side only is reported even though the name exists on both.
"""

__all__ = [
    "build_header_counts",
    "compare_headers",
]


def build_header_counts(headers: Iterable[object]) -> Counter[str]:
    """Count normalized header names, ignoring headers that normalize to ""."""
    counts: Counter[str] = Counter()
    for header in headers:
        name = normalize(header)
        if name:
            counts[name] += 1
    return counts


def _deficits(have: Counter[str], want: Counter[str]) -> list[str]:
    # want 側の出現順 (Counter は挿入順を保持)
    return [name for name, count in want.items() if have.get(name, 0) < count]


def compare_headers(headers_a: Iterable[object], headers_b: Iterable[object]) -> HeaderCheck:
    """Compare two header rows.

    Returns:
        HeaderCheck where missing_in_a lists headers B has more often than A,
        and missing_in_b the reverse. ok is True iff both lists are empty.
    """
    counts_a = build_header_counts(headers_a)
    counts_b = build_header_counts(headers_b)
    missing_in_a = _deficits(counts_a, counts_b)
    missing_in_b = _deficits(counts_b, counts_a)
    return HeaderCheck(
        ok=not missing_in_a and not missing_in_b,
        missing_in_a=missing_in_a,
        missing_in_b=missing_in_b,
    )

from __future__ import annotations

from collections import deque
from collections.abc import Sequence

from ..models.dataset import KeyedEntry
from ..models.diff_result import MatchResult

"""Greedy FIFO matching of same-key rows by composite value."""

__all__ = [
    "match_by_value",
]


def match_by_value(
    entries_a: Sequence[KeyedEntry],
    entries_b: Sequence[KeyedEntry],
) -> MatchResult:
    """Pair A and B entries sharing one key whose composite values are equal.

    A entries are queued per composite value. Each B entry, in order, takes
    the head of its queue if one is waiting, otherwise it is left over.
    Unclaimed A entries are returned in queue-creation order.
    """
    queues: dict[tuple[str, ...], deque[KeyedEntry]] = {}
    for entry in entries_a:
        queues.setdefault(entry.composite_key, deque()).append(entry)

    matched: list[tuple[KeyedEntry, KeyedEntry]] = []
    remaining_b: list[KeyedEntry] = []
    for entry in entries_b:
        queue = queues.get(entry.composite_key)
        if queue:
            matched.append((queue.popleft(), entry))
        else:
            remaining_b.append(entry)

    remaining_a: list[KeyedEntry] = []
    for queue in queues.values():
        remaining_a.extend(queue)

    return MatchResult(matched=matched, remaining_a=remaining_a, remaining_b=remaining_b)

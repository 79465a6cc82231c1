from __future__ import annotations

import re

"""Text normalization shared by header, key and value comparison.

Two cells are "visually equal" iff their normalized forms are equal.
"""

__all__ = [
    "normalize",
]

# zero-width space / non-joiner / joiner, BOM
_INVISIBLE_RE = re.compile("[\u200b-\u200d\ufeff]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(raw: object) -> str:
    """Strip invisible characters, collapse whitespace runs, trim.

    None is treated as an empty string. Idempotent.

    >>> normalize("  a\\u200b\\n  b ")
    'a b'
    """
    if raw is None:
        return ""
    text = _INVISIBLE_RE.sub("", str(raw))
    return _WHITESPACE_RE.sub(" ", text).strip()

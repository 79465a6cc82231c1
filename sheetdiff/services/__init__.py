from .headers import compare_headers
from .key_index import build_index
from .matcher import match_by_value
from .normalize import normalize
from .reconcile import (
    InvalidColumnSelectionError,
    ReconcileError,
    SchemaMismatchError,
    reconcile,
    resolve_column,
)

__all__ = [
    "normalize",
    "compare_headers",
    "build_index",
    "match_by_value",
    "reconcile",
    "resolve_column",
    "ReconcileError",
    "SchemaMismatchError",
    "InvalidColumnSelectionError",
]

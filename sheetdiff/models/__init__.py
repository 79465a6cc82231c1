"""Domain models for the spreadsheet comparison tool.

Datasets and key indexes feed the reconciliation engine; diff results come out
of it; config and run results belong to the batch runner around it.
"""

from .config_models import ComparisonConfig, RunConfig
from .dataset import Dataset, KeyedEntry, KeyIndex
from .diff_result import (
    ComparisonResult,
    DiffRow,
    DiffStatus,
    DiffSummary,
    HeaderCheck,
    MatchResult,
    RemovedRow,
)
from .processing_result import ComparisonStat, ComparisonStatus, RunResult

__all__ = [
    # Configuration models
    "ComparisonConfig",
    "RunConfig",
    # Engine input
    "Dataset",
    "KeyedEntry",
    "KeyIndex",
    # Engine output
    "ComparisonResult",
    "DiffRow",
    "DiffStatus",
    "DiffSummary",
    "HeaderCheck",
    "MatchResult",
    "RemovedRow",
    # Run results
    "ComparisonStat",
    "ComparisonStatus",
    "RunResult",
]

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the comparison error log.

One record per comparison that could not be completed. Records are written as
JSON Lines with a fixed key set (no extra keys).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        comparison: Name of the configured comparison
        file: File involved in the failure ("" when not file specific)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    comparison: str
    file: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(comparison: str, file: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            comparison=comparison,
            file=file,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line (non-ASCII kept as is)."""
        return json.dumps(asdict(self), ensure_ascii=False)

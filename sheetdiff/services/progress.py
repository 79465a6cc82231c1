from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

A single bar over the configured comparisons. In non-TTY environments (CI,
redirected output) no bar is created, so log output stays free of ANSI
control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress bar for comparison processing (context manager)."""

    def __init__(self, total: int, *, description: str = "Comparing") -> None:
        self.total = total
        self.description = description
        self.current = 0
        self.succeeded = 0
        self.failed = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit="cmp",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start(self, name: str) -> None:
        self.current += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({name})")

    def finish(self, success: bool = True) -> None:
        """Mark the current comparison done; the bar shows the running ok/ng tally."""
        if success:
            self.succeeded += 1
        else:
            self.failed += 1
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)
            self.pbar.set_postfix(ok=self.succeeded, ng=self.failed)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

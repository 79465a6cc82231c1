from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Failed-comparison log for a sheetdiff run.

比較が 1 件でも失敗したときだけ `logs/errors-<UTC stamp>.log` を作る。
1 行 1 レコードの JSON で、キーは ErrorRecord の 5 フィールドのみ。
run の途中では書かず、run_all の最後に flush() でまとめて追記する。
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Collects ErrorRecords for the current run.

    `logs_dir` defaults to ./logs relative to the working directory; the
    stamped file name is chosen the first time `file_path` is read.
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        # 何も失敗していなければファイルもディレクトリも作らない
        if not self._records:
            return self._file_path
        path = self.file_path
        lines = [record.to_json_line() + "\n" for record in self._records]
        with path.open("a", encoding="utf-8") as f:
            f.writelines(lines)
        self._records.clear()
        return path

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import SheetHeaderError, SheetReadError, read_dataset
from ..excel.writer import write_report
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import ComparisonConfig, RunConfig
from ..models.dataset import Dataset
from ..models.diff_result import ComparisonResult
from ..models.processing_result import ComparisonStat, ComparisonStatus, RunResult
from .headers import compare_headers
from .progress import ProgressTracker
from .reconcile import InvalidColumnSelectionError, SchemaMismatchError, reconcile, resolve_column
from .summary import render_comparison_line

"""Comparison orchestration.

Runs every configured comparison in order:
1. Read baseline and revision
2. Resolve column references (names or indexes) per dataset
3. Reconcile and write the report workbook
4. Record failures in the error log and continue with the next comparison
"""

__all__ = [
    "ProcessingError",
    "ReportWriteError",
    "resolve_selection",
    "run_comparison",
    "run_all",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Base exception for fatal processing errors."""
    pass


class ReportWriteError(Exception):
    """Raised when the report workbook cannot be written."""
    pass


def resolve_selection(
    comparison: ComparisonConfig, dataset_a: Dataset, dataset_b: Dataset
) -> tuple[int, int, list[int], list[int]]:
    """Turn the configured key/compare references into per-dataset indexes."""
    key_a = resolve_column(dataset_a.headers, comparison.key_column, what="baseline key column")
    key_b = resolve_column(dataset_b.headers, comparison.key_column, what="revision key column")
    cols_a = [
        resolve_column(dataset_a.headers, ref, what="baseline compare column")
        for ref in comparison.compare_columns
    ]
    cols_b = [
        resolve_column(dataset_b.headers, ref, what="revision compare column")
        for ref in comparison.compare_columns
    ]
    return key_a, key_b, cols_a, cols_b


def run_comparison(
    comparison: ComparisonConfig, output_directory: Path
) -> tuple[ComparisonResult, Path]:
    """Run one comparison end to end and return (result, report path).

    Raises:
        SheetReadError / SheetHeaderError: Input cannot be read.
        SchemaMismatchError / InvalidColumnSelectionError: Comparison refused.
        ReportWriteError: Report could not be written.
    """
    dataset_a = read_dataset(comparison.baseline, comparison.sheet)
    dataset_b = read_dataset(comparison.revision, comparison.sheet)
    logger.debug(
        "comparison=%s baseline=%s rows=%d revision=%s rows=%d",
        comparison.name,
        dataset_a.label,
        len(dataset_a.rows),
        dataset_b.label,
        len(dataset_b.rows),
    )
    # 列名解決より先にヘッダ不一致を検出する (エラー種別を正しく報告するため)
    header_check = compare_headers(dataset_a.headers, dataset_b.headers)
    if not header_check.ok:
        raise SchemaMismatchError(header_check.missing_in_a, header_check.missing_in_b)
    key_a, key_b, cols_a, cols_b = resolve_selection(comparison, dataset_a, dataset_b)
    result = reconcile(dataset_a, dataset_b, key_a, key_b, cols_a, cols_b)

    report_path = Path(output_directory) / comparison.output_name
    try:
        write_report(report_path, result, dataset_a, dataset_b, key_b, cols_a, cols_b)
    except OSError as e:
        raise ReportWriteError(f"cannot write report {report_path}: {e}") from e
    return result, report_path


def _classify_error(comparison: ComparisonConfig, e: Exception) -> tuple[str, str]:
    """Map an exception to (error_type, file) for the error log."""
    if isinstance(e, SheetReadError):
        return "SHEET_READ_ERROR", ""
    if isinstance(e, SheetHeaderError):
        return "SHEET_HEADER_ERROR", ""
    if isinstance(e, SchemaMismatchError):
        return "SCHEMA_MISMATCH", ""
    if isinstance(e, InvalidColumnSelectionError):
        return "INVALID_COLUMN_SELECTION", ""
    if isinstance(e, ReportWriteError):
        return "REPORT_WRITE_ERROR", comparison.output_name
    return "UNEXPECTED_ERROR", ""


def _failed_file(comparison: ComparisonConfig, e: Exception) -> str:
    # どちらのファイルで失敗したかはメッセージ内のファイル名で判定
    message = str(e)
    for p in (comparison.baseline, comparison.revision):
        if p.name in message:
            return p.name
    return ""


def run_all(config: RunConfig, error_log: ErrorLogBuffer | None = None) -> RunResult:
    """Run all configured comparisons.

    A failing comparison is recorded (error log + WARN/ERROR line) and does
    not stop the run.

    Raises:
        ProcessingError: If the output directory cannot be created.
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()

    try:
        Path(config.output_directory).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProcessingError(f"cannot create output directory {config.output_directory}: {e}") from e

    stats: list[ComparisonStat] = []
    success_count = 0
    failed_count = 0

    with ProgressTracker(len(config.comparisons)) as progress:
        for comparison in config.comparisons:
            progress.start(comparison.name)
            cmp_start = datetime.now(UTC)
            try:
                result, report_path = run_comparison(comparison, config.output_directory)
            except Exception as e:
                error_type, file_name = _classify_error(comparison, e)
                error_log.append(
                    ErrorRecord.create(
                        comparison=comparison.name,
                        file=file_name or _failed_file(comparison, e),
                        error_type=error_type,
                        message=str(e),
                    )
                )
                logger.error("comparison=%s %s: %s", comparison.name, error_type, e)
                failed_count += 1
                stats.append(
                    ComparisonStat(
                        name=comparison.name,
                        status=ComparisonStatus.FAILED,
                        elapsed_seconds=(datetime.now(UTC) - cmp_start).total_seconds(),
                        error=str(e),
                    )
                )
                progress.finish(success=False)
                continue

            success_count += 1
            logger.info("%s report=%s", render_comparison_line(comparison.name, result.summary), report_path)
            stats.append(
                ComparisonStat(
                    name=comparison.name,
                    status=ComparisonStatus.SUCCESS,
                    elapsed_seconds=(datetime.now(UTC) - cmp_start).total_seconds(),
                    summary=result.summary,
                    report_path=report_path,
                )
            )
            progress.finish(success=True)

    error_log_path = None
    try:
        error_log_path = error_log.flush()
    except OSError as e:
        # ログ書き出し失敗で run 全体は失敗させない
        logger.warning("failed to write error log: %s", e)

    end_time = datetime.now(UTC)
    return RunResult(
        success_count=success_count,
        failed_count=failed_count,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        comparison_stats=stats,
        error_log_path=error_log_path,
    )

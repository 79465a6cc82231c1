from __future__ import annotations

import datetime as dt
import math
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.dataset import Dataset
from ..services.normalize import normalize

"""Sheet reader: workbook / CSV -> Dataset.

- 1行目をヘッダとして扱い、末尾の空ヘッダセルは切り詰める
- 2行目以降をテキスト行として読み込む (日付は ISO 8601)
- 全セルが空白の行はスキップ

Cells are read without pandas NA conversion so that strings such as "NA" or
"null" survive as text.
"""

__all__ = [
    "SheetReadError",
    "SheetHeaderError",
    "SUPPORTED_SUFFIXES",
    "cell_text",
    "read_raw_sheet",
    "sheet_to_dataset",
    "read_dataset",
]

SUPPORTED_SUFFIXES = (".xlsx", ".xlsm", ".csv")


class SheetReadError(Exception):
    """Raised when a file cannot be read as a sheet."""

class SheetHeaderError(Exception):
    """Raised when the first row holds no usable header."""


def cell_text(value: Any) -> str:
    """Textual representation of one cell as a reader would display it."""
    if value is None or value is pd.NaT:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    return str(value)


def read_raw_sheet(path: Path, sheet_name: str | None = None) -> tuple[str, pd.DataFrame]:
    """Read one sheet without header inference.

    Parameters
    ----------
    path: .xlsx / .xlsm / .csv ファイルパス
    sheet_name: 対象シート (None なら先頭シート; CSV では無視)

    Returns (sheet name, raw DataFrame of object cells).
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise SheetReadError(f"unsupported file type '{path.suffix}': {path.name}")
    if not path.exists():
        raise SheetReadError(f"file not found: {path}")

    if suffix == ".csv":
        try:
            df = pd.read_csv(
                path,
                header=None,
                dtype=str,
                keep_default_na=False,
                encoding="utf-8-sig",
                skip_blank_lines=False,
            )
        except pd.errors.EmptyDataError:
            df = pd.DataFrame()
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            raise SheetReadError(f"cannot read {path.name}: {e}") from e
        return path.stem, df

    try:
        xls = pd.ExcelFile(path, engine="openpyxl")
    except Exception as e:  # openpyxl raises several unrelated types for corrupt files
        raise SheetReadError(f"cannot open workbook {path.name}: {e}") from e
    with xls:
        names = [str(n) for n in xls.sheet_names]
        if not names:
            raise SheetReadError(f"no worksheet found in {path.name}")
        target = names[0] if sheet_name is None else sheet_name
        if target not in names:
            raise SheetReadError(f"sheet '{target}' not found in {path.name} (sheets: {names})")
        df = xls.parse(target, header=None, dtype=object, keep_default_na=False, na_filter=False)
    return target, df


def sheet_to_dataset(
    df: pd.DataFrame,
    sheet_name: str,
    source: str | None = None,
) -> Dataset:
    """Convert a raw sheet DataFrame (row 1 = header) into a Dataset.

    Steps:
    1. Read the first row as headers, dropping trailing blank header cells
    2. Read remaining rows as text, truncated to the header width
    3. Skip rows with no non-blank cell
    """
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' is empty")
    headers = [cell_text(v) for v in df.iloc[0].tolist()]
    while headers and normalize(headers[-1]) == "":
        headers.pop()
    if not headers:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no headers in the first row")

    width = len(headers)
    rows: list[list[str]] = []
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        values = [cell_text(v) for v in raw[:width]]
        values.extend("" for _ in range(width - len(values)))
        if not any(normalize(v) for v in values):
            continue
        rows.append(values)
    return Dataset(headers=headers, rows=rows, source=source, sheet_name=sheet_name)


def read_dataset(path: Path, sheet_name: str | None = None) -> Dataset:
    """Read a workbook (first sheet by default) or CSV file into a Dataset."""
    path = Path(path)
    name, df = read_raw_sheet(path, sheet_name)
    return sheet_to_dataset(df, name, source=path.name)

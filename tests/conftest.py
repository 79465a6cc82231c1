# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from sheetdiff.logging.init import reset_logging


def make_excel(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write a workbook whose sheets hold exactly the given rows (no pandas header)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture(autouse=True)
def _reset_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """output_directory: ./reports
comparisons:
  - name: requirements
    baseline: ./data/baseline.xlsx
    revision: ./data/revision.xlsx
    key_column: Code
    compare_columns: [Text]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "compare.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def excel_factory(temp_workdir: Path) -> Callable[..., Path]:
    def _factory(name: str, rows: list[list[object]], sheet: str = "Sheet1") -> Path:
        return make_excel(temp_workdir / "data" / name, {sheet: rows})
    return _factory


@pytest.fixture()
def sample_workbooks(excel_factory) -> tuple[Path, Path]:
    """Baseline / revision pair matching sample_config_yaml.

    Expected: R1 unchanged, R2 changed, R4 added, R3 removed.
    """
    baseline = excel_factory(
        "baseline.xlsx",
        [
            ["Code", "Text"],
            ["R1", "The system shall log in"],
            ["R2", "The system shall export"],
            ["R3", "Obsolete requirement"],
        ],
    )
    revision = excel_factory(
        "revision.xlsx",
        [
            ["Code", "Text"],
            ["R1", "The  system shall\nlog in"],
            ["R2", "The system shall export to xlsx"],
            ["R4", "New requirement"],
        ],
    )
    return baseline, revision

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import ComparisonConfig, RunConfig

"""Config loader.

Responsibilities:
- Load the YAML config (default config/compare.yml)
- Validate it against config_schema.json (bundled with the package)
- Apply defaults (output_directory=./reports)
- Reject duplicate comparison names
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_OUTPUT_DIRECTORY",
    "SCHEMA_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/compare.yml")
DEFAULT_OUTPUT_DIRECTORY = "./reports"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data violates it (missing required keys, wrong types, extra keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _resolve_path(raw: str, base_dir: Path) -> Path:
    p = Path(raw)
    # 相対パスはカレントディレクトリ基準 (CLI 実行位置)
    return p if p.is_absolute() else base_dir / p


def load_config(path: Path, base_dir: Path | None = None) -> RunConfig:
    """Load and validate the comparison config.

    Args:
        path: YAML config path.
        base_dir: Directory relative file paths are resolved against
            (default: current directory, kept relative).
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    base = base_dir if base_dir is not None else Path(".")
    comparisons: list[ComparisonConfig] = []
    seen: set[str] = set()
    for raw in data["comparisons"]:
        name = raw["name"]
        if name in seen:
            raise ConfigError(f"duplicate comparison name: {name}")
        seen.add(name)
        comparisons.append(
            ComparisonConfig(
                name=name,
                baseline=_resolve_path(raw["baseline"], base),
                revision=_resolve_path(raw["revision"], base),
                key_column=raw["key_column"],
                compare_columns=tuple(raw["compare_columns"]),
                sheet=raw.get("sheet"),
                output=raw.get("output"),
            )
        )
    return RunConfig(
        output_directory=_resolve_path(data.get("output_directory", DEFAULT_OUTPUT_DIRECTORY), base),
        comparisons=tuple(comparisons),
    )

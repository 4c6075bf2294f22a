"""Run settings: defaults, optional YAML file, environment, then flags."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from historydb import BATCH_SIZE_ENV, DATABASE_URL_ENV, DEFAULT_BATCH_SIZE, DEFAULT_SHEET
from historydb.errors import ConfigError

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "history-import.yml"


@dataclass
class Settings:
    database_url: str
    batch_size: int = DEFAULT_BATCH_SIZE
    sheet: str = DEFAULT_SHEET


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Read the YAML settings file. Missing files yield an empty mapping."""
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return {}
    try:
        payload: object = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"Expected mapping in {config_path}")
    return cast(dict[str, Any], payload)


def _coerce_batch_size(raw: object) -> int:
    try:
        value = int(str(raw).strip())
    except ValueError as exc:
        raise ConfigError(f"Batch size must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigError(f"Batch size must be positive, got {value}")
    return value


def load_settings(
    *,
    config_path: Path | None = None,
    database_url: str | None = None,
    batch_size: int | None = None,
    sheet: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    env = os.environ if environ is None else environ
    file_values = load_config_file(config_path)

    url = database_url or env.get(DATABASE_URL_ENV)
    if not url:
        raise ConfigError(f"Could not find environment variable '{DATABASE_URL_ENV}'")

    raw_batch_size: object = DEFAULT_BATCH_SIZE
    if batch_size is not None:
        raw_batch_size = batch_size
    elif env.get(BATCH_SIZE_ENV):
        raw_batch_size = env[BATCH_SIZE_ENV]
    elif file_values.get("batch_size") is not None:
        raw_batch_size = file_values["batch_size"]

    sheet_name = sheet or str(file_values.get("sheet") or DEFAULT_SHEET)
    return Settings(
        database_url=url, batch_size=_coerce_batch_size(raw_batch_size), sheet=sheet_name
    )


def require_files(paths: Iterable[Path]) -> list[Path]:
    """Return the paths, or raise ConfigError naming the first one missing."""
    checked: list[Path] = []
    for path in paths:
        if not path.is_file():
            raise ConfigError(f"Could not find file at {path}")
        checked.append(path)
    if not checked:
        raise ConfigError("Expecting one or more paths to an export file")
    return checked

# src/geopin/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/geopin/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `GEOPIN_CONFIG_PATH` (replaces the packaged defaults)
- environment variables (`GEOPIN_DATABASE_URL`, `GEOPIN_LOG_LEVEL`)

Design rule:
- Tuning knobs live in YAML, not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from geopin.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `geopin.config`."""
    text = resources.files("geopin.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "GeoPin"
    timezone: str = "Europe/London"
    log_level: str = "INFO"


class DatabaseSettings(BaseModel):
    url: str = "sqlite:///data/geopin.db"
    echo: bool = False


class ValidationSettings(BaseModel):
    # False accepts any coordinate; the quality report then flags out-of-range rows.
    enforce_coordinate_range: bool = True


class QuerySettings(BaseModel):
    nearest_limit_default: int = Field(10, ge=1)
    nearest_limit_max: int = Field(100, ge=1)


class CatalogSettings(BaseModel):
    path: str = "data/catalogs/pois.json"


class ApiSettings(BaseModel):
    cors_origins: list[str] = Field(default_factory=list)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    query: QuerySettings = Field(default_factory=QuerySettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload."""
    load_dotenv_if_present()
    data = dict(data)

    database_url = os.getenv("GEOPIN_DATABASE_URL")
    if database_url:
        data.setdefault("database", {})["url"] = database_url

    log_level = os.getenv("GEOPIN_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("GEOPIN_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")

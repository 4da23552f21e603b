"""
Project root and `.env` handling.

Relative paths in settings (`data/geopin.db`, `data/catalogs/pois.json`) are
resolved against the project root, not the current directory, so the API, the
CLI and the tests all hit the same files.

- `GEOPIN_PROJECT_ROOT` pins the root explicitly.
- `GEOPIN_ENV_FILE` points at a specific `.env`; its directory becomes the root.
- Otherwise the root is the nearest directory above the cwd holding `.env`,
  `pyproject.toml` or `src/geopin`.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

_ROOT_MARKERS = (".env", "pyproject.toml", "src/geopin")


def _env_file_override() -> Path | None:
    value = os.getenv("GEOPIN_ENV_FILE")
    return Path(value).expanduser().resolve() if value else None


@lru_cache
def get_project_root() -> Path:
    pinned = os.getenv("GEOPIN_PROJECT_ROOT")
    if pinned:
        return Path(pinned).expanduser().resolve()
    env_file = _env_file_override()
    if env_file is not None:
        return env_file.parent

    cwd = Path.cwd().resolve()
    for candidate in (cwd, *cwd.parents):
        if any((candidate / marker).exists() for marker in _ROOT_MARKERS):
            return candidate
    return cwd


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `.env` once without overriding variables already set; return its path."""
    env_path = _env_file_override() or get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    p = Path(path).expanduser()
    return p if p.is_absolute() else (get_project_root() / p).resolve()

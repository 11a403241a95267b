"""Data and staging storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_name, optional_env
from .errors import StagingLocationError

APP_DIR_NAME: Final[str] = "feedmigrator"
STAGING_DIR_NAME: Final[str] = "staging"
STAGING_FILENAME: Final[str] = "package.nupkg"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    http_cache_filename: str = HTTP_CACHE_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.http_cache_filename

    def default_staging_path(self) -> Path:
        return self.resolve_data_dir() / STAGING_DIR_NAME / STAGING_FILENAME


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = optional_env(env_name("DATA_DIR"))
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)


def get_http_cache_path() -> Path:
    return get_storage_config().http_cache_path()


def resolve_staging_path(
    explicit: Path | str | None = None,
    *,
    storage: StorageConfig | None = None,
) -> Path:
    """Pick the staging file path and make sure its directory is writable.

    Precedence: explicit argument, ``FEEDMIGRATOR_STAGING_PATH``, then the data
    directory default. Raises :class:`StagingLocationError` if the chosen path
    cannot be used.
    """

    candidate = explicit or optional_env(env_name("STAGING_PATH"))
    if candidate:
        path = Path(candidate).expanduser().resolve()
    else:
        path = (storage or get_storage_config()).default_staging_path()

    if path.exists() and path.is_dir():
        raise StagingLocationError(f"Staging path {path} is a directory")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StagingLocationError(f"Cannot create staging directory {path.parent}: {exc}") from exc

    if not os.access(path.parent, os.W_OK):
        raise StagingLocationError(f"Staging directory {path.parent} is not writable")

    return path

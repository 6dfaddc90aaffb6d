"""Where the record store lives."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env

APP_DIR_NAME: Final[str] = "feedsync"
DEFAULT_DB_FILENAME: Final[str] = "feedsync.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def database_uri(self) -> str:
        """sqlite URI inside ``data_dir``; the directory is created on demand."""

        directory = self.data_dir.expanduser().resolve()
        directory.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{directory / self.database_filename}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    explicit = optional_env("FEEDSYNC_DATA_DIR")
    if explicit is not None:
        return StorageConfig(data_dir=Path(explicit))
    xdg = optional_env("XDG_DATA_HOME")
    base = Path(xdg) if xdg is not None else Path.home() / ".local" / "share"
    return StorageConfig(data_dir=base / APP_DIR_NAME)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a sqlite file in the data directory."""

    uri = optional_env("DATABASE_URI")
    if uri is not None:
        return DatabaseConfig(uri=uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())

"""Safety limits and switches for sync and reconciliation runs."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_float, env_int, optional_env
from .errors import ConfigurationError

DEFAULT_MAX_DELETION_FRACTION = 0.1
DEFAULT_MAX_DELETIONS_PER_SYNC = 50
DEFAULT_RETRY_ATTEMPTS = 3


@dataclass(frozen=True, slots=True)
class SyncConfig:
    max_deletion_fraction: float = DEFAULT_MAX_DELETION_FRACTION
    max_deletions_per_sync: int = DEFAULT_MAX_DELETIONS_PER_SYNC
    force_update: bool = False
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    location_id: str | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.max_deletion_fraction <= 1.0:
            raise ConfigurationError("max_deletion_fraction must be between 0 and 1")
        if self.max_deletions_per_sync < 0:
            raise ConfigurationError("max_deletions_per_sync must be non-negative")
        if self.retry_attempts < 1:
            raise ConfigurationError("retry_attempts must be at least 1")


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        max_deletion_fraction=env_float(
            "FEEDSYNC_MAX_DELETION_FRACTION", DEFAULT_MAX_DELETION_FRACTION
        ),
        max_deletions_per_sync=env_int(
            "FEEDSYNC_MAX_DELETIONS_PER_SYNC", DEFAULT_MAX_DELETIONS_PER_SYNC
        ),
        force_update=env_bool("FEEDSYNC_FORCE_UPDATE"),
        retry_attempts=env_int("FEEDSYNC_RETRY_ATTEMPTS", DEFAULT_RETRY_ATTEMPTS),
        location_id=optional_env("FEEDSYNC_LOCATION_ID"),
    )

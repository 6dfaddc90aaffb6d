"""Feed source configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import require_env_vars


@dataclass(frozen=True, slots=True)
class FeedConfig:
    path: Path


def get_feed_config(*, path: str | Path | None = None) -> FeedConfig:
    if path is not None:
        return FeedConfig(path=Path(path).expanduser())
    values = require_env_vars(("FEEDSYNC_FEED_PATH",))
    return FeedConfig(path=Path(values["FEEDSYNC_FEED_PATH"]).expanduser())

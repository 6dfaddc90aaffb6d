"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import InvalidConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value.strip()

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values


def optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_int(name: str, default: int) -> int:
    raw = optional_env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidConfigurationError(name, raw, "integer") from None


def env_float(name: str, default: float) -> float:
    raw = optional_env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidConfigurationError(name, raw, "number") from None


def env_bool(name: str, *, default: bool = False) -> bool:
    raw = optional_env(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise InvalidConfigurationError(name, raw, "boolean")

"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

ENV_PREFIX = "FEEDMIGRATOR_"


def env_name(suffix: str) -> str:
    return f"{ENV_PREFIX}{suffix}"


def optional_env(name: str) -> str | None:
    """Return a stripped environment value, treating blank values as unset."""

    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = optional_env(name)
        if value is None:
            missing.append(name)
            continue
        values[name] = value

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values


def optional_env_pair(first: str, second: str) -> tuple[str, str] | None:
    """Return both values when both are set, ``None`` when neither is.

    Setting only one half of the pair is a configuration error.
    """

    first_value = optional_env(first)
    second_value = optional_env(second)
    if first_value is None and second_value is None:
        return None
    if first_value is None:
        raise ConfigurationError(f"{first} must be set together with {second}")
    if second_value is None:
        raise ConfigurationError(f"{second} must be set together with {first}")
    return first_value, second_value

"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def optional_env_var(name: str) -> str | None:
    """Return the stripped value of ``name``; blank counts as unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    values = {name: optional_env_var(name) for name in names}
    missing = [name for name, value in values.items() if value is None]
    if missing:
        raise MissingConfigurationError(missing)
    return {name: value for name, value in values.items() if value is not None}


def env_int(name: str, default: int) -> int:
    value = optional_env_var(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def env_list(*names: str) -> tuple[str, ...]:
    """Split the first non-blank variable of ``names`` on commas."""

    for name in names:
        value = optional_env_var(name)
        if value is not None:
            return tuple(item.strip() for item in value.split(",") if item.strip())
    return ()

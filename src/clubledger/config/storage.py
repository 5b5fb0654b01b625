"""Where the local player cache lives on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "clubledger"
DEFAULT_CACHE_FILENAME: Final[str] = "players.json"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    cache_filename: str = DEFAULT_CACHE_FILENAME

    def cache_path(self, *, create_dir: bool = True) -> Path:
        """Absolute path of the cache file, creating its directory unless told not to."""

        data_dir = self.data_dir.expanduser().resolve()
        if create_dir:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / self.cache_filename


def _platform_data_dir() -> Path:
    if os.name == "nt":
        root = optional_env_var("LOCALAPPDATA")
        return Path(root) if root else Path.home() / "AppData" / "Local"
    root = optional_env_var("XDG_DATA_HOME")
    return Path(root) if root else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    """Read ``LEDGER_DATA_DIR`` and ``LEDGER_CACHE_FILENAME``.

    Without ``LEDGER_DATA_DIR`` the cache goes to the per-user data directory
    (``$XDG_DATA_HOME/clubledger`` or ``%LOCALAPPDATA%\\clubledger``).
    """

    data_dir = optional_env_var("LEDGER_DATA_DIR")
    return StorageConfig(
        data_dir=Path(data_dir) if data_dir else _platform_data_dir() / APP_DIR_NAME,
        cache_filename=optional_env_var("LEDGER_CACHE_FILENAME") or DEFAULT_CACHE_FILENAME,
    )

"""Service-level settings: refresh cadence, HTTP binding and chat admins."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, env_list, optional_env_var
from .errors import ConfigurationError

DEFAULT_REFRESH_SECONDS = 5 * 60
DEFAULT_HOST = "0.0.0.0"  # noqa: S104
DEFAULT_PORT = 10000


@dataclass(frozen=True, slots=True)
class LedgerConfig:
    refresh_interval_seconds: float = DEFAULT_REFRESH_SECONDS


@dataclass(frozen=True, slots=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    admin_ids: tuple[str, ...] = ()


def get_ledger_config() -> LedgerConfig:
    seconds = env_int("LEDGER_REFRESH_SECONDS", DEFAULT_REFRESH_SECONDS)
    if seconds <= 0:
        raise ConfigurationError("LEDGER_REFRESH_SECONDS must be positive")
    return LedgerConfig(refresh_interval_seconds=float(seconds))


def get_server_config() -> ServerConfig:
    return ServerConfig(
        host=optional_env_var("HOST") or DEFAULT_HOST,
        port=env_int("PORT", DEFAULT_PORT),
        admin_ids=env_list("ADMIN_IDS", "ADMIN_ID"),
    )

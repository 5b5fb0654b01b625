"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .github import FeedConfig, GitHubConfig, get_feed_config, get_github_config
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .ledger import LedgerConfig, ServerConfig, get_ledger_config, get_server_config
from .logging import configure_logging
from .storage import StorageConfig, get_storage_config

__all__ = [
    "ConfigurationError",
    "FeedConfig",
    "GitHubConfig",
    "LedgerConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ServerConfig",
    "StorageConfig",
    "configure_logging",
    "get_feed_config",
    "get_github_config",
    "get_ledger_config",
    "get_server_config",
    "get_storage_config",
    "require_env_vars",
]

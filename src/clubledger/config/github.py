"""GitHub configuration values for the remote versioned store and raw feeds."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger

from .env import optional_env_var, require_env_vars
from .errors import MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

log = getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_TIMEOUT_SECONDS = 15.0
FEED_TIMEOUT_SECONDS = 10.0

DEFAULT_FILE_PATH = "players.json"
DEFAULT_BRANCH = "main"


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Holds the contents-API settings for the persisted player file."""

    token: str
    repo: str
    resilience: ResilienceConfig
    file_path: str = DEFAULT_FILE_PATH
    branch: str = DEFAULT_BRANCH

    @property
    def contents_path(self) -> str:
        return f"/repos/{self.repo}/contents/{self.file_path}"


@dataclass(frozen=True, slots=True)
class FeedConfig:
    """Raw directive feeds; the trophy feed is optional."""

    balance_url: str
    resilience: ResilienceConfig
    trophy_url: str | None = None


def _github_resilience(token: str) -> ResilienceConfig:
    return ResilienceConfig(
        name="github",
        base_url=GITHUB_API_URL,
        timeout_seconds=GITHUB_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github+json",
        },
    )


def get_github_config(*, resilience: ResilienceConfig | None = None) -> GitHubConfig | None:
    """Return the remote store configuration, or ``None`` when it is not enabled.

    Both ``GITHUB_TOKEN`` and ``GITHUB_REPO`` are needed. Setting only one of them
    is almost certainly a deployment mistake, so it is logged but not fatal.
    """

    if optional_env_var("GITHUB_TOKEN") is None and optional_env_var("GITHUB_REPO") is None:
        return None
    try:
        values = require_env_vars(["GITHUB_TOKEN", "GITHUB_REPO"])
    except MissingConfigurationError as exc:
        log.warning("Remote store disabled: %s", exc)
        return None
    token = values["GITHUB_TOKEN"]
    repo = values["GITHUB_REPO"]

    return GitHubConfig(
        token=token,
        repo=repo,
        file_path=optional_env_var("GITHUB_FILE_PATH") or DEFAULT_FILE_PATH,
        branch=optional_env_var("GITHUB_BRANCH") or DEFAULT_BRANCH,
        resilience=resilience or _github_resilience(token),
    )


def get_feed_config(*, resilience: ResilienceConfig | None = None) -> FeedConfig | None:
    balance_url = optional_env_var("LEDGER_BALANCE_FEED_URL")
    if balance_url is None:
        return None
    return FeedConfig(
        balance_url=balance_url,
        trophy_url=optional_env_var("LEDGER_TROPHY_FEED_URL"),
        resilience=resilience
        or ResilienceConfig(name="feeds", timeout_seconds=FEED_TIMEOUT_SECONDS),
    )

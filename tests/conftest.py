from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from clubledger.adapters.local_cache import JsonFileCache
from tests.helpers.ledger import FakeStore, MemoryCache


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "GITHUB_TOKEN",
        "GITHUB_REPO",
        "GITHUB_FILE_PATH",
        "GITHUB_BRANCH",
        "LEDGER_BALANCE_FEED_URL",
        "LEDGER_TROPHY_FEED_URL",
        "LEDGER_REFRESH_SECONDS",
        "LEDGER_CACHE_FILENAME",
        "ADMIN_IDS",
        "ADMIN_ID",
        "HOST",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LEDGER_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture
def cache_file(tmp_path: Path) -> JsonFileCache:
    return JsonFileCache(tmp_path / "cache" / "players.json")


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()

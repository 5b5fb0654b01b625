from __future__ import annotations

import asyncio
import base64
import json

import httpx
import pytest

from clubledger.adapters.github import GitHubContentStore, RemoteStoreError
from clubledger.config import ResilienceConfig
from clubledger.config.github import GitHubConfig
from clubledger.domain.errors import PersistenceConflict, SourceAbsent
from tests.helpers.ledger import make_client_factory


def _config() -> GitHubConfig:
    return GitHubConfig(
        token="secret",
        repo="club/ledger",
        branch="data",
        resilience=ResilienceConfig(
            name="github-test",
            base_url="https://api.github.com",
            default_headers={"Authorization": "token secret"},
        ),
    )


def _contents(text: str, sha: str) -> dict[str, str]:
    encoded = base64.b64encode(text.encode()).decode()
    # Mimic the API wrapping the body across lines.
    wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
    return {"sha": sha, "path": "players.json", "content": wrapped, "encoding": "base64"}


def test_read_decodes_content_and_records_sha() -> None:
    text = json.dumps([{"username": "alice", "balance": 1, "trophies": ["x" * 50]}])
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_contents(text, "abc123"))

    store = GitHubContentStore(config=_config(), client_factory=make_client_factory(handler))
    snapshot = asyncio.run(store.read())

    assert snapshot.content == text
    assert snapshot.version_token == "abc123"
    assert store.version_token == "abc123"
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/repos/club/ledger/contents/players.json"
    assert seen[0].url.params["ref"] == "data"
    assert seen[0].headers["Authorization"] == "token secret"


def test_read_missing_file_is_absent() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(404, json={"message": "Not Found"})

    store = GitHubContentStore(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(SourceAbsent):
        asyncio.run(store.read())
    assert store.version_token is None


def test_read_server_error_raises_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(500, text="oops")

    store = GitHubContentStore(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(store.read())


def test_read_malformed_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(200, json={"sha": "s", "content": "***not base64***"})

    store = GitHubContentStore(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(RemoteStoreError):
        asyncio.run(store.read())


def test_first_write_omits_sha_then_sends_returned_token() -> None:
    bodies: list[dict[str, str]] = []
    shas = iter(["sha-1", "sha-2"])

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PUT"
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"content": {"sha": next(shas)}, "commit": {}})

    store = GitHubContentStore(config=_config(), client_factory=make_client_factory(handler))

    async def scenario() -> tuple[str, str]:
        first = await store.write("[]", message="first")
        second = await store.write('[{"username": "a"}]', message="second")
        return first, second

    first, second = asyncio.run(scenario())

    assert (first, second) == ("sha-1", "sha-2")
    assert "sha" not in bodies[0]
    assert bodies[0]["branch"] == "data"
    assert bodies[0]["message"] == "first"
    assert base64.b64decode(bodies[0]["content"]).decode() == "[]"
    assert bodies[1]["sha"] == "sha-1"
    assert store.version_token == "sha-2"


@pytest.mark.parametrize("status", [409, 422])
def test_stale_sha_is_conflict_and_keeps_token(status: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=_contents("[]", "old"))
        return httpx.Response(status, json={"message": "sha does not match"})

    store = GitHubContentStore(config=_config(), client_factory=make_client_factory(handler))

    async def scenario() -> None:
        await store.read()
        await store.write("[]", message="update")

    with pytest.raises(PersistenceConflict, match="sha does not match"):
        asyncio.run(scenario())
    assert store.version_token == "old"


def test_other_write_errors_are_not_conflicts() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(403, json={"message": "Resource not accessible"})

    store = GitHubContentStore(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(RemoteStoreError) as excinfo:
        asyncio.run(store.write("[]", message="update"))
    assert excinfo.value.status_code == 403
    assert not isinstance(excinfo.value, PersistenceConflict)

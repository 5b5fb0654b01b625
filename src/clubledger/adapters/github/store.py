"""Remote versioned store backed by a file in a GitHub repository."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError as PydanticValidationError

from clubledger.adapters.http_resilience import ResilientClient, default_client_factory
from clubledger.domain.errors import PersistenceConflict, SourceAbsent
from clubledger.domain.model import VersionedSnapshot

from .schema import ContentsFile, ErrorResponse, WriteResponse, encode_content

if TYPE_CHECKING:
    from collections.abc import Callable

    from clubledger.config.github import GitHubConfig
    from clubledger.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

CONFLICT_STATUSES = frozenset({409, 422})


class RemoteStoreError(RuntimeError):
    """Raised when GitHub answers with a payload we cannot use."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubContentStore:
    """Reads and writes one file through the contents API.

    The blob SHA acts as the version token. It is only updated after GitHub
    confirms a read or write.
    """

    def __init__(
        self,
        *,
        config: GitHubConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or default_client_factory
        self._version_token: str | None = None

    @property
    def version_token(self) -> str | None:
        return self._version_token

    @property
    def label(self) -> str:
        return self._config.file_path

    async def read(self) -> VersionedSnapshot:
        async with self._client_factory(self._config.resilience) as client:
            response = await client.get(
                self._config.contents_path, params={"ref": self._config.branch}
            )
        if response.status_code == 404:
            raise SourceAbsent(
                f"{self._config.file_path} not found in {self._config.repo}@{self._config.branch}"
            )
        response.raise_for_status()

        try:
            payload = ContentsFile.model_validate(response.json())
            content = payload.decoded()
        except (PydanticValidationError, ValueError) as exc:
            raise RemoteStoreError(f"Unexpected contents payload: {exc}") from exc

        self._version_token = payload.sha
        log.info("Read %s from GitHub (revision %s)", self._config.file_path, payload.sha[:7])
        return VersionedSnapshot(content=content, version_token=payload.sha)

    async def write(self, content: str, *, message: str) -> str:
        body: dict[str, str] = {
            "message": message,
            "content": encode_content(content),
            "branch": self._config.branch,
        }
        sent_token = self._version_token
        if sent_token is not None:
            body["sha"] = sent_token

        async with self._client_factory(self._config.resilience) as client:
            response = await client.put(self._config.contents_path, json=body)

        if response.status_code in CONFLICT_STATUSES:
            raise PersistenceConflict(
                f"GitHub rejected revision {sent_token or '<none>'} "
                f"({response.status_code}): {_error_message(response)}"
            )
        if response.is_error:
            raise RemoteStoreError(
                f"GitHub write failed ({response.status_code}): {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            token = WriteResponse.model_validate(response.json()).content.sha
        except (PydanticValidationError, ValueError) as exc:
            raise RemoteStoreError(f"Unexpected write response: {exc}") from exc

        self._version_token = token
        return token


def _error_message(response: httpx.Response) -> str:
    try:
        return ErrorResponse.model_validate(response.json()).message
    except (PydanticValidationError, ValueError):
        return response.text[:200]

"""Pydantic models describing the GitHub contents API payloads."""

from __future__ import annotations

import base64
import binascii

from pydantic import BaseModel, ConfigDict


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ContentsFile(GitHubBaseModel):
    sha: str
    path: str | None = None
    content: str = ""
    encoding: str = "base64"

    def decoded(self) -> str:
        if self.encoding != "base64":
            raise ValueError(f"Unsupported content encoding: {self.encoding!r}")
        try:
            # GitHub wraps the base64 body at 60 columns.
            raw = base64.b64decode("".join(self.content.split()), validate=True)
        except binascii.Error as exc:
            raise ValueError(f"Malformed base64 content: {exc}") from exc
        return raw.decode("utf-8")


class CommitContent(GitHubBaseModel):
    sha: str


class WriteResponse(GitHubBaseModel):
    content: CommitContent


class ErrorResponse(GitHubBaseModel):
    message: str
    documentation_url: str | None = None


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")

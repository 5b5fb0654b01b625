"""JSON file holding the last persisted player map."""

from __future__ import annotations

import os
import tempfile
from logging import getLogger
from pathlib import Path

from clubledger.domain.codec import parse_canonical_json, serialize_canonical
from clubledger.domain.errors import PersistenceFailure, SourceUnavailable, ValidationError
from clubledger.domain.model import CanonicalMap

log = getLogger(__name__)


class JsonFileCache:
    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> CanonicalMap:
        if not self.path.exists():
            raise SourceUnavailable(f"No cache file at {self.path}")
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceUnavailable(f"Cannot read {self.path}: {exc}") from exc
        try:
            return parse_canonical_json(text)
        except ValidationError as exc:
            raise SourceUnavailable(f"Cache file {self.path} is not a player list: {exc}") from exc

    def write(self, players: CanonicalMap) -> None:
        """Replace the cache file atomically via a temporary sibling file."""

        data = serialize_canonical(players)
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                delete=False,
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            ) as handle:
                tmp_name = handle.name
                handle.write(data)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and Path(tmp_name).exists():
                Path(tmp_name).unlink()
            raise PersistenceFailure(f"Cannot write {self.path}: {exc}") from exc
        log.debug("Wrote %s players to %s", len(players), self.path)

"""JSON form of the canonical map.

The persisted document is a list of ``{username, balance, trophies}`` objects.
Files written before trophies existed omit the key; they load with an empty list.
"""

from __future__ import annotations

import json
from typing import Annotated

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, TypeAdapter

from .errors import ValidationError
from .model import CanonicalMap, PlayerRecord


class PlayerRecordModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: Annotated[StrictStr, Field(min_length=1)]
    balance: StrictInt
    trophies: list[StrictStr] = Field(default_factory=list)

    @pydantic.field_validator("username")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("username must not be blank")
        return value

    def to_record(self) -> PlayerRecord:
        return PlayerRecord(
            username=self.username, balance=self.balance, trophies=list(self.trophies)
        )


_RECORD_LIST = TypeAdapter(list[PlayerRecordModel])


def records_from_payload(payload: object) -> CanonicalMap:
    """Validate decoded JSON as a record collection.

    Raises:
        ValidationError: ``payload`` is not a list/tuple of record-shaped objects.
    """

    if not isinstance(payload, (list, tuple)):
        raise ValidationError(
            f"Expected a list of player records, got {type(payload).__name__}"
        )
    try:
        models = _RECORD_LIST.validate_python(list(payload))
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc)) from exc
    return CanonicalMap.from_records(model.to_record() for model in models)


def parse_canonical_json(text: str) -> CanonicalMap:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON: {exc.msg} (line {exc.lineno})") from exc
    except (ValueError, RecursionError) as exc:
        raise ValidationError(f"Invalid JSON: {exc}") from exc
    return records_from_payload(payload)


def serialize_canonical(players: CanonicalMap) -> str:
    return json.dumps(players.to_payload(), indent=2, ensure_ascii=False)


def _describe(exc: pydantic.ValidationError) -> str:
    problems = []
    for error in exc.errors()[:5]:
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}")
    more = exc.error_count() - len(problems)
    suffix = f" (+{more} more)" if more > 0 else ""
    return "Invalid player records: " + "; ".join(problems) + suffix

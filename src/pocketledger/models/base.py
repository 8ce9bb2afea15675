"""Shared base for JSON-serialized ledger records."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel


class LedgerRecord(SQLModel):
    """Record stored as JSON: snake_case attributes, camelCase keys on the wire.

    Timestamps are naive local time. Aware inputs (ISO strings with an
    offset, epoch milliseconds) are converted on the way in.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("*")
    @classmethod
    def to_local_naive(cls, value: Any) -> Any:
        if isinstance(value, datetime) and value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    def to_json_dict(self) -> dict:
        """Return the camelCase JSON-ready representation of the record."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

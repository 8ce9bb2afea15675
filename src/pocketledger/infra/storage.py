"""SQLModel implementation of the key-value persistence store."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from ..domain.storage import StorageUsage
from ..logging_config import get_logger
from ..models.stored_value import StoredValue
from .database import SessionFactory

logger = get_logger(__name__)

T = TypeVar("T")


def _normalize_key(key: str | Enum) -> str:
    return key.value if isinstance(key, Enum) else str(key)


class SQLModelKeyValueStore:
    """Stores JSON documents in the ``stored_value`` table.

    Size accounting counts characters of key plus encoded value, so the quota
    behaves like the browser storage the data format was designed for.
    """

    def __init__(self, session_factory: SessionFactory, *, quota_bytes: int):
        self.session_factory = session_factory
        self.quota_bytes = quota_bytes

    def get(self, key: str, default: T) -> Any | T:
        name = _normalize_key(key)
        try:
            with self.session_factory() as session:
                row = session.get(StoredValue, name)
                raw = row.value if row is not None else None
        except SQLAlchemyError:
            logger.exception("Error retrieving %s from storage", name)
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.error("Stored value for %s is not valid JSON; using default", name)
            return default

    def set(self, key: str, value: Any) -> bool:
        name = _normalize_key(key)
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError):
            logger.exception("Value for %s is not JSON serializable", name)
            return False

        try:
            with self.session_factory() as session:
                row = session.get(StoredValue, name)
                previous = len(name) + len(row.value) if row is not None else 0
                projected = self._used_bytes(session) - previous + len(name) + len(payload)
                if projected > self.quota_bytes:
                    logger.error(
                        "Storage quota exceeded",
                        extra={"key": name, "projected_bytes": projected, "quota_bytes": self.quota_bytes},
                    )
                    return False
                if row is None:
                    row = StoredValue(key=name, value=payload)
                else:
                    row.value = payload
                    row.updated_at = datetime.now(timezone.utc)
                session.add(row)
        except SQLAlchemyError:
            logger.exception("Error storing %s", name)
            return False
        return True

    def remove(self, key: str) -> bool:
        name = _normalize_key(key)
        try:
            with self.session_factory() as session:
                row = session.get(StoredValue, name)
                if row is not None:
                    session.delete(row)
        except SQLAlchemyError:
            logger.exception("Error removing %s from storage", name)
            return False
        return True

    def usage(self) -> StorageUsage:
        try:
            with self.session_factory() as session:
                used = self._used_bytes(session)
        except SQLAlchemyError:
            logger.exception("Error measuring storage usage")
            used = 0
        return StorageUsage(used_bytes=used, limit_bytes=self.quota_bytes)

    def clear_all(self) -> bool:
        try:
            with self.session_factory() as session:
                for row in session.exec(select(StoredValue)).all():
                    session.delete(row)
        except SQLAlchemyError:
            logger.exception("Error clearing storage")
            return False
        return True

    @staticmethod
    def _used_bytes(session) -> int:
        statement = select(
            func.coalesce(func.sum(func.length(StoredValue.key) + func.length(StoredValue.value)), 0)
        )
        return int(session.exec(statement).one())


__all__ = ["SQLModelKeyValueStore"]

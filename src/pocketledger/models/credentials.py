"""Stored credentials for the single local user."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .base import LedgerRecord


class UserCredentials(LedgerRecord):
    """Username plus argon2 hashes and the last activity timestamp."""

    username: str
    password_hash: str
    security_answer_hash: Optional[str] = None
    last_active: datetime

"""Authentication gate protocol consumed by the ledger."""

from __future__ import annotations

from typing import Protocol


class SessionGate(Protocol):
    """Reports whether a user session is currently authenticated."""

    @property
    def is_authenticated(self) -> bool:  # pragma: no cover - interface
        ...

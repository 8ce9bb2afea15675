"""Single-user local authentication with an inactivity timeout."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from pydantic import ValidationError as PydanticValidationError

from ..constants.storage_keys import StorageKey
from ..domain.storage import KeyValueStore
from ..logging_config import get_logger
from ..models.credentials import UserCredentials

logger = get_logger(__name__)

_hasher = PasswordHasher()

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid username or password"
SESSION_EXPIRED = "Your session has expired due to inactivity"


def _verify(hashed: Optional[str], secret: str) -> bool:
    if not hashed:
        return False
    try:
        return _hasher.verify(hashed, secret)
    except (VerifyMismatchError, InvalidHash, VerificationError):
        return False


class LocalAuthService:
    """Authenticates the one local user whose credentials live in the store.

    Satisfies the ledger's ``SessionGate``: reading ``is_authenticated`` after
    the inactivity timeout has elapsed logs the user out.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        timeout: timedelta = timedelta(minutes=30),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.timeout = timeout
        self.clock = clock
        self.user: Optional[UserCredentials] = None
        self.last_error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        if self.user is None:
            return False
        if not self.is_session_valid():
            self.logout()
            self.last_error = SESSION_EXPIRED
            return False
        return True

    def _stored_credentials(self) -> Optional[UserCredentials]:
        raw = self.store.get(StorageKey.USER_CREDENTIALS, None)
        if raw is None:
            return None
        try:
            return UserCredentials.model_validate(raw)
        except PydanticValidationError:
            logger.exception("Stored credentials are malformed")
            return None

    def _persist(self, credentials: UserCredentials) -> bool:
        return self.store.set(StorageKey.USER_CREDENTIALS, credentials.to_json_dict())

    def has_user(self) -> bool:
        return self._stored_credentials() is not None

    def is_session_valid(self) -> bool:
        """True while the current user has been active within the timeout."""

        if self.user is None:
            return False
        return self.clock() - self.user.last_active < self.timeout

    def register(self, username: str, password: str, security_answer: Optional[str] = None) -> bool:
        """Create the single local user and start a session."""

        self.last_error = None
        username = username.strip()
        if not username:
            self.last_error = "Username is required"
            return False
        if len(password) < MIN_PASSWORD_LENGTH:
            self.last_error = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            return False
        if self.has_user():
            self.last_error = "A user already exists. Only one user is supported in this app."
            return False

        answer = (security_answer or "").strip()
        credentials = UserCredentials(
            username=username,
            password_hash=_hasher.hash(password),
            security_answer_hash=_hasher.hash(answer) if answer else None,
            last_active=self.clock(),
        )
        if not self._persist(credentials):
            self.last_error = "An error occurred during registration"
            return False
        self.user = credentials
        logger.info("User registered", extra={"username": username})
        return True

    def login(self, username: str, password: str) -> bool:
        self.last_error = None
        stored = self._stored_credentials()
        if stored is None or stored.username != username.strip():
            self.last_error = INVALID_CREDENTIALS
            return False
        if not _verify(stored.password_hash, password):
            logger.warning("Failed login attempt", extra={"username": stored.username})
            self.last_error = INVALID_CREDENTIALS
            return False

        if _hasher.check_needs_rehash(stored.password_hash):
            stored.password_hash = _hasher.hash(password)
        stored.last_active = self.clock()
        self._persist(stored)
        self.user = stored
        logger.info("User logged in", extra={"username": stored.username})
        return True

    def logout(self) -> None:
        """End the session; stored credentials are kept for the next login."""

        if self.user is not None:
            logger.info("User logged out", extra={"username": self.user.username})
        self.user = None

    def reset_password(self, username: str, security_answer: str, new_password: str) -> bool:
        """Replace the password after verifying the security answer."""

        self.last_error = None
        stored = self._stored_credentials()
        if stored is None or stored.username != username.strip():
            self.last_error = "User not found"
            return False
        if not _verify(stored.security_answer_hash, security_answer.strip()):
            self.last_error = "Incorrect security answer"
            return False
        if len(new_password) < MIN_PASSWORD_LENGTH:
            self.last_error = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            return False

        stored.password_hash = _hasher.hash(new_password)
        stored.last_active = self.clock()
        if not self._persist(stored):
            self.last_error = "An error occurred while resetting password"
            return False
        logger.info("Password reset", extra={"username": stored.username})
        return True

    def touch(self) -> None:
        """Record activity for the current user."""

        if self.user is None:
            return
        self.user.last_active = self.clock()
        self._persist(self.user)

    def restore_session(self) -> bool:
        """Resume the stored user's session if it has not timed out."""

        stored = self._stored_credentials()
        if stored is None:
            return False
        self.user = stored
        if not self.is_session_valid():
            self.logout()
            return False
        self.touch()
        logger.info("Session restored", extra={"username": stored.username})
        return True


__all__ = ["LocalAuthService", "MIN_PASSWORD_LENGTH"]

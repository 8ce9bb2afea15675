"""Application context wiring storage, authentication and the ledger together."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database
from .infra.storage import SQLModelKeyValueStore
from .logging_config import get_logger, setup_logging
from .models.preferences import UserPreferences
from .services.auth import LocalAuthService
from .services.ledger import Ledger
from .services.preferences import load_preferences

logger = get_logger(__name__)


@dataclass
class LedgerContext:
    """Centralized context with the collaborators of one ledger session."""

    config: BaseConfig
    engine: Engine
    session_factory: SessionFactory
    store: SQLModelKeyValueStore
    auth: LocalAuthService
    ledger: Ledger
    preferences: UserPreferences

    def login(self, username: str, password: str) -> bool:
        """Authenticate and load the ledger for the new session."""

        if not self.auth.login(username, password):
            return False
        self.ledger.load()
        return True

    def register(self, username: str, password: str, security_answer: Optional[str] = None) -> bool:
        if not self.auth.register(username, password, security_answer):
            return False
        self.ledger.load()
        return True


def create_ledger_context(config: Optional[BaseConfig] = None) -> LedgerContext:
    """Create the context, loading the ledger if a stored session is still valid.

    Also installs the console and rotating JSON file log handlers.
    """

    if config is None:
        config = BaseConfig()
    setup_logging(config)

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    store = SQLModelKeyValueStore(session_factory, quota_bytes=config.STORAGE_QUOTA_BYTES)
    auth = LocalAuthService(store, timeout=timedelta(minutes=config.SESSION_TIMEOUT_MINUTES))
    ledger = Ledger(store, auth)

    if auth.restore_session():
        ledger.load()
    else:
        logger.info("No active session; ledger not loaded")

    return LedgerContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        store=store,
        auth=auth,
        ledger=ledger,
        preferences=load_preferences(store),
    )


__all__ = ["LedgerContext", "create_ledger_context"]

"""Persisted user preferences."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from ..constants.storage_keys import StorageKey
from ..domain.storage import KeyValueStore
from ..logging_config import get_logger
from ..models.preferences import AppTheme, UserPreferences

logger = get_logger(__name__)


def load_preferences(store: KeyValueStore) -> UserPreferences:
    """Return stored preferences, or defaults when missing or malformed."""

    raw = store.get(StorageKey.USER_PREFERENCES, None)
    if raw is None:
        return UserPreferences()
    try:
        return UserPreferences.model_validate(raw)
    except PydanticValidationError:
        logger.warning("Stored preferences are malformed; using defaults")
        return UserPreferences()


def save_preferences(store: KeyValueStore, preferences: UserPreferences) -> bool:
    return store.set(StorageKey.USER_PREFERENCES, preferences.to_json_dict())


def toggle_theme(store: KeyValueStore) -> AppTheme:
    """Flip between light and dark and persist the choice."""

    preferences = load_preferences(store)
    preferences.theme = AppTheme.DARK if preferences.theme == AppTheme.LIGHT else AppTheme.LIGHT
    save_preferences(store, preferences)
    return preferences.theme


__all__ = ["load_preferences", "save_preferences", "toggle_theme"]

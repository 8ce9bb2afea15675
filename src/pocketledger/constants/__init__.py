"""Static application constants."""

from .categories import DEFAULT_CATEGORY_IDS, default_categories
from .storage_keys import StorageKey

__all__ = ["DEFAULT_CATEGORY_IDS", "StorageKey", "default_categories"]

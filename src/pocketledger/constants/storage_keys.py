"""Logical keys used with the persistence store."""

from __future__ import annotations

from enum import Enum


class StorageKey(str, Enum):
    ACCOUNTS = "accounts"
    TRANSACTIONS = "transactions"
    CATEGORIES = "categories"
    BALANCE_HISTORY = "balanceHistory"
    USER_CREDENTIALS = "credentials"
    USER_PREFERENCES = "preferences"


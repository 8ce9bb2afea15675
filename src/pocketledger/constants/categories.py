"""
Default categories seeded on first load.
These ids are stable so exported files from any install reference the same rows.
"""

from __future__ import annotations

from ..models.category import Category, CategoryType

DEFAULT_INCOME_CATEGORIES = [
    {"id": "income-salary", "name": "Salary", "color": "#10B981"},
    {"id": "income-freelance", "name": "Freelance", "color": "#3B82F6"},
    {"id": "income-investments", "name": "Investments", "color": "#8B5CF6"},
    {"id": "income-other", "name": "Other Income", "color": "#F59E0B"},
]

DEFAULT_EXPENSE_CATEGORIES = [
    {"id": "expense-housing", "name": "Housing", "color": "#EF4444"},
    {"id": "expense-food", "name": "Food & Groceries", "color": "#F59E0B"},
    {"id": "expense-transport", "name": "Transportation", "color": "#3B82F6"},
    {"id": "expense-utilities", "name": "Utilities", "color": "#10B981"},
    {"id": "expense-entertainment", "name": "Entertainment", "color": "#8B5CF6"},
    {"id": "expense-health", "name": "Health & Medical", "color": "#EC4899"},
    {"id": "expense-other", "name": "Other Expenses", "color": "#6B7280"},
]

DEFAULT_CATEGORY_IDS = frozenset(
    payload["id"] for payload in DEFAULT_INCOME_CATEGORIES + DEFAULT_EXPENSE_CATEGORIES
)


def default_categories() -> list[Category]:
    """Return fresh Category instances for the seeded defaults, income first."""

    seeded: list[Category] = []
    for category_type, payloads in (
        (CategoryType.INCOME, DEFAULT_INCOME_CATEGORIES),
        (CategoryType.EXPENSE, DEFAULT_EXPENSE_CATEGORIES),
    ):
        for payload in payloads:
            seeded.append(Category(type=category_type, is_default=True, **payload))
    return seeded

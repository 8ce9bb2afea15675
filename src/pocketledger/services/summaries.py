"""Summary reducers over transactions, scoped by a period."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from ..models.account import Account
from ..models.category import Category, CategoryType
from ..models.transaction import Transaction, TransactionType
from .periods import Period, is_within_period


@dataclass(slots=True)
class CategoryTotal:
    """One row of a category breakdown."""

    category: Category
    amount: float
    percentage: float


@dataclass(slots=True)
class MonthlyTrend:
    """Per-period income, expense and net series, aligned with ``labels``."""

    labels: list[str]
    income: list[float]
    expenses: list[float]
    net: list[float]


def _sum_of_type(
    transactions: Iterable[Transaction], txn_type: TransactionType, period: Period
) -> float:
    return sum(
        (tx.amount for tx in transactions if tx.type == txn_type and is_within_period(tx.date, period)),
        0.0,
    )


def total_income(transactions: Iterable[Transaction], period: Period) -> float:
    """Sum of income amounts dated inside ``period``."""

    return _sum_of_type(transactions, TransactionType.INCOME, period)


def total_expenses(transactions: Iterable[Transaction], period: Period) -> float:
    """Sum of expense amounts dated inside ``period``."""

    return _sum_of_type(transactions, TransactionType.EXPENSE, period)


def net_balance(transactions: Sequence[Transaction], period: Period) -> float:
    return total_income(transactions, period) - total_expenses(transactions, period)


def _breakdown(
    transactions: Iterable[Transaction],
    categories: Sequence[Category],
    period: Period,
    txn_type: TransactionType,
    category_type: CategoryType,
) -> list[CategoryTotal]:
    matching = [tx for tx in transactions if tx.type == txn_type and is_within_period(tx.date, period)]
    # Denominator includes transactions in archived or unknown categories.
    grand_total = sum((tx.amount for tx in matching), 0.0)

    totals: dict[str, float] = {
        cat.id: 0.0 for cat in categories if cat.type == category_type and not cat.is_archived
    }
    for tx in matching:
        if tx.category_id in totals:
            totals[tx.category_id] += tx.amount

    lookup = {cat.id: cat for cat in categories}
    breakdown: list[CategoryTotal] = []
    for category_id, amount in totals.items():
        if amount <= 0:
            continue
        category = lookup[category_id]
        percentage = amount / grand_total * 100 if grand_total > 0 else 0.0
        breakdown.append(CategoryTotal(category=category, amount=amount, percentage=percentage))
    breakdown.sort(key=lambda row: row.amount, reverse=True)
    return breakdown


def expenses_by_category(
    transactions: Iterable[Transaction], categories: Sequence[Category], period: Period
) -> list[CategoryTotal]:
    """Expense totals per non-archived expense category, largest first.

    Zero-amount categories are omitted. Percentages are relative to every
    expense in the period, so they need not add up to 100.
    """

    return _breakdown(
        transactions, categories, period, TransactionType.EXPENSE, CategoryType.EXPENSE
    )


def income_by_category(
    transactions: Iterable[Transaction], categories: Sequence[Category], period: Period
) -> list[CategoryTotal]:
    """Income counterpart of :func:`expenses_by_category`."""

    return _breakdown(
        transactions, categories, period, TransactionType.INCOME, CategoryType.INCOME
    )


def total_balance(accounts: Iterable[Account]) -> float:
    """Sum of current balances across non-archived accounts."""

    return sum((acc.current_balance for acc in accounts if not acc.is_archived), 0.0)


def budget_utilization(expenses: float, budget: float) -> float:
    """Percentage of ``budget`` spent, capped at 100; 0 for a non-positive budget."""

    if budget <= 0:
        return 0.0
    return min(expenses / budget * 100, 100.0)


def monthly_trend(transactions: Sequence[Transaction], periods: Sequence[Period]) -> MonthlyTrend:
    """Income, expense and net totals for each period, in the order given."""

    return MonthlyTrend(
        labels=[period.label or "" for period in periods],
        income=[total_income(transactions, period) for period in periods],
        expenses=[total_expenses(transactions, period) for period in periods],
        net=[net_balance(transactions, period) for period in periods],
    )


__all__ = [
    "CategoryTotal",
    "MonthlyTrend",
    "budget_utilization",
    "expenses_by_category",
    "income_by_category",
    "monthly_trend",
    "net_balance",
    "total_balance",
    "total_expenses",
    "total_income",
]

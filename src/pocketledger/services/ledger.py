"""Ledger engine: accounts, transactions, categories and daily balance history.

The ledger owns the canonical in-memory collections for an authenticated
session and mirrors them to the persistence store after every mutation.
Account balances are stored running totals: each transaction mutation applies
or reverses its effect incrementally instead of replaying the whole ledger.
"""

from __future__ import annotations

from datetime import datetime, time
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from ..constants.categories import default_categories
from ..constants.storage_keys import StorageKey
from ..domain.session import SessionGate
from ..domain.storage import KeyValueStore
from ..errors import AccountNotFoundError, InsufficientBalanceError, ValidationError
from ..logging_config import get_logger
from ..models.account import Account, AccountType
from ..models.balance_history import BalanceHistory
from ..models.base import LedgerRecord
from ..models.category import Category, CategoryType
from ..models.transaction import RecurrencePattern, Transaction, TransactionType

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=LedgerRecord)

UNKNOWN_LABEL = "Unknown"


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex}"


def _build(model_cls: type[RecordT], **fields: Any) -> RecordT:
    """Construct a record, surfacing schema failures as ``ValidationError``."""

    try:
        return model_cls(**fields)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def _index_of(records: Sequence[Any], record_id: str) -> Optional[int]:
    for index, record in enumerate(records):
        if record.id == record_id:
            return index
    return None


class Ledger:
    """Single-user ledger bound to one store and one authentication gate."""

    def __init__(
        self,
        store: KeyValueStore,
        session: SessionGate,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.session = session
        self.clock = clock
        self.accounts: list[Account] = []
        self.transactions: list[Transaction] = []
        self.categories: list[Category] = []
        self.balance_history: list[BalanceHistory] = []
        self.is_loaded = False
        self.last_save_ok = True

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """Populate the collections from the store when a session is active."""

        if not self.session.is_authenticated:
            logger.info("Skipping ledger load: no authenticated session")
            return False

        self.accounts = self._read(StorageKey.ACCOUNTS, Account) or []
        self.transactions = self._read(StorageKey.TRANSACTIONS, Transaction) or []
        # Missing or empty categories are re-seeded with the defaults.
        self.categories = self._read(StorageKey.CATEGORIES, Category) or default_categories()
        self.balance_history = self._read(StorageKey.BALANCE_HISTORY, BalanceHistory) or []
        self.is_loaded = True

        self.update_balance_history()
        self.save()
        logger.info(
            "Ledger loaded",
            extra={
                "accounts": len(self.accounts),
                "transactions": len(self.transactions),
                "categories": len(self.categories),
            },
        )
        return True

    def _read(self, key: StorageKey, model_cls: type[RecordT]) -> Optional[list[RecordT]]:
        raw = self.store.get(key, None)
        if raw is None:
            return None
        if not isinstance(raw, list):
            logger.error("Stored %s is not a list; ignoring it", key.value)
            return None
        try:
            return [model_cls.model_validate(item) for item in raw]
        except PydanticValidationError:
            logger.exception("Stored %s failed validation; ignoring it", key.value)
            return None

    def save(self) -> bool:
        """Write all four collections to the store.

        Returns False when no session is active or any write fails. The
        in-memory state is left untouched either way.
        """

        if not self.session.is_authenticated:
            self.last_save_ok = False
            return False

        collections: tuple[tuple[StorageKey, Iterable[LedgerRecord]], ...] = (
            (StorageKey.ACCOUNTS, self.accounts),
            (StorageKey.TRANSACTIONS, self.transactions),
            (StorageKey.CATEGORIES, self.categories),
            (StorageKey.BALANCE_HISTORY, self.balance_history),
        )
        failed = [
            key.value
            for key, records in collections
            if not self.store.set(key, [record.to_json_dict() for record in records])
        ]
        if failed:
            logger.error(
                "Ledger state not persisted; in-memory state remains authoritative",
                extra={"failed_keys": failed},
            )
        self.last_save_ok = not failed
        return self.last_save_ok

    def _commit(self, *, refresh_history: bool = True) -> bool:
        if refresh_history:
            self.update_balance_history()
        return self.save()

    def reset_data(self) -> None:
        """Drop every account, transaction and history entry and restore default categories."""

        self.accounts = []
        self.transactions = []
        self.categories = default_categories()
        self.balance_history = []
        logger.warning("Ledger data reset")
        self._commit(refresh_history=False)

    def replace_state(
        self,
        *,
        accounts: list[Account],
        transactions: list[Transaction],
        categories: list[Category],
        balance_history: list[BalanceHistory],
    ) -> None:
        """Replace all four collections wholesale (no merge)."""

        self.accounts = accounts
        self.transactions = transactions
        self.categories = categories
        self.balance_history = balance_history
        self._commit()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_account(self, account_id: Optional[str]) -> Optional[Account]:
        return next((acc for acc in self.accounts if acc.id == account_id), None)

    def find_category(self, category_id: Optional[str]) -> Optional[Category]:
        return next((cat for cat in self.categories if cat.id == category_id), None)

    def find_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((tx for tx in self.transactions if tx.id == transaction_id), None)

    def account_label(self, account_id: Optional[str]) -> str:
        account = self.find_account(account_id)
        return account.name if account is not None else UNKNOWN_LABEL

    def category_label(self, category_id: Optional[str]) -> str:
        category = self.find_category(category_id)
        return category.name if category is not None else UNKNOWN_LABEL

    def active_accounts(self) -> list[Account]:
        """Accounts selectable for new transactions."""

        return [acc for acc in self.accounts if not acc.is_archived]

    def active_categories(self, category_type: CategoryType | str | None = None) -> list[Category]:
        """Non-archived categories, optionally of one type."""

        wanted = CategoryType(category_type) if category_type is not None else None
        return [
            cat
            for cat in self.categories
            if not cat.is_archived and (wanted is None or cat.type == wanted)
        ]

    def transactions_for_account(self, account_id: str) -> list[Transaction]:
        """Transactions using the account as source or destination, newest first."""

        related = [
            tx for tx in self.transactions if account_id in (tx.account_id, tx.to_account_id)
        ]
        return sorted(related, key=lambda tx: tx.date, reverse=True)

    def _is_account_referenced(self, account_id: str) -> bool:
        return any(
            tx.account_id == account_id or tx.to_account_id == account_id
            for tx in self.transactions
        )

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def add_account(
        self,
        *,
        name: str,
        type: AccountType | str = AccountType.BANK,
        initial_balance: float = 0.0,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        is_archived: bool = False,
    ) -> Account:
        """Create an account whose current balance starts at ``initial_balance``."""

        now = self.clock()
        account = _build(
            Account,
            id=_new_id("account"),
            name=name,
            type=type,
            initial_balance=initial_balance,
            current_balance=initial_balance,
            icon=icon,
            color=color,
            is_archived=is_archived,
            created_at=now,
            updated_at=now,
        )
        self.accounts.append(account)
        self.balance_history.append(
            BalanceHistory(account_id=account.id, date=now, balance=account.initial_balance)
        )
        logger.info("Account created", extra={"account_id": account.id})
        self._commit()
        return account

    def update_account(self, account: Account) -> Optional[Account]:
        """Replace the stored account with the same id.

        Balances are taken from ``account`` as given: changing
        ``initial_balance`` here does not touch ``current_balance``. Use
        :meth:`recompute_balances` to reconcile explicitly.
        """

        index = _index_of(self.accounts, account.id)
        if index is None:
            logger.warning("Update skipped: account not found", extra={"account_id": account.id})
            return None
        stored = account.model_copy(update={"updated_at": self.clock()}, deep=True)
        self.accounts[index] = stored
        logger.info("Account updated", extra={"account_id": account.id})
        self._commit()
        return stored

    def delete_account(self, account_id: str) -> bool:
        """Remove an account and its history unless a transaction references it."""

        if self._is_account_referenced(account_id):
            logger.warning(
                "Account delete refused: referenced by transactions",
                extra={"account_id": account_id},
            )
            return False
        self.accounts = [acc for acc in self.accounts if acc.id != account_id]
        self.balance_history = [
            entry for entry in self.balance_history if entry.account_id != account_id
        ]
        logger.info("Account deleted", extra={"account_id": account_id})
        self._commit()
        return True

    def archive_account(self, account_id: str) -> None:
        now = self.clock()
        for account in self.accounts:
            if account.id == account_id:
                account.is_archived = True
                account.updated_at = now
        logger.info("Account archived", extra={"account_id": account_id})
        self._commit()

    def recompute_balances(self) -> list[str]:
        """Rebuild every ``current_balance`` from ``initial_balance`` and the stored transactions.

        Returns the ids of accounts whose balance changed.
        """

        totals = {acc.id: acc.initial_balance for acc in self.accounts}
        for tx in self.transactions:
            if tx.account_id not in totals:
                continue
            if tx.type == TransactionType.INCOME:
                totals[tx.account_id] += tx.amount
            elif tx.type == TransactionType.EXPENSE:
                totals[tx.account_id] -= tx.amount
            elif tx.type == TransactionType.TRANSFER and tx.to_account_id:
                totals[tx.account_id] -= tx.amount
                if tx.to_account_id in totals:
                    totals[tx.to_account_id] += tx.amount

        now = self.clock()
        changed: list[str] = []
        for account in self.accounts:
            if account.current_balance != totals[account.id]:
                account.current_balance = totals[account.id]
                account.updated_at = now
                changed.append(account.id)
        if changed:
            logger.warning("Balances recomputed", extra={"account_ids": changed})
            self._commit()
        return changed

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def add_transaction(
        self,
        *,
        amount: float,
        type: TransactionType | str,
        category_id: str,
        account_id: str,
        date: datetime,
        to_account_id: Optional[str] = None,
        notes: Optional[str] = None,
        tags: Optional[list[str]] = None,
        is_recurring: bool = False,
        recurrence_pattern: Optional[RecurrencePattern] = None,
    ) -> Transaction:
        """Record a transaction and apply its balance effect.

        Raises:
            ValidationError: the fields do not form a valid transaction
            AccountNotFoundError: an expense names a missing account
            InsufficientBalanceError: an expense exceeds the account balance
        """

        now = self.clock()
        transaction = _build(
            Transaction,
            id=_new_id("tx"),
            amount=amount,
            type=type,
            category_id=category_id,
            account_id=account_id,
            to_account_id=to_account_id,
            date=date,
            notes=notes,
            tags=list(tags or []),
            is_recurring=is_recurring,
            recurrence_pattern=recurrence_pattern,
            created_at=now,
            updated_at=now,
        )

        if transaction.type == TransactionType.EXPENSE:
            account = self.find_account(transaction.account_id)
            if account is None:
                raise AccountNotFoundError(transaction.account_id)
            self._check_funds(account, transaction.amount)

        self.transactions.append(transaction)
        try:
            self._apply(transaction)
        except InsufficientBalanceError:
            self.transactions.pop()
            raise
        logger.info(
            "Transaction added",
            extra={"transaction_id": transaction.id, "type": transaction.type.value},
        )
        self._commit()
        return transaction

    def update_transaction(self, updated: Transaction) -> Optional[Transaction]:
        """Swap a stored transaction for ``updated``, moving its balance effect.

        The old effect is reversed before the new one is applied, so the new
        effect may take an account below zero (transfers are never checked).
        If applying an expense fails, the update is rolled back before the
        error propagates.
        """

        index = _index_of(self.transactions, updated.id)
        if index is None:
            logger.warning("Update skipped: transaction not found", extra={"transaction_id": updated.id})
            return None

        previous = self.transactions[index]
        snapshot = self._balance_snapshot()
        stored = updated.model_copy(
            update={"created_at": previous.created_at, "updated_at": self.clock()}, deep=True
        )

        self._reverse(previous)
        self.transactions[index] = stored
        try:
            self._apply(stored)
        except InsufficientBalanceError:
            self.transactions[index] = previous
            self._restore_balances(snapshot)
            logger.warning("Transaction update rejected", extra={"transaction_id": updated.id})
            raise

        logger.info("Transaction updated", extra={"transaction_id": updated.id})
        self._commit()
        return stored

    def delete_transaction(self, transaction_id: str) -> bool:
        """Reverse and remove a transaction; False if it does not exist."""

        index = _index_of(self.transactions, transaction_id)
        if index is None:
            return False
        self._reverse(self.transactions[index])
        del self.transactions[index]
        logger.info("Transaction deleted", extra={"transaction_id": transaction_id})
        self._commit()
        return True

    def _check_funds(self, account: Account, amount: float) -> None:
        if account.current_balance < amount:
            raise InsufficientBalanceError(
                account_id=account.id,
                account_name=account.name,
                balance=account.current_balance,
                amount=amount,
            )

    def _apply(self, transaction: Transaction) -> None:
        """Mutate balances forward for one transaction."""

        account = self.find_account(transaction.account_id)
        if account is None:
            return
        now = self.clock()
        if transaction.type == TransactionType.INCOME:
            account.current_balance += transaction.amount
        elif transaction.type == TransactionType.EXPENSE:
            self._check_funds(account, transaction.amount)
            account.current_balance -= transaction.amount
        elif transaction.type == TransactionType.TRANSFER and transaction.to_account_id:
            # The source is debited even when the destination no longer exists.
            account.current_balance -= transaction.amount
            target = self.find_account(transaction.to_account_id)
            if target is not None:
                target.current_balance += transaction.amount
                target.updated_at = now
        account.updated_at = now

    def _reverse(self, transaction: Transaction) -> None:
        """Exact inverse of :meth:`_apply`, without a funds check."""

        account = self.find_account(transaction.account_id)
        if account is None:
            return
        now = self.clock()
        if transaction.type == TransactionType.INCOME:
            account.current_balance -= transaction.amount
        elif transaction.type == TransactionType.EXPENSE:
            account.current_balance += transaction.amount
        elif transaction.type == TransactionType.TRANSFER and transaction.to_account_id:
            account.current_balance += transaction.amount
            target = self.find_account(transaction.to_account_id)
            if target is not None:
                target.current_balance -= transaction.amount
                target.updated_at = now
        account.updated_at = now

    def _balance_snapshot(self) -> list[tuple[float, datetime]]:
        return [(acc.current_balance, acc.updated_at) for acc in self.accounts]

    def _restore_balances(self, snapshot: list[tuple[float, datetime]]) -> None:
        for account, (balance, updated_at) in zip(self.accounts, snapshot):
            account.current_balance = balance
            account.updated_at = updated_at

    # ------------------------------------------------------------------
    # Balance history
    # ------------------------------------------------------------------

    def update_balance_history(self) -> None:
        """Record today's balance for every account, overwriting any same-day entry."""

        now = self.clock()
        today = now.date()
        for account in self.accounts:
            entry = next(
                (
                    item
                    for item in self.balance_history
                    if item.account_id == account.id and item.date.date() == today
                ),
                None,
            )
            if entry is None:
                self.balance_history.append(
                    BalanceHistory(
                        account_id=account.id,
                        date=datetime.combine(today, time.min),
                        balance=account.current_balance,
                    )
                )
            else:
                entry.balance = account.current_balance

    def history_for_account(self, account_id: str) -> list[BalanceHistory]:
        """Balance series of one account, oldest first."""

        return sorted(
            (entry for entry in self.balance_history if entry.account_id == account_id),
            key=lambda entry: entry.date,
        )

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def add_category(
        self,
        *,
        name: str,
        type: CategoryType | str,
        color: str = "#6B7280",
        icon: Optional[str] = None,
        is_archived: bool = False,
    ) -> Category:
        category = _build(
            Category,
            id=_new_id("category"),
            name=name,
            type=type,
            color=color,
            icon=icon,
            is_default=False,
            is_archived=is_archived,
        )
        self.categories.append(category)
        logger.info("Category created", extra={"category_id": category.id})
        self._commit(refresh_history=False)
        return category

    def update_category(self, category: Category) -> Optional[Category]:
        index = _index_of(self.categories, category.id)
        if index is None:
            logger.warning("Update skipped: category not found", extra={"category_id": category.id})
            return None
        self.categories[index] = category
        self._commit(refresh_history=False)
        return category

    def delete_category(self, category_id: str) -> bool:
        """Remove a user category; defaults and referenced categories are kept."""

        if any(tx.category_id == category_id for tx in self.transactions):
            logger.warning(
                "Category delete refused: referenced by transactions",
                extra={"category_id": category_id},
            )
            return False
        category = self.find_category(category_id)
        if category is not None and category.is_default:
            logger.warning("Category delete refused: default category", extra={"category_id": category_id})
            return False
        self.categories = [cat for cat in self.categories if cat.id != category_id]
        logger.info("Category deleted", extra={"category_id": category_id})
        self._commit(refresh_history=False)
        return True

    def archive_category(self, category_id: str) -> None:
        for category in self.categories:
            if category.id == category_id:
                category.is_archived = True
        logger.info("Category archived", extra={"category_id": category_id})
        self._commit(refresh_history=False)


__all__ = ["Ledger", "UNKNOWN_LABEL"]

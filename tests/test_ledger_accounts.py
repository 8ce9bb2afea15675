"""Account lifecycle, loading and persistence behaviour of the ledger."""

from __future__ import annotations

from datetime import datetime

import pytest

from pocketledger.constants import DEFAULT_CATEGORY_IDS, StorageKey
from pocketledger.errors import ValidationError
from pocketledger.models import AccountType, TransactionType
from pocketledger.services.ledger import Ledger


def test_load_seeds_default_categories(ledger):
    assert ledger.is_loaded
    assert {cat.id for cat in ledger.categories} == DEFAULT_CATEGORY_IDS
    assert all(cat.is_default for cat in ledger.categories)
    assert ledger.accounts == []


def test_load_skipped_without_session(store, gate, clock):
    gate.is_authenticated = False
    instance = Ledger(store, gate, clock=clock)

    assert instance.load() is False
    assert instance.is_loaded is False
    assert instance.categories == []
    assert instance.save() is False


def test_add_account_starts_at_initial_balance(ledger, clock):
    account = ledger.add_account(name="Wallet", type=AccountType.CASH, initial_balance=250.0)

    assert account.id.startswith("account-")
    assert account.current_balance == 250.0
    assert account.created_at == clock.now
    history = ledger.history_for_account(account.id)
    assert len(history) == 1
    assert history[0].balance == 250.0


def test_state_survives_reload(ledger, store, gate, clock):
    account = ledger.add_account(name="Bank", initial_balance=100.0)
    ledger.add_transaction(
        amount=40.0,
        type=TransactionType.EXPENSE,
        category_id="expense-food",
        account_id=account.id,
        date=clock.now,
        tags=["weekly"],
    )

    reloaded = Ledger(store, gate, clock=clock)
    assert reloaded.load()

    assert [a.model_dump() for a in reloaded.accounts] == [a.model_dump() for a in ledger.accounts]
    assert [t.model_dump() for t in reloaded.transactions] == [
        t.model_dump() for t in ledger.transactions
    ]
    assert reloaded.find_account(account.id).current_balance == 60.0


def test_stored_data_uses_camel_case_keys(ledger, store):
    ledger.add_account(name="Bank", initial_balance=10.0)

    stored = store.get(StorageKey.ACCOUNTS, None)
    assert "initialBalance" in stored[0]
    assert "currentBalance" in stored[0]
    assert "isArchived" in stored[0]
    assert store.get(StorageKey.BALANCE_HISTORY, None)[0]["accountId"] == stored[0]["id"]


def test_malformed_stored_collections_fall_back_to_defaults(store, gate, clock):
    store.set(StorageKey.ACCOUNTS, "not-a-list")
    store.set(StorageKey.TRANSACTIONS, [{"id": "broken"}])
    store.set(StorageKey.CATEGORIES, [])

    instance = Ledger(store, gate, clock=clock)
    assert instance.load()

    assert instance.accounts == []
    assert instance.transactions == []
    assert {cat.id for cat in instance.categories} == DEFAULT_CATEGORY_IDS


def test_update_account_trusts_caller_balances(ledger, clock):
    account = ledger.add_account(name="Bank", initial_balance=100.0)
    clock.now = datetime(2024, 3, 15, 12, 0)

    edited = account.model_copy(update={"name": "Main Bank", "initial_balance": 500.0})
    stored = ledger.update_account(edited)

    assert stored.name == "Main Bank"
    assert stored.initial_balance == 500.0
    assert stored.current_balance == 100.0
    assert stored.updated_at == clock.now


def test_update_missing_account_is_noop(ledger, clock):
    account = ledger.add_account(name="Bank")
    ghost = account.model_copy(update={"id": "account-missing"})

    assert ledger.update_account(ghost) is None
    assert len(ledger.accounts) == 1


def test_recompute_balances_reconciles_after_manual_edit(ledger, clock):
    account = ledger.add_account(name="Bank", initial_balance=100.0)
    ledger.add_transaction(
        amount=30.0,
        type=TransactionType.INCOME,
        category_id="income-salary",
        account_id=account.id,
        date=clock.now,
    )
    ledger.update_account(account.model_copy(update={"initial_balance": 200.0}))

    changed = ledger.recompute_balances()

    assert changed == [account.id]
    assert ledger.find_account(account.id).current_balance == 230.0
    assert ledger.recompute_balances() == []


def test_delete_account_refused_while_referenced(ledger, clock):
    source = ledger.add_account(name="Source", initial_balance=100.0)
    target = ledger.add_account(name="Target")
    ledger.add_transaction(
        amount=10.0,
        type=TransactionType.TRANSFER,
        category_id="expense-other",
        account_id=source.id,
        to_account_id=target.id,
        date=clock.now,
    )

    assert ledger.delete_account(source.id) is False
    assert ledger.delete_account(target.id) is False
    assert len(ledger.accounts) == 2


def test_delete_account_removes_its_history(ledger):
    keep = ledger.add_account(name="Keep")
    drop = ledger.add_account(name="Drop")

    assert ledger.delete_account(drop.id) is True

    assert [a.id for a in ledger.accounts] == [keep.id]
    assert all(entry.account_id == keep.id for entry in ledger.balance_history)


def test_archive_account_hides_it_from_active_list(ledger):
    account = ledger.add_account(name="Old Card", type=AccountType.CREDIT)
    ledger.add_account(name="Bank")

    ledger.archive_account(account.id)

    assert ledger.find_account(account.id).is_archived
    assert [a.name for a in ledger.active_accounts()] == ["Bank"]


def test_labels_for_dangling_references(ledger):
    account = ledger.add_account(name="Bank")

    assert ledger.account_label(account.id) == "Bank"
    assert ledger.account_label("account-gone") == "Unknown"
    assert ledger.category_label("expense-food") == "Food & Groceries"
    assert ledger.category_label(None) == "Unknown"


def test_failed_write_keeps_memory_state(memory_ledger, memory_store):
    memory_store.fail_writes = True

    account = memory_ledger.add_account(name="Cash", initial_balance=5.0)

    assert memory_ledger.find_account(account.id) is not None
    assert memory_ledger.last_save_ok is False
    assert memory_ledger.save() is False

    memory_store.fail_writes = False
    assert memory_ledger.save() is True
    assert memory_store.data["accounts"][0]["name"] == "Cash"


def test_reset_data_restores_defaults(ledger, clock):
    account = ledger.add_account(name="Bank", initial_balance=10.0)
    ledger.add_category(name="Pets", type="expense")

    ledger.reset_data()

    assert ledger.accounts == []
    assert ledger.transactions == []
    assert ledger.balance_history == []
    assert ledger.find_account(account.id) is None
    assert {cat.id for cat in ledger.categories} == DEFAULT_CATEGORY_IDS


def test_non_finite_initial_balance_is_rejected(ledger):
    with pytest.raises(ValidationError):
        ledger.add_account(name="Broken", initial_balance=float("nan"))

    assert ledger.accounts == []

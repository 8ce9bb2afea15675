"""JSON backup export and import for the ledger."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Sequence, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..config import BaseConfig
from ..errors import ImportFormatError
from ..logging_config import get_logger
from ..models.account import Account
from ..models.balance_history import BalanceHistory
from ..models.base import LedgerRecord
from ..models.category import Category
from ..models.transaction import Transaction, TransactionType
from .ledger import Ledger

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=LedgerRecord)


@dataclass(slots=True)
class LedgerSnapshot:
    """Validated contents of a backup document."""

    accounts: list[Account]
    transactions: list[Transaction]
    categories: list[Category]
    balance_history: list[BalanceHistory]


def export_data(ledger: Ledger) -> str:
    """Serialize the ledger's four collections as an indented JSON document."""

    document = {
        "accounts": [acc.to_json_dict() for acc in ledger.accounts],
        "transactions": [tx.to_json_dict() for tx in ledger.transactions],
        "categories": [cat.to_json_dict() for cat in ledger.categories],
        "balanceHistory": [entry.to_json_dict() for entry in ledger.balance_history],
    }
    return json.dumps(document, indent=2)


def _validate_records(document: dict, key: str, model_cls: type[RecordT]) -> list[RecordT]:
    raw = document.get(key)
    if not isinstance(raw, list):
        raise ImportFormatError(f"Backup is missing the '{key}' list")
    records: list[RecordT] = []
    for position, item in enumerate(raw):
        try:
            records.append(model_cls.model_validate(item))
        except PydanticValidationError as exc:
            raise ImportFormatError(f"Invalid record at {key}[{position}]") from exc
    ids = [getattr(record, "id") for record in records]
    if len(ids) != len(set(ids)):
        raise ImportFormatError(f"Duplicate ids in '{key}'")
    return records


def _check_transfer_targets(transactions: Sequence[Transaction]) -> None:
    """A destination account is present exactly when the type is transfer."""

    for position, tx in enumerate(transactions):
        is_transfer = tx.type == TransactionType.TRANSFER
        if is_transfer and not tx.to_account_id:
            raise ImportFormatError(f"Transfer at transactions[{position}] has no toAccountId")
        if not is_transfer and tx.to_account_id is not None:
            raise ImportFormatError(f"Non-transfer at transactions[{position}] has a toAccountId")


def _synthesize_history(accounts: Sequence[Account], now: datetime) -> list[BalanceHistory]:
    return [
        BalanceHistory(account_id=acc.id, date=now, balance=acc.current_balance)
        for acc in accounts
    ]


def parse_backup(text: str, *, now: Optional[datetime] = None) -> LedgerSnapshot:
    """Validate a backup document without touching any ledger.

    A missing or malformed ``balanceHistory`` is rebuilt from the accounts'
    current balances rather than rejected.

    Raises:
        ImportFormatError: the document is not a complete, valid backup
    """

    try:
        document: Any = json.loads(text)
    except ValueError as exc:
        raise ImportFormatError("Backup is not valid JSON") from exc
    if not isinstance(document, dict):
        raise ImportFormatError("Backup must be a JSON object")

    accounts = _validate_records(document, "accounts", Account)
    transactions = _validate_records(document, "transactions", Transaction)
    _check_transfer_targets(transactions)
    categories = _validate_records(document, "categories", Category)

    history_raw = document.get("balanceHistory")
    history: Optional[list[BalanceHistory]] = None
    if isinstance(history_raw, list):
        try:
            history = [BalanceHistory.model_validate(item) for item in history_raw]
        except PydanticValidationError:
            logger.warning("Backup balance history is malformed; rebuilding it")
    if history is None:
        history = _synthesize_history(accounts, now or datetime.now())

    return LedgerSnapshot(
        accounts=accounts,
        transactions=transactions,
        categories=categories,
        balance_history=history,
    )


def import_data(ledger: Ledger, text: str) -> bool:
    """Replace the ledger's state with a backup; False leaves it untouched."""

    try:
        snapshot = parse_backup(text, now=ledger.clock())
    except ImportFormatError as exc:
        logger.warning("Import rejected: %s", exc)
        return False

    ledger.replace_state(
        accounts=snapshot.accounts,
        transactions=snapshot.transactions,
        categories=snapshot.categories,
        balance_history=snapshot.balance_history,
    )
    logger.info(
        "Backup imported",
        extra={"accounts": len(snapshot.accounts), "transactions": len(snapshot.transactions)},
    )
    return True


def backup_filename(today: Optional[date] = None) -> str:
    """Return ``finance-data-YYYY-MM-DD.json`` for ``today``."""

    today = today or date.today()
    return f"{BaseConfig.EXPORT_FILENAME_PREFIX}-{today.isoformat()}.json"


def export_to_file(ledger: Ledger, directory: Path, today: Optional[date] = None) -> Path:
    """Write an export document into ``directory`` and return its path."""

    directory.mkdir(parents=True, exist_ok=True)
    output_path = directory / backup_filename(today)
    output_path.write_text(export_data(ledger), encoding="utf-8")
    logger.info("Backup exported", extra={"path": str(output_path)})
    return output_path


def import_from_file(ledger: Ledger, path: Path) -> bool:
    """Import a backup file; unreadable files are reported as False."""

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        logger.exception("Could not read backup file %s", path)
        return False
    return import_data(ledger, text)


__all__ = [
    "LedgerSnapshot",
    "backup_filename",
    "export_data",
    "export_to_file",
    "import_data",
    "import_from_file",
    "parse_backup",
]

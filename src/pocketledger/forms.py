"""Form models validating user input before it reaches the ledger."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import AccountNotFoundError, InsufficientBalanceError, ValidationError
from .models.account import Account, AccountType
from .models.category import Category, CategoryType
from .models.transaction import RecurrencePattern, Transaction, TransactionType
from .services.ledger import Ledger

FormT = TypeVar("FormT", bound=BaseModel)


class AccountForm(BaseModel):
    """Input for creating or editing an account."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(default="", max_length=100, validate_default=True)
    type: AccountType = AccountType.BANK
    initial_balance: FiniteFloat = 0.0
    icon: Optional[str] = None
    color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value:
            raise ValueError("Account name is required")
        return value


class CategoryForm(BaseModel):
    """Input for creating or editing a category."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(default="", max_length=100, validate_default=True)
    type: CategoryType = CategoryType.EXPENSE
    color: str = "#6B7280"
    icon: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value:
            raise ValueError("Category name is required")
        return value


class TransactionForm(BaseModel):
    """Input for recording a transaction."""

    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType = TransactionType.EXPENSE
    amount: FiniteFloat = Field(default=0.0, validate_default=True)
    category_id: str = Field(default="", validate_default=True)
    account_id: str = Field(default="", validate_default=True)
    to_account_id: Optional[str] = None
    date: datetime = Field(default_factory=datetime.now)
    notes: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None

    @field_validator("amount", mode="before")
    @classmethod
    def blank_amount(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0.0
        return value

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Amount must be greater than 0")
        return value

    @field_validator("category_id")
    @classmethod
    def validate_category(cls, value: str) -> str:
        if not value:
            raise ValueError("Please select a category")
        return value

    @field_validator("account_id")
    @classmethod
    def validate_account(cls, value: str) -> str:
        if not value:
            raise ValueError("Please select an account")
        return value

    @field_validator("date")
    @classmethod
    def to_local_naive(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    @field_validator("notes", "to_account_id")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value: str | Iterable[str] | None) -> list[str] | Iterable[str]:
        """Convert comma-separated tag strings into a list."""

        if value is None:
            return []
        if isinstance(value, str):
            return [tag for tag in (part.strip() for part in value.split(",")) if tag]
        return value

    @model_validator(mode="after")
    def check_destination(self) -> "TransactionForm":
        if self.type is not TransactionType.TRANSFER:
            self.to_account_id = None
            return self
        if not self.to_account_id:
            raise ValueError("Please select a destination account")
        if self.to_account_id == self.account_id:
            raise ValueError("Destination account must differ from the source account")
        return self


def validate_form(form_cls: type[FormT], data: Mapping[str, Any]) -> FormT:
    """Validate ``data`` into ``form_cls``.

    Raises:
        ValidationError: with messages grouped by field name
    """

    try:
        return form_cls.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def check_funds(ledger: Ledger, form: TransactionForm) -> None:
    """Reject expenses and transfers the source account cannot cover."""

    if form.type not in (TransactionType.EXPENSE, TransactionType.TRANSFER):
        return
    account = ledger.find_account(form.account_id)
    if account is None:
        raise AccountNotFoundError(form.account_id)
    if account.current_balance < form.amount:
        raise InsufficientBalanceError(
            account_id=account.id,
            account_name=account.name,
            balance=account.current_balance,
            amount=form.amount,
        )


def submit_transaction(
    ledger: Ledger, data: Mapping[str, Any], *, transaction_id: Optional[str] = None
) -> Optional[Transaction]:
    """Validate input and add a transaction, or update ``transaction_id``.

    Edits skip the form-level funds check because the old effect is reversed
    first; the ledger still rejects an expense that overdraws its account.
    """

    form = validate_form(TransactionForm, data)
    fields = form.model_dump()
    if transaction_id is None:
        check_funds(ledger, form)
        fields["recurrence_pattern"] = form.recurrence_pattern
        return ledger.add_transaction(**fields)

    existing = ledger.find_transaction(transaction_id)
    if existing is None:
        return None
    updated = existing.model_copy(update=fields)
    updated.recurrence_pattern = form.recurrence_pattern
    return ledger.update_transaction(updated)


def submit_account(
    ledger: Ledger, data: Mapping[str, Any], *, account_id: Optional[str] = None
) -> Optional[Account]:
    """Validate input and create an account, or edit ``account_id``.

    Edits keep the stored ``current_balance`` as is.
    """

    form = validate_form(AccountForm, data)
    if account_id is None:
        return ledger.add_account(**form.model_dump())
    existing = ledger.find_account(account_id)
    if existing is None:
        return None
    return ledger.update_account(existing.model_copy(update=form.model_dump()))


def submit_category(
    ledger: Ledger, data: Mapping[str, Any], *, category_id: Optional[str] = None
) -> Optional[Category]:
    form = validate_form(CategoryForm, data)
    if category_id is None:
        return ledger.add_category(**form.model_dump())
    existing = ledger.find_category(category_id)
    if existing is None:
        return None
    return ledger.update_category(existing.model_copy(update=form.model_dump()))


__all__ = [
    "AccountForm",
    "CategoryForm",
    "TransactionForm",
    "check_funds",
    "submit_account",
    "submit_category",
    "submit_transaction",
    "validate_form",
]

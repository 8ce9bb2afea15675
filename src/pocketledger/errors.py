"""Exception taxonomy for ledger operations.

Structural and referential failures (deleting a referenced account, a failed
storage write, a rejected import) are reported as boolean return values by the
operations themselves. The exceptions below cover broken preconditions the
caller must not silently ignore.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError


class LedgerError(Exception):
    """Base class for all ledger exceptions."""


class ValidationError(LedgerError):
    """User input failed validation before any mutation took place."""

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        first = next((msgs[0] for msgs in errors.values() if msgs), "Invalid input")
        super().__init__(first)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """Group pydantic error messages by top-level field name."""

        structured: dict[str, list[str]] = {}
        for error in exc.errors(include_url=False):
            loc = error.get("loc", ())
            key = str(loc[0]) if loc else "__root__"
            message = error.get("msg", "Invalid value")
            # Messages raised from our own validators arrive as "Value error, <text>".
            structured.setdefault(key, []).append(message.removeprefix("Value error, "))
        return cls(structured)


class AccountNotFoundError(LedgerError):
    """A transaction referenced an account that does not exist."""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__("Selected account not found")


class InsufficientBalanceError(LedgerError):
    """An expense would require more than the account's current balance."""

    def __init__(self, *, account_id: str, account_name: str, balance: float, amount: float):
        self.account_id = account_id
        self.account_name = account_name
        self.balance = balance
        self.amount = amount
        super().__init__(f"Insufficient balance in {account_name}")


class ImportFormatError(LedgerError):
    """An import document was malformed or incomplete."""


__all__ = [
    "AccountNotFoundError",
    "ImportFormatError",
    "InsufficientBalanceError",
    "LedgerError",
    "ValidationError",
]

"""Shared domain error messages and error types."""

from datetime import datetime
from decimal import Decimal
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist (or belongs to another user)."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class InsufficientFundsError(DomainError):
    """An expense or withdrawal exceeds the available amount."""

    def __init__(self, balance: Decimal, required: Decimal):
        super().__init__(insufficient_funds(balance, required))
        self.balance = balance
        self.required = required


class CategoryBlockedError(DomainError):
    """Spending in a category is blocked because its limit was exceeded."""

    def __init__(self, category_id: int, blocked_until: Optional[datetime]):
        super().__init__(category_blocked(category_id, blocked_until))
        self.category_id = category_id
        self.blocked_until = blocked_until


class StoreUnavailableError(RuntimeError):
    """The ledger store could not be reached.

    Not a DomainError: the operation may succeed if retried.
    """


def insufficient_funds(balance: Decimal, required: Decimal) -> str:
    """Return message for an expense larger than the balance."""
    return f"Insufficient funds: balance {balance:.2f}, required {required:.2f}"


def category_blocked(category_id: int, blocked_until: Optional[datetime]) -> str:
    """Return message for a blocked category."""
    if blocked_until is None:
        return f"Category {category_id} is blocked"
    return f"Category {category_id} is blocked until {blocked_until:%Y-%m-%d %H:%M}"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def goal_not_found(goal_id: int) -> str:
    """Return message for missing goal."""
    return f"Goal {goal_id} not found"


def debt_not_found(debt_id: int) -> str:
    """Return message for missing debt."""
    return f"Debt {debt_id} not found"


def limit_not_found(limit_id: int) -> str:
    """Return message for missing limit."""
    return f"Limit {limit_id} not found"


def regular_payment_not_found(payment_id: int) -> str:
    """Return message for missing regular payment."""
    return f"Regular payment {payment_id} not found"


def no_active_goal() -> str:
    """Return message when a deposit has no goal to go to."""
    return "No active goal"


def amount_must_be_positive(amount: Decimal) -> str:
    """Return message for a non-positive amount."""
    return f"Amount must be positive, got {amount}"

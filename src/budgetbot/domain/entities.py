"""Domain model entities for budgetbot.

These are pure data classes representing business concepts, independent of
database schema. Services never mutate them; changes go through the store
and a fresh entity is read back.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class Direction(str, Enum):
    """Income or expense classification of a transaction or category."""

    INCOME = "income"
    EXPENSE = "expense"


class Priority(int, Enum):
    """Display priority of a category (lower sorts first)."""

    REQUIRED = 1
    PREFERRED = 2
    OPTIONAL = 3


class DebtType(str, Enum):
    """Which side of a debt the user is on."""

    I_OWE = "i_owe"
    THEY_OWE = "they_owe"


class PaymentFrequency(str, Enum):
    """Recurrence of a regular payment."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# Highest first: AddSpending reports the highest newly reached level.
WARNING_LEVELS = (100, 80, 50)


@dataclass(frozen=True)
class User:
    """Chat user; the id is the transport's user id."""

    id: int
    first_name: Optional[str]
    username: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Account:
    """The single money account of a user."""

    id: int
    user_id: int
    name: str
    balance: Decimal
    currency: str
    is_deleted: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Category:
    """User-scoped category; direction None means usable for both."""

    id: int
    user_id: int
    name: str
    icon: Optional[str]
    direction: Optional[Direction]
    priority: Priority
    is_active: bool
    created_at: datetime

    @property
    def label(self) -> str:
        return f"{self.icon} {self.name}" if self.icon else self.name


@dataclass(frozen=True)
class Transaction:
    """Immutable record of one ledger movement."""

    id: int
    account_id: int
    category_id: int
    amount: Decimal
    direction: Direction
    description: Optional[str]
    is_impulsive: bool
    is_error: bool
    is_deleted: bool
    date: datetime
    created_at: datetime


@dataclass(frozen=True)
class Limit:
    """Monthly spending ceiling for one category."""

    id: int
    user_id: int
    category_id: int
    amount: Decimal
    spent_amount: Decimal
    period_start: datetime
    is_blocked: bool
    blocked_until: Optional[datetime]
    last_warning_level: int
    created_at: datetime

    @property
    def percent(self) -> Decimal:
        if self.amount <= 0:
            return Decimal(0)
        return self.spent_amount / self.amount * 100


@dataclass(frozen=True)
class Debt:
    """Money owed by or to the user."""

    id: int
    user_id: int
    person_name: str
    amount: Decimal
    remaining_amount: Decimal
    debt_type: DebtType
    description: Optional[str]
    taken_date: datetime
    due_date: Optional[datetime]
    is_paid: bool
    paid_at: Optional[datetime]
    is_deleted: bool
    created_at: datetime


@dataclass(frozen=True)
class DebtPayment:
    """One repayment applied to a debt."""

    id: int
    debt_id: int
    amount: Decimal
    paid_at: datetime
    transaction_id: Optional[int]


@dataclass(frozen=True)
class Goal:
    """Savings target."""

    id: int
    user_id: int
    name: str
    target_amount: Decimal
    current_amount: Decimal
    deadline: Optional[datetime]
    priority: int
    is_active: bool
    is_completed: bool
    completed_at: Optional[datetime]
    is_deleted: bool
    created_at: datetime

    @property
    def remaining(self) -> Decimal:
        return max(self.target_amount - self.current_amount, Decimal(0))

    @property
    def percent(self) -> Decimal:
        if self.target_amount <= 0:
            return Decimal(0)
        return self.current_amount / self.target_amount * 100


@dataclass(frozen=True)
class RegularPayment:
    """Recurring obligation."""

    id: int
    user_id: int
    category_id: Optional[int]
    name: str
    amount: Decimal
    frequency: PaymentFrequency
    day_of_month: Optional[int]
    reminder_days_before: int
    is_paused: bool
    last_paid_date: Optional[datetime]
    next_due_date: Optional[datetime]
    is_deleted: bool
    created_at: datetime


@dataclass(frozen=True)
class RegularPaymentHistory:
    """One payment made against a regular payment."""

    id: int
    regular_payment_id: int
    amount: Decimal
    paid_at: datetime
    transaction_id: Optional[int]


@dataclass(frozen=True)
class SpendingResult:
    """Outcome of adding spending to a category limit.

    crossed_level is 0 when no new warning level was reached.
    """

    limit: Optional[Limit]
    crossed_level: int


@dataclass(frozen=True)
class TransactionResult:
    """Outcome of recording a transaction through the ledger."""

    transaction: Transaction
    account: Account
    category: Category
    spending: SpendingResult


@dataclass(frozen=True)
class CategoryTotal:
    """Sum of expenses for one category."""

    category: Category
    total: Decimal


@dataclass(frozen=True)
class DebtSummary:
    """Totals of unpaid debts by side."""

    they_owe: Decimal
    they_owe_count: int
    i_owe: Decimal
    i_owe_count: int


@dataclass(frozen=True)
class GoalDeposit:
    """Outcome of moving money from the balance into a goal."""

    goal: Goal
    deposited: Decimal
    excess: Decimal
    balance: Decimal


@dataclass(frozen=True)
class DebtRepayment:
    """Outcome of paying (part of) a debt."""

    debt: Debt
    payment: DebtPayment
    applied: Decimal
    balance: Decimal


@dataclass(frozen=True)
class ReportRow:
    """One row of the transaction export projection."""

    date: date
    direction: Direction
    category: str
    amount: Decimal
    description: Optional[str]
    is_impulsive: bool


@dataclass(frozen=True)
class RegularPaymentSummary:
    """Monthly regular payments split into paid and pending this month."""

    total: Decimal
    count: int
    paid: Decimal
    paid_count: int
    pending: Decimal
    pending_count: int


@dataclass(frozen=True)
class BalanceOverview:
    """Everything the balance screen shows for a user."""

    balance: Decimal
    currency: str
    month_income: Decimal
    month_expense: Decimal
    active_goal: Optional[Goal]
    debts: DebtSummary
    regular: RegularPaymentSummary

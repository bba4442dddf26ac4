"""Wizard steps.

Each step is a frozen dataclass carrying exactly the fields collected so far
by its wizard. A session holds one step; handlers return the next one.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from budgetbot.domain.entities import DebtType, Direction, PaymentFrequency


@dataclass(frozen=True)
class Step:
    """Base class of all wizard steps."""


# Transaction entry
@dataclass(frozen=True)
class TxnAmount(Step):
    """Waiting for "amount [description]".

    amount and description are set when the user came back from the
    category step, so the prompt can show what was entered.
    """

    direction: Direction
    is_impulsive: bool = False
    amount: Optional[Decimal] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class TxnCategory(Step):
    """Waiting for a category button or a new category name."""

    direction: Direction
    is_impulsive: bool
    amount: Decimal
    description: Optional[str]


@dataclass(frozen=True)
class TxnNewCategory(Step):
    """Waiting for the name of a category to create."""

    direction: Direction
    is_impulsive: bool
    amount: Decimal
    description: Optional[str]


@dataclass(frozen=True)
class TxnDescription(Step):
    """Waiting for a description (or skip) before recording."""

    direction: Direction
    is_impulsive: bool
    amount: Decimal
    category_id: int


@dataclass(frozen=True)
class TxnDeleteConfirm(Step):
    transaction_id: int


# Categories
@dataclass(frozen=True)
class CategoryRename(Step):
    category_id: int


# Goals
@dataclass(frozen=True)
class GoalName(Step):
    pass


@dataclass(frozen=True)
class GoalTarget(Step):
    name: str


@dataclass(frozen=True)
class GoalDeadline(Step):
    name: str
    target: Decimal


@dataclass(frozen=True)
class GoalDepositAmount(Step):
    """Waiting for an amount to move into a goal (the active one if goal_id is None)."""

    goal_id: Optional[int] = None


@dataclass(frozen=True)
class GoalWithdrawAmount(Step):
    goal_id: int


@dataclass(frozen=True)
class GoalSelect(Step):
    """Choosing which goal becomes active."""


@dataclass(frozen=True)
class GoalEditName(Step):
    goal_id: int


@dataclass(frozen=True)
class GoalEditTarget(Step):
    goal_id: int


@dataclass(frozen=True)
class GoalEditDeadline(Step):
    goal_id: int


@dataclass(frozen=True)
class GoalDeleteConfirm(Step):
    """Deleting a goal; its savings go back to the balance."""

    goal_id: int


# Debts
@dataclass(frozen=True)
class DebtTypeChoice(Step):
    pass


@dataclass(frozen=True)
class DebtName(Step):
    debt_type: DebtType


@dataclass(frozen=True)
class DebtAmount(Step):
    debt_type: DebtType
    person_name: str


@dataclass(frozen=True)
class DebtDeadline(Step):
    debt_type: DebtType
    person_name: str
    amount: Decimal


@dataclass(frozen=True)
class DebtDescription(Step):
    debt_type: DebtType
    person_name: str
    amount: Decimal
    due_date: Optional[datetime]


@dataclass(frozen=True)
class DebtAddToBalance(Step):
    """Asked only for money the user borrowed."""

    debt_type: DebtType
    person_name: str
    amount: Decimal
    due_date: Optional[datetime]
    description: Optional[str]


@dataclass(frozen=True)
class DebtPaymentAmount(Step):
    debt_id: int


@dataclass(frozen=True)
class DebtEditName(Step):
    debt_id: int


@dataclass(frozen=True)
class DebtEditDeadline(Step):
    debt_id: int


@dataclass(frozen=True)
class DebtEditNote(Step):
    debt_id: int


@dataclass(frozen=True)
class DebtDeleteConfirm(Step):
    debt_id: int


# Regular payments
@dataclass(frozen=True)
class RegularName(Step):
    pass


@dataclass(frozen=True)
class RegularAmount(Step):
    name: str


@dataclass(frozen=True)
class RegularFrequency(Step):
    name: str
    amount: Decimal


@dataclass(frozen=True)
class RegularDay(Step):
    """Day of month for monthly payments, first due date otherwise."""

    name: str
    amount: Decimal
    frequency: PaymentFrequency


@dataclass(frozen=True)
class RegularPayConfirm(Step):
    payment_id: int


@dataclass(frozen=True)
class RegularEditDay(Step):
    payment_id: int


@dataclass(frozen=True)
class RegularEditCategory(Step):
    payment_id: int


@dataclass(frozen=True)
class RegularDeleteConfirm(Step):
    payment_id: int


# Limits
@dataclass(frozen=True)
class LimitCategory(Step):
    pass


@dataclass(frozen=True)
class LimitAmount(Step):
    category_id: int


# Help
@dataclass(frozen=True)
class HelpFeedback(Step):
    """Waiting for a bug report or an idea; kind is "bug" or "idea"."""

    kind: str

"""Abstract ledger store interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Optional, Any

# Import entities directly to avoid circular import through domain/__init__.py
from budgetbot.domain.entities import (
    User,
    Account,
    Category,
    Transaction,
    Limit,
    Debt,
    DebtPayment,
    Goal,
    RegularPayment,
    RegularPaymentHistory,
    Direction,
    DebtType,
    PaymentFrequency,
)


class Database(ABC):
    """Abstract ledger store for budgetbot.

    Every write commits immediately unless it runs inside ``unit_of_work()``,
    in which case it is committed (or rolled back) when the outermost unit
    exits.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the current thread's session."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager["Database"]:
        """Run the enclosed writes atomically. Nested units join the outer one."""
        pass

    # User operations
    @abstractmethod
    def ensure_user(
        self, user_id: int, first_name: Optional[str] = None, username: Optional[str] = None
    ) -> User:
        """Create the user if missing, refreshing name fields when given."""
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def list_user_ids(self) -> list[int]:
        """List all known user IDs in ascending order."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, user_id: int, name: str, currency: str) -> int:
        """Create an account with zero balance. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_for_user(self, user_id: int) -> Optional[Account]:
        """Get the user's non-deleted account, if any."""
        pass

    @abstractmethod
    def adjust_account_balance(self, account_id: int, delta: Decimal) -> Decimal:
        """Atomically add delta to the balance. Returns the new balance."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        user_id: int,
        name: str,
        direction: Optional[Direction] = None,
        icon: Optional[str] = None,
        priority: int = 2,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, user_id: int, name: str) -> Optional[Category]:
        """Get a user's category by exact name (case-insensitive)."""
        pass

    @abstractmethod
    def list_categories(
        self, user_id: int, direction: Optional[Direction] = None, include_inactive: bool = False
    ) -> list[Category]:
        """List categories ordered by priority then name.

        When direction is given, categories usable for both directions are
        included.
        """
        pass

    @abstractmethod
    def update_category(self, category_id: int, **changes: Any) -> None:
        """Update category columns."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        account_id: int,
        category_id: int,
        amount: Decimal,
        direction: Direction,
        date: datetime,
        description: Optional[str] = None,
        is_impulsive: bool = False,
    ) -> int:
        """Create a transaction row. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def mark_transaction_error(self, transaction_id: int) -> bool:
        """Set is_error if not already set. Returns True if this call set it."""
        pass

    @abstractmethod
    def soft_delete_transaction(self, transaction_id: int) -> None:
        """Mark a transaction deleted."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        direction: Optional[Direction] = None,
        include_errors: bool = False,
        limit: Optional[int] = None,
        newest_first: bool = True,
    ) -> list[Transaction]:
        """List non-deleted transactions with optional filters."""
        pass

    @abstractmethod
    def sum_by_category(
        self, account_id: int, direction: Direction, since: Optional[datetime] = None
    ) -> list[tuple[int, Decimal]]:
        """Sum live transactions of a direction per category."""
        pass

    @abstractmethod
    def sum_by_direction(
        self, account_id: int, since: Optional[datetime] = None
    ) -> dict[Direction, Decimal]:
        """Sum live transactions per direction."""
        pass

    @abstractmethod
    def recent_category_ids(
        self, account_id: int, direction: Optional[Direction] = None, limit: int = 6
    ) -> list[int]:
        """Distinct category IDs ordered by most recent use."""
        pass

    # Limit operations
    @abstractmethod
    def create_limit(
        self, user_id: int, category_id: int, amount: Decimal, period_start: datetime
    ) -> int:
        """Create a limit. Returns limit ID."""
        pass

    @abstractmethod
    def get_limit(self, limit_id: int) -> Optional[Limit]:
        """Get limit by ID."""
        pass

    @abstractmethod
    def get_limit_for_category(self, user_id: int, category_id: int) -> Optional[Limit]:
        """Get the user's limit for a category."""
        pass

    @abstractmethod
    def list_limits(self, user_id: int) -> list[Limit]:
        """List a user's limits."""
        pass

    @abstractmethod
    def update_limit(self, limit_id: int, **changes: Any) -> None:
        """Update limit columns."""
        pass

    @abstractmethod
    def delete_limit(self, limit_id: int) -> None:
        """Delete a limit."""
        pass

    @abstractmethod
    def increment_limit_spent(self, limit_id: int, amount: Decimal) -> Limit:
        """Atomically add amount to spent_amount. Returns the updated limit."""
        pass

    @abstractmethod
    def raise_limit_warning_level(
        self, limit_id: int, level: int, blocked_until: Optional[datetime] = None
    ) -> bool:
        """Set last_warning_level to level only if it is currently lower.

        When blocked_until is given the limit is blocked in the same update.
        Returns True if the update applied.
        """
        pass

    # Debt operations
    @abstractmethod
    def create_debt(
        self,
        user_id: int,
        person_name: str,
        amount: Decimal,
        debt_type: DebtType,
        taken_date: datetime,
        due_date: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> int:
        """Create a debt. Returns debt ID."""
        pass

    @abstractmethod
    def get_debt(self, debt_id: int) -> Optional[Debt]:
        """Get debt by ID."""
        pass

    @abstractmethod
    def list_debts(self, user_id: int, include_paid: bool = True) -> list[Debt]:
        """List a user's non-deleted debts, unpaid first, earliest due first."""
        pass

    @abstractmethod
    def update_debt(self, debt_id: int, **changes: Any) -> None:
        """Update debt columns."""
        pass

    @abstractmethod
    def soft_delete_debt(self, debt_id: int) -> None:
        """Mark a debt deleted."""
        pass

    @abstractmethod
    def create_debt_payment(
        self, debt_id: int, amount: Decimal, paid_at: datetime, transaction_id: Optional[int] = None
    ) -> int:
        """Record a repayment. Returns payment ID."""
        pass

    @abstractmethod
    def get_debt_payment(self, payment_id: int) -> Optional[DebtPayment]:
        """Get debt payment by ID."""
        pass

    @abstractmethod
    def list_debt_payments(self, debt_id: int) -> list[DebtPayment]:
        """List repayments of a debt, oldest first."""
        pass

    # Goal operations
    @abstractmethod
    def create_goal(
        self,
        user_id: int,
        name: str,
        target_amount: Decimal,
        deadline: Optional[datetime] = None,
        is_active: bool = False,
    ) -> int:
        """Create a goal. Returns goal ID."""
        pass

    @abstractmethod
    def get_goal(self, goal_id: int) -> Optional[Goal]:
        """Get goal by ID."""
        pass

    @abstractmethod
    def list_goals(self, user_id: int, include_completed: bool = True) -> list[Goal]:
        """List a user's non-deleted goals, active first."""
        pass

    @abstractmethod
    def update_goal(self, goal_id: int, **changes: Any) -> None:
        """Update goal columns."""
        pass

    @abstractmethod
    def deactivate_goals(self, user_id: int) -> int:
        """Clear is_active on all of a user's goals. Returns rows changed."""
        pass

    @abstractmethod
    def soft_delete_goal(self, goal_id: int) -> None:
        """Mark a goal deleted."""
        pass

    # Regular payment operations
    @abstractmethod
    def create_regular_payment(
        self,
        user_id: int,
        name: str,
        amount: Decimal,
        frequency: PaymentFrequency,
        next_due_date: datetime,
        day_of_month: Optional[int] = None,
        category_id: Optional[int] = None,
        reminder_days_before: int = 3,
    ) -> int:
        """Create a regular payment. Returns payment ID."""
        pass

    @abstractmethod
    def get_regular_payment(self, payment_id: int) -> Optional[RegularPayment]:
        """Get regular payment by ID."""
        pass

    @abstractmethod
    def list_regular_payments(self, user_id: int, include_paused: bool = True) -> list[RegularPayment]:
        """List a user's non-deleted regular payments, soonest due first."""
        pass

    @abstractmethod
    def update_regular_payment(self, payment_id: int, **changes: Any) -> None:
        """Update regular payment columns."""
        pass

    @abstractmethod
    def soft_delete_regular_payment(self, payment_id: int) -> None:
        """Mark a regular payment deleted."""
        pass

    @abstractmethod
    def create_regular_payment_history(
        self,
        payment_id: int,
        amount: Decimal,
        paid_at: datetime,
        transaction_id: Optional[int] = None,
    ) -> int:
        """Record a payment against a regular payment. Returns history ID."""
        pass

    @abstractmethod
    def list_regular_payment_history(self, payment_id: int) -> list[RegularPaymentHistory]:
        """List payments made against a regular payment, newest first."""
        pass

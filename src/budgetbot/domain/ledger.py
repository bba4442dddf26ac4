"""Ledger facade.

Bundles the domain services and implements the operations that span more
than one of them. Compound operations run in a single unit of work, so a
failure in any step (for example insufficient funds) leaves nothing behind.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

import structlog

from budgetbot.database.base import Database
from budgetbot.domain.account import AccountService
from budgetbot.domain.category import CategoryService
from budgetbot.domain.debt import DebtService
from budgetbot.domain.entities import (
    Account,
    BalanceOverview,
    Debt,
    DebtRepayment,
    DebtType,
    Direction,
    Goal,
    GoalDeposit,
    RegularPayment,
    SpendingResult,
    Transaction,
    TransactionResult,
)
from budgetbot.domain.errors import (
    CategoryBlockedError,
    NotFoundError,
    ValidationError,
    amount_must_be_positive,
    no_active_goal,
)
from budgetbot.domain.goal import GoalService
from budgetbot.domain.limit import LimitService
from budgetbot.domain.recurring import RegularPaymentService
from budgetbot.domain.report import ReportService
from budgetbot.domain.transaction import TransactionService
from budgetbot.domain.user import UserService
from budgetbot.utils.date_parser import month_start, utcnow

logger = structlog.get_logger(__name__)

# System categories behind linked transactions: (name, icon, direction)
SAVINGS_CATEGORY = ("Savings", "🎯", Direction.EXPENSE)
FROM_SAVINGS_CATEGORY = ("From savings", "🎯", Direction.INCOME)
DEBT_REPAYMENT_CATEGORY = ("Debt repayment", "💸", Direction.EXPENSE)
DEBT_RETURN_CATEGORY = ("Debt return", "🤝", Direction.INCOME)
BORROWED_CATEGORY = ("Borrowed", "📥", Direction.INCOME)
REGULAR_CATEGORY = ("Regular payments", "🔁", Direction.EXPENSE)


class Ledger:
    """Entry point to the ledger core."""

    def __init__(
        self,
        db: Database,
        currency: str = "TJS",
        block_hours: int = 24,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the ledger.

        Args:
            db: Database instance
            currency: Currency of lazily created accounts
            block_hours: Block duration after a limit is exceeded
            clock: Returns the current naive UTC time
        """
        self.db = db
        self.clock = clock
        self.users = UserService(db)
        self.accounts = AccountService(db, currency=currency)
        self.categories = CategoryService(db)
        self.transactions = TransactionService(db, self.accounts)
        self.limits = LimitService(db, block_hours=block_hours)
        self.debts = DebtService(db)
        self.goals = GoalService(db)
        self.recurring = RegularPaymentService(db)
        self.reports = ReportService(db, self.accounts)

    def _system_category(self, user_id: int, spec: tuple[str, str, Direction]) -> int:
        name, icon, direction = spec
        return self.categories.ensure_category(user_id, name, direction, icon=icon).id

    # Transactions
    def check_category_blocked(self, user_id: int, category_id: int) -> None:
        """Reject spending in a category whose limit is blocked right now.

        Limits are rolled into the current month first, so a block carried
        over from the previous month never rejects the new month's spending.

        Raises:
            CategoryBlockedError: If the category is blocked
        """
        now = self.clock()
        self.limits.reset_monthly_limits(user_id, now=now)
        if self.limits.is_category_blocked(user_id, category_id, now=now):
            limit = self.limits.get_limit_for_category(user_id, category_id)
            logger.info("transaction.blocked", user_id=user_id, category_id=category_id)
            raise CategoryBlockedError(category_id, limit.blocked_until if limit else None)

    def record_transaction(
        self,
        user_id: int,
        category_id: int,
        amount: Decimal,
        direction: Direction,
        description: Optional[str] = None,
        is_impulsive: bool = False,
    ) -> TransactionResult:
        """Record an income or expense entered by the user.

        Rolls the user's limits into the current month, rejects expenses in a
        blocked category before touching the balance, processes the
        transaction and then adds expenses to the category limit.

        Raises:
            CategoryBlockedError: If the expense category is blocked
            InsufficientFundsError: If an expense exceeds the balance
            NotFoundError: If the category is not the user's
            ValidationError: If amount is not positive
        """
        now = self.clock()
        category = self.categories.get_category(user_id, category_id)
        if direction == Direction.EXPENSE:
            self.check_category_blocked(user_id, category_id)
        else:
            self.limits.reset_monthly_limits(user_id, now=now)

        with self.db.unit_of_work():
            transaction, account = self.transactions.process_transaction(
                user_id,
                category_id,
                amount,
                direction,
                description=description,
                is_impulsive=is_impulsive,
                date=now,
            )
            if direction == Direction.EXPENSE:
                spending = self.limits.add_spending(user_id, category_id, amount, now=now)
            else:
                spending = SpendingResult(limit=None, crossed_level=0)
        return TransactionResult(
            transaction=transaction, account=account, category=category, spending=spending
        )

    def cancel_transaction(self, user_id: int, transaction_id: int) -> bool:
        return self.transactions.cancel_transaction(user_id, transaction_id)

    # Debts
    def create_debt(
        self,
        user_id: int,
        person_name: str,
        amount: Decimal,
        debt_type: DebtType,
        due_date: Optional[datetime] = None,
        description: Optional[str] = None,
        add_to_balance: bool = False,
    ) -> Debt:
        """Create a debt; borrowed money can be credited to the balance at once."""
        now = self.clock()
        with self.db.unit_of_work():
            debt = self.debts.create_debt(
                user_id, person_name, amount, debt_type,
                due_date=due_date, description=description, now=now,
            )
            if add_to_balance and debt_type == DebtType.I_OWE:
                self.transactions.process_transaction(
                    user_id,
                    self._system_category(user_id, BORROWED_CATEGORY),
                    amount,
                    Direction.INCOME,
                    description=f"← {debt.person_name}",
                    date=now,
                )
        return debt

    def pay_debt(self, user_id: int, debt_id: int, amount: Decimal) -> DebtRepayment:
        """Repay (part of) a debt and move the money through the balance.

        The amount is clamped to what remains. Repaying a debt the user owes
        is an expense; getting money back is an income.

        Raises:
            NotFoundError: If the debt is not the user's
            ValidationError: If the debt is already paid or amount is not positive
            InsufficientFundsError: If the user cannot cover the repayment
        """
        if amount <= 0:
            raise ValidationError(amount_must_be_positive(amount))
        now = self.clock()
        debt = self.debts.get_debt(user_id, debt_id)
        if debt.is_paid:
            raise ValidationError(f"Debt {debt_id} is already paid")

        applied = min(amount, debt.remaining_amount)
        if debt.debt_type == DebtType.I_OWE:
            category_spec, description = DEBT_REPAYMENT_CATEGORY, f"→ {debt.person_name}"
        else:
            category_spec, description = DEBT_RETURN_CATEGORY, f"← {debt.person_name}"

        with self.db.unit_of_work():
            transaction, account = self.transactions.process_transaction(
                user_id,
                self._system_category(user_id, category_spec),
                applied,
                category_spec[2],
                description=description,
                date=now,
            )
            debt, payment = self.debts.record_payment(
                user_id, debt_id, applied, transaction_id=transaction.id, now=now
            )
        return DebtRepayment(debt=debt, payment=payment, applied=applied, balance=account.balance)

    # Goals
    def deposit_to_goal(
        self, user_id: int, amount: Decimal, goal_id: Optional[int] = None
    ) -> GoalDeposit:
        """Move money from the balance into a goal (the active one by default).

        Only what the goal still needs is moved; the rest is reported as
        excess and stays on the balance.

        Raises:
            NotFoundError: If there is no such goal or no active goal
            ValidationError: If the goal is completed or amount is not positive
            InsufficientFundsError: If the balance cannot cover the deposit
        """
        if amount <= 0:
            raise ValidationError(amount_must_be_positive(amount))
        if goal_id is None:
            goal = self.goals.get_active_goal(user_id)
            if goal is None:
                raise NotFoundError(no_active_goal())
        else:
            goal = self.goals.get_goal(user_id, goal_id)
        if goal.is_completed:
            raise ValidationError(f"Goal {goal.id} is already completed")

        deposited = min(amount, goal.remaining)
        now = self.clock()
        with self.db.unit_of_work():
            _, account = self.transactions.process_transaction(
                user_id,
                self._system_category(user_id, SAVINGS_CATEGORY),
                deposited,
                Direction.EXPENSE,
                description=f"→ {goal.name}",
                date=now,
            )
            goal = self.goals.add_funds(user_id, goal.id, deposited, now=now)
        return GoalDeposit(
            goal=goal, deposited=deposited, excess=amount - deposited, balance=account.balance
        )

    def withdraw_from_goal(
        self, user_id: int, goal_id: int, amount: Decimal
    ) -> tuple[Goal, Account]:
        """Move money from a goal back to the balance.

        Raises:
            InsufficientFundsError: If the goal holds less than amount
        """
        now = self.clock()
        with self.db.unit_of_work():
            goal = self.goals.withdraw(user_id, goal_id, amount)
            _, account = self.transactions.process_transaction(
                user_id,
                self._system_category(user_id, FROM_SAVINGS_CATEGORY),
                amount,
                Direction.INCOME,
                description=f"← {goal.name}",
                date=now,
            )
        return goal, account

    def delete_goal(self, user_id: int, goal_id: int) -> Decimal:
        """Delete a goal, returning the money saved in it to the balance.

        Returns:
            Amount moved back to the balance
        """
        goal = self.goals.get_goal(user_id, goal_id)
        returned = goal.current_amount
        with self.db.unit_of_work():
            if returned > 0:
                self.withdraw_from_goal(user_id, goal.id, returned)
            self.goals.delete_goal(user_id, goal.id)
        logger.info("goal.deleted", user_id=user_id, goal_id=goal.id, returned=str(returned))
        return returned

    # Regular payments
    def pay_regular(self, user_id: int, payment_id: int) -> tuple[RegularPayment, Transaction, Account]:
        """Pay a regular payment from the balance and schedule the next one.

        Raises:
            NotFoundError: If the payment is not the user's
            InsufficientFundsError: If the balance cannot cover it
        """
        now = self.clock()
        payment = self.recurring.get_regular_payment(user_id, payment_id)
        category_id = payment.category_id or self._system_category(user_id, REGULAR_CATEGORY)
        with self.db.unit_of_work():
            transaction, account = self.transactions.process_transaction(
                user_id,
                category_id,
                payment.amount,
                Direction.EXPENSE,
                description=payment.name,
                date=now,
            )
            payment, _ = self.recurring.mark_paid(
                user_id, payment.id, transaction_id=transaction.id, now=now
            )
        logger.info("regular_payment.paid", user_id=user_id, payment_id=payment.id)
        return payment, transaction, account

    # Reads and upkeep
    def overview(self, user_id: int) -> BalanceOverview:
        """Balance, this month's totals, the active goal and debt/regular summaries."""
        now = self.clock()
        account = self.accounts.get_account(user_id)
        totals = self.transactions.get_totals(user_id, since=month_start(now))
        return BalanceOverview(
            balance=account.balance if account else Decimal("0.00"),
            currency=account.currency if account else self.accounts.currency,
            month_income=totals[Direction.INCOME],
            month_expense=totals[Direction.EXPENSE],
            active_goal=self.goals.get_active_goal(user_id),
            debts=self.debts.summary(user_id),
            regular=self.recurring.monthly_summary(user_id, now=now),
        )

    def run_maintenance(self, user_id: int, now: Optional[datetime] = None) -> None:
        """Roll limits into the current month and lift elapsed blocks."""
        now = now or self.clock()
        self.limits.reset_monthly_limits(user_id, now=now)
        self.limits.unblock_expired(user_id, now=now)

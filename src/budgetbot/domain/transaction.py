"""Transaction domain service.

ProcessTransaction is the one place where a balance change and a row insert
must happen together; it always runs inside a unit of work.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog

from budgetbot.database.base import Database
from budgetbot.domain.account import AccountService
from budgetbot.domain.entities import (
    Account,
    Category,
    CategoryTotal,
    Direction,
    Transaction as TransactionEntity,
)
from budgetbot.domain.errors import (
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
    amount_must_be_positive,
    category_not_found,
    transaction_not_found,
)
from budgetbot.utils.date_parser import utcnow

logger = structlog.get_logger(__name__)

RECENT_CATEGORY_COUNT = 6


class TransactionService:
    """Service for recording and reversing ledger movements."""

    def __init__(self, db: Database, accounts: AccountService):
        """Initialize transaction service.

        Args:
            db: Database instance
            accounts: Account service used to find or create the user's account
        """
        self.db = db
        self.accounts = accounts

    def _get_own_category(self, user_id: int, category_id: int) -> Category:
        category = self.db.get_category(category_id)
        if category is None or category.user_id != user_id:
            raise NotFoundError(category_not_found(category_id))
        return category

    def process_transaction(
        self,
        user_id: int,
        category_id: int,
        amount: Decimal,
        direction: Direction,
        description: Optional[str] = None,
        is_impulsive: bool = False,
        date: Optional[datetime] = None,
    ) -> tuple[TransactionEntity, Account]:
        """Record a transaction and apply it to the balance atomically.

        Args:
            user_id: User ID
            category_id: Category ID (must belong to the user)
            amount: Positive amount
            direction: Income or expense
            description: Optional description
            is_impulsive: Emotional-spending marker
            date: Transaction timestamp, defaults to now

        Returns:
            Tuple of (created transaction, account after the change)

        Raises:
            ValidationError: If amount is not positive
            NotFoundError: If the category is not the user's
            InsufficientFundsError: If an expense exceeds the balance
        """
        if amount <= 0:
            raise ValidationError(amount_must_be_positive(amount))
        self._get_own_category(user_id, category_id)

        with self.db.unit_of_work():
            account = self.accounts.get_or_create_account(user_id)
            if direction == Direction.EXPENSE and account.balance < amount:
                raise InsufficientFundsError(account.balance, amount)

            transaction_id = self.db.create_transaction(
                account_id=account.id,
                category_id=category_id,
                amount=amount,
                direction=direction,
                date=date or utcnow(),
                description=description,
                is_impulsive=is_impulsive,
            )
            delta = amount if direction == Direction.INCOME else -amount
            self.db.adjust_account_balance(account.id, delta)

        transaction = self.db.get_transaction(transaction_id)
        account = self.db.get_account(account.id)
        logger.info(
            "transaction.processed",
            user_id=user_id,
            transaction_id=transaction_id,
            direction=direction.value,
            amount=str(amount),
            balance=str(account.balance),
        )
        return transaction, account

    def get_transaction(self, user_id: int, transaction_id: int) -> TransactionEntity:
        """Get one of the user's transactions.

        Raises:
            NotFoundError: If the transaction does not exist or is not the user's
        """
        transaction = self.db.get_transaction(transaction_id)
        account = self.accounts.get_account(user_id)
        if transaction is None or account is None or transaction.account_id != account.id:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def cancel_transaction(self, user_id: int, transaction_id: int) -> bool:
        """Mark a transaction as an error and reverse its balance effect.

        Args:
            user_id: User ID
            transaction_id: Transaction ID

        Returns:
            True if the transaction was reversed, False if it already had been

        Raises:
            NotFoundError: If the transaction is not the user's
        """
        transaction = self.get_transaction(user_id, transaction_id)
        with self.db.unit_of_work():
            if not self.db.mark_transaction_error(transaction.id):
                return False
            delta = -transaction.amount if transaction.direction == Direction.INCOME else transaction.amount
            self.db.adjust_account_balance(transaction.account_id, delta)

        logger.info("transaction.cancelled", user_id=user_id, transaction_id=transaction_id)
        return True

    def delete_transaction(self, user_id: int, transaction_id: int) -> None:
        """Soft-delete a transaction, reversing it first if still live."""
        with self.db.unit_of_work():
            self.cancel_transaction(user_id, transaction_id)
            self.db.soft_delete_transaction(transaction_id)

    def list_transactions(
        self,
        user_id: int,
        limit: Optional[int] = 10,
        direction: Optional[Direction] = None,
        since: Optional[datetime] = None,
    ) -> list[TransactionEntity]:
        """List live transactions, newest first."""
        account = self.accounts.get_account(user_id)
        if account is None:
            return []
        return self.db.list_transactions(account.id, start=since, direction=direction, limit=limit)

    def get_totals(self, user_id: int, since: Optional[datetime] = None) -> dict[Direction, Decimal]:
        """Income and expense sums over live transactions."""
        account = self.accounts.get_account(user_id)
        if account is None:
            return {direction: Decimal("0.00") for direction in Direction}
        return self.db.sum_by_direction(account.id, since=since)

    def get_top_expenses(self, user_id: int, since: datetime, count: int = 5) -> list[CategoryTotal]:
        """Largest expense categories since a moment.

        Sums live expense transactions per category and returns the top
        ``count`` by total descending; ties are broken by category id.
        """
        account = self.accounts.get_account(user_id)
        if account is None:
            return []

        sums = self.db.sum_by_category(account.id, Direction.EXPENSE, since=since)
        sums.sort(key=lambda item: (-item[1], item[0]))
        result = []
        for category_id, total in sums[:count]:
            category = self.db.get_category(category_id)
            if category is not None:
                result.append(CategoryTotal(category=category, total=total))
        return result

    def recent_category_ids(
        self, user_id: int, direction: Direction, limit: int = RECENT_CATEGORY_COUNT
    ) -> list[int]:
        """Distinct categories of a direction, most recently used first."""
        account = self.accounts.get_account(user_id)
        if account is None:
            return []
        return self.db.recent_category_ids(account.id, direction=direction, limit=limit)

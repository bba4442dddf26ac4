"""Limit domain service.

Warning levels are reported once per period: ``last_warning_level`` only
moves up through ``raise_limit_warning_level`` (a compare-and-set) and only
``reset_monthly_limits`` moves it back to zero.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

import structlog

from budgetbot.database.base import Database
from budgetbot.domain.entities import Limit as LimitEntity, SpendingResult, WARNING_LEVELS
from budgetbot.domain.errors import (
    NotFoundError,
    ValidationError,
    amount_must_be_positive,
    category_not_found,
    limit_not_found,
)
from budgetbot.utils.date_parser import month_start, utcnow

logger = structlog.get_logger(__name__)


def crossed_warning_level(spent: Decimal, amount: Decimal, last_level: int) -> int:
    """Highest warning level reached by spent/amount that is above last_level.

    Returns 0 when no new level was reached.
    """
    if amount <= 0:
        return 0
    percent = spent / amount * 100
    for level in WARNING_LEVELS:
        if percent >= level and level > last_level:
            return level
    return 0


class LimitService:
    """Service for monthly category limits."""

    def __init__(self, db: Database, block_hours: int = 24):
        """Initialize limit service.

        Args:
            db: Database instance
            block_hours: How long a category stays blocked once its limit is exceeded
        """
        self.db = db
        self.block_duration = timedelta(hours=block_hours)

    def set_limit(
        self, user_id: int, category_id: int, amount: Decimal, now: Optional[datetime] = None
    ) -> LimitEntity:
        """Create the limit for a category, or change its amount if one exists.

        Args:
            user_id: User ID
            category_id: Category to limit
            amount: Monthly ceiling
            now: Current time (for the period start)

        Returns:
            The created or updated limit

        Raises:
            ValidationError: If amount is not positive
            NotFoundError: If the category is not the user's
        """
        if amount <= 0:
            raise ValidationError(amount_must_be_positive(amount))
        category = self.db.get_category(category_id)
        if category is None or category.user_id != user_id:
            raise NotFoundError(category_not_found(category_id))

        existing = self.db.get_limit_for_category(user_id, category_id)
        if existing is not None:
            self.db.update_limit(existing.id, amount=amount)
            return self.db.get_limit(existing.id)

        limit_id = self.db.create_limit(user_id, category_id, amount, month_start(now or utcnow()))
        return self.db.get_limit(limit_id)

    def get_limit(self, user_id: int, limit_id: int) -> LimitEntity:
        limit = self.db.get_limit(limit_id)
        if limit is None or limit.user_id != user_id:
            raise NotFoundError(limit_not_found(limit_id))
        return limit

    def get_limit_for_category(self, user_id: int, category_id: int) -> Optional[LimitEntity]:
        return self.db.get_limit_for_category(user_id, category_id)

    def list_limits(self, user_id: int) -> list[LimitEntity]:
        return self.db.list_limits(user_id)

    def delete_limit(self, user_id: int, limit_id: int) -> None:
        self.get_limit(user_id, limit_id)
        self.db.delete_limit(limit_id)

    def is_category_blocked(
        self, user_id: int, category_id: int, now: Optional[datetime] = None
    ) -> bool:
        """True if the category's limit is blocked and the block has not elapsed."""
        limit = self.db.get_limit_for_category(user_id, category_id)
        if limit is None or not limit.is_blocked:
            return False
        if limit.blocked_until is not None and limit.blocked_until <= (now or utcnow()):
            return False
        return True

    def add_spending(
        self, user_id: int, category_id: int, amount: Decimal, now: Optional[datetime] = None
    ) -> SpendingResult:
        """Add an expense to the category's limit and report a newly crossed level.

        The spent counter is incremented atomically, and the warning level is
        raised with a compare-and-set, so two concurrent spends never report
        the same level twice.

        Args:
            user_id: User ID
            category_id: Category the expense was recorded in
            amount: Expense amount
            now: Current time (for the block expiry)

        Returns:
            SpendingResult with the updated limit (None if the category has no
            limit) and the crossed level (0 if none)
        """
        limit = self.db.get_limit_for_category(user_id, category_id)
        if limit is None:
            return SpendingResult(limit=None, crossed_level=0)

        limit = self.db.increment_limit_spent(limit.id, amount)
        level = crossed_warning_level(limit.spent_amount, limit.amount, limit.last_warning_level)
        if level == 0:
            return SpendingResult(limit=limit, crossed_level=0)

        blocked_until = (now or utcnow()) + self.block_duration if level == 100 else None
        if not self.db.raise_limit_warning_level(limit.id, level, blocked_until=blocked_until):
            # Another spend already reported this level
            return SpendingResult(limit=self.db.get_limit(limit.id), crossed_level=0)

        logger.info(
            "limit.warning",
            user_id=user_id,
            category_id=category_id,
            level=level,
            spent=str(limit.spent_amount),
            amount=str(limit.amount),
        )
        return SpendingResult(limit=self.db.get_limit(limit.id), crossed_level=level)

    def reset_monthly_limits(self, user_id: int, now: Optional[datetime] = None) -> int:
        """Start a new period for limits whose period began before this month.

        Idempotent within a month: limits already in the current period are
        left alone.

        Returns:
            Number of limits reset
        """
        current_start = month_start(now or utcnow())
        reset = 0
        with self.db.unit_of_work():
            for limit in self.db.list_limits(user_id):
                if limit.period_start >= current_start:
                    continue
                self.db.update_limit(
                    limit.id,
                    spent_amount=Decimal(0),
                    period_start=current_start,
                    is_blocked=False,
                    blocked_until=None,
                    last_warning_level=0,
                )
                reset += 1
        if reset:
            logger.info("limit.period_reset", user_id=user_id, count=reset)
        return reset

    def unblock_expired(self, user_id: int, now: Optional[datetime] = None) -> int:
        """Clear blocks whose block-until time has passed.

        Returns:
            Number of limits unblocked
        """
        now = now or utcnow()
        unblocked = 0
        for limit in self.db.list_limits(user_id):
            if limit.is_blocked and limit.blocked_until is not None and limit.blocked_until <= now:
                self.db.update_limit(limit.id, is_blocked=False, blocked_until=None)
                unblocked += 1
        return unblocked

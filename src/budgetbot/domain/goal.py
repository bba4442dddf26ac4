"""Goal domain service.

At most one non-completed goal per user is active. ``create_goal``,
``set_active`` and ``add_funds`` are the only places that change
``is_active``, and each keeps that invariant inside one unit of work.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog

from budgetbot.database.base import Database
from budgetbot.domain.entities import Goal as GoalEntity
from budgetbot.domain.errors import (
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
    amount_must_be_positive,
    goal_not_found,
)
from budgetbot.utils.date_parser import utcnow

logger = structlog.get_logger(__name__)


class GoalService:
    """Service for savings goals."""

    def __init__(self, db: Database):
        """Initialize goal service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_goal(self, user_id: int, goal_id: int) -> GoalEntity:
        """Get one of the user's goals.

        Raises:
            NotFoundError: If the goal does not exist, is deleted or is not the user's
        """
        goal = self.db.get_goal(goal_id)
        if goal is None or goal.user_id != user_id or goal.is_deleted:
            raise NotFoundError(goal_not_found(goal_id))
        return goal

    def list_goals(self, user_id: int, include_completed: bool = False) -> list[GoalEntity]:
        """Goals with the active one first, then oldest first."""
        return self.db.list_goals(user_id, include_completed=include_completed)

    def get_active_goal(self, user_id: int) -> Optional[GoalEntity]:
        for goal in self.db.list_goals(user_id, include_completed=False):
            if goal.is_active:
                return goal
        return None

    def create_goal(
        self,
        user_id: int,
        name: str,
        target_amount: Decimal,
        deadline: Optional[datetime] = None,
    ) -> GoalEntity:
        """Create a goal; it becomes active only if no other goal is.

        Args:
            user_id: User ID
            name: Goal name
            target_amount: Amount to save
            deadline: Optional deadline

        Returns:
            The created goal

        Raises:
            ValidationError: If the name is empty or the target is not positive
        """
        name = name.strip()
        if not name:
            raise ValidationError("Goal name cannot be empty")
        if target_amount <= 0:
            raise ValidationError(amount_must_be_positive(target_amount))

        self.db.ensure_user(user_id)
        with self.db.unit_of_work():
            is_active = self.get_active_goal(user_id) is None
            goal_id = self.db.create_goal(
                user_id, name, target_amount, deadline=deadline, is_active=is_active
            )
        logger.info("goal.created", user_id=user_id, goal_id=goal_id, is_active=is_active)
        return self.db.get_goal(goal_id)

    def add_funds(
        self, user_id: int, goal_id: int, amount: Decimal, now: Optional[datetime] = None
    ) -> GoalEntity:
        """Add to a goal's saved amount, completing it once the target is reached.

        Completion sets is_completed, clears is_active and stamps
        completed_at in the same update.

        Raises:
            ValidationError: If amount is not positive
            NotFoundError: If the goal is not the user's
        """
        if amount <= 0:
            raise ValidationError(amount_must_be_positive(amount))
        goal = self.get_goal(user_id, goal_id)

        current = goal.current_amount + amount
        if current >= goal.target_amount and not goal.is_completed:
            self.db.update_goal(
                goal.id,
                current_amount=current,
                is_completed=True,
                is_active=False,
                completed_at=now or utcnow(),
            )
            logger.info("goal.completed", user_id=user_id, goal_id=goal.id)
        else:
            self.db.update_goal(goal.id, current_amount=current)
        return self.db.get_goal(goal.id)

    def withdraw(self, user_id: int, goal_id: int, amount: Decimal) -> GoalEntity:
        """Take money back out of a goal.

        Raises:
            ValidationError: If amount is not positive
            InsufficientFundsError: If the goal holds less than amount
        """
        if amount <= 0:
            raise ValidationError(amount_must_be_positive(amount))
        goal = self.get_goal(user_id, goal_id)
        if goal.current_amount < amount:
            raise InsufficientFundsError(goal.current_amount, amount)
        self.db.update_goal(goal.id, current_amount=goal.current_amount - amount)
        return self.db.get_goal(goal.id)

    def set_active(self, user_id: int, goal_id: int) -> GoalEntity:
        """Make a goal the active one, deactivating every other goal first.

        Raises:
            NotFoundError: If the goal is not the user's
            ValidationError: If the goal is already completed
        """
        goal = self.get_goal(user_id, goal_id)
        if goal.is_completed:
            raise ValidationError(f"Goal {goal_id} is already completed")

        with self.db.unit_of_work():
            self.db.deactivate_goals(user_id)
            self.db.update_goal(goal.id, is_active=True)
        return self.db.get_goal(goal.id)

    def update_goal(
        self,
        user_id: int,
        goal_id: int,
        name: Optional[str] = None,
        target_amount: Optional[Decimal] = None,
        deadline: Optional[datetime] = None,
        clear_deadline: bool = False,
        now: Optional[datetime] = None,
    ) -> GoalEntity:
        """Change a goal's name, target or deadline.

        Lowering the target to the saved amount or below completes the goal.
        """
        goal = self.get_goal(user_id, goal_id)
        changes: dict = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Goal name cannot be empty")
            changes["name"] = name.strip()
        if target_amount is not None:
            if target_amount <= 0:
                raise ValidationError(amount_must_be_positive(target_amount))
            changes["target_amount"] = target_amount
            if goal.current_amount >= target_amount and not goal.is_completed:
                changes.update(is_completed=True, is_active=False, completed_at=now or utcnow())
        if deadline is not None or clear_deadline:
            changes["deadline"] = deadline
        if changes:
            self.db.update_goal(goal.id, **changes)
        return self.db.get_goal(goal.id)

    def delete_goal(self, user_id: int, goal_id: int) -> None:
        self.get_goal(user_id, goal_id)
        self.db.soft_delete_goal(goal_id)

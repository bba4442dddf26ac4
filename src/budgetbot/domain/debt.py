"""Debt domain service."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog

from budgetbot.database.base import Database
from budgetbot.domain.entities import (
    Debt as DebtEntity,
    DebtPayment,
    DebtSummary,
    DebtType,
)
from budgetbot.domain.errors import (
    NotFoundError,
    ValidationError,
    amount_must_be_positive,
    debt_not_found,
)
from budgetbot.utils.date_parser import utcnow

logger = structlog.get_logger(__name__)


class DebtService:
    """Service for money owed by or to the user."""

    def __init__(self, db: Database):
        """Initialize debt service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_debt(
        self,
        user_id: int,
        person_name: str,
        amount: Decimal,
        debt_type: DebtType,
        due_date: Optional[datetime] = None,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DebtEntity:
        """Create a debt with the full amount remaining.

        Raises:
            ValidationError: If the name is empty or amount is not positive
        """
        person_name = person_name.strip()
        if not person_name:
            raise ValidationError("Person name cannot be empty")
        if amount <= 0:
            raise ValidationError(amount_must_be_positive(amount))

        self.db.ensure_user(user_id)
        debt_id = self.db.create_debt(
            user_id,
            person_name,
            amount,
            debt_type,
            taken_date=now or utcnow(),
            due_date=due_date,
            description=description.strip() if description else None,
        )
        logger.info("debt.created", user_id=user_id, debt_id=debt_id, debt_type=debt_type.value)
        return self.db.get_debt(debt_id)

    def get_debt(self, user_id: int, debt_id: int) -> DebtEntity:
        """Get one of the user's debts.

        Raises:
            NotFoundError: If the debt does not exist, is deleted or is not the user's
        """
        debt = self.db.get_debt(debt_id)
        if debt is None or debt.user_id != user_id or debt.is_deleted:
            raise NotFoundError(debt_not_found(debt_id))
        return debt

    def list_debts(self, user_id: int) -> list[DebtEntity]:
        """All live debts, unpaid first, earliest due first."""
        return self.db.list_debts(user_id)

    def list_unpaid(self, user_id: int, debt_type: Optional[DebtType] = None) -> list[DebtEntity]:
        debts = self.db.list_debts(user_id, include_paid=False)
        if debt_type is not None:
            debts = [debt for debt in debts if debt.debt_type == debt_type]
        return debts

    def get_overdue_debts(self, user_id: int, now: Optional[datetime] = None) -> list[DebtEntity]:
        """Unpaid debts whose due date has passed, earliest due first."""
        now = now or utcnow()
        overdue = [
            debt
            for debt in self.db.list_debts(user_id, include_paid=False)
            if debt.due_date is not None and debt.due_date < now
        ]
        return sorted(overdue, key=lambda debt: (debt.due_date, debt.id))

    def summary(self, user_id: int) -> DebtSummary:
        """Totals of remaining unpaid amounts by side."""
        unpaid = self.db.list_debts(user_id, include_paid=False)
        they_owe = [debt for debt in unpaid if debt.debt_type == DebtType.THEY_OWE]
        i_owe = [debt for debt in unpaid if debt.debt_type == DebtType.I_OWE]
        return DebtSummary(
            they_owe=sum((debt.remaining_amount for debt in they_owe), Decimal("0.00")),
            they_owe_count=len(they_owe),
            i_owe=sum((debt.remaining_amount for debt in i_owe), Decimal("0.00")),
            i_owe_count=len(i_owe),
        )

    def record_payment(
        self,
        user_id: int,
        debt_id: int,
        amount: Decimal,
        transaction_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> tuple[DebtEntity, DebtPayment]:
        """Apply a repayment to a debt.

        The remaining amount is clamped at zero; reaching zero marks the debt
        paid in the same update. Paying more than what remains is allowed.

        Args:
            user_id: User ID
            debt_id: Debt ID
            amount: Amount repaid
            transaction_id: Linked ledger transaction, if any
            now: Payment time

        Returns:
            Tuple of (updated debt, recorded payment)

        Raises:
            ValidationError: If amount is not positive
            NotFoundError: If the debt is not the user's
        """
        if amount <= 0:
            raise ValidationError(amount_must_be_positive(amount))
        now = now or utcnow()
        debt = self.get_debt(user_id, debt_id)

        with self.db.unit_of_work():
            payment_id = self.db.create_debt_payment(debt.id, amount, now, transaction_id)
            remaining = debt.remaining_amount - amount
            if remaining <= 0:
                self.db.update_debt(debt.id, remaining_amount=Decimal(0), is_paid=True, paid_at=now)
            else:
                self.db.update_debt(debt.id, remaining_amount=remaining)

        debt = self.db.get_debt(debt.id)
        if debt.is_paid:
            logger.info("debt.paid", user_id=user_id, debt_id=debt.id)
        return debt, self.db.get_debt_payment(payment_id)

    def mark_paid(self, user_id: int, debt_id: int, now: Optional[datetime] = None) -> DebtEntity:
        """Close a debt without recording a payment amount."""
        self.get_debt(user_id, debt_id)
        self.db.update_debt(debt_id, remaining_amount=Decimal(0), is_paid=True, paid_at=now or utcnow())
        logger.info("debt.paid", user_id=user_id, debt_id=debt_id)
        return self.db.get_debt(debt_id)

    def update_debt(
        self,
        user_id: int,
        debt_id: int,
        person_name: Optional[str] = None,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
        clear_due_date: bool = False,
    ) -> DebtEntity:
        """Change the editable fields of a debt."""
        self.get_debt(user_id, debt_id)
        changes: dict = {}
        if person_name is not None:
            if not person_name.strip():
                raise ValidationError("Person name cannot be empty")
            changes["person_name"] = person_name.strip()
        if description is not None:
            changes["description"] = description.strip() or None
        if due_date is not None or clear_due_date:
            changes["due_date"] = due_date
        if changes:
            self.db.update_debt(debt_id, **changes)
        return self.db.get_debt(debt_id)

    def delete_debt(self, user_id: int, debt_id: int) -> None:
        self.get_debt(user_id, debt_id)
        self.db.soft_delete_debt(debt_id)

    def list_payments(self, user_id: int, debt_id: int) -> list[DebtPayment]:
        self.get_debt(user_id, debt_id)
        return self.db.list_debt_payments(debt_id)

"""Regular (recurring) payment domain service."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog
from dateutil.relativedelta import relativedelta

from budgetbot.database.base import Database
from budgetbot.domain.entities import (
    PaymentFrequency,
    RegularPayment as RegularPaymentEntity,
    RegularPaymentHistory,
    RegularPaymentSummary,
)
from budgetbot.domain.errors import (
    NotFoundError,
    ValidationError,
    amount_must_be_positive,
    category_not_found,
    regular_payment_not_found,
)
from budgetbot.utils.date_parser import days_in_month, month_start, next_month_start, utcnow

logger = structlog.get_logger(__name__)

DEFAULT_REMINDER_DAYS = 3


def compute_next_due_date(
    from_date: datetime, frequency: PaymentFrequency, day_of_month: Optional[int] = None
) -> datetime:
    """Next occurrence of a payment after from_date.

    Monthly payments land on day_of_month (or from_date's day) of the next
    month, clamped to that month's length. The anchor is not lost: Jan 31 ->
    Feb 28 -> Mar 31 when day_of_month is 31.

    Args:
        from_date: Date to recur from
        frequency: Recurrence
        day_of_month: Monthly anchor day, defaults to from_date's day

    Returns:
        Next due date (time of day is kept)
    """
    if frequency == PaymentFrequency.DAILY:
        return from_date + relativedelta(days=1)
    if frequency == PaymentFrequency.WEEKLY:
        return from_date + relativedelta(days=7)
    if frequency == PaymentFrequency.YEARLY:
        return from_date + relativedelta(years=1)

    next_month = from_date.replace(day=1) + relativedelta(months=1)
    anchor = day_of_month or from_date.day
    return next_month.replace(day=min(anchor, days_in_month(next_month.year, next_month.month)))


def validate_day_of_month(day_of_month: Optional[int]) -> None:
    if day_of_month is not None and not 1 <= day_of_month <= 31:
        raise ValidationError(f"Day of month must be between 1 and 31, got {day_of_month}")


class RegularPaymentService:
    """Service for recurring obligations."""

    def __init__(self, db: Database):
        """Initialize regular payment service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_regular_payment(
        self,
        user_id: int,
        name: str,
        amount: Decimal,
        frequency: PaymentFrequency,
        day_of_month: Optional[int] = None,
        start_date: Optional[datetime] = None,
        category_id: Optional[int] = None,
        reminder_days_before: int = DEFAULT_REMINDER_DAYS,
        now: Optional[datetime] = None,
    ) -> RegularPaymentEntity:
        """Create a regular payment.

        The first due date is start_date when given, otherwise the recurrence
        of the creation time.

        Raises:
            ValidationError: If name, amount, day or reminder window is invalid
        """
        name = name.strip()
        if not name:
            raise ValidationError("Payment name cannot be empty")
        if amount <= 0:
            raise ValidationError(amount_must_be_positive(amount))
        validate_day_of_month(day_of_month)
        if reminder_days_before < 0:
            raise ValidationError("Reminder days cannot be negative")

        now = now or utcnow()
        next_due = start_date or compute_next_due_date(now, frequency, day_of_month)

        self.db.ensure_user(user_id)
        payment_id = self.db.create_regular_payment(
            user_id,
            name,
            amount,
            frequency,
            next_due_date=next_due,
            day_of_month=day_of_month,
            category_id=category_id,
            reminder_days_before=reminder_days_before,
        )
        logger.info(
            "regular_payment.created",
            user_id=user_id,
            payment_id=payment_id,
            frequency=frequency.value,
            next_due=next_due.isoformat(),
        )
        return self.db.get_regular_payment(payment_id)

    def get_regular_payment(self, user_id: int, payment_id: int) -> RegularPaymentEntity:
        """Get one of the user's regular payments.

        Raises:
            NotFoundError: If the payment does not exist, is deleted or is not the user's
        """
        payment = self.db.get_regular_payment(payment_id)
        if payment is None or payment.user_id != user_id or payment.is_deleted:
            raise NotFoundError(regular_payment_not_found(payment_id))
        return payment

    def list_regular_payments(
        self, user_id: int, include_paused: bool = True
    ) -> list[RegularPaymentEntity]:
        return self.db.list_regular_payments(user_id, include_paused=include_paused)

    def mark_paid(
        self,
        user_id: int,
        payment_id: int,
        transaction_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> tuple[RegularPaymentEntity, RegularPaymentHistory]:
        """Record a payment and move the due date forward from now.

        The next due date is recomputed from the payment time, not from the
        previous due date, so a late payment does not shorten the next
        interval.
        """
        payment = self.get_regular_payment(user_id, payment_id)
        now = now or utcnow()
        with self.db.unit_of_work():
            history_id = self.db.create_regular_payment_history(
                payment.id, payment.amount, now, transaction_id
            )
            self.db.update_regular_payment(
                payment.id,
                last_paid_date=now,
                next_due_date=compute_next_due_date(now, payment.frequency, payment.day_of_month),
            )
        history = self.db.list_regular_payment_history(payment.id)
        recorded = next(item for item in history if item.id == history_id)
        return self.db.get_regular_payment(payment.id), recorded

    def get_due_payments(
        self, user_id: int, now: Optional[datetime] = None
    ) -> list[RegularPaymentEntity]:
        """Active payments inside their reminder window (due date minus reminder days)."""
        now = now or utcnow()
        return [
            payment
            for payment in self.db.list_regular_payments(user_id, include_paused=False)
            if payment.next_due_date is not None
            and payment.next_due_date - relativedelta(days=payment.reminder_days_before) <= now
        ]

    def set_paused(self, user_id: int, payment_id: int, paused: bool) -> RegularPaymentEntity:
        self.get_regular_payment(user_id, payment_id)
        self.db.update_regular_payment(payment_id, is_paused=paused)
        return self.db.get_regular_payment(payment_id)

    def update_day(self, user_id: int, payment_id: int, day_of_month: int) -> RegularPaymentEntity:
        """Re-anchor a payment to a day of the month and recompute its due date.

        The due date is recomputed from the last payment (or creation if
        never paid).
        """
        validate_day_of_month(day_of_month)
        payment = self.get_regular_payment(user_id, payment_id)
        base = payment.last_paid_date or payment.created_at
        self.db.update_regular_payment(
            payment.id,
            day_of_month=day_of_month,
            next_due_date=compute_next_due_date(base, payment.frequency, day_of_month),
        )
        return self.db.get_regular_payment(payment.id)

    def set_category(
        self, user_id: int, payment_id: int, category_id: Optional[int]
    ) -> RegularPaymentEntity:
        """Book future payments to a category; None books them to the default one.

        Raises:
            NotFoundError: If the payment or the category is not the user's
        """
        self.get_regular_payment(user_id, payment_id)
        if category_id is not None:
            category = self.db.get_category(category_id)
            if category is None or category.user_id != user_id:
                raise NotFoundError(category_not_found(category_id))
        self.db.update_regular_payment(payment_id, category_id=category_id)
        return self.db.get_regular_payment(payment_id)

    def delete_regular_payment(self, user_id: int, payment_id: int) -> None:
        self.get_regular_payment(user_id, payment_id)
        self.db.soft_delete_regular_payment(payment_id)

    def list_history(self, user_id: int, payment_id: int) -> list[RegularPaymentHistory]:
        self.get_regular_payment(user_id, payment_id)
        return self.db.list_regular_payment_history(payment_id)

    def monthly_summary(
        self, user_id: int, now: Optional[datetime] = None
    ) -> RegularPaymentSummary:
        """Active monthly payments, split into paid this month and pending."""
        now = now or utcnow()
        start, end = month_start(now), next_month_start(now)
        monthly = [
            payment
            for payment in self.db.list_regular_payments(user_id, include_paused=False)
            if payment.frequency == PaymentFrequency.MONTHLY
        ]
        paid = [
            payment
            for payment in monthly
            if payment.last_paid_date is not None and start <= payment.last_paid_date < end
        ]
        total = sum((payment.amount for payment in monthly), Decimal("0.00"))
        paid_total = sum((payment.amount for payment in paid), Decimal("0.00"))
        return RegularPaymentSummary(
            total=total,
            count=len(monthly),
            paid=paid_total,
            paid_count=len(paid),
            pending=total - paid_total,
            pending_count=len(monthly) - len(paid),
        )

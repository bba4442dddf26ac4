"""Mapper functions to convert SQLAlchemy models into domain entities.

Enum columns are stored as plain strings/ints and converted here so the rest
of the code only ever sees domain enums.
"""

from decimal import Decimal

from budgetbot.domain import entities as domain
from budgetbot.database.models import (
    User as ORMUser,
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    Limit as ORMLimit,
    Debt as ORMDebt,
    DebtPayment as ORMDebtPayment,
    Goal as ORMGoal,
    RegularPayment as ORMRegularPayment,
    RegularPaymentHistory as ORMRegularPaymentHistory,
)


def _money(value) -> Decimal:
    return Decimal(value if value is not None else 0).quantize(Decimal("0.01"))


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        first_name=orm_user.first_name,
        username=orm_user.username,
        created_at=orm_user.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        name=orm_account.name,
        balance=_money(orm_account.balance),
        currency=orm_account.currency,
        is_deleted=orm_account.is_deleted,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        user_id=orm_category.user_id,
        name=orm_category.name,
        icon=orm_category.icon,
        direction=domain.Direction(orm_category.direction) if orm_category.direction else None,
        priority=domain.Priority(orm_category.priority),
        is_active=orm_category.is_active,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        category_id=orm_transaction.category_id,
        amount=_money(orm_transaction.amount),
        direction=domain.Direction(orm_transaction.direction),
        description=orm_transaction.description,
        is_impulsive=orm_transaction.is_impulsive,
        is_error=orm_transaction.is_error,
        is_deleted=orm_transaction.is_deleted,
        date=orm_transaction.date,
        created_at=orm_transaction.created_at,
    )


def limit_to_domain(orm_limit: ORMLimit) -> domain.Limit:
    """Convert SQLAlchemy Limit model to domain Limit entity."""
    return domain.Limit(
        id=orm_limit.id,
        user_id=orm_limit.user_id,
        category_id=orm_limit.category_id,
        amount=_money(orm_limit.amount),
        spent_amount=_money(orm_limit.spent_amount),
        period_start=orm_limit.period_start,
        is_blocked=orm_limit.is_blocked,
        blocked_until=orm_limit.blocked_until,
        last_warning_level=orm_limit.last_warning_level,
        created_at=orm_limit.created_at,
    )


def debt_to_domain(orm_debt: ORMDebt) -> domain.Debt:
    """Convert SQLAlchemy Debt model to domain Debt entity."""
    return domain.Debt(
        id=orm_debt.id,
        user_id=orm_debt.user_id,
        person_name=orm_debt.person_name,
        amount=_money(orm_debt.amount),
        remaining_amount=_money(orm_debt.remaining_amount),
        debt_type=domain.DebtType(orm_debt.debt_type),
        description=orm_debt.description,
        taken_date=orm_debt.taken_date,
        due_date=orm_debt.due_date,
        is_paid=orm_debt.is_paid,
        paid_at=orm_debt.paid_at,
        is_deleted=orm_debt.is_deleted,
        created_at=orm_debt.created_at,
    )


def debt_payment_to_domain(orm_payment: ORMDebtPayment) -> domain.DebtPayment:
    """Convert SQLAlchemy DebtPayment model to domain DebtPayment entity."""
    return domain.DebtPayment(
        id=orm_payment.id,
        debt_id=orm_payment.debt_id,
        amount=_money(orm_payment.amount),
        paid_at=orm_payment.paid_at,
        transaction_id=orm_payment.transaction_id,
    )


def goal_to_domain(orm_goal: ORMGoal) -> domain.Goal:
    """Convert SQLAlchemy Goal model to domain Goal entity."""
    return domain.Goal(
        id=orm_goal.id,
        user_id=orm_goal.user_id,
        name=orm_goal.name,
        target_amount=_money(orm_goal.target_amount),
        current_amount=_money(orm_goal.current_amount),
        deadline=orm_goal.deadline,
        priority=orm_goal.priority,
        is_active=orm_goal.is_active,
        is_completed=orm_goal.is_completed,
        completed_at=orm_goal.completed_at,
        is_deleted=orm_goal.is_deleted,
        created_at=orm_goal.created_at,
    )


def regular_payment_to_domain(orm_payment: ORMRegularPayment) -> domain.RegularPayment:
    """Convert SQLAlchemy RegularPayment model to domain RegularPayment entity."""
    return domain.RegularPayment(
        id=orm_payment.id,
        user_id=orm_payment.user_id,
        category_id=orm_payment.category_id,
        name=orm_payment.name,
        amount=_money(orm_payment.amount),
        frequency=domain.PaymentFrequency(orm_payment.frequency),
        day_of_month=orm_payment.day_of_month,
        reminder_days_before=orm_payment.reminder_days_before,
        is_paused=orm_payment.is_paused,
        last_paid_date=orm_payment.last_paid_date,
        next_due_date=orm_payment.next_due_date,
        is_deleted=orm_payment.is_deleted,
        created_at=orm_payment.created_at,
    )


def regular_payment_history_to_domain(
    orm_history: ORMRegularPaymentHistory,
) -> domain.RegularPaymentHistory:
    """Convert SQLAlchemy RegularPaymentHistory model to domain entity."""
    return domain.RegularPaymentHistory(
        id=orm_history.id,
        regular_payment_id=orm_history.regular_payment_id,
        amount=_money(orm_history.amount),
        paid_at=orm_history.paid_at,
        transaction_id=orm_history.transaction_id,
    )

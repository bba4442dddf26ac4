"""Tests for the SQLAlchemy ledger store."""

from datetime import datetime
from decimal import Decimal
import pytest
from sqlalchemy.exc import OperationalError

from budgetbot.domain.entities import Direction
from budgetbot.domain.errors import StoreUnavailableError


class BrokenSession:
    """Session whose every query fails like a lost connection."""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    get = scalars = execute = _fail


def _account(temp_db, user_id=1):
    temp_db.ensure_user(user_id)
    return temp_db.create_account(user_id, "Main account", "TJS")


def test_ensure_user_refreshes_names(temp_db):
    temp_db.ensure_user(5, first_name="Ann")
    user = temp_db.ensure_user(5, username="ann")

    assert user.first_name == "Ann"
    assert user.username == "ann"
    assert temp_db.list_user_ids() == [5]


def test_unit_of_work_rolls_back_everything(temp_db):
    """A failure inside a unit of work leaves no partial writes."""
    account_id = _account(temp_db)
    category_id = temp_db.create_category(1, "Food", Direction.EXPENSE)

    with pytest.raises(RuntimeError):
        with temp_db.unit_of_work():
            temp_db.create_transaction(
                account_id=account_id,
                category_id=category_id,
                amount=Decimal("10"),
                direction=Direction.EXPENSE,
                date=datetime(2026, 3, 10),
            )
            temp_db.adjust_account_balance(account_id, Decimal("-10"))
            raise RuntimeError("boom")

    assert temp_db.get_account(account_id).balance == Decimal("0.00")
    assert temp_db.list_transactions(account_id) == []


def test_nested_unit_of_work_joins_outer(temp_db):
    """An inner unit does not commit on its own."""
    account_id = _account(temp_db)

    with pytest.raises(RuntimeError):
        with temp_db.unit_of_work():
            with temp_db.unit_of_work():
                temp_db.adjust_account_balance(account_id, Decimal("25"))
            raise RuntimeError("outer fails")

    assert temp_db.get_account(account_id).balance == Decimal("0.00")


def test_adjust_account_balance(temp_db):
    account_id = _account(temp_db)

    assert temp_db.adjust_account_balance(account_id, Decimal("100.10")) == Decimal("100.10")
    assert temp_db.adjust_account_balance(account_id, Decimal("-0.10")) == Decimal("100.00")


def test_mark_transaction_error_only_once(temp_db):
    """The error flag is a compare-and-set."""
    account_id = _account(temp_db)
    category_id = temp_db.create_category(1, "Food", Direction.EXPENSE)
    transaction_id = temp_db.create_transaction(
        account_id=account_id,
        category_id=category_id,
        amount=Decimal("10"),
        direction=Direction.EXPENSE,
        date=datetime(2026, 3, 10),
    )

    assert temp_db.mark_transaction_error(transaction_id) is True
    assert temp_db.mark_transaction_error(transaction_id) is False
    assert temp_db.get_transaction(transaction_id).is_error is True


def test_raise_limit_warning_level_never_lowers(temp_db):
    """Warning levels only move up."""
    temp_db.ensure_user(1)
    category_id = temp_db.create_category(1, "Food", Direction.EXPENSE)
    limit_id = temp_db.create_limit(1, category_id, Decimal("100"), datetime(2026, 3, 1))

    assert temp_db.raise_limit_warning_level(limit_id, 80) is True
    assert temp_db.raise_limit_warning_level(limit_id, 50) is False
    assert temp_db.raise_limit_warning_level(limit_id, 80) is False
    assert temp_db.get_limit(limit_id).last_warning_level == 80

    blocked_until = datetime(2026, 3, 11)
    assert temp_db.raise_limit_warning_level(limit_id, 100, blocked_until=blocked_until) is True
    limit = temp_db.get_limit(limit_id)
    assert limit.is_blocked is True
    assert limit.blocked_until == blocked_until


def test_increment_limit_spent(temp_db):
    temp_db.ensure_user(1)
    category_id = temp_db.create_category(1, "Food", Direction.EXPENSE)
    limit_id = temp_db.create_limit(1, category_id, Decimal("100"), datetime(2026, 3, 1))

    temp_db.increment_limit_spent(limit_id, Decimal("30.25"))
    limit = temp_db.increment_limit_spent(limit_id, Decimal("10"))

    assert limit.spent_amount == Decimal("40.25")


def test_driver_failure_becomes_store_unavailable(temp_db, monkeypatch):
    """Connection-level errors surface as StoreUnavailableError."""
    monkeypatch.setattr(temp_db, "_get_session", lambda: BrokenSession())

    with pytest.raises(StoreUnavailableError):
        temp_db.get_user(1)
    with pytest.raises(StoreUnavailableError):
        temp_db.list_user_ids()


def test_store_unavailable_is_not_a_domain_error():
    from budgetbot.domain.errors import DomainError

    assert not issubclass(StoreUnavailableError, DomainError)

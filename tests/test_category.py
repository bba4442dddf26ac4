"""Tests for category management."""

import pytest

from budgetbot.domain.category import (
    DEFAULT_CATEGORIES,
    QUICK_CATEGORY_MAX_LENGTH,
    SUGGESTED_CATEGORY_COUNT,
)
from budgetbot.domain.entities import Direction, Priority
from budgetbot.domain.errors import NotFoundError, ValidationError


def test_initialize_default_categories(ledger, user_id):
    """Defaults are seeded once."""
    created = ledger.categories.initialize_default_categories(user_id)

    assert created == len(DEFAULT_CATEGORIES)
    assert ledger.categories.initialize_default_categories(user_id) == 0
    names = [category.name for category in ledger.categories.list_categories(user_id)]
    assert "Food" in names
    assert "Salary" in names


def test_list_categories_by_direction(ledger, user_id):
    """Direction filters include categories usable for both directions."""
    ledger.categories.initialize_default_categories(user_id)

    income = ledger.categories.list_categories(user_id, Direction.INCOME)

    assert all(category.direction in (Direction.INCOME, None) for category in income)
    assert "Other" in [category.name for category in income]
    assert "Food" not in [category.name for category in income]


def test_list_categories_sorted_by_priority(ledger, user_id):
    ledger.categories.create_category(user_id, "Zoo", Direction.EXPENSE, priority=Priority.REQUIRED)
    ledger.categories.create_category(user_id, "Apples", Direction.EXPENSE, priority=Priority.OPTIONAL)
    ledger.categories.create_category(user_id, "Bread", Direction.EXPENSE, priority=Priority.REQUIRED)

    names = [category.name for category in ledger.categories.list_categories(user_id)]

    assert names == ["Bread", "Zoo", "Apples"]


def test_create_category_rejects_empty_name(ledger, user_id):
    with pytest.raises(ValidationError):
        ledger.categories.create_category(user_id, "  ", Direction.EXPENSE)


def test_quick_category_truncated_and_reused(ledger, user_id):
    """Typed category names are cut to the maximum length and reused."""
    long_name = "Birthday presents for the whole family"

    category = ledger.categories.create_quick_category(user_id, long_name, Direction.EXPENSE)
    again = ledger.categories.create_quick_category(user_id, long_name, Direction.EXPENSE)

    assert len(category.name) <= QUICK_CATEGORY_MAX_LENGTH
    assert category.name == long_name[:QUICK_CATEGORY_MAX_LENGTH].strip()
    assert again.id == category.id


def test_quick_category_reactivates_archived(ledger, user_id, food):
    ledger.categories.archive_category(user_id, food.id)
    assert food.id not in [category.id for category in ledger.categories.list_categories(user_id)]

    category = ledger.categories.create_quick_category(user_id, "food", Direction.EXPENSE)

    assert category.id == food.id
    assert category.is_active is True


def test_suggested_categories_recent_first_and_capped(ledger, user_id):
    """Recent categories lead; the list is capped."""
    ledger.categories.initialize_default_categories(user_id)
    cafe = ledger.categories.find_by_name(user_id, "Cafe")
    clothes = ledger.categories.find_by_name(user_id, "Clothes")

    suggested = ledger.categories.suggested_categories(
        user_id, Direction.EXPENSE, recent_ids=[cafe.id, clothes.id]
    )

    assert len(suggested) == SUGGESTED_CATEGORY_COUNT
    assert [category.id for category in suggested[:2]] == [cafe.id, clothes.id]
    assert all(category.direction != Direction.INCOME for category in suggested)
    assert len({category.id for category in suggested}) == len(suggested)


def test_suggested_categories_seed_defaults(ledger, user_id):
    """A brand new user gets the defaults."""
    suggested = ledger.categories.suggested_categories(user_id, Direction.INCOME, recent_ids=[])

    assert suggested[0].name == "Salary"


def test_ensure_category_is_idempotent(ledger, user_id):
    first = ledger.categories.ensure_category(user_id, "Savings", Direction.EXPENSE, icon="🎯")
    second = ledger.categories.ensure_category(user_id, "Savings", Direction.EXPENSE)

    assert first.id == second.id
    assert first.priority == Priority.REQUIRED


def test_rename_category(ledger, user_id, food):
    renamed = ledger.categories.rename_category(user_id, food.id, "Groceries")

    assert renamed.name == "Groceries"
    assert renamed.label == "🍕 Groceries"


def test_category_of_another_user_not_found(ledger, user_id, food):
    with pytest.raises(NotFoundError):
        ledger.categories.get_category(7, food.id)

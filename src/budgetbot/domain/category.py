"""Category domain service."""

from typing import Optional
from budgetbot.database.base import Database
from budgetbot.domain.entities import Category as CategoryEntity, Direction, Priority
from budgetbot.domain.errors import ValidationError, NotFoundError, category_not_found

# Free-text categories typed during a wizard are cut to this length
QUICK_CATEGORY_MAX_LENGTH = 20

# At most this many categories are offered as buttons
SUGGESTED_CATEGORY_COUNT = 9

QUICK_CATEGORY_ICON = "🆕"

DEFAULT_CATEGORIES: list[tuple[str, str, Optional[Direction], Priority]] = [
    ("Food", "🍕", Direction.EXPENSE, Priority.REQUIRED),
    ("Transport", "🚌", Direction.EXPENSE, Priority.REQUIRED),
    ("Internet", "📱", Direction.EXPENSE, Priority.REQUIRED),
    ("Savings", "🎯", Direction.EXPENSE, Priority.REQUIRED),
    ("Home", "🏠", Direction.EXPENSE, Priority.REQUIRED),
    ("Health", "💊", Direction.EXPENSE, Priority.REQUIRED),
    ("Entertainment", "🎮", Direction.EXPENSE, Priority.PREFERRED),
    ("Education", "📚", Direction.EXPENSE, Priority.PREFERRED),
    ("Career", "💼", Direction.EXPENSE, Priority.PREFERRED),
    ("Clothes", "👕", Direction.EXPENSE, Priority.PREFERRED),
    ("Cafe", "☕", Direction.EXPENSE, Priority.OPTIONAL),
    ("Salary", "💰", Direction.INCOME, Priority.REQUIRED),
    ("Freelance", "💻", Direction.INCOME, Priority.PREFERRED),
    ("Business", "🏢", Direction.INCOME, Priority.PREFERRED),
    ("Gift", "🎁", Direction.INCOME, Priority.OPTIONAL),
    ("Debt return", "🤝", Direction.INCOME, Priority.OPTIONAL),
    ("Investments", "📈", Direction.INCOME, Priority.OPTIONAL),
    ("Other", "📝", None, Priority.OPTIONAL),
]


class CategoryService:
    """Service for managing user categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def initialize_default_categories(self, user_id: int) -> int:
        """Seed the default categories for a user that has none.

        Args:
            user_id: User ID

        Returns:
            Number of categories created (0 if the user already had some)
        """
        if self.db.list_categories(user_id, include_inactive=True):
            return 0

        self.db.ensure_user(user_id)
        with self.db.unit_of_work():
            for name, icon, direction, priority in DEFAULT_CATEGORIES:
                self.db.create_category(
                    user_id, name, direction=direction, icon=icon, priority=priority
                )
        return len(DEFAULT_CATEGORIES)

    def get_category(self, user_id: int, category_id: int) -> CategoryEntity:
        """Get one of the user's categories.

        Raises:
            NotFoundError: If the category does not exist or belongs to someone else
        """
        category = self.db.get_category(category_id)
        if category is None or category.user_id != user_id:
            raise NotFoundError(category_not_found(category_id))
        return category

    def list_categories(
        self, user_id: int, direction: Optional[Direction] = None
    ) -> list[CategoryEntity]:
        """List active categories ordered by priority then name."""
        return self.db.list_categories(user_id, direction=direction)

    def find_by_name(self, user_id: int, name: str) -> Optional[CategoryEntity]:
        return self.db.get_category_by_name(user_id, name.strip())

    def create_category(
        self,
        user_id: int,
        name: str,
        direction: Optional[Direction],
        icon: Optional[str] = None,
        priority: Priority = Priority.OPTIONAL,
    ) -> CategoryEntity:
        """Create a category.

        Args:
            user_id: User ID
            name: Category name (trimmed)
            direction: Direction the category is offered for, None for both
            icon: Optional emoji shown before the name
            priority: Display priority

        Returns:
            Created category

        Raises:
            ValidationError: If the name is empty
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name cannot be empty")

        self.db.ensure_user(user_id)
        category_id = self.db.create_category(
            user_id, name, direction=direction, icon=icon, priority=priority
        )
        return self.db.get_category(category_id)

    def create_quick_category(
        self, user_id: int, name: str, direction: Direction
    ) -> CategoryEntity:
        """Create (or reuse) a category typed as free text during a wizard.

        The name is cut to QUICK_CATEGORY_MAX_LENGTH characters. An existing
        category with the same name is reused and reactivated.
        """
        name = name.strip()[:QUICK_CATEGORY_MAX_LENGTH].strip()
        if not name:
            raise ValidationError("Category name cannot be empty")

        existing = self.find_by_name(user_id, name)
        if existing is not None:
            if not existing.is_active:
                self.db.update_category(existing.id, is_active=True)
                existing = self.db.get_category(existing.id)
            return existing
        return self.create_category(user_id, name, direction, icon=QUICK_CATEGORY_ICON)

    def ensure_category(
        self, user_id: int, name: str, direction: Optional[Direction], icon: Optional[str] = None
    ) -> CategoryEntity:
        """Find a category by name or create it.

        Used for the system categories behind goal, debt and regular payment
        transactions.
        """
        existing = self.find_by_name(user_id, name)
        if existing is not None:
            return existing
        return self.create_category(user_id, name, direction, icon=icon, priority=Priority.REQUIRED)

    def suggested_categories(
        self, user_id: int, direction: Direction, recent_ids: list[int]
    ) -> list[CategoryEntity]:
        """Categories to offer as buttons for a direction.

        Recently used categories come first (in recency order), followed by
        the rest ordered by priority, capped at SUGGESTED_CATEGORY_COUNT.
        Defaults are seeded for users without categories.
        """
        self.initialize_default_categories(user_id)
        relevant = self.db.list_categories(user_id, direction=direction)
        by_id = {category.id: category for category in relevant}

        result: list[CategoryEntity] = []
        for category_id in recent_ids:
            category = by_id.get(category_id)
            if category is not None and category not in result:
                result.append(category)

        for category in relevant:
            if len(result) >= SUGGESTED_CATEGORY_COUNT:
                break
            if category not in result:
                result.append(category)
        return result[:SUGGESTED_CATEGORY_COUNT]

    def rename_category(self, user_id: int, category_id: int, name: str) -> CategoryEntity:
        """Rename a category."""
        self.get_category(user_id, category_id)
        name = name.strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        self.db.update_category(category_id, name=name)
        return self.db.get_category(category_id)

    def archive_category(self, user_id: int, category_id: int) -> None:
        """Hide a category from listings; its transactions are kept."""
        self.get_category(user_id, category_id)
        self.db.update_category(category_id, is_active=False)

"""User domain service."""

from typing import Optional
from budgetbot.database.base import Database
from budgetbot.domain.entities import User as UserEntity


class UserService:
    """Service for registering chat users."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def register(
        self, user_id: int, first_name: Optional[str] = None, username: Optional[str] = None
    ) -> UserEntity:
        """Create the user on first contact, refreshing names afterwards."""
        return self.db.ensure_user(user_id, first_name=first_name, username=username)

    def get_user(self, user_id: int) -> Optional[UserEntity]:
        return self.db.get_user(user_id)

    def list_user_ids(self) -> list[int]:
        return self.db.list_user_ids()

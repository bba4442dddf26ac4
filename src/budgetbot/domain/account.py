"""Account domain service."""

from decimal import Decimal
from typing import Optional
from budgetbot.database.base import Database
from budgetbot.domain.entities import Account as AccountEntity

DEFAULT_ACCOUNT_NAME = "Main account"


class AccountService:
    """Service for the per-user money account."""

    def __init__(self, db: Database, currency: str = "TJS"):
        """Initialize account service.

        Args:
            db: Database instance
            currency: Currency of accounts created lazily
        """
        self.db = db
        self.currency = currency

    def get_account(self, user_id: int) -> Optional[AccountEntity]:
        """Get the user's account.

        Args:
            user_id: User ID

        Returns:
            Account entity or None if the user has not recorded anything yet
        """
        return self.db.get_account_for_user(user_id)

    def get_or_create_account(self, user_id: int) -> AccountEntity:
        """Get the user's account, creating an empty one if missing.

        At most one live account exists per user, so this is the only place
        accounts are created.
        """
        account = self.db.get_account_for_user(user_id)
        if account is not None:
            return account

        self.db.ensure_user(user_id)
        account_id = self.db.create_account(user_id, DEFAULT_ACCOUNT_NAME, self.currency)
        return self.db.get_account(account_id)

    def get_balance(self, user_id: int) -> Decimal:
        """Current balance, zero for users without an account."""
        account = self.db.get_account_for_user(user_id)
        return account.balance if account is not None else Decimal("0.00")

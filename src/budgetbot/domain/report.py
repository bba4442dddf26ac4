"""Report export projection.

The core only produces ordered rows; formatting them (CSV in the CLI) is
left to the caller.
"""

from datetime import datetime
from typing import Optional

from budgetbot.database.base import Database
from budgetbot.domain.account import AccountService
from budgetbot.domain.entities import ReportRow


class ReportService:
    """Read-only projections over a user's ledger."""

    def __init__(self, db: Database, accounts: AccountService):
        """Initialize report service.

        Args:
            db: Database instance
            accounts: Account service used to find the user's account
        """
        self.db = db
        self.accounts = accounts

    def transaction_rows(
        self,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[ReportRow]:
        """Live transactions in [start, end), oldest first.

        Args:
            user_id: User ID
            start: Inclusive lower bound (None for no bound)
            end: Exclusive upper bound (None for no bound)

        Returns:
            Report rows ordered by date then transaction id
        """
        account = self.accounts.get_account(user_id)
        if account is None:
            return []

        categories = {
            category.id: category.name
            for category in self.db.list_categories(user_id, include_inactive=True)
        }
        transactions = self.db.list_transactions(account.id, start=start, end=end, newest_first=False)
        return [
            ReportRow(
                date=txn.date.date(),
                direction=txn.direction,
                category=categories.get(txn.category_id, ""),
                amount=txn.amount,
                description=txn.description,
                is_impulsive=txn.is_impulsive,
            )
            for txn in transactions
        ]

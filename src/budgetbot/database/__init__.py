"""Ledger store for budgetbot."""

from budgetbot.database.base import Database
from budgetbot.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]

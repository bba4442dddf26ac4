"""Database factory functions for creating ledger store instances."""

from pathlib import Path
from typing import Optional

from budgetbot.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite ledger store.

    Args:
        database_path: Path to SQLite database file. If None, the configured
            ``database_path`` setting is used (BUDGETBOT_DATABASE_PATH, then
            ~/.budgetbot/budgetbot.db). ":memory:" gives an in-memory store.

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        from budgetbot.config import get_settings

        database_path = get_settings().database_path

    if database_path != ":memory:":
        Path(database_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        database_path = str(Path(database_path).expanduser())

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")

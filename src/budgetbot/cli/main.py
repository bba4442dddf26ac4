"""Main CLI entry point."""

import click
from budgetbot.config import get_settings
from budgetbot.database.factories import create_sqlite_database
from budgetbot.domain.ledger import Ledger
from budgetbot.log import configure_logging

# Import and register all commands at module level
from budgetbot.cli.commands import (
    balance,
    chat,
    export,
    remind,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BUDGETBOT_DB_PATH environment variable)",
    envvar="BUDGETBOT_DB_PATH",
)
@click.pass_context
def cli(ctx, db_path: str | None):
    """Budgetbot - personal finance in a chat.

    Record income and expenses, save towards goals, track debts, regular
    payments and monthly limits through a conversational bot.
    """
    ctx.ensure_object(dict)
    settings = get_settings()
    configure_logging(settings.log_level, json=settings.log_json)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        ctx.obj["db"] = db
        ctx.obj["settings"] = settings
        ctx.obj["ledger"] = Ledger(
            db,
            currency=settings.default_currency,
            block_hours=settings.limit_block_hours,
        )


# Register all commands
chat.register_commands(cli)
remind.register_commands(cli)
balance.register_commands(cli)
export.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()

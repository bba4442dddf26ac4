"""CLI error handling helpers."""

import click

from budgetbot.domain.errors import DomainError, StoreUnavailableError


def handle_domain_error(ctx: click.Context, error: DomainError | StoreUnavailableError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)

"""Transaction export command."""

import csv
from datetime import datetime, time, timedelta

import click
from budgetbot.cli.error_handling import handle_domain_error
from budgetbot.utils.date_parser import parse_date

CSV_HEADER = ["date", "direction", "category", "amount", "description", "impulsive"]


@click.command("export")
@click.option("--user-id", type=int, required=True, help="User whose transactions to export")
@click.option("--start", "start_str", help="First day to include (DD.MM.YYYY, YYYY-MM-DD, today)")
@click.option("--end", "end_str", help="Last day to include")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, allow_dash=True),
    default="-",
    help="CSV file to write (default: standard output)",
)
@click.pass_context
def export(ctx, user_id: int, start_str: str | None, end_str: str | None, output: str):
    """Export transactions as CSV.

    Cancelled and deleted transactions are left out. Rows are ordered
    oldest first.

    Examples:
        budgetbot export --user-id 1
        budgetbot export --user-id 1 --start 01.10.2026 --end 31.10.2026 -o october.csv
    """
    ledger = ctx.obj["ledger"]

    try:
        start = datetime.combine(parse_date(start_str), time()) if start_str else None
        # --end is inclusive: rows before midnight after the end day
        end = datetime.combine(parse_date(end_str), time()) + timedelta(days=1) if end_str else None
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if start is not None and end is not None and start >= end:
        handle_domain_error(ctx, ValueError("--start must not be after --end"))
        return

    rows = ledger.reports.transaction_rows(user_id, start=start, end=end)
    with click.open_file(output, "w", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for row in rows:
            writer.writerow([
                row.date.isoformat(),
                row.direction.value,
                row.category,
                f"{row.amount:.2f}",
                row.description or "",
                "yes" if row.is_impulsive else "no",
            ])

    if output != "-":
        click.echo(f"Exported {len(rows)} transactions to {output}")


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export)

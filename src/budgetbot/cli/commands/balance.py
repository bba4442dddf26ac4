"""Balance command."""

import click
from budgetbot.utils.amount_parser import format_amount


@click.command("balance")
@click.option("--user-id", type=int, required=True, help="User to show")
@click.pass_context
def balance(ctx, user_id: int):
    """Show a user's balance, this month's totals, goal and debts.

    Examples:
        budgetbot balance --user-id 1
    """
    ledger = ctx.obj["ledger"]
    overview = ledger.overview(user_id)

    def money(amount):
        return format_amount(amount, overview.currency)

    click.echo(f"\nBalance: {money(overview.balance)}")
    click.echo("-" * 60)
    click.echo(f"{'Income this month':<30} {money(overview.month_income):>20}")
    click.echo(f"{'Expenses this month':<30} {money(overview.month_expense):>20}")

    goal = overview.active_goal
    if goal is not None:
        click.echo(
            f"{'Goal: ' + goal.name:<30} {money(goal.current_amount):>20} "
            f"of {money(goal.target_amount)} ({goal.percent:.0f}%)"
        )

    debts = overview.debts
    click.echo(f"{'Owed to you':<30} {money(debts.they_owe):>20} ({debts.they_owe_count})")
    click.echo(f"{'You owe':<30} {money(debts.i_owe):>20} ({debts.i_owe_count})")

    regular = overview.regular
    if regular.count:
        click.echo(
            f"{'Regular payments pending':<30} {money(regular.pending):>20} "
            f"({regular.pending_count} of {regular.count})"
        )


def register_commands(cli):
    """Register balance command with main CLI."""
    cli.add_command(balance)

"""Reminder scheduler command."""

import click
from budgetbot.domain.errors import StoreUnavailableError
from budgetbot.scheduler import ReminderScheduler
from budgetbot.transport.console import ConsoleTransport
from budgetbot.cli.error_handling import handle_domain_error


@click.command("remind")
@click.option("--once", is_flag=True, help="Run a single scan and exit")
@click.option("--force", is_flag=True, help="Send today's reminders regardless of the hour")
@click.pass_context
def remind(ctx, once: bool, force: bool):
    """Scan all users: roll limits over and send due reminders.

    Without --once the scan repeats until interrupted. Reminders are printed
    to the terminal.

    Examples:
        budgetbot remind --once
        budgetbot remind --once --force
        budgetbot remind
    """
    ledger = ctx.obj["ledger"]
    settings = ctx.obj["settings"]
    scheduler = ReminderScheduler(
        ledger,
        ConsoleTransport(),
        reminder_hour=0 if force else settings.reminder_hour,
        interval_seconds=settings.scheduler_interval_seconds,
        backoff_seconds=settings.scheduler_backoff_seconds,
    )

    if once:
        try:
            report = scheduler.run_once()
        except StoreUnavailableError as e:
            handle_domain_error(ctx, e)
            return
        click.echo(
            f"Scanned {report.users_scanned} users, sent {report.reminders_sent} reminders"
        )
        if report.failed_user_ids:
            failed = ", ".join(str(user_id) for user_id in report.failed_user_ids)
            click.echo(f"Failed users: {failed}", err=True)
            ctx.exit(1)
        return

    click.echo("Scheduler running, press Ctrl+C to stop.")
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        scheduler.stop()
    click.echo("Scheduler stopped.")


def register_commands(cli):
    """Register remind command with main CLI."""
    cli.add_command(remind)

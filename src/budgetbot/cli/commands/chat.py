"""Interactive console chat."""

import uuid

import click
from budgetbot.flow.engine import FlowEngine
from budgetbot.flow.session import InMemorySessionStore
from budgetbot.transport.console import ConsoleTransport

QUIT_WORDS = {"quit", "exit", "/quit"}


@click.command("chat")
@click.option("--user-id", type=int, required=True, help="Chat user ID (also used as the chat ID)")
@click.option("--name", help="First name shown to the bot")
@click.pass_context
def chat(ctx, user_id: int, name: str | None):
    """Talk to the bot in the terminal.

    Type messages as you would in a chat. "#N" presses button N of the
    last message; "quit" leaves.

    Examples:
        budgetbot chat --user-id 1
        budgetbot chat --user-id 1 --name Alice
    """
    ledger = ctx.obj["ledger"]
    settings = ctx.obj["settings"]
    transport = ConsoleTransport()
    engine = FlowEngine(
        ledger,
        transport,
        sessions=InMemorySessionStore(idle_timeout=settings.session_idle_timeout, clock=ledger.clock),
        admin_chat_id=settings.admin_chat_id,
    )

    engine.handle_message(user_id, user_id, "/start", first_name=name)
    while True:
        try:
            line = click.prompt("you", default="", show_default=False, prompt_suffix="> ")
        except click.Abort:
            break
        line = line.strip()
        if not line:
            continue
        if line.lower() in QUIT_WORDS:
            break

        if line.startswith("#") and line[1:].isdigit():
            data = transport.button_data(int(line[1:]))
            if data is None:
                click.echo(f"No button {line} on the last message.", err=True)
                continue
            engine.handle_action(
                user_id,
                user_id,
                transport.last_message_id,
                data,
                interaction_id=uuid.uuid4().hex,
            )
        else:
            engine.handle_message(user_id, user_id, line, first_name=name)
    click.echo("Bye!")


def register_commands(cli):
    """Register chat command with main CLI."""
    cli.add_command(chat)

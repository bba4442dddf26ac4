"""Console transport used by ``budgetbot chat``."""

from typing import Optional

import click

from budgetbot.transport.base import Keyboard, Transport


class ConsoleTransport(Transport):
    """Prints messages to the terminal and numbers their buttons.

    The most recent keyboard is remembered so the chat loop can turn "#N"
    into the data of button N.
    """

    def __init__(self):
        self._next_message_id = 1
        self.last_keyboard: Optional[Keyboard] = None
        self.last_message_id: Optional[int] = None

    def _render(self, header: str, text: str, keyboard: Optional[Keyboard]) -> None:
        click.echo(click.style(header, dim=True))
        click.echo(text)
        if keyboard is not None and keyboard.rows:
            number = 1
            for row in keyboard.rows:
                labels = []
                for button in row:
                    labels.append(f"[#{number} {button.text}]")
                    number += 1
                click.echo("  " + " ".join(labels))
            self.last_keyboard = keyboard
        else:
            self.last_keyboard = None
        click.echo()

    def send_message(self, chat_id: int, text: str, keyboard: Optional[Keyboard] = None) -> int:
        message_id = self._next_message_id
        self._next_message_id += 1
        self._render(f"--- message {message_id}", text, keyboard)
        self.last_message_id = message_id
        return message_id

    def edit_message(
        self, chat_id: int, message_id: int, text: str, keyboard: Optional[Keyboard] = None
    ) -> None:
        self._render(f"--- message {message_id} (edited)", text, keyboard)
        self.last_message_id = message_id

    def answer_interaction(self, interaction_id: str, text: Optional[str] = None) -> None:
        if text:
            click.echo(click.style(f"({text})", fg="yellow"))

    def button_data(self, number: int) -> Optional[str]:
        """Data of button N (1-based) of the last keyboard, if it exists."""
        if self.last_keyboard is None:
            return None
        buttons = self.last_keyboard.buttons()
        if 1 <= number <= len(buttons):
            return buttons[number - 1].data
        return None

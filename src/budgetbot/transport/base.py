"""Transport adapter interface.

The flow engine talks to a chat through this interface only; message text
and inline keyboards are plain data.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


class TransportError(RuntimeError):
    """Sending or editing a message failed."""


@dataclass(frozen=True)
class Button:
    """Inline button; data is handed back to the engine when pressed."""

    text: str
    data: str


@dataclass(frozen=True)
class Keyboard:
    """Rows of inline buttons."""

    rows: tuple[tuple[Button, ...], ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, *rows: list[Button]) -> "Keyboard":
        return cls(tuple(tuple(row) for row in rows if row))

    def buttons(self) -> list[Button]:
        return [button for row in self.rows for button in row]

    def find(self, data: str) -> Optional[Button]:
        for button in self.buttons():
            if button.data == data:
                return button
        return None


class Transport(ABC):
    """Abstract chat transport."""

    @abstractmethod
    def send_message(self, chat_id: int, text: str, keyboard: Optional[Keyboard] = None) -> int:
        """Send a new message. Returns its message ID.

        Raises:
            TransportError: If the message could not be delivered
        """
        pass

    @abstractmethod
    def edit_message(
        self, chat_id: int, message_id: int, text: str, keyboard: Optional[Keyboard] = None
    ) -> None:
        """Replace the text and keyboard of a message sent earlier.

        Raises:
            TransportError: If the message could not be edited
        """
        pass

    @abstractmethod
    def answer_interaction(self, interaction_id: str, text: Optional[str] = None) -> None:
        """Acknowledge a button press, optionally with a short notice."""
        pass

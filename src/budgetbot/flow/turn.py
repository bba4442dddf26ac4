"""A single inbound update being handled for one user."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog

from budgetbot.domain.ledger import Ledger
from budgetbot.flow import keyboards
from budgetbot.flow.registry import Registry
from budgetbot.flow.session import FlowSession, SessionStore
from budgetbot.flow.steps import Step
from budgetbot.transport.base import Keyboard, Transport, TransportError
from budgetbot.utils.amount_parser import format_amount

logger = structlog.get_logger(__name__)


class Turn:
    """Context handed to wizard handlers.

    Button turns edit the message the button belongs to; typed turns send a
    new message. Transport failures are logged and never raised.
    """

    def __init__(
        self,
        ledger: Ledger,
        transport: Transport,
        sessions: SessionStore,
        registry: Registry,
        chat_id: int,
        user_id: int,
        session: Optional[FlowSession],
        message_id: Optional[int] = None,
        from_button: bool = False,
        admin_chat_id: Optional[int] = None,
    ):
        self.ledger = ledger
        self.transport = transport
        self.sessions = sessions
        self.registry = registry
        self.chat_id = chat_id
        self.user_id = user_id
        self.session = session
        self.message_id = message_id
        self.from_button = from_button
        self.admin_chat_id = admin_chat_id

    @property
    def step(self) -> Optional[Step]:
        return self.session.step if self.session is not None else None

    @property
    def now(self) -> datetime:
        return self.ledger.clock()

    def money(self, amount: Decimal) -> str:
        return format_amount(amount, self.ledger.accounts.currency)

    def advance(self, step: Step, notice: Optional[str] = None) -> None:
        """Move the session to step (opening one if needed) and show its prompt."""
        text, keyboard = self.registry.render_prompt(self, step)
        if notice:
            text = f"{notice}\n\n{text}"

        if self.session is None:
            self.session = FlowSession(
                user_id=self.user_id,
                chat_id=self.chat_id,
                step=step,
                message_id=self.message_id,
            )
        else:
            self.session.step = step
        message_id = self._render(text, keyboard)
        if message_id is not None:
            self.session.message_id = message_id
        self.sessions.save(self.session)
        logger.info("flow.step", user_id=self.user_id, step=type(step).__name__)

    def reprompt(self, error: Optional[str] = None) -> None:
        """Show the current step's prompt again, with an error line."""
        self.advance(self.session.step, notice=f"⚠️ {error}" if error else None)

    def finish(self, text: str, keyboard: Optional[Keyboard] = None) -> None:
        """End the open wizard and show a result (with the main menu by default)."""
        if self.session is not None:
            logger.info(
                "flow.finished", user_id=self.user_id, step=type(self.session.step).__name__
            )
        self.show(text, keyboard)

    def show(self, text: str, keyboard: Optional[Keyboard] = None) -> None:
        """Show a screen; any open wizard is closed."""
        self.drop_session()
        self._render(text, keyboard if keyboard is not None else keyboards.main_menu())

    def say(self, text: str, keyboard: Optional[Keyboard] = None) -> None:
        """Show text without touching the session."""
        self._render(text, keyboard)

    def drop_session(self) -> None:
        if self.session is not None:
            self.sessions.discard(self.user_id)
            self.session = None

    def notify(self, chat_id: int, text: str) -> None:
        """Send a message to another chat."""
        try:
            self.transport.send_message(chat_id, text)
        except TransportError as e:
            logger.error("transport.send_failed", chat_id=chat_id, error=str(e))

    def _render(self, text: str, keyboard: Optional[Keyboard]) -> Optional[int]:
        if self.from_button and self.message_id is not None:
            try:
                self.transport.edit_message(self.chat_id, self.message_id, text, keyboard)
                return self.message_id
            except TransportError as e:
                logger.warning(
                    "transport.edit_failed",
                    chat_id=self.chat_id,
                    message_id=self.message_id,
                    error=str(e),
                )
        try:
            return self.transport.send_message(self.chat_id, text, keyboard)
        except TransportError as e:
            logger.error("transport.send_failed", chat_id=self.chat_id, error=str(e))
            return None

"""Flow engine: routes chat updates to wizard handlers.

Every ledger failure raised by a handler is turned into a chat message here;
nothing propagates to the transport.
"""

from typing import Callable, Optional

import structlog

from budgetbot.domain.errors import (
    CategoryBlockedError,
    DomainError,
    InsufficientFundsError,
    StoreUnavailableError,
    ValidationError,
)
from budgetbot.domain.ledger import Ledger
from budgetbot.flow import keyboards
from budgetbot.flow.registry import Registry
from budgetbot.flow.session import InMemorySessionStore, SessionStore
from budgetbot.flow.turn import Turn
from budgetbot.flow.wizards import category, debt, goal, limit, overview, regular, transaction
from budgetbot.flow.wizards import help as help_wizard
from budgetbot.transport.base import Transport, TransportError

logger = structlog.get_logger(__name__)

WELCOME_TEXT = (
    "👋 Hi! I keep track of your income, expenses, goals, debts and regular payments.\n\n"
    "Choose an action:"
)
MENU_TEXT = "Choose an action:"
UNAVAILABLE_TEXT = "⚠️ The service is temporarily unavailable. Please try again in a moment."
STALE_BUTTON_TEXT = "That button is no longer active"

WIZARD_MODULES = (transaction, goal, debt, regular, limit, category, help_wizard, overview)


def register_core_handlers(registry: Registry) -> None:
    """Start, menu and cancel, available from every step."""

    @registry.on_command("start")
    def start(turn: Turn, argument: str) -> None:
        turn.ledger.categories.initialize_default_categories(turn.user_id)
        turn.show(WELCOME_TEXT)

    @registry.on_command("menu")
    def menu(turn: Turn, argument: str) -> None:
        turn.show(MENU_TEXT)

    @registry.on_command("cancel")
    def cancel_command(turn: Turn, argument: str) -> None:
        turn.show(f"Cancelled.\n\n{MENU_TEXT}")

    @registry.on_action("cancel")
    def cancel(turn: Turn, step, args: list[str]) -> None:
        turn.finish(f"Cancelled.\n\n{MENU_TEXT}")

    @registry.on_action("menu:main")
    def main_menu(turn: Turn, step, args: list[str]) -> None:
        turn.show(MENU_TEXT)


def build_registry() -> Registry:
    registry = Registry()
    register_core_handlers(registry)
    for module in WIZARD_MODULES:
        module.register_handlers(registry)
    return registry


class FlowEngine:
    """Per-user state machine on top of the ledger.

    Updates of one user are serialized by the session store's lock; updates
    of different users run independently.
    """

    def __init__(
        self,
        ledger: Ledger,
        transport: Transport,
        sessions: Optional[SessionStore] = None,
        registry: Optional[Registry] = None,
        admin_chat_id: Optional[int] = None,
    ):
        """Initialize the engine.

        Args:
            ledger: Ledger the wizards write to
            transport: Chat transport
            sessions: Session store (in-memory without expiry by default)
            registry: Handler registry (all wizards by default)
            admin_chat_id: Chat that receives help feedback
        """
        self.ledger = ledger
        self.transport = transport
        self.sessions = sessions if sessions is not None else InMemorySessionStore(clock=ledger.clock)
        self.registry = registry if registry is not None else build_registry()
        self.admin_chat_id = admin_chat_id

    def _turn(self, chat_id: int, user_id: int, message_id: Optional[int] = None, from_button: bool = False) -> Turn:
        return Turn(
            ledger=self.ledger,
            transport=self.transport,
            sessions=self.sessions,
            registry=self.registry,
            chat_id=chat_id,
            user_id=user_id,
            session=self.sessions.get(user_id),
            message_id=message_id,
            from_button=from_button,
            admin_chat_id=self.admin_chat_id,
        )

    def handle_message(
        self,
        chat_id: int,
        user_id: int,
        text: str,
        first_name: Optional[str] = None,
        username: Optional[str] = None,
    ) -> None:
        """Handle typed text: a command, wizard input, or anything else (main menu)."""
        with self.sessions.lock(user_id):
            turn = self._turn(chat_id, user_id)
            self._run(turn, lambda: self._route_message(turn, text, first_name, username))

    def handle_action(
        self,
        chat_id: int,
        user_id: int,
        message_id: int,
        data: str,
        interaction_id: Optional[str] = None,
    ) -> None:
        """Handle a button press on message_id."""
        with self.sessions.lock(user_id):
            if interaction_id is not None:
                try:
                    self.transport.answer_interaction(interaction_id)
                except TransportError as e:
                    logger.warning("transport.answer_failed", interaction_id=interaction_id, error=str(e))
            turn = self._turn(chat_id, user_id, message_id=message_id, from_button=True)
            self._run(turn, lambda: self._route_action(turn, data))

    def _route_message(
        self, turn: Turn, text: str, first_name: Optional[str], username: Optional[str]
    ) -> None:
        self.ledger.users.register(turn.user_id, first_name=first_name, username=username)
        text = text.strip()
        if text.startswith("/"):
            self._run_command(turn, text)
        elif turn.session is not None:
            handler = self.registry.text_handler(turn.session.step)
            if handler is None:
                turn.reprompt("Please use the buttons below")
            else:
                handler(turn, turn.session.step, text)
        else:
            turn.show(MENU_TEXT)

    def _run_command(self, turn: Turn, text: str) -> None:
        head, _, rest = text[1:].partition(" ")
        name = head.split("@", 1)[0].lower()
        found = self.registry.find_command(name)
        # A command always replaces an open wizard.
        turn.drop_session()
        if found is None:
            turn.show(f"Unknown command /{name}.\n\n{MENU_TEXT}")
            return
        handler, suffix = found
        logger.info("flow.command", user_id=turn.user_id, command=name)
        handler(turn, suffix if suffix is not None else rest.strip())

    def _route_action(self, turn: Turn, data: str) -> None:
        found = self.registry.find_action(turn.step, data)
        if found is None:
            logger.info("flow.stale_action", user_id=turn.user_id, data=data)
            if turn.session is not None:
                turn.reprompt(STALE_BUTTON_TEXT)
            else:
                turn.show(f"{STALE_BUTTON_TEXT}.\n\n{MENU_TEXT}")
            return
        handler, args = found
        handler(turn, turn.step, args)

    def _run(self, turn: Turn, handle: Callable[[], None]) -> None:
        try:
            handle()
        except ValidationError as e:
            if turn.session is None:
                turn.show(f"⚠️ {e}")
                return
            try:
                turn.reprompt(str(e))
            except DomainError as stale:
                turn.finish(self._describe(turn, stale))
        except DomainError as e:
            logger.info(
                "flow.aborted",
                user_id=turn.user_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            turn.finish(self._describe(turn, e))
        except StoreUnavailableError as e:
            logger.error("flow.store_unavailable", user_id=turn.user_id, error=str(e))
            turn.say(
                UNAVAILABLE_TEXT,
                keyboards.cancel() if turn.session is not None else keyboards.main_menu(),
            )

    @staticmethod
    def _describe(turn: Turn, error: DomainError) -> str:
        if isinstance(error, InsufficientFundsError):
            return (
                f"❌ Not enough money: available {turn.money(error.balance)}, "
                f"needed {turn.money(error.required)}."
            )
        if isinstance(error, CategoryBlockedError):
            until = ""
            if error.blocked_until is not None:
                until = f" until {error.blocked_until:%d.%m.%Y %H:%M} UTC"
            return f"🚫 The limit for this category is exceeded. Spending is blocked{until}."
        return f"⚠️ {error}"

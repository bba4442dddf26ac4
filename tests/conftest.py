"""Shared pytest fixtures for budgetbot tests."""

import tempfile
import os
from datetime import datetime, timedelta
from decimal import Decimal
import pytest

from budgetbot.config import get_settings
from budgetbot.database.factories import create_sqlite_database
from budgetbot.domain.entities import Direction
from budgetbot.domain.ledger import Ledger
from budgetbot.flow.engine import FlowEngine
from budgetbot.flow.session import InMemorySessionStore
from budgetbot.transport.base import Transport, TransportError

USER_ID = 42
START_TIME = datetime(2026, 3, 10, 12, 0)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingTransport(Transport):
    """Transport that keeps every message in memory."""

    def __init__(self):
        self.messages: dict[int, dict] = {}
        self.sent: list[dict] = []
        self.edits: list[dict] = []
        self.history: list[dict] = []
        self.answered: list[str] = []
        self.fail_sends = False
        self.fail_edits = False
        self._next_id = 100

    def send_message(self, chat_id, text, keyboard=None):
        if self.fail_sends:
            raise TransportError("network down")
        message_id = self._next_id
        self._next_id += 1
        message = {"chat_id": chat_id, "message_id": message_id, "text": text, "keyboard": keyboard}
        self.messages[message_id] = message
        self.sent.append(message)
        self.history.append(message)
        return message_id

    def edit_message(self, chat_id, message_id, text, keyboard=None):
        if self.fail_edits or message_id not in self.messages:
            raise TransportError("message to edit not found")
        message = {"chat_id": chat_id, "message_id": message_id, "text": text, "keyboard": keyboard}
        self.messages[message_id] = message
        self.edits.append(message)
        self.history.append(message)

    def answer_interaction(self, interaction_id, text=None):
        self.answered.append(interaction_id)

    @property
    def last(self) -> dict:
        """Most recently sent or edited message."""
        assert self.history, "no messages"
        return self.history[-1]

    @property
    def last_text(self) -> str:
        return self.last["text"]

    def last_button_data(self) -> list[str]:
        keyboard = self.last["keyboard"]
        return [button.data for button in keyboard.buttons()] if keyboard else []


class ChatDriver:
    """Plays one user talking to the engine."""

    def __init__(self, engine: FlowEngine, transport: RecordingTransport, user_id: int = USER_ID):
        self.engine = engine
        self.transport = transport
        self.user_id = user_id

    def say(self, text: str) -> str:
        self.engine.handle_message(self.user_id, self.user_id, text)
        return self.transport.last_text

    def press(self, data: str) -> str:
        """Press a button of the last message; it must be offered there."""
        message = self.transport.last
        offered = self.transport.last_button_data()
        assert data in offered, f"{data!r} not in {offered!r}"
        self.engine.handle_action(
            self.user_id, self.user_id, message["message_id"], data, interaction_id="i-1"
        )
        return self.transport.last_text

    @property
    def step(self):
        session = self.engine.sessions.get(self.user_id)
        return session.step if session is not None else None


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    """A clock frozen at START_TIME."""
    return FakeClock(START_TIME)


@pytest.fixture
def ledger(temp_db, clock):
    """Create a Ledger over the temporary database."""
    return Ledger(temp_db, currency="TJS", block_hours=24, clock=clock)


@pytest.fixture
def user_id(ledger):
    """A registered user."""
    ledger.users.register(USER_ID, first_name="Test")
    return USER_ID


@pytest.fixture
def food(ledger, user_id):
    """An expense category."""
    return ledger.categories.create_category(user_id, "Food", Direction.EXPENSE, icon="🍕")


@pytest.fixture
def salary(ledger, user_id):
    """An income category."""
    return ledger.categories.create_category(user_id, "Salary", Direction.INCOME, icon="💰")


@pytest.fixture
def funded(ledger, user_id, salary):
    """Give the user a balance of 1000."""

    def fund(amount: str = "1000"):
        return ledger.record_transaction(user_id, salary.id, Decimal(amount), Direction.INCOME)

    fund()
    return fund


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def sessions(clock):
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def engine(ledger, transport, sessions):
    """Create a FlowEngine wired to the recording transport."""
    return FlowEngine(ledger, transport, sessions=sessions, admin_chat_id=999)


@pytest.fixture
def chat(engine, transport):
    return ChatDriver(engine, transport)


@pytest.fixture
def make_chat(transport):
    """Build a ChatDriver for another engine or user."""

    def build(engine: FlowEngine, user_id: int = USER_ID) -> ChatDriver:
        return ChatDriver(engine, transport, user_id=user_id)

    return build


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Keep settings from leaking between tests."""
    monkeypatch.delenv("BUDGETBOT_DB_PATH", raising=False)
    monkeypatch.delenv("BUDGETBOT_DATABASE_PATH", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

"""Flow session storage.

A session exists only while a wizard is open: it is created by the first
step, replaced on every transition and discarded on completion or cancel.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, ContextManager, Iterator, Optional

import structlog

from budgetbot.flow.steps import Step
from budgetbot.utils.date_parser import utcnow

logger = structlog.get_logger(__name__)


@dataclass
class FlowSession:
    """Open wizard of one user.

    message_id is the message the wizard edits in place when the transport
    allows it.
    """

    user_id: int
    chat_id: int
    step: Step
    message_id: Optional[int] = None
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class _UserLock:
    """Reentrant lock of one user and the number of threads holding or awaiting it."""

    lock: threading.RLock = field(default_factory=threading.RLock)
    users: int = 0


class SessionStore(ABC):
    """Per-user session storage with per-user serialization."""

    @abstractmethod
    def lock(self, user_id: int) -> ContextManager:
        """Lock held while one inbound update of the user is processed."""
        pass

    @abstractmethod
    def get(self, user_id: int) -> Optional[FlowSession]:
        pass

    @abstractmethod
    def save(self, session: FlowSession) -> None:
        pass

    @abstractmethod
    def discard(self, user_id: int) -> None:
        pass


class InMemorySessionStore(SessionStore):
    """Sessions kept in process memory, lost on restart.

    Nothing is written to the ledger before a wizard's last step, so a lost
    session never leaves a partial write behind.
    """

    def __init__(
        self,
        idle_timeout: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the store.

        Args:
            idle_timeout: Discard sessions idle longer than this; None keeps them forever
            clock: Returns the current naive UTC time
        """
        self.idle_timeout = idle_timeout
        self.clock = clock
        self._sessions: dict[int, FlowSession] = {}
        self._locks: dict[int, _UserLock] = {}
        self._guard = threading.Lock()

    @contextmanager
    def lock(self, user_id: int) -> Iterator[None]:
        """Serialize the user's updates; the lock is dropped once nobody holds or awaits it."""
        with self._guard:
            user_lock = self._locks.get(user_id)
            if user_lock is None:
                user_lock = self._locks[user_id] = _UserLock()
            user_lock.users += 1
        try:
            with user_lock.lock:
                yield
        finally:
            with self._guard:
                user_lock.users -= 1
                if user_lock.users == 0:
                    del self._locks[user_id]

    def get(self, user_id: int) -> Optional[FlowSession]:
        with self._guard:
            session = self._sessions.get(user_id)
            if session is None:
                return None
            if self.idle_timeout is not None and self.clock() - session.updated_at > self.idle_timeout:
                del self._sessions[user_id]
                logger.info(
                    "flow.session_expired",
                    user_id=user_id,
                    step=type(session.step).__name__,
                )
                return None
            return session

    def save(self, session: FlowSession) -> None:
        session.updated_at = self.clock()
        with self._guard:
            self._sessions[session.user_id] = session

    def discard(self, user_id: int) -> None:
        with self._guard:
            self._sessions.pop(user_id, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

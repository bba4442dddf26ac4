"""Reminder scheduler.

A background loop that keeps limits in the current period and, once a day
at the configured hour, reminds users of due regular payments and overdue
debts.
"""

import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

import structlog

from budgetbot.domain.entities import Debt, DebtType, RegularPayment
from budgetbot.domain.errors import StoreUnavailableError
from budgetbot.domain.ledger import Ledger
from budgetbot.transport.base import Transport, TransportError
from budgetbot.utils.amount_parser import format_amount
from budgetbot.utils.date_parser import format_date

logger = structlog.get_logger(__name__)


@dataclass
class ScanReport:
    """Outcome of one scan over all users."""

    users_scanned: int = 0
    reminders_sent: int = 0
    reminders_due: bool = False
    failed_user_ids: list[int] = field(default_factory=list)


def payment_reminder(payment: RegularPayment, currency: str, now: datetime) -> str:
    amount = format_amount(payment.amount, currency)
    if payment.next_due_date is not None and payment.next_due_date < now:
        when = f"was due {format_date(payment.next_due_date)}"
    else:
        when = f"is due {format_date(payment.next_due_date)}"
    return f"🔔 Reminder: {payment.name} ({amount}) {when}.\nPay now: /pay_regular_{payment.id}"


def debt_reminder(debt: Debt, currency: str) -> str:
    remaining = format_amount(debt.remaining_amount, currency)
    if debt.debt_type == DebtType.I_OWE:
        text = f"⚠️ Overdue debt: you owe {debt.person_name} {remaining}"
    else:
        text = f"⚠️ Overdue debt: {debt.person_name} owes you {remaining}"
    return f"{text} since {format_date(debt.due_date)}.\nRecord a payment: /pay_debt_{debt.id}"


class ReminderScheduler:
    """Periodic scan over all users, cancellable through stop().

    Users are reminded in their private chat, whose id is the user id.
    """

    def __init__(
        self,
        ledger: Ledger,
        transport: Transport,
        reminder_hour: int = 9,
        interval_seconds: float = 3600,
        backoff_seconds: float = 300,
    ):
        """Initialize the scheduler.

        Args:
            ledger: Ledger to scan
            transport: Transport reminders are sent through
            reminder_hour: UTC hour from which the daily reminders are sent
            interval_seconds: Pause between scans
            backoff_seconds: Pause after a failed scan
        """
        self.ledger = ledger
        self.transport = transport
        self.reminder_hour = reminder_hour
        self.interval_seconds = interval_seconds
        self.backoff_seconds = backoff_seconds
        self.last_reminder_date: Optional[date] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def reminders_due(self, now: datetime) -> bool:
        """True once per day, on the first scan at or after the reminder hour."""
        return now.hour >= self.reminder_hour and self.last_reminder_date != now.date()

    def run_once(self, now: Optional[datetime] = None) -> ScanReport:
        """Scan every user once.

        A failure for one user is logged and the scan continues with the
        next one. A store outage aborts the scan; the daily reminders are
        then retried on the next scan.

        Raises:
            StoreUnavailableError: If the ledger store cannot be reached
        """
        now = now or self.ledger.clock()
        report = ScanReport(reminders_due=self.reminders_due(now))
        for user_id in self.ledger.users.list_user_ids():
            report.users_scanned += 1
            try:
                report.reminders_sent += self._scan_user(user_id, now, report.reminders_due)
            except StoreUnavailableError:
                raise
            except Exception:
                logger.exception("scheduler.user_failed", user_id=user_id)
                report.failed_user_ids.append(user_id)

        if report.reminders_due:
            self.last_reminder_date = now.date()
        logger.info(
            "scheduler.scan_finished",
            users=report.users_scanned,
            reminders=report.reminders_sent,
            failed=len(report.failed_user_ids),
        )
        return report

    def _scan_user(self, user_id: int, now: datetime, send_reminders: bool) -> int:
        self.ledger.run_maintenance(user_id, now=now)
        if not send_reminders:
            return 0

        currency = self.ledger.accounts.currency
        messages = [
            payment_reminder(payment, currency, now)
            for payment in self.ledger.recurring.get_due_payments(user_id, now=now)
        ]
        messages.extend(
            debt_reminder(debt, currency)
            for debt in self.ledger.debts.get_overdue_debts(user_id, now=now)
        )

        sent = 0
        for text in messages:
            try:
                self.transport.send_message(user_id, text)
                sent += 1
            except TransportError as e:
                logger.error("transport.send_failed", chat_id=user_id, error=str(e))
        return sent

    def start(self) -> None:
        """Run the scan loop on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run_forever, name="reminder-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the loop to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_forever(self) -> None:
        """Scan, sleep, repeat until stop() is called."""
        logger.info("scheduler.started", reminder_hour=self.reminder_hour)
        while not self._stop_event.is_set():
            try:
                self.run_once()
                delay = self.interval_seconds
            except Exception:
                logger.exception("scheduler.scan_failed", backoff_seconds=self.backoff_seconds)
                delay = self.backoff_seconds
            finally:
                self.ledger.db.disconnect()
            self._stop_event.wait(delay)
        logger.info("scheduler.stopped")

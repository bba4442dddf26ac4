"""Inline keyboards shown by the flow engine."""

from typing import Iterable, Optional

from budgetbot.domain.entities import Category, Debt, DebtType, Goal, PaymentFrequency, RegularPayment, Transaction
from budgetbot.transport.base import Button, Keyboard

CANCEL_BUTTON = Button("✖️ Cancel", "cancel")
MENU_BUTTON = Button("🏠 Menu", "menu:main")

FREQUENCY_LABELS = {
    PaymentFrequency.DAILY: "Daily",
    PaymentFrequency.WEEKLY: "Weekly",
    PaymentFrequency.MONTHLY: "Monthly",
    PaymentFrequency.YEARLY: "Yearly",
}


def _chunked(buttons: list[Button], size: int) -> list[list[Button]]:
    return [buttons[i : i + size] for i in range(0, len(buttons), size)]


def main_menu() -> Keyboard:
    return Keyboard.of(
        [Button("➕ Income", "menu:income"), Button("➖ Expense", "menu:expense")],
        [Button("💰 Balance", "menu:balance"), Button("📊 Stats", "menu:stats")],
        [Button("🎯 Goals", "menu:goals"), Button("💸 Debts", "menu:debts")],
        [Button("🔄 Payments", "menu:regular"), Button("🚦 Limits", "menu:limits")],
        [Button("📜 History", "menu:history"), Button("🗂 Categories", "menu:categories")],
        [Button("ℹ️ Help", "menu:help")],
    )


def cancel() -> Keyboard:
    return Keyboard.of([CANCEL_BUTTON])


def back_to_menu() -> Keyboard:
    return Keyboard.of([MENU_BUTTON])


def skip(data: str, label: str = "⏭ Skip") -> Keyboard:
    return Keyboard.of([Button(label, data)], [CANCEL_BUTTON])


def amount_entry(is_expense: bool, is_impulsive: bool, can_continue: bool = False) -> Keyboard:
    """Amount step; expenses can be flagged as impulsive.

    can_continue offers going on with the amount entered before stepping back.
    """
    rows = []
    if can_continue:
        rows.append([Button("➡️ Continue", "back:categories")])
    if is_expense:
        label = "⚡ Impulsive: on" if is_impulsive else "⚡ Impulsive: off"
        rows.append([Button(label, "txn:impulsive")])
    rows.append([CANCEL_BUTTON])
    return Keyboard.of(*rows)


def categories(items: Iterable[Category]) -> Keyboard:
    """Category buttons, three per row, then new/back/cancel."""
    buttons = [Button(category.label, f"cat:{category.id}") for category in items]
    rows = _chunked(buttons, 3)
    rows.append([Button("🆕 New category", "cat:new")])
    rows.append([Button("⬅️ Back", "back:amount"), CANCEL_BUTTON])
    return Keyboard.of(*rows)


def new_category() -> Keyboard:
    return Keyboard.of([Button("⬅️ Back", "back:categories"), CANCEL_BUTTON])


def description() -> Keyboard:
    return Keyboard.of(
        [Button("⏭ Skip", "txn:skip")],
        [Button("⬅️ Back", "back:categories"), CANCEL_BUTTON],
    )


def transaction_done(transaction_id: int) -> Keyboard:
    return Keyboard.of(
        [Button("↩️ Undo", f"txn:undo:{transaction_id}")],
        [Button("➕ Income", "menu:income"), Button("➖ Expense", "menu:expense")],
        [MENU_BUTTON],
    )


def confirm_delete() -> Keyboard:
    return Keyboard.of([Button("🗑 Delete", "confirm:yes")], [CANCEL_BUTTON])


def back(data: str) -> Keyboard:
    return Keyboard.of([Button("⬅️ Back", data)], [MENU_BUTTON])


def transaction_history(transactions: Iterable[Transaction]) -> Keyboard:
    """One delete button per listed transaction, numbered like the list."""
    buttons = [
        Button(f"🗑 {number}", f"txn:delete:{transaction.id}")
        for number, transaction in enumerate(transactions, start=1)
    ]
    return Keyboard.of(*_chunked(buttons, 5), [MENU_BUTTON])


def categories_overview(items: Iterable[Category]) -> Keyboard:
    buttons = [Button(category.label, f"category:open:{category.id}") for category in items]
    return Keyboard.of(*_chunked(buttons, 3), [MENU_BUTTON])


def category_detail(category_id: int) -> Keyboard:
    return Keyboard.of(
        [
            Button("✏️ Rename", f"category:rename:{category_id}"),
            Button("🗄 Archive", f"category:archive:{category_id}"),
        ],
        [Button("⬅️ Back", "menu:categories"), MENU_BUTTON],
    )


def goals_overview(active: Optional[Goal], has_goals: bool) -> Keyboard:
    rows: list[list[Button]] = []
    if active is not None:
        rows.append([
            Button("💰 Deposit", f"goal:deposit:{active.id}"),
            Button("💸 Withdraw", f"goal:withdraw:{active.id}"),
        ])
        rows.append([
            Button("✏️ Name", f"goal:edit:name:{active.id}"),
            Button("✏️ Target", f"goal:edit:target:{active.id}"),
            Button("✏️ Deadline", f"goal:edit:deadline:{active.id}"),
        ])
        rows.append([Button("🗑 Delete goal", f"goal:delete:{active.id}")])
    if has_goals:
        rows.append([Button("🎯 Choose active goal", "goal:choose")])
    rows.append([Button("➕ New goal", "goal:new")])
    rows.append([MENU_BUTTON])
    return Keyboard.of(*rows)


def goal_choice(goals: Iterable[Goal]) -> Keyboard:
    rows = [[Button(f"{'✅ ' if goal.is_active else ''}{goal.name}", f"goal:select:{goal.id}")] for goal in goals]
    rows.append([CANCEL_BUTTON])
    return Keyboard.of(*rows)


def debts_overview(unpaid: Iterable[Debt], has_paid: bool = False) -> Keyboard:
    """A button per open debt, then new debt and the settled list."""
    buttons = [
        Button(f"{'📤' if debt.debt_type == DebtType.I_OWE else '📥'} {debt.person_name}", f"debt:open:{debt.id}")
        for debt in unpaid
    ]
    rows = _chunked(buttons, 2)
    rows.append([Button("➕ New debt", "debt:new")])
    if has_paid:
        rows.append([Button("📜 Settled debts", "debt:paid")])
    rows.append([MENU_BUTTON])
    return Keyboard.of(*rows)


def debt_detail(debt: Debt) -> Keyboard:
    rows: list[list[Button]] = []
    if not debt.is_paid:
        rows.append([
            Button("💰 Record payment", f"debt:pay:{debt.id}"),
            Button("✅ Settled", f"debt:settle:{debt.id}"),
        ])
    rows.append([Button("📜 History", f"debt:history:{debt.id}")])
    rows.append([
        Button("✏️ Name", f"debt:edit:name:{debt.id}"),
        Button("✏️ Deadline", f"debt:edit:deadline:{debt.id}"),
        Button("✏️ Note", f"debt:edit:note:{debt.id}"),
    ])
    rows.append([Button("🗑 Delete", f"debt:delete:{debt.id}")])
    rows.append([Button("⬅️ Back", "menu:debts"), MENU_BUTTON])
    return Keyboard.of(*rows)


def debt_types() -> Keyboard:
    return Keyboard.of(
        [
            Button("📤 I owe", f"debt:type:{DebtType.I_OWE.value}"),
            Button("📥 They owe me", f"debt:type:{DebtType.THEY_OWE.value}"),
        ],
        [CANCEL_BUTTON],
    )


def debt_add_to_balance() -> Keyboard:
    return Keyboard.of(
        [Button("✅ Yes", "debt:balance:yes"), Button("❌ No", "debt:balance:no")],
        [CANCEL_BUTTON],
    )


def regular_overview(payments: Iterable[RegularPayment]) -> Keyboard:
    buttons = [
        Button(f"{'⏸ ' if payment.is_paused else ''}{payment.name}", f"reg:open:{payment.id}")
        for payment in payments
    ]
    return Keyboard.of(*_chunked(buttons, 2), [Button("➕ New payment", "reg:new")], [MENU_BUTTON])


def regular_detail(payment: RegularPayment) -> Keyboard:
    rows = [
        [Button("✅ Pay now", f"reg:paynow:{payment.id}"), Button("📜 History", f"reg:history:{payment.id}")],
    ]
    edits = [Button("📂 Category", f"reg:category:{payment.id}")]
    if payment.frequency == PaymentFrequency.MONTHLY:
        edits.insert(0, Button("📅 Day", f"reg:day:{payment.id}"))
    rows.append(edits)
    if payment.is_paused:
        pause = Button("▶️ Resume", f"reg:resume:{payment.id}")
    else:
        pause = Button("⏸ Pause", f"reg:pause:{payment.id}")
    rows.append([pause, Button("🗑 Delete", f"reg:delete:{payment.id}")])
    rows.append([Button("⬅️ Back", "menu:regular"), MENU_BUTTON])
    return Keyboard.of(*rows)


def regular_categories(items: Iterable[Category]) -> Keyboard:
    buttons = [Button(category.label, f"reg:setcat:{category.id}") for category in items]
    return Keyboard.of(*_chunked(buttons, 3), [Button("⏭ No category", "reg:nocat")], [CANCEL_BUTTON])


def frequencies() -> Keyboard:
    buttons = [Button(label, f"reg:freq:{freq.value}") for freq, label in FREQUENCY_LABELS.items()]
    return Keyboard.of(*_chunked(buttons, 2), [CANCEL_BUTTON])


def regular_pay() -> Keyboard:
    return Keyboard.of([Button("✅ Pay", "reg:pay")], [CANCEL_BUTTON])


def limits_overview(removable: Iterable[tuple[int, str]] = ()) -> Keyboard:
    """removable holds (limit id, category label) pairs offered for removal."""
    buttons = [Button(f"🗑 {label}", f"limit:delete:{limit_id}") for limit_id, label in removable]
    return Keyboard.of(*_chunked(buttons, 2), [Button("➕ Set limit", "limit:new")], [MENU_BUTTON])


def limit_categories(items: Iterable[Category]) -> Keyboard:
    buttons = [Button(category.label, f"limit:cat:{category.id}") for category in items]
    return Keyboard.of(*_chunked(buttons, 3), [CANCEL_BUTTON])


def help_menu() -> Keyboard:
    return Keyboard.of(
        [Button("🐞 Report a bug", "help:bug"), Button("💡 Suggest an idea", "help:idea")],
        [MENU_BUTTON],
    )


def settled_debts(debts: Iterable[Debt]) -> Keyboard:
    buttons = [Button(f"✅ {debt.person_name}", f"debt:open:{debt.id}") for debt in debts]
    return Keyboard.of(*_chunked(buttons, 2), [Button("⬅️ Back", "menu:debts"), MENU_BUTTON])

"""Tests for the income/expense wizard."""

from datetime import datetime
from decimal import Decimal

from budgetbot.domain.entities import Direction
from budgetbot.flow.engine import MENU_TEXT
from budgetbot.flow.steps import TxnAmount, TxnCategory, TxnDeleteConfirm, TxnDescription


def _expenses(ledger, user_id):
    return ledger.transactions.list_transactions(user_id, limit=None, direction=Direction.EXPENSE)


def test_start_shows_menu_and_seeds_categories(chat, ledger):
    """/start greets a new user with the main menu."""
    text = chat.say("/start")

    assert "Hi!" in text
    assert "menu:expense" in chat.transport.last_button_data()
    assert ledger.categories.find_by_name(42, "Food") is not None
    assert chat.step is None


def test_expense_with_description_records_on_category(chat, ledger, user_id, food, funded):
    """Amount plus description, then a category button: recorded at once."""
    chat.say("/expense")
    chat.say("150 taxi")
    assert isinstance(chat.step, TxnCategory)

    text = chat.press(f"cat:{food.id}")

    assert "✅ Expense recorded" in text
    assert "📝 taxi" in text
    assert "💰 Balance: 850 TJS" in text
    assert chat.step is None
    assert ledger.accounts.get_balance(user_id) == Decimal("850.00")


def test_expense_through_description_step(chat, ledger, user_id, food, funded):
    """Without a description the wizard asks for one."""
    chat.say("/expense")
    chat.say("99,90")
    chat.press(f"cat:{food.id}")
    assert isinstance(chat.step, TxnDescription)

    text = chat.say("groceries")

    assert "✅ Expense recorded" in text
    assert _expenses(ledger, user_id)[0].description == "groceries"
    assert ledger.accounts.get_balance(user_id) == Decimal("900.10")


def test_skip_description(chat, ledger, user_id, salary):
    chat.say("/income")
    chat.say("5000")
    chat.press(f"cat:{salary.id}")

    text = chat.press("txn:skip")

    assert "✅ Income recorded" in text
    transaction = ledger.transactions.list_transactions(user_id)[0]
    assert transaction.description is None
    assert transaction.direction == Direction.INCOME


def test_typed_category_name_creates_category(chat, ledger, user_id, funded):
    """Free text at the category step creates a quick category."""
    chat.say("/expense")
    chat.say("40")

    chat.say("Flowers")
    assert isinstance(chat.step, TxnDescription)
    chat.say("skip")

    flowers = ledger.categories.find_by_name(user_id, "Flowers")
    assert flowers is not None
    transaction = _expenses(ledger, user_id)[0]
    assert transaction.category_id == flowers.id
    assert transaction.description is None


def test_new_category_button(chat, ledger, user_id, funded):
    chat.say("/expense")
    chat.say("40 roses")
    chat.press("cat:new")

    text = chat.say("Flowers")

    assert "✅ Expense recorded" in text
    assert "Flowers" in text


def test_back_navigation_keeps_fields(chat, food, funded):
    """Back from the category step shows the amount prompt with the entered values."""
    chat.say("/expense")
    chat.say("150 lunch")

    text = chat.press("back:amount")

    assert "Entered so far: 150 TJS lunch" in text
    assert chat.step == TxnAmount(
        direction=Direction.EXPENSE, is_impulsive=False, amount=Decimal("150.00"), description="lunch"
    )

    chat.say("200 dinner")
    assert chat.step.amount == Decimal("200.00")


def test_continue_after_going_back(chat, transport, food, funded):
    """The amount step offers Continue only once an amount was entered."""
    chat.say("/expense")
    assert "back:categories" not in transport.last_button_data()
    chat.say("150 lunch")
    chat.press("back:amount")

    chat.press("back:categories")

    assert chat.step == TxnCategory(
        direction=Direction.EXPENSE, is_impulsive=False, amount=Decimal("150.00"), description="lunch"
    )
    text = chat.press(f"cat:{food.id}")
    assert "✅ Expense recorded" in text


def test_back_from_description_to_categories(chat, food, funded):
    chat.say("/expense")
    chat.say("10")
    chat.press(f"cat:{food.id}")

    chat.press("back:categories")

    assert isinstance(chat.step, TxnCategory)
    assert chat.step.amount == Decimal("10.00")


def test_cancel_at_description_writes_nothing(chat, ledger, user_id, food, funded):
    """Cancel mid-wizard: session gone, balance unchanged, no transaction."""
    chat.say("/expense")
    chat.say("200")
    chat.press(f"cat:{food.id}")
    assert isinstance(chat.step, TxnDescription)

    text = chat.press("cancel")

    assert text.startswith("Cancelled.")
    assert chat.step is None
    assert ledger.accounts.get_balance(user_id) == Decimal("1000.00")
    assert _expenses(ledger, user_id) == []


def test_cancel_command_mid_wizard(chat, ledger, user_id, funded):
    chat.say("/expense")
    chat.say("200")

    chat.say("/cancel")

    assert chat.step is None
    assert _expenses(ledger, user_id) == []


def test_invalid_amount_reprompts(chat):
    """Malformed input never advances the wizard."""
    chat.say("/expense")

    text = chat.say("a lot")

    assert text.startswith("⚠️ Start with a positive number")
    assert "Enter the amount" in text
    assert isinstance(chat.step, TxnAmount)

    chat.say("-5")
    assert isinstance(chat.step, TxnAmount)


def test_impulsive_toggle(chat, ledger, user_id, food, funded):
    chat.say("/expense")
    chat.press("txn:impulsive")
    assert chat.step.is_impulsive is True

    chat.say("75 sneakers")
    text = chat.press(f"cat:{food.id}")

    assert "⚡ Impulsive purchase" in text
    assert _expenses(ledger, user_id)[0].is_impulsive is True


def test_impulse_command(chat):
    chat.say("/impulse")

    assert chat.step == TxnAmount(direction=Direction.EXPENSE, is_impulsive=True)


def test_insufficient_funds_ends_wizard(chat, ledger, user_id, food, funded):
    chat.say("/expense")
    chat.say("5000 tv")

    text = chat.press(f"cat:{food.id}")

    assert text == "❌ Not enough money: available 1 000 TJS, needed 5 000 TJS."
    assert chat.step is None
    assert ledger.accounts.get_balance(user_id) == Decimal("1000.00")


def test_blocked_category_short_circuits(chat, ledger, user_id, food, funded):
    """A blocked category ends the wizard before the ledger is called."""
    ledger.limits.set_limit(user_id, food.id, Decimal("100"), now=ledger.clock())
    ledger.record_transaction(user_id, food.id, Decimal("100"), Direction.EXPENSE)

    chat.say("/expense")
    chat.say("5")
    text = chat.press(f"cat:{food.id}")

    assert text.startswith("🚫 The limit for this category is exceeded")
    assert "11.03.2026 12:00" in text
    assert chat.step is None
    assert ledger.accounts.get_balance(user_id) == Decimal("900.00")


def test_block_from_last_month_does_not_reject_new_month(chat, ledger, user_id, food, funded, clock):
    """A block that outlives the month it was set in is lifted by the monthly reset."""
    clock.now = datetime(2026, 3, 31, 23, 0)
    ledger.limits.set_limit(user_id, food.id, Decimal("100"), now=clock())
    ledger.record_transaction(user_id, food.id, Decimal("100"), Direction.EXPENSE)
    assert ledger.limits.get_limit_for_category(user_id, food.id).blocked_until == datetime(2026, 4, 1, 23, 0)

    clock.now = datetime(2026, 4, 1, 9, 0)
    chat.say("/expense")
    chat.say("5 bread")
    text = chat.press(f"cat:{food.id}")

    assert "✅ Expense recorded" in text
    assert "💰 Balance: 895 TJS" in text
    limit = ledger.limits.get_limit_for_category(user_id, food.id)
    assert limit.spent_amount == Decimal("5.00")
    assert limit.is_blocked is False


def test_limit_warning_in_result(chat, ledger, user_id, food, funded):
    ledger.limits.set_limit(user_id, food.id, Decimal("1000"), now=ledger.clock())

    chat.say("/expense")
    chat.say("520 groceries")
    text = chat.press(f"cat:{food.id}")

    assert "🟡 50% of the Food limit used (520 TJS of 1 000 TJS)." in text


def test_limit_block_in_result(chat, ledger, user_id, food, funded):
    ledger.limits.set_limit(user_id, food.id, Decimal("100"), now=ledger.clock())

    chat.say("/expense")
    chat.say("120 party")
    text = chat.press(f"cat:{food.id}")

    assert "🔴 The Food limit is exceeded" in text
    assert "blocked until 11.03.2026" in text


def test_undo(chat, engine, transport, ledger, user_id, food, funded):
    """The result message offers undo; a second undo is a no-op."""
    chat.say("/expense")
    chat.say("300 shoes")
    chat.press(f"cat:{food.id}")
    transaction_id = _expenses(ledger, user_id)[0].id
    result_message_id = transport.last["message_id"]

    text = chat.press(f"txn:undo:{transaction_id}")

    assert text.startswith("↩️ Transaction cancelled.")
    assert "1 000 TJS" in text
    assert ledger.accounts.get_balance(user_id) == Decimal("1000.00")

    engine.handle_action(user_id, user_id, result_message_id, f"txn:undo:{transaction_id}")
    assert transport.last_text == "This transaction was already cancelled."
    assert ledger.accounts.get_balance(user_id) == Decimal("1000.00")


def test_buttons_edit_typed_text_sends(chat, transport, food, funded):
    """Button turns edit the pressed message; typed turns send new ones."""
    chat.say("/expense")
    assert len(transport.sent) == 1
    chat.say("150")
    assert len(transport.sent) == 2
    category_message = transport.last["message_id"]

    chat.press(f"cat:{food.id}")

    assert len(transport.sent) == 2
    assert transport.edits[-1]["message_id"] == category_message
    assert transport.answered == ["i-1"]


def test_text_without_wizard_shows_menu(chat, user_id):
    assert chat.say("hello") == MENU_TEXT
    assert chat.step is None


def test_unknown_command(chat):
    text = chat.say("/fly")

    assert text.startswith("Unknown command /fly.")


def test_command_replaces_open_wizard(chat, food, funded):
    chat.say("/expense")
    chat.say("10")

    text = chat.say("/balance")

    assert text.startswith("💰 Balance: 1 000 TJS")
    assert chat.step is None


def test_balance_and_stats_screens(chat, ledger, user_id, food, funded):
    ledger.record_transaction(user_id, food.id, Decimal("120"), Direction.EXPENSE, is_impulsive=True)

    balance = chat.say("/balance")
    stats = chat.say("/stats")

    assert "➖ Expenses: 120 TJS" in balance
    assert "Statistics since 01.03.2026" in stats
    assert "🍕 Food: 120 TJS" in stats
    assert "⚡ Impulsive purchases: 120 TJS (1)" in stats


# History

def test_history_lists_newest_first(chat, ledger, user_id, food, salary):
    ledger.record_transaction(user_id, salary.id, Decimal("500"), Direction.INCOME)
    ledger.record_transaction(user_id, food.id, Decimal("120"), Direction.EXPENSE, description="lunch")

    text = chat.say("/history")

    assert text.startswith("📜 Last 2 transactions")
    assert "1. 10.03.2026 −120 TJS · 🍕 Food (lunch)" in text
    assert "2. 10.03.2026 +500 TJS" in text
    expense, income = ledger.transactions.list_transactions(user_id)
    assert chat.transport.last_button_data()[:2] == [f"txn:delete:{expense.id}", f"txn:delete:{income.id}"]


def test_history_from_menu_when_empty(chat):
    chat.say("/start")

    text = chat.press("menu:history")

    assert text == "📜 No transactions yet."


def test_delete_transaction_from_history(chat, ledger, user_id, food, funded):
    """Deleting asks first, then reverses the balance and hides the transaction."""
    result = ledger.record_transaction(user_id, food.id, Decimal("300"), Direction.EXPENSE)
    chat.say("/history")

    text = chat.press(f"txn:delete:{result.transaction.id}")

    assert text.startswith("🗑 Delete this transaction?")
    assert chat.step == TxnDeleteConfirm(transaction_id=result.transaction.id)

    text = chat.press("confirm:yes")

    assert text == "🗑 Transaction deleted.\n💰 Balance: 1 000 TJS"
    assert chat.step is None
    assert ledger.accounts.get_balance(user_id) == Decimal("1000.00")
    assert _expenses(ledger, user_id) == []


def test_cancel_transaction_delete_keeps_it(chat, ledger, user_id, food, funded):
    result = ledger.record_transaction(user_id, food.id, Decimal("300"), Direction.EXPENSE)
    chat.say("/history")
    chat.press(f"txn:delete:{result.transaction.id}")

    chat.press("cancel")

    assert ledger.accounts.get_balance(user_id) == Decimal("700.00")
    assert len(_expenses(ledger, user_id)) == 1

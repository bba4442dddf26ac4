"""Tests for the goal, debt, regular payment, limit, category and help wizards."""

from datetime import datetime
from decimal import Decimal

from budgetbot.domain.entities import DebtType, Direction, PaymentFrequency
from budgetbot.flow.steps import (
    CategoryRename,
    DebtAddToBalance,
    DebtDeleteConfirm,
    DebtEditName,
    DebtPaymentAmount,
    GoalDeadline,
    GoalDeleteConfirm,
    GoalTarget,
    HelpFeedback,
    LimitAmount,
    RegularDay,
    RegularDeleteConfirm,
    RegularEditDay,
    RegularPayConfirm,
)


# Goals

def test_create_goal_wizard(chat, ledger, user_id):
    chat.say("/goal")
    chat.say("New laptop")
    assert chat.step == GoalTarget(name="New laptop")

    chat.say("8000")
    assert isinstance(chat.step, GoalDeadline)

    text = chat.say("31.12.2026")

    assert text.startswith("✅ Goal created")
    assert "It is your active goal now." in text
    goal = ledger.goals.get_active_goal(user_id)
    assert goal.name == "New laptop"
    assert goal.target_amount == Decimal("8000.00")
    assert goal.deadline == datetime(2026, 12, 31)


def test_goal_deadline_skip_and_queue(chat, ledger, user_id):
    """A second goal waits while another is active."""
    ledger.goals.create_goal(user_id, "First", Decimal("100"))
    chat.say("/goal")
    chat.say("Second")
    chat.say("500")

    text = chat.press("goal:skip")

    assert "Another goal is active" in text
    second = [goal for goal in ledger.goals.list_goals(user_id) if goal.name == "Second"][0]
    assert second.deadline is None
    assert second.is_active is False


def test_goal_deadline_in_past_reprompts(chat):
    chat.say("/goal")
    chat.say("Trip")
    chat.say("500")

    text = chat.say("01.01.2020")

    assert text.startswith("⚠️ The date cannot be in the past")
    assert isinstance(chat.step, GoalDeadline)


def test_deposit_completes_goal(chat, ledger, user_id, funded):
    """Depositing more than needed completes the goal and keeps the excess."""
    goal = ledger.goals.create_goal(user_id, "Phone", Decimal("1000"))
    ledger.deposit_to_goal(user_id, Decimal("900"))
    funded("500")

    chat.say("/deposit")
    text = chat.say("150")

    assert "✅ 100 TJS put aside" in text
    assert "🎉 Goal reached!" in text
    assert "50 TJS was more than needed" in text
    goal = ledger.goals.get_goal(user_id, goal.id)
    assert goal.is_completed is True
    assert goal.is_active is False
    assert ledger.accounts.get_balance(user_id) == Decimal("500.00")


def test_deposit_without_goal(chat, user_id):
    text = chat.say("/deposit")

    assert text == "⚠️ No active goal"
    assert chat.step is None


def test_goal_buttons(chat, ledger, user_id, funded):
    """Deposit and withdraw from the goals screen."""
    ledger.goals.create_goal(user_id, "Bike", Decimal("3000"))
    goal = ledger.goals.get_active_goal(user_id)

    chat.say("/goals")
    chat.press(f"goal:deposit:{goal.id}")
    chat.say("400")
    assert ledger.goals.get_goal(user_id, goal.id).current_amount == Decimal("400.00")

    chat.say("/goals")
    chat.press(f"goal:withdraw:{goal.id}")
    text = chat.say("100")

    assert "Money returned to the balance" in text
    assert ledger.goals.get_goal(user_id, goal.id).current_amount == Decimal("300.00")
    assert ledger.accounts.get_balance(user_id) == Decimal("700.00")


def test_withdraw_too_much(chat, ledger, user_id):
    goal = ledger.goals.create_goal(user_id, "Bike", Decimal("3000"))

    chat.say("/withdraw")
    text = chat.say("10")

    assert text.startswith("❌ Not enough money: available 0 TJS")
    assert ledger.goals.get_goal(user_id, goal.id).current_amount == Decimal("0.00")


def test_choose_active_goal(chat, ledger, user_id):
    ledger.goals.create_goal(user_id, "First", Decimal("100"))
    second = ledger.goals.create_goal(user_id, "Second", Decimal("100"))

    chat.say("/goals")
    chat.press("goal:choose")
    text = chat.press(f"goal:select:{second.id}")

    assert text.startswith("✅ Active goal changed")
    assert ledger.goals.get_active_goal(user_id).id == second.id


def test_edit_goal(chat, ledger, user_id):
    goal = ledger.goals.create_goal(user_id, "Bike", Decimal("3000"))

    chat.say("/goals")
    chat.press(f"goal:edit:name:{goal.id}")
    chat.say("Road bike")
    chat.say("/goals")
    chat.press(f"goal:edit:target:{goal.id}")
    chat.say("3500")

    goal = ledger.goals.get_goal(user_id, goal.id)
    assert goal.name == "Road bike"
    assert goal.target_amount == Decimal("3500.00")



def test_delete_goal_returns_savings(chat, ledger, user_id, funded):
    """Deleting a goal asks first and moves its savings back to the balance."""
    goal = ledger.goals.create_goal(user_id, "Bike", Decimal("3000"))
    ledger.deposit_to_goal(user_id, Decimal("400"))

    chat.say("/goals")
    text = chat.press(f"goal:delete:{goal.id}")

    assert text.startswith("🗑 Delete this goal?")
    assert "The saved 400 TJS goes back to your balance." in text
    assert chat.step == GoalDeleteConfirm(goal_id=goal.id)

    text = chat.press("confirm:yes")

    assert text == "🗑 Goal Bike deleted\n400 TJS returned to the balance\n💰 Balance: 1 000 TJS"
    assert chat.step is None
    assert ledger.goals.list_goals(user_id) == []
    assert ledger.accounts.get_balance(user_id) == Decimal("1000.00")


def test_cancel_goal_delete_keeps_goal(chat, ledger, user_id):
    goal = ledger.goals.create_goal(user_id, "Trip", Decimal("500"))

    chat.say("/goals")
    chat.press(f"goal:delete:{goal.id}")
    chat.press("cancel")

    assert ledger.goals.get_active_goal(user_id).id == goal.id


# Debts

def test_create_debt_i_owe_added_to_balance(chat, ledger, user_id):
    chat.say("/debts")
    chat.press("debt:new")
    chat.press("debt:type:i_owe")
    chat.say("Bob")
    chat.say("300")
    chat.press("debt:skip")
    chat.say("for rent")
    assert isinstance(chat.step, DebtAddToBalance)

    text = chat.press("debt:balance:yes")

    assert text.startswith("✅ Debt saved")
    assert "💰 Balance: 300 TJS" in text
    debt = ledger.debts.list_debts(user_id)[0]
    assert debt.debt_type == DebtType.I_OWE
    assert debt.description == "for rent"
    assert ledger.accounts.get_balance(user_id) == Decimal("300.00")


def test_create_debt_they_owe(chat, ledger, user_id):
    """They-owe debts are saved right after the description."""
    chat.say("/debt")
    chat.press("debt:new")
    chat.press("debt:type:they_owe")
    chat.say("Ali")
    chat.say("250")
    chat.say("01.04.2026")

    text = chat.press("debt:skip")

    assert text.startswith("✅ Debt saved")
    debt = ledger.debts.list_debts(user_id)[0]
    assert debt.debt_type == DebtType.THEY_OWE
    assert debt.due_date == datetime(2026, 4, 1)
    assert ledger.accounts.get_balance(user_id) == Decimal("0.00")


def test_pay_debt_deep_link(chat, ledger, user_id, funded):
    """/pay_debt_<id> opens the payment step for that debt."""
    debt = ledger.create_debt(user_id, "Bob", Decimal("400"), DebtType.I_OWE)

    listing = chat.say("/debts")
    assert f"/pay_debt_{debt.id}" in listing

    chat.say(f"/pay_debt_{debt.id}")
    assert chat.step == DebtPaymentAmount(debt_id=debt.id)
    text = chat.say("150")

    assert "✅ Payment of 150 TJS recorded" in text
    assert "Remaining: 250 TJS" in text
    assert "💰 Balance: 850 TJS" in text

    chat.say(f"/pay_debt_{debt.id}")
    text = chat.say("1000")
    assert "🎉 The debt with Bob is fully paid" in text
    assert ledger.accounts.get_balance(user_id) == Decimal("600.00")


def test_pay_debt_unknown_or_paid(chat, ledger, user_id):
    text = chat.say("/pay_debt_999")
    assert text == "⚠️ Debt 999 not found"

    debt = ledger.create_debt(user_id, "Ali", Decimal("10"), DebtType.THEY_OWE)
    ledger.pay_debt(user_id, debt.id, Decimal("10"))
    text = chat.say(f"/pay_debt_{debt.id}")
    assert "already paid" in text
    assert chat.step is None



def test_debt_detail_history_and_payment(chat, ledger, user_id, funded):
    debt = ledger.create_debt(user_id, "Bob", Decimal("400"), DebtType.I_OWE)
    ledger.pay_debt(user_id, debt.id, Decimal("150"))

    chat.say("/debts")
    text = chat.press(f"debt:open:{debt.id}")
    assert text == "📤 I owe\nBob: 250 TJS of 400 TJS"

    text = chat.press(f"debt:history:{debt.id}")
    assert text == "📜 Bob: payments\n\n• 10.03.2026: 150 TJS"

    chat.press(f"debt:open:{debt.id}")
    chat.press(f"debt:pay:{debt.id}")
    assert chat.step == DebtPaymentAmount(debt_id=debt.id)
    text = chat.say("250")
    assert "🎉 The debt with Bob is fully paid" in text


def test_settle_debt_without_payment(chat, ledger, user_id):
    """Settling closes the debt without touching the balance; it moves to the settled list."""
    debt = ledger.create_debt(user_id, "Ali", Decimal("250"), DebtType.THEY_OWE)

    chat.say("/debts")
    chat.press(f"debt:open:{debt.id}")
    text = chat.press(f"debt:settle:{debt.id}")

    assert "✅ Settled on 10.03.2026" in text
    assert f"debt:pay:{debt.id}" not in chat.transport.last_button_data()
    assert ledger.debts.get_debt(user_id, debt.id).is_paid is True
    assert ledger.accounts.get_balance(user_id) == Decimal("0.00")

    chat.press("menu:debts")
    text = chat.press("debt:paid")

    assert "📥 They owe me: Ali, 250 TJS" in text
    assert f"debt:open:{debt.id}" in chat.transport.last_button_data()


def test_edit_debt_fields(chat, ledger, user_id):
    debt = ledger.create_debt(
        user_id, "Bob", Decimal("400"), DebtType.I_OWE, due_date=datetime(2026, 4, 1), description="rent"
    )

    chat.say("/debts")
    chat.press(f"debt:open:{debt.id}")
    chat.press(f"debt:edit:name:{debt.id}")
    assert chat.step == DebtEditName(debt_id=debt.id)
    text = chat.say("Robert")
    assert text.startswith("✅ Debt updated\n📤 I owe: Robert: 400 TJS")

    chat.say("/debts")
    chat.press(f"debt:open:{debt.id}")
    chat.press(f"debt:edit:deadline:{debt.id}")
    chat.say("no")

    chat.say("/debts")
    chat.press(f"debt:open:{debt.id}")
    chat.press(f"debt:edit:note:{debt.id}")
    chat.say("skip")

    debt = ledger.debts.get_debt(user_id, debt.id)
    assert debt.person_name == "Robert"
    assert debt.due_date is None
    assert debt.description is None


def test_delete_debt(chat, ledger, user_id):
    debt = ledger.create_debt(user_id, "Bob", Decimal("400"), DebtType.I_OWE)

    chat.say("/debts")
    chat.press(f"debt:open:{debt.id}")
    text = chat.press(f"debt:delete:{debt.id}")
    assert text.startswith("🗑 Delete the debt with Bob?")
    assert chat.step == DebtDeleteConfirm(debt_id=debt.id)

    text = chat.press("confirm:yes")

    assert text == "🗑 The debt with Bob was deleted"
    assert ledger.debts.list_debts(user_id) == []


# Regular payments

def test_create_monthly_payment(chat, ledger, user_id):
    chat.say("/regular")
    chat.press("reg:new")
    chat.say("Rent")
    chat.say("2000")
    chat.press("reg:freq:monthly")
    assert isinstance(chat.step, RegularDay)

    text = chat.say("40")
    assert text.startswith("⚠️ Enter a day of the month")

    text = chat.say("31")

    assert text.startswith("✅ Regular payment saved")
    payment = ledger.recurring.list_regular_payments(user_id)[0]
    assert payment.day_of_month == 31
    assert payment.next_due_date == datetime(2026, 4, 30, 12, 0)


def test_create_weekly_payment_with_skip(chat, ledger, user_id):
    chat.say("/regular")
    chat.press("reg:new")
    chat.say("Gym")
    chat.say("150")
    chat.press("reg:freq:weekly")

    chat.press("reg:skip")

    payment = ledger.recurring.list_regular_payments(user_id)[0]
    assert payment.frequency == PaymentFrequency.WEEKLY
    assert payment.next_due_date == datetime(2026, 3, 17, 12, 0)


def test_pay_regular_deep_link(chat, ledger, user_id, funded, clock):
    payment = ledger.recurring.create_regular_payment(
        user_id, "Internet", Decimal("100"), PaymentFrequency.MONTHLY, day_of_month=15, now=clock()
    )

    listing = chat.say("/regular")
    assert f"/pay_regular_{payment.id}" in listing

    chat.say(f"/pay_regular_{payment.id}")
    assert chat.step == RegularPayConfirm(payment_id=payment.id)
    text = chat.press("reg:pay")

    assert text.startswith("✅ Internet paid")
    assert "Next payment: 15.04.2026" in text
    assert "💰 Balance: 900 TJS" in text



def _internet(ledger, user_id, clock):
    return ledger.recurring.create_regular_payment(
        user_id, "Internet", Decimal("100"), PaymentFrequency.MONTHLY, day_of_month=15, now=clock()
    )


def test_pause_and_resume_payment(chat, ledger, user_id, clock):
    """Paused payments stay listed but are never due."""
    payment = _internet(ledger, user_id, clock)

    chat.say("/regular")
    chat.press(f"reg:open:{payment.id}")
    text = chat.press(f"reg:pause:{payment.id}")

    assert text.startswith("🔄 Internet: 100 TJS, monthly (paused)")
    assert f"reg:resume:{payment.id}" in chat.transport.last_button_data()
    assert ledger.recurring.get_due_payments(user_id, now=datetime(2026, 4, 20)) == []

    chat.press(f"reg:resume:{payment.id}")

    assert ledger.recurring.get_regular_payment(user_id, payment.id).is_paused is False
    assert len(ledger.recurring.get_due_payments(user_id, now=datetime(2026, 4, 20))) == 1


def test_regular_payment_history(chat, ledger, user_id, funded, clock):
    payment = _internet(ledger, user_id, clock)

    chat.say("/regular")
    chat.press(f"reg:open:{payment.id}")
    text = chat.press(f"reg:history:{payment.id}")
    assert text == "📜 Internet: payment history\n\nNo payments yet."

    chat.press(f"reg:open:{payment.id}")
    chat.press(f"reg:paynow:{payment.id}")
    assert chat.step == RegularPayConfirm(payment_id=payment.id)
    chat.press("reg:pay")

    chat.say("/regular")
    chat.press(f"reg:open:{payment.id}")
    text = chat.press(f"reg:history:{payment.id}")
    assert text == "📜 Internet: payment history\n\n• 10.03.2026: 100 TJS"


def test_edit_payment_day(chat, ledger, user_id, funded, clock):
    """A new day re-anchors the next due date from the last payment."""
    payment = _internet(ledger, user_id, clock)
    ledger.pay_regular(user_id, payment.id)

    chat.say("/regular")
    chat.press(f"reg:open:{payment.id}")
    chat.press(f"reg:day:{payment.id}")
    assert chat.step == RegularEditDay(payment_id=payment.id)

    text = chat.say("31")

    assert text == "✅ Day changed\nInternet: 100 TJS, monthly, next 30.04.2026"
    payment = ledger.recurring.get_regular_payment(user_id, payment.id)
    assert payment.day_of_month == 31
    assert payment.next_due_date == datetime(2026, 4, 30, 12, 0)


def test_day_button_only_for_monthly(chat, ledger, user_id, clock):
    payment = ledger.recurring.create_regular_payment(
        user_id, "Gym", Decimal("150"), PaymentFrequency.WEEKLY, now=clock()
    )

    chat.say("/regular")
    chat.press(f"reg:open:{payment.id}")

    assert f"reg:day:{payment.id}" not in chat.transport.last_button_data()
    assert f"reg:category:{payment.id}" in chat.transport.last_button_data()


def test_set_payment_category(chat, ledger, user_id, food, funded, clock):
    """Payments are booked to the chosen category."""
    payment = _internet(ledger, user_id, clock)

    chat.say("/regular")
    chat.press(f"reg:open:{payment.id}")
    chat.press(f"reg:category:{payment.id}")
    text = chat.press(f"reg:setcat:{food.id}")

    assert "📂 🍕 Food" in text
    assert chat.step is None
    _, transaction, _ = ledger.pay_regular(user_id, payment.id)
    assert transaction.category_id == food.id

    chat.press(f"reg:category:{payment.id}")
    chat.press("reg:nocat")

    assert ledger.recurring.get_regular_payment(user_id, payment.id).category_id is None


def test_delete_regular_payment(chat, ledger, user_id, clock):
    payment = _internet(ledger, user_id, clock)

    chat.say("/regular")
    chat.press(f"reg:open:{payment.id}")
    text = chat.press(f"reg:delete:{payment.id}")
    assert "No more reminders will be sent for it." in text
    assert chat.step == RegularDeleteConfirm(payment_id=payment.id)

    text = chat.press("confirm:yes")

    assert text == "🗑 Internet deleted"
    assert ledger.recurring.list_regular_payments(user_id) == []


# Limits

def test_set_limit_wizard(chat, ledger, user_id, food):
    chat.say("/limits")
    chat.press("limit:new")
    chat.press(f"limit:cat:{food.id}")
    assert chat.step == LimitAmount(category_id=food.id)

    text = chat.say("1500")

    assert text.startswith("✅ Limit saved")
    assert "🍕 Food: 0 TJS of 1 500 TJS (0%)" in text
    assert ledger.limits.get_limit_for_category(user_id, food.id).amount == Decimal("1500.00")


def test_limits_screen_shows_block(chat, ledger, user_id, food, funded):
    ledger.limits.set_limit(user_id, food.id, Decimal("100"), now=ledger.clock())
    ledger.record_transaction(user_id, food.id, Decimal("100"), Direction.EXPENSE)

    text = chat.say("/limits")

    assert "🚫 blocked until 11.03.2026" in text



def test_remove_limit(chat, ledger, user_id, food):
    limit = ledger.limits.set_limit(user_id, food.id, Decimal("500"), now=ledger.clock())

    chat.say("/limits")
    text = chat.press(f"limit:delete:{limit.id}")

    assert "No limits yet" in text
    assert ledger.limits.get_limit_for_category(user_id, food.id) is None


# Categories

def test_rename_category(chat, ledger, user_id, food):
    chat.say("/categories")
    text = chat.press(f"category:open:{food.id}")
    assert text.startswith("🗂 🍕 Food (expenses)")

    chat.press(f"category:rename:{food.id}")
    assert chat.step == CategoryRename(category_id=food.id)
    text = chat.say("Groceries")

    assert text == "✅ Category renamed to 🍕 Groceries"
    assert ledger.categories.get_category(user_id, food.id).name == "Groceries"


def test_archive_category_keeps_transactions(chat, ledger, user_id, food, funded):
    ledger.record_transaction(user_id, food.id, Decimal("50"), Direction.EXPENSE)

    chat.say("/start")
    chat.press("menu:categories")
    chat.press(f"category:open:{food.id}")
    chat.press(f"category:archive:{food.id}")

    assert f"category:open:{food.id}" not in chat.transport.last_button_data()
    assert food.id not in [category.id for category in ledger.categories.list_categories(user_id)]
    assert len(ledger.transactions.list_transactions(user_id, direction=Direction.EXPENSE)) == 1


# Help

def test_help_feedback_forwarded(chat, transport, user_id):
    chat.say("/help")
    chat.press("help:bug")
    assert chat.step == HelpFeedback(kind="bug")

    text = chat.say("The stats screen is empty")

    assert text.startswith("🙏 Thank you!")
    forwarded = [message for message in transport.sent if message["chat_id"] == 999]
    assert len(forwarded) == 1
    assert "🐞 Bug report from user 42" in forwarded[0]["text"]
    assert "The stats screen is empty" in forwarded[0]["text"]

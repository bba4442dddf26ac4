"""Regular payments: overview, details, creation, editing and paying."""

from budgetbot.domain.entities import Direction, PaymentFrequency, RegularPayment
from budgetbot.domain.errors import NotFoundError, ValidationError
from budgetbot.flow import keyboards
from budgetbot.flow.inputs import button_id, read_amount, read_optional_date, read_text
from budgetbot.flow.keyboards import FREQUENCY_LABELS
from budgetbot.flow.registry import Registry
from budgetbot.flow.steps import (
    RegularAmount,
    RegularDay,
    RegularDeleteConfirm,
    RegularEditCategory,
    RegularEditDay,
    RegularFrequency,
    RegularName,
    RegularPayConfirm,
)
from budgetbot.flow.turn import Turn
from budgetbot.utils.date_parser import format_date


def describe_payment(turn: Turn, payment: RegularPayment) -> str:
    line = f"{payment.name}: {turn.money(payment.amount)}, {FREQUENCY_LABELS[payment.frequency].lower()}"
    if payment.is_paused:
        return f"{line} (paused)"
    return f"{line}, next {format_date(payment.next_due_date)}"


def show_regular(turn: Turn) -> None:
    payments = turn.ledger.recurring.list_regular_payments(turn.user_id)
    summary = turn.ledger.recurring.monthly_summary(turn.user_id, now=turn.now)
    lines = ["🔄 Regular payments", ""]
    if not payments:
        lines.append("No regular payments yet.")
    for payment in payments:
        lines.append(f"• {describe_payment(turn, payment)}  /pay_regular_{payment.id}")
    if summary.count:
        lines.extend([
            "",
            f"This month: {turn.money(summary.total)} in {summary.count} monthly payments",
            f"✅ Paid: {turn.money(summary.paid)} ({summary.paid_count})",
            f"⏳ Pending: {turn.money(summary.pending)} ({summary.pending_count})",
        ])
    turn.show("\n".join(lines), keyboards.regular_overview(payments))


def show_payment(turn: Turn, payment_id: int) -> None:
    payment = turn.ledger.recurring.get_regular_payment(turn.user_id, payment_id)
    lines = [f"🔄 {describe_payment(turn, payment)}"]
    if payment.day_of_month is not None:
        lines.append(f"📅 Day {payment.day_of_month} of the month")
    if payment.category_id is not None:
        category = turn.ledger.categories.get_category(turn.user_id, payment.category_id)
        lines.append(f"📂 {category.label}")
    if payment.last_paid_date is not None:
        lines.append(f"Last paid: {format_date(payment.last_paid_date)}")
    turn.show("\n".join(lines), keyboards.regular_detail(payment))


def show_history(turn: Turn, payment_id: int) -> None:
    payment = turn.ledger.recurring.get_regular_payment(turn.user_id, payment_id)
    history = turn.ledger.recurring.list_history(turn.user_id, payment.id)
    lines = [f"📜 {payment.name}: payment history", ""]
    if not history:
        lines.append("No payments yet.")
    for item in history:
        lines.append(f"• {format_date(item.paid_at)}: {turn.money(item.amount)}")
    turn.show("\n".join(lines), keyboards.back(f"reg:open:{payment.id}"))


def _create(turn: Turn, step: RegularDay, day_of_month=None, start_date=None) -> None:
    payment = turn.ledger.recurring.create_regular_payment(
        turn.user_id,
        step.name,
        step.amount,
        step.frequency,
        day_of_month=day_of_month,
        start_date=start_date,
        now=turn.now,
    )
    turn.finish(f"✅ Regular payment saved\n{describe_payment(turn, payment)}")


def _read_day(text: str) -> int:
    try:
        day = int(text.strip())
    except ValueError as e:
        raise ValidationError("Enter a day of the month from 1 to 31") from e
    if not 1 <= day <= 31:
        raise ValidationError("Enter a day of the month from 1 to 31")
    return day


def register_handlers(registry: Registry) -> None:
    """Register regular payment handlers."""

    @registry.on_command("regular")
    def regular_command(turn: Turn, argument: str) -> None:
        show_regular(turn)

    @registry.on_action("menu:regular")
    def regular_button(turn: Turn, step, args: list[str]) -> None:
        show_regular(turn)

    @registry.on_action("reg:new")
    def new_payment(turn: Turn, step, args: list[str]) -> None:
        turn.advance(RegularName())

    @registry.prompt(RegularName)
    def name_prompt(turn: Turn, step: RegularName):
        return "🔄 New regular payment\n\nWhat is it called? (rent, internet, ...)", keyboards.cancel()

    @registry.on_text(RegularName)
    def name_entered(turn: Turn, step: RegularName, text: str) -> None:
        turn.advance(RegularAmount(name=read_text(text)))

    @registry.prompt(RegularAmount)
    def amount_prompt(turn: Turn, step: RegularAmount):
        return f"🔄 {step.name}\n\nHow much is it?", keyboards.cancel()

    @registry.on_text(RegularAmount)
    def amount_entered(turn: Turn, step: RegularAmount, text: str) -> None:
        turn.advance(RegularFrequency(name=step.name, amount=read_amount(text)))

    @registry.prompt(RegularFrequency)
    def frequency_prompt(turn: Turn, step: RegularFrequency):
        return f"🔄 {step.name}: {turn.money(step.amount)}\n\nHow often?", keyboards.frequencies()

    @registry.on_action("reg:freq", RegularFrequency)
    def frequency_chosen(turn: Turn, step: RegularFrequency, args: list[str]) -> None:
        try:
            frequency = PaymentFrequency(args[0])
        except (IndexError, ValueError) as e:
            raise NotFoundError(f"Unknown frequency {':'.join(args)!r}") from e
        turn.advance(RegularDay(name=step.name, amount=step.amount, frequency=frequency))

    @registry.prompt(RegularDay)
    def day_prompt(turn: Turn, step: RegularDay):
        header = f"🔄 {step.name}: {turn.money(step.amount)}, {FREQUENCY_LABELS[step.frequency].lower()}"
        if step.frequency == PaymentFrequency.MONTHLY:
            return f"{header}\n\nOn which day of the month (1-31)?", keyboards.cancel()
        return (
            f"{header}\n\nWhen is the first payment? Enter a date (DD.MM.YYYY) or press Skip:",
            keyboards.skip("reg:skip"),
        )

    @registry.on_text(RegularDay)
    def day_entered(turn: Turn, step: RegularDay, text: str) -> None:
        if step.frequency == PaymentFrequency.MONTHLY:
            _create(turn, step, day_of_month=_read_day(text))
        else:
            _create(turn, step, start_date=read_optional_date(text, turn.now.date()))

    @registry.on_action("reg:skip", RegularDay)
    def day_skipped(turn: Turn, step: RegularDay, args: list[str]) -> None:
        if step.frequency == PaymentFrequency.MONTHLY:
            raise ValidationError("Monthly payments need a day of the month")
        _create(turn, step)

    # Paying, started from the /pay_regular_<id> link
    @registry.on_command_prefix("pay_regular_")
    def pay_regular_link(turn: Turn, suffix: str) -> None:
        payment = turn.ledger.recurring.get_regular_payment(turn.user_id, button_id([suffix]))
        turn.advance(RegularPayConfirm(payment_id=payment.id))

    @registry.prompt(RegularPayConfirm)
    def pay_prompt(turn: Turn, step: RegularPayConfirm):
        payment = turn.ledger.recurring.get_regular_payment(turn.user_id, step.payment_id)
        balance = turn.ledger.accounts.get_balance(turn.user_id)
        text = (
            f"🔄 {describe_payment(turn, payment)}\n\n"
            f"Pay {turn.money(payment.amount)} from your balance ({turn.money(balance)}) now?"
        )
        return text, keyboards.regular_pay()

    @registry.on_action("reg:pay", RegularPayConfirm)
    def pay_confirmed(turn: Turn, step: RegularPayConfirm, args: list[str]) -> None:
        payment, _, account = turn.ledger.pay_regular(turn.user_id, step.payment_id)
        turn.finish(
            f"✅ {payment.name} paid\n"
            f"Next payment: {format_date(payment.next_due_date)}\n"
            f"💰 Balance: {turn.money(account.balance)}"
        )

    # Details and editing
    @registry.on_action("reg:open")
    def payment_opened(turn: Turn, step, args: list[str]) -> None:
        show_payment(turn, button_id(args))

    @registry.on_action("reg:paynow")
    def pay_button(turn: Turn, step, args: list[str]) -> None:
        payment = turn.ledger.recurring.get_regular_payment(turn.user_id, button_id(args))
        turn.advance(RegularPayConfirm(payment_id=payment.id))

    @registry.on_action("reg:history")
    def history_button(turn: Turn, step, args: list[str]) -> None:
        show_history(turn, button_id(args))

    @registry.on_action("reg:pause")
    def pause_button(turn: Turn, step, args: list[str]) -> None:
        payment = turn.ledger.recurring.set_paused(turn.user_id, button_id(args), True)
        show_payment(turn, payment.id)

    @registry.on_action("reg:resume")
    def resume_button(turn: Turn, step, args: list[str]) -> None:
        payment = turn.ledger.recurring.set_paused(turn.user_id, button_id(args), False)
        show_payment(turn, payment.id)

    @registry.on_action("reg:day")
    def day_button(turn: Turn, step, args: list[str]) -> None:
        payment = turn.ledger.recurring.get_regular_payment(turn.user_id, button_id(args))
        if payment.frequency != PaymentFrequency.MONTHLY:
            raise ValidationError("Only monthly payments have a day of the month")
        turn.advance(RegularEditDay(payment_id=payment.id))

    @registry.prompt(RegularEditDay)
    def edit_day_prompt(turn: Turn, step: RegularEditDay):
        payment = turn.ledger.recurring.get_regular_payment(turn.user_id, step.payment_id)
        current = payment.day_of_month if payment.day_of_month is not None else "not set"
        return (
            f"🔄 {payment.name}\nCurrent day: {current}\n\nOn which day of the month (1-31)?",
            keyboards.cancel(),
        )

    @registry.on_text(RegularEditDay)
    def edit_day_entered(turn: Turn, step: RegularEditDay, text: str) -> None:
        payment = turn.ledger.recurring.update_day(turn.user_id, step.payment_id, _read_day(text))
        turn.finish(f"✅ Day changed\n{describe_payment(turn, payment)}")

    @registry.on_action("reg:category")
    def category_button(turn: Turn, step, args: list[str]) -> None:
        payment = turn.ledger.recurring.get_regular_payment(turn.user_id, button_id(args))
        turn.advance(RegularEditCategory(payment_id=payment.id))

    @registry.prompt(RegularEditCategory)
    def edit_category_prompt(turn: Turn, step: RegularEditCategory):
        payment = turn.ledger.recurring.get_regular_payment(turn.user_id, step.payment_id)
        turn.ledger.categories.initialize_default_categories(turn.user_id)
        categories = turn.ledger.categories.list_categories(turn.user_id, Direction.EXPENSE)
        text = f"🔄 {payment.name}\n\nWhich category are the payments booked to?"
        return text, keyboards.regular_categories(categories)

    def category_set(turn: Turn, step: RegularEditCategory, category_id) -> None:
        turn.ledger.recurring.set_category(turn.user_id, step.payment_id, category_id)
        show_payment(turn, step.payment_id)

    @registry.on_action("reg:setcat", RegularEditCategory)
    def category_chosen(turn: Turn, step: RegularEditCategory, args: list[str]) -> None:
        category_set(turn, step, button_id(args))

    @registry.on_action("reg:nocat", RegularEditCategory)
    def category_cleared(turn: Turn, step: RegularEditCategory, args: list[str]) -> None:
        category_set(turn, step, None)

    @registry.on_action("reg:delete")
    def delete_button(turn: Turn, step, args: list[str]) -> None:
        payment = turn.ledger.recurring.get_regular_payment(turn.user_id, button_id(args))
        turn.advance(RegularDeleteConfirm(payment_id=payment.id))

    @registry.prompt(RegularDeleteConfirm)
    def delete_prompt(turn: Turn, step: RegularDeleteConfirm):
        payment = turn.ledger.recurring.get_regular_payment(turn.user_id, step.payment_id)
        return (
            f"🗑 Delete {describe_payment(turn, payment)}?\n\nNo more reminders will be sent for it.",
            keyboards.confirm_delete(),
        )

    @registry.on_action("confirm:yes", RegularDeleteConfirm)
    def delete_confirmed(turn: Turn, step: RegularDeleteConfirm, args: list[str]) -> None:
        payment = turn.ledger.recurring.get_regular_payment(turn.user_id, step.payment_id)
        turn.ledger.recurring.delete_regular_payment(turn.user_id, payment.id)
        turn.finish(f"🗑 {payment.name} deleted")

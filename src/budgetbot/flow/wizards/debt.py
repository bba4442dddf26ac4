"""Debts: overview, details, creation, editing and repayment."""

from budgetbot.domain.entities import Debt, DebtType
from budgetbot.domain.errors import NotFoundError, ValidationError
from budgetbot.flow import keyboards
from budgetbot.flow.inputs import button_id, is_skip, read_amount, read_optional_date, read_text
from budgetbot.flow.registry import Registry
from budgetbot.flow.steps import (
    DebtAddToBalance,
    DebtAmount,
    DebtDeadline,
    DebtDeleteConfirm,
    DebtDescription,
    DebtEditDeadline,
    DebtEditName,
    DebtEditNote,
    DebtName,
    DebtPaymentAmount,
    DebtTypeChoice,
)
from budgetbot.flow.turn import Turn
from budgetbot.utils.date_parser import format_date

TYPE_TITLES = {DebtType.I_OWE: "📤 I owe", DebtType.THEY_OWE: "📥 They owe me"}
EDIT_STEPS = {"name": DebtEditName, "deadline": DebtEditDeadline, "note": DebtEditNote}


def describe_debt(turn: Turn, debt: Debt) -> str:
    line = f"{debt.person_name}: {turn.money(debt.remaining_amount)}"
    if debt.remaining_amount != debt.amount:
        line += f" of {turn.money(debt.amount)}"
    if debt.due_date is not None:
        overdue = " ⏰" if debt.due_date < turn.now else ""
        line += f" until {format_date(debt.due_date)}{overdue}"
    if debt.description:
        line += f" ({debt.description})"
    return line


def show_debts(turn: Turn) -> None:
    summary = turn.ledger.debts.summary(turn.user_id)
    debts = turn.ledger.debts.list_debts(turn.user_id)
    unpaid = [debt for debt in debts if not debt.is_paid]
    lines = ["💸 Debts", ""]
    for debt_type in (DebtType.THEY_OWE, DebtType.I_OWE):
        if debt_type == DebtType.THEY_OWE:
            total, count = summary.they_owe, summary.they_owe_count
        else:
            total, count = summary.i_owe, summary.i_owe_count
        lines.append(f"{TYPE_TITLES[debt_type]}: {turn.money(total)} ({count})")
        for debt in unpaid:
            if debt.debt_type == debt_type:
                lines.append(f"  • {describe_debt(turn, debt)}  /pay_debt_{debt.id}")
        lines.append("")
    has_settled = len(unpaid) < len(debts)
    turn.show("\n".join(lines).rstrip(), keyboards.debts_overview(unpaid, has_paid=has_settled))


def show_settled(turn: Turn) -> None:
    settled = [debt for debt in turn.ledger.debts.list_debts(turn.user_id) if debt.is_paid]
    lines = ["📜 Settled debts", ""]
    if not settled:
        lines.append("No settled debts.")
    for debt in settled:
        lines.append(f"• {TYPE_TITLES[debt.debt_type]}: {debt.person_name}, {turn.money(debt.amount)}")
    turn.show("\n".join(lines), keyboards.settled_debts(settled))


def show_debt(turn: Turn, debt_id: int) -> None:
    debt = turn.ledger.debts.get_debt(turn.user_id, debt_id)
    lines = [TYPE_TITLES[debt.debt_type], describe_debt(turn, debt)]
    if debt.is_paid:
        settled = f" on {format_date(debt.paid_at)}" if debt.paid_at is not None else ""
        lines.append(f"✅ Settled{settled}")
    turn.show("\n".join(lines), keyboards.debt_detail(debt))


def show_payments(turn: Turn, debt_id: int) -> None:
    debt = turn.ledger.debts.get_debt(turn.user_id, debt_id)
    payments = turn.ledger.debts.list_payments(turn.user_id, debt.id)
    lines = [f"📜 {debt.person_name}: payments", ""]
    if not payments:
        lines.append("No payments yet.")
    for payment in payments:
        lines.append(f"• {format_date(payment.paid_at)}: {turn.money(payment.amount)}")
    turn.show("\n".join(lines), keyboards.back(f"debt:open:{debt.id}"))


def _start_payment(turn: Turn, debt_id: int) -> None:
    debt = turn.ledger.debts.get_debt(turn.user_id, debt_id)
    if debt.is_paid:
        raise ValidationError(f"The debt of {debt.person_name} is already paid")
    turn.advance(DebtPaymentAmount(debt_id=debt.id))


def _create(turn: Turn, step: DebtAddToBalance, add_to_balance: bool) -> None:
    debt = turn.ledger.create_debt(
        turn.user_id,
        step.person_name,
        step.amount,
        step.debt_type,
        due_date=step.due_date,
        description=step.description,
        add_to_balance=add_to_balance,
    )
    lines = ["✅ Debt saved", f"{TYPE_TITLES[debt.debt_type]}: {describe_debt(turn, debt)}"]
    if add_to_balance:
        balance = turn.ledger.accounts.get_balance(turn.user_id)
        lines.append(f"💰 Balance: {turn.money(balance)}")
    turn.finish("\n".join(lines))


def _description_given(turn: Turn, step: DebtDescription, description) -> None:
    collected = DebtAddToBalance(
        debt_type=step.debt_type,
        person_name=step.person_name,
        amount=step.amount,
        due_date=step.due_date,
        description=description,
    )
    if step.debt_type == DebtType.I_OWE:
        turn.advance(collected)
    else:
        _create(turn, collected, add_to_balance=False)


def register_handlers(registry: Registry) -> None:
    """Register debt handlers."""

    @registry.on_command("debt", "debts")
    def debts_command(turn: Turn, argument: str) -> None:
        show_debts(turn)

    @registry.on_action("menu:debts")
    def debts_button(turn: Turn, step, args: list[str]) -> None:
        show_debts(turn)

    @registry.on_action("debt:new")
    def new_debt(turn: Turn, step, args: list[str]) -> None:
        turn.advance(DebtTypeChoice())

    @registry.prompt(DebtTypeChoice)
    def type_prompt(turn: Turn, step: DebtTypeChoice):
        return "💸 New debt\n\nWho owes whom?", keyboards.debt_types()

    @registry.on_action("debt:type", DebtTypeChoice)
    def type_chosen(turn: Turn, step: DebtTypeChoice, args: list[str]) -> None:
        try:
            debt_type = DebtType(args[0])
        except (IndexError, ValueError) as e:
            raise NotFoundError(f"Unknown debt type {':'.join(args)!r}") from e
        turn.advance(DebtName(debt_type=debt_type))

    @registry.prompt(DebtName)
    def name_prompt(turn: Turn, step: DebtName):
        question = "Who did you borrow from?" if step.debt_type == DebtType.I_OWE else "Who borrowed from you?"
        return f"{TYPE_TITLES[step.debt_type]}\n\n{question}", keyboards.cancel()

    @registry.on_text(DebtName)
    def name_entered(turn: Turn, step: DebtName, text: str) -> None:
        turn.advance(DebtAmount(debt_type=step.debt_type, person_name=read_text(text)))

    @registry.prompt(DebtAmount)
    def amount_prompt(turn: Turn, step: DebtAmount):
        return f"{TYPE_TITLES[step.debt_type]}: {step.person_name}\n\nHow much?", keyboards.cancel()

    @registry.on_text(DebtAmount)
    def amount_entered(turn: Turn, step: DebtAmount, text: str) -> None:
        turn.advance(DebtDeadline(step.debt_type, step.person_name, read_amount(text)))

    @registry.prompt(DebtDeadline)
    def deadline_prompt(turn: Turn, step: DebtDeadline):
        text = (
            f"{TYPE_TITLES[step.debt_type]}: {step.person_name}, {turn.money(step.amount)}\n\n"
            "When should it be returned? Enter a date (DD.MM.YYYY) or press Skip:"
        )
        return text, keyboards.skip("debt:skip")

    @registry.on_text(DebtDeadline)
    def deadline_entered(turn: Turn, step: DebtDeadline, text: str) -> None:
        due_date = read_optional_date(text, turn.now.date())
        turn.advance(DebtDescription(step.debt_type, step.person_name, step.amount, due_date))

    @registry.on_action("debt:skip", DebtDeadline)
    def deadline_skipped(turn: Turn, step: DebtDeadline, args: list[str]) -> None:
        turn.advance(DebtDescription(step.debt_type, step.person_name, step.amount, None))

    @registry.prompt(DebtDescription)
    def description_prompt(turn: Turn, step: DebtDescription):
        return "Add a note (what the money was for) or press Skip:", keyboards.skip("debt:skip")

    @registry.on_text(DebtDescription)
    def description_entered(turn: Turn, step: DebtDescription, text: str) -> None:
        _description_given(turn, step, None if is_skip(text) else read_text(text, max_length=200))

    @registry.on_action("debt:skip", DebtDescription)
    def description_skipped(turn: Turn, step: DebtDescription, args: list[str]) -> None:
        _description_given(turn, step, None)

    @registry.prompt(DebtAddToBalance)
    def balance_prompt(turn: Turn, step: DebtAddToBalance):
        return (
            f"Add the borrowed {turn.money(step.amount)} to your balance?",
            keyboards.debt_add_to_balance(),
        )

    @registry.on_action("debt:balance", DebtAddToBalance)
    def balance_chosen(turn: Turn, step: DebtAddToBalance, args: list[str]) -> None:
        _create(turn, step, add_to_balance=bool(args) and args[0] == "yes")

    # Repayment, started from the /pay_debt_<id> link
    @registry.on_command_prefix("pay_debt_")
    def pay_debt_link(turn: Turn, suffix: str) -> None:
        _start_payment(turn, button_id([suffix]))

    @registry.prompt(DebtPaymentAmount)
    def payment_prompt(turn: Turn, step: DebtPaymentAmount):
        debt = turn.ledger.debts.get_debt(turn.user_id, step.debt_id)
        text = (
            f"{TYPE_TITLES[debt.debt_type]}: {describe_debt(turn, debt)}\n\n"
            "Enter the payment amount:"
        )
        return text, keyboards.cancel()

    @registry.on_text(DebtPaymentAmount)
    def payment_entered(turn: Turn, step: DebtPaymentAmount, text: str) -> None:
        repayment = turn.ledger.pay_debt(turn.user_id, step.debt_id, read_amount(text))
        debt = repayment.debt
        lines = [f"✅ Payment of {turn.money(repayment.applied)} recorded"]
        if debt.is_paid:
            lines.append(f"🎉 The debt with {debt.person_name} is fully paid")
        else:
            lines.append(f"Remaining: {turn.money(debt.remaining_amount)}")
        lines.append(f"💰 Balance: {turn.money(repayment.balance)}")
        turn.finish("\n".join(lines))

    # Details and editing
    @registry.on_action("debt:open")
    def debt_opened(turn: Turn, step, args: list[str]) -> None:
        show_debt(turn, button_id(args))

    @registry.on_action("debt:paid")
    def settled_button(turn: Turn, step, args: list[str]) -> None:
        show_settled(turn)

    @registry.on_action("debt:pay")
    def pay_button(turn: Turn, step, args: list[str]) -> None:
        _start_payment(turn, button_id(args))

    @registry.on_action("debt:history")
    def history_button(turn: Turn, step, args: list[str]) -> None:
        show_payments(turn, button_id(args))

    @registry.on_action("debt:settle")
    def settle_button(turn: Turn, step, args: list[str]) -> None:
        debt = turn.ledger.debts.mark_paid(turn.user_id, button_id(args), now=turn.now)
        show_debt(turn, debt.id)

    @registry.on_action("debt:edit")
    def edit_button(turn: Turn, step, args: list[str]) -> None:
        step_type = EDIT_STEPS.get(args[0] if args else "")
        if step_type is None:
            raise NotFoundError(f"Unknown debt field {args[0] if args else ''!r}")
        debt = turn.ledger.debts.get_debt(turn.user_id, button_id(args, 1))
        turn.advance(step_type(debt_id=debt.id))

    @registry.prompt(DebtEditName, DebtEditDeadline, DebtEditNote)
    def edit_prompt(turn: Turn, step):
        debt = turn.ledger.debts.get_debt(turn.user_id, step.debt_id)
        header = f"{TYPE_TITLES[debt.debt_type]}: {describe_debt(turn, debt)}"
        if isinstance(step, DebtEditName):
            return f"{header}\n\nEnter the new name:", keyboards.cancel()
        if isinstance(step, DebtEditDeadline):
            return f"{header}\n\nEnter the new deadline (DD.MM.YYYY) or \"no\" to remove it:", keyboards.cancel()
        return f"{header}\n\nEnter the new note or \"no\" to remove it:", keyboards.cancel()

    def updated(turn: Turn, debt: Debt) -> None:
        turn.finish(f"✅ Debt updated\n{TYPE_TITLES[debt.debt_type]}: {describe_debt(turn, debt)}")

    @registry.on_text(DebtEditName)
    def edit_name(turn: Turn, step: DebtEditName, text: str) -> None:
        updated(turn, turn.ledger.debts.update_debt(turn.user_id, step.debt_id, person_name=read_text(text)))

    @registry.on_text(DebtEditDeadline)
    def edit_deadline(turn: Turn, step: DebtEditDeadline, text: str) -> None:
        due_date = read_optional_date(text, turn.now.date())
        debt = turn.ledger.debts.update_debt(
            turn.user_id, step.debt_id, due_date=due_date, clear_due_date=due_date is None
        )
        updated(turn, debt)

    @registry.on_text(DebtEditNote)
    def edit_note(turn: Turn, step: DebtEditNote, text: str) -> None:
        note = "" if is_skip(text) else read_text(text, max_length=200)
        updated(turn, turn.ledger.debts.update_debt(turn.user_id, step.debt_id, description=note))

    @registry.on_action("debt:delete")
    def delete_button(turn: Turn, step, args: list[str]) -> None:
        debt = turn.ledger.debts.get_debt(turn.user_id, button_id(args))
        turn.advance(DebtDeleteConfirm(debt_id=debt.id))

    @registry.prompt(DebtDeleteConfirm)
    def delete_prompt(turn: Turn, step: DebtDeleteConfirm):
        debt = turn.ledger.debts.get_debt(turn.user_id, step.debt_id)
        return (
            f"🗑 Delete the debt with {debt.person_name}?\n\n"
            "Payments already recorded stay in your transactions.",
            keyboards.confirm_delete(),
        )

    @registry.on_action("confirm:yes", DebtDeleteConfirm)
    def delete_confirmed(turn: Turn, step: DebtDeleteConfirm, args: list[str]) -> None:
        debt = turn.ledger.debts.get_debt(turn.user_id, step.debt_id)
        turn.ledger.debts.delete_debt(turn.user_id, debt.id)
        turn.finish(f"🗑 The debt with {debt.person_name} was deleted")

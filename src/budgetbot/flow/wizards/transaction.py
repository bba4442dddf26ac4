"""Income and expense entry (amount, category, description) and the transaction history."""

from dataclasses import replace
from typing import Optional

from budgetbot.domain.entities import Direction, TransactionResult
from budgetbot.domain.errors import ValidationError
from budgetbot.flow import keyboards
from budgetbot.flow.inputs import button_id, is_skip, read_amount_and_description
from budgetbot.flow.registry import Registry
from budgetbot.flow.steps import TxnAmount, TxnCategory, TxnDeleteConfirm, TxnDescription, TxnNewCategory
from budgetbot.flow.turn import Turn
from budgetbot.utils.date_parser import format_date

TITLES = {Direction.INCOME: "💵 Income", Direction.EXPENSE: "💸 Expense"}
HISTORY_LENGTH = 10


def start(turn: Turn, direction: Direction, is_impulsive: bool = False) -> None:
    turn.advance(TxnAmount(direction=direction, is_impulsive=is_impulsive))


def _choose_category(turn: Turn, step, category_id: int) -> None:
    """Record right away when the description came with the amount."""
    category = turn.ledger.categories.get_category(turn.user_id, category_id)
    if step.direction == Direction.EXPENSE:
        turn.ledger.check_category_blocked(turn.user_id, category.id)

    if step.description:
        _record(turn, step.direction, step.is_impulsive, step.amount, category.id, step.description)
    else:
        turn.advance(
            TxnDescription(
                direction=step.direction,
                is_impulsive=step.is_impulsive,
                amount=step.amount,
                category_id=category.id,
            )
        )


def _record(turn: Turn, direction, is_impulsive, amount, category_id, description) -> None:
    result = turn.ledger.record_transaction(
        turn.user_id,
        category_id,
        amount,
        direction,
        description=description,
        is_impulsive=is_impulsive,
    )
    turn.finish(render_result(turn, result), keyboards.transaction_done(result.transaction.id))


def render_result(turn: Turn, result: TransactionResult) -> str:
    transaction = result.transaction
    verb = "Income" if transaction.direction == Direction.INCOME else "Expense"
    lines = [
        f"✅ {verb} recorded",
        f"{turn.money(transaction.amount)} · {result.category.label}",
    ]
    if transaction.description:
        lines.append(f"📝 {transaction.description}")
    if transaction.is_impulsive:
        lines.append("⚡ Impulsive purchase")
    lines.append(f"💰 Balance: {turn.money(result.account.balance)}")

    warning = limit_warning(turn, result)
    if warning:
        lines.extend(["", warning])
    return "\n".join(lines)


def describe_transaction(turn: Turn, transaction) -> str:
    category = turn.ledger.categories.get_category(turn.user_id, transaction.category_id)
    sign = "+" if transaction.direction == Direction.INCOME else "−"
    line = f"{format_date(transaction.date)} {sign}{turn.money(transaction.amount)} · {category.label}"
    if transaction.description:
        line += f" ({transaction.description})"
    return line


def show_history(turn: Turn) -> None:
    transactions = turn.ledger.transactions.list_transactions(turn.user_id, limit=HISTORY_LENGTH)
    if not transactions:
        turn.show("📜 No transactions yet.", keyboards.back_to_menu())
        return
    lines = [f"📜 Last {len(transactions)} transactions", ""]
    for number, transaction in enumerate(transactions, start=1):
        lines.append(f"{number}. {describe_transaction(turn, transaction)}")
    lines.extend(["", "Press 🗑 with a number to delete that transaction."])
    turn.show("\n".join(lines), keyboards.transaction_history(transactions))


def limit_warning(turn: Turn, result: TransactionResult) -> Optional[str]:
    spending = result.spending
    if not spending.crossed_level or spending.limit is None:
        return None
    limit = spending.limit
    used = f"{turn.money(limit.spent_amount)} of {turn.money(limit.amount)}"
    if spending.crossed_level >= 100:
        until = f" until {format_date(limit.blocked_until)}" if limit.blocked_until else ""
        return (
            f"🔴 The {result.category.name} limit is exceeded ({used}). "
            f"Spending in this category is blocked{until}."
        )
    marker = "🟠" if spending.crossed_level >= 80 else "🟡"
    return f"{marker} {spending.crossed_level}% of the {result.category.name} limit used ({used})."


def register_handlers(registry: Registry) -> None:
    """Register transaction entry handlers."""

    @registry.on_command("expense")
    def expense_command(turn: Turn, argument: str) -> None:
        start(turn, Direction.EXPENSE)

    @registry.on_command("impulse")
    def impulse_command(turn: Turn, argument: str) -> None:
        start(turn, Direction.EXPENSE, is_impulsive=True)

    @registry.on_command("income")
    def income_command(turn: Turn, argument: str) -> None:
        start(turn, Direction.INCOME)

    @registry.on_action("menu:expense")
    def expense_button(turn: Turn, step, args: list[str]) -> None:
        start(turn, Direction.EXPENSE)

    @registry.on_action("menu:income")
    def income_button(turn: Turn, step, args: list[str]) -> None:
        start(turn, Direction.INCOME)

    @registry.prompt(TxnAmount)
    def amount_prompt(turn: Turn, step: TxnAmount):
        example = "150 taxi" if step.direction == Direction.EXPENSE else "5000 bonus"
        lines = [TITLES[step.direction], "", "Enter the amount and an optional description:", f"Example: {example}"]
        if step.amount is not None:
            entered = turn.money(step.amount)
            if step.description:
                entered = f"{entered} {step.description}"
            lines.extend(["", f"Entered so far: {entered}"])
        return "\n".join(lines), keyboards.amount_entry(
            step.direction == Direction.EXPENSE, step.is_impulsive, can_continue=step.amount is not None
        )

    @registry.on_text(TxnAmount)
    def amount_entered(turn: Turn, step: TxnAmount, text: str) -> None:
        amount, description = read_amount_and_description(text)
        turn.advance(
            TxnCategory(
                direction=step.direction,
                is_impulsive=step.is_impulsive,
                amount=amount,
                description=description,
            )
        )

    @registry.on_action("txn:impulsive", TxnAmount)
    def toggle_impulsive(turn: Turn, step: TxnAmount, args: list[str]) -> None:
        turn.advance(replace(step, is_impulsive=not step.is_impulsive))

    @registry.prompt(TxnCategory)
    def category_prompt(turn: Turn, step: TxnCategory):
        recent = turn.ledger.transactions.recent_category_ids(turn.user_id, step.direction)
        suggested = turn.ledger.categories.suggested_categories(turn.user_id, step.direction, recent)
        text = f"{TITLES[step.direction]}: {turn.money(step.amount)}"
        if step.description:
            text += f" ({step.description})"
        text += "\n\nChoose a category or type the name of a new one:"
        return text, keyboards.categories(suggested)

    @registry.on_action("cat", TxnCategory)
    def category_chosen(turn: Turn, step: TxnCategory, args: list[str]) -> None:
        _choose_category(turn, step, button_id(args))

    @registry.on_action("cat:new", TxnCategory)
    def new_category_requested(turn: Turn, step: TxnCategory, args: list[str]) -> None:
        turn.advance(TxnNewCategory(step.direction, step.is_impulsive, step.amount, step.description))

    @registry.on_text(TxnCategory, TxnNewCategory)
    def category_typed(turn: Turn, step, text: str) -> None:
        category = turn.ledger.categories.create_quick_category(turn.user_id, text, step.direction)
        _choose_category(turn, step, category.id)

    @registry.prompt(TxnNewCategory)
    def new_category_prompt(turn: Turn, step: TxnNewCategory):
        return "Type the name of the new category:", keyboards.new_category()

    @registry.on_action("back:amount", TxnCategory, TxnNewCategory)
    def back_to_amount(turn: Turn, step, args: list[str]) -> None:
        turn.advance(TxnAmount(step.direction, step.is_impulsive, step.amount, step.description))

    @registry.on_action("back:categories", TxnAmount)
    def continue_with_amount(turn: Turn, step: TxnAmount, args: list[str]) -> None:
        if step.amount is None:
            raise ValidationError("Enter the amount first")
        turn.advance(TxnCategory(step.direction, step.is_impulsive, step.amount, step.description))

    @registry.on_action("back:categories", TxnNewCategory)
    def back_from_new_category(turn: Turn, step: TxnNewCategory, args: list[str]) -> None:
        turn.advance(TxnCategory(step.direction, step.is_impulsive, step.amount, step.description))

    @registry.on_action("back:categories", TxnDescription)
    def back_from_description(turn: Turn, step: TxnDescription, args: list[str]) -> None:
        turn.advance(TxnCategory(step.direction, step.is_impulsive, step.amount, None))

    @registry.prompt(TxnDescription)
    def description_prompt(turn: Turn, step: TxnDescription):
        category = turn.ledger.categories.get_category(turn.user_id, step.category_id)
        text = (
            f"{TITLES[step.direction]}: {turn.money(step.amount)} · {category.label}\n\n"
            "Add a description or press Skip:"
        )
        return text, keyboards.description()

    @registry.on_text(TxnDescription)
    def description_entered(turn: Turn, step: TxnDescription, text: str) -> None:
        description = None if is_skip(text) else text.strip()
        _record(turn, step.direction, step.is_impulsive, step.amount, step.category_id, description)

    @registry.on_action("txn:skip", TxnDescription)
    def description_skipped(turn: Turn, step: TxnDescription, args: list[str]) -> None:
        _record(turn, step.direction, step.is_impulsive, step.amount, step.category_id, None)

    @registry.on_action("txn:undo")
    def undo(turn: Turn, step, args: list[str]) -> None:
        if turn.ledger.cancel_transaction(turn.user_id, button_id(args)):
            balance = turn.ledger.accounts.get_balance(turn.user_id)
            turn.finish(f"↩️ Transaction cancelled.\n💰 Balance: {turn.money(balance)}")
        else:
            turn.finish("This transaction was already cancelled.")

    # History
    @registry.on_command("history")
    def history_command(turn: Turn, argument: str) -> None:
        show_history(turn)

    @registry.on_action("menu:history")
    def history_button(turn: Turn, step, args: list[str]) -> None:
        show_history(turn)

    @registry.on_action("txn:delete")
    def delete_button(turn: Turn, step, args: list[str]) -> None:
        transaction = turn.ledger.transactions.get_transaction(turn.user_id, button_id(args))
        turn.advance(TxnDeleteConfirm(transaction_id=transaction.id))

    @registry.prompt(TxnDeleteConfirm)
    def delete_prompt(turn: Turn, step: TxnDeleteConfirm):
        transaction = turn.ledger.transactions.get_transaction(turn.user_id, step.transaction_id)
        text = (
            f"🗑 Delete this transaction?\n\n{describe_transaction(turn, transaction)}\n\n"
            "Its amount is taken back out of the balance."
        )
        return text, keyboards.confirm_delete()

    @registry.on_action("confirm:yes", TxnDeleteConfirm)
    def delete_confirmed(turn: Turn, step: TxnDeleteConfirm, args: list[str]) -> None:
        turn.ledger.transactions.delete_transaction(turn.user_id, step.transaction_id)
        balance = turn.ledger.accounts.get_balance(turn.user_id)
        turn.finish(f"🗑 Transaction deleted.\n💰 Balance: {turn.money(balance)}")

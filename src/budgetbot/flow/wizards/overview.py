"""Balance and statistics screens."""

from budgetbot.domain.entities import Direction
from budgetbot.flow import keyboards
from budgetbot.flow.registry import Registry
from budgetbot.flow.turn import Turn
from budgetbot.utils.date_parser import month_start

TOP_EXPENSE_COUNT = 5


def show_balance(turn: Turn) -> None:
    overview = turn.ledger.overview(turn.user_id)
    lines = [
        f"💰 Balance: {turn.money(overview.balance)}",
        "",
        "This month:",
        f"  ➕ Income: {turn.money(overview.month_income)}",
        f"  ➖ Expenses: {turn.money(overview.month_expense)}",
    ]
    if overview.active_goal is not None:
        goal = overview.active_goal
        lines.extend([
            "",
            f"🎯 {goal.name}: {turn.money(goal.current_amount)} of "
            f"{turn.money(goal.target_amount)} ({goal.percent:.0f}%)",
        ])
    debts = overview.debts
    if debts.they_owe_count or debts.i_owe_count:
        lines.extend([
            "",
            f"📥 Owed to you: {turn.money(debts.they_owe)} ({debts.they_owe_count})",
            f"📤 You owe: {turn.money(debts.i_owe)} ({debts.i_owe_count})",
        ])
    regular = overview.regular
    if regular.pending_count:
        lines.extend([
            "",
            f"🔄 Regular payments pending this month: "
            f"{turn.money(regular.pending)} ({regular.pending_count})",
        ])
    turn.show("\n".join(lines), keyboards.back_to_menu())


def show_stats(turn: Turn) -> None:
    since = month_start(turn.now)
    totals = turn.ledger.transactions.get_totals(turn.user_id, since=since)
    top = turn.ledger.transactions.get_top_expenses(turn.user_id, since, count=TOP_EXPENSE_COUNT)
    impulsive = [
        transaction
        for transaction in turn.ledger.transactions.list_transactions(
            turn.user_id, limit=None, direction=Direction.EXPENSE, since=since
        )
        if transaction.is_impulsive
    ]

    lines = [
        f"📊 Statistics since {since:%d.%m.%Y}",
        "",
        f"➕ Income: {turn.money(totals[Direction.INCOME])}",
        f"➖ Expenses: {turn.money(totals[Direction.EXPENSE])}",
    ]
    if top:
        lines.extend(["", "Top expenses:"])
        for item in top:
            lines.append(f"  {item.category.label}: {turn.money(item.total)}")
    if impulsive:
        total = sum(transaction.amount for transaction in impulsive)
        lines.extend(["", f"⚡ Impulsive purchases: {turn.money(total)} ({len(impulsive)})"])
    turn.show("\n".join(lines), keyboards.back_to_menu())


def register_handlers(registry: Registry) -> None:
    """Register balance and statistics handlers."""

    @registry.on_command("balance")
    def balance_command(turn: Turn, argument: str) -> None:
        show_balance(turn)

    @registry.on_action("menu:balance")
    def balance_button(turn: Turn, step, args: list[str]) -> None:
        show_balance(turn)

    @registry.on_command("stats")
    def stats_command(turn: Turn, argument: str) -> None:
        show_stats(turn)

    @registry.on_action("menu:stats")
    def stats_button(turn: Turn, step, args: list[str]) -> None:
        show_stats(turn)

"""Monthly category limits: overview, setting and removing a limit."""

from budgetbot.domain.entities import Direction, Limit
from budgetbot.flow import keyboards
from budgetbot.flow.inputs import button_id, read_amount
from budgetbot.flow.registry import Registry
from budgetbot.flow.steps import LimitAmount, LimitCategory
from budgetbot.flow.turn import Turn
from budgetbot.utils.date_parser import format_date


def describe_limit(turn: Turn, limit: Limit) -> str:
    category = turn.ledger.categories.get_category(turn.user_id, limit.category_id)
    line = (
        f"{category.label}: {turn.money(limit.spent_amount)} of {turn.money(limit.amount)} "
        f"({limit.percent:.0f}%)"
    )
    if turn.ledger.limits.is_category_blocked(turn.user_id, limit.category_id, now=turn.now):
        line += f" 🚫 blocked until {format_date(limit.blocked_until)}"
    return line


def show_limits(turn: Turn) -> None:
    turn.ledger.limits.reset_monthly_limits(turn.user_id, now=turn.now)
    limits = turn.ledger.limits.list_limits(turn.user_id)
    lines = ["🚦 Monthly limits", ""]
    if not limits:
        lines.append("No limits yet. A limit warns you at 50%, 80% and 100% of the amount.")
    for limit in limits:
        lines.append(f"• {describe_limit(turn, limit)}")
    removable = [
        (limit.id, turn.ledger.categories.get_category(turn.user_id, limit.category_id).label)
        for limit in limits
    ]
    turn.show("\n".join(lines), keyboards.limits_overview(removable))


def register_handlers(registry: Registry) -> None:
    """Register limit handlers."""

    @registry.on_command("limit", "limits")
    def limits_command(turn: Turn, argument: str) -> None:
        show_limits(turn)

    @registry.on_action("menu:limits")
    def limits_button(turn: Turn, step, args: list[str]) -> None:
        show_limits(turn)

    @registry.on_action("limit:new")
    def new_limit(turn: Turn, step, args: list[str]) -> None:
        turn.advance(LimitCategory())

    @registry.prompt(LimitCategory)
    def category_prompt(turn: Turn, step: LimitCategory):
        turn.ledger.categories.initialize_default_categories(turn.user_id)
        categories = turn.ledger.categories.list_categories(turn.user_id, Direction.EXPENSE)
        return "🚦 New limit\n\nWhich category?", keyboards.limit_categories(categories)

    @registry.on_action("limit:cat", LimitCategory)
    def category_chosen(turn: Turn, step: LimitCategory, args: list[str]) -> None:
        category = turn.ledger.categories.get_category(turn.user_id, button_id(args))
        turn.advance(LimitAmount(category_id=category.id))

    @registry.prompt(LimitAmount)
    def amount_prompt(turn: Turn, step: LimitAmount):
        category = turn.ledger.categories.get_category(turn.user_id, step.category_id)
        existing = turn.ledger.limits.get_limit_for_category(turn.user_id, step.category_id)
        text = f"🚦 {category.label}\n\nHow much may you spend per month?"
        if existing is not None:
            text += f"\nCurrent limit: {turn.money(existing.amount)}"
        return text, keyboards.cancel()

    @registry.on_text(LimitAmount)
    def amount_entered(turn: Turn, step: LimitAmount, text: str) -> None:
        limit = turn.ledger.limits.set_limit(
            turn.user_id, step.category_id, read_amount(text), now=turn.now
        )
        turn.finish(f"✅ Limit saved\n{describe_limit(turn, limit)}")

    @registry.on_action("limit:delete")
    def delete_button(turn: Turn, step, args: list[str]) -> None:
        turn.ledger.limits.delete_limit(turn.user_id, button_id(args))
        show_limits(turn)

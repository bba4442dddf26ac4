"""Category management: listing, renaming and archiving."""

from budgetbot.domain.entities import Category, Direction
from budgetbot.flow import keyboards
from budgetbot.flow.inputs import button_id, read_text
from budgetbot.flow.registry import Registry
from budgetbot.flow.steps import CategoryRename
from budgetbot.flow.turn import Turn

DIRECTION_LABELS = {Direction.INCOME: "income", Direction.EXPENSE: "expenses"}


def describe_category(category: Category) -> str:
    usage = DIRECTION_LABELS.get(category.direction, "income and expenses")
    return f"{category.label} ({usage})"


def show_categories(turn: Turn) -> None:
    turn.ledger.categories.initialize_default_categories(turn.user_id)
    categories = turn.ledger.categories.list_categories(turn.user_id)
    text = "🗂 Categories\n\nChoose a category to rename or archive it."
    turn.show(text, keyboards.categories_overview(categories))


def show_category(turn: Turn, category_id: int) -> None:
    category = turn.ledger.categories.get_category(turn.user_id, category_id)
    text = (
        f"🗂 {describe_category(category)}\n\n"
        "Archived categories disappear from the lists; their transactions are kept."
    )
    turn.show(text, keyboards.category_detail(category.id))


def register_handlers(registry: Registry) -> None:
    """Register category handlers."""

    @registry.on_command("categories")
    def categories_command(turn: Turn, argument: str) -> None:
        show_categories(turn)

    @registry.on_action("menu:categories")
    def categories_button(turn: Turn, step, args: list[str]) -> None:
        show_categories(turn)

    @registry.on_action("category:open")
    def category_opened(turn: Turn, step, args: list[str]) -> None:
        show_category(turn, button_id(args))

    @registry.on_action("category:rename")
    def rename_button(turn: Turn, step, args: list[str]) -> None:
        category = turn.ledger.categories.get_category(turn.user_id, button_id(args))
        turn.advance(CategoryRename(category_id=category.id))

    @registry.prompt(CategoryRename)
    def rename_prompt(turn: Turn, step: CategoryRename):
        category = turn.ledger.categories.get_category(turn.user_id, step.category_id)
        return f"🗂 {category.label}\n\nEnter the new name:", keyboards.cancel()

    @registry.on_text(CategoryRename)
    def rename_entered(turn: Turn, step: CategoryRename, text: str) -> None:
        category = turn.ledger.categories.rename_category(turn.user_id, step.category_id, read_text(text))
        turn.finish(f"✅ Category renamed to {category.label}")

    @registry.on_action("category:archive")
    def archive_button(turn: Turn, step, args: list[str]) -> None:
        category = turn.ledger.categories.get_category(turn.user_id, button_id(args))
        turn.ledger.categories.archive_category(turn.user_id, category.id)
        show_categories(turn)

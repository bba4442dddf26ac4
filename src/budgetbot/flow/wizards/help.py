"""Help screen and feedback forwarding."""

import structlog

from budgetbot.flow import keyboards
from budgetbot.flow.inputs import read_text
from budgetbot.flow.registry import Registry
from budgetbot.flow.steps import HelpFeedback
from budgetbot.flow.turn import Turn

logger = structlog.get_logger(__name__)

HELP_TEXT = """ℹ️ How to use the bot

➕ Income / ➖ Expense: type the amount and an optional description ("150 taxi"), then choose a category.
⚡ /impulse records an impulsive purchase.
🎯 Goals: save towards a target; /deposit and /withdraw move money in and out of the active goal.
💸 Debts: keep track of who owes whom; /pay_debt_<id> records a repayment.
🔄 Payments: regular payments with reminders; /pay_regular_<id> pays one.
🚦 Limits: monthly limits per category with warnings at 50%, 80% and 100%.
📜 /history lists the last transactions and lets you delete one.
🗂 /categories renames or archives categories.

/cancel stops whatever you are doing."""

FEEDBACK_KINDS = {"bug": "🐞 Bug report", "idea": "💡 Idea"}


def register_handlers(registry: Registry) -> None:
    """Register help handlers."""

    @registry.on_command("help")
    def help_command(turn: Turn, argument: str) -> None:
        turn.show(HELP_TEXT, keyboards.help_menu())

    @registry.on_action("menu:help")
    def help_button(turn: Turn, step, args: list[str]) -> None:
        turn.show(HELP_TEXT, keyboards.help_menu())

    @registry.on_action("help")
    def feedback_kind(turn: Turn, step, args: list[str]) -> None:
        kind = args[0] if args and args[0] in FEEDBACK_KINDS else "idea"
        turn.advance(HelpFeedback(kind=kind))

    @registry.prompt(HelpFeedback)
    def feedback_prompt(turn: Turn, step: HelpFeedback):
        question = "Describe what went wrong:" if step.kind == "bug" else "Tell us your idea:"
        return f"{FEEDBACK_KINDS[step.kind]}\n\n{question}", keyboards.cancel()

    @registry.on_text(HelpFeedback)
    def feedback_entered(turn: Turn, step: HelpFeedback, text: str) -> None:
        message = read_text(text, max_length=2000)
        logger.info("help.feedback", user_id=turn.user_id, kind=step.kind)
        if turn.admin_chat_id is not None:
            turn.notify(
                turn.admin_chat_id,
                f"{FEEDBACK_KINDS[step.kind]} from user {turn.user_id}:\n\n{message}",
            )
        turn.finish("🙏 Thank you! Your message has been sent.")

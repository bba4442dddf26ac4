"""Savings goals: creation, deposit, withdrawal, choosing, editing and deletion."""

from budgetbot.domain.entities import Goal
from budgetbot.domain.errors import NotFoundError, ValidationError, no_active_goal
from budgetbot.flow import keyboards
from budgetbot.flow.inputs import button_id, read_amount, read_optional_date, read_text
from budgetbot.flow.registry import Registry
from budgetbot.flow.steps import (
    GoalDeadline,
    GoalDeleteConfirm,
    GoalDepositAmount,
    GoalEditDeadline,
    GoalEditName,
    GoalEditTarget,
    GoalName,
    GoalSelect,
    GoalTarget,
    GoalWithdrawAmount,
)
from budgetbot.flow.turn import Turn
from budgetbot.utils.date_parser import format_date

EDIT_STEPS = {"name": GoalEditName, "target": GoalEditTarget, "deadline": GoalEditDeadline}


def progress_bar(goal: Goal, width: int = 10) -> str:
    filled = min(int(goal.percent / 100 * width), width)
    return "█" * filled + "░" * (width - filled)


def describe_goal(turn: Turn, goal: Goal) -> str:
    lines = [
        f"🎯 {goal.name}",
        f"{progress_bar(goal)} {goal.percent:.0f}%",
        f"Saved {turn.money(goal.current_amount)} of {turn.money(goal.target_amount)}",
    ]
    if goal.deadline is not None:
        lines.append(f"Deadline: {format_date(goal.deadline)}")
    return "\n".join(lines)


def show_goals(turn: Turn) -> None:
    goals = turn.ledger.goals.list_goals(turn.user_id)
    active = turn.ledger.goals.get_active_goal(turn.user_id)
    if not goals:
        text = "You have no goals yet. Create one to start saving."
    else:
        parts = []
        for goal in goals:
            marker = "✅ active" if goal.is_active else "⏸ waiting"
            parts.append(f"{describe_goal(turn, goal)}\n{marker}")
        text = "\n\n".join(parts)
    turn.show(text, keyboards.goals_overview(active, has_goals=bool(goals)))


def _active_goal(turn: Turn) -> Goal:
    goal = turn.ledger.goals.get_active_goal(turn.user_id)
    if goal is None:
        raise NotFoundError(no_active_goal())
    return goal


def register_handlers(registry: Registry) -> None:
    """Register goal handlers."""

    @registry.on_command("goals")
    def goals_command(turn: Turn, argument: str) -> None:
        show_goals(turn)

    @registry.on_action("menu:goals")
    def goals_button(turn: Turn, step, args: list[str]) -> None:
        show_goals(turn)

    # Creation
    @registry.on_command("goal")
    def goal_command(turn: Turn, argument: str) -> None:
        turn.advance(GoalName())

    @registry.on_action("goal:new")
    def goal_button(turn: Turn, step, args: list[str]) -> None:
        turn.advance(GoalName())

    @registry.prompt(GoalName)
    def name_prompt(turn: Turn, step: GoalName):
        return "🎯 New goal\n\nWhat are you saving for?", keyboards.cancel()

    @registry.on_text(GoalName)
    def name_entered(turn: Turn, step: GoalName, text: str) -> None:
        turn.advance(GoalTarget(name=read_text(text)))

    @registry.prompt(GoalTarget)
    def target_prompt(turn: Turn, step: GoalTarget):
        return f"🎯 {step.name}\n\nHow much do you need?", keyboards.cancel()

    @registry.on_text(GoalTarget)
    def target_entered(turn: Turn, step: GoalTarget, text: str) -> None:
        turn.advance(GoalDeadline(name=step.name, target=read_amount(text)))

    @registry.prompt(GoalDeadline)
    def deadline_prompt(turn: Turn, step: GoalDeadline):
        text = (
            f"🎯 {step.name}: {turn.money(step.target)}\n\n"
            "Enter a deadline (DD.MM.YYYY) or press Skip:"
        )
        return text, keyboards.skip("goal:skip")

    def create(turn: Turn, step: GoalDeadline, deadline) -> None:
        goal = turn.ledger.goals.create_goal(turn.user_id, step.name, step.target, deadline=deadline)
        status = "It is your active goal now." if goal.is_active else "Another goal is active; choose it later in Goals."
        turn.finish(f"✅ Goal created\n\n{describe_goal(turn, goal)}\n\n{status}")

    @registry.on_text(GoalDeadline)
    def deadline_entered(turn: Turn, step: GoalDeadline, text: str) -> None:
        create(turn, step, read_optional_date(text, turn.now.date()))

    @registry.on_action("goal:skip", GoalDeadline)
    def deadline_skipped(turn: Turn, step: GoalDeadline, args: list[str]) -> None:
        create(turn, step, None)

    # Deposit and withdrawal
    @registry.on_command("deposit")
    def deposit_command(turn: Turn, argument: str) -> None:
        turn.advance(GoalDepositAmount(goal_id=_active_goal(turn).id))

    @registry.on_action("goal:deposit")
    def deposit_button(turn: Turn, step, args: list[str]) -> None:
        goal = turn.ledger.goals.get_goal(turn.user_id, button_id(args))
        if goal.is_completed:
            raise ValidationError(f"Goal {goal.name} is already reached")
        turn.advance(GoalDepositAmount(goal_id=goal.id))

    @registry.prompt(GoalDepositAmount)
    def deposit_prompt(turn: Turn, step: GoalDepositAmount):
        if step.goal_id is None:
            goal = _active_goal(turn)
        else:
            goal = turn.ledger.goals.get_goal(turn.user_id, step.goal_id)
        balance = turn.ledger.accounts.get_balance(turn.user_id)
        text = (
            f"{describe_goal(turn, goal)}\n\n"
            f"Balance: {turn.money(balance)}. How much do you want to put aside?"
        )
        return text, keyboards.cancel()

    @registry.on_text(GoalDepositAmount)
    def deposit_entered(turn: Turn, step: GoalDepositAmount, text: str) -> None:
        deposit = turn.ledger.deposit_to_goal(turn.user_id, read_amount(text), goal_id=step.goal_id)
        lines = [f"✅ {turn.money(deposit.deposited)} put aside", "", describe_goal(turn, deposit.goal)]
        if deposit.goal.is_completed:
            lines.extend(["", "🎉 Goal reached!"])
        if deposit.excess > 0:
            lines.extend(["", f"{turn.money(deposit.excess)} was more than needed and stays on your balance."])
        lines.extend(["", f"💰 Balance: {turn.money(deposit.balance)}"])
        turn.finish("\n".join(lines))

    @registry.on_command("withdraw")
    def withdraw_command(turn: Turn, argument: str) -> None:
        turn.advance(GoalWithdrawAmount(goal_id=_active_goal(turn).id))

    @registry.on_action("goal:withdraw")
    def withdraw_button(turn: Turn, step, args: list[str]) -> None:
        goal = turn.ledger.goals.get_goal(turn.user_id, button_id(args))
        turn.advance(GoalWithdrawAmount(goal_id=goal.id))

    @registry.prompt(GoalWithdrawAmount)
    def withdraw_prompt(turn: Turn, step: GoalWithdrawAmount):
        goal = turn.ledger.goals.get_goal(turn.user_id, step.goal_id)
        return f"{describe_goal(turn, goal)}\n\nHow much do you want to take back?", keyboards.cancel()

    @registry.on_text(GoalWithdrawAmount)
    def withdraw_entered(turn: Turn, step: GoalWithdrawAmount, text: str) -> None:
        goal, account = turn.ledger.withdraw_from_goal(turn.user_id, step.goal_id, read_amount(text))
        turn.finish(
            f"✅ Money returned to the balance\n\n{describe_goal(turn, goal)}\n\n"
            f"💰 Balance: {turn.money(account.balance)}"
        )

    # Choosing the active goal
    @registry.on_action("goal:choose")
    def choose_button(turn: Turn, step, args: list[str]) -> None:
        turn.advance(GoalSelect())

    @registry.prompt(GoalSelect)
    def select_prompt(turn: Turn, step: GoalSelect):
        goals = turn.ledger.goals.list_goals(turn.user_id)
        return "Which goal should receive deposits?", keyboards.goal_choice(goals)

    @registry.on_action("goal:select")
    def goal_selected(turn: Turn, step, args: list[str]) -> None:
        goal = turn.ledger.goals.set_active(turn.user_id, button_id(args))
        turn.finish(f"✅ Active goal changed\n\n{describe_goal(turn, goal)}")

    # Editing
    @registry.on_action("goal:edit")
    def edit_button(turn: Turn, step, args: list[str]) -> None:
        step_type = EDIT_STEPS.get(args[0] if args else "")
        if step_type is None:
            raise NotFoundError(f"Unknown goal field {args[0] if args else ''!r}")
        goal = turn.ledger.goals.get_goal(turn.user_id, button_id(args, 1))
        turn.advance(step_type(goal_id=goal.id))

    @registry.prompt(GoalEditName, GoalEditTarget, GoalEditDeadline)
    def edit_prompt(turn: Turn, step):
        goal = turn.ledger.goals.get_goal(turn.user_id, step.goal_id)
        if isinstance(step, GoalEditName):
            return f"🎯 {goal.name}\n\nEnter the new name:", keyboards.cancel()
        if isinstance(step, GoalEditTarget):
            return (
                f"🎯 {goal.name}: {turn.money(goal.target_amount)}\n\nEnter the new target:",
                keyboards.cancel(),
            )
        return (
            f"🎯 {goal.name}: deadline {format_date(goal.deadline)}\n\n"
            "Enter the new deadline (DD.MM.YYYY) or \"no\" to remove it:",
            keyboards.cancel(),
        )

    @registry.on_text(GoalEditName)
    def edit_name(turn: Turn, step: GoalEditName, text: str) -> None:
        goal = turn.ledger.goals.update_goal(turn.user_id, step.goal_id, name=read_text(text))
        turn.finish(f"✅ Goal updated\n\n{describe_goal(turn, goal)}")

    @registry.on_text(GoalEditTarget)
    def edit_target(turn: Turn, step: GoalEditTarget, text: str) -> None:
        goal = turn.ledger.goals.update_goal(
            turn.user_id, step.goal_id, target_amount=read_amount(text), now=turn.now
        )
        suffix = "\n\n🎉 Goal reached!" if goal.is_completed else ""
        turn.finish(f"✅ Goal updated\n\n{describe_goal(turn, goal)}{suffix}")

    @registry.on_text(GoalEditDeadline)
    def edit_deadline(turn: Turn, step: GoalEditDeadline, text: str) -> None:
        deadline = read_optional_date(text, turn.now.date())
        goal = turn.ledger.goals.update_goal(
            turn.user_id, step.goal_id, deadline=deadline, clear_deadline=deadline is None
        )
        turn.finish(f"✅ Goal updated\n\n{describe_goal(turn, goal)}")

    # Deletion
    @registry.on_action("goal:delete")
    def delete_button(turn: Turn, step, args: list[str]) -> None:
        goal = turn.ledger.goals.get_goal(turn.user_id, button_id(args))
        turn.advance(GoalDeleteConfirm(goal_id=goal.id))

    @registry.prompt(GoalDeleteConfirm)
    def delete_prompt(turn: Turn, step: GoalDeleteConfirm):
        goal = turn.ledger.goals.get_goal(turn.user_id, step.goal_id)
        text = f"🗑 Delete this goal?\n\n{describe_goal(turn, goal)}"
        if goal.current_amount > 0:
            text += f"\n\nThe saved {turn.money(goal.current_amount)} goes back to your balance."
        return text, keyboards.confirm_delete()

    @registry.on_action("confirm:yes", GoalDeleteConfirm)
    def delete_confirmed(turn: Turn, step: GoalDeleteConfirm, args: list[str]) -> None:
        goal = turn.ledger.goals.get_goal(turn.user_id, step.goal_id)
        returned = turn.ledger.delete_goal(turn.user_id, goal.id)
        lines = [f"🗑 Goal {goal.name} deleted"]
        if returned > 0:
            balance = turn.ledger.accounts.get_balance(turn.user_id)
            lines.append(f"{turn.money(returned)} returned to the balance")
            lines.append(f"💰 Balance: {turn.money(balance)}")
        turn.finish("\n".join(lines))

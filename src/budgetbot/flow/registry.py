"""Handler registry of the flow engine.

Wizard modules register their handlers through ``register_handlers(registry)``:

- text handlers, keyed by step type, receive ``(turn, step, text)``;
- action handlers, keyed by (step type or None, data prefix), receive
  ``(turn, step, args)`` where args are the data parts after the prefix;
- command handlers receive ``(turn, argument)``;
- prompt renderers return ``(text, keyboard)`` for a step.
"""

from typing import TYPE_CHECKING, Any, Callable, Optional

from budgetbot.flow.steps import Step
from budgetbot.transport.base import Keyboard

if TYPE_CHECKING:
    from budgetbot.flow.turn import Turn

TextHandler = Callable[["Turn", Any, str], None]
ActionHandler = Callable[["Turn", Any, list[str]], None]
CommandHandler = Callable[["Turn", str], None]
PromptRenderer = Callable[["Turn", Any], tuple[str, Optional[Keyboard]]]


class Registry:
    """Dispatch tables from steps, button data and commands to handlers."""

    def __init__(self):
        self._text: dict[type, TextHandler] = {}
        self._actions: dict[tuple[Optional[type], str], ActionHandler] = {}
        self._commands: dict[str, CommandHandler] = {}
        self._command_prefixes: dict[str, CommandHandler] = {}
        self._prompts: dict[type, PromptRenderer] = {}

    @staticmethod
    def _add(table: dict, key, handler) -> None:
        if key in table:
            raise ValueError(f"Handler already registered for {key!r}")
        table[key] = handler

    def on_text(self, *step_types: type[Step]):
        """Register the handler of typed text for the given steps."""

        def decorator(handler: TextHandler) -> TextHandler:
            for step_type in step_types:
                self._add(self._text, step_type, handler)
            return handler

        return decorator

    def on_action(self, prefix: str, *step_types: type[Step]):
        """Register a button handler.

        Without step types the handler is global: it runs whatever step the
        user is at, and also when no wizard is open.
        """

        def decorator(handler: ActionHandler) -> ActionHandler:
            for step_type in step_types or (None,):
                self._add(self._actions, (step_type, prefix), handler)
            return handler

        return decorator

    def on_command(self, *names: str):
        def decorator(handler: CommandHandler) -> CommandHandler:
            for name in names:
                self._add(self._commands, name, handler)
            return handler

        return decorator

    def on_command_prefix(self, prefix: str):
        """Register a deep link such as ``/pay_debt_<id>``; the handler gets the suffix."""

        def decorator(handler: CommandHandler) -> CommandHandler:
            self._add(self._command_prefixes, prefix, handler)
            return handler

        return decorator

    def prompt(self, *step_types: type[Step]):
        def decorator(renderer: PromptRenderer) -> PromptRenderer:
            for step_type in step_types:
                self._add(self._prompts, step_type, renderer)
            return renderer

        return decorator

    def text_handler(self, step: Step) -> Optional[TextHandler]:
        return self._text.get(type(step))

    def find_action(
        self, step: Optional[Step], data: str
    ) -> Optional[tuple[ActionHandler, list[str]]]:
        """Find the handler for button data.

        The longest registered prefix wins; for equal prefixes a handler
        registered for the current step wins over a global one.
        """
        parts = data.split(":")
        step_type = type(step) if step is not None else None
        for size in range(len(parts), 0, -1):
            prefix = ":".join(parts[:size])
            for key in ((step_type, prefix), (None, prefix)):
                handler = self._actions.get(key)
                if handler is not None:
                    return handler, parts[size:]
        return None

    def find_command(self, name: str) -> Optional[tuple[CommandHandler, Optional[str]]]:
        """Find a command handler; for deep links also return the suffix."""
        handler = self._commands.get(name)
        if handler is not None:
            return handler, None
        for prefix, handler in self._command_prefixes.items():
            if name.startswith(prefix) and len(name) > len(prefix):
                return handler, name[len(prefix) :]
        return None

    def render_prompt(self, turn: "Turn", step: Step) -> tuple[str, Optional[Keyboard]]:
        renderer = self._prompts.get(type(step))
        if renderer is None:
            raise LookupError(f"No prompt registered for {type(step).__name__}")
        return renderer(turn, step)

    @property
    def prompt_types(self) -> set[type]:
        return set(self._prompts)

    @property
    def text_types(self) -> set[type]:
        return set(self._text)

"""Scripted input layer for driving wizards in tests.

Usage::

    ui = TestUserInput()
    context = WizardContext(ui=ui)
    ui.run_with_inputs(["my-site", TestInput.BACK_BUTTON, "my-site-2"], wizard.prompt)
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Callable, Sequence, Union

from azext_wizard.errors import GoBackError, UserCancelledError
from azext_wizard.user_input import QuickPickItem, ValidateInput, WizardUserInput


class TestInput(Enum):
    __test__ = False

    USE_DEFAULT_VALUE = "use-default-value"
    BACK_BUTTON = "back-button"
    CANCEL = "cancel"


ScriptedInput = Union[str, "re.Pattern[str]", TestInput]


class TestUserInput(WizardUserInput):
    """Pops one queued input per prompt."""

    __test__ = False

    def __init__(self, inputs: Sequence[ScriptedInput] | None = None):
        super().__init__()
        self._inputs: list[ScriptedInput] = list(inputs or [])
        self.prompts: list[str] = []

    @property
    def remaining_inputs(self) -> list[ScriptedInput]:
        return list(self._inputs)

    def run_with_inputs(self, inputs: Sequence[ScriptedInput], callback: Callable[[], None]) -> None:
        """Queue *inputs*, run *callback*, and require every input to be used."""
        self._inputs = list(inputs)
        callback()
        if self._inputs:
            raise AssertionError(f"Not all inputs were used: {self._inputs}")

    # ------------------------------------------------------------------ #
    # Rendering hooks
    # ------------------------------------------------------------------ #

    def _show_input_box(
        self,
        prompt: str,
        value: str | None,
        placeholder: str | None,
        validate_input: ValidateInput | None,
        password: bool,
    ) -> str:
        self.prompts.append(prompt)
        answer = self._next(f"showInputBox. Prompt: '{prompt}'")

        if answer == TestInput.USE_DEFAULT_VALUE:
            if not value:
                raise ValueError("Can't use default value because none was specified")
            return value
        if not isinstance(answer, str):
            raise ValueError(f"Unexpected input '{answer}' for showInputBox.")

        if validate_input is not None:
            message = validate_input(answer)
            if message:
                raise ValueError(message)
        return answer

    def _show_quick_pick(
        self,
        items: list[QuickPickItem],
        placeholder: str | None,
        can_pick_many: bool,
    ) -> QuickPickItem | list[QuickPickItem]:
        self.prompts.append(placeholder or "")
        answer = self._next(f"showQuickPick. Placeholder: '{placeholder}'")

        if not items:
            raise ValueError(f"No quick pick items found. Placeholder: '{placeholder}'")
        if answer == TestInput.USE_DEFAULT_VALUE:
            return [items[0]] if can_pick_many else items[0]

        matches = [item for item in items if _matches(item, answer)]
        if can_pick_many:
            return matches
        if not matches:
            raise ValueError(f"Did not find quick pick item matching '{answer}'. Placeholder: '{placeholder}'")
        return matches[0]

    def _show_warning_message(self, message: str, items: list[str]) -> str:
        self.prompts.append(message)
        answer = self._next(f"showWarningMessage. Message: {message}")
        if isinstance(answer, str) and answer in items:
            return answer
        raise ValueError(f"Did not find message item matching '{answer}'. Message: '{message}'")

    def _next(self, description: str) -> ScriptedInput:
        if not self._inputs:
            raise ValueError(f"No more inputs left for call to {description}")
        answer = self._inputs.pop(0)
        if answer == TestInput.BACK_BUTTON:
            raise GoBackError()
        if answer == TestInput.CANCEL:
            raise UserCancelledError()
        return answer


def _matches(item: QuickPickItem, answer: ScriptedInput) -> bool:
    if isinstance(answer, re.Pattern):
        return bool(answer.search(item.label) or (item.description and answer.search(item.description)))
    return item.label == answer or item.description == answer

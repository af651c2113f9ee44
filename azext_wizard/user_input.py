"""Input layer shared by prompt steps.

Steps call ``context.ui.show_input_box(...)`` / ``show_quick_pick(...)``.
The base class handles everything that is independent of how input is
rendered: cancellation checks, step naming for ``context.last_step``,
the per-step input cache, and ``on_did_finish_prompt`` notifications the
engine listens to.  Subclasses render and read the actual input.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Sequence, TYPE_CHECKING

from azext_wizard.errors import UserCancelledError

if TYPE_CHECKING:
    from azext_wizard.context import WizardContext
    from azext_wizard.wizard import Wizard

logger = logging.getLogger(__name__)

ValidateInput = Callable[[str], "str | None"]


@dataclass
class PromptResult:
    value: Any
    matches_default: bool = False


@dataclass
class QuickPickItem:
    label: str
    description: str = ""
    data: Any = None


def _to_pick(item: QuickPickItem | str) -> QuickPickItem:
    return item if isinstance(item, QuickPickItem) else QuickPickItem(label=str(item))


def _convert_to_step_name(text: str) -> str:
    return re.sub(r"\s", "", text)[:20]


class WizardUserInput(ABC):
    """Base class for wizard input layers."""

    def __init__(self):
        self.wizard: Wizard | None = None
        self._context: WizardContext | None = None
        self._listeners: list[Callable[[PromptResult], None]] = []
        self._is_prompting = False

    def bind(self, context: WizardContext) -> None:
        self._context = context

    @property
    def is_prompting(self) -> bool:
        return self._is_prompting

    def on_did_finish_prompt(self, listener: Callable[[PromptResult], None]) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # ------------------------------------------------------------------ #
    # Public prompts
    # ------------------------------------------------------------------ #

    def show_input_box(
        self,
        prompt: str,
        value: str | None = None,
        placeholder: str | None = None,
        validate_input: ValidateInput | None = None,
        password: bool = False,
        step_name: str | None = None,
    ) -> str:
        self._before_prompt(step_name, "inputBox", prompt)

        initial = value
        if not password and self.wizard is not None:
            initial = self.wizard.get_cached_input_value() or value

        with self._prompting():
            result = self._show_input_box(
                prompt,
                value=initial,
                placeholder=placeholder,
                validate_input=validate_input,
                password=password,
            )

        self._fire(PromptResult(value=result, matches_default=result == value))
        return result

    def show_quick_pick(
        self,
        items: Sequence[QuickPickItem | str],
        placeholder: str | None = None,
        can_pick_many: bool = False,
        step_name: str | None = None,
    ) -> QuickPickItem | list[QuickPickItem]:
        self._before_prompt(step_name, "quickPick", placeholder)
        picks = [_to_pick(i) for i in items]

        with self._prompting():
            result = self._show_quick_pick(picks, placeholder=placeholder, can_pick_many=can_pick_many)

        self._fire(PromptResult(value=result))
        return result

    def show_warning_message(self, message: str, *items: str, step_name: str | None = None) -> str:
        self._before_prompt(step_name, "warningMessage", message)

        with self._prompting():
            result = self._show_warning_message(message, list(items))

        self._fire(PromptResult(value=result))
        return result

    # ------------------------------------------------------------------ #
    # Rendering hooks
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _show_input_box(
        self,
        prompt: str,
        value: str | None,
        placeholder: str | None,
        validate_input: ValidateInput | None,
        password: bool,
    ) -> str:
        ...

    @abstractmethod
    def _show_quick_pick(
        self,
        items: list[QuickPickItem],
        placeholder: str | None,
        can_pick_many: bool,
    ) -> QuickPickItem | list[QuickPickItem]:
        ...

    @abstractmethod
    def _show_warning_message(self, message: str, items: list[str]) -> str:
        ...

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _before_prompt(self, step_name: str | None, step_type: str, description: str | None) -> None:
        if not step_name and self.wizard is not None:
            step_name = self.wizard.current_step_id
        if not step_name:
            step_name = f"{step_type}|{_convert_to_step_name(description)}" if description else step_type

        if self._context is not None:
            self._context.last_step = step_name

        if self.wizard is not None:
            if self.wizard.cancellation_token.is_cancellation_requested:
                raise UserCancelledError(step_name)
            self.wizard.hide_loading_indicator()

        logger.debug("Prompting for %s", step_name)

    @contextmanager
    def _prompting(self) -> Iterator[None]:
        self._is_prompting = True
        try:
            yield
        finally:
            self._is_prompting = False

    def _fire(self, result: PromptResult) -> None:
        for listener in list(self._listeners):
            listener(result)


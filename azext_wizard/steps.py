"""Base contracts for wizard steps and the options that bundle them.

A wizard is made of two kinds of steps:

* :class:`PromptStep` — collects one piece of user input.  It may decline
  to run (``should_prompt``) and may inject a sub-wizard once it has run.
* :class:`ExecuteStep` — does side-effecting work after all prompting is
  done, ordered by ``priority`` (lower runs first).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol

from azext_wizard.context import WizardContext


class ProgressReporter(Protocol):
    """Sink for execute-step progress."""

    def report(self, message: str | None = None, increment: float | None = None) -> None:
        ...


class ActivityOutputType(str, Enum):
    """Which parts of an activity output to suppress."""

    ITEM = "item"
    MESSAGE = "message"
    ALL = "all"


@dataclass
class ExecuteActivityOutput:
    """What an execute step contributes to the activity log."""

    item: Any = None
    message: str | None = None


@dataclass
class ExecuteStepOptions:
    suppress_activity_output: ActivityOutputType | None = None
    continue_on_fail: bool = False


class PromptStep(ABC):
    """A unit of interactive input collection.

    Subclasses implement :meth:`prompt` and :meth:`should_prompt` and may
    define ``get_sub_wizard(context)`` returning :class:`WizardOptions`,
    ``configure_before_prompt(context)`` and ``undo(context)``.

    Class attributes:
        id: Optional identity used for de-duplication and the input cache.
            Defaults to the class name.
        hide_step_count: Hide "Step x/y" while this step prompts.
        supports_duplicate_steps: Opt out of sub-wizard de-duplication.
    """

    id: str | None = None
    hide_step_count: bool = False
    supports_duplicate_steps: bool = False

    def __init__(self):
        self.effective_title: str | None = None
        self.properties_before_prompt: frozenset[str] = frozenset()
        self.reset()

    def reset(self) -> None:
        """Clear the run-time flags before the step is (re-)processed."""
        self.prompted = False
        self.has_sub_wizard = False
        self.num_sub_prompt_steps = 0
        self.num_sub_execute_steps = 0

    @abstractmethod
    def prompt(self, context: WizardContext) -> None:
        """Prompt the user for input and store the answer on *context*."""

    @abstractmethod
    def should_prompt(self, context: WizardContext) -> bool:
        """Return True if this step still needs input.

        Also used to estimate the total step count, so it must be cheap
        and free of side effects.
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={effective_step_id(self)!r}>"


class ExecuteStep(ABC):
    """A unit of side-effecting work.

    Subclasses set ``priority`` and implement :meth:`execute` and
    :meth:`should_execute`.  Optional hooks ``create_progress_output``,
    ``create_success_output`` and ``create_fail_output`` feed the
    activity log (see :mod:`azext_wizard.activity`).
    """

    priority: int = 0
    id: str | None = None

    def __init__(self, options: ExecuteStepOptions | None = None):
        self.options = options or ExecuteStepOptions()

    @abstractmethod
    def execute(self, context: WizardContext, progress: ProgressReporter) -> None:
        """Do the work.  Errors propagate to the caller of ``Wizard.execute``."""

    @abstractmethod
    def should_execute(self, context: WizardContext) -> bool:
        """Evaluated right before the step's turn, not when the list is built."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={effective_step_id(self)!r} priority={self.priority}>"


@dataclass
class WizardOptions:
    """Steps and display options for a wizard or a sub-wizard."""

    prompt_steps: list[PromptStep] = field(default_factory=list)
    execute_steps: list[ExecuteStep] = field(default_factory=list)
    title: str | None = None
    hide_step_count: bool = False
    show_loading_prompt: bool = False
    skip_execute: bool = False


def effective_step_id(step: PromptStep | ExecuteStep) -> str:
    """Return the step's explicit ``id`` or its class name."""
    return step.id or type(step).__name__


# ---------------------------------------------------------------------- #
# Generic steps
# ---------------------------------------------------------------------- #


class SetContextPropertyStep(PromptStep):
    """Set a context property mid-wizard without asking the user.

    Useful when a value depends on an earlier answer, e.g. a default
    resource group name that depends on the chosen location.  If *value*
    is callable it is called with the context and its result is stored.
    """

    supports_duplicate_steps = True

    def __init__(self, property_name: str, value: Any | Callable[[WizardContext], Any]):
        super().__init__()
        self.property_name = property_name
        self.value = value
        self.id = f"SetContextPropertyStep:{property_name}"

    def should_prompt(self, context: WizardContext) -> bool:
        return False

    def prompt(self, context: WizardContext) -> None:
        self.configure_before_prompt(context)

    def configure_before_prompt(self, context: WizardContext) -> None:
        context[self.property_name] = self.value(context) if callable(self.value) else self.value


class NoExecuteStep(ExecuteStep):
    """Placeholder that replaces the execute list when execution is skipped."""

    priority = -1

    def execute(self, context: WizardContext, progress: ProgressReporter) -> None:
        return None

    def should_execute(self, context: WizardContext) -> bool:
        return False

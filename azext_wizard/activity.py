"""Activity log sink for the execute phase.

``Wizard.execute(activity=...)`` reports progress and per-step
success/fail/progress output here.  Rendering the log (a tree view, an
output window) is the host's business; this module only collects it.
"""

from __future__ import annotations

import logging
import uuid
from abc import abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from azext_wizard.context import WizardContext
from azext_wizard.steps import ExecuteActivityOutput, ExecuteStep

logger = logging.getLogger(__name__)


class ActivityOutputState(str, Enum):
    SUCCESS = "success"
    FAIL = "fail"
    PROGRESS = "progress"


@dataclass
class ActivityItem:
    """A single entry in the activity log."""

    label: str
    state: ActivityOutputState
    context_value: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_parent(self) -> bool:
        # Failures get a parent item so the host can attach the error as a child.
        return self.state == ActivityOutputState.FAIL


class ActivityLog:
    """Collects progress, items, and log messages for one wizard run."""

    def __init__(self, title: str | None = None):
        self.title = title
        self.children: list = []
        self.messages: list[str] = []
        self.progress: list[dict] = []

    def report(self, message: str | None = None, increment: float | None = None) -> None:
        self.progress.append({"message": message, "increment": increment})

    def add_child(self, item) -> None:
        self.children.append(item)

    def remove_child(self, item) -> None:
        self.children = [c for c in self.children if c is not item]

    def append_log(self, message: str) -> None:
        self.messages.append(message)
        logger.info("%s", message)


def _create_output(step_name: str, state: ActivityOutputState, label: str, message: str | None) -> ExecuteActivityOutput:
    item = ActivityItem(
        label=label,
        state=state,
        context_value=f"{step_name}{state.value.capitalize()}Item;activity{state.value.capitalize()}",
    )
    return ExecuteActivityOutput(item=item, message=message)


class ExecuteStepWithActivityOutput(ExecuteStep):
    """Execute step that describes itself in the activity log.

    Subclasses supply ``step_name`` plus the success/fail strings; the
    progress string and a separate tree label are optional.  Without a
    tree label the item is labelled with the matching log string.
    """

    step_name: str = ""

    @abstractmethod
    def get_success_string(self, context: WizardContext) -> str:
        ...

    @abstractmethod
    def get_fail_string(self, context: WizardContext) -> str:
        ...

    def get_progress_string(self, context: WizardContext) -> str | None:
        return None

    def get_tree_item_label(self, context: WizardContext) -> str | None:
        return None

    def create_success_output(self, context: WizardContext) -> ExecuteActivityOutput:
        success = self.get_success_string(context)
        label = self.get_tree_item_label(context) or success
        return _create_output(self.step_name, ActivityOutputState.SUCCESS, label, success)

    def create_fail_output(self, context: WizardContext) -> ExecuteActivityOutput:
        fail = self.get_fail_string(context)
        label = self.get_tree_item_label(context) or fail
        return _create_output(self.step_name, ActivityOutputState.FAIL, label, fail)

    def create_progress_output(self, context: WizardContext) -> ExecuteActivityOutput:
        progress = self.get_progress_string(context)
        label = self.get_tree_item_label(context) or progress
        if not label:
            raise ValueError(
                f"{type(self).__name__} must define get_tree_item_label or get_progress_string."
            )
        return _create_output(self.step_name, ActivityOutputState.PROGRESS, label, progress)

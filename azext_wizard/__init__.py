"""Multi-step wizard engine for Azure CLI extensions.

Prompt steps collect input (and may inject sub-wizards); execute steps do
the work afterwards in priority order.  See :mod:`azext_wizard.wizard`.
"""

from azext_wizard.activity import ActivityItem, ActivityLog, ExecuteStepWithActivityOutput
from azext_wizard.cancellation import CancellationToken, CancellationTokenSource
from azext_wizard.context import WizardContext
from azext_wizard.errors import GoBackError, UserCancelledError, WizardError, parse_error
from azext_wizard.steps import (
    ActivityOutputType,
    ExecuteActivityOutput,
    ExecuteStep,
    ExecuteStepOptions,
    NoExecuteStep,
    PromptStep,
    SetContextPropertyStep,
    WizardOptions,
    effective_step_id,
)
from azext_wizard.user_input import PromptResult, QuickPickItem, WizardUserInput
from azext_wizard.wizard import Wizard

__all__ = [
    "ActivityItem",
    "ActivityLog",
    "ActivityOutputType",
    "CancellationToken",
    "CancellationTokenSource",
    "ExecuteActivityOutput",
    "ExecuteStep",
    "ExecuteStepOptions",
    "ExecuteStepWithActivityOutput",
    "GoBackError",
    "NoExecuteStep",
    "PromptResult",
    "PromptStep",
    "QuickPickItem",
    "SetContextPropertyStep",
    "UserCancelledError",
    "Wizard",
    "WizardContext",
    "WizardError",
    "WizardOptions",
    "WizardUserInput",
    "effective_step_id",
    "parse_error",
]

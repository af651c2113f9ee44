"""Wizard error taxonomy.

Every wizard error is a ``knack.util.CLIError`` so an Azure CLI host
reports it like any other command failure.  ``GoBackError`` is internal
control flow: the engine catches it and re-prompts the previous step.
It only escapes ``Wizard.prompt()`` when there is no previous step.
"""

from __future__ import annotations

from dataclasses import dataclass

from knack.util import CLIError


class WizardError(CLIError):
    """Base class for errors raised by the wizard engine."""


class UserCancelledError(WizardError):
    """The user dismissed a prompt or the wizard's cancellation token fired."""

    def __init__(self, step_name: str | None = None):
        super().__init__("Operation cancelled.")
        self.step_name = step_name


class GoBackError(WizardError):
    """Signal to re-prompt the previous step."""

    def __init__(self):
        super().__init__("Go back.")


@dataclass
class ParsedError:
    """Normalized view of an arbitrary exception."""

    error_type: str
    message: str
    is_user_cancelled: bool = False


def parse_error(error: BaseException) -> ParsedError:
    """Classify *error* by its class name.

    Matching on the name instead of ``isinstance`` lets input layers and
    test doubles define their own ``GoBackError`` and still drive
    back-navigation.
    """
    error_type = type(error).__name__
    message = str(error) or error_type
    return ParsedError(
        error_type=error_type,
        message=message,
        is_user_cancelled=error_type == UserCancelledError.__name__,
    )


def is_go_back_error(error: BaseException) -> bool:
    return parse_error(error).error_type == GoBackError.__name__

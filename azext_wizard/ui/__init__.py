"""Terminal rendering for wizards.

Provides Rich-based console output and a prompt_toolkit input layer with:
- Title and step count above each prompt
- Back/cancel keywords
- Deferred loading spinner between prompts
- Execute-phase progress
"""

from azext_wizard.ui.console import (
    Console,
    ConsoleUserInput,
    LoadingIndicator,
    ProgressSink,
)

__all__ = [
    "Console",
    "ConsoleUserInput",
    "LoadingIndicator",
    "ProgressSink",
]

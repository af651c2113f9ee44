"""Rich-based console rendering for wizards.

Provides:
- Themed status lines (success/error/warning)
- ``ConsoleUserInput`` — the terminal input layer (prompt_toolkit) that
  shows the wizard title, "Step x/y", and back/cancel hints
- ``LoadingIndicator`` — a deferred spinner shown between prompts
- ``Console.progress()`` — execute-phase progress sink
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Iterator

from prompt_toolkit import PromptSession
from prompt_toolkit.styles import Style as PTStyle
from rich.console import Console as RichConsole
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.theme import Theme

from azext_wizard.errors import GoBackError, UserCancelledError
from azext_wizard.user_input import QuickPickItem, ValidateInput, WizardUserInput

# -------------------------------------------------------------------- #
# Color scheme
# -------------------------------------------------------------------- #

THEME = Theme({
    "dim": "#888888",
    "muted": "#666666",

    "success": "bright_green",
    "error": "bright_red",
    "warning": "bright_yellow",
    "info": "bright_cyan",

    "prompt.instruction": "bright_cyan",

    "progress.description": "bright_white",

    "wizard.title": "bright_magenta bold",
    "wizard.step": "bright_cyan",
})

PT_STYLE = PTStyle.from_dict({
    "prompt": "#888888",
    "": "#ffffff",
})


class Console:
    """Styled console output with semantic colors."""

    def __init__(self, rich_console: RichConsole | None = None):
        self._console = rich_console or RichConsole(theme=THEME, highlight=False)

    # ------------------------------------------------------------------ #
    # Basic output
    # ------------------------------------------------------------------ #

    def print_success(self, message: str):
        self._console.print(f"[success]✓[/success] {message}")

    def print_error(self, message: str):
        self._console.print(f"[error]✗[/error] {message}")

    def print_warning(self, message: str):
        self._console.print(f"[warning]![/warning] {message}")

    # ------------------------------------------------------------------ #
    # Progress indicators
    # ------------------------------------------------------------------ #

    @contextmanager
    def progress(self, title: str = "Working...") -> Iterator[ProgressSink]:
        """Progress sink for ``Wizard.execute``.

        Usage:
            with console.progress("Creating web app") as progress:
                wizard.execute(progress=progress)

        On completion, prints a persistent line with elapsed time.
        """
        start = time.monotonic()
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=self._console,
            transient=True,
        )
        with progress:
            task = progress.add_task(title, total=None)
            yield ProgressSink(progress, task, title)

        elapsed = time.monotonic() - start
        h, rem = divmod(int(elapsed), 3600)
        m, s = divmod(rem, 60)
        self.print_success(f"{title} completed. ({h}:{m:02d}:{s:02d})")

    @property
    def raw(self) -> RichConsole:
        """Access the underlying Rich console for advanced usage."""
        return self._console


class ProgressSink:
    """Adapts a Rich progress task to the wizard's ``report()`` protocol."""

    def __init__(self, progress: Progress, task_id, title: str):
        self._progress = progress
        self._task_id = task_id
        self._title = title

    def report(self, message: str | None = None, increment: float | None = None) -> None:
        description = f"{self._title}: {message}" if message else None
        self._progress.update(self._task_id, description=description, advance=increment)


class LoadingIndicator:
    """Spinner that appears only if the gap between prompts is long.

    ``show()`` arms a timer; the spinner starts when it fires.  ``hide()``
    disarms the timer and stops the spinner.  Both are idempotent.
    """

    def __init__(self, console: Console | None = None, delay: float = 0.5, message: str = "Loading..."):
        self._console = console or Console()
        self._delay = delay
        self._message = message
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._status = None

    @property
    def visible(self) -> bool:
        return self._status is not None

    def show(self) -> None:
        with self._lock:
            if self._timer is not None or self._status is not None:
                return
            self._timer = threading.Timer(self._delay, self._start)
            self._timer.daemon = True
            self._timer.start()

    def hide(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            status, self._status = self._status, None
        if status is not None:
            status.stop()

    def _start(self) -> None:
        with self._lock:
            if self._timer is None:
                return
            self._timer = None
            self._status = self._console.raw.status(f"[dim]{self._message}[/dim]")
            self._status.start()


class ConsoleUserInput(WizardUserInput):
    """Terminal input layer for wizards.

    - Title and ``Step x/y`` above each prompt (unless the wizard hides them)
    - Typing the back keyword re-prompts the previous step
    - The cancel keyword, Ctrl+C or Ctrl+D cancels the wizard
    - Invalid input is reported and the prompt repeats
    """

    def __init__(
        self,
        console: Console | None = None,
        back_keyword: str = "back",
        cancel_keyword: str = "quit",
        session: PromptSession | None = None,
    ):
        super().__init__()
        self._console = console or Console()
        self._rc = self._console.raw
        self.back_keyword = back_keyword
        self.cancel_keyword = cancel_keyword
        self._session = session

    @property
    def session(self) -> PromptSession:
        if self._session is None:
            self._session = PromptSession(style=PT_STYLE)
        return self._session

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
        self._print_header(prompt)
        if placeholder:
            self._rc.print(f"[muted]{escape(placeholder)}[/muted]", highlight=False)

        while True:
            answer = self._read("> ", default=value or "", password=password)
            message = validate_input(answer) if validate_input else None
            if not message:
                return answer
            self._console.print_error(message)

    def _show_quick_pick(
        self,
        items: list[QuickPickItem],
        placeholder: str | None,
        can_pick_many: bool,
    ) -> QuickPickItem | list[QuickPickItem]:
        if not items:
            raise ValueError(f"No quick pick items found. Placeholder: '{placeholder}'")

        self._print_header(placeholder or "Select an option")
        for i, item in enumerate(items, 1):
            description = f" [dim]{escape(item.description)}[/dim]" if item.description else ""
            self._rc.print(f"  [info]{i}.[/info] {escape(item.label)}{description}", highlight=False)

        hint = "Enter numbers separated by commas" if can_pick_many else "Enter a number"
        while True:
            answer = self._read(f"{hint}: ")
            indices = _parse_indices(answer, len(items), can_pick_many)
            if indices is None:
                self._console.print_error(f"'{answer}' is not a valid choice.")
                continue
            picked = [items[i] for i in indices]
            return picked if can_pick_many else picked[0]

    def _show_warning_message(self, message: str, items: list[str]) -> str:
        self._console.print_warning(message)
        choices = " / ".join(items)
        while True:
            answer = self._read(f"{choices}: ")
            for item in items:
                if answer.lower() == item.lower():
                    return item
            self._console.print_error(f"Choose one of: {choices}")

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _print_header(self, prompt: str) -> None:
        wizard = self.wizard
        self._rc.print()
        if wizard is not None and wizard.show_title and wizard.title:
            step = ""
            if not wizard.hide_step_count:
                step = f" [wizard.step]Step {wizard.current_step}/{wizard.total_steps}[/wizard.step]"
            self._rc.print(f"[wizard.title]{escape(wizard.title)}[/wizard.title]{step}", highlight=False)

        self._rc.print(f"[prompt.instruction]{escape(prompt)}[/prompt.instruction]", highlight=False)

        hints = []
        if wizard is not None and wizard.show_back_button:
            hints.append(f"'{self.back_keyword}' to go back")
        hints.append(f"'{self.cancel_keyword}' to cancel")
        self._rc.print(f"[muted]Type {' · '.join(hints)}.[/muted]", highlight=False)

    def _read(self, prompt_text: str, default: str = "", password: bool = False) -> str:
        try:
            answer = self.session.prompt(prompt_text, default=default, is_password=password)
        except (EOFError, KeyboardInterrupt):
            self._rc.print()
            raise UserCancelledError(self._context.last_step if self._context else None) from None

        answer = answer.strip()
        lowered = answer.lower()
        if lowered == self.cancel_keyword.lower():
            raise UserCancelledError(self._context.last_step if self._context else None)
        if lowered == self.back_keyword.lower() and self.wizard is not None and self.wizard.show_back_button:
            raise GoBackError()
        return answer


def _parse_indices(answer: str, count: int, many: bool) -> list[int] | None:
    parts = [p.strip() for p in answer.split(",") if p.strip()] if many else [answer.strip()]
    if not parts:
        return None
    indices = []
    for part in parts:
        if not part.isdigit():
            return None
        index = int(part) - 1
        if not 0 <= index < count:
            return None
        indices.append(index)
    return indices

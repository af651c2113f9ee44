"""Wizard engine — sequences prompt steps, then execute steps.

The prompt phase works on two stacks::

    pending   [C, B2, B1]   <- popped from the end (first-declared first)
    finished  [A, B]        <- history used for back-navigation and counting

A prompt step may return a sub-wizard after it runs; its prompt steps are
pushed on top of ``pending`` so they run next (depth-first), its execute
steps are appended to the execute list, and the parent records how many
it injected so back-navigation can take them out again.

Going back pops ``finished`` until it reaches a step that actually
prompted, unwinding injected steps on the way, and removes every context
key that step did not see before it first ran.

Usage::

    context = WizardContext({"subscription_id": sub}, ui=ConsoleUserInput())
    wizard = Wizard(context, WizardOptions(
        prompt_steps=[SiteNameStep(), PlanStep()],
        execute_steps=[PlanCreateStep(), SiteCreateStep()],
        title="Create web app",
    ))
    wizard.prompt()
    wizard.execute(activity=ActivityLog())
"""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

from azext_wizard.cancellation import CancellationToken, CancellationTokenSource
from azext_wizard.context import WizardContext
from azext_wizard.errors import GoBackError, UserCancelledError, is_go_back_error
from azext_wizard.steps import (
    ActivityOutputType,
    ExecuteActivityOutput,
    ExecuteStep,
    ExecuteStepOptions,
    NoExecuteStep,
    ProgressReporter,
    PromptStep,
    WizardOptions,
    effective_step_id,
)

if TYPE_CHECKING:
    from azext_wizard.activity import ActivityLog
    from azext_wizard.ui.console import LoadingIndicator
    from azext_wizard.user_input import PromptResult

logger = logging.getLogger(__name__)


class Wizard:
    """Drives one wizard session: ``prompt()`` then ``execute()``.

    Parameters
    ----------
    context : WizardContext
        Shared property bag handed to every step.
    options : WizardOptions
        Initial prompt/execute steps, title, and display flags.
    loading_indicator : LoadingIndicator, optional
        Shown between prompts when ``options.show_loading_prompt`` is set.
        Defaults to a console spinner.
    """

    def __init__(
        self,
        context: WizardContext,
        options: WizardOptions | None = None,
        loading_indicator: LoadingIndicator | None = None,
    ):
        options = options or WizardOptions()
        self._context = context
        self.title: str | None = options.title

        # Reversed so the first-declared step is popped first.
        self._prompt_steps: list[PromptStep] = list(reversed(options.prompt_steps))
        for step in self._prompt_steps:
            step.effective_title = options.title
        self._finished_prompt_steps: list[PromptStep] = []
        self._execute_steps: list[ExecuteStep] = list(options.execute_steps)

        self._wizard_hide_step_count = options.hide_step_count
        self._step_hide_step_count = False
        self._cancellation_source = CancellationTokenSource()
        self._cached_input_values: dict[str, str] = {}
        self.current_step_id: str | None = None
        self._silent = False

        self._loading_indicator = None
        if options.show_loading_prompt:
            if loading_indicator is None:
                from azext_wizard.ui.console import LoadingIndicator

                loading_indicator = LoadingIndicator()
            self._loading_indicator = loading_indicator

        if options.skip_execute:
            self._execute_steps = [NoExecuteStep()]
            self._silent = True

    # ------------------------------------------------------------------ #
    # UI-facing state
    # ------------------------------------------------------------------ #

    @property
    def current_step(self) -> int:
        return sum(1 for s in self._finished_prompt_steps if s.prompted) + 1

    @property
    def total_steps(self) -> int:
        """Prompted steps so far, plus pending steps that will prompt, plus the one prompting now."""
        prompted = sum(1 for s in self._finished_prompt_steps if s.prompted)
        remaining = sum(1 for s in self._prompt_steps if s.should_prompt(self._context))
        return prompted + remaining + 1

    @property
    def hide_step_count(self) -> bool:
        return self._wizard_hide_step_count or self._step_hide_step_count

    @property
    def show_back_button(self) -> bool:
        return self.current_step > 1

    @property
    def show_title(self) -> bool:
        return self.total_steps > 1

    @property
    def cancellation_token(self) -> CancellationToken:
        return self._cancellation_source.token

    @property
    def pending_prompt_steps(self) -> list[PromptStep]:
        """Pending prompt steps in the order they will run."""
        return list(reversed(self._prompt_steps))

    @property
    def finished_prompt_steps(self) -> list[PromptStep]:
        return list(self._finished_prompt_steps)

    @property
    def execute_steps(self) -> list[ExecuteStep]:
        return list(self._execute_steps)

    def get_cached_input_value(self) -> str | None:
        """Return the last value typed for the step currently prompting."""
        if self.current_step_id is None:
            return None
        return self._cached_input_values.get(self.current_step_id)

    def cancel(self) -> None:
        """Request cancellation of the prompt phase.  Safe from any thread."""
        self._cancellation_source.cancel()

    def hide_loading_indicator(self) -> None:
        if self._loading_indicator is not None:
            self._loading_indicator.hide()

    # ------------------------------------------------------------------ #
    # Prompt phase
    # ------------------------------------------------------------------ #

    def prompt(self) -> None:
        """Run every prompt step, expanding sub-wizards as they appear.

        Raises:
            UserCancelledError: The user cancelled or ``cancel()`` was called.
            GoBackError: The user went back from the first prompted step.
        """
        ui = self._context.ui
        if ui is not None:
            ui.wizard = self

        try:
            step = self._pop_prompt_step()
            while step is not None:
                self._raise_if_cancelled()

                step.reset()
                step_id = effective_step_id(step)
                self._context.last_step = f"prompt-{step_id}"
                self.title = step.effective_title
                self._step_hide_step_count = step.hide_step_count

                step.properties_before_prompt = self._context.snapshot()

                configure_before_prompt = getattr(step, "configure_before_prompt", None)
                if configure_before_prompt is not None:
                    configure_before_prompt(self._context)

                if step.should_prompt(self._context):
                    logger.debug("Prompting step %s (%d/%d)", step_id, self.current_step, self.total_steps)
                    try:
                        self._prompt_step(step)
                    except Exception as e:  # noqa: BLE001
                        if not is_go_back_error(e):
                            raise
                        logger.debug("Going back from step %s", step_id)
                        step = self._go_back(step)
                        continue
                else:
                    logger.debug("Skipping prompt for step %s", step_id)

                get_sub_wizard = getattr(step, "get_sub_wizard", None)
                if get_sub_wizard is not None:
                    self._raise_if_cancelled()
                    sub_wizard = get_sub_wizard(self._context)
                    if sub_wizard:
                        self._add_sub_wizard(step, sub_wizard)

                self._finished_prompt_steps.append(step)
                step = self._pop_prompt_step()
        finally:
            if ui is not None:
                ui.wizard = None
            self.hide_loading_indicator()
            self._cancellation_source.dispose()

    def _pop_prompt_step(self) -> PromptStep | None:
        return self._prompt_steps.pop() if self._prompt_steps else None

    def _raise_if_cancelled(self) -> None:
        if self._cancellation_source.token.is_cancellation_requested:
            raise UserCancelledError(self.current_step_id)

    def _prompt_step(self, step: PromptStep) -> None:
        ui = self._context.ui
        loading = self._loading_indicator
        remove_listener = None

        if ui is not None:
            def _on_did_finish_prompt(result: PromptResult) -> None:
                step.prompted = True
                if loading is not None:
                    loading.show()
                if (
                    isinstance(result.value, str)
                    and not result.matches_default
                    and self.current_step_id
                    and not step.supports_duplicate_steps
                ):
                    self._cached_input_values[self.current_step_id] = result.value

            remove_listener = ui.on_did_finish_prompt(_on_did_finish_prompt)

        try:
            self.current_step_id = effective_step_id(step)
            step.prompt(self._context)
        except KeyboardInterrupt:
            # Interrupted while no input was showing (e.g. during loading).
            self._cancellation_source.cancel()
            raise UserCancelledError(self.current_step_id) from None
        finally:
            self.current_step_id = None
            if remove_listener is not None:
                remove_listener()
            if loading is not None:
                loading.hide()

        if ui is None:
            # Without an input layer there is nothing to observe; treat the
            # step as having asked.
            step.prompted = True

    def _add_sub_wizard(self, step: PromptStep, sub_wizard: WizardOptions) -> None:
        step.has_sub_wizard = True

        if sub_wizard.prompt_steps:
            existing = {effective_step_id(s) for s in self._finished_prompt_steps + self._prompt_steps}
            prompt_steps = []
            for sub_step in sub_wizard.prompt_steps:
                if sub_step.supports_duplicate_steps or effective_step_id(sub_step) not in existing:
                    prompt_steps.append(sub_step)
                else:
                    logger.debug("Dropping duplicate step %s", effective_step_id(sub_step))

            for sub_step in prompt_steps:
                sub_step.effective_title = sub_wizard.title or step.effective_title
            self._prompt_steps.extend(reversed(prompt_steps))
            step.num_sub_prompt_steps = len(prompt_steps)

        if sub_wizard.execute_steps:
            self._execute_steps.extend(sub_wizard.execute_steps)
            step.num_sub_execute_steps = len(sub_wizard.execute_steps)

        logger.debug(
            "Step %s added a sub-wizard (%d prompt, %d execute)",
            effective_step_id(step), step.num_sub_prompt_steps, step.num_sub_execute_steps,
        )

    def _go_back(self, current_step: PromptStep) -> PromptStep:
        step = current_step
        while True:
            self._prompt_steps.append(step)
            if not self._finished_prompt_steps:
                raise GoBackError()
            step = self._finished_prompt_steps.pop()

            undo = getattr(step, "undo", None)
            if undo is not None:
                undo(self._context)

            if step.has_sub_wizard:
                _remove_from_end(self._prompt_steps, step.num_sub_prompt_steps)
                _remove_from_end(self._execute_steps, step.num_sub_execute_steps)

            if step.prompted:
                break

        self._context.restore(step.properties_before_prompt)
        logger.debug("Went back to step %s", effective_step_id(step))
        return step

    # ------------------------------------------------------------------ #
    # Execute phase
    # ------------------------------------------------------------------ #

    def execute(
        self,
        activity: ActivityLog | None = None,
        progress: ProgressReporter | None = None,
    ) -> None:
        """Run execute steps in ascending priority.

        ``should_execute`` is checked at each step's turn, so an earlier
        step can switch a later one off.  The first error halts the run
        unless the step's options say ``continue_on_fail``; completed
        steps are not rolled back.

        Args:
            activity: Receives progress plus per-step success/fail/progress output.
            progress: External progress sink, e.g. ``Console.progress()``.
        """
        if self._silent:
            activity = None
        if activity is not None and not activity.title:
            activity.title = self.title

        # Popped from the end: lowest priority first, equal priorities
        # last-registered first.
        steps = sorted(self._execute_steps, key=lambda s: s.priority, reverse=True)
        reporter = _CountingProgress(self._context, steps, sinks=[s for s in (progress, activity) if s is not None])

        while steps:
            step = steps.pop()
            reporter.remaining = list(steps)
            if not step.should_execute(self._context):
                logger.debug("Skipping execute step %s", effective_step_id(step))
                continue

            progress_output = _call_hook(step, "create_progress_output", self._context)
            if progress_output is not None:
                self._display_activity_output(progress_output, step.options, activity)

            output = None
            try:
                self._context.last_step = f"execute-{effective_step_id(step)}"
                logger.debug("Executing step %s (priority %s)", effective_step_id(step), step.priority)
                step.execute(self._context, reporter)
                output = _call_hook(step, "create_success_output", self._context)
            except Exception as e:
                output = _call_hook(step, "create_fail_output", self._context)
                if not step.options.continue_on_fail:
                    raise
                logger.warning("Execute step %s failed; continuing: %s", effective_step_id(step), e)
            finally:
                if activity is not None and progress_output is not None and progress_output.item is not None:
                    activity.remove_child(progress_output.item)
                self._display_activity_output(output or ExecuteActivityOutput(), step.options, activity)
                reporter.current += 1

    @staticmethod
    def _display_activity_output(
        output: ExecuteActivityOutput,
        options: ExecuteStepOptions,
        activity: ActivityLog | None,
    ) -> None:
        if activity is None:
            return
        suppress = options.suppress_activity_output
        if output.item is not None and suppress not in (ActivityOutputType.ITEM, ActivityOutputType.ALL):
            activity.add_child(output.item)
        if output.message and suppress not in (ActivityOutputType.MESSAGE, ActivityOutputType.ALL):
            activity.append_log(output.message)


class _CountingProgress:
    """Progress sink that appends "(current/total)" to messages."""

    def __init__(self, context: WizardContext, steps: list[ExecuteStep], sinks: list[Any]):
        self._context = context
        self._sinks = sinks
        self.remaining: list[ExecuteStep] = list(steps)
        self.current = 1

    def report(self, message: str | None = None, increment: float | None = None) -> None:
        if message:
            total = self.current + sum(1 for s in self.remaining if s.should_execute(self._context))
            if total > 1:
                message = f"{message} ({self.current}/{total})"
        for sink in self._sinks:
            sink.report(message=message, increment=increment)


def _call_hook(step: ExecuteStep, name: str, context: WizardContext) -> ExecuteActivityOutput | None:
    hook = getattr(step, name, None)
    return hook(context) if hook is not None else None


def _remove_from_end(items: list, count: int) -> None:
    if count > 0:
        del items[-count:]

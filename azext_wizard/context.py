"""Shared wizard context — the property bag every step reads and writes.

Answers live in the mapping itself.  Engine bookkeeping (the input layer,
the active wizard, the last step id) lives in attributes so it never takes
part in snapshots or rollback.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any, Iterator, TYPE_CHECKING

if TYPE_CHECKING:
    from azext_wizard.user_input import WizardUserInput

logger = logging.getLogger(__name__)


class WizardContext(MutableMapping):
    """Mutable key/value store with a snapshot/restore pair for rollback.

    Usage::

        context = WizardContext({"subscription_id": sub_id}, ui=ConsoleUserInput())
        before = context.snapshot()
        context["site_name"] = "contoso-web"
        context.restore(before)   # "site_name" is removed again
    """

    def __init__(self, values: dict[str, Any] | None = None, ui: WizardUserInput | None = None):
        self._values: dict[str, Any] = dict(values or {})
        self.ui = ui
        if ui is not None:
            ui.bind(self)
        self.last_step: str | None = None

    # ------------------------------------------------------------------ #
    # Mapping protocol
    # ------------------------------------------------------------------ #

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"WizardContext({self._values!r})"

    # ------------------------------------------------------------------ #
    # Snapshot / rollback
    # ------------------------------------------------------------------ #

    def snapshot(self) -> frozenset[str]:
        """Return the keys currently present, whatever their value."""
        return frozenset(self._values)

    def restore(self, snapshot: frozenset[str]) -> list[str]:
        """Delete every key not present in *snapshot*.

        Values of surviving keys are left as they are.

        Returns:
            The removed keys, in insertion order.
        """
        removed = [k for k in self._values if k not in snapshot]
        for key in removed:
            del self._values[key]
        if removed:
            logger.debug("Rolled back context keys: %s", ", ".join(removed))
        return removed

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

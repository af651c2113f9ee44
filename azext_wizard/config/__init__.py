"""Wizard configuration management."""

import copy
import logging
from pathlib import Path
from typing import Any

import yaml
from knack.util import CLIError

logger = logging.getLogger(__name__)

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_CONFIG = {
    "wizard": {
        "title": "",
        "hide_step_count": False,
        "show_loading_prompt": False,
        "loading_delay": 0.5,
    },
    "input": {
        "back_keyword": "back",
        "cancel_keyword": "quit",
    },
    "logging": {
        "level": "WARNING",
    },
}


class WizardConfig:
    """Manages wizard.yaml configuration.

    Provides dot-notation get/set for nested config values and handles
    persistence to disk.  A missing file is not an error: the defaults
    apply until something is saved.
    """

    CONFIG_FILENAME = "wizard.yaml"

    def __init__(self, config_dir: str = "."):
        self.config_dir = Path(config_dir)
        self.config_path = self.config_dir / self.CONFIG_FILENAME
        self._config: dict = copy.deepcopy(DEFAULT_CONFIG)

    # ------------------------------------------------------------------ #
    #  Persistence                                                        #
    # ------------------------------------------------------------------ #

    def load(self) -> dict:
        """Load configuration from wizard.yaml over the defaults.

        Returns:
            Merged config dict.

        Raises:
            CLIError if the file is not valid YAML or holds invalid values.
        """
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        if not self.config_path.exists():
            logger.debug("No %s in %s; using defaults", self.CONFIG_FILENAME, self.config_dir)
            return self._config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise CLIError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise CLIError(f"Expected a mapping at the top of {self.config_path}.")

        for key, value in _flatten(loaded):
            self._validate_config_value(key, value)
        self._apply_overrides_to(self._config, loaded)
        self._validate_keywords(
            self.get("input.back_keyword"),
            self.get("input.cancel_keyword"),
        )
        return self._config

    def save(self):
        """Persist current configuration to wizard.yaml."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                self._config,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

        logger.debug("Configuration saved to %s", self.config_path)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-separated key.

        Examples:
            config.get("wizard.loading_delay")
            config.get("input.back_keyword")
        """
        parts = key.split(".")
        current = self._config

        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def set(self, key: str, value: Any):
        """Set a config value by dot-separated key and save.

        Creates intermediate dicts as needed.
        """
        self._validate_config_value(key, value)
        if key == "input.back_keyword":
            self._validate_keywords(value, self.get("input.cancel_keyword"))
        elif key == "input.cancel_keyword":
            self._validate_keywords(self.get("input.back_keyword"), value)

        self._set_nested(self._config, key, value)
        self.save()

    def to_dict(self) -> dict:
        return copy.deepcopy(self._config)

    # ------------------------------------------------------------------ #
    #  Consumers                                                          #
    # ------------------------------------------------------------------ #

    def wizard_options(self, **kwargs):
        """Build ``WizardOptions`` with display defaults taken from config.

        Keyword arguments (``prompt_steps``, ``execute_steps``, ``title``...)
        override the configured values.
        """
        from azext_wizard.steps import WizardOptions

        options = {
            "title": self.get("wizard.title") or None,
            "hide_step_count": bool(self.get("wizard.hide_step_count")),
            "show_loading_prompt": bool(self.get("wizard.show_loading_prompt")),
        }
        options.update(kwargs)
        return WizardOptions(**options)

    def console_user_input(self, console=None):
        """Build a ``ConsoleUserInput`` using the configured keywords."""
        from azext_wizard.ui.console import ConsoleUserInput

        return ConsoleUserInput(
            console=console,
            back_keyword=self.get("input.back_keyword"),
            cancel_keyword=self.get("input.cancel_keyword"),
        )

    def loading_indicator(self, console=None):
        from azext_wizard.ui.console import LoadingIndicator

        return LoadingIndicator(console=console, delay=float(self.get("wizard.loading_delay")))

    def apply_logging(self):
        """Set the ``azext_wizard`` logger level from ``logging.level``."""
        level = str(self.get("logging.level")).upper()
        logging.getLogger("azext_wizard").setLevel(level)
        return level

    # ------------------------------------------------------------------ #
    #  Validation                                                         #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_config_value(key: str, value: Any):
        """Enforce constraints at load and set time.

        Rules:
          - wizard.loading_delay must be a non-negative number.
          - wizard.hide_step_count / wizard.show_loading_prompt must be booleans.
          - input.back_keyword / input.cancel_keyword must be non-empty strings.
          - logging.level must be a standard level name.
        """
        if key == "wizard.loading_delay":
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise CLIError(
                    f"Invalid loading delay: '{value}'.\n" "Use a non-negative number of seconds."
                )

        if key in ("wizard.hide_step_count", "wizard.show_loading_prompt"):
            if not isinstance(value, bool):
                raise CLIError(f"'{key}' must be true or false, got '{value}'.")

        if key in ("input.back_keyword", "input.cancel_keyword"):
            if not isinstance(value, str) or not value.strip():
                raise CLIError(f"'{key}' must be a non-empty string.")

        if key == "logging.level":
            if str(value).upper() not in _LOG_LEVELS:
                raise CLIError(
                    f"Unknown logging level: '{value}'.\n" f"Supported levels: {', '.join(sorted(_LOG_LEVELS))}"
                )

    @staticmethod
    def _validate_keywords(back: Any, cancel: Any):
        if str(back).strip().lower() == str(cancel).strip().lower():
            raise CLIError(
                f"The back and cancel keywords must differ (both are '{back}')."
            )

    def _apply_overrides_to(self, base: dict, overlay: dict):
        """Recursively merge *overlay* into *base*."""

        def merge(b: dict, o: dict):
            for key, value in o.items():
                if isinstance(value, dict) and isinstance(b.get(key), dict):
                    merge(b[key], value)
                else:
                    b[key] = value

        merge(base, overlay)

    @staticmethod
    def _set_nested(target: dict, key: str, value: Any):
        """Set a dot-separated *key* in *target*, creating intermediate dicts."""
        parts = key.split(".")
        current = target
        for part in parts[:-1]:
            if part not in current or not isinstance(current[part], dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def exists(self) -> bool:
        return self.config_path.exists()


def _flatten(data: dict, prefix: str = ""):
    """Yield ``(dotted_key, value)`` for every leaf in *data*."""
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _flatten(value, f"{dotted}.")
        else:
            yield dotted, value

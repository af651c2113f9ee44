"""Shared test fixtures for azext_wizard tests."""

import copy
import logging

import pytest
import yaml

from azext_wizard.config import DEFAULT_CONFIG
from azext_wizard.context import WizardContext
from azext_wizard.testing import TestUserInput


# ------------------------------------------------------------------
# Global: keep the package logger quiet and predictable
# ------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_wizard_logger():
    """``WizardConfig.apply_logging`` changes the package logger level.

    Restore it after every test so one config test cannot change what
    ``caplog`` sees in another.
    """
    package_logger = logging.getLogger("azext_wizard")
    level = package_logger.level
    yield
    package_logger.setLevel(level)


@pytest.fixture
def ui():
    """Scripted input layer with no queued answers."""
    return TestUserInput()


@pytest.fixture
def context(ui):
    """Empty wizard context bound to the scripted input layer."""
    return WizardContext(ui=ui)


@pytest.fixture
def sample_config():
    """Return a deep copy of the default config with test values."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["wizard"]["title"] = "Create web app"
    config["wizard"]["show_loading_prompt"] = True
    config["wizard"]["loading_delay"] = 1.5
    config["input"]["back_keyword"] = "prev"
    config["logging"]["level"] = "DEBUG"
    return config


@pytest.fixture
def config_dir(tmp_path, sample_config):
    """Directory holding a populated wizard.yaml."""
    with open(tmp_path / "wizard.yaml", "w", encoding="utf-8") as f:
        yaml.dump(sample_config, f, default_flow_style=False)
    return tmp_path

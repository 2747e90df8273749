"""Shared pytest fixtures."""

import logging

import pytest

from updatecore.logging.context import clear_log_context

SETTINGS_VARIABLES = ("UPDATECORE_EXPERIMENTAL", "UPDATECORE_WORKDIR", "LOG_LEVEL", "LOG_FORMAT")


@pytest.fixture
def clean_environment(monkeypatch):
    """Unset every environment variable updatecore reads."""
    for name in SETTINGS_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def clean_log_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def restore_root_logger():
    """Undo handler and level changes made by configure_logging."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)

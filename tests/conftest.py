"""
Pytest configuration and shared fixtures for Log Scrubber tests.

Every test gets a fresh, empty ScrubberState, and every interpreter hook
the scrubber can touch is put back afterwards, so a failing test cannot
leave wrappers installed for the rest of the run.
"""

import logging
import os
import sys
import threading
import warnings

import pytest

# Add parent directory to path for package imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from log_scrubber import ScrubberState, set_state  # noqa: E402

_LOGGING_NAMES = ("debug", "info", "warning", "warn", "error", "exception", "critical", "fatal", "log")


@pytest.fixture(autouse=True)
def fresh_state():
    """
    Give the test an empty live state and restore interpreter hooks after.
    This runs automatically around each test.
    """
    saved_hooks = {
        "showwarning": warnings.showwarning,
        "warn": warnings.warn,
        "excepthook": sys.excepthook,
        "threading_excepthook": threading.excepthook,
        "record_factory": logging.getLogRecordFactory(),
    }
    saved_module = {name: getattr(logging, name) for name in _LOGGING_NAMES if hasattr(logging, name)}
    saved_logger = {name: vars(logging.Logger)[name] for name in _LOGGING_NAMES if name in vars(logging.Logger)}

    previous = set_state(ScrubberState())
    yield
    set_state(previous)

    warnings.showwarning = saved_hooks["showwarning"]
    warnings.warn = saved_hooks["warn"]
    sys.excepthook = saved_hooks["excepthook"]
    threading.excepthook = saved_hooks["threading_excepthook"]
    logging.setLogRecordFactory(saved_hooks["record_factory"])
    for name, value in saved_module.items():
        setattr(logging, name, value)
    for name, value in saved_logger.items():
        setattr(logging.Logger, name, value)


@pytest.fixture(autouse=True)
def clear_scrubber_env(monkeypatch):
    """Keep LOG_SCRUBBER_* variables from the host out of the tests."""
    for name in list(os.environ):
        if name.startswith("LOG_SCRUBBER_"):
            monkeypatch.delenv(name)


@pytest.fixture
def card_patterns():
    """Patterns for the test card number used throughout the suite."""
    return {"4007000000027": "DELETED"}


@pytest.fixture
def shown_warnings():
    """
    Replace warnings.showwarning with a recorder.

    Returns the list every displayed warning message is appended to, as
    text.
    """
    shown = []

    def record(message, category, filename, lineno, file=None, line=None):
        shown.append(str(message))

    warnings.showwarning = record
    return shown

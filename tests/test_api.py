"""
Tests for the public entry points and configuration loading.

Tests cover:
- Pattern management through the facade
- Bulk hook operations and MissingTarget reporting
- Custom hook targets
- Settings from the environment and .env files
- install()
"""

import logging
import os
import warnings

import pytest

import log_scrubber
from log_scrubber import CallableSlot, MissingTarget, ScrubberSettings, get_state, load_settings
from log_scrubber.config import DEFAULT_HOOKS, DEFAULT_PROFILES


@pytest.fixture
def custom_sink():
    """A registered custom hook named SINK; yields the messages it receives."""
    received = []
    slot = {"handler": lambda message: received.append(message)}
    log_scrubber.register_target(
        CallableSlot("SINK", get=lambda: slot["handler"], set=lambda h: slot.__setitem__("handler", h))
    )
    yield received, slot
    log_scrubber.unregister_target("SINK")


@pytest.fixture
def dotenv_file(tmp_path):
    """Write a .env file and drop whatever it put into the environment."""
    path = tmp_path / ".env"
    path.write_text(
        "LOG_SCRUBBER_ENABLED=off\n"
        "LOG_SCRUBBER_HOOKS=WARN, LOG\n"
        "LOG_SCRUBBER_PROFILES=pci,pii\n"
    )
    yield str(path)
    for name in ("LOG_SCRUBBER_ENABLED", "LOG_SCRUBBER_HOOKS", "LOG_SCRUBBER_PROFILES"):
        os.environ.pop(name, None)


class TestPatternFacade:
    """Test suite for pattern management through the facade."""

    def test_add_and_remove_pattern(self, card_patterns):
        """Should change what redact() scrubs."""
        log_scrubber.add_pattern(card_patterns)
        assert log_scrubber.redact("4007000000027", 7) == ["DELETED", 7]

        assert log_scrubber.remove_pattern(["4007000000027"]) == ["4007000000027"]
        assert log_scrubber.redact("4007000000027") == ["4007000000027"]

    def test_redact_nested_arguments(self, card_patterns):
        """Should scrub every argument and return them as a list."""
        log_scrubber.add_pattern(card_patterns)
        payload = {"card": "4007000000027", "items": ["4007000000027"]}

        result = log_scrubber.redact("a", payload)

        assert result == ["a", {"card": "DELETED", "items": ["DELETED"]}]


class TestHookFacade:
    """Test suite for hook management through the facade."""

    def test_custom_target(self, custom_sink, card_patterns):
        """Should intercept a registered custom hook by name."""
        received, slot = custom_sink
        log_scrubber.add_pattern(card_patterns)
        log_scrubber.add_hook("SINK")

        slot["handler"]("card 4007000000027")

        assert received == ["card DELETED"]

    def test_disable_and_enable_single_hook(self, custom_sink, card_patterns):
        """Should toggle one hook while others stay as they are."""
        received, slot = custom_sink
        log_scrubber.add_pattern(card_patterns)
        log_scrubber.add_hook("SINK")

        assert log_scrubber.disable_hook("SINK") is True
        slot["handler"]("4007000000027")
        assert log_scrubber.enable_hook("SINK") is True
        slot["handler"]("4007000000027")

        assert received == ["4007000000027", "DELETED"]
        assert log_scrubber.is_enabled() is True

    def test_bulk_add_reports_every_missing_target(self, custom_sink):
        """Should add what it can and list everything it could not find."""
        with pytest.raises(MissingTarget) as excinfo:
            log_scrubber.add_hook("SINK", "NOPE", "no_such_module_xyz.func")

        assert excinfo.value.identifiers == ("NOPE", "no_such_module_xyz.func")
        assert "SINK" in get_state().hooks

    def test_remove_untracked_hook_is_noop(self):
        """Should ignore hooks that were never added."""
        log_scrubber.remove_hook("WARN")
        assert len(get_state().hooks) == 0

    def test_unknown_source(self):
        """Should report sources that do not exist."""
        with pytest.raises(MissingTarget) as excinfo:
            log_scrubber.add_source("no_such_module_xyz")

        assert excinfo.value.identifiers == ("no_such_module_xyz",)

    def test_registry_routing(self):
        """Should keep built-in hooks and named callables apart."""
        current = get_state()

        assert current.registry_for("WARN") is current.hooks
        assert current.registry_for("logging.warning") is current.methods


class TestSettings:
    """Test suite for configuration loading."""

    def test_defaults(self, tmp_path):
        """Should fall back to defaults when nothing is set."""
        settings = load_settings(str(tmp_path / "missing.env"))

        assert settings.enabled is True
        assert settings.hooks == DEFAULT_HOOKS
        assert settings.profiles == DEFAULT_PROFILES
        assert settings.sources == []

    def test_environment_variables(self, monkeypatch, tmp_path):
        """Should read comma-separated lists from the environment."""
        monkeypatch.setenv("LOG_SCRUBBER_HOOKS", "WARN,DIE")
        monkeypatch.setenv("LOG_SCRUBBER_SOURCES", "logging, logger")
        monkeypatch.setenv("LOG_SCRUBBER_PROFILES", "")
        monkeypatch.setenv("LOG_SCRUBBER_ENABLED", "No")

        settings = load_settings(str(tmp_path / "missing.env"))

        assert settings.hooks == ["WARN", "DIE"]
        assert settings.sources == ["logging", "logger"]
        assert settings.profiles == []
        assert settings.enabled is False

    def test_dotenv_file(self, dotenv_file):
        """Should load settings from a .env file."""
        settings = load_settings(dotenv_file)

        assert settings.enabled is False
        assert settings.hooks == ["WARN", "LOG"]
        assert settings.profiles == ["pci", "pii"]

    def test_environment_wins_over_dotenv(self, monkeypatch, dotenv_file):
        """Should not override variables that are already set."""
        monkeypatch.setenv("LOG_SCRUBBER_HOOKS", "DIE")

        assert load_settings(dotenv_file).hooks == ["DIE"]


class TestInstall:
    """Test suite for install()."""

    def test_install_with_settings(self, shown_warnings):
        """Should load profiles and hook the configured handlers."""
        warnings.simplefilter("always")
        log_scrubber.install(ScrubberSettings(hooks=["WARN"], profiles=["pci"]))

        warnings.warn("The card number is 4007000000027.")

        assert shown_warnings == ["The card number is [CARD]."]

    def test_install_extra_patterns(self):
        """Should merge extra patterns after the profiles."""
        log_scrubber.install(ScrubberSettings(hooks=[], profiles=[]), patterns={"secret": "***"})

        assert log_scrubber.redact("a secret") == ["a ***"]

    def test_install_disabled(self, shown_warnings):
        """Should track hooks but leave handlers alone when disabled."""
        original = warnings.showwarning
        current = log_scrubber.install(ScrubberSettings(enabled=False, hooks=["WARN"]))

        assert current is get_state()
        assert log_scrubber.is_enabled() is False
        assert "WARN" in current.hooks
        assert warnings.showwarning is original

    def test_install_sources(self, caplog):
        """Should intercept the configured sources."""
        log_scrubber.install(ScrubberSettings(hooks=[], sources=["logger"]))

        logging.getLogger("tests.install").warning("card %s", "4007000000027")

        assert caplog.records[0].getMessage() == "card [CARD]"

    def test_install_from_environment(self, monkeypatch, tmp_path, shown_warnings):
        """Should read settings from the environment when none are given."""
        warnings.simplefilter("always")
        monkeypatch.setenv("LOG_SCRUBBER_HOOKS", "WARN")
        monkeypatch.chdir(tmp_path)

        log_scrubber.install()

        assert get_state().hooks.identifiers() == ["WARN"]
        warnings.warn("4007000000027")
        assert shown_warnings == ["[CARD]"]

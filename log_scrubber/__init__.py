"""
Log Scrubber - keep sensitive data out of diagnostics

This package rewrites sensitive values (card numbers, secrets, ...) in
warnings, uncaught exceptions and log calls before they reach their
destination, without changing the code that emits them.

Architecture:
    - PatternSet: Live mapping of regex patterns to replacements
    - Redactor: Walks strings, lists, tuples and dicts and scrubs them
    - HookRegistry: Wraps handlers (warnings, excepthook, logging) and
      restores them on demand
    - ScrubberState: Process-wide configuration with scoped overrides
    - profiles/: Ready-made pattern bundles (pci, pii)

Example:
    import warnings
    import log_scrubber

    log_scrubber.add_hook("WARN", "DIE")
    log_scrubber.initialize({"4007000000027": "DELETED"})
    warnings.warn("The card number is 4007000000027.")
    # UserWarning: The card number is DELETED.
"""

from .api import (
    add_hook,
    add_pattern,
    add_source,
    disable,
    disable_hook,
    enable,
    enable_hook,
    initialize,
    install,
    is_enabled,
    redact,
    remove_hook,
    remove_pattern,
    remove_source,
    run_scoped,
    scoped,
)
from .base_profile import PatternProfile, RedactionPattern
from .config import ScrubberSettings, load_settings
from .engine import Redactor
from .errors import ConfigConflictWarning, MissingTarget, ScopeMisuse, ScrubberError
from .hooks import CallableSlot, HookRegistry, HookTarget
from .patterns import PatternSet, expand
from .state import ScopeRequest, ScrubberState, get_state, set_state
from .targets import register_target, unregister_target

__version__ = "0.1.0"

__all__ = [
    "initialize",
    "install",
    "redact",
    "is_enabled",
    "enable",
    "disable",
    "add_pattern",
    "remove_pattern",
    "add_hook",
    "remove_hook",
    "enable_hook",
    "disable_hook",
    "add_source",
    "remove_source",
    "scoped",
    "run_scoped",
    "PatternSet",
    "PatternProfile",
    "RedactionPattern",
    "expand",
    "Redactor",
    "HookTarget",
    "CallableSlot",
    "HookRegistry",
    "ScrubberState",
    "ScopeRequest",
    "get_state",
    "set_state",
    "register_target",
    "unregister_target",
    "ScrubberSettings",
    "load_settings",
    "ScrubberError",
    "MissingTarget",
    "ScopeMisuse",
    "ConfigConflictWarning",
]

"""
Scrubber errors.

Registration problems are raised synchronously to the caller. Conflicts
with foreign handlers are recoverable and surface as a warning category
instead of an exception.
"""

from typing import Iterable


class ScrubberError(Exception):
    """Base exception for all log scrubber errors."""


class MissingTarget(ScrubberError, LookupError):
    """
    Raised when a hook or named callable cannot be found.

    Attributes:
        identifiers: Every identifier that failed to resolve in the call.
    """

    def __init__(self, identifiers: Iterable[str], detail: str = ""):
        self.identifiers = tuple(identifiers)
        names = ", ".join(repr(i) for i in self.identifiers)
        message = f"Cannot intercept missing target(s): {names}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ScopeMisuse(ScrubberError, ValueError):
    """Raised for a configuration request that contradicts itself."""


class ConfigConflictWarning(UserWarning):
    """
    Another party replaced a handler this package installed.

    Emitted when disabling or removing a hook whose live handler is no
    longer ours; the foreign handler is left in place.
    """

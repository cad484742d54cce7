"""
ScrubberState - the process-wide scrubber configuration.

Exactly one state is live at a time. It bundles the enabled flag, the
PatternSet, and the two registries (built-in hooks and named methods).
Scoped reconfiguration pushes a copy of the live state with ``parent``
pointing at the state it replaced; popping stops the scoped state and
goes back to a copy of the parent.

Not thread-safe: configuration changes must not race with each other.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from .engine import get_default_redactor
from .errors import ScopeMisuse
from .hooks import HookRegistry
from .patterns import PatternSet
from .targets import is_builtin_hook, resolve_hook, resolve_method

logger = logging.getLogger(__name__)


@dataclass
class ScopeRequest:
    """
    A configuration change applied when entering a scope.

    Attributes:
        patterns: Replace the pattern set with these entries.
        add_patterns: Merge these entries into the pattern set.
        remove_patterns: Pattern keys to drop from the pattern set.
        enable: Start the scoped state.
        disable: Stop the scoped state.
        hooks: Hook or method identifiers to add in the scope.

    Raises:
        ScopeMisuse: If both ``enable`` and ``disable`` are set.
    """
    patterns: Optional[Mapping] = None
    add_patterns: Optional[Mapping] = None
    remove_patterns: Iterable = ()
    enable: bool = False
    disable: bool = False
    hooks: Iterable[str] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.enable and self.disable:
            raise ScopeMisuse("A scope cannot both enable and disable the scrubber")

    @classmethod
    def coerce(cls, value: Union["ScopeRequest", Mapping, bool, None]) -> "ScopeRequest":
        """
        Build a request from the shorthand forms.

        ``True``/``False`` start or stop the scrubber, a mapping replaces
        the patterns, and None changes nothing.
        """
        if isinstance(value, ScopeRequest):
            return value
        if value is None:
            return cls()
        if isinstance(value, bool):
            return cls(enable=value, disable=not value)
        if isinstance(value, Mapping):
            return cls(patterns=value)
        raise TypeError(f"Unsupported scope configuration: {value!r}")


class ScrubberState:
    """Enabled flag, patterns and hook registries of the scrubber."""

    def __init__(
        self,
        scrub_data: Optional[Mapping] = None,
        enabled: bool = True,
        parent: Optional["ScrubberState"] = None,
    ):
        redactor = get_default_redactor()
        self.scrub_data = scrub_data.copy() if isinstance(scrub_data, PatternSet) else PatternSet(scrub_data)
        self.hooks = HookRegistry(redactor, resolve_hook)
        self.methods = HookRegistry(redactor, resolve_method)
        self.parent = parent
        self._enabled = enabled
        self.hooks.enabled = self.methods.enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def start(self) -> None:
        """Turn scrubbing on and install every tracked hook."""
        self._enabled = self.hooks.enabled = self.methods.enabled = True
        self.hooks.enable_all()
        self.methods.enable_all()

    def stop(self) -> None:
        """Restore every tracked hook and turn scrubbing off."""
        self.hooks.disable_all()
        self.methods.disable_all()
        self._enabled = self.hooks.enabled = self.methods.enabled = False

    def init(self, patterns: Optional[Mapping] = None) -> dict:
        """
        Restart the scrubber, optionally with a new pattern set.

        Without ``patterns`` this re-installs any hook that someone else
        replaced since it was enabled.

        Returns:
            A copy of the pattern set now in use.
        """
        self.stop()
        if patterns is not None:
            self.scrub_data = PatternSet(patterns)
        self.start()
        return self.scrub_data.as_dict()

    def registry_for(self, identifier: str) -> HookRegistry:
        """Return the registry that tracks ``identifier``."""
        return self.hooks if is_builtin_hook(identifier) else self.methods

    def snapshot(self) -> "ScrubberState":
        """Copy this state's fields into a new state whose parent is this one."""
        clone = ScrubberState(self.scrub_data, self._enabled, parent=self)
        clone.hooks = self.hooks.copy()
        clone.methods = self.methods.copy()
        return clone

    def restored(self) -> "ScrubberState":
        """Copy this state's fields into a new state with the same parent."""
        clone = self.snapshot()
        clone.parent = self.parent
        return clone

    def apply(self, request: ScopeRequest) -> None:
        if request.patterns is not None:
            self.scrub_data = PatternSet(request.patterns)
        if request.add_patterns:
            self.scrub_data.update(request.add_patterns)
        if request.remove_patterns:
            self.scrub_data.remove(request.remove_patterns)
        for identifier in request.hooks:
            self.registry_for(identifier).add(identifier)
        if request.enable:
            self.start()
        elif request.disable:
            self.stop()

    def __repr__(self) -> str:
        return (
            f"<ScrubberState enabled={self._enabled} patterns={len(self.scrub_data)} "
            f"hooks={self.hooks.identifiers()} methods={self.methods.identifiers()}>"
        )


# Live instance
_state: Optional[ScrubberState] = None


def get_state() -> ScrubberState:
    """Return the live ScrubberState, creating an empty one if needed."""
    global _state
    if _state is None:
        _state = ScrubberState()
    return _state


def set_state(state: Optional[ScrubberState]) -> Optional[ScrubberState]:
    """
    Replace the live state without touching any hook.

    Meant for tests and embedding; returns the previous state.
    """
    global _state
    previous, _state = _state, state
    return previous


def push(config: Any = None) -> ScrubberState:
    """
    Enter a scope: make a copy of the live state live and reconfigure it.

    Args:
        config: A ScopeRequest, a pattern mapping, True/False, or None.

    Raises:
        ScopeMisuse: If the request contradicts itself. Nothing changes.
        MissingTarget: If a requested hook cannot be found. The scope is
            abandoned and the previous state is back in effect.
    """
    request = ScopeRequest.coerce(config)
    scoped = get_state().snapshot()
    set_state(scoped)
    try:
        scoped.apply(request)
    except Exception:
        pop()
        raise
    logger.debug(f"Entered scrubber scope: {scoped!r}")
    return scoped


def pop() -> ScrubberState:
    """
    Leave the current scope and restore a copy of the enclosing state.

    Raises:
        ScopeMisuse: If no scope is active.
    """
    current = get_state()
    if current.parent is None:
        raise ScopeMisuse("No scrubber scope to leave")
    current.stop()
    restored = current.parent.restored()
    set_state(restored)
    if restored.enabled:
        restored.start()
    logger.debug(f"Left scrubber scope, now: {restored!r}")
    return restored

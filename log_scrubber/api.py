"""
Public entry points of the log scrubber.

Every function here goes through the live ScrubberState; nothing else
in the package is meant to be driven directly by applications.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional

from . import state as _state
from .config import ScrubberSettings, load_settings
from .engine import get_default_redactor
from .errors import MissingTarget
from .profiles import get_profile
from .state import ScopeRequest, ScrubberState, get_state
from .targets import source_members

logger = logging.getLogger(__name__)


def initialize(patterns: Optional[Mapping] = None) -> dict:
    """
    Restart scrubbing, optionally replacing the patterns.

    Example:
        initialize({'4007000000027': 'DELETED'})
        warnings.warn('The card number is 4007000000027.')
        # UserWarning: The card number is DELETED.

    Call it without arguments to re-install hooks after other code has
    installed its own ``sys.excepthook`` or ``warnings.showwarning``.

    Returns:
        A copy of the pattern set now in use.
    """
    return get_state().init(patterns)


def install(settings: Optional[ScrubberSettings] = None, patterns: Optional[Mapping] = None) -> ScrubberState:
    """
    Set up scrubbing from configuration.

    Loads the configured profiles and any extra ``patterns``, then adds
    the configured hooks and sources. Settings come from the environment
    (and a ``.env`` file) when not given.
    """
    settings = settings or load_settings()
    current = get_state()
    for name in settings.profiles:
        current.scrub_data.load_profile(get_profile(name))
    if patterns:
        current.scrub_data.update(patterns)

    add_hook(*settings.hooks)
    add_source(*settings.sources)
    if settings.enabled:
        current.start()
    else:
        current.stop()
    return current


def redact(*values: Any) -> list[Any]:
    """Scrub ``values`` with the live patterns and return them as a list."""
    return get_default_redactor().redact(*values)


def is_enabled() -> bool:
    return get_state().enabled


def enable() -> None:
    """Turn scrubbing on and install every tracked hook."""
    get_state().start()


def disable() -> None:
    """Restore every tracked hook's original handler."""
    get_state().stop()


def add_pattern(patterns: Mapping) -> None:
    """Merge pattern -> replacement entries into the live pattern set."""
    get_state().scrub_data.update(patterns)


def remove_pattern(patterns: Iterable) -> list:
    """
    Remove entries from the live pattern set.

    Args:
        patterns: Pattern keys, or a mapping whose values must equal the
                  stored replacements (None matches anything).

    Returns:
        The keys that were removed.
    """
    return get_state().scrub_data.remove(patterns)


def _each(identifiers: Iterable[str], operation: Callable[[str], Any]) -> None:
    """
    Apply ``operation`` to every identifier.

    Every identifier is attempted. Identifiers that cannot be resolved are
    collected and reported together afterwards; the others keep their
    effect.
    """
    missing = []
    for identifier in identifiers:
        try:
            operation(identifier)
        except MissingTarget as e:
            logger.warning(f"Cannot intercept {identifier!r}: {e}")
            missing.extend(e.identifiers)
    if missing:
        raise MissingTarget(missing)


def add_hook(*identifiers: str) -> None:
    """
    Intercept built-in hooks (``WARN``, ``DIE``...) or named callables.

    Raises:
        MissingTarget: Naming every identifier that could not be found,
            after the others have been added.
    """
    current = get_state()
    _each(identifiers, lambda i: current.registry_for(i).add(i))


def remove_hook(*identifiers: str) -> None:
    """Restore and stop tracking hooks or named callables."""
    current = get_state()
    _each(identifiers, lambda i: current.registry_for(i).remove(i))


def enable_hook(identifier: str) -> bool:
    """Re-install the wrapper of one tracked hook."""
    return get_state().registry_for(identifier).enable(identifier)


def disable_hook(identifier: str) -> bool:
    """Restore the original handler of one tracked hook, but keep tracking it."""
    return get_state().registry_for(identifier).disable(identifier)


def add_source(*sources: str) -> None:
    """
    Intercept every callable belonging to each named source.

    Example:
        add_source('logging')   # logging.info, logging.error, ...
        add_source('logger')    # the same methods on logging.Logger
    """
    _each(sources, lambda s: add_hook(*source_members(s)))


def remove_source(*sources: str) -> None:
    """Stop intercepting the callables of each named source."""
    _each(sources, lambda s: remove_hook(*source_members(s)))


@contextmanager
def scoped(config: Any = None, **request: Any) -> Iterator[ScrubberState]:
    """
    Temporarily reconfigure the scrubber.

    Example:
        with scoped(add_patterns={'B': 'Y'}):
            redact('A B')   # ['X Y']
        redact('A B')       # ['X B']

    Args:
        config: A ScopeRequest, a pattern mapping (replaces the patterns),
                True/False (start/stop), or None.
        **request: ScopeRequest fields, used when ``config`` is omitted.
    """
    if request:
        if config is not None:
            raise TypeError("Pass either a configuration or request fields, not both")
        config = ScopeRequest(**request)
    scoped_state = _state.push(config)
    try:
        yield scoped_state
    finally:
        _state.pop()


def run_scoped(callback: Callable[..., Any], *args: Any, config: Any = None, **request: Any) -> Any:
    """Call ``callback(*args)`` inside a scope and return its result."""
    with scoped(config, **request):
        return callback(*args)

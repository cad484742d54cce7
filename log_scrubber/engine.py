"""
Redactor - Core engine for scrubbing sensitive data out of values.

The engine walks any value handed to a diagnostic call:
1. Scalars (text and numbers) are run through every pattern
2. Ordered sequences are redacted element by element
3. Mappings have their values AND their keys redacted

Lists and dicts are rewritten in place; tuples are rebuilt. Anything
else (None, bytes, sets, exceptions, arbitrary objects) is passed
through untouched, since there is no safe way to rewrite its state.
"""

import logging
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any, Callable, Optional

from .patterns import PatternSet

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (str, int, float)
_OPAQUE_SEQUENCES = (str, bytes, bytearray, memoryview)


class Redactor:
    """
    Engine for scrubbing sensitive data from arbitrary values.

    Example:
        redactor = Redactor(PatternSet({'1234': 'XXXX'}))

        redactor.redact('pin 1234')
        # ['pin XXXX']

        redactor.redact({'1234': 'secret'}, ['a', ('1234',)])
        # [{'XXXX': 'secret'}, ['a', ('XXXX',)]]

    The pattern set is looked up on every call, so the Redactor always
    sees the live configuration when given a provider callable.
    """

    def __init__(self, patterns: "PatternSet | Callable[[], PatternSet]"):
        """
        Initialize the Redactor.

        Args:
            patterns: A PatternSet, or a zero-argument callable returning
                      the PatternSet to use at call time.
        """
        if isinstance(patterns, PatternSet):
            self._provider = lambda: patterns
        else:
            self._provider = patterns

    @property
    def patterns(self) -> PatternSet:
        return self._provider()

    def redact(self, *values: Any) -> list[Any]:
        """
        Redact every value of a variadic call.

        Args:
            *values: The arguments to scrub.

        Returns:
            A list of the same length with sensitive content replaced.
        """
        patterns = self._provider()
        if not values:
            return []
        if not len(patterns):
            return list(values)

        memo: dict[int, Any] = {}
        return [self._redact_value(value, patterns, memo) for value in values]

    def redact_text(self, text: str) -> str:
        """Redact a single string and return it."""
        return self._provider().apply(text)

    def _redact_value(self, value: Any, patterns: PatternSet, memo: dict[int, Any]) -> Any:
        if isinstance(value, _SCALAR_TYPES):
            return self._redact_scalar(value, patterns)

        if isinstance(value, Mapping):
            if not isinstance(value, MutableMapping):
                return value
            return self._visit(value, patterns, memo, self._redact_mapping)

        if isinstance(value, Sequence) and not isinstance(value, _OPAQUE_SEQUENCES):
            return self._visit(value, patterns, memo, self._redact_sequence)

        return value

    def _visit(self, value: Any, patterns: PatternSet, memo: dict[int, Any], walk) -> Any:
        key = id(value)
        if key in memo:
            return memo[key]
        # Until the walk finishes, a revisit sees the container itself
        memo[key] = value
        result = walk(value, patterns, memo)
        memo[key] = result
        return result

    @staticmethod
    def _redact_scalar(value: Any, patterns: PatternSet) -> Any:
        text = value if isinstance(value, str) else str(value)
        scrubbed = patterns.apply(text)
        if scrubbed == text and not isinstance(value, str):
            return value
        return scrubbed

    def _redact_sequence(self, value: Sequence, patterns: PatternSet, memo: dict[int, Any]) -> Any:
        if isinstance(value, MutableSequence):
            for index, item in enumerate(value):
                value[index] = self._redact_value(item, patterns, memo)
            return value

        items = [self._redact_value(item, patterns, memo) for item in value]
        return _rebuild(value, items)

    def _redact_mapping(
        self, value: MutableMapping, patterns: PatternSet, memo: dict[int, Any]
    ) -> MutableMapping:
        moves = []
        for key, item in list(value.items()):
            new_item = self._redact_value(item, patterns, memo)
            new_key = self._redact_key(key, patterns)
            if new_key is not None:
                moves.append((key, new_key, new_item))
            else:
                value[key] = new_item

        # Moved entries overwrite whatever already sits under their new key
        for key, _, _ in moves:
            del value[key]
        for _, new_key, new_item in moves:
            value[new_key] = new_item
        return value

    @staticmethod
    def _redact_key(key: Any, patterns: PatternSet) -> Optional[str]:
        """Return the redacted key, or None if the key stays as it is."""
        if not isinstance(key, _SCALAR_TYPES):
            return None
        text = key if isinstance(key, str) else str(key)
        scrubbed = patterns.apply(text)
        return None if scrubbed == text else scrubbed


def _rebuild(original: Sequence, items: list[Any]) -> Any:
    """Build a sequence of the same type as ``original`` from ``items``."""
    kind = type(original)
    if kind is tuple:
        return tuple(items)
    if isinstance(original, tuple) and hasattr(original, "_fields"):
        return kind(*items)
    try:
        return kind(items)
    except TypeError:
        logger.debug(f"Cannot rebuild {kind.__name__}; returning it unchanged")
        return original


# Singleton instance for convenience
_default_redactor: Optional[Redactor] = None


def get_default_redactor() -> Redactor:
    """
    Get a Redactor bound to the live scrubber configuration.

    This is what installed hooks use; it resolves the process-wide state
    on every call so scoped reconfiguration takes effect immediately.
    """
    global _default_redactor
    if _default_redactor is None:
        from .state import get_state

        _default_redactor = Redactor(lambda: get_state().scrub_data)
    return _default_redactor

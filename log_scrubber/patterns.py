"""
PatternSet - the live mapping of sensitive patterns to replacements.

Keys are regular expressions (source text or compiled patterns). Values
are either literal replacement strings or callables taking
``(pattern, text)`` and returning the new text.

Patterns are applied one after another in insertion order, each one
seeing the output of the previous one. When two patterns overlap, the
result depends on that order; no other precedence is defined.
"""

import logging
import re
import threading
from typing import Any, Iterable, Iterator, Mapping, Optional, Pattern, Union

from .base_profile import PatternProfile, Replacement

logger = logging.getLogger(__name__)

# Set while a failed replacement is being reported. The report can pass
# through the same patterns again when logging itself is hooked.
_reporting = threading.local()

PatternKey = Union[str, Pattern[str]]


def expand(template: str) -> Replacement:
    """
    Build a replacement that expands group references in ``template``.

    String replacements in a PatternSet are inserted literally. Use this
    when part of the match must survive, e.g. keeping a ``cvv=`` prefix:

        {r'(cvv\\s*=\\s*)\\d{3,4}': expand(r'\\1[CVV]')}
    """

    def _expand(pattern: Pattern[str], text: str) -> str:
        return pattern.sub(template, text)

    _expand.template = template
    return _expand


class PatternSet:
    """
    Mapping from pattern to replacement with cached compilation.

    Example:
        patterns = PatternSet({'4007000000027': 'DELETED'})
        patterns.apply('card 4007000000027 ok')
        # 'card DELETED ok'
    """

    def __init__(self, entries: Optional[Mapping[PatternKey, Replacement]] = None):
        self._entries: dict[PatternKey, Replacement] = {}
        self._compiled: dict[PatternKey, Pattern[str]] = {}
        if entries:
            self.update(entries)

    def update(self, entries: Union[Mapping[PatternKey, Replacement], PatternProfile]) -> None:
        """
        Merge entries into the set, replacing existing keys.

        Args:
            entries: A pattern -> replacement mapping or a PatternProfile.

        Raises:
            re.error: If a pattern is not a valid regular expression. The
                set is left unchanged in that case.
        """
        if isinstance(entries, PatternProfile):
            entries = entries.as_mapping()
        compiled = {key: self._compile(key) for key in entries}
        for key, replacement in entries.items():
            self._entries[key] = replacement
            self._compiled[key] = compiled[key]

    def load_profile(self, profile: PatternProfile) -> None:
        """Merge every pattern of ``profile`` into the set."""
        self.update(profile)
        logger.info(f"Loaded pattern profile: {profile.name}")

    def remove(self, keys: Union[Mapping[PatternKey, Any], Iterable[PatternKey]]) -> list:
        """
        Remove entries from the set.

        Args:
            keys: Pattern keys to remove. When a mapping is given, an entry
                is only removed if its replacement equals the mapped value;
                a value of None matches any replacement.

        Returns:
            The keys that were actually removed.
        """
        if isinstance(keys, Mapping):
            wanted = dict(keys)
        else:
            wanted = {key: None for key in keys}

        removed = []
        for key, expected in wanted.items():
            if key not in self._entries:
                continue
            if expected is not None and self._entries[key] != expected:
                continue
            del self._entries[key]
            del self._compiled[key]
            removed.append(key)
        return removed

    def apply(self, text: str) -> str:
        """Run every pattern over ``text`` in order and return the result."""
        for key, replacement in self._entries.items():
            pattern = self._compiled[key]
            if callable(replacement):
                if pattern.search(text) is None:
                    continue
                try:
                    text = str(replacement(pattern, text))
                except Exception as e:
                    if not getattr(_reporting, "active", False):
                        _reporting.active = True
                        try:
                            logger.warning(f"Replacement for pattern {pattern.pattern!r} failed: {e}")
                        finally:
                            _reporting.active = False
            else:
                literal = str(replacement)
                text = pattern.sub(lambda _m: literal, text)
        return text

    def copy(self) -> "PatternSet":
        clone = PatternSet()
        clone._entries = dict(self._entries)
        clone._compiled = dict(self._compiled)
        return clone

    def as_dict(self) -> dict[PatternKey, Replacement]:
        """Return a shallow copy of the entries."""
        return dict(self._entries)

    @staticmethod
    def _compile(key: PatternKey) -> Pattern[str]:
        if isinstance(key, re.Pattern):
            return key
        return re.compile(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[PatternKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PatternSet):
            return self._entries == other._entries
        if isinstance(other, Mapping):
            return self._entries == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"<PatternSet: {len(self._entries)} pattern(s)>"

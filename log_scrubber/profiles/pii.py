"""
PII Pattern Profile - personal data detected by scrubadub.

Scrubadub's built-in detectors (emails, phone numbers, URLs with
credentials, ...) replace what they find with ``{{EMAIL}}``-style
placeholders. The profile plugs the scrubadub cleaner in as a callable
replacement, triggered only for text that could contain such data.
"""

import logging
import re
from typing import Optional, Pattern

import scrubadub

from ..base_profile import PatternProfile, RedactionPattern

logger = logging.getLogger(__name__)


class PiiProfile(PatternProfile):
    """Profile backed by a shared scrubadub.Scrubber."""

    # Email, phone number or URL-ish content
    TRIGGER = re.compile(r'@|\d{3}|://')

    def __init__(self, scrubber: Optional[scrubadub.Scrubber] = None):
        self._scrubber = scrubber

    @property
    def name(self) -> str:
        return "pii"

    @property
    def description(self) -> str:
        return "Personal data found by scrubadub (emails, phone numbers, ...)"

    def get_patterns(self) -> list[RedactionPattern]:
        return [
            RedactionPattern(
                name="scrubadub",
                pattern=self.TRIGGER,
                replacement=self.clean,
                description="scrubadub built-in detectors"
            ),
        ]

    def clean(self, pattern: Pattern[str], text: str) -> str:
        """Run scrubadub over ``text``."""
        if self._scrubber is None:
            self._scrubber = scrubadub.Scrubber()
            logger.info("Created scrubadub scrubber for the pii profile")
        return self._scrubber.clean(text)

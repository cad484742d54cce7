"""
Base Pattern Profile - Abstract base class for reusable redaction rules.

Extend this class to ship a named bundle of patterns that can be loaded
into a PatternSet in one call. For example:
    - pci.py for payment card data (card numbers, CVV)
    - pii.py for personal data (emails, phone numbers)

Each profile defines:
    - name: Unique identifier for the profile
    - description: Human-readable description
    - get_patterns(): Returns the patterns and their replacements
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Pattern, Union

# A literal replacement string, or fn(pattern, text) -> new text.
Replacement = Union[str, Callable[[Pattern[str], str], str]]


@dataclass
class RedactionPattern:
    """A single redaction pattern definition."""
    name: str  # e.g., "card_number", "cvv"
    pattern: Union[str, Pattern[str]]  # Regex source or compiled pattern
    replacement: Replacement  # e.g., "[CARD]", or a transform
    description: str = ""  # Human-readable description


class PatternProfile(ABC):
    """
    Abstract base class for pattern profiles.

    Subclass this to add domain-specific rules without touching the
    Redactor.

    Example:
        class BankProfile(PatternProfile):
            @property
            def name(self) -> str:
                return "bank"

            @property
            def description(self) -> str:
                return "Bank account numbers"

            def get_patterns(self) -> list[RedactionPattern]:
                return [
                    RedactionPattern(
                        name="iban",
                        pattern=r'\\b[A-Z]{2}\\d{2}[A-Z0-9]{11,30}\\b',
                        replacement="[IBAN]",
                    ),
                ]
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this profile (e.g., 'pci', 'pii')."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this profile covers."""
        pass

    @abstractmethod
    def get_patterns(self) -> list[RedactionPattern]:
        """Return the RedactionPattern objects this profile contributes."""
        pass

    def as_mapping(self) -> dict:
        """Return the profile as a pattern -> replacement mapping."""
        return {p.pattern: p.replacement for p in self.get_patterns()}

    def __repr__(self) -> str:
        return f"<PatternProfile: {self.name}>"

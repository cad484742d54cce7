"""
Pattern Profiles Package

This package contains named redaction profiles that can be loaded into
the live pattern set, by object or by name.

Available profiles:
    - pci: Payment card data (card numbers, track data, CVV). Default.
    - pii: Personal data found by scrubadub (emails, phone numbers)

To add a new profile:
    1. Create a new file (e.g., bank.py)
    2. Subclass PatternProfile
    3. Implement get_patterns() with your RedactionPatterns
    4. Register it below, or pass the instance to add_pattern()
"""

from typing import Callable

from ..base_profile import PatternProfile
from ..errors import ScrubberError
from .pci import PciProfile


def _pii() -> PatternProfile:
    # Imported lazily: scrubadub is heavy to import
    from .pii import PiiProfile

    return PiiProfile()


_PROFILES: dict[str, Callable[[], PatternProfile]] = {
    "pci": PciProfile,
    "pii": _pii,
}


def get_profile(name: str) -> PatternProfile:
    """
    Return a new instance of the profile called ``name``.

    Raises:
        ScrubberError: If no profile has that name.
    """
    try:
        factory = _PROFILES[name.strip().lower()]
    except KeyError:
        raise ScrubberError(f"Unknown pattern profile: {name!r}") from None
    return factory()


def available_profiles() -> list[str]:
    return sorted(_PROFILES)


__all__ = ["PciProfile", "get_profile", "available_profiles"]

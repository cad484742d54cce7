"""
PCI Pattern Profile - Default redaction rules for payment card data.

Card data is the reason the scrubber exists: PCI DSS forbids writing
it to logs, yet it ends up in warnings and tracebacks sooner or later.

Patterns covered:
    - Magnetic stripe track data (track 1 and track 2)
    - Card numbers (Visa, Mastercard, Amex, Discover, JCB)
    - Card numbers with space or dash separators
    - CVV / CVC values in key=value format
"""

import re

from ..base_profile import PatternProfile, RedactionPattern
from ..patterns import expand


class PciProfile(PatternProfile):
    """
    Default profile for payment card data.

    Track data runs first so a card number inside a track is removed
    together with the rest of the track.
    """

    @property
    def name(self) -> str:
        return "pci"

    @property
    def description(self) -> str:
        return "Payment card data (PCI DSS): PANs, track data, CVV"

    def get_patterns(self) -> list[RedactionPattern]:
        return [
            # Track 1: %B<PAN>^<NAME>^<EXPIRY+SERVICE+DISCRETIONARY>?
            RedactionPattern(
                name="track1",
                pattern=re.compile(r'%B\d{12,19}\^[^^]{2,26}\^\d{4,}[^?]*\?'),
                replacement="[TRACK_DATA]",
                description="Magnetic stripe track 1"
            ),

            # Track 2: ;<PAN>=<EXPIRY+SERVICE+DISCRETIONARY>?
            RedactionPattern(
                name="track2",
                pattern=re.compile(r';\d{12,19}=\d{4,}\??'),
                replacement="[TRACK_DATA]",
                description="Magnetic stripe track 2"
            ),

            # Card numbers (13-19 digits)
            RedactionPattern(
                name="card_number",
                pattern=re.compile(
                    r'\b(?:'
                    r'4[0-9]{12}(?:[0-9]{3})?|'  # Visa
                    r'5[1-5][0-9]{14}|'  # Mastercard
                    r'3[47][0-9]{13}|'  # Amex
                    r'6(?:011|5[0-9]{2})[0-9]{12}|'  # Discover
                    r'(?:2131|1800|35\d{3})\d{11}'  # JCB
                    r')\b'
                ),
                replacement="[CARD]",
                description="Card number (PAN)"
            ),

            # Card numbers with separators (spaces, dashes)
            RedactionPattern(
                name="card_number_formatted",
                pattern=re.compile(r'\b(?:\d{4}[-\s]?){3}\d{4}\b'),
                replacement="[CARD]",
                description="Formatted card number (with spaces/dashes)"
            ),

            # Card verification values, keeping the field name
            RedactionPattern(
                name="cvv",
                pattern=re.compile(r'(?i)\b(cvv2?|cvc2?|cid|csc|security[_ ]?code)(\s*[=:]\s*)\d{3,4}\b'),
                replacement=expand(r'\1\2[CVV]'),
                description="Card verification value"
            ),
        ]

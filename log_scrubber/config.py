"""
Scrubber settings read from the environment.

A ``.env`` file is loaded first (without overriding variables that are
already set), so deployments can keep the settings next to the app:

    LOG_SCRUBBER_ENABLED=true
    LOG_SCRUBBER_HOOKS=WARN,WARNIF,DIE,LOG
    LOG_SCRUBBER_SOURCES=logging
    LOG_SCRUBBER_PROFILES=pci,pii
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_HOOKS = ["WARN", "WARNIF", "DIE"]
DEFAULT_PROFILES = ["pci"]

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ScrubberSettings:
    """Configuration used by install()."""

    enabled: bool = True
    hooks: list[str] = field(default_factory=lambda: list(DEFAULT_HOOKS))
    sources: list[str] = field(default_factory=list)
    profiles: list[str] = field(default_factory=lambda: list(DEFAULT_PROFILES))


def _split(value: Optional[str], default: list[str]) -> list[str]:
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


def load_settings(env_file: Optional[str] = None) -> ScrubberSettings:
    """
    Build ScrubberSettings from environment variables.

    Args:
        env_file: Path of a .env file. Defaults to the nearest one above
                  the working directory.

    Returns:
        The settings, with defaults for every unset variable.
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))

    enabled = os.getenv("LOG_SCRUBBER_ENABLED", "true").strip().lower() not in _FALSE_VALUES
    return ScrubberSettings(
        enabled=enabled,
        hooks=_split(os.getenv("LOG_SCRUBBER_HOOKS"), DEFAULT_HOOKS),
        sources=_split(os.getenv("LOG_SCRUBBER_SOURCES"), []),
        profiles=_split(os.getenv("LOG_SCRUBBER_PROFILES"), DEFAULT_PROFILES),
    )

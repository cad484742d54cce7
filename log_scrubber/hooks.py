"""
HookRegistry - install and restore scrubbing wrappers around handlers.

A hook is anything that exposes a "current handler" slot: the warning
display function, the uncaught-exception hook, a named function on a
module or class. The registry only talks to those slots through the
HookTarget capability (get / set / default behaviour), so the wrap,
unwrap, idempotence and conflict logic does not depend on how a slot is
found or patched.
"""

import functools
import inspect
import logging
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Optional

from .engine import Redactor
from .errors import ConfigConflictWarning

logger = logging.getLogger(__name__)

# Bound at import so conflict reports never pass through a WARNIF wrapper
_warn = warnings.warn

Handler = Callable[..., Any]


class HookTarget(ABC):
    """
    Capability object for a single interception point.

    Subclasses say how to read and replace the live handler, what to do
    when there is no previous handler, and how the arguments of a call
    are scrubbed before delegating.
    """

    identifier: str = ""
    # Identifier whose original handler doubles as this hook's fallback
    alias_of: Optional[str] = None

    @abstractmethod
    def get(self) -> Optional[Handler]:
        """Return the live handler."""

    @abstractmethod
    def set(self, handler: Optional[Handler]) -> None:
        """Install ``handler`` as the live handler."""

    def default(self, *args: Any, **kwargs: Any) -> Any:
        """Platform behaviour used when no previous handler existed."""
        return None

    def fallback(self, registry: "HookRegistry") -> Handler:
        """Return the callable used in place of a missing previous handler."""
        return self.default

    def invoke(self, handler: Handler, redactor: Redactor, args: tuple, kwargs: dict) -> Any:
        """Scrub positional arguments and keyword values, then call ``handler``."""
        args = redactor.redact(*args)
        if kwargs:
            kwargs = dict(zip(kwargs.keys(), redactor.redact(*kwargs.values())))
        return handler(*args, **kwargs)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.identifier}>"


class CallableSlot(HookTarget):
    """
    A HookTarget built from plain getter and setter callables.

    Example:
        sink = {"handler": print}
        slot = CallableSlot(
            "SINK",
            get=lambda: sink["handler"],
            set=lambda h: sink.__setitem__("handler", h),
        )
    """

    def __init__(
        self,
        identifier: str,
        get: Callable[[], Optional[Handler]],
        set: Callable[[Optional[Handler]], None],
        default: Optional[Handler] = None,
    ):
        self.identifier = identifier
        self._get = get
        self._set = set
        self._default = default

    def get(self) -> Optional[Handler]:
        return self._get()

    def set(self, handler: Optional[Handler]) -> None:
        self._set(handler)

    def default(self, *args: Any, **kwargs: Any) -> Any:
        if self._default is None:
            return None
        return self._default(*args, **kwargs)


@dataclass
class HookRecord:
    """Tracking entry for one hook: its target and what we swapped."""
    identifier: str
    target: HookTarget
    old: Optional[Handler] = None  # Live handler captured on enable
    wrapper: Optional[Handler] = None  # Our installed handler, if any

    @property
    def installed(self) -> bool:
        return self.wrapper is not None

    def copy(self) -> "HookRecord":
        return replace(self)


class HookRegistry:
    """
    Registry of interceptable hooks keyed by identifier.

    Lifecycle of an entry: ``add`` creates it and enables it, ``enable``
    installs the wrapper, ``disable`` puts the previous handler back,
    ``remove`` disables it and forgets it.

    Args:
        redactor: Redactor used by every wrapper this registry builds.
        resolve: Maps an identifier to its HookTarget. Raises
                 MissingTarget for identifiers that cannot be found.
    """

    def __init__(self, redactor: Redactor, resolve: Callable[[str], HookTarget]):
        self._redactor = redactor
        self._resolve = resolve
        self._records: dict[str, HookRecord] = {}
        self.enabled = True

    @property
    def redactor(self) -> Redactor:
        return self._redactor

    def add(self, identifier: str) -> bool:
        """
        Track ``identifier`` and install its wrapper.

        Returns:
            False if the identifier was already tracked, True otherwise.

        Raises:
            MissingTarget: If the identifier cannot be resolved. Nothing is
                recorded in that case.
        """
        if identifier in self._records:
            return False
        target = self._resolve(identifier)
        self._records[identifier] = HookRecord(identifier=identifier, target=target)
        self.enable(identifier)
        return True

    def enable(self, identifier: str) -> bool:
        """
        Install the scrubbing wrapper for ``identifier``.

        A no-op while the registry is disabled, and when our wrapper is
        already the live handler.

        Returns:
            True if a wrapper was installed by this call.
        """
        if not self.enabled:
            return False
        record = self._records.get(identifier)
        if record is None:
            return False

        live = record.target.get()
        if record.installed and live is record.wrapper:
            return False

        record.old = live
        record.wrapper = self._build_wrapper(record, live)
        record.target.set(record.wrapper)
        logger.info(f"Installed scrubber on hook: {identifier}")
        return True

    def disable(self, identifier: str) -> bool:
        """
        Restore the handler that was live before our wrapper.

        If some other party has replaced our wrapper in the meantime, the
        foreign handler is kept and a ConfigConflictWarning is emitted.

        Returns:
            True if the previous handler was restored by this call.
        """
        record = self._records.get(identifier)
        if record is None or not record.installed:
            return False

        live = record.target.get()
        if live is record.wrapper:
            record.target.set(record.old)
            record.old = record.wrapper = None
            logger.info(f"Restored original handler on hook: {identifier}")
            return True

        if live is record.old:
            # Someone already put the original back
            record.old = record.wrapper = None
            return False

        _warn(
            f"Hook {identifier!r} was replaced by {live!r}; leaving it in place",
            ConfigConflictWarning,
            stacklevel=2,
        )
        return False

    def remove(self, identifier: str) -> bool:
        """Disable ``identifier`` and stop tracking it."""
        if identifier not in self._records:
            return False
        self.disable(identifier)
        del self._records[identifier]
        return True

    def enable_all(self) -> None:
        for identifier in list(self._records):
            self.enable(identifier)

    def disable_all(self) -> None:
        for identifier in list(self._records):
            self.disable(identifier)

    def original(self, identifier: str) -> Optional[Handler]:
        """Return the handler captured for ``identifier`` before wrapping."""
        record = self._records.get(identifier)
        return record.old if record is not None else None

    def record(self, identifier: str) -> Optional[HookRecord]:
        return self._records.get(identifier)

    def identifiers(self) -> list[str]:
        return list(self._records)

    def copy(self) -> "HookRegistry":
        """Return a registry tracking copies of the same records."""
        clone = HookRegistry(self._redactor, self._resolve)
        clone._records = {key: record.copy() for key, record in self._records.items()}
        clone.enabled = self.enabled
        return clone

    def _build_wrapper(self, record: HookRecord, old: Optional[Handler]) -> Handler:
        target = record.target
        redactor = self._redactor
        registry = self

        def scrubber(*args: Any, **kwargs: Any) -> Any:
            handler = old if old is not None else target.fallback(registry)
            return target.invoke(handler, redactor, args, kwargs)

        if inspect.isroutine(old):
            functools.update_wrapper(scrubber, old)
        scrubber.__scrubber_hook__ = record.identifier
        return scrubber

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._records

    def __iter__(self) -> Iterable[str]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)

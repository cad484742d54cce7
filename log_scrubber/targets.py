"""
Interception points of the Python runtime.

Built-in hooks:
    WARN        warnings.showwarning (display of every warning)
    WARNIF      warnings.warn (emits only if the warning filters allow it)
    DIE         sys.excepthook (uncaught exceptions)
    THREAD_DIE  threading.excepthook (uncaught exceptions in threads)
    LOG         the logging record factory (every LogRecord created)

Any other identifier is a dotted path to a callable, such as
``logging.warning``, ``logging.Logger.error`` or ``pkg.mod:Class.method``.

Sources group several identifiers under one name (``logging``,
``logger``, ``syslog``, ``warnings``); any importable module name is
also a source made of the public functions it defines.
"""

import importlib
import inspect
import linecache
import logging
import sys
import threading
import traceback
import warnings
from collections.abc import Mapping
from typing import Any, Optional

from .engine import Redactor
from .errors import MissingTarget
from .hooks import Handler, HookRegistry, HookTarget

# Frames our wrapper adds between the caller and the wrapped callable:
# the registry's scrubber closure and HookTarget.invoke.
WRAPPER_DEPTH = 2

_LOGGING_CALLS = ("debug", "info", "warning", "warn", "error", "exception", "critical", "fatal", "log")


def _scrub_exception(exc: Optional[BaseException], redactor: Redactor) -> None:
    """
    Redact ``exc`` and every exception chained to it, in place.

    Covers what a traceback prints besides ``args``: notes added with
    ``add_note()``, the file names of OSError and the source text of
    SyntaxError.
    """
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if exc.args:
            scrubbed = tuple(redactor.redact(*exc.args))
            if scrubbed != exc.args:
                exc.args = scrubbed

        notes = getattr(exc, "__notes__", None)
        if isinstance(notes, list):
            notes[:] = redactor.redact(*notes)

        for name in ("filename", "filename2", "text"):
            value = getattr(exc, name, None)
            if isinstance(value, str):
                scrubbed_value = redactor.redact_text(value)
                if scrubbed_value != value:
                    setattr(exc, name, scrubbed_value)
        exc = exc.__cause__ or exc.__context__


def _scrub_message(message: Any, redactor: Redactor) -> Any:
    if isinstance(message, BaseException):
        _scrub_exception(message, redactor)
        return message
    return redactor.redact(message)[0]


def _source_line(line: Optional[str], filename: Any, lineno: Any, redactor: Redactor) -> str:
    """Return the source line shown under a warning, redacted."""
    if line is None:
        line = linecache.getline(filename, lineno) if filename and lineno else ""
    return redactor.redact_text(line.strip())


def _write_redacted(text: str, redactor: Redactor) -> None:
    stream = sys.stderr
    if stream is None:
        return
    try:
        stream.write(redactor.redact_text(text))
        stream.flush()
    except OSError:
        pass


class WarnTarget(HookTarget):
    """``warnings.showwarning``: called for every warning that is displayed."""

    identifier = "WARN"

    def get(self) -> Optional[Handler]:
        return warnings.showwarning

    def set(self, handler: Optional[Handler]) -> None:
        warnings.showwarning = handler

    def default(self, message, category, filename, lineno, file=None, line=None):
        if file is None:
            file = sys.stderr
            if file is None:
                return
        text = warnings.formatwarning(message, category, filename, lineno, line)
        try:
            file.write(text)
        except OSError:
            # Same as the interpreter: a closed or broken stream drops the warning
            pass

    def invoke(self, handler: Handler, redactor: Redactor, args: tuple, kwargs: dict) -> Any:
        args = list(args)
        if args:
            args[0] = _scrub_message(args[0], redactor)
        elif "message" in kwargs:
            kwargs["message"] = _scrub_message(kwargs["message"], redactor)

        # Pass the source line explicitly, or the display reads it unscrubbed
        if len(args) >= 4:
            while len(args) < 6:
                args.append(kwargs.pop("file" if len(args) == 4 else "line", None))
            args[5] = _source_line(args[5], args[2], args[3], redactor)
        elif isinstance(kwargs.get("line"), str):
            kwargs["line"] = redactor.redact_text(kwargs["line"])
        return handler(*args, **kwargs)


class WarnIfTarget(HookTarget):
    """
    ``warnings.warn``: the conditional warning entry point.

    Shares the WARN hook's original handler as its fallback, so a missing
    ``warnings.warn`` still ends up displayed the way WARN would.
    """

    identifier = "WARNIF"
    alias_of = "WARN"

    def get(self) -> Optional[Handler]:
        return warnings.warn

    def set(self, handler: Optional[Handler]) -> None:
        warnings.warn = handler

    def fallback(self, registry: HookRegistry) -> Handler:
        show = registry.original(self.alias_of) or _BUILTIN_HOOKS[self.alias_of].default
        redactor = registry.redactor

        def warn(message, category=None, stacklevel=1, source=None, **kwargs):
            if isinstance(message, Warning):
                category = message.__class__
            category = category or UserWarning
            try:
                frame = sys._getframe(stacklevel)
                filename, lineno = frame.f_code.co_filename, frame.f_lineno
            except ValueError:
                filename, lineno = "sys", 1
            show(message, category, filename, lineno, None, _source_line(None, filename, lineno, redactor))

        return warn

    def invoke(self, handler: Handler, redactor: Redactor, args: tuple, kwargs: dict) -> Any:
        args = list(args)
        if args:
            args[0] = _scrub_message(args[0], redactor)
        elif "message" in kwargs:
            kwargs["message"] = _scrub_message(kwargs["message"], redactor)

        if len(args) >= 3:
            args[2] += WRAPPER_DEPTH
        else:
            kwargs["stacklevel"] = kwargs.get("stacklevel", 1) + WRAPPER_DEPTH
        return handler(*args, **kwargs)


class DieTarget(HookTarget):
    """``sys.excepthook``: reports exceptions nobody caught."""

    identifier = "DIE"

    def get(self) -> Optional[Handler]:
        return sys.excepthook

    def set(self, handler: Optional[Handler]) -> None:
        sys.excepthook = handler

    def default(self, exc_type, exc_value, exc_tb):
        return sys.__excepthook__(exc_type, exc_value, exc_tb)

    def invoke(self, handler: Handler, redactor: Redactor, args: tuple, kwargs: dict) -> Any:
        if len(args) >= 2:
            _scrub_exception(args[1], redactor)
        if len(args) >= 3 and (handler is sys.__excepthook__ or handler == self.default):
            # Render the interpreter's report here so custom __str__ output
            # and source lines are scrubbed as well
            _write_redacted("".join(traceback.format_exception(*args[:3])), redactor)
            return None
        return handler(*args, **kwargs)


class ThreadDieTarget(HookTarget):
    """``threading.excepthook``: reports exceptions that ended a thread."""

    identifier = "THREAD_DIE"

    def get(self) -> Optional[Handler]:
        return threading.excepthook

    def set(self, handler: Optional[Handler]) -> None:
        threading.excepthook = handler

    def default(self, hook_args):
        return threading.__excepthook__(hook_args)

    def invoke(self, handler: Handler, redactor: Redactor, args: tuple, kwargs: dict) -> Any:
        if not args:
            return handler(*args, **kwargs)
        hook_args = args[0]
        _scrub_exception(getattr(hook_args, "exc_value", None), redactor)
        if handler is not threading.__excepthook__ and handler != self.default:
            return handler(*args, **kwargs)

        # Same report as threading.__excepthook__, scrubbed as a whole
        if hook_args.exc_type is SystemExit:
            return None
        thread = hook_args.thread
        name = thread.name if thread is not None else threading.get_ident()
        report = traceback.format_exception(hook_args.exc_type, hook_args.exc_value, hook_args.exc_traceback)
        _write_redacted(f"Exception in thread {name}:\n" + "".join(report), redactor)
        return None


class LogTarget(HookTarget):
    """
    The ``logging`` record factory.

    Records are built by the previous factory; the formatted message is
    then redacted and frozen into ``record.msg`` (with ``record.args``
    cleared). ``extra`` attributes are attached by the logger after the
    factory returns, so they are out of reach here; the logging sources
    scrub them at the call instead.
    """

    identifier = "LOG"

    def get(self) -> Optional[Handler]:
        return logging.getLogRecordFactory()

    def set(self, handler: Optional[Handler]) -> None:
        logging.setLogRecordFactory(handler or logging.LogRecord)

    def default(self, *args, **kwargs):
        return logging.LogRecord(*args, **kwargs)

    def invoke(self, handler: Handler, redactor: Redactor, args: tuple, kwargs: dict) -> Any:
        record = handler(*args, **kwargs)
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Leave the bad format for logging's own error handling at emit time
            message = None
        if message is not None:
            record.msg = redactor.redact_text(message)
            record.args = None

        if record.exc_info and record.exc_info[1] is not None:
            _scrub_exception(record.exc_info[1], redactor)
        return record


class MethodTarget(HookTarget):
    """A named callable living on a module or class."""

    def __init__(self, identifier: str, owner: Any, attribute: str):
        self.identifier = identifier
        self.owner = owner
        self.attribute = attribute
        self._descriptor: Optional[type] = None

    def get(self) -> Optional[Handler]:
        if inspect.isclass(self.owner):
            raw = vars(self.owner).get(self.attribute)
            if raw is None:
                return getattr(self.owner, self.attribute, None)
            if isinstance(raw, (staticmethod, classmethod)):
                self._descriptor = type(raw)
                return raw.__func__
            return raw
        return getattr(self.owner, self.attribute, None)

    def set(self, handler: Optional[Handler]) -> None:
        if self._descriptor is not None and handler is not None:
            handler = self._descriptor(handler)
        setattr(self.owner, self.attribute, handler)


class LoggingCallTarget(MethodTarget):
    """
    A function of the ``logging`` API (``logging.info``, ``Logger.error`` ...).

    ``%``-style arguments are merged into the message before redaction,
    so ``%d`` and friends keep working, and ``stacklevel`` is adjusted so
    the record still points at the real caller.
    """

    def __init__(self, identifier: str, owner: Any, attribute: str):
        super().__init__(identifier, owner, attribute)
        self.msg_index = (1 if inspect.isclass(owner) else 0) + (1 if attribute == "log" else 0)

    def invoke(self, handler: Handler, redactor: Redactor, args: tuple, kwargs: dict) -> Any:
        i = self.msg_index
        if len(args) > i:
            head, msg, rest = list(args[:i]), args[i], args[i + 1:]
            fmt_args = rest[0] if len(rest) == 1 and isinstance(rest[0], Mapping) and rest[0] else rest
            if fmt_args:
                try:
                    msg = str(msg) % fmt_args
                    rest = ()
                except (TypeError, ValueError, KeyError):
                    rest = tuple(redactor.redact(*rest))
            args = (*head, redactor.redact(msg)[0], *rest)

        if isinstance(kwargs.get("extra"), Mapping):
            kwargs["extra"] = redactor.redact(dict(kwargs["extra"]))[0]
        kwargs["stacklevel"] = kwargs.get("stacklevel", 1) + WRAPPER_DEPTH
        return handler(*args, **kwargs)


_BUILTIN_HOOKS: dict[str, HookTarget] = {
    target.identifier: target
    for target in (WarnTarget(), WarnIfTarget(), DieTarget(), ThreadDieTarget(), LogTarget())
}


def builtin_hooks() -> list[str]:
    """Return the identifiers of the built-in hooks."""
    return list(_BUILTIN_HOOKS)


def is_builtin_hook(identifier: str) -> bool:
    return identifier in _BUILTIN_HOOKS


def register_target(target: HookTarget) -> None:
    """
    Make a custom hook available by its identifier.

    Args:
        target: A HookTarget (e.g. a CallableSlot around a third-party
                sink) whose identifier becomes usable with add_hook().
    """
    _BUILTIN_HOOKS[target.identifier] = target


def unregister_target(identifier: str) -> None:
    _BUILTIN_HOOKS.pop(identifier, None)


def resolve_hook(identifier: str) -> HookTarget:
    """Return the built-in (or registered) hook named ``identifier``."""
    try:
        return _BUILTIN_HOOKS[identifier]
    except KeyError:
        raise MissingTarget([identifier], "no such hook") from None


def _import_prefix(path: str) -> tuple[Any, list[str]]:
    """Import the longest importable module prefix of ``path``."""
    if ":" in path:
        module_name, _, qualname = path.partition(":")
        try:
            return importlib.import_module(module_name), qualname.split(".")
        except ImportError as e:
            raise MissingTarget([path], str(e)) from e

    parts = path.split(".")
    if len(parts) == 1:
        return importlib.import_module("builtins"), parts
    for cut in range(len(parts) - 1, 0, -1):
        try:
            return importlib.import_module(".".join(parts[:cut])), parts[cut:]
        except ImportError:
            continue
    raise MissingTarget([path], "module not importable")


def resolve_method(identifier: str) -> MethodTarget:
    """
    Resolve a dotted path to the callable it names.

    Raises:
        MissingTarget: If the module cannot be imported, an attribute is
            missing, or the final attribute is not callable.
    """
    module, attrs = _import_prefix(identifier)
    owner = module
    for name in attrs[:-1]:
        try:
            owner = getattr(owner, name)
        except AttributeError:
            raise MissingTarget([identifier], f"no attribute {name!r}") from None

    attribute = attrs[-1]
    if not callable(getattr(owner, attribute, None)):
        raise MissingTarget([identifier], "not a callable")

    is_logging_owner = owner is logging or (inspect.isclass(owner) and issubclass(owner, logging.Logger))
    if is_logging_owner and attribute in _LOGGING_CALLS:
        return LoggingCallTarget(identifier, owner, attribute)
    return MethodTarget(identifier, owner, attribute)


def source_members(source: str) -> list[str]:
    """
    List the identifiers that make up ``source``.

    Raises:
        MissingTarget: If ``source`` is neither a known source nor an
            importable module.
    """
    if source == "logging":
        return [f"logging.{name}" for name in _LOGGING_CALLS if hasattr(logging, name)]
    if source == "logger":
        return [f"logging.Logger.{name}" for name in _LOGGING_CALLS if hasattr(logging.Logger, name)]
    if source == "warnings":
        return ["WARN", "WARNIF"]
    if source == "syslog":
        return ["syslog.syslog"]

    try:
        module = importlib.import_module(source)
    except ImportError as e:
        raise MissingTarget([source], str(e)) from e
    return sorted(
        f"{source}.{name}"
        for name, member in vars(module).items()
        if not name.startswith("_")
        and (inspect.isfunction(member) or inspect.isbuiltin(member))
        and getattr(member, "__module__", None) == module.__name__
    )

"""
Flagwork faults (errors and warnings), accumulation and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- FlagException / FlagWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- Outcome: the accumulator threaded through one parse. Components never raise
  while parsing; they add faults here and report a status.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Flag-first messages: every message names the flag, command or position at fault.
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The parser collects faults in an Outcome and exposes them as two lists.
- Parser.report() calls trigger(...) on them: in non-shell mode errors are raised
  and warnings go through the warnings module; in shell mode they are rendered via rich.
"""
import inspect
import os.path
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_FLAG, UNKNOWN_COMMAND, SUBCOMMAND_EXPECTED, MALFORMED_INPUT
    - values (1111x)
      • FLAG_VALUE_EXPECTED, INVALID_VALUE, CONVERSION_FAILED, FILE_FLAG
    - requirements and placement (1112x)
      • REQUIRED_FLAG, REQUIRED_IF, MISPLACED_POSITIONAL
    - dependency graph (1113x)
      • CIRCULAR_DEPENDENCY, DEPENDENCY_DEPTH, MISSING_DEPENDENCY
    - secure input (1114x)
      • SECURE_INPUT
    - callbacks (1115x)
      • CALLBACK_FAILED
    - warnings (12xxx)
      • DEPENDENCY_UNMET, DEPENDENCY_VALUE, INCONSISTENT_DECLARATION

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired (e.g., to shorter labels).
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_FLAG                = 11101
    UNKNOWN_COMMAND             = 11102
    SUBCOMMAND_EXPECTED         = 11103
    MALFORMED_INPUT             = 11104

    # --- value errors (11xxx) ---
    FLAG_VALUE_EXPECTED         = 11111
    INVALID_VALUE               = 11112
    CONVERSION_FAILED           = 11113
    FILE_FLAG                   = 11114

    # --- requirement/placement errors (11xxx) ---
    REQUIRED_FLAG               = 11121
    REQUIRED_IF                 = 11122
    MISPLACED_POSITIONAL        = 11123

    # --- dependency graph errors (11xxx) ---
    CIRCULAR_DEPENDENCY         = 11131
    DEPENDENCY_DEPTH            = 11132
    MISSING_DEPENDENCY          = 11133

    # --- secure input errors (11xxx) ---
    SECURE_INPUT                = 11141

    # --- callback errors (11xxx) ---
    CALLBACK_FAILED             = 11151

    # --- warnings (12xxx) ---
    DEPENDENCY_UNMET            = 12131
    DEPENDENCY_VALUE            = 12132
    INCONSISTENT_DECLARATION    = 12141

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, message, palette, /):
    """
    shared rich renderer for errors and warnings.

    the palette names the 'title' and 'message' style keys for the fault family;
    every key can be overridden by a __styles__ mapping in __main__.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if colorful else "")

    prog = getattr(main, "__prog__", options.get("prog") or os.path.basename(sys.argv[0]) or "flagwork")
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "-", "code"),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), palette["title-key"]),
        " ]",
    )
    body = text(message, palette["message-key"])
    renders = [body]
    if hint := options.get("hint"):
        renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fancy:
        try:
            width = int((console.width - 4) * options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(*renders), title=header, title_align="left", width=width)
    return Group(header, *renders)


class FlagException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else type(self).__name__

    def __rich__(self):
        return _render(self, self.message, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "title-key": "error-title",
            "message-key": "error-message",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownFlagError(FlagException): ...
class UnknownCommandError(FlagException): ...
class SubcommandExpectedError(FlagException): ...
class MalformedInputError(FlagException): ...
class FlagValueExpectedError(FlagException): ...
class InvalidValueError(FlagException): ...
class ConversionError(FlagException): ...
class FileFlagError(FlagException): ...
class RequiredFlagError(FlagException): ...
class RequiredIfError(FlagException): ...
class MisplacedPositionalError(FlagException): ...
class CircularDependencyError(FlagException): ...
class DependencyDepthError(FlagException): ...
class MissingDependencyError(FlagException): ...
class SecureInputError(FlagException): ...
class CallbackError(FlagException): ...


class FlagWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else type(self).__name__

    def __rich__(self):
        return _render(self, self.message, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
            "title-key": "warning-title",
            "message-key": "warning-message",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DependencyWarning(FlagWarning): ...
class DependencyValueWarning(FlagWarning): ...
class ConsistencyWarning(FlagWarning): ...


class ParseExit(ExceptionGroup[FlagException]):
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title (Bad Exit)
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            return Text(str(fragment), styles[style] if colorful else "")

        prog = getattr(main, "__prog__", self.options.get("prog") or os.path.basename(sys.argv[0]) or "flagwork")
        header = Text.assemble("[ ", text(prog, "prog-name"), " — ", text(self.message.title(), "title"), " ]")

        renders = [exception.__replace__(ratio=2 / 3) for exception in self.exceptions]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(
            [exception.__replace__(**overrides) for exception in self.exceptions],
            **{**self.options, **overrides}
        )


class Outcome:
    """
    errors and warnings accumulated by one parse.

    add() routes a fault to the right list by type; a fault with the same type,
    message and token index as a recorded one is dropped (graph walks may reach a
    fault more than once, a repeated token is reported at each position).
    """

    def __init__(self):
        self.errors = []
        self.warnings = []

    def add(self, fault, /):
        if isinstance(fault, FlagWarning):
            target = self.warnings
        elif isinstance(fault, FlagException):
            target = self.errors
        else:
            raise TypeError("add() argument must be a flag exception or a flag warning")
        if not any(
            type(known) is type(fault)
            and known.message == fault.message
            and known.options.get("index") == fault.options.get("index")
            for known in target
        ):
            target.append(fault)
        return fault

    def clear(self, *, errors=True, warnings=True):
        if errors:
            self.errors.clear()
        if warnings:
            self.warnings.clear()

    @property
    def failed(self):
        return bool(self.errors)


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised
      and warnings are emitted through the warnings module.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "FlagException",
    "UnknownFlagError",
    "UnknownCommandError",
    "SubcommandExpectedError",
    "MalformedInputError",
    "FlagValueExpectedError",
    "InvalidValueError",
    "ConversionError",
    "FileFlagError",
    "RequiredFlagError",
    "RequiredIfError",
    "MisplacedPositionalError",
    "CircularDependencyError",
    "DependencyDepthError",
    "MissingDependencyError",
    "SecureInputError",
    "CallbackError",
    "FlagWarning",
    "DependencyWarning",
    "DependencyValueWarning",
    "ConsistencyWarning",
    "ParseExit",
    "Outcome",
    "trigger",
    "getdoc",
)

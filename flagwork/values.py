"""
Value pipeline: from the raw token of a flag to its typed value.

phases (in order)
- file: FILE flags expand ${VAR} references (and ${EXEC_DIR}), make the path
  absolute, require an existing regular file, and use its content as the value.
- pre-filter: the argument's pre callable (str -> str).
- acceptance: SINGLE/FILE values must match at least one accepted pattern;
  CHAINED values are split on the delimiters and every element must match.
  A failure lists every accepted description.
- post-filter: the argument's post callable (str -> str).
- conversion: the argument's destination type. STANDALONE values parse as
  booleans; CHAINED values convert element by element into a list.

faults are added to the parse outcome; run() returns (raw, value) on success
and None on failure, so one bad flag never stops the scan.
"""
import datetime
import math
import os.path
import re
import sys
from collections.abc import Callable

from .arguments import Kind
from .faults import *
from .utils import *

_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))

_DURATION = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_MICROSECONDS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "μs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
}


def parse_bool(value, /):
    """boolean literal ("1", "t", "true", "TRUE", "0", "f", "false", ...)."""
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"invalid boolean literal {value!r}")


def is_bool(value, /):
    return value in _TRUE or value in _FALSE


def parse_duration(value, /):
    """duration such as "1h30m", "-1.5s" or "250ms" into a timedelta."""
    body = value.lstrip("+-")
    sign = -1 if value.startswith("-") else 1
    if body == "0":
        return datetime.timedelta(0)
    if not body or _DURATION.sub("", body):
        raise ValueError(f"invalid duration {value!r}")
    microseconds = sum(float(amount) * _MICROSECONDS[unit] for amount, unit in _DURATION.findall(body))
    return datetime.timedelta(microseconds=sign * microseconds)


def integer(bits=64, /, signed=True):
    """
    sized integer converter; values outside the range raise OverflowError.

    int as a destination type stands for integer(64).
    """
    if bits not in (8, 16, 32, 64):
        raise ValueError("integer() bits must be one of 8, 16, 32 or 64")
    low, high = (-(1 << bits - 1), (1 << bits - 1) - 1) if signed else (0, (1 << bits) - 1)
    name = ("int" if signed else "uint") + str(bits)

    @rename(name)
    def converter(value, /):
        if "_" in value:
            raise ValueError(f"invalid integer {value!r}")
        number = int(value, 10)
        if not low <= number <= high:
            raise OverflowError(f"{value!r} is out of range for {name}")
        return number

    return converter


def floating(bits=64, /):
    """float converter; finite input that does not fit raises OverflowError."""
    if bits not in (32, 64):
        raise ValueError("floating() bits must be 32 or 64")
    limit = 3.4028234663852886e38 if bits == 32 else sys.float_info.max

    @rename("float" + str(bits))
    def converter(value, /):
        number = float(value)
        if math.isinf(number) and "inf" not in value.lower():
            raise OverflowError(f"{value!r} is out of range for float{bits}")
        if math.isfinite(number) and abs(number) > limit:
            raise OverflowError(f"{value!r} is out of range for float{bits}")
        return number

    return converter


_int64 = integer(64)
_float64 = floating(64)


# destination type -> (label, converter); matched by identity
_BUILTINS = (
    (str, "string", lambda value: value),
    (bool, "bool", parse_bool),
    (int, "int64", _int64),
    (float, "float64", _float64),
    (datetime.timedelta, "duration", parse_duration),
    (datetime.datetime, "time", datetime.datetime.fromisoformat),
    (datetime.date, "date", datetime.date.fromisoformat),
)


def typename(type, /):
    """label of a destination type for messages."""
    for known, label, _ in _BUILTINS:
        if type is known:
            return label
    return getattr(type, "__name__", repr(type))


def convert(value, type, /):
    """convert one string into the destination type (exceptions propagate)."""
    for known, _, converter in _BUILTINS:
        if type is known:
            return converter(value)
    return type(value)


def load_file(path, /):
    """
    content of the file named by a FILE flag value.

    raises
    - FileNotFoundError: nothing exists at the expanded absolute path.
    - IsADirectoryError: the path names a directory.
    - OSError: the file cannot be read.
    """
    executable = os.path.dirname(os.path.abspath(sys.argv[0] or "."))
    expanded = re.sub(r"\$\{EXEC_DIR\}", lambda _: executable, path, flags=re.IGNORECASE)
    expanded = os.path.abspath(os.path.expanduser(os.path.expandvars(expanded)))
    if not os.path.exists(expanded):
        raise FileNotFoundError(f"path {expanded!r} does not exist")
    if os.path.isdir(expanded):
        raise IsADirectoryError(f"path {expanded!r} is a directory")
    with open(expanded, encoding="utf-8") as stream:
        return stream.read()


class Pipeline:
    """
    per-parser value pipeline.

    delimiters: iterable of separator strings, or a callable(character) -> bool
    deciding whether a character separates chained elements.
    """

    def __init__(self, delimiters=(",", "|", " "), /):
        if isinstance(delimiters, Callable):
            self._separates = delimiters
            self._pattern = None
            self._joiner = ","
        else:
            delimiters = tuple(delimiters)
            if not delimiters or not all(isinstance(delimiter, str) and delimiter for delimiter in delimiters):
                raise ValueError("pipeline delimiters must be non-empty strings")
            self._separates = None
            self._pattern = re.compile("|".join(map(re.escape, sorted(delimiters, key=len, reverse=True))))
            self._joiner = delimiters[0]

    def join(self, elements, /):
        """raw chained value for elements (None elements are skipped)."""
        return self._joiner.join(element for element in elements if element is not None)

    def split(self, value, /):
        """chained elements of a value (empty elements are dropped)."""
        if self._pattern is not None:
            return [element for element in self._pattern.split(value) if element]
        elements, current = [], []
        for character in value:
            if self._separates(character):
                if current:
                    elements.append("".join(current))
                    current.clear()
            else:
                current.append(character)
        if current:
            elements.append("".join(current))
        return elements

    def run(self, entry, raw, outcome, /, *, loaded=False):
        """
        push one raw value through every phase for a registry entry.

        loaded=True skips the file phase (the value already is the content).
        """
        argument = entry.argument

        if argument.kind is Kind.FILE and not loaded:
            try:
                raw = load_file(raw)
            except OSError as error:
                outcome.add(FileFlagError(
                    "file flag %r cannot use %r: %s" % (entry.key, raw, error.args[-1] if error.args else error),
                    title="file flag failure",
                    code=FaultCode.FILE_FLAG,
                    flag=entry.key,
                    input=raw,
                    hint="pass the path of an existing, readable regular file",
                    docs=getdoc(FaultCode.FILE_FLAG),
                ))
                return None

        if (raw := self._filter(entry, argument.pre, raw, outcome)) is None:
            return None
        if not self.accept(entry, raw, outcome):
            return None
        if (raw := self._filter(entry, argument.post, raw, outcome)) is None:
            return None

        try:
            if argument.kind is Kind.STANDALONE:
                value = parse_bool(raw)
            elif argument.kind is Kind.CHAINED:
                value = [convert(element, argument.type) for element in self.split(raw)]
            else:
                value = convert(raw, argument.type)
        except Exception as error:
            outcome.add(self._conversion(entry, raw, error))
            return None
        return raw, value

    def convert(self, entry, raw, outcome, /):
        """typed conversion only (declared defaults skip filters and patterns)."""
        argument = entry.argument
        try:
            if argument.kind is Kind.STANDALONE:
                return parse_bool(raw)
            if argument.kind is Kind.CHAINED:
                return [convert(element, argument.type) for element in self.split(raw)]
            return convert(raw, argument.type)
        except Exception as error:
            outcome.add(self._conversion(entry, raw, error))
            return Unset

    def accept(self, entry, raw, outcome, /):
        """accepted-pattern check; True when the value (or every element) matches."""
        argument = entry.argument
        if not argument.accepts or argument.kind is Kind.STANDALONE:
            return True

        if argument.kind is Kind.CHAINED:
            elements = self.split(raw)
            rejected = [element for element in elements if not any(p.matches(element) for p in argument.accepts)]
            if not rejected and elements:
                return True
            shown = rejected[0] if rejected else raw
        else:
            if any(pattern.matches(raw) for pattern in argument.accepts):
                return True
            shown = raw

        descriptions = argument.describe()
        outcome.add(InvalidValueError(
            "invalid value %r for flag %r, accepted values: %s" % (shown, entry.key, ", ".join(descriptions)),
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            flag=entry.key,
            input=raw,
            accepted=descriptions,
            hint="use a value matching %s" % " or ".join(descriptions),
            docs=getdoc(FaultCode.INVALID_VALUE),
        ))
        return False

    @staticmethod
    def _filter(entry, filter, raw, outcome, /):
        if filter is None:
            return raw
        try:
            result = filter(raw)
        except Exception as error:
            outcome.add(InvalidValueError(
                "invalid value %r for flag %r: %s" % (raw, entry.key, error),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                flag=entry.key,
                input=raw,
                hint="check the value given to %r" % entry.key,
                docs=getdoc(FaultCode.INVALID_VALUE),
            ))
            return None
        if not isinstance(result, str):
            outcome.add(InvalidValueError(
                "invalid value %r for flag %r: filter returned %s, expected str" % (raw, entry.key, type(result).__name__),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                flag=entry.key,
                input=raw,
                hint="make the filters of %r return strings" % entry.key,
                docs=getdoc(FaultCode.INVALID_VALUE),
            ))
            return None
        return result

    @staticmethod
    def _conversion(entry, raw, error, /):
        expected = typename(entry.argument.type)
        if entry.argument.kind is Kind.CHAINED:
            expected = "list of " + expected
        elif entry.argument.kind is Kind.STANDALONE:
            expected = "bool"
        return ConversionError(
            "cannot convert %r for flag %r to %s: %s" % (raw, entry.key, expected, error),
            title="type conversion failure",
            code=FaultCode.CONVERSION_FAILED,
            flag=entry.key,
            input=raw,
            expected=expected,
            hint="give %r a %s value" % (entry.key, expected),
            docs=getdoc(FaultCode.CONVERSION_FAILED),
        )


__all__ = (
    "Pipeline",
    "parse_bool",
    "is_bool",
    "parse_duration",
    "integer",
    "floating",
    "typename",
    "convert",
    "load_file",
)

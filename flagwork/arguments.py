r"""
Flagwork argument definitions.

Overview
- Definitions
  • Argument: the declaration of one flag (kind, short alias, requirement, default,
    secure input, accepted patterns, dependencies, positional placement, capacity,
    filters and destination type). Instances are immutable; every change goes
    through __replace__ and re-runs the sanitizers.
  • Kind: SINGLE (one value), CHAINED (delimited list), STANDALONE (boolean switch),
    FILE (value read from the named file).
  • Pattern: an accepted-value matcher (compiled regex + human description).
  • Position / At: an (AT_START | AT_END, relative index) placement pair.

- Constructors
  • single(...), chained(...), standalone(...), file(...): Argument with the kind set.
  • at_start(index), at_end(index): Position builders.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- short: Unset | str (non-empty, no whitespace, no leading prefix character).
- descr: Unset | str (defaults to None), non-empty when provided.
- type: callable destination converter. STANDALONE arguments may only bind to bool.
- default: Unset | str (bool accepted for STANDALONE and normalized to "true"/"false").
- required / required_if: at most one of them drives mandatoriness.
- secure / prompt: secure arguments are read from the terminal after a successful parse.
- accepts: iterable of Pattern | str | (pattern, descr).
- depends: mapping of flag name -> allowed values (empty means presence only).
- position: Unset | Position (SINGLE and FILE only).
- capacity: int >= 0, CHAINED only (enables --name.<index> element assignment).
- pre / post: Unset | callable str -> str filters around the pattern check.

Quick example:
    >>> from flagwork.arguments import single, standalone, at_start
    >>> level = single(accepts=[("^(debug|info)$", "debug or info")], default="info")
    >>> verbose = standalone(short="v")
    >>> source = single(position=at_start(0), required=True)
"""
import builtins
import functools
import operator
import re
from collections import namedtuple
from collections.abc import Iterable, Mapping
from enum import IntEnum

from .utils import *


class Kind(IntEnum):
    """semantic kind of a flag."""
    SINGLE = 1
    CHAINED = 2
    STANDALONE = 3
    FILE = 4

    def __str__(self):
        return self.name.lower()


class At(IntEnum):
    """position class of a positional argument."""
    START = 1
    END = 2

    def __str__(self):
        return self.name.lower()


class Position(namedtuple("Position", ("at", "index"))):
    """(position class, zero-based relative index among same-class positionals)."""
    __slots__ = ()

    def __new__(cls, at, index=0, /):
        if not isinstance(at, At):
            raise TypeError("position 'at' must be an At member")
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError("position 'index' must be an integer")
        if index < 0:
            raise ValueError("position 'index' must be non-negative")
        return super().__new__(cls, at, index)


def at_start(index=0, /):
    """positional that must appear before the first flag or command."""
    return Position(At.START, index)


def at_end(index=0, /):
    """positional that must appear after the last flag or command."""
    return Position(At.END, index)


class Pattern(namedtuple("Pattern", ("regex", "descr"))):
    """
    accepted-value matcher.

    the regex is searched (not anchored) in the value; anchor it explicitly to
    require a full match. describe() falls back to the pattern source when no
    description was given.
    """
    __slots__ = ()

    def __new__(cls, pattern, descr=Unset, /, flags=0):
        if isinstance(pattern, re.Pattern):
            regex = pattern
        elif isinstance(pattern, str):
            try:
                regex = re.compile(pattern, flags)
            except re.error as error:
                raise ValueError(f"pattern {pattern!r} is not a valid regular expression: {error}") from None
        else:
            raise TypeError("pattern must be a string or a compiled regular expression")
        if not isinstance(descr, str | Unset):
            raise TypeError("pattern 'descr' must be a string")
        return super().__new__(cls, regex, coalesce(descr, None))

    def matches(self, value, /):
        return self.regex.search(value) is not None

    def describe(self):
        return self.descr if self.descr else self.regex.pattern


def _pattern(object, /):
    match object:
        case Pattern():
            return object
        case str() | re.Pattern():
            return Pattern(object)
        case (pattern, descr):
            return Pattern(pattern, descr)
        case _:
            raise TypeError("accepted values must be patterns, strings or (pattern, descr) pairs")


class ArgumentType(type):
    """
    Metaclass that turns definitions into introspectable, read-only records.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in validation messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the generic fields (kind, short, descr, type, default).

    Raises
    - TypeError: wrong field types, or a STANDALONE argument bound to a non-bool type.
    - ValueError: empty strings, whitespace in the short alias, or a default a
      STANDALONE argument cannot parse.
    """
    if not isinstance(kind := metadata["kind"], Kind):
        raise TypeError(f"{cls.__typename__} 'kind' must be a Kind member")

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and not (short := short.strip()):
        raise ValueError(f"{cls.__typename__} 'short' cannot be empty")
    elif isinstance(short, str) and (re.search(r"[\s=@]", short) or short[0] in "-/"):
        raise ValueError(f"{cls.__typename__} 'short' must be a bare name without prefix, '=', '@' or whitespace")
    metadata["short"] = coalesce(short)

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if metadata["type"] is Unset:
        metadata["type"] = builtins.bool if kind is Kind.STANDALONE else builtins.str
    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")
    if kind is Kind.STANDALONE and metadata["type"] is not builtins.bool:
        raise TypeError(f"{cls.__typename__} standalone arguments may only bind to bool")

    default = metadata["default"]
    if kind is Kind.STANDALONE and isinstance(default, bool):
        default = "true" if default else "false"
    if not isinstance(default, str | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")
    metadata["default"] = coalesce(default)


def _sanitize_requirement_metadata(cls, metadata, /):
    """
    Internal: required/required_if exclusivity and secure input wiring.

    - required: bool.
    - required_if: Unset | callable(parser, key) -> bool | str; a string result is
      used as the error message.
    - secure: bool; prompt: Unset | non-empty string (defaults to "password: ").
    """
    if not isinstance(metadata["required"], bool):
        raise TypeError(f"{cls.__typename__} 'required' must be a boolean")
    if not (metadata["required_if"] is Unset or callable(metadata["required_if"])):
        raise TypeError(f"{cls.__typename__} 'required_if' must be callable")
    if metadata["required"] and metadata["required_if"] is not Unset:
        raise TypeError(f"{cls.__typename__} cannot be both 'required' and 'required_if'")
    metadata["required_if"] = coalesce(metadata["required_if"])

    if not isinstance(metadata["secure"], bool):
        raise TypeError(f"{cls.__typename__} 'secure' must be a boolean")
    if not isinstance(prompt := metadata["prompt"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'prompt' must be a string")
    elif isinstance(prompt, str) and not prompt.strip():
        raise ValueError(f"{cls.__typename__} 'prompt' cannot be empty")
    if metadata["secure"] and metadata["kind"] is Kind.STANDALONE:
        raise ValueError(f"{cls.__typename__} standalone arguments cannot be secure")
    metadata["prompt"] = coalesce(prompt, "password: ")


def _sanitize_value_metadata(cls, metadata, /):
    """
    Internal: accepted patterns, dependencies, placement, capacity and filters.

    Side effects
    - accepts becomes a tuple of Pattern.
    - depends becomes a dict of flag name -> tuple of allowed values (a bare
      string counts as a single allowed value; None or () as presence only).
    """
    kind = metadata["kind"]

    if not isinstance(accepts := metadata["accepts"], Iterable) or isinstance(accepts, str):
        raise TypeError(f"{cls.__typename__} 'accepts' must be an iterable of patterns")
    metadata["accepts"] = tuple(map(_pattern, accepts))
    if metadata["accepts"] and kind is Kind.STANDALONE:
        raise ValueError(f"{cls.__typename__} standalone arguments cannot accept patterns")

    if not isinstance(depends := coalesce(metadata["depends"], {}), Mapping):
        raise TypeError(f"{cls.__typename__} 'depends' must be a mapping")
    dependencies = {}
    for name, values in depends.items():
        if not isinstance(name, str) or not name.strip():
            raise TypeError(f"{cls.__typename__} dependency names must be non-empty strings")
        if values is None:
            values = ()
        elif isinstance(values, str):
            values = (values,)
        if not isinstance(values, Iterable):
            raise TypeError(f"{cls.__typename__} dependency values must be strings")
        values = tuple(values)
        if not all(isinstance(value, str) for value in values):
            raise TypeError(f"{cls.__typename__} dependency values must be strings")
        dependencies[name.strip()] = tuple(dict.fromkeys(values))
    metadata["depends"] = dependencies

    if not isinstance(position := metadata["position"], Position | Unset):
        raise TypeError(f"{cls.__typename__} 'position' must be a Position")
    if position is not Unset and kind not in (Kind.SINGLE, Kind.FILE):
        raise ValueError(f"{cls.__typename__} only single and file arguments can be positional")
    metadata["position"] = coalesce(position)

    if isinstance(capacity := metadata["capacity"], bool) or not isinstance(capacity, int):
        raise TypeError(f"{cls.__typename__} 'capacity' must be an integer")
    if capacity < 0:
        raise ValueError(f"{cls.__typename__} 'capacity' must be non-negative")
    if capacity and kind is not Kind.CHAINED:
        raise ValueError(f"{cls.__typename__} only chained arguments can have a capacity")

    for name in ("pre", "post"):
        if not (metadata[name] is Unset or callable(metadata[name])):
            raise TypeError(f"{cls.__typename__} '{name}' filter must be callable")
        metadata[name] = coalesce(metadata[name])


class Argument(metaclass=ArgumentType):
    """
    Declaration of one flag.

    An Argument carries no name: the registry key (name or name@command path)
    is chosen when the argument is added to a parser, so the same definition can
    be declared under several command paths.
    """
    __introspectable__ = (
        "kind",
        "short",
        "descr",
        "type",
        "default",
        "required",
        "required_if",
        "secure",
        "prompt",
        "accepts",
        "depends",
        "position",
        "capacity",
        "pre",
        "post",
    )
    __displayable__ = ("kind", "short", "descr", "default", "required", "accepts", "depends", "position")

    def __init__(
            self,
            kind=Kind.SINGLE,
            /,
            short=Unset,
            descr=Unset,
            *,
            type=Unset,
            default=Unset,
            required=False,
            required_if=Unset,
            secure=False,
            prompt=Unset,
            accepts=(),
            depends=Unset,
            position=Unset,
            capacity=0,
            pre=Unset,
            post=Unset,
    ):
        metadata = {name: value for name, value in locals().items() if name != "self"}
        cls = self.__class__  # 'type' is shadowed by the parameter
        _sanitize_metadata(cls, metadata)
        _sanitize_requirement_metadata(cls, metadata)
        _sanitize_value_metadata(cls, metadata)
        for name, value in metadata.items():
            setattr(self, "_" + name, value)

    @property
    def positional(self):
        return self._position is not None

    def describe(self):
        """accepted-value descriptions, in declaration order."""
        return [pattern.describe() for pattern in self._accepts]

    def __replace__(self, **changes):
        metadata = {name: getattr(self, "_" + name) for name in type(self).__introspectable__}
        metadata.update(changes)
        # sanitized records store None for "not provided"; constructors expect Unset
        for name in ("short", "descr", "default", "required_if", "position", "pre", "post"):
            if metadata[name] is None:
                metadata[name] = Unset
        kind = metadata.pop("kind")
        return type(self)(kind, **metadata)

    def __eq__(self, other):
        if not isinstance(other, Argument):
            return NotImplemented
        return all(getattr(self, "_" + name) == getattr(other, "_" + name) for name in type(self).__introspectable__)

    __hash__ = None


def single(short=Unset, descr=Unset, **metadata):
    """Argument taking exactly one value."""
    return Argument(Kind.SINGLE, short, descr, **metadata)


def chained(short=Unset, descr=Unset, **metadata):
    """Argument taking a delimited list of values."""
    return Argument(Kind.CHAINED, short, descr, **metadata)


def standalone(short=Unset, descr=Unset, **metadata):
    """Boolean switch; true when present unless followed by a boolean literal."""
    return Argument(Kind.STANDALONE, short, descr, **metadata)


def file(short=Unset, descr=Unset, **metadata):
    """Argument whose value is the content of the named file."""
    return Argument(Kind.FILE, short, descr, **metadata)


__all__ = (
    "Kind",
    "At",
    "Position",
    "at_start",
    "at_end",
    "Pattern",
    "Argument",
    "single",
    "chained",
    "standalone",
    "file",
)

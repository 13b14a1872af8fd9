"""
Flagwork utilities.

Scope
- Small building blocks shared by the declarations, the registry, the value
  pipeline and the parser. Exposed, but meant for the layers above.

Overview
- UnsetType / Unset
  • "no value given" marker for declaration fields where None is meaningful
    (a flag default of None means "no default", Unset means "not passed").

- coalesce(value, default=None)
  • Unset becomes the default; None, 0, "" and [] pass through unchanged.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) with fresh copies
    of mutable containers.

- Name-case converters
  • words(text): split any of snake_case, SCREAMING_SNAKE, kebab-case, PascalCase,
    camelCase or dotted.case into lowercase words.
  • to_lower_camel, to_pascal, to_snake, to_screaming_snake, to_kebab, to_dotted.
  • The environment merger uses to_lower_camel by default so that every style of
    environment variable name lands on the same registry key.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> to_lower_camel("LOG_LEVEL"), to_lower_camel("log-level"), to_lower_camel("Log.Level")
    ('logLevel', 'logLevel', 'logLevel')
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    type of the Unset marker used as the default of optional keyword fields.

    - one instance per process; copying or pickling keeps it.
    - falsy, repr "Unset", sealed against subclassing.
    - usable in unions: isinstance(value, str | Unset).
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations and isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    object, or default when object is Unset (None is kept: it is a value).
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (updated in place)
    - rename(name) -> decorator

    Raises
    - TypeError: wrong arity, non-callable target, non-string name, or a
      built-in callable whose names cannot be updated.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively copy mutable container values.

    Behavior
    - tuple (including named tuples): returned as-is, they are already immutable.
    - other Sequence (non-string): a new list with each element processed.
    - Mapping: a new dict with the same keys and processed values.
    - Set: a new set with each element processed.
    - Anything else: returned as-is.
    """
    if isinstance(object, tuple | str):
        return object
    elif isinstance(object, Sequence):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    else:
        return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and hands out fresh
    copies of mutable containers, so callers cannot edit declarations in place.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


_WORDS = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


@functools.cache
def words(text, /):
    """
    Split an identifier written in any common case style into lowercase words.

    Separators are '_', '-', '.', and whitespace; inside a segment, case
    transitions and digit runs start a new word, and acronyms stay together
    ("HTTPServer" -> ["http", "server"]).
    """
    if not isinstance(text, str):
        raise TypeError("words() argument must be a string")
    return tuple(word.lower() for word in _WORDS.findall(text))


def to_lower_camel(text, /):
    """Convert any case style to lowerCamelCase ("LOG_LEVEL" -> "logLevel")."""
    head, *tail = words(text) or ("",)
    return head + "".join(word.capitalize() for word in tail)


def to_pascal(text, /):
    """Convert any case style to PascalCase."""
    return "".join(word.capitalize() for word in words(text))


def to_snake(text, /):
    """Convert any case style to snake_case."""
    return "_".join(words(text))


def to_screaming_snake(text, /):
    """Convert any case style to SCREAMING_SNAKE_CASE."""
    return "_".join(words(text)).upper()


def to_kebab(text, /):
    """Convert any case style to kebab-case."""
    return "-".join(words(text))


def to_dotted(text, /):
    """Convert any case style to dotted.case."""
    return ".".join(words(text))


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "words",
    "to_lower_camel",
    "to_pascal",
    "to_snake",
    "to_screaming_snake",
    "to_kebab",
    "to_dotted",
)

"""
Flagwork command layer: the command tree and the walker that matches tokens to it.

What this module provides
- Command: a named verb with an optional description, an optional callback and
  ordered child commands. Its path (names from the root joined by spaces) is
  computed once, when the node is attached; a tree is frozen once a parser
  accepts it.
- Walker: the per-parse matching queue. It decides whether a token opens a
  command, descends into a subcommand, or is not a command at all.

Core ideas
- Nodes are owned by their parent; lookups go through the parser's
  path -> Command table built at registration, never through string
  concatenation during a parse.
- A command without children is terminal: after it, no token is eligible for
  command matching anymore.
- Callbacks take (parser, command) and are queued in discovery order; running
  them is the parser's business.

Quick example
    >>> from flagwork.commands import Command
    >>> root = Command("create", "create resources")
    >>> user = root.command("user", "create a user")
    >>> @user.bind
    ... def on_user(parser, command): ...
    >>> user.path
    'create user'
"""
import functools
import operator
import re
from collections import deque

from .faults import *
from .utils import *


class CommandType(type):
    """
    Metaclass exposing __introspectable__ names as read-only mirrors with a
    stable __repr__/__rich_repr__ (same conventions as ArgumentType).
    """
    __introspectable__ = ()

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
            yield "name", self._name
            yield "path", self._path
            if self._descr is not None:
                yield "descr", self._descr
            yield "children", [child.name for child in self._children]
        self.__rich_repr__ = __rich_repr__

        return self


class Command(metaclass=CommandType):
    __introspectable__ = ("name", "descr", "callback", "path", "parent")

    def __init__(self, name, /, descr=Unset, callback=Unset, *, children=()):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} name must be a string")
        elif not re.fullmatch(r"[^\s@\-/][^\s@]*", name):
            raise ValueError(f"{type(self).__typename__} name {name!r} must be a single word without prefix or '@'")
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{type(self).__typename__} 'descr' cannot be empty")
        if not (callback is Unset or callable(callback)):
            raise TypeError(f"{type(self).__typename__} callback must be callable")

        self._name = name
        self._descr = coalesce(descr)
        self._callback = coalesce(callback)
        self._children = []
        self._parent = None
        self._path = name
        self._frozen = False

        for child in children:
            self.attach(child)

    @property
    def children(self):
        return tuple(self._children)

    @property
    def terminal(self):
        return not self._children

    @property
    def depth(self):
        """levels in this subtree (1 for a terminal command)."""
        return 1 + max((child.depth for child in self._children), default=0)

    def walk(self):
        """this node and all descendants, depth-first in declaration order."""
        yield self
        for child in self._children:
            yield from child.walk()

    def child(self, name, /):
        """child matching name case-insensitively, or None."""
        folded = name.casefold()
        for child in self._children:
            if child._name.casefold() == folded:
                return child
        return None

    def attach(self, child, /):
        """mount a detached command (and its subtree) under this one."""
        if not isinstance(child, Command):
            raise TypeError(f"{type(self).__typename__} children must be commands")
        if self._frozen:
            raise TypeError(f"{type(self).__typename__} {self._path!r} is already registered and cannot change")
        if child._parent is not None:
            raise ValueError(f"{type(self).__typename__} {child._name!r} is already attached to {child._parent._path!r}")
        if self.child(child._name) is not None:
            raise ValueError(f"{type(self).__typename__} {self._path!r} already has a subcommand named {child._name!r}")
        node = self
        while node is not None:
            if node is child:
                raise ValueError(f"{type(self).__typename__} {child._name!r} cannot be attached to itself")
            node = node._parent
        child._parent = self
        for node in child.walk():
            node._path = node._parent._path + " " + node._name
        self._children.append(child)
        return child

    def command(self, name, /, descr=Unset, callback=Unset):
        """create a subcommand under this command and return it."""
        return self.attach(Command(name, descr, callback))

    def bind(self, callback, /):
        """
        register the callback once; returns it, enabling decorator usage (@cmd.bind).
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} callback must be callable")
        if self._callback is not None:
            raise TypeError(f"{type(self).__typename__} callback cannot be overridden")
        self._callback = callback
        return callback

    def freeze(self):
        for node in self.walk():
            node._frozen = True


class Walker:
    """
    matching queue for one parse.

    step(token) returns the matched Command or None when the token is not a
    command. With an open parent on the queue, the token must name one of its
    children (case-insensitive); a miss is reported as SubcommandExpectedError
    listing the expected names. With an empty queue, the token is looked up as
    a top-level command. Matching a terminal command clears the queue and closes
    the walker for the rest of the parse.
    """

    def __init__(self, roots, /):
        self._roots = roots
        self._queue = deque()
        self._closed = False
        self.current = None

    @property
    def path(self):
        return self.current.path if self.current is not None else ""

    @property
    def pending(self):
        return self._queue[0] if self._queue else None

    def accepts(self, token, /):
        """whether step(token) would match a command (the walker is left untouched)."""
        if self._closed:
            return False
        if self._queue:
            return self._queue[0].child(token) is not None
        return token in self._roots

    def step(self, token, outcome, /):
        if self._closed:
            return None

        if self._queue:
            parent = self._queue.popleft()
            if (command := parent.child(token)) is None:
                expected = [child.name for child in parent.children]
                outcome.add(SubcommandExpectedError(
                    "command %r expects one of the subcommands %s, got %r" % (
                        parent.path, ", ".join(map(repr, expected)), token
                    ),
                    title="subcommand expected",
                    code=FaultCode.SUBCOMMAND_EXPECTED,
                    path=parent.path,
                    input=token,
                    expected=expected,
                    hint="use one of: %s" % ", ".join(expected),
                    docs=getdoc(FaultCode.SUBCOMMAND_EXPECTED),
                ))
                return None
        elif (command := self._roots.get(token)) is None:
            return None

        self.current = command
        if command.terminal:
            self._queue.clear()
            self._closed = True
        else:
            self._queue.append(command)
        return command

    def finish(self, outcome, /):
        """report a command left waiting for its subcommand at the end of the scan."""
        if (parent := self.pending) is None:
            return
        self._queue.clear()
        expected = [child.name for child in parent.children]
        outcome.add(SubcommandExpectedError(
            "command %r expects one of the subcommands %s" % (parent.path, ", ".join(map(repr, expected))),
            title="subcommand expected",
            code=FaultCode.SUBCOMMAND_EXPECTED,
            path=parent.path,
            expected=expected,
            hint="append one of: %s" % ", ".join(expected),
            docs=getdoc(FaultCode.SUBCOMMAND_EXPECTED),
        ))


__all__ = (
    "Command",
    "Walker",
)

"""
Argument registry and flag resolution.

Registry
- Ordered mapping from a flag key to its Entry. The key is the bare name for a
  global flag and "name@command path" for a command-scoped one, so the same name
  can be declared under several command paths without collision.
- Aliases (short names and any extra name associated with a long name) are kept
  per command path, like the flags themselves.

Resolution (resolve)
1. "name@path", then "name@parent path" up to the top command.
2. the global key "name" (global flags are visible inside every command).
3. the alias table, walked the same way; the aliased long name is re-resolved
   through steps 1 and 2.
The most specific (command-scoped) match always wins. None means unknown.
"""
import re
from collections import namedtuple

from .arguments import Argument

Entry = namedtuple("Entry", ("key", "name", "path", "argument"))


def join_key(name, path="", /):
    """registry key for a name declared under a command path ("" for global)."""
    return f"{name}@{path}" if path else name


def split_key(key, /):
    """(name, path) from a registry key."""
    name, _, path = key.partition("@")
    return name, path


def ancestors(path, /):
    """the path itself and every parent path, most specific first ("" excluded)."""
    names = path.split(" ") if path else []
    return [" ".join(names[:end]) for end in range(len(names), 0, -1)]


def _check_name(name, what, /):
    if not isinstance(name, str):
        raise TypeError(f"registry {what} must be a string")
    if not name or re.search(r"[\s=@]", name) or name[0] in "-/":
        raise ValueError(f"registry {what} {name!r} must be a bare name without prefix, '=', '@' or whitespace")


def _check_path(path, /):
    if not isinstance(path, str):
        raise TypeError("registry command path must be a string")
    if path and (path != path.strip() or "  " in path or "@" in path):
        raise ValueError(f"registry command path {path!r} must be command names joined by single spaces")


class Registry:
    def __init__(self):
        self._entries = {}
        self._aliases = {}

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries.values()))

    def __contains__(self, key):
        return key in self._entries

    def __repr__(self):
        return f"registry({', '.join(self._entries)})"

    def get(self, key, /):
        return self._entries.get(key)

    def add(self, name, argument, path="", /):
        """
        declare a flag under a command path.

        raises
        - TypeError: argument is not an Argument.
        - ValueError: malformed name/path, key already declared, or the short alias
          already used by another flag of the same command path.
        """
        _check_name(name, "flag name")
        _check_path(path)
        if not isinstance(argument, Argument):
            raise TypeError("registry entries must be Argument instances")
        if (key := join_key(name, path)) in self._entries:
            raise ValueError(f"flag {key!r} already exists")
        if argument.short is not None:
            self._check_alias(argument.short, name, path)

        self._entries[key] = entry = Entry(key, name, path, argument)
        if argument.short is not None:
            self._aliases[join_key(argument.short, path)] = name
        return entry

    def replace(self, key, argument, /):
        """swap the argument of an existing entry, keeping its key."""
        if not isinstance(argument, Argument):
            raise TypeError("registry entries must be Argument instances")
        try:
            entry = self._entries[key]
        except KeyError:
            raise KeyError(f"flag {key!r} does not exist") from None
        if argument.short != entry.argument.short:
            if argument.short is not None:
                self._check_alias(argument.short, entry.name, entry.path)
            self._drop_alias(entry)
            if argument.short is not None:
                self._aliases[join_key(argument.short, entry.path)] = entry.name
        self._entries[key] = entry = entry._replace(argument=argument)
        return entry

    def remove(self, key, /):
        try:
            entry = self._entries.pop(key)
        except KeyError:
            return False
        self._drop_alias(entry)
        for alias, name in tuple(self._aliases.items()):
            if name == entry.name and split_key(alias)[1] == entry.path:
                del self._aliases[alias]
        return True

    def associate(self, alias, name, path="", /):
        """make alias resolve to the long flag name within a command path."""
        _check_name(alias, "alias")
        _check_path(path)
        self._check_alias(alias, name, path)
        self._aliases[join_key(alias, path)] = name

    def alias(self, name, path="", /):
        """long name an alias stands for, walking from path up to global scope."""
        for scope in (*ancestors(path), ""):
            if (long := self._aliases.get(join_key(name, scope))) is not None:
                return long
        return None

    def lookup(self, name, path="", /):
        """command-scoped then global entry for a long name (no alias lookup)."""
        for scope in (*ancestors(path), ""):
            if (entry := self._entries.get(join_key(name, scope))) is not None:
                return entry
        return None

    def resolve(self, name, path="", /):
        """canonical entry for a raw flag name (prefix already stripped) or None."""
        if (entry := self.lookup(name, path)) is not None:
            return entry
        if (long := self.alias(name, path)) is not None and long != name:
            return self.lookup(long, path)
        return None

    def scoped(self, path, /):
        """entries visible from a command path: the path's own, its parents' and global ones."""
        scopes = {"", *ancestors(path)}
        return [entry for entry in self._entries.values() if entry.path in scopes]

    def _check_alias(self, alias, name, path, /):
        if (taken := self._aliases.get(join_key(alias, path))) is not None and taken != name:
            raise ValueError(f"short flag {alias!r} is already used by {join_key(taken, path)!r}")

    def _drop_alias(self, entry, /):
        if entry.argument.short is not None:
            self._aliases.pop(join_key(entry.argument.short, entry.path), None)


__all__ = (
    "Entry",
    "Registry",
    "join_key",
    "split_key",
    "ancestors",
)

"""
Environment merger.

Effective value precedence for a flag, highest first:
1. an explicit command-line token;
2. the external default map given to parse_with_defaults (e.g. a config file);
3. an environment variable;
4. the declared default of the argument.

Environment names are matched through a name converter applied to both sides:
with the default to_lower_camel, SERVER_PORT, server-port, ServerPort,
server.port and server_port all land on the flag "serverPort" (or on a flag
declared as "server-port"). A variable naming a short alias matches as well.
Command-scoped flags only take environment values once their command was seen.
"""
import os

from .registry import join_key, split_key
from .utils import *


class EnvironmentMerger:
    """
    converter: callable(name) -> normalized name, or None to ignore the environment.
    environ: mapping read for variables (os.environ unless given).
    """

    def __init__(self, converter=to_lower_camel, /, environ=Unset):
        if not (converter is None or callable(converter)):
            raise TypeError("environment-merger converter must be callable or None")
        if environ is not Unset and not hasattr(environ, "items"):
            raise TypeError("environment-merger environ must be a mapping")
        self._converter = converter
        self._environ = environ

    def environment(self, registry, scopes, /):
        """flag key -> raw value taken from the environment, for entries in the given scopes."""
        if self._converter is None:
            return {}
        converted = {}
        for name, value in coalesce(self._environ, os.environ).items():
            if normalized := self._converter(name):
                converted[normalized] = value

        values = {}
        for entry in registry:
            if entry.path not in scopes:
                continue
            for candidate in (entry.name, entry.argument.short):
                if candidate is not None and (normalized := self._converter(candidate)) in converted:
                    values[entry.key] = converted[normalized]
                    break
        return values

    @staticmethod
    def defaults(registry, defaults, scopes, /):
        """
        flag key -> raw value from an external default map.

        keys may be registry keys ("name@path"), long names or short aliases,
        resolved in the scope they name (global when no "@path" is given).
        """
        values = {}
        for key, value in defaults.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError("default map keys and values must be strings")
            name, path = split_key(key.lstrip("-/"))
            if (entry := registry.get(join_key(name, path)) or registry.resolve(name, path)) is None:
                continue
            if entry.path in scopes:
                values[entry.key] = value
        return values

    def merge(self, registry, supplied, defaults, scopes, /):
        """
        flag key -> (raw value, source) for flags the command line did not supply.

        source is "defaults" or "environment"; the default map wins over the environment.
        """
        merged = {}
        for key, value in self.environment(registry, scopes).items():
            if key not in supplied:
                merged[key] = (value, "environment")
        for key, value in self.defaults(registry, defaults, scopes).items():
            if key not in supplied:
                merged[key] = (value, "defaults")
        return merged


__all__ = (
    "EnvironmentMerger",
)

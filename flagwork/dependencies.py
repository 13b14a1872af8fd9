"""
Dependency validation.

Each argument owns its edges as a mapping of flag name -> allowed values (empty
means presence only). Edges name flags, never Argument objects: they are
resolved through the registry (command path first, then global) when the walk
reaches them.

The walk is depth-first from every root the parser hands over (flags that were
supplied and flags that are required), carrying the current path:
- a flag already on the path is a CircularDependencyError;
- going deeper than max_depth is a DependencyDepthError;
- an edge naming an undeclared flag is a MissingDependencyError;
- for a supplied flag, an unsupplied dependency is a DependencyWarning, and a
  supplied one whose value is not allowed (case-insensitive) a
  DependencyValueWarning listing the allowed values joined by "or".
Dependency problems never replace the required-flag check: a required flag
that is absent has already failed on its own.
"""
from .faults import *


def _quoted(values, /):
    return " or ".join(repr(value) for value in values)


class DependencyValidator:
    def __init__(self, registry, /, max_depth=10):
        if isinstance(max_depth, bool) or not isinstance(max_depth, int):
            raise TypeError("dependency-validator 'max_depth' must be an integer")
        if max_depth < 1:
            raise ValueError("dependency-validator 'max_depth' must be positive")
        self._registry = registry
        self._max_depth = max_depth

    def validate(self, roots, options, outcome, /):
        """
        walk every root.

        options maps supplied flag keys to their raw values; presence is
        membership in it.
        """
        for entry in roots:
            if entry.argument.depends:
                self._walk(entry, [], 0, entry.key in options, options, outcome)

    def _walk(self, entry, path, depth, active, options, outcome, /):
        if depth > self._max_depth:
            outcome.add(DependencyDepthError(
                "maximum dependency depth %d exceeded at flag %r (%s)" % (
                    self._max_depth, entry.key, " -> ".join((*path, entry.key))
                ),
                title="dependency depth exceeded",
                code=FaultCode.DEPENDENCY_DEPTH,
                flag=entry.key,
                depth=self._max_depth,
                hint="shorten the dependency chain or raise the maximum depth",
                docs=getdoc(FaultCode.DEPENDENCY_DEPTH),
            ))
            return

        if entry.key in path:
            cycle = path[path.index(entry.key):]
            start = cycle.index(min(cycle))
            cycle = cycle[start:] + cycle[:start]
            outcome.add(CircularDependencyError(
                "circular dependency detected: %s" % " -> ".join((*cycle, cycle[0])),
                title="circular dependency",
                code=FaultCode.CIRCULAR_DEPENDENCY,
                flag=entry.key,
                cycle=tuple(cycle),
                hint="remove one of the dependencies in the cycle",
                docs=getdoc(FaultCode.CIRCULAR_DEPENDENCY),
            ))
            return

        path.append(entry.key)
        for name, allowed in entry.argument.depends.items():
            if (target := self._registry.resolve(name, entry.path)) is None:
                outcome.add(MissingDependencyError(
                    "flag %r depends on %r but it is missing" % (entry.key, name),
                    title="missing dependency",
                    code=FaultCode.MISSING_DEPENDENCY,
                    flag=entry.key,
                    dependency=name,
                    hint="declare %r globally or in command path %r" % (name, entry.path),
                    docs=getdoc(FaultCode.MISSING_DEPENDENCY),
                ))
                continue

            present = target.key in options
            if active and not present:
                if allowed:
                    outcome.add(DependencyValueWarning(
                        "flag %r depends on %r with value %s, which was not specified" % (
                            entry.key, target.key, _quoted(allowed)
                        ),
                        title="dependency unmet",
                        code=FaultCode.DEPENDENCY_VALUE,
                        flag=entry.key,
                        dependency=target.key,
                        allowed=allowed,
                        hint="also pass %r with %s" % (target.key, _quoted(allowed)),
                        docs=getdoc(FaultCode.DEPENDENCY_VALUE),
                    ))
                else:
                    outcome.add(DependencyWarning(
                        "flag %r depends on %r, which was not specified" % (entry.key, target.key),
                        title="dependency unmet",
                        code=FaultCode.DEPENDENCY_UNMET,
                        flag=entry.key,
                        dependency=target.key,
                        hint="also pass %r" % target.key,
                        docs=getdoc(FaultCode.DEPENDENCY_UNMET),
                    ))
            elif active and allowed:
                value = options[target.key]
                if value.casefold() not in {candidate.casefold() for candidate in allowed}:
                    outcome.add(DependencyValueWarning(
                        "flag %r depends on %r with value %s, got %r" % (
                            entry.key, target.key, _quoted(allowed), value
                        ),
                        title="dependency value mismatch",
                        code=FaultCode.DEPENDENCY_VALUE,
                        flag=entry.key,
                        dependency=target.key,
                        allowed=allowed,
                        input=value,
                        hint="give %r one of %s" % (target.key, _quoted(allowed)),
                        docs=getdoc(FaultCode.DEPENDENCY_VALUE),
                    ))

            self._walk(target, path, depth + 1, active and present, options, outcome)
        path.pop()


__all__ = (
    "DependencyValidator",
)

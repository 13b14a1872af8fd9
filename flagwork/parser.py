r"""
Flagwork parser: declarations in, validated values, warnings and errors out.

What this module provides
- Parser: the owner of one vocabulary (flags, commands, positional placement)
  and of the results of the parses run against it.
  • setup: add_flag, bind_flag, add_command and the declaration helpers
    (patterns, filters, dependencies, descriptions).
  • parsing: parse, parse_string, parse_with_defaults, parse_string_with_defaults.
  • results: typed accessors, seen commands, positional records, errors, warnings.
  • callbacks: manual, eager or deferred execution of command callbacks.
  • reset: clear(...) and clear_all() keep declarations and drop results.

Scan (one pass over a fresh TokenCursor)
- a token carrying one of the prefixes (longest first) is a flag candidate:
  • the name resolves through the registry for the current command path;
  • otherwise "name=value" assigns inline, and "name.i" sets element i of a
    chained flag declared with a capacity;
  • otherwise, in POSIX mode, a single-dash token is bundled into "-x" tokens
    spliced into the stream, and the scan resumes on the first of them;
  • otherwise the token is an unknown flag ("/" tokens fall through as plain
    tokens instead, so absolute paths stay usable as values and positionals).
- a "-" token that reads as a negative number is never a flag.
- any other token is offered to the command walker; what is neither a flag,
  a flag value nor a command is left for positional placement.

Post-pass (in order)
1. an open command still waiting for its subcommand is reported.
2. positional placement (flag form exempts a positional).
3. external default map, then environment, for flags the command line did
   not supply; then declared defaults.
4. required, required-if and dependency validation.
5. secure reads from the injected terminal, only when no error was found.
6. deferred callbacks, only when no error was found.

Results are never reset implicitly: reusing a parser for another argv requires
clear_all() first, which restores the state of a freshly declared parser.

Quick example
    >>> from flagwork import Parser, single, standalone, Command
    >>> parser = Parser()
    >>> parser.add_flag("level", single(accepts=[("^(debug|info)$", "debug or info")], default="info"))
    ('level',)
    >>> parser.add_flag("verbose", standalone("v"))
    ('verbose',)
    >>> parser.parse(["-v", "--level", "debug"])
    True
    >>> parser.get("level"), parser.get_bool("verbose")
    ('debug', True)
"""
import re
import shlex
from collections import deque
from collections.abc import Mapping

from .arguments import *
from .commands import *
from .cursor import *
from .dependencies import *
from .environment import *
from .faults import *
from .positionals import *
from .posix import *
from .registry import *
from .terminal import *
from .utils import *
from .values import *

_EXECUTIONS = ("manual", "eager", "deferred")
_NEGATIVE = re.compile(r"-(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")


class ParseState:
    """scan state of one parse call; discarded when the call returns."""
    __slots__ = ("cursor", "claimed", "walker", "outcome", "secure")

    def __init__(self, tokens, roots, outcome, /):
        self.cursor = TokenCursor(tokens)
        self.claimed = set()
        self.walker = Walker(roots)
        self.outcome = outcome
        self.secure = {}


class Parser:
    """
    Command-line parser.

    Options (keyword-only, validated on construction)
    - posix: bundle packed single-dash tokens ("-vxf file"); short aliases must
      then be one character long.
    - prefixes: flag prefixes, default ("-", "--", "/").
    - delimiters: chained-list separators, or a callable(character) -> bool.
    - max_dependency_depth / max_command_depth: graph and tree bounds.
    - env_converter: environment-name strategy (None disables the environment);
      environ: the mapping read instead of os.environ.
    - terminal: secure reader (ConsoleTerminal unless given).
    - execution: "manual", "eager" or "deferred"; fail_fast: turn a failed eager
      or deferred callback into a CallbackError on the parse.
    - shell, fancy, colorful, prog: rendering options used by report().
    """

    def __init__(
            self,
            *,
            posix=False,
            prefixes=("-", "--", "/"),
            delimiters=(",", "|", " "),
            max_dependency_depth=10,
            max_command_depth=100,
            env_converter=to_lower_camel,
            environ=Unset,
            terminal=Unset,
            execution="manual",
            fail_fast=False,
            shell=False,
            fancy=False,
            colorful=True,
            prog=Unset,
    ):
        for name, value in (
                ("posix", posix),
                ("fail_fast", fail_fast),
                ("shell", shell),
                ("fancy", fancy),
                ("colorful", colorful),
        ):
            if not isinstance(value, bool):
                raise TypeError(f"parser '{name}' must be a boolean")

        if isinstance(prefixes, str):
            raise TypeError("parser 'prefixes' must be an iterable of strings")
        prefixes = tuple(prefixes)
        if not all(isinstance(prefix, str) for prefix in prefixes):
            raise TypeError("parser 'prefixes' must be an iterable of strings")
        if not prefixes or not all(prefix and not re.search(r"[\w\s]", prefix) for prefix in prefixes):
            raise ValueError("parser 'prefixes' must be non-empty strings of punctuation")

        if isinstance(max_command_depth, bool) or not isinstance(max_command_depth, int):
            raise TypeError("parser 'max_command_depth' must be an integer")
        if max_command_depth < 1:
            raise ValueError("parser 'max_command_depth' must be positive")

        if execution not in _EXECUTIONS:
            raise ValueError(f"parser 'execution' must be one of {', '.join(map(repr, _EXECUTIONS))}")

        if terminal is Unset:
            terminal = ConsoleTerminal()
        elif not isinstance(terminal, Terminal):
            raise TypeError("parser 'terminal' must provide a read_secret(prompt) method")

        if not isinstance(prog, str | Unset):
            raise TypeError("parser 'prog' must be a string")

        self._posix = posix
        self._prefixes = tuple(sorted(dict.fromkeys(prefixes), key=len, reverse=True))
        self._max_command_depth = max_command_depth
        self._execution = execution
        self._fail_fast = fail_fast
        self._rendering = {"shell": shell, "fancy": fancy, "colorful": colorful, "prog": coalesce(prog)}

        self._registry = Registry()
        self._roots = {}
        self._commands = {}
        self._bindings = {}
        self._pipeline = Pipeline(delimiters)
        self._dependencies = DependencyValidator(self._registry, max_dependency_depth)
        self._merger = EnvironmentMerger(env_converter, environ)
        self._terminal = terminal

        self._outcome = Outcome()
        self._options = {}
        self._values = {}
        self._sources = {}
        self._elements = {}
        self._positionals = []
        self._seen = []
        self._queue = deque()
        self._results = {}

    def __repr__(self):
        return f"parser(flags={len(self._registry)!r}, commands={list(self._roots)!r})"

    @property
    def posix(self):
        return self._posix

    @property
    def prefixes(self):
        return self._prefixes

    @property
    def execution(self):
        return self._execution

    @property
    def registry(self):
        return self._registry

    # --- declarations ---

    def add_flag(self, name, argument, /, *paths):
        """
        declare a flag globally (no paths) or under each given command path.

        returns the registry keys created ("name" or "name@path").
        """
        if not isinstance(argument, Argument):
            raise TypeError("add_flag() argument must be an Argument")
        if self._posix and argument.short is not None and len(argument.short) != 1:
            raise ValueError(f"short flag {argument.short!r} of {name!r} must be a single character in posix mode")
        return tuple(self._registry.add(name, argument, path).key for path in paths or ("",))

    def bind_flag(self, name, argument, /, *paths, target, attribute=Unset):
        """declare a flag and assign its converted value onto target.attribute (snake_case name by default)."""
        if not isinstance(attribute, str | Unset):
            raise TypeError("bind_flag() 'attribute' must be a string")
        keys = self.add_flag(name, argument, *paths)
        for key in keys:
            self._bindings[key] = (target, coalesce(attribute, to_snake(name)))
        return keys

    def add_command(self, command, /):
        """
        register a top-level command and its subtree.

        the tree is frozen on registration and every path is recorded once.
        """
        if not isinstance(command, Command):
            raise TypeError("add_command() argument must be a Command")
        if command.parent is not None:
            raise ValueError(f"command {command.path!r} is not a top-level command")
        if command.name in self._roots:
            raise ValueError(f"command {command.name!r} already exists")
        if command.depth > self._max_command_depth:
            raise ValueError(f"command {command.name!r} exceeds the maximum depth of {self._max_command_depth}")
        command.freeze()
        self._roots[command.name] = command
        for node in command.walk():
            self._commands[node.path] = node
        return command

    def remove(self, flag, /, path=""):
        """drop a declaration and whatever the parses stored for it."""
        if (entry := self._find(flag, path)) is None:
            return False
        self._registry.remove(entry.key)
        for store in (self._options, self._values, self._sources, self._elements, self._bindings):
            store.pop(entry.key, None)
        return True

    def describe_flag(self, flag, descr, /, path=""):
        self._update(flag, path, descr=descr)

    def accept_pattern(self, flag, pattern, descr=Unset, /, path=""):
        entry = self._entry(flag, path)
        self._update(flag, path, accepts=(*entry.argument.accepts, Pattern(pattern, descr)))

    def accept_patterns(self, flag, patterns, /, path=""):
        entry = self._entry(flag, path)
        self._update(flag, path, accepts=(*entry.argument.accepts, *patterns))

    def add_pre_filter(self, flag, filter, /, path=""):
        self._update(flag, path, pre=filter)

    def add_post_filter(self, flag, filter, /, path=""):
        self._update(flag, path, post=filter)

    def has_pre_filter(self, flag, /, path=""):
        return self._entry(flag, path).argument.pre is not None

    def has_post_filter(self, flag, /, path=""):
        return self._entry(flag, path).argument.post is not None

    def depends_on_flag(self, flag, dependency, /, path=""):
        """flag requires dependency to be present (any value)."""
        depends = self._entry(flag, path).argument.depends
        self._update(flag, path, depends=depends | {dependency: ()})

    def depends_on_flag_value(self, flag, dependency, /, *values, path=""):
        """flag requires dependency to carry one of values (compared case-insensitively)."""
        if not values:
            raise ValueError("depends_on_flag_value() requires at least one value")
        depends = self._entry(flag, path).argument.depends
        self._update(flag, path, depends=depends | {dependency: (*depends.get(dependency, ()), *values)})

    def remove_dependency(self, flag, dependency, /, path=""):
        depends = self._entry(flag, path).argument.depends
        if dependency not in depends:
            return False
        self._update(flag, path, depends={name: values for name, values in depends.items() if name != dependency})
        return True

    def get_consistency_warnings(self):
        """declaration inconsistencies worth telling the developer about (never fatal)."""
        return [
            ConsistencyWarning(
                "standalone flag %r has a default value, which is ignored" % entry.key,
                title="inconsistent declaration",
                code=FaultCode.INCONSISTENT_DECLARATION,
                flag=entry.key,
                hint="drop the default; an absent standalone flag is false",
                docs=getdoc(FaultCode.INCONSISTENT_DECLARATION),
            )
            for entry in self._registry
            if entry.argument.kind is Kind.STANDALONE and entry.argument.default is not None
        ]

    # --- parsing ---

    def parse(self, args, /):
        """parse an argument list (without the program name); True when no error was recorded."""
        return self._parse(args, {})

    def parse_string(self, line, /):
        """parse a command line split the way a POSIX shell would."""
        if (args := self._split_line(line)) is None:
            return False
        return self._parse(args, {})

    def parse_with_defaults(self, defaults, args, /):
        """
        parse with an external default map (e.g. loaded from a configuration file).

        keys are flag names, short aliases or "name@path" keys; the map ranks
        below the command line and above the environment.
        """
        if not isinstance(defaults, Mapping):
            raise TypeError("parse_with_defaults() defaults must be a mapping")
        return self._parse(args, defaults)

    def parse_string_with_defaults(self, defaults, line, /):
        if not isinstance(defaults, Mapping):
            raise TypeError("parse_string_with_defaults() defaults must be a mapping")
        if (args := self._split_line(line)) is None:
            return False
        return self._parse(args, defaults)

    def _split_line(self, line, /):
        if not isinstance(line, str):
            raise TypeError("parse_string() argument must be a string")
        try:
            return shlex.split(line)
        except ValueError as error:
            self._outcome.add(MalformedInputError(
                "cannot split %r into arguments: %s" % (line, error),
                title="malformed input",
                code=FaultCode.MALFORMED_INPUT,
                input=line,
                hint="close every quote and escape",
                docs=getdoc(FaultCode.MALFORMED_INPUT),
            ))
            return None

    def _parse(self, args, defaults, /):
        if isinstance(args, str):
            raise TypeError("parse() arguments must be an iterable of strings, not a string")
        state = ParseState(args, self._roots, self._outcome)
        outcome = state.outcome
        self._scan(state)

        scopes = {"", *self._seen}
        supplied = {*self._options, *state.secure}
        merged = self._merger.merge(self._registry, supplied, defaults, scopes)

        declarations = [entry for entry in self._registry if entry.argument.positional and entry.path in scopes]
        self._positionals, matches = reconcile(
            state.cursor.tokens, state.claimed, declarations, supplied, outcome, merged.keys()
        )
        for entry, raw in matches:
            merged.pop(entry.key, None)
            self._assign(entry, raw, "positional", outcome)

        for entry in self._registry:
            if (found := merged.get(entry.key)) is not None:
                self._assign(entry, *found, outcome)
            elif entry.path in scopes and entry.key not in self._values and entry.key not in state.secure:
                self._fallback(entry, outcome)

        self._validate(state, scopes)

        if not outcome.failed:
            self._read_secrets(state)
        if self._execution == "deferred" and not outcome.failed:
            self._drain(outcome)
        return not outcome.failed

    def _scan(self, state, /):
        cursor, outcome = state.cursor, state.outcome
        while cursor.advance():
            token = cursor.current()
            if (split := self._split(token)) is not None and self._flag(state, *split):
                continue
            if (command := state.walker.step(token, outcome)) is not None:
                state.claimed.add(cursor.position)
                self._enqueue(command, outcome)
        state.walker.finish(outcome)
        if self._execution == "eager":
            self._drain(outcome)

    def _split(self, token, /):
        """(prefix, name) when the token has flag syntax, else None."""
        if _NEGATIVE.fullmatch(token):
            return None
        for prefix in self._prefixes:
            if token.startswith(prefix) and len(token) > len(prefix):
                name = token[len(prefix):]
                # "/usr/bin": a slash after the slash prefix means a path
                if prefix == "/" and "/" in name.partition("=")[0]:
                    return None
                return prefix, name
        return None

    def _lookup(self, name, path, /):
        """(entry, inline value, element index) for a stripped flag name, or None."""
        if (entry := self._registry.resolve(name, path)) is not None:
            return entry, Unset, Unset
        head, separator, inline = name.partition("=")
        inline = inline if separator else Unset
        if separator and (entry := self._registry.resolve(head, path)) is not None:
            return entry, inline, Unset
        base, dot, index = head.rpartition(".")
        if dot and index.isdigit() and (entry := self._registry.resolve(base, path)) is not None:
            if entry.argument.kind is Kind.CHAINED and entry.argument.capacity:
                return entry, inline, int(index)
        return None

    def _is_flag(self, token, path, /):
        """whether a token would be consumed as a known flag in the given command path."""
        if (split := self._split(token)) is None:
            return False
        prefix, name = split
        if self._lookup(name, path) is not None:
            return True
        return self._posix and prefix == "-" and self._registry.resolve(name[0], path) is not None

    def _flag(self, state, prefix, name, /):
        """handle a flag-syntax token; False hands it back to command and positional matching."""
        cursor, path = state.cursor, state.walker.path

        if (found := self._lookup(name, path)) is not None:
            state.claimed.add(cursor.position)
            entry, inline, index = found
            if index is Unset:
                self._process(state, entry, inline)
            else:
                self._element(state, entry, index, inline)
            return True

        if self._posix and prefix == "-":
            tokens = bundle(name, lambda character: self._registry.resolve(character, path) is not None)
            if tokens is not None:
                cursor.splice_at(cursor.position, tokens)
                return self._flag(state, prefix, tokens[0][1:])

        if prefix == "/":
            return False

        state.claimed.add(cursor.position)
        state.outcome.add(UnknownFlagError(
            ("unknown argument %r in command path %r" % (name, path)) if path else ("unknown argument %r" % name),
            title="unknown flag",
            code=FaultCode.UNKNOWN_FLAG,
            input=cursor.current(),
            path=path,
            index=cursor.position,
            hint="check the spelling, or place the flag after the command that declares it",
            docs=getdoc(FaultCode.UNKNOWN_FLAG),
        ))
        return True

    def _process(self, state, entry, inline, /):
        argument = entry.argument
        if argument.secure:
            # the value is read from the terminal once the parse succeeded
            state.secure.setdefault(entry.key, entry)
            return
        if argument.kind is Kind.STANDALONE:
            raw = inline if inline is not Unset else self._switch(state)
        elif (raw := self._take(state, entry, inline)) is Unset:
            return
        self._assign(entry, raw, "command line", state.outcome)

    def _switch(self, state, /):
        """value of a standalone flag: a following boolean literal, else "true"."""
        cursor = state.cursor
        following = cursor.peek()
        if (
            following is not None and
            is_bool(following) and
            not self._is_flag(following, state.walker.path) and
            not state.walker.accepts(following)
        ):
            cursor.skip_current()
            state.claimed.add(cursor.position)
            return following
        return "true"

    def _take(self, state, entry, inline, /):
        """raw value of a value-taking flag, or Unset when none is available."""
        if inline is not Unset:
            return inline
        cursor = state.cursor
        following = cursor.peek()
        if following is not None and not self._is_flag(following, state.walker.path):
            cursor.skip_current()
            state.claimed.add(cursor.position)
            return following
        if entry.argument.default is not None:
            return entry.argument.default
        state.outcome.add(FlagValueExpectedError(
            "flag %r expects a value" % entry.key,
            title="value expected",
            code=FaultCode.FLAG_VALUE_EXPECTED,
            flag=entry.key,
            index=cursor.position,
            hint="pass a value after %r or use %r=<value>" % (cursor.current(), cursor.current()),
            docs=getdoc(FaultCode.FLAG_VALUE_EXPECTED),
        ))
        return Unset

    def _element(self, state, entry, index, inline, /):
        if (raw := self._take(state, entry, inline)) is Unset:
            return
        capacity = entry.argument.capacity
        if index >= capacity:
            state.outcome.add(InvalidValueError(
                "index %d of flag %r is out of range, capacity is %d" % (index, entry.key, capacity),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                flag=entry.key,
                element=index,
                index=state.cursor.position,
                hint="use an index between 0 and %d" % (capacity - 1),
                docs=getdoc(FaultCode.INVALID_VALUE),
            ))
            return

        # one element goes through the pipeline as a single value
        element = entry._replace(argument=entry.argument.__replace__(kind=Kind.SINGLE, capacity=0))
        if (result := self._pipeline.run(element, raw, state.outcome)) is None:
            return
        raws, values = self._elements.setdefault(entry.key, ([], []))
        if index >= len(raws):
            padding = [None] * (index + 1 - len(raws))
            raws.extend(padding)
            values.extend(padding)
        raws[index], values[index] = result
        self._store(entry, self._pipeline.join(raws), list(values), "command line")

    def _assign(self, entry, raw, source, outcome, /):
        if (result := self._pipeline.run(entry, raw, outcome)) is None:
            return False
        self._elements.pop(entry.key, None)
        self._store(entry, *result, source)
        return True

    def _fallback(self, entry, outcome, /):
        """declared default for a flag nothing else supplied (standalone defaults are ignored)."""
        argument = entry.argument
        if argument.default is None or argument.kind is Kind.STANDALONE:
            return
        if (value := self._pipeline.convert(entry, argument.default, outcome)) is not Unset:
            self._store(entry, None, value, "default")

    def _store(self, entry, raw, value, source, /):
        if raw is not None:
            self._options[entry.key] = raw
        self._values[entry.key] = value
        self._sources[entry.key] = source
        if (binding := self._bindings.get(entry.key)) is not None:
            target, attribute = binding
            setattr(target, attribute, value)

    def _validate(self, state, scopes, /):
        outcome = state.outcome
        roots = []
        for entry in self._registry:
            if entry.path not in scopes:
                continue
            argument = entry.argument
            present = entry.key in self._options or entry.key in state.secure
            if not present and argument.required_if is not None:
                self._required_if(entry, outcome)
            elif not present and argument.required and not argument.positional and entry.key not in self._values:
                outcome.add(RequiredFlagError(
                    ("flag %r is required in command path %r" % (entry.name, entry.path))
                    if entry.path else ("flag %r is required" % entry.name),
                    title="required flag",
                    code=FaultCode.REQUIRED_FLAG,
                    flag=entry.key,
                    path=entry.path,
                    hint="pass %r" % entry.name,
                    docs=getdoc(FaultCode.REQUIRED_FLAG),
                ))
            if present or argument.required:
                roots.append(entry)
        self._dependencies.validate(roots, self._options, outcome)

    def _required_if(self, entry, outcome, /):
        try:
            verdict = entry.argument.required_if(self, entry.key)
        except Exception as exception:
            outcome.add(RequiredIfError(
                "required-if check of flag %r failed: %s" % (entry.key, exception),
                title="required-if failure",
                code=FaultCode.REQUIRED_IF,
                flag=entry.key,
                hint="check the required-if predicate of %r" % entry.key,
                docs=getdoc(FaultCode.REQUIRED_IF),
                exception=exception,
            ))
            return
        if verdict:
            outcome.add(RequiredIfError(
                verdict if isinstance(verdict, str) else "flag %r is required" % entry.key,
                title="required flag",
                code=FaultCode.REQUIRED_IF,
                flag=entry.key,
                hint="pass %r" % entry.name,
                docs=getdoc(FaultCode.REQUIRED_IF),
            ))

    def _read_secrets(self, state, /):
        for entry in state.secure.values():
            try:
                raw = self._terminal.read_secret(entry.argument.prompt)
                if not isinstance(raw, str):
                    raise TypeError(f"terminal returned {type(raw).__name__}, expected str")
            except Exception as exception:
                state.outcome.add(SecureInputError(
                    "cannot read secure flag %r: %s" % (entry.key, exception),
                    title="secure input failure",
                    code=FaultCode.SECURE_INPUT,
                    flag=entry.key,
                    hint="run the program from an interactive terminal",
                    docs=getdoc(FaultCode.SECURE_INPUT),
                    exception=exception,
                ))
                continue
            self._assign(entry, raw, "terminal", state.outcome)

    # --- callbacks ---

    def _enqueue(self, command, outcome, /):
        self._seen.append(command.path)
        if self._execution == "eager":
            self._drain(outcome)
        if command.callback is not None:
            self._queue.append(command)

    def _drain(self, outcome=None, /):
        failures = 0
        while self._queue:
            if self._run(self._queue.popleft(), outcome) is not None:
                failures += 1
        return failures

    def _run(self, command, outcome, /):
        try:
            command.callback(self, command)
        except Exception as exception:
            self._results[command.path] = exception
            if self._fail_fast and outcome is not None:
                outcome.add(CallbackError(
                    "callback of command %r failed: %s" % (command.path, exception),
                    title="callback failure",
                    code=FaultCode.CALLBACK_FAILED,
                    path=command.path,
                    hint="check the callback bound to %r" % command.path,
                    docs=getdoc(FaultCode.CALLBACK_FAILED),
                    exception=exception,
                ))
            return exception
        self._results[command.path] = None
        return None

    def execute_commands(self):
        """run every queued callback in discovery order; returns the number of failures."""
        return self._drain()

    def execute_command(self):
        """run the next queued callback; returns its exception, or None on success."""
        if not self._queue:
            raise UnknownCommandError(
                "no command callback is waiting to run",
                title="unknown command",
                code=FaultCode.UNKNOWN_COMMAND,
                hint="parse a command that has a callback first",
                docs=getdoc(FaultCode.UNKNOWN_COMMAND),
            )
        return self._run(self._queue.popleft(), None)

    def get_command_execution_error(self, path, /):
        """exception raised by the callback of a command path (None when it succeeded or did not run)."""
        if path not in self._commands:
            raise KeyError(f"command {path!r} does not exist")
        return self._results.get(path)

    @property
    def command_execution_errors(self):
        return {path: error for path, error in self._results.items() if error is not None}

    # --- results ---

    def _find(self, flag, path, /):
        if not isinstance(flag, str):
            raise TypeError("flag name must be a string")
        if (split := self._split(flag)) is not None:
            flag = split[1]
        name, scope = split_key(flag)
        return self._registry.resolve(name, scope or path)

    def _entry(self, flag, path, /):
        if (entry := self._find(flag, path)) is None:
            raise KeyError(f"flag {flag!r} does not exist")
        return entry

    def _update(self, flag, path, /, **changes):
        entry = self._entry(flag, path)
        self._registry.replace(entry.key, entry.argument.__replace__(**changes))

    def _raw(self, entry, /):
        if (raw := self._options.get(entry.key)) is not None:
            return raw
        if entry.argument.kind is Kind.STANDALONE:
            return None
        return entry.argument.default

    def get(self, flag, /, path=""):
        """raw value supplied for a flag (command line, positional, map, environment or terminal), else None."""
        if (entry := self._find(flag, path)) is None:
            return None
        return self._options.get(entry.key)

    def get_or_default(self, flag, default=None, /, path=""):
        """raw value, else the declared default, else default."""
        if (entry := self._find(flag, path)) is None or (raw := self._raw(entry)) is None:
            return default
        return raw

    def get_value(self, flag, /, path=""):
        """converted value (declared defaults included), or None."""
        if (entry := self._find(flag, path)) is None:
            return None
        return self._values.get(entry.key)

    def get_source(self, flag, /, path=""):
        """where the value came from: "command line", "positional", "defaults", "environment", "terminal", "default" or "set"."""
        if (entry := self._find(flag, path)) is None:
            return None
        return self._sources.get(entry.key)

    def get_bool(self, flag, /, path=""):
        entry = self._entry(flag, path)
        if (raw := self._raw(entry)) is None:
            if entry.argument.kind is Kind.STANDALONE:
                return False
            raise KeyError(f"flag {flag!r} has no value")
        return parse_bool(raw)

    def get_int(self, flag, bits=64, /, path=""):
        if (raw := self._raw(entry := self._entry(flag, path))) is None:
            raise KeyError(f"flag {entry.key!r} has no value")
        return integer(bits)(raw)

    def get_float(self, flag, bits=64, /, path=""):
        if (raw := self._raw(entry := self._entry(flag, path))) is None:
            raise KeyError(f"flag {entry.key!r} has no value")
        return floating(bits)(raw)

    def get_list(self, flag, /, path=""):
        """raw elements of a chained flag."""
        entry = self._entry(flag, path)
        if entry.argument.kind is not Kind.CHAINED:
            raise TypeError(f"flag {entry.key!r} is not a chained flag")
        if (raw := self._raw(entry)) is None:
            return []
        return self._pipeline.split(raw)

    def has_flag(self, flag, /, path=""):
        return (entry := self._find(flag, path)) is not None and entry.key in self._options

    def has_command(self, path, /):
        return path in self._seen

    def get_short_flag(self, flag, /, path=""):
        return self._entry(flag, path).argument.short

    def get_description(self, flag, /, path=""):
        return self._entry(flag, path).argument.descr

    def flag_path(self, flag, /, path=""):
        """command path owning the flag ("" when global)."""
        return self._entry(flag, path).path

    def set_flag(self, flag, value, /, path=""):
        """assign a value after parsing, through the same pipeline; raises the first fault."""
        if not isinstance(value, str):
            raise TypeError("set_flag() value must be a string")
        outcome = Outcome()
        if not self._assign(self._entry(flag, path), value, "set", outcome):
            raise outcome.errors[0]

    @property
    def commands(self):
        """command paths recognized so far, in discovery order."""
        return tuple(self._seen)

    @property
    def positionals(self):
        return list(self._positionals)

    @property
    def options(self):
        return dict(self._options)

    @property
    def errors(self):
        return list(self._outcome.errors)

    @property
    def warnings(self):
        return list(self._outcome.warnings)

    # --- reset and reporting ---

    def clear(self, *, errors=True, options=True, positionals=True, commands=True, callbacks=True):
        """drop selected parse results; declarations are kept."""
        if errors:
            self._outcome.clear()
        if options:
            for store in (self._options, self._values, self._sources, self._elements):
                store.clear()
        if positionals:
            self._positionals.clear()
        if commands:
            self._seen.clear()
        if callbacks:
            self._queue.clear()
            self._results.clear()

    def clear_all(self):
        self.clear()

    def report(self):
        """
        surface the accumulated faults.

        warnings are triggered one by one; errors are grouped in a ParseExit
        triggered once (raised, or printed before exiting in shell mode).
        """
        for warning in self._outcome.warnings:
            trigger(warning, **self._rendering)
        if self._outcome.errors:
            trigger(ParseExit(self._outcome.errors), **self._rendering)


__all__ = (
    "Parser",
    "ParseState",
)

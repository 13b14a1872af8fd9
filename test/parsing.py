"""
Parser behavioral tests (end-to-end parses against declared vocabularies).

Scope
- Validate flag forms: long, short, inline, indexed, standalone literals, negative numbers, paths.
- Validate commands, command-scoped flags, POSIX bundling and positional placement.
- Validate requirements, dependencies, environment and default-map precedence.
- Validate secure input, file flags, callbacks (manual, eager, deferred, fail-fast),
  accessors, declaration helpers, reset and reporting.

Conventions
- Test method names follow CamelCase per project convention.
- Every parser gets an injected environment and terminal; the host is never read.
- Parses are never expected to raise: faults are inspected through errors/warnings.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from types import SimpleNamespace
from unittest import TestCase

from flagwork import (
    CallbackError,
    Command,
    ConsistencyWarning,
    ConversionError,
    DependencyValueWarning,
    FileFlagError,
    FlagValueExpectedError,
    InvalidValueError,
    MalformedInputError,
    MisplacedPositionalError,
    ParseExit,
    Parser,
    RequiredFlagError,
    RequiredIfError,
    SecureInputError,
    SubcommandExpectedError,
    UnknownCommandError,
    UnknownFlagError,
    at_end,
    at_start,
    chained,
    file,
    single,
    standalone,
)


class FakeTerminal:
    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def read_secret(self, prompt, /):
        self.prompts.append(prompt)
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


def _parser(**options):
    options.setdefault("environ", {})
    options.setdefault("terminal", FakeTerminal())
    return Parser(**options)


class TestFlags(TestCase):
    """flag forms and value handling."""

    def setUp(self):
        self.parser = _parser()
        self.parser.add_flag("level", single("l", accepts=[("^(debug|info)$", "debug or info"), ("^trace$", "trace")]))
        self.parser.add_flag("verbose", standalone("v"))
        self.parser.add_flag("count", single(type=int))
        self.parser.add_flag("tags", chained())

    def testLongAndShortForms(self):
        self.assertTrue(self.parser.parse(["--level", "debug", "-v"]))
        self.assertEqual(self.parser.get("level"), "debug")
        self.assertTrue(self.parser.get_bool("verbose"))
        self.assertTrue(self.parser.has_flag("v"))
        self.assertEqual(self.parser.get_source("level"), "command line")

    def testSlashPrefix(self):
        self.assertTrue(self.parser.parse(["/level", "info"]))
        self.assertEqual(self.parser.get("level"), "info")

    def testInlineValue(self):
        self.assertTrue(self.parser.parse(["--level=trace", "-l=info"]))
        self.assertEqual(self.parser.get("level"), "info")

    def testRejectedValueListsDescriptions(self):
        self.assertFalse(self.parser.parse(["--level", "warn"]))
        error = self.parser.errors[0]
        self.assertIsInstance(error, InvalidValueError)
        self.assertIn("debug or info", error.message)
        self.assertIn("trace", error.message)

    def testStandaloneConsumesBooleanLiteral(self):
        self.assertTrue(self.parser.parse(["--verbose", "false"]))
        self.assertFalse(self.parser.get_bool("verbose"))
        self.assertEqual(self.parser.positionals, [])

    def testStandaloneLeavesOtherTokens(self):
        self.assertTrue(self.parser.parse(["--verbose", "file.txt"]))
        self.assertTrue(self.parser.get_value("verbose"))
        self.assertEqual([record.value for record in self.parser.positionals], ["file.txt"])

    def testAbsentStandaloneIsFalse(self):
        self.assertTrue(self.parser.parse([]))
        self.assertFalse(self.parser.get_bool("verbose"))

    def testNegativeNumberIsAValue(self):
        self.assertTrue(self.parser.parse(["--count", "-5"]))
        self.assertEqual(self.parser.get_value("count"), -5)
        self.assertEqual(self.parser.get_int("count", 8), -5)

    def testConversionFailure(self):
        self.assertFalse(self.parser.parse(["--count", "many"]))
        self.assertIsInstance(self.parser.errors[0], ConversionError)

    def testMissingValue(self):
        self.assertFalse(self.parser.parse(["--level"]))
        self.assertIsInstance(self.parser.errors[0], FlagValueExpectedError)

    def testFlagIsNotTakenAsValue(self):
        self.assertFalse(self.parser.parse(["--count", "-v"]))
        self.assertIsInstance(self.parser.errors[0], FlagValueExpectedError)
        self.assertTrue(self.parser.get_bool("verbose"))

    def testMissingValueUsesDefault(self):
        self.parser.add_flag("mode", single(default="fast"))
        self.assertTrue(self.parser.parse(["--mode", "--verbose"]))
        self.assertEqual(self.parser.get("mode"), "fast")

    def testUnknownFlagDoesNotStopScan(self):
        self.assertFalse(self.parser.parse(["--nope", "--level", "info"]))
        self.assertEqual(self.parser.get("level"), "info")
        self.assertIsInstance(self.parser.errors[0], UnknownFlagError)
        self.assertEqual(self.parser.errors[0].message, "unknown argument 'nope'")

    def testRepeatedUnknownFlagReportedPerToken(self):
        self.assertFalse(self.parser.parse(["--nope", "x", "--nope"]))
        self.assertEqual([error.options["index"] for error in self.parser.errors], [0, 2])
        self.assertTrue(all(isinstance(error, UnknownFlagError) for error in self.parser.errors))

    def testChainedList(self):
        self.assertTrue(self.parser.parse(["--tags", "a,b|c d"]))
        self.assertEqual(self.parser.get_list("tags"), ["a", "b", "c", "d"])
        self.assertEqual(self.parser.get_value("tags"), ["a", "b", "c", "d"])
        with self.assertRaises(TypeError):
            self.parser.get_list("level")

    def testIndexedChainedFlag(self):
        self.parser.add_flag("ports", chained(type=int, capacity=3))
        self.assertTrue(self.parser.parse(["--ports.2", "443", "--ports.0=80"]))
        self.assertEqual(self.parser.get_value("ports"), [80, None, 443])
        self.assertEqual(self.parser.get_list("ports"), ["80", "443"])

    def testIndexOutOfCapacity(self):
        self.parser.add_flag("ports", chained(type=int, capacity=3))
        self.assertFalse(self.parser.parse(["--ports.3", "1"]))
        self.assertIsInstance(self.parser.errors[0], InvalidValueError)
        self.parser.clear()
        self.assertFalse(self.parser.parse(["--ports.3", "1", "--ports.3", "2"]))
        self.assertEqual(len(self.parser.errors), 2)

    def testPathsAreNotFlags(self):
        self.parser.add_flag("out", single())
        self.assertTrue(self.parser.parse(["--out", "/tmp/result", "/var/log", "/unknown"]))
        self.assertEqual(self.parser.get("out"), "/tmp/result")
        self.assertEqual([record.value for record in self.parser.positionals], ["/var/log", "/unknown"])

    def testDashedTokenWithSlashIsAFlag(self):
        self.assertFalse(self.parser.parse(["--out/dir"]))
        self.assertIsInstance(self.parser.errors[0], UnknownFlagError)
        self.assertEqual(self.parser.errors[0].message, "unknown argument 'out/dir'")
        self.assertEqual(self.parser.positionals, [])

    def testParseString(self):
        self.parser.add_flag("name", single())
        self.assertTrue(self.parser.parse_string('--name "John Doe" -v'))
        self.assertEqual(self.parser.get("name"), "John Doe")

    def testMalformedString(self):
        self.assertFalse(self.parser.parse_string('--level "debug'))
        self.assertIsInstance(self.parser.errors[0], MalformedInputError)


class TestCommands(TestCase):
    """commands, scoped flags and subcommand faults."""

    def setUp(self):
        self.parser = _parser()
        create = Command("create", "create resources")
        create.command("user", "create a user")
        create.command("group", "create a group")
        self.parser.add_command(create)
        self.parser.add_command(Command("list"))
        self.parser.add_flag("name", single(required=True), "create user")
        self.parser.add_flag("verbose", standalone("v"))

    def testScopedFlagAfterCommand(self):
        self.assertTrue(self.parser.parse(["create", "user", "--name", "alice", "-v"]))
        self.assertEqual(self.parser.commands, ("create", "create user"))
        self.assertTrue(self.parser.has_command("create user"))
        self.assertEqual(self.parser.get("name", "create user"), "alice")
        self.assertEqual(self.parser.get("name@create user"), "alice")
        self.assertEqual(self.parser.flag_path("name@create user"), "create user")

    def testSubcommandCaseInsensitive(self):
        self.assertTrue(self.parser.parse(["create", "USER", "--name", "bob"]))
        self.assertEqual(self.parser.commands, ("create", "create user"))

    def testScopedFlagUnknownElsewhere(self):
        self.assertFalse(self.parser.parse(["list", "--name", "x"]))
        self.assertEqual(self.parser.errors[0].message, "unknown argument 'name' in command path 'list'")

    def testRequiredScopedFlag(self):
        self.assertFalse(self.parser.parse(["create", "user"]))
        self.assertIsInstance(self.parser.errors[0], RequiredFlagError)

    def testRequiredScopedFlagIgnoredOutsideItsCommand(self):
        self.assertTrue(self.parser.parse(["list"]))

    def testSubcommandExpected(self):
        self.assertFalse(self.parser.parse(["create"]))
        self.assertIsInstance(self.parser.errors[0], SubcommandExpectedError)
        self.parser.clear_all()
        self.assertFalse(self.parser.parse(["create", "role"]))
        self.assertIn("'user', 'group'", self.parser.errors[0].message)

    def testTerminalCommandClosesMatching(self):
        self.assertTrue(self.parser.parse(["list", "create"]))
        self.assertEqual(self.parser.commands, ("list",))
        self.assertEqual(self.parser.positionals[0].value, "create")

    def testRegistrationGuards(self):
        with self.assertRaises(ValueError):
            self.parser.add_command(Command("list"))
        with self.assertRaises(TypeError):
            self.parser.add_command("create")
        deep = Command("a")
        node = deep
        for index in range(3):
            node = node.command(f"level{index}")
        with self.assertRaises(ValueError):
            _parser(max_command_depth=3).add_command(deep)

    def testRegisteredTreeIsFrozen(self):
        tree = Command("delete")
        self.parser.add_command(tree)
        with self.assertRaises(TypeError):
            tree.command("extra")


class TestPosix(TestCase):
    """packed short flags."""

    def setUp(self):
        self.parser = _parser(posix=True)
        self.parser.add_flag("alpha", single("a"))
        self.parser.add_flag("charlie", standalone("c"))
        self.parser.add_flag("bravo", single("b"))

    def testPackedTokenExpanded(self):
        self.assertTrue(self.parser.parse(["-a23cb1233"]))
        self.assertEqual(self.parser.get("a"), "23")
        self.assertTrue(self.parser.get_bool("c"))
        self.assertEqual(self.parser.get("b"), "1233")

    def testPackedSwitchesThenValue(self):
        self.assertTrue(self.parser.parse(["-cb", "value"]))
        self.assertTrue(self.parser.get_bool("charlie"))
        self.assertEqual(self.parser.get("bravo"), "value")

    def testUnknownPackedToken(self):
        self.assertFalse(self.parser.parse(["-xyz"]))
        self.assertIsInstance(self.parser.errors[0], UnknownFlagError)

    def testPackedPathValue(self):
        parser = _parser(posix=True)
        parser.add_flag("include", single("I"))
        self.assertTrue(parser.parse(["-I/usr/include"]))
        self.assertEqual(parser.get("include"), "/usr/include")
        self.assertEqual(parser.positionals, [])

    def testShortAliasMustBeOneCharacter(self):
        with self.assertRaises(ValueError):
            self.parser.add_flag("delta", single("dd"))

    def testPackingDisabledOutsidePosixMode(self):
        parser = _parser()
        parser.add_flag("alpha", single("a"))
        self.assertFalse(parser.parse(["-a23"]))
        self.assertIsInstance(parser.errors[0], UnknownFlagError)


class TestPositionals(TestCase):
    """placement through the parser."""

    def setUp(self):
        self.parser = _parser()
        self.parser.add_flag("source", single(position=at_start(0), required=True))
        self.parser.add_flag("dest", single(position=at_end(0)))
        self.parser.add_flag("verbose", standalone())

    def testStartAndEnd(self):
        self.assertTrue(self.parser.parse(["source.txt", "--verbose", "dest.txt"]))
        self.assertEqual(self.parser.get("source"), "source.txt")
        self.assertEqual(self.parser.get("dest"), "dest.txt")
        self.assertEqual(self.parser.get_source("source"), "positional")

    def testStartNotFirst(self):
        self.assertFalse(self.parser.parse(["--verbose", "source.txt", "dest.txt"]))
        errors = [error for error in self.parser.errors if isinstance(error, MisplacedPositionalError)]
        self.assertEqual(len(errors), 1)
        self.assertIn("'source'", errors[0].message)

    def testFlagFormOverridesPlacement(self):
        self.assertTrue(self.parser.parse(["--verbose", "--source", "a.txt", "b.txt"]))
        self.assertEqual(self.parser.get("source"), "a.txt")
        self.assertEqual(self.parser.get("dest"), "b.txt")

    def testNoFlagsAtAll(self):
        self.assertTrue(self.parser.parse(["only.txt"]))
        self.assertEqual(self.parser.get("source"), "only.txt")
        self.assertIsNone(self.parser.get("dest"))


class TestRequirementsAndDependencies(TestCase):
    """required, required-if and dependency warnings."""

    def testRequiredFlag(self):
        parser = _parser()
        parser.add_flag("token", single(required=True))
        self.assertFalse(parser.parse([]))
        self.assertEqual(parser.errors[0].message, "flag 'token' is required")

    def testRequiredSatisfiedByDeclaredDefault(self):
        parser = _parser()
        parser.add_flag("token", single(required=True, default="abc"))
        self.assertTrue(parser.parse([]))
        self.assertEqual(parser.get_value("token"), "abc")

    def testRequiredIf(self):
        parser = _parser()
        parser.add_flag("mode", single())
        parser.add_flag("port", single(required_if=lambda parser, key: parser.get("mode") == "server"))
        self.assertTrue(parser.parse(["--mode", "client"]))
        parser.clear_all()
        self.assertFalse(parser.parse(["--mode", "server"]))
        self.assertIsInstance(parser.errors[0], RequiredIfError)
        parser.clear_all()
        self.assertTrue(parser.parse(["--mode", "server", "--port", "80"]))

    def testRequiredIfMessage(self):
        parser = _parser()
        parser.add_flag("port", single(required_if=lambda parser, key: "port is needed here"))
        self.assertFalse(parser.parse([]))
        self.assertEqual(parser.errors[0].message, "port is needed here")

    def testDependencyWarning(self):
        parser = _parser()
        parser.add_flag("main", single())
        parser.add_flag("dependent", single(depends={"main": "qww1113394"}))
        self.assertTrue(parser.parse(["--dependent", "test"]))
        self.assertEqual(len(parser.warnings), 1)
        self.assertIn("depends on", parser.warnings[0].message)
        self.assertIn("main", parser.warnings[0].message)

    def testDependencyMet(self):
        parser = _parser()
        parser.add_flag("main", single())
        parser.add_flag("dependent", single())
        parser.depends_on_flag_value("dependent", "main", "qww1113394")
        self.assertTrue(parser.parse(["--main", "qww1113394", "--dependent", "test"]))
        self.assertEqual(parser.warnings, [])

    def testCycleIsAnError(self):
        parser = _parser()
        parser.add_flag("a", single())
        parser.add_flag("b", single())
        parser.depends_on_flag("a", "b")
        parser.depends_on_flag("b", "a")
        self.assertFalse(parser.parse(["--a", "1", "--b", "2"]))
        self.assertEqual(parser.errors[0].message, "circular dependency detected: a -> b -> a")

    def testRequiredAbsentWithDependencyStillFails(self):
        parser = _parser()
        parser.add_flag("main", single())
        parser.add_flag("dependent", single(required=True, depends={"main": None}))
        self.assertFalse(parser.parse([]))
        self.assertIsInstance(parser.errors[0], RequiredFlagError)
        self.assertEqual(parser.warnings, [])

    def testDependencyHelpers(self):
        parser = _parser()
        parser.add_flag("a", single())
        parser.depends_on_flag_value("a", "b", "x")
        parser.depends_on_flag_value("a", "b", "y", "x")
        self.assertEqual(parser.registry.get("a").argument.depends, {"b": ("x", "y")})
        self.assertTrue(parser.remove_dependency("a", "b"))
        self.assertFalse(parser.remove_dependency("a", "b"))


class TestPrecedence(TestCase):
    """command line > default map > environment > declared default."""

    def setUp(self):
        self.parser = _parser(environ={"VALUE": "env_value"})
        self.parser.add_flag("value", single(default="default_value"))

    def testCommandLineWins(self):
        self.assertTrue(self.parser.parse(["--value", "cli_value"]))
        self.assertEqual(self.parser.get("value"), "cli_value")

    def testEnvironmentBeatsDeclaredDefault(self):
        self.assertTrue(self.parser.parse([]))
        self.assertEqual(self.parser.get("value"), "env_value")
        self.assertEqual(self.parser.get_source("value"), "environment")

    def testDeclaredDefaultLast(self):
        parser = _parser()
        parser.add_flag("value", single(default="default_value"))
        self.assertTrue(parser.parse([]))
        self.assertIsNone(parser.get("value"))
        self.assertEqual(parser.get_or_default("value"), "default_value")
        self.assertEqual(parser.get_value("value"), "default_value")
        self.assertEqual(parser.get_source("value"), "default")

    def testDefaultMapBeatsEnvironment(self):
        self.assertTrue(self.parser.parse_with_defaults({"value": "map_value"}, []))
        self.assertEqual(self.parser.get("value"), "map_value")
        self.parser.clear_all()
        self.assertTrue(self.parser.parse_string_with_defaults({"value": "map_value"}, "--value cli_value"))
        self.assertEqual(self.parser.get("value"), "cli_value")

    def testEnvironmentDisabled(self):
        parser = _parser(environ={"VALUE": "env_value"}, env_converter=None)
        parser.add_flag("value", single())
        self.assertTrue(parser.parse([]))
        self.assertIsNone(parser.get("value"))

    def testEnvironmentValueValidated(self):
        parser = _parser(environ={"COUNT": "many"})
        parser.add_flag("count", single(type=int))
        self.assertFalse(parser.parse([]))
        self.assertIsInstance(parser.errors[0], ConversionError)


class TestSecureAndFiles(TestCase):
    """terminal reads and file flags."""

    def testSecureReadAfterParse(self):
        terminal = FakeTerminal("hunter2")
        parser = _parser(terminal=terminal)
        parser.add_flag("password", single(secure=True, prompt="secret: "))
        self.assertTrue(parser.parse(["--password", "leftover"]))
        self.assertEqual(parser.get("password"), "hunter2")
        self.assertEqual(terminal.prompts, ["secret: "])
        self.assertEqual([record.value for record in parser.positionals], ["leftover"])

    def testSecureReadFailure(self):
        parser = _parser(terminal=FakeTerminal(OSError("no tty")))
        parser.add_flag("password", single(secure=True))
        self.assertFalse(parser.parse(["--password"]))
        error = parser.errors[0]
        self.assertIsInstance(error, SecureInputError)
        self.assertIn("'password'", error.message)
        self.assertIsInstance(error.options["exception"], OSError)

    def testNoSecureReadWhenParseFailed(self):
        terminal = FakeTerminal("hunter2")
        parser = _parser(terminal=terminal)
        parser.add_flag("password", single(secure=True))
        self.assertFalse(parser.parse(["--password", "--nope"]))
        self.assertEqual(terminal.prompts, [])

    def testFileFlag(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "query.sql")
            with open(path, "w", encoding="utf-8") as stream:
                stream.write("select 1")
            parser = _parser()
            parser.add_flag("query", file())
            self.assertTrue(parser.parse(["--query", path]))
            self.assertEqual(parser.get("query"), "select 1")
            parser.clear_all()
            self.assertFalse(parser.parse(["--query", os.path.join(directory, "missing.sql")]))
            self.assertIsInstance(parser.errors[0], FileFlagError)


class TestCallbacks(TestCase):
    """callback queueing and execution modes."""

    def build(self, **options):
        calls = []

        def record(parser, command):
            calls.append((command.path, parser.get("name", command.path)))

        def fail(parser, command):
            raise RuntimeError("boom")

        parser = _parser(**options)
        create = Command("create", callback=record)
        create.command("user", callback=record)
        create.command("broken", callback=fail)
        parser.add_command(create)
        parser.add_flag("name", single())
        return parser, calls

    def testManualExecution(self):
        parser, calls = self.build()
        self.assertTrue(parser.parse(["create", "user", "--name", "x"]))
        self.assertEqual(calls, [])
        self.assertEqual(parser.execute_commands(), 0)
        self.assertEqual(calls, [("create", "x"), ("create user", "x")])
        self.assertIsNone(parser.get_command_execution_error("create user"))

    def testExecuteCommandOneByOne(self):
        parser, calls = self.build()
        parser.parse(["create", "broken"])
        self.assertIsNone(parser.execute_command())
        self.assertIsInstance(parser.execute_command(), RuntimeError)
        with self.assertRaises(UnknownCommandError):
            parser.execute_command()

    def testEagerRunsBeforeNextCommand(self):
        parser, calls = self.build(execution="eager")
        self.assertTrue(parser.parse(["--name", "x", "create", "user"]))
        self.assertEqual([path for path, _ in calls], ["create", "create user"])

    def testDeferredRunsAfterSuccess(self):
        parser, calls = self.build(execution="deferred")
        self.assertTrue(parser.parse(["create", "user"]))
        self.assertEqual(len(calls), 2)
        parser.clear_all()
        calls.clear()
        self.assertFalse(parser.parse(["create", "user", "--nope"]))
        self.assertEqual(calls, [])

    def testFailuresKeyedByPath(self):
        parser, calls = self.build(execution="deferred")
        self.assertTrue(parser.parse(["create", "broken"]))
        self.assertIsInstance(parser.get_command_execution_error("create broken"), RuntimeError)
        self.assertEqual(list(parser.command_execution_errors), ["create broken"])
        with self.assertRaises(KeyError):
            parser.get_command_execution_error("delete")

    def testFailFast(self):
        parser, calls = self.build(execution="eager", fail_fast=True)
        self.assertFalse(parser.parse(["create", "broken"]))
        self.assertIsInstance(parser.errors[0], CallbackError)

    def testInvalidExecution(self):
        with self.assertRaises(ValueError):
            _parser(execution="later")


class TestAccessorsAndHelpers(TestCase):
    """declaration helpers, accessors, binding and reset."""

    def setUp(self):
        self.parser = _parser()
        self.parser.add_flag("level", single("l", "log level", default="info"))

    def testDescriptors(self):
        self.assertEqual(self.parser.get_short_flag("level"), "l")
        self.assertEqual(self.parser.get_description("--l"), "log level")
        self.parser.describe_flag("level", "verbosity")
        self.assertEqual(self.parser.get_description("level"), "verbosity")
        self.assertEqual(self.parser.flag_path("level"), "")
        with self.assertRaises(KeyError):
            self.parser.get_short_flag("missing")

    def testPatternsAndFilters(self):
        self.parser.accept_pattern("level", "^(debug|info)$", "debug or info")
        self.parser.add_pre_filter("level", str.lower)
        self.assertTrue(self.parser.has_pre_filter("level"))
        self.assertFalse(self.parser.has_post_filter("level"))
        self.assertTrue(self.parser.parse(["--level", "DEBUG"]))
        self.assertEqual(self.parser.get("level"), "debug")
        self.parser.clear_all()
        self.assertFalse(self.parser.parse(["--level", "warn"]))

    def testSetFlag(self):
        self.parser.add_flag("count", single(type=int))
        self.parser.set_flag("count", "3")
        self.assertEqual(self.parser.get_value("count"), 3)
        with self.assertRaises(ConversionError):
            self.parser.set_flag("count", "three")

    def testTypedAccessors(self):
        self.parser.add_flag("ratio", single())
        self.assertTrue(self.parser.parse(["--ratio", "0.5"]))
        self.assertEqual(self.parser.get_float("ratio"), 0.5)
        with self.assertRaises(ValueError):
            self.parser.get_int("ratio")
        self.parser.add_flag("empty", single())
        with self.assertRaises(KeyError):
            self.parser.get_int("empty")

    def testBindFlag(self):
        namespace = SimpleNamespace()
        self.parser.bind_flag("max-depth", single(type=int, default="1"), target=namespace)
        self.parser.bind_flag("verbose", standalone(), target=namespace, attribute="loud")
        self.assertTrue(self.parser.parse(["--verbose"]))
        self.assertEqual(namespace.max_depth, 1)
        self.assertTrue(namespace.loud)

    def testRemove(self):
        self.assertTrue(self.parser.remove("level"))
        self.assertFalse(self.parser.remove("level"))
        self.assertFalse(self.parser.parse(["--level", "x"]))

    def testConsistencyWarnings(self):
        self.parser.add_flag("debug", standalone(default=True))
        warnings = self.parser.get_consistency_warnings()
        self.assertEqual(len(warnings), 1)
        self.assertIsInstance(warnings[0], ConsistencyWarning)

    def testClearAllMatchesFreshParser(self):
        def build():
            parser = _parser(environ={"LEVEL": "debug"})
            parser.add_flag("level", single(accepts=["^(debug|info)$"]))
            parser.add_flag("verbose", standalone())
            parser.add_flag("file", single(position=at_end(0)))
            parser.add_command(Command("run"))
            return parser

        args = ["run", "--verbose", "--bogus", "out.txt"]
        reused = build()
        reused.parse(["--level", "warn", "x", "y"])
        reused.clear_all()
        fresh = build()
        self.assertEqual(reused.parse(args), fresh.parse(args))
        for name in ("options", "commands", "positionals"):
            self.assertEqual(getattr(reused, name), getattr(fresh, name))
        self.assertEqual([str(error) for error in reused.errors], [str(error) for error in fresh.errors])
        self.assertEqual([str(warning) for warning in reused.warnings], [str(warning) for warning in fresh.warnings])

    def testResultsAccumulateWithoutClear(self):
        self.parser.add_flag("other", single())
        self.parser.parse(["--level", "debug"])
        self.parser.parse(["--other", "x"])
        self.assertEqual(self.parser.options, {"level": "debug", "other": "x"})

    def testSelectiveClear(self):
        self.parser.parse(["--nope"])
        self.parser.clear(errors=False)
        self.assertEqual(len(self.parser.errors), 1)
        self.assertEqual(self.parser.options, {})


class TestReporting(TestCase):
    """report() surfaces accumulated faults."""

    def testErrorsRaiseAsGroup(self):
        parser = _parser(prog="tool")
        parser.add_flag("token", single(required=True))
        parser.parse(["--nope"])
        with self.assertRaises(ParseExit) as context:
            parser.report()
        self.assertEqual(len(context.exception.exceptions), 2)

    def testWarningsAreWarned(self):
        parser = _parser()
        parser.add_flag("main", single())
        parser.add_flag("dependent", single(depends={"main": "x"}))
        parser.parse(["--dependent", "y"])
        with self.assertWarns(DependencyValueWarning):
            parser.report()

    def testCleanParseReportsNothing(self):
        parser = _parser()
        parser.parse([])
        self.assertIsNone(parser.report())


if __name__ == "__main__":
    unittest.main()

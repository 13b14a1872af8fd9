"""
Dependency validation tests (warnings, cycles, depth, missing declarations).

Scope
- Validate presence-only and value-conditioned dependencies (warnings, never errors).
- Validate cycle detection with a canonical message and no false positives.
- Validate the maximum depth and undeclared dependency faults.

Conventions
- Test method names follow CamelCase per project convention.
- Supplied flags are given as a key -> raw value mapping.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from flagwork import (
    CircularDependencyError,
    DependencyDepthError,
    DependencyValidator,
    DependencyValueWarning,
    DependencyWarning,
    MissingDependencyError,
    Outcome,
    Registry,
    single,
)


class TestDependencyValidator(TestCase):
    """Behavioral tests for DependencyValidator."""

    def setUp(self):
        self.registry = Registry()
        self.outcome = Outcome()

    def validate(self, options, max_depth=10):
        roots = [entry for entry in self.registry if entry.key in options]
        DependencyValidator(self.registry, max_depth).validate(roots, options, self.outcome)

    def testValueDependencyNotSpecified(self):
        self.registry.add("main", single())
        self.registry.add("dependent", single(depends={"main": "qww1113394"}))
        self.validate({"dependent": "test"})
        self.assertEqual(self.outcome.errors, [])
        self.assertEqual(len(self.outcome.warnings), 1)
        warning = self.outcome.warnings[0]
        self.assertIsInstance(warning, DependencyValueWarning)
        self.assertIn("depends on", warning.message)
        self.assertIn("main", warning.message)

    def testValueDependencyMet(self):
        self.registry.add("main", single())
        self.registry.add("dependent", single(depends={"main": "qww1113394"}))
        self.validate({"main": "QWW1113394", "dependent": "test"})
        self.assertEqual(self.outcome.warnings, [])

    def testValueMismatchListsAllowedValues(self):
        self.registry.add("mode", single())
        self.registry.add("port", single(depends={"mode": ["server", "proxy"]}))
        self.validate({"mode": "client", "port": "80"})
        self.assertEqual(
            self.outcome.warnings[0].message,
            "flag 'port' depends on 'mode' with value 'server' or 'proxy', got 'client'",
        )

    def testPresenceOnly(self):
        self.registry.add("user", single())
        self.registry.add("password", single(depends={"user": None}))
        self.validate({"password": "x"})
        self.assertIsInstance(self.outcome.warnings[0], DependencyWarning)
        self.outcome.clear()
        self.validate({"password": "x", "user": "me"})
        self.assertEqual(self.outcome.warnings, [])

    def testCycleDetected(self):
        self.registry.add("a", single(depends={"b": None}))
        self.registry.add("b", single(depends={"c": None}))
        self.registry.add("c", single(depends={"a": None}))
        self.validate({"b": "1", "c": "1", "a": "1"})
        self.assertEqual(len(self.outcome.errors), 1)
        self.assertIsInstance(self.outcome.errors[0], CircularDependencyError)
        self.assertEqual(self.outcome.errors[0].message, "circular dependency detected: a -> b -> c -> a")

    def testNoFalseCycleInDiamond(self):
        self.registry.add("d", single())
        self.registry.add("b", single(depends={"d": None}))
        self.registry.add("c", single(depends={"d": None}))
        self.registry.add("a", single(depends={"b": None, "c": None}))
        self.validate({"a": "1", "b": "1", "c": "1", "d": "1"})
        self.assertEqual(self.outcome.errors, [])
        self.assertEqual(self.outcome.warnings, [])

    def testChainWithinDepth(self):
        for index in range(10):
            self.registry.add(f"f{index}", single(depends={f"f{index + 1}": None}))
        self.registry.add("f10", single())
        self.validate({f"f{index}": "1" for index in range(11)})
        self.assertEqual(self.outcome.errors, [])

    def testDepthExceeded(self):
        for index in range(12):
            self.registry.add(f"f{index}", single(depends={f"f{index + 1}": None}))
        self.registry.add("f12", single())
        self.validate({"f0": "1"}, max_depth=10)
        self.assertIsInstance(self.outcome.errors[0], DependencyDepthError)
        self.assertIn("maximum dependency depth 10 exceeded", self.outcome.errors[0].message)

    def testMissingDeclaration(self):
        self.registry.add("a", single(depends={"ghost": None}))
        self.validate({"a": "1"})
        self.assertIsInstance(self.outcome.errors[0], MissingDependencyError)
        self.assertEqual(self.outcome.errors[0].message, "flag 'a' depends on 'ghost' but it is missing")

    def testScopedDependencyResolvesThroughPath(self):
        self.registry.add("token", single())
        self.registry.add("user", single(depends={"token": None}), "login")
        self.validate({"user@login": "me"})
        self.assertEqual(self.outcome.warnings[0].message, "flag 'user@login' depends on 'token', which was not specified")

    def testInvalidDepth(self):
        with self.assertRaises(ValueError):
            DependencyValidator(self.registry, 0)
        with self.assertRaises(TypeError):
            DependencyValidator(self.registry, "10")


if __name__ == "__main__":
    unittest.main()

"""
Tests for the utility layer.

This module verifies:
- Unset singleton identity, falsy semantics, representation and finality.
- coalesce() replacing only Unset.
- mirror() handing out copies of mutable containers.
- The name-case converters the environment merger relies on.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from flagwork.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the Unset sentinel.

    This suite asserts that:
    - UnsetType() always returns the same instance.
    - The sentinel is falsy but distinct from other falsy values.
    - Copy/deepcopy/pickle preserve identity.
    - The type is final and cannot be subclassed.
    """

    def testSingletonIdentity(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsyButDistinct(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, 0)
        self.assertNotEqual(Unset, "")

    def testRepresentation(self):
        self.assertEqual(repr(Unset), "Unset")

    def testCopiesKeepIdentity(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: F-841
                pass


class HelpersTest(TestCase):
    """coalesce, rename and mirror."""

    def testCoalesceReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testRenameForms(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__qualname__, "decorated")

        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(42, "name")

    def testMirrorReturnsCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = {"a": ["x"]}

        holder = Holder()
        items = holder.items
        items["a"].append("y")
        items["b"] = []
        self.assertEqual(holder.items, {"a": ["x"]})

        with self.assertRaises(AttributeError):
            holder.items = {}


class CaseConversionTest(TestCase):
    """every case style lands on the same words."""

    def testWords(self):
        self.assertEqual(words("HTTPServer"), ("http", "server"))
        self.assertEqual(words("log_level"), ("log", "level"))
        self.assertEqual(words("LOG-LEVEL"), ("log", "level"))
        self.assertEqual(words("logLevel2"), ("log", "level", "2"))
        self.assertEqual(words("server.port"), ("server", "port"))

    def testLowerCamelFromEveryStyle(self):
        for name in ("SERVER_PORT", "server_port", "server-port", "ServerPort", "server.port", "serverPort"):
            with self.subTest(name=name):
                self.assertEqual(to_lower_camel(name), "serverPort")

    def testOtherConverters(self):
        self.assertEqual(to_pascal("log_level"), "LogLevel")
        self.assertEqual(to_snake("logLevel"), "log_level")
        self.assertEqual(to_screaming_snake("log-level"), "LOG_LEVEL")
        self.assertEqual(to_kebab("LogLevel"), "log-level")
        self.assertEqual(to_dotted("LOG_LEVEL"), "log.level")

    def testEmptyInput(self):
        self.assertEqual(to_lower_camel(""), "")
        with self.assertRaises(TypeError):
            words(1)


if __name__ == "__main__":
    unittest.main()

"""
Completion engine behavioral tests.

Scope
- Validate child-name candidates, descent and narrowing.
- Validate option value substitution (only while the option really waits).
- Validate candidate grouping order and the default used-flag policy.
- Validate cluster continuations.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (group, command, complete, Flag, Option).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argotree import Flag, Option, command, group, complete


def _noop(identity, arguments):
    return True


class TestChildren(TestCase):
    """Behavioral tests for child-name completion and descent."""

    def setUp(self):
        self.root = group("root")
        self.start = self.root.group("start")
        self.stop = self.root.group("stop", aliases=("halt",))

    def testPrefixKeepsBothChildren(self):
        self.assertEqual(complete(self.root, ["st"]), ["start", "stop"])

    def testLongerPrefixNarrows(self):
        self.assertEqual(complete(self.root, ["sta"]), ["start"])

    def testEmptyInputListsNamesThenAliases(self):
        self.assertEqual(complete(self.root, []), ["start", "stop", "halt"])
        self.assertEqual(complete(self.root, [""]), ["start", "stop", "halt"])

    def testNoMatch(self):
        self.assertEqual(complete(self.root, ["x"]), [])

    def testInProgressTokenIsNotDescended(self):
        self.assertEqual(complete(self.root, ["start"]), ["start"])

    def testDescendsThroughNameAndAlias(self):
        self.stop.group("now")
        self.assertEqual(complete(self.root, ["stop", ""]), ["now"])
        self.assertEqual(complete(self.root, ["halt", "n"]), ["now"])

    def testUnresolvedSegmentCompletesAtCurrentNode(self):
        self.assertEqual(complete(self.root, ["nope", "st"]), ["start", "stop"])

    def testResultsAreNarrowedSubset(self):
        everything = complete(self.root, [""])
        for typed in ("", "s", "st", "sto", "h", "q"):
            with self.subTest(typed=typed):
                result = complete(self.root, [typed])
                self.assertTrue(set(result) <= set(everything))
                self.assertTrue(all(candidate.startswith(typed) for candidate in result))


class TestFlags(TestCase):
    """Behavioral tests for flag and option-value completion."""

    def setUp(self):
        self.a = Flag("a")
        self.b = Flag("b")
        self.all = Flag("all")
        self.out = Option("out", ("x", "y"))
        self.node = command(
            _noop,
            "node",
            flags=(self.a, self.b, self.all, self.out),
            completer=lambda identity, arguments, typed: ["alpha", "beta"],
        )

    def testOptionNameStillBeingTyped(self):
        self.assertEqual(complete(self.node, ["--o"]), ["--out"])
        self.assertEqual(complete(self.node, ["--out"]), ["--out"])

    def testOptionValueSuggestions(self):
        self.assertEqual(complete(self.node, ["--out", ""]), ["x", "y"])
        self.assertEqual(complete(self.node, ["--out", "y"]), ["y"])

    def testOptionValueSuggestionsAfterOtherArguments(self):
        self.assertEqual(complete(self.node, ["file", "-a", "--out", ""]), ["x", "y"])

    def testBoundOptionNoLongerSuggestsValues(self):
        self.assertEqual(
            complete(self.node, ["--out", "x", ""]),
            ["alpha", "beta", "-a", "-b", "--all"],
        )

    def testGroupOrderAndUsedFlagsDropped(self):
        self.assertEqual(complete(self.node, ["-a", ""]), ["alpha", "beta", "-b", "--all", "--out"])

    def testFlagPrefix(self):
        self.assertEqual(complete(self.node, ["--"]), ["--all", "--out"])

    def testClusteredOptionDoesNotWaitForValue(self):
        o = Option("o", ("v",))
        node = command(_noop, "node", flags=(self.a, o), completer=lambda identity, arguments, typed: ["word"])
        self.assertEqual(complete(node, ["-ao", ""]), ["word"])
        self.assertEqual(complete(node, ["-o", ""]), ["v"])

    def testChildrenComeFirst(self):
        self.node.group("sub")
        self.assertEqual(complete(self.node, [""])[:2], ["sub", "alpha"])

    def testIdentityIsPassedThrough(self):
        seen = []

        def flags(identity):
            seen.append(identity)
            return (Flag("force"),) if identity == "admin" else ()

        node = command(_noop, "node", flags=flags)
        self.assertEqual(complete(node, ["--f"], "admin"), ["--force"])
        self.assertEqual(complete(node, ["--f"], "guest"), [])
        self.assertIn("admin", seen)
        self.assertIn("guest", seen)


class TestClusters(TestCase):
    """Behavioral tests for cluster continuations."""

    def setUp(self):
        self.a = Flag("a", next=lambda previous: {"b", "c", "z"})
        self.b = Flag("b", next=lambda previous: {"a", "c"} - {flag.name for flag in previous})
        self.c = Flag("c")
        self.all = Flag("all")
        self.node = command(_noop, "node", flags=(self.a, self.b, self.c, self.all))

    def testContinuationsRestrictedToAllowedFlags(self):
        self.assertEqual(complete(self.node, ["-a"]), ["-a", "-ab", "-ac"])

    def testContinuationsUseWholeCluster(self):
        self.assertEqual(complete(self.node, ["-ab"]), ["-abc"])

    def testNoContinuationForUnknownCharacter(self):
        self.assertEqual(complete(self.node, ["-ax"]), [])

    def testNoContinuationForLongFlag(self):
        self.assertEqual(complete(self.node, ["--all"]), ["--all"])

    def testNoContinuationWithoutProvider(self):
        self.assertEqual(complete(self.node, ["-c"]), ["-c"])

    def testContinuationsIgnoreEarlierTokens(self):
        self.assertEqual(complete(self.node, ["-c", "-a"]), ["-a", "-ab", "-ac"])


if __name__ == "__main__":
    unittest.main()

"""
Command tree and resolver tests (declaration, composition, abbreviations).

Scope
- Validate Command/command() declaration checks and defaults.
- Validate tree composition: unique names, leaves without children, mapping builders.
- Validate resolve() statuses, abbreviations and case handling.
- Validate lazy "module:attribute" references.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (command, Command, CommandNode, CommandTree, resolve, Status).
"""

from __future__ import annotations

import sys
import types
import unittest
from unittest import TestCase

from helmsman import command, Command, CommandNode, CommandTree, OptionSpec, resolve, Status


@command
async def sample(invocation, args):
    """Sample command used by reference.

    Second docstring line is not part of the description.
    """
    return 0


def build_tree():
    @command(descr="Build the project")
    async def build(invocation, args):
        return 0

    @command(descr="Bundle the project")
    async def bundle(invocation, args):
        return 0

    return CommandTree({
        "build": build,
        "bundle": bundle,
        "remote": {"add": sample, "remove": sample},
        "clean": sample,
    })


class TestCommand(TestCase):
    """Leaf declaration."""

    def testCallbackMustBeAsync(self):
        def sync(invocation, args):
            return 0

        with self.assertRaises(TypeError):
            Command(sync)

    def testDescrDefaultsToFirstDocstringLine(self):
        self.assertEqual(sample.descr, "Sample command used by reference.")

    def testDecoratorFactory(self):
        @command(descr="Run", options=[OptionSpec("--jobs", key="jobs", action="store")], forwarding=True)
        async def run(invocation, args):
            return 0

        self.assertIsInstance(run, Command)
        self.assertEqual(run.descr, "Run")
        self.assertIn("--jobs", run.options)
        self.assertTrue(run.forwarding)
        self.assertEqual(run.usage, "[<options>...] [<args>...]")

    def testOptionsMustBeSpecs(self):
        async def run(invocation, args):
            return 0

        with self.assertRaises(TypeError):
            Command(run, options=["--jobs"])


class TestCommandTree(TestCase):
    """Composition rules."""

    def testNamesInRegistrationOrder(self):
        self.assertEqual(build_tree().names(), ("build", "bundle", "remote", "clean"))

    def testBadNamesRejected(self):
        for name in ("-x", "2go", "a_b", "end-"):
            with self.subTest(name=name):
                with self.assertRaises(ValueError):
                    CommandNode(name)

    def testDuplicateNamesRejectedCaseInsensitively(self):
        tree = build_tree()
        with self.assertRaises(ValueError):
            tree.add("Build", sample)

    def testLeafCannotHaveChildren(self):
        tree = build_tree()
        with self.assertRaises(ValueError):
            tree.add("build extra", sample)

    def testCommandMustBeRunnable(self):
        with self.assertRaises(TypeError):
            CommandNode("thing", object())

    def testAddCreatesInnerNodes(self):
        tree = CommandTree()
        node = tree.add("config get", sample)
        self.assertEqual(node.path, ("config", "get"))
        self.assertFalse(tree.node("config").is_leaf)
        self.assertIs(tree.node(("config", "get")), node)

    def testWalkYieldsLeaves(self):
        paths = [node.path for node in build_tree().walk()]
        self.assertEqual(paths, [("build",), ("bundle",), ("remote", "add"), ("remote", "remove"), ("clean",)])

    def testLazyReference(self):
        module = types.ModuleType("lazysample")
        module.sample = sample
        sys.modules["lazysample"] = module
        self.addCleanup(sys.modules.pop, "lazysample", None)

        node = CommandNode("sample", "lazysample:sample")
        self.assertTrue(node.is_leaf)
        self.assertIs(node.load(), sample)
        self.assertIs(node.load(), sample)
        self.assertEqual(node.command, "lazysample:sample")

    def testLazyReferenceSharedAcrossNodes(self):
        module = types.ModuleType("lazyshared")
        module.sample = sample
        sys.modules["lazyshared"] = module
        self.addCleanup(sys.modules.pop, "lazyshared", None)

        first = CommandNode("first", "lazyshared:sample")
        self.assertIs(first.load(), sample)
        sys.modules.pop("lazyshared")
        # Cached by reference, the module is not imported again.
        self.assertIs(CommandNode("second", "lazyshared:sample").load(), sample)

    def testLazyReferenceMustNameAttribute(self):
        with self.assertRaises(ValueError):
            CommandNode("sample", "helmsman.commands").load()

    def testLazyReferenceMissingModulePropagates(self):
        with self.assertRaises(ModuleNotFoundError):
            CommandNode("sample", "helmsman.nowhere:sample").load()


class TestResolve(TestCase):
    """Resolution statuses."""

    def setUp(self):
        self.root = build_tree().root

    def testEmpty(self):
        self.assertIs(resolve([], self.root).status, Status.EMPTY)

    def testExact(self):
        result = resolve(["build", "file.txt"], self.root)
        self.assertIs(result.status, Status.FOUND)
        self.assertEqual(result.path, ("build",))
        self.assertEqual(result.leftover, ("file.txt",))

    def testAmbiguousPrefixNamesBoth(self):
        result = resolve(["bu"], self.root)
        self.assertIs(result.status, Status.AMBIGUOUS)
        self.assertEqual(result.candidates, ("build", "bundle"))
        self.assertEqual(result.path, ())

    def testUniquePrefix(self):
        result = resolve(["bui"], self.root)
        self.assertTrue(result.found)
        self.assertEqual(result.path, ("build",))

    def testNoMatch(self):
        result = resolve(["x"], self.root)
        self.assertIs(result.status, Status.NOT_FOUND)
        self.assertEqual(result.path, ())
        self.assertIs(result.node, self.root)
        self.assertEqual(result.leftover, ("x",))

    def testCaseInsensitive(self):
        result = resolve(["REMOTE", "Add"], self.root)
        self.assertEqual(result.path, ("remote", "add"))

    def testNestedAbbreviation(self):
        result = resolve(["rem", "a"], self.root)
        self.assertTrue(result.found)
        self.assertEqual(result.path, ("remote", "add"))

    def testNestedNoMatchKeepsPath(self):
        result = resolve(["r", "x"], self.root)
        self.assertIs(result.status, Status.NOT_FOUND)
        self.assertEqual(result.path, ("remote",))
        result = resolve(["remote", "re"], self.root)
        self.assertIs(result.status, Status.FOUND)
        self.assertEqual(result.path, ("remote", "remove"))

    def testIncomplete(self):
        result = resolve(["remote"], self.root)
        self.assertIs(result.status, Status.INCOMPLETE)
        self.assertEqual(result.path, ("remote",))

    def testExactMatchBeatsLongerPrefix(self):
        tree = CommandTree({"test": sample, "tests": sample})
        self.assertEqual(resolve(["test"], tree.root).path, ("test",))

    def testMinimumAbbreviation(self):
        tree = CommandTree()
        tree.add("install", sample, abbrev=3)
        self.assertIs(resolve(["in"], tree.root).status, Status.NOT_FOUND)
        self.assertTrue(resolve(["ins"], tree.root).found)


if __name__ == "__main__":
    unittest.main()

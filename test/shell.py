"""
Interactive shell and application bootstrap tests.

Scope
- Validate that every shell line is an independent invocation with a fresh configuration.
- Validate line tokenization, blank lines and the ways to leave the loop.
- Validate Application single-shot and interactive paths and the exit sink.

Conventions
- Test method names follow CamelCase per project convention.
- Input is fed through io.StringIO; output is captured through rich consoles.
"""

from __future__ import annotations

import io
import unittest
from unittest import IsolatedAsyncioTestCase, TestCase

from rich.console import Console

from helmsman import AppContext, Application, CommandError, CommandTree, Manifest, OptionSpec, Shell, command


def tree(calls):
    @command(descr="Show the configuration")
    async def show(invocation, args):
        calls.append(invocation)
        return 0

    @command(descr="Fail gently")
    async def fail(invocation, args):
        raise CommandError("boom")

    @command(descr="Build the project", options=[OptionSpec("-j", "--jobs", key="jobs", action="store")])
    async def build(invocation, args):
        calls.append(invocation)
        return 0

    return CommandTree({"show": show, "fail": fail, "build": build})


class TestShell(IsolatedAsyncioTestCase):

    def setUp(self):
        self.calls = []
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.app = AppContext(
            "xtest",
            tree(self.calls),
            Manifest("xtest", "0.1.2"),
            stdout=Console(file=self.stdout, width=100),
            stderr=Console(file=self.stderr, width=100),
        )

    async def drive(self, text):
        return await Shell(self.app, stream=io.StringIO(text)).loop()

    async def testFreshConfigPerLine(self):
        self.assertEqual(await self.drive("show -v\nshow\nshow --loglevel debug\nexit\n"), 0)
        levels = [invocation.config["log_level"] for invocation in self.calls]
        self.assertEqual(levels, ["info", "warn", "debug"])

    async def testPromptAndDone(self):
        await self.drive("quit\n")
        output = self.stdout.getvalue()
        self.assertIn("xtest> ", output)
        self.assertTrue(output.endswith("Done.\n"))

    async def testEndOfInputLeaves(self):
        self.assertEqual(await self.drive("show\n"), 0)
        self.assertEqual(len(self.calls), 1)
        self.assertTrue(self.stdout.getvalue().endswith("Done.\n"))

    async def testBlankLinesIgnored(self):
        await self.drive("\n   \nshow\n\nexit\n")
        self.assertEqual(len(self.calls), 1)

    async def testQuotedArguments(self):
        await self.drive('show "hello world" -- "-v"\nexit\n')
        self.assertEqual(self.calls[0].args, ("hello world", "--", "-v"))
        self.assertEqual(self.calls[0].remaining, ("hello world",))

    async def testErrorsDoNotEndTheLoop(self):
        await self.drive("fail\nnope\nshow \"unterminated\nshow\nexit\n")
        errors = self.stderr.getvalue()
        self.assertIn("error: boom", errors)
        self.assertIn("error: unknown command 'nope'", errors)
        self.assertIn("error: cannot parse the line: no closing quotation", errors)
        self.assertEqual(len(self.calls), 1)

    async def testExitWordsAreCaseInsensitive(self):
        await self.drive("EXIT\nshow\n")
        self.assertEqual(self.calls, [])


class TestApplication(TestCase):

    def setUp(self):
        self.calls = []
        self.codes = []
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()

    def application(self, stdin=None):
        return Application(
            tree(self.calls),
            Manifest("xtest", "0.1.2"),
            prog="xtest",
            stdout=Console(file=self.stdout, width=100),
            stderr=Console(file=self.stderr, width=100),
            stdin=stdin,
        )

    def testSingleShot(self):
        self.application().start(["show", "-v"], exit=self.codes.append)
        self.assertEqual(self.codes, [0])
        self.assertEqual(self.calls[0].config["log_level"], "info")

    def testSingleShotFailure(self):
        self.application().start(["fail"], exit=self.codes.append)
        self.assertEqual(self.codes, [1])

    def testVersion(self):
        self.application().start(["--version"], exit=self.codes.append)
        self.assertEqual(self.codes, [0])
        self.assertEqual(self.stdout.getvalue(), "0.1.2\n")

    def testInteractive(self):
        application = self.application(io.StringIO("show\nfail\nexit\n"))
        self.assertTrue(application.is_interactive(["-i"]))
        application.start(["--interactive"], exit=self.codes.append)
        self.assertEqual(self.codes, [0])
        self.assertEqual(len(self.calls), 1)
        self.assertTrue(self.stdout.getvalue().endswith("Done.\n"))

    def testInteractiveSwitchTakenAsOptionValue(self):
        application = self.application(io.StringIO("exit\n"))
        self.assertFalse(application.is_interactive(["build", "-j", "-i"]))
        self.assertTrue(application.is_interactive(["build", "-i"]))
        application.start(["build", "-j", "-i"], exit=self.codes.append)
        self.assertEqual(self.codes, [0])
        self.assertEqual(self.calls[0].config["jobs"], "-i")
        self.assertFalse(self.calls[0].config["is_interactive"])
        self.assertNotIn("Done.", self.stdout.getvalue())

    def testBrokenReferenceIsLeftToTheDispatcher(self):
        application = self.application()
        application.context.tree.add("broken", "helmsman.nowhere:command")
        self.assertFalse(application.is_interactive(["broken", "-i"]))
        application.start(["broken", "-i"], exit=self.codes.append)
        self.assertEqual(self.codes, [2])
        self.assertIn("ModuleNotFoundError", self.stderr.getvalue())

    def testProgramName(self):
        self.assertEqual(self.application().context.prog, "xtest")


if __name__ == "__main__":
    unittest.main()

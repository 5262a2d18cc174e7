"""
Argument splitting tests (words, options region, literal tail).

Scope
- Validate the word grammar used for the leading command-path region.
- Validate where the word scan stops and how the '--' terminator is handled.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (split, is_word, TERMINATOR).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from helmsman import split, is_word, TERMINATOR


class TestWords(TestCase):
    """Word grammar."""

    def testPlainWordsAccepted(self):
        for token in ("build", "self-update", "B", "Remote"):
            with self.subTest(token=token):
                self.assertTrue(is_word(token))

    def testNonWordsRejected(self):
        for token in ("-v", "--help", "2x", "trailing-", "file.txt", "a_b", "", "x1"):
            with self.subTest(token=token):
                self.assertFalse(is_word(token))


class TestSplit(TestCase):
    """Region boundaries."""

    def testEmptyInput(self):
        self.assertEqual(split([]), ((), (), (), False))

    def testWordsStopAtFirstSwitch(self):
        result = split(["remote", "add", "-v", "origin", "url"])
        self.assertEqual(result.words, ("remote", "add"))
        self.assertEqual(result.options, ("-v", "origin", "url"))
        self.assertEqual(result.tail, ())
        self.assertFalse(result.terminated)

    def testWordsStopAtFirstNonWord(self):
        result = split(["build", "file.txt", "more"])
        self.assertEqual(result.words, ("build",))
        self.assertEqual(result.options, ("file.txt", "more"))

    def testTerminatorOpensTail(self):
        result = split(["cmd", TERMINATOR, "-v", "--version"])
        self.assertEqual(result.words, ("cmd",))
        self.assertEqual(result.options, ())
        self.assertEqual(result.tail, ("-v", "--version"))
        self.assertTrue(result.terminated)

    def testOnlyFirstTerminatorCounts(self):
        result = split(["cmd", "-x", "--", "a", "--", "b"])
        self.assertEqual(result.options, ("-x",))
        self.assertEqual(result.tail, ("a", "--", "b"))

    def testTerminatorInPlaceOfCommand(self):
        result = split(["--", "build"])
        self.assertEqual(result.words, ())
        self.assertEqual(result.tail, ("build",))
        self.assertTrue(result.terminated)

    def testEmptyTailStillTerminated(self):
        result = split(["cmd", "--"])
        self.assertEqual(result.tail, ())
        self.assertTrue(result.terminated)

    def testCasePreserved(self):
        self.assertEqual(split(["Build", "-V"]).words, ("Build",))


if __name__ == "__main__":
    unittest.main()

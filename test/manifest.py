"""
Manifest tests (package.json, pyproject.toml, mappings).

Scope
- Validate the fields read from each source and the link fallbacks.
- Validate missing mandatory fields.

Conventions
- Test method names follow CamelCase per project convention.
- Files are written to a temporary folder per test.
"""

from __future__ import annotations

import json
import os.path
import tempfile
import unittest
from unittest import TestCase

from helmsman import Manifest


class TestManifest(TestCase):

    def setUp(self):
        folder = tempfile.TemporaryDirectory()
        self.addCleanup(folder.cleanup)
        self.folder = folder.name

    def write(self, name, content):
        path = os.path.join(self.folder, name)
        with open(path, "w", encoding="utf-8") as file:
            file.write(content)
        return path

    def testPackageJson(self):
        path = self.write("package.json", json.dumps({
            "name": "xtest",
            "version": "0.1.2",
            "description": "Mock test",
            "homepage": "https://example.org/xtest",
            "bugs": {"url": "https://example.org/xtest/issues"},
        }))
        manifest = Manifest.load(path)
        self.assertEqual(manifest, Manifest(
            "xtest", "0.1.2", "Mock test", "https://example.org/xtest", "https://example.org/xtest/issues",
        ))

    def testPyprojectToml(self):
        self.write("pyproject.toml", "\n".join((
            "[project]",
            'name = "xtest"',
            'version = "2.0.0"',
            'description = "Mock test"',
            "",
            "[project.urls]",
            'Homepage = "https://example.org/xtest"',
            'Issues = "https://example.org/xtest/issues"',
        )))
        manifest = Manifest.load(self.folder)
        self.assertEqual(manifest.version, "2.0.0")
        self.assertEqual(manifest.homepage, "https://example.org/xtest")
        self.assertEqual(manifest.bugs, "https://example.org/xtest/issues")

    def testFolderPrefersPackageJson(self):
        self.write("package.json", json.dumps({"name": "from-json", "version": "1.0.0"}))
        self.write("pyproject.toml", '[project]\nname = "from-toml"\nversion = "1.0.0"\n')
        self.assertEqual(Manifest.load(self.folder).name, "from-json")

    def testEmptyFolder(self):
        with self.assertRaises(FileNotFoundError):
            Manifest.load(self.folder)

    def testMissingVersion(self):
        with self.assertRaises(ValueError):
            Manifest.from_mapping({"name": "xtest"})

    def testBugsAsString(self):
        manifest = Manifest.from_mapping({"name": "x", "version": "1", "bugs": "https://example.org/bugs"})
        self.assertEqual(manifest.bugs, "https://example.org/bugs")
        self.assertEqual(manifest.description, "")
        self.assertIsNone(manifest.homepage)


if __name__ == "__main__":
    unittest.main()

"""
Package metadata provider: name, version and description of the host application.

Sources
- Manifest.load(path): a `package.json`-style JSON document or a `pyproject.toml`
  ([project] table), read once at startup.
- Manifest.installed(distribution): the metadata of an installed distribution.

The help renderer shows the description, the `name@version` line, and the home page
and bug report links when they are known; `--version` prints the version alone.
"""
import json
import os.path
import tomllib
from importlib import metadata
from typing import NamedTuple


class Manifest(NamedTuple):
    name: str
    version: str
    description: str = ""
    homepage: str | None = None
    bugs: str | None = None

    @classmethod
    def load(cls, path, /):
        """
        Read a manifest file. `path` may also name a folder holding a
        package.json or a pyproject.toml (package.json wins when both exist).
        """
        if os.path.isdir(path):
            for candidate in ("package.json", "pyproject.toml"):
                if os.path.isfile(os.path.join(path, candidate)):
                    path = os.path.join(path, candidate)
                    break
            else:
                raise FileNotFoundError(f"no package.json or pyproject.toml in {path!r}")

        if path.endswith(".toml"):
            with open(path, "rb") as file:
                return cls.from_mapping(tomllib.load(file)["project"])
        with open(path, encoding="utf-8") as file:
            return cls.from_mapping(json.load(file))

    @classmethod
    def installed(cls, distribution, /):
        """
        Build a manifest from an installed distribution's metadata.
        """
        info = metadata.metadata(distribution)
        homepage = info.get("Home-page")
        bugs = None
        for entry in info.get_all("Project-URL") or ():
            label, _, url = entry.partition(",")
            label = label.strip().lower()
            if label in ("homepage", "home page", "home") and not homepage:
                homepage = url.strip()
            elif label in ("bug tracker", "bugs", "issues", "bug reports"):
                bugs = url.strip()
        return cls(info["Name"], info["Version"], info.get("Summary") or "", homepage, bugs)

    @classmethod
    def from_mapping(cls, mapping, /):
        """
        Build a manifest from a parsed package.json or [project] table.

        - package.json: "homepage" is a string, "bugs" a string or {"url": ...}.
        - pyproject.toml: links come from the "urls" table.
        """
        try:
            name = mapping["name"]
            version = mapping["version"]
        except KeyError as error:
            raise ValueError(f"manifest is missing the {error.args[0]!r} field") from None

        urls = {key.lower(): value for key, value in mapping.get("urls", {}).items()}
        bugs = mapping.get("bugs")
        if isinstance(bugs, dict):
            bugs = bugs.get("url")
        return cls(
            str(name),
            str(version),
            mapping.get("description") or "",
            mapping.get("homepage") or urls.get("homepage"),
            bugs or urls.get("issues") or urls.get("bug tracker"),
        )


__all__ = (
    "Manifest",
)

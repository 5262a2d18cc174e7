"""
Helmsman command layer: declare commands, compose them into a tree, resolve argv words.

What this module provides
- Command: wraps an async callback into a leaf command implementation, with its
  own options, description and usage. Any other object exposing
  `async run(invocation, args) -> int` works as a leaf too; Command is just the
  convenient variant.
- command(...): create a Command or a decorator that produces one.
- CommandNode: one named node of the tree, either inner (children only) or leaf
  (bound to a command, or to a lazy "package.module:attribute" reference).
- CommandTree: the root node plus builders from a declarative mapping.
- resolve(words, root): walk the tree with the leading argv words, allowing
  unambiguous abbreviations, and report the outcome as a Resolution value.

Core ideas
- Composition over inheritance: commands are registered into the tree, they do not
  derive from an application base class.
- Read-only after setup: the tree is built once and only read while dispatching.
- Resolution never raises: an unknown or ambiguous word is a status the dispatcher
  turns into help or into a user error.

Quick start
    from helmsman import command, CommandTree

    @command(descr="Build the project")
    async def build(invocation, args):
        invocation.log.info("building...")
        return 0

    tree = CommandTree({
        "build": build,
        "remote": {"add": "mytool.remote:add", "remove": "mytool.remote:remove"},
    })
"""
import functools
import importlib
import inspect
from collections.abc import Mapping
from enum import Enum
from typing import NamedTuple

from .arguments import is_word
from .options import OptionRegistry, OptionSpec
from .utils import Unset, coalesce


class Command:
    """
    Leaf command implementation backed by an async callback.

    Parameters
    - callback: async callable (invocation, args) -> int
      the command body. `args` are the tokens following the command path, in
      their original order, including any '--' tail.
    - descr: str
      one-line description; defaults to the first line of the callback docstring.
    - usage: str
      usage line shown in the command help after the program and command path.
    - options: Iterable[OptionSpec] | OptionRegistry
      the command's own switches, parsed together with the common ones.
    - forwarding: bool
      when True, unrecognized switches are handed to the command untouched
      instead of being reported as errors.
    """

    def __init__(self, callback, /, descr=Unset, usage=Unset, options=(), *, forwarding=False):
        if not inspect.iscoroutinefunction(callback):
            raise TypeError(f"command callback {callback!r} must be an async function")
        if isinstance(options, OptionRegistry):
            registry = options
        else:
            registry = OptionRegistry(title="Command options")
            for spec in options:
                if not isinstance(spec, OptionSpec):
                    raise TypeError("command 'options' must hold OptionSpec instances")
                registry.add(spec)

        docstring = inspect.getdoc(callback) or ""
        self.callback = callback
        self.descr = coalesce(descr, docstring.partition("\n")[0] or None)
        self.usage = coalesce(usage, "[<options>...] [<args>...]")
        self.options = registry
        self.forwarding = bool(forwarding)

    def __repr__(self):
        return f"{type(self).__name__}({self.callback.__qualname__!r})"

    async def run(self, invocation, args):
        return await self.callback(invocation, args)


def command(source=Unset, /, **kwargs):
    """
    Create a Command from an async callback, or return a decorator that does.

    Usage
    - @command
      async def build(invocation, args): ...
    - @command(descr="Build", options=[OptionSpec("--jobs", key="jobs", action="store")])
      async def build(invocation, args): ...
    """
    if source is not Unset:
        return Command(source, **kwargs)

    def wrapper(source, /):
        return Command(source, **kwargs)

    return wrapper


@functools.cache
def _import_command(reference):
    module, _, attribute = reference.partition(":")
    if not module or not attribute:
        raise ValueError(f"command reference {reference!r} must look like 'package.module:attribute'")
    implementation = getattr(importlib.import_module(module), attribute)
    if not callable(getattr(implementation, "run", None)):
        raise TypeError(f"command reference {reference!r} must expose a run(invocation, args) method")
    return implementation


class CommandNode:
    """
    One named node of the command tree.

    Attributes
    - name: str | None (None only for the root)
    - abbrev: int, minimum prefix length accepted as an abbreviation
    - children: dict[str, CommandNode], in registration order
    - parent: CommandNode | None, back-reference used for path reconstruction
    - command: leaf implementation, a "module:attribute" reference, or None for inner nodes

    A reference is imported on first resolution and never written back, so its
    option aliases are only checked against the common ones at that point: a
    clash there is a defect of the application and ends the run with exit code 2.
    """

    def __init__(self, name=None, /, command=None, *, abbrev=1):
        if name is not None and (not isinstance(name, str) or not is_word(name)):
            raise ValueError(f"command name {name!r} must start with a letter and hold only letters and inner dashes")
        if not isinstance(abbrev, int) or abbrev < 1:
            raise ValueError("command 'abbrev' must be a positive integer")
        if command is not None and not isinstance(command, str) and not callable(getattr(command, "run", None)):
            raise TypeError(f"command {command!r} must expose a run(invocation, args) method")
        self.name = name
        self.abbrev = abbrev
        self.command = command
        self.children = {}
        self.parent = None

    def __repr__(self):
        kind = "leaf" if self.is_leaf else "node"
        return f"{type(self).__name__}({' '.join(self.path) or '<root>'!r}, {kind})"

    @property
    def is_leaf(self):
        return self.command is not None

    @property
    def path(self):
        """
        Full names from the root (excluded) down to this node.
        """
        path = []
        node = self
        while node.parent is not None:
            path.append(node.name)
            node = node.parent
        return tuple(reversed(path))

    def attach(self, child):
        """
        Register `child` under this node, enforcing case-insensitive unique names.
        """
        if self.is_leaf:
            raise ValueError(f"leaf command {' '.join(self.path)!r} cannot have subcommands")
        for sibling in self.children:
            if sibling.lower() == child.name.lower():
                typeof = "subcommand" if self.parent is not None else "command"
                raise ValueError(f"{typeof} name {child.name!r} is already in use")
        self.children[child.name] = child
        child.parent = self
        return child

    def match(self, word):
        """
        Children matching `word`: the exact (case-insensitive) match alone when
        there is one, otherwise every child the word abbreviates.
        """
        word = word.lower()
        for child in self.children.values():
            if child.name.lower() == word:
                return [child]
        return [
            child for child in self.children.values()
            if len(word) >= child.abbrev and child.name.lower().startswith(word)
        ]

    def load(self):
        """
        Return the bound command, importing it first when bound by reference.

        The node keeps the reference; imported commands are cached per reference
        outside the tree. Import failures propagate: a broken reference is a
        defect of the application, not of the user input.
        """
        if isinstance(self.command, str):
            return _import_command(self.command)
        return self.command


class CommandTree:
    """
    Registry of commands, built once from a declarative mapping.

    Mapping values are either nested mappings (inner nodes), command objects, or
    "module:attribute" import references (leaves):

        CommandTree({
            "build": build,
            "bundle": bundle,
            "remote": {"add": remote_add, "remove": "tool.remote:remove"},
        })
    """

    def __init__(self, mapping=None, /):
        self.root = CommandNode()
        if mapping is not None:
            self.update(mapping)

    def update(self, mapping, /, node=None):
        node = self.root if node is None else node
        for name, value in mapping.items():
            if isinstance(value, Mapping):
                child = node.children.get(name) or node.attach(CommandNode(name))
                self.update(value, child)
            else:
                node.attach(CommandNode(name, value))
        return self

    def add(self, path, command, /, *, abbrev=1):
        """
        Register `command` at `path` ("remote add" or ("remote", "add")), creating
        inner nodes on the way.
        """
        *parents, name = path.split() if isinstance(path, str) else path
        node = self.root
        for parent in parents:
            node = node.children.get(parent) or node.attach(CommandNode(parent))
        return node.attach(CommandNode(name, command, abbrev=abbrev))

    def names(self):
        """
        Top-level command names, in registration order.
        """
        return tuple(self.root.children)

    def node(self, path):
        node = self.root
        for name in path.split() if isinstance(path, str) else path:
            node = node.children[name]
        return node

    def walk(self, node=None):
        """
        Yield every leaf node, depth-first, in registration order.
        """
        node = self.root if node is None else node
        for child in node.children.values():
            if child.is_leaf:
                yield child
            else:
                yield from self.walk(child)


class Status(Enum):
    """
    Outcome of resolve().

    - FOUND: a leaf was reached.
    - EMPTY: there were no words at all.
    - NOT_FOUND: a word matched no child; `leftover` starts with it.
    - INCOMPLETE: the words ran out on an inner node.
    - AMBIGUOUS: a word abbreviates several children, listed in `candidates`.
    """
    FOUND = "found"
    EMPTY = "empty"
    NOT_FOUND = "not-found"
    INCOMPLETE = "incomplete"
    AMBIGUOUS = "ambiguous"


class Resolution(NamedTuple):
    """
    Result of resolve(): the full (non-abbreviated) path matched so far, the node
    it ends on, the words left unconsumed and, for AMBIGUOUS, the candidate names.
    """
    status: Status
    path: tuple[str, ...]
    node: CommandNode
    leftover: tuple[str, ...]
    candidates: tuple[str, ...] = ()

    @property
    def found(self):
        return self.status is Status.FOUND


def resolve(words, root):
    """
    Walk `root` with `words`, one level per word.

    behavior
    - at each level the exact (case-insensitive) child name wins; otherwise the
      unique child the word abbreviates is taken.
    - descent stops at a leaf even when words remain: they belong to the leaf.
    - abbreviations only ever match the next level, never several segments.
    """
    words = tuple(words)
    if not words:
        return Resolution(Status.EMPTY, (), root, ())

    node = root
    path = []
    for index, word in enumerate(words):
        matches = node.match(word)
        if len(matches) > 1:
            return Resolution(
                Status.AMBIGUOUS, tuple(path), node, words[index:], tuple(match.name for match in matches)
            )
        if not matches:
            return Resolution(Status.NOT_FOUND, tuple(path), node, words[index:])
        node = matches[0]
        path.append(node.name)
        if node.is_leaf:
            return Resolution(Status.FOUND, tuple(path), node, words[index + 1:])

    return Resolution(Status.INCOMPLETE, tuple(path), node, ())


__all__ = (
    "Command",
    "command",
    "CommandNode",
    "CommandTree",
    "Status",
    "Resolution",
    "resolve",
)

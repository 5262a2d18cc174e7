"""
Helmsman options: declare, register and parse command line switches.

What this module provides
- OptionSpec: immutable declaration of one recognized switch (aliases, arity, effect).
- OptionRegistry: ordered, grouped collection of specs with unique aliases.
- Config: the per-invocation configuration mapping the effects write into.
- parse_options(tokens, registry, config): apply every recognized switch, in
  encounter order, and hand back what was not consumed.
- common_options(): the switches every application understands (help, version,
  interactive, log level, working folder).

Grammar (fixed, not user-extensible)
- '--name' and '--name=value' are long options.
- '-abc' is a cluster of single-character short options ('-vv' is '-v -v').
  A value-taking short option ends the cluster: the rest of the token, or the
  next token when the rest is empty, is its value ('-Cdir', '-C dir').
- '-' alone and anything not starting with '-' are positionals.

Effects (the `action` of a spec)
- store_true   → config[key] = True
- store_const  → config[key] = const
- escalate     → walk the `const` ladder: repeating the same switch moves from const[i]
                 to const[i+1] (sticking at the last rung); otherwise it writes const[0].
                 A value written by another switch is never climbed from.
- count        → config[key] += 1
- store        → config[key] = value (takes one value, checked against `choices`)

Failure policy
- Parsing never raises. Unrecognized switches and positionals are returned in
  `remaining` (unrecognized switches are also listed in `unknown` with their
  position); malformed usages are returned as fault objects in `faults`.
  The caller decides whether to error out or forward.
- Declaration mistakes (bad alias spelling, duplicate alias, bad action) raise
  TypeError/ValueError right away: they are programming errors, not user input.

Quick example
    >>> registry = common_options()
    >>> result = parse_options(["-vv", "file.txt"], registry)
    >>> result.config["log_level"], result.remaining
    ('verbose', ('file.txt',))
"""
import re
from collections import deque
from typing import NamedTuple

from .faults import FlagAssignmentError, InvalidChoiceError, OptionValueRequiredError, UnknownOptionError
from .logger import DEFAULT_LEVEL, LEVELS
from .utils import Unset, coalesce, ordinal, suggest

ACTIONS = ("store_true", "store_const", "escalate", "count", "store")

# '-x' (one letter or digit) or '--name' (letters/digits with inner dashes)
_ALIAS = re.compile(r"-[^\W_]|--[^\W\d_](?:-?[^\W_]+)*")
_NUMBER = re.compile(r"-\d+(\.\d*)?")


class OptionSpec:
    """
    Declaration of one recognized switch.

    Parameters
    - aliases: one or more str
      '-x' short forms and '--name' long forms; at least one is required.
    - key: str
      configuration key the effect writes to.
    - action: str
      one of ACTIONS (see module docstring). Only 'store' takes a value.
    - const: any
      value for 'store_const', ordered tuple of values for 'escalate'.
    - default: any
      initial configuration value. Defaults to False for 'store_true', 0 for
      'count' and None for 'store'; other actions leave the key absent.
    - choices: Iterable[str]
      accepted values for 'store'; empty means any value.
    - metavar: str
      placeholder shown in help for 'store' (defaults to '<key>').
    - descr: str
      one-line help description.
    - group: str
      help group title; the registry title is used when omitted.
    - hidden: bool
      keep out of the help option groups.

    Instances are immutable once constructed.
    """

    __slots__ = ("aliases", "key", "action", "const", "default", "choices", "metavar", "descr", "group", "hidden")

    def __init__(
            self,
            *aliases,
            key,
            action="store_true",
            const=Unset,
            default=Unset,
            choices=(),
            metavar=Unset,
            descr=Unset,
            group=Unset,
            hidden=False
    ):
        if not aliases:
            raise TypeError("OptionSpec requires at least one alias")
        for alias in aliases:
            if not isinstance(alias, str) or not _ALIAS.fullmatch(alias):
                raise ValueError(f"OptionSpec alias {alias!r} must look like '-x' or '--name'")
        if len(set(aliases)) != len(aliases):
            raise ValueError(f"OptionSpec aliases {aliases!r} contain duplicates")
        if not isinstance(key, str) or not key:
            raise TypeError("OptionSpec 'key' must be a non-empty string")
        if action not in ACTIONS:
            raise ValueError(f"OptionSpec action must be one of {', '.join(ACTIONS)}, not {action!r}")
        if action == "store_const" and const is Unset:
            raise TypeError("OptionSpec action 'store_const' requires 'const'")
        if action == "escalate" and (not isinstance(const, tuple) or not const):
            raise TypeError("OptionSpec action 'escalate' requires a non-empty tuple 'const'")
        if choices and action != "store":
            raise TypeError("OptionSpec 'choices' only apply to the 'store' action")

        match action:
            case "store_true":
                default = coalesce(default, False)
            case "count":
                default = coalesce(default, 0)
            case "store":
                default = coalesce(default, None)

        for name, value in (
                ("aliases", tuple(aliases)),
                ("key", key),
                ("action", action),
                ("const", coalesce(const)),
                ("default", default),
                ("choices", tuple(choices)),
                ("metavar", coalesce(metavar, f"<{key}>") if action == "store" else None),
                ("descr", coalesce(descr)),
                ("group", coalesce(group)),
                ("hidden", bool(hidden)),
        ):
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(map(repr, self.aliases))}, key={self.key!r}, action={self.action!r})"

    @property
    def takes_value(self):
        return self.action == "store"

    @property
    def shorts(self):
        return tuple(alias for alias in self.aliases if not alias.startswith("--"))

    @property
    def longs(self):
        return tuple(alias for alias in self.aliases if alias.startswith("--"))

    def accepts(self, value):
        return not self.choices or value in self.choices

    def apply(self, config, value=None, *, repeat=False):
        """
        Write this spec's effect into `config`. `value` is only used by 'store'
        and must already be validated with accepts(). `repeat` tells 'escalate'
        that the previous write to the key came from this same spec.
        """
        match self.action:
            case "store_true":
                config[self.key] = True
            case "store_const":
                config[self.key] = self.const
            case "escalate":
                ladder = self.const
                current = config.get(self.key)
                if repeat and current in ladder:
                    config[self.key] = ladder[min(ladder.index(current) + 1, len(ladder) - 1)]
                else:
                    config[self.key] = ladder[0]
            case "count":
                config[self.key] = config.get(self.key, 0) + 1
            case "store":
                config[self.key] = value


class OptionRegistry:
    """
    Ordered collection of OptionSpec, grouped by title for help.

    Invariants
    - Every alias maps to exactly one spec; adding a spec that reuses an alias
      raises ValueError naming the clash.
    - Iteration and groups() follow registration order.
    """

    def __init__(self, specs=(), /, title="Options"):
        self.title = title
        self._aliases = {}
        self._groups = {}
        for spec in specs:
            self.add(spec)

    def add(self, spec, /, group=Unset):
        if not isinstance(spec, OptionSpec):
            raise TypeError("OptionRegistry only accepts OptionSpec instances")
        for alias in spec.aliases:
            if alias in self._aliases:
                raise ValueError(f"option alias {alias!r} is already in use by {self._aliases[alias]!r}")
        for alias in spec.aliases:
            self._aliases[alias] = spec
        self._groups.setdefault(coalesce(group, spec.group or self.title), []).append(spec)
        return spec

    def lookup(self, alias):
        return self._aliases.get(alias)

    def find(self, key):
        """
        Return the first spec writing `key`, or None.
        """
        return next((spec for spec in self if spec.key == key), None)

    def merge(self, other):
        """
        Return a new registry holding this registry's specs followed by `other`'s,
        keeping each spec in its group. Alias clashes raise ValueError.
        """
        merged = type(self)(title=self.title)
        for registry in (self, other):
            for group, specs in registry._groups.items():
                for spec in specs:
                    merged.add(spec, group)
        return merged

    def defaults(self):
        defaults = {}
        for spec in self:
            if spec.default is not Unset:
                defaults.setdefault(spec.key, spec.default)
        return defaults

    def groups(self):
        return {group: tuple(specs) for group, specs in self._groups.items()}

    def aliases(self):
        return tuple(self._aliases)

    def __iter__(self):
        for specs in self._groups.values():
            yield from specs

    def __len__(self):
        return sum(map(len, self._groups.values()))

    def __contains__(self, alias):
        return alias in self._aliases


class Config(dict):
    """
    Per-invocation configuration: configuration key → value.

    Created from a registry's defaults, mutated by option effects in encounter
    order, read by the command, then dropped.
    """

    @classmethod
    def fresh(cls, registry, /, **overrides):
        config = cls(registry.defaults())
        config.update(overrides)
        return config


class ParseResult(NamedTuple):
    """
    Outcome of parse_options().

    - config: the mutated Config.
    - remaining: tokens not consumed as switches or switch values, in order.
    - unknown: (position, token) for each unrecognized switch-looking token.
    - faults: user errors found while parsing (not raised).
    """
    config: Config
    remaining: tuple[str, ...]
    unknown: tuple[tuple[int, str], ...]
    faults: tuple[Exception, ...]


def _looks_like_switch(token):
    return token.startswith("-") and token != "-" and not _NUMBER.fullmatch(token)


def parse_options(tokens, registry, config=None, *, index=1):
    """
    Apply all recognized switches in `tokens` to `config`.

    parameters
    - tokens: Iterable[str]
      the options region (no '--' terminator inside).
    - registry: OptionRegistry
      the active switches (global ones plus the command's own, when resolved).
    - config: Config | None
      configuration to mutate; a fresh one from the registry defaults when None.
    - index: int (keyword-only)
      1-based position of the first token in the original argv, used in messages.

    returns
    - ParseResult(config, remaining, unknown, faults)
    """
    config = Config.fresh(registry) if config is None else config
    remaining = []
    unknown = []
    faults = []

    queue = deque(tokens)
    position = index - 1
    # configuration key → spec that last wrote it
    writers = {}

    def effect(spec, value=None):
        spec.apply(config, value, repeat=writers.get(spec.key) is spec)
        writers[spec.key] = spec

    def take(spec, name, inline, start):
        # Resolve the value of a value-taking switch: inline text, else the next token.
        nonlocal position
        if inline is None:
            if not queue:
                faults.append(OptionValueRequiredError(
                    "option %r at %s position requires a value" % (name, ordinal(start)),
                    hint="pass it inline (%s=%s) or as the next argument" % (name, spec.metavar)
                         if name.startswith("--") else
                         "pass it right after the switch (%s%s) or as the next argument" % (name, spec.metavar),
                    input=name,
                    index=start,
                ))
                return
            inline = queue.popleft()
            position += 1
        if not spec.accepts(inline):
            faults.append(InvalidChoiceError(
                "invalid value %r for option %r at %s position" % (inline, name, ordinal(start)),
                hint="choose one of: %s" % ", ".join(map(str, spec.choices)),
                input=name,
                value=inline,
                choices=spec.choices,
                index=start,
            ))
            return
        effect(spec, inline)

    while queue:
        token = queue.popleft()
        position += 1
        start = position

        if token.startswith("--") and len(token) > 2:
            name, assigned, value = token.partition("=")
            spec = registry.lookup(name)
            if spec is None:
                remaining.append(token)
                unknown.append((start, token))
            elif spec.takes_value:
                take(spec, name, value if assigned else None, start)
            elif assigned:
                faults.append(FlagAssignmentError(
                    "flag %r at %s position cannot have a value" % (name, ordinal(start)),
                    hint="remove everything from '=' (for example: %s)" % name,
                    input=name,
                    index=start,
                ))
            else:
                effect(spec)

        elif token.startswith("-") and len(token) > 1 and token[1] != "-":
            # Check the whole cluster before applying anything from it.
            cluster = []
            inline = None
            for offset, char in enumerate(token[1:], 2):
                spec = registry.lookup("-" + char)
                if spec is None:
                    cluster = None
                    break
                cluster.append(spec)
                if spec.takes_value:
                    inline = token[offset:] or None
                    break

            if cluster is None:
                remaining.append(token)
                if _looks_like_switch(token):
                    unknown.append((start, token))
                continue

            *flags, last = cluster
            for spec in flags:
                effect(spec)
            if last.takes_value:
                take(last, "-" + token[len(cluster)], inline, start)
            else:
                effect(last)

        else:
            remaining.append(token)

    return ParseResult(config, tuple(remaining), tuple(unknown), tuple(faults))


def unknown_option_error(token, position, registry, /, route=""):
    """
    Build the fault reported for an unrecognized switch on a strict command.
    """
    name = token.partition("=")[0]
    suggestions = suggest(name, registry.aliases())
    help = f"{route} --help".strip()
    try:
        hint = "did you mean %r? you can also run '%s' to see all options" % (suggestions[0], help)
    except IndexError:
        hint = "try '%s' to see all available options" % help
    return UnknownOptionError(
        "unknown option %r at %s position" % (name, ordinal(position)),
        hint=hint,
        input=name,
        suggestions=suggestions,
        index=position,
    )


def common_options():
    """
    Build the registry of switches understood by every application.

    - -h|--help, --version, -i|--interactive (shown in the help trailer).
    - --loglevel <level>, -s|--silent, -q|--quiet, -v|--verbose, -d|--debug, --trace.
    - -C <folder> to run the command from another folder.
    """
    return OptionRegistry((
        OptionSpec("-h", "--help", key="is_help", descr="Quick help", hidden=True),
        OptionSpec("--version", key="is_version", descr="Show version", hidden=True),
        OptionSpec("-i", "--interactive", key="is_interactive", descr="Enter interactive mode", hidden=True),
        OptionSpec(
            "--loglevel",
            key="log_level",
            action="store",
            choices=LEVELS,
            default=DEFAULT_LEVEL,
            metavar="<level>",
            descr="Set log level (%s)" % "|".join(LEVELS),
        ),
        OptionSpec(
            "-s", "--silent",
            key="log_level", action="store_const", const="silent",
            descr="Disable all messages (--loglevel silent)",
        ),
        OptionSpec(
            "-q", "--quiet",
            key="log_level", action="store_const", const="warn",
            descr="Mostly quiet, warnings and errors (--loglevel warn)",
        ),
        OptionSpec(
            "-v", "--verbose",
            key="log_level", action="escalate", const=("info", "verbose"),
            descr="Informative (--loglevel info), -vv for verbose",
        ),
        OptionSpec(
            "-d", "--debug",
            key="log_level", action="escalate", const=("debug", "trace"),
            descr="Debug messages (--loglevel debug), -dd for trace",
        ),
        OptionSpec(
            "--trace",
            key="log_level", action="store_const", const="trace",
            descr="Trace messages (--loglevel trace, -dd)",
        ),
        OptionSpec("-C", key="cwd", action="store", metavar="<folder>", descr="Set current folder"),
    ), title="Common options")


__all__ = (
    "ACTIONS",
    "OptionSpec",
    "OptionRegistry",
    "Config",
    "ParseResult",
    "parse_options",
    "unknown_option_error",
    "common_options",
)

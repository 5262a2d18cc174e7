"""
Helmsman dispatcher: run one invocation from argv to exit code.

What this module provides
- AppContext: process-wide state built once (program name, manifest, command tree,
  common options, consoles, logger) and shared read-only by every invocation.
- Invocation: per-run state handed to the command (fresh Config, resolved path,
  arguments, unconsumed tokens, literal tail).
- Dispatcher: the state machine

      Start → SplitArgs → ResolveCommand → ParseGlobalOptions
            → {EmitVersion | EmitHelp} → ParseCommandOptions → RunCommand → MapOutcome

Phases
- split: argv is cut into leading words, the options region and the '--' tail.
- resolve: the words are matched against the tree; the outcome is a status value.
  A leaf bound by reference is imported here; a failure is kept for later so that
  '--version' still answers.
- parse: the options region is parsed once with the active registry (common
  switches, plus the leaf's own when one was resolved).
- version: '--version' prints the version and exits 0 before anything else is judged.
- help: no words at all, or '--help' without a leaf, shows the application help;
  '--help' with a leaf shows that command's help.
- run: the command gets every token after its path, in order, including the tail.
- outcome: the single place where failures become exit codes
  • user errors are logged; without an explicit code the help is shown again and
    the exit code is 1, otherwise the explicit code is used as is;
  • anything else is a defect: full traceback on stderr and exit code 2.

Notes
- Dispatchers never call the exit sink; they return the code. The caller (the
  application, a REPL, a test) decides what to do with it.
"""
import os
import sys
import time

from rich.console import Console
from rich.traceback import Traceback

from .arguments import split
from .commands import Status, resolve
from .faults import (
    AmbiguousCommandError,
    ExitCode,
    IncompleteCommandError,
    UnknownCommandError,
    is_user_error,
)
from .help import render_command_help, render_main_help
from .logger import DEFAULT_LEVEL, Logger
from .options import Config, common_options, parse_options, unknown_option_error
from .utils import suggest


class AppContext:
    """
    Process-wide application state, constructed once and passed by reference.

    Parameters
    - prog: str | None
      program name; defaults to __prog__ on __main__, else the basename of
      sys.argv[0] without its extension.
    - tree: CommandTree
    - manifest: Manifest | None
    - options: OptionRegistry | None
      common switches; common_options() when omitted.
    - stdout, stderr: Console | None
    - log: Logger | None
      defaults to a Logger writing to the two consoles.

    Every leaf bound eagerly is checked for option aliases clashing with the common
    ones; leaves bound by reference are checked when first resolved.
    """

    def __init__(self, prog, tree, manifest=None, options=None, *, stdout=None, stderr=None, log=None):
        if prog is None:
            prog = getattr(__import__("__main__"), "__prog__", None)
        if prog is None:
            prog = os.path.basename(sys.argv[0]).split(".")[0] or "helmsman"
        self.prog = prog
        self.tree = tree
        self.manifest = manifest
        self.options = common_options() if options is None else options
        self.stdout = stdout if stdout is not None else Console()
        self.stderr = stderr if stderr is not None else Console(stderr=True)
        self.log = log if log is not None else Logger(self.stdout, self.stderr)

        for node in tree.walk():
            if not isinstance(node.command, str):
                self.activate(node.command)

    @property
    def version(self):
        return self.manifest.version if self.manifest is not None else "0.0.0"

    def activate(self, command):
        """
        Return the registry active for `command`: the common switches followed
        by the command's own. Alias clashes raise ValueError.
        """
        own = getattr(command, "options", None)
        if own is None or not len(own):
            return self.options
        return self.options.merge(own)


class Invocation:
    """
    State of one run, handed to the command implementation.

    Attributes
    - app: AppContext
    - config: Config, fresh for this run
    - path: full command names ('remote', 'add'), never the abbreviations typed
    - node / command: the resolved node and its implementation (None when unresolved)
    - args: every token after the command path, in order, including the '--' tail
    - remaining: leftover words and tokens not consumed as switches, in order
    - tail: tokens after '--'
    - terminated: True when a '--' was given, even with nothing after it
    """

    def __init__(
            self, app, config, *, path=(), node=None, command=None, args=(), remaining=(), tail=(), terminated=False
    ):
        self.app = app
        self.config = config
        self.path = tuple(path)
        self.node = node
        self.command = command
        self.args = tuple(args)
        self.remaining = tuple(remaining)
        self.tail = tuple(tail)
        self.terminated = bool(terminated)
        self.started = time.monotonic()

    @property
    def log(self):
        return self.app.log

    @property
    def route(self):
        return " ".join((self.app.prog, *self.path))

    @property
    def cwd(self):
        """
        Folder the command works in: '-C <folder>' relative to the process
        folder, or the process folder itself.
        """
        folder = self.config.get("cwd")
        return os.path.abspath(folder) if folder else os.getcwd()

    def help(self):
        """
        Print the help matching how far resolution went.
        """
        if self.command is not None:
            text = render_command_help(self.app, self.node, self.command)
        else:
            text = render_main_help(self.app, self.node)
        self.app.stdout.print(text, highlight=False, soft_wrap=True)

    def done(self):
        """
        Report the elapsed time of the command, at info level.
        """
        self.log.info("'%s' completed in %.3f sec.", self.route, time.monotonic() - self.started)


class Dispatcher:
    """
    Run invocations against one AppContext, one at a time.
    """

    def __init__(self, app):
        self.app = app

    async def dispatch(self, argv):
        """
        Process `argv` (program name excluded) and return the exit code.
        """
        app = self.app
        log = app.log
        argv = tuple(argv)

        # SplitArgs
        regions = split(argv)

        # ResolveCommand
        resolution = resolve(regions.words, app.tree.root)
        command = None
        registry = app.options
        failure = None
        if resolution.found:
            try:
                command = resolution.node.load()
                registry = app.activate(command)
            except Exception as error:
                failure = error

        # ParseGlobalOptions (and the command's own, once resolved)
        config = Config.fresh(registry)
        result = parse_options(regions.options, registry, config, index=len(regions.words) + 1)
        log.level = config.get("log_level", DEFAULT_LEVEL)

        for index, arg in enumerate(argv):
            log.trace("main arg%d: '%s'", index, arg)
        log.trace("config: %r", dict(config))

        invocation = Invocation(
            app,
            config,
            path=resolution.path,
            node=resolution.node,
            command=command,
            args=argv[len(resolution.path):],
            remaining=resolution.leftover + result.remaining if resolution.found else result.remaining,
            tail=regions.tail,
            terminated=regions.terminated,
        )

        # EmitVersion
        if config.get("is_version"):
            app.stdout.print(app.version, markup=False, emoji=False, highlight=False, soft_wrap=True)
            return ExitCode.SUCCESS

        try:
            # EmitHelp
            if resolution.status is Status.EMPTY or (not resolution.found and config.get("is_help")):
                invocation.help()
                return ExitCode.SUCCESS

            if not resolution.found:
                raise self._routing_error(resolution)
            if failure is not None:
                raise failure

            # ParseCommandOptions
            if config.get("is_help"):
                invocation.help()
                return ExitCode.SUCCESS
            if result.faults:
                raise result.faults[0]
            if result.unknown and not getattr(command, "forwarding", False):
                position, token = result.unknown[0]
                raise unknown_option_error(token, position, registry, invocation.route)

            # RunCommand
            log.debug("command(s): '%s'", " ".join(invocation.path))
            for index, arg in enumerate(invocation.args):
                log.trace("cmd arg%d: '%s'", index, arg)
            log.debug("'%s' started", invocation.route)
            code = await command.run(invocation, invocation.args)
            if code is None:
                code = ExitCode.SUCCESS
            if isinstance(code, bool) or not isinstance(code, int):
                raise TypeError(f"command '{invocation.route}' returned {code!r} instead of an exit code")
            log.debug("'%s' - returned %d", invocation.route, code)
            return code

        except Exception as error:
            # MapOutcome
            return self._outcome(error, invocation)

    def _routing_error(self, resolution):
        route = " ".join((self.app.prog, *resolution.path))
        match resolution.status:
            case Status.AMBIGUOUS:
                word = resolution.leftover[0]
                return AmbiguousCommandError(
                    "command %r is ambiguous, it may be %s" % (
                        " ".join((*resolution.path, word)),
                        ", ".join(map(repr, resolution.candidates)),
                    ),
                    hint="type more letters to pick one (for example: %s %s)" % (route, resolution.candidates[0]),
                    input=word,
                    candidates=resolution.candidates,
                )
            case Status.INCOMPLETE:
                expected = tuple(resolution.node.children)
                return IncompleteCommandError(
                    "command %r needs a subcommand" % " ".join(resolution.path),
                    hint="add one of: %s" % ", ".join(expected),
                    candidates=expected,
                )
            case _:
                word = resolution.leftover[0]
                suggestions = suggest(word.lower(), resolution.node.children)
                try:
                    hint = "did you mean %r? you can also run '%s --help' to see all commands" % (suggestions[0], route)
                except IndexError:
                    hint = "try '%s --help' to see all available commands" % route
                return UnknownCommandError(
                    "unknown command %r" % " ".join((*resolution.path, word)),
                    hint=hint,
                    input=word,
                    suggestions=suggestions,
                )

    def _outcome(self, error, invocation):
        log = self.app.log
        if is_user_error(error):
            # User triggered error. Treat it gently.
            hint = getattr(error, "hint", None)
            if hint:
                log.error("%s → %s", error, hint)
            else:
                log.error("%s", error)
            code = getattr(error, "code", None)
            if code is not None and hasattr(code, "normalize"):
                log.debug("fault %s", code.normalize())

            exit_code = getattr(error, "exit_code", None)
            if exit_code is None:
                invocation.help()
                log.verbose("exit(%d)", ExitCode.SYNTAX_ERROR)
                return ExitCode.SYNTAX_ERROR
            log.debug("exit(%d)", exit_code)
            return int(exit_code)

        # System error, probably due to a bug. Show the full traceback.
        self.app.stderr.print(Traceback.from_exception(type(error), error, error.__traceback__))
        return ExitCode.APPLICATION_ERROR


__all__ = (
    "AppContext",
    "Invocation",
    "Dispatcher",
)

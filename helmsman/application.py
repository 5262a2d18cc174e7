"""
Helmsman application: process bootstrap around the dispatcher.

The Application builds the AppContext once (program name, manifest, command tree,
common options, consoles, logger), then either runs the single invocation given on
the command line or, with '-i|--interactive', starts the shell. The resulting
exit code is handed to the exit sink.

    from helmsman import Application, CommandTree, Manifest

    app = Application(
        CommandTree({"build": "mytool.build:command"}),
        Manifest.installed("mytool"),
    )

    if __name__ == "__main__":
        app.start()
"""
import asyncio
import sys

from .arguments import split
from .commands import resolve
from .dispatcher import AppContext, Dispatcher
from .logger import DEFAULT_LEVEL
from .options import parse_options
from .shell import Shell


def _asks_for_shell(config):
    return config is not None and bool(config.get("is_interactive")) and not config.get("is_version")


class Application:
    """
    Parameters
    - tree: CommandTree
    - manifest: Manifest | None
    - prog: str | None
      program name; see AppContext for the default.
    - options: OptionRegistry | None
      common switches, common_options() when omitted.
    - stdout, stderr: Console | None
    - stdin: TextIO | None
      where the shell reads lines from; the terminal when None.
    """

    def __init__(self, tree, manifest=None, *, prog=None, options=None, stdout=None, stderr=None, stdin=None):
        self.context = AppContext(prog, tree, manifest, options, stdout=stdout, stderr=stderr)
        self.dispatcher = Dispatcher(self.context)
        self.stdin = stdin

    def preparse(self, argv):
        """
        Parse the options region of `argv` the way the dispatcher will: with the
        common switches, plus the leaf's own when the words resolve to one.
        Return the Config, or None when the leaf cannot be loaded (the
        dispatcher reports that failure).
        """
        regions = split(argv)
        registry = self.context.options
        resolution = resolve(regions.words, self.context.tree.root)
        if resolution.found:
            try:
                registry = self.context.activate(resolution.node.load())
            except Exception:
                return None
        return parse_options(regions.options, registry).config

    def is_interactive(self, argv):
        """
        Tell whether `argv` asks for the shell.
        """
        return _asks_for_shell(self.preparse(argv))

    async def main(self, argv):
        """
        Run `argv` (program name excluded) and return the exit code.
        """
        argv = tuple(argv)
        config = self.preparse(argv)
        if not _asks_for_shell(config):
            return await self.dispatcher.dispatch(argv)

        self.context.log.level = config.get("log_level", DEFAULT_LEVEL)
        self.context.log.verbose("%s %s, interactive mode", self.context.prog, self.context.version)
        return await Shell(self.context, stream=self.stdin).loop()

    def start(self, argv=None, exit=sys.exit):
        """
        Run the command line and pass the exit code to `exit`.
        """
        argv = sys.argv[1:] if argv is None else argv
        code = asyncio.run(self.main(argv))
        return exit(int(code))


__all__ = (
    "Application",
)

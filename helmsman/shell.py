"""
Helmsman interactive shell: a read-eval-print loop over the dispatcher.

Every line is a complete single-shot invocation without the program name:
it gets a fresh configuration, goes through the same dispatcher and reports
its outcome the same way (user errors logged with help, defects with a
traceback). Nothing carries over from one line to the next except the
application context.

Lines are tokenized with shell quoting rules (shlex), so quoted arguments
keep their spaces. 'exit', 'quit' or end-of-input leave the loop.
"""
import shlex

from .dispatcher import Dispatcher
from .faults import ExitCode

EXIT_WORDS = frozenset(("exit", "quit"))


class Shell:
    """
    Interactive loop bound to one AppContext.

    Parameters
    - app: AppContext
    - stream: TextIO | None
      where lines are read from; the terminal when None.
    """

    def __init__(self, app, *, stream=None):
        self.app = app
        self.dispatcher = Dispatcher(app)
        self.stream = stream

    @property
    def prompt(self):
        return f"{self.app.prog}> "

    def read(self):
        """
        Read one line, or return None at end of input.
        """
        try:
            line = self.app.stdout.input(self.prompt, markup=False, emoji=False, stream=self.stream)
        except EOFError:
            self.app.stdout.print()
            return None
        if self.stream is not None and not line:
            self.app.stdout.print()
            return None
        return line

    async def execute(self, line):
        """
        Run one input line and return its exit code (None for blank lines).
        """
        try:
            args = shlex.split(line)
        except ValueError as error:
            self.app.log.error("cannot parse the line: %s", str(error).lower())
            return ExitCode.SYNTAX_ERROR
        if not args:
            return None
        return await self.dispatcher.dispatch(args)

    async def loop(self):
        """
        Read and run lines until the user leaves. Leaving is always a success.
        """
        self.app.log.always("Type 'exit' or 'quit' to leave, or press Ctrl-D.")
        while True:
            try:
                line = self.read()
            except KeyboardInterrupt:
                self.app.stdout.print()
                continue
            if line is None or line.strip().lower() in EXIT_WORDS:
                break

            code = await self.execute(line)
            if code is not None:
                self.app.log.verbose("exit(%d)", code)

        self.app.log.always("Done.")
        return ExitCode.SUCCESS


__all__ = (
    "Shell",
)

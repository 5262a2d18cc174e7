"""
Helmsman log sink: leveled messages written through rich consoles.

Levels
- Thresholds, from quietest to loudest: silent < warn < info < verbose < debug < trace.
  The default threshold is "warn".
- Message severities: error, warn, info, verbose, debug, trace, plus "always" which
  bypasses the threshold entirely (used for the actual output of a command).

Streams
- error and warn go to the stderr console, everything else to the stdout console.
- Messages are printed verbatim: rich markup, highlighting and wrapping are disabled,
  so a version string or a path never gets restyled or split.

Formatting
- Each method takes a message and optional positional arguments; when arguments are
  given the message is %-formatted lazily, only if the message is going to be shown.
"""
from rich.console import Console

LEVELS = ("silent", "warn", "info", "verbose", "debug", "trace")
DEFAULT_LEVEL = "warn"

_SEVERITIES = {
    "error": 1,
    "warn": 1,
    "info": 2,
    "verbose": 3,
    "debug": 4,
    "trace": 5,
}

_PREFIXES = {
    "error": "error: ",
    "warn": "warning: ",
    "debug": "debug: ",
    "trace": "trace: ",
}


class Logger:
    """
    Leveled logger with a settable threshold.

    Parameters
    - stdout: Console | None
      console for informative output; a default rich Console when omitted.
    - stderr: Console | None
      console for warnings and errors; a default stderr Console when omitted.
    - level: str
      initial threshold, one of LEVELS.
    """

    def __init__(self, stdout=None, stderr=None, level=DEFAULT_LEVEL):
        self.stdout = stdout if stdout is not None else Console()
        self.stderr = stderr if stderr is not None else Console(stderr=True)
        self.level = level

    @property
    def level(self):
        return self._level

    @level.setter
    def level(self, level):
        if level not in LEVELS:
            raise ValueError(f"log level must be one of {'|'.join(LEVELS)}, not {level!r}")
        self._level = level

    def is_enabled(self, severity):
        return _SEVERITIES[severity] <= LEVELS.index(self._level)

    def _write(self, severity, message, args):
        if not self.is_enabled(severity):
            return
        if args:
            message = message % args
        console = self.stderr if severity in ("error", "warn") else self.stdout
        console.print(_PREFIXES.get(severity, "") + str(message), markup=False, emoji=False, highlight=False, soft_wrap=True)

    def trace(self, message, *args):
        self._write("trace", message, args)

    def debug(self, message, *args):
        self._write("debug", message, args)

    def verbose(self, message, *args):
        self._write("verbose", message, args)

    def info(self, message, *args):
        self._write("info", message, args)

    def warn(self, message, *args):
        self._write("warn", message, args)

    def error(self, message, *args):
        self._write("error", message, args)

    def always(self, message, *args):
        if args:
            message = message % args
        self.stdout.print(str(message), markup=False, emoji=False, highlight=False, soft_wrap=True)


__all__ = (
    "LEVELS",
    "DEFAULT_LEVEL",
    "Logger",
)

"""
Helmsman faults (user errors, exit codes) and their classification.

Scope
- ExitCode: the process exit codes every invocation ends with.
- FaultCode: canonical, stable numeric identifiers for all user-facing issues.
  Codes are grouped by domain to keep copy consistent and make logs/searches predictable.
- CommandError: base type for user-triggered failures. It carries a message, a fault
  code, an optional hint and an optional explicit exit code.
- is_user_error(): the single test the dispatcher uses to tell user-triggered failures
  from internal defects.

Classification
- Anything exposing a true `__user__` attribute is user-triggered. CommandError and
  all its subclasses set it; third-party exceptions may opt in by defining it too.
- Every other exception is a system error: the dispatcher shows the full traceback
  and reports ExitCode.APPLICATION_ERROR, whatever code the exception may carry.

Integration
- Parsers and resolvers never raise these; they return them as values and the
  dispatcher decides whether to raise, show help, or both.
- Command implementations raise them directly (for example InputError for a missing
  input file); the dispatcher maps them to exit codes.
"""
from enum import IntEnum
from types import MappingProxyType

from .utils import Unset, coalesce


class ExitCode(IntEnum):
    """
    process exit codes.

    - SUCCESS: the command completed.
    - SYNTAX_ERROR: bad command line (unknown command, bad option, ...).
    - APPLICATION_ERROR: internal defect; reserved for system errors.
    - INPUT_ERROR: no input file, wrong input format, ... (used by commands).
    - OUTPUT_ERROR: cannot create or write output (used by commands).
    """
    SUCCESS           = 0
    SYNTAX_ERROR      = 1
    APPLICATION_ERROR = 2
    INPUT_ERROR       = 3
    OUTPUT_ERROR      = 4


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, AMBIGUOUS_COMMAND, INCOMPLETE_COMMAND
    - switches (options/flags) (1111x/1112x)
      • UNKNOWN_SWITCH, FLAG_ASSIGNMENT, OPTION_VALUE_REQUIRED, INVALID_CHOICE
    - delegated errors, raised by command implementations (1113x)
      • DELEGATED_ERROR, INPUT_ERROR, OUTPUT_ERROR
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND       = 11101
    AMBIGUOUS_COMMAND     = 11102
    INCOMPLETE_COMMAND    = 11103

    # --- switch/flag/option errors (11xxx) ---
    UNKNOWN_SWITCH        = 11112
    FLAG_ASSIGNMENT       = 11113
    OPTION_VALUE_REQUIRED = 11117
    INVALID_CHOICE        = 11124

    # --- delegated errors (11xxx) ---
    DELEGATED_ERROR       = 11131
    INPUT_ERROR           = 11132
    OUTPUT_ERROR          = 11133

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandError(Exception):
    """
    user-triggered failure.

    parameters
    - message: str
      one-line, lowercased description of what went wrong.
    - code: FaultCode
      stable identifier; defaults to the class-level `code`.
    - hint: str
      a single actionable suggestion, shown after the message.
    - exit_code: int
      explicit process exit code. when omitted the dispatcher re-displays the
      command help and reports ExitCode.SYNTAX_ERROR.
    - options: any extra context for renderers and tests (input, index, candidates...).
    """
    __user__ = True

    code = FaultCode.DELEGATED_ERROR
    exit_code = None

    def __init__(self, message, /, *, code=Unset, hint=Unset, exit_code=Unset, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        exit_code = coalesce(exit_code, type(self).exit_code)
        if exit_code is not None and (isinstance(exit_code, bool) or not isinstance(exit_code, int)):
            raise TypeError(f"{type(self).__name__} exit_code must be an integer")
        super().__init__(message)
        self.message = message
        self.code = coalesce(code, type(self).code)
        self.hint = coalesce(hint)
        self.exit_code = exit_code
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message


class UnknownCommandError(CommandError):
    code = FaultCode.UNKNOWN_COMMAND
class AmbiguousCommandError(CommandError):
    code = FaultCode.AMBIGUOUS_COMMAND
class IncompleteCommandError(CommandError):
    code = FaultCode.INCOMPLETE_COMMAND
class UnknownOptionError(CommandError):
    code = FaultCode.UNKNOWN_SWITCH
class FlagAssignmentError(CommandError):
    code = FaultCode.FLAG_ASSIGNMENT
class OptionValueRequiredError(CommandError):
    code = FaultCode.OPTION_VALUE_REQUIRED
class InvalidChoiceError(CommandError):
    code = FaultCode.INVALID_CHOICE


class InputError(CommandError):
    code = FaultCode.INPUT_ERROR
    exit_code = ExitCode.INPUT_ERROR


class OutputError(CommandError):
    code = FaultCode.OUTPUT_ERROR
    exit_code = ExitCode.OUTPUT_ERROR


def is_user_error(error, /):
    """
    tell a user-triggered failure from an internal one.

    the marker is looked up on the error itself, so foreign exception types
    can declare `__user__ = True` to be treated gently.
    """
    return getattr(error, "__user__", False) is True


__all__ = (
    "ExitCode",
    "FaultCode",
    "CommandError",
    "UnknownCommandError",
    "AmbiguousCommandError",
    "IncompleteCommandError",
    "UnknownOptionError",
    "FlagAssignmentError",
    "OptionValueRequiredError",
    "InvalidChoiceError",
    "InputError",
    "OutputError",
    "is_user_error",
)

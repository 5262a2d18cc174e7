"""
Helmsman argument splitting: partition an argv-like sequence into regions.

What this module provides
- split(argv): cut the raw tokens (program name excluded) into three regions
  without interpreting any option:
  • words   → the leading command-path candidates,
  • options → everything after the words and before the first '--',
  • tail    → everything after the first '--', passed through unparsed.
- is_word(token): the test used for the leading region.

Grammar
- A word starts with a letter and contains only letters and inner dashes
  ("build", "self-update"; not "-v", "2x", "trailing-").
- The word scan stops at the first token that is not a word, including any
  token starting with '-'. The first '--' both stops the scan and opens the
  tail, even when it appears where a command would be expected.

Quick example
    >>> split(["remote", "add", "-v", "origin", "--", "-x"])
    Split(words=('remote', 'add'), options=('-v', 'origin'), tail=('-x',), terminated=True)
"""
import re
from typing import NamedTuple

TERMINATOR = "--"

_WORD = re.compile(r"[a-z](?:[a-z-]*[a-z])?", re.IGNORECASE)


class Split(NamedTuple):
    """
    Regions of an argument vector.

    - words: leading word tokens, in original case.
    - options: tokens between the words and the terminator.
    - tail: tokens after the terminator.
    - terminated: True when a '--' was present (the tail may still be empty).
    """
    words: tuple[str, ...]
    options: tuple[str, ...]
    tail: tuple[str, ...]
    terminated: bool


def is_word(token):
    return _WORD.fullmatch(token) is not None


def split(argv):
    argv = tuple(argv)
    try:
        stop = argv.index(TERMINATOR)
    except ValueError:
        head, tail, terminated = argv, (), False
    else:
        head, tail, terminated = argv[:stop], argv[stop + 1:], True

    count = 0
    for token in head:
        if not is_word(token):
            break
        count += 1

    return Split(head[:count], head[count:], tail, terminated)


__all__ = (
    "TERMINATOR",
    "Split",
    "is_word",
    "split",
)

"""Reading and parsing of console command lines.

A command line is a sequence of words terminated by ``;``.  Each word is
either a bare key or ``key=value``; values may be double-quoted to hold
spaces or semicolons.
"""

from __future__ import annotations

import enum
from typing import Callable, List, Optional, Tuple, Union

MAX_PARAMS = 20
_OBSOLETE_KEY = "mid"

Param = Tuple[str, Optional[str]]
Getc = Callable[[], Union[str, int, None]]


class LineStatus(enum.Enum):
    """Outcome of feeding characters into a :class:`CommandLineBuffer`."""

    DONE = 0
    ERROR = 1
    INCOMPLETE = 2
    LINE_BUF_FULL = 3


class CommandLineSyntaxError(ValueError):
    """Raised for a command line that cannot be parsed."""


def _next_char(getc: Getc) -> Optional[str]:
    """Fetch one character; None means no input is available right now."""
    c = getc()
    if c is None or c == "" or c == -1:
        return None
    if isinstance(c, int):
        return chr(c)
    return c


class CommandLineBuffer:
    """Collects characters until a complete command line has arrived.

    Backspace removes the last character, CR or LF discards the partial
    line, and ``;`` outside double quotes terminates the line.
    """

    def __init__(self, size: int = 0):
        self.size = size
        self._chars: List[str] = []
        self._quote_count = 0

    def __len__(self) -> int:
        return len(self._chars)

    def _has_room(self) -> bool:
        return len(self._chars) + 1 < self.size

    def _reset(self) -> None:
        self._chars.clear()
        self._quote_count = 0

    def feed(self, getc: Getc) -> Tuple[LineStatus, Optional[str]]:
        """Read characters from GETC until a line completes or input runs dry.

        Returns the status and, for ``DONE``, the line without its terminator.
        """
        if not self._has_room():
            return LineStatus.LINE_BUF_FULL, None

        while (c := _next_char(getc)) is not None:
            if c in ("\r", "\n"):
                self._reset()
            elif c == "\b":
                if self._chars and self._chars.pop() == '"':
                    self._quote_count -= 1
            else:
                if c == '"':
                    self._quote_count += 1
                if c == ";" and self._quote_count % 2 == 0:
                    line = "".join(self._chars)
                    self._reset()
                    return LineStatus.DONE, line
                self._chars.append(c)

            if not self._has_room():
                return LineStatus.LINE_BUF_FULL, None

        return LineStatus.INCOMPLETE, None

    def enlarge(self) -> None:
        """Grow the capacity: 64 for a fresh buffer, else by 32."""
        self.size = self.size + 32 if self.size else 64


class CommandReader:
    """Reads complete command lines from a character source."""

    def __init__(self, getc: Getc):
        self._getc = getc
        self._buffer = CommandLineBuffer()
        self._buffer.enlarge()

    def read_command_line(self) -> Optional[str]:
        """Return the next complete, non-empty line, or None if none is ready."""
        while True:
            status, line = self._buffer.feed(self._getc)
            if status is LineStatus.LINE_BUF_FULL:
                self._buffer.enlarge()
                continue
            if status is LineStatus.DONE and line and line[0] not in "\r\n":
                return line
            return None


def parse_command_line(line: str) -> List[Param]:
    """Split LINE into ``(key, value)`` pairs; value is None for a bare key.

    The obsolete global option ``mid=...`` is dropped.  Raises
    :class:`CommandLineSyntaxError` on a malformed value or too many words.
    """
    line = line.split("\0", 1)[0]
    n = len(line)
    pos = 0
    params: List[Param] = []

    while True:
        if len(params) >= MAX_PARAMS:
            raise CommandLineSyntaxError(f"more than {MAX_PARAMS - 1} parameters")

        while pos < n and line[pos] == " ":
            pos += 1
        if pos >= n:
            return params

        start = pos
        while pos < n and line[pos] not in " =":
            pos += 1
        key = line[start:pos]

        if pos >= n or line[pos] == " ":
            params.append((key, None))
            continue

        pos += 1  # skip '='
        if pos < n and line[pos] in "; ":
            raise CommandLineSyntaxError(f"missing value for {key!r}")

        quoted = pos < n and line[pos] == '"'
        if quoted:
            pos += 1
        if pos >= n:
            raise CommandLineSyntaxError(f"missing value for {key!r}")

        if quoted:
            end = line.find('"', pos)
            if end < 0:
                raise CommandLineSyntaxError(f"unbalanced quote in value of {key!r}")
        else:
            end = pos
            while end < n and line[end] not in " =":
                end += 1

        value = line[pos:end]
        pos = end + 1 if end < n else end

        if key != _OBSOLETE_KEY:
            params.append((key, value))


def asc2bool(value: Optional[str]) -> bool:
    """Interpret a 0/1 parameter value; a missing value means True."""
    if value is None:
        return True
    if value.startswith("0"):
        return False
    if value.startswith("1"):
        return True
    raise ValueError(f"not a boolean value: {value!r}")
"""Character based text output and input with number formatting helpers."""

from __future__ import annotations

import enum
import math
import string
import struct
import sys
import threading
from typing import Callable, Iterable, Optional, Union

_DIGITS = string.digits + string.ascii_lowercase

Putc = Callable[[str], object]
Getc = Callable[[], Union[str, int, None]]


class Verbosity(enum.IntEnum):
    """Verbosity levels, ordered from silent to most talkative."""

    NONE = 0
    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    VERBOSE = 5


def _wrap(value: int, bits: int, signed: bool) -> int:
    mask = (1 << bits) - 1
    value &= mask
    if signed and value >> (bits - 1):
        value -= 1 << bits
    return value


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _itoa(n: int, radix: int) -> str:
    if not 2 <= radix <= 36:
        raise ValueError(f"radix must be between 2 and 36, not {radix}")
    if n == 0:
        return "0"
    sign = "-" if n < 0 else ""
    n = abs(n)
    digits = []
    while n:
        n, rem = divmod(n, radix)
        digits.append(_DIGITS[rem])
    return sign + "".join(reversed(digits))


def _stdout_putc(c: str) -> None:
    sys.stdout.write(c)


def _stdin_getc() -> Optional[str]:
    return sys.stdin.read(1) or None


class TextIO:
    """Text console built on a put-character and a get-character function.

    PUTC receives one character; returning -1 signals a failed write.
    GETC returns one character (as str or code point), or None, "" or -1
    when no input is available.  Without functions, standard output and
    standard input are used.
    """

    def __init__(self, putc: Optional[Putc] = None, getc: Optional[Getc] = None,
                 verbose: Verbosity = Verbosity.INFO):
        self._putc = putc if putc is not None else _stdout_putc
        self._getc = getc if getc is not None else _stdin_getc
        self.verbose = Verbosity(verbose)
        self._lock = threading.RLock()

    def is_verbose(self, level) -> bool:
        return self.verbose >= level

    # ------------------------------------------------------------ basics

    def _emit(self, c: str) -> None:
        if self._putc(c) == -1:
            raise OSError(f"cannot write character {c!r}")

    def _fetch(self) -> Optional[str]:
        c = self._getc()
        if c is None or c == "" or c == -1:
            return None
        if isinstance(c, int):
            return chr(c)
        return c

    def putc(self, c: str) -> None:
        """Write one character.  Raises OSError if the output refuses it."""
        if len(c) != 1:
            raise ValueError("putc takes exactly one character")
        with self._lock:
            self._emit(c)

    def getc(self) -> Optional[str]:
        """Read one character, or None if none is available."""
        with self._lock:
            return self._fetch()

    def putlf(self) -> None:
        self.putc("\n")

    def puts(self, s: str) -> None:
        with self._lock:
            for c in s:
                self._emit(c)

    def write(self, s: str) -> int:
        """Write S and return the number of characters written."""
        self.puts(s)
        return len(s)

    def getline(self, size: int) -> Optional[str]:
        """Read characters up to ';' (not included), at most SIZE - 1 of them.

        Returns None if input runs out before the line is complete.
        """
        chars = []
        with self._lock:
            while len(chars) + 1 < size:
                c = self._fetch()
                if c is None:
                    return None
                if c == ";":
                    break
                chars.append(c)
        return "".join(chars)

    # -------------------------------------------------------- formatting

    def _comma(self, comma: bool) -> None:
        if comma:
            self.puts(", ")

    def print_hex_8(self, n: int, comma: bool = False) -> None:
        self.puts(f"0x{n & 0xFF:02x}")
        self._comma(comma)

    def print_hex_16(self, n: int, comma: bool = False) -> None:
        self.puts(f"0x{n & 0xFFFF:04x}")
        self._comma(comma)

    def print_hex_32(self, n: int, comma: bool = False) -> None:
        self.puts(f"0x{n & 0xFFFFFFFF:08x}")
        self._comma(comma)

    def print_hex(self, n: int, prefix: bool = False) -> None:
        if prefix:
            self.puts("0x")
        self.puts(f"{n & 0xFFFFFFFF:x}")

    def print_dec_16(self, n: int, comma: bool = False) -> None:
        self.puts(str(_wrap(n, 16, True)))
        self._comma(comma)

    def print_dec_32(self, n: int, comma: bool = False) -> None:
        self.puts(str(_wrap(n, 32, True)))
        self._comma(comma)

    def print_float(self, f: float, n: int) -> None:
        """Print F with N fractional digits, truncated, without zero padding."""
        f = _f32(f)
        lop = _wrap(math.trunc(f), 16, True)
        self.print_dec_16(lop)
        self.putc(".")
        f = _f32(f - lop)
        mult = _wrap((-1 if lop < 0 else 1) * 10 ** n, 32, True)
        rop = _wrap(math.trunc(_f32(f * mult)), 32, False)
        self.print_dec_32(rop)

    def putn(self, n: int, radix: int = 10) -> None:
        self.puts(_itoa(n, radix))

    def putl(self, n: int, radix: int = 10) -> None:
        self.puts(_itoa(_wrap(n, 32, True), radix))

    def putd(self, n: int) -> None:
        self.putn(n, 10)

    def putld(self, n: int) -> None:
        self.putl(n, 10)

    def putx8(self, n: int) -> None:
        self.puts(f"{n & 0xFF:02x}")

    def print_bcd(self, bcd: int) -> None:
        self.puts(_itoa((bcd >> 4) & 0x0F, 16))
        self.puts(_itoa(bcd & 0x0F, 16))

    def print_array_8(self, data: Iterable[int]) -> None:
        for b in data:
            self.print_hex_8(b, True)
        self.putlf()

    def print_array_8_inv(self, data: Iterable[int]) -> None:
        for b in data:
            self.print_hex_8(~b, True)
        self.putlf()
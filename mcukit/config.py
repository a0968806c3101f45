"""Reading and saving configuration values in the key/value store."""

from __future__ import annotations

import re
import string
import struct
from typing import Callable, Optional, TypeVar, Union

from .kvs import KvsError, KvsHandle, KvsType, OpenMode, open_store
from .settings import Settings, SettingType

T = TypeVar("T")

_FLOAT = struct.Struct("<f")
_FLOAT_RE = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_DIGITS = string.digits + string.ascii_lowercase


def _strtol(text: str, base: int = 10) -> int:
    """Parse the leading integer of TEXT the way strtol does; 0 if none."""
    rest = text.lstrip()
    sign = 1
    if rest[:1] in ("+", "-"):
        sign = -1 if rest[0] == "-" else 1
        rest = rest[1:]
    has_hex_prefix = rest[:2].lower() == "0x" and rest[2:3].lower() in string.hexdigits.lower() and rest[2:3] != ""
    if base in (0, 16) and has_hex_prefix:
        rest, base = rest[2:], 16
    elif base == 0:
        base = 8 if rest.startswith("0") else 10
    value = 0
    for ch in rest.lower():
        digit = _DIGITS.find(ch)
        if digit < 0 or digit >= base:
            break
        value = value * base + digit
    return sign * value


def _stof(text: str) -> float:
    match = _FLOAT_RE.match(text)
    return float(match.group(0)) if match else 0.0


def _to_i8(value: int) -> int:
    return (value + 128) % 256 - 128


class ConfigStore:
    """Configuration values kept in the store file at PATH.

    Reads fall back to their default when the store or the key is missing;
    saves raise :class:`~mcukit.kvs.KvsError` when the store cannot be written.
    """

    def __init__(self, path):
        self.path = path

    def _read(self, fn: Callable[[KvsHandle], Optional[T]]) -> Optional[T]:
        try:
            handle = open_store(self.path, OpenMode.READ)
        except KvsError:
            return None
        with handle:
            return fn(handle)

    def _write(self, fn: Callable[[KvsHandle], None]) -> None:
        with open_store(self.path, OpenMode.WRITE) as handle:
            fn(handle)
            handle.commit()

    # ------------------------------------------------------------- reads

    def read_str(self, key: str, size: Optional[int] = None, default=None):
        value = self._read(lambda h: h.get_str(key, size))
        return default if value is None else value

    def read_blob(self, key: str, size: Optional[int] = None, default=None):
        value = self._read(lambda h: h.get_blob(key, size))
        return default if value is None else value

    def read_u32(self, key: str, default: int = 0) -> int:
        value = self._read(lambda h: h.get_int(key, KvsType.U32, default))
        return default if value is None else value

    def read_i8(self, key: str, default: int = 0) -> int:
        value = self._read(lambda h: h.get_int(key, KvsType.I8, default))
        return default if value is None else value

    def read_float(self, key: str, default: float = 0.0) -> float:
        raw = self._read(lambda h: h.get_blob(key, _FLOAT.size))
        return default if raw is None else _FLOAT.unpack(raw)[0]

    def read_item(self, settings: Settings, item, default=None):
        """Read ITEM according to the type SETTINGS gives it."""
        kvs_type = settings.get_kvs_type(item)
        key = settings.get_kvs_key(item)
        if kvs_type == SettingType.U32:
            return self.read_u32(key, default)
        if kvs_type == SettingType.I8:
            return self.read_i8(key, default)
        if kvs_type == SettingType.F:
            return self.read_float(key, default)
        if kvs_type == SettingType.STR:
            return self.read_str(key, None, default)
        if kvs_type == SettingType.BLOB:
            return self.read_blob(key, None, default)
        raise ValueError(f"unhandled setting type {kvs_type.name} for item {item!r}")

    # ------------------------------------------------------------- saves

    def save_str(self, key: str, value: str) -> None:
        self._write(lambda h: h.set_str(key, value))

    def save_blob(self, key: str, data) -> None:
        self._write(lambda h: h.set_blob(key, data))

    def save_u32(self, key: str, value: Union[str, int], base: int = 10) -> None:
        number = _strtol(value, base) if isinstance(value, str) else int(value)
        number %= 1 << 32
        self._write(lambda h: h.set_int(key, KvsType.U32, number))

    def save_i8(self, key: str, value: Union[str, int]) -> None:
        number = _strtol(value, 10) if isinstance(value, str) else int(value)
        number = _to_i8(number)
        self._write(lambda h: h.set_int(key, KvsType.I8, number))

    def save_float(self, key: str, value: Union[str, float]) -> None:
        number = _stof(value) if isinstance(value, str) else float(value)
        self._write(lambda h: h.set_blob(key, _FLOAT.pack(number)))
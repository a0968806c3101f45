"""Key/value store kept in a flat file of fixed-size records.

Every entry starts with a 32-byte header (magic cookie, type, value or
blob length/size, key).  String and blob entries are followed by their
payload.  Entries are never moved: erasing or replacing one only marks
its header as deleted, and deleted slots of fitting size are reused.
"""

from __future__ import annotations

import enum
import os
import struct
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Tuple

MAX_KEY_LEN = 14
COOKIE = 0xBEEF

_DELETED = 0x80
_BLOB_OR_STR_MASK = 0x60
_INT_SIZE_MASK = 0x07
_HEADER = struct.Struct("<HBB4x8s15sx")
HEADER_SIZE = _HEADER.size
_MAX_BLOB_LEN = 0xFFFF
_NO_BEST_MATCH_WASTE = 1000


class KvsType(enum.IntEnum):
    """Type tag stored with every entry."""

    NONE = 0x00
    U8 = 0x01
    I8 = 0x11
    U16 = 0x02
    I16 = 0x12
    U32 = 0x04
    I32 = 0x14
    U64 = 0x08
    I64 = 0x18
    STR = 0x21
    BLOB = 0x42
    ANY = 0xFF


class OpenMode(enum.IntEnum):
    READ = 1
    WRITE = 2
    READ_WRITE = 3


class CallbackResult(enum.IntEnum):
    NO_MATCH = 0
    MATCH = 1
    DONE = 2


class KvsError(Exception):
    """Raised when the store cannot be opened or written."""


class CorruptFileError(KvsError):
    """Raised when a record header carries a bad magic cookie."""


_INT_FORMATS = {
    KvsType.U8: "<B",
    KvsType.I8: "<b",
    KvsType.U16: "<H",
    KvsType.I16: "<h",
    KvsType.U32: "<I",
    KvsType.I32: "<i",
    KvsType.U64: "<Q",
    KvsType.I64: "<q",
}


def _encode_key(key: str) -> bytes:
    return key.encode("utf-8")[:MAX_KEY_LEN]


def _int_format(kvs_type) -> str:
    fmt = _INT_FORMATS.get(KvsType(kvs_type))
    if fmt is None:
        raise ValueError(f"{KvsType(kvs_type).name} is not an integer type")
    return fmt


@dataclass
class _Record:
    kvs_type: int
    nval: bytes = bytes(8)
    key_raw: bytes = bytes(MAX_KEY_LEN + 1)
    magic: int = COOKIE
    xx: int = 0

    @classmethod
    def unpack(cls, raw: bytes) -> "_Record":
        magic, kvs_type, xx, nval, key_raw = _HEADER.unpack(raw)
        return cls(kvs_type, nval, key_raw, magic, xx)

    def pack(self) -> bytes:
        return _HEADER.pack(self.magic, self.kvs_type, self.xx, self.nval, self.key_raw)

    @property
    def is_int_type(self) -> bool:
        return (self.kvs_type & _BLOB_OR_STR_MASK) == 0 and (self.kvs_type & _INT_SIZE_MASK) != 0

    @property
    def is_used(self) -> bool:
        return (self.kvs_type & _DELETED) == 0 and self.kvs_type != 0

    @property
    def blob_len(self) -> int:
        return struct.unpack_from("<H", self.nval, 0)[0]

    @property
    def blob_size(self) -> int:
        return struct.unpack_from("<H", self.nval, 2)[0]

    @property
    def size(self) -> int:
        extra = self.blob_size if self.kvs_type & _BLOB_OR_STR_MASK else 0
        return HEADER_SIZE + extra

    @property
    def key_bytes(self) -> bytes:
        return self.key_raw.split(b"\0", 1)[0]

    @property
    def key(self) -> str:
        return self.key_bytes.decode("utf-8", errors="replace")

    def matches(self, key_enc: bytes) -> bool:
        return self.is_used and self.key_bytes[:MAX_KEY_LEN] == key_enc[:MAX_KEY_LEN]


class KvsHandle:
    """An open store file.  Use as a context manager to close it reliably."""

    def __init__(self, path, mode=OpenMode.READ):
        self.path = os.fspath(path)
        self.mode = OpenMode(mode)
        try:
            if self.mode is OpenMode.READ:
                self._file = open(self.path, "rb")
            else:
                flags = os.O_CREAT | os.O_RDWR | getattr(os, "O_BINARY", 0)
                fd = os.open(self.path, flags, 0o666)
                self._file = os.fdopen(fd, "r+b")
        except OSError as exc:
            raise KvsError(f"cannot open store {self.path!r}: {exc}") from exc

    def __enter__(self) -> "KvsHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def writable(self) -> bool:
        return self.mode is not OpenMode.READ

    @property
    def closed(self) -> bool:
        return self._file is None

    def commit(self) -> None:
        """Flush pending writes to the file."""
        f = self._fileobj
        if self.writable:
            f.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    # ------------------------------------------------------------ access

    def erase_key(self, key: str) -> bool:
        """Mark the entry for KEY deleted.  Returns False if there was none."""
        self._require_writable()
        found = self._find(_encode_key(key), KvsType.ANY)
        if found is None:
            return False
        pos, rec = found
        rec.kvs_type |= _DELETED
        rec.key_raw = b"\0" + rec.key_raw[1:]
        self._write_record(rec, pos)
        return True

    def set_str(self, key: str, value: str) -> None:
        self._store_bytes(key, value.encode("utf-8", errors="surrogateescape"), KvsType.STR)

    def get_str(self, key: str, size: Optional[int] = None) -> Optional[str]:
        """Return the string for KEY, or None if missing, empty, or not
        shorter than SIZE (the capacity of a terminated buffer)."""
        data = self._read_payload(_encode_key(key), KvsType.STR)
        if not data:
            return None
        if size is not None and len(data) >= size:
            return None
        return data.decode("utf-8", errors="surrogateescape")

    def set_blob(self, key: str, data) -> None:
        data = bytes(data)
        if not data:
            raise KvsError("cannot store an empty blob")
        self._store_bytes(key, data, KvsType.BLOB)

    def get_blob(self, key: str, size: Optional[int] = None) -> Optional[bytes]:
        """Return the blob for KEY, or None if missing or not exactly SIZE bytes."""
        data = self._read_payload(_encode_key(key), KvsType.BLOB)
        if data is None:
            return None
        if size is not None and len(data) != size:
            return None
        return data

    def set_int(self, key: str, kvs_type, value: int) -> None:
        fmt = _int_format(kvs_type)
        try:
            nval = struct.pack(fmt, value).ljust(8, b"\0")
        except struct.error as exc:
            raise ValueError(f"{value} does not fit {KvsType(kvs_type).name}") from exc
        self._require_writable()
        key_enc = _encode_key(key)
        pos = self._find_int_slot(key_enc)
        self._write_record(_Record(int(kvs_type), nval, key_enc), pos)

    def get_int(self, key: str, kvs_type, default: int = 0) -> int:
        fmt = _int_format(kvs_type)
        found = self._find(_encode_key(key), kvs_type)
        if found is None:
            return default
        return struct.unpack_from(fmt, found[1].nval)[0]

    def contains(self, key: str, kvs_type=KvsType.ANY) -> bool:
        return self._find(_encode_key(key), kvs_type) is not None

    # ---------------------------------------------------------- internals

    @property
    def _fileobj(self):
        if self._file is None:
            raise KvsError("store handle is closed")
        return self._file

    def _require_writable(self) -> None:
        self._fileobj
        if not self.writable:
            raise KvsError(f"store {self.path!r} is open read-only")

    def _read(self, pos: int) -> Optional[_Record]:
        f = self._fileobj
        f.seek(pos)
        raw = f.read(HEADER_SIZE)
        if len(raw) != HEADER_SIZE:
            return None
        rec = _Record.unpack(raw)
        if rec.magic != COOKIE:
            raise CorruptFileError(f"bad magic cookie {rec.magic:#06x} at position {pos}")
        return rec

    def _records(self) -> Iterator[Tuple[int, _Record]]:
        pos = 0
        while (rec := self._read(pos)) is not None:
            yield pos, rec
            pos += rec.size

    def _used_entries(self, kvs_type) -> Iterator[_Record]:
        for _pos, rec in self._records():
            if kvs_type != KvsType.ANY and rec.kvs_type != kvs_type:
                continue
            if rec.is_used:
                yield rec

    def _find(self, key_enc: Optional[bytes], kvs_type) -> Optional[Tuple[int, _Record]]:
        for pos, rec in self._records():
            if key_enc is not None and not rec.matches(key_enc):
                continue
            if kvs_type != KvsType.ANY and rec.kvs_type != kvs_type:
                continue
            return pos, rec
        return None

    def _write_record(self, rec: _Record, pos: Optional[int]) -> int:
        f = self._fileobj
        if pos is None:
            pos = f.seek(0, os.SEEK_END)
        else:
            f.seek(pos)
        f.write(rec.pack())
        return pos + HEADER_SIZE

    def _delete_node(self, pos: int) -> None:
        f = self._fileobj
        f.seek(pos)
        raw = f.read(HEADER_SIZE)
        if len(raw) != HEADER_SIZE:
            return
        rec = _Record.unpack(raw)
        rec.kvs_type |= _DELETED
        self._write_record(rec, pos)

    def _read_payload(self, key_enc: bytes, kvs_type) -> Optional[bytes]:
        found = self._find(key_enc, kvs_type)
        if found is None:
            return None
        pos, rec = found
        f = self._fileobj
        f.seek(pos + HEADER_SIZE)
        data = f.read(rec.blob_len)
        if len(data) != rec.blob_len:
            return None
        return data

    def _find_int_slot(self, key_enc: bytes) -> Optional[int]:
        ignore_key = False
        best = None
        for pos, rec in self._records():
            wrong_type = not rec.is_int_type
            if rec.matches(key_enc):
                if wrong_type:
                    self._delete_node(pos)
                    ignore_key = True
                    continue
                return pos
            if best is not None:
                continue
            if rec.is_used or wrong_type:
                continue
            if ignore_key:
                return pos
            best = pos
        return best

    def _find_blob_slot(self, key_enc: bytes, req_size: int) -> Optional[Tuple[int, int]]:
        ignore_key = False
        best = None
        best_wasted = _NO_BEST_MATCH_WASTE
        for pos, rec in self._records():
            wrong_type = rec.is_int_type
            unused = not rec.is_used
            wasted = rec.blob_size - req_size
            end_pos = pos + rec.size
            if rec.matches(key_enc):
                if not wrong_type and wasted == 0:
                    return pos, end_pos
                self._delete_node(pos)
                ignore_key = True
                unused = True
            if wrong_type or not unused or wasted < 0:
                continue
            if wasted == 0 and ignore_key:
                return pos, end_pos
            if best_wasted < wasted:
                continue
            best_wasted = wasted
            best = (pos, end_pos)
        return best

    def _store_bytes(self, key: str, data: bytes, kvs_type: KvsType) -> None:
        self._require_writable()
        if len(data) > _MAX_BLOB_LEN:
            raise ValueError(f"value of {len(data)} bytes exceeds {_MAX_BLOB_LEN}")
        key_enc = _encode_key(key)
        slot = self._find_blob_slot(key_enc, len(data))
        if slot is None:
            pos, size = None, len(data)
        else:
            pos, end_pos = slot
            size = end_pos - pos - HEADER_SIZE
            if size < len(data):
                self._delete_node(pos)
                pos, size = None, len(data)
        nval = struct.pack("<HH", len(data), size).ljust(8, b"\0")
        data_pos = self._write_record(_Record(int(kvs_type), nval, key_enc), pos)
        f = self._fileobj
        f.seek(data_pos)
        f.write(data)


def open_store(path, mode=OpenMode.READ) -> KvsHandle:
    """Open the store at PATH.  Read mode requires the file to exist."""
    return KvsHandle(path, mode)


def foreach(
    path,
    kvs_type=KvsType.ANY,
    key_prefix: Optional[str] = None,
    callback: Optional[Callable[[str, KvsType], CallbackResult]] = None,
) -> int:
    """Count live entries of KVS_TYPE whose key starts with KEY_PREFIX.

    With a CALLBACK, only entries it reports as MATCH or DONE are counted,
    and DONE stops the scan.  A missing store counts as empty.
    """
    try:
        handle = KvsHandle(path, OpenMode.READ)
    except KvsError:
        return 0
    count = 0
    with handle:
        for rec in handle._used_entries(kvs_type):
            key = rec.key
            if key_prefix is not None and not key.startswith(key_prefix):
                continue
            if callback is None:
                count += 1
                continue
            result = callback(key, KvsType(rec.kvs_type))
            if result == CallbackResult.MATCH:
                count += 1
            elif result == CallbackResult.DONE:
                count += 1
                break
    return count
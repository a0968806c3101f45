"""Whole-file reads and writes."""

from __future__ import annotations

import os


def file_write(path, data) -> int:
    """Replace the contents of PATH with DATA; returns the bytes written."""
    with open(path, "wb") as f:
        return f.write(bytes(data))


def file_read(path, size: int) -> bytes:
    """Read at most SIZE bytes from the start of PATH."""
    if size < 0:
        raise ValueError("size must not be negative")
    with open(path, "rb") as f:
        return f.read(size)


def file_delete(path) -> None:
    """Remove PATH."""
    os.unlink(path)
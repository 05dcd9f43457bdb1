"""An in-memory log file, handy for ephemeral data."""

from __future__ import annotations

import os
from typing import Iterable

from logsource.base import LogFile


class CursorLogFile(LogFile):
    """A fixed block of bytes read through a cursor."""

    def __init__(self, data: bytes = b"") -> None:
        self._data = bytes(data)
        self._pos = 0

    @classmethod
    def from_values(cls, values: Iterable[object]) -> CursorLogFile:
        """Build a file holding each value's text on its own line."""
        return cls("".join(f"{value}\n" for value in values).encode("utf-8"))

    def __len__(self) -> int:
        return len(self._data)

    def poll(self, timeout: float | None = None) -> int:
        return len(self)

    def is_open(self) -> bool:
        return False

    def read(self, size: int | None = -1) -> bytes:
        if size is None or size < 0:
            chunk = self._data[self._pos:]
        else:
            chunk = self._data[self._pos:self._pos + size]
        self._pos += len(chunk)
        return chunk

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the cursor; positions past the end are allowed, negative ones are not."""
        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self._pos + offset
        elif whence == os.SEEK_END:
            target = len(self._data) + offset
        else:
            raise ValueError(f"invalid whence: {whence}")
        if target < 0:
            raise ValueError("invalid seek to a negative position")
        self._pos = target
        return target

    def tell(self) -> int:
        return self._pos

    def fill_buf(self) -> bytes:
        return self._data[self._pos:]

    def consume(self, amount: int) -> None:
        self._pos += amount
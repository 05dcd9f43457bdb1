"""Reader of regular, seekable text files."""

from __future__ import annotations

import io
import os
from typing import BinaryIO

from logsource.base import LogFile

_BUF_SIZE = 64 * 1024


class TextLogFile(LogFile):
    """A plain file on disk, with its length fixed when it is opened."""

    def __init__(self, file: BinaryIO) -> None:
        """Wrap an open binary file object."""
        self._file = file
        self._len = self._measure(file)
        self._pos = 0
        self._buf = b""
        self._buf_start = 0

    @staticmethod
    def _measure(file: BinaryIO) -> int:
        try:
            return os.fstat(file.fileno()).st_size
        except (AttributeError, OSError, io.UnsupportedOperation):
            here = file.tell()
            size = file.seek(0, os.SEEK_END)
            file.seek(here)
            return size

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> TextLogFile:
        """Open the file at path for reading."""
        return cls(open(path, "rb"))

    def __len__(self) -> int:
        return self._len

    def poll(self, timeout: float | None = None) -> int:
        return self._len

    def is_open(self) -> bool:
        return False

    def _buffered(self) -> bytes:
        offset = self._pos - self._buf_start
        if 0 <= offset < len(self._buf):
            return self._buf[offset:]
        return b""

    def read(self, size: int | None = -1) -> bytes:
        unbounded = size is None or size < 0
        head = self._buffered()
        if not unbounded:
            head = head[:size]
        need = -1 if unbounded else size - len(head)
        tail = b""
        if need != 0:
            self._file.seek(self._pos + len(head))
            tail = self._file.read(need) or b""
        data = head + tail
        self._pos += len(data)
        return data

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the read position; positions past the end are allowed, negative ones are not."""
        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self._pos + offset
        elif whence == os.SEEK_END:
            target = self._len + offset
        else:
            raise ValueError(f"invalid whence: {whence}")
        if target < 0:
            raise ValueError("invalid seek to a negative position")
        self._pos = target
        return target

    def tell(self) -> int:
        return self._pos

    def fill_buf(self) -> bytes:
        view = self._buffered()
        if view:
            return view
        self._file.seek(self._pos)
        self._buf = self._file.read(_BUF_SIZE) or b""
        self._buf_start = self._pos
        return self._buf

    def consume(self, amount: int) -> None:
        self._pos += amount

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> TextLogFile:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
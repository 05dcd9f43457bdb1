"""A synthetic log file made of one pattern repeated to a given size."""

from __future__ import annotations

import os

from logsource.base import LogFile


class MockLogFile(LogFile):
    """Reads as ``fill`` repeated over and over, truncated to ``size`` bytes."""

    def __init__(self, fill: str, size: int, chunk_size: int) -> None:
        if not fill:
            raise ValueError("fill pattern must not be empty")
        self._filler = fill.encode("utf-8")
        self._size = size
        self._pos = 0
        self.chunk_size = chunk_size

    def __repr__(self) -> str:
        return f"MockLogFile(filler={self._filler.decode('utf-8')!r}, bytes={len(self)})"

    def __len__(self) -> int:
        return self._size

    def poll(self, timeout: float | None = None) -> int:
        return len(self)

    def is_open(self) -> bool:
        return False

    def _bytes_at(self, pos: int, count: int) -> bytes:
        flen = len(self._filler)
        offset = pos % flen
        copies = (offset + count) // flen + 1
        return (self._filler * copies)[offset:offset + count]

    def read(self, size: int | None = -1) -> bytes:
        available = max(0, len(self) - self._pos)
        count = available if size is None or size < 0 else min(size, available)
        data = self._bytes_at(self._pos, count)
        self._pos += len(data)
        return data

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        self._pos = self._clamped_target(offset, whence)
        return self._pos

    def tell(self) -> int:
        return self._pos

    def fill_buf(self) -> bytes:
        """Return the rest of the current pattern copy, bounded by the file size."""
        if self._pos >= len(self):
            return b""
        offset = self._pos % len(self._filler)
        count = min(len(self._filler) - offset, len(self) - self._pos)
        return self._filler[offset:offset + count]

    def consume(self, amount: int) -> None:
        self._pos += amount

    def chunk(self, target: int) -> tuple[int, int]:
        return self._chunk_range(target, self.chunk_size)
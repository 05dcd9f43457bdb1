"""Common interface of every readable, seekable log source."""

from __future__ import annotations

import abc
import os
import time

_WAIT_INTERVAL = 1.0


class LogFile(abc.ABC):
    """A seekable byte source with buffered line access and stream polling.

    Timeouts given to ``poll`` are deadlines on the ``time.monotonic()`` clock,
    or None for a single non-blocking check.
    """

    CHUNK_SIZE = 1024 * 1024
    FIND_LINES_LIMIT = 10 * 1024 * 1024

    @abc.abstractmethod
    def __len__(self) -> int:
        """Current length of the source in bytes."""

    @abc.abstractmethod
    def poll(self, timeout: float | None = None) -> int:
        """Check for more data and return the new length."""

    @abc.abstractmethod
    def is_open(self) -> bool:
        """True while more data may still arrive."""

    def is_empty(self) -> bool:
        return len(self) == 0

    def wait_for_end(self) -> None:
        """Block until the source is complete."""
        while self.is_open():
            self.poll(time.monotonic() + _WAIT_INTERVAL)

    @abc.abstractmethod
    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the read position and return it."""

    @abc.abstractmethod
    def tell(self) -> int:
        """Current read position."""

    @abc.abstractmethod
    def fill_buf(self) -> bytes:
        """Return the bytes available at the read position without consuming them."""

    @abc.abstractmethod
    def consume(self, amount: int) -> None:
        """Advance the read position past bytes returned by fill_buf."""

    def read(self, size: int | None = -1) -> bytes:
        """Read up to size bytes, or everything available when size is negative."""
        out = bytearray()
        unbounded = size is None or size < 0
        while unbounded or len(out) < size:
            avail = self.fill_buf()
            if not avail:
                break
            take = avail if unbounded else avail[: size - len(out)]
            out += take
            self.consume(len(take))
        return bytes(out)

    def read_until(self, delimiter: bytes | int = b"\n") -> bytes:
        """Read through the next delimiter byte, inclusive, or to the end."""
        if isinstance(delimiter, int):
            delimiter = bytes([delimiter])
        if len(delimiter) != 1:
            raise ValueError("delimiter must be a single byte")
        out = bytearray()
        while True:
            avail = bytes(self.fill_buf())
            if not avail:
                break
            idx = avail.find(delimiter)
            if idx >= 0:
                out += avail[: idx + 1]
                self.consume(idx + 1)
                break
            out += avail
            self.consume(len(avail))
        return bytes(out)

    def read_line_at(self, start: int) -> str:
        """Return the line beginning at start, newline included; invalid UTF-8 is replaced."""
        self.seek(start)
        return self.read_until(b"\n").decode("utf-8", errors="replace")

    def find_lines(self, start: int, end: int) -> list[int]:
        """Return the offsets following each LF found from start through end.

        Offset 0 is included when scanning from the beginning, since a line always
        starts there. Scanning stops at the first line end at or past the range end.
        """
        length = min(max(0, end - start), max(0, len(self) - start), self.FIND_LINES_LIMIT)
        self.seek(start)
        offsets = [0] if start == 0 else []
        offset = start
        while True:
            line = self.read_until(b"\n")
            if not line:
                break
            offset += len(line)
            offsets.append(offset)
            if offset >= start + length:
                break
        return offsets

    def chunk(self, target: int) -> tuple[int, int]:
        """Preferred (start, end) range to read so that it includes target."""
        return self._chunk_range(target, self.CHUNK_SIZE)

    def _chunk_range(self, target: int, chunk_size: int) -> tuple[int, int]:
        start = max(0, target - chunk_size // 2)
        end = min(start + chunk_size, len(self))
        start = max(0, end - chunk_size)
        return start, end

    def _clamped_target(self, offset: int, whence: int) -> int:
        """Resolve a seek request, clamped to the current length.

        A target before the start lands at the end, as an unsigned wrap would.
        """
        if whence == os.SEEK_SET:
            base = 0
        elif whence == os.SEEK_CUR:
            base = self.tell()
        elif whence == os.SEEK_END:
            base = len(self)
        else:
            raise ValueError(f"invalid whence: {whence}")
        target = base + offset
        if target < 0:
            return len(self)
        return min(target, len(self))
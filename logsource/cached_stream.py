"""A non-blocking, seekable reader over an unseekable byte stream.

Everything received from the stream is kept in memory, so any earlier offset can
be revisited. Reads never block waiting for more data for long: reading past
the data received so far returns a short read, and later reads pick up
whatever arrives in the meantime.

A background thread spools the stream into a bounded queue. The queue applies
backpressure, so a runaway producer cannot fill memory faster than the reader
asks for data.
"""

from __future__ import annotations

import os
import queue
import sys
import threading
import time
import zlib
from typing import BinaryIO

from logsource.base import LogFile

QUEUE_SIZE = 100
READ_THRESHOLD = 10240

_FILL_WAIT = 0.1
_VIEW_LIMIT = 64 * 1024
_END = object()


def _pump(source: BinaryIO, chunks: queue.Queue, owns_source: bool) -> None:
    """Copy chunks from source into the queue until end of stream or an error."""
    read = getattr(source, "read1", None) or source.read
    try:
        while True:
            try:
                data = read(READ_THRESHOLD)
            except (OSError, ValueError, EOFError, zlib.error):
                break
            if not data:
                break
            chunks.put(bytes(data))
    finally:
        chunks.put(_END)
        if owns_source:
            source.close()


class CachedStreamReader(LogFile):
    """Caches a byte stream in memory to support random access while it arrives."""

    def __init__(self, source: BinaryIO | None = None) -> None:
        """Start reading from a binary file object, or from stdin when source is None."""
        self._start(source, owns_source=False)

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> CachedStreamReader:
        """Read from a named pipe or file by path."""
        source = open(path, "rb")
        return cls._from_source(source, owns_source=True)

    @classmethod
    def _from_source(cls, source: BinaryIO, owns_source: bool) -> CachedStreamReader:
        reader = cls.__new__(cls)
        reader._start(source, owns_source=owns_source)
        return reader

    def _start(self, source: BinaryIO | None, owns_source: bool) -> None:
        self._buffer = bytearray()
        self._pos = 0
        self._closed = False
        self._queue: queue.Queue = queue.Queue(maxsize=QUEUE_SIZE)
        if source is None:
            source = sys.stdin.buffer
            owns_source = False
        self._thread = threading.Thread(
            target=_pump, args=(source, self._queue, owns_source), daemon=True
        )
        self._thread.start()
        self.poll()

    def is_eof(self) -> bool:
        """True once the stream has ended and everything has been received."""
        return self._closed

    def _take(self, item: object) -> bytes | None:
        if item is _END:
            self._closed = True
            return None
        return item

    def _try_wait(self) -> bytes | None:
        if self._closed:
            return None
        try:
            return self._take(self._queue.get_nowait())
        except queue.Empty:
            return None

    def _timed_wait(self, deadline: float) -> bytes | None:
        if self._closed:
            return None
        remaining = deadline - time.monotonic()
        try:
            if remaining <= 0:
                return self._take(self._queue.get_nowait())
            return self._take(self._queue.get(timeout=remaining))
        except queue.Empty:
            return None

    def fill_buffer(self, pos: int) -> None:
        """Wait briefly for data near pos to arrive."""
        end = len(self)
        while self.is_open() and pos + READ_THRESHOLD > len(self):
            got = self.poll(time.monotonic() + _FILL_WAIT)
            if pos < len(self) or got == end:
                # Got something, or timed out trying.
                break
            end = got

    def __len__(self) -> int:
        return len(self._buffer)

    def is_open(self) -> bool:
        return not self._closed

    def poll(self, timeout: float | None = None) -> int:
        """Collect received data and return the new length.

        With no timeout, take at most one pending chunk without waiting. With a
        deadline, keep collecting until it passes or the stream ends.
        """
        while self.is_open():
            if timeout is None:
                data = self._try_wait()
            else:
                if time.monotonic() > timeout:
                    break
                data = self._timed_wait(timeout)
            if data is None:
                break
            self._buffer += data
            if timeout is None:
                break
        return len(self._buffer)

    def read(self, size: int | None = -1) -> bytes:
        start = self._pos
        if size is None or size < 0:
            self.fill_buffer(start)
            data = bytes(self._buffer[start:])
        else:
            self.fill_buffer(start + size)
            count = min(size, max(0, len(self) - start))
            data = bytes(self._buffer[start:start + count])
        self._pos += len(data)
        return data

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the read position, clamped to the data received so far.

        Seeking relative to the end first drains whatever is immediately
        available, but does not wait for the stream to finish.
        """
        if whence == os.SEEK_END:
            end = len(self)
            while self.is_open():
                length = self.poll()
                if length == end:
                    break
                end = length
        self._pos = self._clamped_target(offset, whence)
        return self._pos

    def tell(self) -> int:
        return self._pos

    def fill_buf(self) -> bytes:
        self.fill_buffer(self._pos)
        return bytes(self._buffer[self._pos:self._pos + _VIEW_LIMIT])

    def consume(self, amount: int) -> None:
        self._pos += amount


TextLogStream = CachedStreamReader
"""Random-access reader of zstd-compressed log files.

A zstd file is a sequence of frames that can each be decoded on its own. When
the decompressed size of every frame is known, any logical offset maps to the
frame holding it, and only that frame has to be decoded. Frames whose size is
not recorded are measured as they are decoded; until then the index ends at an
"unknown" frontier frame whose length is zero.
"""

from __future__ import annotations

import bisect
import os
from dataclasses import dataclass
from typing import BinaryIO

import zstandard

from logsource.base import LogFile
from logsource.read_buffer import ReadBuffer

ZSTD_MAGIC = 0xFD2FB528
SKIPPABLE_MAGIC = 0x184D2A50
_SKIPPABLE_MASK = 0xFFFFFFF0

_BUFFER_EDGE = 40 * 1024
_BUFFER_CAPACITY = 10 * 1024 * 1024
_NEARBY = 2
_DECODE_CHUNK = 128 * 1024
_VIEW_LIMIT = 64 * 1024

_DICT_ID_SIZES = (0, 1, 2, 4)
_FCS_SIZES = (0, 2, 4, 8)


@dataclass
class FrameInfo:
    """Where a frame starts in the compressed file and what it decodes to.

    A length of zero marks the frontier frame whose decoded size is not known yet.
    """

    physical: int
    logical: int
    length: int

    def __contains__(self, pos: int) -> bool:
        return self.logical <= pos < self.logical + self.length


@dataclass(frozen=True)
class _FrameHeader:
    skippable: bool
    size: int
    skip_size: int = 0
    content_size: int | None = None
    checksum: bool = False


def _read_exact(file: BinaryIO, count: int) -> bytes:
    data = file.read(count)
    if data is None or len(data) != count:
        raise OSError("truncated zstd data")
    return data


def _read_frame_header(file: BinaryIO) -> _FrameHeader:
    """Parse a frame header at the current file position."""
    magic = int.from_bytes(_read_exact(file, 4), "little")
    if magic & _SKIPPABLE_MASK == SKIPPABLE_MAGIC:
        skip_size = int.from_bytes(_read_exact(file, 4), "little")
        return _FrameHeader(skippable=True, size=8, skip_size=skip_size)
    if magic != ZSTD_MAGIC:
        raise OSError(f"bad zstd magic number {magic:#010x}")
    descriptor = _read_exact(file, 1)[0]
    if descriptor & 0x08:
        raise OSError("reserved bit set in zstd frame descriptor")
    fcs_flag = descriptor >> 6
    single_segment = bool(descriptor & 0x20)
    checksum = bool(descriptor & 0x04)
    dict_id_size = _DICT_ID_SIZES[descriptor & 0x03]
    fcs_size = _FCS_SIZES[fcs_flag] if fcs_flag or not single_segment else 1
    size = 5
    if not single_segment:
        _read_exact(file, 1)
        size += 1
    if dict_id_size:
        _read_exact(file, dict_id_size)
        size += dict_id_size
    content_size = None
    if fcs_size:
        content_size = int.from_bytes(_read_exact(file, fcs_size), "little")
        if fcs_size == 2:
            content_size += 256
        size += fcs_size
    return _FrameHeader(
        skippable=False, size=size, content_size=content_size, checksum=checksum
    )


def _measure_frame(file: BinaryIO, physical: int, source_bytes: int) -> tuple[_FrameHeader, int]:
    """Return the header of the frame at physical and its total compressed size."""
    file.seek(physical)
    header = _read_frame_header(file)
    if header.skippable:
        total = header.size + header.skip_size
    else:
        total = header.size
        while True:
            block = int.from_bytes(_read_exact(file, 3), "little")
            last = block & 1
            block_type = (block >> 1) & 3
            block_size = block >> 3
            if block_type == 3:
                raise OSError("reserved zstd block type")
            on_disk = 1 if block_type == 1 else block_size
            total += 3 + on_disk
            file.seek(on_disk, os.SEEK_CUR)
            if last:
                break
        if header.checksum:
            total += 4
    if total > source_bytes - physical:
        raise OSError("truncated zstd frame")
    return header, total


class CompressedFile(LogFile):
    """A zstd file read as its decompressed contents, with random access by frame."""

    def __init__(self, file: BinaryIO) -> None:
        """Index the frames of an open, seekable binary file."""
        self._file = file
        self._source_bytes = file.seek(0, os.SEEK_END)
        file.seek(0)
        self._frames: list[FrameInfo] = []
        self._cur_frame = 0
        self._pos = 0
        self._seek_pos: int | None = None
        self._read_buffer = ReadBuffer(0)
        self._decoder = None
        self._frame_remaining = 0
        self._frame_logical_start = 0
        self._phys = 0
        self._pending = bytearray()
        self._scan_frames()
        file.seek(0)

    @staticmethod
    def is_recognized(file: BinaryIO) -> bool:
        """True if file starts with a valid zstd frame header."""
        try:
            file.seek(0)
            header = _read_frame_header(file)
        except (OSError, ValueError):
            return False
        return not header.skippable

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> CompressedFile:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _scan_frames(self) -> None:
        pos = 0
        fpos = 0
        while fpos < self._source_bytes:
            header, frame_bytes = _measure_frame(self._file, fpos, self._source_bytes)
            size = 0 if header.skippable else header.content_size
            if size is None:
                # The rest of the logical layout is unknown until this frame is decoded.
                self._frames.append(FrameInfo(fpos, pos, 0))
                break
            if size:
                self._frames.append(FrameInfo(fpos, pos, size))
                pos += size
            fpos += frame_bytes

    def _lookup_frame_index(self, pos: int) -> int:
        """Index of the frame holding pos, or the closest one before it."""
        start = max(0, self._cur_frame - _NEARBY) if pos < self._pos else self._cur_frame
        end = min(start + _NEARBY, len(self._frames)) if pos > self._pos else self._cur_frame
        for index in range(start, end):
            if pos in self._frames[index]:
                return index
        index = bisect.bisect_right(self._frames, pos, key=lambda f: f.logical) - 1
        return max(0, index)

    def _has_file_size(self) -> bool:
        return not self._frames or self._frames[-1].length != 0

    def _decoded_end(self) -> int:
        return self._read_buffer.end() + len(self._pending)

    def _goto_frame(self, index: int) -> None:
        frame = self._frames[index]
        self._phys = frame.physical
        self._pending.clear()
        if frame.logical == self._read_buffer.end():
            self._read_buffer.consume(self._read_buffer.remaining())
        else:
            self._read_buffer = ReadBuffer(frame.logical)
        self._pos = frame.logical
        self._begin_frame()
        self._cur_frame = index

    def _begin_frame(self) -> None:
        """Start decoding the next real frame, skipping skippable ones."""
        self._decoder = None
        self._frame_remaining = 0
        while self._phys < self._source_bytes:
            header, total = _measure_frame(self._file, self._phys, self._source_bytes)
            if header.skippable:
                self._phys += total
                continue
            self._decoder = zstandard.ZstdDecompressor().decompressobj()
            self._frame_remaining = total
            self._frame_logical_start = self._decoded_end()
            return

    def _end_frame(self) -> None:
        """Record the size of the frontier frame once it has been fully decoded."""
        if not self._frames:
            return
        frame = self._frames[-1]
        if frame.length != 0 or frame.logical != self._frame_logical_start:
            return
        logical_pos = self._decoded_end()
        if logical_pos > frame.logical:
            frame.length = logical_pos - frame.logical
            if self._phys < self._source_bytes:
                self._frames.append(FrameInfo(self._phys, logical_pos, 0))

    def _frame_finished(self) -> bool:
        return self._decoder is None or self._frame_remaining == 0

    def _decode_more_bytes(self) -> bool:
        """Decode until some output is pending; return True at end of file."""
        while True:
            if self._pending:
                return False
            if self._frame_finished():
                if self._phys >= self._source_bytes:
                    return True
                self._begin_frame()
                continue
            self._file.seek(self._phys)
            chunk = self._file.read(min(self._frame_remaining, _DECODE_CHUNK))
            if not chunk:
                raise OSError("unexpected end of compressed data")
            self._phys += len(chunk)
            self._frame_remaining -= len(chunk)
            try:
                out = self._decoder.decompress(chunk)
                if self._frame_remaining == 0:
                    out += self._decoder.flush()
            except zstandard.ZstdError as exc:
                raise OSError(f"Error in the zstd decoder: {exc}") from exc
            self._pending += out
            if self._frame_remaining == 0:
                self._end_frame()

    def _decode_into_buffer(self) -> None:
        buffer = self._read_buffer
        if buffer.remaining() < _BUFFER_EDGE:
            self._decode_more_bytes()
            if self._pending:
                buffer.extend(bytes(self._pending))
                self._pending.clear()
                if len(buffer) > _BUFFER_CAPACITY * 3 and buffer.consumed >= _BUFFER_CAPACITY * 2:
                    buffer.discard_front(_BUFFER_CAPACITY)

    def _skip_bytes(self, count: int) -> None:
        target = self._pos + count
        while self._pos < target:
            self._decode_into_buffer()
            avail = min(self._read_buffer.remaining(), target - self._pos)
            if avail == 0:
                break
            self._pos += avail
            self._read_buffer.consume(avail)

    def _apply_seek(self) -> None:
        pos = self._seek_pos
        if pos is None:
            return
        self._seek_pos = None
        if pos == self._pos or not self._frames:
            return
        if self._read_buffer.seek_to(pos):
            self._pos = pos
            return
        index = self._lookup_frame_index(pos)
        frame = self._frames[index]
        if pos < self._pos or self._pos not in frame:
            self._goto_frame(index)
        if pos > self._pos:
            self._skip_bytes(pos - self._pos)

    def _update_stream(self) -> None:
        self._apply_seek()
        self._decode_into_buffer()

    def __len__(self) -> int:
        """Decompressed length; while the end is unknown, an estimate."""
        if not self._frames:
            return 0
        last = self._frames[-1]
        extra = 0 if last.length else self._source_bytes - last.physical
        return last.logical + last.length + extra

    def poll(self, timeout: float | None = None) -> int:
        return len(self)

    def is_open(self) -> bool:
        return False

    def read(self, size: int | None = -1) -> bytes:
        out = bytearray()
        unbounded = size is None or size < 0
        while unbounded or len(out) < size:
            self._update_stream()
            avail = self._read_buffer.remaining()
            take = avail if unbounded else min(avail, size - len(out))
            if take == 0:
                break
            start = self._read_buffer.consumed
            out += self._read_buffer.buffer[start:start + take]
            self._pos += take
            self._read_buffer.consume(take)
        return bytes(out)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Record a new position, clamped to the known length; it is applied on the next read.

        Seeking from the end raises OSError while the decompressed size is unknown.
        """
        if whence == os.SEEK_SET:
            base = 0
        elif whence == os.SEEK_CUR:
            base = self.tell()
        elif whence == os.SEEK_END:
            if not self._has_file_size():
                raise OSError("the end of the decompressed data is not known yet")
            base = len(self)
        else:
            raise ValueError(f"invalid whence: {whence}")
        pos = min(max(0, base + offset), len(self))
        self._seek_pos = pos
        return pos

    def tell(self) -> int:
        return self._pos if self._seek_pos is None else self._seek_pos

    def fill_buf(self) -> bytes:
        self._update_stream()
        start = self._read_buffer.consumed
        return bytes(self._read_buffer.buffer[start:start + _VIEW_LIMIT])

    def consume(self, amount: int) -> None:
        self._apply_seek()
        self._read_buffer.consume(amount)
        self._pos += amount


class ZstdLogFile(CompressedFile):
    """A zstd-compressed log file opened by path."""

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> ZstdLogFile:
        """Open a zstd file; raise OSError if it does not look like one."""
        file = open(path, "rb")
        try:
            if not cls.is_recognized(file):
                raise OSError("Unrecognized file type")
            return cls(file)
        except BaseException:
            file.close()
            raise
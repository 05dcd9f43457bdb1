import os

import pytest

from logsource.base import LogFile


class _WindowedLog(LogFile):
    """An in-memory source that exposes only a few bytes per fill_buf."""

    def __init__(self, data, window=3, open_polls=0):
        self._data = data
        self._pos = 0
        self._window = window
        self.open_polls = open_polls
        self.poll_calls = []

    def __len__(self):
        return len(self._data)

    def poll(self, timeout=None):
        self.poll_calls.append(timeout)
        if self.open_polls:
            self.open_polls -= 1
        return len(self._data)

    def is_open(self):
        return self.open_polls > 0

    def seek(self, offset, whence=os.SEEK_SET):
        self._pos = self._clamped_target(offset, whence)
        return self._pos

    def tell(self):
        return self._pos

    def fill_buf(self):
        return self._data[self._pos:self._pos + self._window]

    def consume(self, amount):
        self._pos += amount


DATA = b"ab\ncd\nef\n"


def test_read_spans_buffer_windows():
    log = _WindowedLog(DATA)
    assert LogFile.read(log) == DATA
    log.seek(0)
    assert LogFile.read(log, 4) == DATA[:4]
    assert log.tell() == 4
    assert LogFile.read(log, 100) == DATA[4:]


def test_read_until_newline_and_other_delimiter():
    log = _WindowedLog(DATA, window=2)
    assert LogFile.read_until(log) == b"ab\n"
    assert LogFile.read_until(log, b"d") == b"cd"
    assert LogFile.read_until(log, ord("f")) == b"\nef"


def test_read_until_rejects_long_delimiter():
    log = _WindowedLog(DATA)
    with pytest.raises(ValueError):
        LogFile.read_until(log, b"ab")


def test_read_line_at():
    log = _WindowedLog(b"first\nsecond\nlast")
    assert LogFile.read_line_at(log, 0) == "first\n"
    assert LogFile.read_line_at(log, len(b"first\n")) == "second\n"
    assert LogFile.read_line_at(log, len(b"first\nsecond\n")) == "last"


def test_read_line_at_replaces_invalid_utf8():
    log = _WindowedLog(b"ok\xff\nnext\n")
    assert LogFile.read_line_at(log, 0) == "ok\ufffd\n"


def test_find_lines_from_start():
    log = _WindowedLog(DATA)
    assert LogFile.find_lines(log, 0, len(DATA)) == [0, 3, 6, 9]


def test_find_lines_from_middle():
    log = _WindowedLog(DATA)
    assert LogFile.find_lines(log, 3, len(DATA)) == [6, 9]


def test_find_lines_stops_at_range_end():
    log = _WindowedLog(DATA)
    assert LogFile.find_lines(log, 0, 1) == [0, DATA.index(b"\n") + 1]


def test_find_lines_offsets_follow_newlines():
    data = b"".join(b"line %d\n" % n for n in range(200))
    log = _WindowedLog(data, window=7)
    offsets = LogFile.find_lines(log, 0, len(data))
    assert offsets[0] == 0
    assert offsets[-1] == len(data)
    assert len(offsets) == 201
    assert all(data[o - 1:o] == b"\n" for o in offsets[1:])


def test_chunk_of_small_file_is_whole_file():
    log = _WindowedLog(DATA)
    assert LogFile.chunk(log, 4) == (0, len(DATA))


def test_chunk_of_large_file_covers_target():
    data = b"x" * (3 * LogFile.CHUNK_SIZE)
    log = _WindowedLog(data)
    for target in (0, 10, LogFile.CHUNK_SIZE, len(data) - 1, len(data)):
        start, end = LogFile.chunk(log, target)
        assert start <= target <= end
        assert end - start == LogFile.CHUNK_SIZE


def test_is_empty():
    assert LogFile.is_empty(_WindowedLog(b""))
    assert not LogFile.is_empty(_WindowedLog(DATA))


def test_wait_for_end_polls_until_closed():
    log = _WindowedLog(DATA, open_polls=3)
    LogFile.wait_for_end(log)
    assert not log.is_open()
    assert len(log.poll_calls) == 3
    assert all(t is not None for t in log.poll_calls)


def test_wait_for_end_on_closed_source_does_not_poll():
    log = _WindowedLog(DATA)
    LogFile.wait_for_end(log)
    assert log.poll_calls == []


def test_seek_clamps_to_length():
    log = _WindowedLog(DATA)
    assert LogFile._clamped_target(log, 1000, os.SEEK_SET) == len(DATA)
    assert LogFile._clamped_target(log, -2, os.SEEK_END) == len(DATA) - 2
    log.seek(2)
    assert LogFile._clamped_target(log, 3, os.SEEK_CUR) == 5


def test_seek_before_start_lands_at_end():
    log = _WindowedLog(DATA)
    log.seek(2)
    assert LogFile._clamped_target(log, -10, os.SEEK_CUR) == len(DATA)


def test_seek_bad_whence():
    log = _WindowedLog(DATA)
    with pytest.raises(ValueError):
        LogFile._clamped_target(log, 0, 7)
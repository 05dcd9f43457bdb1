import os

import pytest

from logsource.cursor import CursorLogFile


def test_from_values_writes_one_line_each():
    log = CursorLogFile.from_values([1, 2, 3])
    assert log.read() == b"1\n2\n3\n"
    assert log.tell() == len(log)


def test_line_count_matches_values():
    lines = 50
    log = CursorLogFile.from_values(range(lines))
    offsets = log.find_lines(0, len(log))
    assert offsets[0] == 0
    assert offsets[-1] == len(log)
    assert len(offsets) == lines + 1


def test_read_line_at_each_offset():
    values = ["alpha", "beta", "gamma"]
    log = CursorLogFile.from_values(values)
    offsets = log.find_lines(0, len(log))
    assert [log.read_line_at(o) for o in offsets[:-1]] == [v + "\n" for v in values]


def test_length_and_poll():
    data = b"some bytes\n"
    log = CursorLogFile(data)
    assert len(log) == len(data)
    assert log.poll() == len(data)
    assert log.poll(0.0) == len(data)
    assert not log.is_open()


def test_seek_and_read_round_trip():
    data = b"0123456789"
    log = CursorLogFile(data)
    assert log.seek(4) == 4
    assert log.read(3) == data[4:7]
    assert log.seek(-2, os.SEEK_CUR) == 5
    assert log.seek(-1, os.SEEK_END) == len(data) - 1
    assert log.read() == data[-1:]


def test_seek_past_end_reads_nothing():
    log = CursorLogFile(b"abc")
    assert log.seek(100) == 100
    assert log.read() == b""
    assert log.fill_buf() == b""


def test_negative_seek_raises():
    log = CursorLogFile(b"abc")
    with pytest.raises(ValueError):
        log.seek(-1)
    with pytest.raises(ValueError):
        log.seek(-4, os.SEEK_END)


def test_fill_buf_and_consume():
    data = b"hello\nworld\n"
    log = CursorLogFile(data)
    assert log.fill_buf() == data
    log.consume(6)
    assert log.fill_buf() == data[6:]
    assert log.read_until() == data[6:]
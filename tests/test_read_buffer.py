import pytest

from logsource.read_buffer import ReadBuffer


def test_new_buffer_is_empty_at_offset():
    buf = ReadBuffer(100)
    assert buf.start() == 100
    assert buf.end() == 100
    assert buf.pos() == 100
    assert buf.remaining() == 0
    assert len(buf) == 0
    assert buf.view() == b""


def test_extend_and_consume():
    buf = ReadBuffer(10)
    buf.extend(b"hello world")
    assert len(buf) == len(b"hello world")
    assert buf.end() == 10 + len(b"hello world")
    assert buf.view() == b"hello world"
    buf.consume(6)
    assert buf.view() == b"world"
    assert buf.pos() == 16
    assert buf.remaining() == len(b"world")


def test_consume_too_much_raises():
    buf = ReadBuffer()
    buf.extend(b"abc")
    with pytest.raises(ValueError):
        buf.consume(4)


def test_seek_to_inside_and_outside():
    buf = ReadBuffer(50)
    buf.extend(b"abcdef")
    assert buf.seek_to(52)
    assert buf.pos() == 52
    assert buf.view() == b"cdef"
    assert not buf.seek_to(56)
    assert not buf.seek_to(49)
    assert buf.pos() == 52


def test_discard_front_keeps_unread_data():
    buf = ReadBuffer(0)
    buf.extend(b"0123456789")
    buf.consume(5)
    before = buf.view()
    buf.discard_front(3)
    assert buf.view() == before
    assert buf.start() == 3
    assert buf.pos() == 5
    assert buf.end() == 10
    assert buf.consumed == 2


def test_discard_more_than_consumed_raises():
    buf = ReadBuffer(0)
    buf.extend(b"0123456789")
    buf.consume(2)
    with pytest.raises(ValueError):
        buf.discard_front(3)
    with pytest.raises(ValueError):
        buf.discard_front(11)
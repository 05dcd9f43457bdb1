"""A sliding buffer caching recently decoded data at a known logical offset."""

from __future__ import annotations


class ReadBuffer:
    """Bytes covering the logical range [start, end) with a read cursor inside it."""

    def __init__(self, start_offset: int = 0) -> None:
        self.buffer = bytearray()
        self.start_offset = start_offset
        self.consumed = 0

    def remaining(self) -> int:
        """Bytes left to read after the cursor."""
        return len(self.buffer) - self.consumed

    def start(self) -> int:
        return self.start_offset

    def end(self) -> int:
        return self.start_offset + len(self.buffer)

    def pos(self) -> int:
        """Logical offset of the read cursor."""
        return self.start_offset + self.consumed

    def __len__(self) -> int:
        return len(self.buffer)

    def view(self) -> bytes:
        """The unread bytes."""
        return bytes(self.buffer[self.consumed:])

    def consume(self, amount: int) -> None:
        if amount < 0 or amount > self.remaining():
            raise ValueError(f"cannot consume {amount} bytes; {self.remaining()} remain")
        self.consumed += amount

    def extend(self, data: bytes) -> None:
        """Append data to the end of the buffer."""
        self.buffer.extend(data)

    def discard_front(self, amount: int) -> None:
        """Drop already consumed bytes from the front of the buffer."""
        if amount < 0 or amount > len(self.buffer):
            raise ValueError(f"cannot discard {amount} bytes from a buffer of {len(self.buffer)}")
        if amount > self.consumed:
            raise ValueError(f"cannot discard {amount} bytes; only {self.consumed} consumed")
        del self.buffer[:amount]
        self.start_offset += amount
        self.consumed -= amount

    def seek_to(self, pos: int) -> bool:
        """Move the cursor to pos if it lies in the buffer; report whether it did."""
        if self.start() <= pos < self.end():
            self.consumed = pos - self.start()
            return True
        return False
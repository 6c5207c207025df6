"""
memsampler.collectors.buffer
AUTHOR: carter-vin

Reusable read buffer + forward-only line cursor

- ReadBuffer keeps one bytearray alive across polls (filled -> drained)
- LineCursor walks newlines in place; skipped lines are never sliced or decoded
"""

from __future__ import annotations

from typing import BinaryIO

from memsampler.errors import LineCountChanged

# Same size free(1) uses. /proc/meminfo stays below this on current kernels,
# fill() doubles the buffer if a source is ever larger.
INITIAL_BUF_SIZE = 2048


class ReadBuffer:
    """
    Scratch buffer with reserved capacity

    - length: number of valid bytes
    - capacity: allocated bytes, only ever grows
    """

    def __init__(self, capacity: int = INITIAL_BUF_SIZE) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._data = bytearray(capacity)
        self.length = 0

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytearray:
        return self._data

    def fill(self, stream: BinaryIO) -> int:
        """
        Read the stream to EOF, appending after the current length

        Returns the new length. Raises OSError from the stream unchanged
        """
        while True:
            if self.length == len(self._data):
                self._data.extend(bytes(len(self._data)))

            # views must be released before the next extend()
            with memoryview(self._data) as view, view[self.length:] as tail:
                n = stream.readinto(tail)

            if not n:
                return self.length
            self.length += n

    def drain(self) -> None:
        """
        Reset length, keep capacity
        """
        self.length = 0

    def text(self) -> str:
        return self._data[: self.length].decode("utf-8", errors="replace")

    def cursor(self) -> "LineCursor":
        return LineCursor(self._data, self.length)


class LineCursor:
    """
    Forward-only cursor over newline separated bytes

    The cursor starts on line 0. advance(n) moves n lines forward and returns
    the landed line (without its newline), so advance(0) reads the current line.
    """

    def __init__(self, data: bytearray, end: int) -> None:
        self._data = data
        self._end = end
        self._start = 0
        self.line_number = 0

    def advance(self, count: int) -> str:
        if count < 0:
            raise ValueError("cursor only moves forward")

        start = self._start
        for step in range(count):
            newline = self._data.find(b"\n", start, self._end)
            if newline < 0:
                raise LineCountChanged(self.line_number + step + 1)
            start = newline + 1

        # trailing newline at EOF does not start another line
        if start >= self._end:
            raise LineCountChanged(self.line_number + count)

        stop = self._data.find(b"\n", start, self._end)
        if stop < 0:
            stop = self._end
        # CRLF sources: drop the "\r", line numbering is unchanged
        if stop > start and self._data[stop - 1] == 0x0D:
            stop -= 1

        self._start = start
        self.line_number += count
        return self._data[start:stop].decode("utf-8", errors="replace")

"""Big-endian parsing from, and serialization to, lists of byte buffers."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Union

BytesLike = Union[bytes, bytearray, memoryview]


def _as_buffers(data: BytesLike | Iterable[BytesLike]) -> list[bytes]:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return [bytes(data)]
    return [bytes(item) for item in data]


class _BufferList:
    """A sequence of buffers consumed from the front."""

    def __init__(self, buffers: Iterable[bytes]) -> None:
        self._buffers: deque[bytes] = deque(b for b in buffers if b)
        self._skip = 0
        self.size = sum(len(b) for b in self._buffers)

    def peek(self) -> memoryview:
        if not self._buffers:
            raise RuntimeError("peek on empty BufferList")
        return memoryview(self._buffers[0])[self._skip :]

    def remove_prefix(self, length: int) -> None:
        while length and self._buffers:
            front = self._buffers[0]
            take = min(length, len(front) - self._skip)
            self._skip += take
            length -= take
            self.size -= take
            if self._skip == len(front):
                self._buffers.popleft()
                self._skip = 0

    def take(self, length: int) -> bytes:
        pieces = []
        while length:
            view = self.peek()[:length]
            pieces.append(bytes(view))
            self.remove_prefix(len(view))
            length -= len(view)
        return b"".join(pieces)

    def truncate(self, length: int) -> None:
        if self.size <= length:
            return
        if length == 0:
            self._buffers.clear()
            self._skip = 0
            self.size = 0
            return

        kept: deque[bytes] = deque()
        so_far = 0
        for position, buf in enumerate(self._buffers):
            start = self._skip if position == 0 else 0
            available = len(buf) - start
            if so_far + available < length:
                kept.append(buf)
                so_far += available
                continue
            kept.append(buf[: start + (length - so_far)])
            break
        self._buffers = kept
        self.size = length

    def dump_all(self) -> list[bytes]:
        out = list(self._buffers)
        if out and self._skip:
            out[0] = out[0][self._skip :]
        self._buffers.clear()
        self._skip = 0
        self.size = 0
        return out

    def views(self) -> list[memoryview]:
        result = []
        skip = self._skip
        for buf in self._buffers:
            result.append(memoryview(buf)[skip:])
            skip = 0
        return result


class Parser:
    """Reads big-endian integers and byte strings from a list of buffers.

    A read past the end of the input sets the error flag; once set, reads
    return zero values and consume nothing.
    """

    def __init__(self, data: BytesLike | Iterable[BytesLike]) -> None:
        self._input = _BufferList(_as_buffers(data))
        self._error = False

    def _check_size(self, size: int) -> None:
        if size > self._input.size:
            self._error = True

    def has_error(self) -> bool:
        return self._error

    def set_error(self) -> None:
        self._error = True

    def remove_prefix(self, n: int) -> None:
        self._input.remove_prefix(n)

    def truncate(self, length: int) -> None:
        self._input.truncate(length)

    def all_remaining(self) -> list[bytes]:
        """Take every remaining buffer, leaving the parser empty."""
        return self._input.dump_all()

    def buffer(self) -> list[memoryview]:
        """Views of the remaining input, without consuming it."""
        return self._input.views()

    def string(self, size: int) -> bytes:
        self._check_size(size)
        if self._error:
            return bytes(size)
        return self._input.take(size)

    def concatenate_all_remaining(self) -> bytes:
        return b"".join(self.all_remaining())

    def integer(self, size: int) -> int:
        """Read an unsigned big-endian integer of `size` bytes."""
        self._check_size(size)
        if self._error:
            return 0
        return int.from_bytes(self._input.take(size), "big")


class Serializer:
    """Builds a list of buffers from big-endian integers and byte strings."""

    def __init__(self) -> None:
        self._output: list[bytes] = []
        self._pending = bytearray()

    def _flush(self) -> None:
        if self._pending:
            self._output.append(bytes(self._pending))
            self._pending.clear()

    def integer(self, value: int, size: int) -> None:
        """Append the low `size` bytes of `value`, big-endian."""
        if size <= 0:
            raise ValueError("integer size must be positive")
        self._pending += (value & ((1 << (8 * size)) - 1)).to_bytes(size, "big")

    def buffer(self, data: BytesLike | Iterable[BytesLike]) -> None:
        """Append a buffer, or each of a sequence of buffers; empty ones are skipped."""
        if isinstance(data, (bytes, bytearray, memoryview)):
            if len(data):
                self._flush()
                self._output.append(bytes(data))
            return
        for item in data:
            self.buffer(item)

    def finish(self) -> list[bytes]:
        self._flush()
        output, self._output = self._output, []
        return output
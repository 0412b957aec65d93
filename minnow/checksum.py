"""The Internet checksum (one's-complement sum of 16-bit words)."""

from __future__ import annotations

from typing import Iterable, Union

BytesLike = Union[bytes, bytearray, memoryview]


class InternetChecksum:
    """Accumulates data, possibly split across buffers, into an Internet checksum."""

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._odd = False

    def add(self, data: BytesLike | Iterable[BytesLike]) -> None:
        """Add a buffer, or each of a sequence of buffers, to the sum."""
        if not isinstance(data, (bytes, bytearray, memoryview)):
            for item in data:
                self.add(item)
            return

        view = memoryview(data).cast("B") if isinstance(data, memoryview) else memoryview(data)
        if not len(view):
            return
        if self._odd:
            self._sum += view[0]
            view = view[1:]
            self._odd = False
        high = sum(view[0::2])
        low = sum(view[1::2])
        self._sum = (self._sum + (high << 8) + low) & 0xFFFFFFFF
        if len(view) % 2:
            self._odd = True

    def value(self) -> int:
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF
"""A reference-counted handle to a kernel file descriptor."""

from __future__ import annotations

import errno as errno_codes
import os
import sys
from typing import Any, Callable, Iterable, Sequence, TypeVar, Union

from minnow.errors import UnixError

BytesLike = Union[bytes, bytearray, memoryview]
R = TypeVar("R")

_WOULD_BLOCK = {errno_codes.EAGAIN, errno_codes.EWOULDBLOCK, errno_codes.EINPROGRESS}


class _FDWrapper:
    """Owns a descriptor number; closes it when the last handle goes away."""

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise RuntimeError(f"invalid fd number:{fd}")
        try:
            blocking = os.get_blocking(fd)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno or 0) from exc
        self.fd = fd
        self.eof = False
        self.closed = False
        self.non_blocking = not blocking
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        try:
            os.close(self.fd)
        except OSError as exc:
            raise UnixError("close", exc.errno or 0) from exc
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:  # never raise from a finalizer
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A shared handle to a file descriptor; copies are made only with duplicate()."""

    READ_BUFFER_SIZE = 16384

    def __init__(self, fd: int) -> None:
        self._internal = _FDWrapper(fd)

    @classmethod
    def _from_wrapper(cls, wrapper: _FDWrapper) -> FileDescriptor:
        handle = cls.__new__(cls)
        handle._internal = wrapper
        return handle

    def duplicate(self) -> FileDescriptor:
        """Another handle sharing this descriptor and its state."""
        return FileDescriptor._from_wrapper(self._internal)

    # state
    @property
    def fd_num(self) -> int:
        return self._internal.fd

    def fileno(self) -> int:
        return self._internal.fd

    @property
    def eof(self) -> bool:
        return self._internal.eof

    @property
    def closed(self) -> bool:
        return self._internal.closed

    @property
    def blocking(self) -> bool:
        return not self._internal.non_blocking

    @property
    def read_count(self) -> int:
        return self._internal.read_count

    @property
    def write_count(self) -> int:
        return self._internal.write_count

    def _set_eof(self) -> None:
        self._internal.eof = True

    def _register_read(self) -> None:
        self._internal.read_count += 1

    def _register_write(self) -> None:
        self._internal.write_count += 1

    def _fd_call(self, what: str, func: Callable[..., R], *args: Any) -> R | None:
        """Run a system call; None means a non-blocking descriptor would have blocked."""
        try:
            return func(*args)
        except OSError as exc:
            if self._internal.non_blocking and exc.errno in _WOULD_BLOCK:
                return None
            raise UnixError(what, exc.errno or 0) from exc

    @staticmethod
    def _check_buffers(buffers: Sequence[Any]) -> int:
        if not buffers:
            raise RuntimeError("to_iovecs called with empty buffer list")
        total = 0
        for buf in buffers:
            if not len(buf):
                raise RuntimeError("to_iovecs called with empty buffer in buffer list")
            total += len(buf)
        return total

    @staticmethod
    def _split(data: bytes, sizes: Iterable[int]) -> list[bytes]:
        pieces = []
        position = 0
        for size in sizes:
            pieces.append(data[position : position + size])
            position += size
        return pieces

    # reading
    def read(self, size: int = READ_BUFFER_SIZE) -> bytes:
        """Read at most `size` bytes (READ_BUFFER_SIZE if 0); b"" at EOF or if it would block."""
        if size <= 0:
            size = self.READ_BUFFER_SIZE
        data = self._fd_call("read", os.read, self._internal.fd, size)
        if data is not None and not data:
            self._set_eof()
        self._register_read()
        if data is None:
            return b""
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        return data

    def read_vectored(self, sizes: Sequence[int]) -> list[bytes]:
        """Read into buffers of the given sizes (last one READ_BUFFER_SIZE if 0).

        Each returned buffer is cut to what was read into it.
        """
        sizes = list(sizes)
        if not sizes:
            raise RuntimeError("FileDescriptor::read called with no buffers")
        if sizes[-1] == 0:
            sizes[-1] = self.READ_BUFFER_SIZE
        buffers = [bytearray(size) for size in sizes]
        total = self._check_buffers(buffers)

        count = self._fd_call("readv", os.readv, self._internal.fd, buffers)
        if count == 0:
            self._set_eof()
        self._register_read()
        count = count or 0
        if count > total:
            raise RuntimeError("read() read more than requested")

        result = []
        remaining = count
        for buf in buffers:
            if remaining >= len(buf):
                result.append(bytes(buf))
                remaining -= len(buf)
            else:
                result.append(bytes(buf[:remaining]))
                remaining = 0
        return result

    # writing
    def write(self, data: BytesLike) -> int:
        """Write from `data`; return how many bytes were written."""
        written = self._fd_call("write", os.write, self._internal.fd, data) or 0
        self._register_write()
        if written == 0 and len(data):
            raise RuntimeError("write returned 0 given non-empty input buffer")
        if written > len(data):
            raise RuntimeError("write wrote more than length of input buffer")
        return written

    def write_vectored(self, buffers: Sequence[BytesLike]) -> int:
        """Write from a sequence of non-empty buffers; return how many bytes were written."""
        buffers = list(buffers)
        total = self._check_buffers(buffers)
        written = self._fd_call("writev", os.writev, self._internal.fd, buffers) or 0
        self._register_write()
        if written == 0:
            raise RuntimeError("writev returned 0 given non-empty input buffer")
        if written > total:
            raise RuntimeError("writev wrote more than length of input buffer")
        return written

    def write_all(self, data: BytesLike) -> None:
        """Write every byte of `data`; requires a blocking descriptor."""
        if not self.blocking:
            raise RuntimeError("write_all requires a blocking file descriptor")
        view = memoryview(data)
        while len(view):
            view = view[self.write(view) :]

    # control
    def close(self) -> None:
        self._internal.close()

    def set_blocking(self, blocking: bool) -> None:
        try:
            os.set_blocking(self._internal.fd, blocking)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno or 0) from exc
        self._internal.non_blocking = not blocking

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self.closed:
            self.close()
"""Network sockets built on FileDescriptor: UDP, TCP, packet, raw and Unix-domain."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence, TypeVar, Union

from minnow.address import Address
from minnow.errors import UnixError
from minnow.file_descriptor import FileDescriptor

BytesLike = Union[bytes, bytearray, memoryview]
R = TypeVar("R")
S = TypeVar("S", bound="Socket")

_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0)


class Socket(FileDescriptor):
    """Base class for network sockets; usually used through a subclass.

    Either creates a new socket of the given domain, type and protocol, or,
    when `fd` is given, takes over that descriptor after checking that it is
    a socket of exactly that domain, type and protocol.
    """

    def __init__(
        self,
        domain: int,
        type: int,
        protocol: int = 0,
        *,
        fd: Optional[FileDescriptor] = None,
    ) -> None:
        if fd is None:
            try:
                created = socket.socket(domain, type, protocol)
            except OSError as exc:
                raise UnixError("socket", exc.errno or 0) from exc
            super().__init__(created.detach())
            return

        self._internal = fd._internal
        if self._getsockopt(socket.SOL_SOCKET, _SO_DOMAIN) != domain:
            raise RuntimeError("socket domain mismatch")
        if self._getsockopt(socket.SOL_SOCKET, socket.SO_TYPE) != type:
            raise RuntimeError("socket type mismatch")
        if self._getsockopt(socket.SOL_SOCKET, _SO_PROTOCOL) != protocol:
            raise RuntimeError("socket protocol mismatch")

    @classmethod
    def _from_fd(cls: type[S], fd: FileDescriptor, domain: int, type: int, protocol: int = 0) -> S:
        sock = cls.__new__(cls)
        Socket.__init__(sock, domain, type, protocol, fd=fd)
        return sock

    @contextmanager
    def _borrowed(self, what: str) -> Iterator[socket.socket]:
        """A socket-module object on our descriptor that never closes it."""
        try:
            sock = socket.socket(fileno=self.fd_num)
        except OSError as exc:
            raise UnixError(what, exc.errno or 0) from exc
        try:
            yield sock
        finally:
            sock.detach()

    def _system(self, what: str, func: Callable[[socket.socket], R]) -> R:
        with self._borrowed(what) as sock:
            try:
                return func(sock)
            except OSError as exc:
                raise UnixError(what, exc.errno or 0) from exc

    def _getsockopt(self, level: int, option: int) -> int:
        return self._system("getsockopt", lambda sock: sock.getsockopt(level, option))

    def _setsockopt(self, level: int, option: int, value: Union[int, BytesLike]) -> None:
        self._system("setsockopt", lambda sock: sock.setsockopt(level, option, value))

    def _get_address(self, what: str, func: Callable[[socket.socket], Any]) -> Address:
        def lookup(sock: socket.socket) -> Address:
            return Address.from_sockaddr(sock.family, func(sock))

        return self._system(what, lookup)

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        self._system("bind", lambda sock: sock.bind(address.sockaddr()))

    def bind_to_device(self, device_name: str) -> None:
        self._setsockopt(socket.SOL_SOCKET, socket.SO_BINDTODEVICE, device_name.encode())

    def connect(self, address: Address) -> None:
        """Connect to a peer; on a non-blocking socket this may still be in progress."""
        with self._borrowed("connect") as sock:
            self._fd_call("connect", sock.connect, address.sockaddr())

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        self._system("shutdown", lambda sock: sock.shutdown(how))
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise RuntimeError("Socket::shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        return self._get_address("getsockname", lambda sock: sock.getsockname())

    def peer_address(self) -> Address:
        return self._get_address("getpeername", lambda sock: sock.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    def throw_if_error(self) -> None:
        """Raise UnixError if the socket has a pending error."""
        socket_error = self._getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if socket_error:
            raise UnixError("socket error", socket_error)


_SO_DOMAIN = getattr(socket, "SO_DOMAIN", 39)
_SO_PROTOCOL = getattr(socket, "SO_PROTOCOL", 38)


class DatagramSocket(Socket):
    """A socket that sends and receives whole datagrams."""

    def recv(self, size: int = 0) -> Optional[tuple[Address, bytes]]:
        """Receive one datagram of at most `size` bytes (READ_BUFFER_SIZE if 0).

        Returns the sender's address and the payload, or None if the socket is
        non-blocking and nothing is waiting.
        """
        if size <= 0:
            size = self.READ_BUFFER_SIZE
        buffer = bytearray(size)
        with self._borrowed("recvfrom") as sock:
            result = self._fd_call("recvfrom", sock.recvfrom_into, buffer, size, _MSG_TRUNC)
            family = sock.family
        self._register_read()
        if result is None:
            return None
        length, source = result
        if length > size:
            raise RuntimeError(f"recvfrom (oversized datagram of length {length})")
        if source is None:
            raise RuntimeError("recvfrom gave invalid namelen")
        return Address.from_sockaddr(family, source), bytes(buffer[:length])

    def send(
        self,
        payload: Union[BytesLike, Sequence[BytesLike]],
        destination: Optional[Address] = None,
    ) -> None:
        """Send a datagram (one buffer, or several gathered into one datagram).

        Without a destination, sends to the connected peer.
        """
        if isinstance(payload, (bytes, bytearray, memoryview)):
            total = len(payload)
            with self._borrowed("sendto") as sock:
                if destination is None:
                    sent = self._fd_call("sendto", sock.send, payload)
                else:
                    sent = self._fd_call("sendto", sock.sendto, payload, destination.sockaddr())
            self._register_write()
            if (sent or 0) != total:
                raise RuntimeError("sendto sent some length other than that of payload")
            return

        buffers = list(payload)
        total = self._check_buffers(buffers)
        with self._borrowed("sendmsg") as sock:
            if destination is None:
                sent = self._fd_call("sendmsg", sock.sendmsg, buffers)
            else:
                sent = self._fd_call("sendmsg", sock.sendmsg, buffers, (), 0, destination.sockaddr())
        self._register_write()
        if (sent or 0) != total:
            raise RuntimeError("sendmsg sent some length other than that of payload")


class UDPSocket(DatagramSocket):
    """An unbound, unconnected UDP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)


class TCPSocket(Socket):
    """An unbound, unconnected TCP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    def listen(self, backlog: int = 16) -> None:
        self._system("listen", lambda sock: sock.listen(backlog))

    def accept(self) -> TCPSocket:
        """Wait for and accept a new connection."""
        self._register_read()
        connection, _ = self._system("accept", lambda sock: sock.accept())
        fd = FileDescriptor(connection.detach())
        return TCPSocket._from_fd(fd, socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)


class PacketSocket(DatagramSocket):
    """A packet socket (AF_PACKET)."""

    def __init__(self, type: int, protocol: int) -> None:
        super().__init__(socket.AF_PACKET, type, protocol)


class RawSocket(DatagramSocket):
    """A raw IPv4 socket (IPPROTO_RAW)."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_RAW)


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket taken over from an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd=fd)


class LocalDatagramSocket(DatagramSocket):
    """An unbound, unconnected Unix-domain datagram socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_DGRAM)


_PAIR_CLASSES: dict[tuple[int, int], type[Socket]] = {
    (socket.AF_UNIX, socket.SOCK_STREAM): LocalStreamSocket,
    (socket.AF_UNIX, socket.SOCK_DGRAM): LocalDatagramSocket,
}


def socket_pair(domain: int = socket.AF_UNIX, type: int = socket.SOCK_STREAM) -> tuple[Socket, Socket]:
    """Create a pair of connected sockets of the given domain and type."""
    try:
        first, second = socket.socketpair(domain, type)
    except OSError as exc:
        raise UnixError("socketpair", exc.errno or 0) from exc
    cls = _PAIR_CLASSES.get((domain, type), Socket)
    fds: Iterable[int] = (first.detach(), second.detach())
    left, right = (cls._from_fd(FileDescriptor(fd), domain, type) for fd in fds)
    return left, right
"""TUN/TAP device descriptors and an adapter carrying TCP over IPv4 through a TUN device."""

from __future__ import annotations

import fcntl
import os
import struct
from typing import Optional

from minnow.errors import UnixError
from minnow.file_descriptor import FileDescriptor
from minnow.helpers import parse, serialize
from minnow.ipv4 import IPv4Datagram, IPv4Header
from minnow.tcp_over_ip import TCPOverIPv4Adapter
from minnow.tcp_segment import TCPMessage, TCPSegment

_CLONEDEV = "/dev/net/tun"
_TUNSETIFF = 0x400454CA
_IFF_TUN = 0x0001
_IFF_TAP = 0x0002
_IFF_NO_PI = 0x1000
_IFNAMSIZ = 16


def _ifreq(devname: str, flags: int) -> bytes:
    """An ifreq structure holding a NUL-terminated device name and flags."""
    name = devname.encode()[: _IFNAMSIZ - 1]
    return struct.pack(f"{_IFNAMSIZ}sh22x", name, flags)


class TunTapFD(FileDescriptor):
    """A descriptor for an existing persistent TUN (IP) or TAP (Ethernet) device."""

    def __init__(self, devname: str, is_tun: bool) -> None:
        try:
            fd = os.open(_CLONEDEV, os.O_RDWR | os.O_CLOEXEC)
        except OSError as exc:
            raise UnixError("open", exc.errno or 0) from exc
        super().__init__(fd)

        flags = (_IFF_TUN if is_tun else _IFF_TAP) | _IFF_NO_PI  # no packet info
        try:
            fcntl.ioctl(fd, _TUNSETIFF, _ifreq(devname, flags))
        except OSError as exc:
            self.close()
            raise UnixError("ioctl", exc.errno or 0) from exc


class TunFD(TunTapFD):
    """A descriptor for an existing persistent TUN device."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A descriptor for an existing persistent TAP device."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)


class TCPOverIPv4OverTunFdAdapter(TCPOverIPv4Adapter):
    """Reads and writes TCP-in-IPv4 datagrams on a TUN device (or any datagram descriptor)."""

    def __init__(self, tun: FileDescriptor) -> None:
        super().__init__()
        self._tun = tun

    def read(self) -> Optional[TCPMessage]:
        """Read one datagram; return its TCP message if it belongs to this connection."""
        buffers = self._tun.read_vectored([IPv4Header.LENGTH, TCPSegment.HEADER_LENGTH, 0])
        datagram = IPv4Datagram()
        if parse(datagram, buffers):
            return self.unwrap_tcp_in_ip(datagram)
        return None

    def write(self, message: TCPMessage) -> None:
        """Wrap a TCP message in an IPv4 datagram and write it to the device."""
        self._tun.write_vectored(serialize(self.wrap_tcp_in_ip(message)))

    def fd(self) -> FileDescriptor:
        return self._tun
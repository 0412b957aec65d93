"""Socket addresses: IPv4/IPv6 endpoints and DNS resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

from minnow.errors import TaggedError

_NUMERIC = socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
_INTERNET_FAMILIES = (socket.AF_INET, socket.AF_INET6)


def _lookup(node: str, service: str, flags: int, family: int) -> tuple[int, Any]:
    try:
        results = socket.getaddrinfo(node, service, family, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(
            f"getaddrinfo({node}, {service})", exc.errno or 0, exc.strerror or str(exc)
        ) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    resolved_family, _, _, _, sockaddr = results[0]
    return int(resolved_family), sockaddr


class Address:
    """A socket address, built from a numeric IPv4 address and port by default."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        self._family, self._sockaddr = _lookup(
            ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV, socket.AF_INET
        )

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Resolve a host name and service name (e.g. "http") to an IPv4 address."""
        family, sockaddr = _lookup(hostname, service, getattr(socket, "AI_ALL", 0), socket.AF_INET)
        return cls.from_sockaddr(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: Any) -> Address:
        """Build an address from an address family and a socket-module address value."""
        family = int(family)
        if family == socket.AF_INET:
            host, port = sockaddr
            if not 0 <= int(port) <= 0xFFFF:
                raise ValueError(f"port out of range: {port}")
            sockaddr = (str(ipaddress.IPv4Address(host)), int(port))
        elif family == socket.AF_INET6:
            parts = tuple(sockaddr)
            if len(parts) == 2:
                parts = parts + (0, 0)
            if len(parts) != 4:
                raise ValueError("IPv6 socket address must have 2 or 4 fields")
            sockaddr = (str(parts[0]), int(parts[1]), int(parts[2]), int(parts[3]))
        address = cls.__new__(cls)
        address._family = family
        address._sockaddr = sockaddr
        return address

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Build an IPv4 address (port 0) from its 32-bit numeric value."""
        return cls.from_sockaddr(socket.AF_INET, (str(ipaddress.IPv4Address(ip_address)), 0))

    @property
    def family(self) -> int:
        return self._family

    def sockaddr(self) -> Any:
        """The address in the form the socket module accepts."""
        return self._sockaddr

    def ip_port(self) -> tuple[str, int]:
        """Numeric IP address string and port."""
        if self._family not in _INTERNET_FAMILIES:
            raise RuntimeError("Address::ip_port() called on non-Internet address")
        try:
            host, port = socket.getnameinfo(self._sockaddr, _NUMERIC)
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno or 0, exc.strerror or str(exc)) from exc
        return host, int(port)

    def ip(self) -> str:
        return self.ip_port()[0]

    def port(self) -> int:
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as an integer in host byte order."""
        if self._family != socket.AF_INET:
            raise RuntimeError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def to_string(self) -> str:
        if self._family in _INTERNET_FAMILIES:
            host, port = self.ip_port()
            return f"{host}:{port}"
        return "(non-Internet address)"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Address({self.to_string()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))
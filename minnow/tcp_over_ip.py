"""Conversion between TCP messages and IPv4 datagrams carrying TCP segments."""

from __future__ import annotations

import ipaddress
from typing import Optional

from minnow.address import Address
from minnow.helpers import parse, serialize
from minnow.ipv4 import IPv4Datagram, IPv4Header
from minnow.tcp_config import FdAdapterBase
from minnow.tcp_segment import TCPMessage, TCPSegment


def _ip_to_string(address: int) -> str:
    return str(ipaddress.IPv4Address(address & 0xFFFFFFFF))


class TCPOverIPv4Adapter(FdAdapterBase):
    """Wraps TCP messages in IPv4 datagrams and unwraps those that belong to the connection."""

    def unwrap_tcp_in_ip(self, datagram: IPv4Datagram) -> Optional[TCPMessage]:
        """Return the TCP message in `datagram`, or None if it is invalid or unrelated.

        While listening, a SYN (without RST) fixes the connection's endpoints
        from the datagram and ends listening.
        """
        header = datagram.header
        config = self.config

        # binding to address "0" is allowed; the reply then comes from the address contacted
        if not self.listening and header.dst != config.source.ipv4_numeric():
            return None
        if not self.listening and header.src != config.destination.ipv4_numeric():
            return None
        if header.proto != IPv4Header.PROTO_TCP:
            return None

        segment = TCPSegment()
        if not parse(segment, datagram.payload, header.pseudo_checksum()):
            return None

        if segment.udinfo.dst_port != config.source.port():
            return None

        if self.listening:
            sender = segment.message.sender
            if not (sender.syn and not sender.rst):
                return None
            config.source = Address(_ip_to_string(header.dst), config.source.port())
            config.destination = Address(_ip_to_string(header.src), segment.udinfo.src_port)
            self.listening = False

        if segment.udinfo.src_port != config.destination.port():
            return None

        return segment.message

    def wrap_tcp_in_ip(self, message: TCPMessage) -> IPv4Datagram:
        """Put `message` in a TCP segment with our ports, inside an IPv4 datagram."""
        payload_size = len(message.sender.payload)
        segment = TCPSegment(message=message)
        segment.udinfo.src_port = self.config.source.port()
        segment.udinfo.dst_port = self.config.destination.port()

        datagram = IPv4Datagram()
        datagram.header.src = self.config.source.ipv4_numeric()
        datagram.header.dst = self.config.destination.ipv4_numeric()
        datagram.header.length = datagram.header.hlen * 4 + TCPSegment.HEADER_LENGTH + payload_size

        segment.compute_checksum(datagram.header.pseudo_checksum())
        datagram.header.compute_checksum()
        datagram.payload = serialize(segment)
        return datagram
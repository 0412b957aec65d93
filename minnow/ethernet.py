"""Ethernet addresses, headers and frames."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from minnow.parser import Parser, Serializer

ETHERNET_ADDRESS_LENGTH = 6

# Ethernet broadcast address (ff:ff:ff:ff:ff:ff)
ETHERNET_BROADCAST = b"\xff" * ETHERNET_ADDRESS_LENGTH


def ethernet_to_string(address: bytes) -> str:
    """Colon-separated lower-case hex form of an Ethernet address."""
    return ":".join(f"{octet:02x}" for octet in address)


def _check_address(name: str, address: bytes) -> bytes:
    if len(address) != ETHERNET_ADDRESS_LENGTH:
        raise ValueError(f"{name} must be {ETHERNET_ADDRESS_LENGTH} bytes, got {len(address)}")
    return bytes(address)


@dataclass
class EthernetHeader:
    """An Ethernet frame header: destination, source and frame type."""

    LENGTH: ClassVar[int] = 14
    TYPE_IPv4: ClassVar[int] = 0x800
    TYPE_ARP: ClassVar[int] = 0x806

    dst: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    src: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    type: int = 0

    def to_string(self) -> str:
        if self.type == self.TYPE_IPv4:
            kind = "IPv4"
        elif self.type == self.TYPE_ARP:
            kind = "ARP"
        else:
            kind = f"[unknown type {self.type:x}!]"
        return f"dst={ethernet_to_string(self.dst)} src={ethernet_to_string(self.src)} type={kind}"

    def __str__(self) -> str:
        return self.to_string()

    def parse(self, parser: Parser) -> None:
        self.dst = parser.string(ETHERNET_ADDRESS_LENGTH)
        self.src = parser.string(ETHERNET_ADDRESS_LENGTH)
        self.type = parser.integer(2)

    def serialize(self, serializer: Serializer) -> None:
        dst = _check_address("dst", self.dst)
        src = _check_address("src", self.src)
        for octet in dst + src:
            serializer.integer(octet, 1)
        serializer.integer(self.type, 2)


@dataclass
class EthernetFrame:
    """An Ethernet header followed by a payload held as a list of buffers."""

    header: EthernetHeader = field(default_factory=EthernetHeader)
    payload: list[bytes] = field(default_factory=list)

    def parse(self, parser: Parser) -> None:
        self.header.parse(parser)
        self.payload = parser.all_remaining()

    def serialize(self, serializer: Serializer) -> None:
        self.header.serialize(serializer)
        serializer.buffer(self.payload)
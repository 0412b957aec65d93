"""Convenience functions for serializing, parsing and describing frames."""

from __future__ import annotations

import dataclasses
from typing import Any, Iterable, TypeVar, Union

from minnow.arp import ARPMessage
from minnow.ethernet import EthernetFrame, EthernetHeader
from minnow.ipv4 import IPv4Datagram
from minnow.parser import Parser, Serializer

BytesLike = Union[bytes, bytearray, memoryview]
T = TypeVar("T", EthernetFrame, IPv4Datagram)


def serialize(obj: Any) -> list[bytes]:
    """Serialize any object that has a `serialize(serializer)` method."""
    serializer = Serializer()
    obj.serialize(serializer)
    return serializer.finish()


def parse(obj: Any, buffers: BytesLike | Iterable[BytesLike], *args: Any) -> bool:
    """Parse `buffers` into `obj`; return True if parsing succeeded."""
    parser = Parser(buffers)
    obj.parse(parser, *args)
    return not parser.has_error()


def concat(buffers: Iterable[BytesLike]) -> bytes:
    """Join a sequence of buffers into one byte string."""
    return b"".join(bytes(b) for b in buffers)


def pretty_print(data: BytesLike | str, max_length: int = 32) -> str:
    """Escape unprintable bytes and double quotes, truncating with '...'."""
    if isinstance(data, str):
        data = data.encode()
    out: list[str] = []
    size = 0
    truncated = False
    for ch in bytes(data):
        if size >= max_length:
            truncated = True
            break
        piece = chr(ch) if 0x20 <= ch <= 0x7E and ch != 0x22 else f"\\x{ch:02x}"
        out.append(piece)
        size += len(piece)
    result = "".join(out)
    if truncated:
        result = result[:-3] + "..." if len(result) >= 3 else result + "..."
    return result


def summary(frame: EthernetFrame) -> str:
    """One-line description of an Ethernet frame and its contents."""
    out = frame.header.to_string() + " payload: "
    if frame.header.type == EthernetHeader.TYPE_IPv4:
        dgram = IPv4Datagram()
        if parse(dgram, clone(frame).payload):
            out += dgram.header.to_string() + " payload="
            out += '"' + pretty_print(concat(dgram.payload)) + '"'
        else:
            out += "bad IPv4 datagram"
    elif frame.header.type == EthernetHeader.TYPE_ARP:
        arp = ARPMessage()
        if parse(arp, clone(frame).payload):
            out += arp.to_string()
        else:
            out += "bad ARP message"
    else:
        out += "unknown frame type"
    return out


def clone(obj: T) -> T:
    """Copy a frame or datagram so that changes to the copy leave the original alone."""
    if not isinstance(obj, (EthernetFrame, IPv4Datagram)):
        raise TypeError(f"cannot clone {type(obj).__name__}")
    return dataclasses.replace(
        obj, header=dataclasses.replace(obj.header), payload=list(obj.payload)
    )
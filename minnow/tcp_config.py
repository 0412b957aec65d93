"""Configuration for TCP peers and for the adapters that carry their segments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from minnow.address import Address


def _any_address() -> Address:
    return Address("0", 0)


@dataclass
class TCPConfig:
    """Settings for a TCP sender and receiver."""

    DEFAULT_CAPACITY: ClassVar[int] = 64000
    MAX_PAYLOAD_SIZE: ClassVar[int] = 1000  # conservative for the real Internet
    TIMEOUT_DFLT: ClassVar[int] = 1000  # default retransmission timeout, in ms
    MAX_RETX_ATTEMPTS: ClassVar[int] = 8

    rt_timeout: int = 1000  # initial retransmission timeout, in milliseconds
    recv_capacity: int = 64000
    send_capacity: int = 64000
    isn: int = 137  # initial sequence number (32-bit)


@dataclass
class FdAdapterConfig:
    """Endpoints and loss rates used by datagram adapters.

    Loss rates are out of 65536: a rate of r drops about r/65536 of the traffic.
    """

    source: Address = field(default_factory=_any_address)
    destination: Address = field(default_factory=_any_address)
    loss_rate_dn: int = 0
    loss_rate_up: int = 0

    def __post_init__(self) -> None:
        for name in ("loss_rate_dn", "loss_rate_up"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFFFF:
                raise ValueError(f"{name} must be between 0 and 65535, got {value}")


class FdAdapterBase:
    """State shared by datagram adapters: their configuration and listening flag."""

    def __init__(self) -> None:
        self.config = FdAdapterConfig()
        self.listening = False

    def tick(self, ms: int) -> None:
        """Time passing has no effect on a plain adapter."""
        return None
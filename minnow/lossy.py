"""An adapter wrapper that randomly drops segments in either direction."""

from __future__ import annotations

import os
import random
from typing import Any, Optional, Protocol

from minnow.tcp_config import FdAdapterConfig
from minnow.tcp_segment import TCPMessage


class _DatagramAdapter(Protocol):
    config: FdAdapterConfig
    listening: bool

    def read(self) -> Optional[TCPMessage]: ...

    def write(self, message: TCPMessage) -> None: ...

    def fd(self) -> Any: ...

    def tick(self, ms: int) -> None: ...


class _RandomBits(Protocol):
    def getrandbits(self, k: int) -> int: ...


def get_random_engine() -> random.Random:
    """A pseudo-random generator seeded from the operating system's entropy source."""
    return random.Random(os.urandom(4096))


class LossyFdAdapter:
    """Passes segments to and from an adapter, dropping some at the configured loss rates."""

    def __init__(self, adapter: _DatagramAdapter, rng: Optional[_RandomBits] = None) -> None:
        self._adapter = adapter
        self._rng = rng if rng is not None else get_random_engine()

    def _should_drop(self, uplink: bool) -> bool:
        config = self._adapter.config
        loss = config.loss_rate_up if uplink else config.loss_rate_dn
        return loss != 0 and self._rng.getrandbits(16) < loss

    def fd(self) -> Any:
        """The underlying adapter's file descriptor."""
        return self._adapter.fd()

    def read(self) -> Optional[TCPMessage]:
        """Read from the adapter; None if it had nothing or the segment was dropped."""
        message = self._adapter.read()
        if self._should_drop(False):
            return None
        return message

    def write(self, message: TCPMessage) -> None:
        """Write through the adapter, unless the segment is dropped."""
        if self._should_drop(True):
            return
        self._adapter.write(message)

    def set_listening(self, listening: bool) -> None:
        self._adapter.listening = listening

    @property
    def config(self) -> FdAdapterConfig:
        return self._adapter.config

    @config.setter
    def config(self, value: FdAdapterConfig) -> None:
        self._adapter.config = value

    def tick(self, ms: int) -> None:
        self._adapter.tick(ms)
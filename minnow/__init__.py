"""User-space networking toolkit: wire formats, checksums, sockets, an event loop and TUN/TAP adapters."""

__version__ = "0.1.0"
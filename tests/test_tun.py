import errno
import os
import socket

import pytest

from minnow.address import Address
from minnow.errors import UnixError
from minnow.sockets import socket_pair
from minnow.tcp_segment import TCPMessage, TCPReceiverMessage, TCPSenderMessage
from minnow.tun import TapFD, TCPOverIPv4OverTunFdAdapter, TunFD, TunTapFD, _ifreq


def test_open_failure_raises_unix_error(monkeypatch):
    def fail(path, flags, *args):
        raise OSError(errno.ENOENT, "missing")

    monkeypatch.setattr(os, "open", fail)
    with pytest.raises(UnixError) as info:
        TunFD("tun144")
    assert info.value.attempt == "open"
    assert info.value.errno == errno.ENOENT


def test_ioctl_failure_closes_descriptor(monkeypatch):
    read_end, write_end = os.pipe()
    opened = []

    def fake_open(path, flags, *args):
        opened.append(path)
        return read_end

    monkeypatch.setattr(os, "open", fake_open)
    try:
        with pytest.raises(UnixError) as info:
            TapFD("tap10")
        assert info.value.attempt == "ioctl"
        assert opened == ["/dev/net/tun"]
        with pytest.raises(OSError):
            os.fstat(read_end)
    finally:
        os.close(write_end)


def test_ifreq_truncates_and_terminates_name():
    request = _ifreq("a" * 20, 1)
    assert len(request) == 40
    assert request[:15] == b"a" * 15
    assert request[15] == 0


def test_ifreq_pads_short_name():
    request = _ifreq("tun144", 1)
    assert request[:16] == b"tun144" + bytes(10)


def test_tun_and_tap_are_tuntap_descriptors():
    assert issubclass(TunFD, TunTapFD) and issubclass(TapFD, TunTapFD)
    assert TunFD.__mro__.index(TunTapFD) == 1


@pytest.fixture
def adapters():
    left, right = socket_pair(socket.AF_UNIX, socket.SOCK_DGRAM)
    a = TCPOverIPv4OverTunFdAdapter(left)
    a.config.source = Address("10.0.0.1", 1000)
    a.config.destination = Address("10.0.0.2", 2000)
    b = TCPOverIPv4OverTunFdAdapter(right)
    b.config.source = Address("10.0.0.2", 2000)
    b.config.destination = Address("10.0.0.1", 1000)
    yield a, b
    left.close()
    right.close()


def test_write_then_read_delivers_message(adapters):
    a, b = adapters
    message = TCPMessage(
        TCPSenderMessage(seqno=42, payload=b"over the wire"),
        TCPReceiverMessage(ackno=7, window_size=100),
    )
    a.write(message)
    assert b.read() == message
    assert a.fd().write_count == 1
    assert b.fd().read_count == 1


def test_read_of_garbage_returns_none(adapters):
    a, b = adapters
    a.fd().write(b"not an ip datagram at all")
    assert b.read() is None


def test_read_of_unrelated_datagram_returns_none(adapters):
    a, b = adapters
    a.config.destination = Address("10.0.0.9", 2000)
    a.write(TCPMessage(TCPSenderMessage(seqno=1, payload=b"x")))
    assert b.read() is None


def test_listening_adapter_learns_peer_over_descriptor(adapters):
    a, b = adapters
    b.config.source = Address("0", 2000)
    b.config.destination = Address("0", 0)
    b.listening = True
    syn = TCPMessage(TCPSenderMessage(seqno=100, syn=True), TCPReceiverMessage(window_size=10))
    a.write(syn)
    assert b.read() == syn
    assert b.listening is False
    assert b.config.destination == Address("10.0.0.1", 1000)
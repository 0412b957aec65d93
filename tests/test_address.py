import socket

import pytest

from minnow.address import Address
from minnow.errors import TaggedError


def test_numeric_ip_and_port():
    address = Address("1.2.3.4", 80)
    assert address.ip_port() == ("1.2.3.4", 80)
    assert address.ip() == "1.2.3.4"
    assert address.port() == 80


def test_to_string():
    assert Address("8.8.8.8", 53).to_string() == "8.8.8.8:53"
    assert str(Address("8.8.8.8", 53)) == "8.8.8.8:53"


def test_default_port_is_zero():
    assert Address("10.0.0.1").port() == 0


def test_zero_address():
    assert Address("0", 0).ip() == "0.0.0.0"


def test_ipv4_numeric_value():
    assert Address("1.2.3.4").ipv4_numeric() == 0x01020304


def test_ipv4_numeric_round_trip():
    for value in (0, 1, 0x7F000001, 0xFFFFFFFF, 0xC0A80001):
        address = Address.from_ipv4_numeric(value)
        assert address.ipv4_numeric() == value
        assert address.port() == 0


def test_from_ipv4_numeric_matches_string_form():
    original = Address("18.243.0.1")
    assert Address.from_ipv4_numeric(original.ipv4_numeric()) == original


def test_equality_and_hash():
    a = Address("10.0.0.1", 5)
    b = Address.from_sockaddr(socket.AF_INET, ("10.0.0.1", 5))
    assert a == b
    assert hash(a) == hash(b)
    assert a != Address("10.0.0.1", 6)
    assert a != Address("10.0.0.2", 5)


def test_sockaddr_and_family():
    address = Address("127.0.0.1", 9000)
    assert address.sockaddr() == ("127.0.0.1", 9000)
    assert address.family == socket.AF_INET


def test_invalid_numeric_host_raises():
    with pytest.raises(TaggedError) as info:
        Address("not an address", 1)
    assert str(info.value).startswith("getaddrinfo(not an address, 1)")


def test_port_out_of_range():
    with pytest.raises(ValueError):
        Address("1.2.3.4", 70000)


def test_resolve_numeric():
    assert Address.resolve("127.0.0.1", "8080").ip_port() == ("127.0.0.1", 8080)


def test_non_internet_address():
    address = Address.from_sockaddr(socket.AF_UNIX, "/tmp/minnow-test-socket")
    assert address.to_string() == "(non-Internet address)"
    with pytest.raises(RuntimeError):
        address.ip_port()
    with pytest.raises(RuntimeError):
        address.ipv4_numeric()


def test_ipv6_address():
    address = Address.from_sockaddr(socket.AF_INET6, ("::1", 53))
    assert address.ip_port() == ("::1", 53)
    assert address.to_string() == "::1:53"
    with pytest.raises(RuntimeError):
        address.ipv4_numeric()
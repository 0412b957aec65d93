import errno
import os

import pytest

from minnow.errors import TaggedError, UnixError, check_system_call, notnull


def test_tagged_error_message_and_code():
    err = TaggedError("getaddrinfo(host, 80)", 7, "lookup failed")
    assert str(err) == "getaddrinfo(host, 80): lookup failed"
    assert err.error_code == 7
    assert err.attempt == "getaddrinfo(host, 80)"


def test_unix_error_uses_strerror():
    err = UnixError("read", errno.EBADF)
    assert str(err) == "read: " + os.strerror(errno.EBADF)
    assert err.error_code == errno.EBADF
    assert err.errno == errno.EBADF


def test_unix_error_is_tagged_and_runtime_error():
    with pytest.raises(TaggedError) as tagged:
        raise UnixError("close", errno.EIO)
    assert tagged.value.error_code == errno.EIO
    assert tagged.value.attempt == "close"

    with pytest.raises(RuntimeError) as runtime:
        raise UnixError("close", errno.EIO)
    assert str(runtime.value) == "close: " + os.strerror(errno.EIO)


@pytest.mark.parametrize("value", [0, 1, 42])
def test_check_system_call_passes_through(value):
    assert check_system_call("poll", value) == value


def test_check_system_call_raises_on_negative():
    with pytest.raises(UnixError) as info:
        check_system_call("socket", -errno.EACCES)
    assert info.value.error_code == errno.EACCES
    assert str(info.value).startswith("socket: ")


def test_notnull_returns_value():
    obj = object()
    assert notnull("ctx", obj) is obj
    assert notnull("ctx", 0) == 0


def test_notnull_raises_on_none():
    with pytest.raises(RuntimeError, match="lookup: returned null pointer"):
        notnull("lookup", None)
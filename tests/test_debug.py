import pytest

from minnow.debug import debug, debug_str, reset_debug_handler, set_debug_handler


@pytest.fixture
def captured():
    messages = []
    set_debug_handler(messages.append)
    try:
        yield messages
    finally:
        reset_debug_handler()


def test_debug_str_goes_to_handler(captured):
    debug_str("hello")
    assert captured == ["hello"]


def test_debug_formats_arguments(captured):
    debug("x={} y={name}", 5, name="z")
    assert captured == ["x=5 y=z"]


def test_default_handler_writes_stderr(capsys):
    reset_debug_handler()
    debug_str("something happened")
    assert capsys.readouterr().err == "DEBUG: something happened\n"


def test_reset_restores_default(capsys):
    messages = []
    set_debug_handler(messages.append)
    reset_debug_handler()
    debug("value {}", 3)
    assert messages == []
    assert capsys.readouterr().err == "DEBUG: value 3\n"
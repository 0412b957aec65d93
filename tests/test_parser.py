import pytest

from minnow.parser import Parser, Serializer


def test_integer_across_buffers():
    p = Parser([b"\x12", b"\x34\x56"])
    assert p.integer(2) == 0x1234
    assert p.integer(1) == 0x56
    assert not p.has_error()


def test_integer_short_input_sets_error():
    p = Parser([b"\x01\x02"])
    assert p.integer(4) == 0
    assert p.has_error()
    # nothing consumed after an error
    assert p.integer(1) == 0
    assert p.concatenate_all_remaining() == b"\x01\x02"


def test_serializer_parser_round_trip():
    s = Serializer()
    s.integer(0xAB, 1)
    s.integer(0xBEEF, 2)
    s.integer(0xDEADBEEF, 4)
    s.integer(2**63 + 5, 8)
    s.buffer(b"payload")
    p = Parser(s.finish())
    assert p.integer(1) == 0xAB
    assert p.integer(2) == 0xBEEF
    assert p.integer(4) == 0xDEADBEEF
    assert p.integer(8) == 2**63 + 5
    assert p.concatenate_all_remaining() == b"payload"
    assert not p.has_error()


def test_serializer_buffers_are_split_and_empty_skipped():
    s = Serializer()
    s.integer(1, 2)
    s.buffer(b"")
    s.buffer(b"abc")
    s.buffer([b"de", b"", b"f"])
    s.integer(2, 1)
    out = s.finish()
    assert out == [b"\x00\x01", b"abc", b"de", b"f", b"\x02"]
    assert s.finish() == []


def test_serializer_truncates_value_to_size():
    s = Serializer()
    s.integer(0x1FF, 1)
    assert s.finish() == [b"\xff"]


def test_serializer_rejects_bad_size():
    with pytest.raises(ValueError):
        Serializer().integer(1, 0)


def test_string_reads_across_buffers():
    p = Parser([b"ab", b"cd", b"ef"])
    assert p.string(3) == b"abc"
    assert p.string(2) == b"de"
    assert p.string(5) == bytes(5)
    assert p.has_error()


def test_remove_prefix_and_all_remaining():
    p = Parser([b"hello", b"world"])
    p.remove_prefix(3)
    assert p.all_remaining() == [b"lo", b"world"]
    assert p.all_remaining() == []


def test_buffer_does_not_consume():
    p = Parser([b"abc", b"def"])
    p.remove_prefix(1)
    assert [bytes(v) for v in p.buffer()] == [b"bc", b"def"]
    assert p.concatenate_all_remaining() == b"bcdef"


@pytest.mark.parametrize("length", range(0, 9))
def test_truncate_keeps_prefix(length):
    data = [b"abc", b"de", b"fgh"]
    joined = b"".join(data)
    p = Parser(data)
    p.truncate(length)
    assert p.concatenate_all_remaining() == joined[:length]


@pytest.mark.parametrize("skip,length", [(1, 3), (2, 1), (4, 2), (3, 5)])
def test_truncate_after_prefix_removed(skip, length):
    data = [b"abc", b"de", b"fgh"]
    joined = b"".join(data)
    p = Parser(data)
    p.remove_prefix(skip)
    p.truncate(length)
    assert p.concatenate_all_remaining() == joined[skip : skip + length]


def test_truncate_larger_than_input_is_noop():
    p = Parser([b"xy"])
    p.truncate(10)
    assert p.concatenate_all_remaining() == b"xy"


def test_single_bytes_input_accepted():
    p = Parser(b"\x00\x07rest")
    assert p.integer(2) == 7
    assert p.concatenate_all_remaining() == b"rest"


def test_set_error():
    p = Parser([b"\x01"])
    p.set_error()
    assert p.has_error()
    assert p.integer(1) == 0
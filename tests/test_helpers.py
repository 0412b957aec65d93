import pytest

from minnow.arp import ARPMessage
from minnow.ethernet import EthernetFrame, EthernetHeader
from minnow.helpers import clone, concat, parse, pretty_print, serialize, summary
from minnow.ipv4 import IPv4Datagram, IPv4Header

SRC = bytes([0x02, 0, 0, 0, 0, 0x01])
DST = bytes([0x02, 0, 0, 0, 0, 0x02])


def _frame(kind, payload):
    return EthernetFrame(header=EthernetHeader(dst=DST, src=SRC, type=kind), payload=payload)


def _datagram(payload):
    header = IPv4Header(src=0x0A000001, dst=0x0A000002, length=IPv4Header.LENGTH + len(payload))
    header.compute_checksum()
    return IPv4Datagram(header=header, payload=[payload])


def test_pretty_print_plain():
    assert pretty_print(b"hello") == "hello"


def test_pretty_print_escapes():
    assert pretty_print(b'"') == "\\x22"
    assert pretty_print(b"\x00") == "\\x00"


def test_pretty_print_truncates():
    result = pretty_print(b"a" * 40)
    assert len(result) == 32
    assert result.endswith("...")
    assert result.startswith("a" * 29)


def test_pretty_print_exact_length_not_truncated():
    assert pretty_print(b"a" * 32) == "a" * 32


def test_pretty_print_tiny_max_length():
    assert pretty_print(b"abc", 0) == "..."


def test_concat():
    assert concat([b"ab", b"", bytearray(b"cd")]) == b"abcd"


def test_serialize_parse_round_trip():
    header = EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_ARP)
    parsed = EthernetHeader()
    assert parse(parsed, serialize(header))
    assert parsed == header


def test_parse_reports_failure():
    assert not parse(EthernetHeader(), [b"\x00\x01"])


def test_clone_is_independent():
    frame = _frame(EthernetHeader.TYPE_IPv4, [b"x"])
    copy = clone(frame)
    assert copy == frame
    copy.payload.append(b"y")
    copy.header.type = EthernetHeader.TYPE_ARP
    assert frame.payload == [b"x"]
    assert frame.header.type == EthernetHeader.TYPE_IPv4


def test_clone_rejects_other_types():
    with pytest.raises(TypeError):
        clone(EthernetHeader())


def test_summary_ipv4():
    dgram = _datagram(b"hi")
    frame = _frame(EthernetHeader.TYPE_IPv4, serialize(dgram))
    text = summary(frame)
    assert text.startswith(frame.header.to_string() + " payload: ")
    assert text.endswith(dgram.header.to_string() + ' payload="hi"')


def test_summary_bad_ipv4():
    frame = _frame(EthernetHeader.TYPE_IPv4, [b"\x00\x01"])
    assert summary(frame).endswith("bad IPv4 datagram")


def test_summary_arp():
    arp = ARPMessage(opcode=ARPMessage.OPCODE_REPLY, sender_ip_address=1, target_ip_address=2)
    frame = _frame(EthernetHeader.TYPE_ARP, serialize(arp))
    assert summary(frame).endswith(arp.to_string())


def test_summary_bad_arp_and_unknown():
    assert summary(_frame(EthernetHeader.TYPE_ARP, [b"\x00"])).endswith("bad ARP message")
    assert summary(_frame(0x1234, [b"\x00"])).endswith("unknown frame type")


def test_summary_leaves_frame_untouched():
    frame = _frame(EthernetHeader.TYPE_IPv4, serialize(_datagram(b"data")))
    before = clone(frame)
    summary(frame)
    assert frame == before
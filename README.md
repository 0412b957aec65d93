# minnow

minnow is a small user-space networking toolkit for Linux. It has no dependencies beyond the standard library.

It provides four groups of tools.

- **Wire formats.** These are `EthernetHeader` and `EthernetFrame` (`minnow.ethernet`), `ARPMessage` (`minnow.arp`), `IPv4Header` and `IPv4Datagram` (`minnow.ipv4`), and `TCPSegment` (`minnow.tcp_segment`). Each one parses from a list of byte buffers and serializes back into one. IPv4 headers and TCP segments compute and verify Internet checksums.
- **Parsing helpers.** `minnow.parser` provides `Parser` and `Serializer`. These handle big-endian integers and byte strings across split buffers. `minnow.checksum` provides `InternetChecksum`. `minnow.helpers` provides `parse`, `serialize`, `concat`, `pretty_print`, `summary` and `clone`.
- **System plumbing.** `minnow.file_descriptor.FileDescriptor` is a shared descriptor handle that counts reads and writes. `minnow.sockets` wraps UDP, TCP, packet, raw and Unix-domain sockets and provides `socket_pair`. `minnow.eventloop.EventLoop` is built on `poll`. `minnow.tun` wraps TUN/TAP devices.
- **TCP-over-IPv4 adapters.** `TCPOverIPv4Adapter` (`minnow.tcp_over_ip`) wraps TCP messages in IPv4 datagrams and unwraps the datagrams that belong to the configured connection. `TCPOverIPv4OverTunFdAdapter` (`minnow.tun`) does the same over a descriptor. `LossyFdAdapter` (`minnow.lossy`) drops segments at random, at configured rates.

## Installation

```
pip install .
```

Running the tests needs the `test` extra:

```
pip install ".[test]"
pytest
```

## Examples

### Build an IPv4 datagram and parse it back

```python
from minnow.ipv4 import IPv4Datagram
from minnow.helpers import serialize, parse, concat

dgram = IPv4Datagram()
dgram.header.src = 0x0A000001        # 10.0.0.1
dgram.header.dst = 0x0A000002        # 10.0.0.2
dgram.payload = [b"hello"]
dgram.header.length = dgram.header.hlen * 4 + 5
dgram.header.compute_checksum()

wire = serialize(dgram)              # list of bytes buffers
print(concat(wire).hex())

copy = IPv4Datagram()
assert parse(copy, wire)             # False if malformed or the checksum is wrong
print(copy.header.to_string())       # IPv4 len=25 proto=6 ttl=128 src=10.0.0.1 dst=10.0.0.2
```

### A TCP segment with its checksum

`TCPSegment.parse` takes the IPv4 pseudo-header sum as an extra argument. `parse` passes it through to the segment.

```python
from minnow.ipv4 import IPv4Header
from minnow.tcp_segment import TCPSegment
from minnow.helpers import parse, serialize

ip = IPv4Header(src=0x0A000001, dst=0x0A000002, length=20 + 20 + 5)

seg = TCPSegment()
seg.message.sender.seqno = 1000
seg.message.sender.syn = True
seg.message.sender.payload = b"hello"
seg.udinfo.src_port, seg.udinfo.dst_port = 40000, 80
seg.compute_checksum(ip.pseudo_checksum())

back = TCPSegment()
assert parse(back, serialize(seg), ip.pseudo_checksum())
print(back.to_string())
```

### Internet checksum

```python
from minnow.checksum import InternetChecksum

check = InternetChecksum()
check.add(b"\x45\x00\x00\x1c")       # bytes, or a sequence of buffers
print(hex(check.value()))
```

### Summarize an Ethernet frame

```python
from minnow.ethernet import EthernetFrame, EthernetHeader
from minnow.helpers import summary

frame = EthernetFrame()
frame.header.type = EthernetHeader.TYPE_ARP
print(summary(frame))                # "... type=ARP payload: bad ARP message"
```

### Sockets and descriptors

```python
from minnow.sockets import socket_pair

left, right = socket_pair()          # two connected LocalStreamSocket objects
left.write_all(b"ping")
print(right.read(4), right.read_count)
```

### Event loop

`add_rule` runs a callback while its interest function returns true. `add_fd_rule` runs a callback when a descriptor is readable (`Direction.IN`) or writable (`Direction.OUT`). `wait_next_event` serves at most one rule. It returns `Result.SUCCESS`, `Result.TIMEOUT` or `Result.EXIT`.

```python
from minnow.eventloop import EventLoop, Result

loop = EventLoop()
pending = [1, 2, 3]
loop.add_rule("drain", lambda: pending.pop(), lambda: bool(pending))
while loop.wait_next_event(10) is Result.SUCCESS:
    pass
```

### Debug output

`minnow.debug.debug(fmt, *args)` formats its message with `str.format` and sends it to the current handler. The default handler writes to standard error. `set_debug_handler` replaces the handler with any callable that takes a string, and `reset_debug_handler` restores the default. `debug` is silent when Python runs with `-O`.

## Errors

Failed system calls raise `minnow.errors.UnixError`, which carries `attempt` and `errno`. Name-resolution failures in `Address` raise `minnow.errors.TaggedError`. Failed consistency checks raise `RuntimeError` or `ValueError`. An example of such a check is serializing an unsupported `ARPMessage`.

## Configuration

`minnow.tcp_config.TCPConfig` holds:

- the retransmission timeout;
- the capacities;
- the initial sequence number.

`FdAdapterConfig` holds:

- the source and destination `Address`es;
- the loss rates `loss_rate_dn` and `loss_rate_up`. Each rate is out of 65536 and must be between 0 and 65535.

## What it does not do

minnow carries TCP messages but does not implement TCP itself. It has no sender, no receiver, no stream reassembly, no retransmission logic, and no socket that runs a TCP connection. `TCPOverIPv4Adapter` only converts between `TCPMessage` values and IPv4 datagrams and filters datagrams by address and port. There is no command-line program.

TUN/TAP devices (`TunFD`, `TapFD`) need Linux. The device must already exist, and your user must be allowed to open it.
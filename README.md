# minnow

Building blocks for user-space networking:

- reading and writing Ethernet, IPv4 and ARP headers in their wire formats
- the Internet checksum
- IPv4 socket addresses
- reference-counted wrappers around file descriptors and sockets

The package runs on Linux. It relies on `fcntl`, `os.readv` and `os.writev`,
and packet sockets need `AF_PACKET`. It needs nothing outside the standard
library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Parsing and serializing

`minnow.parser` provides two classes:

- `Parser` reads unsigned big-endian integers and byte strings from a list
  of byte buffers. Use `integer(size)` for an integer and `string(size)` for
  a byte string. Reading past the end does not raise. It sets the sticky
  `has_error` flag, and the read returns `0` or `b""`.
- `Serializer` writes big-endian integers with `integer(value, size)` and
  whole buffers with `buffer(data)`. `output()` returns the result as a
  list of `bytes`.

Every wire object has a `parse(parser)` method and a `serialize(serializer)`
method. The helper functions `serialize(obj)` and `parse(obj, buffers)`
create the `Parser` or `Serializer` for you:

- `serialize(obj)` returns a list of byte buffers.
- `parse(obj, buffers)` fills in the object. It returns `True` if the input
  was well formed.

```python
from minnow.ipv4 import IPv4Header
from minnow.parser import parse, serialize

header = IPv4Header()
header.src = 0x0A000002   # 10.0.0.2
header.dst = 0xC0A80002   # 192.168.0.2
header.len = 20
header.compute_checksum()

wire = serialize(header)

decoded = IPv4Header()
assert parse(decoded, wire)
print(decoded)            # IPv4, len=14, protocol=6, src=10.0.0.2, dst=192.168.0.2
```

In the `str()` of an `IPv4Header`, the version, length and protocol are
shown in hexadecimal. The TTL appears only when it is below 10.

`IPv4Header` does not support IP options:

- When parsing, any options are skipped.
- When serializing, options are never written, and the checksum is not
  recomputed. Call `compute_checksum()` first.
- Parsing fails when the version is not 4, when the header length is below
  5, or when the checksum does not match.
- Serializing a header whose version is not 4 raises `ValueError`.

The other wire objects are:

- `EthernetHeader` and `EthernetFrame` in `minnow.ethernet`. An Ethernet
  address is a 6-byte `bytes` value. `format_ethernet_address` renders it
  in the `02:00:00:00:00:01` form, and `ETHERNET_BROADCAST` holds the
  all-ones address.
- `IPv4Datagram` in `minnow.ipv4`, which is also available as
  `InternetDatagram`. It holds a header followed by a list of payload
  buffers.
- `ARPMessage` in `minnow.arp`. Parsing fails for anything other than an
  Ethernet/IPv4 request or reply, and serializing such a message raises
  `ValueError`. Use `supported()` to check a message first.

`InternetChecksum` in `minnow.checksum` computes the ones'-complement
checksum over any number of byte chunks. Chunks of odd length are handled
as if all the chunks had been joined together:

```python
from minnow.checksum import InternetChecksum

check = InternetChecksum()
check.add(b"\x45\x00\x00\x14")
print(hex(check.value()))
```

## Addresses

`minnow.address.Address` holds a socket address.

```python
from minnow.address import Address

a = Address("18.243.0.1", 80)
print(a)                    # 18.243.0.1:80
print(a.ipv4_numeric())     # 317915137
print(Address.from_ipv4_numeric(0x08080808).ip_port())  # ('8.8.8.8', 0)
```

- `Address(ip, port)` takes a numeric IPv4 address and port. It performs no
  name lookup.
- `Address.resolve(hostname, service)` looks the host name up through the
  system resolver.
- `Address.from_sockaddr(family, sockaddr)` wraps an address in the form the
  `socket` module returns it.
- A failed resolution raises `minnow.errors.TaggedError`.
- Addresses compare equal when their family and socket-module tuple match.
  They can be used as dictionary keys.

## File descriptors and sockets

`minnow.file_descriptor.FileDescriptor` wraps a kernel file descriptor:

- `duplicate()` returns another handle to the same descriptor.
- The descriptor is closed when the last handle goes away, when `close()`
  is called, or when a `with` block exits.
- `read()` returns up to 16384 bytes.
- `read_vectored(sizes)` scatters one read across several buffers.
- `write(data)` accepts one buffer or a sequence of buffers.
- `set_blocking(blocking)` switches between blocking and non-blocking mode.
  On a non-blocking descriptor, a call that would block returns empty
  instead of raising.
- The properties `fd_num`, `eof`, `closed`, `read_count` and `write_count`
  report the descriptor's state.

`minnow.sockets` provides `TCPSocket`, `UDPSocket` and `PacketSocket`:

```python
from minnow.address import Address
from minnow.sockets import TCPSocket

with TCPSocket() as server:
    server.set_reuseaddr()
    server.bind(Address("127.0.0.1", 0))
    server.listen(16)
    print(server.local_address())
```

- All sockets support `bind`, `connect`, `shutdown`, `local_address`,
  `peer_address`, `set_reuseaddr`, `bind_to_device` and `raise_if_error`.
  `raise_if_error` raises any error pending on a non-blocking socket.
- Datagram sockets add `recv()`, which returns `(sender_address, payload)`,
  and `sendto(destination, payload)` and `send(payload)`.
- `TCPSocket.accept()` waits for a connection and returns a new `TCPSocket`.
- `PacketSocket.set_promiscuous()` asks to receive every frame seen by the
  bound interface.

Failed system calls raise `minnow.errors.UnixError`. It is a subclass of
`TaggedError`, and its message names the call that failed.
`minnow.errors` also has `check_system_call` and `notnull` for checking
return values.

`minnow.randomness.get_random_engine()` returns a `random.Random` seeded from
the operating system's entropy source.

## What this package does not do

This package supplies parts, not a network stack. It does not include:

- a TCP sender or receiver
- a stream reassembler
- a network interface or router
- a command-line program

There is nothing to run other than the tests.
import errno
import socket

import pytest

from minnow.address import Address
from minnow.errors import UnixError
from minnow.sockets import TCPSocket, UDPSocket

LOOPBACK = "127.0.0.1"


def _close_all(*socks):
    for s in socks:
        if not s.closed:
            s.close()


@pytest.fixture
def udp_pair():
    a, b = UDPSocket(), UDPSocket()
    a.bind(Address(LOOPBACK, 0))
    b.bind(Address(LOOPBACK, 0))
    yield a, b
    _close_all(a, b)


@pytest.fixture
def tcp_trio():
    listener = TCPSocket()
    listener.set_reuseaddr()
    listener.bind(Address(LOOPBACK, 0))
    listener.listen()
    client = TCPSocket()
    client.connect(listener.local_address())
    server = listener.accept()
    yield listener, client, server
    _close_all(listener, client, server)


def test_bound_local_address(udp_pair):
    a, _ = udp_pair
    local = a.local_address()
    assert local.ip == LOOPBACK
    assert local.port > 0


def test_udp_sendto_and_recv(udp_pair):
    a, b = udp_pair
    a.sendto(b.local_address(), b"datagram")
    source, payload = b.recv()
    assert payload == b"datagram"
    assert source == a.local_address()
    assert a.write_count == 1
    assert b.read_count == 1


def test_udp_connect_and_send(udp_pair):
    a, b = udp_pair
    a.connect(b.local_address())
    assert a.peer_address() == b.local_address()
    a.send(b"\x00\x01\x02")
    source, payload = b.recv()
    assert payload == b"\x00\x01\x02"
    assert source == a.local_address()


def test_udp_non_blocking_recv_with_nothing_waiting(udp_pair):
    _, b = udp_pair
    b.set_blocking(False)
    assert b.recv() == (None, b"")
    assert b.read_count == 0


def test_peer_address_unconnected(udp_pair):
    a, _ = udp_pair
    with pytest.raises(UnixError) as info:
        a.peer_address()
    assert info.value.attempt == "getpeername"
    assert info.value.error_code == errno.ENOTCONN


def test_bind_address_in_use(udp_pair):
    a, _ = udp_pair
    with UDPSocket() as other:
        with pytest.raises(UnixError) as info:
            other.bind(a.local_address())
        assert info.value.attempt == "bind"
        assert info.value.error_code == errno.EADDRINUSE


def test_bind_to_missing_device():
    with UDPSocket() as s:
        with pytest.raises(UnixError) as info:
            s.bind_to_device("nosuchdev0")
        assert info.value.attempt == "setsockopt"


def test_tcp_accept_and_exchange(tcp_trio):
    listener, client, server = tcp_trio
    assert listener.read_count == 1
    assert server.peer_address() == client.local_address()
    assert client.peer_address() == listener.local_address()
    client.raise_if_error()
    assert server.write(b"ping") == 4
    assert client.read() == b"ping"
    client.write([b"po", b"ng"])
    assert server.read() == b"pong"


def test_tcp_shutdown_write_gives_peer_eof(tcp_trio):
    _, client, server = tcp_trio
    client.shutdown(socket.SHUT_WR)
    assert client.write_count == 1
    assert client.read_count == 0
    assert server.read() == b""
    assert server.eof


def test_tcp_shutdown_both(tcp_trio):
    _, client, _ = tcp_trio
    client.shutdown(socket.SHUT_RDWR)
    assert client.read_count == 1
    assert client.write_count == 1


def test_tcp_shutdown_invalid_how(tcp_trio):
    _, client, _ = tcp_trio
    with pytest.raises(UnixError) as info:
        client.shutdown(99)
    assert info.value.attempt == "shutdown"
    assert info.value.error_code == errno.EINVAL


def test_socket_duplicate_shares_descriptor(udp_pair):
    a, b = udp_pair
    dup = a.duplicate()
    assert dup.fd_num == a.fd_num
    dup.close()
    assert a.closed
    assert not b.closed


def test_operation_after_close(udp_pair):
    a, b = udp_pair
    a.close()
    with pytest.raises(UnixError) as info:
        a.sendto(b.local_address(), b"late")
    assert info.value.attempt == "sendto"
    assert info.value.error_code == errno.EBADF
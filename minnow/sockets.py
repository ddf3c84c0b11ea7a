"""Sockets built on FileDescriptor: UDP, TCP and packet sockets."""

from __future__ import annotations

import socket
import struct
import sys
from collections.abc import Callable
from typing import Any, TypeVar, Union

from minnow.address import Address
from minnow.errors import UnixError
from minnow.file_descriptor import READ_BUFFER_SIZE, FileDescriptor

BytesLike = Union[bytes, bytearray, memoryview]

_SO_DOMAIN = getattr(socket, "SO_DOMAIN", 39)
_SO_PROTOCOL = getattr(socket, "SO_PROTOCOL", 38)
_SO_BINDTODEVICE = getattr(socket, "SO_BINDTODEVICE", 25)
_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0x20)
_AF_PACKET = getattr(socket, "AF_PACKET", 17)
_SOL_PACKET = getattr(socket, "SOL_PACKET", 263)
_PACKET_ADD_MEMBERSHIP = 1
_PACKET_MR_PROMISC = 1
_INT_SIZE = 4

_S = TypeVar("_S", bound="Socket")


def _address_of(family: int, raw: Any) -> Address:
    return Address.from_sockaddr(family, raw if isinstance(raw, tuple) else (raw,))


class Socket(FileDescriptor):
    """A network socket; usually used through one of its subclasses."""

    def __init__(self, domain: int, type_: int, protocol: int = 0) -> None:
        try:
            sock = socket.socket(domain, type_, protocol)
        except OSError as exc:
            raise UnixError("socket", exc.errno or 0) from exc
        super().__init__(sock.detach())

    @classmethod
    def _from_descriptor(
        cls: type[_S], fd: FileDescriptor, domain: int, type_: int, protocol: int = 0
    ) -> _S:
        """Adopt an open descriptor after checking that it is the expected kind of socket."""
        sock = cls._sharing(fd._state)
        if sock._getsockopt(socket.SOL_SOCKET, _SO_DOMAIN) != domain:
            raise RuntimeError("socket domain mismatch")
        if sock._getsockopt(socket.SOL_SOCKET, socket.SO_TYPE) != type_:
            raise RuntimeError("socket type mismatch")
        # protocol 0 means "the default for this type", which the kernel reports by number
        if protocol and sock._getsockopt(socket.SOL_SOCKET, _SO_PROTOCOL) != protocol:
            raise RuntimeError("socket protocol mismatch")
        return sock

    def _sock_call(
        self, attempt: str, op: Callable[..., Any], *args: Any, would_block: Any = None
    ) -> Any:
        def run() -> Any:
            sock = socket.socket(fileno=self.fd_num)
            try:
                return op(sock, *args)
            finally:
                sock.detach()

        return self._call(attempt, run, would_block=would_block)

    def _getsockopt(self, level: int, option: int) -> int:
        raw = self._sock_call(
            "getsockopt", lambda s: s.getsockopt(level, option, _INT_SIZE)
        )
        if len(raw) != _INT_SIZE:
            raise RuntimeError(f"unexpected length from getsockopt: {len(raw)}")
        return int.from_bytes(raw, sys.byteorder, signed=True)

    def _setsockopt(self, level: int, option: int, value: int | bytes) -> None:
        self._sock_call("setsockopt", lambda s: s.setsockopt(level, option, value))

    def bind(self, address: Address) -> None:
        self._sock_call("bind", socket.socket.bind, address.sockaddr)

    def bind_to_device(self, device_name: str) -> None:
        self._setsockopt(socket.SOL_SOCKET, _SO_BINDTODEVICE, device_name.encode())

    def connect(self, address: Address) -> None:
        self._sock_call("connect", socket.socket.connect, address.sockaddr)

    def shutdown(self, how: int) -> None:
        """Shut down reading, writing or both (SHUT_RD, SHUT_WR, SHUT_RDWR)."""
        self._sock_call("shutdown", socket.socket.shutdown, how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("Socket::shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        family, raw = self._sock_call("getsockname", lambda s: (s.family, s.getsockname()))
        return _address_of(family, raw)

    def peer_address(self) -> Address:
        family, raw = self._sock_call("getpeername", lambda s: (s.family, s.getpeername()))
        return _address_of(family, raw)

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    def raise_if_error(self) -> None:
        """Raise the socket's pending error, if any (seen on non-blocking sockets)."""
        pending = self._getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if pending:
            raise UnixError("socket error", pending)


class DatagramSocket(Socket):
    """A socket that sends and receives whole datagrams."""

    def recv(self) -> tuple[Address | None, bytes]:
        """Receive one datagram and its sender; ``(None, b"")`` if a non-blocking call would block."""
        buf = bytearray(READ_BUFFER_SIZE)
        result = self._sock_call(
            "recvfrom", lambda s: (s.recvfrom_into(buf, 0, _MSG_TRUNC), s.family)
        )
        if result is None:
            return None, b""
        (length, raw), family = result
        if length > len(buf):
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return _address_of(family, raw), bytes(buf[:length])

    def sendto(self, destination: Address, payload: BytesLike) -> None:
        self._sock_call("sendto", lambda s: s.sendto(payload, destination.sockaddr))
        self._register_write()

    def send(self, payload: BytesLike) -> None:
        """Send to the connected address."""
        self._sock_call("send", socket.socket.send, payload)
        self._register_write()


class UDPSocket(DatagramSocket):
    """An unbound, unconnected UDP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)


class TCPSocket(Socket):
    """An unbound, unconnected TCP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    def listen(self, backlog: int = 16) -> None:
        self._sock_call("listen", socket.socket.listen, backlog)

    def accept(self) -> TCPSocket:
        """Wait for and return a new connection."""
        self._register_read()
        conn_fd = self._sock_call("accept", lambda s: s.accept()[0].detach())
        if conn_fd is None:
            raise UnixError("accept", 11)
        return TCPSocket._from_descriptor(
            FileDescriptor(conn_fd), socket.AF_INET, socket.SOCK_STREAM
        )


class PacketSocket(DatagramSocket):
    """A link-layer packet socket."""

    def __init__(self, type_: int, protocol: int) -> None:
        super().__init__(_AF_PACKET, type_, protocol)

    def set_promiscuous(self) -> None:
        """Receive every frame seen by the bound interface."""
        local = self.local_address()
        if local.family != _AF_PACKET:
            raise RuntimeError("Address::as() conversion failure")
        ifindex = socket.if_nametoindex(local.sockaddr[0])
        membership = struct.pack("iHH8s", ifindex, _PACKET_MR_PROMISC, 0, b"")
        self._setsockopt(_SOL_PACKET, _PACKET_ADD_MEMBERSHIP, membership)
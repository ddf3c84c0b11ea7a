"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

from minnow.errors import TaggedError

_AI_ALL = getattr(socket, "AI_ALL", 0)


def _lookup(node: str, service: str, flags: int) -> tuple[int, tuple[Any, ...]]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        code = exc.errno if exc.errno is not None else 0
        raise TaggedError(f"getaddrinfo({node}, {service})", code, exc.strerror or str(exc)) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canon, sockaddr = results[0]
    return int(family), tuple(sockaddr)


class Address:
    """A socket address: an address family plus its socket-module tuple."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        """Build from a dotted-quad string and a numeric port; nothing is looked up."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        self._family, self._sockaddr = _lookup(
            ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        )

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Resolve a host name and a service name (or numeric port) to an IPv4 address."""
        family, sockaddr = _lookup(hostname, service, _AI_ALL)
        return cls.from_sockaddr(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: tuple[Any, ...]) -> Address:
        """Wrap an address as returned by the socket module for ``family``."""
        address = cls.__new__(cls)
        address._family = int(family)
        address._sockaddr = tuple(sockaddr)
        return address

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Build an IPv4 address (port 0) from its 32-bit numeric value."""
        dotted = str(ipaddress.IPv4Address(ip_address & 0xFFFFFFFF))
        return cls.from_sockaddr(socket.AF_INET, (dotted, 0))

    @property
    def family(self) -> int:
        return self._family

    @property
    def sockaddr(self) -> tuple[Any, ...]:
        """The address in the form the socket module accepts."""
        return self._sockaddr

    def ip_port(self) -> tuple[str, int]:
        """The numeric host string and port."""
        if self._family not in (socket.AF_INET, socket.AF_INET6):
            raise TaggedError("getnameinfo", socket.EAI_FAMILY, "ai_family not supported")
        try:
            host, port = socket.getnameinfo(
                self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            code = exc.errno if exc.errno is not None else 0
            raise TaggedError("getnameinfo", code, exc.strerror or str(exc)) from exc
        return host, int(port)

    @property
    def ip(self) -> str:
        return self.ip_port()[0]

    @property
    def port(self) -> int:
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit integer."""
        if self._family != socket.AF_INET or len(self._sockaddr) != 2:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address(family={self._family}, sockaddr={self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))
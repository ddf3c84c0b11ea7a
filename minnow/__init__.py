"""Ethernet, IPv4 and ARP wire formats, the Internet checksum, addresses, file descriptors and sockets."""

__version__ = "0.1.0"

__all__ = [
    "address",
    "arp",
    "checksum",
    "errors",
    "ethernet",
    "file_descriptor",
    "ipv4",
    "parser",
    "randomness",
    "sockets",
]
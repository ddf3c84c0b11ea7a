"""The Internet checksum (ones' complement sum of 16-bit words)."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

_MASK32 = 0xFFFFFFFF


class InternetChecksum:
    """Accumulates data and yields its Internet checksum.

    Data may be added in pieces of any length; odd-length pieces are handled
    as if all pieces were concatenated.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & _MASK32
        self._odd = False

    def add(self, data: BytesLike | Iterable[BytesLike]) -> None:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            for piece in data:
                self.add(piece)
            return
        for byte in bytes(data):
            self._sum = (self._sum + (byte if self._odd else byte << 8)) & _MASK32
            self._odd = not self._odd

    def value(self) -> int:
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF
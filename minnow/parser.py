"""Big-endian parsing and serialization over lists of byte buffers."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any, Protocol, Union

BytesLike = Union[bytes, bytearray, memoryview]


def _as_buffer_list(data: BytesLike | Iterable[BytesLike]) -> list[bytes]:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return [bytes(data)]
    return [bytes(item) for item in data]


class Parser:
    """Reads big-endian integers and byte strings from a list of buffers.

    Running past the end sets a sticky error flag instead of raising.
    """

    def __init__(self, buffers: BytesLike | Iterable[BytesLike]) -> None:
        self._buffers: deque[bytes] = deque(b for b in _as_buffer_list(buffers) if b)
        self._skip = 0
        self._size = sum(len(b) for b in self._buffers)
        self._error = False

    @property
    def has_error(self) -> bool:
        return self._error

    @property
    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        return self._size

    def set_error(self) -> None:
        self._error = True

    def _take(self, n: int) -> bytes:
        out = bytearray()
        while n > 0 and self._buffers:
            front = self._buffers[0]
            chunk = front[self._skip : self._skip + n]
            out += chunk
            n -= len(chunk)
            self._skip += len(chunk)
            self._size -= len(chunk)
            if self._skip == len(front):
                self._buffers.popleft()
                self._skip = 0
        return bytes(out)

    def remove_prefix(self, n: int) -> None:
        """Discard up to ``n`` bytes."""
        self._take(n)

    def _check_size(self, size: int) -> None:
        if size > self._size:
            self._error = True

    def integer(self, size: int) -> int:
        """Read an unsigned big-endian integer of ``size`` bytes (0 on error)."""
        self._check_size(size)
        if self._error:
            return 0
        return int.from_bytes(self._take(size), "big")

    def string(self, size: int) -> bytes:
        """Read exactly ``size`` bytes (empty on error)."""
        self._check_size(size)
        if self._error:
            return b""
        return self._take(size)

    def all_remaining(self) -> list[bytes]:
        """Consume and return every remaining buffer."""
        if not self._buffers:
            return []
        out = [self._buffers.popleft()[self._skip :]]
        out.extend(self._buffers)
        self._buffers.clear()
        self._skip = 0
        self._size = 0
        return out

    def all_remaining_joined(self) -> bytes:
        """Consume everything that remains as a single byte string."""
        return b"".join(self.all_remaining())


class Serializer:
    """Writes big-endian integers and whole buffers into a list of buffers."""

    def __init__(self, buffer: BytesLike = b"") -> None:
        self._output: list[bytes] = []
        self._pending = bytearray(buffer)

    def integer(self, value: int, size: int) -> None:
        """Append ``value`` as ``size`` big-endian bytes, truncating high bits."""
        mask = (1 << (8 * size)) - 1
        self._pending += (value & mask).to_bytes(size, "big")

    def buffer(self, data: BytesLike | Iterable[BytesLike]) -> None:
        """Append one buffer, or each buffer of an iterable, as its own piece."""
        for item in _as_buffer_list(data):
            self.flush()
            self._output.append(item)

    def flush(self) -> None:
        self._output.append(bytes(self._pending))
        self._pending.clear()

    def output(self) -> list[bytes]:
        self.flush()
        return list(self._output)


class _Wire(Protocol):
    def parse(self, parser: Parser) -> None: ...

    def serialize(self, serializer: Serializer) -> None: ...


def serialize(obj: Any) -> list[bytes]:
    """Serialize any object that has a ``serialize(serializer)`` method."""
    s = Serializer()
    obj.serialize(s)
    return s.output()


def parse(obj: Any, buffers: BytesLike | Iterable[BytesLike]) -> bool:
    """Parse ``buffers`` into ``obj``; return True if no error occurred."""
    p = Parser(buffers)
    obj.parse(p)
    return not p.has_error
"""Reference-counted handles on kernel file descriptors."""

from __future__ import annotations

import errno
import fcntl
import os
import sys
from collections.abc import Callable, Iterable
from typing import Any, TypeVar, Union

from minnow.errors import UnixError

BytesLike = Union[bytes, bytearray, memoryview]

READ_BUFFER_SIZE = 16384

_WOULD_BLOCK = (errno.EAGAIN, errno.EINPROGRESS)

_F = TypeVar("_F", bound="FileDescriptor")


class _FDState:
    """The kernel descriptor shared by every handle that duplicates it."""

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        try:
            flags = fcntl.fcntl(fd, fcntl.F_GETFL)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno or 0) from exc
        self.fd = fd
        self.eof = False
        self.closed = False
        self.non_blocking = bool(flags & os.O_NONBLOCK)
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        try:
            os.close(self.fd)
        except OSError as exc:
            raise UnixError("close", exc.errno or 0) from exc
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:  # never propagate out of a finalizer
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle on a file descriptor; the descriptor closes when no handle uses it."""

    READ_BUFFER_SIZE = READ_BUFFER_SIZE

    def __init__(self, fd: int) -> None:
        self._state = _FDState(fd)

    @classmethod
    def _sharing(cls: type[_F], state: _FDState) -> _F:
        handle = cls.__new__(cls)
        handle._state = state
        return handle

    def _call(
        self, attempt: str, func: Callable[..., Any], *args: Any, would_block: Any = None
    ) -> Any:
        """Run ``func``; on failure raise UnixError, unless a non-blocking call would block."""
        try:
            return func(*args)
        except OSError as exc:
            if self._state.non_blocking and exc.errno in _WOULD_BLOCK:
                return would_block
            raise UnixError(attempt, exc.errno or 0) from exc

    def _register_read(self) -> None:
        self._state.read_count += 1

    def _register_write(self) -> None:
        self._state.write_count += 1

    def _set_eof(self) -> None:
        self._state.eof = True

    @property
    def fd_num(self) -> int:
        return self._state.fd

    @property
    def eof(self) -> bool:
        return self._state.eof

    @property
    def closed(self) -> bool:
        return self._state.closed

    @property
    def read_count(self) -> int:
        return self._state.read_count

    @property
    def write_count(self) -> int:
        return self._state.write_count

    def read(self) -> bytes:
        """Read up to READ_BUFFER_SIZE bytes; empty at EOF or if a non-blocking read would block."""
        data = self._call("read", os.read, self.fd_num, READ_BUFFER_SIZE)
        if data is None:
            return b""
        self._register_read()
        if not data:
            self._set_eof()
        return data

    def read_vectored(self, sizes: Iterable[int]) -> list[bytes]:
        """Scatter one read across buffers of the given sizes.

        The final buffer is always READ_BUFFER_SIZE long. Each returned piece
        holds the bytes that landed in the corresponding buffer.
        """
        sizes = list(sizes)
        if not sizes:
            return []
        sizes[-1] = READ_BUFFER_SIZE
        buffers = [bytearray(n) for n in sizes]
        count = self._call("read", os.readv, self.fd_num, buffers)
        if count is None:
            return [b"" for _ in buffers]
        self._register_read()
        if count > sum(sizes):
            raise RuntimeError("read() read more than requested")
        pieces = []
        remaining = count
        for buf in buffers:
            take = min(remaining, len(buf))
            pieces.append(bytes(buf[:take]))
            remaining -= take
        return pieces

    def write(self, data: BytesLike | Iterable[BytesLike]) -> int:
        """Write one buffer or a sequence of buffers; return the number of bytes written."""
        if isinstance(data, (bytes, bytearray, memoryview)):
            pieces = [bytes(data)]
        else:
            pieces = [bytes(piece) for piece in data]
        total = sum(len(piece) for piece in pieces)
        written = self._call("writev", os.writev, self.fd_num, pieces or [b""], would_block=0)
        self._register_write()
        if written == 0 and total != 0:
            raise RuntimeError("write returned 0 given non-empty input buffer")
        if written > total:
            raise RuntimeError("write wrote more than length of input buffer")
        return written

    def close(self) -> None:
        """Close the underlying descriptor for every handle that shares it."""
        self._state.close()

    def duplicate(self) -> FileDescriptor:
        """Return another handle on the same descriptor."""
        return FileDescriptor._sharing(self._state)

    def set_blocking(self, blocking: bool) -> None:
        flags = self._call("fcntl", fcntl.fcntl, self.fd_num, fcntl.F_GETFL)
        if blocking:
            flags &= ~os.O_NONBLOCK
        else:
            flags |= os.O_NONBLOCK
        self._call("fcntl", fcntl.fcntl, self.fd_num, fcntl.F_SETFL, flags)
        self._state.non_blocking = not blocking

    def __enter__(self: _F) -> _F:
        return self

    def __exit__(self, *args: Any) -> None:
        if not self.closed:
            self.close()
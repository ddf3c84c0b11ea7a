"""Error types raised when operating-system and resolver calls fail."""

from __future__ import annotations

import os
from typing import TypeVar

T = TypeVar("T")


class TaggedError(Exception):
    """An error carrying the attempted operation and a numeric error code."""

    def __init__(self, attempt: str, error_code: int, message: str) -> None:
        self.attempt = attempt
        self.error_code = error_code
        self.message = message
        super().__init__(f"{attempt}: {message}")

    def __str__(self) -> str:
        return f"{self.attempt}: {self.message}"


class UnixError(TaggedError):
    """A failed system call, described by its errno value."""

    def __init__(self, attempt: str, errno_value: int) -> None:
        super().__init__(attempt, errno_value, os.strerror(errno_value))


def check_system_call(attempt: str, return_value: int) -> int:
    """Return a non-negative result; a negative one is taken as a negated errno."""
    if return_value >= 0:
        return return_value
    raise UnixError(attempt, -return_value)


def notnull(context: str, value: T | None) -> T:
    """Return ``value`` unless it is None, in which case raise RuntimeError."""
    if value is None:
        raise RuntimeError(f"{context}: returned null pointer")
    return value
# Failure kinds and the Result type returned across the I/O boundary.
# Created: 2026-10-02

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    TRANSPORT_FAILURE = "transport_failure"
    INSUFFICIENT_CONTENT = "insufficient_content"
    MALFORMED_COMMAND = "malformed_command"
    EVALUATION_FAILURE = "evaluation_failure"
    AUTH_REQUIRED = "auth_required"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or an ErrorKind with a human-readable detail."""

    value: T | None = None
    error: ErrorKind | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str = "") -> Result[T]:
        return cls(error=error, detail=detail)


class FireFliesError(Exception):
    """Base class for errors raised to callers of the chat service."""

    kind: ErrorKind | None = None


class AuthRequiredError(FireFliesError):
    """Raised when a message is sent without an authenticated profile."""

    kind = ErrorKind.AUTH_REQUIRED


class SessionBusyError(FireFliesError):
    """Raised when a generation is already in flight for the chat view."""


class ProxyError(Exception):
    """Transport or HTTP failure talking to the proxy."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

"""Tagged call results and upstream error types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class FailureReason(str, Enum):
    """Why an external call did not produce a usable value."""

    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Success(Generic[T]):
    """An external call that returned a usable value."""

    value: T
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """An external call that failed; never carries a partial value."""

    reason: FailureReason
    detail: str = ""
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return False


CallOutcome = Success[T] | Failure


class UpstreamError(Exception):
    """Base exception raised by upstream service adapters."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class RateLimitedError(UpstreamError):
    """The upstream reported a quota or too-many-requests condition."""


class MalformedResponseError(UpstreamError):
    """The upstream answered, but the payload could not be parsed."""


class UpstreamUnavailableError(UpstreamError):
    """The upstream could not be reached or answered with a server error."""

"""Resilient execution of calls to unreliable upstream services.

Every call the pipeline makes to the AI text service or the occupation
taxonomy goes through :class:`ExternalCallWrapper`. The wrapper turns the
call into a :data:`CallOutcome` so that no upstream exception crosses a
pipeline stage boundary:

- rate-limit signals are retried with linear backoff (``base_delay * attempt``)
- timeouts, unreachable services and malformed payloads fail immediately
- anything unexpected is reported as ``Failure(UNREACHABLE)``

Cancellation (``asyncio.CancelledError``) is never swallowed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import ValidationError

from src.recommend.outcome import (
    CallOutcome,
    Failure,
    FailureReason,
    MalformedResponseError,
    RateLimitedError,
    Success,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
Sleep = Callable[[float], Awaitable[None]]


class ExternalCallWrapper:
    """Execute single upstream calls with timeout, retry and typed failures."""

    def __init__(
        self,
        *,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        timeout: float | None = 8.0,
        sleep: Sleep | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1 (got {max_attempts})")
        if base_delay < 0:
            raise ValueError(f"base_delay must be >= 0 (got {base_delay})")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.timeout = timeout
        self._sleep = sleep or asyncio.sleep

    async def invoke(
        self,
        operation: Operation[T],
        *,
        max_attempts: int | None = None,
        base_delay: float | None = None,
        timeout: float | None = None,
        label: str = "upstream call",
    ) -> CallOutcome[T]:
        """Run ``operation`` and report its result as a CallOutcome.

        Args:
            operation: Zero-argument callable returning an awaitable. It is
                called once per attempt.
            max_attempts: Total attempts allowed for rate-limited calls.
            base_delay: Linear backoff unit in seconds.
            timeout: Per-attempt timeout in seconds (None disables it).
            label: Name used in log messages.

        Returns:
            Success with the operation's value, or Failure with a reason.
        """
        attempts_allowed = max_attempts if max_attempts is not None else self.max_attempts
        delay_unit = base_delay if base_delay is not None else self.base_delay
        call_timeout = timeout if timeout is not None else self.timeout
        attempts_allowed = max(1, attempts_allowed)

        for attempt in range(1, attempts_allowed + 1):
            started = time.monotonic()
            try:
                if call_timeout is not None:
                    value = await asyncio.wait_for(operation(), timeout=call_timeout)
                else:
                    value = await operation()

            except RateLimitedError as e:
                if attempt >= attempts_allowed:
                    logger.warning(
                        "%s rate limited on attempt %s/%s, giving up: %s",
                        label,
                        attempt,
                        attempts_allowed,
                        e,
                    )
                    return Failure(FailureReason.RATE_LIMITED, str(e), attempt)

                wait = delay_unit * attempt
                logger.warning(
                    "%s rate limited on attempt %s/%s, retrying in %.2fs: %s",
                    label,
                    attempt,
                    attempts_allowed,
                    wait,
                    e,
                )
                await self._sleep(wait)
                continue

            except TimeoutError as e:
                logger.warning(
                    "%s timed out after %.2fs (attempt %s)",
                    label,
                    time.monotonic() - started,
                    attempt,
                )
                return Failure(FailureReason.TIMEOUT, str(e) or "timed out", attempt)

            except (MalformedResponseError, ValidationError, json.JSONDecodeError) as e:
                logger.warning("%s returned a malformed response: %s", label, e)
                return Failure(FailureReason.MALFORMED, str(e), attempt)

            except Exception as e:
                logger.warning("%s failed (attempt %s): %s", label, attempt, e)
                return Failure(FailureReason.UNREACHABLE, str(e), attempt)

            logger.debug(
                "%s succeeded on attempt %s in %.2fs",
                label,
                attempt,
                time.monotonic() - started,
            )
            return Success(value, attempt)

        # Unreachable: the loop either returns or continues to the next attempt.
        return Failure(FailureReason.RATE_LIMITED, "attempts exhausted", attempts_allowed)

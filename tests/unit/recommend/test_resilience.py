"""Unit tests for ExternalCallWrapper."""

from __future__ import annotations

import asyncio
import json

import pytest
from pydantic import TypeAdapter

from src.recommend.outcome import (
    Failure,
    FailureReason,
    MalformedResponseError,
    RateLimitedError,
    Success,
    UpstreamUnavailableError,
)
from src.recommend.resilience import ExternalCallWrapper


class _ScriptedOperation:
    """Zero-arg async callable that replays a script of results."""

    def __init__(self, *script):
        self.script = list(script)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class TestRetryOnRateLimit:
    @pytest.mark.asyncio
    async def test_rate_limited_twice_then_success(self, wrapper, sleep_calls) -> None:
        operation = _ScriptedOperation(
            RateLimitedError("429"), RateLimitedError("429"), "ok"
        )

        outcome = await wrapper.invoke(operation, max_attempts=3, base_delay=2.0)

        assert isinstance(outcome, Success)
        assert outcome.value == "ok"
        assert outcome.attempts == 3
        assert operation.calls == 3
        assert sleep_calls == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_rate_limited_on_every_attempt_returns_failure(
        self, wrapper, sleep_calls
    ) -> None:
        operation = _ScriptedOperation(*[RateLimitedError("quota")] * 3)

        outcome = await wrapper.invoke(operation, max_attempts=3, base_delay=1.5)

        assert isinstance(outcome, Failure)
        assert outcome.reason == FailureReason.RATE_LIMITED
        assert outcome.attempts == 3
        assert operation.calls == 3
        # No sleep after the final attempt.
        assert sleep_calls == [1.5, 3.0]

    @pytest.mark.asyncio
    async def test_single_attempt_does_not_sleep(self, wrapper, sleep_calls) -> None:
        operation = _ScriptedOperation(RateLimitedError("429"))

        outcome = await wrapper.invoke(operation, max_attempts=1)

        assert isinstance(outcome, Failure)
        assert outcome.reason == FailureReason.RATE_LIMITED
        assert sleep_calls == []

    @pytest.mark.asyncio
    async def test_uses_constructor_defaults(self, sleep_calls) -> None:
        async def _sleep(delay: float) -> None:
            sleep_calls.append(delay)

        wrapper = ExternalCallWrapper(max_attempts=2, base_delay=0.5, sleep=_sleep)
        operation = _ScriptedOperation(RateLimitedError("429"), 42)

        outcome = await wrapper.invoke(operation)

        assert outcome == Success(42, 2)
        assert sleep_calls == [0.5]


class TestImmediateFailures:
    @pytest.mark.asyncio
    async def test_timeout_is_not_retried(self, wrapper, sleep_calls) -> None:
        calls = 0

        async def _slow():
            nonlocal calls
            calls += 1
            await asyncio.sleep(10)

        outcome = await wrapper.invoke(_slow, timeout=0.01)

        assert isinstance(outcome, Failure)
        assert outcome.reason == FailureReason.TIMEOUT
        assert calls == 1
        assert sleep_calls == []

    @pytest.mark.asyncio
    async def test_timeout_error_raised_by_operation(self, wrapper) -> None:
        operation = _ScriptedOperation(TimeoutError("read timeout"))

        outcome = await wrapper.invoke(operation)

        assert isinstance(outcome, Failure)
        assert outcome.reason == FailureReason.TIMEOUT
        assert operation.calls == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            MalformedResponseError("not json"),
            json.JSONDecodeError("Expecting value", "x", 0),
        ],
    )
    async def test_malformed_payloads(self, wrapper, error) -> None:
        operation = _ScriptedOperation(error)

        outcome = await wrapper.invoke(operation)

        assert isinstance(outcome, Failure)
        assert outcome.reason == FailureReason.MALFORMED
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_pydantic_validation_error_is_malformed(self, wrapper) -> None:
        async def _parse():
            return TypeAdapter(list[str]).validate_python({"not": "a list"})

        outcome = await wrapper.invoke(_parse)

        assert isinstance(outcome, Failure)
        assert outcome.reason == FailureReason.MALFORMED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [UpstreamUnavailableError("503"), ConnectionError("refused"), KeyError("x")],
    )
    async def test_other_errors_are_unreachable(self, wrapper, sleep_calls, error) -> None:
        operation = _ScriptedOperation(error)

        outcome = await wrapper.invoke(operation)

        assert isinstance(outcome, Failure)
        assert outcome.reason == FailureReason.UNREACHABLE
        assert operation.calls == 1
        assert sleep_calls == []


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, wrapper) -> None:
        started = asyncio.Event()

        async def _hang():
            started.set()
            await asyncio.sleep(10)

        task = asyncio.create_task(wrapper.invoke(_hang, timeout=None))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestValidation:
    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            ExternalCallWrapper(max_attempts=0)

    def test_rejects_negative_delay(self) -> None:
        with pytest.raises(ValueError):
            ExternalCallWrapper(base_delay=-1.0)

    def test_outcomes_expose_ok(self) -> None:
        assert Success("v").ok is True
        assert Failure(FailureReason.TIMEOUT).ok is False

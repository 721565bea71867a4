"""
Unit tests for the provider circuit breaker.
"""
import asyncio

import pytest

from livingword.core.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError, CircuitState


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


async def succeed():
    return "ok"


async def fail():
    raise RuntimeError("backend down")


async def trip(cb, times):
    for _ in range(times):
        with pytest.raises(RuntimeError):
            await cb.call_async(fail)


@pytest.mark.asyncio
async def test_closed_state_passes_calls():
    cb = CircuitBreaker("test")

    assert await cb.call_async(succeed) == "ok"
    assert cb.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_opens_after_consecutive_failures():
    cb = CircuitBreaker("test", failure_threshold=3)

    await trip(cb, 2)
    assert cb.state == CircuitState.CLOSED

    await trip(cb, 1)
    assert cb.state == CircuitState.OPEN

    with pytest.raises(CircuitBreakerOpenError):
        await cb.call_async(succeed)


@pytest.mark.asyncio
async def test_success_resets_failure_count():
    cb = CircuitBreaker("test", failure_threshold=3)

    await trip(cb, 2)
    await cb.call_async(succeed)
    await trip(cb, 2)

    assert cb.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_half_open_trial_closes_on_success():
    clock = FakeClock()
    cb = CircuitBreaker("test", failure_threshold=1, open_duration_seconds=30, clock=clock)
    await trip(cb, 1)
    assert cb.state == CircuitState.OPEN

    clock.now += 31
    assert cb.state == CircuitState.HALF_OPEN
    assert await cb.call_async(succeed) == "ok"
    assert cb.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_half_open_trial_failure_reopens():
    clock = FakeClock()
    cb = CircuitBreaker("test", failure_threshold=1, open_duration_seconds=30, clock=clock)
    await trip(cb, 1)
    clock.now += 31

    await trip(cb, 1)

    assert cb.state == CircuitState.OPEN


@pytest.mark.asyncio
async def test_cancelled_call_counts_as_failure():
    cb = CircuitBreaker("test", failure_threshold=1)

    async def hang():
        await asyncio.sleep(5)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(cb.call_async(hang), timeout=0.01)

    assert cb.state == CircuitState.OPEN


@pytest.mark.asyncio
async def test_reset_and_metrics():
    cb = CircuitBreaker("provider_gemini", failure_threshold=1)
    await trip(cb, 1)

    metrics = cb.get_metrics()
    assert metrics["state"] == "open"
    assert metrics["consecutive_failures"] == 1

    cb.reset()
    assert cb.get_metrics()["state"] == "closed"
    assert await cb.call_async(succeed) == "ok"

"""
Circuit breaker for remote AI backends.

Each provider HTTP client owns one breaker:
- Opens after `failure_threshold` consecutive failures
- Stays open for `open_duration_seconds`, rejecting calls immediately
- Half-open: lets a single trial call through; success closes, failure reopens

A rejected call raises CircuitBreakerOpenError, which the provider converts
into an error result so the facade moves on to the next provider.
"""
import asyncio
import time
from enum import Enum
from threading import Lock
from typing import Any, Awaitable, Callable, Optional

from livingword.core.logging import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject calls
    HALF_OPEN = "half_open"  # One trial call allowed


class CircuitBreakerOpenError(Exception):
    """Raised when the circuit breaker rejects a call."""

    def __init__(self, name: str, state: CircuitState):
        super().__init__(f"Circuit breaker {name} is {state.value.upper()}. Service unavailable.")
        self.name = name
        self.state = state


class CircuitBreaker:
    """Consecutive-failure circuit breaker guarding async calls."""

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        open_duration_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.open_duration_seconds = open_duration_seconds
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._lock = Lock()
        self._consecutive_failures = 0
        self._opened_at: Optional[float] = None
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        with self._lock:
            self._update_state()
            return self._state

    def _update_state(self) -> None:
        if self._state == CircuitState.OPEN and self._opened_at is not None:
            if self._clock() - self._opened_at >= self.open_duration_seconds:
                self._state = CircuitState.HALF_OPEN
                self._trial_in_flight = False
                logger.info("circuit_breaker_half_open", circuit_breaker=self.name)

    def _acquire(self) -> None:
        with self._lock:
            self._update_state()
            if self._state == CircuitState.OPEN:
                raise CircuitBreakerOpenError(self.name, self._state)
            if self._state == CircuitState.HALF_OPEN:
                if self._trial_in_flight:
                    raise CircuitBreakerOpenError(self.name, self._state)
                self._trial_in_flight = True

    def _record_result(self, success: bool) -> None:
        with self._lock:
            if success:
                if self._state != CircuitState.CLOSED:
                    logger.info("circuit_breaker_closed", circuit_breaker=self.name)
                self._state = CircuitState.CLOSED
                self._consecutive_failures = 0
                self._opened_at = None
                self._trial_in_flight = False
                return

            self._consecutive_failures += 1
            if (
                self._state == CircuitState.HALF_OPEN
                or self._consecutive_failures >= self.failure_threshold
            ):
                self._state = CircuitState.OPEN
                self._opened_at = self._clock()
                self._trial_in_flight = False
                logger.warning(
                    "circuit_breaker_opened",
                    circuit_breaker=self.name,
                    consecutive_failures=self._consecutive_failures,
                )

    async def call_async(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Execute an async function with circuit breaker protection.

        Raises:
            CircuitBreakerOpenError: If the breaker rejects the call
        """
        self._acquire()
        try:
            result = await func(*args, **kwargs)
        except (Exception, asyncio.CancelledError):
            # a cancelled call is an attempt that ran out of time
            self._record_result(False)
            raise
        self._record_result(True)
        return result

    def reset(self) -> None:
        """Force the breaker back to CLOSED (used when a provider is reconfigured)."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._consecutive_failures = 0
            self._opened_at = None
            self._trial_in_flight = False

    def get_metrics(self) -> dict:
        """Get circuit breaker state for monitoring."""
        with self._lock:
            self._update_state()
            return {
                "name": self.name,
                "state": self._state.value,
                "consecutive_failures": self._consecutive_failures,
                "opened_at": self._opened_at,
            }

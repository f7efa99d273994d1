"""Per-provider circuit breaker.

Keeps a repeatedly failing provider from costing every request a full
timeout. State machine: CLOSED → OPEN → HALF_OPEN → CLOSED.

Usage:
    breaker = ProviderCircuitBreaker("openai", failure_threshold=5)
    try:
        result = await breaker.call(provider.score, report, sample)
    except CircuitOpenError:
        ...  # tier is skipped
"""

import enum
import logging
import time
from typing import Any, Callable, Coroutine, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(enum.Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised when calling through an open circuit breaker."""


class ProviderCircuitBreaker:
    """Circuit breaker wrapping one provider's async calls.

    - CLOSED: calls pass through; consecutive failures are counted.
    - OPEN: calls raise CircuitOpenError until ``recovery_timeout`` elapses.
    - HALF_OPEN: one trial call; success closes, failure re-opens.

    Only exceptions matching ``counted`` trip the breaker; anything else
    (e.g. a missing credential) propagates without being recorded.

    Args:
        name: Provider name for logging.
        failure_threshold: Consecutive failures before opening.
        recovery_timeout: Seconds before a recovery trial call is allowed.
        counted: Exception types that count as failures.
        clock: Monotonic time source (seconds).
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        counted: tuple[type[BaseException], ...] = (Exception,),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self._failure_threshold = failure_threshold
        self._recovery_timeout = recovery_timeout
        self._counted = counted
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at = 0.0

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def _before_call(self) -> None:
        if self._state is not CircuitState.OPEN:
            return
        if self._clock() - self._opened_at < self._recovery_timeout:
            raise CircuitOpenError(f"Circuit breaker {self.name} is OPEN")
        self._state = CircuitState.HALF_OPEN
        logger.info("Circuit breaker %s: OPEN → HALF_OPEN (recovery trial)", self.name)

    def record_success(self) -> None:
        if self._state is CircuitState.HALF_OPEN:
            logger.info("Circuit breaker %s: HALF_OPEN → CLOSED", self.name)
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0

    def record_failure(self) -> None:
        self._consecutive_failures += 1
        if self._state is CircuitState.HALF_OPEN:
            self._open("recovery trial failed")
        elif (
            self._state is CircuitState.CLOSED
            and self._consecutive_failures >= self._failure_threshold
        ):
            self._open(f"{self._consecutive_failures} consecutive failures")

    def _open(self, why: str) -> None:
        logger.warning("Circuit breaker %s: %s → OPEN (%s)", self.name, self._state.name, why)
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()

    async def call(
        self,
        fn: Callable[..., Coroutine[Any, Any, T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Execute ``fn`` through the breaker.

        Raises:
            CircuitOpenError: Circuit is open and the recovery timeout
                has not elapsed.
        """
        self._before_call()
        try:
            result = await fn(*args, **kwargs)
        except self._counted:
            self.record_failure()
            raise
        self.record_success()
        return result

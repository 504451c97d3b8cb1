"""Circuit breaker implementation for the resilient client profile.

This module provides a failure-ratio circuit breaker: outcomes are sampled
over a sliding time window, and once enough of them have been observed and
the share of failures reaches the configured ratio, the circuit opens and
further attempts fail fast until the break duration has elapsed.
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Deque, Dict, Optional, Tuple

from ..exceptions import LoadTestError


# Configure logging
logger = logging.getLogger(__name__)


class CircuitBreakerState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"      # Normal operation, requests pass through
    OPEN = "open"          # Circuit is open, requests fail fast
    HALF_OPEN = "half_open"  # A single probe decides whether to close again


def default_should_handle(result: Any, error: Optional[BaseException]) -> bool:
    """Count every exception as a failure and every result as a success."""
    return error is not None


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker behavior."""
    failure_ratio: float = 0.1  # Share of failures in the window that opens the circuit
    minimum_throughput: int = 100  # Outcomes required in the window before the ratio is checked
    sampling_duration: float = 30.0  # Sliding window length in seconds
    break_duration: float = 5.0  # Seconds the circuit stays open before a probe
    name: str = "default"  # Circuit breaker name for logging/metrics
    should_handle: Callable[[Any, Optional[BaseException]], bool] = default_should_handle


@dataclass
class CircuitBreakerMetrics:
    """Metrics for circuit breaker state and performance."""
    state_changes: int = 0
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    rejected_requests: int = 0  # Requests rejected when circuit is open
    last_failure_time: Optional[float] = None
    last_success_time: Optional[float] = None


class CircuitBreakerOpenException(LoadTestError):
    """Exception raised when circuit breaker is open."""
    pass


class CircuitBreaker:
    """Failure-ratio circuit breaker.

    The circuit breaker has three states:
    - CLOSED: Normal operation, outcomes are sampled
    - OPEN: Circuit is open, requests fail fast with CircuitBreakerOpenException
    - HALF_OPEN: Break duration elapsed, one probe request is let through
    """

    def __init__(self, config: CircuitBreakerConfig, clock: Callable[[], float] = time.monotonic):
        """Initialize the circuit breaker.

        Args:
            config: Configuration for circuit breaker behavior
            clock: Monotonic time source in seconds
        """
        self.config = config
        self._clock = clock
        self._state = CircuitBreakerState.CLOSED
        self._state_lock = threading.RLock()
        self._metrics = CircuitBreakerMetrics()
        self._window: Deque[Tuple[float, bool]] = deque()
        self._opened_at = 0.0
        self._probe_in_flight = False
        self._last_state_change = self._clock()

        logger.debug(f"Circuit breaker '{config.name}' initialized with state: {self._state.value}")

    @property
    def state(self) -> CircuitBreakerState:
        """Get current circuit breaker state."""
        with self._state_lock:
            return self._state

    @property
    def metrics(self) -> CircuitBreakerMetrics:
        """Get current metrics."""
        with self._state_lock:
            return CircuitBreakerMetrics(**self._metrics.__dict__)

    def _change_state(self, new_state: CircuitBreakerState) -> None:
        """Change circuit breaker state and update metrics."""
        with self._state_lock:
            if self._state != new_state:
                old_state = self._state
                self._state = new_state
                self._last_state_change = self._clock()
                self._metrics.state_changes += 1

                logger.info(
                    f"Circuit breaker '{self.config.name}' state changed: "
                    f"{old_state.value} -> {new_state.value} "
                    f"(changes: {self._metrics.state_changes})"
                )

    def _prune_window(self, now: float) -> None:
        horizon = now - self.config.sampling_duration
        while self._window and self._window[0][0] <= horizon:
            self._window.popleft()

    def _window_failure_ratio(self) -> Tuple[int, float]:
        total = len(self._window)
        if total == 0:
            return 0, 0.0
        failures = sum(1 for _, failed in self._window if failed)
        return total, failures / total

    def _acquire_permission(self) -> bool:
        """Admit or reject an attempt. Returns True when the attempt is the half-open probe."""
        with self._state_lock:
            now = self._clock()
            if (self._state == CircuitBreakerState.OPEN and
                    now - self._opened_at >= self.config.break_duration):
                self._change_state(CircuitBreakerState.HALF_OPEN)

            if self._state == CircuitBreakerState.HALF_OPEN and not self._probe_in_flight:
                self._probe_in_flight = True
                return True

            if self._state == CircuitBreakerState.CLOSED:
                return False

            self._metrics.rejected_requests += 1
            raise CircuitBreakerOpenException(
                f"Circuit breaker '{self.config.name}' is {self._state.value.upper()}. "
                f"Last failure: {self._metrics.last_failure_time}"
            )

    def _record_outcome(self, failed: bool, is_probe: bool) -> None:
        with self._state_lock:
            now = self._clock()
            self._metrics.total_requests += 1
            if failed:
                self._metrics.failed_requests += 1
                self._metrics.last_failure_time = now
            else:
                self._metrics.successful_requests += 1
                self._metrics.last_success_time = now

            if is_probe:
                self._probe_in_flight = False
                if failed:
                    self._open(now)
                else:
                    self._window.clear()
                    self._change_state(CircuitBreakerState.CLOSED)
                return

            if self._state != CircuitBreakerState.CLOSED:
                return

            self._window.append((now, failed))
            self._prune_window(now)
            total, ratio = self._window_failure_ratio()
            if total >= self.config.minimum_throughput and ratio >= self.config.failure_ratio:
                self._open(now)

    def _open(self, now: float) -> None:
        self._opened_at = now
        self._window.clear()
        self._change_state(CircuitBreakerState.OPEN)

    def call(self, func: Callable, *args, **kwargs) -> Any:
        """Execute a function through the circuit breaker.

        Args:
            func: Function to execute
            *args: Positional arguments for the function
            **kwargs: Keyword arguments for the function

        Returns:
            Result of the function call

        Raises:
            CircuitBreakerOpenException: If circuit is open
            Exception: Any exception from the wrapped function
        """
        is_probe = self._acquire_permission()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self._record_outcome(self.config.should_handle(None, e), is_probe)
            raise
        except BaseException:
            # Interrupted probe: no outcome, let the next call probe instead
            if is_probe:
                with self._state_lock:
                    self._probe_in_flight = False
            raise

        self._record_outcome(self.config.should_handle(result, None), is_probe)
        return result

    def get_status(self) -> Dict[str, Any]:
        """Get comprehensive status of the circuit breaker.

        Returns:
            Dictionary with state, metrics, and configuration
        """
        with self._state_lock:
            now = self._clock()
            return {
                "name": self.config.name,
                "state": self._state.value,
                "state_changed_at": self._last_state_change,
                "time_since_last_change": now - self._last_state_change,
                "config": {
                    "failure_ratio": self.config.failure_ratio,
                    "minimum_throughput": self.config.minimum_throughput,
                    "sampling_duration": self.config.sampling_duration,
                    "break_duration": self.config.break_duration,
                },
                "metrics": {
                    "total_requests": self._metrics.total_requests,
                    "successful_requests": self._metrics.successful_requests,
                    "failed_requests": self._metrics.failed_requests,
                    "rejected_requests": self._metrics.rejected_requests,
                    "state_changes": self._metrics.state_changes,
                    "last_failure_time": self._metrics.last_failure_time,
                    "last_success_time": self._metrics.last_success_time,
                    "success_rate": (
                        self._metrics.successful_requests / self._metrics.total_requests
                        if self._metrics.total_requests > 0 else 0.0
                    ),
                },
            }

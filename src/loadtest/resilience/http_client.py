"""HTTP client that layers the resilience strategies over a requests session."""
import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from ..exceptions import TotalTimeoutError
from .circuit_breaker import CircuitBreaker
from .rate_limiter import ConcurrencyLimiter
from .retry import RetryPolicy


# Configure logging
logger = logging.getLogger(__name__)


class ResilientHttpClient:
    """POSTs through rate limiter -> total timeout -> retry -> circuit breaker -> attempt timeout."""

    def __init__(
        self,
        session: requests.Session,
        base_url: str,
        retry_policy: RetryPolicy,
        attempt_timeout: float,
        total_timeout: float,
        name: str = "client",
        rate_limiter: Optional[ConcurrencyLimiter] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy
        self.attempt_timeout = attempt_timeout
        self.total_timeout = total_timeout
        self.name = name
        self.rate_limiter = rate_limiter
        self.circuit_breaker = circuit_breaker
        self._sleep = sleep
        self._clock = clock

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def post(self, path: str, data: Optional[Dict[str, Any]] = None) -> requests.Response:
        """
        Send a form-encoded POST with the configured resilience policy.

        Args:
            path: Endpoint path relative to the base URL.
            data: Form fields.

        Returns:
            The final response. Retryable responses are returned once retries are exhausted.

        Raises:
            RateLimiterRejectedError: If the client-side limiter queue is full.
            CircuitBreakerOpenException: If the circuit is open.
            TotalTimeoutError: If the total deadline passes before a final outcome.
            requests.RequestException: If the last attempt failed at the transport level.
        """
        url = self.url_for(path)
        if self.rate_limiter is None:
            return self._execute(url, data)
        with self.rate_limiter.lease():
            return self._execute(url, data)

    def _execute(self, url: str, data: Optional[Dict[str, Any]]) -> requests.Response:
        deadline = self._clock() + self.total_timeout
        retry_number = 0

        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise TotalTimeoutError(f"{self.name}: request to {url} exceeded {self.total_timeout}s total")
            timeout = min(self.attempt_timeout, remaining)

            try:
                response = self._attempt(url, data, timeout)
            except requests.RequestException as e:
                if retry_number < self.retry_policy.max_retry_attempts and self.retry_policy.should_retry_exception(e):
                    self._backoff(retry_number, deadline, f"{type(e).__name__}: {e}", cause=e)
                    retry_number += 1
                    continue
                raise

            if (retry_number < self.retry_policy.max_retry_attempts and
                    self.retry_policy.should_retry_response(response.status_code)):
                response.close()
                self._backoff(retry_number, deadline, f"status {response.status_code}")
                retry_number += 1
                continue

            return response

    def _attempt(self, url: str, data: Optional[Dict[str, Any]], timeout: float) -> requests.Response:
        if self.circuit_breaker is None:
            return self.session.post(url, data=data, timeout=timeout)
        return self.circuit_breaker.call(self.session.post, url, data=data, timeout=timeout)

    def _backoff(self, retry_number: int, deadline: float, reason: str, cause: Optional[BaseException] = None) -> None:
        delay = self.retry_policy.get_delay(retry_number)
        if self._clock() + delay >= deadline:
            raise TotalTimeoutError(
                f"{self.name}: total timeout of {self.total_timeout}s reached while backing off after {reason}"
            ) from cause
        logger.debug(f"{self.name}: retry {retry_number + 1} in {delay:.2f}s after {reason}")
        self._sleep(delay)

    def close(self) -> None:
        self.session.close()

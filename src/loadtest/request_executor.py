"""Handles individual request execution and timing."""
import time
import logging
from typing import Any, Callable, Dict

from .models import RequestOutcome


# Configure logging
logger = logging.getLogger(__name__)

PayloadFactory = Callable[[int], Dict[str, Any]]


class RequestExecutor:
    """Handles individual request execution and timing."""

    def __init__(self, client, endpoint_path: str, clock: Callable[[], float] = time.perf_counter):
        """
        Args:
            client: Object with ``post(path, data=...)`` returning a response with ``status_code``.
            endpoint_path: Path every request is sent to.
            clock: Time source in seconds used for latency measurement.
        """
        self.client = client
        self.endpoint_path = endpoint_path
        self._clock = clock

    def send(self, index: int, payload_factory: PayloadFactory) -> RequestOutcome:
        """
        Send one request and measure its latency.

        Never raises for request failures; the exception is carried in the outcome.

        Args:
            index: 0-based request index.
            payload_factory: Builds the form body for the index.

        Returns:
            RequestOutcome with either the status code or the exception.
        """
        start_time = self._clock()
        try:
            response = self.client.post(self.endpoint_path, data=payload_factory(index))
            try:
                status_code = response.status_code
            finally:
                response.close()
        except Exception as e:
            latency_ms = (self._clock() - start_time) * 1000.0
            return RequestOutcome(index=index, latency_ms=latency_ms, error=e)

        latency_ms = (self._clock() - start_time) * 1000.0
        return RequestOutcome(index=index, latency_ms=latency_ms, status_code=status_code)

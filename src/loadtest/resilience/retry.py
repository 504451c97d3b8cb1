"""Retry policy for transient HTTP failures."""
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import requests

from src.const import HTTP_REQUEST_TIMEOUT, HTTP_TOO_MANY_REQUESTS, HTTP_SERVER_ERROR_MIN


class BackoffType(Enum):
    """Delay growth between retries."""
    CONSTANT = "constant"
    EXPONENTIAL = "exponential"


def is_transient_status(status_code: int) -> bool:
    """Server errors and request timeouts are worth another attempt."""
    return status_code >= HTTP_SERVER_ERROR_MIN or status_code == HTTP_REQUEST_TIMEOUT


def is_transient_exception(error: BaseException) -> bool:
    return isinstance(error, (requests.ConnectionError, requests.Timeout))


@dataclass
class RetryPolicy:
    """Configuration for retry behavior."""
    max_retry_attempts: int = 3
    delay: float = 2.0
    backoff: BackoffType = BackoffType.CONSTANT
    use_jitter: bool = False
    retry_on_rate_limit: bool = False
    max_delay: float = 30.0
    rng: Optional[random.Random] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self.max_retry_attempts < 0:
            raise ValueError("max_retry_attempts must be non-negative")
        if self.rng is None:
            self.rng = random.Random()

    def get_delay(self, retry_number: int) -> float:
        """
        Delay before the given retry.

        Args:
            retry_number: 0 for the first retry, 1 for the second, and so on.

        Returns:
            Seconds to wait, capped at max_delay.
        """
        if self.backoff == BackoffType.EXPONENTIAL:
            delay = self.delay * (2 ** retry_number)
        else:
            delay = self.delay
        if self.use_jitter:
            delay *= self.rng.uniform(0.5, 1.5)
        return min(delay, self.max_delay)

    def should_retry_response(self, status_code: int) -> bool:
        if status_code == HTTP_TOO_MANY_REQUESTS:
            return self.retry_on_rate_limit
        return is_transient_status(status_code)

    def should_retry_exception(self, error: BaseException) -> bool:
        return is_transient_exception(error)

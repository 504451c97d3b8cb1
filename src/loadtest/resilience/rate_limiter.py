"""Client-side concurrency limiter with a bounded wait queue."""
import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from ..exceptions import RateLimiterRejectedError


# Configure logging
logger = logging.getLogger(__name__)


class ConcurrencyLimiter:
    """Caps concurrent outbound requests per client instance.

    At most ``permit_limit`` leases are held at once. Up to ``queue_limit``
    callers may wait for a lease; any caller beyond that is rejected
    immediately with RateLimiterRejectedError.
    """

    def __init__(self, permit_limit: int, queue_limit: int):
        if permit_limit < 1:
            raise ValueError("permit_limit must be at least 1")
        if queue_limit < 0:
            raise ValueError("queue_limit must be non-negative")
        self.permit_limit = permit_limit
        self.queue_limit = queue_limit
        self._condition = threading.Condition()
        self._in_use = 0
        self._queued = 0
        self._rejected = 0

    @property
    def in_use(self) -> int:
        with self._condition:
            return self._in_use

    @property
    def queued(self) -> int:
        with self._condition:
            return self._queued

    @property
    def rejected(self) -> int:
        with self._condition:
            return self._rejected

    def acquire(self) -> None:
        with self._condition:
            if self._in_use < self.permit_limit and self._queued == 0:
                self._in_use += 1
                return

            if self._queued >= self.queue_limit:
                self._rejected += 1
                logger.warning(
                    f"Rate limiter rejected request: {self._in_use} in use, {self._queued} queued"
                )
                raise RateLimiterRejectedError(
                    f"Client-side rate limiter queue is full ({self.queue_limit} waiting)"
                )

            self._queued += 1
            try:
                while self._in_use >= self.permit_limit:
                    self._condition.wait()
            finally:
                self._queued -= 1
            self._in_use += 1

    def release(self) -> None:
        with self._condition:
            if self._in_use == 0:
                raise RuntimeError("release() called without a matching acquire()")
            self._in_use -= 1
            self._condition.notify()

    @contextmanager
    def lease(self) -> Iterator[None]:
        """Hold one permit for the duration of the block."""
        self.acquire()
        try:
            yield
        finally:
            self.release()

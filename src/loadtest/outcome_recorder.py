"""Thread-safe tallying of per-request outcomes and latencies."""
import logging
from dataclasses import dataclass, field

import numpy as np

from src.const import HTTP_SUCCESS_MIN, HTTP_SUCCESS_MAX, HTTP_ACCEPTED, HTTP_TOO_MANY_REQUESTS
from .atomic import AtomicCounter, AtomicFloat, AtomicMax


# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class OutcomeCounters:
    """Status-code buckets for one run."""
    success_2xx: AtomicCounter = field(default_factory=AtomicCounter)
    accepted_202: AtomicCounter = field(default_factory=AtomicCounter)
    rate_limited_429: AtomicCounter = field(default_factory=AtomicCounter)
    other_non_2xx: AtomicCounter = field(default_factory=AtomicCounter)
    exceptions: AtomicCounter = field(default_factory=AtomicCounter)

    @property
    def completed(self) -> int:
        """Number of finished requests; ``accepted_202`` is a subset of ``success_2xx``."""
        return (
            self.success_2xx.value
            + self.rate_limited_429.value
            + self.other_non_2xx.value
            + self.exceptions.value
        )


class LatencySample:
    """Fixed-capacity latency store with lock-free slot assignment."""

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self._values = np.zeros(capacity, dtype=np.float64)
        self._next_slot = AtomicCounter()

    @property
    def capacity(self) -> int:
        return len(self._values)

    @property
    def writes_attempted(self) -> int:
        return self._next_slot.value

    def append(self, latency_ms: float) -> bool:
        """Claim a unique slot and store the latency. Returns False if the sample is full."""
        index = self._next_slot.increment() - 1
        if index >= self.capacity:
            logger.warning(f"Latency sample full (capacity {self.capacity}), dropping value")
            return False
        self._values[index] = latency_ms
        return True

    def __len__(self) -> int:
        return min(self.writes_attempted, self.capacity)

    def sorted_copy(self) -> np.ndarray:
        """Ascending copy of the collected values; the stored order is left untouched."""
        return np.sort(self._values[:len(self)])


class OutcomeRecorder:
    """Classifies and tallies request outcomes from many concurrent workers."""

    def __init__(self, capacity: int):
        self.counters = OutcomeCounters()
        self.latencies = LatencySample(capacity)
        self._latency_sum = AtomicFloat()
        self._latency_count = AtomicCounter()
        self._max_latency = AtomicMax()

    @property
    def latency_sum(self) -> float:
        return self._latency_sum.value

    @property
    def latency_count(self) -> int:
        return self._latency_count.value

    @property
    def max_latency(self) -> float:
        return self._max_latency.value

    def record_response(self, status_code: int, latency_ms: float) -> None:
        """Bucket a completed HTTP response by status code."""
        self.record_latency(latency_ms)

        if HTTP_SUCCESS_MIN <= status_code <= HTTP_SUCCESS_MAX:
            self.counters.success_2xx.increment()
            if status_code == HTTP_ACCEPTED:
                self.counters.accepted_202.increment()
            return

        if status_code == HTTP_TOO_MANY_REQUESTS:
            self.counters.rate_limited_429.increment()
            return

        self.counters.other_non_2xx.increment()

    def record_exception(self, error: BaseException, latency_ms: float) -> None:
        """Count a request that failed without a usable response."""
        self.record_latency(latency_ms)
        self.counters.exceptions.increment()
        logger.debug(f"Request failed after {latency_ms:.1f} ms: {type(error).__name__}: {error}")

    def record_latency(self, latency_ms: float) -> None:
        self._latency_sum.add(latency_ms)
        self._latency_count.increment()
        self._max_latency.update(latency_ms)
        self.latencies.append(latency_ms)

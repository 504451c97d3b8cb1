"""Data models for the load-test harness."""
from dataclasses import dataclass, field
from typing import Optional

from .exceptions import LoadTestError
from .outcome_recorder import OutcomeRecorder


@dataclass
class LoadTestRun:
    """One client configuration's run; owned by the runner."""
    label: str
    total_requests: int
    parallelism: int
    elapsed_ms: Optional[float] = None
    recorder: OutcomeRecorder = field(init=False)

    def __post_init__(self):
        if self.total_requests < 0:
            raise ValueError("total_requests must be non-negative")
        if self.parallelism < 1:
            raise ValueError("parallelism must be at least 1")
        self.recorder = OutcomeRecorder(self.total_requests)

    @property
    def is_finalized(self) -> bool:
        return self.elapsed_ms is not None

    def finalize(self, elapsed_ms: float) -> None:
        """Record the wall-clock duration once every request has been recorded."""
        if self.is_finalized:
            raise LoadTestError(f"Run {self.label} is already finalized")
        self.elapsed_ms = elapsed_ms


@dataclass
class RequestOutcome:
    """Result of one request: either a status code or an exception."""
    index: int
    latency_ms: float
    status_code: Optional[int] = None
    error: Optional[BaseException] = None


@dataclass
class LatencyResults:
    """Container for latency statistics in milliseconds."""
    average: float
    p50: float
    p95: float
    p99: float
    max: float


@dataclass
class RunSummary:
    """Read-only view of a finished run, used for reporting and export."""
    label: str
    total_requests: int
    parallelism: int
    duration_ms: float
    success_2xx: int
    accepted_202: int
    rate_limited_429: int
    other_non_2xx: int
    exceptions: int
    latency: LatencyResults
    throughput: float

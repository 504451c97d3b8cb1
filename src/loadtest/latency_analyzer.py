"""Analyzes and computes latency statistics."""
import logging
import math

import numpy as np

from .models import LatencyResults, LoadTestRun, RunSummary
from .outcome_recorder import LatencySample, OutcomeRecorder


# Configure logging
logger = logging.getLogger(__name__)


class LatencyAnalyzer:
    """Analyzes and computes latency statistics."""

    @staticmethod
    def average(recorder: OutcomeRecorder) -> float:
        """Mean latency over every recorded request, or 0.0 when nothing was recorded."""
        count = recorder.latency_count
        if count == 0:
            return 0.0
        return recorder.latency_sum / count

    @staticmethod
    def nearest_rank(sorted_latencies: np.ndarray, p: float) -> float:
        """
        Nearest-rank percentile of an ascending array.

        Args:
            sorted_latencies: Latencies sorted ascending.
            p: Percentile as a fraction in [0, 1].

        Returns:
            The ceil(p * n)-th smallest value, or 0.0 for an empty array.
        """
        n = len(sorted_latencies)
        if n == 0:
            return 0.0
        rank = math.ceil(p * n) - 1
        rank = min(max(rank, 0), n - 1)
        return float(sorted_latencies[rank])

    @staticmethod
    def percentile(sample: LatencySample, p: float) -> float:
        """Nearest-rank percentile over a defensive sorted copy of the sample."""
        return LatencyAnalyzer.nearest_rank(sample.sorted_copy(), p)

    @staticmethod
    def throughput(total_requests: int, elapsed_ms: float) -> float:
        """Requests per second over the whole run."""
        if elapsed_ms is None or elapsed_ms <= 0:
            return 0.0
        return total_requests / (elapsed_ms / 1000.0)

    @staticmethod
    def compute_results(recorder: OutcomeRecorder) -> LatencyResults:
        """
        Compute average, p50, p95, p99 and max latency.

        Args:
            recorder: Recorder of a finished run.

        Returns:
            LatencyResults dataclass with the statistics.
        """
        ordered = recorder.latencies.sorted_copy()
        return LatencyResults(
            average=LatencyAnalyzer.average(recorder),
            p50=LatencyAnalyzer.nearest_rank(ordered, 0.50),
            p95=LatencyAnalyzer.nearest_rank(ordered, 0.95),
            p99=LatencyAnalyzer.nearest_rank(ordered, 0.99),
            max=recorder.max_latency,
        )

    @staticmethod
    def summarize(run: LoadTestRun) -> RunSummary:
        """Freeze a finished run into a RunSummary."""
        if not run.is_finalized:
            logger.warning(f"Summarizing run {run.label} before it was finalized")
        counters = run.recorder.counters
        duration_ms = run.elapsed_ms or 0.0
        return RunSummary(
            label=run.label,
            total_requests=run.total_requests,
            parallelism=run.parallelism,
            duration_ms=duration_ms,
            success_2xx=counters.success_2xx.value,
            accepted_202=counters.accepted_202.value,
            rate_limited_429=counters.rate_limited_429.value,
            other_non_2xx=counters.other_non_2xx.value,
            exceptions=counters.exceptions.value,
            latency=LatencyAnalyzer.compute_results(run.recorder),
            throughput=LatencyAnalyzer.throughput(run.total_requests, duration_ms),
        )

"""Unit tests for latency statistics."""

import numpy as np
import pytest

from src.loadtest.latency_analyzer import LatencyAnalyzer
from src.loadtest.models import LoadTestRun
from src.loadtest.outcome_recorder import LatencySample, OutcomeRecorder


def _sample(values):
    sample = LatencySample(capacity=len(values))
    for value in values:
        sample.append(value)
    return sample


class TestPercentile:
    """Test nearest-rank percentile selection."""

    def test_empty_sample_returns_zero(self):
        sample = LatencySample(capacity=10)
        for p in (0.0, 0.5, 0.95, 0.99, 1.0):
            assert LatencyAnalyzer.percentile(sample, p) == 0.0

    def test_nearest_rank_without_interpolation(self):
        sample = _sample([float(v) for v in range(1, 11)])  # 1..10
        assert LatencyAnalyzer.percentile(sample, 0.50) == 5.0
        assert LatencyAnalyzer.percentile(sample, 0.95) == 10.0
        assert LatencyAnalyzer.percentile(sample, 0.25) == 3.0

    def test_rank_is_clamped(self):
        sample = _sample([7.0, 3.0, 5.0])
        assert LatencyAnalyzer.percentile(sample, 0.0) == 3.0
        assert LatencyAnalyzer.percentile(sample, 1.0) == 7.0

    def test_unsorted_input(self):
        sample = _sample([40.0, 10.0, 30.0, 20.0])
        assert LatencyAnalyzer.percentile(sample, 0.5) == 20.0

    def test_hundred_values(self):
        sample = _sample([float(v) for v in range(100, 0, -1)])  # 100..1
        assert LatencyAnalyzer.percentile(sample, 0.50) == 50.0
        assert LatencyAnalyzer.percentile(sample, 0.95) == 95.0
        assert LatencyAnalyzer.percentile(sample, 0.99) == 99.0

    def test_only_collected_prefix_is_used(self):
        sample = LatencySample(capacity=5)
        sample.append(10.0)
        sample.append(20.0)
        # Unwritten slots hold zeros and must not count.
        assert LatencyAnalyzer.percentile(sample, 0.0) == 10.0

    def test_nearest_rank_on_array(self):
        assert LatencyAnalyzer.nearest_rank(np.array([]), 0.5) == 0.0
        assert LatencyAnalyzer.nearest_rank(np.array([1.0, 2.0]), 0.5) == 1.0


class TestAverageAndThroughput:
    """Test average and throughput computation."""

    def test_average(self):
        recorder = OutcomeRecorder(capacity=3)
        for latency in (10.0, 20.0, 60.0):
            recorder.record_response(200, latency)
        assert LatencyAnalyzer.average(recorder) == pytest.approx(30.0)

    def test_average_of_nothing_is_zero(self):
        assert LatencyAnalyzer.average(OutcomeRecorder(capacity=0)) == 0.0

    def test_throughput(self):
        assert LatencyAnalyzer.throughput(2000, 4000.0) == pytest.approx(500.0)

    @pytest.mark.parametrize("elapsed_ms", [0.0, -5.0, None])
    def test_throughput_non_positive_elapsed(self, elapsed_ms):
        assert LatencyAnalyzer.throughput(100, elapsed_ms) == 0.0


class TestSummaries:
    """Test LatencyResults and RunSummary construction."""

    def test_percentiles_are_ordered(self):
        recorder = OutcomeRecorder(capacity=200)
        rng = np.random.default_rng(7)
        for latency in rng.exponential(scale=80.0, size=200):
            recorder.record_response(200, float(latency))

        results = LatencyAnalyzer.compute_results(recorder)
        assert results.p50 <= results.p95 <= results.p99 <= results.max

    def test_compute_results_fixed_latency(self):
        recorder = OutcomeRecorder(capacity=100)
        for _ in range(100):
            recorder.record_response(200, 50.0)

        results = LatencyAnalyzer.compute_results(recorder)
        assert results.average == pytest.approx(50.0)
        assert results.p50 == results.p95 == results.p99 == results.max == 50.0

    def test_summarize_empty_run(self):
        run = LoadTestRun(label="OLD", total_requests=0, parallelism=1)
        run.finalize(0.0)

        summary = LatencyAnalyzer.summarize(run)
        assert summary.success_2xx == summary.rate_limited_429 == summary.other_non_2xx == summary.exceptions == 0
        assert summary.latency.p50 == summary.latency.p95 == summary.latency.p99 == 0.0
        assert summary.latency.average == 0.0
        assert summary.throughput == 0.0

    def test_summarize_copies_counters(self):
        run = LoadTestRun(label="NEW", total_requests=4, parallelism=2)
        run.recorder.record_response(202, 10.0)
        run.recorder.record_response(200, 10.0)
        run.recorder.record_response(429, 10.0)
        run.recorder.record_exception(TimeoutError(), 10.0)
        run.finalize(2000.0)

        summary = LatencyAnalyzer.summarize(run)
        assert summary.label == "NEW"
        assert summary.success_2xx == 2
        assert summary.accepted_202 == 1
        assert summary.rate_limited_429 == 1
        assert summary.exceptions == 1
        assert summary.duration_ms == 2000.0
        assert summary.throughput == pytest.approx(2.0)

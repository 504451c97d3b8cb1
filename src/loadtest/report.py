"""Plain-text summary of a finished run."""
from .models import RunSummary


class ReportFormatter:
    """Formats RunSummary objects for the console."""

    @staticmethod
    def format_summary(summary: RunSummary) -> str:
        latency = summary.latency
        lines = [
            f"========== {summary.label} CLIENT SUMMARY ==========",
            f"Total requests: {summary.total_requests}",
            f"Parallelism:    {summary.parallelism}",
            f"Duration:       {summary.duration_ms:.0f} ms",
            f"2xx:            {summary.success_2xx}",
            f"202:            {summary.accepted_202}",
            f"429:            {summary.rate_limited_429}",
            f"Other non-2xx:  {summary.other_non_2xx}",
            f"Exceptions:     {summary.exceptions}",
            (
                f"Latency (ms):   avg={latency.average:.1f}  p50={latency.p50:.1f}  "
                f"p95={latency.p95:.1f}  p99={latency.p99:.1f}  max={latency.max:.1f}"
            ),
            f"Throughput:     {summary.throughput:.1f} req/s",
        ]
        return "\n".join(lines)

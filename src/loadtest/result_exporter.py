"""Handles exporting run summaries to CSV."""
import logging
from pathlib import Path
from typing import List, Union

import pandas as pd

from .models import LatencyResults, RunSummary


# Configure logging
logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    'label', 'total_requests', 'parallelism', 'duration_ms',
    'success_2xx', 'accepted_202', 'rate_limited_429', 'other_non_2xx', 'exceptions',
    'avg_latency_ms', 'p50_latency_ms', 'p95_latency_ms', 'p99_latency_ms', 'max_latency_ms',
    'throughput_rps',
]


class ResultExporter:
    """Handles exporting run summaries to CSV."""

    @staticmethod
    def summaries_to_dataframe(summaries: List[RunSummary]) -> pd.DataFrame:
        rows = []
        for summary in summaries:
            rows.append({
                'label': summary.label,
                'total_requests': summary.total_requests,
                'parallelism': summary.parallelism,
                'duration_ms': summary.duration_ms,
                'success_2xx': summary.success_2xx,
                'accepted_202': summary.accepted_202,
                'rate_limited_429': summary.rate_limited_429,
                'other_non_2xx': summary.other_non_2xx,
                'exceptions': summary.exceptions,
                'avg_latency_ms': summary.latency.average,
                'p50_latency_ms': summary.latency.p50,
                'p95_latency_ms': summary.latency.p95,
                'p99_latency_ms': summary.latency.p99,
                'max_latency_ms': summary.latency.max,
                'throughput_rps': summary.throughput,
            })
        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)

    @staticmethod
    def save_summaries_to_csv(summaries: List[RunSummary], output_path: Union[Path, str]) -> None:
        """
        Save run summaries to CSV, one row per client.

        Args:
            summaries: Finished run summaries.
            output_path: Path to save CSV.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        df = ResultExporter.summaries_to_dataframe(summaries)
        df.to_csv(output_path, index=False)
        logger.info(f"CSV saved: {output_path}")

    @staticmethod
    def load_summaries_from_csv(input_path: Union[Path, str]) -> List[RunSummary]:
        """
        Load run summaries from CSV.

        Args:
            input_path: Path to load CSV from.

        Returns:
            List of RunSummary in file order.
        """
        df = pd.read_csv(input_path)
        summaries = []
        for _, row in df.iterrows():
            summaries.append(RunSummary(
                label=str(row['label']),
                total_requests=int(row['total_requests']),
                parallelism=int(row['parallelism']),
                duration_ms=float(row['duration_ms']),
                success_2xx=int(row['success_2xx']),
                accepted_202=int(row['accepted_202']),
                rate_limited_429=int(row['rate_limited_429']),
                other_non_2xx=int(row['other_non_2xx']),
                exceptions=int(row['exceptions']),
                latency=LatencyResults(
                    average=float(row['avg_latency_ms']),
                    p50=float(row['p50_latency_ms']),
                    p95=float(row['p95_latency_ms']),
                    p99=float(row['p99_latency_ms']),
                    max=float(row['max_latency_ms']),
                ),
                throughput=float(row['throughput_rps']),
            ))
        logger.info(f"Results loaded from CSV: {input_path}")
        return summaries

"""Comparative runner: baseline client, cooldown, resilient client, then both reports."""
import time
import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

from src.shared.config import ClientProfileConfig, LoadTestConfig
from .client_factory import ClientFactory
from .concurrency_manager import ConcurrencyManager
from .latency_analyzer import LatencyAnalyzer
from .models import LoadTestRun, RunSummary
from .report import ReportFormatter
from .request_executor import RequestExecutor, PayloadFactory
from .result_exporter import ResultExporter


# Configure logging
logger = logging.getLogger(__name__)


class ComparativeRunner:
    """Orchestrates the OLD and NEW runs and prints their summaries."""

    def __init__(
        self,
        config: LoadTestConfig,
        client_factory: Optional[ClientFactory] = None,
        sleep: Callable[[float], None] = time.sleep,
        output: Callable[[str], None] = print,
    ):
        self.config = config
        self.client_factory = client_factory
        self._sleep = sleep
        self._output = output

    def build_payload_factory(self) -> PayloadFactory:
        prefix = self.config.user_id_prefix
        event_name = self.config.event_name

        def payload_factory(index: int) -> dict:
            return {"id": f"{prefix}{index}", "event": event_name}

        return payload_factory

    def run_single(self, profile: ClientProfileConfig) -> LoadTestRun:
        """
        Run every request of one client profile to completion.

        Args:
            profile: Client profile to test.

        Returns:
            The finalized LoadTestRun.
        """
        run = LoadTestRun(
            label=profile.label,
            total_requests=self.config.total_requests,
            parallelism=self.config.parallelism,
        )
        client = self.client_factory.create_client(profile, pool_size=self.config.parallelism)
        try:
            executor = RequestExecutor(client, self.config.endpoint_path)
            ConcurrencyManager(executor).dispatch(run, self.build_payload_factory())
        finally:
            client.close()

        circuit_breaker = getattr(client, "circuit_breaker", None)
        if circuit_breaker is not None:
            status = circuit_breaker.get_status()
            logger.info(
                f"{profile.label} circuit breaker: state={status['state']} "
                f"state_changes={status['metrics']['state_changes']} "
                f"rejected={status['metrics']['rejected_requests']}"
            )
        return run

    def run(self, export_path: Optional[Union[Path, str]] = None) -> List[RunSummary]:
        """
        Run the baseline and resilient clients back to back and print both reports.

        Args:
            export_path: Optional CSV path for the two summaries.

        Returns:
            Summaries in run order (baseline first).

        Raises:
            ConfigurationError: If required configuration is missing; nothing is sent.
        """
        try:
            api_key = self.config.require_api_key()
            if self.client_factory is None:
                self.client_factory = ClientFactory(self.config.base_url, api_key)

            logger.info(f"Target: {self.config.endpoint_url}")
            baseline_run = self.run_single(self.config.baseline)

            logger.info(f"Cooling down for {self.config.cooldown_seconds}s before the next run...")
            self._sleep(self.config.cooldown_seconds)

            resilient_run = self.run_single(self.config.resilient)

            summaries = [
                LatencyAnalyzer.summarize(baseline_run),
                LatencyAnalyzer.summarize(resilient_run),
            ]
            self._output(ReportFormatter.format_summary(summaries[0]))
            self._output("")
            self._output(ReportFormatter.format_summary(summaries[1]))

            if export_path is not None:
                ResultExporter.save_summaries_to_csv(summaries, export_path)

            return summaries

        except Exception as e:
            logger.error(f"Load test failed: {e}", stack_info=True)
            raise

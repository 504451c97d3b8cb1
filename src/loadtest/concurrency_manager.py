"""Manages concurrent request execution."""
import logging
import time
import concurrent.futures
from typing import Callable

from .atomic import AtomicCounter
from .exceptions import LoadTestError
from .models import LoadTestRun, RequestOutcome
from .outcome_recorder import OutcomeRecorder
from .request_executor import RequestExecutor, PayloadFactory


# Configure logging
logger = logging.getLogger(__name__)


class ConcurrencyManager:
    """Issues a run's requests from a fixed pool of workers.

    Each worker claims the next request index until all are taken, so at most
    ``parallelism`` requests are in flight at any instant.
    """

    def __init__(self, request_executor: RequestExecutor, clock: Callable[[], float] = time.perf_counter):
        self.request_executor = request_executor
        self._clock = clock

    @staticmethod
    def record(recorder: OutcomeRecorder, outcome: RequestOutcome) -> None:
        if outcome.error is not None:
            recorder.record_exception(outcome.error, outcome.latency_ms)
        else:
            recorder.record_response(outcome.status_code, outcome.latency_ms)

    def _worker(self, run: LoadTestRun, next_index: AtomicCounter, payload_factory: PayloadFactory) -> int:
        sent = 0
        while True:
            index = next_index.increment() - 1
            if index >= run.total_requests:
                return sent
            outcome = self.request_executor.send(index, payload_factory)
            self.record(run.recorder, outcome)
            sent += 1

    def dispatch(self, run: LoadTestRun, payload_factory: PayloadFactory) -> None:
        """
        Send every request of the run and wait for all of them to be recorded.

        Args:
            run: The run to execute; finalized with its elapsed time on return.
            payload_factory: Builds the form body for a 0-based request index.
        """
        if run.is_finalized:
            raise LoadTestError(f"Run {run.label} has already been dispatched")
        if run.parallelism < 1:
            raise ValueError("parallelism must be at least 1")
        if run.total_requests < 0:
            raise ValueError("total_requests must be non-negative")

        workers = min(run.parallelism, run.total_requests)
        next_index = AtomicCounter()
        logger.info(
            f"Dispatching {run.total_requests} requests for {run.label} with {workers} workers "
            f"(parallelism {run.parallelism})"
        )

        start_time = self._clock()
        if workers > 0:
            with concurrent.futures.ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix=f"loadtest-{run.label}"
            ) as executor:
                futures = [
                    executor.submit(self._worker, run, next_index, payload_factory)
                    for _ in range(workers)
                ]
                for future in concurrent.futures.as_completed(futures):
                    future.result()
        elapsed_ms = (self._clock() - start_time) * 1000.0

        run.finalize(elapsed_ms)
        logger.info(
            f"Run {run.label} finished in {elapsed_ms:.0f} ms "
            f"({run.recorder.counters.completed}/{run.total_requests} recorded)"
        )

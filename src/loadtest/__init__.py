"""Load-test package initialization."""
from .models import LoadTestRun, RequestOutcome, LatencyResults, RunSummary
from .exceptions import LoadTestError, RateLimiterRejectedError, TotalTimeoutError
from .atomic import AtomicCounter, AtomicFloat, AtomicMax
from .outcome_recorder import OutcomeCounters, LatencySample, OutcomeRecorder
from .latency_analyzer import LatencyAnalyzer
from .request_session_manager import RequestSessionManager
from .request_executor import RequestExecutor
from .concurrency_manager import ConcurrencyManager
from .client_factory import ClientFactory
from .report import ReportFormatter
from .result_exporter import ResultExporter
from .smoke import EventSmokeTest
from .runner import ComparativeRunner

__all__ = [
    'LoadTestRun',
    'RequestOutcome',
    'LatencyResults',
    'RunSummary',
    'LoadTestError',
    'RateLimiterRejectedError',
    'TotalTimeoutError',
    'AtomicCounter',
    'AtomicFloat',
    'AtomicMax',
    'OutcomeCounters',
    'LatencySample',
    'OutcomeRecorder',
    'LatencyAnalyzer',
    'RequestSessionManager',
    'RequestExecutor',
    'ConcurrencyManager',
    'ClientFactory',
    'ReportFormatter',
    'ResultExporter',
    'EventSmokeTest',
    'ComparativeRunner',
]

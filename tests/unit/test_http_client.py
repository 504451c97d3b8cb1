"""Unit tests for the resilient HTTP client pipeline."""

from unittest.mock import MagicMock

import pytest
import requests

from src.loadtest.exceptions import RateLimiterRejectedError, TotalTimeoutError
from src.loadtest.resilience import (
    BackoffType,
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerOpenException,
    ConcurrencyLimiter,
    ResilientHttpClient,
    RetryPolicy,
)
from tests.fakes import FakeResponse
from tests.test_const import (
    TEST_BASE_URL, TEST_ENDPOINT_PATH, STATUS_OK, STATUS_TOO_MANY_REQUESTS, STATUS_SERVER_ERROR,
)


def _client(session, clock, sleeps, retry_policy=None, **kwargs):
    def sleep(seconds):
        sleeps.append(seconds)
        clock.advance(seconds)

    options = dict(attempt_timeout=10.0, total_timeout=30.0)
    options.update(kwargs)
    return ResilientHttpClient(
        session=session,
        base_url=TEST_BASE_URL,
        retry_policy=retry_policy or RetryPolicy(max_retry_attempts=3, delay=2.0),
        name="test",
        sleep=sleep,
        clock=clock,
        **options,
    )


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


class TestResilientHttpClient:
    """Test retry, timeout, limiter and breaker composition."""

    def test_posts_form_body_to_endpoint(self, session, fake_clock):
        session.post.return_value = FakeResponse(STATUS_OK)
        client = _client(session, fake_clock, [])

        response = client.post(TEST_ENDPOINT_PATH, data={"id": "test-user-1", "event": "e"})

        assert response.status_code == STATUS_OK
        session.post.assert_called_once_with(
            f"{TEST_BASE_URL}/v1/track-event",
            data={"id": "test-user-1", "event": "e"},
            timeout=10.0,
        )

    def test_retries_server_errors_with_constant_delay(self, session, fake_clock):
        failed = [FakeResponse(STATUS_SERVER_ERROR), FakeResponse(STATUS_SERVER_ERROR)]
        session.post.side_effect = failed + [FakeResponse(STATUS_OK)]
        sleeps = []
        client = _client(session, fake_clock, sleeps)

        response = client.post(TEST_ENDPOINT_PATH)

        assert response.status_code == STATUS_OK
        assert session.post.call_count == 3
        assert sleeps == [2.0, 2.0]
        assert all(r.closed for r in failed)

    def test_returns_last_response_when_retries_exhausted(self, session, fake_clock):
        session.post.side_effect = [FakeResponse(STATUS_SERVER_ERROR) for _ in range(4)]
        client = _client(session, fake_clock, [], total_timeout=60.0)

        response = client.post(TEST_ENDPOINT_PATH)

        assert response.status_code == STATUS_SERVER_ERROR
        assert session.post.call_count == 4

    def test_baseline_does_not_retry_rate_limit(self, session, fake_clock):
        session.post.return_value = FakeResponse(STATUS_TOO_MANY_REQUESTS)
        client = _client(session, fake_clock, [])

        response = client.post(TEST_ENDPOINT_PATH)

        assert response.status_code == STATUS_TOO_MANY_REQUESTS
        assert session.post.call_count == 1

    def test_resilient_retries_rate_limit_with_backoff(self, session, fake_clock):
        session.post.side_effect = [
            FakeResponse(STATUS_TOO_MANY_REQUESTS),
            FakeResponse(STATUS_TOO_MANY_REQUESTS),
            FakeResponse(STATUS_OK),
        ]
        sleeps = []
        policy = RetryPolicy(max_retry_attempts=3, delay=3.0, backoff=BackoffType.EXPONENTIAL,
                             retry_on_rate_limit=True)
        client = _client(session, fake_clock, sleeps, retry_policy=policy, total_timeout=120.0)

        response = client.post(TEST_ENDPOINT_PATH)

        assert response.status_code == STATUS_OK
        assert sleeps == [3.0, 6.0]

    def test_transport_error_retried_then_raised(self, session, fake_clock):
        session.post.side_effect = requests.ConnectionError("reset")
        client = _client(session, fake_clock, [], total_timeout=60.0)

        with pytest.raises(requests.ConnectionError):
            client.post(TEST_ENDPOINT_PATH)
        assert session.post.call_count == 4

    def test_non_transient_error_not_retried(self, session, fake_clock):
        session.post.side_effect = requests.TooManyRedirects("loop")
        client = _client(session, fake_clock, [])

        with pytest.raises(requests.TooManyRedirects):
            client.post(TEST_ENDPOINT_PATH)
        assert session.post.call_count == 1

    def test_total_timeout_stops_backoff(self, session, fake_clock):
        session.post.return_value = FakeResponse(STATUS_SERVER_ERROR)
        client = _client(session, fake_clock, [], total_timeout=5.0)

        with pytest.raises(TotalTimeoutError):
            client.post(TEST_ENDPOINT_PATH)
        # 0s: attempt, sleep 2 -> 2s: attempt, sleep 2 -> 4s: attempt, next sleep would pass 5s
        assert session.post.call_count == 3

    def test_attempt_timeout_clamped_to_remaining_time(self, session, fake_clock):
        session.post.side_effect = [FakeResponse(STATUS_SERVER_ERROR), FakeResponse(STATUS_OK)]
        client = _client(session, fake_clock, [], attempt_timeout=10.0, total_timeout=7.0)

        client.post(TEST_ENDPOINT_PATH)

        timeouts = [call.kwargs["timeout"] for call in session.post.call_args_list]
        assert timeouts == [7.0, 5.0]

    def test_rate_limiter_rejection_propagates(self, session, fake_clock):
        limiter = ConcurrencyLimiter(permit_limit=1, queue_limit=0)
        limiter.acquire()
        client = _client(session, fake_clock, [], rate_limiter=limiter)

        with pytest.raises(RateLimiterRejectedError):
            client.post(TEST_ENDPOINT_PATH)
        session.post.assert_not_called()

    def test_rate_limiter_released_after_request(self, session, fake_clock):
        session.post.return_value = FakeResponse(STATUS_OK)
        limiter = ConcurrencyLimiter(permit_limit=1, queue_limit=0)
        client = _client(session, fake_clock, [], rate_limiter=limiter)

        client.post(TEST_ENDPOINT_PATH)
        client.post(TEST_ENDPOINT_PATH)

        assert limiter.in_use == 0

    def test_open_circuit_fails_fast_without_retry(self, session, fake_clock):
        session.post.side_effect = requests.ConnectionError("down")
        breaker = CircuitBreaker(
            CircuitBreakerConfig(name="test", failure_ratio=0.5, minimum_throughput=2,
                                 sampling_duration=30.0, break_duration=15.0),
            clock=fake_clock,
        )
        client = _client(session, fake_clock, [], total_timeout=60.0, circuit_breaker=breaker)

        # Two failed attempts open the circuit; the third attempt is rejected locally.
        with pytest.raises(CircuitBreakerOpenException):
            client.post(TEST_ENDPOINT_PATH)
        assert session.post.call_count == 2

    def test_close_closes_session(self, session, fake_clock):
        _client(session, fake_clock, []).close()
        session.close.assert_called_once()

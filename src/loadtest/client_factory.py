"""Builds the clients under test from their configuration profiles."""
import logging
import random
from typing import Optional

from src.const import HTTP_TOO_MANY_REQUESTS
from src.shared.config import ClientProfileConfig
from .request_session_manager import RequestSessionManager
from .resilience import (
    BackoffType,
    CircuitBreaker,
    CircuitBreakerConfig,
    ConcurrencyLimiter,
    ResilientHttpClient,
    RetryPolicy,
    is_transient_exception,
    is_transient_status,
)


# Configure logging
logger = logging.getLogger(__name__)


class ClientFactory:
    """Creates a ResilientHttpClient per profile, each with its own session and strategy state."""

    def __init__(self, base_url: str, api_key: str, rng: Optional[random.Random] = None):
        self.base_url = base_url
        self.api_key = api_key
        self.rng = rng

    @staticmethod
    def build_retry_policy(profile: ClientProfileConfig, rng: Optional[random.Random] = None) -> RetryPolicy:
        return RetryPolicy(
            max_retry_attempts=profile.max_retry_attempts,
            delay=profile.retry_delay,
            backoff=BackoffType(profile.retry_backoff),
            use_jitter=profile.retry_use_jitter,
            retry_on_rate_limit=profile.retry_on_rate_limit,
            max_delay=profile.retry_max_delay,
            rng=rng,
        )

    @staticmethod
    def build_circuit_breaker(profile: ClientProfileConfig) -> CircuitBreaker:
        ignore_rate_limit = profile.circuit_breaker_ignore_rate_limit

        def should_handle(response, error) -> bool:
            if error is not None:
                return is_transient_exception(error)
            if ignore_rate_limit and response.status_code == HTTP_TOO_MANY_REQUESTS:
                return False
            return is_transient_status(response.status_code) or response.status_code == HTTP_TOO_MANY_REQUESTS

        config = CircuitBreakerConfig(
            failure_ratio=profile.circuit_breaker_failure_ratio,
            minimum_throughput=profile.circuit_breaker_minimum_throughput,
            sampling_duration=profile.circuit_breaker_sampling_duration,
            break_duration=profile.circuit_breaker_break_duration,
            name=profile.label,
            should_handle=should_handle,
        )
        return CircuitBreaker(config)

    def create_client(self, profile: ClientProfileConfig, pool_size: int = 10) -> ResilientHttpClient:
        """
        Create a client for the given profile.

        Args:
            profile: Resilience settings of the client.
            pool_size: Connection pool size for the session.

        Returns:
            A fresh ResilientHttpClient; no strategy state is shared between calls.
        """
        rate_limiter = None
        if profile.rate_limiter_enabled:
            rate_limiter = ConcurrencyLimiter(
                permit_limit=profile.rate_limiter_permit_limit,
                queue_limit=profile.rate_limiter_queue_limit,
            )

        circuit_breaker = None
        if profile.circuit_breaker_enabled:
            circuit_breaker = self.build_circuit_breaker(profile)

        logger.info(
            f"Creating {profile.label} client: retries={profile.max_retry_attempts} "
            f"({profile.retry_backoff}, {profile.retry_delay}s, jitter={profile.retry_use_jitter}, "
            f"retry429={profile.retry_on_rate_limit}), rate_limiter={profile.rate_limiter_enabled}, "
            f"circuit_breaker={profile.circuit_breaker_enabled}"
        )
        return ResilientHttpClient(
            session=RequestSessionManager.create_session(self.api_key, pool_size=pool_size),
            base_url=self.base_url,
            retry_policy=self.build_retry_policy(profile, self.rng),
            attempt_timeout=profile.attempt_timeout,
            total_timeout=profile.total_timeout,
            name=profile.label,
            rate_limiter=rate_limiter,
            circuit_breaker=circuit_breaker,
        )

"""Client-side resilience strategies for the clients under test."""
from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerMetrics,
    CircuitBreakerOpenException,
    CircuitBreakerState,
)
from .http_client import ResilientHttpClient
from .rate_limiter import ConcurrencyLimiter
from .retry import BackoffType, RetryPolicy, is_transient_exception, is_transient_status

__all__ = [
    'CircuitBreaker',
    'CircuitBreakerConfig',
    'CircuitBreakerMetrics',
    'CircuitBreakerOpenException',
    'CircuitBreakerState',
    'ResilientHttpClient',
    'ConcurrencyLimiter',
    'BackoffType',
    'RetryPolicy',
    'is_transient_exception',
    'is_transient_status',
]

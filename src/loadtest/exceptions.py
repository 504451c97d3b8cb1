"""Custom exceptions for the load-test harness."""


class LoadTestError(Exception):
    """Base exception for load-test harness failures."""
    pass


class RateLimiterRejectedError(LoadTestError):
    """Raised when the client-side limiter queue is full."""
    pass


class TotalTimeoutError(LoadTestError):
    """Raised when a request exceeds its total deadline across all attempts."""
    pass

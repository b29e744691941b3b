"""Resilience patterns module."""

from marketfeed.core.patterns.retry import LinearBackoffRetry, RetryConfig, RetryState

__all__ = [
    "LinearBackoffRetry",
    "RetryConfig",
    "RetryState",
]

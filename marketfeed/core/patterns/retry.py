"""Retry with linearly increasing backoff."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from marketfeed.core.exceptions import SourceError

T = TypeVar("T")


class RetryState(Enum):
    """Retry state."""

    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RetryConfig:
    """Retry configuration."""

    max_attempts: int = 3
    base_delay: float = 0.5  # delay after attempt n is base_delay * n
    max_delay: float = 10.0
    retry_on_exceptions: list[type] = field(default_factory=lambda: [SourceError])

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")


class LinearBackoffRetry:
    """Runs a coroutine function until it succeeds or attempts run out.

    ``func`` is called afresh on every attempt so it can pick per-attempt
    resources (for example the next relay). The backoff suspends with
    ``sleep`` and never blocks the event loop.
    """

    def __init__(
        self,
        config: RetryConfig,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_failure: Callable[[int, Exception], None] | None = None,
    ):
        self.config = config
        self._sleep = sleep
        self._on_failure = on_failure
        self.attempt_count = 0
        self.total_delay = 0.0
        self.state = RetryState.READY
        self.last_exception: Exception | None = None

    async def execute(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Execute ``func`` applying the retry policy.

        Raises:
            Exception: the last failure once every attempt has been spent, or
                immediately for exceptions outside ``retry_on_exceptions``
        """
        self.state = RetryState.RUNNING
        self.attempt_count = 0
        self.total_delay = 0.0

        while True:
            self.attempt_count += 1
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                self.last_exception = e
                should_retry = any(isinstance(e, exc_type) for exc_type in self.config.retry_on_exceptions)
                if self._on_failure is not None and should_retry:
                    self._on_failure(self.attempt_count, e)
                if not should_retry or self.attempt_count >= self.config.max_attempts:
                    self.state = RetryState.FAILED
                    raise

                delay = self.calculate_delay(self.attempt_count)
                if delay > 0:
                    await self._sleep(delay)
                    self.total_delay += delay
            else:
                self.state = RetryState.COMPLETED
                return result

    def calculate_delay(self, attempt_number: int) -> float:
        """Delay after the ``attempt_number``-th (1-based) failed attempt."""
        if attempt_number < 1:
            return 0.0
        return min(self.config.base_delay * attempt_number, self.config.max_delay)

    def get_stats(self) -> dict[str, Any]:
        return {
            "attempts": self.attempt_count,
            "max_attempts": self.config.max_attempts,
            "total_delay": self.total_delay,
            "state": self.state.value,
            "last_exception": str(self.last_exception) if self.last_exception else None,
        }

"""
Retry Policy

Wraps a single bound gateway operation and re-invokes it on transient
upstream failures, using tenacity for the attempt loop and backoff.

Rules:
    - Only TransientUpstreamError (network, timeout, 5xx, 408, 429) is retried
    - Every other error propagates on the first attempt
    - When the retry ceiling is reached the last error is re-raised unchanged
    - When no operation is bound (no provider selected) the declared empty
      value is returned without entering the retry loop

Usage:
    policy = RetryPolicy.from_settings(settings)
    accounts = await policy.execute(lambda: adapter.get_accounts(request), empty=[])
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

from core.config import Settings, settings as default_settings
from core.errors import TransientUpstreamError
from core.logging import get_logger


T = TypeVar("T")

logger = get_logger(__name__)


class RetryPolicy:
    """
    Bounded retry with fixed or exponential backoff.

    Attributes:
        max_attempts: Total attempts, first one included
        backoff: "exponential" or "fixed"
        base_delay: Fixed delay, or the multiplier for exponential backoff (seconds)
        max_delay: Upper bound on a single delay (seconds)

    Example:
        >>> policy = RetryPolicy(max_attempts=3, backoff="fixed", base_delay=0)
        >>> await policy.execute(None, empty=[])
        []
    """

    def __init__(
        self,
        max_attempts: int = 3,
        backoff: str = "exponential",
        base_delay: float = 0.5,
        max_delay: float = 8.0
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if backoff not in ("exponential", "fixed"):
            raise ValueError(f"Unknown backoff strategy: {backoff}")

        self.max_attempts = max_attempts
        self.backoff = backoff
        self.base_delay = base_delay
        self.max_delay = max_delay

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "RetryPolicy":
        config = config or default_settings
        return cls(
            max_attempts=config.retry_max_attempts,
            backoff=config.retry_backoff,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
        )

    def _wait(self):
        if self.backoff == "fixed":
            return wait_fixed(self.base_delay)
        return wait_exponential(multiplier=self.base_delay, max=self.max_delay)

    async def execute(
        self,
        operation: Optional[Callable[[], Awaitable[T]]],
        *,
        empty: T = None,
        name: str = "operation"
    ) -> T:
        """
        Run `operation` under the policy.

        Args:
            operation: Zero-argument coroutine factory, or None when no adapter is bound
            empty: Value returned when `operation` is None
            name: Operation name for log lines

        Returns:
            The operation's result, or `empty`

        Raises:
            Whatever the last attempt raised
        """
        if operation is None:
            return empty

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait(),
            retry=retry_if_exception_type(TransientUpstreamError),
            reraise=True,
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )

        result = empty
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(f"Retrying {name} (attempt {attempt.retry_state.attempt_number}/{self.max_attempts})")
                result = await operation()
        return result

    def __repr__(self) -> str:
        return (
            f"<RetryPolicy max_attempts={self.max_attempts} backoff={self.backoff} "
            f"base_delay={self.base_delay} max_delay={self.max_delay}>"
        )

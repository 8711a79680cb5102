"""RetryPolicy - bounded retry with linear backoff."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Optional, TypeVar

from guestflow_sdk.logging import get_logger

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
Sleep = Callable[[float], Awaitable[None]]
FailureCallback = Callable[[int, BaseException], None]

_logger = get_logger("orchestration.retry")


def is_retryable(exc: BaseException) -> bool:
    """Errors opt out of retries with a false ``retryable`` attribute."""
    return bool(getattr(exc, "retryable", True))


@dataclass
class RetryPolicy:
    """
    Retry policy for fallible async operations.

    Between attempt ``n`` and ``n + 1`` the policy waits
    ``base_delay_seconds * n``. The operation is a zero-argument factory
    so every attempt starts from a fresh awaitable.
    """

    max_attempts: int = 3
    base_delay_seconds: float = 0.0
    sleep: Sleep = asyncio.sleep

    def delay_for(self, attempt: int, base_delay: Optional[float] = None) -> float:
        """Wait applied after a failed attempt (1-based)."""
        base = self.base_delay_seconds if base_delay is None else base_delay
        return base * attempt

    async def run(
        self,
        operation: Operation[T],
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> T:
        """
        Run operation until it succeeds or attempts are exhausted.

        Args:
            operation: Zero-argument callable returning an awaitable
            max_attempts: Overrides the policy's max_attempts
            base_delay: Overrides the policy's base delay (seconds)
            on_failure: Called with (attempt, error) after every failed attempt

        Returns:
            The first successful result

        Raises:
            The last error unchanged. A non-retryable error is raised on the
            attempt that produced it.
        """
        attempts = self.max_attempts if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {attempts}")

        for attempt in range(1, attempts + 1):
            try:
                return await operation()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                if on_failure is not None:
                    on_failure(attempt, exc)

                if not is_retryable(exc):
                    _logger.warning(
                        f"Attempt {attempt}/{attempts} failed with non-retryable "
                        f"{type(exc).__name__}: {exc}"
                    )
                    raise

                if attempt == attempts:
                    _logger.warning(
                        f"Attempt {attempt}/{attempts} failed, giving up: {exc}"
                    )
                    raise

                delay = self.delay_for(attempt, base_delay)
                _logger.info(
                    f"Attempt {attempt}/{attempts} failed: {exc}. Retrying in {delay:.1f}s"
                )
                if delay > 0:
                    await self.sleep(delay)

        raise AssertionError("unreachable")  # pragma: no cover

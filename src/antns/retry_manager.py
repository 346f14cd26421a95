"""
Retry Manager for network storage operations.

This module provides retry logic with exponential backoff for transient
storage failures (timeouts, unreachable gateway, server errors). Definitive
answers such as "not found" or "already exists" are never retried.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from .config import RetryConfig
from .exceptions import StorageError

T = TypeVar("T")


@dataclass
class RetryResult(Generic[T]):
    """Result of a retry operation."""

    success: bool
    result: Optional[T]
    attempts: int
    last_error: Optional[Exception]


class RetryManager:
    """
    Manages retry logic with exponential backoff.

    Only failures whose kind is listed in the configuration's
    ``retryable_errors`` are retried.
    """

    def __init__(
        self,
        config: RetryConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the retry manager.

        Args:
            config: Retry configuration with max_retries, delays, and retryable errors
            sleep: Coroutine used to wait between attempts
        """
        self._config = config
        self._sleep = sleep

    def _calculate_delay(self, attempt: int) -> float:
        """
        Calculate wait time with exponential backoff.

        Args:
            attempt: The current attempt number (0-indexed)

        Returns:
            The delay in seconds before the next retry, capped at max_delay
        """
        delay = self._config.base_delay_seconds * (2 ** attempt)
        return min(delay, self._config.max_delay_seconds)

    def is_retryable_error(self, error: Exception) -> bool:
        """
        Check if an exception is a transient storage failure.

        Args:
            error: The exception raised by the operation

        Returns:
            True if the error should be retried
        """
        if not isinstance(error, StorageError):
            return False
        return error.kind.value in self._config.retryable_errors

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        is_retryable: Optional[Callable[[Exception], bool]] = None,
    ) -> RetryResult[T]:
        """
        Execute an operation with retry logic and exponential backoff.

        Args:
            operation: The async operation to execute
            is_retryable: Optional predicate overriding ``is_retryable_error``

        Returns:
            RetryResult containing success status, result, attempts, and last error
        """
        check = is_retryable or self.is_retryable_error
        last_error: Optional[Exception] = None
        attempts = 0

        # Total attempts = 1 initial + max_retries
        max_attempts = self._config.max_retries + 1

        while attempts < max_attempts:
            try:
                result = await operation()
                return RetryResult(
                    success=True,
                    result=result,
                    attempts=attempts + 1,
                    last_error=None,
                )
            except Exception as e:
                last_error = e
                attempts += 1

                if not check(e) or attempts >= max_attempts:
                    break

                await self._sleep(self._calculate_delay(attempts - 1))

        return RetryResult(
            success=False,
            result=None,
            attempts=attempts,
            last_error=last_error,
        )

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute an operation with retries and re-raise the final error.

        Raises:
            Exception: The last error once retries are exhausted or the
                error is not retryable
        """
        outcome = await self.execute_with_retry(operation)
        if outcome.success:
            return outcome.result  # type: ignore[return-value]
        if outcome.last_error is None:
            raise RuntimeError("Retry finished without a result or an error")
        raise outcome.last_error

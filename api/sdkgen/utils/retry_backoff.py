from __future__ import annotations
import asyncio
import random
from typing import Any, Awaitable, Callable, Literal, TypeVar, Optional
from functools import wraps
from sdkgen.obs.logging_setup import get_logger
from sdkgen.config import ANALYSIS_MAX_RETRIES, ANALYSIS_RETRY_DELAY
from sdkgen.errors import ExternalServiceFailure

logger = get_logger(__name__)
T = TypeVar('T')

class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_retries: int = ANALYSIS_MAX_RETRIES,
        base_delay: float = ANALYSIS_RETRY_DELAY,
        max_delay: float = 60.0,
        backoff: Literal["linear", "exponential"] = "linear",
        exponential_base: float = 2.0,
        jitter: bool = False,
        retry_on_exceptions: tuple = (ExternalServiceFailure,)
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff = backoff
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.retry_on_exceptions = retry_on_exceptions

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def calculate_delay(self, retry: int) -> float:
        """Delay before the given retry (1-indexed)."""
        if self.backoff == "linear":
            delay = self.base_delay * retry
        else:
            delay = self.base_delay * (self.exponential_base ** (retry - 1))
        delay = min(delay, self.max_delay)

        if self.jitter:
            # Add up to 20% jitter
            delay += delay * 0.2 * random.random()

        return delay

def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    operation_name: Optional[str] = None
):
    """
    Decorator for async retry with backoff.

    Only exceptions listed in ``config.retry_on_exceptions`` are retried; any
    other exception propagates on the attempt that raised it.  After the last
    attempt the most recent retryable exception is re-raised.
    """
    if config is None:
        config = RetryConfig()

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        op_name = operation_name or func.__name__

        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            last_exception: Optional[BaseException] = None

            for attempt in range(config.max_attempts):
                if attempt > 0:
                    delay = config.calculate_delay(attempt)
                    logger.info(f"Retrying {op_name}",
                               attempt=attempt + 1,
                               delay_seconds=round(delay, 2))
                    await asyncio.sleep(delay)

                try:
                    result = await func(*args, **kwargs)
                except config.retry_on_exceptions as e:
                    last_exception = e
                    if attempt < config.max_retries:
                        logger.warning(f"Attempt {attempt + 1} failed for {op_name}",
                                     error=str(e),
                                     will_retry=True)
                    else:
                        logger.error(f"All {config.max_attempts} attempts failed for {op_name}",
                                   error=str(e))
                    continue

                if attempt > 0:
                    logger.info(f"Retry successful for {op_name}",
                               total_attempts=attempt + 1)
                return result

            raise last_exception

        return wrapper

    return decorator

async def retry_async_operation(
    operation: Callable[[], Awaitable[Any]],
    config: Optional[RetryConfig] = None,
    operation_name: str = "async_operation"
) -> Any:
    """Retry an async operation with backoff."""

    @retry_with_backoff(config, operation_name)
    async def wrapper():
        return await operation()

    return await wrapper()

ANALYSIS_RETRY = RetryConfig()

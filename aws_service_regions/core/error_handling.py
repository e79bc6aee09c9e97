"""Error types and retry utilities for remote parameter store operations."""

import functools
import random
import time
from typing import Callable, Optional, Tuple, Type

from .logging import get_logger


class RetryableError(Exception):
    """Exception for errors that should trigger retries."""

    pass


class NonRetryableError(Exception):
    """Exception for errors that should not be retried."""

    pass


class RemoteQueryError(Exception):
    """Failure reaching or parsing a response from the parameter store.

    Attributes:
        path: Parameter path being listed when the failure happened
        cause: Underlying exception
    """

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        message = f"Failed to query parameters under {path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class RetryConfig:
    """Configuration for retry behavior (exponential backoff with jitter)."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
        non_retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
        jitter_factor: float = 0.1,
    ):
        """Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts, including the first call
            base_delay: Base delay between retries (seconds)
            max_delay: Maximum delay between retries (seconds)
            retryable_exceptions: Exception types that should trigger retries
            non_retryable_exceptions: Exception types that should not be retried
            jitter_factor: Jitter factor for randomizing delays (0.0-1.0)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter_factor = jitter_factor

        if retryable_exceptions is None:
            self.retryable_exceptions = (RetryableError, ConnectionError, TimeoutError)
        else:
            self.retryable_exceptions = retryable_exceptions

        if non_retryable_exceptions is None:
            self.non_retryable_exceptions = (NonRetryableError,)
        else:
            self.non_retryable_exceptions = non_retryable_exceptions

def with_retry(retry_config: Optional[RetryConfig] = None):
    """Decorator for adding retry logic to functions.

    Args:
        retry_config: Retry configuration (uses defaults if None)

    Returns:
        Decorated function with retry logic
    """
    if retry_config is None:
        retry_config = RetryConfig()

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(f"retry.{func.__name__}")

            for attempt in range(retry_config.max_attempts):
                try:
                    result = func(*args, **kwargs)
                    if attempt > 0:
                        logger.info(f"Succeeded on attempt {attempt + 1}")
                    return result

                except retry_config.non_retryable_exceptions as e:
                    logger.debug(f"Non-retryable error on attempt {attempt + 1}: {e}")
                    raise

                except retry_config.retryable_exceptions as e:
                    if attempt == retry_config.max_attempts - 1:
                        logger.warning(
                            f"All {retry_config.max_attempts} attempts failed. Last error: {e}"
                        )
                        raise

                    delay = _calculate_delay(
                        attempt,
                        retry_config.base_delay,
                        retry_config.max_delay,
                        retry_config.jitter_factor,
                    )

                    logger.warning(
                        f"Attempt {attempt + 1} failed: {e}. Retrying in {delay:.2f}s..."
                    )
                    time.sleep(delay)

            # This should never be reached
            raise RuntimeError("Retry logic error")

        return wrapper

    return decorator


def _calculate_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    jitter_factor: float,
) -> float:
    """Calculate delay for retry attempt.

    Args:
        attempt: Attempt number (0-based)
        base_delay: Base delay in seconds
        max_delay: Maximum delay in seconds
        jitter_factor: Jitter factor for randomization

    Returns:
        Delay in seconds
    """
    delay = base_delay * (2**attempt)
    delay += delay * jitter_factor * random.random()
    return min(delay, max_delay)


class ErrorHandler:
    """Classifies AWS errors and builds retry configuration for AWS calls."""

    def __init__(self):
        self.logger = get_logger("error_handler")

    def classify_aws_error(self, error: Exception) -> Tuple[bool, str]:
        """Classify AWS error for retry decision.

        Args:
            error: Exception to classify

        Returns:
            Tuple of (should_retry: bool, error_category: str)
        """
        error_code = ""
        response = getattr(error, "response", None)
        if isinstance(response, dict):
            error_code = str(response.get("Error", {}).get("Code", ""))

        error_str = f"{error_code} {error}".lower()

        # Throttling errors - always retry
        if any(
            keyword in error_str
            for keyword in ["throttling", "throttled", "rate exceeded", "toomanyrequests"]
        ):
            return True, "throttling"

        # Authentication errors - don't retry
        if any(
            keyword in error_str
            for keyword in [
                "access denied",
                "accessdenied",
                "unauthorized",
                "unrecognizedclient",
                "expiredtoken",
                "invalidclienttokenid",
                "nocredentials",
                "unable to locate credentials",
            ]
        ):
            return False, "authentication"

        # Parameter validation errors - don't retry
        if any(
            keyword in error_str
            for keyword in ["validation", "invalid parameter", "invalidfilter", "bad request"]
        ):
            return False, "validation"

        # Network/connection errors - retry
        if any(
            keyword in error_str
            for keyword in ["timeout", "timed out", "connection", "network", "endpoint"]
        ):
            return True, "network"

        # Service unavailable - retry
        if any(
            keyword in error_str
            for keyword in [
                "service unavailable",
                "serviceunavailable",
                "internalerror",
                "internalserver",
                "internal error",
                "503",
                "502",
                "504",
            ]
        ):
            return True, "service_unavailable"

        # Unknown errors - conservative approach, retry
        return True, "unknown"

    def get_aws_retry_config(
        self, max_attempts: int = 3, base_delay: float = 1.0
    ) -> RetryConfig:
        """Get AWS-oriented retry configuration.

        Callers translate botocore errors into RetryableError/NonRetryableError
        via classify_aws_error before they reach the retry loop.
        """
        return RetryConfig(
            max_attempts=max_attempts,
            base_delay=base_delay,
            max_delay=30.0,
            retryable_exceptions=(RetryableError, ConnectionError, TimeoutError),
            non_retryable_exceptions=(NonRetryableError,),
            jitter_factor=0.1,
        )

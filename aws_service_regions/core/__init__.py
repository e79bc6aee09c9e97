"""Core configuration, logging and error handling."""

from .config import Config
from .error_handling import (
    ErrorHandler,
    NonRetryableError,
    RemoteQueryError,
    RetryableError,
    RetryConfig,
    with_retry,
)
from .logging import get_logger, setup_logging

__all__ = [
    'Config',
    'ErrorHandler',
    'NonRetryableError',
    'RemoteQueryError',
    'RetryableError',
    'RetryConfig',
    'with_retry',
    'get_logger',
    'setup_logging',
]

"""
Reliability helpers for MomentX.

Provides retry logic for idempotent node queries and performance tracking.
"""

import logging
import time
from functools import wraps
from typing import Callable

import structlog
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)

# Standard logger for tenacity compatibility
_retry_logger = logging.getLogger(__name__)


def with_retry(
    max_attempts: int = 3,
    backoff_max: float = 10.0,
    retry_exceptions: tuple = (Exception,),
    reraise: bool = False,
):
    """
    Decorator to add retry logic with exponential backoff.

    Only wrap calls that are safe to repeat. A warning is logged before each
    sleep, so the final failed attempt is not reported as a retry. With
    ``reraise`` the last exception propagates instead of ``tenacity.RetryError``.
    """

    def decorator(func: Callable) -> Callable:
        return retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=1, min=0.5, max=backoff_max),
            retry=retry_if_exception_type(retry_exceptions),
            before_sleep=before_sleep_log(_retry_logger, logging.WARNING),
            reraise=reraise,
        )(func)

    return decorator


def track_performance(operation_name: str):
    """
    Decorator to track performance metrics for operations.

    Args:
        operation_name: Name of the operation for logging
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()

            logger.debug("Operation started", operation=operation_name)

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "Operation failed",
                    operation=operation_name,
                    duration_seconds=time.time() - start_time,
                    error=str(e),
                )
                raise

            logger.info(
                "Operation completed",
                operation=operation_name,
                duration_seconds=round(time.time() - start_time, 3),
            )
            return result

        return wrapper

    return decorator

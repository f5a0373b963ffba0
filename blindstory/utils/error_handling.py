"""
Error Handling Utilities

Provides common error handling patterns used across handlers and timer
callbacks, including the bounded retry applied to room store outages.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from blindstory.core.errors import TransientStoreError

logger = logging.getLogger(__name__)


def log_handler_error(handler_name: str, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Log handler errors with consistent formatting.

    Args:
        handler_name: Name of the handler where error occurred
        error: Exception that occurred
        context: Optional context information
    """
    context_str = f" Context: {context}" if context else ""
    logger.error(f"Error in {handler_name}: {type(error).__name__}: {str(error)}{context_str}")


def call_with_store_retry(func: Callable[..., Any], *args: Any, attempts: int = 3,
                          backoff_seconds: float = 0.05, **kwargs: Any) -> Any:
    """
    Call ``func`` and retry it while the room store is unavailable.

    Only TransientStoreError is retried; every other exception propagates on
    the first occurrence. The engine reloads the room on each attempt, so a
    retry never works from stale state.

    Args:
        func: Engine operation to call
        attempts: Total number of attempts, at least 1
        backoff_seconds: Base delay, doubled after each failed attempt

    Returns:
        Whatever ``func`` returns

    Raises:
        TransientStoreError: If every attempt failed
    """
    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        try:
            return func(*args, **kwargs)
        except TransientStoreError as e:
            if attempt == attempts:
                logger.error(f"Room store still unavailable after {attempts} attempts: {e.message}")
                raise
            delay = backoff_seconds * (2 ** (attempt - 1))
            logger.warning(f"Room store unavailable (attempt {attempt}/{attempts}), retrying in {delay:.2f}s")
            if delay > 0:
                time.sleep(delay)

"""
Error handler with retry logic for the property search core.

Implements exponential backoff for the one-off session discovery calls and
turns store failures into user-facing messages.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict
from datetime import datetime

from .errors import DiscoveryError, QueryError


# Configure logging
logger = logging.getLogger(__name__)


SEARCH_FAILED_MESSAGE = "Search failed. Please try again."
DISCOVERY_FAILED_MESSAGE = "Could not load search limits. Default limits are in use."


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior with exponential backoff.

    Attributes:
        max_retries: Maximum number of attempts
        backoff_base_seconds: Delay before the second attempt; doubles afterwards
    """
    max_retries: int = 3
    backoff_base_seconds: float = 0.5

    def get_backoff_delay(self, attempt: int) -> float:
        """
        Calculate backoff delay before retry attempt.

        delay = backoff_base_seconds * (2 ^ attempt)

        Args:
            attempt: The retry attempt number (0-indexed)

        Returns:
            Delay in seconds before the retry attempt
        """
        return self.backoff_base_seconds * (2 ** attempt)


class ErrorHandler:
    """
    Error handler with retry logic and diagnostic logging.

    Attributes:
        config: Retry configuration
    """

    def __init__(
        self,
        max_retries: int = 3,
        backoff_base_seconds: float = 0.5
    ):
        """
        Initialize error handler with retry configuration.

        Args:
            max_retries: Maximum number of attempts (default: 3)
            backoff_base_seconds: Base backoff delay in seconds (default: 0.5)
        """
        self.config = RetryConfig(
            max_retries=max_retries,
            backoff_base_seconds=backoff_base_seconds
        )

    async def retry_with_backoff(
        self,
        operation: Callable,
        *args,
        **kwargs
    ) -> Any:
        """
        Execute operation with exponential backoff retry logic.

        Attempts the operation up to max_retries times with exponential
        backoff delays between attempts. Every failure is logged with
        diagnostic context.

        Args:
            operation: Async callable to execute
            *args: Positional arguments for the operation
            **kwargs: Keyword arguments for the operation

        Returns:
            Result from successful operation execution

        Raises:
            DiscoveryError: If all attempts fail, chained to the last error
        """
        last_exception = None
        operation_name = getattr(operation, '__name__', repr(operation))

        for attempt in range(self.config.max_retries):
            try:
                logger.debug(
                    f"Attempt {attempt + 1}/{self.config.max_retries} for operation {operation_name}"
                )
                result = await operation(*args, **kwargs)

                if attempt > 0:
                    logger.info(f"Operation {operation_name} succeeded on attempt {attempt + 1}")
                return result

            except Exception as e:
                last_exception = e

                self._log_error(
                    operation_name=operation_name,
                    attempt=attempt + 1,
                    max_attempts=self.config.max_retries,
                    error=e,
                    args=args,
                    kwargs=kwargs
                )

                # No wait after the final attempt
                if attempt == self.config.max_retries - 1:
                    logger.error(
                        f"Operation {operation_name} failed after {self.config.max_retries} attempts. "
                        f"Final error: {str(e)}"
                    )
                    break

                backoff_delay = self.config.get_backoff_delay(attempt)
                logger.info(f"Waiting {backoff_delay:.1f}s before retry...")
                await asyncio.sleep(backoff_delay)

        raise DiscoveryError(
            f"{operation_name} failed after {self.config.max_retries} attempts"
        ) from last_exception

    def describe_search_failure(self, error: Exception) -> Dict[str, str]:
        """
        Build the user-facing summary of a failed search.

        Store failures get the generic one-line message; the raw error is
        kept for diagnostics only.

        Args:
            error: Exception raised by the record store

        Returns:
            Dictionary with the error type, raw message, user message and timestamp
        """
        summary = {
            'error_type': 'Query Error' if isinstance(error, QueryError) else type(error).__name__,
            'error_message': str(error),
            'user_message': SEARCH_FAILED_MESSAGE,
            'timestamp': datetime.now().isoformat(),
        }
        logger.error(f"Search failed: {summary['error_type']}: {summary['error_message']}")
        return summary

    def _log_error(
        self,
        operation_name: str,
        attempt: int,
        max_attempts: int,
        error: Exception,
        args: tuple,
        kwargs: dict
    ) -> None:
        """
        Log error with timestamp, context, and diagnostic data.

        Args:
            operation_name: Name of the operation that failed
            attempt: Current attempt number
            max_attempts: Maximum number of attempts
            error: The exception that occurred
            args: Positional arguments passed to the operation
            kwargs: Keyword arguments passed to the operation
        """
        context = {
            'timestamp': datetime.now().isoformat(),
            'operation': operation_name,
            'attempt': f"{attempt}/{max_attempts}",
            'error_type': type(error).__name__,
            'error_message': str(error),
            'args': str(args) if args else 'None',
            'kwargs': {k: str(v) for k, v in kwargs.items()} if kwargs else {}
        }

        logger.warning(
            f"Operation failed: {operation_name} | "
            f"Attempt: {attempt}/{max_attempts} | "
            f"Error: {type(error).__name__}: {str(error)}"
        )
        logger.debug(f"Full error context: {context}")

"""Error types and retry policy for catalog aggregation.

This module provides a structured approach to error handling with:
- Typed error classifications
- Per-store errors that the aggregator degrades to an empty contribution
- Orchestration errors that surface to the caller
- A tenacity retry policy for transient store failures
"""

import logging
from enum import Enum
from typing import Optional

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Classification of errors for appropriate handling."""

    # Per-store errors - swallowed by the aggregator
    SOURCE_UNREACHABLE = "source_unreachable"
    SOURCE_REJECTED = "source_rejected"

    # Non-recoverable errors
    AGGREGATION_ERROR = "aggregation_error"
    CONFIGURATION_ERROR = "config_error"


class CatalogError(Exception):
    """Base exception for catalog-related errors."""

    def __init__(
        self,
        error_type: ErrorType,
        message: str,
        recoverable: bool = True,
        original_error: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        self.error_type = error_type
        self.message = message
        self.recoverable = recoverable
        self.original_error = original_error
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.error_type.value}] {self.message}"

    def to_dict(self) -> dict:
        """Convert to dictionary for logging or display."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "recoverable": self.recoverable,
            "context": self.context,
        }


class SourceError(CatalogError):
    """A single store failed to deliver its products."""

    def __init__(self, error_type: ErrorType, store_id: str, message: str, **kwargs):
        self.store_id = store_id
        context = kwargs.pop("context", None) or {}
        context.setdefault("store_id", store_id)
        super().__init__(error_type, message, context=context, **kwargs)


class SourceUnreachableError(SourceError):
    """Raised on network, DNS or timeout failures talking to a store."""

    def __init__(self, store_id: str, message: str = "Store unreachable", **kwargs):
        super().__init__(ErrorType.SOURCE_UNREACHABLE, store_id, message, recoverable=True, **kwargs)


class SourceRejectedError(SourceError):
    """Raised when a store answers with a non-2xx status or an unusable payload."""

    def __init__(
        self,
        store_id: str,
        message: str = "Store rejected the request",
        status: Optional[int] = None,
        **kwargs,
    ):
        self.status = status
        # 429 and 5xx are worth another attempt, everything else is final
        recoverable = status is not None and (status == 429 or status >= 500)
        super().__init__(ErrorType.SOURCE_REJECTED, store_id, message, recoverable=recoverable, **kwargs)


class AggregationError(CatalogError):
    """Raised when the aggregation itself fails, not an individual store."""

    def __init__(self, message: str = "Aggregation failed", **kwargs):
        super().__init__(ErrorType.AGGREGATION_ERROR, message, recoverable=False, **kwargs)


class ConfigurationError(CatalogError):
    """Raised when the store registry or settings are invalid."""

    def __init__(self, message: str = "Invalid configuration", **kwargs):
        super().__init__(ErrorType.CONFIGURATION_ERROR, message, recoverable=False, **kwargs)


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, SourceError) and exc.recoverable


def transient_retry(
    max_attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 8.0,
) -> AsyncRetrying:
    """Retry policy for transient store failures (timeouts, 429, 5xx).

    Usage:
        async for attempt in transient_retry(3):
            with attempt:
                return await do_request()

    The last error is re-raised once attempts are exhausted.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception(_is_transient),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            f"Transient store error, retrying in {retry_state.next_action.sleep:.1f}s "
            f"(attempt {retry_state.attempt_number}/{max_attempts}): "
            f"{retry_state.outcome.exception()}"
        ),
    )

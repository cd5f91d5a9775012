"""
Centralized logging and error handling utilities for chatstream.

This module provides decorators and helper functions to standardize logging
and error classification across the codebase.

Features:
- Structured logging with contextual information
- Automatic error type detection and classification
- Performance timing
"""

from __future__ import annotations

import functools
import json
import logging
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, ParamSpec, TypeVar

import httpx
import structlog
from pydantic import ValidationError

from chatstream.llm.exceptions import ErrorKind, LLMError

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Type variables for generic decorators
P = ParamSpec("P")
T = TypeVar("T")
AsyncCallable = Callable[P, Awaitable[T]]

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib and structlog output through one handler at `level`."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown logging level '{level}'")
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logging.getLogger().setLevel(numeric_level)


class StreamErrorHandler:
    """Centralized stream error classification with structured logging."""

    @staticmethod
    def classify_error(error: BaseException) -> ErrorKind | None:
        """
        Classify an error into the stream error taxonomy.

        Args:
            error: The exception to classify

        Returns:
            The matching ErrorKind, or None for errors that are not
            stream failures and must propagate unchanged
        """
        if isinstance(error, LLMError):
            return error.kind
        if isinstance(error, ValidationError | json.JSONDecodeError):
            return ErrorKind.DECODE_ERROR
        if isinstance(error, httpx.HTTPError):
            return ErrorKind.NETWORK_ERROR
        if isinstance(error, TimeoutError | ConnectionError | OSError):
            return ErrorKind.NETWORK_ERROR
        return None

    @staticmethod
    def describe(error: BaseException) -> str:
        """Short message for an error, falling back to its type name."""
        return str(error) or type(error).__name__


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _failure_fields(error: BaseException, start: float) -> dict[str, Any]:
    return {
        "error_type": type(error).__name__,
        "error_message": StreamErrorHandler.describe(error),
        "error_kind": getattr(StreamErrorHandler.classify_error(error), "value", None),
        "duration_ms": _elapsed_ms(start),
    }


def log_operation(
    operation: str,
    *,
    summarize: Callable[[Any], Any] | None = None,
    context: dict[str, Any] | None = None,
) -> Callable[[AsyncCallable[P, T]], AsyncCallable[P, T]]:
    """
    Decorator for logging async operations with structured context.

    Args:
        operation: Name of the operation being performed
        summarize: Maps the return value to a loggable `result` field
        context: Additional context to include in logs

    Returns:
        Decorated function with logging
    """
    def decorator(func: AsyncCallable[P, T]) -> AsyncCallable[P, T]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            op_logger = logger.bind(
                operation=operation, function=func.__name__, **(context or {})
            )
            op_logger.info("Operation started")
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                op_logger.error("Operation failed", **_failure_fields(e, start))
                raise

            done: dict[str, Any] = {"duration_ms": _elapsed_ms(start)}
            if summarize is not None:
                done["result"] = summarize(result)
            op_logger.info("Operation completed successfully", **done)
            return result

        return wrapper
    return decorator


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
):
    """
    Async context manager for operation logging.

    Yields:
        Bound logger for the operation
    """
    op_logger = logger.bind(operation=operation, **(context or {}))
    op_logger.info("Operation started")
    start = time.perf_counter()
    try:
        yield op_logger
    except Exception as e:
        op_logger.error("Operation failed", **_failure_fields(e, start))
        raise
    op_logger.info("Operation completed successfully", duration_ms=_elapsed_ms(start))




class ContextualLogger:
    """Logger that maintains context across related operations."""

    def __init__(self, base_context: dict[str, Any] | None = None):
        self.base_context = base_context or {}
        self._logger = logger.bind(**self.base_context)

    def bind(self, **context: Any) -> ContextualLogger:
        """Create a new logger with additional context."""
        merged_context = {**self.base_context, **context}
        return ContextualLogger(merged_context)

    def info(self, message: str, **context: Any) -> None:
        self._logger.info(message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._logger.warning(message, **context)

    def error(self, message: str, **context: Any) -> None:
        self._logger.error(message, **context)

    def debug(self, message: str, **context: Any) -> None:
        self._logger.debug(message, **context)

"""Utility decorators for consistent error handling and timing."""
from __future__ import annotations

import functools
import time
from typing import Any, Callable, Optional, Type, TypeVar

from loguru import logger

from core.result import Failure, Result, Success

T = TypeVar('T')


def handle_exceptions(
    logger_instance=logger,
    default_return: Optional[Any] = None,
    reraise: bool = False,
    message: Optional[str] = None
):
    """Decorator that logs exceptions and optionally re-raises them.

    Args:
        logger_instance: Logger to use for error logging
        default_return: Value to return on exception
        reraise: Whether to re-raise the exception after logging
        message: Custom error message prefix
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                error_msg = message or f"Error in {func.__name__}"
                logger_instance.opt(exception=e).error("{}: {}", error_msg, e)
                if reraise:
                    raise
                return default_return
        return wrapper
    return decorator


def as_result(*exceptions: Type[BaseException]):
    """Decorator converting a function's outcome into a Result.

    Only the listed exception types (``Exception`` when none are given) are
    captured as ``Failure``; anything else propagates.
    """
    caught = exceptions or (Exception,)

    def decorator(func: Callable[..., T]) -> Callable[..., Result[T, Exception]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Result[T, Exception]:
            try:
                return Success(func(*args, **kwargs))
            except caught as e:
                return Failure(e)
        return wrapper
    return decorator


def log_execution_time(logger_instance=logger, level: str = "DEBUG"):
    """Decorator to log function execution time.

    Args:
        logger_instance: Logger to use
        level: Log level name
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed = time.perf_counter() - start_time
                logger_instance.log(level.upper(), "{} executed in {:.3f}s", func.__qualname__, elapsed)
        return wrapper
    return decorator

"""
Logging helpers for the project.
Performance decorators and structured logging with key=value context.
"""
import time
import asyncio
import logging
import functools
from typing import Any, Callable

from asgiref.sync import sync_to_async
from django.conf import settings

performance_logger = logging.getLogger('core.performance')
security_logger = logging.getLogger('core.security')


def _report_elapsed(func: Callable, started: float, threshold_ms: float) -> None:
    elapsed_time = (time.time() - started) * 1000
    if elapsed_time > threshold_ms:
        performance_logger.warning(
            f"Slow operation: {func.__module__}.{func.__qualname__} "
            f"took {elapsed_time:.2f}ms (threshold: {threshold_ms}ms)"
        )
    elif settings.DEBUG:
        performance_logger.debug(
            f"{func.__module__}.{func.__qualname__} took {elapsed_time:.2f}ms"
        )


def log_performance(threshold_ms: float = 1000.0):
    """
    Decorator that logs execution time of sync or async callables.
    Calls slower than ``threshold_ms`` are logged as warnings.
    """
    def decorator(func: Callable) -> Callable:
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs) -> Any:
                start_time = time.time()
                try:
                    return await func(*args, **kwargs)
                finally:
                    _report_elapsed(func, start_time, threshold_ms)
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            start_time = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                _report_elapsed(func, start_time, threshold_ms)
        return wrapper
    return decorator


def log_security_event(event_type: str, severity: str = 'WARNING', **details):
    log_message = f"Security event: {event_type}"
    if details:
        details_str = ', '.join(f"{k}={v}" for k, v in details.items())
        log_message += f" | {details_str}"

    severity_map = {
        'DEBUG': security_logger.debug,
        'INFO': security_logger.info,
        'WARNING': security_logger.warning,
        'ERROR': security_logger.error,
        'CRITICAL': security_logger.critical,
    }
    log_func = severity_map.get(severity.upper(), security_logger.warning)
    log_func(log_message)


def log_data_change(model_name: str, operation: str, instance_id: Any, **changes):
    logger = logging.getLogger('core')
    log_message = f"Data change: {operation} {model_name}(id={instance_id})"
    if changes:
        changes_str = ', '.join(f"{k}={v}" for k, v in changes.items())
        log_message += f" | Changes: {changes_str}"
    logger.info(log_message)


async def log_data_change_async(model_name: str, operation: str, instance_id: Any, **changes):
    await sync_to_async(log_data_change)(model_name, operation, instance_id, **changes)


class StructuredLogger:
    """
    Logger wrapper that appends keyword context to the message.
    Standard logging kwargs (exc_info, extra, stack_info) pass through.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _format_message(self, message: str, **context) -> str:
        if context:
            context_str = ' | '.join(f"{k}={v}" for k, v in context.items())
            return f"{message} | {context_str}"
        return message

    def _log(self, level_func, message, args, kwargs):
        exc_info = kwargs.pop('exc_info', None)
        stack_info = kwargs.pop('stack_info', None)
        extra = kwargs.pop('extra', None)

        formatted_msg = self._format_message(str(message), **kwargs)
        level_func(formatted_msg, *args, exc_info=exc_info, stack_info=stack_info, extra=extra)

    def debug(self, message: str, *args, **context):
        self._log(self.logger.debug, message, args, context)

    def info(self, message: str, *args, **context):
        self._log(self.logger.info, message, args, context)

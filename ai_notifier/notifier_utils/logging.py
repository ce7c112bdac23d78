"""
Logging and graceful degradation utilities.

Uses loguru for structured JSON logging with automatic rotation.
The log is a side channel: nothing here may raise into the pipeline.
"""
import os
import sys
from functools import wraps
from typing import Callable

from loguru import logger

from ai_notifier.config import DATA_DIR, LOG_FILE

# Configure loguru: JSON format, 10MB rotation, keep 3 files
# Remove default stderr handler, add file handler
logger.remove()
try:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    logger.add(
        LOG_FILE,
        format="{message}",
        serialize=True,  # JSON output
        rotation="10 MB",
        retention=3,
        compression="gz",
        catch=True,  # Never raise
    )
except OSError:
    pass  # Read-only home: run without a log file

if os.environ.get("AI_NOTIFIER_DEBUG") == "1":
    logger.add(sys.stderr, format="{level} {message} {extra}", catch=True)


def log_event(component: str, event_type: str, data: dict = None, level: str = "info"):
    """
    Log structured event using loguru.

    Args:
        component: Emitting component (e.g., "debounce", "activator")
        event_type: Event type (e.g., "suppressed", "error")
        data: Additional context data
        level: Log level (debug, info, warning, error)
    """
    try:
        log_func = getattr(logger, level, logger.info)
        log_func(event_type, component=component, **(data or {}))
    except Exception:
        pass  # Never raise


def graceful_main(component: str):
    """
    Decorator for the entry point.
    Ensures graceful degradation - logs errors and exits 0 so the invoking
    CLI is never blocked or failed by a notifier crash.

    Usage:
        @graceful_main("dispatch")
        def main():
            ...
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except SystemExit:
                raise
            except Exception as e:
                log_event(component, "error", {"type": type(e).__name__, "msg": str(e)}, "error")
                sys.exit(0)
        return wrapper
    return decorator

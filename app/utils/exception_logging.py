"""
Utility functions for exception logging in the last-resort error handler.
"""

import logging


def _safe_str(obj) -> str:
    """
    Safely convert an object to string, handling cases where __str__ or __repr__ might fail.
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def _sub_exceptions(exception) -> list:
    try:
        return list(getattr(exception, "exceptions", None) or [])
    except Exception:
        return []


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Exception,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with its traceback, including sub-exceptions of exception groups.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Server]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    subs = _sub_exceptions(exception)
    if not subs:
        logger.log(level, f"{prefix} Exception: {_safe_str(exception)}", exc_info=exception)
        return

    logger.log(
        level,
        f"{prefix} Exception with {len(subs)} sub-exceptions: {_safe_str(exception)}",
    )
    for i, sub_exc in enumerate(subs):
        logger.log(
            level,
            f"{prefix} Sub-exception {i+1}: {type(sub_exc).__name__}: {_safe_str(sub_exc)}",
            exc_info=sub_exc,
        )


def format_exception_message(exception: Exception) -> str:
    """
    Format an exception message, including sub-exceptions of exception groups.
    """
    subs = _sub_exceptions(exception)
    if not subs:
        return _safe_str(exception)
    joined = "; ".join(f"{type(s).__name__}: {_safe_str(s)}" for s in subs)
    return f"{_safe_str(exception)} (Sub-exceptions: {joined})"

"""
Helpers for inspecting and logging exceptions without ever raising from the
logging path itself.
"""

import logging
from typing import Any, Callable, Optional, Type, Union

ExceptionMatch = Union[Type[BaseException], Callable[[BaseException], bool]]


def _safe_str(obj) -> str:
    """
    Convert an object to string, tolerating broken ``__str__``/``__repr__``.

    Args:
        obj: The object to convert to string

    Returns:
        A string representation of the object, falling back to safe alternatives
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            try:
                return f"<{type(obj).__name__} object (string conversion failed)>"
            except Exception:
                return "<object (all string conversions failed)>"


def _safe_get_exceptions(exception_group) -> list:
    try:
        return list(exception_group.exceptions)
    except Exception:
        return []


def _matches(exception: BaseException, match: ExceptionMatch) -> bool:
    if isinstance(match, type):
        return isinstance(exception, match)
    try:
        return bool(match(exception))
    except Exception:
        return False


def find_exception_in_chain(
    exception: Optional[BaseException], match: ExceptionMatch
) -> Optional[BaseException]:
    """
    Search an exception, its ``__cause__``/``__context__`` chain and any
    exception-group members for the first exception matching ``match``.

    Transport libraries wrap the underlying ``OSError`` several layers deep
    (and sometimes inside an exception group when several addresses were
    tried), so the interesting error is rarely the outermost one.

    Args:
        exception: The exception to search through
        match: An exception type, or a predicate taking an exception

    Returns:
        The first matching exception, or None if not found
    """
    pending = [exception]
    seen = set()
    try:
        while pending:
            current = pending.pop(0)
            if current is None or id(current) in seen:
                continue
            seen.add(id(current))

            if _matches(current, match):
                return current

            if hasattr(current, "exceptions"):
                pending.extend(_safe_get_exceptions(current))
            pending.append(getattr(current, "__cause__", None))
            pending.append(getattr(current, "__context__", None))
        return None
    except Exception:
        return None


def format_exception_message(exception: Optional[BaseException]) -> str:
    """
    Format an exception message, including sub-exceptions of exception groups.
    Never raises; returns an empty string when the exception has no message.
    """
    try:
        if exception is None:
            return ""

        main_str = _safe_str(exception)
        sub_exceptions = _safe_get_exceptions(exception)
        if not sub_exceptions:
            return main_str

        parts = []
        for sub_exc in sub_exceptions:
            try:
                parts.append(f"{type(sub_exc).__name__}: {_safe_str(sub_exc)}")
            except Exception:
                parts.append("(formatting failed)")
        return f"{main_str} (Sub-exceptions: {'; '.join(parts)})"
    except Exception:
        try:
            return f"<{type(exception).__name__} (formatting failed)>"
        except Exception:
            return "<exception (all formatting failed)>"


def safe_log(
    logger: Optional[logging.Logger],
    level: int,
    message: str,
    exc_info: Any = None,
    **fields: Any,
) -> None:
    """
    Log ``message`` with ``fields`` attached as record attributes.

    Field values are appended to the message as ``key=value`` pairs so that
    plain-text handlers still show them. Any failure inside the logger is
    swallowed; callers rely on logging never changing their outcome.
    """
    if logger is None:
        return
    try:
        rendered = " ".join(f"{k}={_safe_str(v)}" for k, v in fields.items())
        line = f"{message} {rendered}" if rendered else message
        logger.log(level, line, exc_info=exc_info, extra={"fields": fields})
    except Exception:
        try:
            logger.log(level, _safe_str(message))
        except Exception:
            pass


def log_exception_with_details(
    logger: Optional[logging.Logger],
    prefix: str,
    exception: Optional[BaseException],
    level: int = logging.ERROR,
    **fields: Any,
) -> None:
    """
    Log an exception, then each of its sub-exceptions when it is a group.
    Designed never to throw, even for broken exception objects or loggers.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g. "[Relay]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
        fields: Extra key/value context appended to each record
    """
    try:
        safe_prefix = _safe_str(prefix) if prefix is not None else ""
        sub_exceptions = (
            _safe_get_exceptions(exception) if exception is not None else []
        )
        error_type = type(exception).__name__ if exception is not None else "None"

        if sub_exceptions:
            safe_log(
                logger,
                level,
                f"{safe_prefix} Exception with {len(sub_exceptions)} sub-exceptions: "
                f"{format_exception_message(exception)}",
                error_type=error_type,
                **fields,
            )
            for i, sub_exc in enumerate(sub_exceptions):
                safe_log(
                    logger,
                    level,
                    f"{safe_prefix} Sub-exception {i + 1}: "
                    f"{type(sub_exc).__name__}: {_safe_str(sub_exc)}",
                    exc_info=sub_exc,
                )
        else:
            safe_log(
                logger,
                level,
                f"{safe_prefix} Exception: {format_exception_message(exception)}",
                exc_info=exception if exception is not None else None,
                error_type=error_type,
                **fields,
            )
    except Exception:
        try:
            if logger is not None:
                logger.log(logging.ERROR, "Exception logging failed")
        except Exception:
            pass

"""
Error Handling Utility Module

Failures are recorded, never swallowed. Three helpers cover the boundaries
where the data layer meets an error:

1. log_and_continue() - the error was captured into state (a failed query
   entry, the import dialog's error field); log it and carry on
2. log_and_return_default() - a best-effort step failed and a sentinel
   stands in (e.g. an undecodable response body)
3. log_and_raise() - the caller must see the error (exports, file writes)

Each attaches the same structured fields (error_type, exception_class,
context, and status_code for HTTP failures), which the JSON log formatter
emits. Nothing here retries: every retry is user-triggered.
"""

import logging
from typing import Any, NoReturn


def _error_fields(error: BaseException, context: dict[str, Any], error_type: str) -> dict[str, Any]:
    fields = {
        "error_type": error_type,
        "exception_class": error.__class__.__name__,
        "context": context,
    }
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        fields["status_code"] = status_code
    return fields


def log_and_continue(
    logger: logging.Logger,
    error: BaseException,
    context: dict[str, Any],
    error_type: str = "Operation",
) -> None:
    """
    Log an error that has already been captured into state, at WARNING.

    Args:
        logger: Module logger
        error: The caught exception
        context: What failed (query key, filename, period, ...)
        error_type: Human-readable name of the operation

    Example:
        except StrikeboardError as e:
            entry.error = e
            log_and_continue(logger, e, {"key": key}, "Query")
    """
    logger.warning(f"{error_type} failed: {error}", extra=_error_fields(error, context, error_type))


def log_and_return_default(
    logger: logging.Logger,
    error: BaseException,
    context: dict[str, Any],
    default_value: Any = None,
    error_type: str = "Operation",
) -> Any:
    """
    Log an error at WARNING and return default_value in place of a result.

    Example:
        except json.JSONDecodeError as e:
            return log_and_return_default(logger, e, {"path": path}, _UNDECODABLE, "Response body decoding")
    """
    fields = _error_fields(error, context, error_type)
    fields["default_value"] = str(default_value)
    logger.warning(f"{error_type} failed, returning default value: {error}", extra=fields)
    return default_value


def log_and_raise(
    logger: logging.Logger,
    error: BaseException,
    context: dict[str, Any],
    error_type: str = "Operation",
) -> NoReturn:
    """
    Log an error at ERROR with its traceback, then re-raise it unchanged.

    Raises:
        The original exception

    Example:
        except TransportError as e:
            log_and_raise(logger, e, {"scope": "all"}, "Scenario export")
    """
    logger.error(
        f"{error_type} failed critically: {error}",
        exc_info=True,
        extra=_error_fields(error, context, error_type),
    )
    raise error

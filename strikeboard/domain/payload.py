"""
Helpers for reading decoded JSON payloads into domain models.

Every helper raises PayloadError with the offending field name, so a malformed
server response surfaces as a typed error instead of a KeyError/TypeError deep
inside a model constructor.
"""

import math
from typing import Any

from .errors import PayloadError

_MISSING = object()


def require_mapping(data: Any, what: str) -> dict[str, Any]:
    """Return data if it is a JSON object, else raise PayloadError."""
    if not isinstance(data, dict):
        raise PayloadError(f"Malformed {what} payload: expected an object, got {type(data).__name__}")
    return data


def require_list(data: Any, what: str) -> list[Any]:
    """Return data if it is a JSON array, else raise PayloadError."""
    if not isinstance(data, list):
        raise PayloadError(f"Malformed {what} payload: expected an array, got {type(data).__name__}")
    return data


def read_number(data: dict[str, Any], field: str, default: Any = _MISSING) -> float:
    """
    Read a finite numeric field.

    Args:
        data: Decoded JSON object
        field: Field name
        default: Value used when the field is absent or null (required if omitted)

    Raises:
        PayloadError: If the field is missing (and no default), not a number, or not finite
    """
    value = data.get(field)
    if value is None:
        if default is _MISSING:
            raise PayloadError(f"Malformed payload: missing numeric field '{field}'")
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadError(f"Malformed payload: field '{field}' must be a number, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError:
        raise PayloadError(f"Malformed payload: field '{field}' is out of range") from None
    if not math.isfinite(number):
        raise PayloadError(f"Malformed payload: field '{field}' must be finite")
    return number


def read_int(data: dict[str, Any], field: str, default: Any = _MISSING) -> int:
    """Read an integer field (integral floats such as 3.0 are accepted)."""
    value = read_number(data, field, default)
    if value is default and default is not _MISSING:
        return default
    if value != int(value):
        raise PayloadError(f"Malformed payload: field '{field}' must be an integer, got {value}")
    return int(value)


def read_str(data: dict[str, Any], field: str, default: Any = _MISSING) -> str:
    """Read a string field."""
    value = data.get(field)
    if value is None:
        if default is _MISSING:
            raise PayloadError(f"Malformed payload: missing string field '{field}'")
        return default
    if not isinstance(value, str):
        raise PayloadError(f"Malformed payload: field '{field}' must be a string, got {type(value).__name__}")
    return value

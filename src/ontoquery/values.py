"""Conversion of external filter/payload values to typed bound parameters."""

from __future__ import annotations

import re
import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ontoquery.errors import InvalidValueForTypeError

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

_TRUE = {"true", "1"}
_FALSE = {"false", "0"}

_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")
_ZONE_ID_RE = re.compile(r"\[([^\[\]]+)\]$")


def _as_text(raw: Any) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, datetime):
        return raw.isoformat()
    return str(raw)


def _parse_int(text: str, low: int, high: int) -> int:
    if "_" in text:
        raise ValueError(f"digit separators are not allowed: {text!r}")
    value = int(text.strip())
    if not low <= value <= high:
        raise ValueError(f"{value} is out of range")
    return value


def _parse_decimal(text: str) -> Decimal:
    if "_" in text:
        raise ValueError(f"digit separators are not allowed: {text!r}")
    value = Decimal(text.strip())
    if not value.is_finite():
        raise ValueError("non-finite decimal")
    return value


def _parse_uuid(text: str) -> uuid.UUID:
    stripped = text.strip()
    if not _UUID_RE.match(stripped):
        raise ValueError(f"not a dashed UUID: {text!r}")
    return uuid.UUID(stripped)


def _parse_boolean(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"not a boolean: {text!r}")


def _parse_date(text: str) -> date:
    """Date of an offset timestamp, optionally zoned, or a bare ISO date.

    Accepts ``2024-03-01T10:00:00+03:00``, ``2024-03-01T10:00:00Z``,
    ``2024-03-01T10:00:00+03:00[Europe/Moscow]`` and ``2024-03-01``.
    """
    stripped = text.strip()
    zone = _ZONE_ID_RE.search(stripped)
    if zone:
        try:
            ZoneInfo(zone.group(1))
        except ZoneInfoNotFoundError as e:
            raise ValueError(f"unknown zone id: {zone.group(1)!r}") from e
        stripped = stripped[: zone.start()]
    if stripped[-1:] in ("Z", "z"):
        stripped = stripped[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(stripped)
    except ValueError:
        ts = None
    if ts is not None and ts.tzinfo is not None:
        return ts.date()
    # Only a bare calendar date is accepted without an offset.
    if zone or "T" in stripped or " " in stripped:
        raise ValueError(f"timestamp without offset: {text!r}")
    return date.fromisoformat(stripped)


def convert_value(raw: Any, logical_type: str) -> Any:
    """Convert a raw value to the Python type of a field's logical type.

    ``None`` and the string ``"null"`` map to ``None``. Unknown types and
    string/text types pass the string through unchanged. Any parse failure
    raises InvalidValueForTypeError.
    """
    text = _as_text(raw)
    if text is None or text.lower() == "null":
        return None

    kind = (logical_type or "string").lower()
    try:
        if kind == "boolean":
            return _parse_boolean(text)
        if kind in ("decimal", "numeric"):
            return _parse_decimal(text)
        if kind in ("integer", "int"):
            return _parse_int(text, INT32_MIN, INT32_MAX)
        if kind == "long":
            return _parse_int(text, INT64_MIN, INT64_MAX)
        if kind == "uuid":
            return _parse_uuid(text)
        if kind == "date":
            return _parse_date(text)
    except (ValueError, InvalidOperation, AttributeError) as e:
        raise InvalidValueForTypeError(text, logical_type) from e
    return text


def from_db_value(value: Any, logical_type: str) -> Any:
    """Normalize a value read back from a driver to the field's Python type.

    Values already of the expected type are returned as-is; anything else goes
    through convert_value (drivers such as SQLite return booleans as integers
    and UUIDs, decimals and dates as text).
    """
    if value is None:
        return None
    kind = (logical_type or "string").lower()
    if kind == "boolean" and isinstance(value, bool):
        return value
    if kind in ("decimal", "numeric") and isinstance(value, Decimal):
        return value
    if kind in ("integer", "int", "long") and isinstance(value, int) and not isinstance(value, bool):
        return value
    if kind == "uuid" and isinstance(value, uuid.UUID):
        return value
    if kind == "date" and isinstance(value, date) and not isinstance(value, datetime):
        return value
    if kind in ("decimal", "numeric") and isinstance(value, float):
        return Decimal(repr(value))
    return convert_value(value, logical_type)


def to_db_param(value: Any) -> Any:
    """Adapt a typed value for drivers without native UUID/Decimal/date support."""
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value

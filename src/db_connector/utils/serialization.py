"""Value serialization helpers built on orjson.

Rows are written with every value stringified. orjson gives structured
values (dicts, lists, dataclasses, pydantic dumps) a stable JSON text form
and keeps datetimes in ISO format; the handler below covers the types it
does not know.
"""

import base64
import datetime
import decimal
import enum
import ipaddress
import uuid
from typing import Any, Optional

import orjson


def _default_handler(obj: Any) -> Any:
    """
    Custom default handler for types orjson doesn't handle natively.

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation

    Raises:
        TypeError: If object cannot be serialized
    """
    if isinstance(obj, decimal.Decimal):
        return str(obj)

    if isinstance(obj, datetime.timedelta):
        return obj.total_seconds()

    # bytes/bytearray/memoryview - try UTF-8 decode, fall back to base64
    if isinstance(obj, (bytes, bytearray, memoryview)):
        data = bytes(obj)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return base64.b64encode(data).decode("ascii")

    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)

    if isinstance(
        obj,
        (
            ipaddress.IPv4Address,
            ipaddress.IPv6Address,
            ipaddress.IPv4Network,
            ipaddress.IPv6Network,
        ),
    ):
        return str(obj)

    # pydantic models
    if hasattr(obj, "model_dump") and callable(obj.model_dump):
        return obj.model_dump(mode="json")

    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def convert_value_to_json_safe(value: Any) -> Any:
    """
    Convert a value to JSON-serializable format.

    Args:
        value: Value to convert

    Returns:
        JSON-serializable value
    """
    try:
        return orjson.loads(orjson.dumps(value, default=_default_handler))
    except TypeError:
        return str(value)


def convert_row_to_json_safe(row: dict[str, Any]) -> dict[str, Any]:
    """Convert all values in a row dict to JSON-serializable formats."""
    return {key: convert_value_to_json_safe(value) for key, value in row.items()}


def convert_rows_to_json_safe(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Convert all rows to JSON-serializable format."""
    return [convert_row_to_json_safe(row) for row in rows]


def convert_value_to_text(value: Any) -> Optional[str]:
    """
    Stringify a value for storage in a row.

    Scalars use their plain text form, temporal values ISO format, and
    structured values (mappings, sequences, sets, pydantic models) their
    JSON text. None is kept so the column receives NULL.

    Args:
        value: Attribute value read from a persisted object

    Returns:
        Text representation, or None
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, enum.Enum):
        return convert_value_to_text(value.value)
    if isinstance(value, (bool, int, float, decimal.Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()

    json_value = convert_value_to_json_safe(value)
    if isinstance(json_value, str):
        return json_value
    return dumps(json_value)


def dumps(obj: Any) -> str:
    """
    Serialize object to JSON string using orjson.

    Args:
        obj: Object to serialize

    Returns:
        JSON string
    """
    return orjson.dumps(obj, default=_default_handler).decode("utf-8")

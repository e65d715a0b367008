"""Utility modules for db_connector."""

from db_connector.utils.serialization import (
    convert_row_to_json_safe,
    convert_rows_to_json_safe,
    convert_value_to_json_safe,
    convert_value_to_text,
)

__all__ = [
    "convert_value_to_json_safe",
    "convert_row_to_json_safe",
    "convert_rows_to_json_safe",
    "convert_value_to_text",
]

"""Tests for the orjson-backed value serialization helpers."""

import datetime
import decimal
import enum
import ipaddress
import json
import uuid

import orjson
import pytest
from pydantic import BaseModel

from db_connector.utils import (
    convert_row_to_json_safe,
    convert_rows_to_json_safe,
    convert_value_to_json_safe,
    convert_value_to_text,
)
from db_connector.utils.serialization import dumps

pytestmark = pytest.mark.unit


class Color(enum.Enum):
    RED = "red"
    LEVEL = 3


class Stats(BaseModel):
    hp: int
    tags: list[str]


class TestValueToText:
    """Test how attribute values are stringified for a row."""

    def test_none_stays_none(self):
        """Test None maps to SQL NULL rather than the text 'None'."""
        assert convert_value_to_text(None) is None

    def test_scalars(self):
        """Test scalars keep their plain str() form."""
        assert convert_value_to_text("Ann") == "Ann"
        assert convert_value_to_text(42) == "42"
        assert convert_value_to_text(3.5) == "3.5"
        assert convert_value_to_text(True) == "True"
        assert convert_value_to_text(decimal.Decimal("19.99")) == "19.99"

    def test_uuid(self):
        """Test UUIDs use their canonical text."""
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert convert_value_to_text(value) == "12345678-1234-5678-1234-567812345678"

    def test_temporal_values_use_iso_format(self):
        """Test dates, datetimes and times become ISO strings."""
        assert convert_value_to_text(datetime.date(2024, 1, 15)) == "2024-01-15"
        assert (
            convert_value_to_text(datetime.datetime(2024, 1, 15, 10, 30))
            == "2024-01-15T10:30:00"
        )
        assert convert_value_to_text(datetime.time(10, 30)) == "10:30:00"

    def test_enums_use_their_value(self):
        """Test enum members are stored by value."""
        assert convert_value_to_text(Color.RED) == "red"
        assert convert_value_to_text(Color.LEVEL) == "3"

    def test_structured_values_use_json(self):
        """Test collections and models become compact JSON text."""
        assert convert_value_to_text({"a": 1}) == '{"a":1}'
        assert convert_value_to_text([1, 2]) == "[1,2]"
        assert convert_value_to_text((1, "x")) == '[1,"x"]'
        assert convert_value_to_text(Stats(hp=5, tags=["x"])) == '{"hp":5,"tags":["x"]}'

    def test_bytes_decode(self):
        """Test UTF-8 bytes come back as text."""
        assert convert_value_to_text(b"hello") == "hello"

    def test_ip_address(self):
        """Test IP addresses use their text form."""
        assert convert_value_to_text(ipaddress.IPv4Address("10.0.0.1")) == "10.0.0.1"


class TestJsonSafeRows:
    """Test JSON-safe copies of result rows."""

    def test_query_result_rows(self):
        """Test the row conversion used by QueryResult.to_json_rows."""
        rows = [
            {
                "id": 1,
                "name": "Alice",
                "created": datetime.datetime(2024, 1, 15, 10, 30, 0),
                "price": decimal.Decimal("19.99"),
                "raw": b"\xff\x00",
            },
        ]

        result = convert_rows_to_json_safe(rows)

        assert result[0]["id"] == 1
        assert result[0]["created"] == "2024-01-15T10:30:00"
        assert result[0]["price"] == "19.99"
        # Undecodable bytes fall back to base64
        assert result[0]["raw"] == "/wA="

    def test_row_conversion_keeps_keys(self):
        """Test a single row keeps its column order."""
        row = {"b": datetime.timedelta(minutes=1), "a": {1, 2}}

        result = convert_row_to_json_safe(row)

        assert list(result) == ["b", "a"]
        assert result["b"] == 60.0
        assert sorted(result["a"]) == [1, 2]

    def test_unknown_type_falls_back_to_str(self):
        """Test values orjson cannot handle become their str()."""

        class CustomType:
            def __str__(self):
                return "custom_value"

        assert convert_value_to_json_safe(CustomType()) == "custom_value"


class TestCompatibility:
    """Test that orjson output is compatible with standard json."""

    def test_dumps_readable_by_json(self):
        """Test that dumps() output can be read by standard json."""
        data = {
            "string": "test",
            "number": 42,
            "date": datetime.date(2024, 1, 15),
            "price": decimal.Decimal("1.50"),
        }

        json_result = json.loads(dumps(data))

        assert json_result["string"] == "test"
        assert json_result["date"] == "2024-01-15"
        assert json_result["price"] == "1.50"

    def test_dumps_matches_orjson(self):
        """Test dumps() is orjson's compact output as text."""
        data = {"list": [1, 2, 3], "none": None}

        assert dumps(data) == orjson.dumps(data).decode("utf-8")

"""Tests for value conversion to logical field types."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

import pytest

from ontoquery.errors import InvalidValueForTypeError
from ontoquery.values import INT32_MAX, INT64_MAX, convert_value, from_db_value, to_db_param


class TestConvertValue:
    def test_null_maps_to_none(self):
        assert convert_value(None, "uuid") is None
        assert convert_value("null", "integer") is None
        assert convert_value("NULL", "string") is None

    def test_boolean(self):
        assert convert_value("true", "boolean") is True
        assert convert_value("FALSE", "boolean") is False
        assert convert_value("1", "boolean") is True
        assert convert_value(0, "boolean") is False
        assert convert_value(True, "boolean") is True

    def test_boolean_rejects_other_text(self):
        with pytest.raises(InvalidValueForTypeError):
            convert_value("yes", "boolean")

    def test_integer(self):
        assert convert_value("42", "integer") == 42
        assert convert_value(" -7 ", "int") == -7
        assert convert_value(str(INT32_MAX), "integer") == INT32_MAX

    def test_integer_rejects_garbage(self):
        with pytest.raises(InvalidValueForTypeError) as exc_info:
            convert_value("abc", "integer")
        assert exc_info.value.value == "abc"
        assert exc_info.value.logical_type == "integer"

    def test_integer_range(self):
        with pytest.raises(InvalidValueForTypeError):
            convert_value(str(INT32_MAX + 1), "integer")
        assert convert_value(str(INT32_MAX + 1), "long") == INT32_MAX + 1

    def test_long_range(self):
        with pytest.raises(InvalidValueForTypeError):
            convert_value(str(INT64_MAX + 1), "long")

    @pytest.mark.parametrize("text, logical_type", [("1_000", "integer"), ("1_000", "long"), ("1_0.5", "decimal")])
    def test_numbers_reject_digit_separators(self, text, logical_type):
        with pytest.raises(InvalidValueForTypeError):
            convert_value(text, logical_type)

    def test_decimal(self):
        assert convert_value("12.50", "decimal") == Decimal("12.50")
        assert convert_value(3, "numeric") == Decimal(3)

    def test_decimal_rejects_non_finite(self):
        with pytest.raises(InvalidValueForTypeError):
            convert_value("NaN", "decimal")
        with pytest.raises(InvalidValueForTypeError):
            convert_value("x1", "decimal")

    def test_uuid(self):
        value = uuid.uuid4()
        assert convert_value(str(value), "uuid") == value
        assert convert_value(value, "UUID") == value
        with pytest.raises(InvalidValueForTypeError):
            convert_value("not-a-uuid", "uuid")

    @pytest.mark.parametrize(
        "text",
        [
            "{12345678-1234-5678-1234-567812345678}",
            "urn:uuid:12345678-1234-5678-1234-567812345678",
            "12345678123456781234567812345678",
        ],
    )
    def test_uuid_requires_dashed_form(self, text):
        with pytest.raises(InvalidValueForTypeError):
            convert_value(text, "uuid")

    def test_date(self):
        assert convert_value("2024-03-01", "date") == date(2024, 3, 1)

    def test_date_from_offset_timestamp(self):
        assert convert_value("2024-03-01T23:30:00+03:00", "date") == date(2024, 3, 1)

    def test_date_from_utc_timestamp(self):
        assert convert_value("2024-03-01T10:00:00Z", "date") == date(2024, 3, 1)
        assert convert_value("2024-03-01T10:00:00.123Z", "date") == date(2024, 3, 1)

    def test_date_from_zoned_timestamp(self):
        value = "2024-03-01T10:00:00+03:00[Europe/Moscow]"
        assert convert_value(value, "date") == date(2024, 3, 1)

    def test_date_rejects_bad_zone(self):
        with pytest.raises(InvalidValueForTypeError):
            convert_value("2024-03-01T10:00:00+03:00[Mars/Olympus]", "date")
        with pytest.raises(InvalidValueForTypeError):
            convert_value("2024-03-01T10:00:00[Europe/Moscow]", "date")

    def test_date_rejects_naive_timestamp(self):
        with pytest.raises(InvalidValueForTypeError):
            convert_value("2024-03-01T10:00:00", "date")
        with pytest.raises(InvalidValueForTypeError):
            convert_value("01.03.2024", "date")

    def test_text_types_pass_through(self):
        assert convert_value("hello", "string") == "hello"
        assert convert_value(77, "text") == "77"
        assert convert_value("x", "geometry") == "x"


class TestFromDbValue:
    def test_sqlite_shapes(self):
        assert from_db_value(1, "boolean") is True
        assert from_db_value(12.5, "decimal") == Decimal("12.5")
        assert from_db_value("2024-03-01", "date") == date(2024, 3, 1)
        ident = uuid.uuid4()
        assert from_db_value(str(ident), "uuid") == ident

    def test_typed_values_kept(self):
        d = date(2024, 1, 1)
        assert from_db_value(d, "date") is d
        assert from_db_value(5, "long") == 5
        assert from_db_value(None, "integer") is None


class TestToDbParam:
    def test_adapts_driver_unfriendly_types(self):
        ident = uuid.uuid4()
        assert to_db_param(ident) == str(ident)
        assert to_db_param(Decimal("1.10")) == "1.10"
        assert to_db_param(date(2024, 1, 2)) == "2024-01-02"
        assert to_db_param(datetime(2024, 1, 2, 3, 4)) == "2024-01-02T03:04:00"

    def test_leaves_plain_values(self):
        assert to_db_param(3) == 3
        assert to_db_param(True) is True
        assert to_db_param(None) is None

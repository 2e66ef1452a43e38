from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from adaptive_record.coercion import SENTINEL_DATE, is_default_date, parse_date, to_attribute, to_storage
from adaptive_record.domain.models import FieldDefinition, SemanticType
from adaptive_record.domain.record_type import RecordField
from adaptive_record.errors import TypeCoercionError


def _field(type_name: str, name: str = "Value") -> RecordField:
    definition = FieldDefinition(Name=name, TypeName=type_name, ControlType="TextBox")
    return RecordField(name=name, semantic_type=SemanticType.resolve(type_name), definition=definition)


INT64 = _field("System.Int64")
INT32 = _field("System.Int32")
STRING = _field("System.String")
BOOLEAN = _field("System.Boolean")
DECIMAL = _field("System.Decimal")
DOUBLE = _field("System.Double")
DATE = _field("System.DateTime", name="DateOfBirth")
OFFSET = _field("System.DateTimeOffset", name="CreatedAt")


class TestToAttribute:
    @pytest.mark.parametrize(
        "field, value, expected",
        [
            (INT64, "42", 42),
            (INT64, 42.0, 42),
            (INT32, 7, 7),
            (STRING, 42, "42"),
            (STRING, "Ann", "Ann"),
            (BOOLEAN, "true", True),
            (BOOLEAN, 0, False),
            (DECIMAL, "12.50", Decimal("12.50")),
            (DOUBLE, "0.25", 0.25),
        ],
    )
    def test_converts_to_field_type(self, field, value, expected):
        assert to_attribute(field, value) == expected

    @pytest.mark.parametrize("field", [INT64, STRING, BOOLEAN, DATE])
    def test_null_passes_through(self, field):
        assert to_attribute(field, None) is None

    def test_unconvertible_value_names_field_and_types(self):
        with pytest.raises(TypeCoercionError) as excinfo:
            to_attribute(_field("System.Int64", name="Age"), "forty")

        error = excinfo.value
        assert error.field_name == "Age"
        assert error.source_type == "str"
        assert error.target_type == "System.Int64"
        assert isinstance(error, ValueError)

    def test_int32_range_is_enforced(self):
        with pytest.raises(TypeCoercionError):
            to_attribute(INT32, 2**31)

    def test_booleans_do_not_widen_to_numbers(self):
        with pytest.raises(TypeCoercionError):
            to_attribute(INT64, True)

    def test_bytes_are_not_strings(self):
        with pytest.raises(TypeCoercionError):
            to_attribute(STRING, b"Ann")


class TestDates:
    @pytest.mark.parametrize(
        "text",
        ["1990-05-17", "05/17/1990", "1990/05/17", "17 May 1990", "May 17, 1990"],
    )
    def test_invariant_forms_are_parsed(self, text):
        assert to_attribute(DATE, text) == datetime(1990, 5, 17)

    @pytest.mark.parametrize("text", ["not a date", "", "   ", "31/31/1990"])
    def test_unparsable_text_becomes_null(self, text):
        assert to_attribute(DATE, text) is None

    def test_native_date_is_widened(self):
        assert to_attribute(DATE, date(1990, 5, 17)) == datetime(1990, 5, 17)

    def test_native_value_for_offset_field_gets_utc(self):
        assert to_attribute(OFFSET, datetime(2020, 1, 1, 8, 30)) == datetime(2020, 1, 1, 8, 30, tzinfo=timezone.utc)
        assert to_attribute(OFFSET, date(2020, 1, 1)) == datetime(2020, 1, 1, tzinfo=timezone.utc)

    def test_explicit_offset_is_kept(self):
        parsed = to_attribute(OFFSET, "2020-01-01T10:00:00+02:00")
        assert parsed.utcoffset() == timedelta(hours=2)

    def test_naive_text_for_offset_field_gets_utc(self):
        assert parse_date("2020-01-01", with_offset=True).tzinfo is timezone.utc

    def test_non_date_value_raises(self):
        with pytest.raises(TypeCoercionError) as excinfo:
            to_attribute(DATE, 19900517)
        assert excinfo.value.field_name == "DateOfBirth"


class TestToStorage:
    @pytest.mark.parametrize("value", [None, datetime.min, date.min, "", "   "])
    def test_unset_dates_become_sentinel(self, value):
        assert to_storage(DATE, value) == SENTINEL_DATE

    @pytest.mark.parametrize(
        "value",
        [
            datetime(1990, 5, 17, 13, 45),
            date(1990, 5, 17),
            "05/17/1990",
            datetime(1990, 5, 17, tzinfo=timezone.utc),
        ],
    )
    def test_dates_are_written_as_year_month_day(self, value):
        assert to_storage(DATE, value) == "1990-05-17"

    def test_small_years_are_zero_padded(self):
        assert to_storage(DATE, date(812, 3, 4)) == "0812-03-04"

    @pytest.mark.parametrize("field, value", [(INT64, None), (STRING, "Ann"), (DOUBLE, 0.5)])
    def test_non_date_values_pass_through(self, field, value):
        assert to_storage(field, value) == value

    def test_non_date_value_in_date_field_raises(self):
        with pytest.raises(TypeCoercionError):
            to_storage(DATE, 3.14)

    def test_unparsable_text_is_rejected(self):
        with pytest.raises(TypeCoercionError) as excinfo:
            to_storage(DATE, "garbage")

        assert excinfo.value.field_name == "DateOfBirth"
        assert excinfo.value.value == "garbage"


def test_is_default_date():
    assert is_default_date(None)
    assert is_default_date(datetime.min.replace(tzinfo=timezone.utc))
    assert not is_default_date(datetime(1900, 1, 1))

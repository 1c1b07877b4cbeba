from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone

import pytest

from sheetmap.services.extraction.coercion import (
    coerce,
    is_empty_value,
    is_missing_value,
    stringify,
    to_iso_instant,
)
from sheetmap.services.mapping import DataType


@pytest.mark.parametrize("data_type", list(DataType))
@pytest.mark.parametrize("raw", [None, "", float("nan")])
def test_empty_values_coerce_to_none_for_every_type(raw, data_type):
    result = coerce(raw, data_type)

    assert result.success
    assert result.value is None
    assert result.error is None


def test_whitespace_is_a_value_not_a_missing_cell():
    assert coerce("   ", DataType.STRING).value == "   "
    assert coerce("   ", DataType.BOOLEAN).error == '"   " is not a boolean'
    assert coerce("   ", DataType.DATE).error == '"   " is not a valid date'
    assert not coerce("   ", DataType.NUMBER).success


def test_number_rejects_underscore_literals():
    result = coerce("1_000", DataType.NUMBER)

    assert not result.success
    assert result.error == '"1_000" is not a number'
    assert not coerce("1_0.5", DataType.DECIMAL).success


def test_number_parses_numeric_text():
    assert coerce("42", DataType.NUMBER).value == 42
    assert coerce(" 3.5 ", DataType.NUMBER).value == 3.5
    assert coerce(7, DataType.NUMBER).value == 7


def test_number_rejects_text_with_quoted_message():
    result = coerce("abc", DataType.NUMBER)

    assert not result.success
    assert result.error == '"abc" is not a number'


def test_decimal_behaves_like_number():
    assert coerce("12.25", DataType.DECIMAL).value == coerce("12.25", DataType.NUMBER).value
    assert coerce("abc", DataType.DECIMAL).error == '"abc" is not a number'


@pytest.mark.parametrize(
    "raw, expected",
    [(True, True), (False, False), (1, True), (0, False), ("1", True), ("0", False), ("true", True), ("false", False)],
)
def test_boolean_accepted_literals(raw, expected):
    result = coerce(raw, DataType.BOOLEAN)

    assert result.success
    assert result.value is expected


@pytest.mark.parametrize("raw", ["yes", "TRUE", 2, "no"])
def test_boolean_rejects_other_values(raw):
    result = coerce(raw, DataType.BOOLEAN)

    assert not result.success
    assert result.error == f'"{raw}" is not a boolean'


def test_serial_date_matches_day_month_year_text():
    serial = coerce(45, DataType.DATE)
    text = coerce("14/02/1900", DataType.DATE)

    assert serial.success and text.success
    assert serial.value == text.value
    assert serial.value.startswith("1900-02-14")


def test_day_month_year_and_iso_text_agree():
    dmy = coerce("31/12/2023", DataType.DATE)
    iso = coerce("2023-12-31", DataType.DATE)

    assert dmy.value == "2023-12-31T00:00:00.000Z"
    assert iso.value == dmy.value


def test_day_month_year_accepts_dash_and_single_digits():
    assert coerce("1-2-2024", DataType.DATE).value == "2024-02-01T00:00:00.000Z"


def test_serial_date_from_modern_serial():
    assert coerce(45291, DataType.DATE).value == "2023-12-31T00:00:00.000Z"


def test_native_dates_are_accepted():
    assert coerce(datetime(2024, 5, 6, 7, 8, 9), DataType.DATE).value == "2024-05-06T07:08:09.000Z"
    assert coerce(date(2024, 5, 6), DataType.DATE).value == "2024-05-06T00:00:00.000Z"


def test_invalid_date_fails():
    result = coerce("not a date", DataType.DATE)

    assert not result.success
    assert result.error == '"not a date" is not a valid date'


def test_non_integral_number_is_not_a_serial_date():
    assert not coerce(45.5, DataType.DATE).success


def test_string_never_fails():
    assert coerce(30, DataType.STRING).value == "30"
    assert coerce(2.0, DataType.STRING).value == "2"
    assert coerce(True, DataType.STRING).value == "true"
    assert coerce("Alice", DataType.STRING).value == "Alice"


def test_is_empty_value_and_stringify():
    assert is_empty_value(None)
    assert is_empty_value(" ")
    assert not is_missing_value(" ")
    assert is_missing_value("")
    assert is_empty_value(math.nan)
    assert not is_empty_value(0)
    assert not is_empty_value(False)
    assert stringify(1.5) == "1.5"
    assert stringify(date(2024, 1, 2)) == "2024-01-02"


def test_to_iso_instant_converts_aware_values_to_utc():
    moment = datetime(2024, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=7)))

    assert to_iso_instant(moment) == "2024-01-01T02:00:00.000Z"

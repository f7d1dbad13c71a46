"""
Tests for statement date parsing.
"""
from datetime import date

import pytest

from models.import_template import DateLayout
from utils.date_parser import parse_date, to_iso_timestamp


@pytest.mark.parametrize("raw,layout,expected", [
    ("2024-01-05", DateLayout.YMD, date(2024, 1, 5)),
    ("01/05/2024", DateLayout.MDY, date(2024, 1, 5)),
    ("05/01/2024", DateLayout.DMY, date(2024, 1, 5)),
    ("2024/1/5", DateLayout.YMD, date(2024, 1, 5)),
    ("5.1.2024", DateLayout.DMY, date(2024, 1, 5)),
    ("2024-02-29", DateLayout.YMD, date(2024, 2, 29)),
    (" 2024-01-05 ", DateLayout.YMD, date(2024, 1, 5)),
])
def test_valid_dates(raw, layout, expected):
    assert parse_date(raw, layout) == expected


@pytest.mark.parametrize("raw,layout", [
    ("2024-02-30", DateLayout.YMD),
    ("02/29/2023", DateLayout.MDY),
    ("31/02/2024", DateLayout.DMY),
    ("13/01/2024", DateLayout.MDY),
    ("2024-13-01", DateLayout.YMD),
    ("2024-00-10", DateLayout.YMD),
])
def test_calendar_invalid_dates_rejected(raw, layout):
    assert parse_date(raw, layout) is None


@pytest.mark.parametrize("raw", [
    "",
    "yesterday",
    "2024-01",
    "2024-01-05-01",
    "2024--05",
    "20240105",
])
def test_malformed_dates_rejected(raw):
    assert parse_date(raw, DateLayout.YMD) is None


def test_layout_decides_component_order():
    assert parse_date("03/04/2024", DateLayout.MDY) == date(2024, 3, 4)
    assert parse_date("03/04/2024", DateLayout.DMY) == date(2024, 4, 3)


def test_two_digit_years_rejected():
    assert parse_date("01/05/24", DateLayout.MDY) is None
    assert parse_date("24-01-05", DateLayout.YMD) is None


def test_to_iso_timestamp_is_midnight_utc():
    assert to_iso_timestamp(date(2024, 1, 5)) == "2024-01-05T00:00:00+00:00"

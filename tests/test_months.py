"""Tests for month-key calendar arithmetic."""

import pytest
from datetime import date

from balance_track.exceptions import MalformedKey
from balance_track.months import (
    add_months,
    last_day_of_month,
    month_key,
    month_key_of,
    months_between,
    months_of_year,
    parse_day,
    parse_month_key,
    year_of,
)


class TestMonthKeys:
    """Building and parsing `YYYY-MM` keys."""

    def test_month_key_zero_pads(self):
        assert month_key(2024, 0) == "2024-01"
        assert month_key(2024, 11) == "2024-12"

    def test_month_key_pads_short_years(self):
        assert month_key(5, 2) == "0005-03"

    def test_parse_month_key(self):
        assert parse_month_key("2024-03") == (2024, 3)
        assert parse_month_key("1999-12") == (1999, 12)

    @pytest.mark.parametrize("bad", [
        "2024-3", "2024-13", "2024-00", "24-01", "", "2024-03-01", "abcd-ef", None, 202403,
        "2024-03\n", " 2024-03", "\uff12\uff10\uff12\uff14-03",
    ])
    def test_parse_month_key_rejects_malformed(self, bad):
        with pytest.raises(MalformedKey):
            parse_month_key(bad)

    def test_malformed_key_is_a_value_error(self):
        with pytest.raises(ValueError, match="Malformed key"):
            parse_month_key("March")

    def test_month_key_of_and_year_of(self):
        assert month_key_of(date(2024, 2, 29)) == "2024-02"
        assert year_of("2031-07") == 2031

    def test_lexical_order_is_chronological(self):
        keys = [month_key(year, index) for year in (1999, 2000, 2024) for index in range(12)]
        assert sorted(keys) == keys


class TestMonthArithmetic:
    """add_months and months_between."""

    def test_add_months_within_year(self):
        assert add_months("2024-01", 4) == "2024-05"

    def test_add_months_across_year_end(self):
        assert add_months("2024-11", 3) == "2025-02"

    def test_add_months_negative(self):
        assert add_months("2024-01", -1) == "2023-12"
        assert add_months("2024-01", -25) == "2021-12"

    def test_add_zero_months(self):
        assert add_months("2024-05", 0) == "2024-05"

    def test_months_between(self):
        assert months_between("2023-11", "2024-02") == 3
        assert months_between("2024-02", "2024-02") == 0

    def test_months_between_is_antisymmetric(self):
        for a, b in [("2020-01", "2024-07"), ("2024-12", "2025-01"), ("2019-06", "2019-03")]:
            assert months_between(a, b) == -months_between(b, a)

    def test_add_months_inverts_months_between(self):
        start = "2022-10"
        for offset in (-14, -1, 0, 1, 2, 15):
            assert months_between(start, add_months(start, offset)) == offset

    def test_months_of_year(self):
        keys = months_of_year(2024)
        assert len(keys) == 12
        assert keys[0] == "2024-01"
        assert keys[-1] == "2024-12"


class TestDays:
    """Calendar day parsing and month lengths."""

    def test_last_day_of_month(self):
        assert last_day_of_month(2024, 2) == 29
        assert last_day_of_month(2023, 2) == 28
        assert last_day_of_month(2024, 12) == 31

    def test_parse_day(self):
        assert parse_day("2024-02-29") == date(2024, 2, 29)

    def test_parse_day_passes_dates_through(self):
        assert parse_day(date(2024, 5, 1)) == date(2024, 5, 1)

    @pytest.mark.parametrize("bad", [
        "2023-02-29", "2024-2-1", "2024-02", "", None, "2024-02-01\n", "\uff12\uff10\uff12\uff14-02-01",
    ])
    def test_parse_day_rejects_malformed(self, bad):
        with pytest.raises(MalformedKey):
            parse_day(bad)

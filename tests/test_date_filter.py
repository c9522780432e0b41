"""Tests for date filtering."""

from datetime import datetime

import pytest

from cursor_usage.date_filter import (
    available_dates,
    available_days,
    available_months,
    available_years,
    build_date_filter,
    filter_by_date,
)
from cursor_usage.models import AllDates, DayFilter, MonthFilter, RangeFilter, UsageRow, YearFilter


def _rows():
    return [
        UsageRow(date="2024-01-01T09:00:00", model="a"),
        UsageRow(date="2024-01-02T23:30:00", model="b"),
        UsageRow(date="garbage", model="c"),
        UsageRow(date="2024-01-03", model="d"),
        UsageRow(date="2024-02-10", model="e"),
        UsageRow(date="2023-12-31T12:00:00", model="f"),
    ]


def _models(rows):
    return [r.model for r in rows]


def _all_specs():
    return [
        AllDates(),
        DayFilter(datetime(2024, 1, 2)),
        MonthFilter(datetime(2024, 1, 1)),
        YearFilter(datetime(2024, 1, 1)),
        RangeFilter(datetime(2024, 1, 1), datetime(2024, 1, 3)),
        RangeFilter(None, datetime(2024, 1, 3)),
    ]


class TestFilterByDate:
    def test_all_is_identity(self):
        rows = _rows()
        assert filter_by_date(rows, AllDates()) is rows
        assert filter_by_date(filter_by_date(rows, AllDates()), AllDates()) == rows

    def test_day(self):
        result = filter_by_date(_rows(), DayFilter(datetime(2024, 1, 2)))
        assert _models(result) == ["b"]

    def test_month(self):
        result = filter_by_date(_rows(), MonthFilter(datetime(2024, 1, 15)))
        assert _models(result) == ["a", "b", "d"]

    def test_year(self):
        result = filter_by_date(_rows(), YearFilter(datetime(2024, 6, 1)))
        assert _models(result) == ["a", "b", "d", "e"]

    def test_range_single_day(self):
        rows = [
            UsageRow(date="2024-01-01", model="jan1"),
            UsageRow(date="2024-01-02", model="jan2"),
            UsageRow(date="2024-01-03", model="jan3"),
        ]
        result = filter_by_date(rows, RangeFilter(datetime(2024, 1, 2), datetime(2024, 1, 2)))
        assert _models(result) == ["jan2"]

    def test_range_includes_whole_end_day(self):
        result = filter_by_date(_rows(), RangeFilter(datetime(2024, 1, 2, 15), datetime(2024, 1, 2, 1)))
        assert _models(result) == ["b"]

    def test_range_missing_bound_keeps_all(self):
        rows = _rows()
        assert filter_by_date(rows, RangeFilter(datetime(2024, 1, 1), None)) == rows
        assert filter_by_date(rows, RangeFilter(None, None)) == rows

    def test_missing_date_keeps_all(self):
        rows = _rows()
        assert filter_by_date(rows, DayFilter()) == rows

    def test_invalid_dates_excluded(self):
        for spec in _all_specs()[1:5]:
            assert "c" not in _models(filter_by_date(_rows(), spec))

    def test_result_is_subsequence(self):
        rows = _rows()
        for spec in _all_specs():
            result = filter_by_date(rows, spec)
            it = iter(rows)
            assert all(any(r is candidate for candidate in it) for r in result)

    def test_empty(self):
        assert filter_by_date([], DayFilter(datetime(2024, 1, 1))) == []


class TestAvailableDates:
    def test_sorted_valid_only(self):
        dates = available_dates(_rows())
        assert len(dates) == 5
        assert dates == sorted(dates)
        assert dates[0] == datetime(2023, 12, 31, 12, 0)

    def test_distinct(self):
        rows = [UsageRow(date="2024-01-01"), UsageRow(date="2024-01-01"), UsageRow(date="")]
        assert available_dates(rows) == [datetime(2024, 1, 1)]

    def test_years_newest_first(self):
        assert available_years(available_dates(_rows())) == [2024, 2023]

    def test_months(self):
        assert available_months(available_dates(_rows())) == ["2023-12", "2024-01", "2024-02"]

    def test_days(self):
        assert available_days(available_dates(_rows())) == [
            "2023-12-31", "2024-01-01", "2024-01-02", "2024-01-03", "2024-02-10",
        ]


class TestBuildDateFilter:
    def test_none(self):
        assert build_date_filter() == AllDates()

    def test_day(self):
        assert build_date_filter(day="2024-01-05") == DayFilter(datetime(2024, 1, 5))

    def test_month(self):
        assert build_date_filter(month="2024-02") == MonthFilter(datetime(2024, 2, 1))

    def test_year(self):
        assert build_date_filter(year="2024") == YearFilter(datetime(2024, 1, 1))

    def test_range(self):
        spec = build_date_filter(start="2024-01-01", end="2024-01-31")
        assert spec == RangeFilter(datetime(2024, 1, 1), datetime(2024, 1, 31))

    def test_open_range(self):
        assert build_date_filter(start="2024-01-01") == RangeFilter(datetime(2024, 1, 1), None)

    def test_malformed(self):
        with pytest.raises(ValueError):
            build_date_filter(day="01/05/2024")
        with pytest.raises(ValueError):
            build_date_filter(month="2024-13")

    def test_conflicting(self):
        with pytest.raises(ValueError):
            build_date_filter(day="2024-01-05", year="2024")

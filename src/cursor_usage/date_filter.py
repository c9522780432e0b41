"""Date filtering over usage rows."""

from __future__ import annotations

import logging
import re
from datetime import datetime

from .csv_parser import parse_date
from .models import (
    AllDates,
    DateFilterSpec,
    DayFilter,
    MonthFilter,
    RangeFilter,
    UsageRow,
    YearFilter,
)

log = logging.getLogger(__name__)

RE_YEAR = re.compile(r"^(\d{4})$")
RE_MONTH = re.compile(r"^(\d{4})-(\d{1,2})$")
RE_DAY = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


def filter_by_date(rows: list[UsageRow], spec: DateFilterSpec) -> list[UsageRow]:
    """Return the rows matching a date filter, in their original order.

    AllDates returns the input unchanged. Rows whose Date cannot be parsed never
    match any other filter. A filter without its date (or a range missing
    either bound) keeps every row.
    """
    if isinstance(spec, AllDates):
        return rows

    match = _matcher(spec)
    if match is None:
        return list(rows)

    result = []
    for row in rows:
        row_date = parse_date(row.date)
        if row_date is not None and match(row_date):
            result.append(row)
    log.debug("%s kept %d of %d rows", type(spec).__name__, len(result), len(rows))
    return result


def _matcher(spec: DateFilterSpec):
    """Predicate over a parsed row date, or None when the filter is a no-op."""
    if isinstance(spec, DayFilter):
        if not spec.date:
            return None
        d = spec.date
        return lambda r: (r.year, r.month, r.day) == (d.year, d.month, d.day)

    if isinstance(spec, MonthFilter):
        if not spec.date:
            return None
        d = spec.date
        return lambda r: (r.year, r.month) == (d.year, d.month)

    if isinstance(spec, YearFilter):
        if not spec.date:
            return None
        d = spec.date
        return lambda r: r.year == d.year

    if isinstance(spec, RangeFilter):
        if not spec.start or not spec.end:
            return None
        start = spec.start.replace(hour=0, minute=0, second=0, microsecond=0)
        end = spec.end.replace(hour=23, minute=59, second=59, microsecond=999000)
        return lambda r: start <= r <= end

    return None


def available_dates(rows: list[UsageRow]) -> list[datetime]:
    """Distinct valid row dates in ascending order."""
    dates = {parse_date(row.date) for row in rows}
    dates.discard(None)
    return sorted(dates)


def available_years(dates: list[datetime]) -> list[int]:
    """Distinct years, newest first."""
    return sorted({d.year for d in dates}, reverse=True)


def available_months(dates: list[datetime]) -> list[str]:
    """Distinct months as YYYY-MM, oldest first."""
    return sorted({f"{d.year}-{d.month:02d}" for d in dates})


def available_days(dates: list[datetime]) -> list[str]:
    """Distinct days as YYYY-MM-DD, oldest first."""
    return sorted({f"{d.year}-{d.month:02d}-{d.day:02d}" for d in dates})


def build_date_filter(day: str | None = None, month: str | None = None,
                      year: str | None = None, start: str | None = None,
                      end: str | None = None) -> DateFilterSpec:
    """Build a filter from option strings (YYYY-MM-DD, YYYY-MM, YYYY).

    At most one of day, month, year or a start/end range may be given.
    Raises ValueError for malformed values or conflicting options.
    """
    chosen = [name for name, value in
              (("day", day), ("month", month), ("year", year),
               ("range", start or end)) if value]
    if len(chosen) > 1:
        raise ValueError(f"Only one date filter may be used, got: {', '.join(chosen)}")

    if day:
        return DayFilter(_parse_option(day, RE_DAY, "day", "YYYY-MM-DD"))
    if month:
        return MonthFilter(_parse_option(month, RE_MONTH, "month", "YYYY-MM"))
    if year:
        return YearFilter(_parse_option(year, RE_YEAR, "year", "YYYY"))
    if start or end:
        return RangeFilter(
            _parse_option(start, RE_DAY, "start", "YYYY-MM-DD") if start else None,
            _parse_option(end, RE_DAY, "end", "YYYY-MM-DD") if end else None,
        )
    return AllDates()


def _parse_option(value: str, pattern: re.Pattern, name: str, fmt: str) -> datetime:
    match = pattern.match(value.strip())
    if not match:
        raise ValueError(f"Invalid {name} {value!r}, expected {fmt}")
    parts = [int(p) for p in match.groups()]
    while len(parts) < 3:
        parts.append(1)
    try:
        return datetime(*parts)
    except ValueError as e:
        raise ValueError(f"Invalid {name} {value!r}: {e}") from e

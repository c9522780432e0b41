"""Aggregation engine — roll usage rows up by day, by model and overall."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime

from .csv_parser import parse_date, parse_float, parse_int
from .formatters import INVALID_DATE, format_short_date
from .models import DailyUsage, SummaryStats, UsageRow, UsageTotals

UNKNOWN_MODEL = "Unknown"


def row_tokens(row: UsageRow) -> int:
    """Total tokens of a row; 0 when missing or unparsable."""
    return parse_int(row.total_tokens) or 0


def row_cost(row: UsageRow) -> float:
    """Cost of a row; 0.0 when missing or unparsable."""
    return parse_float(row.cost) or 0.0


def day_key(value) -> str:
    """Calendar-day identity of a date value, e.g. "Mon Jan 01 2024"."""
    dt = parse_date(value)
    if dt is None:
        return INVALID_DATE
    return dt.strftime("%a %b %d %Y")


def usage_by_day(rows: list[UsageRow]) -> list[DailyUsage]:
    """Group rows by calendar day and total tokens, cost and requests.

    Days are returned oldest first; rows with an unparsable date share the
    "Invalid Date" bucket, which sorts last.
    """
    buckets: dict[str, tuple[datetime | None, UsageTotals]] = {}

    for row in rows:
        dt = parse_date(row.date)
        key = day_key(dt) if dt else INVALID_DATE
        first_seen, totals = buckets.get(key, (dt, UsageTotals()))
        buckets[key] = (first_seen, totals.add(row_tokens(row), row_cost(row)))

    daily = [
        DailyUsage(
            key=key,
            date=dt.date() if dt else None,
            label=format_short_date(dt) if dt else INVALID_DATE,
            total_tokens=totals.total_tokens,
            total_cost=totals.total_cost,
            requests=totals.requests,
        )
        for key, (dt, totals) in buckets.items()
    ]
    return sorted(daily, key=lambda d: (d.date is None, d.date or 0))


def usage_by_model_and_day(rows: list[UsageRow]) -> dict[str, dict[str, UsageTotals]]:
    """Group rows by model, then by calendar day.

    Rows without a model are grouped under "Unknown".
    """
    usage: dict[str, dict[str, UsageTotals]] = defaultdict(dict)

    for row in rows:
        model = row.model or UNKNOWN_MODEL
        key = day_key(row.date)
        days = usage[model]
        days[key] = days.get(key, UsageTotals()).add(row_tokens(row), row_cost(row))

    return dict(usage)


def model_totals(rows: list[UsageRow]) -> dict[str, UsageTotals]:
    """Per-model totals, largest token consumer first."""
    totals: dict[str, UsageTotals] = defaultdict(UsageTotals)
    for row in rows:
        model = row.model or UNKNOWN_MODEL
        totals[model] = totals[model].add(row_tokens(row), row_cost(row))
    return dict(sorted(totals.items(), key=lambda x: x[1].total_tokens, reverse=True))


def summarize(rows: list[UsageRow]) -> SummaryStats:
    """Headline totals and distinct model count for a row sequence."""
    return SummaryStats(
        total_tokens=sum(row_tokens(r) for r in rows),
        total_cost=sum(row_cost(r) for r in rows),
        total_requests=len(rows),
        model_count=len({r.model for r in rows if r.model}),
    )

"""Data models for Cursor usage analytics."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional, Union

# Column name -> UsageRow attribute, in export order.
COLUMN_FIELDS: dict[str, str] = {
    "Date": "date",
    "Kind": "kind",
    "Model": "model",
    "Max Mode": "max_mode",
    "Input (w/ Cache Write)": "input_with_cache_write",
    "Input (w/o Cache Write)": "input_without_cache_write",
    "Cache Read": "cache_read",
    "Output Tokens": "output_tokens",
    "Total Tokens": "total_tokens",
    "Cost": "cost",
}

COLUMNS: tuple[str, ...] = tuple(COLUMN_FIELDS)

SORT_ASC = "asc"
SORT_DESC = "desc"
ALL = "all"  # selector sentinel for model/kind filters

PAGE_SIZE = 20


@dataclass(frozen=True)
class UsageRow:
    """A single usage event, one line of the exported CSV."""

    date: str = ""
    kind: str = ""
    model: str = ""
    max_mode: str = ""
    input_with_cache_write: str = ""
    input_without_cache_write: str = ""
    cache_read: str = ""
    output_tokens: str = ""
    total_tokens: str = ""
    cost: str = ""
    extra: tuple[tuple[str, str], ...] = ()  # unrecognized (column, value) pairs
    columns: tuple[str, ...] = COLUMNS  # header that produced this row

    @classmethod
    def from_mapping(cls, values: dict[str, str],
                     columns: tuple[str, ...] | None = None) -> "UsageRow":
        """Build a row from a column name -> value mapping."""
        known = {attr: values.get(col, "") or "" for col, attr in COLUMN_FIELDS.items()}
        extra = tuple((k, v) for k, v in values.items() if k not in COLUMN_FIELDS)
        return cls(**known, extra=extra,
                   columns=tuple(columns) if columns is not None else tuple(values))

    def get(self, column: str) -> str:
        """Value for a CSV column name; empty string when absent."""
        attr = COLUMN_FIELDS.get(column)
        if attr is not None:
            return getattr(self, attr)
        for name, value in self.extra:
            if name == column:
                return value
        return ""

    def keys(self) -> tuple[str, ...]:
        return self.columns

    def to_dict(self) -> dict[str, str]:
        return {col: self.get(col) for col in self.columns}


# ── Date filter variants ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class AllDates:
    """No date restriction."""

    @property
    def description(self) -> str:
        return "Showing all data"


@dataclass(frozen=True)
class DayFilter:
    date: Optional[datetime] = None

    @property
    def description(self) -> str:
        if not self.date:
            return "Showing all data"
        return f"Showing data for {self.date.strftime('%B')} {self.date.day}, {self.date.year}"


@dataclass(frozen=True)
class MonthFilter:
    date: Optional[datetime] = None

    @property
    def description(self) -> str:
        if not self.date:
            return "Showing all data"
        return f"Showing data for {self.date.strftime('%B %Y')}"


@dataclass(frozen=True)
class YearFilter:
    date: Optional[datetime] = None

    @property
    def description(self) -> str:
        if not self.date:
            return "Showing all data"
        return f"Showing data for {self.date.year}"


@dataclass(frozen=True)
class RangeFilter:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def description(self) -> str:
        if not self.start or not self.end:
            return "Showing all data"
        return (f"Showing data from {self.start.strftime('%b %d')} to "
                f"{self.end.strftime('%b %d, %Y')}")


DateFilterSpec = Union[AllDates, DayFilter, MonthFilter, YearFilter, RangeFilter]


# ── Aggregates ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class UsageTotals:
    """Accumulated totals for one bucket."""

    total_tokens: int = 0
    total_cost: float = 0.0
    requests: int = 0

    def add(self, tokens: int, cost: float) -> "UsageTotals":
        """Totals with one more request counted."""
        return replace(self, total_tokens=self.total_tokens + tokens,
                       total_cost=self.total_cost + cost, requests=self.requests + 1)


@dataclass(frozen=True)
class DailyUsage:
    """Aggregated usage for a single calendar day."""

    key: str  # e.g. "Mon Jan 01 2024", or "Invalid Date"
    date: Optional[date] = None
    label: str = ""  # e.g. "Jan 1"
    total_tokens: int = 0
    total_cost: float = 0.0
    requests: int = 0


@dataclass
class SummaryStats:
    """Headline numbers for a (filtered) row sequence."""

    total_tokens: int = 0
    total_cost: float = 0.0
    total_requests: int = 0
    model_count: int = 0

    @property
    def average_tokens_per_request(self) -> int:
        if self.total_requests == 0:
            return 0
        return math.floor(self.total_tokens / self.total_requests + 0.5)

    @property
    def average_cost_per_request(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_cost / self.total_requests


# ── Table view ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TableQuery:
    """Search, filter, sort and page selection for the data table."""

    search: str = ""
    model: str = ALL
    kind: str = ALL
    sort_field: str = "Date"
    sort_direction: str = SORT_DESC
    page: int = 1

    def __post_init__(self):
        if self.sort_field not in COLUMN_FIELDS:
            raise ValueError(f"unknown sort field: {self.sort_field!r}")
        if self.sort_direction not in (SORT_ASC, SORT_DESC):
            raise ValueError(f"sort direction must be '{SORT_ASC}' or '{SORT_DESC}'")


@dataclass
class TablePage:
    """One page of the filtered and sorted table."""

    rows: list = field(default_factory=list)
    total_count: int = 0
    total_pages: int = 0
    page: int = 1

    @property
    def start_index(self) -> int:
        """1-based index of the first row on this page (0 when empty)."""
        if not self.rows:
            return 0
        return (self.page - 1) * PAGE_SIZE + 1

    @property
    def end_index(self) -> int:
        if not self.rows:
            return 0
        return self.start_index + len(self.rows) - 1

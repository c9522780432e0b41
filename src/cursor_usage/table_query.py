"""Search, filter, sort, paginate and export the usage data table."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import date, datetime

from .csv_parser import parse_date, parse_float, parse_int
from .models import ALL, COLUMNS, PAGE_SIZE, SORT_ASC, SORT_DESC, TablePage, TableQuery, UsageRow

log = logging.getLogger(__name__)

SEARCH_COLUMNS = ("Model", "Kind", "Max Mode", "Date")

# Probed in order; the first with a value in the first row wins.
KIND_COLUMN_CANDIDATES = ("Kind", "Request Type", "Type", "RequestType", "Request_Type")
KIND_COLUMN_HINTS = ("type", "request", "kind")


def detect_kind_column(rows: list[UsageRow]) -> str | None:
    """Find the column holding the request kind.

    Tries the known header names against the first row, then any header whose
    name mentions type, request or kind. Heuristic: a sparse first row or an
    unrelated "...type" column can pick the wrong one.
    """
    if not rows:
        return None
    first = rows[0]
    for column in KIND_COLUMN_CANDIDATES:
        if first.get(column):
            return column
    for column in first.keys():
        lowered = column.lower()
        if any(hint in lowered for hint in KIND_COLUMN_HINTS):
            return column
    return None


def distinct_models(rows: list[UsageRow]) -> list[str]:
    """Sorted non-blank model names."""
    return sorted({row.model for row in rows if row.model})


def distinct_kinds(rows: list[UsageRow]) -> list[str]:
    """Sorted non-blank request kinds, or [] when no kind column exists."""
    column = detect_kind_column(rows)
    if column is None:
        return []
    return sorted({row.get(column) for row in rows if row.get(column)})


def filter_and_sort(rows: list[UsageRow], query: TableQuery) -> list[UsageRow]:
    """Apply search, model and kind filters, then a stable sort."""
    term = query.search.lower()
    kind_column = detect_kind_column(rows) if query.kind != ALL else None
    if query.kind != ALL and kind_column is None:
        log.debug("No kind column found; ignoring kind filter %r", query.kind)

    filtered = []
    for row in rows:
        if term and not any(term in row.get(col).lower() for col in SEARCH_COLUMNS):
            continue
        if query.model != ALL and row.model != query.model:
            continue
        if kind_column is not None and row.get(kind_column) != query.kind:
            continue
        filtered.append(row)

    # sorted() is stable, and stays stable with reverse=True.
    return sorted(filtered, key=_sort_key(query.sort_field),
                  reverse=query.sort_direction == SORT_DESC)


def _sort_key(field: str):
    if field == "Date":
        # Unparsable dates sort as the oldest.
        return lambda row: parse_date(row.date) or datetime.min
    if field == "Total Tokens":
        return lambda row: parse_int(row.total_tokens) or 0
    if field == "Cost":
        return lambda row: parse_float(row.cost) or 0.0
    return lambda row: row.get(field).lower()


def query_table(rows: list[UsageRow], query: TableQuery) -> TablePage:
    """Filter, sort and slice out one page of the table.

    Out-of-range page numbers are clamped to the first or last page.
    """
    result = filter_and_sort(rows, query)
    total_count = len(result)
    total_pages = math.ceil(total_count / PAGE_SIZE)
    page = min(max(query.page, 1), max(total_pages, 1))
    start = (page - 1) * PAGE_SIZE
    return TablePage(
        rows=result[start:start + PAGE_SIZE],
        total_count=total_count,
        total_pages=total_pages,
        page=page,
    )


def toggle_sort(query: TableQuery, field: str) -> TableQuery:
    """Select a sort column: the current one flips direction, a new one sorts descending."""
    if query.sort_field == field:
        direction = SORT_ASC if query.sort_direction == SORT_DESC else SORT_DESC
        return replace(query, sort_direction=direction, page=1)
    return replace(query, sort_field=field, sort_direction=SORT_DESC, page=1)


def clear_filters(query: TableQuery) -> TableQuery:
    """Drop search, model and kind filters and go back to the first page."""
    return replace(query, search="", model=ALL, kind=ALL, page=1)


def export_csv(rows: list[UsageRow]) -> str:
    """Serialize rows with the fixed ten-column header, every cell quoted."""
    lines = [",".join(COLUMNS)]
    for row in rows:
        lines.append(",".join(f'"{row.get(col)}"' for col in COLUMNS))
    return "\n".join(lines)


def export_filename(today: date | None = None) -> str:
    """Default export file name, e.g. cursor-usage-2024-01-31.csv."""
    today = today or date.today()
    return f"cursor-usage-{today.isoformat()}.csv"

"""Parse exported Cursor usage CSV files into rows."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from dateutil import parser as date_parser

from .models import UsageRow

log = logging.getLogger(__name__)

RE_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
RE_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Fills in fields missing from partial dates such as "Jan 5".
_DATE_DEFAULT = datetime(2001, 1, 1)


class UsageFileError(Exception):
    """The usage file could not be acquired."""


class UnsupportedFileError(UsageFileError):
    """The file is not a .csv file."""


class UsageFileReadError(UsageFileError):
    """The file exists but could not be read."""


def parse_csv(text: str) -> list[UsageRow]:
    """Parse CSV text into usage rows.

    The first line is the header. Cells are split on commas (quoted commas are
    not supported) and have their double quotes removed. Lines whose cells are
    all blank are dropped. Never raises for malformed text.
    """
    if not isinstance(text, str):
        return []
    lines = text.strip().split("\n")
    header = tuple(_clean_cell(cell) for cell in lines[0].split(","))
    if not any(header):
        return []

    rows: list[UsageRow] = []
    skipped = 0
    for line in lines[1:]:
        cells = [_clean_cell(cell) for cell in line.split(",")]
        values: dict[str, str] = {}
        for i, column in enumerate(header):
            values[column] = cells[i] if i < len(cells) else ""
        if not any(values.values()):
            skipped += 1
            continue
        rows.append(UsageRow.from_mapping(values, header))

    if skipped:
        log.debug("Skipped %d blank lines", skipped)
    log.debug("Parsed %d rows with columns %s", len(rows), list(header))
    return rows


def load_usage_file(filepath: str | Path) -> list[UsageRow]:
    """Read and parse a usage CSV file.

    Raises UnsupportedFileError for non-.csv paths and UsageFileReadError when
    the file cannot be read. Parsing itself never fails.
    """
    filepath = Path(filepath)
    if filepath.suffix.lower() != ".csv":
        raise UnsupportedFileError(f"Please provide a CSV file (got {filepath.name})")
    try:
        text = filepath.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise UsageFileReadError(f"Error reading {filepath}: {e}") from e
    return parse_csv(text)


def parse_int(value) -> int | None:
    """Leading integer of a value ("1,234" -> 1, "12.9" -> 12); None if absent."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and abs(value) != float("inf") else None
    match = RE_INT_PREFIX.match(str(value or ""))
    if match:
        return int(match.group(1))
    return None


def parse_float(value) -> float | None:
    """Leading decimal of a value ("0.50abc" -> 0.5); None if absent."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = RE_FLOAT_PREFIX.match(str(value or ""))
    if match:
        return float(match.group(1))
    return None


def parse_date(value) -> datetime | None:
    """Parse a date value to a naive local datetime; None if unparsable.

    Zone-aware timestamps (e.g. ISO strings ending in Z) are converted to
    local time.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value or "").strip()
        if not text:
            return None
        try:
            dt = date_parser.parse(text, default=_DATE_DEFAULT)
        except (ValueError, OverflowError):
            return None
    if dt.tzinfo is not None:
        # Shifting zones can step outside datetime.min/max.
        try:
            dt = dt.astimezone().replace(tzinfo=None)
        except (ValueError, OverflowError, OSError):
            return None
    return dt


def _clean_cell(cell: str) -> str:
    return cell.replace('"', "").strip()

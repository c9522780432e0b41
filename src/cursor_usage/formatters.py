"""Display formatting for usage values (en-US)."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal

from .csv_parser import parse_date, parse_float

INVALID_DATE = "Invalid Date"

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Wide enough to quantize any finite float.
_DECIMAL_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def _to_number(value) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    parsed = parse_float(value)
    return math.nan if parsed is None else parsed


def _round_half_up(num: float, places: int) -> Decimal:
    """Round ties away from zero, reading the float by its shortest repr."""
    return _DECIMAL_CONTEXT.quantize(Decimal(repr(num)), Decimal(1).scaleb(-places))


def format_currency(value) -> str:
    """Render a value as USD with two decimals, e.g. "$1,234.50"."""
    num = _to_number(value)
    if math.isnan(num):
        return "$NaN"
    sign = "-" if num < 0 else ""
    if math.isinf(num):
        return f"{sign}$∞"
    return f"{sign}${_round_half_up(abs(num), 2):,.2f}"


def format_number(value) -> str:
    """Render a number with thousands separators and up to three decimals."""
    num = _to_number(value)
    if math.isnan(num):
        return "NaN"
    if math.isinf(num):
        return "-∞" if num < 0 else "∞"
    text = f"{_round_half_up(num, 3):,.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_date(value) -> str:
    """Render a date as "Jan 5, 2024"."""
    dt = parse_date(value)
    if dt is None:
        return INVALID_DATE
    return f"{MONTH_ABBR[dt.month - 1]} {dt.day}, {dt.year}"


def format_short_date(value) -> str:
    """Render a date as "Jan 5" for chart axes and daily tables."""
    dt = parse_date(value)
    if dt is None:
        return INVALID_DATE
    return f"{MONTH_ABBR[dt.month - 1]} {dt.day}"


def format_tokens(n: int) -> str:
    """Format token counts with K/M suffixes."""
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return str(n)

from __future__ import annotations

import datetime as dt
import re
from typing import Iterable, List, NamedTuple, Set, Tuple

import pandas as pd

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

SHORT_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
LONG_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


class MonthRange(NamedTuple):
    start_month: str
    end_month: str


def is_month(token: object) -> bool:
    return isinstance(token, str) and bool(MONTH_PATTERN.match(token))


def current_month(today: dt.date | None = None) -> str:
    today = today or dt.date.today()
    return f"{today.year:04d}-{today.month:02d}"


def add_months(month: str, n: int) -> str:
    """Shift a YYYY-MM token by n calendar months (negative n goes back)."""
    return (pd.Period(month, freq="M") + n).strftime("%Y-%m")


def months_between(start: str, end: str) -> List[str]:
    """All month tokens from start to end inclusive; empty when start > end."""
    if start > end:
        return []
    return [p.strftime("%Y-%m") for p in pd.period_range(start=start, end=end, freq="M")]


def range_to_months(start: str, end: str) -> List[str]:
    return months_between(start, end)


def expand_ranges(ranges: Iterable[Tuple[str, str]]) -> Set[str]:
    months: Set[str] = set()
    for start, end in ranges:
        months.update(range_to_months(start, end))
    return months


def months_to_ranges(months: Iterable[str]) -> List[MonthRange]:
    """
    Merge month tokens into the minimal list of inclusive ranges:
    - Sorts lexically, which is chronological for YYYY-MM.
    - Extends the open range only when the next month follows its end directly.
    Duplicates collapse, so the result only depends on the set of months.
    """
    ordered = sorted(set(months))
    if not ordered:
        return []

    ranges: List[MonthRange] = []
    start = prev = ordered[0]
    for month in ordered[1:]:
        if add_months(prev, 1) == month:
            prev = month
            continue
        ranges.append(MonthRange(start, prev))
        start = prev = month
    ranges.append(MonthRange(start, prev))
    return ranges


def sort_months(a: str, b: str) -> Tuple[str, str]:
    return (a, b) if a <= b else (b, a)


def axis_end(start_month: str, duration_months: int) -> str:
    return add_months(start_month, duration_months - 1)


def axis_months(start_month: str, duration_months: int) -> List[str]:
    return months_between(start_month, axis_end(start_month, duration_months))


def clip_to_axis(months: Iterable[str], start: str, end: str) -> Set[str]:
    return {m for m in months if start <= m <= end}


def format_month_short(month: str) -> str:
    year, m = month.split("-")
    return f"{SHORT_NAMES[int(m) - 1]} {year[2:]}"


def format_month_long(month: str) -> str:
    year, m = month.split("-")
    return f"{LONG_NAMES[int(m) - 1]} {year}"

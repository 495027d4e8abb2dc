"""
Column type inference.

A column is classified from its raw cell values, first match wins:

1. blank cells (None / empty string) are ignored; nothing left -> text
2. numeric      >= 80% of the remaining cells parse as a finite number
3. date         >= 80% of the remaining cells parse as a calendar date
4. categorical  fewer than 20 distinct values and fewer than half as many
                distinct values as remaining cells
5. text         everything else

Nothing here raises: a cell that fails to coerce simply doesn't count.
"""
import math
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from dateutil.parser import parse as parse_date

from .models import Column, ColumnType

NUMERIC_THRESHOLD = 0.8
DATE_THRESHOLD = 0.8
CATEGORICAL_MAX_DISTINCT = 20
CATEGORICAL_MAX_RATIO = 0.5

def is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""

def to_number(value: Any) -> Optional[float]:
    """Coerce a cell to a finite float, or None when it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        n = float(value)
        return n if math.isfinite(n) else None
    if not isinstance(value, str):
        return None
    s = value.strip()
    # float() accepts digit separators, a typed-in number doesn't
    if not s or "_" in s:
        return None
    try:
        n = float(s)
    except ValueError:
        return None
    return n if math.isfinite(n) else None

def is_date(value: Any) -> bool:
    if isinstance(value, (datetime, date)):
        return True
    if value is None or isinstance(value, bool):
        return False
    try:
        parse_date(str(value).strip())
    except (ValueError, OverflowError):
        return False
    return True

def distinct_values(values: Iterable[Any]) -> list[Any]:
    """Distinct values in first-appearance order (True and 1 stay apart)."""
    seen: dict = {}
    for v in values:
        key = (type(v) is bool, v)
        if key not in seen:
            seen[key] = v
    return list(seen.values())

def _ratio(count: int, total: int) -> float:
    return count / total if total else 0.0

def classify(values: Sequence[Any]) -> ColumnType:
    present = [v for v in values if not is_blank(v)]
    if not present:
        return ColumnType.TEXT

    total = len(present)
    numeric = sum(1 for v in present if to_number(v) is not None)
    if _ratio(numeric, total) >= NUMERIC_THRESHOLD:
        return ColumnType.NUMERIC

    dates = sum(1 for v in present if is_date(v))
    if _ratio(dates, total) >= DATE_THRESHOLD:
        return ColumnType.DATE

    distinct = len(distinct_values(present))
    if distinct < CATEGORICAL_MAX_RATIO * total and distinct < CATEGORICAL_MAX_DISTINCT:
        return ColumnType.CATEGORICAL

    return ColumnType.TEXT

def describe_column(name: str, values: Sequence[Any]) -> Column:
    col_type = classify(values)
    unique = None
    if col_type == ColumnType.CATEGORICAL:
        unique = distinct_values(v for v in values if not is_blank(v))
    return Column(name=name, type=col_type, unique_values=unique)

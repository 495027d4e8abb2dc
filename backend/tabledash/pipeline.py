"""
Query pipeline over an in-memory table.

Always evaluated in the same order: search -> column filters -> sort -> paginate.
Every stage is a pure function of its inputs and returns a new list; the
input rows are never reordered or mutated.

Range filters coerce cells with ``inference.to_number``, which needs the
whole trimmed cell to be a number: "100 USD" fails coercion and the row is
dropped, it is not read as 100. Strings sort by their accent- and
case-folded form; accents, then case, then the raw string break ties.
"""
import math
import unicodedata
from functools import cmp_to_key
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .inference import to_number
from .models import (
    ColumnFilter,
    MembershipFilter,
    Pagination,
    RangeFilter,
    Row,
    SortDirection,
    SortSpec,
)

def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

def search_rows(rows: Sequence[Row], query: Optional[str]) -> List[Row]:
    if not query:
        return list(rows)
    needle = query.casefold()
    return [r for r in rows if any(needle in _stringify(v).casefold() for v in r.values())]

def _same_scalar(a: Any, b: Any) -> bool:
    # booleans only ever equal booleans
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b

def matches_filter(value: Any, flt: ColumnFilter) -> bool:
    if isinstance(flt, RangeFilter):
        if not flt.is_active:
            return True
        n = to_number(value)
        if n is None:
            return False
        if flt.min is not None and n < flt.min:
            return False
        if flt.max is not None and n > flt.max:
            return False
        return True
    if isinstance(flt, MembershipFilter):
        # an empty value set means "no filter", not "match nothing"
        if not flt.is_active:
            return True
        return any(_same_scalar(value, v) for v in flt.values)
    return True

def filter_rows(rows: Sequence[Row], filters: Mapping[str, ColumnFilter]) -> List[Row]:
    active = [(col, f) for col, f in filters.items() if f.is_active]
    if not active:
        return list(rows)
    return [r for r in rows if all(matches_filter(r.get(col), f) for col, f in active)]

def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)

def _collation_key(s: str) -> Tuple[str, str, str]:
    # accents and case only break ties: "éclair" sorts between "apple" and "zebra"
    folded = s.casefold()
    base = "".join(ch for ch in unicodedata.normalize("NFKD", folded) if not unicodedata.combining(ch))
    return base, folded, s

def _compare_strings(a: str, b: str) -> int:
    ka, kb = _collation_key(a), _collation_key(b)
    return (ka > kb) - (ka < kb)

def compare_values(a: Any, b: Any, direction: SortDirection = SortDirection.ASC) -> int:
    """Comparator for two non-null cells; mixed types compare equal."""
    if isinstance(a, str) and isinstance(b, str):
        c = _compare_strings(a, b)
    elif _is_number(a) and _is_number(b):
        c = (a > b) - (a < b)
    else:
        return 0
    return -c if direction == SortDirection.DESC else c

def sort_rows(rows: Sequence[Row], sort: Optional[SortSpec]) -> List[Row]:
    if sort is None or not sort.field:
        return list(rows)

    field = sort.field
    present = [r for r in rows if r.get(field) is not None]
    # nulls go last whatever the direction, in their original order
    missing = [r for r in rows if r.get(field) is None]

    key = cmp_to_key(lambda x, y: compare_values(x[field], y[field], sort.direction))
    return sorted(present, key=key) + missing

def total_pages(row_count: int, rows_per_page: int) -> int:
    if rows_per_page <= 0:
        raise ValueError("rows_per_page must be positive")
    return max(1, math.ceil(row_count / rows_per_page))

def paginate(rows: Sequence[Row], pagination: Pagination) -> List[Row]:
    # out-of-range pages come back empty, clamping is up to the caller
    start = (pagination.current_page - 1) * pagination.rows_per_page
    return list(rows[start:start + pagination.rows_per_page])

def run_query(
    rows: Sequence[Row],
    search: Optional[str] = None,
    filters: Optional[Mapping[str, ColumnFilter]] = None,
    sort: Optional[SortSpec] = None,
    pagination: Optional[Pagination] = None,
) -> Tuple[List[Row], int]:
    """Full pipeline; returns (page rows, total pages)."""
    pagination = pagination or Pagination()
    result = search_rows(rows, search)
    result = filter_rows(result, filters or {})
    result = sort_rows(result, sort)
    return paginate(result, pagination), total_pages(len(result), pagination.rows_per_page)

"""
Dashboard state: one immutable, versioned snapshot plus pure transitions.

Each transition returns a new ``DashboardState`` with ``version`` bumped and
never edits the previous one in place, so older versions stay valid (the
store keeps some of them around for undo). Derived views (filtered, sorted,
paged rows) are plain selector functions recomputed on every call.
"""
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .models import (
    ChartConfig,
    Column,
    ColumnFilter,
    Pagination,
    Row,
    SortDirection,
    SortSpec,
    Table,
)
from .pipeline import filter_rows, paginate, search_rows, sort_rows, total_pages
from .recommend import Recommendation
from .settings import settings

class DashboardState(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: int = 0
    rows: List[Row] = Field(default_factory=list)
    columns: List[Column] = Field(default_factory=list)
    file_name: Optional[str] = None

    loading: bool = False
    error: Optional[str] = None

    search_query: str = ""
    sort: SortSpec = Field(default_factory=SortSpec)
    pagination: Pagination = Field(default_factory=lambda: Pagination(rows_per_page=settings.ROWS_PER_PAGE))
    column_filters: Dict[str, ColumnFilter] = Field(default_factory=dict)
    charts: List[ChartConfig] = Field(default_factory=list)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def column(self, name: str) -> Optional[Column]:
        for c in self.columns:
            if c.name == name:
                return c
        return None

    def chart(self, chart_id: str) -> Optional[ChartConfig]:
        for c in self.charts:
            if c.id == chart_id:
                return c
        return None

def _next(state: DashboardState, **changes: Any) -> DashboardState:
    changes["version"] = state.version + 1
    return state.model_copy(update=changes)

def _first_page(state: DashboardState) -> Pagination:
    return Pagination(current_page=1, rows_per_page=state.pagination.rows_per_page)

# --- table lifecycle ---

def load_table(state: DashboardState, table: Table, file_name: Optional[str]) -> DashboardState:
    # sort and page size survive an upload, everything table-specific is reset
    return _next(
        state,
        rows=list(table.rows),
        columns=list(table.columns),
        file_name=file_name,
        loading=False,
        error=None,
        search_query="",
        column_filters={},
        charts=[],
        pagination=_first_page(state),
    )

def clear_data(state: DashboardState) -> DashboardState:
    return _next(
        state,
        rows=[],
        columns=[],
        file_name=None,
        search_query="",
        column_filters={},
        charts=[],
        pagination=_first_page(state),
    )

def begin_loading(state: DashboardState) -> DashboardState:
    return _next(state, loading=True, error=None)

def fail_loading(state: DashboardState, message: str) -> DashboardState:
    return _next(state, loading=False, error=message)

def dismiss_error(state: DashboardState) -> DashboardState:
    return _next(state, error=None)

# --- query state ---

def set_search_query(state: DashboardState, query: str) -> DashboardState:
    return _next(state, search_query=query, pagination=_first_page(state))

def set_sort(state: DashboardState, field: Optional[str], direction: SortDirection) -> DashboardState:
    return _next(state, sort=SortSpec(field=field, direction=direction))

def set_sort_field(state: DashboardState, field: Optional[str]) -> DashboardState:
    return _next(state, sort=SortSpec(field=field, direction=state.sort.direction))

def set_sort_direction(state: DashboardState, direction: SortDirection) -> DashboardState:
    return _next(state, sort=SortSpec(field=state.sort.field, direction=direction))

def toggle_sort(state: DashboardState, column: str) -> DashboardState:
    """Clicking the sorted column flips direction, a new column starts ascending."""
    if state.sort.field == column:
        flipped = SortDirection.DESC if state.sort.direction == SortDirection.ASC else SortDirection.ASC
        return _next(state, sort=SortSpec(field=column, direction=flipped))
    return _next(state, sort=SortSpec(field=column, direction=SortDirection.ASC))

def set_current_page(state: DashboardState, page: int) -> DashboardState:
    return _next(state, pagination=Pagination(current_page=page, rows_per_page=state.pagination.rows_per_page))

def set_rows_per_page(state: DashboardState, rows_per_page: int) -> DashboardState:
    return _next(state, pagination=Pagination(current_page=1, rows_per_page=rows_per_page))

def set_column_filter(state: DashboardState, column: str, flt: ColumnFilter) -> DashboardState:
    filters = dict(state.column_filters)
    filters[column] = flt
    return _next(state, column_filters=filters, pagination=_first_page(state))

def clear_column_filter(state: DashboardState, column: str) -> DashboardState:
    filters = {k: v for k, v in state.column_filters.items() if k != column}
    return _next(state, column_filters=filters)

def clear_all_filters(state: DashboardState) -> DashboardState:
    return _next(state, column_filters={}, search_query="", pagination=_first_page(state))

# --- charts ---

def add_chart(state: DashboardState, chart: ChartConfig) -> DashboardState:
    if state.chart(chart.id) is not None:
        raise ValueError(f"Chart {chart.id} already exists")
    return _next(state, charts=state.charts + [chart])

def accept_recommendation(state: DashboardState, rec: Recommendation) -> DashboardState:
    return add_chart(state, rec.to_chart())

def remove_chart(state: DashboardState, chart_id: str) -> DashboardState:
    return _next(state, charts=[c for c in state.charts if c.id != chart_id])

def update_chart(state: DashboardState, chart: ChartConfig) -> DashboardState:
    if state.chart(chart.id) is None:
        return state
    return _next(state, charts=[chart if c.id == chart.id else c for c in state.charts])

# --- selectors ---

def filtered_rows(state: DashboardState) -> List[Row]:
    return filter_rows(search_rows(state.rows, state.search_query), state.column_filters)

def sorted_rows(state: DashboardState) -> List[Row]:
    return sort_rows(filtered_rows(state), state.sort)

def page_rows(state: DashboardState) -> List[Row]:
    return paginate(sorted_rows(state), state.pagination)

def page_count(state: DashboardState) -> int:
    return total_pages(len(filtered_rows(state)), state.pagination.rows_per_page)

def result_window(state: DashboardState) -> Tuple[int, int, int]:
    """(first, last, total) for a "showing X to Y of Z" line, 1-based."""
    total = len(filtered_rows(state))
    if total == 0:
        return 0, 0, 0
    p = state.pagination
    first = (p.current_page - 1) * p.rows_per_page + 1
    if first > total:
        return 0, 0, total
    return first, min(p.current_page * p.rows_per_page, total), total

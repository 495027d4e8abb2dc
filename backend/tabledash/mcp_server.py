from typing import Any
from mcp.server.fastmcp import FastMCP

from .models import Pagination
from .pipeline import paginate, total_pages
from .recommend import recommend
from .state import sorted_rows
from .store import get_store

mcp = FastMCP("TableDash")


@mcp.tool()
def ping() -> dict:
    return {"status": "ok"}


@mcp.tool()
def describe_table() -> dict[str, Any]:
    s = get_store().state
    return {
        "file_name": s.file_name,
        "row_count": len(s.rows),
        "columns": [c.model_dump(mode="json") for c in s.columns],
        "search_query": s.search_query,
        "column_filters": {k: v.model_dump() for k, v in s.column_filters.items()},
        "sort": s.sort.model_dump(mode="json"),
    }


@mcp.tool()
def get_table_page(page: int = 1, rows_per_page: int = 50) -> dict[str, Any]:
    """Rows of the current search/filter/sort view; paging here doesn't touch the dashboard."""
    s = get_store().state
    pagination = Pagination(current_page=max(1, page), rows_per_page=max(1, rows_per_page))
    rows = sorted_rows(s)
    return {
        "page": pagination.current_page,
        "rows_per_page": pagination.rows_per_page,
        "total_pages": total_pages(len(rows), pagination.rows_per_page),
        "filtered_count": len(rows),
        "rows": paginate(rows, pagination),
    }


@mcp.tool()
def recommend_charts() -> list[dict[str, Any]]:
    return [r.model_dump(mode="json") for r in recommend(get_store().state.columns)]

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional, Union

from .models import ChartType, Column, ColumnFilter, Pagination, SortDirection, SortSpec

class UploadResponse(BaseModel):
    file_name: str
    row_count: int
    columns: list[Column]
    committed: bool
    version: int

class TableInfo(BaseModel):
    file_name: Optional[str]
    row_count: int
    columns: list[Column]
    search_query: str
    sort: SortSpec
    pagination: Pagination
    column_filters: dict[str, ColumnFilter]
    loading: bool
    error: Optional[str] = None
    version: int

class PageResponse(BaseModel):
    rows: list[dict[str, Any]]
    current_page: int
    rows_per_page: int
    total_pages: int
    filtered_count: int
    showing_from: int
    showing_to: int

class SearchRequest(BaseModel):
    query: str = ""

class SortRequest(BaseModel):
    field: Optional[str] = None
    direction: SortDirection = SortDirection.ASC

class PaginationRequest(BaseModel):
    current_page: Optional[int] = Field(default=None, ge=1)
    rows_per_page: Optional[int] = Field(default=None, gt=0)

class ChartRequest(BaseModel):
    type: ChartType
    x_axis: str = Field(min_length=1)
    y_axis: str = Field(min_length=1)
    title: str = Field(min_length=1)

class ConnectionConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = "postgresql"
    host: Optional[str] = None
    port: Optional[Union[int, str]] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

class QueryRequest(ConnectionConfig):
    query: Optional[str] = None
    # also load the result into the dashboard
    load: bool = False

class QueryResponse(BaseModel):
    success: bool
    data: list[dict[str, Any]]
    rowCount: int
    loaded: bool = False

from typing import List
from contextlib import asynccontextmanager

from fastapi import Body, Depends, FastAPI, File, HTTPException, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from . import state as st
from .aggregate import ChartSeries, NumericSummary, chart_series, summarize
from .connectors import check_connection, run_query
from .exceptions import ConnectionConfigError, ParseError, QueryError
from .export import export_filename, serialize
from .ingest import ingest_rows, ingest_upload
from .logger import get_logger
from .mcp_server import mcp
from .models import ChartConfig, ColumnFilter
from .recommend import Recommendation, recommend
from .schemas import (
    ChartRequest,
    ConnectionConfig,
    PageResponse,
    PaginationRequest,
    QueryRequest,
    QueryResponse,
    SearchRequest,
    SortRequest,
    TableInfo,
    UploadResponse,
)
from .settings import settings
from .store import DashboardStore, get_store

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    async with mcp.session_manager.run():
        yield

app = FastAPI(title="TableDash", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/mcp-status")
def mcp_status():
    return {"status": "online"}

app.mount("/mcp", mcp.streamable_http_app())

def _table_info(s: st.DashboardState) -> TableInfo:
    return TableInfo(
        file_name=s.file_name,
        row_count=len(s.rows),
        columns=s.columns,
        search_query=s.search_query,
        sort=s.sort,
        pagination=s.pagination,
        column_filters=s.column_filters,
        loading=s.loading,
        error=s.error,
        version=s.version,
    )

def _require_column(s: st.DashboardState, name: str) -> None:
    if s.column(name) is None:
        raise HTTPException(400, f"Unknown column: {name}")

def _require_chart(s: st.DashboardState, chart_id: str) -> ChartConfig:
    chart = s.chart(chart_id)
    if chart is None:
        raise HTTPException(404, "Chart not found")
    return chart

# --- upload / table ---

@app.post("/upload", response_model=UploadResponse)
async def upload_file(file: UploadFile = File(...), store: DashboardStore = Depends(get_store)):
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(413, f"File exceeds {settings.MAX_UPLOAD_BYTES} bytes")

    filename = file.filename or ""
    try:
        table, committed = await ingest_upload(store, content, filename)
    except ParseError as e:
        raise HTTPException(400, str(e))
    finally:
        await file.close()

    return UploadResponse(
        file_name=filename,
        row_count=table.row_count,
        columns=table.columns,
        committed=committed,
        version=store.state.version,
    )

@app.get("/table", response_model=TableInfo)
def get_table(store: DashboardStore = Depends(get_store)):
    return _table_info(store.state)

@app.delete("/table", response_model=TableInfo)
def clear_table(store: DashboardStore = Depends(get_store)):
    return _table_info(store.apply(st.clear_data))

@app.get("/table/rows", response_model=PageResponse)
def get_rows(store: DashboardStore = Depends(get_store)):
    s = store.state
    first, last, total = st.result_window(s)
    return PageResponse(
        rows=st.page_rows(s),
        current_page=s.pagination.current_page,
        rows_per_page=s.pagination.rows_per_page,
        total_pages=st.page_count(s),
        filtered_count=total,
        showing_from=first,
        showing_to=last,
    )

@app.put("/table/search", response_model=TableInfo)
def set_search(req: SearchRequest, store: DashboardStore = Depends(get_store)):
    return _table_info(store.apply(st.set_search_query, req.query))

@app.put("/table/sort", response_model=TableInfo)
def set_sort(req: SortRequest, store: DashboardStore = Depends(get_store)):
    if req.field is not None:
        _require_column(store.state, req.field)
    return _table_info(store.apply(st.set_sort, req.field, req.direction))

@app.post("/table/sort/{column}", response_model=TableInfo)
def toggle_sort(column: str, store: DashboardStore = Depends(get_store)):
    _require_column(store.state, column)
    return _table_info(store.apply(st.toggle_sort, column))

@app.put("/table/pagination", response_model=TableInfo)
def set_pagination(req: PaginationRequest, store: DashboardStore = Depends(get_store)):
    s = store.state
    if req.rows_per_page is not None:
        s = store.apply(st.set_rows_per_page, req.rows_per_page)
    if req.current_page is not None:
        s = store.apply(st.set_current_page, req.current_page)
    return _table_info(s)

@app.put("/table/filters/{column}", response_model=TableInfo)
def set_filter(column: str, flt: ColumnFilter = Body(...), store: DashboardStore = Depends(get_store)):
    _require_column(store.state, column)
    return _table_info(store.apply(st.set_column_filter, column, flt))

@app.delete("/table/filters/{column}", response_model=TableInfo)
def clear_filter(column: str, store: DashboardStore = Depends(get_store)):
    return _table_info(store.apply(st.clear_column_filter, column))

@app.delete("/table/filters", response_model=TableInfo)
def clear_filters(store: DashboardStore = Depends(get_store)):
    return _table_info(store.apply(st.clear_all_filters))

@app.get("/table/summary", response_model=List[NumericSummary])
def table_summary(store: DashboardStore = Depends(get_store)):
    s = store.state
    return summarize(st.filtered_rows(s), s.columns)

@app.get("/table/export")
def export_table(store: DashboardStore = Depends(get_store)):
    s = store.state
    if not s.columns:
        raise HTTPException(400, "No table loaded")
    filename = export_filename(s.file_name)
    return Response(
        content=serialize(st.sorted_rows(s)),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@app.post("/undo")
def undo(store: DashboardStore = Depends(get_store)):
    ok = store.undo()
    return {"ok": ok, "version": store.state.version}

@app.delete("/error", response_model=TableInfo)
def dismiss_error(store: DashboardStore = Depends(get_store)):
    return _table_info(store.apply(st.dismiss_error))

# --- charts ---

@app.get("/charts", response_model=List[ChartConfig])
def list_charts(store: DashboardStore = Depends(get_store)):
    return store.state.charts

@app.get("/charts/recommendations", response_model=List[Recommendation])
def chart_recommendations(store: DashboardStore = Depends(get_store)):
    return recommend(store.state.columns)

@app.post("/charts/recommendations/{index}", response_model=ChartConfig)
def accept_recommendation(index: int, store: DashboardStore = Depends(get_store)):
    recs = recommend(store.state.columns)
    if index < 0 or index >= len(recs):
        raise HTTPException(404, "Recommendation not found")
    s = store.apply(st.accept_recommendation, recs[index])
    return s.charts[-1]

@app.post("/charts", response_model=ChartConfig)
def add_chart(req: ChartRequest, store: DashboardStore = Depends(get_store)):
    _require_column(store.state, req.x_axis)
    _require_column(store.state, req.y_axis)
    chart = ChartConfig(**req.model_dump())
    store.apply(st.add_chart, chart)
    return chart

@app.put("/charts/{chart_id}", response_model=ChartConfig)
def update_chart(chart_id: str, req: ChartRequest, store: DashboardStore = Depends(get_store)):
    _require_chart(store.state, chart_id)
    _require_column(store.state, req.x_axis)
    _require_column(store.state, req.y_axis)
    chart = ChartConfig(id=chart_id, **req.model_dump())
    store.apply(st.update_chart, chart)
    return chart

@app.delete("/charts/{chart_id}")
def remove_chart(chart_id: str, store: DashboardStore = Depends(get_store)):
    _require_chart(store.state, chart_id)
    store.apply(st.remove_chart, chart_id)
    return {"ok": True, "chart_id": chart_id}

@app.get("/charts/{chart_id}/data", response_model=ChartSeries)
def chart_data(chart_id: str, store: DashboardStore = Depends(get_store)):
    s = store.state
    chart = _require_chart(s, chart_id)
    return chart_series(st.filtered_rows(s), chart)

# --- mock database ---

@app.post("/database/test-connection")
async def database_test_connection(config: ConnectionConfig):
    try:
        return await check_connection(config)
    except ConnectionConfigError as e:
        raise HTTPException(400, str(e))

@app.post("/database/query", response_model=QueryResponse)
async def query_database(req: QueryRequest, store: DashboardStore = Depends(get_store)):
    try:
        rows = await run_query(req.query, req)
    except QueryError as e:
        raise HTTPException(400, str(e))

    loaded = False
    if req.load:
        try:
            _, loaded = await ingest_rows(store, rows, f"{req.database or 'query'}-result")
        except ParseError as e:
            raise HTTPException(400, str(e))

    return QueryResponse(success=True, data=rows, rowCount=len(rows), loaded=loaded)

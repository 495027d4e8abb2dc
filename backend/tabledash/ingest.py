import asyncio
from typing import List, Tuple

from .exceptions import ParseError
from .logger import get_logger
from .models import Row, Table
from .parsing import build_table, detect_format, parse
from .settings import settings
from .store import DashboardStore

logger = get_logger(__name__)

async def _commit(store: DashboardStore, token: int, table: Table, name: str) -> bool:
    # simulated processing delay before the table becomes visible
    if settings.UPLOAD_DELAY_SECONDS > 0:
        await asyncio.sleep(settings.UPLOAD_DELAY_SECONDS)
    committed = store.commit_upload(token, table, name)
    if committed:
        logger.info("Loaded %s: %d rows, %d columns", name, table.row_count, len(table.columns))
    return committed

async def ingest_upload(store: DashboardStore, content: bytes, filename: str) -> Tuple[Table, bool]:
    """Parse an uploaded file and load it into the store.

    Returns the parsed table and whether it was committed (False when a newer
    upload started meanwhile). Raises ParseError after recording it as the
    store's error.
    """
    token = store.begin_upload()
    logger.info("Parsing upload %s (%d bytes)", filename, len(content))
    try:
        fmt = detect_format(filename)
        table = await asyncio.to_thread(parse, content, fmt)
        if not table.rows:
            raise ParseError("File contains no data")
    except ParseError as e:
        logger.warning("Upload %s rejected: %s", filename, e)
        store.fail_upload(token, str(e))
        raise
    except Exception as e:
        logger.exception("Upload %s failed", filename)
        store.fail_upload(token, f"Could not process {filename}: {e}")
        raise

    return table, await _commit(store, token, table, filename)

async def ingest_rows(store: DashboardStore, rows: List[Row], name: str) -> Tuple[Table, bool]:
    """Load already-shaped rows (e.g. a query result) the same way as an upload."""
    token = store.begin_upload()
    if not rows:
        store.fail_upload(token, "Query returned no rows")
        raise ParseError("Query returned no rows")
    table = build_table(rows)
    return table, await _commit(store, token, table, name)

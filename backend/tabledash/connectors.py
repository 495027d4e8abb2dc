"""
Stand-in database layer.

No real driver is involved: a connection test only validates that the
required parameters are present, and every query returns the same fixed
rows after a delay. A real integration would replace these two coroutines.
"""
import asyncio
from typing import List, Optional

from .exceptions import ConnectionConfigError, QueryError
from .logger import get_logger
from .models import Row
from .schemas import ConnectionConfig
from .settings import settings

logger = get_logger(__name__)

REQUIRED_FIELDS = ("host", "database", "username")

MOCK_ROWS: List[Row] = [
    {"id": 1, "name": "Product A", "sales": 12500, "date": "2024-01-15"},
    {"id": 2, "name": "Product B", "sales": 18900, "date": "2024-01-16"},
    {"id": 3, "name": "Product C", "sales": 9800, "date": "2024-01-17"},
]

def _validate(config: ConnectionConfig) -> None:
    missing = [f for f in REQUIRED_FIELDS if not (getattr(config, f) or "").strip()]
    if missing:
        raise ConnectionConfigError(f"Missing required connection parameters: {', '.join(missing)}")

async def check_connection(config: ConnectionConfig) -> dict:
    _validate(config)
    await asyncio.sleep(settings.CONNECTION_TEST_DELAY_SECONDS)
    logger.info("Mock connection test ok: %s@%s/%s (%s)", config.username, config.host, config.database, config.type)
    return {"success": True, "message": "Connection successful"}

async def run_query(query: Optional[str], config: ConnectionConfig) -> List[Row]:
    if not query or not query.strip():
        raise QueryError("Query is required")
    await asyncio.sleep(settings.QUERY_DELAY_SECONDS)
    logger.info("Mock query against %s/%s: %s", config.host, config.database, query[:200])
    return [dict(r) for r in MOCK_ROWS]

"""
Flat-file export of the current result set.

Header is the key order of the *first* row. Each cell is written as a JSON
scalar (strings in double quotes with JSON escapes, numbers and booleans
bare), missing or null cells as ``""``. This is JSON quoting, not RFC 4180
CSV quoting: a comma inside a value is left as-is inside the quotes.

Re-importing an export goes through ``parsing.coerce_cell``, which strips the
quotes and turns anything that reads as a number into one. A string cell such
as "007" therefore comes back as the number 7.
"""
import json
import os
from typing import Optional, Sequence

from .models import Row

EXPORT_SUFFIX = "-filtered.csv"
DEFAULT_BASENAME = "filtered-data"

def _cell(value) -> str:
    if value is None:
        value = ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return json.dumps(value, ensure_ascii=False)

def serialize(rows: Sequence[Row]) -> bytes:
    if not rows:
        return b""
    headers = list(rows[0].keys())
    lines = [",".join(headers)]
    lines.extend(",".join(_cell(r.get(h)) for h in headers) for r in rows)
    return "\n".join(lines).encode("utf-8")

def export_filename(file_name: Optional[str]) -> str:
    base = os.path.splitext(os.path.basename(file_name))[0] if file_name else ""
    return f"{base or DEFAULT_BASENAME}{EXPORT_SUFFIX}"

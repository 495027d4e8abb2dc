import io
import math
import os
from datetime import date, datetime, time
from typing import Any, List, Optional

from openpyxl import load_workbook

from .exceptions import ParseError
from .inference import describe_column
from .models import Row, Table

CSV = "csv"
SPREADSHEET = "spreadsheet"

FORMAT_BY_EXTENSION = {
    ".csv": CSV,
    ".xlsx": SPREADSHEET,
    ".xlsm": SPREADSHEET,
}

def detect_format(filename: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    fmt = FORMAT_BY_EXTENSION.get(ext)
    if fmt is None:
        raise ParseError("Please upload a CSV or Excel file (.csv, .xlsx)")
    return fmt

def _strip_quotes(s: str) -> str:
    s = s.strip()
    if len(s) >= 2 and s[0] == '"' and s[-1] == '"':
        return s[1:-1]
    return s

def coerce_cell(raw: Optional[str]) -> Any:
    """Number when the cell reads as one, else the trimmed string; blank -> None."""
    if raw is None:
        return None
    s = raw.strip()
    if s == "":
        return None
    if "_" not in s:
        try:
            return int(s)
        except ValueError:
            pass
        try:
            n = float(s)
        except ValueError:
            return s
        if math.isfinite(n):
            return n
    return s

def _header_names(raw: List[Any]) -> List[str]:
    names: List[str] = []
    seen: dict[str, int] = {}
    for i, h in enumerate(raw):
        name = str(h).strip() if h is not None and str(h).strip() else f"col_{i}"
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 1
        names.append(name)
    return names

def _fit(raw: List[Any], width: int) -> List[Any]:
    # pad/truncate to header length
    if len(raw) < width:
        return raw + [None] * (width - len(raw))
    return raw[:width]

def build_table(rows: List[Row], columns: Optional[List[str]] = None) -> Table:
    """Infer column metadata for already-shaped rows."""
    if columns is None:
        columns = list(rows[0].keys()) if rows else []
    metas = [describe_column(c, [r.get(c) for r in rows]) for c in columns]
    return Table(rows=rows, columns=metas)

def parse_csv(content: bytes) -> Table:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"File is not valid UTF-8 text: {e}") from e

    lines = [line for line in text.split("\n") if line.strip()]
    if len(lines) < 2:
        raise ParseError("CSV file must have at least a header row and one data row")

    columns = _header_names([_strip_quotes(h) for h in lines[0].split(",")])
    rows: List[Row] = []
    for line in lines[1:]:
        cells = _fit([_strip_quotes(v) for v in line.split(",")], len(columns))
        rows.append({columns[i]: coerce_cell(cells[i]) for i in range(len(columns))})

    return build_table(rows, columns)

def _sheet_value(v: Any) -> Any:
    if isinstance(v, (datetime, date, time)):
        return v.isoformat()
    if isinstance(v, str) and v.strip() == "":
        return None
    return v

def _read_first_sheet(content: bytes) -> List[List[Any]]:
    wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        if not wb.worksheets:
            return []
        return [
            list(r) for r in wb.worksheets[0].iter_rows(values_only=True)
            if any(c is not None and str(c).strip() != "" for c in r)
        ]
    finally:
        wb.close()

def parse_spreadsheet(content: bytes) -> Table:
    try:
        raw_rows = _read_first_sheet(content)
    except Exception as e:
        # besides InvalidFileException / BadZipFile, a damaged archive can fail
        # with XML, key or value errors from deep inside openpyxl
        raise ParseError(f"Could not read workbook: {e}") from e

    if len(raw_rows) < 2:
        raise ParseError("Excel file is empty")

    columns = _header_names(raw_rows[0])
    rows = [
        {columns[i]: _sheet_value(v) for i, v in enumerate(_fit(raw, len(columns)))}
        for raw in raw_rows[1:]
    ]
    return build_table(rows, columns)

def parse(content: bytes, fmt: str) -> Table:
    if fmt == CSV:
        return parse_csv(content)
    if fmt == SPREADSHEET:
        return parse_spreadsheet(content)
    raise ParseError(f"Unsupported format: {fmt}")

from typing import Any, Dict, List, Sequence

from pydantic import BaseModel

from .inference import to_number
from .models import ChartConfig, Column, ColumnType, Row

UNKNOWN_LABEL = "Unknown"

class ChartSeries(BaseModel):
    chart_id: str
    type: str
    label: str
    labels: List[str]
    values: List[float]

class NumericSummary(BaseModel):
    name: str
    count: int
    sum: float
    avg: float
    min: float
    max: float

def _label(value: Any) -> str:
    if value is None:
        return UNKNOWN_LABEL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

def chart_series(rows: Sequence[Row], chart: ChartConfig) -> ChartSeries:
    # group by x, sum y; cells that aren't numbers count as 0
    grouped: Dict[str, float] = {}
    for r in rows:
        x = _label(r.get(chart.x_axis))
        y = to_number(r.get(chart.y_axis)) or 0.0
        grouped[x] = grouped.get(x, 0.0) + y
    return ChartSeries(
        chart_id=chart.id,
        type=chart.type.value,
        label=chart.y_axis,
        labels=list(grouped.keys()),
        values=list(grouped.values()),
    )

def summarize(rows: Sequence[Row], columns: Sequence[Column]) -> List[NumericSummary]:
    out: List[NumericSummary] = []
    for col in columns:
        if col.type != ColumnType.NUMERIC:
            continue
        values = [to_number(r.get(col.name)) or 0.0 for r in rows]
        total = sum(values)
        out.append(NumericSummary(
            name=col.name,
            count=len(values),
            sum=total,
            avg=total / len(values) if values else 0.0,
            min=min(values) if values else 0.0,
            max=max(values) if values else 0.0,
        ))
    return out

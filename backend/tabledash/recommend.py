from typing import List, Sequence

from pydantic import BaseModel, Field

from .models import ChartConfig, ChartType, Column, ColumnType

MAX_RECOMMENDATIONS = 5

LINE_CONFIDENCE = 0.95
BAR_CONFIDENCE = 0.85
DOUGHNUT_CONFIDENCE = 0.75

BAR_CATEGORIES = (2, 20)
DOUGHNUT_CATEGORIES = (2, 8)

class Recommendation(BaseModel):
    type: ChartType
    x_axis: str
    y_axis: str
    title: str
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str

    def to_chart(self) -> ChartConfig:
        return ChartConfig(type=self.type, x_axis=self.x_axis, y_axis=self.y_axis, title=self.title)

def _category_count(col: Column) -> int:
    return len(col.unique_values or [])

def _in_range(n: int, bounds: tuple) -> bool:
    lo, hi = bounds
    return lo <= n <= hi

def recommend(columns: Sequence[Column]) -> List[Recommendation]:
    """Rank chart suggestions from column metadata alone, best first (at most 5)."""
    numeric = [c for c in columns if c.type == ColumnType.NUMERIC]
    categorical = [c for c in columns if c.type in (ColumnType.CATEGORICAL, ColumnType.TEXT)]
    dates = [c for c in columns if c.type == ColumnType.DATE]

    out: List[Recommendation] = []
    if not numeric:
        return out

    if dates:
        for num in numeric:
            out.append(Recommendation(
                type=ChartType.LINE,
                x_axis=dates[0].name,
                y_axis=num.name,
                title=f"{num.name} Over Time",
                confidence=LINE_CONFIDENCE,
                reason="Date column detected - line chart ideal for time series",
            ))

    for cat in categorical[:2]:
        n = _category_count(cat)
        if not _in_range(n, BAR_CATEGORIES):
            continue
        for num in numeric[:2]:
            out.append(Recommendation(
                type=ChartType.BAR,
                x_axis=cat.name,
                y_axis=num.name,
                title=f"{num.name} by {cat.name}",
                confidence=BAR_CONFIDENCE,
                reason=f"Categorical data with {n} categories - bar chart recommended",
            ))

    if categorical:
        cat, num = categorical[0], numeric[0]
        n = _category_count(cat)
        if _in_range(n, DOUGHNUT_CATEGORIES):
            out.append(Recommendation(
                type=ChartType.DOUGHNUT,
                x_axis=cat.name,
                y_axis=num.name,
                title=f"{num.name} Distribution by {cat.name}",
                confidence=DOUGHNUT_CONFIDENCE,
                reason=f"Good for showing proportions with {n} categories",
            ))

    # sorted() is stable, ties keep generation order
    out = sorted(out, key=lambda r: r.confidence, reverse=True)
    return out[:MAX_RECOMMENDATIONS]

import uuid
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Scalar = Union[bool, int, float, str, None]
Row = dict[str, Any]  # {col: Scalar}

class ColumnType(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    DATE = "date"
    TEXT = "text"

class Column(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: ColumnType
    # only for categorical columns, in first-appearance order
    unique_values: Optional[list[Scalar]] = None

class RangeFilter(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self.min is not None or self.max is not None

class MembershipFilter(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    values: list[Scalar] = Field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return len(self.values) > 0

ColumnFilter = Union[RangeFilter, MembershipFilter]

class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

class SortSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: Optional[str] = None
    direction: SortDirection = SortDirection.ASC

class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_page: int = Field(default=1, ge=1)
    rows_per_page: int = Field(default=10, gt=0)

class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    AREA = "area"
    PIE = "pie"
    DOUGHNUT = "doughnut"

def new_chart_id() -> str:
    return f"chart_{uuid.uuid4().hex[:16]}"

class ChartConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_chart_id)
    type: ChartType
    x_axis: str = Field(min_length=1)
    y_axis: str = Field(min_length=1)
    title: str = Field(min_length=1)

class Table(BaseModel):
    rows: list[Row]
    columns: list[Column]

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def row_count(self) -> int:
        return len(self.rows)

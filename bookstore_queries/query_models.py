"""
Structured request objects for every driver call the runner makes.

Filters are tagged variants selected by ``kind``:

    eq      ``Equals``: field equals a literal
    range   ``Range``: field compared with one or more bounds (gt/gte/lt/lte)
    and     ``AllOf``: every sub-condition must hold

``ir_compiler`` turns these models into MongoDB documents; nothing else in the
package builds raw filter dicts.
"""

from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_validator

ASCENDING = 1
DESCENDING = -1

SortDirection = Literal[1, -1]


# ---------------------- FILTERS ----------------------


class Equals(BaseModel):
    kind: Literal["eq"] = "eq"
    field: str
    value: Any


class Range(BaseModel):
    kind: Literal["range"] = "range"
    field: str
    gt: Optional[Any] = None
    gte: Optional[Any] = None
    lt: Optional[Any] = None
    lte: Optional[Any] = None

    @model_validator(mode="after")
    def require_bound(self) -> "Range":
        if self.gt is None and self.gte is None and self.lt is None and self.lte is None:
            raise ValueError(f"Range on '{self.field}' needs at least one bound")
        return self


Comparison = Union[Equals, Range]


class AllOf(BaseModel):
    kind: Literal["and"] = "and"
    conditions: List[Comparison] = Field(..., min_length=1)


Condition = Union[Equals, Range, AllOf]


# ---------------------- READS ----------------------


class Projection(BaseModel):
    include: List[str] = Field(..., min_length=1)
    include_id: bool = True


class SortKey(BaseModel):
    field: str
    direction: SortDirection = ASCENDING


class Page(BaseModel):
    """1-based page of ``size`` documents."""

    size: int = Field(..., ge=1)
    number: int = Field(..., ge=1)

    @property
    def skip(self) -> int:
        return self.size * (self.number - 1)


class FindRequest(BaseModel):
    filter: Optional[Condition] = None
    projection: Optional[Projection] = None
    sort: Optional[SortKey] = None
    page: Optional[Page] = None


# ---------------------- WRITES ----------------------


class UpdateRequest(BaseModel):
    filter: Condition
    set_fields: Dict[str, Any]


class DeleteRequest(BaseModel):
    filter: Condition


# ---------------------- AGGREGATION ----------------------


class GroupAverage(BaseModel):
    """Average of ``value_field`` per distinct ``group_field``, highest first."""

    kind: Literal["group_average"] = "group_average"
    group_field: str
    value_field: str
    output_field: str = "avgPrice"


class GroupCount(BaseModel):
    """Document count per distinct ``group_field``, largest first."""

    kind: Literal["group_count"] = "group_count"
    group_field: str
    output_field: str = "count"
    limit: Optional[int] = Field(default=None, ge=1)


class DecadeCount(BaseModel):
    """Document count per decade of ``year_field``; keys look like ``"1940s"``."""

    kind: Literal["decade_count"] = "decade_count"
    year_field: str
    output_field: str = "count"


AggregateRequest = Union[GroupAverage, GroupCount, DecadeCount]


# ---------------------- INDEXES / EXPLAIN ----------------------


class IndexRequest(BaseModel):
    keys: List[Tuple[str, SortDirection]] = Field(..., min_length=1)


class ExplainRequest(BaseModel):
    filter: Condition

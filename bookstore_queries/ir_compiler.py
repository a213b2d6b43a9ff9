"""
Request-model-to-MongoDB compiler.

Every builder returns plain dicts/lists ready to hand to ``pymongo``:

  - ``Equals``             → ``{field: value}``
  - ``Range``              → ``{field: {"$gt": …, "$lte": …}}``
  - ``AllOf``              → conditions merged into one document when their
                             fields are distinct, otherwise ``{"$and": [...]}``
  - ``GroupAverage`` etc.  → aggregation pipelines (``$group`` → ``$sort`` → ``$limit``)
"""

from typing import Any, Dict, List, Optional, Tuple

from .query_models import (
    AggregateRequest,
    AllOf,
    Condition,
    DecadeCount,
    Equals,
    GroupAverage,
    GroupCount,
    IndexRequest,
    Projection,
    Range,
    SortKey,
    UpdateRequest,
)

_RANGE_OPERATORS = (("gt", "$gt"), ("gte", "$gte"), ("lt", "$lt"), ("lte", "$lte"))


# ---------------------- FILTERS ----------------------

def _build_range(condition: Range) -> Dict[str, Any]:
    bounds = {
        mongo_op: getattr(condition, attr)
        for attr, mongo_op in _RANGE_OPERATORS
        if getattr(condition, attr) is not None
    }
    return {condition.field: bounds}


def build_match_stage(condition: Optional[Condition]) -> Dict[str, Any]:
    """Build a MongoDB filter document. ``None`` matches every document."""
    if condition is None:
        return {}

    if isinstance(condition, Equals):
        return {condition.field: condition.value}

    if isinstance(condition, Range):
        return _build_range(condition)

    if isinstance(condition, AllOf):
        parts = [build_match_stage(c) for c in condition.conditions]
        if len(parts) == 1:
            return parts[0]

        fields = [c.field for c in condition.conditions]
        if len(set(fields)) == len(fields):
            merged: Dict[str, Any] = {}
            for part in parts:
                merged.update(part)
            return merged

        # same field constrained twice: keep both predicates explicit
        return {"$and": parts}

    raise TypeError(f"Unsupported condition: {condition!r}")


# ---------------------- READ OPTIONS ----------------------

def build_projection(projection: Optional[Projection]) -> Optional[Dict[str, int]]:
    """Convert a ``Projection`` into a MongoDB projection dict."""
    if projection is None:
        return None
    spec = {f: 1 for f in projection.include}
    if not projection.include_id:
        spec["_id"] = 0
    return spec


def build_sort(sort: Optional[SortKey]) -> Optional[List[Tuple[str, int]]]:
    if sort is None:
        return None
    return [(sort.field, sort.direction)]


# ---------------------- WRITES ----------------------

def build_update(request: UpdateRequest) -> Dict[str, Any]:
    return {"$set": dict(request.set_fields)}


# ---------------------- INDEXES ----------------------

def build_index_keys(request: IndexRequest) -> List[Tuple[str, int]]:
    return [(field, direction) for field, direction in request.keys]


# ---------------------- AGGREGATION ----------------------

def _decade_key(year_field: str) -> Dict[str, Any]:
    """``published_year - published_year % 10`` as a string, suffixed with "s"."""
    year = f"${year_field}"
    return {
        "$concat": [
            {"$toString": {"$subtract": [year, {"$mod": [year, 10]}]}},
            "s",
        ]
    }


def build_pipeline(request: AggregateRequest) -> List[Dict[str, Any]]:
    """Compile an aggregation request into a pipeline."""
    pipeline: List[Dict[str, Any]] = []

    if isinstance(request, GroupAverage):
        pipeline.append({
            "$group": {
                "_id": f"${request.group_field}",
                request.output_field: {"$avg": f"${request.value_field}"},
            }
        })
        pipeline.append({"$sort": {request.output_field: -1}})

    elif isinstance(request, GroupCount):
        pipeline.append({
            "$group": {
                "_id": f"${request.group_field}",
                request.output_field: {"$sum": 1},
            }
        })
        pipeline.append({"$sort": {request.output_field: -1}})
        if request.limit is not None:
            pipeline.append({"$limit": request.limit})

    elif isinstance(request, DecadeCount):
        pipeline.append({
            "$group": {
                "_id": _decade_key(request.year_field),
                request.output_field: {"$sum": 1},
            }
        })
        # string keys: lexicographic order
        pipeline.append({"$sort": {"_id": 1}})

    else:
        raise TypeError(f"Unsupported aggregation: {request!r}")

    return pipeline

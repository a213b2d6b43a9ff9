"""
Database executor: one function per driver call made by the runner.

Each function takes the collection handle explicitly and a request model,
compiles the request with ``ir_compiler`` and returns plain Python data.
Driver errors (``pymongo.errors.PyMongoError``) propagate to the caller.
"""

from typing import Any, Dict, List

from pymongo.collection import Collection

from .ir_compiler import (
    build_index_keys,
    build_match_stage,
    build_pipeline,
    build_projection,
    build_sort,
    build_update,
)
from .logger import logger
from .query_models import (
    AggregateRequest,
    DeleteRequest,
    ExplainRequest,
    FindRequest,
    IndexRequest,
    UpdateRequest,
)


# ---------------------- READS ----------------------

def find_documents(collection: Collection, request: FindRequest) -> List[Dict[str, Any]]:
    """Run a find with optional filter, projection, sort and page.

    Sort is applied before skip/limit, matching server-side cursor semantics.
    """
    mongo_filter = build_match_stage(request.filter)
    projection = build_projection(request.projection)

    logger.debug("find filter=%s projection=%s", mongo_filter, projection)

    cursor = collection.find(mongo_filter, projection)

    sort = build_sort(request.sort)
    if sort:
        cursor = cursor.sort(sort)

    if request.page is not None:
        cursor = cursor.skip(request.page.skip).limit(request.page.size)

    return list(cursor)


def aggregate_documents(collection: Collection, request: AggregateRequest) -> List[Dict[str, Any]]:
    pipeline = build_pipeline(request)
    logger.debug("aggregate pipeline=%s", pipeline)
    return list(collection.aggregate(pipeline))


def explain_query(collection: Collection, request: ExplainRequest) -> Dict[str, Any]:
    """Return the server's explain document for a find on ``request.filter``."""
    mongo_filter = build_match_stage(request.filter)
    logger.debug("explain filter=%s", mongo_filter)
    return collection.find(mongo_filter).explain()


# ---------------------- WRITES ----------------------

def update_document(collection: Collection, request: UpdateRequest) -> int:
    """Apply ``$set`` to the first matching document; return the modified count."""
    result = collection.update_one(
        build_match_stage(request.filter),
        build_update(request),
    )
    return result.modified_count


def delete_document(collection: Collection, request: DeleteRequest) -> int:
    """Delete the first matching document; return the deleted count."""
    result = collection.delete_one(build_match_stage(request.filter))
    return result.deleted_count


def create_index(collection: Collection, request: IndexRequest) -> str:
    """Create an index and return the name the server assigned to it."""
    return collection.create_index(build_index_keys(request))

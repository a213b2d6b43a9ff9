"""
The fixed, ordered catalogue of bookstore queries.

Each ``QueryStep`` pairs a log label with an action that takes the collection
handle and returns something ``response_formatter.format_result`` can render,
or ``None`` when the label alone is logged.
Steps do not depend on each other's results.
"""

from functools import partial
from typing import Any, Callable, List, NamedTuple

from pymongo.collection import Collection

from .db_executor import (
    aggregate_documents,
    create_index,
    delete_document,
    explain_query,
    find_documents,
    update_document,
)
from .logger import logger
from .query_models import (
    ASCENDING,
    DESCENDING,
    AllOf,
    DecadeCount,
    DeleteRequest,
    Equals,
    ExplainRequest,
    FindRequest,
    GroupAverage,
    GroupCount,
    IndexRequest,
    Page,
    Projection,
    Range,
    SortKey,
    UpdateRequest,
)

# ---------------------- QUERY LITERALS ----------------------

GENRE = "Fiction"
PUBLISHED_AFTER = 1950
AUTHOR = "George Orwell"

TITLE_TO_UPDATE = "1984"
NEW_PRICE = 15.99
TITLE_TO_DELETE = "Animal Farm"

RECENT_AFTER = 2010
PROJECTED_FIELDS = ["title", "author", "price"]

PAGE_SIZE = 5
PAGE_NUMBER = 2

EXPLAIN_TITLE = "1984"
EXPLAIN_AUTHOR = "George Orwell"
EXPLAIN_YEAR = 1949


class QueryStep(NamedTuple):
    label: str
    action: Callable[[Collection], Any]


def _exactly_one(operation: Callable[..., int], request: Any) -> Callable[[Collection], bool]:
    """Wrap a write so the step reports success iff one document was affected."""
    def run(collection: Collection) -> bool:
        return operation(collection, request) == 1
    return run


def _create_index_step(request: IndexRequest) -> Callable[[Collection], None]:
    """Create the index; the step logs its label only."""
    def run(collection: Collection) -> None:
        name = create_index(collection, request)
        logger.debug("index name=%s", name)
    return run


def build_steps() -> List[QueryStep]:
    """Return the seventeen bookstore operations in execution order."""
    return [
        # -------- basic CRUD --------
        QueryStep(
            f"Books in genre '{GENRE}':",
            partial(find_documents, request=FindRequest(filter=Equals(field="genre", value=GENRE))),
        ),
        QueryStep(
            f"Books published after {PUBLISHED_AFTER}:",
            partial(find_documents, request=FindRequest(
                filter=Range(field="published_year", gt=PUBLISHED_AFTER),
            )),
        ),
        QueryStep(
            f"Books by '{AUTHOR}':",
            partial(find_documents, request=FindRequest(filter=Equals(field="author", value=AUTHOR))),
        ),
        QueryStep(
            f"Updated price of '{TITLE_TO_UPDATE}':",
            _exactly_one(update_document, UpdateRequest(
                filter=Equals(field="title", value=TITLE_TO_UPDATE),
                set_fields={"price": NEW_PRICE},
            )),
        ),
        QueryStep(
            f"Deleted '{TITLE_TO_DELETE}':",
            _exactly_one(delete_document, DeleteRequest(
                filter=Equals(field="title", value=TITLE_TO_DELETE),
            )),
        ),

        # -------- advanced queries --------
        QueryStep(
            f"Books in stock and published after {RECENT_AFTER}:",
            partial(find_documents, request=FindRequest(filter=AllOf(conditions=[
                Equals(field="in_stock", value=True),
                Range(field="published_year", gt=RECENT_AFTER),
            ]))),
        ),
        QueryStep(
            "Projection (title, author, price) of all books:",
            partial(find_documents, request=FindRequest(
                projection=Projection(include=PROJECTED_FIELDS, include_id=False),
            )),
        ),
        QueryStep(
            "Books sorted by price ascending:",
            partial(find_documents, request=FindRequest(sort=SortKey(field="price", direction=ASCENDING))),
        ),
        QueryStep(
            "Books sorted by price descending:",
            partial(find_documents, request=FindRequest(sort=SortKey(field="price", direction=DESCENDING))),
        ),
        QueryStep(
            f"Page {PAGE_NUMBER} with {PAGE_SIZE} books per page:",
            partial(find_documents, request=FindRequest(page=Page(size=PAGE_SIZE, number=PAGE_NUMBER))),
        ),

        # -------- aggregation pipelines --------
        QueryStep(
            "Average price by genre:",
            partial(aggregate_documents, request=GroupAverage(
                group_field="genre", value_field="price", output_field="avgPrice",
            )),
        ),
        QueryStep(
            "Author with most books:",
            partial(aggregate_documents, request=GroupCount(
                group_field="author", output_field="bookCount", limit=1,
            )),
        ),
        QueryStep(
            "Books grouped by decade:",
            partial(aggregate_documents, request=DecadeCount(year_field="published_year")),
        ),

        # -------- indexing --------
        QueryStep(
            "Created index on title",
            _create_index_step(IndexRequest(keys=[("title", ASCENDING)])),
        ),
        QueryStep(
            "Created compound index on author and published_year",
            _create_index_step(IndexRequest(
                keys=[("author", ASCENDING), ("published_year", DESCENDING)],
            )),
        ),
        QueryStep(
            f'Explain for query on title "{EXPLAIN_TITLE}":',
            partial(explain_query, request=ExplainRequest(
                filter=Equals(field="title", value=EXPLAIN_TITLE),
            )),
        ),
        QueryStep(
            f'Explain for query on author "{EXPLAIN_AUTHOR}" and published_year {EXPLAIN_YEAR}:',
            partial(explain_query, request=ExplainRequest(filter=AllOf(conditions=[
                Equals(field="author", value=EXPLAIN_AUTHOR),
                Equals(field="published_year", value=EXPLAIN_YEAR),
            ]))),
        ),
    ]

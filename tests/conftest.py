"""
Pytest fixtures for bookstore-queries tests.

Provides an in-memory stand-in for the subset of the pymongo API the package
calls (client → database → collection → cursor), so tests run without a
MongoDB server.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import pytest
from bson import ObjectId


@dataclass
class MockUpdateResult:
    matched_count: int
    modified_count: int


@dataclass
class MockDeleteResult:
    deleted_count: int


def _matches(doc: dict[str, Any], filter: dict[str, Any] | None) -> bool:
    """Check if document matches filter."""
    if not filter:
        return True

    for key, value in filter.items():
        if key == "$and":
            if not all(_matches(doc, f) for f in value):
                return False
            continue

        doc_value = doc.get(key)

        if isinstance(value, dict):
            for op, op_value in value.items():
                if op == "$gt":
                    if doc_value is None or doc_value <= op_value:
                        return False
                elif op == "$gte":
                    if doc_value is None or doc_value < op_value:
                        return False
                elif op == "$lt":
                    if doc_value is None or doc_value >= op_value:
                        return False
                elif op == "$lte":
                    if doc_value is None or doc_value > op_value:
                        return False
                else:
                    raise NotImplementedError(op)
        elif doc_value != value:
            return False

    return True


def _project(doc: dict[str, Any], projection: dict[str, int] | None) -> dict[str, Any]:
    """Apply an inclusion projection to a document."""
    if not projection:
        return dict(doc)

    result = {k: doc[k] for k, v in projection.items() if v and k in doc}
    if "_id" in doc and projection.get("_id", 1) != 0:
        result["_id"] = doc["_id"]
    return result


def _sort(docs: list[dict[str, Any]], keys: list[tuple[str, int]]) -> list[dict[str, Any]]:
    """Stable multi-key sort; ties keep their original order."""
    results = list(docs)
    for field, direction in reversed(keys):
        results.sort(key=lambda d: d.get(field), reverse=(direction == -1))
    return results


def _eval_expr(doc: dict[str, Any], expr: Any) -> Any:
    """Evaluate the aggregation expressions the package uses."""
    if isinstance(expr, str) and expr.startswith("$"):
        return doc.get(expr[1:])
    if isinstance(expr, dict):
        (op, args), = expr.items()
        if op == "$concat":
            return "".join(_eval_expr(doc, a) for a in args)
        if op == "$toString":
            return str(_eval_expr(doc, args))
        if op == "$subtract":
            return _eval_expr(doc, args[0]) - _eval_expr(doc, args[1])
        if op == "$mod":
            return _eval_expr(doc, args[0]) % _eval_expr(doc, args[1])
        raise NotImplementedError(op)
    return expr


def _group(docs: list[dict[str, Any]], spec: dict[str, Any]) -> list[dict[str, Any]]:
    groups: dict[Any, list[dict[str, Any]]] = {}
    for doc in docs:
        groups.setdefault(_eval_expr(doc, spec["_id"]), []).append(doc)

    results = []
    for key, members in groups.items():
        out: dict[str, Any] = {"_id": key}
        for name, accumulator in spec.items():
            if name == "_id":
                continue
            (op, arg), = accumulator.items()
            values = [_eval_expr(d, arg) for d in members]
            if op == "$sum":
                out[name] = sum(values)
            elif op == "$avg":
                out[name] = sum(values) / len(values)
            else:
                raise NotImplementedError(op)
        results.append(out)
    return results


class MockCursor:
    """Lazy cursor: sort, then skip, then limit, applied on iteration."""

    def __init__(self, docs: list[dict[str, Any]], examined: int) -> None:
        self._docs = docs
        self._examined = examined
        self._sort: list[tuple[str, int]] = []
        self._skip = 0
        self._limit = 0

    def sort(self, keys: list[tuple[str, int]]) -> MockCursor:
        self._sort = list(keys)
        return self

    def skip(self, n: int) -> MockCursor:
        self._skip = n
        return self

    def limit(self, n: int) -> MockCursor:
        self._limit = n
        return self

    def _results(self) -> list[dict[str, Any]]:
        results = _sort(self._docs, self._sort) if self._sort else list(self._docs)
        results = results[self._skip:]
        if self._limit:
            results = results[:self._limit]
        return results

    def __iter__(self):
        return iter(self._results())

    def explain(self) -> dict[str, Any]:
        returned = len(self._results())
        return {
            "queryPlanner": {"winningPlan": {"stage": "COLLSCAN"}},
            "executionStats": {
                "executionSuccess": True,
                "nReturned": returned,
                "executionTimeMillis": 0,
                "totalKeysExamined": 0,
                "totalDocsExamined": self._examined,
            },
            "ok": 1.0,
        }


class MockCollection:
    def __init__(self, database: MockDatabase, name: str) -> None:
        self.database = database
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.indexes: list[str] = ["_id_"]

    def insert_many(self, documents: list[dict[str, Any]]) -> None:
        for doc in documents:
            stored = dict(doc)
            stored.setdefault("_id", ObjectId())
            self.docs.append(stored)

    def find(self, filter: dict[str, Any] | None = None, projection: dict[str, int] | None = None) -> MockCursor:
        matched = [_project(d, projection) for d in self.docs if _matches(d, filter)]
        return MockCursor(matched, examined=len(self.docs))

    def update_one(self, filter: dict[str, Any], update: dict[str, Any]) -> MockUpdateResult:
        for doc in self.docs:
            if _matches(doc, filter):
                modified = False
                for key, value in update["$set"].items():
                    if doc.get(key) != value:
                        doc[key] = value
                        modified = True
                return MockUpdateResult(matched_count=1, modified_count=int(modified))
        return MockUpdateResult(matched_count=0, modified_count=0)

    def delete_one(self, filter: dict[str, Any]) -> MockDeleteResult:
        for i, doc in enumerate(self.docs):
            if _matches(doc, filter):
                del self.docs[i]
                return MockDeleteResult(deleted_count=1)
        return MockDeleteResult(deleted_count=0)

    def aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        results = [dict(d) for d in self.docs]
        for stage in pipeline:
            (op, spec), = stage.items()
            if op == "$match":
                results = [d for d in results if _matches(d, spec)]
            elif op == "$group":
                results = _group(results, spec)
            elif op == "$sort":
                results = _sort(results, list(spec.items()))
            elif op == "$limit":
                results = results[:spec]
            else:
                raise NotImplementedError(op)
        return results

    def create_index(self, keys: list[tuple[str, int]]) -> str:
        name = "_".join(f"{field}_{direction}" for field, direction in keys)
        if name not in self.indexes:
            self.indexes.append(name)
        return name


class MockDatabase:
    def __init__(self, name: str) -> None:
        self.name = name
        self._collections: dict[str, MockCollection] = {}

    def __getitem__(self, name: str) -> MockCollection:
        if name not in self._collections:
            self._collections[name] = MockCollection(self, name)
        return self._collections[name]

    def command(self, command: str, *args: Any, **kwargs: Any) -> dict[str, Any]:
        return {"ok": 1.0}


class MockClient:
    def __init__(self) -> None:
        self._databases: dict[str, MockDatabase] = {}
        self.admin = MockDatabase("admin")
        self.closed = False

    def __getitem__(self, name: str) -> MockDatabase:
        if name not in self._databases:
            self._databases[name] = MockDatabase(name)
        return self._databases[name]

    def close(self) -> None:
        self.closed = True


def _book(title, author, genre, published_year, price, in_stock):
    return {
        "title": title,
        "author": author,
        "genre": genre,
        "published_year": published_year,
        "price": price,
        "in_stock": in_stock,
    }


SAMPLE_BOOKS = [
    _book("To Kill a Mockingbird", "Harper Lee", "Fiction", 1960, 12.99, True),
    _book("1984", "George Orwell", "Dystopian", 1949, 10.99, True),
    _book("The Great Gatsby", "F. Scott Fitzgerald", "Fiction", 1925, 9.99, True),
    _book("Brave New World", "Aldous Huxley", "Dystopian", 1932, 11.50, False),
    _book("The Hobbit", "J.R.R. Tolkien", "Fantasy", 1937, 14.99, True),
    _book("The Catcher in the Rye", "J.D. Salinger", "Fiction", 1951, 8.99, True),
    _book("Pride and Prejudice", "Jane Austen", "Romance", 1813, 7.99, True),
    _book("The Lord of the Rings", "J.R.R. Tolkien", "Fantasy", 1954, 19.99, True),
    _book("Animal Farm", "George Orwell", "Political Satire", 1945, 8.50, False),
    _book("The Alchemist", "Paulo Coelho", "Fiction", 1988, 10.99, True),
    _book("The Night Circus", "Erin Morgenstern", "Fantasy", 2011, 13.99, True),
    _book("Project Hail Mary", "Andy Weir", "Science Fiction", 2021, 16.99, False),
]

ORWELL_BOOKS = [
    _book("1984", "George Orwell", "Fiction", 1949, 10.00, True),
    _book("Animal Farm", "George Orwell", "Fiction", 1945, 8.00, True),
]


@pytest.fixture
def mock_client(monkeypatch: pytest.MonkeyPatch) -> MockClient:
    """A MockClient that ``cluster_manager.create_client`` will hand out."""
    client = MockClient()
    monkeypatch.setattr(
        "bookstore_queries.cluster_manager.MongoClient",
        lambda *args, **kwargs: client,
    )
    return client


@pytest.fixture
def empty_collection() -> MockCollection:
    return MockClient()["plp_bookstore"]["books"]


@pytest.fixture
def books(empty_collection: MockCollection) -> MockCollection:
    """The twelve-book fixture collection, in natural (insertion) order."""
    empty_collection.insert_many(SAMPLE_BOOKS)
    return empty_collection


@pytest.fixture
def package_logs(caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch) -> pytest.LogCaptureFixture:
    """caplog wired to the package logger, which does not propagate by default."""
    from bookstore_queries.logger import logger

    monkeypatch.setattr(logger, "propagate", True)
    caplog.set_level(logging.INFO, logger="bookstore_queries")
    return caplog

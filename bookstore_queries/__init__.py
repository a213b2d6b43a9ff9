"""
bookstore-queries: runs a fixed sequence of CRUD, aggregation, index and
explain operations against the ``books`` collection and logs every result.

Usage:
    python -m bookstore_queries

Connection settings come from ``MONGO_URI``, ``DATABASE_NAME`` and
``COLLECTION_NAME`` (environment or ``.env``).
"""

__version__ = "1.0.0"

"""
Query runner: connect → run every step in order → close.

The client is created inside the guarded block, the collection handle derived
from it is passed to each step, and ``client.close()`` runs on every exit path
once a client exists. Steps that return ``None`` log their label alone. The first
database error ends the sequence; writes already applied stay applied.
"""

from typing import List, Optional

from pymongo.errors import PyMongoError

from .cluster_manager import connect_to_cluster, create_client
from .config import COLLECTION_NAME, DATABASE_NAME, MONGO_URI
from .logger import logger
from .queries import QueryStep, build_steps
from .response_formatter import format_result


def run_queries(
    mongo_uri: str = MONGO_URI,
    database_name: str = DATABASE_NAME,
    collection_name: str = COLLECTION_NAME,
    steps: Optional[List[QueryStep]] = None,
) -> int:
    """Run ``steps`` (default: the bookstore catalogue) and return how many completed."""
    if steps is None:
        steps = build_steps()

    completed = 0
    client = None
    try:
        client = create_client(mongo_uri)
        connect_to_cluster(client)
        logger.info("Connected to MongoDB")

        collection = client[database_name][collection_name]

        for step in steps:
            result = step.action(collection)
            if result is None:
                logger.info(step.label)
            else:
                logger.info("%s %s", step.label, format_result(result))
            completed += 1

    except PyMongoError as e:
        logger.error("Error: %s", e)
    finally:
        if client is not None:
            client.close()
            logger.info("Connection closed")

    return completed


def main() -> None:
    run_queries()

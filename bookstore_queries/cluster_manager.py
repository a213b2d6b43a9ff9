from pymongo import MongoClient

from .config import SERVER_SELECTION_TIMEOUT_MS


def create_client(mongo_uri: str) -> MongoClient:
    """Create a MongoClient. No network traffic happens until first use."""
    return MongoClient(mongo_uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS)


def connect_to_cluster(client: MongoClient) -> None:
    """Force a round trip so connection failures surface here.

    Raises ``ConnectionFailure`` / ``ServerSelectionTimeoutError`` from
    ``pymongo.errors`` when the deployment is unreachable.
    """
    client.admin.command("ping")

import os
from dotenv import load_dotenv

load_dotenv()

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "plp_bookstore")
COLLECTION_NAME = os.getenv("COLLECTION_NAME", "books")

# Bounds the initial connection check only; queries themselves have no timeout.
SERVER_SELECTION_TIMEOUT_MS = int(os.getenv("SERVER_SELECTION_TIMEOUT_MS", "5000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

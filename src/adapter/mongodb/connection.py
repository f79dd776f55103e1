"""MongoDB client shared by the user store and the health check."""

import os
import logging
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

# Driver-level logs are noisy at INFO
logging.getLogger('pymongo').setLevel(logging.WARNING)

MONGO_URL = os.getenv('MONGO_URL')
DATABASE_NAME = os.getenv('MONGODB_DATABASE', 'opensignup')
USERS_COLLECTION_NAME = os.getenv('SIGNUP_USERS_COLLECTION', 'users')

CLIENT_OPTIONS = {
    'serverSelectionTimeoutMS': 5000,
    'connectTimeoutMS': 5000,
    'socketTimeoutMS': 30000,
    'maxPoolSize': 10,
    'retryWrites': True,
    'retryReads': True,
}


class _ClientHolder:
    """Process-wide client cache.

    A missing URL or a failed first connection is treated as a
    configuration problem and not retried. A client that connected once
    and later stops answering is rebuilt on the next call.
    """

    def __init__(self):
        self.client: MongoClient | None = None
        self.ever_connected = False
        self.disabled = False

    def get(self) -> MongoClient | None:
        if self.client is not None:
            if _ping(self.client):
                return self.client
            logger.warning("MongoDB client stopped answering, reconnecting")
            self.client = None

        if self.disabled:
            return None

        if not MONGO_URL:
            logger.error("MONGO_URL is not configured")
            self.disabled = True
            return None

        try:
            client = MongoClient(MONGO_URL, **CLIENT_OPTIONS)
            client.admin.command('ping')
        except PyMongoError as e:
            if not self.ever_connected:
                logger.error("Initial MongoDB connection failed", extra={"error": str(e)[:200]})
                self.disabled = True
            return None

        if not self.ever_connected:
            logger.info("Connected to MongoDB", extra={"database": DATABASE_NAME})
        self.ever_connected = True
        self.client = client
        return client


def _ping(client: MongoClient) -> bool:
    try:
        client.admin.command('ping')
        return True
    except PyMongoError:
        return False


_holder = _ClientHolder()


def get_mongodb_client() -> MongoClient | None:
    """Cached MongoDB client, or None when the database is unreachable."""
    return _holder.get()


def get_database() -> Database | None:
    client = get_mongodb_client()
    return client[DATABASE_NAME] if client is not None else None


def reset_client():
    global _holder
    _holder = _ClientHolder()

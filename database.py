"""
MongoDB connection helpers.

``connect`` opens a client against ``settings.database_url``, checks that
the server answers within the configured timeout and returns the
``reality_show`` database handle.  The handle is created once at startup
and shared by every request; pymongo clients are thread-safe.
"""
import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class DatabaseConnectionError(ConnectionError):
    """The document store could not be reached or refused our credentials."""


def connect(settings: Optional[Settings] = None) -> Database:
    settings = settings or default_settings
    if not settings.database_url:
        logger.error("DATABASE_URL is not set")
        raise DatabaseConnectionError("DATABASE_URL is not set")

    client = None
    try:
        client = MongoClient(
            settings.database_url,
            server_api=ServerApi("1"),
            connectTimeoutMS=settings.connect_timeout_ms,
            serverSelectionTimeoutMS=settings.connect_timeout_ms,
        )
        # MongoClient connects lazily; ping forces the handshake and auth
        client.admin.command("ping")
    except PyMongoError as e:
        logger.error("Could not connect to MongoDB: %s", e)
        if client is not None:
            client.close()
        raise DatabaseConnectionError(str(e)) from e

    logger.info("Connected to MongoDB database %r", settings.database_name)
    return client[settings.database_name]


def close(db: Optional[Database]) -> None:
    if db is not None:
        db.client.close()

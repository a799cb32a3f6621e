"""
MongoDB connection lifecycle.

One MongoClient per process: opened on startup, closed on shutdown.
Routes get the database through the get_db dependency.
"""
import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

import config
from errors import StoreError

logger = logging.getLogger("quiz.database")

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def connect(url: Optional[str] = None, name: Optional[str] = None) -> Database:
    global _client, _db
    if _db is not None:
        return _db
    _client = MongoClient(url or config.DATABASE_URL, tz_aware=True)
    _db = _client[name or config.DATABASE_NAME]
    logger.info("MongoDB client created for database %s", _db.name)
    return _db


def disconnect() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
        logger.info("MongoDB client closed")
    _client = None
    _db = None


def get_db() -> Database:
    if _db is None:
        raise StoreError("Database not configured")
    return _db

# app/core/database.py
from functools import lru_cache

from pymongo import AsyncMongoClient

from app.core.config import CONFIG
from app.core.logger import get_logger

log = get_logger("database")


@lru_cache(maxsize=1)
def get_client() -> AsyncMongoClient:
    # AsyncMongoClient connects on first operation, not here
    log.info("Creating Mongo client for database %s", CONFIG.DATABASE_NAME)
    return AsyncMongoClient(CONFIG.MONGO_URI)


def get_database():
    return get_client()[CONFIG.DATABASE_NAME]


def get_collections():
    """
    Returns (subjects, students) collections.
    """
    db = get_database()
    return db["subjects"], db["students"]

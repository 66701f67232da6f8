# app/api/deps.py
from functools import lru_cache

from app.services.record_store import MongoRecordStore
from app.services.registry import RecordsRegistry


@lru_cache(maxsize=1)
def get_store() -> MongoRecordStore:
    return MongoRecordStore()


def get_registry() -> RecordsRegistry:
    """FastAPI dependency; tests override this with an in-memory store."""
    return RecordsRegistry(get_store())

from __future__ import annotations

"""
MongoDB connection helpers.

One ``MongoClient`` is shared per process; it is created lazily on first use
and closed on application shutdown.
"""

from typing import Iterator

from pymongo import MongoClient
from pymongo.database import Database

from app.config import settings

_client: MongoClient | None = None


def get_client() -> MongoClient:
    global _client
    if _client is None:
        # tz_aware keeps stored UTC datetimes comparable with utc_now()
        _client = MongoClient(
            settings.MONGODB_URI,
            tz_aware=True,
            serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        )
    return _client


def get_database() -> Database:
    return get_client()[settings.MONGODB_DB_NAME]


def get_db() -> Iterator[Database]:
    """FastAPI dependency yielding the mirror database."""
    yield get_database()


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None

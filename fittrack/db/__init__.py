"""Database package: engine, session, base, key-value store."""

from fittrack.db.kv_store import KeyValueStore, SqlKeyValueStore
from fittrack.db.session import async_session_maker, get_db

__all__ = ["KeyValueStore", "SqlKeyValueStore", "async_session_maker", "get_db"]

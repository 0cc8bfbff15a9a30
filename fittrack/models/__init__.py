"""ORM models - import all so Base.metadata is complete for migrations."""

from fittrack.models.kv_entry import KeyValueEntry

__all__ = [
    "KeyValueEntry",
]

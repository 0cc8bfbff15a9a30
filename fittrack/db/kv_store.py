"""Key-value store: string keys to JSON text, plus typed load/save helpers.

Every structured value is one JSON document under a namespaced key. Reads
never raise on missing or corrupt data; they log and fall back to the
documented default. Reads that feed a write pass strict=True so a storage
error propagates instead of being written back as an empty value. Writes
propagate errors to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Protocol, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class SqlKeyValueStore:
    """KeyValueStore over the kv_entries table. Each write is committed before returning."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, key: str) -> str | None:
        # Refresh from the database; another session may have committed since
        entry = await self._session.get(KeyValueEntry, key, populate_existing=True)
        return entry.value if entry is not None else None

    async def set(self, key: str, value: str) -> None:
        entry = await self._session.get(KeyValueEntry, key)
        if entry is None:
            self._session.add(KeyValueEntry(key=key, value=value))
        else:
            entry.value = value
        await self._session.commit()

    async def remove(self, key: str) -> None:
        entry = await self._session.get(KeyValueEntry, key)
        if entry is not None:
            await self._session.delete(entry)
            await self._session.commit()


async def _read_json(store: KeyValueStore, key: str, strict: bool = False) -> Any:
    """Raw decoded JSON under key, or None when missing, unreadable or corrupt.

    With strict=True a storage error is raised instead of read as missing.
    """
    try:
        raw = await store.get(key)
    except SQLAlchemyError as e:
        if strict:
            raise
        logger.warning("Storage read failed for %r: %s", key, e)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Corrupt JSON under %r; using default", key)
        return None


async def load_list(store: KeyValueStore, key: str, model: type[M], strict: bool = False) -> list[M]:
    """Load a JSON array of model records. Invalid items are dropped one by one."""
    data = await _read_json(store, key, strict)
    if not isinstance(data, list):
        if data is not None:
            logger.warning("Expected a list under %r; using empty list", key)
        return []
    items: list[M] = []
    for raw_item in data:
        try:
            items.append(model.model_validate(raw_item))
        except ValidationError:
            logger.warning("Dropping invalid %s under %r", model.__name__, key)
    return items


async def save_list(store: KeyValueStore, key: str, items: list[M]) -> None:
    await store.set(key, json.dumps([item.model_dump(mode="json") for item in items]))


async def load_model(
    store: KeyValueStore, key: str, model: type[M], default: Callable[[], M], strict: bool = False
) -> M:
    """Load one record; missing fields take model defaults, invalid data yields default()."""
    data = await _read_json(store, key, strict)
    if not isinstance(data, dict):
        return default()
    try:
        return model.model_validate(data)
    except ValidationError:
        logger.warning("Invalid %s under %r; using default", model.__name__, key)
        return default()


async def save_model(store: KeyValueStore, key: str, item: BaseModel) -> None:
    await store.set(key, item.model_dump_json())


async def load_scalar(store: KeyValueStore, key: str, expected: type, default: Any) -> Any:
    data = await _read_json(store, key)
    # bool is a subclass of int; keep the two apart
    if data is None or type(data) is not expected:
        return default
    return data


async def save_scalar(store: KeyValueStore, key: str, value: Any) -> None:
    await store.set(key, json.dumps(value))

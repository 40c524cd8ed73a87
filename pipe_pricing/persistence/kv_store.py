"""
Key-value storage port and adapters.

The stores only ever need ``get(key) -> str | None`` and ``set(key, value)``.
Adapters:
  - InMemoryKeyValueStore: tests and throwaway sessions
  - JsonFileKeyValueStore: one JSON file on local disk (default)
  - MongoKeyValueStore:    a MongoDB collection of {key, value} documents
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pipe_pricing.config import Settings, get_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """String key → string value storage, synchronous and process-local."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


# ── In-memory ────────────────────────────────────────────


class InMemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data.keys())


# ── JSON file ────────────────────────────────────────────


class JsonFileKeyValueStore:
    """All keys live in one JSON object on disk; writes replace the file atomically."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError) as e:
            logger.warning(f"Storage file {self.path} is unreadable, treating as empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Storage file {self.path} does not hold an object, treating as empty")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug(f"Wrote key '{key}' to {self.path}")


# ── MongoDB ──────────────────────────────────────────────


class MongoKeyValueStore:
    """
    Stores each key as a document {key, value} in one collection.
    The pymongo connection is opened lazily on first use.
    """

    def __init__(self, settings: Settings | None = None, collection: Any = None):
        self.settings = settings or get_settings()
        self._client: Any = None
        self._collection: Any = collection

    def _get_collection(self) -> Any:
        if self._collection is not None:
            return self._collection
        from pymongo import MongoClient

        self._client = MongoClient(self.settings.mongodb_uri)
        db = self._client[self.settings.mongodb_database]
        self._collection = db[self.settings.mongodb_collection]
        logger.info(
            f"Connected to MongoDB: {self.settings.mongodb_database}.{self.settings.mongodb_collection}"
        )
        return self._collection

    def get(self, key: str) -> str | None:
        try:
            doc = self._get_collection().find_one({"key": key})
        except Exception as e:
            logger.warning(f"MongoDB read of '{key}' failed, using defaults: {e}")
            return None
        if not doc:
            return None
        value = doc.get("value")
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self._get_collection().update_one(
            {"key": key},
            {"$set": {"key": key, "value": value}},
            upsert=True,
        )
        logger.debug(f"Wrote key '{key}' to MongoDB")

    def close(self) -> None:
        if self._client:
            self._client.close()
            logger.info("MongoDB connection closed")


def build_kv_store(settings: Settings | None = None) -> KeyValueStore:
    """Create the storage adapter selected by ``settings.storage_backend``."""
    settings = settings or get_settings()
    backend = settings.storage_backend.lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "file":
        return JsonFileKeyValueStore(settings.storage_file_path)
    if backend == "mongo":
        return MongoKeyValueStore(settings)
    raise ValueError(f"Unknown storage backend '{settings.storage_backend}'")

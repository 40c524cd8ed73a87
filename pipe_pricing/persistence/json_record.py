"""
JSON encoding of persisted records.

Reads never raise: a missing or corrupt record decodes to None and the
caller falls back to its defaults. Writes raise StoreWriteError when the
record cannot be serialized, so callers learn that nothing was saved.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pipe_pricing.errors import StoreWriteError
from pipe_pricing.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


def read_json(kv: KeyValueStore, key: str) -> Any:
    try:
        raw = kv.get(key)
    except Exception as e:
        logger.warning(f"Could not read '{key}' from storage, using defaults: {e}")
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        logger.warning(f"Stored '{key}' is not valid JSON, using defaults: {e}")
        return None


def write_json(kv: KeyValueStore, key: str, data: Any) -> None:
    try:
        raw = json.dumps(data, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise StoreWriteError(f"Cannot serialize '{key}': {e}") from e
    kv.set(key, raw)

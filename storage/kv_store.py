"""JSON key-value persistence on top of the ``kv_state`` table.

Reads fall back to a caller supplied default, writes never raise. Both
failure paths are logged.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable

from storage import sqlite_manager

LOGGER = logging.getLogger(__name__)

SHARE_HISTORY_KEY = "shareHistory"
LAST_ADDRESS_KEY = "lastAddress"


class KeyValueStore:
    """Durable JSON values keyed by fixed names."""

    def __init__(self, now_func: Callable[[], int] = lambda: int(time.time())) -> None:
        self._now = now_func

    def get(self, key: str, default: Any = None) -> Any:
        try:
            row = sqlite_manager.get_kv(key)
            if not row or row.get("value") is None:
                return default
            return json.loads(row["value"])
        except Exception as exc:
            LOGGER.error("Failed to load %s from storage: %s", key, exc)
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            payload = json.dumps(value, ensure_ascii=False)
            sqlite_manager.set_kv(key, payload, self._now())
            return True
        except Exception as exc:
            LOGGER.error("Failed to save %s to storage: %s", key, exc)
            return False


__all__ = ["KeyValueStore", "SHARE_HISTORY_KEY", "LAST_ADDRESS_KEY"]

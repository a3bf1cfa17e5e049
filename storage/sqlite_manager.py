"""SQLite access for the tracker's ``kv_state`` table."""
from __future__ import annotations

import os
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterator, List, Optional, Sequence

DB_PATH_ENV = "SOLO_TRACKER_DB_PATH"
DEFAULT_DB_FILENAME = "tracker.db"

_db_lock = Lock()


def get_db_path() -> str:
    """``$SOLO_TRACKER_DB_PATH`` when set, else ``tracker.db`` beside this package."""
    configured = os.environ.get(DB_PATH_ENV)
    if configured:
        return configured
    return str(Path(__file__).resolve().parent / DEFAULT_DB_FILENAME)


def _connect(db_path: Optional[str] = None) -> sqlite3.Connection:
    target = Path(db_path or get_db_path())
    target.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(target), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def transaction(db_path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """Serialised connection committed on success and always closed."""
    with _db_lock, closing(_connect(db_path)) as conn:
        with conn:
            yield conn


def _rows(sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
    with transaction() as conn:
        return [dict(row) for row in conn.execute(sql, params).fetchall()]


def set_kv(key: str, value: str, updated_at: int) -> None:
    with transaction() as conn:
        conn.execute(
            "INSERT INTO kv_state (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
            (key, value, updated_at),
        )


def get_kv(key: str) -> Optional[Dict[str, Any]]:
    found = _rows("SELECT key, value, updated_at FROM kv_state WHERE key = ?", (key,))
    return found[0] if found else None


def list_keys() -> List[str]:
    return [row["key"] for row in _rows("SELECT key FROM kv_state ORDER BY key")]


def delete_kv(key: str) -> bool:
    with transaction() as conn:
        return conn.execute("DELETE FROM kv_state WHERE key = ?", (key,)).rowcount > 0


__all__ = [
    "DB_PATH_ENV",
    "get_db_path",
    "transaction",
    "set_kv",
    "get_kv",
    "list_keys",
    "delete_kv",
]

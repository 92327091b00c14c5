"""Durable key-value storage and the best-effort JSON persistence on top of it."""

from __future__ import annotations

import json
import os
import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

import structlog

log = structlog.get_logger()

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024  # what browsers give localStorage per origin

ErrorCallback = Callable[[str, str, Exception], None]


class StorageQuotaError(Exception):
    """A write would push the stored data over the quota."""


class KeyValueMedium(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def close(self) -> None: ...


class KeyValueStorage:
    """String key-value pairs in a local SQLite database, with a byte quota."""

    def __init__(self, db_path: Path | None = None, quota_bytes: int | None = None):
        if db_path is None:
            data_dir = Path(os.environ.get("DATA_DIR", ".data"))
            data_dir.mkdir(parents=True, exist_ok=True)
            db_path = data_dir / "booklib.db"

        if quota_bytes is None:
            quota_bytes = int(os.environ.get("STORAGE_QUOTA_BYTES", DEFAULT_QUOTA_BYTES))

        self.db_path = db_path
        self.quota_bytes = quota_bytes
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.execute(
            """CREATE TABLE IF NOT EXISTS items (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )"""
        )
        self._conn.commit()

    def get_item(self, key: str) -> str | None:
        row = self._conn.execute("SELECT value FROM items WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, raising StorageQuotaError if it does not fit."""
        (used,) = self._conn.execute(
            "SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB)) + LENGTH(CAST(value AS BLOB))), 0) "
            "FROM items WHERE key != ?",
            (key,),
        ).fetchone()
        needed = len(key.encode("utf-8")) + len(value.encode("utf-8"))
        if used + needed > self.quota_bytes:
            raise StorageQuotaError(
                f"writing {needed} bytes under {key!r} exceeds quota of {self.quota_bytes}"
            )
        self._conn.execute(
            "INSERT OR REPLACE INTO items (key, value) VALUES (?, ?)", (key, value)
        )
        self._conn.commit()

    def keys(self) -> list[str]:
        return [row[0] for row in self._conn.execute("SELECT key FROM items ORDER BY key")]

    def close(self) -> None:
        self._conn.close()


class Persistence:
    """Best-effort JSON save/load against a key-value medium.

    Failures never propagate: ``save`` returns False and ``load`` returns None.
    Each failure is logged and handed to ``on_error`` when one is given.
    """

    def __init__(self, medium: KeyValueMedium, on_error: ErrorCallback | None = None) -> None:
        self.medium = medium
        self.on_error = on_error

    def report_failure(self, operation: str, key: str, exc: Exception) -> None:
        log.warning("persistence_failed", operation=operation, key=key, error=str(exc))
        if self.on_error is not None:
            self.on_error(operation, key, exc)

    def save(self, key: str, value: Any) -> bool:
        try:
            self.medium.set_item(key, json.dumps(value))
        except (TypeError, ValueError, OSError, sqlite3.Error, StorageQuotaError) as exc:
            self.report_failure("save", key, exc)
            return False
        log.debug("persistence_saved", key=key)
        return True

    def load(self, key: str) -> Any | None:
        try:
            raw = self.medium.get_item(key)
        except (OSError, sqlite3.Error) as exc:
            self.report_failure("load", key, exc)
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (ValueError, RecursionError) as exc:
            self.report_failure("load", key, exc)
            return None

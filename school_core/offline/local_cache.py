# =============================================================================
# school_core/offline/local_cache.py
# Local SQLite snapshot cache for offline operation
# =============================================================================
"""
LocalCache - durable key/value store holding the last state the user saw.

Each collection is stored as one JSON snapshot under its own key and is
always replaced whole. Writes never raise into the caller; a corrupt
snapshot surfaces as ``SerializationFailure`` on load.
"""

from __future__ import annotations
import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from school_core.errors.exceptions import SerializationFailure
from school_core.logging import get_logger

logger = get_logger(__name__)

IN_MEMORY = ":memory:"


class CacheKeys:
    """The four snapshot keys, one per collection."""

    def __init__(self, namespace: str = "escola"):
        self.profile = f"{namespace}-cadastro"
        self.projects = f"{namespace}-projetos"
        self.class_groups = f"{namespace}-turmas-projetos"
        self.assignments = f"{namespace}-atribuicoes-projetos"


class LocalCache:
    """
    SQLite-backed snapshot cache.

    Usage:
        cache = LocalCache(Path("local_data/school.db"))
        cache.save(cache.keys.projects, [p.to_dict() for p in projects])
        snapshot = cache.load(cache.keys.projects)
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS snapshots (
            key TEXT PRIMARY KEY,
            value TEXT,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """

    def __init__(self, db_path: Union[str, Path] = IN_MEMORY, namespace: str = "escola"):
        """
        Args:
            db_path: Path to the SQLite file, or ":memory:"
            namespace: Prefix of the snapshot keys
        """
        self.db_path = str(db_path)
        self.keys = CacheKeys(namespace)
        self._lock = threading.Lock()
        self._connection: Optional[sqlite3.Connection] = None
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        if self.db_path != IN_MEMORY:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
            self._connection.execute(self.SCHEMA)
            self._connection.commit()
            logger.debug(f"Local cache opened at: {self.db_path}")
        return self._connection

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        with self._lock:
            conn = self._get_connection()
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def save(self, key: str, value: Any) -> bool:
        """
        Persist a snapshot under ``key``, replacing the previous one.

        Returns:
            True if written. Failures are logged, never raised.
        """
        try:
            payload = json.dumps(value)
            with self.transaction() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO snapshots (key, value, updated_at) VALUES (?, ?, ?)",
                    [key, payload, datetime.now().isoformat()],
                )
            return True
        except (TypeError, ValueError, sqlite3.Error) as e:
            logger.error(f"Failed to cache snapshot {key}: {e}")
            return False

    def load(self, key: str) -> Optional[Any]:
        """
        Load the snapshot stored under ``key``.

        Returns:
            The decoded snapshot, or None if nothing was saved

        Raises:
            SerializationFailure: If the stored snapshot cannot be read
        """
        try:
            with self.transaction() as conn:
                row = conn.execute(
                    "SELECT value FROM snapshots WHERE key = ?", [key]
                ).fetchone()
        except sqlite3.Error as e:
            raise SerializationFailure(f"Cache unreadable: {e}", key=key) from e

        if row is None or row[0] is None:
            return None

        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            raise SerializationFailure(f"Corrupt snapshot: {e}", key=key) from e

    def clear(self) -> None:
        """Drop every snapshot."""
        with self.transaction() as conn:
            conn.execute("DELETE FROM snapshots")

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

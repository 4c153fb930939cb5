"""
BTSim State Store

Key/value persistence for per-user state: one UserStats blob and one
site -> UserContext map blob per user. Values are opaque JSON to the store.
"""

import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Dict, Optional, Union

from btsim.models.context import Site, UserContext
from btsim.models.progression import UserStats
from btsim.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

STATS_KIND = "stats"
CONTEXTS_KIND = "contexts"


def _key(kind: str, user_id: str) -> str:
    return f"{kind}:{user_id}"


def dump_contexts(contexts: Dict[Site, UserContext]) -> str:
    return json.dumps({site.value: ctx.model_dump(mode="json") for site, ctx in contexts.items()})


def load_contexts(blob: str) -> Dict[Site, UserContext]:
    raw = json.loads(blob)
    return {Site(site): UserContext.model_validate(data) for site, data in raw.items()}


class StateStore:
    """Interface for per-user state storage."""

    async def get_stats(self, user_id: str) -> Optional[UserStats]:
        """Get stats for a user, None if never recorded."""
        raise NotImplementedError

    async def save_stats(self, stats: UserStats) -> None:
        """Persist stats for stats.user_id."""
        raise NotImplementedError

    async def get_contexts(self, user_id: str) -> Dict[Site, UserContext]:
        """Get the site -> context map (empty if none)."""
        raise NotImplementedError

    async def save_contexts(self, user_id: str, contexts: Dict[Site, UserContext]) -> None:
        raise NotImplementedError

    async def save_context(self, user_id: str, context: UserContext) -> Dict[Site, UserContext]:
        """Merge one site snapshot into the user's context map."""
        contexts = await self.get_contexts(user_id)
        contexts[context.site] = context
        await self.save_contexts(user_id, contexts)
        return contexts


class InMemoryStateStore(StateStore):
    """In-memory state storage. Stores serialized blobs so callers never share instances."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    async def get_stats(self, user_id: str) -> Optional[UserStats]:
        blob = self._data.get(_key(STATS_KIND, user_id))
        return UserStats.model_validate_json(blob) if blob else None

    async def save_stats(self, stats: UserStats) -> None:
        self._data[_key(STATS_KIND, stats.user_id)] = stats.model_dump_json()

    async def get_contexts(self, user_id: str) -> Dict[Site, UserContext]:
        blob = self._data.get(_key(CONTEXTS_KIND, user_id))
        return load_contexts(blob) if blob else {}

    async def save_contexts(self, user_id: str, contexts: Dict[Site, UserContext]) -> None:
        self._data[_key(CONTEXTS_KIND, user_id)] = dump_contexts(contexts)


class SQLiteStateStore(StateStore):
    """
    SQLite-based persistent state storage.

    A single key/value table; each row holds one JSON blob.
    """

    def __init__(self, db_path: Union[str, Path] = "data/btsim.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Initialize database schema."""
        conn = self._get_connection()
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS state (
                    key TEXT PRIMARY KEY,
                    kind TEXT NOT NULL,
                    data TEXT NOT NULL,
                    updated_at INTEGER NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_state_kind ON state(kind);
            """)
            conn.commit()
            logger.info(f"SQLite state store initialized at {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize database: {e}")
            raise StorageError(f"Failed to initialize state store: {e}")
        finally:
            conn.close()

    def _read(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        try:
            row = conn.execute("SELECT data FROM state WHERE key = ?", (key,)).fetchone()
            return row["data"] if row else None
        except sqlite3.Error as e:
            logger.error(f"Failed to read {key}: {e}")
            raise StorageError(f"Failed to read {key}: {e}")
        finally:
            conn.close()

    def _write(self, key: str, kind: str, data: str) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO state (key, kind, data, updated_at) VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
                """,
                (key, kind, data, int(time.time() * 1000)),
            )
            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to write {key}: {e}")
            raise StorageError(f"Failed to write {key}: {e}")
        finally:
            conn.close()

    async def get_stats(self, user_id: str) -> Optional[UserStats]:
        blob = self._read(_key(STATS_KIND, user_id))
        return UserStats.model_validate_json(blob) if blob else None

    async def save_stats(self, stats: UserStats) -> None:
        self._write(_key(STATS_KIND, stats.user_id), STATS_KIND, stats.model_dump_json())

    async def get_contexts(self, user_id: str) -> Dict[Site, UserContext]:
        blob = self._read(_key(CONTEXTS_KIND, user_id))
        return load_contexts(blob) if blob else {}

    async def save_contexts(self, user_id: str, contexts: Dict[Site, UserContext]) -> None:
        self._write(_key(CONTEXTS_KIND, user_id), CONTEXTS_KIND, dump_contexts(contexts))

    def count(self, kind: Optional[str] = None) -> int:
        """Number of stored blobs, optionally of one kind."""
        conn = self._get_connection()
        try:
            if kind:
                cursor = conn.execute("SELECT COUNT(*) FROM state WHERE kind = ?", (kind,))
            else:
                cursor = conn.execute("SELECT COUNT(*) FROM state")
            return cursor.fetchone()[0]
        finally:
            conn.close()


def create_state_store(store_type: str = "memory", db_path: Union[str, Path] = "data/btsim.db") -> StateStore:
    """Build a state store for the configured backend."""
    if store_type == "sqlite":
        logger.info("Using SQLite state store")
        return SQLiteStateStore(db_path)
    if store_type != "memory":
        logger.warning(f"Unknown storage type '{store_type}', using memory")
    else:
        logger.info("Using in-memory state store")
    return InMemoryStateStore()

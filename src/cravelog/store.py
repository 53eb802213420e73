"""CravingStore — SQLite persistence for craving records."""

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from cravelog.errors import RecordNotFoundError
from cravelog.models import CravingRecord, Emotion

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS cravings (
    id          TEXT PRIMARY KEY,
    timestamp   TEXT NOT NULL,
    description TEXT NOT NULL,
    intensity   REAL NOT NULL,
    resistance  REAL NOT NULL,
    emotions    TEXT,
    archived    INTEGER NOT NULL DEFAULT 0,
    archived_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_cravings_timestamp ON cravings(timestamp);
CREATE INDEX IF NOT EXISTS idx_cravings_archived  ON cravings(archived);

CREATE TABLE IF NOT EXISTS meta (
    key   TEXT PRIMARY KEY,
    value TEXT
);
"""


def _to_utc_iso(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


class CravingStore:
    """SQLite-backed craving store. Archiving is a soft delete."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def initialize(self) -> None:
        """Create tables and indexes."""
        self.conn.executescript(SCHEMA_SQL)
        self.set_meta("schema_version", str(SCHEMA_VERSION))

    @staticmethod
    def _generate_id() -> str:
        return f"crv-{uuid.uuid4().hex[:12]}"

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> CravingRecord:
        emotions_raw = row["emotions"]
        emotions = [Emotion(e) for e in json.loads(emotions_raw)] if emotions_raw else []
        return CravingRecord(
            id=row["id"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
            description=row["description"],
            intensity=row["intensity"],
            resistance=row["resistance"],
            emotions=emotions,
            archived=bool(row["archived"]),
        )

    def insert(self, record: CravingRecord) -> CravingRecord:
        """Insert a record. Generates id/timestamp if not set."""
        if not record.id:
            record.id = self._generate_id()
        if record.timestamp is None:
            record.timestamp = datetime.now(timezone.utc)

        emotions_json = json.dumps([e.value for e in record.emotions]) if record.emotions else None

        with self.conn:
            self.conn.execute(
                "INSERT INTO cravings (id, timestamp, description, intensity, resistance, emotions, archived) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (record.id, _to_utc_iso(record.timestamp), record.description,
                 float(record.intensity), float(record.resistance),
                 emotions_json, int(record.archived)),
            )
        logger.debug(f"Inserted craving {record.id}")
        return record

    def get(self, record_id: str) -> CravingRecord | None:
        row = self.conn.execute(
            "SELECT * FROM cravings WHERE id = ?", (record_id,)
        ).fetchone()
        return self._row_to_record(row) if row else None

    def fetch_all(self, include_archived: bool = False) -> list[CravingRecord]:
        """All records, newest first. Archived records only on request."""
        sql = "SELECT * FROM cravings"
        if not include_archived:
            sql += " WHERE archived = 0"
        sql += " ORDER BY timestamp DESC"
        rows = self.conn.execute(sql).fetchall()
        return [self._row_to_record(r) for r in rows]

    def archive(self, record_id: str) -> CravingRecord:
        """Mark a record archived. Raises RecordNotFoundError for unknown ids."""
        now = datetime.now(timezone.utc).isoformat()
        with self.conn:
            cursor = self.conn.execute(
                "UPDATE cravings SET archived = 1, archived_at = ? WHERE id = ?",
                (now, record_id),
            )
        if cursor.rowcount == 0:
            raise RecordNotFoundError(record_id)
        logger.debug(f"Archived craving {record_id}")
        return self.get(record_id)

    def count(self, include_archived: bool = False) -> int:
        sql = "SELECT COUNT(*) AS cnt FROM cravings"
        if not include_archived:
            sql += " WHERE archived = 0"
        return self.conn.execute(sql).fetchone()["cnt"]

    def last_activity(self) -> str | None:
        """Timestamp of the most recent record."""
        row = self.conn.execute(
            "SELECT timestamp FROM cravings ORDER BY timestamp DESC LIMIT 1"
        ).fetchone()
        return row["timestamp"] if row else None

    def get_meta(self, key: str) -> str | None:
        row = self.conn.execute(
            "SELECT value FROM meta WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_meta(self, key: str, value: str) -> None:
        """Write to meta table (upsert)."""
        with self.conn:
            self.conn.execute(
                "INSERT INTO meta (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )


class StoreRepository:
    """Async repository over a CravingStore.

    Calls run on the event loop thread; the sqlite connection is bound to the
    thread that opened it.
    """

    def __init__(self, store: CravingStore):
        self.store = store

    async def fetch_all(self) -> list[CravingRecord]:
        return self.store.fetch_all()

    async def save(self, record: CravingRecord) -> CravingRecord:
        return self.store.insert(record)

    async def archive(self, record: CravingRecord) -> CravingRecord:
        archived = self.store.archive(record.id)
        record.archived = True
        return archived

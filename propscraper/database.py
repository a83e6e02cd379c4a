"""
SQLite record sink: the local search index that collected properties land in.
"""
import logging
import os
import sqlite3
import uuid
from typing import Dict, List, Optional

from .errors import SinkError
from .models import PropertyRecord
from .utils import price_to_int

logger = logging.getLogger(__name__)


# Schema definitions
DDL_PROPERTIES = """
CREATE TABLE IF NOT EXISTS properties (
  object_id TEXT PRIMARY KEY,
  address TEXT NOT NULL,
  price TEXT NOT NULL,
  price_value INTEGER,
  beds INTEGER,
  baths REAL,
  sqft INTEGER,
  description TEXT,
  image_url TEXT,
  property_url TEXT,
  city TEXT,
  state TEXT,
  price_range TEXT,
  property_type TEXT,
  address_is_synthesized INTEGER DEFAULT 0,
  collected_at TEXT,
  task_id TEXT
);
"""

DDL_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_properties_city_state ON properties(city, state);",
    "CREATE INDEX IF NOT EXISTS idx_properties_price_range ON properties(price_range);",
    "CREATE INDEX IF NOT EXISTS idx_properties_collected_at ON properties(collected_at);",
]

COLUMNS = [
    "object_id", "address", "price", "price_value", "beds", "baths", "sqft",
    "description", "image_url", "property_url", "city", "state", "price_range",
    "property_type", "address_is_synthesized", "collected_at", "task_id",
]


def db_connect(path: str) -> sqlite3.Connection:
    """Create database connection with optimized settings."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    # Sinks are driven from executor threads, one call at a time
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    return conn


def db_init(conn: sqlite3.Connection):
    """Initialize database schema with tables and indexes."""
    conn.execute(DDL_PROPERTIES)
    for ddl in DDL_INDEXES:
        conn.execute(ddl)
    conn.commit()


def row_to_dict(cur, row):
    """Convert sqlite3 row to dictionary."""
    return {desc[0]: row[i] for i, desc in enumerate(cur.description)}


def record_to_row(record: PropertyRecord, task_id: str) -> tuple:
    return (
        record.object_id, record.address, record.price, price_to_int(record.price),
        record.beds, record.baths, record.sqft, record.description,
        record.image_url, record.property_url, record.city, record.state,
        record.price_range, record.property_type, int(record.address_is_synthesized),
        record.collected_at, task_id,
    )


def db_get_property(conn: sqlite3.Connection, object_id: str) -> Optional[Dict]:
    """Retrieve a stored property by object_id."""
    cur = conn.cursor()
    cur.execute("SELECT * FROM properties WHERE object_id = ?", (object_id,))
    r = cur.fetchone()
    if not r:
        return None
    return row_to_dict(cur, r)


def db_count_location(conn: sqlite3.Connection, city: str, state: str) -> int:
    """Number of stored properties for a city/state pair (case-insensitive)."""
    cur = conn.execute(
        "SELECT COUNT(*) FROM properties WHERE lower(city) = ? AND lower(state) = ?",
        (city.strip().lower(), state.strip().lower()),
    )
    return cur.fetchone()[0]


def db_upsert_properties(conn: sqlite3.Connection, records: List[PropertyRecord], task_id: str) -> int:
    """Insert or overwrite properties by object_id in one transaction."""
    placeholders = ",".join("?" for _ in COLUMNS)
    sql = f"INSERT OR REPLACE INTO properties ({','.join(COLUMNS)}) VALUES ({placeholders})"
    with conn:
        conn.executemany(sql, [record_to_row(r, task_id) for r in records])
    return len(records)


class SqliteSink:
    """
    Record sink backed by a SQLite file.

    ``save_records`` accepts a batch and returns a task id acknowledging it;
    any database failure is surfaced as SinkError and nothing is retried.
    """

    name = "sqlite"

    def __init__(self, path: str):
        self.path = path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self._conn = db_connect(self.path)
                db_init(self._conn)
            except sqlite3.Error as e:
                raise SinkError(self.name, f"Cannot open {self.path}: {e}") from e
        return self._conn

    def save_records(self, records: List[PropertyRecord]) -> str:
        task_id = uuid.uuid4().hex
        try:
            n = db_upsert_properties(self.conn, records, task_id)
        except sqlite3.Error as e:
            raise SinkError(self.name, f"Batch rejected: {e}") from e
        logger.info(f">>> Indexed {n} properties (task {task_id})")
        return task_id

    def count_location(self, city: str, state: str) -> int:
        try:
            return db_count_location(self.conn, city, state)
        except sqlite3.Error as e:
            raise SinkError(self.name, f"Count failed: {e}") from e

    def get(self, object_id: str) -> Optional[Dict]:
        try:
            return db_get_property(self.conn, object_id)
        except sqlite3.Error as e:
            raise SinkError(self.name, f"Lookup failed: {e}") from e

    def clear(self):
        """Remove every stored property."""
        try:
            with self.conn:
                self.conn.execute("DELETE FROM properties")
        except sqlite3.Error as e:
            raise SinkError(self.name, f"Clear failed: {e}") from e
        logger.info(">>> Index cleared")

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

# core/storage.py
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator, List, Optional

from .models import COLUMNS, Item
from .logger import get_logger

logger = get_logger(__name__)

DB_PATH = os.getenv("DB_PATH", "chrome_store_stats.sqlite3")
TABLE = "chrome_store_items"

_SELECT_ITEMS = f"SELECT {', '.join(COLUMNS)} FROM {TABLE}"


class ItemStore:
    """
    SQLite-backed repository of listing items, keyed by external_id.
    """

    def __init__(self, db_path: str = DB_PATH):
        self.db_path = db_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
        con = sqlite3.connect(self.db_path)
        try:
            with con:
                yield con
        finally:
            con.close()

    def ensure_db(self) -> None:
        with self._connect() as con:
            con.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {TABLE} (
                    external_id TEXT PRIMARY KEY,   -- id on the store
                    title TEXT,
                    downloads INTEGER,
                    description TEXT,
                    category TEXT,                  -- machine readable
                    category_name TEXT,             -- human readable
                    rating REAL,                    -- average rating
                    user_ratings INTEGER,           -- number of raters
                    pricing TEXT
                )
            """
            )
        logger.debug("Ensured table %s in %s", TABLE, self.db_path)

    def find_by_external_id(self, external_id: str) -> Optional[Item]:
        with self._connect() as con:
            row = con.execute(
                f"{_SELECT_ITEMS} WHERE external_id=?", (external_id,)
            ).fetchone()
        return Item(*row) if row else None

    def upsert(self, item: Item) -> Item:
        """
        Insert the item, or overwrite every field of the row that already
        carries its external_id. One committed write per call.
        """
        placeholders = ",".join("?" for _ in COLUMNS)
        updates = ",\n                    ".join(
            f"{col}=excluded.{col}" for col in COLUMNS if col != "external_id"
        )
        with self._connect() as con:
            con.execute(
                f"""
                INSERT INTO {TABLE} ({', '.join(COLUMNS)})
                VALUES ({placeholders})
                ON CONFLICT(external_id) DO UPDATE SET
                    {updates}
            """,
                item.as_row(),
            )
        return item

    def all(self) -> List[Item]:
        with self._connect() as con:
            rows = con.execute(f"{_SELECT_ITEMS} ORDER BY rowid").fetchall()
        return [Item(*row) for row in rows]

    def count(self) -> int:
        with self._connect() as con:
            row = con.execute(f"SELECT COUNT(*) FROM {TABLE}").fetchone()
        return row[0] if row and row[0] is not None else 0

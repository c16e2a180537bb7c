import logging
import sqlite3
from typing import Dict, Mapping

from pydantic import ValidationError

from .database import get_db_connection, init_db
from .errors import PersistenceError
from .models import ReviewRecord, SessionStats

logger = logging.getLogger(__name__)


class ReviewStateStore:
    """
    Durable key-value store mapping item ids to review records.

    Each record is kept as a JSON document in the review_records table.
    A save replaces the whole mapping inside a single transaction.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def load(self) -> Dict[str, ReviewRecord]:
        try:
            init_db(self.db_path)
            conn = get_db_connection(self.db_path)
            try:
                rows = conn.execute("SELECT item_id, record FROM review_records").fetchall()
            finally:
                conn.close()
            return {row["item_id"]: ReviewRecord.model_validate_json(row["record"]) for row in rows}
        except (sqlite3.Error, OSError, ValidationError) as e:
            raise PersistenceError(f"Failed to read review state from {self.db_path}: {e}") from e

    def save(self, records: Mapping[str, ReviewRecord]) -> None:
        payload = [(item_id, record.model_dump_json()) for item_id, record in records.items()]
        try:
            init_db(self.db_path)
            conn = get_db_connection(self.db_path)
            try:
                with conn:
                    conn.execute("DELETE FROM review_records")
                    conn.executemany(
                        "INSERT INTO review_records (item_id, record) VALUES (?, ?)",
                        payload,
                    )
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"Failed to save review state to {self.db_path}: {e}") from e
        logger.debug(f"Saved {len(payload)} review records")


class SessionStatsStore:
    """Keeps the practice-session totals as a single JSON row."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def load(self) -> SessionStats:
        try:
            init_db(self.db_path)
            conn = get_db_connection(self.db_path)
            try:
                row = conn.execute("SELECT stats FROM session_stats WHERE id = 1").fetchone()
            finally:
                conn.close()
            if row is None:
                return SessionStats()
            return SessionStats.model_validate_json(row["stats"])
        except (sqlite3.Error, OSError, ValidationError) as e:
            raise PersistenceError(f"Failed to read session stats from {self.db_path}: {e}") from e

    def save(self, stats: SessionStats) -> None:
        try:
            init_db(self.db_path)
            conn = get_db_connection(self.db_path)
            try:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO session_stats (id, stats) VALUES (1, ?)",
                        (stats.model_dump_json(),),
                    )
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"Failed to save session stats to {self.db_path}: {e}") from e

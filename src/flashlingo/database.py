import os
import sqlite3
from typing import Optional

from .config import settings


def get_db_connection(db_path: Optional[str] = None):
    """Establishes a connection to the SQLite database."""
    conn = sqlite3.connect(db_path or settings.db_path)
    conn.row_factory = sqlite3.Row
    return conn


def create_log_table(db_path: Optional[str] = None):
    """Creates the log table if it doesn't exist."""
    conn = get_db_connection(db_path)
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                level TEXT,
                message TEXT
            );
        """
        )
    conn.close()


def create_review_table(db_path: Optional[str] = None):
    """Creates the review state table if it doesn't exist."""
    conn = get_db_connection(db_path)
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS review_records (
                item_id TEXT PRIMARY KEY,
                record TEXT NOT NULL
            );
        """
        )
    conn.close()


def create_session_stats_table(db_path: Optional[str] = None):
    """Creates the single-row session statistics table if it doesn't exist."""
    conn = get_db_connection(db_path)
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS session_stats (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                stats TEXT NOT NULL
            );
        """
        )
    conn.close()


def init_db(db_path: Optional[str] = None):
    """Initializes the database and creates necessary tables."""
    db_path = db_path or settings.db_path
    db_dir = os.path.dirname(db_path)
    if db_dir and not os.path.exists(db_dir):
        os.makedirs(db_dir, exist_ok=True)
    create_log_table(db_path)
    create_review_table(db_path)
    create_session_stats_table(db_path)

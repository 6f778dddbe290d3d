"""
Database connection management.

Provides the SQLite connection used to persist session results.
"""

import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = "flightdeck.db"


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Create and return a SQLite connection with foreign keys enabled."""
    conn = sqlite3.connect(str(Path(db_path)))
    conn.execute("PRAGMA foreign_keys = ON")
    return conn

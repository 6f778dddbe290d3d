"""
Repository pattern for session results.

Implements the score/accuracy persistence the session coordinator writes to
when a session ends.
"""

from datetime import datetime
from typing import List, Optional

from .db import DEFAULT_DB_PATH, get_connection
from .models import SessionResult


def initialize_schema(db_path: str = DEFAULT_DB_PATH) -> None:
    """Create the practice_session_result table if it doesn't exist.

    Append-only: results are inserted once and never updated.
    """
    conn = get_connection(db_path)
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS practice_session_result (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL UNIQUE,
                scenario_title TEXT NOT NULL,
                airport TEXT NOT NULL,
                started_at TEXT NOT NULL,
                ended_at TEXT NOT NULL,
                score REAL NOT NULL,
                accuracy REAL NOT NULL
            )
        """)
        conn.commit()
    finally:
        conn.close()


def insert_session_result(result: SessionResult, db_path: str = DEFAULT_DB_PATH) -> None:
    """Insert one session result in its own transaction."""
    conn = get_connection(db_path)
    try:
        conn.execute("""
            INSERT INTO practice_session_result
            (session_id, scenario_title, airport, started_at, ended_at, score, accuracy)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            result.session_id,
            result.scenario_title,
            result.airport,
            result.started_at.isoformat(),
            result.ended_at.isoformat(),
            result.score,
            result.accuracy,
        ))
        conn.commit()
    finally:
        conn.close()


def fetch_session_results(
    airport: Optional[str] = None,
    limit: int = 100,
    db_path: str = DEFAULT_DB_PATH,
) -> List[SessionResult]:
    """Fetch recent session results, newest first.

    Args:
        airport: Optional filter for one airport code
        limit: Maximum number of results to return
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        query = """
            SELECT session_id, scenario_title, airport, started_at, ended_at, score, accuracy
            FROM practice_session_result
        """
        params: list = []
        if airport:
            query += " WHERE airport = ?"
            params.append(airport.upper())
        query += " ORDER BY ended_at DESC, id DESC LIMIT ?"
        params.append(limit)

        cursor = conn.execute(query, params)
        return [
            SessionResult(
                session_id=row[0],
                scenario_title=row[1],
                airport=row[2],
                started_at=datetime.fromisoformat(row[3]),
                ended_at=datetime.fromisoformat(row[4]),
                score=row[5],
                accuracy=row[6],
            )
            for row in cursor.fetchall()
        ]
    finally:
        conn.close()


class SessionResultRepository:
    """Session result store backed by a SQLite file."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH, create: bool = True):
        """Initialize the repository.

        Args:
            db_path: Path to SQLite database file
            create: Create the schema if it does not exist yet
        """
        self.db_path = db_path
        if create:
            initialize_schema(db_path)

    def record_result(self, result: SessionResult) -> None:
        insert_session_result(result, self.db_path)

    def recent_results(self, airport: Optional[str] = None, limit: int = 100) -> List[SessionResult]:
        return fetch_session_results(airport=airport, limit=limit, db_path=self.db_path)

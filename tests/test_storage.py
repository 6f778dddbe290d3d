"""
Unit tests for session result storage.
"""

import os
import sqlite3
import tempfile
from datetime import datetime, timedelta

import pytest

from flightdeck.storage.models import SessionResult
from flightdeck.storage.repository import (
    SessionResultRepository,
    fetch_session_results,
    initialize_schema,
    insert_session_result,
)


def _result(session_id: str, airport: str = "KPAO", minutes_ago: int = 0, score: float = 80.0) -> SessionResult:
    ended = datetime(2024, 5, 1, 12, 0) - timedelta(minutes=minutes_ago)
    return SessionResult(
        session_id=session_id,
        scenario_title="Ground Clearance - VFR",
        airport=airport,
        started_at=ended - timedelta(minutes=10),
        ended_at=ended,
        score=score,
        accuracy=75.0,
    )


class TestStorage:
    """Test SQLite persistence of session results."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.temp_dir, "test.db")
        initialize_schema(self.db_path)

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_schema_is_idempotent(self):
        """Test initializing twice is harmless."""
        initialize_schema(self.db_path)
        assert fetch_session_results(db_path=self.db_path) == []

    def test_insert_and_fetch_round_trip(self):
        """Test a stored result reads back unchanged."""
        result = _result("abc")
        insert_session_result(result, self.db_path)

        assert fetch_session_results(db_path=self.db_path) == [result]

    def test_newest_first_with_limit(self):
        """Test ordering and limit."""
        for i, session_id in enumerate(["old", "middle", "new"]):
            insert_session_result(_result(session_id, minutes_ago=30 - i * 10), self.db_path)

        results = fetch_session_results(limit=2, db_path=self.db_path)
        assert [r.session_id for r in results] == ["new", "middle"]

    def test_filter_by_airport(self):
        """Test the airport filter is case-insensitive on input."""
        insert_session_result(_result("a", airport="KPAO"), self.db_path)
        insert_session_result(_result("b", airport="KSFO"), self.db_path)

        results = fetch_session_results(airport="ksfo", db_path=self.db_path)
        assert [r.session_id for r in results] == ["b"]

    def test_session_recorded_once(self):
        """Test duplicate session ids are rejected."""
        insert_session_result(_result("dup"), self.db_path)
        with pytest.raises(sqlite3.IntegrityError):
            insert_session_result(_result("dup"), self.db_path)

    def test_repository(self):
        """Test the repository creates its schema and records results."""
        db_path = os.path.join(self.temp_dir, "fresh.db")
        repository = SessionResultRepository(db_path)

        repository.record_result(_result("r1", score=91.0))

        (stored,) = repository.recent_results()
        assert stored.score == 91.0
        assert repository.recent_results(airport="KOAK") == []

"""
Data models for the storage layer.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SessionResult:
    """Final outcome of a practice session.

    Written once when the session ends; never updated.
    """
    session_id: str
    scenario_title: str
    airport: str
    started_at: datetime
    ended_at: datetime
    score: float
    accuracy: float

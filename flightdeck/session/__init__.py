"""
Practice-session orchestration.
"""

from .coordinator import PracticeSession, ResultStore, SessionCoordinator
from .prompts import CommunicationEvaluation
from .scenarios import SAMPLE_SCENARIOS, Difficulty, Scenario, ScenarioType

__all__ = [
    "CommunicationEvaluation",
    "Difficulty",
    "PracticeSession",
    "ResultStore",
    "SAMPLE_SCENARIOS",
    "Scenario",
    "ScenarioType",
    "SessionCoordinator",
]

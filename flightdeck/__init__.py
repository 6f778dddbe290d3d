"""
FlightDeck practice-session runtime.

Routes generation work to language-model capabilities with cost tracking
and fallback, and simulates airport traffic for radio practice sessions.
"""

__version__ = "0.1.0"

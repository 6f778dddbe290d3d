"""
Simulated airport traffic: state machine, generation and relevance filtering.
"""

from .models import (
    AdvisoryItem,
    OperationalState,
    SimulatedAircraft,
    TrafficDensity,
    TrafficEvent,
    TrafficEventType,
)
from .relevance import filter_advisories, relevant_states
from .simulator import TrafficSimulator, realistic_density

__all__ = [
    "AdvisoryItem",
    "OperationalState",
    "SimulatedAircraft",
    "TrafficDensity",
    "TrafficEvent",
    "TrafficEventType",
    "TrafficSimulator",
    "filter_advisories",
    "realistic_density",
    "relevant_states",
]

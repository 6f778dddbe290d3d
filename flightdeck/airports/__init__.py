"""
Airport facts used to size traffic and enrich controller context.
"""

from .directory import AirportDirectory, InMemoryAirportDirectory, SAMPLE_AIRPORTS
from .models import AirportFacts, AirspaceClass, Frequency, Runway

__all__ = [
    "AirportDirectory",
    "AirportFacts",
    "AirspaceClass",
    "Frequency",
    "InMemoryAirportDirectory",
    "Runway",
    "SAMPLE_AIRPORTS",
]
